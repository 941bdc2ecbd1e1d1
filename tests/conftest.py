"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database; the API client runs the
real routers against it through dependency overrides.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RECURRENCE_JOB_ENABLED", "false")

from datetime import date
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from app.core.clock import FixedClock, get_clock
from app.database import get_session
from app.models.debt import Debt
from app.models.transaction import Transaction
from app.schemas.transaction import TransactionCreate
from app.services import transaction_manager

TODAY = date(2025, 3, 10)
HOUSEHOLD = "house-1"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def client(engine, clock):
    from app.main import app

    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_transaction(
    session: Session,
    creditor: str = "A",
    participants: Optional[List[str]] = None,
    amount: float = 30.0,
    household_id: str = HOUSEHOLD,
    description: str = "Groceries",
    today: date = TODAY,
    **recurrence,
) -> Transaction:
    data = TransactionCreate(
        creditor=creditor,
        participants=participants if participants is not None else ["A", "B", "C"],
        amount=amount,
        description=description,
        household_id=household_id,
        **recurrence,
    )
    return transaction_manager.create_transaction(session, data, today)


def debts_of(session: Session, transaction_id: int) -> List[Debt]:
    return session.exec(
        select(Debt).where(Debt.related_transaction_id == transaction_id).order_by(Debt.debtor)
    ).all()


def all_transactions(session: Session) -> List[Transaction]:
    session.expire_all()
    return session.exec(select(Transaction).order_by(Transaction.id)).all()


def all_debts(session: Session) -> List[Debt]:
    session.expire_all()
    return session.exec(select(Debt).order_by(Debt.id)).all()
