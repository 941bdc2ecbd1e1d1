import logging
from typing import List

from sqlmodel import Session, select

from app.core.errors import NotFoundError, ValidationError
from app.core.retry import with_store_retry
from app.models.debt import Debt
from app.schemas.debt import DebtUpdate
from app.services.transaction_manager import parse_amount

logger = logging.getLogger(__name__)


def get_debt(session: Session, debt_id: int) -> Debt:
    debt = session.get(Debt, debt_id)
    if debt is None:
        raise NotFoundError("Debt not found")
    return debt


@with_store_retry
def list_debts(session: Session, household_id: str) -> List[Debt]:
    return session.exec(
        select(Debt).where(Debt.household_id == household_id).order_by(Debt.created_at.desc(), Debt.id.desc())
    ).all()


@with_store_retry
def update_debt(session: Session, debt_id: int, data: DebtUpdate) -> Debt:
    debt = get_debt(session, debt_id)

    for field, value in (("creditor", data.creditor), ("debtor", data.debtor)):
        if value is None or not value.strip():
            raise ValidationError(field, f"Missing required field: {field}")
    if data.creditor.strip() == data.debtor.strip():
        raise ValidationError("debtor", "Debtor and creditor must be different")
    amount = parse_amount(data.amount)

    debt.creditor = data.creditor.strip()
    debt.debtor = data.debtor.strip()
    debt.amount = amount
    debt.description = data.description
    session.add(debt)
    session.commit()
    session.refresh(debt)
    logger.info("Debt %s updated: %s owes %s %.2f", debt.id, debt.debtor, debt.creditor, debt.amount)
    return debt


@with_store_retry
def delete_debt(session: Session, debt_id: int) -> None:
    debt = get_debt(session, debt_id)
    session.delete(debt)
    session.commit()
    logger.info("Debt %s deleted", debt_id)
