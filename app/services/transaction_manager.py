"""
Shared-expense transactions and the debts derived from them.

Every public operation validates its input first and then commits exactly
once, so callers never observe a transaction without its debts (or debts of a
replaced split).
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy import delete
from sqlmodel import Session, select

from app.core.errors import ImmutableRecordError, NotFoundError, ValidationError
from app.core.retry import with_store_retry
from app.models.debt import Debt
from app.models.enums import RecurrenceInterval
from app.models.transaction import Transaction
from app.schemas.transaction import TransactionCreate
from app.services import edit_guard
from app.services.recurrence_scheduler import claim_occurrence
from app.utils.date_helpers import first_occurrence_on_or_after, is_due, parse_interval, start_of_day
from app.utils.split_helpers import add_concrete_transaction, build_equal_split

logger = logging.getLogger(__name__)


@dataclass
class ValidatedTransaction:
    creditor: str
    participants: List[str]
    amount: float
    description: str
    household_id: str
    is_recurring: bool
    recurrence_interval: Optional[RecurrenceInterval] = None
    start_date: Optional[date] = None


def parse_amount(value, field: str = "amount") -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError(field, "Invalid amount")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field, "Invalid amount")
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError(field, "Invalid amount")
    return amount


def _require_id(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(field, f"Missing required field: {field}")
    return str(value).strip()


def validate_transaction(data: TransactionCreate) -> ValidatedTransaction:
    creditor = _require_id(data.creditor, "creditor")
    household_id = _require_id(data.household_id, "householdId")

    if not data.participants:
        raise ValidationError("participants", "Missing required field: participants")
    participants: List[str] = []
    for participant in data.participants:
        participant_id = _require_id(participant, "participants")
        if participant_id not in participants:
            participants.append(participant_id)

    amount = parse_amount(data.amount)

    validated = ValidatedTransaction(
        creditor=creditor,
        participants=participants,
        amount=amount,
        description=(data.description or "").strip(),
        household_id=household_id,
        is_recurring=bool(data.is_recurring),
    )

    if validated.is_recurring:
        interval = parse_interval(data.recurrence_interval)
        if interval is None:
            raise ValidationError("recurrenceInterval", "Invalid recurrenceInterval")
        if data.start_date is None:
            raise ValidationError("startDate", "startDate is required for recurring transactions")
        try:
            validated.start_date = start_of_day(data.start_date)
        except (TypeError, ValueError):
            raise ValidationError("startDate", "Invalid startDate format")
        validated.recurrence_interval = interval

    return validated


def get_transaction(session: Session, transaction_id: int) -> Transaction:
    transaction = session.get(Transaction, transaction_id)
    if transaction is None:
        raise NotFoundError("Transaction not found")
    return transaction


@with_store_retry
def list_transactions(session: Session, household_id: str) -> List[Transaction]:
    """Household transactions, newest first."""
    return session.exec(
        select(Transaction)
        .where(Transaction.household_id == household_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
    ).all()


@with_store_retry
def list_recurring(session: Session, household_id: Optional[str] = None) -> List[Transaction]:
    query = select(Transaction).where(Transaction.is_recurring == True)  # noqa: E712
    if household_id:
        query = query.where(Transaction.household_id == household_id)
    return session.exec(query.order_by(Transaction.next_payment_date, Transaction.id)).all()


@with_store_retry
def _insert_concrete(session: Session, data: ValidatedTransaction) -> Transaction:
    transaction = add_concrete_transaction(
        session,
        creditor=data.creditor,
        participants=data.participants,
        amount=data.amount,
        description=data.description,
        household_id=data.household_id,
    )
    session.commit()
    session.refresh(transaction)
    logger.info("Transaction %s created in household %s", transaction.id, transaction.household_id)
    return transaction


@with_store_retry
def _insert_template(session: Session, data: ValidatedTransaction) -> Transaction:
    template = Transaction(
        household_id=data.household_id,
        creditor=data.creditor,
        participants=data.participants,
        amount=data.amount,
        description=data.description,
        is_settlement=False,
        is_recurring=True,
        recurrence_interval=data.recurrence_interval,
        start_date=data.start_date,
        next_payment_date=data.start_date,
    )
    session.add(template)
    session.commit()
    session.refresh(template)
    logger.info(
        "Recurring template %s created (%s from %s)",
        template.id, template.recurrence_interval.value, template.start_date,
    )
    return template


def create_transaction(session: Session, data: TransactionCreate, today: date) -> Transaction:
    """Create a concrete transaction, or a template that spawns right away when already due.

    The returned record is the one that was created: for a template that is
    the template as it was stored, before the first spawn advanced or retired it.
    """
    validated = validate_transaction(data)

    if not validated.is_recurring:
        return _insert_concrete(session, validated)

    template = _insert_template(session, validated)
    # keep the stored state even if the first spawn retires the template
    session.expunge(template)

    if is_due(validated.start_date, today):
        claim_occurrence(session, template.id, validated.start_date, today)

    return template


def _rescheduled_next_payment(existing: Transaction, data: ValidatedTransaction) -> Optional[date]:
    """Next payment date after an edit, never re-opening occurrences already spawned."""
    if not data.is_recurring:
        return None
    if not existing.is_template or existing.next_payment_date is None:
        return data.start_date
    if existing.start_date is not None and existing.next_payment_date <= existing.start_date:
        # never fired, nothing claimed yet
        return data.start_date
    if existing.start_date == data.start_date and existing.recurrence_interval == data.recurrence_interval:
        return existing.next_payment_date
    # everything before the stored next payment has been claimed
    return first_occurrence_on_or_after(data.recurrence_interval, data.start_date, existing.next_payment_date)


@with_store_retry
def _apply_update(session: Session, transaction_id: int, data: ValidatedTransaction) -> Transaction:
    transaction = get_transaction(session, transaction_id)
    next_payment_date = _rescheduled_next_payment(transaction, data)

    # debts of the old split go away in both cases: a template owns none
    session.execute(
        delete(Debt)
        .where(Debt.related_transaction_id == transaction_id)
    )

    transaction.creditor = data.creditor
    transaction.participants = data.participants
    transaction.amount = data.amount
    transaction.description = data.description
    transaction.household_id = data.household_id
    transaction.is_settlement = False

    if data.is_recurring:
        transaction.is_recurring = True
        transaction.recurrence_interval = data.recurrence_interval
        transaction.start_date = data.start_date
        transaction.next_payment_date = next_payment_date
        session.add(transaction)
    else:
        transaction.is_recurring = False
        transaction.recurrence_interval = None
        transaction.start_date = None
        transaction.next_payment_date = None
        session.add(transaction)
        session.add_all(build_equal_split(transaction))

    session.commit()
    session.refresh(transaction)
    return transaction


def update_transaction(session: Session, transaction_id: int, data: TransactionCreate) -> Transaction:
    existing = get_transaction(session, transaction_id)
    if existing.is_settlement:
        raise ImmutableRecordError("Cannot edit a settlement transaction")

    decision = edit_guard.can_edit(session, transaction_id)
    if not decision.allowed:
        raise ImmutableRecordError("Transaction can no longer be edited", reason=decision.reason)

    validated = validate_transaction(data)
    transaction = _apply_update(session, transaction_id, validated)
    logger.info("Transaction %s updated (recurring=%s)", transaction_id, transaction.is_recurring)
    return transaction


@with_store_retry
def delete_transaction(session: Session, transaction_id: int) -> None:
    transaction = get_transaction(session, transaction_id)

    result = session.execute(
        delete(Debt)
        .where(Debt.related_transaction_id == transaction_id)
    )
    session.delete(transaction)
    session.commit()
    logger.info("Transaction %s and %d related debts deleted", transaction_id, result.rowcount)
