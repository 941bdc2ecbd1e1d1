import logging
from typing import Optional, Union

from sqlmodel import Session, select

from app.core.errors import NotFoundError, ValidationError
from app.core.retry import with_store_retry
from app.models.debt import Debt
from app.models.transaction import Transaction
from app.schemas.debt import SettlementResult
from app.services.transaction_manager import parse_amount

logger = logging.getLogger(__name__)

FULL_SETTLEMENT_DESCRIPTION = "Debt Settled"
PARTIAL_SETTLEMENT_DESCRIPTION = "Partial Debt Settlement"


def _require(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(field, "Missing debtor, creditor, or householdId")
    return str(value).strip()


@with_store_retry
def settle(
    session: Session,
    debtor: Optional[str],
    creditor: Optional[str],
    household_id: Optional[str],
    amount: Optional[Union[float, str]] = None,
) -> SettlementResult:
    """Close every open debt `debtor` owes `creditor` in the household.

    The matched debts are flagged settled (never deleted) and one settlement
    record is written in the repayment direction: creditor := debtor,
    debtor := creditor. With an `amount` below the open total only that much
    is repaid and the rest is carried by a new debt with no related transaction.
    """
    debtor = _require(debtor, "debtor")
    creditor = _require(creditor, "creditor")
    household_id = _require(household_id, "householdId")
    if debtor == creditor:
        raise ValidationError("creditor", "Debtor and creditor must be different")
    requested = None if amount is None else parse_amount(amount)

    debts = session.exec(
        select(Debt).where(
            Debt.debtor == debtor,
            Debt.creditor == creditor,
            Debt.household_id == household_id,
            Debt.is_settled == False,  # noqa: E712
        )
    ).all()
    if not debts:
        raise NotFoundError("No debts found")

    total = sum(debt.amount for debt in debts)
    partial = requested is not None and requested < total
    settled_amount = requested if partial else total

    for debt in debts:
        debt.is_settled = True
        session.add(debt)

    record = Transaction(
        household_id=household_id,
        creditor=debtor,
        debtor=creditor,
        participants=[],
        amount=settled_amount,
        description=PARTIAL_SETTLEMENT_DESCRIPTION if partial else FULL_SETTLEMENT_DESCRIPTION,
        is_settlement=True,
        is_recurring=False,
    )
    session.add(record)

    leftover = None
    if partial:
        leftover = Debt(
            household_id=household_id,
            creditor=creditor,
            debtor=debtor,
            amount=total - settled_amount,
            related_transaction_id=None,
            is_settled=False,
        )
        session.add(leftover)

    settled_ids = [debt.id for debt in debts]
    session.commit()
    session.refresh(record)
    if leftover is not None:
        session.refresh(leftover)

    if partial:
        logger.info(
            "Partial settlement %s: %s paid %s %.2f of %.2f, leftover debt %s",
            record.id, debtor, creditor, settled_amount, total, leftover.id,
        )
    else:
        logger.info("Settlement %s: %s paid %s %.2f (%d debts)", record.id, debtor, creditor, total, len(settled_ids))

    return SettlementResult(
        message="Partial settlement successful" if partial else "Full settlement",
        settlement_transaction_id=record.id,
        amount=settled_amount,
        settled_debt_ids=settled_ids,
        leftover_debt_id=leftover.id if leftover is not None else None,
    )
