import logging
from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session, select

from app.core.errors import NotFoundError
from app.core.retry import with_store_retry
from app.models.debt import Debt
from app.models.transaction import Transaction

logger = logging.getLogger(__name__)

REASON_SETTLEMENT = "This is a settlement transaction and cannot be edited."
REASON_INCOMPLETE = "Transaction data incomplete, cannot edit."
REASON_SETTLED = "Some debts from this Transaction have been settled, cannot edit."


@dataclass(frozen=True)
class EditDecision:
    allowed: bool
    reason: Optional[str] = None


@with_store_retry
def can_edit(session: Session, transaction_id: int) -> EditDecision:
    """Read-only check run before any transaction edit.

    A transaction stops being editable as soon as one of its debts has been
    settled: settlement flags debts instead of deleting them, so the flag is
    what tells a partly repaid split apart from an untouched one.
    """
    transaction = session.get(Transaction, transaction_id)
    if transaction is None:
        raise NotFoundError("Transaction not found")

    if transaction.is_settlement:
        return EditDecision(False, REASON_SETTLEMENT)

    if not transaction.participants or not transaction.creditor:
        return EditDecision(False, REASON_INCOMPLETE)

    settled = session.exec(
        select(Debt.id)
        .where(Debt.related_transaction_id == transaction_id, Debt.is_settled == True)  # noqa: E712
        .limit(1)
    ).first()
    if settled is not None:
        logger.debug("Transaction %s locked: debt %s already settled", transaction_id, settled)
        return EditDecision(False, REASON_SETTLED)

    return EditDecision(True)
