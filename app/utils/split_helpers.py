from typing import List

from sqlmodel import Session

from app.models.debt import Debt
from app.models.transaction import Transaction


def build_equal_split(transaction: Transaction) -> List[Debt]:
    """One debt per participant other than the creditor, each amount / n.

    The creditor's own share is part of n but never becomes a debt.
    """
    if transaction.id is None:
        raise ValueError("transaction must be flushed before splitting")
    if not transaction.is_concrete:
        raise ValueError("only concrete transactions carry debts")

    participants = transaction.participants
    share = transaction.amount / len(participants)
    return [
        Debt(
            household_id=transaction.household_id,
            creditor=transaction.creditor,
            debtor=participant,
            amount=share,
            related_transaction_id=transaction.id,
            is_settled=False,
        )
        for participant in participants
        if participant != transaction.creditor
    ]


def add_concrete_transaction(
    session: Session,
    *,
    creditor: str,
    participants: List[str],
    amount: float,
    description: str,
    household_id: str,
) -> Transaction:
    """Stage a concrete transaction and its debts in the session (no commit)."""
    transaction = Transaction(
        household_id=household_id,
        creditor=creditor,
        participants=list(participants),
        amount=amount,
        description=description or "",
        is_settlement=False,
        is_recurring=False,
    )
    session.add(transaction)
    session.flush()  # assigns transaction.id

    session.add_all(build_equal_split(transaction))
    return transaction
