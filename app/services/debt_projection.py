"""
Read-only views over a household's ledger.

Nothing here writes to the store; the net-owed view is computed on every read.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from sqlmodel import Session, select

from app.core.retry import with_store_retry
from app.models.debt import Debt
from app.models.enums import LedgerEntryKind
from app.models.transaction import Transaction
from app.schemas.ledger import DebtEntry, LedgerEntry, NetBalance, SettlementEntry

# balances closer to zero than this are considered settled
EPS = 0.005


@with_store_retry
def ledger_entries(session: Session, household_id: str) -> List[LedgerEntry]:
    debts = session.exec(
        select(Debt).where(Debt.household_id == household_id).order_by(Debt.created_at, Debt.id)
    ).all()
    settlements = session.exec(
        select(Transaction)
        .where(Transaction.household_id == household_id, Transaction.is_settlement == True)  # noqa: E712
        .order_by(Transaction.created_at, Transaction.id)
    ).all()

    entries: List[LedgerEntry] = [DebtEntry.model_validate(debt) for debt in debts]
    entries.extend(
        SettlementEntry(
            id=record.id,
            debtor=record.debtor or "",
            creditor=record.creditor,
            amount=record.amount,
            description=record.description,
            created_at=record.created_at,
        )
        for record in settlements
    )
    return entries


def net_owed(entries: Iterable[LedgerEntry]) -> List[NetBalance]:
    """Signed balance per pair of members, reported as who owes whom.

    Debts derived from transactions count as owed whether or not they are
    flagged settled; the settlement record that flagged them pays them back.
    Leftover debts of a partial settlement restate part of a balance already
    counted, so they are skipped.
    """
    # key is the sorted pair; value is what pair[0] owes pair[1]
    balances: Dict[Tuple[str, str], float] = defaultdict(float)

    for entry in entries:
        if entry.kind == LedgerEntryKind.debt.value and entry.related_transaction_id is None:
            continue
        # a settlement entry's creditor is the member who paid back
        owes, owed = entry.debtor, entry.creditor
        if owes == owed:
            continue
        pair = tuple(sorted((owes, owed)))
        sign = 1 if (owes, owed) == pair else -1
        balances[pair] += sign * entry.amount

    result = []
    for (first, second), amount in sorted(balances.items()):
        if abs(amount) < EPS:
            continue
        if amount > 0:
            result.append(NetBalance(debtor=first, creditor=second, amount=round(amount, 2)))
        else:
            result.append(NetBalance(debtor=second, creditor=first, amount=round(-amount, 2)))
    return result
