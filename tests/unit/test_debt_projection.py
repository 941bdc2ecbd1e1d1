"""DebtProjection: tagged ledger entries and net-owed balances"""

from datetime import datetime

import pytest
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from app.schemas.ledger import DebtEntry, LedgerEntry, SettlementEntry
from app.services import debt_projection, settlement
from app.services.debt_projection import net_owed
from conftest import HOUSEHOLD, make_transaction

NOW = datetime(2025, 3, 10, 12, 0)


def _debt(entry_id: int, debtor: str, creditor: str, amount: float, related=1, settled=False) -> DebtEntry:
    return DebtEntry(
        id=entry_id, debtor=debtor, creditor=creditor, amount=amount,
        related_transaction_id=related, is_settled=settled, created_at=NOW,
    )


def _settlement(entry_id: int, creditor: str, debtor: str, amount: float) -> SettlementEntry:
    return SettlementEntry(
        id=entry_id, creditor=creditor, debtor=debtor, amount=amount, description="Debt Settled", created_at=NOW,
    )


class TestNetOwed:
    def test_groups_by_pair(self) -> None:
        entries = [
            _debt(1, "B", "A", 10.0),
            _debt(2, "C", "A", 10.0),
            _debt(3, "B", "A", 5.0),
        ]

        balances = net_owed(entries)

        assert [(b.debtor, b.creditor, b.amount) for b in balances] == [("B", "A", 15.0), ("C", "A", 10.0)]

    def test_opposite_debts_net_out(self) -> None:
        balances = net_owed([_debt(1, "B", "A", 10.0), _debt(2, "A", "B", 4.0)])

        assert [(b.debtor, b.creditor, b.amount) for b in balances] == [("B", "A", 6.0)]

    def test_settlement_cancels_settled_debts(self) -> None:
        entries = [
            _debt(1, "B", "A", 10.0, settled=True),
            _debt(2, "B", "A", 5.0, settled=True),
            _settlement(3, creditor="B", debtor="A", amount=15.0),
        ]

        assert net_owed(entries) == []

    def test_partial_leftover_is_not_double_counted(self) -> None:
        entries = [
            _debt(1, "B", "A", 15.0, settled=True),
            _settlement(2, creditor="B", debtor="A", amount=6.0),
            _debt(3, "B", "A", 9.0, related=None),
        ]

        balances = net_owed(entries)

        assert [(b.debtor, b.creditor, b.amount) for b in balances] == [("B", "A", 9.0)]

    def test_empty(self) -> None:
        assert net_owed([]) == []

    def test_does_not_mutate_entries(self) -> None:
        entries = [_debt(1, "B", "A", 10.0)]
        dumped = [e.model_dump() for e in entries]

        net_owed(entries)

        assert [e.model_dump() for e in entries] == dumped


class TestLedgerEntries:
    def test_tags_debts_and_settlements(self, session) -> None:
        make_transaction(session)
        settlement.settle(session, "B", "A", HOUSEHOLD)
        make_transaction(session, household_id="elsewhere")

        entries = debt_projection.ledger_entries(session, HOUSEHOLD)

        kinds = sorted(entry.kind for entry in entries)
        assert kinds == ["debt", "debt", "settlement"]
        record = next(e for e in entries if isinstance(e, SettlementEntry))
        assert (record.creditor, record.debtor, record.amount) == ("B", "A", pytest.approx(10.0))

        balances = net_owed(entries)
        assert [(b.debtor, b.creditor, b.amount) for b in balances] == [("C", "A", 10.0)]

    def test_discriminator_parses_by_kind(self) -> None:
        adapter = TypeAdapter(LedgerEntry)

        parsed = adapter.validate_python(
            {"kind": "settlement", "id": 1, "debtor": "A", "creditor": "B", "amount": 3.0,
             "description": "Debt Settled", "createdAt": NOW.isoformat()}
        )

        assert isinstance(parsed, SettlementEntry)
        with pytest.raises(PydanticValidationError):
            adapter.validate_python({"kind": "refund", "id": 1})
