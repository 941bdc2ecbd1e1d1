"""SettlementEngine"""

import pytest
from sqlmodel import select

from app.core.errors import NotFoundError, ValidationError
from app.models.debt import Debt
from app.models.transaction import Transaction
from app.services import settlement
from conftest import HOUSEHOLD, all_debts, make_transaction


def _debt(session, debtor: str, creditor: str, amount: float, household_id: str = HOUSEHOLD, **extra) -> Debt:
    debt = Debt(household_id=household_id, creditor=creditor, debtor=debtor, amount=amount, **extra)
    session.add(debt)
    session.commit()
    session.refresh(debt)
    return debt


def _settlements(session):
    session.expire_all()
    return session.exec(select(Transaction).where(Transaction.is_settlement == True)).all()  # noqa: E712


class TestFullSettlement:
    def test_flags_debts_and_writes_reversed_record(self, session) -> None:
        first = _debt(session, "B", "A", 10.0)
        second = _debt(session, "B", "A", 5.0)

        result = settlement.settle(session, "B", "A", HOUSEHOLD)

        assert result.amount == pytest.approx(15.0)
        assert sorted(result.settled_debt_ids) == sorted([first.id, second.id])
        assert result.leftover_debt_id is None
        assert all(debt.is_settled for debt in all_debts(session))

        records = _settlements(session)
        assert len(records) == 1
        record = records[0]
        assert record.id == result.settlement_transaction_id
        assert (record.creditor, record.debtor) == ("B", "A")
        assert record.amount == pytest.approx(15.0)
        assert record.description == settlement.FULL_SETTLEMENT_DESCRIPTION
        assert record.participants == []
        assert record.is_recurring is False

    def test_keeps_transaction_links(self, session) -> None:
        transaction = make_transaction(session)

        settlement.settle(session, "B", "A", HOUSEHOLD)

        debts = {d.debtor: d for d in all_debts(session)}
        assert debts["B"].is_settled is True
        assert debts["B"].related_transaction_id == transaction.id
        assert debts["C"].is_settled is False

    def test_ignores_other_directions_and_households(self, session) -> None:
        _debt(session, "B", "A", 10.0)
        reverse = _debt(session, "A", "B", 7.0)
        elsewhere = _debt(session, "B", "A", 3.0, household_id="house-2")
        already = _debt(session, "B", "A", 4.0, is_settled=True)

        result = settlement.settle(session, "B", "A", HOUSEHOLD)

        assert result.amount == pytest.approx(10.0)
        untouched = {d.id: d.is_settled for d in all_debts(session)}
        assert untouched[reverse.id] is False
        assert untouched[elsewhere.id] is False
        assert untouched[already.id] is True

    def test_amount_at_or_above_total_is_full(self, session) -> None:
        _debt(session, "B", "A", 10.0)

        result = settlement.settle(session, "B", "A", HOUSEHOLD, amount=25)

        assert result.amount == pytest.approx(10.0)
        assert result.leftover_debt_id is None

    def test_second_settlement_finds_nothing(self, session) -> None:
        _debt(session, "B", "A", 10.0)
        settlement.settle(session, "B", "A", HOUSEHOLD)

        with pytest.raises(NotFoundError):
            settlement.settle(session, "B", "A", HOUSEHOLD)
        assert len(_settlements(session)) == 1


class TestPartialSettlement:
    def test_leftover_debt_has_no_transaction(self, session) -> None:
        _debt(session, "B", "A", 10.0)
        _debt(session, "B", "A", 5.0)

        result = settlement.settle(session, "B", "A", HOUSEHOLD, amount="6")

        assert result.amount == pytest.approx(6.0)
        assert result.message == "Partial settlement successful"
        leftover = session.get(Debt, result.leftover_debt_id)
        assert (leftover.debtor, leftover.creditor) == ("B", "A")
        assert leftover.amount == pytest.approx(9.0)
        assert leftover.related_transaction_id is None
        assert leftover.is_settled is False

        record = _settlements(session)[0]
        assert record.amount == pytest.approx(6.0)
        assert record.description == settlement.PARTIAL_SETTLEMENT_DESCRIPTION

    def test_leftover_can_be_settled_later(self, session) -> None:
        _debt(session, "B", "A", 10.0)
        settlement.settle(session, "B", "A", HOUSEHOLD, amount=4)

        result = settlement.settle(session, "B", "A", HOUSEHOLD)

        assert result.amount == pytest.approx(6.0)
        assert all(d.is_settled for d in all_debts(session))


class TestValidation:
    @pytest.mark.parametrize(
        "debtor, creditor, household_id, field",
        [
            (None, "A", HOUSEHOLD, "debtor"),
            ("B", "", HOUSEHOLD, "creditor"),
            ("B", "A", None, "householdId"),
            ("A", "A", HOUSEHOLD, "creditor"),
        ],
    )
    def test_rejects_missing_parties(self, session, debtor, creditor, household_id, field) -> None:
        with pytest.raises(ValidationError) as exc_info:
            settlement.settle(session, debtor, creditor, household_id)
        assert exc_info.value.field == field

    @pytest.mark.parametrize("amount", [0, -3, "lots"])
    def test_rejects_bad_amount(self, session, amount) -> None:
        debt = _debt(session, "B", "A", 10.0)

        with pytest.raises(ValidationError):
            settlement.settle(session, "B", "A", HOUSEHOLD, amount=amount)
        session.refresh(debt)
        assert debt.is_settled is False

    def test_no_debts(self, session) -> None:
        with pytest.raises(NotFoundError):
            settlement.settle(session, "B", "A", HOUSEHOLD)
