import logging
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import List, Optional

from app.core import config
from app.core.clock import Clock, get_clock
from app.core.errors import ValidationError
from app.database import get_session
from app.schemas.debt import DebtRead, DebtUpdate, SettlementRequest, SettlementResult
from app.schemas.ledger import LedgerEntry, NetBalance
from app.services import debt_admin, debt_projection, settlement
from app.services.recurrence_scheduler import run_sweep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/debts", tags=["debts"])


def _require_household(household_id: Optional[str]) -> str:
    if not household_id:
        raise ValidationError("householdId", "householdId is required")
    return household_id


@router.get("", response_model=List[DebtRead])
@router.get("/", response_model=List[DebtRead])
def get_debts(
    household_id: Optional[str] = Query(None, alias="householdId"),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    household_id = _require_household(household_id)
    if config.SWEEP_ON_READ:
        run_sweep(session, clock.today())
    debts = debt_admin.list_debts(session, household_id)
    logger.info("Sending %d debts for householdId %s", len(debts), household_id)
    return debts


@router.get("/ledger", response_model=List[LedgerEntry])
def get_ledger(
    household_id: Optional[str] = Query(None, alias="householdId"),
    session: Session = Depends(get_session),
):
    return debt_projection.ledger_entries(session, _require_household(household_id))


@router.get("/balances", response_model=List[NetBalance])
def get_balances(
    household_id: Optional[str] = Query(None, alias="householdId"),
    session: Session = Depends(get_session),
):
    entries = debt_projection.ledger_entries(session, _require_household(household_id))
    return debt_projection.net_owed(entries)


@router.post("/settle", response_model=SettlementResult)
def settle_debts(data: SettlementRequest, session: Session = Depends(get_session)):
    return settlement.settle(session, data.debtor, data.creditor, data.household_id, data.amount)


@router.put("/{debt_id}", response_model=DebtRead)
def update_debt(debt_id: int, debt_data: DebtUpdate, session: Session = Depends(get_session)):
    return debt_admin.update_debt(session, debt_id, debt_data)


@router.delete("/{debt_id}")
def delete_debt(debt_id: int, session: Session = Depends(get_session)):
    debt_admin.delete_debt(session, debt_id)
    return {"message": "Debt deleted successfully"}
