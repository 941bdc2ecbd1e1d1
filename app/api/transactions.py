from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from typing import List, Optional

from app.core.clock import Clock, get_clock
from app.core.errors import ValidationError
from app.database import get_session
from app.schemas.transaction import CanEditRead, TransactionCreate, TransactionRead, TransactionUpdate
from app.services import edit_guard, transaction_manager

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=List[TransactionRead])
@router.get("/", response_model=List[TransactionRead])
def list_transactions(
    household_id: Optional[str] = Query(None, alias="householdId"),
    session: Session = Depends(get_session),
):
    if not household_id:
        raise ValidationError("householdId", "householdId is required")
    return transaction_manager.list_transactions(session, household_id)


@router.post("", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction_data: TransactionCreate,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    return transaction_manager.create_transaction(session, transaction_data, clock.today())


@router.get("/recurring", response_model=List[TransactionRead])
def list_recurring_transactions(
    household_id: Optional[str] = Query(None, alias="householdId"),
    session: Session = Depends(get_session),
):
    return transaction_manager.list_recurring(session, household_id)


@router.put("/{transaction_id}", response_model=TransactionRead)
def update_transaction(
    transaction_id: int,
    transaction_data: TransactionUpdate,
    session: Session = Depends(get_session),
):
    return transaction_manager.update_transaction(session, transaction_id, transaction_data)


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: int, session: Session = Depends(get_session)):
    transaction_manager.delete_transaction(session, transaction_id)
    return {"message": "Transaction and related debts deleted successfully"}


@router.get("/{transaction_id}/can-edit", response_model=CanEditRead, response_model_exclude_none=True)
def can_edit_transaction(transaction_id: int, session: Session = Depends(get_session)):
    decision = edit_guard.can_edit(session, transaction_id)
    return CanEditRead(can_edit=decision.allowed, reason=decision.reason)
