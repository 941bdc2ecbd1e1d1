from pydantic import Field
from typing import List, Optional, Union
from datetime import date, datetime

from app.models.enums import RecurrenceInterval
from app.schemas.base import CamelModel


class TransactionCreate(CamelModel):
    # Loosely typed on purpose: missing or malformed values are reported by
    # the transaction manager as 400 with the offending field.
    creditor: Optional[str] = None
    participants: Optional[List[str]] = None
    amount: Optional[Union[float, str]] = None
    description: Optional[str] = None
    household_id: Optional[str] = None
    is_recurring: bool = False
    recurrence_interval: Optional[str] = None
    start_date: Optional[Union[datetime, date, str]] = None


class TransactionUpdate(TransactionCreate):
    pass


class TransactionRead(CamelModel):
    id: int
    creditor: str
    participants: List[str] = Field(default_factory=list)
    amount: float
    description: str = ""
    household_id: str
    created_at: datetime
    is_settlement: bool
    debtor: Optional[str] = None
    is_recurring: bool
    recurrence_interval: Optional[RecurrenceInterval] = None
    start_date: Optional[date] = None
    next_payment_date: Optional[date] = None


class CanEditRead(CamelModel):
    can_edit: bool
    reason: Optional[str] = None
