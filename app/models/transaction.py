from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field
from typing import List, Optional
from datetime import date, datetime, timezone

from app.models.enums import RecurrenceInterval


class Transaction(SQLModel, table=True):
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    household_id: str = Field(index=True)
    creditor: str
    participants: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    amount: float
    description: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_settlement: bool = Field(default=False)

    # Settlement records only: who received the repayment
    debtor: Optional[str] = Field(default=None, nullable=True)

    # Templates only
    is_recurring: bool = Field(default=False, index=True)
    recurrence_interval: Optional[RecurrenceInterval] = Field(default=None, nullable=True)
    start_date: Optional[date] = Field(default=None, nullable=True)
    next_payment_date: Optional[date] = Field(default=None, nullable=True, index=True)

    @property
    def is_template(self) -> bool:
        return self.is_recurring

    @property
    def is_concrete(self) -> bool:
        return not self.is_recurring and not self.is_settlement
