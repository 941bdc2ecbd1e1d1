from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone


class Debt(SQLModel, table=True):
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    household_id: str = Field(index=True)
    creditor: str = Field(index=True)
    debtor: str = Field(index=True)
    amount: float
    description: Optional[str] = None
    # None for leftovers created by a partial settlement
    related_transaction_id: Optional[int] = Field(default=None, foreign_key="transaction.id", index=True)
    is_settled: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
