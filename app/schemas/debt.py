from typing import List, Optional, Union
from datetime import datetime

from app.schemas.base import CamelModel


class DebtRead(CamelModel):
    id: int
    household_id: str
    creditor: str
    debtor: str
    amount: float
    description: Optional[str] = None
    related_transaction_id: Optional[int] = None
    is_settled: bool
    created_at: datetime


class DebtUpdate(CamelModel):
    creditor: Optional[str] = None
    debtor: Optional[str] = None
    amount: Optional[Union[float, str]] = None
    description: Optional[str] = None


class SettlementRequest(CamelModel):
    debtor: Optional[str] = None
    creditor: Optional[str] = None
    household_id: Optional[str] = None
    # omitted: settle everything owed
    amount: Optional[Union[float, str]] = None


class SettlementResult(CamelModel):
    message: str
    settlement_transaction_id: int
    amount: float
    settled_debt_ids: List[int]
    leftover_debt_id: Optional[int] = None
