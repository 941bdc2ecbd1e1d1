from pydantic import Field
from typing import Annotated, List, Literal, Optional, Union
from datetime import datetime

from app.schemas.base import CamelModel


class DebtEntry(CamelModel):
    kind: Literal["debt"] = "debt"
    id: int
    debtor: str
    creditor: str
    amount: float
    related_transaction_id: Optional[int] = None
    is_settled: bool
    created_at: datetime


class SettlementEntry(CamelModel):
    kind: Literal["settlement"] = "settlement"
    id: int
    # Repayment direction: the original debtor is the creditor of this entry.
    debtor: str
    creditor: str
    amount: float
    description: str
    created_at: datetime


LedgerEntry = Annotated[Union[DebtEntry, SettlementEntry], Field(discriminator="kind")]


class NetBalance(CamelModel):
    debtor: str
    creditor: str
    amount: float


class SweepResult(CamelModel):
    spawned: int = 0
    retired: int = 0
    lost_claims: int = 0
    spawned_transaction_ids: List[int] = Field(default_factory=list)
