"""Credit schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TransactionType = Literal["free_trial", "purchase", "image_generation", "refund"]


class DeductionResult(BaseModel):
    """Outcome of a ledger mutation."""

    success: bool
    new_balance: int
    error: str | None = None


class CreditTransactionRecord(BaseModel):
    """Append-only ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    account_id: str
    amount: int
    type: TransactionType
    source: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class CreditBalanceResponse(BaseModel):
    account_id: str
    balance: int


class CreditTransactionListResponse(BaseModel):
    items: list[CreditTransactionRecord]
    total: int
