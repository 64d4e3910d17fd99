"""Credit API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from app.api.v1.credits.constants import (
    DEFAULT_TRANSACTION_LIMIT,
    MAX_TRANSACTION_LIMIT,
    TRIAL_ALREADY_GRANTED_DETAIL,
)
from app.dependencies import CurrentAccount, Ledger
from app.schemas.credits import CreditBalanceResponse, CreditTransactionListResponse

router = APIRouter()


@router.get("/balance", response_model=CreditBalanceResponse)
async def get_balance(account_id: CurrentAccount, ledger: Ledger) -> CreditBalanceResponse:
    """Return the caller's credit balance."""
    balance = await ledger.get_balance(account_id)
    return CreditBalanceResponse(account_id=account_id, balance=balance)


@router.get("/transactions", response_model=CreditTransactionListResponse)
async def list_transactions(
    account_id: CurrentAccount,
    ledger: Ledger,
    limit: int = Query(DEFAULT_TRANSACTION_LIMIT, ge=1, le=MAX_TRANSACTION_LIMIT),
) -> CreditTransactionListResponse:
    """Return the caller's most recent credit transactions, newest first."""
    items = await ledger.list_transactions(account_id, limit=limit)
    return CreditTransactionListResponse(items=items, total=len(items))


@router.post("/trial", response_model=CreditBalanceResponse)
async def claim_trial_credits(account_id: CurrentAccount, ledger: Ledger) -> CreditBalanceResponse:
    """Grant the one-time trial allowance."""
    result = await ledger.grant_trial_credits(account_id)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=TRIAL_ALREADY_GRANTED_DETAIL,
        )
    return CreditBalanceResponse(account_id=account_id, balance=result.new_balance)
