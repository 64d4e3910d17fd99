"""Unit tests for the in-memory credit ledger and pricing."""

from __future__ import annotations

import asyncio

import pytest

from app.config import settings
from app.services.billing import resolve_required_credits
from app.services.credit_ledger import (
    INSUFFICIENT_CREDITS_MESSAGE,
    INVALID_AMOUNT_MESSAGE,
    InMemoryCreditLedger,
)


def test_pricing_table() -> None:
    assert resolve_required_credits("standard", "1K") == 1
    assert resolve_required_credits("standard", "4K") == 1
    assert resolve_required_credits("pro", "1K") == 2
    assert resolve_required_credits("pro", "2K") == 3
    assert resolve_required_credits("pro", "4K") == 4


@pytest.mark.asyncio
async def test_deduct_reduces_balance_and_records_transaction() -> None:
    ledger = InMemoryCreditLedger({"acct": 3})

    result = await ledger.deduct("acct", 1, metadata={"asset_id": "a1"})

    assert result.success is True
    assert result.new_balance == 2
    assert await ledger.get_balance("acct") == 2
    transactions = await ledger.list_transactions("acct")
    assert transactions[0].amount == -1
    assert transactions[0].type == "image_generation"
    assert transactions[0].metadata == {"asset_id": "a1"}


@pytest.mark.asyncio
async def test_deduct_never_goes_negative() -> None:
    ledger = InMemoryCreditLedger({"acct": 1})

    result = await ledger.deduct("acct", 2)

    assert result.success is False
    assert result.error == INSUFFICIENT_CREDITS_MESSAGE
    assert result.new_balance == 1
    assert await ledger.list_transactions("acct") == []


@pytest.mark.asyncio
async def test_non_positive_amounts_are_rejected() -> None:
    ledger = InMemoryCreditLedger({"acct": 5})

    assert (await ledger.deduct("acct", 0)).error == INVALID_AMOUNT_MESSAGE
    assert (await ledger.add_credits("acct", -3)).error == INVALID_AMOUNT_MESSAGE
    assert await ledger.get_balance("acct") == 5


@pytest.mark.asyncio
async def test_concurrent_deductions_cannot_overdraw() -> None:
    ledger = InMemoryCreditLedger({"acct": 3})

    results = await asyncio.gather(*(ledger.deduct("acct", 1) for _ in range(10)))

    assert sum(result.success for result in results) == 3
    assert await ledger.get_balance("acct") == 0


@pytest.mark.asyncio
async def test_account_guard_serializes_check_then_deduct() -> None:
    ledger = InMemoryCreditLedger({"acct": 1})
    outcomes: list[bool] = []

    async def generate() -> None:
        async with ledger.account_guard("acct"):
            if await ledger.check_balance("acct", 1):
                await asyncio.sleep(0)
                outcomes.append((await ledger.deduct("acct", 1)).success)
            else:
                outcomes.append(False)

    await asyncio.gather(generate(), generate())

    assert sorted(outcomes) == [False, True]
    assert await ledger.get_balance("acct") == 0


@pytest.mark.asyncio
async def test_trial_credits_are_granted_once() -> None:
    ledger = InMemoryCreditLedger()

    first = await ledger.grant_trial_credits("acct")
    second = await ledger.grant_trial_credits("acct")

    assert first.success is True
    assert first.new_balance == settings.trial_credits
    assert second.success is False
    assert await ledger.get_balance("acct") == settings.trial_credits


@pytest.mark.asyncio
async def test_transactions_are_newest_first_and_scoped_to_account() -> None:
    ledger = InMemoryCreditLedger()
    await ledger.add_credits("acct", 5, source="promo")
    await ledger.deduct("acct", 2)
    await ledger.add_credits("other", 1)

    transactions = await ledger.list_transactions("acct")

    assert [t.amount for t in transactions] == [-2, 5]
    assert transactions[1].source == "promo"
    assert all(t.account_id == "acct" for t in transactions)
    assert len(await ledger.list_transactions("acct", limit=1)) == 1
