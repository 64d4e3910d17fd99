"""Credit balance storage and atomic deduction."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.core.db_retry import retry_read
from app.core.ids import generate_cuid
from app.models.credit import CreditAccount, CreditTransaction
from app.schemas.credits import CreditTransactionRecord, DeductionResult
from app.services.billing import (
    TRANSACTION_FREE_TRIAL,
    TRANSACTION_IMAGE_GENERATION,
    TRANSACTION_PURCHASE,
)

logger = logging.getLogger(__name__)

INSUFFICIENT_CREDITS_MESSAGE = "Insufficient credits"
INVALID_AMOUNT_MESSAGE = "Amount must be a positive integer"


class CreditLedger(ABC):
    """Account balances plus an append-only transaction log.

    ``deduct`` is a conditional decrement and never drives a balance negative.
    ``account_guard`` serializes a caller's check-then-deduct section per
    account, so two generations for one account cannot both pass the gate on
    the same credits.
    """

    def __init__(self) -> None:
        self._guards: dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def account_guard(self, account_id: str) -> AsyncIterator[None]:
        lock = self._guards.setdefault(account_id, asyncio.Lock())
        async with lock:
            yield

    async def check_balance(self, account_id: str, required: int) -> bool:
        return await self.get_balance(account_id) >= required

    @abstractmethod
    async def get_balance(self, account_id: str) -> int:
        """Return the current balance, 0 for unknown accounts."""

    @abstractmethod
    async def deduct(
        self,
        account_id: str,
        amount: int,
        reason: str = TRANSACTION_IMAGE_GENERATION,
        metadata: dict[str, Any] | None = None,
    ) -> DeductionResult:
        """Atomically subtract amount if the balance covers it."""

    @abstractmethod
    async def add_credits(
        self,
        account_id: str,
        amount: int,
        source: str = TRANSACTION_PURCHASE,
        metadata: dict[str, Any] | None = None,
    ) -> DeductionResult:
        """Credit an account, creating it when missing."""

    @abstractmethod
    async def grant_trial_credits(self, account_id: str) -> DeductionResult:
        """Grant the one-time trial allowance. Repeated calls are no-ops."""

    @abstractmethod
    async def list_transactions(
        self,
        account_id: str,
        limit: int = 50,
    ) -> list[CreditTransactionRecord]:
        """Return the most recent transactions, newest first."""


class InMemoryCreditLedger(CreditLedger):
    """Process-local ledger for development and tests."""

    def __init__(self, balances: dict[str, int] | None = None) -> None:
        super().__init__()
        self._balances: dict[str, int] = dict(balances or {})
        self._transactions: list[CreditTransactionRecord] = []
        self._trial_granted: set[str] = set()

    async def get_balance(self, account_id: str) -> int:
        return self._balances.get(account_id, 0)

    async def deduct(
        self,
        account_id: str,
        amount: int,
        reason: str = TRANSACTION_IMAGE_GENERATION,
        metadata: dict[str, Any] | None = None,
    ) -> DeductionResult:
        if amount <= 0:
            return DeductionResult(
                success=False,
                new_balance=self._balances.get(account_id, 0),
                error=INVALID_AMOUNT_MESSAGE,
            )
        # No await between the read and the write, so this is atomic on the loop.
        current = self._balances.get(account_id, 0)
        if current < amount:
            return DeductionResult(
                success=False,
                new_balance=current,
                error=INSUFFICIENT_CREDITS_MESSAGE,
            )
        new_balance = current - amount
        self._balances[account_id] = new_balance
        self._record(account_id, -amount, reason, None, metadata)
        return DeductionResult(success=True, new_balance=new_balance)

    async def add_credits(
        self,
        account_id: str,
        amount: int,
        source: str = TRANSACTION_PURCHASE,
        metadata: dict[str, Any] | None = None,
    ) -> DeductionResult:
        if amount <= 0:
            return DeductionResult(
                success=False,
                new_balance=self._balances.get(account_id, 0),
                error=INVALID_AMOUNT_MESSAGE,
            )
        new_balance = self._balances.get(account_id, 0) + amount
        self._balances[account_id] = new_balance
        self._record(account_id, amount, TRANSACTION_PURCHASE, source, metadata)
        return DeductionResult(success=True, new_balance=new_balance)

    async def grant_trial_credits(self, account_id: str) -> DeductionResult:
        current = self._balances.get(account_id, 0)
        if account_id in self._trial_granted:
            return DeductionResult(success=False, new_balance=current, error="Trial already granted")
        self._trial_granted.add(account_id)
        new_balance = current + settings.trial_credits
        self._balances[account_id] = new_balance
        self._record(account_id, settings.trial_credits, TRANSACTION_FREE_TRIAL, "trial", None)
        return DeductionResult(success=True, new_balance=new_balance)

    async def list_transactions(
        self,
        account_id: str,
        limit: int = 50,
    ) -> list[CreditTransactionRecord]:
        rows = [row for row in self._transactions if row.account_id == account_id]
        return list(reversed(rows))[:limit]

    def _record(
        self,
        account_id: str,
        amount: int,
        transaction_type: str,
        source: str | None,
        metadata: dict[str, Any] | None,
    ) -> None:
        self._transactions.append(
            CreditTransactionRecord(
                id=generate_cuid(),
                account_id=account_id,
                amount=amount,
                type=transaction_type,
                source=source,
                metadata=dict(metadata or {}),
                created_at=datetime.now(timezone.utc),
            )
        )


class SqlCreditLedger(CreditLedger):
    """Postgres-backed ledger.

    Deduction is a single ``UPDATE ... WHERE balance >= :amount RETURNING``
    statement, so concurrent workers cannot overdraw an account even without
    the in-process guard.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__()
        self._session_factory = session_factory

    async def get_balance(self, account_id: str) -> int:
        async def _read() -> int:
            async with self._session_factory() as session:
                balance = await session.scalar(
                    select(CreditAccount.balance).where(CreditAccount.account_id == account_id)
                )
            return int(balance or 0)

        return await retry_read(_read, operation_name="get_balance", account_id=account_id)

    async def deduct(
        self,
        account_id: str,
        amount: int,
        reason: str = TRANSACTION_IMAGE_GENERATION,
        metadata: dict[str, Any] | None = None,
    ) -> DeductionResult:
        if amount <= 0:
            return DeductionResult(
                success=False,
                new_balance=await self.get_balance(account_id),
                error=INVALID_AMOUNT_MESSAGE,
            )

        async with self._session_factory() as session:
            new_balance = await session.scalar(
                update(CreditAccount)
                .where(
                    CreditAccount.account_id == account_id,
                    CreditAccount.balance >= amount,
                )
                .values(balance=CreditAccount.balance - amount)
                .returning(CreditAccount.balance)
            )
            if new_balance is None:
                await session.rollback()
                return DeductionResult(
                    success=False,
                    new_balance=await self.get_balance(account_id),
                    error=INSUFFICIENT_CREDITS_MESSAGE,
                )

            session.add(
                CreditTransaction(
                    account_id=account_id,
                    amount=-amount,
                    transaction_type=reason,
                    balance_after=int(new_balance),
                    extra_data=dict(metadata or {}),
                    asset_id=(metadata or {}).get("asset_id"),
                )
            )
            await session.commit()

        logger.info(
            "Credits deducted",
            extra={"account_id": account_id, "amount": amount, "new_balance": new_balance},
        )
        return DeductionResult(success=True, new_balance=int(new_balance))

    async def add_credits(
        self,
        account_id: str,
        amount: int,
        source: str = TRANSACTION_PURCHASE,
        metadata: dict[str, Any] | None = None,
    ) -> DeductionResult:
        if amount <= 0:
            return DeductionResult(
                success=False,
                new_balance=await self.get_balance(account_id),
                error=INVALID_AMOUNT_MESSAGE,
            )

        async with self._session_factory() as session:
            statement = (
                pg_insert(CreditAccount)
                .values(account_id=account_id, balance=amount)
                .on_conflict_do_update(
                    index_elements=[CreditAccount.account_id],
                    set_={"balance": CreditAccount.balance + amount},
                )
                .returning(CreditAccount.balance)
            )
            new_balance = int(await session.scalar(statement) or 0)
            session.add(
                CreditTransaction(
                    account_id=account_id,
                    amount=amount,
                    transaction_type=TRANSACTION_PURCHASE,
                    source=source,
                    balance_after=new_balance,
                    extra_data=dict(metadata or {}),
                )
            )
            await session.commit()
        return DeductionResult(success=True, new_balance=new_balance)

    async def grant_trial_credits(self, account_id: str) -> DeductionResult:
        async with self._session_factory() as session:
            await session.execute(
                pg_insert(CreditAccount)
                .values(account_id=account_id, balance=0, trial_granted=False)
                .on_conflict_do_nothing(index_elements=[CreditAccount.account_id])
            )
            new_balance = await session.scalar(
                update(CreditAccount)
                .where(
                    CreditAccount.account_id == account_id,
                    CreditAccount.trial_granted.is_(False),
                )
                .values(
                    balance=CreditAccount.balance + settings.trial_credits,
                    trial_granted=True,
                )
                .returning(CreditAccount.balance)
            )
            if new_balance is None:
                await session.commit()
                return DeductionResult(
                    success=False,
                    new_balance=await self.get_balance(account_id),
                    error="Trial already granted",
                )
            session.add(
                CreditTransaction(
                    account_id=account_id,
                    amount=settings.trial_credits,
                    transaction_type=TRANSACTION_FREE_TRIAL,
                    source="trial",
                    balance_after=int(new_balance),
                    extra_data={},
                )
            )
            await session.commit()
        return DeductionResult(success=True, new_balance=int(new_balance))

    async def list_transactions(
        self,
        account_id: str,
        limit: int = 50,
    ) -> list[CreditTransactionRecord]:
        async def _read() -> list[CreditTransaction]:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(CreditTransaction)
                    .where(CreditTransaction.account_id == account_id)
                    .order_by(CreditTransaction.created_at.desc())
                    .limit(limit)
                )
                return list(result.scalars().all())

        rows = await retry_read(_read, operation_name="list_transactions", account_id=account_id)
        return [
            CreditTransactionRecord(
                id=row.id,
                account_id=row.account_id,
                amount=row.amount,
                type=row.transaction_type,
                source=row.source,
                metadata=dict(row.extra_data or {}),
                created_at=row.created_at,
            )
            for row in rows
        ]
