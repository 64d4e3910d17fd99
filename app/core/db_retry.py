"""Retry helper for read-only ledger queries hit by dropped connections."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

logger = logging.getLogger(__name__)

_ResultT = TypeVar("_ResultT")

_CONNECTION_ERROR_MARKERS = (
    "connection is closed",
    "server closed the connection unexpectedly",
    "connection was closed",
)


def is_transient_connection_error(exc: Exception) -> bool:
    """Return True when an exception likely came from a dropped DB connection."""
    if isinstance(exc, (InterfaceError, OperationalError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    lowered = str(exc).lower()
    return any(marker in lowered for marker in _CONNECTION_ERROR_MARKERS)


async def retry_read(
    operation: Callable[[], Awaitable[_ResultT]],
    *,
    operation_name: str,
    account_id: str,
    attempts: int = 3,
    base_delay_seconds: float = 0.2,
) -> _ResultT:
    """Run a read-only query, retrying transient connection failures.

    Writes never go through here: a retried deduction could settle twice.
    """
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if not is_transient_connection_error(exc) or attempt == attempts:
                raise
            logger.warning(
                "Transient database error on ledger read; retrying",
                extra={
                    "operation": operation_name,
                    "account_id": account_id,
                    "attempt": attempt,
                    "max_attempts": attempts,
                },
            )
            await asyncio.sleep(base_delay_seconds * attempt)
    raise RuntimeError(f"Retry loop exhausted for {operation_name}")
