"""Task status manager backed by Redis."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from redis.asyncio import Redis

from app.config import settings
from app.core.redis import get_redis_client

logger = logging.getLogger(__name__)

TASK_KEY_PREFIX = "task"
UNSET: object = object()


class TaskManager:
    """Store and fetch generation progress from Redis."""

    def __init__(self, redis_client: Redis | None = None) -> None:
        self.redis = redis_client or get_redis_client()
        self.ttl_seconds = settings.cache_ttl_seconds

    async def get_task_status(self, task_id: str) -> dict[str, Any] | None:
        """Get task status by task ID."""
        raw = await self.redis.get(self._task_key(task_id))
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Invalid task payload in Redis", extra={"task_id": task_id})
            return None

    async def set_task_state(
        self,
        task_id: str,
        *,
        status: str | None = None,
        stage: str | None = None,
        account_id: str | None = None,
        pipeline_mode: str | None = None,
        pipeline_state: str | None = None,
        progress_percent: float | None = None,
        error_message: str | None | object = UNSET,
    ) -> dict[str, Any]:
        """Create or update task state."""
        now = self._now_iso()
        payload = await self.get_task_status(task_id) or {"task_id": task_id, "created_at": now}
        payload["updated_at"] = now

        updates = {
            "status": status,
            "stage": stage,
            "account_id": account_id,
            "pipeline_mode": pipeline_mode,
            "pipeline_state": pipeline_state,
            "progress_percent": progress_percent,
        }
        for key, value in updates.items():
            if value is not None:
                payload[key] = value
        if error_message is not UNSET:
            payload["error_message"] = error_message

        await self.redis.set(
            self._task_key(task_id),
            json.dumps(payload),
            ex=self.ttl_seconds,
        )
        return payload

    async def get_task_for_account(self, task_id: str, account_id: str) -> dict[str, Any] | None:
        """Return the task only when it belongs to account_id."""
        payload = await self.get_task_status(task_id)
        if payload is None or payload.get("account_id") != account_id:
            return None
        return payload

    async def is_claimed_by_other(self, task_id: str, account_id: str) -> bool:
        payload = await self.get_task_status(task_id)
        return payload is not None and payload.get("account_id") != account_id

    @staticmethod
    def _task_key(task_id: str) -> str:
        return f"{TASK_KEY_PREFIX}:{task_id}"

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()
