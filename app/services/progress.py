"""Typed progress events for a pipeline run."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from app.schemas.generation import ProgressEvent
from app.services.task_manager import TaskManager

logger = logging.getLogger(__name__)

ProgressSubscriber = Callable[[ProgressEvent], Awaitable[None]]


class ProgressChannel:
    """Ordered, monotonic stage/percent notifications.

    A percent lower than the last emitted one is clamped up, so consumers
    never see progress move backwards. Subscribers are best-effort: a failing
    subscriber is logged and skipped.
    """

    def __init__(self, subscribers: list[ProgressSubscriber] | None = None) -> None:
        self._subscribers: list[ProgressSubscriber] = list(subscribers or [])
        self._events: list[ProgressEvent] = []

    @property
    def events(self) -> list[ProgressEvent]:
        return list(self._events)

    @property
    def percent(self) -> int:
        return self._events[-1].percent if self._events else 0

    def subscribe(self, subscriber: ProgressSubscriber) -> None:
        self._subscribers.append(subscriber)

    async def emit(self, stage: str, percent: int) -> ProgressEvent:
        clamped = max(self.percent, min(100, max(0, int(percent))))
        event = ProgressEvent(stage=stage, percent=clamped)
        self._events.append(event)
        for subscriber in self._subscribers:
            try:
                await subscriber(event)
            except Exception:
                logger.warning(
                    "Progress subscriber failed",
                    extra={"stage": stage, "percent": clamped},
                    exc_info=True,
                )
        return event


class TaskProgressMirror:
    """Best-effort mirror of progress events into the Redis task status."""

    def __init__(
        self,
        task_id: str,
        *,
        account_id: str,
        pipeline_mode: str,
        task_manager: TaskManager | None = None,
    ) -> None:
        self.task_id = task_id
        self.account_id = account_id
        self.pipeline_mode = pipeline_mode
        self._task_manager = task_manager

    @property
    def task_manager(self) -> TaskManager:
        if self._task_manager is None:
            self._task_manager = TaskManager()
        return self._task_manager

    async def __call__(self, event: ProgressEvent) -> None:
        await self.task_manager.set_task_state(
            self.task_id,
            status="completed" if event.percent >= 100 else "running",
            stage=event.stage,
            account_id=self.account_id,
            pipeline_mode=self.pipeline_mode,
            progress_percent=float(event.percent),
            error_message=None,
        )

    async def mark_failed(self, state: str, message: str) -> None:
        try:
            await self.task_manager.set_task_state(
                self.task_id,
                status="failed",
                account_id=self.account_id,
                pipeline_mode=self.pipeline_mode,
                pipeline_state=state,
                error_message=message,
            )
        except Exception:
            logger.warning(
                "Failed to mirror pipeline failure to task status",
                extra={"task_id": self.task_id},
                exc_info=True,
            )
