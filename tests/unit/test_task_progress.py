"""Unit tests for the progress channel and its Redis task mirror."""

from __future__ import annotations

from typing import Any

import pytest

from app.schemas.generation import ProgressEvent
from app.services.progress import ProgressChannel, TaskProgressMirror
from app.services.task_manager import TaskManager


class _FakeRedis:
    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expiry: dict[str, int | None] = {}

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self.store[key] = value
        self.expiry[key] = ex


@pytest.mark.asyncio
async def test_progress_is_monotonic_and_clamped() -> None:
    channel = ProgressChannel()

    await channel.emit("Analyzing", 30)
    await channel.emit("Late event", 10)
    await channel.emit("Overflow", 140)

    assert [event.percent for event in channel.events] == [30, 30, 100]
    assert channel.percent == 100


@pytest.mark.asyncio
async def test_subscribers_receive_events_in_order() -> None:
    received: list[ProgressEvent] = []

    async def subscriber(event: ProgressEvent) -> None:
        received.append(event)

    channel = ProgressChannel()
    channel.subscribe(subscriber)
    await channel.emit("One", 10)
    await channel.emit("Two", 20)

    assert [event.stage for event in received] == ["One", "Two"]


@pytest.mark.asyncio
async def test_task_manager_merges_updates_and_sets_ttl() -> None:
    redis = _FakeRedis()
    manager = TaskManager(redis_client=redis)  # type: ignore[arg-type]

    await manager.set_task_state("t1", status="running", stage="Analyzing", account_id="acct")
    payload = await manager.set_task_state("t1", progress_percent=40.0)

    assert payload["status"] == "running"
    assert payload["account_id"] == "acct"
    assert payload["progress_percent"] == 40.0
    assert redis.expiry["task:t1"] == manager.ttl_seconds
    assert await manager.get_task_for_account("t1", "acct") == payload
    assert await manager.get_task_for_account("t1", "someone-else") is None
    assert await manager.is_claimed_by_other("t1", "someone-else")
    assert not await manager.is_claimed_by_other("t1", "acct")
    assert not await manager.is_claimed_by_other("missing", "acct")
    assert await manager.get_task_status("missing") is None


@pytest.mark.asyncio
async def test_invalid_payload_reads_as_missing() -> None:
    redis = _FakeRedis()
    redis.store["task:t1"] = "{not json"
    manager = TaskManager(redis_client=redis)  # type: ignore[arg-type]

    assert await manager.get_task_status("t1") is None


@pytest.mark.asyncio
async def test_mirror_marks_completion_and_failure() -> None:
    manager = TaskManager(redis_client=_FakeRedis())  # type: ignore[arg-type]
    mirror = TaskProgressMirror("t1", account_id="acct", pipeline_mode="full", task_manager=manager)

    await mirror(ProgressEvent(stage="Generating image", percent=60))
    running = await manager.get_task_status("t1")
    await mirror(ProgressEvent(stage="Complete", percent=100))
    completed = await manager.get_task_status("t1")
    await mirror.mark_failed("credit_checked", "Image model call failed")
    failed = await manager.get_task_status("t1")

    assert running is not None and running["status"] == "running"
    assert completed is not None and completed["status"] == "completed"
    assert failed is not None
    assert failed["status"] == "failed"
    assert failed["pipeline_state"] == "credit_checked"
    assert failed["error_message"] == "Image model call failed"
    assert failed["pipeline_mode"] == "full"


@pytest.mark.asyncio
async def test_failure_before_first_event_keeps_owner() -> None:
    manager = TaskManager(redis_client=_FakeRedis())  # type: ignore[arg-type]
    mirror = TaskProgressMirror("t1", account_id="acct", pipeline_mode="style_transfer", task_manager=manager)

    await mirror.mark_failed("intake", "A reference image is required")

    assert await manager.get_task_for_account("t1", "acct") is not None
    assert await manager.is_claimed_by_other("t1", "intruder")
    failed = await manager.get_task_status("t1")
    assert failed is not None
    assert failed["pipeline_mode"] == "style_transfer"


@pytest.mark.asyncio
async def test_mirror_failure_is_swallowed() -> None:
    class _BrokenManager:
        async def set_task_state(self, *args: Any, **kwargs: Any) -> None:
            raise ConnectionError("redis down")

    mirror = TaskProgressMirror(
        "t1",
        account_id="acct",
        pipeline_mode="full",
        task_manager=_BrokenManager(),  # type: ignore[arg-type]
    )
    channel = ProgressChannel([mirror])

    await channel.emit("Analyzing", 10)
    await mirror.mark_failed("intake", "boom")

    assert channel.percent == 10
