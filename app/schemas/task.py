"""Task schemas."""

from datetime import datetime

from pydantic import BaseModel


class TaskStatusResponse(BaseModel):
    """Schema for task status response."""

    task_id: str
    status: str
    stage: str | None = None
    account_id: str | None = None
    pipeline_mode: str | None = None
    pipeline_state: str | None = None
    progress_percent: float | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
