"""Task API endpoints."""

from fastapi import APIRouter, HTTPException, status

from app.api.v1.tasks.constants import TASK_NOT_FOUND_DETAIL
from app.dependencies import CurrentAccount, Tasks
from app.schemas.task import TaskStatusResponse

router = APIRouter()


@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: str,
    account_id: CurrentAccount,
    task_manager: Tasks,
) -> TaskStatusResponse:
    """Get mirrored pipeline progress from Redis."""
    task_status = await task_manager.get_task_for_account(task_id, account_id)
    if task_status is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=TASK_NOT_FOUND_DETAIL,
        )

    return TaskStatusResponse.model_validate(task_status)
