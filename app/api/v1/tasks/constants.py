"""Constants for task routes."""

TASK_NOT_FOUND_DETAIL = "Task not found"
