"""Constants for creative generation routes."""

TASK_OWNED_BY_OTHER_ACCOUNT_DETAIL = "Task belongs to another account"

PIPELINE_MODE_FULL = "full"
PIPELINE_MODE_STYLE_TRANSFER = "style_transfer"
