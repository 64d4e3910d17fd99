"""Constants for credit routes."""

DEFAULT_TRANSACTION_LIMIT = 50
MAX_TRANSACTION_LIMIT = 200
TRIAL_ALREADY_GRANTED_DETAIL = "Trial credits already granted"
