"""Custom exception classes for the application."""

from typing import Any


class ShotCraftError(Exception):
    """Base exception for all application errors."""

    code = "internal_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Authentication Errors
class AuthenticationError(ShotCraftError):
    """Authentication failed."""

    code = "unauthorized"


class InvalidTokenError(AuthenticationError):
    """Invalid or expired token."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


# Input Errors
class InputValidationError(ShotCraftError):
    """Request input is missing or unusable."""

    code = "invalid_input"


# Remote Model Errors
class ModelInvocationError(ShotCraftError):
    """A remote model call failed or returned no usable payload."""

    code = "model_invocation_failed"


class ParseError(ShotCraftError):
    """A remote model answered but the payload could not be decoded."""

    code = "parse_error"


# Credit Errors
class InsufficientCreditsError(ShotCraftError):
    """Account balance is below the cost of the requested generation."""

    code = "insufficient_credits"

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient credits: {required} required, {available} available",
            {"required": required, "available": available},
        )


class CreditSettlementError(ShotCraftError):
    """Credits could not be deducted after a successful generation."""

    code = "credit_settlement_failed"


# Pipeline Errors
class PipelineStateError(ShotCraftError):
    """Illegal state transition requested on a pipeline run."""

    code = "pipeline_state_error"
