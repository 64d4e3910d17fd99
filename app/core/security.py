"""JWT access token utilities."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.config import settings
from app.core.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)


def create_access_token(
    subject: str,
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Create a JWT access token for an account id."""
    logger.info("Creating access token", extra={"subject": subject})
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode: dict[str, Any] = {
        "sub": subject,
        "exp": expire,
        "type": "access",
    }
    if extra_claims:
        to_encode.update(extra_claims)

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str, expected_type: str = "access") -> dict[str, Any]:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise InvalidTokenError(str(e)) from e

    token_type = payload.get("type")
    if token_type != expected_type:
        logger.warning("Token type mismatch", extra={"expected": expected_type, "got": token_type})
        raise InvalidTokenError(f"Expected {expected_type} token, got {token_type}")

    if not payload.get("sub"):
        logger.warning("Token missing subject")
        raise InvalidTokenError("Token missing subject")

    return payload


def verify_access_token(token: str) -> str:
    """Verify an access token and return the subject (account id)."""
    payload = decode_token(token, expected_type="access")
    return str(payload["sub"])
