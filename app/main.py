"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.router import api_router
from app.config import settings
from app.core.database import close_db, init_db
from app.core.exceptions import (
    AuthenticationError,
    InputValidationError,
    InsufficientCreditsError,
    ShotCraftError,
)
from app.core.logging import setup_logging
from app.core.redis import close_redis

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[ShotCraftError], int] = {
    InputValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    InsufficientCreditsError: status.HTTP_402_PAYMENT_REQUIRED,
}

HTTP_ERROR_CODES: dict[int, str] = {
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_409_CONFLICT: "conflict",
}


def status_code_for(exc: ShotCraftError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(exc: ShotCraftError, status_code: int) -> dict[str, Any]:
    body: dict[str, Any] = {
        "error": exc.message,
        "code": exc.code,
        "details": exc.details,
    }
    if status_code >= 500:
        # Upstream failures report a details string; structured fields move to context.
        body["details"] = str(exc.details.get("error") or exc.message)
        body["context"] = exc.details
    if isinstance(exc, InsufficientCreditsError):
        body["required"] = exc.required
        body["available"] = exc.available
    return body


async def shotcraft_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = cast(ShotCraftError, exc)
    status_code = status_code_for(error)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Request failed",
        extra={
            "path": request.url.path,
            "status_code": status_code,
            "code": error.code,
            "error": error.message,
        },
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=error_body(error, status_code), headers=headers)


async def request_validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = cast(RequestValidationError, exc).errors()
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Request body is missing required fields or has invalid values",
            "code": InputValidationError.code,
            "details": {"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in errors]},
        },
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error = cast(StarletteHTTPException, exc)
    return JSONResponse(
        status_code=error.status_code,
        content={
            "error": str(error.detail),
            "code": HTTP_ERROR_CODES.get(error.status_code, "http_error"),
            "details": {},
        },
        headers=getattr(error, "headers", None),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging()

    logger.info(
        "Starting ShotCraft",
        extra={
            "environment": settings.environment,
            "version": settings.app_version,
            "credit_ledger_backend": settings.credit_ledger_backend,
            "model_reasoning": settings.get_model("reasoning"),
            "model_standard": settings.get_model("standard"),
            "model_fast": settings.get_model("fast"),
            "image_model_standard": settings.image_model_standard,
            "image_model_pro": settings.image_model_pro,
        },
    )

    if settings.environment == "development" and settings.credit_ledger_backend == "sql":
        await init_db()
        logger.info("Development database initialized")

    yield

    logger.info("Shutting down ShotCraft")
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Creative generation backend: product analysis, concept selection, "
            "photography direction and credit-gated image synthesis"
        ),
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        cast(Any, CORSMiddleware),
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ShotCraftError, shotcraft_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get(
        "/health",
        summary="Health check",
        description="Return service health status and backend version information.",
    )
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()
