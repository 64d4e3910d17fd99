"""Turn an artistic prompt and product imagery into a generated asset."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from app.config import settings
from app.core.exceptions import ModelInvocationError
from app.core.ids import generate_asset_id
from app.integrations.image_model import ImageGenerationResult
from app.schemas.generation import GeneratedAsset, QualityTier, Resolution
from app.schemas.photography import ArtisticPrompt
from app.schemas.product import ImagePayload
from app.services.billing import resolve_required_credits

logger = logging.getLogger(__name__)

# Requested ratio -> ratio the image model renders.
SUPPORTED_ASPECT_RATIOS: dict[str, str] = {
    "1:1": "1:1",
    "4:5": "4:5",
    "9:16": "9:16",
    "16:9": "16:9",
    "4:3": "4:3",
}
DEFAULT_ASPECT_RATIO = "1:1"


class ImageModelClient(Protocol):
    async def generate_image(
        self,
        *,
        prompt: str,
        images: list[ImagePayload],
        model: str,
        aspect_ratio: str,
        image_size: str | None = None,
    ) -> ImageGenerationResult: ...


def map_aspect_ratio(aspect_ratio: str | None) -> str:
    return SUPPORTED_ASPECT_RATIOS.get(aspect_ratio or "", DEFAULT_ASPECT_RATIO)


def is_retryable(exc: Exception) -> bool:
    """Only transport and transient upstream failures are worth another attempt."""
    if isinstance(exc, ModelInvocationError):
        return bool(exc.details.get("retryable"))
    return False


async def retry_with_backoff(
    *,
    attempts: int,
    backoff_ms: int,
    coro_factory: Callable[[], Awaitable[Any]],
    should_retry: Callable[[Exception], bool] = is_retryable,
) -> Any:
    """Retry helper for async generation flows with linear backoff."""
    last_error: Exception | None = None
    for attempt in range(max(1, attempts)):
        try:
            return await coro_factory()
        except Exception as exc:
            last_error = exc
            if attempt >= attempts - 1 or not should_retry(exc):
                break
            logger.warning(
                "Generation attempt failed, retrying",
                extra={"attempt": attempt + 1, "attempts": attempts, "error": str(exc)},
            )
            await asyncio.sleep((backoff_ms / 1000.0) * (attempt + 1))
    assert last_error is not None
    raise last_error


class AssetSynthesizer:
    """Render one image for a prompt at the requested tier and resolution."""

    def __init__(
        self,
        image_client: ImageModelClient,
        *,
        retry_attempts: int | None = None,
        retry_backoff_ms: int | None = None,
    ) -> None:
        self.image_client = image_client
        self.retry_attempts = retry_attempts or settings.image_retry_attempts
        self.retry_backoff_ms = (
            settings.image_retry_backoff_ms if retry_backoff_ms is None else retry_backoff_ms
        )

    @staticmethod
    def model_for(quality_tier: QualityTier) -> str:
        if quality_tier == "pro":
            return settings.image_model_pro
        return settings.image_model_standard

    async def synthesize(
        self,
        *,
        prompt: ArtisticPrompt,
        product_image: ImagePayload | None,
        style_reference: ImagePayload | None = None,
        aspect_ratio: str | None = None,
        quality_tier: QualityTier = "standard",
        resolution: Resolution = "1K",
    ) -> GeneratedAsset:
        """Generate the asset. Safety blocks and empty responses are never retried."""
        model = self.model_for(quality_tier)
        mapped_ratio = map_aspect_ratio(aspect_ratio)
        images = [image for image in (product_image, style_reference) if image is not None]
        image_size = resolution if quality_tier == "pro" else None

        result: ImageGenerationResult = await retry_with_backoff(
            attempts=self.retry_attempts,
            backoff_ms=self.retry_backoff_ms,
            coro_factory=lambda: self.image_client.generate_image(
                prompt=prompt.text,
                images=images,
                model=model,
                aspect_ratio=mapped_ratio,
                image_size=image_size,
            ),
        )

        asset = GeneratedAsset(
            id=generate_asset_id(),
            image=ImagePayload(data=result.data, mime_type=result.mime_type),
            prompt=prompt.text,
            model_name=result.model_name,
            credit_cost=resolve_required_credits(quality_tier, resolution),
            quality_tier=quality_tier,
            resolution=resolution,
            aspect_ratio=mapped_ratio,
        )
        logger.info(
            "Asset generated",
            extra={
                "asset_id": asset.id,
                "model": model,
                "quality_tier": quality_tier,
                "resolution": resolution,
                "aspect_ratio": mapped_ratio,
                "bytes": len(result.data),
            },
        )
        return asset
