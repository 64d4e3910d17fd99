"""Gemini image generation client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from app.config import settings
from app.core.exceptions import ModelInvocationError
from app.schemas.product import ImagePayload

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass(frozen=True)
class ImageGenerationResult:
    """Raw image payload returned by the image model."""

    data: bytes
    mime_type: str
    model_name: str
    text: str | None = None


def _label(value: Any) -> str | None:
    if value is None:
        return None
    return str(getattr(value, "name", None) or getattr(value, "value", None) or value)


def extract_image(response: Any, model_name: str) -> ImageGenerationResult:
    """Pull the first inline image out of a generate_content response.

    Raises ModelInvocationError carrying the block reason, finish reason and
    any text the model returned instead of an image.
    """
    feedback = getattr(response, "prompt_feedback", None)
    block_reason = _label(getattr(feedback, "block_reason", None))
    if block_reason:
        raise ModelInvocationError(
            "Image generation was blocked by the model's safety filters",
            {"block_reason": block_reason, "model": model_name, "retryable": False},
        )

    finish_reason: str | None = None
    text_parts: list[str] = []
    for candidate in getattr(response, "candidates", None) or []:
        finish_reason = finish_reason or _label(getattr(candidate, "finish_reason", None))
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and getattr(inline, "data", None):
                return ImageGenerationResult(
                    data=inline.data,
                    mime_type=getattr(inline, "mime_type", None) or "image/png",
                    model_name=model_name,
                    text=" ".join(text_parts) or None,
                )
            text = getattr(part, "text", None)
            if text:
                text_parts.append(text)

    raise ModelInvocationError(
        "Image model returned no image",
        {
            "finish_reason": finish_reason,
            "text": " ".join(text_parts) or None,
            "model": model_name,
            "retryable": False,
        },
    )


class GeminiImageClient:
    """Thin async wrapper over ``google-genai`` image generation."""

    def __init__(self, api_key: str | None = None, client: genai.Client | None = None) -> None:
        self._api_key = api_key or settings.google_api_key
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate_image(
        self,
        *,
        prompt: str,
        images: list[ImagePayload],
        model: str,
        aspect_ratio: str,
        image_size: str | None = None,
    ) -> ImageGenerationResult:
        """Generate one image from a prompt and reference images."""
        contents = [types.Part.from_text(text=prompt)]
        contents.extend(
            types.Part.from_bytes(data=image.data, mime_type=image.mime_type) for image in images
        )
        image_config = (
            types.ImageConfig(aspect_ratio=aspect_ratio, image_size=image_size)
            if image_size
            else types.ImageConfig(aspect_ratio=aspect_ratio)
        )

        logger.info(
            "Image generation request",
            extra={
                "model": model,
                "aspect_ratio": aspect_ratio,
                "image_size": image_size,
                "reference_images": len(images),
                "prompt_length": len(prompt),
            },
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE"],
                    image_config=image_config,
                ),
            )
        except genai_errors.APIError as exc:
            raise ModelInvocationError(
                "Image model call failed",
                {
                    "model": model,
                    "status_code": exc.code,
                    "error": exc.message or str(exc),
                    "retryable": exc.code in RETRYABLE_STATUS_CODES,
                },
            ) from exc
        except httpx.HTTPError as exc:
            raise ModelInvocationError(
                "Image model transport failed",
                {"model": model, "error": str(exc), "retryable": True},
            ) from exc

        return extract_image(response, model)
