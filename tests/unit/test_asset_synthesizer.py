"""Unit tests for image synthesis, response extraction and retry."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from app.config import settings
from app.core.exceptions import ModelInvocationError
from app.integrations.image_model import GeminiImageClient, ImageGenerationResult, extract_image
from app.schemas.photography import ArtisticPrompt
from app.services.asset_synthesizer import AssetSynthesizer, map_aspect_ratio


class _ScriptedImageClient:
    """Returns or raises the scripted outcomes in order."""

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    async def generate_image(self, **kwargs: Any) -> ImageGenerationResult:
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _result(model: str = "gemini-2.5-flash-image") -> ImageGenerationResult:
    return ImageGenerationResult(data=b"\x89PNG-bytes", mime_type="image/png", model_name=model)


def _response(*, parts: list[Any], block_reason: Any = None, finish_reason: Any = None) -> Any:
    return SimpleNamespace(
        prompt_feedback=SimpleNamespace(block_reason=block_reason),
        candidates=[
            SimpleNamespace(
                finish_reason=finish_reason,
                content=SimpleNamespace(parts=parts),
            )
        ],
    )


def test_aspect_ratio_mapping() -> None:
    assert map_aspect_ratio("4:5") == "4:5"
    assert map_aspect_ratio("4:3") == "4:3"
    assert map_aspect_ratio("9:16") == "9:16"
    assert map_aspect_ratio("21:9") == "1:1"
    assert map_aspect_ratio(None) == "1:1"


def test_extract_image_returns_first_inline_image() -> None:
    response = _response(
        parts=[
            SimpleNamespace(inline_data=None, text="Here is your image"),
            SimpleNamespace(inline_data=SimpleNamespace(data=b"img", mime_type="image/webp"), text=None),
        ]
    )

    result = extract_image(response, "model-x")

    assert result.data == b"img"
    assert result.mime_type == "image/webp"
    assert result.text == "Here is your image"


def test_extract_image_raises_on_block_reason() -> None:
    response = _response(parts=[], block_reason=SimpleNamespace(name="SAFETY"))

    with pytest.raises(ModelInvocationError) as exc_info:
        extract_image(response, "model-x")

    assert exc_info.value.details["block_reason"] == "SAFETY"
    assert exc_info.value.details["retryable"] is False


def test_extract_image_raises_when_no_image_returned() -> None:
    response = _response(
        parts=[SimpleNamespace(inline_data=None, text="I cannot draw that")],
        finish_reason="STOP",
    )

    with pytest.raises(ModelInvocationError) as exc_info:
        extract_image(response, "model-x")

    assert exc_info.value.details["finish_reason"] == "STOP"
    assert exc_info.value.details["text"] == "I cannot draw that"


@pytest.mark.asyncio
async def test_standard_tier_uses_standard_model_without_image_size(product_image) -> None:
    client = _ScriptedImageClient(_result())
    synthesizer = AssetSynthesizer(client, retry_attempts=1, retry_backoff_ms=0)

    asset = await synthesizer.synthesize(
        prompt=ArtisticPrompt(text="A photograph."),
        product_image=product_image,
        aspect_ratio="4:5",
    )

    call = client.calls[0]
    assert call["model"] == settings.image_model_standard
    assert call["image_size"] is None
    assert call["aspect_ratio"] == "4:5"
    assert call["images"] == [product_image]
    assert asset.credit_cost == 1
    assert asset.id.startswith("a")


@pytest.mark.asyncio
async def test_pro_tier_passes_resolution_and_style_reference(product_image) -> None:
    client = _ScriptedImageClient(_result(settings.image_model_pro))
    synthesizer = AssetSynthesizer(client, retry_attempts=1, retry_backoff_ms=0)
    reference = product_image.model_copy(update={"data": b"reference"})

    asset = await synthesizer.synthesize(
        prompt=ArtisticPrompt(text="A photograph."),
        product_image=product_image,
        style_reference=reference,
        quality_tier="pro",
        resolution="4K",
    )

    call = client.calls[0]
    assert call["model"] == settings.image_model_pro
    assert call["image_size"] == "4K"
    assert call["images"] == [product_image, reference]
    assert asset.credit_cost == 4


@pytest.mark.asyncio
async def test_transient_failures_are_retried(product_image) -> None:
    transient = ModelInvocationError("503", {"retryable": True})
    client = _ScriptedImageClient(transient, transient, _result())
    synthesizer = AssetSynthesizer(client, retry_attempts=3, retry_backoff_ms=0)

    asset = await synthesizer.synthesize(
        prompt=ArtisticPrompt(text="A photograph."),
        product_image=product_image,
    )

    assert len(client.calls) == 3
    assert asset.image.data == b"\x89PNG-bytes"


@pytest.mark.asyncio
async def test_safety_blocks_are_not_retried(product_image) -> None:
    blocked = ModelInvocationError("blocked", {"block_reason": "SAFETY", "retryable": False})
    client = _ScriptedImageClient(blocked, _result())
    synthesizer = AssetSynthesizer(client, retry_attempts=3, retry_backoff_ms=0)

    with pytest.raises(ModelInvocationError):
        await synthesizer.synthesize(
            prompt=ArtisticPrompt(text="A photograph."),
            product_image=product_image,
        )

    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_gemini_client_sends_prompt_and_images(product_image) -> None:
    captured: dict[str, Any] = {}

    async def generate_content(**kwargs: Any) -> Any:
        captured.update(kwargs)
        return _response(
            parts=[SimpleNamespace(inline_data=SimpleNamespace(data=b"img", mime_type="image/png"))]
        )

    fake_client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))
    client = GeminiImageClient(api_key="test", client=fake_client)  # type: ignore[arg-type]

    result = await client.generate_image(
        prompt="A photograph.",
        images=[product_image],
        model="gemini-3-pro-image-preview",
        aspect_ratio="1:1",
        image_size="2K",
    )

    assert result.data == b"img"
    assert captured["model"] == "gemini-3-pro-image-preview"
    assert len(captured["contents"]) == 2
    assert captured["config"].response_modalities == ["IMAGE"]
    assert captured["config"].image_config.image_size == "2K"
