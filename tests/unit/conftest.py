"""Shared fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable
from io import BytesIO
from typing import Any

import pytest
from PIL import Image

from app.schemas.creative import Concept, CreativeDirection
from app.schemas.product import ImagePayload, ProductAnalysis, ProductAttributes


def make_png_bytes(size: tuple[int, int] = (8, 8), color: str = "red") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png_bytes()


@pytest.fixture
def product_image(png_bytes: bytes) -> ImagePayload:
    return ImagePayload(data=png_bytes, mime_type="image/png")


@pytest.fixture
def make_analysis() -> Callable[..., ProductAnalysis]:
    def _make(**overrides: Any) -> ProductAnalysis:
        payload: dict[str, Any] = {
            "product_category": "jewelry",
            "product_type": "gold hoop earrings",
            "product_attributes": ProductAttributes(
                size="3cm diameter",
                color="polished gold",
                material="18k gold",
                features=["hinged clasp"],
            ),
            "target_audience": "Women 25-45 who buy everyday fine jewelry",
            "key_selling_points": ["Solid 18k gold", "Lightweight for all-day wear"],
            "recommended_mood": "Luxurious",
            "recommended_aesthetic": "minimal editorial",
            "brand_tier": "mid-tier",
            "recommended_presets": ["minimalist-clean"],
        }
        payload.update(overrides)
        return ProductAnalysis(**payload)

    return _make


@pytest.fixture
def analysis(make_analysis: Callable[..., ProductAnalysis]) -> ProductAnalysis:
    return make_analysis()


@pytest.fixture
def make_concept() -> Callable[..., Concept]:
    def _make(**overrides: Any) -> Concept:
        payload: dict[str, Any] = {
            "id": "concept-1",
            "title": "Golden Morning",
            "description": "The earrings catch the first light on a marble vanity.",
            "ad_type": "Product Hero",
            "model_required": False,
            "presentation_style": "Flat Lay",
            "mood": "Calm",
            "aesthetic": "Minimal editorial",
            "visual_description": "Earrings laid on white marble with soft morning light.",
        }
        payload.update(overrides)
        return Concept(**payload)

    return _make


@pytest.fixture
def make_direction() -> Callable[..., CreativeDirection]:
    def _make(**overrides: Any) -> CreativeDirection:
        payload: dict[str, Any] = {
            "ad_type": "Product Hero",
            "platform_recommendation": "Instagram Post",
            "location": "Marble vanity by a window",
            "environment": "Studio",
            "camera_angle": "Eye-level",
            "lighting": "Softbox",
            "model_required": False,
            "presentation_style": "Flat Lay",
            "mood": "Calm",
            "color_palette": ["ivory", "gold"],
            "composition_approach": "Centered with generous negative space",
            "aspect_ratio": "1:1",
        }
        payload.update(overrides)
        return CreativeDirection(**payload)

    return _make
