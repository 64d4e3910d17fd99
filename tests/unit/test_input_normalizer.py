"""Unit tests for product input validation."""

from __future__ import annotations

import base64

import pytest

from app.config import settings
from app.core.exceptions import InputValidationError
from app.schemas.generation import ImageUpload
from app.services.input_normalizer import (
    decode_image_upload,
    normalize_product_input,
    validate_image_bytes,
)


def test_decodes_plain_base64_png(png_bytes: bytes) -> None:
    payload = decode_image_upload(ImageUpload(base64=base64.b64encode(png_bytes).decode()))

    assert payload is not None
    assert payload.data == png_bytes
    assert payload.mime_type == "image/png"


def test_decodes_data_url_and_ignores_declared_mime(png_bytes: bytes) -> None:
    encoded = base64.b64encode(png_bytes).decode()
    payload = decode_image_upload(
        ImageUpload(base64=f"data:image/jpeg;base64,{encoded}", mime_type="image/jpeg")
    )

    assert payload is not None
    assert payload.mime_type == "image/png"


def test_missing_upload_is_none() -> None:
    assert decode_image_upload(None) is None
    assert decode_image_upload(ImageUpload(base64="   ")) is None


def test_invalid_base64_is_rejected() -> None:
    with pytest.raises(InputValidationError) as exc_info:
        decode_image_upload(ImageUpload(base64="not base64!!"), field="reference_image")

    assert exc_info.value.details == {"field": "reference_image"}


def test_non_image_bytes_are_rejected() -> None:
    with pytest.raises(InputValidationError):
        validate_image_bytes(b"plain text, not an image")


def test_oversized_image_is_rejected(png_bytes: bytes) -> None:
    original = settings.max_image_bytes
    settings.max_image_bytes = 10
    try:
        with pytest.raises(InputValidationError) as exc_info:
            validate_image_bytes(png_bytes)
    finally:
        settings.max_image_bytes = original

    assert exc_info.value.details["max_bytes"] == 10


def test_requires_image_or_text() -> None:
    with pytest.raises(InputValidationError):
        normalize_product_input(None, None)
    with pytest.raises(InputValidationError):
        normalize_product_input(None, " \n\t ")


def test_text_is_collapsed(product_image) -> None:
    product = normalize_product_input(product_image, "  Gold   hoops\n18k  ")

    assert product.text == "Gold hoops 18k"
    assert product.has_image
    assert product.has_text
