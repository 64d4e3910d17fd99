"""Validate and normalize raw product input before any remote call."""

from __future__ import annotations

import base64
import binascii
import logging
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from app.config import settings
from app.core.exceptions import InputValidationError
from app.schemas.generation import ImageUpload
from app.schemas.product import ImagePayload, ProductInput

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = frozenset({"PNG", "JPEG", "WEBP", "GIF", "HEIC", "HEIF"})


def decode_image_upload(upload: ImageUpload | None, *, field: str = "image") -> ImagePayload | None:
    """Decode a base64 upload into validated image bytes.

    Accepts plain base64 or a ``data:<mime>;base64,`` URL. The returned mime
    type is the sniffed format, not the declared one.
    """
    if upload is None:
        return None

    raw = upload.base64.strip()
    if not raw:
        return None
    if raw.startswith("data:") and "," in raw:
        raw = raw.split(",", 1)[1]

    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InputValidationError(
            f"{field} is not valid base64",
            {"field": field},
        ) from exc

    return validate_image_bytes(data, field=field)


def validate_image_bytes(data: bytes, *, field: str = "image") -> ImagePayload:
    """Check size and decodability, returning bytes with their detected mime type."""
    if not data:
        raise InputValidationError(f"{field} is empty", {"field": field})
    if len(data) > settings.max_image_bytes:
        raise InputValidationError(
            f"{field} exceeds the maximum size",
            {"field": field, "size": len(data), "max_bytes": settings.max_image_bytes},
        )

    try:
        with Image.open(BytesIO(data)) as image:
            image_format = (image.format or "").upper()
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise InputValidationError(
            f"{field} is not a readable image",
            {"field": field},
        ) from exc

    if image_format not in SUPPORTED_FORMATS:
        raise InputValidationError(
            f"{field} format is not supported",
            {"field": field, "format": image_format or None},
        )

    mime_type = Image.MIME.get(image_format, f"image/{image_format.lower()}")
    return ImagePayload(data=data, mime_type=mime_type)


def normalize_product_input(image: ImagePayload | None, text: str | None) -> ProductInput:
    """Build a ProductInput, rejecting requests with neither image nor text."""
    cleaned_text = " ".join(text.split()) if text else None
    if image is None and not cleaned_text:
        raise InputValidationError(
            "Provide a product image, a product description, or both",
            {"fields": ["image", "text"]},
        )

    logger.info(
        "Product input normalized",
        extra={
            "has_image": image is not None,
            "has_text": bool(cleaned_text),
            "image_mime_type": image.mime_type if image else None,
        },
    )
    return ProductInput(image=image, text=cleaned_text or None)
