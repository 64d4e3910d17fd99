"""Credit pricing for image generation."""

from __future__ import annotations

from typing import Literal

QualityTier = Literal["standard", "pro"]
Resolution = Literal["1K", "2K", "4K"]

STANDARD_GENERATION_CREDITS = 1
PRO_GENERATION_CREDITS: dict[Resolution, int] = {
    "1K": 2,
    "2K": 3,
    "4K": 4,
}

TRANSACTION_IMAGE_GENERATION = "image_generation"
TRANSACTION_PURCHASE = "purchase"
TRANSACTION_FREE_TRIAL = "free_trial"


def resolve_required_credits(quality_tier: QualityTier, resolution: Resolution) -> int:
    """Return the credit cost of one generation."""
    if quality_tier == "pro":
        return PRO_GENERATION_CREDITS.get(resolution, PRO_GENERATION_CREDITS["1K"])
    return STANDARD_GENERATION_CREDITS
