"""Product intake and analysis schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BrandTier = Literal["luxury", "premium", "mid-tier", "mass-market", "undetermined"]


class ImagePayload(BaseModel):
    """Decoded image bytes with their detected mime type."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str = "image/png"


class ProductInput(BaseModel):
    """Normalized product input. At least one of image or text is present."""

    model_config = ConfigDict(frozen=True)

    image: ImagePayload | None = None
    text: str | None = None

    @property
    def has_image(self) -> bool:
        return self.image is not None

    @property
    def has_text(self) -> bool:
        return bool(self.text)


class ProductAttributes(BaseModel):
    """Physical attributes of the product."""

    size: str | None = Field(default=None, description="Approximate size or form factor")
    color: str | None = Field(default=None, description="Dominant colors and finishes")
    material: str | None = Field(default=None, description="Primary materials")
    features: list[str] = Field(default_factory=list, description="Notable design features")


class ProductAnalysis(BaseModel):
    """Structured understanding of a product, reused by later phases."""

    model_config = ConfigDict(frozen=True)

    product_category: str = Field(description="Broad category, e.g. 'jewelry' or 'skincare'")
    product_type: str = Field(description="Specific product type, e.g. 'gold hoop earrings'")
    product_attributes: ProductAttributes
    target_audience: str
    key_selling_points: list[str] = Field(min_length=1)
    recommended_mood: str | None = None
    recommended_aesthetic: str | None = None
    brand_tier: BrandTier = Field(
        default="undetermined",
        description="Inferred market positioning from pricing language, category and visual cues",
    )
    luxury_indicators: list[str] = Field(default_factory=list)
    visual_identity: str | None = None
    recommended_presets: list[str] = Field(
        default_factory=list,
        description="Up to 3 photography preset ids suited to the product",
    )
