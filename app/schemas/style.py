"""Reference-image style transfer schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

LightingIntensity = Literal["subtle", "moderate", "strong"]


class StyleAnalysis(BaseModel):
    """Visual style extracted from a reference photograph."""

    model_config = ConfigDict(frozen=True)

    style: str = Field(description="Overall photographic style or genre")
    pose: str = Field(description="Subject pose, or 'none' when no person is present")
    composition: str
    background: str
    lighting: str = Field(description="Lighting character described in plain words")
    aesthetic: str
    color_palette: list[str] = Field(default_factory=list)


class StyleRefinements(BaseModel):
    """User adjustments applied on top of the reference style."""

    background_color_adjustment: str | None = None
    lighting_intensity: LightingIntensity | None = None
    face_replacement: bool = True
