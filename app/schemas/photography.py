"""Technical photography specification schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DepthOfField = Literal["Shallow", "Moderate", "Deep"]


class LensSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    focal_length_mm: int
    aperture: float = Field(description="f-number")
    lens_type: str
    depth_of_field: DepthOfField


class ExposureSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    iso: int
    shutter_speed: str
    white_balance_kelvin: int


class CameraSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    body_type: str
    model: str
    lens: LensSpec
    exposure: ExposureSpec


class LightSource(BaseModel):
    """One named light in a rig."""

    model_config = ConfigDict(frozen=True)

    role: str
    modifier: str
    position: str
    intensity_percent: int = Field(ge=0, le=100)
    color: str | None = None


class LightingSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    setup_type: str
    lights: tuple[LightSource, ...]


class CompositionSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    camera_angle: str
    framing: str
    aspect_ratio: str


class BackgroundSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    background_type: str
    finish: str
    material: str | None = None
    description: str


class AestheticSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    style: str
    tone: str
    contrast: str
    shadow_depth: str
    highlight_rolloff: str


class PhotographerSpec(BaseModel):
    """Deterministic camera, lighting and composition parameters for one shot."""

    model_config = ConfigDict(frozen=True)

    camera: CameraSpec
    lighting: LightingSpec
    composition: CompositionSpec
    background: BackgroundSpec
    aesthetic: AestheticSpec
    realism_level: str = "Photorealistic"
    skin_texture: str | None = None
    hair_detail: str | None = None
    luxury_considerations: tuple[str, ...] = ()


class ArtisticPrompt(BaseModel):
    """Single-paragraph natural-language instruction for image synthesis."""

    model_config = ConfigDict(frozen=True)

    text: str
