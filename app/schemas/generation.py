"""Generation request/response schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.creative import AspectRatio, Concept, CreativeDirection, UserPreferences
from app.schemas.photography import PhotographerSpec
from app.schemas.product import ImagePayload, ProductAnalysis
from app.schemas.style import StyleAnalysis, StyleRefinements

QualityTier = Literal["standard", "pro"]
Resolution = Literal["1K", "2K", "4K"]


class ProgressEvent(BaseModel):
    """One progress notification: a stage label and completion percent."""

    model_config = ConfigDict(frozen=True)

    stage: str
    percent: int = Field(ge=0, le=100)


class GeneratedAsset(BaseModel):
    """A synthesized image and the parameters that produced it."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    id: str
    image: ImagePayload
    prompt: str
    model_name: str
    credit_cost: int
    quality_tier: QualityTier
    resolution: Resolution
    aspect_ratio: str


class ImageUpload(BaseModel):
    """Base64 image as sent over the wire."""

    base64: str = Field(description="Base64 image data, optionally as a data: URL")
    mime_type: str | None = None


class AnalyzeRequest(BaseModel):
    image: ImageUpload | None = None
    text: str | None = None


class PresetSummary(BaseModel):
    id: str
    name: str
    description: str
    best_for: list[str] = Field(default_factory=list)


class AnalyzeResponse(BaseModel):
    analysis: ProductAnalysis
    recommended_presets: list[PresetSummary] = Field(default_factory=list)
    progress: list[ProgressEvent] = Field(default_factory=list)


class ConceptsRequest(BaseModel):
    image: ImageUpload | None = None
    text: str | None = None
    analysis: ProductAnalysis | None = Field(
        default=None,
        description="Previously returned analysis. Skips re-analysis when supplied.",
    )
    platform: str | None = None
    preferences: UserPreferences | None = None


class ConceptsResponse(BaseModel):
    analysis: ProductAnalysis
    concepts: list[Concept]
    progress: list[ProgressEvent] = Field(default_factory=list)


class OrchestrateRequest(BaseModel):
    image: ImageUpload | None = None
    analysis: ProductAnalysis
    concept: Concept
    platform: str | None = None
    preset_id: str | None = None
    aspect_ratio: AspectRatio | None = None
    quality_tier: QualityTier = "standard"
    resolution: Resolution = "1K"
    task_id: str | None = None


class DirectionRequest(BaseModel):
    analysis: ProductAnalysis
    concept: Concept
    platform: str | None = None
    preset_id: str | None = None
    aspect_ratio: AspectRatio | None = None


class DirectionResponse(BaseModel):
    direction: CreativeDirection
    photographer_spec: PhotographerSpec
    progress: list[ProgressEvent] = Field(default_factory=list)


class GeneratedAssetResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    id: str
    image_base64: str
    mime_type: str
    prompt: str
    model_name: str
    credit_cost: int
    quality_tier: QualityTier
    resolution: Resolution
    aspect_ratio: str


class OrchestrateResponse(BaseModel):
    direction: CreativeDirection
    photographer_spec: PhotographerSpec
    prompt: str
    asset: GeneratedAssetResponse
    credits_used: int
    new_balance: int | None = None
    settlement_error: str | None = None
    progress: list[ProgressEvent] = Field(default_factory=list)


class ReferenceAnalyzeRequest(BaseModel):
    reference_image: ImageUpload | None = None
    notes: str | None = None


class ReferenceAnalyzeResponse(BaseModel):
    style_analysis: StyleAnalysis


class ReferenceGenerateRequest(BaseModel):
    product_image: ImageUpload | None = None
    reference_image: ImageUpload | None = None
    style_analysis: StyleAnalysis | None = Field(
        default=None,
        description="Previously extracted style. Extracted from the reference image when omitted.",
    )
    refinements: StyleRefinements = Field(default_factory=StyleRefinements)
    notes: str | None = None
    aspect_ratio: AspectRatio = "1:1"
    quality_tier: QualityTier = "standard"
    resolution: Resolution = "1K"
    task_id: str | None = None


class ReferenceGenerateResponse(BaseModel):
    style_analysis: StyleAnalysis
    prompt: str
    asset: GeneratedAssetResponse
    credits_used: int
    new_balance: int | None = None
    settlement_error: str | None = None
    progress: list[ProgressEvent] = Field(default_factory=list)
