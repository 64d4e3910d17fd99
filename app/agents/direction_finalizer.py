"""Agent that turns the selected concept into a finalized creative direction."""

from __future__ import annotations

import json
import logging

from pydantic import BaseModel, ConfigDict, Field

from app.agents.base_agent import BaseAgent
from app.schemas.creative import (
    AspectRatio,
    CameraAngle,
    Concept,
    CreativeDirection,
    Environment,
    LightingStyle,
    LuxuryVisualGuidelines,
)
from app.schemas.product import ProductAnalysis
from app.services.luxury_visual import (
    describe_category_dna,
    is_luxury_aligned,
    recommend_guidelines,
    visual_identity,
)
from app.services.presets import get_preset

logger = logging.getLogger(__name__)


class DirectionFinalizerInput(BaseModel):
    """Input payload for direction finalization."""

    concept: Concept
    analysis: ProductAnalysis
    platform: str | None = None
    preset_id: str | None = None


class DirectionDraft(BaseModel):
    """Fields the model decides. Concept-owned fields are merged in afterwards."""

    model_config = ConfigDict(protected_namespaces=())

    platform_recommendation: str = Field(description="e.g. 'Instagram Post' or 'Instagram Story'")
    location: str
    environment: Environment
    camera_angle: CameraAngle
    lighting: LightingStyle
    model_type: str | None = None
    model_count: int = Field(default=0, ge=0, le=4)
    pose_guidance: str | None = None
    product_interaction: str | None = Field(
        default=None,
        description="How a model holds, wears or relates to the product",
    )
    color_palette: list[str] = Field(default_factory=list)
    composition_approach: str
    aspect_ratio: AspectRatio = "1:1"
    visual_identity: str | None = None
    luxury_visual_guidelines: LuxuryVisualGuidelines | None = None
    supporting_props: list[str] = Field(default_factory=list)
    expression_guidance: str | None = None


def merge_direction(draft: DirectionDraft, input_data: DirectionFinalizerInput) -> CreativeDirection:
    """Combine the model's draft with the concept, which always wins on its own fields."""
    concept = input_data.concept
    analysis = input_data.analysis

    luxury_guidelines = draft.luxury_visual_guidelines
    identity = draft.visual_identity
    if is_luxury_aligned(analysis):
        if luxury_guidelines is None:
            luxury_guidelines = recommend_guidelines(analysis, concept.mood, concept.aesthetic)
        identity = identity or visual_identity(analysis)
    else:
        luxury_guidelines = None

    model_required = concept.model_required
    return CreativeDirection(
        ad_type=concept.ad_type,
        platform_recommendation=input_data.platform or draft.platform_recommendation,
        location=draft.location,
        environment=draft.environment,
        camera_angle=draft.camera_angle,
        lighting=draft.lighting,
        model_required=model_required,
        model_type=(draft.model_type or concept.model_style) if model_required else None,
        model_count=max(1, draft.model_count) if model_required else 0,
        pose_guidance=draft.pose_guidance if model_required else None,
        product_interaction=draft.product_interaction if model_required else None,
        presentation_style=concept.presentation_style,
        mood=concept.mood,
        color_palette=draft.color_palette,
        composition_approach=draft.composition_approach,
        aspect_ratio=draft.aspect_ratio,
        visual_identity=identity,
        luxury_visual_guidelines=luxury_guidelines,
        supporting_props=draft.supporting_props,
        expression_guidance=draft.expression_guidance if model_required else None,
    )


class DirectionFinalizerAgent(BaseAgent[DirectionFinalizerInput, DirectionDraft]):
    """Resolve every decision the photography rules need from one concept."""

    model_tier = "reasoning"
    temperature = 0.4

    @property
    def system_prompt(self) -> str:
        return """You are a creative director finalizing the brief for one product photograph.

The concept is already chosen. Resolve the remaining decisions so a photographer can shoot it:
1. platform_recommendation and the matching aspect_ratio (1:1, 4:5, 9:16, 16:9 or 4:3)
2. location (a concrete place) and environment (one of the allowed values)
3. camera_angle and lighting (allowed values only)
4. When a model is required: model_type, model_count, pose_guidance, product_interaction
   and expression_guidance. The product must stay visible and dominant.
5. color_palette (3-5 colours), composition_approach and optional supporting_props
6. For luxury or premium products: visual_identity and luxury_visual_guidelines

Do not change the concept's ad type, mood, presentation style or whether a model appears.
"""

    @property
    def output_type(self) -> type[DirectionDraft]:
        return DirectionDraft

    def _build_prompt(self, input_data: DirectionFinalizerInput) -> str:
        analysis = input_data.analysis
        sections = [
            "Finalize the creative direction for this concept.",
            f"## Selected concept\n{json.dumps(input_data.concept.model_dump(mode='json'), indent=2)}",
            f"## Product analysis\n{json.dumps(analysis.model_dump(mode='json'), indent=2)}",
        ]
        if input_data.platform:
            sections.append(f"## Platform (fixed by the user)\n{input_data.platform}")

        preset = get_preset(input_data.preset_id)
        if preset is not None:
            sections.append(f"## Photography preset to follow\n{preset.as_prompt_context()}")

        if is_luxury_aligned(analysis):
            sections.append(f"## Luxury visual DNA\n{describe_category_dna(analysis)}")

        logger.info(
            "Building direction prompt",
            extra={
                "concept_id": input_data.concept.id,
                "preset_id": preset.id if preset else None,
                "luxury": is_luxury_aligned(analysis),
            },
        )
        sections.append("Return valid JSON matching the output schema exactly.")
        return "\n\n".join(sections)

    async def finalize(self, input_data: DirectionFinalizerInput) -> CreativeDirection:
        draft = await self.run(input_data, context={"concept_id": input_data.concept.id})
        return merge_direction(draft, input_data)
