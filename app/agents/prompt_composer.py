"""Agent that rewrites a technical shot plan into one artistic paragraph."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from app.agents.base_agent import BaseAgent
from app.schemas.creative import CreativeDirection
from app.schemas.photography import ArtisticPrompt, PhotographerSpec
from app.schemas.product import ProductAnalysis
from app.schemas.style import StyleAnalysis, StyleRefinements
from app.services.terminology import substitute_equipment_terms

logger = logging.getLogger(__name__)

ANTI_ARTIFACT_GUIDANCE = (
    "The person looks like a real photographed human: natural skin texture with visible "
    "pores and subtle imperfections, correctly formed hands with exactly five fingers each, "
    "natural proportions, and a relaxed, slightly asymmetric pose rather than a stiff or "
    "mirrored one."
)

LIGHTING_INTENSITY_PHRASES: dict[str, str] = {
    "subtle": "Keep the light soft and understated, a touch gentler than the reference.",
    "moderate": "Match the light level and contrast of the reference.",
    "strong": "Push the light bolder and more contrasty than the reference.",
}


class PromptComposerInput(BaseModel):
    """Input payload for prompt composition."""

    analysis: ProductAnalysis
    direction: CreativeDirection
    spec: PhotographerSpec


class ComposedPrompt(BaseModel):
    """Free-text paragraph returned by the composer model."""

    text: str = Field(description="One flowing paragraph, no headings or lists")


def single_paragraph(text: str) -> str:
    return " ".join(text.split())


def product_integrity_clause(analysis: ProductAnalysis, direction: CreativeDirection) -> str:
    """Opening sentence that fixes the product's identity and placement first."""
    product = analysis.product_type
    attributes = analysis.product_attributes
    details = ", ".join(
        value for value in (attributes.color, attributes.material) if value
    )
    identity = f"{product} ({details})" if details else product
    if direction.model_required:
        placement = (
            f"clearly visible and prominent, held, worn or displayed by the model, "
            f"never hidden, cropped or overshadowed"
        )
    else:
        placement = "the sole focal point, centered in attention and sharply in focus"
    return (
        f"A {direction.aspect_ratio} photograph of the {identity}, reproduced exactly as in the "
        f"reference with its original shape, colours, materials, branding and text unchanged, "
        f"{placement}."
    )


def build_shot_plan(
    analysis: ProductAnalysis,
    direction: CreativeDirection,
    spec: PhotographerSpec,
) -> str:
    """Render the technical plan the composer model rewrites into prose."""
    lens = spec.camera.lens
    exposure = spec.camera.exposure
    lights = "; ".join(
        f"{light.role.lower()} light from {light.position.lower()} via {light.modifier.lower()} "
        f"at {light.intensity_percent}%" + (f", {light.color.lower()}" if light.color else "")
        for light in spec.lighting.lights
    )
    lines = [
        f"Product: {analysis.product_type} ({analysis.product_category}). "
        f"Selling points: {', '.join(analysis.key_selling_points)}. "
        f"Audience: {analysis.target_audience}.",
        f"Camera: {spec.camera.model}, {lens.focal_length_mm}mm {lens.lens_type.lower()} at "
        f"f/{lens.aperture:g}, {lens.depth_of_field.lower()} depth of field, ISO {exposure.iso}, "
        f"{exposure.shutter_speed}, {exposure.white_balance_kelvin}K.",
        f"Lighting: {spec.lighting.setup_type} ({lights}) for a {direction.mood.lower()} mood.",
        f"Aesthetic: {spec.aesthetic.style}, {spec.aesthetic.tone.lower()} tones, "
        f"{spec.aesthetic.contrast.lower()} contrast, {spec.aesthetic.shadow_depth.lower()} "
        f"shadows, {spec.aesthetic.highlight_rolloff.lower()} highlights.",
        f"Composition: {spec.composition.camera_angle}, {spec.composition.framing.lower()}. "
        f"Presentation: {direction.presentation_style}. Approach: {direction.composition_approach}.",
        f"Setting: {direction.location}. Background: {spec.background.description}"
        + (f", {spec.background.material.lower()}" if spec.background.material else "")
        + f", {spec.background.finish.lower()} finish.",
    ]
    if direction.color_palette:
        lines.append(f"Palette: {', '.join(direction.color_palette)}.")
    if direction.supporting_props:
        lines.append(f"Props: {', '.join(direction.supporting_props)}.")
    if direction.model_required:
        model_line = f"Model: {direction.model_type or 'professional model'}"
        if direction.model_count > 1:
            model_line += f" (x{direction.model_count})"
        if direction.pose_guidance:
            model_line += f", {direction.pose_guidance}"
        if direction.product_interaction:
            model_line += f". Interaction: {direction.product_interaction}"
        if direction.expression_guidance:
            model_line += f". Expression: {direction.expression_guidance}"
        lines.append(f"{model_line}. Skin: {spec.skin_texture}. Hair: {spec.hair_detail}.")
    if spec.luxury_considerations:
        lines.append(f"Luxury cues: {', '.join(spec.luxury_considerations)}.")
    lines.append(f"Realism: {spec.realism_level}. Platform: {direction.platform_recommendation}.")
    return substitute_equipment_terms("\n".join(lines))


def assemble_prompt(opening: str, body: str, *, model_present: bool) -> ArtisticPrompt:
    """Join the fixed opening, the model prose and optional realism guidance."""
    parts = [opening, body]
    if model_present:
        parts.append(ANTI_ARTIFACT_GUIDANCE)
    text = single_paragraph(" ".join(part.strip() for part in parts if part and part.strip()))
    return ArtisticPrompt(text=substitute_equipment_terms(text))


def compose_style_transfer_prompt(
    style: StyleAnalysis,
    refinements: StyleRefinements,
    notes: str | None = None,
) -> ArtisticPrompt:
    """Deterministic prompt for reference-image style transfer."""
    sentences = [
        "Using the first image as the product and the second image as the style reference, "
        "create a new photograph of the product reproduced exactly, with its shape, colours, "
        "materials, branding and text unchanged and clearly visible.",
        f"Adopt the reference's {style.style} style and {style.aesthetic} aesthetic, "
        f"its composition ({style.composition}), background ({style.background}) and "
        f"lighting ({style.lighting}).",
    ]
    if style.color_palette:
        sentences.append(f"Keep the palette close to {', '.join(style.color_palette)}.")
    if style.pose and style.pose.strip().lower() not in {"none", "n/a", "no model"}:
        sentences.append(f"Match the pose: {style.pose}.")
        if refinements.face_replacement:
            sentences.append(
                "Replace the person's face with a different, natural-looking face so the "
                "reference subject is not reproduced."
            )
        else:
            sentences.append("Keep the person's overall look consistent with the reference.")
        sentences.append(ANTI_ARTIFACT_GUIDANCE)
    if refinements.lighting_intensity:
        sentences.append(LIGHTING_INTENSITY_PHRASES[refinements.lighting_intensity])
    if refinements.background_color_adjustment:
        sentences.append(
            f"Shift the background colour toward {refinements.background_color_adjustment}."
        )
    if notes and notes.strip():
        sentences.append(notes.strip())
    return ArtisticPrompt(text=substitute_equipment_terms(single_paragraph(" ".join(sentences))))


class PromptComposerAgent(BaseAgent[PromptComposerInput, ComposedPrompt]):
    """Rewrite a shot plan as natural language the image model renders faithfully."""

    model_tier = "fast"
    temperature = 0.7

    @property
    def system_prompt(self) -> str:
        return """You are a photographer describing a finished photograph to a painter.

Rewrite the shot plan as ONE flowing paragraph of vivid, concrete visual description.

Rules:
1. Describe what the light does (its direction, softness, colour and the shadows it leaves),
   never the equipment that makes it. Do not name lighting gear.
2. Keep every factual detail of the product exactly as given. Never restyle the product.
3. Mention camera feel through its visible effect (background blur, sharpness, perspective).
4. No headings, lists, markdown or quotation marks. One paragraph only.
5. Do not start by restating the product's identity; the opening sentence is written for you.
"""

    @property
    def output_type(self) -> type[ComposedPrompt]:
        return ComposedPrompt

    def _build_prompt(self, input_data: PromptComposerInput) -> str:
        plan = build_shot_plan(input_data.analysis, input_data.direction, input_data.spec)
        return f"## Shot plan\n{plan}\n\nWrite the paragraph."

    def _postprocess(self, output: ComposedPrompt, input_data: PromptComposerInput) -> ComposedPrompt:
        return ComposedPrompt(text=substitute_equipment_terms(single_paragraph(output.text)))

    async def compose(
        self,
        analysis: ProductAnalysis,
        direction: CreativeDirection,
        spec: PhotographerSpec,
    ) -> ArtisticPrompt:
        composed = await self.run(
            PromptComposerInput(analysis=analysis, direction=direction, spec=spec)
        )
        prompt = assemble_prompt(
            product_integrity_clause(analysis, direction),
            composed.text,
            model_present=direction.model_required,
        )
        logger.info(
            "Artistic prompt composed",
            extra={"prompt_length": len(prompt.text), "model_present": direction.model_required},
        )
        return prompt
