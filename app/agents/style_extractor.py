"""Agent for extracting a transferable visual style from a reference photograph."""

from __future__ import annotations

import logging

from pydantic import BaseModel
from pydantic_ai import BinaryContent

from app.agents.base_agent import BaseAgent
from app.schemas.product import ImagePayload
from app.schemas.style import StyleAnalysis

logger = logging.getLogger(__name__)


class StyleExtractorInput(BaseModel):
    """Input payload for reference style extraction."""

    reference_image: ImagePayload
    notes: str | None = None


class StyleExtractorAgent(BaseAgent[StyleExtractorInput, StyleAnalysis]):
    """Describe a reference image's style so it can be reapplied to a product."""

    model_tier = "fast"
    temperature = 0.2

    @property
    def system_prompt(self) -> str:
        return """You are a visual analyst for fashion and product photography.

Describe the attached reference photograph so its look can be recreated around a different product:
- style: overall genre, e.g. "minimalist luxury" or "bright lifestyle"
- pose: the subject's pose, or "none" when no person is present
- composition: framing and placement
- background: surfaces, setting and depth
- lighting: direction, softness and colour of the light in plain words, without naming equipment
- aesthetic: the emotional read of the image
- color_palette: the dominant colours

Be specific and transferable. Do not describe the products shown in the reference.
"""

    @property
    def output_type(self) -> type[StyleAnalysis]:
        return StyleAnalysis

    def _build_prompt(self, input_data: StyleExtractorInput) -> str:
        notes = input_data.notes.strip() if input_data.notes else ""
        logger.info("Building style extraction prompt", extra={"has_notes": bool(notes)})
        prompt = "Analyze the style of the attached reference image."
        if notes:
            prompt += f"\n\n## What the user wants to borrow\n{notes}"
        return prompt

    def _build_attachments(self, input_data: StyleExtractorInput) -> list[BinaryContent]:
        image = input_data.reference_image
        return [BinaryContent(data=image.data, media_type=image.mime_type)]
