"""Agent for extracting a structured product analysis from an image and/or text."""

from __future__ import annotations

import logging

from pydantic import BaseModel
from pydantic_ai import BinaryContent

from app.agents.base_agent import BaseAgent
from app.schemas.product import ProductAnalysis, ProductInput
from app.services.luxury_visual import is_luxury_aligned, visual_identity
from app.services.presets import ALL_PRESETS, filter_known_preset_ids

logger = logging.getLogger(__name__)


class ProductAnalystInput(BaseModel):
    """Input payload for product analysis."""

    product: ProductInput


class ProductAnalystAgent(BaseAgent[ProductAnalystInput, ProductAnalysis]):
    """Synthesize image and text evidence into a ProductAnalysis."""

    model_tier = "standard"
    temperature = 0.3

    @property
    def system_prompt(self) -> str:
        preset_ids = ", ".join(preset.id for preset in ALL_PRESETS)
        return f"""You are an expert product analyst for e-commerce and advertising.

Analyze the product input (image, text description, or both) and return a structured analysis.

Evidence rules:
1. Image and text are equally authoritative. Text carries intent, positioning and audience.
   The image carries physical reality: shape, colour, material, finish.
2. When both are present, synthesize them. When they conflict, keep what the text states
   about intent and what the image shows about appearance.
3. Never invent attributes that neither source supports. Leave optional fields empty instead.

Required fields:
- product_category: broad category (jewelry, watches, fashion, beauty, tech, food, home goods...)
- product_type: the specific product
- product_attributes: size, color, material and notable features
- target_audience: demographics and psychographics
- key_selling_points: concrete benefits and differentiators, most important first

Brand tier (brand_tier):
- luxury: ultra-premium, exclusive language, heritage, rare materials
- premium: high quality, aspirational
- mid-tier: quality focus, accessible pricing
- mass-market: broad appeal, value messaging
- undetermined: not enough signal
Weigh pricing and exclusivity language, category priors (jewelry and watches skew luxury)
and visual cues such as presentation and materials. List the cues you relied on in
luxury_indicators. For luxury or premium products, suggest visual_identity as
"<Category> Luxury" or "<Category> Premium".

Also recommend a mood, an aesthetic, and up to 3 photography presets, best first, chosen from:
{preset_ids}
"""

    @property
    def output_type(self) -> type[ProductAnalysis]:
        return ProductAnalysis

    def _build_prompt(self, input_data: ProductAnalystInput) -> str:
        product = input_data.product
        if product.has_image and product.has_text:
            mode = "image_and_text"
            header = (
                "Analyze this product using BOTH the attached image and the description below. "
                "Combine the strengths of each source."
            )
        elif product.has_image:
            mode = "image_only"
            header = (
                "Analyze the product in the attached image. Infer audience and positioning "
                "from what is visible."
            )
        else:
            mode = "text_only"
            header = (
                "Analyze the product from the description below. Infer likely physical "
                "attributes only where the description supports them."
            )

        logger.info("Building product analysis prompt", extra={"input_mode": mode})

        description = f"\n\n## Product description\n{product.text}" if product.has_text else ""
        return f"{header}{description}\n\nReturn valid JSON matching the output schema exactly."

    def _build_attachments(self, input_data: ProductAnalystInput) -> list[BinaryContent]:
        image = input_data.product.image
        if image is None:
            return []
        return [BinaryContent(data=image.data, media_type=image.mime_type)]

    def _postprocess(
        self,
        output: ProductAnalysis,
        input_data: ProductAnalystInput,
    ) -> ProductAnalysis:
        updates: dict[str, object] = {
            "recommended_presets": filter_known_preset_ids(output.recommended_presets),
        }
        if is_luxury_aligned(output) and not output.visual_identity:
            updates["visual_identity"] = visual_identity(output)
        return output.model_copy(update=updates)
