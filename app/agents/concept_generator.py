"""Agent for proposing distinct creative concepts before any billed work."""

from __future__ import annotations

import json
import logging

from pydantic import BaseModel

from app.agents.base_agent import BaseAgent
from app.core.exceptions import ParseError
from app.schemas.creative import Concept, ConceptBatch, UserPreferences
from app.schemas.product import ProductAnalysis

logger = logging.getLogger(__name__)

MIN_CONCEPTS = 2
MAX_CONCEPTS = 4


class ConceptGeneratorInput(BaseModel):
    """Input payload for concept generation."""

    analysis: ProductAnalysis
    platform: str | None = None
    preferences: UserPreferences | None = None


def concept_key(concept: Concept) -> tuple[str, str, str]:
    """Normalized strategic angle used to detect near-duplicate concepts."""
    return (
        " ".join(concept.ad_type.lower().split()),
        concept.mood.lower(),
        " ".join(concept.aesthetic.lower().split()),
    )


def deduplicate_concepts(concepts: list[Concept]) -> list[Concept]:
    """Drop concepts whose angle repeats an earlier one, then assign missing ids."""
    seen: set[tuple[str, str, str]] = set()
    distinct: list[Concept] = []
    for concept in concepts:
        key = concept_key(concept)
        if key in seen:
            continue
        seen.add(key)
        distinct.append(concept)

    distinct = distinct[:MAX_CONCEPTS]
    used_ids: set[str] = set()
    numbered: list[Concept] = []
    for index, concept in enumerate(distinct, start=1):
        concept_id = concept.id.strip()
        if not concept_id or concept_id in used_ids:
            concept_id = f"concept-{index}"
        used_ids.add(concept_id)
        numbered.append(concept.model_copy(update={"id": concept_id}))
    return numbered


class ConceptGeneratorAgent(BaseAgent[ConceptGeneratorInput, ConceptBatch]):
    """Generate 2-4 creative concepts, each a different strategic angle."""

    model_tier = "standard"
    temperature = 0.9

    @property
    def system_prompt(self) -> str:
        return """You are a world-class creative director planning a product ad campaign.

Propose between 2 and 4 creative concepts for one product photograph.

Diversity rules:
1. Every concept must take a different strategic angle. Vary the ad type
   (product hero, lifestyle, editorial, social proof, detail study...), the mood and the aesthetic.
2. Never return two concepts that differ only in wording.
3. Mix with-model and product-only concepts unless the brief constrains it.

Each concept needs:
- title and a one-sentence description of the idea
- ad_type, model_required and, when a model is required, model_style
- presentation_style: Flat Lay, On-Model, Floating, Abstract, In-Context or Environmental
- mood: Energetic, Calm, Luxurious, Mysterious, Joyful or Nostalgic
- aesthetic: a short style label
- visual_description: what the final photograph shows, product first
"""

    @property
    def output_type(self) -> type[ConceptBatch]:
        return ConceptBatch

    def _build_prompt(self, input_data: ConceptGeneratorInput) -> str:
        analysis = input_data.analysis
        constraints = input_data.preferences.constraints() if input_data.preferences else {}
        logger.info(
            "Building concept prompt",
            extra={
                "product_type": analysis.product_type,
                "platform": input_data.platform,
                "constraints": sorted(constraints),
            },
        )

        constraint_lines = "\n".join(
            f"- {key.replace('_', ' ')}: {value}" for key, value in constraints.items()
        ) or "- None. Choose freely."

        return f"""Create distinct creative concepts for this product.

## Product analysis
{json.dumps(analysis.model_dump(mode="json"), indent=2)}

## Target platform
{input_data.platform or "Choose the best fit per concept"}

## User constraints (must be respected)
{constraint_lines}

Return valid JSON matching the output schema exactly.
"""

    def _postprocess(
        self,
        output: ConceptBatch,
        input_data: ConceptGeneratorInput,
    ) -> ConceptBatch:
        distinct = deduplicate_concepts(output.concepts)
        dropped = len(output.concepts) - len(distinct)
        if dropped:
            logger.info(
                "Dropped duplicate concepts",
                extra={"returned": len(output.concepts), "kept": len(distinct)},
            )
        if len(distinct) < MIN_CONCEPTS:
            raise ParseError(
                "Concept generator did not return enough distinct concepts",
                {"returned": len(output.concepts), "distinct": len(distinct)},
            )
        return ConceptBatch(concepts=distinct)
