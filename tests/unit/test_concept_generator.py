"""Unit tests for concept generation and de-duplication."""

from __future__ import annotations

from typing import Any

import pytest

from app.agents.concept_generator import (
    ConceptGeneratorAgent,
    ConceptGeneratorInput,
    concept_key,
    deduplicate_concepts,
)
from app.core.exceptions import InputValidationError, ParseError
from app.schemas.creative import ConceptBatch, UserPreferences


class _FakeUsage:
    request_tokens = 1
    response_tokens = 1
    total_tokens = 2


class _FakeResult:
    def __init__(self, output: Any) -> None:
        self.output = output

    def usage(self) -> _FakeUsage:
        return _FakeUsage()


class _FakeAgent:
    def __init__(self, output: Any) -> None:
        self.output = output
        self.prompts: list[Any] = []

    async def run(self, prompt: Any, **kwargs: Any) -> _FakeResult:
        self.prompts.append(prompt)
        return _FakeResult(self.output)


def test_near_duplicate_angles_are_dropped(make_concept) -> None:
    concepts = [
        make_concept(id="a", ad_type="Product Hero", mood="Calm", aesthetic="Minimal editorial"),
        make_concept(id="b", ad_type="product  hero", mood="Calm", aesthetic="minimal Editorial"),
        make_concept(id="c", ad_type="Lifestyle", mood="Joyful", aesthetic="Sunlit candid"),
    ]

    distinct = deduplicate_concepts(concepts)

    assert [concept.id for concept in distinct] == ["a", "c"]
    keys = [concept_key(concept) for concept in distinct]
    assert len(keys) == len(set(keys))


def test_missing_and_repeated_ids_are_renumbered(make_concept) -> None:
    concepts = [
        make_concept(id="", ad_type="Product Hero"),
        make_concept(id="hero", ad_type="Lifestyle"),
        make_concept(id="hero", ad_type="Editorial"),
    ]

    ids = [concept.id for concept in deduplicate_concepts(concepts)]

    assert ids == ["concept-1", "hero", "concept-3"]


def test_at_most_four_concepts_are_kept(make_concept) -> None:
    concepts = [make_concept(id=f"c{i}", ad_type=f"Angle {i}") for i in range(6)]
    assert len(deduplicate_concepts(concepts)) == 4


def test_preferences_only_constrain_decided_fields() -> None:
    preferences = UserPreferences(model_preference="product-only")
    assert preferences.constraints() == {"model_preference": "product-only"}
    assert UserPreferences().constraints() == {}


def test_batch_select_unknown_id_raises(make_concept) -> None:
    batch = ConceptBatch(
        concepts=[make_concept(id="a"), make_concept(id="b", ad_type="Lifestyle")]
    )

    assert batch.select("b").ad_type == "Lifestyle"
    with pytest.raises(InputValidationError):
        batch.select("missing")


@pytest.mark.asyncio
async def test_agent_rejects_batches_with_fewer_than_two_distinct_concepts(
    analysis, make_concept
) -> None:
    agent = ConceptGeneratorAgent(model_override="test")
    agent._agent = _FakeAgent(  # type: ignore[assignment]
        ConceptBatch(concepts=[make_concept(id="a"), make_concept(id="b")])
    )

    with pytest.raises(ParseError):
        await agent.run(ConceptGeneratorInput(analysis=analysis))


@pytest.mark.asyncio
async def test_agent_prompt_lists_only_user_constraints(analysis, make_concept) -> None:
    fake = _FakeAgent(
        ConceptBatch(
            concepts=[
                make_concept(id="a"),
                make_concept(id="b", ad_type="Lifestyle", mood="Joyful"),
            ]
        )
    )
    agent = ConceptGeneratorAgent(model_override="test")
    agent._agent = fake  # type: ignore[assignment]

    batch = await agent.run(
        ConceptGeneratorInput(
            analysis=analysis,
            platform="Instagram Story",
            preferences=UserPreferences(aesthetic_style="minimalist"),
        )
    )

    assert len(batch.concepts) == 2
    prompt = fake.prompts[0]
    assert "- aesthetic style: minimalist" in prompt
    assert "model preference" not in prompt
    assert "Instagram Story" in prompt
