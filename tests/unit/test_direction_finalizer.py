"""Unit tests for merging the direction draft with the selected concept."""

from __future__ import annotations

from typing import Any

from app.agents.direction_finalizer import (
    DirectionDraft,
    DirectionFinalizerAgent,
    DirectionFinalizerInput,
    merge_direction,
)


def _draft(**overrides: Any) -> DirectionDraft:
    payload: dict[str, Any] = {
        "platform_recommendation": "Instagram Story",
        "location": "Sunlit loft",
        "environment": "Indoor",
        "camera_angle": "Eye-level",
        "lighting": "Natural Sunlight",
        "model_type": "Editorial model",
        "model_count": 2,
        "pose_guidance": "Hand raised to the ear",
        "composition_approach": "Rule of thirds",
        "aspect_ratio": "9:16",
        "expression_guidance": "Soft smile",
    }
    payload.update(overrides)
    return DirectionDraft(**payload)


def test_concept_fields_win_over_draft(analysis, make_concept) -> None:
    concept = make_concept(presentation_style="Floating", mood="Mysterious", ad_type="Teaser")
    direction = merge_direction(_draft(), DirectionFinalizerInput(concept=concept, analysis=analysis))

    assert direction.presentation_style == "Floating"
    assert direction.mood == "Mysterious"
    assert direction.ad_type == "Teaser"
    assert direction.model_required is False


def test_model_fields_cleared_without_model(analysis, make_concept) -> None:
    direction = merge_direction(
        _draft(),
        DirectionFinalizerInput(concept=make_concept(model_required=False), analysis=analysis),
    )

    assert direction.model_count == 0
    assert direction.model_type is None
    assert direction.pose_guidance is None
    assert direction.expression_guidance is None


def test_model_count_at_least_one_with_model(analysis, make_concept) -> None:
    concept = make_concept(model_required=True, model_style="Street casting", presentation_style="On-Model")
    direction = merge_direction(
        _draft(model_count=0, model_type=None),
        DirectionFinalizerInput(concept=concept, analysis=analysis),
    )

    assert direction.model_count == 1
    assert direction.model_type == "Street casting"


def test_platform_override_wins(analysis, make_concept) -> None:
    direction = merge_direction(
        _draft(),
        DirectionFinalizerInput(concept=make_concept(), analysis=analysis, platform="Pinterest Pin"),
    )
    assert direction.platform_recommendation == "Pinterest Pin"


def test_luxury_products_get_guidelines_and_identity(make_analysis, make_concept) -> None:
    analysis = make_analysis(brand_tier="luxury", product_category="jewelry")
    direction = merge_direction(
        _draft(),
        DirectionFinalizerInput(concept=make_concept(mood="Calm"), analysis=analysis),
    )

    assert direction.luxury_visual_guidelines is not None
    assert direction.luxury_visual_guidelines.lighting_type == "Natural Diffused"
    assert direction.visual_identity == "Jewelry Luxury"


def test_non_luxury_products_drop_guidelines(analysis, make_concept) -> None:
    direction = merge_direction(
        _draft(
            luxury_visual_guidelines={
                "lighting_type": "Backlit Glow",
                "composition_depth": "Flat",
                "texture_priority": "Matte",
                "color_emotion": "Neutral Calm",
                "space_usage": "Whitespace-driven",
            }
        ),
        DirectionFinalizerInput(concept=make_concept(), analysis=analysis),
    )
    assert direction.luxury_visual_guidelines is None


def test_prompt_includes_preset_and_luxury_dna(make_analysis, make_concept) -> None:
    agent = DirectionFinalizerAgent(model_override="test")
    prompt = agent._build_prompt(
        DirectionFinalizerInput(
            concept=make_concept(),
            analysis=make_analysis(brand_tier="premium", product_category="watches"),
            preset_id="dark-moody",
        )
    )

    assert "## Photography preset to follow" in prompt
    assert "Dark & Moody" in prompt
    assert "## Luxury visual DNA" in prompt
    assert "Heritage, Power, Precision" in prompt
