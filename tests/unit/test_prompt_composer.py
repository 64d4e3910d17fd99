"""Unit tests for artistic prompt composition."""

from __future__ import annotations

from typing import Any, get_args

import pytest

from app.agents.prompt_composer import (
    ANTI_ARTIFACT_GUIDANCE,
    ComposedPrompt,
    PromptComposerAgent,
    assemble_prompt,
    build_shot_plan,
    compose_style_transfer_prompt,
    product_integrity_clause,
)
from app.schemas.creative import LightingStyle
from app.schemas.style import StyleAnalysis, StyleRefinements
from app.services.photography_rules import build_photographer_spec
from app.services.terminology import find_equipment_terms


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


def _style(**overrides: Any) -> StyleAnalysis:
    payload: dict[str, Any] = {
        "style": "minimalist luxury",
        "pose": "standing, weight on one hip, hand near the collar",
        "composition": "centered three-quarter length",
        "background": "warm grey seamless backdrop",
        "lighting": "soft light from a softbox camera left",
        "aesthetic": "quiet confidence",
        "color_palette": ["warm grey", "camel"],
    }
    payload.update(overrides)
    return StyleAnalysis(**payload)


def test_shot_plan_never_names_equipment(analysis, make_direction) -> None:
    for lighting in get_args(LightingStyle):
        direction = make_direction(lighting=lighting)
        plan = build_shot_plan(analysis, direction, build_photographer_spec(direction))

        assert find_equipment_terms(plan) == [], plan


def test_integrity_clause_leads_with_the_product(analysis, make_direction) -> None:
    clause = product_integrity_clause(analysis, make_direction(aspect_ratio="4:5"))

    assert clause.startswith("A 4:5 photograph of the gold hoop earrings")
    assert "polished gold" in clause
    assert "sole focal point" in clause


def test_integrity_clause_keeps_product_visible_with_model(analysis, make_direction) -> None:
    clause = product_integrity_clause(
        analysis,
        make_direction(model_required=True, model_count=1, presentation_style="On-Model"),
    )
    assert "clearly visible and prominent" in clause


def test_assemble_prompt_is_one_paragraph_with_realism_guidance() -> None:
    prompt = assemble_prompt(
        "A 1:1 photograph of the earrings.",
        "Soft light falls from a softbox.\n\nThe   background is ivory.",
        model_present=True,
    )

    assert "\n" not in prompt.text
    assert "  " not in prompt.text
    assert prompt.text.startswith("A 1:1 photograph of the earrings.")
    assert ANTI_ARTIFACT_GUIDANCE in prompt.text
    assert find_equipment_terms(prompt.text) == []


def test_assemble_prompt_skips_realism_guidance_without_model() -> None:
    prompt = assemble_prompt("Opening.", "Body.", model_present=False)
    assert prompt.text == "Opening. Body."


def test_style_transfer_prompt_covers_roles_face_and_refinements() -> None:
    prompt = compose_style_transfer_prompt(
        _style(),
        StyleRefinements(
            background_color_adjustment="soft sage green",
            lighting_intensity="strong",
            face_replacement=True,
        ),
        notes="Keep the scarf draped over one shoulder.",
    )

    text = prompt.text
    assert "first image as the product" in text
    assert "second image as the style reference" in text
    assert "Replace the person's face" in text
    assert "bolder and more contrasty" in text
    assert "soft sage green" in text
    assert text.endswith("Keep the scarf draped over one shoulder.")
    assert find_equipment_terms(text) == []
    assert "\n" not in text


def test_style_transfer_prompt_without_person_skips_pose_and_face() -> None:
    prompt = compose_style_transfer_prompt(_style(pose="none"), StyleRefinements())

    assert "Match the pose" not in prompt.text
    assert "face" not in prompt.text
    assert ANTI_ARTIFACT_GUIDANCE not in prompt.text


@pytest.mark.asyncio
async def test_composer_agent_scrubs_terms_and_prepends_opening(analysis, make_direction) -> None:
    agent = PromptComposerAgent(model_override="test")
    fake = _FakeAgent(
        ComposedPrompt(text="The key light rakes across the gold.\nA reflector lifts the shadows.")
    )
    agent._agent = fake  # type: ignore[assignment]

    direction = make_direction()
    prompt = await agent.compose(analysis, direction, build_photographer_spec(direction))

    assert prompt.text.startswith("A 1:1 photograph of the gold hoop earrings")
    assert "The primary light source rakes across the gold" in prompt.text
    assert find_equipment_terms(prompt.text) == []
    assert "## Shot plan" in fake.prompts[0]
