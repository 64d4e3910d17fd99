"""Unit tests for the deterministic photography rule engine."""

from __future__ import annotations

import itertools
from typing import get_args

from app.schemas.creative import (
    CameraAngle,
    Environment,
    LightingStyle,
    LuxuryVisualGuidelines,
    Mood,
    PresentationStyle,
)
from app.services.photography_rules import (
    CAMERA_MODEL,
    ISO_MINIMUM,
    SHUTTER_MOTION_FREEZE,
    background_for,
    build_photographer_spec,
    depth_of_field_for,
    resolve_lens,
)

PRESENTATION_STYLES = get_args(PresentationStyle)
MOODS = get_args(Mood)
CAMERA_ANGLES = get_args(CameraAngle)
LIGHTING_STYLES = get_args(LightingStyle)
ENVIRONMENTS = get_args(Environment)


def test_spec_is_defined_for_every_presentation_mood_and_angle(make_direction) -> None:
    for presentation, mood, angle in itertools.product(PRESENTATION_STYLES, MOODS, CAMERA_ANGLES):
        spec = build_photographer_spec(
            make_direction(presentation_style=presentation, mood=mood, camera_angle=angle)
        )

        assert spec.camera.model == CAMERA_MODEL
        assert spec.camera.lens.focal_length_mm > 0
        assert spec.camera.lens.aperture > 0
        assert spec.lighting.lights
        assert spec.aesthetic.contrast
        assert spec.composition.camera_angle == angle


def test_spec_is_defined_for_every_lighting_and_environment(make_direction) -> None:
    for lighting, environment, mood in itertools.product(LIGHTING_STYLES, ENVIRONMENTS, MOODS):
        spec = build_photographer_spec(
            make_direction(lighting=lighting, environment=environment, mood=mood)
        )

        assert spec.lighting.setup_type
        assert spec.background.background_type
        assert spec.background.description


def test_iso_is_always_the_minimum(make_direction) -> None:
    for presentation, mood in itertools.product(PRESENTATION_STYLES, MOODS):
        spec = build_photographer_spec(make_direction(presentation_style=presentation, mood=mood))
        assert spec.camera.exposure.iso == ISO_MINIMUM


def test_aperture_is_monotone_across_presentation_styles() -> None:
    ordered = ["Abstract", "On-Model", "Flat Lay", "Environmental"]
    for mood, angle in itertools.product(MOODS, CAMERA_ANGLES):
        apertures = [resolve_lens(style, angle, mood).aperture for style in ordered]
        assert apertures == sorted(apertures)
        assert len(set(apertures)) == len(apertures)


def test_flat_lay_calm_gives_deep_focus_and_low_contrast(make_direction) -> None:
    spec = build_photographer_spec(make_direction(presentation_style="Flat Lay", mood="Calm"))

    assert spec.camera.lens.depth_of_field == "Deep"
    assert spec.aesthetic.contrast == "Low"
    assert spec.composition.framing.startswith("Top-down")


def test_mood_biases_aperture_when_presentation_is_open() -> None:
    assert resolve_lens("Floating", "Eye-level", "Luxurious").aperture == 2.8
    assert resolve_lens("Floating", "Macro", "Calm").aperture == 11.0
    assert resolve_lens("In-Context", "Medium Shot", "Joyful").focal_length_mm == 85


def test_depth_of_field_thresholds() -> None:
    assert depth_of_field_for(1.8) == "Shallow"
    assert depth_of_field_for(2.8) == "Shallow"
    assert depth_of_field_for(5.6) == "Moderate"
    assert depth_of_field_for(8.0) == "Deep"


def test_energetic_mood_freezes_motion(make_direction) -> None:
    spec = build_photographer_spec(make_direction(mood="Energetic"))
    assert spec.camera.exposure.shutter_speed == SHUTTER_MOTION_FREEZE


def test_background_rules() -> None:
    assert background_for("Outdoor Nature", "Calm", "Forest clearing").background_type == "Environmental"
    assert background_for("Minimalist", "Calm").finish == "Matte"
    assert background_for("Bedroom", "Calm").background_type == "Interior"
    assert background_for("Studio", "Luxurious").finish == "Glossy"
    assert background_for("Studio", "Calm").material == "Seamless Paper"


def test_model_details_only_when_model_present(make_direction) -> None:
    without_model = build_photographer_spec(make_direction())
    with_model = build_photographer_spec(
        make_direction(model_required=True, model_count=1, presentation_style="On-Model")
    )

    assert without_model.skin_texture is None
    assert without_model.hair_detail is None
    assert with_model.skin_texture == "Natural"
    assert with_model.hair_detail == "Natural Flow"


def test_luxury_guidelines_become_considerations(make_direction) -> None:
    guidelines = LuxuryVisualGuidelines(
        lighting_type="Natural Diffused",
        composition_depth="3D Layered",
        texture_priority="Reflective",
        color_emotion="Warm Serenity",
        space_usage="Whitespace-driven",
    )
    spec = build_photographer_spec(make_direction(luxury_visual_guidelines=guidelines))

    assert len(spec.luxury_considerations) == 5
    assert "Natural Diffused lighting" in spec.luxury_considerations


def test_spec_is_deterministic(make_direction) -> None:
    direction = make_direction(mood="Mysterious", lighting="Neon", environment="Urban City")
    assert build_photographer_spec(direction) == build_photographer_spec(direction)
