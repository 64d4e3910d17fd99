"""Unit tests for luxury art direction rules and the preset catalogue."""

from __future__ import annotations

from app.services.luxury_visual import (
    find_category_dna,
    is_luxury_aligned,
    recommend_guidelines,
    visual_identity,
)
from app.services.presets import ALL_PRESETS, filter_known_preset_ids, get_preset


def test_only_luxury_and_premium_are_aligned(make_analysis) -> None:
    assert is_luxury_aligned(make_analysis(brand_tier="luxury"))
    assert is_luxury_aligned(make_analysis(brand_tier="premium"))
    assert not is_luxury_aligned(make_analysis(brand_tier="mid-tier"))
    assert recommend_guidelines(make_analysis(brand_tier="mass-market"), mood="Calm") is None


def test_category_dna_matches_loosely_and_defaults_to_fashion() -> None:
    assert find_category_dna("Fine Jewelry").visual_identity == "Detailed, Opulent"
    assert find_category_dna("WATCHES").visual_identity == "Heritage, Power, Precision"
    assert find_category_dna("garden tools").visual_identity == "Iconic, Minimal, Cinematic"


def test_guidelines_follow_mood_and_category(make_analysis) -> None:
    jewelry = recommend_guidelines(make_analysis(brand_tier="luxury"), mood="Calm")
    tech = recommend_guidelines(
        make_analysis(brand_tier="premium", product_category="tech accessories"),
        mood="Dramatic",
    )

    assert jewelry is not None
    assert jewelry.lighting_type == "Natural Diffused"
    assert jewelry.texture_priority == "Reflective"
    assert jewelry.color_emotion == "Warm Serenity"
    assert tech is not None
    assert tech.lighting_type == "Backlit Glow"
    assert tech.composition_depth == "Flat"
    assert tech.texture_priority == "Matte"


def test_visual_identity_falls_back_to_category_and_tier(make_analysis) -> None:
    assert visual_identity(make_analysis(brand_tier="luxury")) == "Jewelry Luxury"
    assert visual_identity(make_analysis(brand_tier="premium", visual_identity="Quiet gold")) == "Quiet gold"


def test_preset_ids_are_unique_and_resolvable() -> None:
    ids = [preset.id for preset in ALL_PRESETS]

    assert len(ids) == len(set(ids))
    assert all(get_preset(preset_id) is not None for preset_id in ids)
    assert get_preset(None) is None
    assert get_preset("unknown") is None


def test_filter_known_preset_ids_dedupes_and_limits() -> None:
    kept = filter_known_preset_ids(
        ["Dark-Moody", "unknown", "dark-moody", "bright-airy", "minimalist-clean", "gradient-modern"]
    )

    assert kept == ["dark-moody", "bright-airy", "minimalist-clean"]
