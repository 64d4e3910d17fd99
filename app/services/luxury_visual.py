"""Rule-based art direction for luxury and premium products."""

from __future__ import annotations

from dataclasses import dataclass

from app.schemas.creative import LuxuryVisualGuidelines
from app.schemas.product import ProductAnalysis

LUXURY_TIERS = frozenset({"luxury", "premium"})


@dataclass(frozen=True)
class CategoryVisualDNA:
    """Visual signature a luxury category is expected to carry."""

    visual_identity: str
    color_theme: tuple[str, ...]
    model_expression: str
    lighting_style: str
    composition_style: str


CATEGORY_VISUAL_DNA: dict[str, CategoryVisualDNA] = {
    "fashion": CategoryVisualDNA(
        visual_identity="Iconic, Minimal, Cinematic",
        color_theme=("Neutral", "Gold", "Cream", "Black", "White"),
        model_expression="Stoic, Confident, Restrained",
        lighting_style="Soft directional, cinematic gradients",
        composition_style="Symmetrical or intentional asymmetry, architectural",
    ),
    "tech": CategoryVisualDNA(
        visual_identity="Precise, Clean, Modern",
        color_theme=("White", "Silver", "Graphite", "Neutral"),
        model_expression="Absent or Neutral",
        lighting_style="Sterile precision, futuristic minimalism",
        composition_style="Whitespace dominance, architectural design",
    ),
    "beauty": CategoryVisualDNA(
        visual_identity="Soft, Radiant",
        color_theme=("Pastel", "Nude", "Beige", "Soft tones"),
        model_expression="Gentle, Graceful",
        lighting_style="Natural diffused, oceanic light",
        composition_style="Clean composition, soft focus",
    ),
    "automotive": CategoryVisualDNA(
        visual_identity="Powerful, Commanding",
        color_theme=("Black", "Chrome", "Red", "Metallics"),
        model_expression="Subtle, Assured",
        lighting_style="Dramatic but controlled",
        composition_style="Studio or architectural backdrops",
    ),
    "jewelry": CategoryVisualDNA(
        visual_identity="Detailed, Opulent",
        color_theme=("Gold", "Ivory", "Silver", "Metallic"),
        model_expression="Calm, Elegant",
        lighting_style="Heritage meets power, metallic shine",
        composition_style="Ornate yet minimalist displays",
    ),
    "watches": CategoryVisualDNA(
        visual_identity="Heritage, Power, Precision",
        color_theme=("Gold", "Silver", "Black", "Metallic"),
        model_expression="Quiet Confidence",
        lighting_style="Metallic shine, controlled highlights",
        composition_style="Heritage meets modern, architectural",
    ),
}
DEFAULT_CATEGORY = "fashion"

LUXURY_LOCATION_STYLE = "Architectural backdrops, minimal, never cluttered"
LUXURY_MODEL_BEHAVIOR = (
    "Elongated neck, relaxed shoulders and a distant gaze. Serene and assured "
    "rather than over-smiling, with immaculate styling and restrained body language."
)


def is_luxury_aligned(analysis: ProductAnalysis) -> bool:
    return analysis.brand_tier in LUXURY_TIERS


def find_category_dna(category: str) -> CategoryVisualDNA:
    """Match a free-text category to its visual DNA, defaulting to fashion."""
    key = category.strip().lower()
    if key in CATEGORY_VISUAL_DNA:
        return CATEGORY_VISUAL_DNA[key]
    for name, dna in CATEGORY_VISUAL_DNA.items():
        if key and (name in key or key in name):
            return dna
    return CATEGORY_VISUAL_DNA[DEFAULT_CATEGORY]


def recommend_guidelines(
    analysis: ProductAnalysis,
    mood: str | None = None,
    aesthetic: str | None = None,
) -> LuxuryVisualGuidelines | None:
    """Return luxury guidelines, or None when the product is not luxury-aligned."""
    if not is_luxury_aligned(analysis):
        return None

    category = analysis.product_category.lower()
    mood_key = (mood or "").lower()
    aesthetic_key = (aesthetic or "").lower()

    if mood_key in {"calm", "elegant"}:
        lighting_type = "Natural Diffused"
    elif mood_key in {"dramatic", "mysterious"}:
        lighting_type = "Backlit Glow"
    else:
        lighting_type = "Soft Edge Light"

    if "tech" in category or "minimal" in category:
        composition_depth = "Flat"
    elif "cinematic" in (mood_key, aesthetic_key):
        composition_depth = "Cinematic Focus Pull"
    else:
        composition_depth = "3D Layered"

    if "fashion" in category or "textile" in category:
        texture_priority = "Velvet"
    elif "beauty" in category or "skincare" in category:
        texture_priority = "Organic"
    elif "tech" in category or "minimal" in category:
        texture_priority = "Matte"
    else:
        texture_priority = "Reflective"

    if mood_key in {"luxurious", "opulent"}:
        color_emotion = "Bold Luxury"
    elif mood_key in {"calm", "serene"}:
        color_emotion = "Warm Serenity"
    else:
        color_emotion = "Neutral Calm"

    if "fashion" in category or "lifestyle" in category:
        space_usage = "Layered Environment"
    elif mood_key in {"dynamic", "energetic"}:
        space_usage = "Dynamic Diagonal"
    else:
        space_usage = "Whitespace-driven"

    return LuxuryVisualGuidelines(
        lighting_type=lighting_type,
        composition_depth=composition_depth,
        texture_priority=texture_priority,
        color_emotion=color_emotion,
        space_usage=space_usage,
    )


def visual_identity(analysis: ProductAnalysis) -> str:
    """Return the analysed visual identity, or a category/tier label."""
    if analysis.visual_identity:
        return analysis.visual_identity
    category = analysis.product_category.strip() or DEFAULT_CATEGORY
    tier_label = "Luxury" if analysis.brand_tier == "luxury" else "Premium"
    return f"{category[:1].upper()}{category[1:]} {tier_label}"


def describe_category_dna(analysis: ProductAnalysis) -> str:
    """Render the category DNA as prompt context for the direction agent."""
    dna = find_category_dna(analysis.product_category)
    return (
        f"Visual identity: {dna.visual_identity}. "
        f"Colour theme: {', '.join(dna.color_theme)}. "
        f"Model expression: {dna.model_expression}. "
        f"Lighting character: {dna.lighting_style}. "
        f"Composition: {dna.composition_style}. "
        f"Locations: {LUXURY_LOCATION_STYLE}. "
        f"Model behaviour: {LUXURY_MODEL_BEHAVIOR}"
    )
