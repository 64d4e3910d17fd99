"""Named photography presets used to steer creative direction."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PhotographyPreset:
    """A reusable aesthetic recipe."""

    id: str
    name: str
    mood: str
    lighting: str
    background: str
    product_placement: str
    model_poses: str
    best_for: tuple[str, ...]
    placement_guidelines: str
    pose_guidelines: str

    def as_prompt_context(self) -> str:
        return (
            f"Preset '{self.name}'. Mood: {self.mood}. Lighting: {self.lighting}. "
            f"Background: {self.background}. Placement: {self.placement_guidelines} "
            f"Poses: {self.pose_guidelines}"
        )


ALL_PRESETS: tuple[PhotographyPreset, ...] = (
    PhotographyPreset(
        id="minimalist-clean",
        name="Minimalist & Clean",
        mood="Simplicity, elegance and modern refinement",
        lighting="Soft, even light with no harsh shadows, natural or diffused for uniform illumination",
        background="Pure white, light grey or neutral tones with ample negative space",
        product_placement="Centered or rule-of-thirds, symmetrical, product facing forward",
        model_poses="Understated, still poses with relaxed hands and neutral expressions",
        best_for=("E-commerce", "Tech products", "Luxury items", "Wellness products"),
        placement_guidelines=(
            "Center the product or use a rule-of-thirds arrangement with calm geometry. "
            "Keep edges parallel to the frame and props sparse."
        ),
        pose_guidelines=(
            "Composed, forward-facing stance. Hands present the product squarely at chest "
            "or waist height."
        ),
    ),
    PhotographyPreset(
        id="dark-moody",
        name="Dark & Moody",
        mood="Mystery, luxury, drama and emotional depth",
        lighting="Low-key, single directional source with deep shadows and golden highlights",
        background="Black, charcoal or deep navy with heavy negative space",
        product_placement="Asymmetric rule-of-thirds, positioned to catch raking light",
        model_poses="Contemplative partial profiles and over-the-shoulder looks",
        best_for=("Premium brands", "Jewelry", "Spirits", "High-end electronics"),
        placement_guidelines=(
            "Set the product back from the background so light rakes across its texture. "
            "Layer rich props such as velvet or metal sparingly."
        ),
        pose_guidelines=(
            "Angled body, averted gaze, hands draped lightly on the product or a textured surface."
        ),
    ),
    PhotographyPreset(
        id="bright-airy",
        name="Bright & Airy",
        mood="Freshness, purity, approachability and optimism",
        lighting="Soft natural light, overcast or early golden hour, gently diffused",
        background="White, pastel or soft neutral with generous breathing room",
        product_placement="Loose flat lays or triangle compositions with open space",
        model_poses="Effortless movement, relaxed sitting, natural smiles",
        best_for=("Beauty and skincare", "Baby items", "Organic products", "Wellness brands"),
        placement_guidelines=(
            "Scatter products in gentle natural patterns. Props are light, organic and minimal."
        ),
        pose_guidelines=(
            "Spontaneous, small joyful movements with direct product interaction, such as "
            "opening a jar or showing a texture."
        ),
    ),
    PhotographyPreset(
        id="lifestyle-contextual",
        name="Lifestyle & Contextual",
        mood="Authenticity, aspiration and real-world connection",
        lighting="Environmental light matching the setting, golden hour outdoors or ambient indoors",
        background="Real homes, offices, cafes or outdoor locations that tell a usage story",
        product_placement="Integrated into the scene and shown in use",
        model_poses="Active, mid-gesture poses demonstrating function",
        best_for=("Apparel", "Home goods", "Food and beverage", "Outdoor gear"),
        placement_guidelines=(
            "Place the product inside a believable vignette with contextual props and a "
            "slightly offset, unforced angle."
        ),
        pose_guidelines=(
            "Caught mid-action: pouring, reaching, laughing. Eye line follows the product."
        ),
    ),
    PhotographyPreset(
        id="monochromatic",
        name="Monochromatic",
        mood="Visual harmony, modern minimalism and striking simplicity",
        lighting="Controlled, consistent colour temperature with soft tonal shadows",
        background="One hue in graded tints and shades",
        product_placement="Symmetric, central, with matching tonal props",
        model_poses="Structured geometric poses with minimal movement",
        best_for=("Modern fashion", "Design-led products", "Brands with strong colour identity"),
        placement_guidelines=(
            "Group elements in tidy, balanced clusters. Props and surfaces echo the key colour."
        ),
        pose_guidelines="Strong lines such as a hip-pop stance. Attire echoes the palette.",
    ),
    PhotographyPreset(
        id="high-key-white-studio",
        name="High-Key/White Studio",
        mood="Professional, clean, trustworthy and distraction-free",
        lighting="Bright, even, shadowless light from multiple angles",
        background="Seamless infinite white with no visible edges",
        product_placement="Front-facing, centered, catalogue angles",
        model_poses="Classic catalogue stance with a clear view of the product",
        best_for=("E-commerce catalogues", "Medical products", "Electronics"),
        placement_guidelines=(
            "Standardized front view, neatly centered, with no distracting props."
        ),
        pose_guidelines="Upright and balanced, hands never covering key features.",
    ),
    PhotographyPreset(
        id="textured-layered",
        name="Textured & Layered",
        mood="Depth, tactile appeal and visual richness",
        lighting="Directional side light that reveals surface texture",
        background="Wood, linen, stone or paper, layered for dimension",
        product_placement="On or against textured surfaces with two or three complementary props",
        model_poses="Leaning on or touching textured surfaces",
        best_for=("Artisanal products", "Handcrafted items", "Premium fashion"),
        placement_guidelines=(
            "Layer props beneath or beside the product and angle it slightly. Avoid flat, "
            "dead-center setups."
        ),
        pose_guidelines="Limbs draped naturally to echo the background's lines and layers.",
    ),
    PhotographyPreset(
        id="gradient-modern",
        name="Gradient & Modern",
        mood="Contemporary, on-trend, digital-native appeal",
        lighting="Clean studio light with optional coloured accents and soft shadows",
        background="Smooth two or three colour gradient",
        product_placement="Off-center on a third, aligned with the gradient flow",
        model_poses="Confident, angled poses moving along the gradient direction",
        best_for=("Tech products", "Cosmetics", "Beverages", "Social-first brands"),
        placement_guidelines=(
            "Use diagonals and dynamic angles. Lead the eye along the gradient to the product."
        ),
        pose_guidelines="Leaning, turning and shifting weight in step with the background.",
    ),
    PhotographyPreset(
        id="editorial-conceptual",
        name="Editorial & Conceptual",
        mood="Narrative-driven, aspirational and fashion-forward",
        lighting="Chosen by the story: dramatic, natural or experimental",
        background="Abstract environments to styled sets that support the narrative",
        product_placement="Unconventional angles, product treated as a character",
        model_poses="Editorial, experimental and in motion",
        best_for=("Fashion and beauty", "Lifestyle publications", "Aspirational brands"),
        placement_guidelines=(
            "Let the product float, tilt or be partly revealed. Props become part of the story."
        ),
        pose_guidelines="Expressive, cropped or in-motion poses tailored to the concept.",
    ),
)

_PRESETS_BY_ID: dict[str, PhotographyPreset] = {preset.id: preset for preset in ALL_PRESETS}
PRESET_IDS: frozenset[str] = frozenset(_PRESETS_BY_ID)


def get_preset(preset_id: str | None) -> PhotographyPreset | None:
    if not preset_id:
        return None
    return _PRESETS_BY_ID.get(preset_id)


def filter_known_preset_ids(preset_ids: list[str], limit: int = 3) -> list[str]:
    """Keep known ids in order, without duplicates, up to limit."""
    kept: list[str] = []
    for preset_id in preset_ids:
        normalized = preset_id.strip().lower()
        if normalized in PRESET_IDS and normalized not in kept:
            kept.append(normalized)
        if len(kept) >= limit:
            break
    return kept
