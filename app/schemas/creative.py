"""Creative concept and direction schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.core.exceptions import InputValidationError

PresentationStyle = Literal[
    "Flat Lay",
    "On-Model",
    "Floating",
    "Abstract",
    "In-Context",
    "Environmental",
]
Mood = Literal["Energetic", "Calm", "Luxurious", "Mysterious", "Joyful", "Nostalgic"]
LightingStyle = Literal[
    "Softbox",
    "Natural Sunlight",
    "Dramatic Hard Light",
    "Neon",
    "Golden Hour",
]
Environment = Literal[
    "Studio",
    "Indoor",
    "Room",
    "Bedroom",
    "Outdoor Nature",
    "Urban City",
    "Outdoor City",
    "Outdoor Street",
    "Road",
    "Minimalist",
    "Fantasy",
]
CameraAngle = Literal[
    "Eye-level",
    "Medium Shot",
    "Long Shot",
    "Two Shot",
    "High-angle",
    "Low-angle",
    "Overhead Shot",
    "Hip-level Shot",
    "Ground-level Shot",
    "Dutch Angle",
    "Close-up",
    "Macro",
    "Ultra Macro",
    "Extreme Zoom",
    "Extreme Full View",
    "Profile Angle (Product)",
    "Front Angle (Product)",
    "Angled Shot (25-75 degrees) (Product)",
    "Flat Lay (Overhead Angle) (Product)",
]
AspectRatio = Literal["1:1", "4:5", "9:16", "16:9", "4:3"]

ModelPreference = Literal["with-model", "product-only", "hybrid", "let-ai-decide"]
AestheticStyle = Literal[
    "luxurious",
    "minimalist",
    "energetic",
    "calm",
    "mysterious",
    "joyful",
    "let-ai-decide",
]
StyleDirection = Literal["modern", "classic", "edgy", "soft", "let-ai-decide"]

LET_AI_DECIDE = "let-ai-decide"


class UserPreferences(BaseModel):
    """Optional steering for concept generation."""

    model_config = ConfigDict(protected_namespaces=())

    model_preference: ModelPreference = LET_AI_DECIDE
    aesthetic_style: AestheticStyle = LET_AI_DECIDE
    style_direction: StyleDirection = LET_AI_DECIDE

    def constraints(self) -> dict[str, str]:
        """Return only the fields the user actually decided."""
        return {
            key: value
            for key, value in self.model_dump().items()
            if value != LET_AI_DECIDE
        }


class Concept(BaseModel):
    """A candidate creative angle offered before any billed work."""

    model_config = ConfigDict(protected_namespaces=())

    id: str = Field(default="", description="Stable identifier, e.g. 'concept-1'")
    title: str
    description: str
    ad_type: str = Field(description="Strategic angle, e.g. 'Lifestyle' or 'Product Hero'")
    model_required: bool
    model_style: str | None = None
    presentation_style: PresentationStyle
    mood: Mood
    aesthetic: str
    visual_description: str


class ConceptBatch(BaseModel):
    """Ordered set of distinct concepts returned by the concept phase."""

    concepts: list[Concept] = Field(min_length=2, max_length=4)

    def select(self, concept_id: str) -> Concept:
        """Return the concept with the given id."""
        for concept in self.concepts:
            if concept.id == concept_id:
                return concept
        raise InputValidationError(
            f"Unknown concept id: {concept_id}",
            {"concept_id": concept_id, "available": [c.id for c in self.concepts]},
        )


class LuxuryVisualGuidelines(BaseModel):
    """Luxury-tier art direction knobs."""

    lighting_type: str
    composition_depth: str
    texture_priority: str
    color_emotion: str
    space_usage: str


class CreativeDirection(BaseModel):
    """Finalized creative decisions for one generation. Never mutated once built."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    ad_type: str
    platform_recommendation: str
    location: str
    environment: Environment
    camera_angle: CameraAngle
    lighting: LightingStyle
    model_required: bool
    model_type: str | None = None
    model_count: int = Field(default=0, ge=0)
    pose_guidance: str | None = None
    product_interaction: str | None = None
    presentation_style: PresentationStyle
    mood: Mood
    color_palette: list[str] = Field(default_factory=list)
    composition_approach: str
    aspect_ratio: AspectRatio = "1:1"
    visual_identity: str | None = None
    luxury_visual_guidelines: LuxuryVisualGuidelines | None = None
    supporting_props: list[str] = Field(default_factory=list)
    expression_guidance: str | None = None
