"""Deterministic camera, lighting and composition rules.

Every function here is pure: the same direction always yields the same spec,
so a shot can be replayed from its ``CreativeDirection`` alone.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.schemas.creative import CreativeDirection
from app.schemas.photography import (
    AestheticSpec,
    BackgroundSpec,
    CameraSpec,
    CompositionSpec,
    DepthOfField,
    ExposureSpec,
    LensSpec,
    LightingSpec,
    LightSource,
    PhotographerSpec,
)

ISO_MINIMUM = 100
CAMERA_BODY_TYPE = "Full Frame Mirrorless"
CAMERA_MODEL = "Canon EOS R5"
SHUTTER_DEFAULT = "1/160s"
SHUTTER_MOTION_FREEZE = "1/1000s"

WARM_KELVIN = 3200
DAYLIGHT_KELVIN = 5600
COOL_KELVIN = 7000

SHALLOW_MAX_APERTURE = 2.8
DEEP_MIN_APERTURE = 8.0


@dataclass(frozen=True)
class LensChoice:
    """Focal length and f-number picked for a shot."""

    focal_length_mm: int
    aperture: float


# Presentation styles that fully determine the lens regardless of mood or angle.
PRESENTATION_LENSES: dict[str, LensChoice] = {
    "Abstract": LensChoice(100, 1.8),
    "On-Model": LensChoice(85, 2.8),
    "Flat Lay": LensChoice(50, 8.0),
    "Environmental": LensChoice(35, 11.0),
}

OVERHEAD_ANGLES = frozenset({"Overhead Shot", "Flat Lay (Overhead Angle) (Product)"})
MACRO_ANGLES = frozenset({"Macro", "Ultra Macro", "Extreme Zoom"})
WIDE_ANGLES = frozenset({"Long Shot", "Extreme Full View"})
PORTRAIT_ANGLES = frozenset({"Medium Shot", "Two Shot"})

DEFAULT_LENS = LensChoice(50, 5.6)

MOOD_APERTURE_BIAS: dict[str, float] = {
    "Luxurious": 2.8,
    "Nostalgic": 2.8,
    "Energetic": 4.0,
}

MOOD_WHITE_BALANCE: dict[str, int] = {
    "Luxurious": WARM_KELVIN,
    "Nostalgic": WARM_KELVIN,
    "Joyful": WARM_KELVIN,
    "Calm": DAYLIGHT_KELVIN,
    "Energetic": DAYLIGHT_KELVIN,
    "Mysterious": COOL_KELVIN,
}

MOTION_MOODS = frozenset({"Energetic"})

LIGHTING_RIGS: dict[str, tuple[str, tuple[LightSource, ...]]] = {
    "Natural Sunlight": (
        "Soft Diffused Daylight",
        (
            LightSource(
                role="Key",
                modifier="Diffused sunlight",
                position="Window side, 45 degrees",
                intensity_percent=80,
            ),
            LightSource(
                role="Fill",
                modifier="Reflector (white)",
                position="Opposite side, low",
                intensity_percent=30,
            ),
        ),
    ),
    "Dramatic Hard Light": (
        "Single Source Hard Light",
        (
            LightSource(
                role="Key",
                modifier="Snoot on a bare bulb",
                position="Side, 90 degrees",
                intensity_percent=90,
            ),
        ),
    ),
    "Neon": (
        "Multi-point Coloured",
        (
            LightSource(
                role="Key",
                modifier="Strip light (gelled)",
                position="Camera left, 60 degrees",
                intensity_percent=60,
                color="Blue",
            ),
            LightSource(
                role="Fill",
                modifier="Strip light (gelled)",
                position="Camera right, 60 degrees",
                intensity_percent=40,
                color="Magenta",
            ),
            LightSource(
                role="Back",
                modifier="Rim light",
                position="Behind subject",
                intensity_percent=20,
            ),
        ),
    ),
    "Golden Hour": (
        "Warm Low-angle Sun",
        (
            LightSource(
                role="Key",
                modifier="Low sun",
                position="Side, 75 degrees, low elevation",
                intensity_percent=85,
                color="Warm amber",
            ),
            LightSource(
                role="Fill",
                modifier="Reflector (gold)",
                position="Front, low",
                intensity_percent=25,
            ),
        ),
    ),
    "Softbox": (
        "Classic 3-point Studio",
        (
            LightSource(
                role="Key",
                modifier="Softbox (large)",
                position="Front-left, 45 degrees",
                intensity_percent=70,
            ),
            LightSource(
                role="Fill",
                modifier="Softbox",
                position="Front-right, 30 degrees",
                intensity_percent=40,
            ),
            LightSource(
                role="Back",
                modifier="Hair light",
                position="Behind subject, elevated",
                intensity_percent=30,
            ),
        ),
    ),
}
DEFAULT_LIGHTING_STYLE = "Softbox"

# style, tone, contrast, shadow depth, highlight rolloff
MOOD_AESTHETICS: dict[str, AestheticSpec] = {
    "Luxurious": AestheticSpec(
        style="Luxury",
        tone="Warm",
        contrast="Medium-High",
        shadow_depth="Deep but soft",
        highlight_rolloff="Smooth",
    ),
    "Energetic": AestheticSpec(
        style="Dynamic",
        tone="Vibrant",
        contrast="High",
        shadow_depth="Hard-edged",
        highlight_rolloff="Specular",
    ),
    "Calm": AestheticSpec(
        style="Minimalist",
        tone="Neutral or Cool",
        contrast="Low",
        shadow_depth="Soft and minimal",
        highlight_rolloff="Gentle",
    ),
    "Mysterious": AestheticSpec(
        style="Cinematic",
        tone="Cool",
        contrast="High",
        shadow_depth="Very Deep (Low-Key)",
        highlight_rolloff="Controlled",
    ),
    "Joyful": AestheticSpec(
        style="Commercial",
        tone="Bright and Warm",
        contrast="Medium",
        shadow_depth="Light and airy",
        highlight_rolloff="Bright",
    ),
    "Nostalgic": AestheticSpec(
        style="Vintage Film",
        tone="Warm with faded colors",
        contrast="Low",
        shadow_depth="Soft lifted blacks",
        highlight_rolloff="Blooming",
    ),
}
DEFAULT_AESTHETIC = AestheticSpec(
    style="Standard Commercial",
    tone="Neutral",
    contrast="Medium",
    shadow_depth="Soft",
    highlight_rolloff="Smooth",
)

OUTDOOR_ENVIRONMENTS = frozenset(
    {"Outdoor Nature", "Urban City", "Outdoor City", "Outdoor Street", "Road"}
)
INTERIOR_ENVIRONMENTS = frozenset({"Indoor", "Room", "Bedroom"})
GLOSSY_MOODS = frozenset({"Luxurious"})


def resolve_lens(presentation_style: str, camera_angle: str, mood: str) -> LensChoice:
    """Pick focal length and aperture.

    Presentation styles in PRESENTATION_LENSES win outright. Otherwise the
    camera angle sets a baseline and the mood may open the aperture up.
    """
    fixed = PRESENTATION_LENSES.get(presentation_style)
    if fixed is not None:
        return fixed

    if camera_angle in OVERHEAD_ANGLES:
        baseline = LensChoice(50, 8.0)
    elif camera_angle in MACRO_ANGLES:
        baseline = LensChoice(100, 11.0)
    elif camera_angle in WIDE_ANGLES:
        baseline = LensChoice(35, 4.0)
    elif camera_angle in PORTRAIT_ANGLES:
        baseline = LensChoice(85, 2.8)
    else:
        baseline = DEFAULT_LENS

    biased = MOOD_APERTURE_BIAS.get(mood)
    if biased is None:
        return baseline
    return LensChoice(baseline.focal_length_mm, biased)


def depth_of_field_for(aperture: float) -> DepthOfField:
    if aperture <= SHALLOW_MAX_APERTURE:
        return "Shallow"
    if aperture >= DEEP_MIN_APERTURE:
        return "Deep"
    return "Moderate"


def lens_type_for(focal_length_mm: int) -> str:
    if focal_length_mm >= 100:
        return "Macro"
    if focal_length_mm >= 85:
        return "Prime"
    return "Standard Prime"


def shutter_speed_for(mood: str) -> str:
    return SHUTTER_MOTION_FREEZE if mood in MOTION_MOODS else SHUTTER_DEFAULT


def white_balance_for(mood: str) -> int:
    return MOOD_WHITE_BALANCE.get(mood, DAYLIGHT_KELVIN)


def lighting_rig_for(lighting_style: str) -> LightingSpec:
    setup_type, lights = LIGHTING_RIGS.get(lighting_style, LIGHTING_RIGS[DEFAULT_LIGHTING_STYLE])
    return LightingSpec(setup_type=setup_type, lights=lights)


def aesthetic_for(mood: str) -> AestheticSpec:
    return MOOD_AESTHETICS.get(mood, DEFAULT_AESTHETIC)


def background_for(environment: str, mood: str, location: str | None = None) -> BackgroundSpec:
    """Map the environment (and mood, for studio finish) to a background treatment."""
    place = (location or environment).strip() or environment
    if environment in OUTDOOR_ENVIRONMENTS:
        return BackgroundSpec(
            background_type="Environmental",
            finish="Natural Elements",
            description=f"{place}, rendered softly out of focus behind the subject",
        )
    if environment == "Minimalist":
        return BackgroundSpec(
            background_type="Gradient or Solid Color",
            finish="Matte",
            description="Clean seamless tone with no visible material texture",
        )
    if environment in INTERIOR_ENVIRONMENTS:
        return BackgroundSpec(
            background_type="Interior",
            finish="Natural",
            material="Furnished set",
            description=f"{place}, styled and gently blurred",
        )
    if mood in GLOSSY_MOODS:
        return BackgroundSpec(
            background_type="Studio",
            finish="Glossy",
            material="Acrylic or Marble",
            description="Polished studio surface with soft reflections",
        )
    return BackgroundSpec(
        background_type="Studio",
        finish="Matte",
        material="Seamless Paper",
        description="Seamless studio sweep",
    )


def framing_for(presentation_style: str, camera_angle: str) -> str:
    if presentation_style == "Flat Lay" or camera_angle in OVERHEAD_ANGLES:
        return "Top-down, symmetrically arranged"
    if presentation_style == "Environmental":
        return "Subject on a third, with the scene given room to breathe"
    return "Centered subject with leading lines"


def build_photographer_spec(direction: CreativeDirection) -> PhotographerSpec:
    """Derive the full technical spec from a finalized creative direction."""
    lens = resolve_lens(direction.presentation_style, direction.camera_angle, direction.mood)

    camera = CameraSpec(
        body_type=CAMERA_BODY_TYPE,
        model=CAMERA_MODEL,
        lens=LensSpec(
            focal_length_mm=lens.focal_length_mm,
            aperture=lens.aperture,
            lens_type=lens_type_for(lens.focal_length_mm),
            depth_of_field=depth_of_field_for(lens.aperture),
        ),
        exposure=ExposureSpec(
            iso=ISO_MINIMUM,
            shutter_speed=shutter_speed_for(direction.mood),
            white_balance_kelvin=white_balance_for(direction.mood),
        ),
    )

    luxury_considerations: tuple[str, ...] = ()
    guidelines = direction.luxury_visual_guidelines
    if guidelines is not None:
        luxury_considerations = (
            f"{guidelines.lighting_type} lighting",
            f"{guidelines.composition_depth} depth",
            f"{guidelines.texture_priority} texture emphasis",
            f"{guidelines.color_emotion} colour story",
            f"{guidelines.space_usage} use of space",
        )

    return PhotographerSpec(
        camera=camera,
        lighting=lighting_rig_for(direction.lighting),
        composition=CompositionSpec(
            camera_angle=direction.camera_angle,
            framing=framing_for(direction.presentation_style, direction.camera_angle),
            aspect_ratio=direction.aspect_ratio,
        ),
        background=background_for(direction.environment, direction.mood, direction.location),
        aesthetic=aesthetic_for(direction.mood),
        realism_level="Photorealistic",
        skin_texture="Natural" if direction.model_required else None,
        hair_detail="Natural Flow" if direction.model_required else None,
        luxury_considerations=luxury_considerations,
    )
