"""
Style preset tables.

Each visual option (glow, texture, blur, scale, panel colour, border colour)
is an enum mapped to an immutable config. Lookups accept either the enum or
its string value; an unknown tag raises UnknownPreset.
"""
import math
import re
from typing import Dict, List, Sequence, Tuple, Type, TypeVar, Union

from domain.errors import UnknownPreset
from domain.models import (
    BlurConfig,
    BlurIntensity,
    BorderPreset,
    BorderStyle,
    GlowConfig,
    GlowIntensity,
    GradientLightConfig,
    PanelColorId,
    ScalePreset,
    TextureConfig,
    TexturePattern,
    TextureType,
)

RGBA = Tuple[float, float, float, float]
E = TypeVar("E")

# Glow
GLOW_COLOR = "#FFD700"
GLOW_PRESETS: Dict[GlowIntensity, GlowConfig] = {
    GlowIntensity.SUBTLE: GlowConfig(blur_radius=4, color=GLOW_COLOR, opacity=0.15, spread_radius=2),
    GlowIntensity.MEDIUM: GlowConfig(blur_radius=6, color=GLOW_COLOR, opacity=0.22, spread_radius=3),
    GlowIntensity.STRONG: GlowConfig(blur_radius=8, color=GLOW_COLOR, opacity=0.30, spread_radius=4),
    GlowIntensity.NONE: GlowConfig(blur_radius=0, color="transparent", opacity=0, spread_radius=0),
}
DEFAULT_GLOW_INTENSITY = GlowIntensity.MEDIUM

# Texture overlays
TEXTURE_PRESETS: Dict[TextureType, TextureConfig] = {
    TextureType.MATTE_PAPER: TextureConfig(pattern=TexturePattern.NOISE, opacity=0.12, scale=1.0),
    TextureType.SILK: TextureConfig(pattern=TexturePattern.DIAGONAL_LINES, opacity=0.10, scale=0.8),
    TextureType.INK_WASH: TextureConfig(pattern=TexturePattern.CLOUD, opacity=0.08, scale=1.2),
    TextureType.NONE: TextureConfig(pattern=TexturePattern.NONE, opacity=0, scale=1.0),
}
DEFAULT_TEXTURE_TYPE = TextureType.MATTE_PAPER

# Frosted glass
BLUR_PRESETS: Dict[BlurIntensity, BlurConfig] = {
    BlurIntensity.LIGHT: BlurConfig(blur=8, opacity=0.90),
    BlurIntensity.MEDIUM: BlurConfig(blur=12, opacity=0.85),
    BlurIntensity.STRONG: BlurConfig(blur=16, opacity=0.78),
}
DEFAULT_BLUR_INTENSITY = BlurIntensity.MEDIUM

# Layout scale
SCALE_FACTORS: Dict[ScalePreset, float] = {
    ScalePreset.STANDARD: 1.0,
    ScalePreset.MODERATE: 0.95,
    ScalePreset.COMPACT: 0.90,
    ScalePreset.SLIM: 0.80,
    ScalePreset.MINI: 0.70,
}
DEFAULT_SCALE_PRESET = ScalePreset.STANDARD
MIN_SCALE_FACTOR = 0.70
MAX_SCALE_FACTOR = 1.0

# Panel background gradients (top, mid, bottom)
PANEL_COLORS: Dict[PanelColorId, Tuple[str, str, str]] = {
    PanelColorId.OBSIDIAN: ("rgba(35, 35, 40, 0.92)", "rgba(20, 20, 25, 0.88)", "rgba(25, 25, 30, 0.92)"),
    PanelColorId.BRONZE: ("rgba(160, 130, 90, 0.92)", "rgba(140, 110, 70, 0.88)", "rgba(150, 120, 80, 0.92)"),
    PanelColorId.SLATE: ("rgba(80, 90, 100, 0.92)", "rgba(60, 70, 80, 0.88)", "rgba(70, 80, 90, 0.92)"),
    PanelColorId.BURGUNDY: ("rgba(120, 50, 60, 0.92)", "rgba(100, 40, 50, 0.88)", "rgba(110, 45, 55, 0.92)"),
    PanelColorId.FOREST: ("rgba(50, 80, 60, 0.92)", "rgba(40, 70, 50, 0.88)", "rgba(45, 75, 55, 0.92)"),
    PanelColorId.NAVY: ("rgba(45, 60, 90, 0.92)", "rgba(35, 50, 80, 0.88)", "rgba(40, 55, 85, 0.92)"),
}
DEFAULT_PANEL_COLOR = PanelColorId.OBSIDIAN

# Metallic border gradients
BORDER_STYLES: Dict[BorderPreset, BorderStyle] = {
    BorderPreset.GOLD: BorderStyle(
        gradient=("#FFE4A0", "#D4AF37", "#B8860B", "#D4AF37", "#FFE4A0"),
        highlight="rgba(255, 255, 200, 0.5)",
    ),
    BorderPreset.SILVER: BorderStyle(
        gradient=("#E8E8E8", "#C0C0C0", "#A0A0A0", "#C0C0C0", "#E8E8E8"),
        highlight="rgba(255, 255, 255, 0.6)",
    ),
    BorderPreset.BRONZE: BorderStyle(
        gradient=("#E8C8A0", "#CD7F32", "#8B4513", "#CD7F32", "#E8C8A0"),
        highlight="rgba(255, 220, 180, 0.4)",
    ),
}
DEFAULT_BORDER_PRESET = BorderPreset.GOLD

DEFAULT_GRADIENT_LIGHT = GradientLightConfig()


def _coerce(enum_cls: Type[E], value: Union[E, str], kind: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise UnknownPreset(f"Unknown {kind}: {value!r}", stage="resolve-style") from None


def get_glow_config(intensity: Union[GlowIntensity, str] = DEFAULT_GLOW_INTENSITY) -> GlowConfig:
    return GLOW_PRESETS[_coerce(GlowIntensity, intensity, "glow intensity")]


def glow_padding(glow: GlowConfig) -> int:
    """Extra margin the glow needs on each edge; zero when the glow is invisible."""
    if glow.opacity <= 0:
        return 0
    return int(math.ceil(glow.blur_radius + glow.spread_radius))


def get_texture_config(texture: Union[TextureType, str] = DEFAULT_TEXTURE_TYPE) -> TextureConfig:
    return TEXTURE_PRESETS[_coerce(TextureType, texture, "texture type")]


def get_blur_config(intensity: Union[BlurIntensity, str] = DEFAULT_BLUR_INTENSITY) -> BlurConfig:
    return BLUR_PRESETS[_coerce(BlurIntensity, intensity, "blur intensity")]


def get_scale_factor(preset: Union[ScalePreset, str] = DEFAULT_SCALE_PRESET) -> float:
    factor = SCALE_FACTORS[_coerce(ScalePreset, preset, "scale preset")]
    return min(MAX_SCALE_FACTOR, max(MIN_SCALE_FACTOR, factor))


def get_border_style(preset: Union[BorderPreset, str] = DEFAULT_BORDER_PRESET) -> BorderStyle:
    return BORDER_STYLES[_coerce(BorderPreset, preset, "border preset")]


def get_panel_gradient(color_id: Union[PanelColorId, str, None]) -> Tuple[str, str, str]:
    """Panel colours are forgiving: anything unrecognised falls back to obsidian."""
    try:
        return PANEL_COLORS[PanelColorId(color_id)]
    except ValueError:
        return PANEL_COLORS[DEFAULT_PANEL_COLOR]


# ============================================
# Colour parsing and gradient lighting
# ============================================

_RGBA_RE = re.compile(
    r"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)$", re.IGNORECASE
)


def parse_color(value: str) -> RGBA:
    """
    Parse a CSS colour into (r, g, b, alpha) with alpha in 0..1.

    Supports rgba(), rgb(), #rgb, #rrggbb and #rrggbbaa. "transparent" is
    fully transparent black; anything unrecognised is opaque black.
    """
    value = (value or "").strip()
    if value.lower() == "transparent":
        return (0, 0, 0, 0.0)
    m = _RGBA_RE.match(value)
    if m:
        r, g, b = (min(255, int(m.group(i))) for i in (1, 2, 3))
        alpha = float(m.group(4)) if m.group(4) is not None else 1.0
        return (r, g, b, max(0.0, min(1.0, alpha)))
    if value.startswith("#"):
        hex_part = value[1:]
        if len(hex_part) == 3 and _is_hex(hex_part):
            r, g, b = (int(ch * 2, 16) for ch in hex_part)
            return (r, g, b, 1.0)
        if len(hex_part) in (6, 8) and _is_hex(hex_part):
            r, g, b = (int(hex_part[i:i + 2], 16) for i in (0, 2, 4))
            alpha = int(hex_part[6:8], 16) / 255 if len(hex_part) == 8 else 1.0
            return (r, g, b, alpha)
    return (0, 0, 0, 1.0)


def _is_hex(s: str) -> bool:
    return all(ch in "0123456789abcdefABCDEF" for ch in s)


def to_rgba8(color: Union[str, RGBA], opacity: float = 1.0) -> Tuple[int, int, int, int]:
    """Colour (string or parsed) to 8-bit RGBA, with an extra opacity multiplier."""
    r, g, b, a = parse_color(color) if isinstance(color, str) else color
    return (round_half_up(r), round_half_up(g), round_half_up(b), round_half_up(max(0.0, min(1.0, a * opacity)) * 255))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_rgba(color: RGBA) -> str:
    r, g, b, a = color
    return f"rgba({round_half_up(r)}, {round_half_up(g)}, {round_half_up(b)}, {a:.2f})"


def lighten(color: RGBA, factor: float) -> RGBA:
    r, g, b, a = color
    return (
        min(255.0, r + (255 - r) * factor),
        min(255.0, g + (255 - g) * factor),
        min(255.0, b + (255 - b) * factor),
        a,
    )


def darken(color: RGBA, factor: float) -> RGBA:
    r, g, b, a = color
    return (
        max(0.0, r * (1 - factor)),
        max(0.0, g * (1 - factor)),
        max(0.0, b * (1 - factor)),
        a,
    )


def calculate_gradient_colors(
    base_color: str,
    config: GradientLightConfig = DEFAULT_GRADIENT_LIGHT,
) -> List[str]:
    """
    Derive vertical lighting stops from a single base colour.

    Three stops give [lighter, base, darker]. More stops interpolate: the top
    half fades the brightening out towards the middle and the bottom half
    fades the darkening in.
    """
    base = parse_color(base_color)
    stops = max(3, int(config.stop_count))
    if stops == 3:
        return [
            format_rgba(lighten(base, config.top_brightness)),
            format_rgba(base),
            format_rgba(darken(base, config.bottom_darkness)),
        ]

    colors: List[str] = []
    for i in range(stops):
        p = i / (stops - 1)
        if p <= 0.5:
            f = config.top_brightness * (1 - 2 * p)
            colors.append(format_rgba(lighten(base, f)))
        else:
            f = config.bottom_darkness * (2 * p - 1)
            colors.append(format_rgba(darken(base, f)))
    return colors


def lighted_panel_gradient(
    color_id: Union[PanelColorId, str, None],
    config: GradientLightConfig = DEFAULT_GRADIENT_LIGHT,
) -> List[str]:
    """Panel colour id -> lit gradient stops, keyed off the gradient's middle colour."""
    gradient: Sequence[str] = get_panel_gradient(color_id)
    base = gradient[1] if len(gradient) > 1 else gradient[0]
    return calculate_gradient_colors(base, config)
