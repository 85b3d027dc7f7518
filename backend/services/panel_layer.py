"""
Text panel background layer.

A rounded, lit gradient slab with a frosted-glass wash, a neutral texture
overlay and a fixed diagonal highlight, in that order.
"""
from typing import Optional, Union

from domain.models import (
    BlurConfig,
    GradientLightConfig,
    PanelColorId,
    Rect,
    TextureConfig,
    TexturePattern,
)
from services.border_space import PANEL_CORNER_RADIUS
from services.rasterizer import PlacedLayer, rasterize
from services.shapes import (
    CircleShape,
    Drawing,
    DropShadow,
    EllipseShape,
    FrostFilter,
    LinearGradient,
    LineShape,
    Pattern,
    RectShape,
    Solid,
)
from services.style_presets import (
    BLUR_PRESETS,
    DEFAULT_BLUR_INTENSITY,
    DEFAULT_GRADIENT_LIGHT,
    DEFAULT_TEXTURE_TYPE,
    TEXTURE_PRESETS,
    lighted_panel_gradient,
)

FROST_FILL = "rgba(255, 255, 255, 0.03)"
HIGHLIGHT_STOPS = ("rgba(255, 255, 255, 0.08)", "rgba(255, 255, 255, 0.02)", "rgba(255, 255, 255, 0)")

# Texture tiles stay neutral (white/black) so the overlay never shifts hue
LIGHT_NEUTRAL = "rgba(255, 255, 255, 0.15)"
DARK_NEUTRAL = "rgba(0, 0, 0, 0.15)"
LIGHT_NEUTRAL_SOFT = "rgba(255, 255, 255, 0.10)"
DARK_NEUTRAL_SOFT = "rgba(0, 0, 0, 0.12)"
LIGHT_NEUTRAL_SUBTLE = "rgba(255, 255, 255, 0.08)"
DARK_NEUTRAL_SUBTLE = "rgba(0, 0, 0, 0.10)"


def _round(value: float) -> int:
    return int(value + 0.5)


def texture_tile(texture: TextureConfig) -> Optional[Pattern]:
    """Pattern fill for a texture preset, or None when the panel is untextured."""
    s = texture.scale
    if texture.pattern == TexturePattern.NOISE:
        size = _round(8 * s)
        tile = Drawing(size, size)
        tile.add(
            CircleShape(1 * s, 1 * s, 0.8 * s, Solid(LIGHT_NEUTRAL)),
            CircleShape(5 * s, 2 * s, 0.6 * s, Solid(DARK_NEUTRAL)),
            CircleShape(3 * s, 4 * s, 0.7 * s, Solid(LIGHT_NEUTRAL_SOFT)),
            CircleShape(7 * s, 6 * s, 0.5 * s, Solid(DARK_NEUTRAL_SOFT)),
            CircleShape(2 * s, 7 * s, 0.4 * s, Solid(LIGHT_NEUTRAL_SUBTLE)),
            CircleShape(6 * s, 4 * s, 0.55 * s, Solid(DARK_NEUTRAL_SUBTLE)),
        )
        return Pattern(tile=tile)
    if texture.pattern == TexturePattern.DIAGONAL_LINES:
        size = _round(6 * s)
        tile = Drawing(size, size)
        tile.add(
            LineShape(0, 0, 0, size, LIGHT_NEUTRAL_SOFT, 0.5 * s),
            LineShape(size / 2, 0, size / 2, size, DARK_NEUTRAL_SOFT, 0.3 * s),
        )
        return Pattern(tile=tile, rotate=45)
    if texture.pattern == TexturePattern.CLOUD:
        size = _round(20 * s)
        tile = Drawing(size, size)
        tile.add(
            EllipseShape(5 * s, 5 * s, 4 * s, 3 * s, Solid(LIGHT_NEUTRAL_SUBTLE)),
            EllipseShape(15 * s, 8 * s, 5 * s, 4 * s, Solid(DARK_NEUTRAL_SUBTLE)),
            EllipseShape(10 * s, 15 * s, 6 * s, 3 * s, Solid(LIGHT_NEUTRAL_SUBTLE)),
            EllipseShape(3 * s, 12 * s, 3 * s, 2 * s, Solid(DARK_NEUTRAL_SUBTLE)),
            EllipseShape(17 * s, 3 * s, 2 * s, 2 * s, Solid(LIGHT_NEUTRAL_SUBTLE)),
        )
        return Pattern(tile=tile)
    return None


def build_panel_drawing(
    width: int,
    height: int,
    color_id: Union[PanelColorId, str, None] = None,
    texture: Optional[TextureConfig] = None,
    blur: Optional[BlurConfig] = None,
    light: Optional[GradientLightConfig] = None,
    radius: float = PANEL_CORNER_RADIUS,
) -> Drawing:
    """
    Describe a panel background.

    Args:
        width, height: Panel size in pixels
        color_id: Panel colour; unknown ids fall back to obsidian
        texture: Texture overlay config (default matte paper)
        blur: Frost config; its opacity also attenuates the base slab
        light: Lighting applied to the colour's middle stop
    """
    texture = texture or TEXTURE_PRESETS[DEFAULT_TEXTURE_TYPE]
    blur = blur or BLUR_PRESETS[DEFAULT_BLUR_INTENSITY]
    stops = tuple(lighted_panel_gradient(color_id, light or DEFAULT_GRADIENT_LIGHT))

    drawing = Drawing(width, height)
    drawing.add(
        RectShape(0, 0, width, height, radius=radius, fill=LinearGradient(stops), opacity=blur.opacity),
        filter=DropShadow(dx=2, dy=2, std_dev=3),
    )
    drawing.add(
        RectShape(0, 0, width, height, radius=radius, fill=Solid(FROST_FILL)),
        filter=FrostFilter(std_dev=blur.blur / 2, opacity=blur.opacity),
    )
    pattern = texture_tile(texture)
    if pattern is not None and texture.opacity > 0:
        drawing.add(
            RectShape(0, 0, width, height, radius=radius, fill=pattern, opacity=texture.opacity),
            blend="overlay",
        )
    drawing.add(
        RectShape(0, 0, width, height, radius=radius, fill=LinearGradient(HIGHLIGHT_STOPS, direction="diagonal")),
    )
    return drawing


def render_panel_layer(
    rect: Rect,
    color_id: Union[PanelColorId, str, None] = None,
    texture: Optional[TextureConfig] = None,
    blur: Optional[BlurConfig] = None,
    light: Optional[GradientLightConfig] = None,
) -> PlacedLayer:
    """Rasterize the panel background for ``rect``; it is placed flush with the rect."""
    drawing = build_panel_drawing(rect.width, rect.height, color_id, texture, blur, light)
    return PlacedLayer(image=rasterize(drawing), x=rect.x, y=rect.y, drawing=drawing)
