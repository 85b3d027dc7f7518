"""
Multi-ring border layer.

From the outside in: a thick gradient stroke (optionally glowing), a gap,
a thin stroke in the gradient's middle colour and a faint 1px dark hairline.
The returned image is padded by the full border footprint on every edge so
that placing it at (x, y) lines its inner edge up with the bordered rect.
"""
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from domain.models import BorderDimensions, BorderKind, BorderPreset, GlowConfig, GlowIntensity, Rect
from services.border_space import PANEL_CORNER_RADIUS, border_footprint, ring_width
from services.rasterizer import PlacedLayer, rasterize
from services.shapes import Drawing, GlowFilter, LinearGradient, RectShape, Solid
from services.style_presets import get_border_style, get_glow_config


@dataclass(frozen=True)
class RingStyle:
    outer_gradient: Tuple[str, ...]
    hairline_opacity: float
    corner_radius: float

    @property
    def inner_color(self) -> str:
        return self.outer_gradient[len(self.outer_gradient) // 2]


FRAME_RING_STYLE = RingStyle(
    outer_gradient=("#FFE4A0", "#D4AF37", "#B8860B", "#D4AF37", "#FFE4A0"),
    hairline_opacity=0.4,
    corner_radius=0,
)
PANEL_RING_STYLE = RingStyle(
    outer_gradient=("#B8A080", "#8B7355", "#6B5335", "#8B7355", "#B8A080"),
    hairline_opacity=0.35,
    corner_radius=PANEL_CORNER_RADIUS,
)


def ring_style_for(kind: BorderKind, preset: Optional[Union[BorderPreset, str]] = None) -> RingStyle:
    base = FRAME_RING_STYLE if BorderKind(kind) == BorderKind.ILLUSTRATION_FRAME else PANEL_RING_STYLE
    if preset is None:
        return base
    return RingStyle(
        outer_gradient=tuple(get_border_style(preset).gradient),
        hairline_opacity=base.hairline_opacity,
        corner_radius=base.corner_radius,
    )


def build_border_drawing(
    width: int,
    height: int,
    dims: BorderDimensions,
    style: RingStyle,
    glow: GlowConfig,
) -> Drawing:
    """
    Describe the rings for a rect of ``width`` x ``height``.

    The drawing itself is larger by the border footprint on every edge.
    """
    pad = dims.glow_padding
    rings = ring_width(dims)
    total_w = width + 2 * (rings + pad)
    total_h = height + 2 * (rings + pad)
    outer_w, gap, inner_w = dims.outer_stroke_width, dims.gap_width, dims.inner_stroke_width

    radius = style.corner_radius
    inner_radius = max(0.0, radius - outer_w - gap)
    hairline_radius = max(0.0, inner_radius - inner_w - 1)

    drawing = Drawing(total_w, total_h)

    o = pad + outer_w / 2
    glow_filter = None
    if glow.opacity > 0:
        glow_filter = GlowFilter(blur=glow.blur_radius, color=glow.color, opacity=glow.opacity, spread=glow.spread_radius)
    drawing.add(
        RectShape(
            o, o, total_w - 2 * o, total_h - 2 * o,
            radius=radius,
            stroke=LinearGradient(style.outer_gradient, direction="diagonal"),
            stroke_width=outer_w,
        ),
        filter=glow_filter,
    )

    o = pad + outer_w + gap + inner_w / 2
    drawing.add(
        RectShape(
            o, o, total_w - 2 * o, total_h - 2 * o,
            radius=inner_radius,
            stroke=Solid(style.inner_color),
            stroke_width=inner_w,
        ),
    )

    o = pad + outer_w + gap + inner_w + 1 + 0.5
    drawing.add(
        RectShape(
            o, o, total_w - 2 * o, total_h - 2 * o,
            radius=hairline_radius,
            stroke=Solid(f"rgba(0, 0, 0, {style.hairline_opacity})"),
            stroke_width=1,
        ),
    )
    return drawing


def render_border_layer(
    rect: Rect,
    kind: BorderKind,
    glow: Union[GlowConfig, GlowIntensity, str, None] = None,
    preset: Optional[Union[BorderPreset, str]] = None,
) -> PlacedLayer:
    """Rasterize the border for ``rect`` and return it with its padded placement."""
    glow_config = glow if isinstance(glow, GlowConfig) else get_glow_config(glow or GlowIntensity.MEDIUM)
    dims = border_footprint(kind, glow_config)
    drawing = build_border_drawing(rect.width, rect.height, dims, ring_style_for(kind, preset), glow_config)
    offset = ring_width(dims) + dims.glow_padding
    return PlacedLayer(image=rasterize(drawing), x=rect.x - offset, y=rect.y - offset, drawing=drawing)
