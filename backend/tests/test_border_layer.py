from domain.models import BorderKind, GlowConfig, GlowIntensity, Rect
from services.border_layer import (
    FRAME_RING_STYLE,
    PANEL_RING_STYLE,
    render_border_layer,
    ring_style_for,
)
from services.border_space import border_footprint, total_space
from services.style_presets import get_border_style


def test_padded_size_and_placement():
    rect = Rect(100, 120, 200, 80)
    placed = render_border_layer(rect, BorderKind.TEXT_PANEL, GlowIntensity.MEDIUM)
    pad = total_space(border_footprint(BorderKind.TEXT_PANEL, GlowIntensity.MEDIUM))
    assert pad == 17
    assert placed.image.size == (200 + 2 * pad, 80 + 2 * pad)
    assert (placed.x, placed.y) == (100 - pad, 120 - pad)


def test_inner_edge_lines_up_with_rect():
    rect = Rect(50, 50, 120, 90)
    placed = render_border_layer(rect, BorderKind.ILLUSTRATION_FRAME, GlowIntensity.NONE)
    img = placed.image
    mid = img.height // 2
    assert (placed.x, placed.y) == (40, 40)
    # outer ring is opaque, the bordered rect itself is untouched
    assert img.getpixel((2, mid))[3] > 200
    assert img.getpixel((12, mid))[3] == 0
    assert img.getpixel((img.width - 13, mid))[3] == 0


def test_no_glow_matches_zero_opacity_glow_byte_for_byte():
    rect = Rect(0, 0, 160, 100)
    none = render_border_layer(rect, BorderKind.TEXT_PANEL, GlowIntensity.NONE)
    disabled = render_border_layer(
        rect, BorderKind.TEXT_PANEL, GlowConfig(blur_radius=6, color="#FFD700", opacity=0, spread_radius=3)
    )
    assert none.image.size == disabled.image.size
    assert none.image.tobytes() == disabled.image.tobytes()


def test_glow_adds_visible_halo_in_padding():
    placed = render_border_layer(Rect(0, 0, 160, 100), BorderKind.TEXT_PANEL, GlowIntensity.STRONG)
    mid = placed.image.height // 2
    # padding is 12px; the halo bleeds into it
    assert placed.image.getpixel((8, mid))[3] > 0
    assert placed.drawing.layers[0].filter is not None


def test_ring_styles():
    assert ring_style_for(BorderKind.ILLUSTRATION_FRAME) is FRAME_RING_STYLE
    assert ring_style_for(BorderKind.TEXT_PANEL) is PANEL_RING_STYLE
    silver = ring_style_for(BorderKind.TEXT_PANEL, "silver")
    assert silver.outer_gradient == get_border_style("silver").gradient
    assert silver.corner_radius == PANEL_RING_STYLE.corner_radius
    assert FRAME_RING_STYLE.inner_color == "#B8860B"
