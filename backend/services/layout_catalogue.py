"""
Layout catalogue service.

Holds the fixed set of card layouts and the pure transforms applied to them
on read (scale presets, legacy mode mapping, default crop anchor).
Uses a registry pattern so each variant is declared next to its geometry.
"""
import math
from typing import Callable, Dict, Optional, Union

from domain.errors import UnknownVariant
from domain.models import (
    CardLayout,
    CropAnchor,
    LayoutMode,
    LayoutVariantId,
    PanelId,
    PanelRect,
    Rect,
    ScalePreset,
)
from services.style_presets import get_scale_factor


LANDSCAPE_CANVAS = (1024, 768)
PORTRAIT_CANVAS = (768, 1024)

# Type alias for layout builders
LayoutBuilder = Callable[[], CardLayout]

# Registry of layouts by variant id, built once at import
_layout_registry: Dict[LayoutVariantId, CardLayout] = {}

_LEGACY_MODE_VARIANTS = {
    LayoutMode.LANDSCAPE: LayoutVariantId.LANDSCAPE_SQUARE,
    LayoutMode.PORTRAIT: LayoutVariantId.PORTRAIT_SQUARE,
}


def register_layout(variant: LayoutVariantId):
    """Decorator to register the layout produced by a builder function."""
    def decorator(func: LayoutBuilder) -> LayoutBuilder:
        _layout_registry[variant] = func()
        return func
    return decorator


def resolve_layout(variant: Union[LayoutVariantId, str]) -> CardLayout:
    """
    Look up a catalogue layout.

    Raises:
        UnknownVariant: If the id is not one of the registered variants
    """
    try:
        key = LayoutVariantId(variant)
    except ValueError:
        raise UnknownVariant(f"No layout registered for variant: {variant!r}", stage="resolve-layout") from None
    layout = _layout_registry.get(key)
    if layout is None:
        raise UnknownVariant(f"No layout registered for variant: {variant!r}", stage="resolve-layout")
    return layout


def resolve_legacy_mode(mode: Union[LayoutMode, str]) -> LayoutVariantId:
    try:
        return _LEGACY_MODE_VARIANTS[LayoutMode(mode)]
    except ValueError:
        raise UnknownVariant(f"Unknown layout mode: {mode!r}", stage="resolve-layout") from None


def resolve_variant_id(
    variant: Optional[Union[LayoutVariantId, str]] = None,
    mode: Optional[Union[LayoutMode, str]] = None,
) -> LayoutVariantId:
    """An explicit variant wins over the legacy mode; with neither, landscape-square."""
    if variant:
        return resolve_layout(variant).variant
    if mode:
        return resolve_legacy_mode(mode)
    return LayoutVariantId.LANDSCAPE_SQUARE


def is_portrait_variant(variant: Union[LayoutVariantId, str]) -> bool:
    return LayoutVariantId(variant).value.startswith("portrait")


def is_flat_variant(variant: Union[LayoutVariantId, str]) -> bool:
    return LayoutVariantId(variant).value.endswith("flat")


def canvas_size_for(variant: Optional[Union[LayoutVariantId, str]]) -> tuple:
    """Canvas (width, height) by orientation; no variant means landscape."""
    if variant and is_portrait_variant(variant):
        return PORTRAIT_CANVAS
    return LANDSCAPE_CANVAS


def default_crop_anchor(layout: CardLayout, requested: Optional[Union[CropAnchor, str]] = None) -> CropAnchor:
    """Portrait cards keep the head of the illustration; landscape crops centred."""
    if requested:
        return CropAnchor(requested)
    return CropAnchor.TOP if layout.is_portrait else CropAnchor.CENTER


# ============================================
# Scale presets
# ============================================

def _round(value: float) -> int:
    # half-up, not banker's rounding
    return int(math.floor(value + 0.5))


def scale_rect(rect: Rect, factor: float, canvas_width: int, canvas_height: int) -> Rect:
    """Shrink a rect about the canvas centre, keeping its centre-offset ratio."""
    canvas_cx = canvas_width / 2
    canvas_cy = canvas_height / 2
    cx, cy = rect.center
    new_w = rect.width * factor
    new_h = rect.height * factor
    new_cx = canvas_cx + (cx - canvas_cx) * factor
    new_cy = canvas_cy + (cy - canvas_cy) * factor
    return Rect(
        x=_round(new_cx - new_w / 2),
        y=_round(new_cy - new_h / 2),
        width=_round(new_w),
        height=_round(new_h),
    )


def apply_scale_factor(layout: CardLayout, factor: float) -> CardLayout:
    if factor == 1.0:
        return layout
    w, h = layout.canvas_width, layout.canvas_height

    def panel(p: PanelRect) -> PanelRect:
        return PanelRect(panel_id=p.panel_id, rect=scale_rect(p.rect, factor, w, h))

    return CardLayout(
        variant=layout.variant,
        canvas_width=w,
        canvas_height=h,
        illustration_frame=scale_rect(layout.illustration_frame, factor, w, h),
        title_panel=panel(layout.title_panel),
        content_panels=tuple(panel(p) for p in layout.content_panels),
    )


def apply_scale(layout: CardLayout, preset: Union[ScalePreset, str, None] = ScalePreset.STANDARD) -> CardLayout:
    """
    Apply a scale preset to every interior rect.

    The canvas never changes; only the margins grow. ``standard`` returns the
    very same layout object.
    """
    return apply_scale_factor(layout, get_scale_factor(preset or ScalePreset.STANDARD))


# ============================================
# Catalogue
# ============================================

def _content(*rects) -> tuple:
    ids = (PanelId.CONTENT1, PanelId.CONTENT2, PanelId.CONTENT3, PanelId.CONTENT4)
    return tuple(PanelRect(panel_id=pid, rect=Rect(*r)) for pid, r in zip(ids, rects))


@register_layout(LayoutVariantId.LANDSCAPE_SQUARE)
def layout_landscape_square() -> CardLayout:
    """
    Landscape card, tall illustration on the left.

    Structure:
    - Illustration frame down the left side
    - Title across the top right
    - 2x2 grid of near-square content panels
    """
    return CardLayout(
        variant=LayoutVariantId.LANDSCAPE_SQUARE,
        canvas_width=LANDSCAPE_CANVAS[0],
        canvas_height=LANDSCAPE_CANVAS[1],
        illustration_frame=Rect(40, 40, 390, 688),
        title_panel=PanelRect(PanelId.TITLE, Rect(480, 40, 504, 100)),
        content_panels=_content(
            (480, 190, 227, 244),
            (757, 190, 227, 244),
            (480, 484, 227, 244),
            (757, 484, 227, 244),
        ),
    )


@register_layout(LayoutVariantId.LANDSCAPE_FLAT)
def layout_landscape_flat() -> CardLayout:
    """Landscape card with shorter content panels; the right column is vertically centred."""
    return CardLayout(
        variant=LayoutVariantId.LANDSCAPE_FLAT,
        canvas_width=LANDSCAPE_CANVAS[0],
        canvas_height=LANDSCAPE_CANVAS[1],
        illustration_frame=Rect(40, 40, 390, 688),
        title_panel=PanelRect(PanelId.TITLE, Rect(480, 124, 504, 100)),
        content_panels=_content(
            (480, 274, 227, 160),
            (757, 274, 227, 160),
            (480, 484, 227, 160),
            (757, 484, 227, 160),
        ),
    )


@register_layout(LayoutVariantId.PORTRAIT_SQUARE)
def layout_portrait_square() -> CardLayout:
    """
    Portrait card, square illustration on top.

    Title sits under the illustration, content panels in a 2x2 grid below.
    """
    return CardLayout(
        variant=LayoutVariantId.PORTRAIT_SQUARE,
        canvas_width=PORTRAIT_CANVAS[0],
        canvas_height=PORTRAIT_CANVAS[1],
        illustration_frame=Rect(144, 40, 480, 480),
        title_panel=PanelRect(PanelId.TITLE, Rect(144, 570, 480, 70)),
        content_panels=_content(
            (144, 690, 215, 130),
            (409, 690, 215, 130),
            (144, 870, 215, 110),
            (409, 870, 215, 110),
        ),
    )


@register_layout(LayoutVariantId.PORTRAIT_FLAT)
def layout_portrait_flat() -> CardLayout:
    return CardLayout(
        variant=LayoutVariantId.PORTRAIT_FLAT,
        canvas_width=PORTRAIT_CANVAS[0],
        canvas_height=PORTRAIT_CANVAS[1],
        illustration_frame=Rect(144, 40, 480, 480),
        title_panel=PanelRect(PanelId.TITLE, Rect(144, 570, 480, 70)),
        content_panels=_content(
            (144, 690, 215, 90),
            (409, 690, 215, 90),
            (144, 830, 215, 90),
            (409, 830, 215, 90),
        ),
    )


def all_layouts() -> Dict[LayoutVariantId, CardLayout]:
    return dict(_layout_registry)
