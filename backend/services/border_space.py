"""
Border-space calculator.

Pure functions for the pixel footprint of multi-ring borders and the advisory
checks that keep neighbouring borders (and their glow) apart and on-canvas.
"""
import logging
import math
from dataclasses import dataclass, field
from itertools import combinations
from typing import List, Optional, Union

from domain.errors import GeometryValidationError, GeometryValidationWarning
from domain.models import (
    BorderDimensions,
    BorderKind,
    CardLayout,
    GlowConfig,
    GlowIntensity,
    Rect,
)
from services.style_presets import get_glow_config, glow_padding

logger = logging.getLogger(__name__)

MIN_BORDER_GAP = 2

# Ring widths per border kind: (outer, gap, inner, hairline)
FRAME_RINGS = (5, 1.5, 1.5, 2)
PANEL_RINGS = (4, 1, 1, 2)
PANEL_CORNER_RADIUS = 10


def border_footprint(kind: BorderKind, glow: Union[GlowConfig, GlowIntensity, str, None] = None) -> BorderDimensions:
    """Ring widths for a border kind, plus the margin its glow needs."""
    if not isinstance(glow, GlowConfig):
        glow = get_glow_config(glow or GlowIntensity.MEDIUM)
    outer, gap, inner, hairline = FRAME_RINGS if BorderKind(kind) == BorderKind.ILLUSTRATION_FRAME else PANEL_RINGS
    return BorderDimensions(
        outer_stroke_width=outer,
        gap_width=gap,
        inner_stroke_width=inner,
        hairline_width=hairline,
        glow_padding=glow_padding(glow),
    )


def ring_width(dims: BorderDimensions) -> int:
    """Per-edge width of the drawn rings alone, without glow."""
    return int(math.ceil(dims.outer_stroke_width + dims.gap_width + dims.inner_stroke_width + dims.hairline_width))


def total_space(dims: BorderDimensions) -> int:
    """Single-edge pixel footprint: every ring plus the glow padding."""
    return ring_width(dims) + int(dims.glow_padding)


def inflate_rect(rect: Rect, amount: int) -> Rect:
    return Rect(rect.x - amount, rect.y - amount, rect.width + 2 * amount, rect.height + 2 * amount)


def deflate_rect(rect: Rect, amount: int) -> Rect:
    return inflate_rect(rect, -amount)


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # touching edges do not overlap
    return a_start < b_end and b_start < a_end


def validate_gap(
    rect_a: Rect,
    dims_a: BorderDimensions,
    rect_b: Rect,
    dims_b: BorderDimensions,
    min_gap: int = MIN_BORDER_GAP,
) -> bool:
    """
    Check two bordered rects keep at least ``min_gap`` pixels apart.

    Both rects are grown by their total border space first. Side-by-side
    neighbours are measured horizontally, stacked neighbours vertically,
    diagonal neighbours always pass and overlapping footprints always fail.
    """
    a = inflate_rect(rect_a, total_space(dims_a))
    b = inflate_rect(rect_b, total_space(dims_b))

    x_overlap = _overlaps(a.x, a.right, b.x, b.right)
    y_overlap = _overlaps(a.y, a.bottom, b.y, b.bottom)

    if not x_overlap and not y_overlap:
        return True
    if x_overlap and y_overlap:
        return False
    if y_overlap:
        gap = max(b.x - a.right, a.x - b.right)
    else:
        gap = max(b.y - a.bottom, a.y - b.bottom)
    return gap >= min_gap


def validate_within_canvas(rect: Rect, dims: BorderDimensions, canvas_width: int, canvas_height: int) -> bool:
    r = inflate_rect(rect, total_space(dims))
    return r.x >= 0 and r.y >= 0 and r.right <= canvas_width and r.bottom <= canvas_height


@dataclass
class BorderValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)

    @property
    def warning(self) -> Optional[GeometryValidationWarning]:
        return GeometryValidationWarning(self.errors) if self.errors else None


def validate_layout_borders(
    layout: CardLayout,
    glow: Union[GlowConfig, GlowIntensity, str, None] = None,
    min_gap: int = MIN_BORDER_GAP,
    strict: bool = False,
) -> BorderValidationResult:
    """
    Validate every border footprint in a layout.

    Advisory by default: problems are logged and rendering carries on.
    With ``strict`` the same problems raise GeometryValidationError.
    """
    frame_dims = border_footprint(BorderKind.ILLUSTRATION_FRAME, glow)
    panel_dims = border_footprint(BorderKind.TEXT_PANEL, glow)
    w, h = layout.canvas_width, layout.canvas_height
    errors: List[str] = []

    if not validate_within_canvas(layout.illustration_frame, frame_dims, w, h):
        errors.append("illustration frame border exceeds canvas")
    for panel in layout.panels:
        if not validate_within_canvas(panel.rect, panel_dims, w, h):
            errors.append(f"{panel.panel_id.value} border exceeds canvas")

    title = layout.title_panel
    if not validate_gap(layout.illustration_frame, frame_dims, title.rect, panel_dims, min_gap):
        errors.append(f"illustration frame too close to {title.panel_id.value}")
    for panel in layout.content_panels:
        if not validate_gap(title.rect, panel_dims, panel.rect, panel_dims, min_gap):
            errors.append(f"{title.panel_id.value} too close to {panel.panel_id.value}")
    for first, second in combinations(layout.content_panels, 2):
        if not validate_gap(first.rect, panel_dims, second.rect, panel_dims, min_gap):
            errors.append(f"{first.panel_id.value} too close to {second.panel_id.value}")

    if errors:
        if strict:
            raise GeometryValidationError(errors)
        logger.warning("[border-space] %s layout: %s", layout.variant.value, "; ".join(errors))
    return BorderValidationResult(valid=not errors, errors=errors)
