import pytest

from domain.errors import GeometryValidationError, GeometryValidationWarning
from domain.models import BorderDimensions, BorderKind, GlowIntensity, LayoutVariantId, Rect, ScalePreset
from services.border_space import (
    border_footprint,
    deflate_rect,
    inflate_rect,
    ring_width,
    total_space,
    validate_gap,
    validate_layout_borders,
    validate_within_canvas,
)
from services.layout_catalogue import apply_scale, resolve_layout


def test_footprints_per_kind_and_glow():
    frame = border_footprint(BorderKind.ILLUSTRATION_FRAME, GlowIntensity.MEDIUM)
    panel = border_footprint(BorderKind.TEXT_PANEL, GlowIntensity.MEDIUM)
    assert ring_width(frame) == 10
    assert ring_width(panel) == 8
    assert total_space(frame) == 19
    assert total_space(panel) == 17
    assert total_space(border_footprint(BorderKind.TEXT_PANEL, "none")) == 8


@pytest.mark.parametrize("glow", list(GlowIntensity))
@pytest.mark.parametrize("kind", list(BorderKind))
def test_inflate_then_deflate_reproduces_rect(kind, glow):
    rect = Rect(480, 190, 227, 244)
    space = total_space(border_footprint(kind, glow))
    inflated = inflate_rect(rect, space)
    assert inflated.width == rect.width + 2 * space
    assert deflate_rect(inflated, space) == rect


def test_gap_boundary():
    dims = border_footprint(BorderKind.TEXT_PANEL, GlowIntensity.MEDIUM)
    space = total_space(dims)
    a = Rect(0, 0, 100, 100)
    exact = Rect(100 + 2 * space + 2, 0, 100, 100)
    short = Rect(100 + 2 * space + 1, 0, 100, 100)
    assert validate_gap(a, dims, exact, dims, min_gap=2)
    assert not validate_gap(a, dims, short, dims, min_gap=2)

    below = Rect(0, 100 + 2 * space + 2, 100, 100)
    assert validate_gap(a, dims, below, dims, min_gap=2)
    assert not validate_gap(a, dims, Rect(0, 100 + 2 * space + 1, 100, 100), dims, min_gap=2)


def test_diagonal_neighbours_always_pass():
    dims = BorderDimensions(4, 1, 1, 2, 0)
    a = Rect(0, 0, 100, 100)
    # footprints only touch at a corner
    b = Rect(100 + 16, 100 + 16, 50, 50)
    assert validate_gap(a, dims, b, dims, min_gap=2)


def test_overlap_always_fails():
    dims = BorderDimensions(4, 1, 1, 2, 0)
    assert not validate_gap(Rect(0, 0, 100, 100), dims, Rect(50, 50, 100, 100), dims, min_gap=0)


def test_within_canvas():
    dims = border_footprint(BorderKind.ILLUSTRATION_FRAME, GlowIntensity.MEDIUM)
    assert validate_within_canvas(Rect(19, 19, 100, 100), dims, 200, 200)
    assert not validate_within_canvas(Rect(18, 19, 100, 100), dims, 200, 200)


@pytest.mark.parametrize("variant", list(LayoutVariantId))
def test_catalogue_layouts_pass_at_standard_scale(variant):
    result = validate_layout_borders(resolve_layout(variant), GlowIntensity.MEDIUM)
    assert result.valid, result.errors
    assert result.warning is None


def test_violations_are_advisory_unless_strict(caplog):
    layout = apply_scale(resolve_layout("landscape-square"), ScalePreset.MINI)
    result = validate_layout_borders(layout, GlowIntensity.MEDIUM)
    assert not result.valid
    assert "title too close to content1" in result.errors
    assert isinstance(result.warning, GeometryValidationWarning)
    assert "[border-space]" in caplog.text

    with pytest.raises(GeometryValidationError) as exc:
        validate_layout_borders(layout, GlowIntensity.MEDIUM, strict=True)
    assert exc.value.errors == result.errors
