import pytest

from domain.models import PanelId, Rect
from services.shapes import shapes_to_svg
from services.text_layer import (
    MIN_FONT_SIZE,
    TITLE_FONT_SIZE,
    build_text_drawing,
    calculate_font_size,
    max_chars_per_line,
    render_text_layer,
    wrap_text,
)


def test_wrap_is_a_hard_split_by_average_glyph_width():
    assert max_chars_per_line(200, 36) == 5
    assert wrap_text("abcdefghij", 200, 36) == ["abcde", "fghij"]
    assert wrap_text("ab\n\ncd", 200, 36) == ["ab", "", "cd"]


def test_narrow_panel_still_fits_one_char():
    assert max_chars_per_line(30, 48) == 1


def test_short_title_keeps_base_size():
    assert calculate_font_size("勇者", PanelId.TITLE, 504, 100) == TITLE_FONT_SIZE


def test_font_shrinks_in_steps_to_the_floor():
    long_text = "x" * 400
    size = calculate_font_size(long_text, "content1", 227, 244)
    assert size == MIN_FONT_SIZE
    medium = calculate_font_size("y" * 30, "content1", 227, 244)
    assert MIN_FONT_SIZE <= medium <= 36
    assert (36 - medium) % 2 == 0


def test_lines_are_centred_and_shadowed():
    drawing = build_text_drawing("abcdefghij", 200, 150, 36)
    layer = drawing.layers[0]
    assert layer.filter is not None
    assert [run.x for run in layer.shapes] == [100, 100]
    first, second = layer.shapes
    assert second.y - first.y == pytest.approx(36 * 1.4)


def test_markup_characters_survive_serialization():
    drawing = build_text_drawing("<Dragon & Co>", 600, 100, 36)
    assert len(drawing.layers[0].shapes) == 1
    assert "&lt;Dragon &amp; Co&gt;" in shapes_to_svg(drawing)


def test_blank_text_renders_nothing():
    assert render_text_layer("", "content2", Rect(0, 0, 200, 100)) is None
    assert render_text_layer("   ", "content2", Rect(0, 0, 200, 100)) is None
    assert render_text_layer(None, "content2", Rect(0, 0, 200, 100)) is None


def test_text_layer_draws_glyphs():
    placed = render_text_layer("HELLO", "title", Rect(480, 40, 300, 100))
    assert (placed.x, placed.y) == (480, 40)
    img = placed.image
    assert img.size == (300, 100)
    assert img.getchannel("A").getbbox() is not None
