"""
Text glyph layer for card panels.

Greedy hard wrap by an average glyph width, font auto-shrink in 2px steps,
lines centred horizontally and as a block vertically, with a drop shadow.
"""
import math
from typing import List, Optional, Union

from domain.models import PanelId, Rect
from services.rasterizer import PlacedLayer, rasterize
from services.shapes import Drawing, DropShadow, TextRun

FONT_COLOR = "#FFFFFF"
TITLE_FONT_SIZE = 48
TITLE_LINE_HEIGHT = 1.3
CONTENT_FONT_SIZE = 36
CONTENT_LINE_HEIGHT = 1.4
MIN_FONT_SIZE = 24
FONT_STEP = 2
RENDER_LINE_HEIGHT = 1.4

AVG_GLYPH_WIDTH_RATIO = 0.8
HORIZONTAL_PADDING = 40
VERTICAL_PADDING = 20

TEXT_SHADOW = DropShadow(dx=1, dy=1, std_dev=1, color="rgba(0, 0, 0, 0.8)")


def _is_title(panel_id: Union[PanelId, str]) -> bool:
    return str(getattr(panel_id, "value", panel_id)) == PanelId.TITLE.value


def max_chars_per_line(width: int, font_size: int) -> int:
    avg = font_size * AVG_GLYPH_WIDTH_RATIO
    return max(1, int(math.floor((width - HORIZONTAL_PADDING) / avg)))


def wrap_text(text: str, width: int, font_size: int) -> List[str]:
    """Split on newlines, then hard-split each paragraph every N characters."""
    limit = max_chars_per_line(width, font_size)
    lines: List[str] = []
    for paragraph in text.split("\n"):
        if len(paragraph) <= limit:
            lines.append(paragraph)
            continue
        for start in range(0, len(paragraph), limit):
            lines.append(paragraph[start:start + limit])
    return lines


def count_lines(text: str, width: int, font_size: int) -> int:
    return len(wrap_text(text, width, font_size))


def calculate_font_size(text: str, panel_id: Union[PanelId, str], width: int, height: int) -> int:
    """Shrink from the panel's base size until the wrapped block fits, never below the floor."""
    if _is_title(panel_id):
        font_size, line_height = TITLE_FONT_SIZE, TITLE_LINE_HEIGHT
    else:
        font_size, line_height = CONTENT_FONT_SIZE, CONTENT_LINE_HEIGHT
    available = height - VERTICAL_PADDING
    while font_size > MIN_FONT_SIZE:
        if count_lines(text, width, font_size) * font_size * line_height <= available:
            break
        font_size -= FONT_STEP
    return max(font_size, MIN_FONT_SIZE)


def build_text_drawing(text: str, width: int, height: int, font_size: int) -> Drawing:
    lines = wrap_text(text, width, font_size)
    line_height = font_size * RENDER_LINE_HEIGHT
    start_y = (height - len(lines) * line_height) / 2 + font_size * AVG_GLYPH_WIDTH_RATIO
    runs = [
        TextRun(x=width / 2, y=start_y + i * line_height, text=line, font_size=font_size, color=FONT_COLOR)
        for i, line in enumerate(lines)
    ]
    drawing = Drawing(width, height)
    drawing.add(*runs, filter=TEXT_SHADOW)
    return drawing


def render_text_layer(text: Optional[str], panel_id: Union[PanelId, str], rect: Rect) -> Optional[PlacedLayer]:
    """Rasterized glyphs for a panel placed flush with ``rect``, or None when there is nothing to draw."""
    if not text or not text.strip():
        return None
    font_size = calculate_font_size(text, panel_id, rect.width, rect.height)
    drawing = build_text_drawing(text, rect.width, rect.height, font_size)
    return PlacedLayer(image=rasterize(drawing), x=rect.x, y=rect.y, drawing=drawing)
