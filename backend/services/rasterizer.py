"""
Pillow/numpy raster backend for shape drawings.

Each layer of a Drawing is rendered into its own RGBA buffer, filtered,
attenuated and then blended onto the accumulated canvas (normal or overlay).
Masks are drawn supersampled and box-filtered down for anti-aliased edges.
"""
import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFilter, ImageFont

from services.shapes import (
    CircleShape,
    DropShadow,
    Drawing,
    EllipseShape,
    Fill,
    Filter,
    FrostFilter,
    GlowFilter,
    Layer,
    LinearGradient,
    LineShape,
    Pattern,
    RectShape,
    Shape,
    Solid,
    TextRun,
)
from services.style_presets import to_rgba8
from settings import settings

logger = logging.getLogger(__name__)

SUPERSAMPLE = 4
FONT_CANDIDATES = (
    "DejaVuSerif-Bold.ttf",
    "LiberationSerif-Bold.ttf",
    "NotoSerif-Bold.ttf",
)
# Tried in order for runs the primary font cannot draw (CJK titles and the like).
FALLBACK_FONT_CANDIDATES = (
    "NotoSerifCJK-Bold.ttc",
    "NotoSansCJK-Bold.ttc",
    "NotoSerifCJK-Regular.ttc",
    "NotoSansCJK-Regular.ttc",
    "wqy-zenhei.ttc",
    "wqy-microhei.ttc",
    "simsun.ttc",
    "DroidSansFallbackFull.ttf",
)
# Private-use codepoint no text font maps; draws as the font's .notdef glyph.
NOTDEF_CODEPOINT = "\ue000"

BBox = Tuple[float, float, float, float]


@dataclass
class PlacedLayer:
    """A rendered layer and the canvas position of its top-left corner."""
    image: Image.Image
    x: int
    y: int
    drawing: Optional[Drawing] = None


def rasterize(drawing: Drawing) -> Image.Image:
    """Render a drawing to an RGBA image of exactly its declared size."""
    size = (max(1, int(drawing.width)), max(1, int(drawing.height)))
    canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    for layer in drawing.layers:
        canvas = composite(canvas, render_layer(layer, size), layer.blend)
    return canvas


def render_layer(layer: Layer, size: Tuple[int, int]) -> Image.Image:
    img = Image.new("RGBA", size, (0, 0, 0, 0))
    for shape in layer.shapes:
        _draw_shape(img, shape)
    if layer.filter is not None:
        img = apply_filter(img, layer.filter)
    if layer.opacity < 1.0:
        img = multiply_alpha(img, layer.opacity)
    return img


def composite(base: Image.Image, top: Image.Image, blend: str = "normal") -> Image.Image:
    if blend == "overlay":
        return blend_overlay(base, top)
    return Image.alpha_composite(base, top)


def composite_at(canvas: Image.Image, layer: Image.Image, x: int, y: int) -> None:
    """Alpha-composite ``layer`` onto ``canvas`` in place, clipping at every edge."""
    left, top = max(0, -x), max(0, -y)
    if left or top:
        if left >= layer.width or top >= layer.height:
            return
        layer = layer.crop((left, top, layer.width, layer.height))
    canvas.alpha_composite(layer, dest=(max(0, x), max(0, y)))


# ============================================
# Shapes
# ============================================

def _draw_shape(img: Image.Image, shape: Shape) -> None:
    size = img.size
    if isinstance(shape, TextRun):
        _draw_text(img, shape)
        return
    if isinstance(shape, RectShape):
        bbox = (shape.x, shape.y, shape.width, shape.height)
        if shape.fill is not None:
            mask = _downsample(
                _rect_mask_ss(size, shape.x, shape.y, shape.x + shape.width, shape.y + shape.height, shape.radius),
                size,
            )
            img.alpha_composite(_apply_mask(paint(shape.fill, size, bbox), mask, shape.opacity))
        if shape.stroke is not None and shape.stroke_width > 0:
            mask = _downsample(_stroke_mask_ss(size, shape), size)
            img.alpha_composite(_apply_mask(paint(shape.stroke, size, bbox), mask, shape.opacity))
        return

    ss = SUPERSAMPLE
    big = Image.new("L", (size[0] * ss, size[1] * ss), 0)
    draw = ImageDraw.Draw(big)
    if isinstance(shape, CircleShape):
        bbox = (shape.cx - shape.r, shape.cy - shape.r, 2 * shape.r, 2 * shape.r)
        draw.ellipse(_scaled_box(shape.cx - shape.r, shape.cy - shape.r, shape.cx + shape.r, shape.cy + shape.r), fill=255)
        fill: Fill = shape.fill
    elif isinstance(shape, EllipseShape):
        bbox = (shape.cx - shape.rx, shape.cy - shape.ry, 2 * shape.rx, 2 * shape.ry)
        draw.ellipse(_scaled_box(shape.cx - shape.rx, shape.cy - shape.ry, shape.cx + shape.rx, shape.cy + shape.ry), fill=255)
        fill = shape.fill
    elif isinstance(shape, LineShape):
        bbox = (0, 0, size[0], size[1])
        draw.line(
            [(shape.x1 * ss, shape.y1 * ss), (shape.x2 * ss, shape.y2 * ss)],
            fill=255,
            width=max(1, int(round(shape.width * ss))),
        )
        fill = Solid(shape.stroke)
    else:
        raise TypeError(f"Unsupported shape: {type(shape).__name__}")
    img.alpha_composite(_apply_mask(paint(fill, size, bbox), _downsample(big, size)))


def _scaled_box(x0: float, y0: float, x1: float, y1: float) -> Tuple[int, int, int, int]:
    ss = SUPERSAMPLE
    left, top = int(round(x0 * ss)), int(round(y0 * ss))
    right = max(left, int(round(x1 * ss)) - 1)
    bottom = max(top, int(round(y1 * ss)) - 1)
    return (left, top, right, bottom)


def _rect_mask_ss(size: Tuple[int, int], x0: float, y0: float, x1: float, y1: float, radius: float) -> Image.Image:
    ss = SUPERSAMPLE
    big = Image.new("L", (size[0] * ss, size[1] * ss), 0)
    if x1 - x0 <= 0 or y1 - y0 <= 0:
        return big
    draw = ImageDraw.Draw(big)
    box = _scaled_box(x0, y0, x1, y1)
    r = max(0.0, min(radius, (x1 - x0) / 2, (y1 - y0) / 2))
    if r > 0:
        draw.rounded_rectangle(box, radius=int(round(r * ss)), fill=255)
    else:
        draw.rectangle(box, fill=255)
    return big


def _stroke_mask_ss(size: Tuple[int, int], shape: RectShape) -> Image.Image:
    """Stroke centred on the rect outline; corner radii grow outward and shrink inward."""
    half = shape.stroke_width / 2
    x0, y0 = shape.x, shape.y
    x1, y1 = shape.x + shape.width, shape.y + shape.height
    outer_r = shape.radius + half if shape.radius > 0 else 0.0
    inner_r = max(0.0, shape.radius - half)
    outer = _rect_mask_ss(size, x0 - half, y0 - half, x1 + half, y1 + half, outer_r)
    inner = _rect_mask_ss(size, x0 + half, y0 + half, x1 - half, y1 - half, inner_r)
    return ImageChops.subtract(outer, inner)


def _downsample(mask: Image.Image, size: Tuple[int, int]) -> Image.Image:
    return mask.resize(size, Image.Resampling.BOX)


def _apply_mask(painted: Image.Image, mask: Image.Image, opacity: float = 1.0) -> Image.Image:
    arr = np.array(painted, dtype=np.float32)
    arr[..., 3] *= np.asarray(mask, dtype=np.float32) / 255.0 * opacity
    return Image.fromarray(np.clip(arr + 0.5, 0, 255).astype(np.uint8))


# ============================================
# Paint
# ============================================

def paint(fill: Fill, size: Tuple[int, int], bbox: BBox) -> Image.Image:
    if isinstance(fill, Solid):
        return Image.new("RGBA", size, to_rgba8(fill.color))
    if isinstance(fill, LinearGradient):
        return gradient_image(size, fill.stops, fill.direction, bbox)
    if isinstance(fill, Pattern):
        return pattern_image(fill, size)
    raise TypeError(f"Unsupported fill: {type(fill).__name__}")


def gradient_image(size: Tuple[int, int], stops, direction: str, bbox: BBox) -> Image.Image:
    """Linear gradient in the shape's bounding-box space, evenly spaced stops."""
    w, h = size
    bx, by, bw, bh = bbox
    colors = np.array([to_rgba8(c) for c in stops], dtype=np.float32)
    positions = np.linspace(0.0, 1.0, num=len(stops), dtype=np.float32)
    xs = (np.arange(w, dtype=np.float32) + 0.5 - bx) / max(bw, 1e-6)
    ys = (np.arange(h, dtype=np.float32) + 0.5 - by) / max(bh, 1e-6)
    if direction == "diagonal":
        t = (xs[None, :] + ys[:, None]) / 2.0
    else:
        t = np.broadcast_to(ys[:, None], (h, w))
    t = np.clip(t, 0.0, 1.0)
    out = np.empty((h, w, 4), dtype=np.float32)
    for c in range(4):
        out[..., c] = np.interp(t, positions, colors[:, c])
    return Image.fromarray(np.clip(out + 0.5, 0, 255).astype(np.uint8))


def _tile(tile: Image.Image, width: int, height: int) -> Image.Image:
    arr = np.asarray(tile)
    reps_y = int(math.ceil(height / tile.height))
    reps_x = int(math.ceil(width / tile.width))
    tiled = np.tile(arr, (reps_y, reps_x, 1))[:height, :width]
    return Image.fromarray(np.ascontiguousarray(tiled))


def pattern_image(fill: Pattern, size: Tuple[int, int]) -> Image.Image:
    """Repeat a tile over ``size``; rotation is about the user-space origin."""
    tile = rasterize(fill.tile)
    w, h = size
    if not fill.rotate:
        return _tile(tile, w, h)
    period = tile.width
    reach = int(math.ceil(math.hypot(w, h) / period)) * period
    big = _tile(tile, 2 * reach, 2 * reach)
    # SVG rotates clockwise (y down); Pillow rotates counter-clockwise
    rotated = big.rotate(-fill.rotate, resample=Image.Resampling.BICUBIC, center=(reach, reach))
    return rotated.crop((reach, reach, reach + w, reach + h))


# ============================================
# Text
# ============================================

@lru_cache(maxsize=32)
def load_font(size: int) -> ImageFont.FreeTypeFont:
    candidates = [settings.CARD_FONT_PATH] if settings.CARD_FONT_PATH else []
    candidates.extend(FONT_CANDIDATES)
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.warning("[text] no serif font found among %s, using Pillow default", candidates)
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=32)
def load_fallback_fonts(size: int) -> Tuple[ImageFont.FreeTypeFont, ...]:
    candidates = [settings.CARD_FALLBACK_FONT_PATH] if settings.CARD_FALLBACK_FONT_PATH else []
    candidates.extend(FALLBACK_FONT_CANDIDATES)
    fonts = []
    for candidate in candidates:
        try:
            fonts.append(ImageFont.truetype(candidate, size))
        except OSError:
            continue
    return tuple(fonts)


def _glyph_bytes(font: ImageFont.FreeTypeFont, char: str) -> bytes:
    side = int(getattr(font, "size", 16)) * 2 + 4
    img = Image.new("L", (side, side), 0)
    ImageDraw.Draw(img).text((2, 2), char, font=font, fill=255)
    return img.tobytes()


@lru_cache(maxsize=4096)
def has_glyph(font: ImageFont.FreeTypeFont, char: str) -> bool:
    """False when ``char`` would draw as the font's .notdef box."""
    if char.isspace():
        return True
    return _glyph_bytes(font, char) != _glyph_bytes(font, NOTDEF_CODEPOINT)


def covers_text(font: ImageFont.FreeTypeFont, text: str) -> bool:
    return all(has_glyph(font, char) for char in set(text))


def font_for_text(text: str, size: int) -> ImageFont.FreeTypeFont:
    """
    Pick the font for one text run.

    The primary serif is used whenever it can draw every character;
    otherwise the first fallback (CJK-capable) font that covers the run.
    """
    primary = load_font(size)
    if covers_text(primary, text):
        return primary
    for font in load_fallback_fonts(size):
        if covers_text(font, text):
            return font
    logger.warning("[text] no installed font covers %r, drawing it with the primary font", text)
    return primary


def _draw_text(img: Image.Image, run: TextRun) -> None:
    if not run.text:
        return
    layer = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    font = font_for_text(run.text, run.font_size)
    draw.text((run.x, run.y), run.text, font=font, fill=to_rgba8(run.color), anchor="mm")
    img.alpha_composite(layer)


# ============================================
# Filters and blending
# ============================================

def apply_filter(img: Image.Image, flt: Filter) -> Image.Image:
    if isinstance(flt, GlowFilter):
        return apply_glow(img, flt)
    if isinstance(flt, FrostFilter):
        blurred = img.filter(ImageFilter.GaussianBlur(flt.std_dev)) if flt.std_dev > 0 else img
        return multiply_alpha(blurred, flt.opacity)
    if isinstance(flt, DropShadow):
        return apply_drop_shadow(img, flt)
    raise TypeError(f"Unsupported filter: {type(flt).__name__}")


def apply_glow(img: Image.Image, glow: GlowFilter) -> Image.Image:
    """Blur the silhouette, flood it with the glow colour, dilate, merge underneath."""
    if glow.opacity <= 0:
        return img
    alpha = img.getchannel("A")
    if glow.blur > 0:
        alpha = alpha.filter(ImageFilter.GaussianBlur(glow.blur))
    r, g, b, a = to_rgba8(glow.color, glow.opacity)
    glow_alpha = alpha.point(lambda p: int(p * a / 255 + 0.5))
    spread = int(round(glow.spread))
    if spread > 0:
        glow_alpha = glow_alpha.filter(ImageFilter.MaxFilter(2 * spread + 1))
    halo = Image.new("RGBA", img.size, (r, g, b, 0))
    halo.putalpha(glow_alpha)
    return Image.alpha_composite(halo, img)


def apply_drop_shadow(img: Image.Image, shadow: DropShadow) -> Image.Image:
    alpha = img.getchannel("A")
    if shadow.std_dev > 0:
        alpha = alpha.filter(ImageFilter.GaussianBlur(shadow.std_dev))
    r, g, b, a = to_rgba8(shadow.color)
    shadow_alpha = alpha.point(lambda p: int(p * a / 255 + 0.5))
    layer = Image.new("RGBA", img.size, (r, g, b, 0))
    layer.putalpha(shadow_alpha)
    shifted = Image.new("RGBA", img.size, (0, 0, 0, 0))
    shifted.paste(layer, (int(round(shadow.dx)), int(round(shadow.dy))))
    return Image.alpha_composite(shifted, img)


def multiply_alpha(img: Image.Image, factor: float) -> Image.Image:
    out = img.copy()
    out.putalpha(img.getchannel("A").point(lambda p: int(p * factor + 0.5)))
    return out


def blend_overlay(base: Image.Image, top: Image.Image) -> Image.Image:
    """Composite ``top`` over ``base`` with the CSS "overlay" blend mode."""
    b = np.asarray(base, dtype=np.float32) / 255.0
    s = np.asarray(top, dtype=np.float32) / 255.0
    cb, ab = b[..., :3], b[..., 3:4]
    cs, a_s = s[..., :3], s[..., 3:4]
    mixed = np.where(cb <= 0.5, 2.0 * cb * cs, 1.0 - 2.0 * (1.0 - cb) * (1.0 - cs))
    cs_eff = (1.0 - ab) * cs + ab * mixed
    out_a = a_s + ab * (1.0 - a_s)
    premul = cs_eff * a_s + cb * ab * (1.0 - a_s)
    out_c = np.where(out_a > 0, premul / np.maximum(out_a, 1e-6), 0.0)
    out = np.concatenate([out_c, out_a], axis=-1)
    return Image.fromarray(np.clip(out * 255.0 + 0.5, 0, 255).astype(np.uint8))
