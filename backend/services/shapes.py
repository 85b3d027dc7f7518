"""
Structured vector-shape descriptions.

Layer generators describe what to draw as plain dataclasses; the rasterizer
turns a Drawing into pixels and ``shapes_to_svg`` turns it into markup for
debug artifacts. Coordinates are pixels relative to the drawing's origin.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union
from xml.sax.saxutils import escape


# Fills

@dataclass
class Solid:
    color: str


@dataclass
class LinearGradient:
    """Evenly spaced colour stops; ``direction`` is "vertical" or "diagonal" (top-left to bottom-right)."""
    stops: Tuple[str, ...]
    direction: str = "vertical"


@dataclass
class Pattern:
    """A tile drawing repeated over the shape, optionally rotated about the origin."""
    tile: "Drawing"
    rotate: float = 0.0


Fill = Union[Solid, LinearGradient, Pattern]


# Shapes

@dataclass
class RectShape:
    x: float
    y: float
    width: float
    height: float
    radius: float = 0.0
    fill: Optional[Fill] = None
    stroke: Optional[Fill] = None
    stroke_width: float = 0.0
    opacity: float = 1.0


@dataclass
class CircleShape:
    cx: float
    cy: float
    r: float
    fill: Fill


@dataclass
class EllipseShape:
    cx: float
    cy: float
    rx: float
    ry: float
    fill: Fill


@dataclass
class LineShape:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    width: float = 1.0


@dataclass
class TextRun:
    """A single line of text centred on (x, y) both horizontally and vertically."""
    x: float
    y: float
    text: str
    font_size: int
    color: str = "#FFFFFF"
    bold: bool = True


Shape = Union[RectShape, CircleShape, EllipseShape, LineShape, TextRun]


# Filters (applied to a whole layer)

@dataclass
class GlowFilter:
    """Blurred, flooded and dilated silhouette merged under the layer."""
    blur: float
    color: str
    opacity: float
    spread: float


@dataclass
class FrostFilter:
    """Gaussian blur followed by an alpha multiplier."""
    std_dev: float
    opacity: float


@dataclass
class DropShadow:
    dx: float
    dy: float
    std_dev: float
    color: str = "rgba(0, 0, 0, 1)"


Filter = Union[GlowFilter, FrostFilter, DropShadow]


@dataclass
class Layer:
    shapes: List[Shape] = field(default_factory=list)
    filter: Optional[Filter] = None
    opacity: float = 1.0
    blend: str = "normal"  # "normal" or "overlay"


@dataclass
class Drawing:
    width: int
    height: int
    layers: List[Layer] = field(default_factory=list)

    def add(self, *shapes: Shape, **layer_kwargs) -> Layer:
        layer = Layer(shapes=list(shapes), **layer_kwargs)
        self.layers.append(layer)
        return layer


# ============================================
# SVG serialization (debug artifacts)
# ============================================

def escape_text(text: str) -> str:
    """Escape markup-significant characters, quotes included."""
    return escape(text, {'"': "&quot;", "'": "&apos;"})


def _num(v: float) -> str:
    return f"{v:g}"


class _SvgWriter:
    def __init__(self) -> None:
        self.defs: List[str] = []
        self._counter = 0

    def next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}{self._counter}"

    def paint(self, fill: Optional[Fill]) -> str:
        if fill is None:
            return "none"
        if isinstance(fill, Solid):
            return escape_text(fill.color)
        if isinstance(fill, LinearGradient):
            gid = self.next_id("grad")
            x2, y2 = ("100%", "100%") if fill.direction == "diagonal" else ("0%", "100%")
            stops = "".join(
                f'<stop offset="{_offset(i, len(fill.stops))}" style="stop-color:{escape_text(c)}"/>'
                for i, c in enumerate(fill.stops)
            )
            self.defs.append(f'<linearGradient id="{gid}" x1="0%" y1="0%" x2="{x2}" y2="{y2}">{stops}</linearGradient>')
            return f"url(#{gid})"
        pid = self.next_id("pattern")
        transform = f' patternTransform="rotate({_num(fill.rotate)})"' if fill.rotate else ""
        body = "".join(self.shape(s) for layer in fill.tile.layers for s in layer.shapes)
        self.defs.append(
            f'<pattern id="{pid}" patternUnits="userSpaceOnUse" width="{fill.tile.width}" '
            f'height="{fill.tile.height}"{transform}>{body}</pattern>'
        )
        return f"url(#{pid})"

    def filter(self, flt: Optional[Filter]) -> str:
        if flt is None:
            return ""
        fid = self.next_id("filter")
        if isinstance(flt, GlowFilter):
            body = (
                f'<feGaussianBlur in="SourceAlpha" stdDeviation="{_num(flt.blur)}" result="blur"/>'
                f'<feFlood flood-color="{escape_text(flt.color)}" flood-opacity="{_num(flt.opacity)}"/>'
                f'<feComposite in2="blur" operator="in"/>'
                f'<feMorphology operator="dilate" radius="{_num(flt.spread)}"/>'
                f'<feMerge><feMergeNode/><feMergeNode in="SourceGraphic"/></feMerge>'
            )
        elif isinstance(flt, FrostFilter):
            body = (
                f'<feGaussianBlur in="SourceGraphic" stdDeviation="{_num(flt.std_dev)}" result="blur"/>'
                f'<feColorMatrix in="blur" type="matrix" values="1 0 0 0 0 0 1 0 0 0 0 0 1 0 0 0 0 0 {_num(flt.opacity)} 0"/>'
            )
        else:
            body = (
                f'<feDropShadow dx="{_num(flt.dx)}" dy="{_num(flt.dy)}" stdDeviation="{_num(flt.std_dev)}" '
                f'flood-color="{escape_text(flt.color)}"/>'
            )
        self.defs.append(f'<filter id="{fid}" x="-50%" y="-50%" width="200%" height="200%">{body}</filter>')
        return f' filter="url(#{fid})"'

    def shape(self, s: Shape) -> str:
        if isinstance(s, RectShape):
            stroke = ""
            if s.stroke is not None and s.stroke_width > 0:
                stroke = f' stroke="{self.paint(s.stroke)}" stroke-width="{_num(s.stroke_width)}"'
            opacity = f' opacity="{_num(s.opacity)}"' if s.opacity != 1.0 else ""
            return (
                f'<rect x="{_num(s.x)}" y="{_num(s.y)}" width="{_num(s.width)}" height="{_num(s.height)}" '
                f'rx="{_num(s.radius)}" ry="{_num(s.radius)}" fill="{self.paint(s.fill)}"{stroke}{opacity}/>'
            )
        if isinstance(s, CircleShape):
            return f'<circle cx="{_num(s.cx)}" cy="{_num(s.cy)}" r="{_num(s.r)}" fill="{self.paint(s.fill)}"/>'
        if isinstance(s, EllipseShape):
            return (
                f'<ellipse cx="{_num(s.cx)}" cy="{_num(s.cy)}" rx="{_num(s.rx)}" ry="{_num(s.ry)}" '
                f'fill="{self.paint(s.fill)}"/>'
            )
        if isinstance(s, LineShape):
            return (
                f'<line x1="{_num(s.x1)}" y1="{_num(s.y1)}" x2="{_num(s.x2)}" y2="{_num(s.y2)}" '
                f'stroke="{escape_text(s.stroke)}" stroke-width="{_num(s.width)}"/>'
            )
        weight = "bold" if s.bold else "normal"
        return (
            f'<text x="{_num(s.x)}" y="{_num(s.y)}" font-family="serif" font-size="{s.font_size}" '
            f'font-weight="{weight}" fill="{escape_text(s.color)}" text-anchor="middle" '
            f'dominant-baseline="middle">{escape_text(s.text)}</text>'
        )


def _offset(index: int, count: int) -> str:
    if count <= 1:
        return "0%"
    return f"{index * 100 / (count - 1):g}%"


def shapes_to_svg(drawing: Drawing) -> str:
    """Serialize a drawing to standalone SVG markup."""
    writer = _SvgWriter()
    body: List[str] = []
    for layer in drawing.layers:
        attrs = writer.filter(layer.filter)
        if layer.opacity != 1.0:
            attrs += f' opacity="{_num(layer.opacity)}"'
        if layer.blend != "normal":
            attrs += f' style="mix-blend-mode: {layer.blend};"'
        inner = "".join(writer.shape(s) for s in layer.shapes)
        body.append(f"<g{attrs}>{inner}</g>")
    defs = f"<defs>{''.join(writer.defs)}</defs>" if writer.defs else ""
    return (
        f'<svg width="{drawing.width}" height="{drawing.height}" xmlns="http://www.w3.org/2000/svg">'
        f"{defs}{''.join(body)}</svg>"
    )
