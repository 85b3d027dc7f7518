"""
Core domain models for the card compositor.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class LayoutVariantId(str, Enum):
    """The fixed catalogue of card layouts (orientation + content-panel shape)."""
    LANDSCAPE_SQUARE = "landscape-square"
    LANDSCAPE_FLAT = "landscape-flat"
    PORTRAIT_SQUARE = "portrait-square"
    PORTRAIT_FLAT = "portrait-flat"


class LayoutMode(str, Enum):
    """Legacy two-way layout selector, kept for older request shapes."""
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"


class ScalePreset(str, Enum):
    STANDARD = "standard"
    MODERATE = "moderate"
    COMPACT = "compact"
    SLIM = "slim"
    MINI = "mini"


class TextureType(str, Enum):
    MATTE_PAPER = "matte-paper"
    SILK = "silk"
    INK_WASH = "ink-wash"
    NONE = "none"


class TexturePattern(str, Enum):
    NOISE = "noise"
    DIAGONAL_LINES = "diagonal-lines"
    CLOUD = "cloud"
    NONE = "none"


class BlurIntensity(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    STRONG = "strong"


class GlowIntensity(str, Enum):
    SUBTLE = "subtle"
    MEDIUM = "medium"
    STRONG = "strong"
    NONE = "none"


class FramePresetId(str, Enum):
    CYBER = "cyber"
    CLASSIC = "classic"
    MINIMAL = "minimal"
    FANTASY = "fantasy"
    BATTLE = "battle"
    NONE = "none"


class BorderPreset(str, Enum):
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"


class PanelColorId(str, Enum):
    OBSIDIAN = "obsidian"
    BRONZE = "bronze"
    SLATE = "slate"
    BURGUNDY = "burgundy"
    FOREST = "forest"
    NAVY = "navy"


class CropAnchor(str, Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class BorderKind(str, Enum):
    """Illustration frames get square corners, text panels rounded ones."""
    ILLUSTRATION_FRAME = "illustration-frame"
    TEXT_PANEL = "text-panel"


class PanelId(str, Enum):
    TITLE = "title"
    CONTENT1 = "content1"
    CONTENT2 = "content2"
    CONTENT3 = "content3"
    CONTENT4 = "content4"


class CornerPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"


class EdgePosition(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


# Geometry

@dataclass(frozen=True)
class Rect:
    """Axis-aligned pixel rectangle (top-left origin)."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class PanelRect:
    """A text panel slot in a layout, identified by a stable panel id."""
    panel_id: PanelId
    rect: Rect


@dataclass(frozen=True)
class CardLayout:
    """
    Resolved layout for one card.

    Owns exactly one illustration frame, one title panel and four content
    panels. Catalogue entries are shared read-only; scaling returns a copy.
    """
    variant: LayoutVariantId
    canvas_width: int
    canvas_height: int
    illustration_frame: Rect
    title_panel: PanelRect
    content_panels: Tuple[PanelRect, PanelRect, PanelRect, PanelRect]

    @property
    def panels(self) -> Tuple[PanelRect, ...]:
        """Panels in compositing order: title, then content1..4."""
        return (self.title_panel,) + tuple(self.content_panels)

    @property
    def mode(self) -> LayoutMode:
        if self.variant.value.startswith("landscape"):
            return LayoutMode.LANDSCAPE
        return LayoutMode.PORTRAIT

    @property
    def is_portrait(self) -> bool:
        return self.mode == LayoutMode.PORTRAIT


@dataclass
class TextPanelContent:
    """Per-request text for one panel. Unknown panel ids are ignored."""
    panel_id: str
    text: str = ""


# Style configuration (immutable preset tables live in services.style_presets)

@dataclass(frozen=True)
class BorderDimensions:
    """Per-edge widths of a multi-ring border, outermost first."""
    outer_stroke_width: float
    gap_width: float
    inner_stroke_width: float
    hairline_width: float
    glow_padding: int = 0


@dataclass(frozen=True)
class GlowConfig:
    blur_radius: float
    color: str
    opacity: float
    spread_radius: float


@dataclass(frozen=True)
class TextureConfig:
    pattern: TexturePattern
    opacity: float
    scale: float


@dataclass(frozen=True)
class BlurConfig:
    blur: float
    opacity: float


@dataclass(frozen=True)
class GradientLightConfig:
    top_brightness: float = 0.10
    bottom_darkness: float = 0.06
    stop_count: int = 3


@dataclass(frozen=True)
class BorderStyle:
    """Five-stop metallic gradient plus a highlight colour."""
    gradient: Tuple[str, ...]
    highlight: str


@dataclass(frozen=True)
class ColorScheme:
    primary: str
    secondary: str
    accent: str


@dataclass(frozen=True)
class FramePreset:
    id: FramePresetId
    name: str
    corner_asset_path: str
    edge_asset_path: str
    corner_size: int
    edge_thickness: int
    inset_offset: int
    color_scheme: ColorScheme


# Frame assembly output models

@dataclass(frozen=True)
class CornerPlacement:
    position: CornerPosition
    x: int
    y: int
    size: int
    flop: bool = False  # horizontal mirror
    flip: bool = False  # vertical mirror
    rotate: int = 0


@dataclass(frozen=True)
class EdgePlacement:
    position: EdgePosition
    x: int
    y: int
    width: int
    height: int
    length: int
    rotate: int = 0


@dataclass
class FrameRenderInfo:
    """Resolved frame geometry for one canvas, before any compositing."""
    preset_id: FramePresetId
    scale_factor: float
    corner_size: int
    edge_thickness: int
    inset_offset: int
    corners: List[CornerPlacement] = field(default_factory=list)
    edges: List[EdgePlacement] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "presetId": self.preset_id.value,
            "scaleFactor": self.scale_factor,
            "cornerSize": self.corner_size,
            "edgeThickness": self.edge_thickness,
            "insetOffset": self.inset_offset,
            "corners": [
                {"position": c.position.value, "x": c.x, "y": c.y, "size": c.size}
                for c in self.corners
            ],
            "edges": [
                {"position": e.position.value, "x": e.x, "y": e.y, "width": e.width, "height": e.height}
                for e in self.edges
            ],
        }


@dataclass
class StoredCard:
    """Result of persisting a finished card."""
    card_id: str
    relative_path: str
    width: int
    height: int
    background_generated: bool = False
    frame_preset: Optional[FramePresetId] = None
