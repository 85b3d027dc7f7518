"""
Card compositor.

Drives the full layer pipeline for one card: background, cropped
illustration, illustration border, panel backgrounds and borders, then text.
Stateless; every call works on its own buffers.
"""
import io
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from PIL import Image, UnidentifiedImageError

from domain.errors import InvalidImageData
from domain.models import (
    BlurIntensity,
    BorderKind,
    BorderPreset,
    CardLayout,
    CropAnchor,
    GlowIntensity,
    GradientLightConfig,
    LayoutMode,
    LayoutVariantId,
    PanelColorId,
    Rect,
    ScalePreset,
    TextPanelContent,
    TextureType,
)
from services.border_layer import render_border_layer
from services.border_space import validate_layout_borders
from services.layout_catalogue import apply_scale, default_crop_anchor, resolve_layout, resolve_variant_id
from services.panel_layer import render_panel_layer
from services.rasterizer import composite_at
from services.shapes import Drawing, shapes_to_svg
from services.style_presets import get_blur_config, get_glow_config, get_texture_config
from services.text_layer import render_text_layer
from settings import settings

logger = logging.getLogger(__name__)


@dataclass
class ComposeCardOptions:
    """Everything one compose call needs. Enum fields accept their string values."""
    background: bytes
    illustration: bytes
    text_panels: List[TextPanelContent] = field(default_factory=list)
    color_id: Union[PanelColorId, str] = PanelColorId.OBSIDIAN
    layout_variant: Optional[Union[LayoutVariantId, str]] = None
    layout_mode: Optional[Union[LayoutMode, str]] = None
    border_preset: Optional[Union[BorderPreset, str]] = None
    texture: Optional[Union[TextureType, str]] = None
    blur: Optional[Union[BlurIntensity, str]] = None
    glow: Optional[Union[GlowIntensity, str]] = None
    scale: Optional[Union[ScalePreset, str]] = None
    crop_anchor: Optional[Union[CropAnchor, str]] = None
    light: Optional[GradientLightConfig] = None
    strict_geometry: Optional[bool] = None
    debug_dir: Optional[Path] = None


@dataclass
class LayerRecord:
    """Where a composited layer landed on the canvas."""
    name: str
    x: int
    y: int
    width: int
    height: int


@dataclass
class ComposedCard:
    image: Image.Image
    layout: CardLayout
    crop_anchor: CropAnchor
    layers: List[LayerRecord] = field(default_factory=list)
    geometry_errors: List[str] = field(default_factory=list)

    def layer_names(self) -> List[str]:
        return [layer.name for layer in self.layers]

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()


def decode_image(data: Optional[bytes], label: str) -> Image.Image:
    """Decode an input buffer to RGBA, failing fast on empty or corrupt data."""
    if not data:
        raise InvalidImageData(f"{label} image is empty", stage=f"decode-{label}")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise InvalidImageData(f"{label} image could not be decoded", stage=f"decode-{label}") from exc
    if img.width <= 0 or img.height <= 0:
        raise InvalidImageData(f"{label} image has no pixels", stage=f"decode-{label}")
    return img.convert("RGBA")


def cover_fit(
    image: Image.Image,
    target_width: int,
    target_height: int,
    anchor: Union[CropAnchor, str] = CropAnchor.CENTER,
) -> Image.Image:
    """
    Resize/crop to cover the target box while retaining aspect ratio.

    Horizontal crops are always centred; ``anchor`` picks the vertical band.
    """
    scale = max(target_width / image.width, target_height / image.height)
    new_size = (
        max(target_width, int(math.ceil(image.width * scale))),
        max(target_height, int(math.ceil(image.height * scale))),
    )
    resized = image.resize(new_size, Image.Resampling.LANCZOS) if new_size != image.size else image.copy()

    left = (resized.width - target_width) // 2
    anchor = CropAnchor(anchor)
    if anchor == CropAnchor.TOP:
        top = 0
    elif anchor == CropAnchor.BOTTOM:
        top = resized.height - target_height
    else:
        top = (resized.height - target_height) // 2
    return resized.crop((left, top, left + target_width, top + target_height))


def _save_debug_layer(debug_dir: Optional[Path], name: str, image: Image.Image, drawing: Optional[Drawing] = None) -> None:
    if debug_dir is None:
        return
    safe = name.replace(":", "_")
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
        image.save(debug_dir / f"{safe}.png")
        if drawing is not None:
            (debug_dir / f"{safe}.svg").write_text(shapes_to_svg(drawing), encoding="utf-8")
    except Exception:
        logger.warning("[debug-artifacts] failed to write %s into %s", name, debug_dir, exc_info=True)


def compose_card_detailed(options: ComposeCardOptions) -> ComposedCard:
    """
    Compose a card and report where every layer landed.

    Raises:
        InvalidImageData: If the background or illustration buffer is empty or undecodable
        UnknownVariant: If the layout variant or mode is not in the catalogue
        UnknownPreset: If a style enum value is unknown
        GeometryValidationError: Only in strict geometry mode
    """
    variant = resolve_variant_id(options.layout_variant, options.layout_mode)
    layout = apply_scale(resolve_layout(variant), options.scale)

    glow = get_glow_config(options.glow or GlowIntensity.MEDIUM)
    texture = get_texture_config(options.texture or TextureType.MATTE_PAPER)
    blur = get_blur_config(options.blur or BlurIntensity.MEDIUM)
    strict = settings.CARD_STRICT_GEOMETRY if options.strict_geometry is None else options.strict_geometry

    validation = validate_layout_borders(layout, glow, strict=strict)

    debug_dir = options.debug_dir if settings.CARD_DEBUG_ARTIFACTS else None
    w, h = layout.canvas_width, layout.canvas_height
    layers: List[LayerRecord] = []

    background = decode_image(options.background, "background")
    illustration = decode_image(options.illustration, "illustration")
    anchor = default_crop_anchor(layout, options.crop_anchor)

    # 1. background, cover-fit and centred
    canvas = cover_fit(background, w, h, CropAnchor.CENTER)
    layers.append(LayerRecord("background", 0, 0, w, h))
    _save_debug_layer(debug_dir, "01_background", canvas)

    # 2-3. illustration into its frame
    frame: Rect = layout.illustration_frame
    art = cover_fit(illustration, frame.width, frame.height, anchor)
    composite_at(canvas, art, frame.x, frame.y)
    layers.append(LayerRecord("illustration", frame.x, frame.y, frame.width, frame.height))
    _save_debug_layer(debug_dir, "02_illustration", art)

    # 4. illustration border
    placed = render_border_layer(frame, BorderKind.ILLUSTRATION_FRAME, glow, options.border_preset)
    composite_at(canvas, placed.image, placed.x, placed.y)
    layers.append(LayerRecord("border:illustration", placed.x, placed.y, placed.image.width, placed.image.height))
    _save_debug_layer(debug_dir, "03_border_illustration", placed.image, placed.drawing)

    # 5. panels: background then border, title first
    for panel in layout.panels:
        rect = panel.rect
        pid = panel.panel_id.value
        placed = render_panel_layer(rect, options.color_id, texture, blur, options.light)
        composite_at(canvas, placed.image, placed.x, placed.y)
        layers.append(LayerRecord(f"panel:{pid}", placed.x, placed.y, rect.width, rect.height))
        _save_debug_layer(debug_dir, f"04_panel_{pid}", placed.image, placed.drawing)

        placed = render_border_layer(rect, BorderKind.TEXT_PANEL, glow, options.border_preset)
        composite_at(canvas, placed.image, placed.x, placed.y)
        layers.append(LayerRecord(f"border:{pid}", placed.x, placed.y, placed.image.width, placed.image.height))
        _save_debug_layer(debug_dir, f"05_border_{pid}", placed.image, placed.drawing)

    # 6. text glyphs, topmost
    texts = {tp.panel_id: tp.text for tp in options.text_panels or []}
    for panel in layout.panels:
        rect = panel.rect
        pid = panel.panel_id.value
        placed = render_text_layer(texts.get(pid), panel.panel_id, rect)
        if placed is None:
            continue
        composite_at(canvas, placed.image, placed.x, placed.y)
        layers.append(LayerRecord(f"text:{pid}", placed.x, placed.y, rect.width, rect.height))
        _save_debug_layer(debug_dir, f"06_text_{pid}", placed.image, placed.drawing)

    unknown = sorted(set(texts) - {p.panel_id.value for p in layout.panels})
    if unknown:
        logger.info("[compose] ignoring text for unknown panels: %s", ", ".join(unknown))

    logger.info(
        "[compose] %s scale=%s anchor=%s layers=%d",
        layout.variant.value, ScalePreset(options.scale or ScalePreset.STANDARD).value, anchor.value, len(layers),
    )
    return ComposedCard(
        image=canvas,
        layout=layout,
        crop_anchor=anchor,
        layers=layers,
        geometry_errors=validation.errors,
    )


def compose_card(options: ComposeCardOptions) -> Image.Image:
    """Compose a card and return the finished RGBA bitmap."""
    return compose_card_detailed(options).image


def compose_card_png(options: ComposeCardOptions) -> bytes:
    return compose_card_detailed(options).to_png()
