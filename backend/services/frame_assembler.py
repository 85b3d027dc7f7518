"""
Ornamental frame assembler.

Places four mirrored corner tiles and four stretched edge strips over a
finished card. Tiles come from an injected AssetCache.
"""
import logging
from typing import Dict, List, Optional, Tuple, Union

from PIL import Image

from domain.errors import AssetNotFound, CardError, FrameRenderError
from domain.models import (
    CornerPlacement,
    CornerPosition,
    EdgePlacement,
    EdgePosition,
    FramePreset,
    FramePresetId,
    FrameRenderInfo,
    LayoutMode,
    LayoutVariantId,
)
from services.asset_cache import AssetCache
from services.frame_presets import (
    ERROR_ASSET_NOT_FOUND,
    ERROR_RENDER_FAILED,
    INSET_MAX,
    INSET_MIN,
    get_frame_preset,
)
from services.rasterizer import composite_at

logger = logging.getLogger(__name__)

PORTRAIT_FRAME_SCALE = 0.95
LANDSCAPE_FRAME_SCALE = 1.0

ALL_CORNERS = (
    CornerPosition.TOP_LEFT,
    CornerPosition.TOP_RIGHT,
    CornerPosition.BOTTOM_LEFT,
    CornerPosition.BOTTOM_RIGHT,
)
ALL_EDGES = (EdgePosition.TOP, EdgePosition.RIGHT, EdgePosition.BOTTOM, EdgePosition.LEFT)

# (flop, flip, rotate) per corner; the tile artwork is drawn as the top-left corner
CORNER_TRANSFORMS: Dict[CornerPosition, Tuple[bool, bool, int]] = {
    CornerPosition.TOP_LEFT: (False, False, 0),
    CornerPosition.TOP_RIGHT: (True, False, 0),
    CornerPosition.BOTTOM_LEFT: (False, True, 0),
    CornerPosition.BOTTOM_RIGHT: (False, False, 180),
}

Orientation = Union[LayoutVariantId, LayoutMode, str, None]


def _round(value: float) -> int:
    return int(value + 0.5)


def get_scale_factor_for_layout(orientation: Orientation = None) -> float:
    """Portrait cards render frame tiles at 95%; landscape, or no layout, at 100%."""
    if not orientation:
        return LANDSCAPE_FRAME_SCALE
    value = getattr(orientation, "value", orientation)
    return PORTRAIT_FRAME_SCALE if str(value).startswith("portrait") else LANDSCAPE_FRAME_SCALE


def clamp_inset(inset: float) -> int:
    return int(max(INSET_MIN, min(INSET_MAX, inset)))


def corner_position(
    position: CornerPosition, card_width: int, card_height: int, corner_size: int, inset: int
) -> Tuple[int, int]:
    far_x = card_width - corner_size - inset
    far_y = card_height - corner_size - inset
    return {
        CornerPosition.TOP_LEFT: (inset, inset),
        CornerPosition.TOP_RIGHT: (far_x, inset),
        CornerPosition.BOTTOM_LEFT: (inset, far_y),
        CornerPosition.BOTTOM_RIGHT: (far_x, far_y),
    }[position]


def edge_rect(
    position: EdgePosition, card_width: int, card_height: int, corner_size: int, thickness: int, inset: int
) -> Tuple[int, int, int, int]:
    """(x, y, width, height) of an edge strip spanning the gap between two corners."""
    start = corner_size + inset
    if position == EdgePosition.TOP:
        return (start, inset, card_width - 2 * start, thickness)
    if position == EdgePosition.BOTTOM:
        return (start, card_height - thickness - inset, card_width - 2 * start, thickness)
    if position == EdgePosition.LEFT:
        return (inset, start, thickness, card_height - 2 * start)
    return (card_width - thickness - inset, start, thickness, card_height - 2 * start)


def get_frame_render_info(
    preset_id: Union[FramePresetId, str],
    card_width: int,
    card_height: int,
    orientation: Orientation = None,
    inset_offset: Optional[int] = None,
    edge_thickness: Optional[int] = None,
) -> FrameRenderInfo:
    """Resolve every corner and edge placement for a canvas without drawing anything."""
    preset = get_frame_preset(preset_id)
    factor = get_scale_factor_for_layout(orientation)
    corner_size = _round(preset.corner_size * factor)
    thickness = _round((edge_thickness if edge_thickness is not None else preset.edge_thickness) * factor)
    inset = clamp_inset(inset_offset if inset_offset is not None else preset.inset_offset)

    info = FrameRenderInfo(
        preset_id=preset.id,
        scale_factor=factor,
        corner_size=corner_size,
        edge_thickness=thickness,
        inset_offset=inset,
    )
    if preset.id == FramePresetId.NONE:
        return info

    for position in ALL_CORNERS:
        x, y = corner_position(position, card_width, card_height, corner_size, inset)
        flop, flip, rotate = CORNER_TRANSFORMS[position]
        info.corners.append(CornerPlacement(position, x, y, corner_size, flop=flop, flip=flip, rotate=rotate))
    for position in ALL_EDGES:
        x, y, w, h = edge_rect(position, card_width, card_height, corner_size, thickness, inset)
        vertical = position in (EdgePosition.LEFT, EdgePosition.RIGHT)
        info.edges.append(EdgePlacement(position, x, y, w, h, length=h if vertical else w, rotate=90 if vertical else 0))
    return info


def transform_corner(tile: Image.Image, placement: CornerPlacement) -> Image.Image:
    if placement.rotate == 180:
        return tile.transpose(Image.Transpose.ROTATE_180)
    if placement.flop and placement.flip:
        return tile.transpose(Image.Transpose.ROTATE_180)
    if placement.flop:
        return tile.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    if placement.flip:
        return tile.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    return tile


def render_corner(cache: AssetCache, preset: FramePreset, placement: CornerPlacement) -> Image.Image:
    tile = cache.load_with_size(preset.corner_asset_path, placement.size, placement.size)
    return transform_corner(tile, placement)


def render_edge_strip(cache: AssetCache, preset: FramePreset, placement: EdgePlacement) -> Image.Image:
    """The edge tile is horizontal; vertical strips are stretched then turned 90 degrees clockwise."""
    if placement.rotate == 90:
        strip = cache.load_with_size(preset.edge_asset_path, placement.length, placement.width)
        return strip.transpose(Image.Transpose.ROTATE_270)
    return cache.load_with_size(preset.edge_asset_path, placement.length, placement.height)


def _validate_preset_assets(cache: AssetCache, preset: FramePreset) -> None:
    for path in (preset.corner_asset_path, preset.edge_asset_path):
        if not cache.exists(path):
            logger.warning("[frame] %s: %s", preset.id.value, ERROR_ASSET_NOT_FOUND.format(path=path))
            raise AssetNotFound(path, stage="frame")


def render_frame(
    card_image: Image.Image,
    preset_id: Union[FramePresetId, str],
    card_width: Optional[int] = None,
    card_height: Optional[int] = None,
    orientation: Orientation = None,
    inset_offset: Optional[int] = None,
    edge_thickness: Optional[int] = None,
    cache: Optional[AssetCache] = None,
) -> Image.Image:
    """
    Composite an ornamental frame over a finished card.

    The "none" preset returns ``card_image`` itself, untouched.

    Raises:
        UnknownPreset: If the preset id is not in the catalogue
        AssetNotFound: If a tile for the preset is missing
        FrameRenderError: If compositing the tiles fails
    """
    preset = get_frame_preset(preset_id)
    if preset.id == FramePresetId.NONE:
        return card_image

    cache = cache or AssetCache()
    _validate_preset_assets(cache, preset)

    width = card_width or card_image.width
    height = card_height or card_image.height
    info = get_frame_render_info(preset.id, width, height, orientation, inset_offset, edge_thickness)

    try:
        framed = card_image.convert("RGBA")
        for corner in info.corners:
            composite_at(framed, render_corner(cache, preset, corner), corner.x, corner.y)
        drawn_edges: List[str] = []
        for edge in info.edges:
            if edge.length <= 0:
                continue
            composite_at(framed, render_edge_strip(cache, preset, edge), edge.x, edge.y)
            drawn_edges.append(edge.position.value)
    except CardError:
        raise
    except Exception as exc:
        raise FrameRenderError(ERROR_RENDER_FAILED.format(detail=exc), stage="frame") from exc

    logger.info(
        "[frame] %s applied (scale=%.2f corner=%d thickness=%d inset=%d edges=%s)",
        preset.id.value, info.scale_factor, info.corner_size, info.edge_thickness, info.inset_offset,
        ",".join(drawn_edges) or "none",
    )
    return framed
