"""
Ornamental frame preset catalogue.

Asset paths are relative to the asset root (see settings.CARD_ASSET_ROOT).
"""
from typing import Dict, List, Union

from domain.errors import UnknownPreset
from domain.models import ColorScheme, FramePreset, FramePresetId

INSET_MIN = 0
INSET_MAX = 20
THICKNESS_MIN = 15
THICKNESS_MAX = 30

FRAME_PRESETS: Dict[FramePresetId, FramePreset] = {
    FramePresetId.CYBER: FramePreset(
        id=FramePresetId.CYBER,
        name="Cyber",
        corner_asset_path="frames/cyber/corner.svg",
        edge_asset_path="frames/cyber/border.svg",
        corner_size=100,
        edge_thickness=20,
        inset_offset=10,
        color_scheme=ColorScheme(primary="#00D4FF", secondary="#0A1628", accent="#FF00FF"),
    ),
    FramePresetId.CLASSIC: FramePreset(
        id=FramePresetId.CLASSIC,
        name="Classic",
        corner_asset_path="frames/classic/corner.svg",
        edge_asset_path="frames/classic/border.svg",
        corner_size=110,
        edge_thickness=25,
        inset_offset=8,
        color_scheme=ColorScheme(primary="#D4AF37", secondary="#1A0F00", accent="#FFD700"),
    ),
    FramePresetId.MINIMAL: FramePreset(
        id=FramePresetId.MINIMAL,
        name="Minimal",
        corner_asset_path="frames/minimal/corner.svg",
        edge_asset_path="frames/minimal/border.svg",
        corner_size=80,
        edge_thickness=15,
        inset_offset=12,
        color_scheme=ColorScheme(primary="#FFFFFF", secondary="#333333", accent="#888888"),
    ),
    FramePresetId.FANTASY: FramePreset(
        id=FramePresetId.FANTASY,
        name="Fantasy",
        corner_asset_path="frames/fantasy/corner.svg",
        edge_asset_path="frames/fantasy/border.svg",
        corner_size=105,
        edge_thickness=22,
        inset_offset=10,
        color_scheme=ColorScheme(primary="#9B59B6", secondary="#1A0A2E", accent="#00FF88"),
    ),
    FramePresetId.BATTLE: FramePreset(
        id=FramePresetId.BATTLE,
        name="Battle",
        corner_asset_path="frames/battle/corner.svg",
        edge_asset_path="frames/battle/border.svg",
        corner_size=95,
        edge_thickness=24,
        inset_offset=8,
        color_scheme=ColorScheme(primary="#8B4513", secondary="#2F2F2F", accent="#CD853F"),
    ),
    FramePresetId.NONE: FramePreset(
        id=FramePresetId.NONE,
        name="No frame",
        corner_asset_path="",
        edge_asset_path="",
        corner_size=0,
        edge_thickness=0,
        inset_offset=0,
        color_scheme=ColorScheme(primary="transparent", secondary="transparent", accent="transparent"),
    ),
}

ERROR_INVALID_PRESET = "Invalid frame preset: {preset_id}"
ERROR_ASSET_NOT_FOUND = "Frame asset not found: {path}"
ERROR_RENDER_FAILED = "Frame render failed: {detail}"


def get_frame_preset(preset_id: Union[FramePresetId, str]) -> FramePreset:
    try:
        return FRAME_PRESETS[FramePresetId(preset_id)]
    except ValueError:
        raise UnknownPreset(ERROR_INVALID_PRESET.format(preset_id=preset_id), stage="frame") from None


def is_decorative_preset(preset_id: Union[FramePresetId, str]) -> bool:
    return get_frame_preset(preset_id).id != FramePresetId.NONE


def preset_asset_paths() -> List[str]:
    """Every tile path referenced by the decorative presets."""
    paths: List[str] = []
    for preset in FRAME_PRESETS.values():
        if preset.id == FramePresetId.NONE:
            continue
        paths.extend([preset.corner_asset_path, preset.edge_asset_path])
    return paths


def preset_options() -> List[Dict[str, str]]:
    return [{"id": p.id.value, "name": p.name} for p in FRAME_PRESETS.values()]
