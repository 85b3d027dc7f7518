import pytest
from PIL import Image

import services.frame_assembler as fa
from domain.errors import AssetNotFound, UnknownPreset
from domain.models import ColorScheme, CornerPosition, EdgePosition, FramePreset, FramePresetId
from services.asset_cache import AssetCache
from services.frame_presets import is_decorative_preset, preset_asset_paths, preset_options


def _tile_preset(tmp_path, corner_size=20, edge_thickness=6, inset=4):
    corner = Image.new("RGBA", (corner_size, corner_size), (0, 0, 255, 255))
    # asymmetric marker in the top-left quadrant
    corner.paste((255, 0, 0, 255), (0, 0, corner_size // 2, corner_size // 4))
    corner.paste((0, 255, 0, 255), (0, corner_size // 2, corner_size // 4, corner_size))
    corner.save(tmp_path / "corner.png")
    Image.new("RGBA", (40, edge_thickness), (255, 255, 0, 255)).save(tmp_path / "edge.png")
    return FramePreset(
        id=FramePresetId.CLASSIC,
        name="Test",
        corner_asset_path="corner.png",
        edge_asset_path="edge.png",
        corner_size=corner_size,
        edge_thickness=edge_thickness,
        inset_offset=inset,
        color_scheme=ColorScheme("#000000", "#000000", "#000000"),
    )


def _crop(img, x, y, size):
    return img.crop((x, y, x + size, y + size))


def test_none_preset_is_passthrough():
    card = Image.new("RGBA", (64, 48), (1, 2, 3, 255))
    out = fa.render_frame(card, "none")
    assert out is card
    assert out.tobytes() == card.tobytes()


def test_unknown_preset_raises():
    with pytest.raises(UnknownPreset):
        fa.render_frame(Image.new("RGBA", (10, 10)), "baroque")


def test_corners_are_mirrored(tmp_path, monkeypatch):
    preset = _tile_preset(tmp_path)
    monkeypatch.setattr(fa, "get_frame_preset", lambda preset_id: preset)
    card = Image.new("RGBA", (200, 160), (0, 0, 0, 0))
    out = fa.render_frame(card, "classic", orientation="landscape-square", cache=AssetCache(tmp_path))

    info = fa.get_frame_render_info("classic", 200, 160, "landscape-square")
    tiles = {c.position: _crop(out, c.x, c.y, c.size) for c in info.corners}
    top_left = tiles[CornerPosition.TOP_LEFT]
    assert top_left.getpixel((0, 0)) == (255, 0, 0, 255)
    assert tiles[CornerPosition.TOP_RIGHT].tobytes() == top_left.transpose(Image.Transpose.FLIP_LEFT_RIGHT).tobytes()
    assert tiles[CornerPosition.BOTTOM_LEFT].tobytes() == top_left.transpose(Image.Transpose.FLIP_TOP_BOTTOM).tobytes()
    assert tiles[CornerPosition.BOTTOM_RIGHT].tobytes() == top_left.transpose(Image.Transpose.ROTATE_180).tobytes()


def test_edges_fill_the_gaps_between_corners(tmp_path, monkeypatch):
    preset = _tile_preset(tmp_path)
    monkeypatch.setattr(fa, "get_frame_preset", lambda preset_id: preset)
    out = fa.render_frame(Image.new("RGBA", (200, 160), (0, 0, 0, 0)), "classic", cache=AssetCache(tmp_path))
    # top strip starts right after the top-left corner, left strip right below it
    for xy in ((24, 6), (6, 24)):
        r, g, b, a = out.getpixel(xy)
        assert r > 250 and g > 250 and b < 5 and a > 250
    assert out.getpixel((100, 80))[3] == 0
    assert out.size == (200, 160)


def test_edges_with_no_room_are_skipped(tmp_path, monkeypatch):
    preset = _tile_preset(tmp_path, corner_size=60)
    monkeypatch.setattr(fa, "get_frame_preset", lambda preset_id: preset)
    info = fa.get_frame_render_info("classic", 100, 100)
    assert all(edge.length <= 0 for edge in info.edges)
    out = fa.render_frame(Image.new("RGBA", (100, 100), (0, 0, 0, 0)), "classic", cache=AssetCache(tmp_path))
    assert out.size == (100, 100)


def test_missing_tiles_raise_asset_not_found(tmp_path):
    with pytest.raises(AssetNotFound) as exc:
        fa.render_frame(Image.new("RGBA", (300, 300)), "cyber", cache=AssetCache(tmp_path))
    assert exc.value.stage == "frame"


def test_render_info_landscape_classic():
    info = fa.get_frame_render_info("classic", 1024, 768, "landscape-square")
    assert info.scale_factor == 1.0
    assert (info.corner_size, info.edge_thickness, info.inset_offset) == (110, 25, 8)
    top = next(e for e in info.edges if e.position == EdgePosition.TOP)
    assert (top.x, top.y, top.length, top.rotate) == (118, 8, 1024 - 2 * 118, 0)
    bottom_right = next(c for c in info.corners if c.position == CornerPosition.BOTTOM_RIGHT)
    assert (bottom_right.x, bottom_right.y, bottom_right.rotate) == (1024 - 118, 768 - 118, 180)


def test_render_info_portrait_scales_tiles_and_rotates_side_strips():
    info = fa.get_frame_render_info("classic", 768, 1024, "portrait-flat")
    assert info.scale_factor == 0.95
    assert info.corner_size == 105
    assert info.edge_thickness == 24
    left = next(e for e in info.edges if e.position == EdgePosition.LEFT)
    assert (left.width, left.length, left.rotate) == (24, 1024 - 2 * (105 + 8), 90)
    assert info.to_dict()["presetId"] == "classic"


def test_inset_is_clamped_and_thickness_overridable():
    assert fa.get_frame_render_info("cyber", 1024, 768, inset_offset=50).inset_offset == 20
    assert fa.get_frame_render_info("cyber", 1024, 768, inset_offset=-5).inset_offset == 0
    assert fa.get_frame_render_info("cyber", 1024, 768, edge_thickness=30).edge_thickness == 30


def test_none_preset_has_no_placements():
    info = fa.get_frame_render_info("none", 1024, 768)
    assert info.corners == [] and info.edges == []


def test_preset_catalogue_helpers():
    assert [p["id"] for p in preset_options()] == ["cyber", "classic", "minimal", "fantasy", "battle", "none"]
    assert is_decorative_preset("battle")
    assert not is_decorative_preset(FramePresetId.NONE)
    assert len(preset_asset_paths()) == 10
