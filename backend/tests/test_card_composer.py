import io

import pytest
from PIL import Image

from domain.errors import GeometryValidationError, InvalidImageData
from domain.models import CropAnchor, TextPanelContent
from services.card_composer import ComposeCardOptions, compose_card_detailed, cover_fit, decode_image
from settings import settings


def _png(size, color):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def _options(**overrides):
    params = dict(
        background=_png((1200, 900), (0, 0, 255)),
        illustration=_png((600, 800), (255, 0, 0)),
        text_panels=[TextPanelContent("title", "勇者")],
        color_id="obsidian",
        layout_variant="landscape-square",
        texture="matte-paper",
        blur="medium",
        glow="medium",
        border_preset="gold",
        scale="standard",
    )
    params.update(overrides)
    return ComposeCardOptions(**params)


def test_landscape_square_end_to_end():
    # exact-size sources skip resampling so pixel checks are exact
    card = compose_card_detailed(
        _options(background=_png((1024, 768), (0, 0, 255)), illustration=_png((390, 688), (255, 0, 0)))
    )
    img = card.image
    assert img.size == (1024, 768)
    assert img.mode == "RGBA"
    assert card.to_png().startswith(b"\x89PNG")

    layers = {layer.name: layer for layer in card.layers}
    ill = layers["illustration"]
    assert (ill.x, ill.y, ill.width, ill.height) == (40, 40, 390, 688)
    title = layers["panel:title"]
    assert (title.x, title.y, title.width, title.height) == (480, 40, 504, 100)

    assert "text:title" in layers
    for pid in ("content1", "content2", "content3", "content4"):
        assert f"panel:{pid}" in layers
        assert f"border:{pid}" in layers
        assert f"text:{pid}" not in layers

    # illustration centre untouched by borders, background far corner untouched by glow
    assert img.getpixel((235, 384)) == (255, 0, 0, 255)
    assert img.getpixel((2, 2)) == (0, 0, 255, 255)
    assert card.geometry_errors == []


def test_layer_order_is_fixed():
    names = compose_card_detailed(_options(text_panels=[TextPanelContent("content2", "Breathes fire")])).layer_names()
    assert names[:3] == ["background", "illustration", "border:illustration"]
    assert names[3:5] == ["panel:title", "border:title"]
    assert names[-1] == "text:content2"
    assert names.index("border:content4") < names.index("text:content2")


def test_empty_or_corrupt_images_are_fatal():
    with pytest.raises(InvalidImageData) as exc:
        compose_card_detailed(_options(background=b""))
    assert exc.value.stage == "decode-background"
    with pytest.raises(InvalidImageData):
        compose_card_detailed(_options(illustration=b"definitely not an image"))


def test_strict_geometry_raises_on_tight_layouts():
    with pytest.raises(GeometryValidationError):
        compose_card_detailed(_options(scale="mini", strict_geometry=True))


def test_debug_artifacts_written_when_enabled(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "CARD_DEBUG_ARTIFACTS", True)
    compose_card_detailed(_options(debug_dir=tmp_path, text_panels=[]))
    assert (tmp_path / "01_background.png").exists()
    assert (tmp_path / "03_border_illustration.svg").exists()
    assert (tmp_path / "04_panel_title.svg").exists()


def test_decode_image_converts_to_rgba():
    assert decode_image(_png((3, 2), (9, 9, 9)), "illustration").mode == "RGBA"


def _two_tone(width, height):
    img = Image.new("RGBA", (width, height), (255, 0, 0, 255))
    img.paste((0, 0, 255, 255), (0, height // 2, width, height))
    return img


def test_cover_fit_anchor_picks_vertical_band():
    tall = _two_tone(100, 300)
    top = cover_fit(tall, 100, 100, CropAnchor.TOP)
    bottom = cover_fit(tall, 100, 100, "bottom")
    centre = cover_fit(tall, 100, 100)
    assert top.size == bottom.size == centre.size == (100, 100)
    assert top.getpixel((50, 50))[:3] == (255, 0, 0)
    assert bottom.getpixel((50, 50))[:3] == (0, 0, 255)
    assert centre.getpixel((50, 10))[:3] == (255, 0, 0)
    assert centre.getpixel((50, 90))[:3] == (0, 0, 255)


def test_cover_fit_upscales_small_sources():
    out = cover_fit(Image.new("RGBA", (10, 20), (1, 2, 3, 255)), 390, 688)
    assert out.size == (390, 688)
