import pytest

from domain.errors import UnknownPreset
from domain.models import GlowIntensity, GradientLightConfig, ScalePreset, TexturePattern
from services.style_presets import (
    SCALE_FACTORS,
    calculate_gradient_colors,
    get_blur_config,
    get_glow_config,
    get_panel_gradient,
    get_scale_factor,
    get_texture_config,
    glow_padding,
    lighted_panel_gradient,
    parse_color,
    to_rgba8,
)


def test_glow_none_is_invisible_and_needs_no_padding():
    none = get_glow_config("none")
    assert none.opacity == 0
    assert glow_padding(none) == 0
    assert glow_padding(get_glow_config(GlowIntensity.MEDIUM)) == 9
    assert glow_padding(get_glow_config("strong")) == 12


def test_texture_and_blur_tables():
    assert get_texture_config("matte-paper").pattern == TexturePattern.NOISE
    assert get_texture_config("silk").pattern == TexturePattern.DIAGONAL_LINES
    assert get_texture_config("ink-wash").pattern == TexturePattern.CLOUD
    assert get_texture_config("none").opacity == 0
    assert get_blur_config("strong").blur > get_blur_config("light").blur


def test_unknown_tags_raise_unknown_preset():
    with pytest.raises(UnknownPreset):
        get_glow_config("blinding")
    with pytest.raises(UnknownPreset):
        get_scale_factor("huge")


def test_scale_factors_within_bounds():
    assert get_scale_factor(ScalePreset.STANDARD) == 1.0
    assert get_scale_factor("mini") == 0.70
    assert all(0.70 <= f <= 1.0 for f in SCALE_FACTORS.values())


def test_unknown_panel_colour_falls_back_to_obsidian():
    assert get_panel_gradient("chartreuse") == get_panel_gradient("obsidian")


def test_parse_color_formats():
    assert parse_color("rgba(10, 20, 30, 0.5)") == (10, 20, 30, 0.5)
    assert parse_color("rgb(10,20,30)") == (10, 20, 30, 1.0)
    assert parse_color("#fff") == (255, 255, 255, 1.0)
    assert parse_color("#FFD700") == (255, 215, 0, 1.0)
    assert parse_color("#00000080")[3] == pytest.approx(128 / 255)
    assert parse_color("transparent") == (0, 0, 0, 0.0)
    assert parse_color("not-a-colour") == (0, 0, 0, 1.0)


def test_to_rgba8_applies_opacity():
    assert to_rgba8("#FFD700", 0.5) == (255, 215, 0, 128)
    assert to_rgba8("transparent") == (0, 0, 0, 0)


def test_three_stop_lighting_lightens_top_and_darkens_bottom():
    stops = calculate_gradient_colors("rgb(100, 100, 100)", GradientLightConfig(0.10, 0.06, 3))
    assert stops == [
        "rgba(116, 116, 116, 1.00)",
        "rgba(100, 100, 100, 1.00)",
        "rgba(94, 94, 94, 1.00)",
    ]


def test_multi_stop_lighting_fades_to_base_in_the_middle():
    config = GradientLightConfig(top_brightness=0.10, bottom_darkness=0.06, stop_count=5)
    three = calculate_gradient_colors("rgb(100, 100, 100)", GradientLightConfig(0.10, 0.06, 3))
    five = calculate_gradient_colors("rgb(100, 100, 100)", config)
    assert len(five) == 5
    assert five[0] == three[0]
    assert five[2] == three[1]
    assert five[-1] == three[-1]


def test_lighted_panel_gradient_uses_middle_stop_alpha():
    stops = lighted_panel_gradient("obsidian")
    assert len(stops) == 3
    assert all(s.endswith("0.88)") for s in stops)
