import os

os.environ.setdefault("ENABLE_HOT_RELOAD", "False")
os.environ.setdefault("ENABLE_LRU_CACHE", "False")

import pytest

from theme_engine.errors import InvalidColorFormat
from theme_engine.service.color import (
    adjust_lightness,
    check_accessibility,
    color_formats,
    contrast_ratio,
    darken,
    hex_to_hsl,
    hex_to_rgb,
    hex_to_rgba,
    hsl_to_hex,
    lighten,
    normalize_hex,
    readable_foreground,
    relative_luminance,
    to_color,
)

SAMPLE_COLORS = [
    "#000000", "#ffffff", "#4f46e5", "#112233", "#ff0000", "#00ff00", "#0000ff",
    "#777777", "#f59e0b", "#06b6d4", "#0f172a", "#fefefe", "#010203", "#c2410c",
]


def test_normalize_hex_accepts_short_and_unprefixed_forms():
    assert normalize_hex("#ABC") == "#aabbcc"
    assert normalize_hex("4F46E5") == "#4f46e5"
    assert normalize_hex("  #4f46e5 ") == "#4f46e5"
    assert normalize_hex(to_color("#123")) == "#112233"


@pytest.mark.parametrize("value", ["#12", "#12345", "#GGGGGG", "", "#", "rgb(0,0,0)", None, 123])
def test_malformed_hex_is_rejected(value):
    with pytest.raises(InvalidColorFormat):
        normalize_hex(value)


def test_invalid_color_format_is_a_value_error():
    with pytest.raises(ValueError):
        hex_to_hsl("#zzzzzz")


@pytest.mark.parametrize("value", SAMPLE_COLORS)
def test_hsl_round_trip_within_one_unit_per_channel(value):
    back = hsl_to_hex(hex_to_hsl(value))
    for original, restored in zip(hex_to_rgb(value), hex_to_rgb(back)):
        assert abs(original - restored) <= 1


def test_hex_to_hsl_known_values():
    assert hex_to_hsl("#ff0000") == pytest.approx((0.0, 1.0, 0.5))
    h, s, l = hex_to_hsl("#0000ff")
    assert h == pytest.approx(240.0)
    assert hex_to_hsl("#808080")[1] == 0.0


def test_to_color_representations_agree():
    color = to_color("#4F46E5")
    assert color.hex == "#4f46e5"
    assert color.rgb == (79, 70, 229)
    for original, restored in zip(color.rgb, hex_to_rgb(hsl_to_hex(color.hsl))):
        assert abs(original - restored) <= 1


def test_contrast_ratio_is_symmetric():
    for a in SAMPLE_COLORS:
        for b in SAMPLE_COLORS:
            assert contrast_ratio(a, b) == pytest.approx(contrast_ratio(b, a))


def test_contrast_ratio_bounds():
    assert contrast_ratio("#000000", "#ffffff") == pytest.approx(21.0)
    assert contrast_ratio("#4f46e5", "#4f46e5") == pytest.approx(1.0)


def test_relative_luminance_extremes():
    assert relative_luminance("#ffffff") == pytest.approx(1.0)
    assert relative_luminance("#000000") == 0.0


def test_accessibility_gate_just_under_normal_text_threshold():
    result = check_accessibility("#777777", "#FFFFFF")
    assert result.contrast_ratio == pytest.approx(4.48, abs=0.01)
    assert result.passes_normal_text is False
    assert result.passes_large_text is True
    assert result.passes_enhanced is False
    assert result.passes is False
    assert result.foreground == "#777777"
    assert result.background == "#ffffff"


def test_accessibility_custom_minimum():
    result = check_accessibility("#777777", "#ffffff", min_ratio=3.0)
    assert result.passes is True
    assert result.min_ratio == 3.0


def test_adjust_lightness_is_additive_in_percentage_points():
    assert adjust_lightness("#000000", 50) == "#808080"
    assert hex_to_hsl(adjust_lightness("#4f46e5", 10))[2] == pytest.approx(hex_to_hsl("#4f46e5")[2] + 0.1, abs=0.01)


def test_adjust_lightness_clamps_amount_and_result():
    assert adjust_lightness("#4f46e5", 500) == "#ffffff"
    assert adjust_lightness("#4f46e5", -500) == "#000000"
    assert adjust_lightness("#ffffff", 10) == "#ffffff"
    assert adjust_lightness("#000000", -10) == "#000000"


def test_adjust_lightness_keeps_hue():
    h_before = hex_to_hsl("#4f46e5")[0]
    h_after = hex_to_hsl(adjust_lightness("#4f46e5", -15))[0]
    assert abs(h_before - h_after) < 2


def test_lighten_and_darken():
    base = "#4f46e5"
    assert relative_luminance(lighten(base, 10)) > relative_luminance(base)
    assert relative_luminance(darken(base, 10)) < relative_luminance(base)
    # sign of the amount does not matter
    assert darken(base, -10) == darken(base, 10)


def test_readable_foreground():
    assert readable_foreground("#ffffff") == "#000000"
    assert readable_foreground("#0f172a") == "#ffffff"
    assert readable_foreground("#4f46e5") == "#ffffff"
    assert readable_foreground("#fde68a") == "#000000"


def test_color_formats():
    formats = color_formats("#f00")
    assert formats == {"hex": "#ff0000", "rgb": "rgb(255, 0, 0)", "hsl": "hsl(0, 100%, 50%)"}


def test_hex_to_rgba_clamps_alpha():
    assert hex_to_rgba("#000", 0.5) == "rgba(0, 0, 0, 0.5)"
    assert hex_to_rgba("#ffffff", 3) == "rgba(255, 255, 255, 1.0)"
