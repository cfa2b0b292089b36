import logging
import string
from typing import Dict, Tuple

from ..config import settings
from ..constants import (
    CONTRAST_ENHANCED,
    CONTRAST_LARGE_TEXT,
    CONTRAST_NORMAL_TEXT,
    LUMINANCE_WEIGHTS,
    SRGB_LINEAR_THRESHOLD,
)
from ..errors import InvalidColorFormat
from ..models.schemas import AccessibilityResult, Color, ColorInput

logger = logging.getLogger(settings.SERVICE_NAME + ".color")

RGB = Tuple[int, int, int]
HSL = Tuple[float, float, float]

BLACK = "#000000"
WHITE = "#ffffff"

_HEX_DIGITS = set(string.hexdigits)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def normalize_hex(value: ColorInput) -> str:
    """
    Validate a hex color and return it as lower-case '#rrggbb'.
    Accepts '#RGB', '#RRGGBB', either without the leading '#', or a Color.

    Raises:
        InvalidColorFormat: If the value has the wrong length or non-hex characters
    """
    if isinstance(value, Color):
        return value.hex
    if not isinstance(value, str):
        raise InvalidColorFormat(value)

    digits = value.strip()
    if digits.startswith("#"):
        digits = digits[1:]
    if len(digits) not in (3, 6) or not set(digits) <= _HEX_DIGITS:
        raise InvalidColorFormat(value)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return "#" + digits.lower()


def is_hex_color(value) -> bool:
    try:
        normalize_hex(value)
    except InvalidColorFormat:
        return False
    return True


def hex_to_rgb(value: ColorInput) -> RGB:
    digits = normalize_hex(value)[1:]
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def rgb_to_hex(rgb: Tuple[float, float, float]) -> str:
    """Channels are rounded and clamped to 0..255."""
    r, g, b = (int(round(_clamp(channel, 0, 255))) for channel in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def rgb_to_hsl(rgb: Tuple[float, float, float]) -> HSL:
    """Convert 0..255 channels to (hue degrees, saturation, lightness) without rounding."""
    r, g, b = (_clamp(channel, 0, 255) / 255.0 for channel in rgb)
    high, low = max(r, g, b), min(r, g, b)
    lightness = (high + low) / 2.0

    if high == low:
        return 0.0, 0.0, lightness

    delta = high - low
    saturation = delta / (2.0 - high - low) if lightness > 0.5 else delta / (high + low)
    if high == r:
        hue = (g - b) / delta + (6.0 if g < b else 0.0)
    elif high == g:
        hue = (b - r) / delta + 2.0
    else:
        hue = (r - g) / delta + 4.0
    return (hue * 60.0) % 360.0, saturation, lightness


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(hsl: HSL) -> RGB:
    """Hue wraps around, saturation and lightness are clamped to [0, 1]."""
    hue, saturation, lightness = hsl
    h = (hue % 360.0) / 360.0
    s = _clamp(saturation, 0.0, 1.0)
    l = _clamp(lightness, 0.0, 1.0)

    if s == 0:
        channels = (l, l, l)
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        channels = (
            _hue_to_channel(p, q, h + 1 / 3),
            _hue_to_channel(p, q, h),
            _hue_to_channel(p, q, h - 1 / 3),
        )
    r, g, b = (int(round(channel * 255)) for channel in channels)
    return r, g, b


def hex_to_hsl(value: ColorInput) -> HSL:
    return rgb_to_hsl(hex_to_rgb(value))


def hsl_to_hex(hsl: HSL) -> str:
    return rgb_to_hex(hsl_to_rgb(hsl))


def to_color(value: ColorInput) -> Color:
    """Build a Color whose hex, rgb and hsl representations agree."""
    if isinstance(value, Color):
        return value
    hex_value = normalize_hex(value)
    rgb = hex_to_rgb(hex_value)
    h, s, l = rgb_to_hsl(rgb)
    return Color(hex=hex_value, rgb=rgb, hsl=(round(h, 2), round(s, 4), round(l, 4)))


def color_from_hsl(hue: float, saturation: float, lightness: float) -> Color:
    return to_color(hsl_to_hex((hue, saturation, lightness)))


def adjust_lightness(color: ColorInput, percent: float) -> str:
    """
    Shift the HSL lightness of a color by `percent` percentage points.

    `percent` is clamped to [-100, 100] and the resulting lightness to
    [0, 1], so any amount yields a valid color. Hue and saturation are kept.

    Args:
        color: Hex string or Color
        percent: Lightness delta, positive to lighten

    Returns:
        The adjusted color as '#rrggbb'
    """
    amount = _clamp(percent, -100.0, 100.0) / 100.0
    hue, saturation, lightness = hex_to_hsl(color)
    return hsl_to_hex((hue, saturation, _clamp(lightness + amount, 0.0, 1.0)))


def lighten(color: ColorInput, percent: float) -> str:
    return adjust_lightness(color, abs(percent))


def darken(color: ColorInput, percent: float) -> str:
    return adjust_lightness(color, -abs(percent))


def _linearize(channel: int) -> float:
    c = channel / 255.0
    if c <= SRGB_LINEAR_THRESHOLD:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(color: ColorInput) -> float:
    """WCAG relative luminance in [0, 1]."""
    r, g, b = hex_to_rgb(color)
    wr, wg, wb = LUMINANCE_WEIGHTS
    return wr * _linearize(r) + wg * _linearize(g) + wb * _linearize(b)


def contrast_ratio(a: ColorInput, b: ColorInput) -> float:
    """Contrast ratio in [1, 21]. Symmetric in its arguments."""
    first, second = relative_luminance(a), relative_luminance(b)
    lighter, darker = max(first, second), min(first, second)
    return (lighter + 0.05) / (darker + 0.05)


def check_accessibility(
    foreground: ColorInput,
    background: ColorInput,
    min_ratio: float = CONTRAST_NORMAL_TEXT,
) -> AccessibilityResult:
    """
    Classify a text/background pair against the WCAG thresholds.
    The pass flags are evaluated on the unrounded ratio.
    """
    fg, bg = normalize_hex(foreground), normalize_hex(background)
    ratio = contrast_ratio(fg, bg)
    return AccessibilityResult(
        foreground=fg,
        background=bg,
        contrast_ratio=round(ratio, 2),
        min_ratio=min_ratio,
        passes=ratio >= min_ratio,
        passes_normal_text=ratio >= CONTRAST_NORMAL_TEXT,
        passes_large_text=ratio >= CONTRAST_LARGE_TEXT,
        passes_enhanced=ratio >= CONTRAST_ENHANCED,
    )


def readable_foreground(background: ColorInput) -> str:
    """Black or white, whichever contrasts more with `background`. Ties go to white."""
    if contrast_ratio(BLACK, background) > contrast_ratio(WHITE, background):
        return BLACK
    return WHITE


def hex_to_rgba(color: ColorInput, alpha: float) -> str:
    r, g, b = hex_to_rgb(color)
    return f"rgba({r}, {g}, {b}, {round(_clamp(alpha, 0.0, 1.0), 3)})"


def color_formats(color: ColorInput) -> Dict[str, str]:
    """The same color as hex, rgb() and hsl() CSS strings."""
    c = to_color(color)
    h, s, l = c.hsl
    return {
        "hex": c.hex,
        "rgb": "rgb({}, {}, {})".format(*c.rgb),
        "hsl": f"hsl({round(h)}, {round(s * 100)}%, {round(l * 100)}%)",
    }


if __name__ == "__main__":
    for sample in ("#4F46E5", "#777", "0f172a"):
        print(f"{sample}: {color_formats(sample)}")
    print(f"\n#777777 on #FFFFFF: {check_accessibility('#777777', '#FFFFFF').model_dump()}")
