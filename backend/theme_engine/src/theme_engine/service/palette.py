import functools
import logging
from typing import Any, Dict, List, Optional, Union

from ..config import settings
from ..constants import (
    CONTRAST_NORMAL_TEXT,
    HARMONY_OFFSETS,
    MONOCHROMATIC_LIGHTNESS,
    SCALED_DARK_DELTA,
    SCALED_HOVER_DELTA,
    SCALED_LIGHT_DELTA,
    SEMANTIC_ANCHORS,
    SEMANTIC_LIGHTNESS_RANGE,
    SEMANTIC_SATURATION_RANGE,
    SHADE_LIGHTNESS,
)
from ..models.schemas import (
    Color,
    ColorInput,
    ColorPalette,
    Harmonies,
    ScaledColor,
    ShadeAccessibility,
    SolidColor,
)
from .color import (
    adjust_lightness,
    color_from_hsl,
    contrast_ratio,
    hex_to_hsl,
    is_hex_color,
    normalize_hex,
    readable_foreground,
    to_color,
)

logger = logging.getLogger(settings.SERVICE_NAME + ".palette")

# Create a cache decorator if caching is enabled
if settings.ENABLE_LRU_CACHE:
    palette_cache = functools.lru_cache(maxsize=settings.LRU_CACHE_MAXSIZE)
else:
    # If caching is disabled, create a no-op decorator
    def palette_cache(func):
        return func


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _harmony(hue: float, saturation: float, lightness: float, offsets) -> List[Color]:
    return [color_from_hsl(hue + offset, saturation, lightness) for offset in offsets]


def _semantic_colors(saturation: float, lightness: float) -> Dict[str, Color]:
    """
    Semantic roles keep their anchor hue. The base only nudges how vivid
    and how light they are, within bounds that stay legible.
    """
    sat_low, sat_high = SEMANTIC_SATURATION_RANGE
    light_low, light_high = SEMANTIC_LIGHTNESS_RANGE
    semantic = {}
    for role, (anchor_h, anchor_s, anchor_l) in SEMANTIC_ANCHORS.items():
        s = _clamp(anchor_s * (0.75 + saturation / 4), sat_low, sat_high)
        l = _clamp(anchor_l + (lightness - 0.5) * 0.2, light_low, light_high)
        semantic[role] = color_from_hsl(anchor_h, s, l)
    return semantic


def _brand_colors(base: Color, hue: float, saturation: float, lightness: float) -> Dict[str, Color]:
    return {
        "primary": base,
        "secondary": color_from_hsl(hue + 30, saturation * 0.8, lightness),
        "accent": color_from_hsl(hue + 180, saturation, lightness),
        "neutral": color_from_hsl(hue, saturation * 0.2, _clamp(lightness * 1.05, 0.0, 1.0)),
    }


def _shade_accessibility(color: Color) -> ShadeAccessibility:
    foreground = readable_foreground(color)
    ratio = contrast_ratio(foreground, color)
    return ShadeAccessibility(
        foreground=foreground,
        contrast_ratio=round(ratio, 2),
        passes_normal_text=ratio >= CONTRAST_NORMAL_TEXT,
    )


@palette_cache
def _generate_palette(base_hex: str) -> ColorPalette:
    """
    Derive the full palette for a normalized hex value.
    This function is cached: the result is a frozen model and is safe to share.
    """
    base = to_color(base_hex)
    hue, saturation, lightness = hex_to_hsl(base_hex)

    shades = {
        step: color_from_hsl(hue, saturation, step_lightness)
        for step, step_lightness in SHADE_LIGHTNESS.items()
    }
    harmonies = Harmonies(
        complementary=_harmony(hue, saturation, lightness, HARMONY_OFFSETS["complementary"]),
        analogous=_harmony(hue, saturation, lightness, HARMONY_OFFSETS["analogous"]),
        triadic=_harmony(hue, saturation, lightness, HARMONY_OFFSETS["triadic"]),
        tetradic=_harmony(hue, saturation, lightness, HARMONY_OFFSETS["tetradic"]),
        monochromatic=[color_from_hsl(hue, saturation, l) for l in MONOCHROMATIC_LIGHTNESS],
    )

    logger.debug(f"Generated palette for {base_hex}")
    return ColorPalette(
        base=base,
        shades=shades,
        harmonies=harmonies,
        semantic=_semantic_colors(saturation, lightness),
        brand=_brand_colors(base, hue, saturation, lightness),
        accessibility={step: _shade_accessibility(color) for step, color in shades.items()},
    )


def generate_palette(base: ColorInput) -> ColorPalette:
    """
    Generate the shade ramp, harmony families, semantic roles and brand set
    for a base color. The result is fully determined by the base color.

    Args:
        base: Hex string or Color

    Returns:
        ColorPalette for the base color

    Raises:
        InvalidColorFormat: If `base` is not a valid hex color
    """
    return _generate_palette(normalize_hex(base))


def scale_color(base: ColorInput) -> ScaledColor:
    """Expand one color into a scaled color token."""
    hex_value = normalize_hex(base)
    return ScaledColor(
        base=hex_value,
        foreground=readable_foreground(hex_value),
        light=adjust_lightness(hex_value, SCALED_LIGHT_DELTA),
        dark=adjust_lightness(hex_value, SCALED_DARK_DELTA),
        hover=adjust_lightness(hex_value, SCALED_HOVER_DELTA),
    )


def parse_color_token(raw: Any) -> Optional[Union[SolidColor, ScaledColor]]:
    """
    Read a color token from a token tree.

    - a string is a SolidColor (hex values are normalized, other CSS colors kept as-is)
    - a mapping with a 'base' key is a ScaledColor; missing or invalid members are derived
    - anything else is not a color token and None is returned

    Raises:
        InvalidColorFormat: If a scaled token's 'base' is not a valid hex color
    """
    if isinstance(raw, (SolidColor, ScaledColor)):
        return raw
    if isinstance(raw, str):
        value = raw.strip()
        return SolidColor(value=normalize_hex(value) if is_hex_color(value) else value)
    if isinstance(raw, dict) and "base" in raw:
        derived = scale_color(raw["base"])
        members = {}
        for member in ("foreground", "light", "dark", "hover"):
            given = raw.get(member)
            if given is not None and is_hex_color(given):
                members[member] = normalize_hex(given)
            else:
                members[member] = getattr(derived, member)
        return ScaledColor(base=derived.base, **members)
    return None


def clear_cache():
    """Clear the palette cache."""
    if settings.ENABLE_LRU_CACHE:
        _generate_palette.cache_clear()
        logger.info("Palette cache cleared.")


if __name__ == "__main__":
    import json

    palette = generate_palette("#4F46E5")
    print(json.dumps(
        {
            "shades": palette.shade_hexes(),
            "semantic": {role: c.hex for role, c in palette.semantic.items()},
            "brand": {role: c.hex for role, c in palette.brand.items()},
        },
        indent=2,
    ))
