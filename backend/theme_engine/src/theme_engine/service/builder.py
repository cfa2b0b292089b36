import copy
import functools
import logging
from typing import Any, Dict, List, Optional, Tuple

from ..config import settings
from ..constants import (
    CONTRAST_LARGE_TEXT,
    CONTRAST_NORMAL_TEXT,
    DARK_SURFACES,
    DEFAULT_BORDER_WIDTH,
    DEFAULT_EFFECTS,
    DEFAULT_RADIUS,
    DEFAULT_SHADOWS,
    LIGHT_SURFACES,
)
from ..errors import InvalidColorFormat
from ..models.schemas import (
    AccessibilityCheck,
    AccessibilityReport,
    BrandInputs,
    DesignTokens,
    ThemePreset,
)
from .aliases import resolve_aliases
from .color import WHITE, adjust_lightness, check_accessibility, normalize_hex, readable_foreground
from .legacy import normalize_theme
from .palette import generate_palette, scale_color
from .runtime import derive_dark_variant
from .spacing import density_grid, density_spacing, spacing_tokens
from .typography import font_families, generate_type_scale, typography_tokens

logger = logging.getLogger(settings.SERVICE_NAME + ".builder")

# (check name, foreground alias, background alias, minimum ratio)
AUDIT_PAIRS: List[Tuple[str, str, str, float]] = [
    ("text on background", "foreground", "background", CONTRAST_NORMAL_TEXT),
    ("text on card", "card-foreground", "card", CONTRAST_NORMAL_TEXT),
    ("primary button text", "primary-foreground", "primary", CONTRAST_NORMAL_TEXT),
    ("secondary button text", "secondary-foreground", "secondary", CONTRAST_NORMAL_TEXT),
    ("destructive button text", "destructive-foreground", "destructive", CONTRAST_NORMAL_TEXT),
    ("muted text on background", "muted-foreground", "background", CONTRAST_LARGE_TEXT),
]


def _surfaces(background: Optional[str]) -> Tuple[Dict[str, str], Dict[str, str], str]:
    """Background group, foreground group and border for a (possibly custom) page background."""
    if background is None:
        table = LIGHT_SURFACES
        return (
            {
                "DEFAULT": table["background"],
                "surface": table["surface"],
                "elevated": table["elevated"],
                "sunken": table["sunken"],
            },
            {"DEFAULT": table["foreground"], "muted": table["muted"], "subtle": table["subtle"]},
            table["border"],
        )

    # A dark custom background takes the dark text roles
    table = DARK_SURFACES if readable_foreground(background) == WHITE else LIGHT_SURFACES
    step = 4.0 if table is DARK_SURFACES else -2.0
    return (
        {
            "DEFAULT": background,
            "surface": adjust_lightness(background, step),
            "elevated": adjust_lightness(background, step * 2),
            "sunken": adjust_lightness(background, -step),
        },
        {"DEFAULT": table["foreground"], "muted": table["muted"], "subtle": table["subtle"]},
        table["border"],
    )


def _harmony_tokens(palette) -> Dict[str, Dict[str, str]]:
    # Arrays are not valid token leaves, so each family becomes a numbered group
    families = palette.harmonies.model_dump()
    return {
        family: {str(index): color["hex"] for index, color in enumerate(colors, start=1)}
        for family, colors in families.items()
    }


def build_color_tokens(inputs: BrandInputs) -> Dict[str, Any]:
    """
    Color branch of the token tree for a set of brand inputs.

    Raises:
        InvalidColorFormat: If one of the given colors is malformed
    """
    brand = normalize_hex(inputs.brand_color)
    palette = generate_palette(brand)

    secondary = normalize_hex(inputs.secondary_color) if inputs.secondary_color else palette.brand["secondary"].hex
    accent = normalize_hex(inputs.accent_color) if inputs.accent_color else palette.brand["accent"].hex
    background = normalize_hex(inputs.background_color) if inputs.background_color else None
    background_group, foreground_group, border = _surfaces(background)

    primary = scale_color(brand).to_tree()
    primary.update(palette.shade_hexes())

    colors: Dict[str, Any] = {
        "primary": primary,
        "secondary": scale_color(secondary).to_tree(),
        "accent": scale_color(accent).to_tree(),
        "neutral": generate_palette(palette.brand["neutral"]).shade_hexes(),
    }
    for role, color in palette.semantic.items():
        colors[role] = scale_color(color).to_tree()
    colors["background"] = background_group
    colors["foreground"] = foreground_group
    colors["border"] = {"DEFAULT": border}
    colors["focus"] = {"DEFAULT": brand}
    colors["harmonies"] = _harmony_tokens(palette)
    return colors


def build_design_tokens(inputs: Optional[BrandInputs] = None) -> DesignTokens:
    """
    Build a complete token tree from the choices a business makes.

    Colors come from the palette generator, typography from the modular
    type scale and the font pairing, spacing and grid from the density
    preset. Borders, shadows and effects use fixed defaults.

    Args:
        inputs: Brand inputs, defaults apply when omitted

    Returns:
        A complete DesignTokens tree (dark when `inputs.appearance` is 'dark')

    Raises:
        InvalidColorFormat: If one of the given colors is malformed
    """
    inputs = inputs or BrandInputs()
    type_scale = generate_type_scale(inputs.base_font_size, inputs.type_ratio)

    tokens = DesignTokens(
        colors=build_color_tokens(inputs),
        typography=typography_tokens(type_scale, font_families(inputs.font_pair)),
        spacing=spacing_tokens(density_spacing(inputs.density)),
        grid=density_grid(inputs.density).to_tree(),
        borders={"radius": dict(DEFAULT_RADIUS), "width": dict(DEFAULT_BORDER_WIDTH)},
        shadows=dict(DEFAULT_SHADOWS),
        effects=copy.deepcopy(DEFAULT_EFFECTS),
    )
    logger.debug(f"Built design tokens for brand {inputs.brand_color} ({inputs.density}, {inputs.font_pair})")

    if inputs.appearance == "dark":
        return derive_dark_variant(tokens)
    return tokens


@functools.lru_cache(maxsize=1)
def _default_tree() -> Dict[str, Any]:
    return build_design_tokens(BrandInputs()).tree()


def default_token_tree() -> Dict[str, Any]:
    """A fresh copy of the token tree built from the default brand inputs."""
    return copy.deepcopy(_default_tree())


def audit_tokens(tokens: DesignTokens) -> AccessibilityReport:
    """
    Check the standard text/background pairs of a token tree.

    Pairs are read through the compatibility aliases, so partial trees are
    audited against the same defaults they would compile to. Failures are
    reported as warnings and never raised.
    """
    aliases, _ = resolve_aliases(tokens.tree())
    checks: List[AccessibilityCheck] = []
    warnings: List[str] = []

    for name, fg_alias, bg_alias, minimum in AUDIT_PAIRS:
        try:
            result = check_accessibility(aliases[fg_alias], aliases[bg_alias], minimum)
        except InvalidColorFormat:
            warnings.append(
                f"{name}: cannot check {aliases[fg_alias]!r} on {aliases[bg_alias]!r} (not hex colors)"
            )
            continue
        checks.append(AccessibilityCheck(name=name, result=result))
        if not result.passes:
            warnings.append(
                f"{name}: contrast {result.contrast_ratio}:1 is below {minimum}:1 "
                f"({result.foreground} on {result.background})"
            )

    if warnings:
        logger.info(f"Accessibility audit found {len(warnings)} issue(s)")
    return AccessibilityReport(checks=checks, warnings=warnings)


def tokens_for_preset(preset: ThemePreset) -> DesignTokens:
    """Token tree of a library preset: built from its brand inputs, or migrated from its legacy theme."""
    if preset.inputs is not None:
        return build_design_tokens(preset.inputs)
    if preset.theme is not None:
        return normalize_theme(preset.theme)
    logger.warning(f"Preset '{preset.id}' defines neither inputs nor a theme")
    return DesignTokens()
