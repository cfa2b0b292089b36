import logging
from typing import Any, Dict, Optional, Union

from ..config import settings
from ..constants import LEGACY_DEFAULTS, LEGACY_RADIUS_KEYWORDS
from ..models.schemas import DesignTokens, LegacyTheme, ThemeEntity, TokenTheme
from ..utils.units import format_length, parse_length, px_to_rem
from .color import is_hex_color
from .palette import parse_color_token
from .runtime import derive_dark_variant

logger = logging.getLogger(settings.SERVICE_NAME + ".legacy")

DEFAULT_LEGACY_RADIUS = "0.5rem"
DEFAULT_LEGACY_SPACING = "1rem"

_LEGACY_KEYS = {
    "primaryColor", "secondaryColor", "accentColor", "backgroundColor", "textColor",
    "fontFamily", "borderRadius", "spacing",
}

ThemeInput = Union[ThemeEntity, LegacyTheme, TokenTheme, DesignTokens, Dict[str, Any], None]


def _legacy_color(field: str, value: Optional[str], default: Optional[str]) -> Optional[str]:
    """Solid color value for a legacy field, falling back to `default` when absent or malformed."""
    if value is None:
        return default
    text = parse_color_token(value).to_tree()
    # A hash prefix means a hex color was intended
    if not text or (text.startswith("#") and not is_hex_color(text)):
        logger.warning(f"Legacy theme field '{field}' has unusable value {value!r}; using {default!r}")
        return default
    return text


def _legacy_length(field: str, value: Any, default: str) -> str:
    """
    Numbers are pixels and become rem, keywords map to fixed radii, CSS
    lengths are converted to rem.
    """
    if value is None or value == "":
        return default
    if isinstance(value, str) and value.strip().lower() in LEGACY_RADIUS_KEYWORDS:
        return LEGACY_RADIUS_KEYWORDS[value.strip().lower()]

    px_value = parse_length(value, default_unit="px")
    if px_value is None or px_value < 0:
        logger.warning(f"Legacy theme field '{field}' has unusable value {value!r}; using {default}")
        return default
    return format_length(px_to_rem(px_value), "rem")


def migrate_legacy_theme(legacy: LegacyTheme) -> DesignTokens:
    """
    Convert the flat legacy theme shape into a minimal token tree.

    Only what the legacy record describes is emitted; anything else is left
    to the compatibility aliases and their defaults. An 'appearance' of
    'dark' runs the result through the dark variant.

    Args:
        legacy: The legacy theme record

    Returns:
        Equivalent DesignTokens
    """
    colors: Dict[str, Any] = {}
    primary = _legacy_color("primaryColor", legacy.primary_color, None)
    if primary is not None:
        colors["primary"] = primary
    colors["secondary"] = _legacy_color("secondaryColor", legacy.secondary_color, LEGACY_DEFAULTS["secondaryColor"])
    colors["accent"] = _legacy_color("accentColor", legacy.accent_color, LEGACY_DEFAULTS["accentColor"])
    colors["background"] = _legacy_color(
        "backgroundColor", legacy.background_color, LEGACY_DEFAULTS["backgroundColor"]
    )
    colors["foreground"] = _legacy_color("textColor", legacy.text_color, LEGACY_DEFAULTS["textColor"])

    font_family = (legacy.font_family or "").strip() or LEGACY_DEFAULTS["fontFamily"]
    tokens = DesignTokens(
        colors=colors,
        typography={"fontFamily": {"body": font_family, "heading": font_family}},
        spacing={"DEFAULT": _legacy_length("spacing", legacy.spacing, DEFAULT_LEGACY_SPACING)},
        borders={"radius": {"DEFAULT": _legacy_length("borderRadius", legacy.border_radius, DEFAULT_LEGACY_RADIUS)}},
    )

    if (legacy.appearance or "").lower() == "dark":
        logger.debug("Legacy theme requests dark appearance")
        return derive_dark_variant(tokens)
    return tokens


def normalize_theme(source: ThemeInput) -> DesignTokens:
    """
    Produce canonical DesignTokens from any supported theme representation:
    a ThemeEntity, either ThemeSource variant, DesignTokens, or a raw mapping
    (a persisted record with 'tokens', a legacy record, or a bare token tree).
    """
    if source is None:
        return DesignTokens()
    if isinstance(source, DesignTokens):
        return source
    if isinstance(source, ThemeEntity):
        source = source.source()
    if isinstance(source, TokenTheme):
        return source.tokens
    if isinstance(source, LegacyTheme):
        if source.is_empty():
            logger.debug("Legacy theme carries no values; nothing to migrate")
            return DesignTokens()
        return migrate_legacy_theme(source)

    if isinstance(source, dict):
        if source.get("tokens"):
            return DesignTokens.model_validate(source["tokens"])
        if _LEGACY_KEYS & set(source):
            return normalize_theme(LegacyTheme.model_validate(source))
        return DesignTokens.model_validate(source)

    raise TypeError(f"Unsupported theme source: {type(source).__name__}")
