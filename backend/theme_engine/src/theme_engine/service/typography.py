import logging
from typing import Any, Dict, Optional

from ..config import settings
from ..constants import (
    DEFAULT_FONT_PAIRING,
    FONT_PAIRINGS,
    FONT_WEIGHTS,
    LETTER_SPACING_BANDS,
    LINE_HEIGHT_BANDS,
    MONO_FALLBACKS,
    SANS_FALLBACKS,
    SERIF_FALLBACKS,
    TYPE_BASE_STEP,
    TYPE_SCALE_STEPS,
)
from ..models.schemas import TypeScale, TypeStep
from ..utils.units import is_positive_number, modular_steps

logger = logging.getLogger(settings.SERVICE_NAME + ".typography")

_STEP_INDEX = {step: index for index, step in enumerate(TYPE_SCALE_STEPS)}


def _band_value(step: str, bands):
    """Return the value of the first band whose last step is at or after `step`."""
    index = _STEP_INDEX[step]
    for last_step, value in bands:
        if index <= _STEP_INDEX[last_step]:
            return value
    return bands[-1][1]


def line_height_for(step: str) -> float:
    return _band_value(step, LINE_HEIGHT_BANDS)


def letter_spacing_for(step: str) -> str:
    return _band_value(step, LETTER_SPACING_BANDS)


def generate_type_scale(base: Optional[float] = None, ratio: Optional[float] = None) -> TypeScale:
    """
    Generate a modular type scale.

    Each step's size is `base * ratio ** (index - base_index)`, with the step
    labels fixed (xs .. 9xl). Line-height and letter-spacing tighten as the
    size grows. An invalid base (<= 0 or not finite) or ratio (<= 1 or not
    finite) is replaced by the configured default and a warning is logged.
    The same happens when the inputs are valid on their own but the sizes
    overflow or stop increasing.

    Args:
        base: Size of the 'base' step in pixels
        ratio: Modular scale ratio, must be greater than 1

    Returns:
        TypeScale with strictly increasing sizes
    """
    if not is_positive_number(base):
        if base is not None:
            logger.warning(f"Invalid base font size {base}; using {settings.DEFAULT_BASE_FONT_SIZE}")
        base = settings.DEFAULT_BASE_FONT_SIZE
    if not is_positive_number(ratio) or ratio <= 1:
        if ratio is not None:
            logger.warning(f"Invalid type scale ratio {ratio}; using {settings.DEFAULT_TYPE_RATIO}")
        ratio = settings.DEFAULT_TYPE_RATIO

    base_index = _STEP_INDEX[TYPE_BASE_STEP]
    offsets = [index - base_index for index in _STEP_INDEX.values()]
    sizes = modular_steps(base, ratio, offsets)
    if sizes is None:
        logger.warning(
            f"Invalid type scale ratio {ratio} for base {base}: sizes are out of range; "
            f"using {settings.DEFAULT_BASE_FONT_SIZE} and {settings.DEFAULT_TYPE_RATIO}"
        )
        base, ratio = settings.DEFAULT_BASE_FONT_SIZE, settings.DEFAULT_TYPE_RATIO
        sizes = modular_steps(base, ratio, offsets)

    values = {
        step: TypeStep(
            size=size,
            line_height=line_height_for(step),
            letter_spacing=letter_spacing_for(step),
        )
        for step, size in zip(_STEP_INDEX, sizes)
    }
    return TypeScale(base=base, ratio=ratio, values=values)


def font_stack(family: str, category: str = "sans-serif") -> str:
    """Quote a family name when needed and append the fallbacks of its category."""
    if family == "system-ui":
        return SANS_FALLBACKS
    name = f"'{family}'" if " " in family else family
    fallbacks = {
        "serif": SERIF_FALLBACKS,
        "monospace": MONO_FALLBACKS,
    }.get(category, SANS_FALLBACKS)
    return f"{name}, {fallbacks}"


def font_families(pair: Optional[str] = None) -> Dict[str, str]:
    """Heading / body / mono font stacks of a font pairing. Unknown pairings fall back to the default."""
    key = (pair or DEFAULT_FONT_PAIRING).lower().strip()
    if key not in FONT_PAIRINGS:
        logger.warning(f"Unknown font pairing '{pair}'; using '{DEFAULT_FONT_PAIRING}'")
        key = DEFAULT_FONT_PAIRING
    heading, heading_category, body, body_category = FONT_PAIRINGS[key]
    return {
        "heading": font_stack(heading, heading_category),
        "body": font_stack(body, body_category),
        "mono": MONO_FALLBACKS,
    }


def typography_tokens(scale: TypeScale, families: Dict[str, str]) -> Dict[str, Any]:
    """Render a type scale and its font families as a token-tree branch."""
    return {
        "fontFamily": dict(families),
        "fontSize": {step: value.size_rem() for step, value in scale.values.items()},
        "lineHeight": {step: value.line_height for step, value in scale.values.items()},
        "letterSpacing": {step: value.letter_spacing for step, value in scale.values.items()},
        "fontWeight": dict(FONT_WEIGHTS),
    }
