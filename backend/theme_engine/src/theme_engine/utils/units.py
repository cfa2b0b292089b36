import logging
import math
from typing import List, Optional, Sequence, Union

from ..config import settings
from ..constants import SPACING_UNITS

logger = logging.getLogger(settings.SERVICE_NAME + ".units")


def px_to_rem(value: float, root_size: Optional[float] = None) -> float:
    """Convert pixels to rem using the configured root font size."""
    return value / (root_size or settings.ROOT_FONT_SIZE)


def rem_to_px(value: float, root_size: Optional[float] = None) -> float:
    """Convert rem to pixels using the configured root font size."""
    return value * (root_size or settings.ROOT_FONT_SIZE)


def convert_length(value: float, from_unit: str, to_unit: str, root_size: Optional[float] = None) -> float:
    """
    Re-express a length in another unit.

    `em` is resolved against the root size as well, so `rem` and `em`
    convert identically. No rounding is applied: converting a value and
    converting it back reproduces the original within float tolerance.

    Args:
        value: Numeric length
        from_unit: One of 'px', 'rem', 'em'
        to_unit: One of 'px', 'rem', 'em'
        root_size: Optional override of the root font size in pixels

    Returns:
        The converted numeric length
    """
    if from_unit not in SPACING_UNITS or to_unit not in SPACING_UNITS:
        raise ValueError(f"Unsupported unit conversion: {from_unit} -> {to_unit}")
    if from_unit == to_unit:
        return value

    px_value = value if from_unit == "px" else rem_to_px(value, root_size)
    if to_unit == "px":
        return px_value
    return px_to_rem(px_value, root_size)


def format_length(value: float, unit: str, precision: int = 4) -> str:
    """Render a length as a CSS value, e.g. 1.5 + 'rem' -> '1.5rem', 0 -> '0'."""
    rounded = round(value, precision)
    if rounded == 0:
        return "0"
    text = f"{rounded:.{precision}f}".rstrip("0").rstrip(".")
    return f"{text}{unit}"


def parse_length(value: Union[str, int, float], default_unit: str = "px") -> Optional[float]:
    """
    Parse a CSS length into pixels.

    Bare numbers are interpreted in `default_unit`. Returns None for values
    that are not a simple px/rem/em length (e.g. 'calc(...)').
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(rem_to_px(value) if default_unit in ("rem", "em") else value)

    text = str(value).strip().lower()
    for unit in ("rem", "em", "px"):
        if text.endswith(unit):
            number = text[: -len(unit)].strip()
            break
    else:
        unit, number = default_unit, text

    try:
        numeric = float(number)
    except ValueError:
        logger.debug(f"Cannot parse length value: {value!r}")
        return None
    return numeric if unit == "px" else rem_to_px(numeric)


def format_scalar(value: Union[int, float, str]) -> str:
    """Render a token leaf as CSS text. Floats lose trailing zeros, 1.0 -> '1'."""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{round(value, 4):.4f}".rstrip("0").rstrip(".")
    return str(value).strip()


def is_positive_number(value: Optional[float]) -> bool:
    """True for a finite number above zero. None, NaN and infinities are not."""
    return value is not None and math.isfinite(value) and value > 0


def modular_steps(base: float, ratio: float, offsets: Sequence[int]) -> Optional[List[float]]:
    """
    `base * ratio ** offset` for each offset, or None when the result is not
    a finite, positive and strictly increasing series (overflow, underflow or
    a ratio too close to 1 for float precision).
    """
    try:
        values = [base * ratio ** offset for offset in offsets]
    except OverflowError:
        return None
    if not all(is_positive_number(value) for value in values):
        return None
    if any(later <= earlier for earlier, later in zip(values, values[1:])):
        return None
    return values
