import logging
import math
from typing import Any, Dict, Mapping, Optional

from ..config import settings
from ..constants import (
    DENSITY_PRESETS,
    SPACING_BASE_STEP,
    SPACING_MICRO_DIVISOR,
    SPACING_MICRO_STEPS,
    SPACING_STEPS,
    SPACING_UNITS,
)
from ..models.schemas import GridSystem, SpacingScale, validate_breakpoints
from ..utils.units import is_positive_number, modular_steps

logger = logging.getLogger(settings.SERVICE_NAME + ".spacing")

DEFAULT_SPACING_BASE = {"px": 16.0, "rem": 1.0, "em": 1.0}


def generate_spacing_scale(base: Optional[float] = None, unit: str = "px", ratio: Optional[float] = None) -> SpacingScale:
    """
    Generate a spacing scale.

    Named steps (xs .. 6xl) grow geometrically around 'md', which equals
    `base`. The numeric micro-scale ('0', '0.5', '1' .. '96') is linear with
    '4' equal to `base`. Invalid inputs (NaN and infinities included) are
    replaced by defaults with a warning, as is a ratio whose steps overflow.

    Args:
        base: Size of the 'md' step, expressed in `unit`
        unit: 'px', 'rem' or 'em'
        ratio: Growth factor between named steps, must be greater than 1

    Returns:
        SpacingScale expressed in `unit`
    """
    if unit not in SPACING_UNITS:
        logger.warning(f"Unknown spacing unit '{unit}'; using 'px'")
        unit = "px"
    default_base = DEFAULT_SPACING_BASE[unit]
    if not is_positive_number(base):
        if base is not None:
            logger.warning(f"Invalid spacing base {base}; using {default_base}{unit}")
        base = default_base
    if not is_positive_number(ratio) or ratio <= 1:
        if ratio is not None:
            logger.warning(f"Invalid spacing ratio {ratio}; using {settings.DEFAULT_SPACING_RATIO}")
        ratio = settings.DEFAULT_SPACING_RATIO

    base_index = SPACING_STEPS.index(SPACING_BASE_STEP)
    offsets = [index - base_index for index in range(len(SPACING_STEPS))]
    steps = modular_steps(base, ratio, offsets)
    micro = {step: float(step) * base / SPACING_MICRO_DIVISOR for step in SPACING_MICRO_STEPS}
    if steps is None or not all(math.isfinite(value) for value in micro.values()):
        logger.warning(
            f"Invalid spacing ratio {ratio} for base {base}{unit}: steps are out of range; "
            f"using {default_base}{unit} and {settings.DEFAULT_SPACING_RATIO}"
        )
        base, ratio = default_base, settings.DEFAULT_SPACING_RATIO
        steps = modular_steps(base, ratio, offsets)
        micro = {step: float(step) * base / SPACING_MICRO_DIVISOR for step in SPACING_MICRO_STEPS}

    values = dict(zip(SPACING_STEPS, steps))
    return SpacingScale(base=base, unit=unit, ratio=ratio, values=values, micro=micro)


def generate_grid_system(
    columns: int = 12,
    gutter: float = 1.5,
    margins: float = 1.5,
    unit: str = "rem",
    breakpoints: Optional[Mapping[str, int]] = None,
) -> GridSystem:
    """
    Build a GridSystem.

    Breakpoints must use the canonical names (xs, sm, md, lg, xl, xxl, 2xl,
    3xl) and strictly increase in that order. They are never reordered.

    Raises:
        InvalidBreakpoints: If the breakpoints are unknown or out of order
    """
    if columns < 1:
        logger.warning(f"Invalid column count {columns}; using 12")
        columns = 12
    if unit not in SPACING_UNITS:
        logger.warning(f"Unknown grid unit '{unit}'; using 'rem'")
        unit = "rem"

    fields: Dict[str, Any] = {
        "columns": columns,
        "gutter": max(gutter, 0.0),
        "margins": max(margins, 0.0),
        "unit": unit,
    }
    if breakpoints is not None:
        # Validate outside pydantic so callers get InvalidBreakpoints, not a ValidationError
        fields["breakpoints"] = validate_breakpoints(breakpoints)
    return GridSystem(**fields)


def density_spacing(density: str) -> SpacingScale:
    preset = _density_preset(density)
    return generate_spacing_scale(preset["spacing_base"], "px", preset["spacing_ratio"]).convert("rem")


def density_grid(density: str, columns: int = 12) -> GridSystem:
    preset = _density_preset(density)
    return generate_grid_system(
        columns=columns,
        gutter=preset["gutter"],
        margins=preset["margins"],
        unit="rem",
        breakpoints=preset["breakpoints"],
    )


def _density_preset(density: str) -> Dict[str, Any]:
    if density not in DENSITY_PRESETS:
        logger.warning(f"Unknown density '{density}'; using 'balanced'")
        density = "balanced"
    return DENSITY_PRESETS[density]


def spacing_tokens(scale: SpacingScale) -> Dict[str, Any]:
    """Render a spacing scale as a token-tree branch. Micro steps become a nested 'scale' group."""
    tokens: Dict[str, Any] = dict(scale.css_values())
    tokens["scale"] = scale.css_micro()
    return tokens
