from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from ..constants import BREAKPOINT_ORDER, DEFAULT_BREAKPOINTS
from ..errors import InvalidBreakpoints
from ..utils.units import convert_length, format_length

Unit = Literal["px", "rem", "em"]
Appearance = Literal["light", "dark"]


class AppBaseModel(BaseModel):
    """Base Pydantic model with common configuration."""

    model_config = ConfigDict(
        frozen=False,
        extra="forbid",  # Forbid extra fields not defined in the model
        populate_by_name=True,  # Allow using alias for field names
    )


class FrozenModel(AppBaseModel):
    """Base for derived, read-only results. They are replaced, never mutated."""

    model_config = ConfigDict(frozen=True)


# --- Colors ---


class Color(FrozenModel):
    """
    A color with its three equivalent representations.
    Build instances through `service.color.to_color` so the three always agree.
    """
    hex: str = Field(pattern=r"^#[0-9a-f]{6}$", description="Lower-case #rrggbb.")
    rgb: Tuple[int, int, int] = Field(description="Red, green, blue channels in 0..255.")
    hsl: Tuple[float, float, float] = Field(
        description="Hue in degrees [0, 360), saturation and lightness in [0, 1]."
    )

    def __str__(self) -> str:
        return self.hex


ColorInput = Union[str, Color]


class AccessibilityResult(FrozenModel):
    """Contrast of a foreground/background pair against the WCAG thresholds."""
    foreground: str
    background: str
    contrast_ratio: float = Field(ge=0, description="Contrast ratio rounded to two decimals.")
    min_ratio: float = Field(default=4.5, description="Ratio the caller asked to clear.")
    passes: bool = Field(description="Whether the pair clears `min_ratio`.")
    passes_normal_text: bool
    passes_large_text: bool
    passes_enhanced: bool


class ShadeAccessibility(FrozenModel):
    """Readable text color for one shade of a palette."""
    foreground: str
    contrast_ratio: float
    passes_normal_text: bool


class Harmonies(FrozenModel):
    """Colors related to the base by hue rotation. The base itself is not included."""
    complementary: List[Color] = Field(default_factory=list)
    analogous: List[Color] = Field(default_factory=list)
    triadic: List[Color] = Field(default_factory=list)
    tetradic: List[Color] = Field(default_factory=list)
    monochromatic: List[Color] = Field(default_factory=list)


class ColorPalette(FrozenModel):
    """Everything derived from one base color."""
    base: Color
    shades: Dict[int, Color] = Field(description="Shade ramp keyed by step (50 lightest .. 950 darkest).")
    harmonies: Harmonies
    semantic: Dict[str, Color] = Field(description="success / warning / error / info.")
    brand: Dict[str, Color] = Field(
        default_factory=dict,
        description="primary / secondary / accent / neutral derived from the base."
    )
    accessibility: Dict[int, ShadeAccessibility] = Field(
        default_factory=dict,
        description="Readable foreground for each shade step."
    )

    def shade_hexes(self) -> Dict[str, str]:
        """Shade ramp as a token-tree branch, e.g. {'50': '#eef2ff', ...}."""
        return {str(step): color.hex for step, color in self.shades.items()}


class SolidColor(FrozenModel):
    """A color token that is a single CSS color value."""
    kind: Literal["solid"] = "solid"
    value: str

    def to_tree(self) -> str:
        return self.value


class ScaledColor(FrozenModel):
    """A color token with its readable foreground and lighter/darker/hover variants."""
    kind: Literal["scaled"] = "scaled"
    base: str
    foreground: str
    light: str
    dark: str
    hover: str

    def to_tree(self) -> Dict[str, str]:
        return {
            "DEFAULT": self.base,
            "foreground": self.foreground,
            "light": self.light,
            "dark": self.dark,
            "hover": self.hover,
        }


ColorToken = Annotated[Union[SolidColor, ScaledColor], Field(discriminator="kind")]


# --- Typography ---


class TypeStep(FrozenModel):
    size: float = Field(gt=0, description="Font size in pixels, unrounded.")
    line_height: float
    letter_spacing: str

    def size_rem(self, precision: int = 4) -> str:
        return format_length(convert_length(self.size, "px", "rem"), "rem", precision)


class TypeScale(FrozenModel):
    """
    A modular type scale. Step labels and their order are fixed, only the
    magnitudes depend on `base` and `ratio`.
    """
    base: float = Field(gt=0, description="Size of the 'base' step in pixels.")
    ratio: float = Field(gt=1)
    values: Dict[str, TypeStep]

    def sizes(self) -> List[float]:
        return [step.size for step in self.values.values()]


# --- Spacing & grid ---


class SpacingScale(FrozenModel):
    """
    Named spacing steps plus the numeric micro-scale, expressed in `unit`.
    `convert` re-expresses every value without rounding.
    """
    base: float = Field(gt=0, description="Size of the 'md' step, in `unit`.")
    unit: Unit = "px"
    ratio: float = Field(gt=1)
    values: Dict[str, float]
    micro: Dict[str, float] = Field(default_factory=dict)

    def convert(self, unit: Unit) -> "SpacingScale":
        if unit == self.unit:
            return self
        return SpacingScale(
            base=convert_length(self.base, self.unit, unit),
            unit=unit,
            ratio=self.ratio,
            values={k: convert_length(v, self.unit, unit) for k, v in self.values.items()},
            micro={k: convert_length(v, self.unit, unit) for k, v in self.micro.items()},
        )

    def css_values(self) -> Dict[str, str]:
        return {k: format_length(v, self.unit) for k, v in self.values.items()}

    def css_micro(self) -> Dict[str, str]:
        return {k: format_length(v, self.unit) for k, v in self.micro.items()}


def validate_breakpoints(breakpoints: Mapping[str, int]) -> Dict[str, int]:
    """
    Check that breakpoint names are known and that their widths strictly
    increase in canonical name order (xs < sm < md < lg < xl < xxl ...).

    Returns:
        The breakpoints re-keyed in canonical order

    Raises:
        InvalidBreakpoints: On an unknown name, a negative width, or widths
        that do not strictly increase
    """
    unknown = [name for name in breakpoints if name not in BREAKPOINT_ORDER]
    if unknown:
        raise InvalidBreakpoints(f"Unknown breakpoint name(s): {unknown}. Expected any of {list(BREAKPOINT_ORDER)}")

    ordered = {name: breakpoints[name] for name in BREAKPOINT_ORDER if name in breakpoints}
    previous_name, previous_width = None, None
    for name, width in ordered.items():
        if isinstance(width, bool) or not isinstance(width, int) or width < 0:
            raise InvalidBreakpoints(f"Breakpoint '{name}' must be a non-negative integer, got {width!r}")
        if previous_width is not None and width <= previous_width:
            raise InvalidBreakpoints(
                f"Breakpoint '{name}' ({width}px) must be wider than '{previous_name}' ({previous_width}px)"
            )
        previous_name, previous_width = name, width
    return ordered


class GridSystem(FrozenModel):
    """Column grid. Gutter and margins share the unit system of the spacing scale."""
    columns: int = Field(default=12, ge=1)
    gutter: float = Field(default=1.5, ge=0)
    margins: float = Field(default=1.5, ge=0)
    unit: Unit = "rem"
    breakpoints: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_BREAKPOINTS))

    @field_validator("breakpoints")
    @classmethod
    def check_breakpoints(cls, value: Dict[str, int]) -> Dict[str, int]:
        return validate_breakpoints(value)

    def with_breakpoint(self, name: str, width: int) -> "GridSystem":
        """Return a copy with one breakpoint added or moved. Raises InvalidBreakpoints on a bad edit."""
        edited = dict(self.breakpoints)
        edited[name] = width
        return self.model_copy(update={"breakpoints": validate_breakpoints(edited)})

    def convert(self, unit: Unit) -> "GridSystem":
        if unit == self.unit:
            return self
        return self.model_copy(update={
            "unit": unit,
            "gutter": convert_length(self.gutter, self.unit, unit),
            "margins": convert_length(self.margins, self.unit, unit),
        })

    def to_tree(self) -> Dict[str, Any]:
        return {
            "columns": self.columns,
            "gutter": format_length(self.gutter, self.unit),
            "margins": format_length(self.margins, self.unit),
            "breakpoints": {name: f"{width}px" for name, width in self.breakpoints.items()},
        }


# --- Token trees & themes ---


class DesignTokens(AppBaseModel):
    """
    Root token tree. Every section is an arbitrary nested mapping whose
    leaves are strings or numbers. Extra top-level sections are kept and
    compiled like the known ones.
    """
    model_config = ConfigDict(extra="allow")

    colors: Dict[str, Any] = Field(default_factory=dict)
    typography: Dict[str, Any] = Field(default_factory=dict)
    spacing: Dict[str, Any] = Field(default_factory=dict)
    grid: Dict[str, Any] = Field(default_factory=dict)
    borders: Dict[str, Any] = Field(default_factory=dict)
    shadows: Dict[str, Any] = Field(default_factory=dict)
    effects: Dict[str, Any] = Field(default_factory=dict)
    appearance: Appearance = Field(default="light", description="Not emitted as a token.")

    def tree(self) -> Dict[str, Any]:
        """All token sections, known ones first, without `appearance`."""
        return self.model_dump(exclude={"appearance"})

    def is_empty(self) -> bool:
        return not any(self.tree().values())


class LegacyTheme(AppBaseModel):
    """The flat theme shape persisted by older versions of the product."""
    model_config = ConfigDict(extra="ignore")

    kind: Literal["legacy"] = "legacy"
    primary_color: Optional[str] = Field(default=None, alias="primaryColor")
    secondary_color: Optional[str] = Field(default=None, alias="secondaryColor")
    accent_color: Optional[str] = Field(default=None, alias="accentColor")
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    text_color: Optional[str] = Field(default=None, alias="textColor")
    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    border_radius: Optional[Union[int, float, str]] = Field(default=None, alias="borderRadius")
    spacing: Optional[Union[int, float, str]] = None
    appearance: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(
            value is not None
            for value in self.model_dump(exclude={"kind", "appearance"}).values()
        )


class TokenTheme(AppBaseModel):
    kind: Literal["tokens"] = "tokens"
    tokens: DesignTokens


ThemeSource = Annotated[Union[LegacyTheme, TokenTheme], Field(discriminator="kind")]


class ThemeEntity(AppBaseModel):
    """
    A persisted theme record. Newer records carry `tokens`, older ones only
    the flat legacy fields. Persistence itself is handled elsewhere.
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    tenant_id: str = Field(alias="tenantId")
    name: str = "Custom"
    tokens: Optional[DesignTokens] = None
    primary_color: Optional[str] = Field(default=None, alias="primaryColor")
    secondary_color: Optional[str] = Field(default=None, alias="secondaryColor")
    accent_color: Optional[str] = Field(default=None, alias="accentColor")
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    text_color: Optional[str] = Field(default=None, alias="textColor")
    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    border_radius: Optional[Union[int, float, str]] = Field(default=None, alias="borderRadius")
    spacing: Optional[Union[int, float, str]] = None
    appearance: Optional[str] = None
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    def source(self) -> Union[LegacyTheme, TokenTheme]:
        """Return the token tree when there is a usable one, the legacy fields otherwise."""
        if self.tokens is not None and not self.tokens.is_empty():
            return TokenTheme(tokens=self.tokens)
        return LegacyTheme.model_validate(
            self.model_dump(
                include=set(LegacyTheme.model_fields) - {"kind"},
            )
        )


class Declaration(FrozenModel):
    name: str
    value: str


class CompiledTheme(FrozenModel):
    """
    Declarations compiled for one scope. Immutable: a new compile supersedes it.
    `fingerprint` is a digest of the declarations and identifies identical output.
    """
    scope_id: str
    selector: str
    declarations: Tuple[Declaration, ...] = ()
    diagnostics: Tuple[str, ...] = ()
    color_scheme: Appearance = "light"
    fingerprint: str = ""

    def is_empty(self) -> bool:
        return not self.declarations

    def as_dict(self) -> Dict[str, str]:
        return {d.name: d.value for d in self.declarations}

    def to_css(self, selector: Optional[str] = None) -> str:
        body = "\n".join(f"  {d.name}: {d.value};" for d in self.declarations)
        return f"{selector or self.selector} {{\n{body}\n}}\n"


class ThemeState(str, Enum):
    UNAPPLIED = "unapplied"
    APPLIED = "applied"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of one apply call on the style registry."""
    scope_id: str
    element_id: Optional[str]
    state: ThemeState
    previous_state: ThemeState
    changed: bool
    reason: str = ""
    theme_name: Optional[str] = None
    superseded_fingerprint: Optional[str] = None


# --- Builder & audit ---


class BrandInputs(AppBaseModel):
    """The handful of choices a business makes when customizing its appearance."""
    brand_color: str = Field(default="#4f46e5", description="Primary brand color.")
    secondary_color: Optional[str] = Field(
        default=None, description="Optional secondary color. Derived from the brand color when omitted."
    )
    accent_color: Optional[str] = None
    background_color: Optional[str] = None
    font_pair: str = Field(default="poppins-inter", description="Identifier of a font pairing.")
    density: Literal["compact", "balanced", "spacious"] = "balanced"
    type_ratio: float = Field(default=1.25, description="Modular scale ratio of the type scale.")
    base_font_size: float = Field(default=16.0, description="Base font size in pixels.")
    appearance: Appearance = "light"

    @field_validator("font_pair")
    @classmethod
    def normalize_font_pair(cls, value: str) -> str:
        return value.lower().strip()


class AccessibilityCheck(FrozenModel):
    name: str
    result: AccessibilityResult


class AccessibilityReport(FrozenModel):
    checks: List[AccessibilityCheck] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def passed(self) -> bool:
        return not self.warnings


# --- Presets ---


class ThemePreset(AppBaseModel):
    """An entry of the saved theme library."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    industries: List[str] = Field(default_factory=list)
    inputs: Optional[BrandInputs] = None
    theme: Optional[LegacyTheme] = None

    @field_validator("tags", "industries")
    @classmethod
    def normalize_labels(cls, values: List[str]) -> List[str]:
        """Normalize labels by converting to lowercase and stripping whitespace."""
        return [v.lower().strip() for v in values if v]


class PresetLibrary(AppBaseModel):
    """Structure of the presets.json file."""
    presets: List[ThemePreset] = Field(default_factory=list)


# --- API request / response models ---


class PaletteRequest(AppBaseModel):
    color: str = Field(description="Base color as #RGB or #RRGGBB.")


class AccessibilityRequest(AppBaseModel):
    foreground: str
    background: str
    min_ratio: float = Field(default=4.5, ge=1)


class TypeScaleRequest(AppBaseModel):
    base: float = 16.0
    ratio: float = 1.25


class SpacingRequest(AppBaseModel):
    base: float = 16.0
    unit: Unit = "px"
    ratio: float = 1.5
    convert_to: Optional[Unit] = None


class GridRequest(AppBaseModel):
    columns: int = Field(default=12, ge=1)
    gutter: float = 1.5
    margins: float = 1.5
    unit: Unit = "rem"
    breakpoints: Optional[Dict[str, int]] = None


class CompileRequest(AppBaseModel):
    """
    Exactly one source is used, in this order: `tokens`, `legacy`, `preset`,
    then `inputs`.
    """
    scope_id: str = Field(description="Tenant scope identifier, sanitized before use.")
    tokens: Optional[DesignTokens] = None
    legacy: Optional[LegacyTheme] = None
    preset: Optional[str] = Field(default=None, description="Identifier of a preset from the library.")
    inputs: Optional[BrandInputs] = None


class ApplyRequest(CompileRequest):
    theme_name: Optional[str] = None


class CompileResponse(AppBaseModel):
    scope_id: str
    selector: str
    declarations: Dict[str, str]
    diagnostics: List[str] = Field(default_factory=list)
    color_scheme: Appearance = "light"
    fingerprint: str
    css: str


class ApplyResponse(AppBaseModel):
    scope_id: str
    element_id: Optional[str] = None
    state: ThemeState
    previous_state: ThemeState
    changed: bool
    reason: str = ""
    theme_name: Optional[str] = None
    css: str = ""


if __name__ == "__main__":
    import json

    entity = ThemeEntity(id="t1", tenantId="acme", primaryColor="#112233")
    print("ThemeEntity source:")
    print(json.dumps(entity.source().model_dump(by_alias=True, exclude_none=True), indent=2))

    grid = GridSystem()
    print("\nDefault GridSystem:")
    print(json.dumps(grid.to_tree(), indent=2))
