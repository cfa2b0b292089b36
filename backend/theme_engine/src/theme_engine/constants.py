"""
Convention tables shared by the generators, the compiler and the runtime.

Several independent call sites must agree on these values, so they are
declared once here and imported everywhere else.
"""
from typing import Dict, List, Tuple

# --- Accessibility thresholds (WCAG 2.x) ---
CONTRAST_NORMAL_TEXT = 4.5
CONTRAST_LARGE_TEXT = 3.0
CONTRAST_ENHANCED = 7.0

# sRGB linearization knee used by the original WCAG 2.0 text
SRGB_LINEAR_THRESHOLD = 0.03928
LUMINANCE_WEIGHTS = (0.2126, 0.7152, 0.0722)

# --- Palette ---
# Lightness of every shade step, lightest to darkest. Hue and saturation
# are taken from the base color.
SHADE_LIGHTNESS: Dict[int, float] = {
    50: 0.97,
    100: 0.94,
    200: 0.86,
    300: 0.77,
    400: 0.66,
    500: 0.55,
    600: 0.45,
    700: 0.37,
    800: 0.29,
    900: 0.22,
    950: 0.14,
}
SHADE_STEPS: Tuple[int, ...] = tuple(SHADE_LIGHTNESS)

ANALOGOUS_OFFSET = 30.0
COMPLEMENTARY_OFFSETS: Tuple[float, ...] = (180.0,)
ANALOGOUS_OFFSETS: Tuple[float, ...] = (-ANALOGOUS_OFFSET, ANALOGOUS_OFFSET)
TRIADIC_OFFSETS: Tuple[float, ...] = (120.0, 240.0)
TETRADIC_OFFSETS: Tuple[float, ...] = (90.0, 180.0, 270.0)
MONOCHROMATIC_LIGHTNESS: Tuple[float, ...] = (0.85, 0.7, 0.55, 0.4, 0.25)

HARMONY_OFFSETS: Dict[str, Tuple[float, ...]] = {
    "complementary": COMPLEMENTARY_OFFSETS,
    "analogous": ANALOGOUS_OFFSETS,
    "triadic": TRIADIC_OFFSETS,
    "tetradic": TETRADIC_OFFSETS,
}

# Anchor (hue, saturation, lightness) per semantic role. The base palette
# only modulates saturation and lightness, never the hue.
SEMANTIC_ANCHORS: Dict[str, Tuple[float, float, float]] = {
    "success": (142.0, 0.70, 0.45),
    "warning": (40.0, 0.95, 0.50),
    "error": (0.0, 0.90, 0.50),
    "info": (210.0, 0.80, 0.55),
}
SEMANTIC_SATURATION_RANGE = (0.45, 1.0)
SEMANTIC_LIGHTNESS_RANGE = (0.35, 0.60)

# Lightness deltas (percentage points) used to derive scaled color members
SCALED_LIGHT_DELTA = 15.0
SCALED_DARK_DELTA = -15.0
SCALED_HOVER_DELTA = -10.0

# --- Typography ---
TYPE_SCALE_STEPS: Tuple[str, ...] = (
    "xs", "sm", "base", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl", "7xl", "8xl", "9xl",
)
TYPE_BASE_STEP = "base"

# (last step of the band, value) pairs, scanned in order
LINE_HEIGHT_BANDS: Tuple[Tuple[str, float], ...] = (
    ("base", 1.6),
    ("xl", 1.5),
    ("3xl", 1.3),
    ("9xl", 1.1),
)
LETTER_SPACING_BANDS: Tuple[Tuple[str, str], ...] = (
    ("sm", "0.01em"),
    ("lg", "0em"),
    ("9xl", "-0.01em"),
)

FONT_WEIGHTS: Dict[str, int] = {
    "thin": 100,
    "extralight": 200,
    "light": 300,
    "normal": 400,
    "medium": 500,
    "semibold": 600,
    "bold": 700,
    "extrabold": 800,
    "black": 900,
}

# --- Spacing ---
SPACING_UNITS: Tuple[str, ...] = ("px", "rem", "em")
SPACING_STEPS: Tuple[str, ...] = ("xs", "sm", "md", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl")
SPACING_BASE_STEP = "md"
# Numeric micro-scale, each step is `n / 4` of the base unit (4 == base)
SPACING_MICRO_STEPS: Tuple[str, ...] = (
    "0", "0.5", "1", "1.5", "2", "2.5", "3", "3.5", "4", "5", "6", "7", "8", "9", "10",
    "11", "12", "14", "16", "20", "24", "28", "32", "36", "40", "44", "48", "52", "56",
    "60", "64", "72", "80", "96",
)
SPACING_MICRO_DIVISOR = 4.0

# --- Grid ---
BREAKPOINT_ORDER: Tuple[str, ...] = ("xs", "sm", "md", "lg", "xl", "xxl", "2xl", "3xl")
DEFAULT_BREAKPOINTS: Dict[str, int] = {
    "xs": 0,
    "sm": 640,
    "md": 768,
    "lg": 1024,
    "xl": 1280,
    "xxl": 1536,
}

# density -> spacing base (px), spacing ratio, grid gutter/margins (rem), breakpoints
DENSITY_PRESETS: Dict[str, Dict] = {
    "compact": {
        "spacing_base": 12.0,
        "spacing_ratio": 1.5,
        "gutter": 1.0,
        "margins": 1.0,
        "breakpoints": {"xs": 0, "sm": 576, "md": 768, "lg": 992, "xl": 1200, "xxl": 1400},
    },
    "balanced": {
        "spacing_base": 16.0,
        "spacing_ratio": 1.5,
        "gutter": 1.5,
        "margins": 1.5,
        "breakpoints": dict(DEFAULT_BREAKPOINTS),
    },
    "spacious": {
        "spacing_base": 20.0,
        "spacing_ratio": 1.6,
        "gutter": 2.0,
        "margins": 2.0,
        "breakpoints": {"xs": 0, "sm": 640, "md": 768, "lg": 1024, "xl": 1440, "xxl": 1920},
    },
}

# --- Fonts ---
SANS_FALLBACKS = "system-ui, -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif"
SERIF_FALLBACKS = "Georgia, Cambria, 'Times New Roman', serif"
MONO_FALLBACKS = "ui-monospace, SFMono-Regular, Menlo, Consolas, 'Liberation Mono', monospace"

# pair id -> (heading family, heading category, body family, body category)
FONT_PAIRINGS: Dict[str, Tuple[str, str, str, str]] = {
    "poppins-inter": ("Poppins", "sans-serif", "Inter", "sans-serif"),
    "playfair-source-sans": ("Playfair Display", "serif", "Source Sans Pro", "sans-serif"),
    "montserrat-open-sans": ("Montserrat", "sans-serif", "Open Sans", "sans-serif"),
    "roboto-slab-roboto": ("Roboto Slab", "serif", "Roboto", "sans-serif"),
    "merriweather-lato": ("Merriweather", "serif", "Lato", "sans-serif"),
    "system": ("system-ui", "sans-serif", "system-ui", "sans-serif"),
}
DEFAULT_FONT_PAIRING = "poppins-inter"

# --- Fixed token defaults ---
DEFAULT_RADIUS: Dict[str, str] = {
    "none": "0",
    "sm": "0.125rem",
    "DEFAULT": "0.5rem",
    "md": "0.375rem",
    "lg": "0.5rem",
    "xl": "0.75rem",
    "2xl": "1rem",
    "3xl": "1.5rem",
    "full": "9999px",
}
DEFAULT_BORDER_WIDTH: Dict[str, str] = {
    "none": "0",
    "thin": "1px",
    "DEFAULT": "1px",
    "thick": "2px",
    "heavy": "4px",
}
DEFAULT_SHADOWS: Dict[str, str] = {
    "none": "none",
    "sm": "0 1px 2px 0 rgba(0, 0, 0, 0.05)",
    "DEFAULT": "0 1px 3px 0 rgba(0, 0, 0, 0.1), 0 1px 2px 0 rgba(0, 0, 0, 0.06)",
    "md": "0 4px 6px -1px rgba(0, 0, 0, 0.1), 0 2px 4px -1px rgba(0, 0, 0, 0.06)",
    "lg": "0 10px 15px -3px rgba(0, 0, 0, 0.1), 0 4px 6px -2px rgba(0, 0, 0, 0.05)",
    "xl": "0 20px 25px -5px rgba(0, 0, 0, 0.1), 0 10px 10px -5px rgba(0, 0, 0, 0.04)",
    "2xl": "0 25px 50px -12px rgba(0, 0, 0, 0.25)",
    "inner": "inset 0 2px 4px 0 rgba(0, 0, 0, 0.06)",
}
DEFAULT_EFFECTS: Dict[str, Dict[str, str]] = {
    "transition": {
        "fast": "100ms ease-in-out",
        "DEFAULT": "150ms ease-in-out",
        "slow": "300ms ease-in-out",
    },
    "opacity": {
        "disabled": "0.5",
        "hover": "0.8",
    },
}

# Light surface roles used by the token builder and the legacy migration
LIGHT_SURFACES: Dict[str, str] = {
    "background": "#ffffff",
    "surface": "#f9fafb",
    "elevated": "#ffffff",
    "sunken": "#f3f4f6",
    "foreground": "#111827",
    "muted": "#6b7280",
    "subtle": "#9ca3af",
    "border": "#e5e7eb",
}

# Fixed dark palette substituted for the background/foreground/surface roles
DARK_SURFACES: Dict[str, str] = {
    "background": "#0f172a",
    "surface": "#1e293b",
    "elevated": "#334155",
    "sunken": "#020617",
    "foreground": "#f8fafc",
    "muted": "#94a3b8",
    "subtle": "#64748b",
    "border": "#334155",
}
BRAND_ROLES: Tuple[str, ...] = ("primary", "secondary", "accent")
DARK_NUDGE_STEP = 5.0
DARK_NUDGE_MAX_STEPS = 20

# --- Compatibility aliases ---
# alias -> (ordered source paths, documented default). Paths are dotted
# paths into the normalized token tree; the first one that resolves to a
# scalar wins.
ALIAS_TABLE: List[Tuple[str, Tuple[str, ...], str]] = [
    ("background", ("colors.background.DEFAULT", "colors.background"), "#ffffff"),
    ("foreground", ("colors.foreground.DEFAULT", "colors.foreground", "colors.text.DEFAULT", "colors.text"), "#111827"),
    ("card", ("colors.background.surface",), "#f9fafb"),
    ("card-foreground", ("colors.foreground.DEFAULT", "colors.foreground", "colors.text.DEFAULT", "colors.text"), "#111827"),
    ("popover", ("colors.background.elevated",), "#ffffff"),
    ("popover-foreground", ("colors.foreground.DEFAULT", "colors.foreground", "colors.text.DEFAULT", "colors.text"), "#111827"),
    ("primary", ("colors.primary.DEFAULT", "colors.primary"), "#4f46e5"),
    ("primary-foreground", ("colors.primary.foreground",), "#ffffff"),
    ("secondary", ("colors.secondary.DEFAULT", "colors.secondary"), "#06b6d4"),
    ("secondary-foreground", ("colors.secondary.foreground",), "#ffffff"),
    ("muted", ("colors.background.sunken",), "#f3f4f6"),
    ("muted-foreground", ("colors.foreground.muted",), "#6b7280"),
    ("accent", ("colors.accent.DEFAULT", "colors.accent", "colors.primary.light"), "#818cf8"),
    ("accent-foreground", ("colors.accent.foreground", "colors.primary.foreground"), "#ffffff"),
    ("destructive", ("colors.destructive.DEFAULT", "colors.destructive", "colors.error.DEFAULT", "colors.error"), "#ef4444"),
    ("destructive-foreground", ("colors.destructive.foreground", "colors.error.foreground"), "#ffffff"),
    ("border", ("colors.border.DEFAULT", "colors.border"), "#e5e7eb"),
    ("input", ("colors.input.DEFAULT", "colors.input", "colors.border.DEFAULT", "colors.border"), "#e5e7eb"),
    ("ring", ("colors.focus.DEFAULT", "colors.focus", "colors.ring", "colors.primary.DEFAULT", "colors.primary"), "#3b82f6"),
    ("radius", ("borders.radius.DEFAULT", "borders.radius"), "0.5rem"),
]

# --- Legacy theme shape ---
LEGACY_DEFAULTS: Dict[str, str] = {
    "secondaryColor": "#06b6d4",
    "accentColor": "#f59e0b",
    "backgroundColor": "#ffffff",
    "textColor": "#111827",
    "fontFamily": "Inter, sans-serif",
}
LEGACY_RADIUS_KEYWORDS: Dict[str, str] = {
    "none": "0px",
    "sm": "0.125rem",
    "md": "0.25rem",
    "lg": "0.5rem",
    "full": "9999px",
}
