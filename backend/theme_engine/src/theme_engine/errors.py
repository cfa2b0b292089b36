from typing import Any, Optional, Sequence


class ThemeEngineError(Exception):
    """Base class for every error raised by the theme engine."""


class InvalidColorFormat(ThemeEngineError, ValueError):
    """A color value could not be parsed (wrong length or non-hex characters)."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid color value: {value!r}. Use #RGB or #RRGGBB.")


class InvalidTokenShape(ThemeEngineError):
    """
    A token leaf has a type the compiler cannot emit (arrays, booleans, null,
    nested wrappers) or a value that would break out of a declaration block.
    """

    def __init__(self, path: Sequence[str], value: Any, reason: str = "unsupported leaf type"):
        self.path = tuple(path)
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid token at '{'.'.join(self.path)}': {reason} ({type(value).__name__})")


class MissingAliasSource(ThemeEngineError):
    """None of the source paths of a compatibility alias resolved to a value."""

    def __init__(self, alias: str, paths: Sequence[str], default: Optional[str] = None):
        self.alias = alias
        self.paths = tuple(paths)
        self.default = default
        super().__init__(
            f"Alias '{alias}' has no source in {list(self.paths)}; using default {default!r}"
        )


class InvalidBreakpoints(ThemeEngineError, ValueError):
    """Grid breakpoints are unknown or not strictly increasing in canonical order."""
