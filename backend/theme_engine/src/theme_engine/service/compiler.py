import hashlib
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config import settings
from ..errors import InvalidColorFormat, InvalidTokenShape
from ..models.schemas import CompiledTheme, Declaration, DesignTokens
from ..utils.naming import sanitize_scope_id, scope_selector, variable_name
from ..utils.units import format_scalar
from .aliases import resolve_aliases
from .builder import default_token_tree
from .legacy import ThemeInput, normalize_theme
from .palette import parse_color_token

logger = logging.getLogger(settings.SERVICE_NAME + ".compiler")

# Characters that could close a declaration or the surrounding rule, or escape it
_UNSAFE_CHARACTERS = set(";{}<>\\\r\n\f")
# Comment delimiters, an unclosed one swallows every later rule of the stylesheet
_UNSAFE_SEQUENCES = ("/*", "*/")

Path = Tuple[str, ...]


def _lookup_default(defaults: Mapping[str, Any], path: Path) -> Any:
    node: Any = defaults
    for segment in path:
        if not isinstance(node, Mapping) or segment not in node:
            return None
        node = node[segment]
    return node


def validate_leaf(path: Path, value: Any) -> str:
    """
    Render a token leaf as CSS text.

    Raises:
        InvalidTokenShape: If the leaf is not a string or a number, is empty,
        or contains characters that would escape the declaration
    """
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise InvalidTokenShape(path, value)
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidTokenShape(path, value, reason="non-finite number")
    text = format_scalar(value)
    if not text:
        raise InvalidTokenShape(path, value, reason="empty value")
    if _UNSAFE_CHARACTERS & set(text) or any(sequence in text for sequence in _UNSAFE_SEQUENCES):
        raise InvalidTokenShape(path, value, reason="value contains characters that could escape the declaration")
    if text.count("'") % 2 or text.count('"') % 2:
        raise InvalidTokenShape(path, value, reason="unbalanced quotes")
    return text


def normalize_colors(
    colors: Mapping[str, Any],
    diagnostics: List[str],
    defaults: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Expand color tokens in the top level of the colors branch: hex strings are
    normalized and scaled tokens ({'base': ...}) become their full variant
    group. Groups of other shapes are left for the flattener. A scaled token
    with an invalid base is replaced by the default tree's token of the same
    name, or dropped.
    """
    normalized: Dict[str, Any] = {}
    for name, raw in colors.items():
        if isinstance(raw, str):
            normalized[name] = parse_color_token(raw).to_tree()
            continue
        if isinstance(raw, dict) and "base" in raw:
            try:
                token = parse_color_token(raw)
            except InvalidColorFormat as e:
                fallback = _lookup_default(defaults or {}, ("colors", name))
                logger.warning(f"Scaled color 'colors.{name}' has an invalid base: {e}")
                if fallback is None:
                    diagnostics.append(f"colors.{name}: {e}; token skipped")
                else:
                    diagnostics.append(f"colors.{name}: {e}; default substituted")
                    normalized[name] = fallback
                continue
            extra = {key: value for key, value in raw.items() if key != "base" and key not in token.to_tree()}
            normalized[name] = {**token.to_tree(), **extra}
        else:
            normalized[name] = raw
    return normalized


class _Flattener:
    """Walks a token tree once, collecting declarations and the cleaned tree."""

    def __init__(self, defaults: Mapping[str, Any], diagnostics: List[str]):
        self.defaults = defaults
        self.declarations: Dict[str, str] = {}
        self.diagnostics = diagnostics

    def _emit(self, path: Path, text: str):
        # A later duplicate updates the value but keeps the first position
        name = variable_name(path)
        if name == "--":
            return
        self.declarations[name] = text

    def _substitute(self, path: Path, error: InvalidTokenShape) -> Optional[Any]:
        fallback = _lookup_default(self.defaults, path)
        if fallback is not None and not isinstance(fallback, Mapping):
            try:
                text = validate_leaf(path, fallback)
            except InvalidTokenShape:
                text = None
            if text is not None:
                self.diagnostics.append(f"{error}; default {text!r} substituted")
                logger.warning(f"{error}; substituting default {text!r}")
                self._emit(path, text)
                return fallback
        self.diagnostics.append(f"{error}; token skipped")
        logger.warning(f"{error}; skipping token")
        return None

    def walk(self, node: Mapping[str, Any], path: Path = ()) -> Dict[str, Any]:
        cleaned: Dict[str, Any] = {}
        for key, value in node.items():
            child = path + (str(key),)
            if isinstance(value, Mapping):
                cleaned[str(key)] = self.walk(value, child)
                continue
            try:
                text = validate_leaf(child, value)
            except InvalidTokenShape as e:
                fallback = self._substitute(child, e)
                if fallback is not None:
                    cleaned[str(key)] = fallback
                continue
            self._emit(child, text)
            cleaned[str(key)] = value
        return cleaned


def _fingerprint(declarations: List[Declaration]) -> str:
    digest = hashlib.sha1()
    for declaration in declarations:
        digest.update(f"{declaration.name}:{declaration.value};".encode("utf-8"))
    return digest.hexdigest()


def compile_tokens(tokens: Optional[DesignTokens], scope_id: str) -> CompiledTheme:
    """
    Compile a token tree into the declarations of one tenant scope.

    Every leaf becomes one custom property named after its kebab-cased path
    ('DEFAULT' segments dropped). Invalid leaves are replaced by the value
    at the same path of the default tree, or skipped, and recorded as
    diagnostics. The compatibility aliases follow the native declarations.
    The output order depends only on the input, so compiling the same input
    twice yields identical declarations.

    Args:
        tokens: Token tree. None or an empty tree compiles to no declarations
        scope_id: Raw tenant identifier, sanitized here

    Returns:
        CompiledTheme for the sanitized scope
    """
    scope = sanitize_scope_id(scope_id)
    if tokens is None or tokens.is_empty():
        logger.warning(f"No tokens to compile for scope '{scope}'")
        return CompiledTheme(
            scope_id=scope,
            selector=scope_selector(scope),
            diagnostics=("no tokens to compile",),
        )
    tree = tokens.tree()

    diagnostics: List[str] = []
    defaults = default_token_tree()
    if isinstance(tree.get("colors"), Mapping):
        tree["colors"] = normalize_colors(tree["colors"], diagnostics, defaults)

    flattener = _Flattener(defaults, diagnostics)
    cleaned = flattener.walk(tree)

    aliases, alias_diagnostics = resolve_aliases(cleaned)
    diagnostics.extend(alias_diagnostics)
    for alias, value in aliases.items():
        flattener.declarations.setdefault(f"--{alias}", value)

    declarations = [Declaration(name=name, value=value) for name, value in flattener.declarations.items()]
    if tokens.appearance == "dark":
        declarations.append(Declaration(name="color-scheme", value="dark"))

    compiled = CompiledTheme(
        scope_id=scope,
        selector=scope_selector(scope),
        declarations=tuple(declarations),
        diagnostics=tuple(diagnostics),
        color_scheme=tokens.appearance,
        fingerprint=_fingerprint(declarations),
    )
    logger.debug(
        f"Compiled {len(declarations)} declarations for scope '{scope}' "
        f"({len(diagnostics)} diagnostics)"
    )
    return compiled


def compile_theme(source: ThemeInput, scope_id: str) -> CompiledTheme:
    """
    Compile any supported theme representation: a ThemeEntity, a legacy or
    token theme, DesignTokens, or a raw mapping. Legacy records are migrated
    first, so older persisted themes compile unmodified.
    """
    return compile_tokens(normalize_theme(source), scope_id)


def render_css(compiled: CompiledTheme) -> str:
    """The compiled theme as a plain stylesheet string, for export or diagnostics. Empty themes render as ''."""
    if compiled.is_empty():
        return ""
    return compiled.to_css()
