"""
Compatibility aliases: the small, fixed vocabulary (background, foreground,
primary, ... radius) that shared components read, resolved from the richer
token tree through an ordered table of candidate paths per alias.
"""
import logging
from typing import Any, Dict, List, Mapping, Tuple

import jmespath

from ..config import settings
from ..constants import ALIAS_TABLE
from ..errors import MissingAliasSource
from ..utils.units import format_scalar

logger = logging.getLogger(settings.SERVICE_NAME + ".aliases")


def _path_expression(path: str):
    """Compile a dotted token path into a JMESPath expression with quoted segments."""
    return jmespath.compile(".".join(f'"{segment}"' for segment in path.split(".")))


# alias -> (candidate paths, compiled expressions, default), compiled once at import
_RESOLUTION_TABLE: Dict[str, Tuple[Tuple[str, ...], tuple, str]] = {
    alias: (paths, tuple(_path_expression(path) for path in paths), default)
    for alias, paths, default in ALIAS_TABLE
}

ALIAS_NAMES: Tuple[str, ...] = tuple(alias for alias, _, _ in ALIAS_TABLE)
ALIAS_DEFAULTS: Dict[str, str] = {alias: default for alias, _, default in ALIAS_TABLE}


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool) and value != ""


def resolve_alias(tree: Mapping[str, Any], alias: str) -> str:
    """
    Resolve one alias: the first candidate path holding a scalar wins.

    Raises:
        KeyError: If `alias` is not part of the vocabulary
        MissingAliasSource: If no candidate path resolves
    """
    paths, expressions, default = _RESOLUTION_TABLE[alias]
    for expression in expressions:
        value = expression.search(tree)
        if _is_scalar(value):
            return format_scalar(value)
    raise MissingAliasSource(alias, paths, default)


def resolve_aliases(tree: Mapping[str, Any]) -> Tuple[Dict[str, str], List[str]]:
    """
    Resolve the whole alias vocabulary. Never fails: an alias without a
    source gets its documented default and a diagnostic is recorded.

    Returns:
        (alias -> value in table order, diagnostics)
    """
    resolved: Dict[str, str] = {}
    diagnostics: List[str] = []
    for alias in ALIAS_NAMES:
        try:
            resolved[alias] = resolve_alias(tree, alias)
        except MissingAliasSource as e:
            logger.debug(str(e))
            diagnostics.append(str(e))
            resolved[alias] = e.default
    return resolved, diagnostics
