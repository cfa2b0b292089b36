import hashlib
import re
from typing import Iterable

from ..config import settings

_CLEAN_SCOPE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
# Sanitized ids end in "--<digest>"; a clean id never contains "--"
_SANITIZED_SCOPE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*--[0-9a-f]{8}$")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_NON_IDENT = re.compile(r"[^a-zA-Z0-9_-]")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def sanitize_scope_id(raw: str) -> str:
    """
    Turn an arbitrary tenant identifier into a safe selector fragment.

    Lower-cases the value and collapses every run of characters outside
    [a-z0-9] into a single '-'. When anything had to be changed, a short
    digest of the raw value is appended after a double dash, so 'Acme Inc'
    becomes 'acme-inc--<digest>'. Clean identifiers never contain '--',
    so no clean identifier can take over the scope of a sanitized one.
    Clean and already-sanitized identifiers are returned unchanged, which
    makes the function idempotent.
    """
    raw = "" if raw is None else str(raw)
    if _CLEAN_SCOPE.match(raw) or _SANITIZED_SCOPE.match(raw):
        return raw

    slug = _NON_ALNUM.sub("-", raw.lower()).strip("-") or "global"
    digest = hashlib.sha1(raw.encode("utf-8")).hexdigest()[:8]
    return f"{slug}--{digest}"


def scope_selector(scope_id: str) -> str:
    return f".{settings.SCOPE_CLASS_PREFIX}-{scope_id}"


def style_element_id(scope_id: str) -> str:
    return f"{settings.SCOPE_CLASS_PREFIX}-{scope_id}-style"


def kebab_case(segment: str) -> str:
    """'primaryForeground' -> 'primary-foreground', '2xl' -> '2xl', '0.5' -> '0_5'."""
    text = _CAMEL_BOUNDARY.sub("-", str(segment)).replace(" ", "-").lower()
    return _NON_IDENT.sub("_", text)


def variable_name(path: Iterable[str]) -> str:
    """
    Custom property name for a token path. 'DEFAULT' segments are dropped so
    that colors.primary.DEFAULT becomes --colors-primary.
    """
    segments = [kebab_case(segment) for segment in path if segment != "DEFAULT"]
    return "--" + "-".join(segment for segment in segments if segment)
