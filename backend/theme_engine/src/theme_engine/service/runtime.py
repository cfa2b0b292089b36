"""
Runtime side of the engine: the process-wide registry holding exactly one
style fragment per tenant scope, and the dark-mode derivation applied to
token trees before they are compiled.
"""
import copy
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional

from ..config import settings
from ..constants import (
    BRAND_ROLES,
    CONTRAST_NORMAL_TEXT,
    DARK_NUDGE_MAX_STEPS,
    DARK_NUDGE_STEP,
    DARK_SURFACES,
)
from ..errors import InvalidColorFormat
from ..models.schemas import ApplyResult, CompiledTheme, DesignTokens, ScaledColor, ThemeState
from ..utils.naming import sanitize_scope_id, scope_selector, style_element_id
from .color import adjust_lightness, contrast_ratio, is_hex_color, normalize_hex
from .palette import parse_color_token, scale_color

logger = logging.getLogger(settings.SERVICE_NAME + ".runtime")

_SURFACE_GROUPS = {
    "background": {
        "DEFAULT": DARK_SURFACES["background"],
        "surface": DARK_SURFACES["surface"],
        "elevated": DARK_SURFACES["elevated"],
        "sunken": DARK_SURFACES["sunken"],
    },
    "foreground": {
        "DEFAULT": DARK_SURFACES["foreground"],
        "muted": DARK_SURFACES["muted"],
        "subtle": DARK_SURFACES["subtle"],
    },
    "text": {
        "DEFAULT": DARK_SURFACES["foreground"],
        "muted": DARK_SURFACES["muted"],
        "subtle": DARK_SURFACES["subtle"],
    },
    "border": {"DEFAULT": DARK_SURFACES["border"]},
    "input": {"DEFAULT": DARK_SURFACES["border"]},
}


def _invert_surface(current: Any, dark_group: Dict[str, str]) -> Any:
    """Keep the token's shape: a plain value stays plain, a group keeps its extra members."""
    if isinstance(current, dict):
        inverted = dict(current)
        inverted.update(dark_group)
        return inverted
    return dark_group["DEFAULT"]


def nudge_for_contrast(color: str, background: str, threshold: float = CONTRAST_NORMAL_TEXT) -> str:
    """
    Lighten `color` in fixed steps until it clears `threshold` against
    `background`. Gives up after a bounded number of steps.
    """
    nudged = normalize_hex(color)
    steps = 0
    while contrast_ratio(nudged, background) < threshold and steps < DARK_NUDGE_MAX_STEPS:
        nudged = adjust_lightness(nudged, DARK_NUDGE_STEP)
        steps += 1
    return nudged


def _darken_brand_role(role: str, current: Any, background: str) -> Any:
    try:
        token = parse_color_token(current)
    except InvalidColorFormat:
        logger.warning(f"Dark variant: brand color '{role}' is not a valid hex color; left unchanged")
        return current

    if isinstance(token, ScaledColor):
        base = token.base
    elif token is not None and is_hex_color(token.value):
        base = token.value
    elif isinstance(current, dict) and is_hex_color(current.get("DEFAULT")):
        base = normalize_hex(current["DEFAULT"])
    else:
        return current

    nudged = nudge_for_contrast(base, background)
    if nudged == base:
        return current

    logger.debug(f"Dark variant: nudged '{role}' from {base} to {nudged} for contrast")
    if isinstance(current, dict):
        updated = {key: value for key, value in current.items() if key != "base"}
        updated.update(scale_color(nudged).to_tree())
        return updated
    return nudged


def derive_dark_variant(tokens: DesignTokens) -> DesignTokens:
    """
    Derive the dark counterpart of a token tree.

    Background, foreground, surface and border roles are replaced by a fixed
    dark palette. Brand roles (primary / secondary / accent) keep their hue
    and are only lightened when they fail normal-text contrast against the
    dark background, in which case their readable foreground is recomputed.
    The input tree is left untouched.

    Args:
        tokens: Light (or already dark) token tree

    Returns:
        A new DesignTokens with appearance 'dark'
    """
    tree = copy.deepcopy(tokens.tree())
    colors = dict(tree.get("colors") or {})
    background = DARK_SURFACES["background"]

    for group, dark_group in _SURFACE_GROUPS.items():
        if group in colors or group in ("background", "foreground", "border"):
            colors[group] = _invert_surface(colors.get(group), dark_group)

    for role in BRAND_ROLES:
        if role in colors:
            colors[role] = _darken_brand_role(role, colors[role], background)

    tree["colors"] = colors
    return DesignTokens(**tree, appearance="dark")


@dataclass(frozen=True)
class StyleHandle:
    """The single style fragment owned by one tenant scope."""
    scope_id: str
    element_id: str
    selector: str
    css: str
    fingerprint: str
    theme_name: Optional[str]
    updated_at: float
    version: int = 1


class StyleRegistry:
    """
    Owns the scope -> style fragment mapping. Every mutation goes through
    this class and happens under one lock, so concurrent applies for the
    same scope never interleave and the last call wins.
    """

    def __init__(self, history_size: Optional[int] = None):
        self._handles: Dict[str, StyleHandle] = {}
        # Only the most recent replaced fingerprints of each scope are kept
        self._history_size = settings.SUPERSEDED_HISTORY_SIZE if history_size is None else history_size
        self._superseded: Dict[str, Deque[str]] = {}
        self._lock = threading.RLock()

    def apply(self, compiled: Optional[CompiledTheme], theme_name: Optional[str] = None) -> ApplyResult:
        """
        Create or fully replace the style fragment of the compiled theme's scope.

        A missing or empty compiled theme is logged and ignored: whatever is
        currently applied for that scope stays in place.

        Args:
            compiled: Output of the token compiler
            theme_name: Optional display name recorded as the active theme

        Returns:
            ApplyResult describing the transition
        """
        if compiled is None or compiled.is_empty():
            scope_id = sanitize_scope_id(compiled.scope_id) if compiled is not None else ""
            with self._lock:
                existing = self._handles.get(scope_id)
            state = ThemeState.APPLIED if existing else ThemeState.UNAPPLIED
            logger.warning(f"Ignoring apply with no declarations for scope '{scope_id}'; current style kept")
            return ApplyResult(
                scope_id=scope_id,
                element_id=existing.element_id if existing else None,
                state=state,
                previous_state=state,
                changed=False,
                reason="empty theme",
                theme_name=existing.theme_name if existing else None,
            )

        scope_id = sanitize_scope_id(compiled.scope_id)
        selector = scope_selector(scope_id)
        css = compiled.to_css(selector)

        with self._lock:
            existing = self._handles.get(scope_id)
            if existing and existing.fingerprint == compiled.fingerprint and existing.theme_name == theme_name:
                logger.debug(f"Scope '{scope_id}' already has theme {compiled.fingerprint[:8]} applied")
                return ApplyResult(
                    scope_id=scope_id,
                    element_id=existing.element_id,
                    state=ThemeState.APPLIED,
                    previous_state=ThemeState.APPLIED,
                    changed=False,
                    reason="unchanged",
                    theme_name=theme_name,
                )

            superseded = None
            if existing and existing.fingerprint != compiled.fingerprint:
                superseded = existing.fingerprint
                history = self._superseded.setdefault(scope_id, deque(maxlen=self._history_size))
                history.append(superseded)

            handle = StyleHandle(
                scope_id=scope_id,
                element_id=style_element_id(scope_id),
                selector=selector,
                css=css,
                fingerprint=compiled.fingerprint,
                theme_name=theme_name,
                updated_at=time.time(),
                version=existing.version + 1 if existing else 1,
            )
            self._handles[scope_id] = handle

        logger.info(
            f"Applied theme '{theme_name or compiled.fingerprint[:8]}' to scope '{scope_id}' "
            f"({len(compiled.declarations)} declarations)"
        )
        return ApplyResult(
            scope_id=scope_id,
            element_id=handle.element_id,
            state=ThemeState.APPLIED,
            previous_state=ThemeState.APPLIED if existing else ThemeState.UNAPPLIED,
            changed=True,
            reason="updated" if existing else "created",
            theme_name=theme_name,
            superseded_fingerprint=superseded,
        )

    def state_of(self, scope_id: str, fingerprint: Optional[str] = None) -> ThemeState:
        """
        State of a scope, or of one compiled theme within that scope when
        `fingerprint` is given.
        """
        scope_id = sanitize_scope_id(scope_id)
        with self._lock:
            handle = self._handles.get(scope_id)
            history = list(self._superseded.get(scope_id, []))
        if fingerprint is None:
            return ThemeState.APPLIED if handle else ThemeState.UNAPPLIED
        if handle and handle.fingerprint == fingerprint:
            return ThemeState.APPLIED
        if fingerprint in history:
            return ThemeState.SUPERSEDED
        return ThemeState.UNAPPLIED

    def get_handle(self, scope_id: str) -> Optional[StyleHandle]:
        with self._lock:
            return self._handles.get(sanitize_scope_id(scope_id))

    def get_stylesheet(self, scope_id: str) -> Optional[str]:
        handle = self.get_handle(scope_id)
        return handle.css if handle else None

    def active_theme(self, scope_id: str) -> Optional[str]:
        handle = self.get_handle(scope_id)
        return handle.theme_name if handle else None

    def scopes(self) -> List[str]:
        with self._lock:
            return list(self._handles)

    def render(self) -> str:
        """Every tenant fragment in one stylesheet, in the order scopes were first applied."""
        with self._lock:
            handles = list(self._handles.values())
        return "\n".join(handle.css for handle in handles)

    def remove(self, scope_id: str) -> bool:
        """Drop the fragment of a scope. Returns False if there was none."""
        scope_id = sanitize_scope_id(scope_id)
        with self._lock:
            handle = self._handles.pop(scope_id, None)
            self._superseded.pop(scope_id, None)
        if handle:
            logger.info(f"Removed style fragment for scope '{scope_id}'")
        return handle is not None

    def clear(self):
        with self._lock:
            self._handles.clear()
            self._superseded.clear()


# Singleton instance
_registry_instance = None
_registry_lock = threading.Lock()


def get_style_registry() -> StyleRegistry:
    """
    Get the singleton instance of the StyleRegistry.

    Returns:
        The process-wide StyleRegistry
    """
    global _registry_instance
    with _registry_lock:
        if _registry_instance is None:
            _registry_instance = StyleRegistry()
    return _registry_instance


def apply_theme(compiled: Optional[CompiledTheme], theme_name: Optional[str] = None) -> ApplyResult:
    """Apply a compiled theme on the process-wide registry."""
    return get_style_registry().apply(compiled, theme_name=theme_name)
