import os
import re

os.environ.setdefault("ENABLE_HOT_RELOAD", "False")
os.environ.setdefault("ENABLE_LRU_CACHE", "False")

import pytest

from theme_engine.errors import InvalidTokenShape, MissingAliasSource
from theme_engine.models.schemas import DesignTokens
from theme_engine.service.aliases import ALIAS_DEFAULTS, ALIAS_NAMES, resolve_alias, resolve_aliases
from theme_engine.service.builder import build_design_tokens, default_token_tree
from theme_engine.service.compiler import compile_tokens, render_css, validate_leaf
from theme_engine.service.runtime import StyleRegistry
from theme_engine.utils.naming import sanitize_scope_id, variable_name


def sample_tokens() -> DesignTokens:
    return DesignTokens(
        colors={
            "primary": "#4F46E5",
            "background": {"DEFAULT": "#ffffff", "surface": "#f9fafb"},
        },
        typography={"fontSize": {"base": "1rem", "2xl": "1.5rem"}, "lineHeight": {"base": 1.6}},
        spacing={"md": "1rem", "scale": {"0.5": "0.125rem"}},
        borders={"radius": {"DEFAULT": "0.375rem", "full": "9999px"}},
    )


def test_flattening_names_and_values():
    declarations = compile_tokens(sample_tokens(), "acme").as_dict()
    assert declarations["--colors-primary"] == "#4f46e5"
    assert declarations["--colors-background"] == "#ffffff"
    assert declarations["--colors-background-surface"] == "#f9fafb"
    assert declarations["--typography-font-size-base"] == "1rem"
    assert declarations["--typography-font-size-2xl"] == "1.5rem"
    assert declarations["--typography-line-height-base"] == "1.6"
    assert declarations["--spacing-scale-0_5"] == "0.125rem"
    assert declarations["--borders-radius"] == "0.375rem"


def test_variable_names():
    assert variable_name(("colors", "primary", "DEFAULT")) == "--colors-primary"
    assert variable_name(("typography", "fontFamily", "heading")) == "--typography-font-family-heading"
    assert variable_name(("spacing", "scale", "1.5")) == "--spacing-scale-1_5"


def test_scaled_color_tokens_expand():
    tokens = DesignTokens(colors={"primary": {"base": "#4f46e5"}})
    declarations = compile_tokens(tokens, "acme").as_dict()
    assert declarations["--colors-primary"] == "#4f46e5"
    assert declarations["--colors-primary-foreground"] == "#ffffff"
    for member in ("light", "dark", "hover"):
        assert f"--colors-primary-{member}" in declarations
    assert "--colors-primary-base" not in declarations


def test_compatibility_aliases_always_present():
    compiled = compile_tokens(sample_tokens(), "acme")
    declarations = compiled.as_dict()
    for alias in ALIAS_NAMES:
        assert f"--{alias}" in declarations
    assert declarations["--primary"] == "#4f46e5"
    assert declarations["--background"] == "#ffffff"
    assert declarations["--card"] == "#f9fafb"
    assert declarations["--radius"] == "0.375rem"
    # no source for these, documented defaults apply
    assert declarations["--border"] == ALIAS_DEFAULTS["border"]
    assert declarations["--ring"] == "#4f46e5"
    assert any("border" in message for message in compiled.diagnostics)


def test_aliases_follow_native_declarations():
    names = [d.name for d in compile_tokens(sample_tokens(), "acme").declarations]
    first_alias = names.index("--background")
    sections = {"colors", "typography", "spacing", "borders"}
    assert all(name.split("-")[2] in sections for name in names[:first_alias])
    assert all(name.split("-")[2] not in sections for name in names[first_alias:])
    assert names[first_alias:first_alias + 3] == ["--background", "--foreground", "--card"]


def test_alias_resolution_order():
    tree = {"colors": {"text": "#222222", "foreground": {"DEFAULT": "#333333"}}}
    assert resolve_alias(tree, "foreground") == "#333333"
    assert resolve_alias({"colors": {"text": "#222222"}}, "foreground") == "#222222"


def test_missing_alias_source():
    with pytest.raises(MissingAliasSource) as excinfo:
        resolve_alias({}, "primary")
    assert excinfo.value.default == "#4f46e5"
    assert excinfo.value.alias == "primary"

    resolved, diagnostics = resolve_aliases({})
    assert resolved == ALIAS_DEFAULTS
    assert len(diagnostics) == len(ALIAS_NAMES)


def test_compile_is_idempotent():
    tokens = build_design_tokens()
    first = compile_tokens(tokens, "acme")
    second = compile_tokens(tokens, "acme")
    assert first.declarations == second.declarations
    assert first.fingerprint == second.fingerprint
    assert first.to_css() == second.to_css()


def test_different_tokens_have_different_fingerprints():
    a = compile_tokens(DesignTokens(colors={"primary": "#111111"}), "acme")
    b = compile_tokens(DesignTokens(colors={"primary": "#222222"}), "acme")
    assert a.fingerprint != b.fingerprint


def test_builder_output_compiles_without_diagnostics():
    compiled = compile_tokens(build_design_tokens(), "acme")
    assert compiled.diagnostics == ()
    assert compiled.as_dict()["--colors-primary-500"]
    assert compiled.as_dict()["--grid-breakpoints-md"] == "768px"


def test_invalid_leaf_is_skipped_and_reported():
    tokens = DesignTokens(colors={"primary": "#4f46e5", "brand": ["#ffffff", "#000000"]})
    compiled = compile_tokens(tokens, "acme")
    declarations = compiled.as_dict()
    assert declarations["--colors-primary"] == "#4f46e5"
    assert not any(name.startswith("--colors-brand") for name in declarations)
    assert any("colors.brand" in message for message in compiled.diagnostics)


def test_invalid_leaf_gets_default_value():
    tokens = DesignTokens(spacing={"md": True, "lg": None})
    declarations = compile_tokens(tokens, "acme").as_dict()
    defaults = default_token_tree()
    assert declarations["--spacing-md"] == defaults["spacing"]["md"]
    assert declarations["--spacing-lg"] == defaults["spacing"]["lg"]


def test_values_cannot_escape_the_declaration_block():
    tokens = DesignTokens(
        colors={"primary": "#4f46e5"},
        shadows={"sm": "0 0 red; } body { color: red"},
    )
    compiled = compile_tokens(tokens, "acme")
    css = compiled.to_css()
    assert css.count("{") == 1
    assert css.count("}") == 1
    assert compiled.as_dict()["--shadows-sm"] == default_token_tree()["shadows"]["sm"]


def test_unclosed_comment_cannot_swallow_other_tenants():
    registry = StyleRegistry()
    hostile = compile_tokens(DesignTokens(colors={"primary": "red /*", "accent": "#f59e0b"}), "acme")
    registry.apply(hostile)
    registry.apply(compile_tokens(DesignTokens(colors={"primary": "#abcdef"}), "beta"))

    css = registry.render()
    assert "/*" not in css
    assert ".theme-beta {" in css
    assert "--colors-primary: #abcdef;" in css
    assert any("colors.primary" in message for message in hostile.diagnostics)


@pytest.mark.parametrize(
    "value",
    ["red /*", "a */ b", "url(a)\\", "x\ny", "x\rz", "'open", 'say "hi', float("nan"), float("inf")],
)
def test_validate_leaf_rejects_escaping_values(value):
    with pytest.raises(InvalidTokenShape):
        validate_leaf(("colors", "primary"), value)


def test_validate_leaf_accepts_quoted_font_stacks():
    stack = "'Segoe UI', \"Helvetica Neue\", sans-serif"
    assert validate_leaf(("typography", "fontFamily", "body"), stack) == stack


def test_validate_leaf():
    assert validate_leaf(("a",), 1.5) == "1.5"
    assert validate_leaf(("a",), 12) == "12"
    assert validate_leaf(("a",), 2.0) == "2"
    for bad in (True, None, [1], ("x",), object(), ""):
        with pytest.raises(InvalidTokenShape):
            validate_leaf(("a", "b"), bad)


def test_invalid_scaled_base_uses_default():
    tokens = DesignTokens(colors={"primary": {"base": "not-a-color"}, "accent": "#f59e0b"})
    compiled = compile_tokens(tokens, "acme")
    default_primary = default_token_tree()["colors"]["primary"]["DEFAULT"]
    assert compiled.as_dict()["--colors-primary"] == default_primary
    assert any("colors.primary" in message for message in compiled.diagnostics)


def test_duplicate_names_keep_first_position_and_last_value():
    tokens = DesignTokens(typography={"font-size": {"base": "1rem"}, "other": "x", "fontSize": {"base": "2rem"}})
    compiled = compile_tokens(tokens, "acme")
    names = [d.name for d in compiled.declarations]
    assert names.count("--typography-font-size-base") == 1
    assert names.index("--typography-font-size-base") < names.index("--typography-other")
    assert compiled.as_dict()["--typography-font-size-base"] == "2rem"


def test_extra_sections_are_compiled():
    tokens = DesignTokens(colors={"primary": "#4f46e5"}, animation={"duration": {"fast": "150ms"}})
    assert compile_tokens(tokens, "acme").as_dict()["--animation-duration-fast"] == "150ms"


def test_appearance_is_not_a_token_and_dark_sets_color_scheme():
    light = compile_tokens(DesignTokens(colors={"primary": "#4f46e5"}), "acme")
    assert not any("appearance" in d.name for d in light.declarations)
    assert light.color_scheme == "light"

    dark = compile_tokens(DesignTokens(colors={"primary": "#4f46e5"}, appearance="dark"), "acme")
    assert dark.declarations[-1].name == "color-scheme"
    assert dark.declarations[-1].value == "dark"
    assert dark.color_scheme == "dark"


def test_empty_tokens_compile_to_nothing():
    assert compile_tokens(None, "acme").is_empty()
    assert compile_tokens(DesignTokens(), "acme").is_empty()


def test_scope_is_sanitized():
    compiled = compile_tokens(sample_tokens(), "Acme Inc! } body {")
    assert re.match(r"^[a-z0-9-]+$", compiled.scope_id)
    assert compiled.selector.startswith(".theme-acme-inc-")
    assert compiled.to_css().startswith(compiled.selector + " {")


def test_sanitize_scope_id():
    assert sanitize_scope_id("acme") == "acme"
    assert sanitize_scope_id("beta-salon-2") == "beta-salon-2"
    hostile = sanitize_scope_id("</style><script>")
    assert re.match(r"^[a-z0-9-]+$", hostile)
    # idempotent
    assert sanitize_scope_id(hostile) == hostile
    # names that differ only in punctuation do not collide
    assert sanitize_scope_id("Acme Inc") != sanitize_scope_id("acme-inc")
    assert sanitize_scope_id("Acme Inc") != sanitize_scope_id("Acme  Inc")
    assert sanitize_scope_id("").startswith("global-")


def test_sanitized_ids_never_collide_with_clean_ids():
    sanitized = sanitize_scope_id("Acme Inc")
    assert sanitized.startswith("acme-inc--")
    # a clean id shaped like the old sanitized form keeps its own scope
    lookalike = "acme-inc-" + sanitized.rsplit("--", 1)[1]
    assert sanitize_scope_id(lookalike) == lookalike
    assert sanitize_scope_id(lookalike) != sanitized
    assert sanitize_scope_id(sanitized) == sanitized
    assert "--" not in sanitize_scope_id("acme-inc")


def test_render_css():
    assert render_css(compile_tokens(DesignTokens(), "acme")) == ""
    compiled = compile_tokens(sample_tokens(), "acme")
    assert render_css(compiled) == compiled.to_css()
    assert render_css(compiled).startswith(".theme-acme {")
