import os

os.environ.setdefault("ENABLE_HOT_RELOAD", "False")
os.environ.setdefault("ENABLE_LRU_CACHE", "False")

import pytest

from theme_engine.constants import DEFAULT_BREAKPOINTS, SPACING_STEPS
from theme_engine.errors import InvalidBreakpoints
from theme_engine.models.schemas import GridSystem
from theme_engine.service.spacing import (
    density_grid,
    density_spacing,
    generate_grid_system,
    generate_spacing_scale,
    spacing_tokens,
)
from theme_engine.utils.units import convert_length, format_length, parse_length


@pytest.mark.parametrize("ratio", [1.1, 1.25, 1.5, 1.618, 2.0])
def test_named_steps_strictly_increase(ratio):
    scale = generate_spacing_scale(16, "px", ratio)
    values = list(scale.values.values())
    assert tuple(scale.values) == SPACING_STEPS
    assert all(a < b for a, b in zip(values, values[1:]))


def test_md_step_equals_base():
    scale = generate_spacing_scale(16, "px", 1.5)
    assert scale.values["md"] == 16
    assert scale.values["lg"] == pytest.approx(24)
    assert scale.values["sm"] == pytest.approx(16 / 1.5)


def test_micro_scale():
    micro = generate_spacing_scale(16, "px", 1.5).micro
    assert micro["0"] == 0
    assert micro["1"] == 4
    assert micro["4"] == 16
    assert micro["0.5"] == 2
    values = list(micro.values())
    assert all(a < b for a, b in zip(values, values[1:]))


def test_unit_round_trip_px_rem_px():
    scale = generate_spacing_scale(base=16, unit="px", ratio=1.5)
    back = scale.convert("rem").convert("px")
    assert back.unit == "px"
    for step, value in scale.values.items():
        assert back.values[step] == pytest.approx(value, abs=0.01)
    for step, value in scale.micro.items():
        assert back.micro[step] == pytest.approx(value, abs=0.01)
    assert back.base == pytest.approx(scale.base, abs=0.01)


def test_convert_to_rem_uses_root_size():
    rem = generate_spacing_scale(16, "px", 1.5).convert("rem")
    assert rem.unit == "rem"
    assert rem.values["md"] == pytest.approx(1.0)
    assert rem.css_values()["lg"] == "1.5rem"


def test_em_converts_like_rem():
    assert convert_length(24, "px", "em") == convert_length(24, "px", "rem") == 1.5
    assert convert_length(1.5, "em", "rem") == 1.5


def test_convert_to_same_unit_returns_same_scale():
    scale = generate_spacing_scale(16, "px", 1.5)
    assert scale.convert("px") is scale


def test_invalid_spacing_inputs_fall_back(caplog):
    scale = generate_spacing_scale(0, "pt", 0.5)
    assert scale.unit == "px"
    assert scale.base == 16.0
    assert scale.ratio == 1.5
    assert "Unknown spacing unit" in caplog.text


@pytest.mark.parametrize("ratio", [1e80, 1e160, float("nan"), float("inf")])
def test_out_of_range_spacing_ratio_falls_back(ratio, caplog):
    scale = generate_spacing_scale(16, "px", ratio)
    assert scale.ratio == 1.5
    assert scale.values["md"] == 16
    values = list(scale.values.values())
    assert all(a < b for a, b in zip(values, values[1:]))
    assert "Invalid spacing ratio" in caplog.text


def test_overflowing_spacing_base_falls_back(caplog):
    scale = generate_spacing_scale(1e307, "px", 1.5)
    assert scale.base == 16.0
    assert all(value < float("inf") for value in scale.micro.values())
    assert "out of range" in caplog.text


def test_spacing_tokens_branch():
    tokens = spacing_tokens(density_spacing("balanced"))
    assert tokens["md"] == "1rem"
    assert tokens["scale"]["4"] == "1rem"
    assert tokens["scale"]["0"] == "0"


def test_length_helpers():
    assert format_length(1.0, "rem") == "1rem"
    assert format_length(0.125, "rem") == "0.125rem"
    assert format_length(0, "px") == "0"
    assert parse_length("12px") == 12
    assert parse_length("0.5rem") == 8
    assert parse_length(10) == 10
    assert parse_length("calc(1px + 2px)") is None


def test_default_grid():
    grid = generate_grid_system()
    assert grid.columns == 12
    assert grid.breakpoints == DEFAULT_BREAKPOINTS
    assert grid.to_tree()["breakpoints"]["md"] == "768px"
    assert grid.to_tree()["gutter"] == "1.5rem"


def test_breakpoints_are_returned_in_canonical_order():
    grid = generate_grid_system(breakpoints={"lg": 1024, "xs": 0, "md": 768})
    assert list(grid.breakpoints) == ["xs", "md", "lg"]


def test_out_of_order_breakpoints_are_rejected():
    with pytest.raises(InvalidBreakpoints):
        generate_grid_system(breakpoints={"sm": 800, "md": 700})


def test_equal_breakpoints_are_rejected():
    with pytest.raises(InvalidBreakpoints):
        generate_grid_system(breakpoints={"sm": 640, "md": 640})


def test_unknown_breakpoint_name_is_rejected():
    with pytest.raises(InvalidBreakpoints):
        generate_grid_system(breakpoints={"tablet": 768})


def test_grid_model_rejects_bad_breakpoints():
    # raised inside pydantic validation, surfaced as a ValueError subclass
    with pytest.raises(ValueError):
        GridSystem(breakpoints={"md": 768, "sm": 900})


def test_editing_breakpoints():
    grid = generate_grid_system()
    wider = grid.with_breakpoint("2xl", 1920)
    assert wider.breakpoints["2xl"] == 1920
    assert "2xl" not in grid.breakpoints

    with pytest.raises(InvalidBreakpoints):
        grid.with_breakpoint("md", 500)


def test_grid_unit_conversion():
    grid = generate_grid_system(gutter=1.5, margins=2, unit="rem")
    px = grid.convert("px")
    assert px.gutter == 24
    assert px.margins == 32
    assert px.convert("rem").gutter == pytest.approx(1.5)


def test_density_grids():
    assert density_grid("compact").to_tree()["gutter"] == "1rem"
    assert density_grid("balanced").to_tree()["gutter"] == "1.5rem"
    assert density_grid("spacious").to_tree()["gutter"] == "2rem"
    assert density_grid("compact").breakpoints["lg"] == 992
