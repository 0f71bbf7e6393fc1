import pytest

from devlog.colors import (
    RESET,
    Color,
    clamp_background,
    clamp_foreground,
    colorize,
    validate,
)


@pytest.mark.parametrize("code", [30, 37, 90, 97])
def test_valid_foreground_codes_pass_through(code: int) -> None:
    assert clamp_foreground(code) == code


@pytest.mark.parametrize("code", [0, 29, 38, 39, 50, 89, 98, -1])
def test_invalid_foreground_codes_become_default(code: int) -> None:
    assert clamp_foreground(code) == 39


@pytest.mark.parametrize("code", [29, 48, 99, 108, 200])
def test_invalid_background_codes_become_default(code: int) -> None:
    assert clamp_background(code) == 49


def test_color_clamps_on_construction() -> None:
    color = Color(fg=50, bg=200)
    assert (color.fg, color.bg) == (39, 49)
    assert color.render("x") == f"\033[39;49mx{RESET}"


def test_validate_fixes_colors_that_skipped_validation() -> None:
    raw = Color.model_construct(fg=50, bg=103)
    fixed = validate(raw)
    assert (fixed.fg, fixed.bg) == (39, 103)


def test_validate_returns_valid_color_unchanged() -> None:
    color = Color(fg=31, bg=42)
    assert validate(color) is color


def test_colorize_wraps_text_in_escape_and_reset() -> None:
    assert colorize(94, 40, "key") == "\033[94;40mkey\033[0m"
