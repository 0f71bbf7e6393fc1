"""
ANSI SGR color primitives for terminal output.

Colors are a foreground/background code pair. Codes outside the legal
ranges are coerced to the terminal defaults instead of being rejected, so a
bad theme never breaks a log line.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

RESET = "\033[0m"

FG_BLACK = 30
FG_RED = 31
FG_GREEN = 32
FG_YELLOW = 33
FG_BLUE = 34
FG_MAGENTA = 35
FG_CYAN = 36
FG_LIGHTGRAY = 37
FG_DEFAULT = 39
FG_DARKGRAY = 90
FG_LIGHTRED = 91
FG_LIGHTGREEN = 92
FG_LIGHTYELLOW = 93
FG_LIGHTBLUE = 94
FG_LIGHTMAGENTA = 95
FG_LIGHTCYAN = 96
FG_WHITE = 97

BG_BLACK = 40
BG_RED = 41
BG_GREEN = 42
BG_YELLOW = 43
BG_BLUE = 44
BG_MAGENTA = 45
BG_CYAN = 46
BG_LIGHTGRAY = 47
BG_DEFAULT = 49
BG_DARKGRAY = 100
BG_LIGHTRED = 101
BG_LIGHTGREEN = 102
BG_LIGHTYELLOW = 103
BG_LIGHTBLUE = 104
BG_LIGHTMAGENTA = 105
BG_LIGHTCYAN = 106
BG_WHITE = 107


def clamp_foreground(code: int) -> int:
    """Return ``code`` if it is a valid foreground code, else the default."""
    if 30 <= code <= 37 or 90 <= code <= 97:
        return code
    return FG_DEFAULT


def clamp_background(code: int) -> int:
    """Return ``code`` if it is a valid background code, else the default."""
    if 40 <= code <= 47 or 100 <= code <= 107:
        return code
    return BG_DEFAULT


def colorize(fg: int, bg: int, text: str) -> str:
    """Wrap ``text`` in a ``fg;bg`` escape sequence followed by a reset."""
    return f"\033[{clamp_foreground(fg)};{clamp_background(bg)}m{text}{RESET}"


class Color(BaseModel):
    """Foreground/background pair; invalid codes are clamped on construction."""

    model_config = ConfigDict(frozen=True)

    fg: int = FG_DEFAULT
    bg: int = BG_DEFAULT

    @field_validator("fg")
    @classmethod
    def _clamp_fg(cls, value: int) -> int:
        return clamp_foreground(value)

    @field_validator("bg")
    @classmethod
    def _clamp_bg(cls, value: int) -> int:
        return clamp_background(value)

    def render(self, text: str) -> str:
        return colorize(self.fg, self.bg, text)


def validate(color: Color) -> Color:
    """
    Return ``color`` with both codes inside the legal SGR ranges.

    ``Color`` already clamps when validated, but instances built through
    ``model_construct`` or ``model_copy(update=...)`` skip validators.
    """
    fg = clamp_foreground(color.fg)
    bg = clamp_background(color.bg)
    if fg == color.fg and bg == color.bg:
        return color
    return Color(fg=fg, bg=bg)
