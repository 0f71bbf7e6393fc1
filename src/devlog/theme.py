"""
Color themes mapping each rendering category to a ``Color``.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from . import colors as c
from .colors import Color
from .levels import DEBUG, ERROR, INFO, WARN

# Badge color for levels that are not one of the four named constants.
FALLBACK_LEVEL_COLOR = Color(fg=c.FG_BLACK, bg=c.BG_WHITE)


class Theme(BaseModel):
    """Complete mapping from semantic category to display color."""

    model_config = ConfigDict(frozen=True)

    string: Color
    time: Color
    bool: Color
    int: Color
    group: Color
    default_attr: Color
    debug: Color
    info: Color
    warn: Color
    error: Color
    source_file: Color
    prefix: Color

    def level_color(self, level: int) -> Optional[Color]:
        """Badge color for one of the named levels, ``None`` for any other."""
        if level == DEBUG:
            return self.debug
        if level == INFO:
            return self.info
        if level == WARN:
            return self.warn
        if level == ERROR:
            return self.error
        return None


def default_theme() -> Theme:
    """Build a fresh copy of the built-in palette."""
    return Theme(
        string=Color(fg=c.FG_LIGHTBLUE, bg=c.BG_BLACK),
        time=Color(fg=c.FG_BLACK, bg=c.BG_LIGHTGREEN),
        bool=Color(fg=c.FG_LIGHTRED, bg=c.BG_BLACK),
        int=Color(fg=c.FG_LIGHTCYAN, bg=c.BG_BLACK),
        group=Color(fg=c.FG_WHITE, bg=c.BG_BLUE),
        default_attr=Color(fg=c.FG_LIGHTGREEN, bg=c.BG_BLACK),
        debug=Color(fg=c.FG_BLACK, bg=c.BG_DARKGRAY),
        info=Color(fg=c.FG_BLACK, bg=c.BG_CYAN),
        warn=Color(fg=c.FG_BLACK, bg=c.BG_LIGHTYELLOW),
        error=Color(fg=c.FG_BLACK, bg=c.BG_LIGHTRED),
        source_file=Color(fg=c.FG_BLACK, bg=c.BG_LIGHTMAGENTA),
        prefix=Color(fg=c.FG_CYAN, bg=c.BG_BLACK),
    )


def theme_with_overrides(overrides: Mapping[str, Mapping[str, Any]]) -> Theme:
    """
    Merge partial color overrides on top of the default theme.

    ``overrides`` maps category names to ``{"fg": ..., "bg": ...}`` dicts;
    either code may be omitted to keep the default one.
    """
    base = default_theme()
    if not overrides:
        return base
    merged: Dict[str, Any] = base.model_dump()
    for category, codes in overrides.items():
        if category not in Theme.model_fields:
            raise ValueError(f"unknown theme category: {category!r}")
        merged[category] = {**merged[category], **dict(codes)}
    return Theme.model_validate(merged)
