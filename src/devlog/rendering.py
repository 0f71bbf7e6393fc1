"""
Per-attribute rendering.

Everything here appends colored text fragments to a list that the handler
joins into one line. Dispatch on the value kind lives in ``append_attr``
only; adding a kind means adding one branch there.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from . import colors as c
from .colors import colorize
from .levels import INFO, WARN, level_name
from .record import Source
from .theme import FALLBACK_LEVEL_COLOR, Theme
from .values import Attr, Kind

_GROUP_START = (c.FG_BLACK, c.BG_GREEN, " START ")
_GROUP_END = (c.FG_BLACK, c.BG_RED, " END ")


def format_time(moment: datetime) -> str:
    """``[HH:MM:SS.mmm]`` in 24-hour clock."""
    return f"[{moment:%H:%M:%S}.{moment.microsecond // 1000:03d}]"


def append_attr(buf: List[str], attr: Attr, theme: Theme) -> List[str]:
    """Render one attribute, recursing into groups."""
    attr = attr.resolved()
    if attr.is_empty():
        return buf

    kind = attr.value.kind
    if kind is Kind.STRING:
        buf.append(f"{theme.string.render(attr.key)}={attr.value}")
    elif kind is Kind.TIME:
        buf.append(theme.time.render(format_time(attr.value.as_time())))
    elif kind is Kind.BOOL:
        buf.append(f"{theme.bool.render(attr.key)}={attr.value}")
    elif kind is Kind.INT64:
        buf.append(f"{theme.int.render(attr.key)}={attr.value}")
    elif kind is Kind.GROUP:
        children = attr.value.as_group()
        if not children:
            return buf
        if attr.key:
            label = theme.group.render(f" {attr.key} ")
            buf.append(f"{label}{colorize(*_GROUP_START)} ")
        for child in children:
            append_attr(buf, child, theme)
        if attr.key:
            label = theme.group.render(f" {attr.key} ")
            buf.append(f"{label}{colorize(*_GROUP_END)}")
    else:
        buf.append(f"{theme.default_attr.render(attr.key)}={attr.value}")

    buf.append(" ")
    return buf


def level_badge(level: int, theme: Theme) -> str:
    text = f" {level_name(level)} "
    color = theme.level_color(level)
    if color is None:
        return FALLBACK_LEVEL_COLOR.render(text)
    if level in (INFO, WARN):
        # pad four-letter names to the width of DEBUG/ERROR
        text += " "
    return color.render(text)


def source_label(source: Source, theme: Theme) -> str:
    return theme.source_file.render(f" {source.file}:{source.line} ")
