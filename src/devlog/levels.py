"""
Severity levels.

Levels are plain integers where larger means more severe. The four named
levels are spaced four apart so intermediate severities (``INFO+2``) can be
expressed without new constants.
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Protocol, Union, runtime_checkable

DEBUG = -4
INFO = 0
WARN = 4
ERROR = 8

_NAMES = (("DEBUG", DEBUG), ("INFO", INFO), ("WARN", WARN), ("ERROR", ERROR))
_ALIASES = {
    "DEBUG": DEBUG,
    "INFO": INFO,
    "WARN": WARN,
    "WARNING": WARN,
    "ERROR": ERROR,
    "EXCEPTION": ERROR,
    "CRITICAL": ERROR + 4,
}
_LEVEL_RE = re.compile(r"^\s*([A-Za-z]+)\s*([+-]\d+)?\s*$")


@runtime_checkable
class Leveler(Protocol):
    """Anything that can report a minimum level, such as ``LevelVar``."""

    def level(self) -> int:
        ...


LevelLike = Union[int, Leveler]


def level_name(level: int) -> str:
    """Return ``DEBUG``/``INFO``/``WARN``/``ERROR`` with a signed offset if needed."""
    if level < INFO:
        base, value = "DEBUG", DEBUG
    elif level < WARN:
        base, value = "INFO", INFO
    elif level < ERROR:
        base, value = "WARN", WARN
    else:
        base, value = "ERROR", ERROR
    offset = level - value
    if offset == 0:
        return base
    return f"{base}{offset:+d}"


def parse_level(text: str) -> int:
    """
    Parse a level name such as ``info``, ``WARNING`` or ``Error-2``.

    Raises ``ValueError`` for anything that is not a known name with an
    optional signed offset.
    """
    match = _LEVEL_RE.match(text)
    if match is None:
        raise ValueError(f"invalid log level: {text!r}")
    name, offset = match.groups()
    try:
        base = _ALIASES[name.upper()]
    except KeyError:
        raise ValueError(f"unknown log level name: {name!r}") from None
    return base + (int(offset) if offset else 0)


def coerce_level(value: Union[str, int]) -> int:
    """Accept either an integer level or its textual name."""
    if isinstance(value, bool):
        raise ValueError(f"invalid log level: {value!r}")
    if isinstance(value, int):
        return value
    return parse_level(value)


def from_stdlib_level(levelno: int) -> int:
    """
    Map a ``logging`` level number onto this scale.

    ``logging.DEBUG`` .. ``logging.ERROR`` land on the four named levels and
    ``logging.CRITICAL`` becomes ``ERROR+4``.
    """
    return (levelno - logging.INFO) * 2 // 5


def to_stdlib_level(level: int) -> int:
    """Inverse of ``from_stdlib_level`` for the named levels."""
    return logging.INFO + level * 5 // 2


def resolve_minimum(level: LevelLike) -> int:
    if isinstance(level, Leveler):
        return level.level()
    return level


class LevelVar:
    """A minimum level that can be changed while handlers are in use."""

    def __init__(self, level: Union[str, int] = INFO) -> None:
        self._lock = threading.Lock()
        self._level = coerce_level(level)

    def level(self) -> int:
        with self._lock:
            return self._level

    def set(self, level: Union[str, int]) -> None:
        value = coerce_level(level)
        with self._lock:
            self._level = value

    def __repr__(self) -> str:
        return f"LevelVar({level_name(self.level())})"
