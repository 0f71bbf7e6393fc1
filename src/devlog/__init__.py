"""
Colorized single-line console handler for structured logging.

``DevLogHandler`` renders records (level, message, timestamp, attributes and
nested groups) into ANSI-colored terminal lines. ``configure_logging`` wires
it into structlog and the standard library ``logging`` module.
"""

from .colors import Color
from .handler import DevLogHandler, HandlerOptions
from .levels import DEBUG, ERROR, INFO, WARN, LevelVar, level_name, parse_level
from .logger import configure_logging, get_logger
from .record import Record, Source
from .theme import Theme, default_theme
from .values import Attr, Kind, LazyValue, Value
from .version import __version__

__all__ = [
    "Attr",
    "Color",
    "DEBUG",
    "DevLogHandler",
    "ERROR",
    "HandlerOptions",
    "INFO",
    "Kind",
    "LazyValue",
    "LevelVar",
    "Record",
    "Source",
    "Theme",
    "Value",
    "WARN",
    "__version__",
    "configure_logging",
    "default_theme",
    "get_logger",
    "level_name",
    "parse_level",
]
