"""
Logger configuration for programs using devlog.

This module routes structlog events and, optionally, standard library
logging through a single ``DevLogHandler`` so both share one colored
console stream.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import IO, Optional, Union

import structlog
from structlog.typing import FilteringBoundLogger, Processor

from .bridge import DevLogLoggingHandler, DevLogProcessor
from .handler import DevLogHandler, HandlerOptions
from .levels import LevelLike, coerce_level, level_name, resolve_minimum, to_stdlib_level
from .settings import DevLogSettings, get_settings
from .theme import Theme

_PRE_CHAIN: tuple[Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
)

_CALLSITE = structlog.processors.CallsiteParameterAdder(
    [
        structlog.processors.CallsiteParameter.PATHNAME,
        structlog.processors.CallsiteParameter.LINENO,
        structlog.processors.CallsiteParameter.FUNC_NAME,
    ]
)


def _stdlib_threshold(level: LevelLike) -> int:
    """
    Largest standard ``logging`` level not above ``level``.

    Dynamic levels may be lowered later, so they map to ``NOTSET`` and the
    handler does all of the filtering.
    """
    if not isinstance(level, int):
        return logging.NOTSET
    stdlib_level = to_stdlib_level(level)
    for threshold in (logging.CRITICAL, logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG):
        if stdlib_level >= threshold:
            return threshold
    return logging.NOTSET


def _configure_structlog(handler: DevLogHandler) -> None:
    """Point structlog at ``handler``."""
    processors: list[Processor] = list(_PRE_CHAIN)
    if handler.options.add_source:
        processors.append(_CALLSITE)
    processors.append(DevLogProcessor(handler))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_stdlib_threshold(handler.options.level)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def _build_options(
    settings: DevLogSettings,
    level: Optional[Union[LevelLike, str]],
    add_source: Optional[bool],
    prefix: Optional[str],
    theme: Optional[Theme],
) -> HandlerOptions:
    options = settings.to_options()
    overrides = {}
    if level is not None:
        overrides["level"] = coerce_level(level) if isinstance(level, (str, int)) else level
    if add_source is not None:
        overrides["add_source"] = add_source
    if prefix is not None:
        overrides["prefix"] = prefix
    if theme is not None:
        overrides["theme"] = theme
    return dataclasses.replace(options, **overrides)


def configure_logging(
    level: Optional[Union[LevelLike, str]] = None,
    *,
    out: Optional[IO] = None,
    add_source: Optional[bool] = None,
    prefix: Optional[str] = None,
    theme: Optional[Theme] = None,
    capture_stdlib: bool = True,
    settings: Optional[DevLogSettings] = None,
) -> DevLogHandler:
    """
    Configure global logging.

    Parameters
    ----------
    level:
        Minimum level as an integer, a name such as ``"debug"``, or a
        ``LevelVar``. Defaults to the configured settings.
    out:
        Destination stream. Defaults to the stream named in the settings.
    add_source:
        Annotate lines with ``file:line`` of the logging call.
    prefix:
        Literal text printed at the start of every line.
    theme:
        Replaces the configured theme entirely.
    capture_stdlib:
        When True, also route the root ``logging`` logger through devlog.
    settings:
        Explicit settings object; ``get_settings()`` is used otherwise.
    """
    settings = settings if settings is not None else get_settings()
    options = _build_options(settings, level, add_source, prefix, theme)
    handler = DevLogHandler(out if out is not None else settings.output_stream(), options)

    _configure_structlog(handler)

    if capture_stdlib:
        logging.captureWarnings(True)
        logging.basicConfig(
            level=_stdlib_threshold(options.level),
            handlers=[DevLogLoggingHandler(handler)],
            force=True,
        )

    get_logger(__name__).debug(
        "logging_configured",
        level=level_name(resolve_minimum(options.level)),
        add_source=options.add_source,
        capture_stdlib=capture_stdlib,
    )
    return handler


def get_logger(name: Optional[str] = None) -> FilteringBoundLogger:
    """Retrieve a structlog logger with the provided name."""
    return structlog.get_logger(name)
