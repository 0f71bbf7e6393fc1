"""
Adapters feeding structlog events and stdlib log records into a handler.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, MutableMapping, Optional

import structlog

from .handler import DevLogHandler
from .levels import INFO, from_stdlib_level, parse_level
from .record import Record, Source
from .values import Attr, attrs_from_mapping, string

# Keys structlog's stdlib integration uses for its own bookkeeping.
_STRUCTLOG_INTERNAL_KEYS = ("_record", "_from_structlog")

_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def _coerce_time(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return datetime.fromtimestamp(raw).astimezone()
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now().astimezone()


def _event_level(method_name: str, event_dict: MutableMapping[str, Any]) -> int:
    raw = event_dict.pop("level", None) or method_name
    if isinstance(raw, int) and not isinstance(raw, bool):
        return from_stdlib_level(raw)
    try:
        return parse_level(str(raw))
    except ValueError:
        return INFO


def _event_source(event_dict: MutableMapping[str, Any]) -> Optional[Source]:
    pathname = event_dict.pop("pathname", None)
    lineno = event_dict.pop("lineno", None)
    func_name = event_dict.pop("func_name", None)
    if pathname is None or lineno is None:
        return None
    return Source(function=func_name or "", file=str(pathname), line=int(lineno))


class DevLogProcessor:
    """
    Final structlog processor that renders events through a ``DevLogHandler``.

    The event is written by the handler and then dropped, so the logger
    factory configured alongside never prints anything itself.
    """

    def __init__(self, handler: DevLogHandler) -> None:
        self.handler = handler

    def to_record(
        self, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> Record:
        data = dict(event_dict)
        for key in _STRUCTLOG_INTERNAL_KEYS:
            data.pop(key, None)
        level = _event_level(method_name, data)
        record = Record(
            time=_coerce_time(data.pop("timestamp", None)),
            level=level,
            message=str(data.pop("event", "")),
            source=_event_source(data),
        )
        record.add_attrs(*attrs_from_mapping(data))
        return record

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> Any:
        record = self.to_record(method_name, event_dict)
        if self.handler.enabled(record.level):
            self.handler.handle(record)
        raise structlog.DropEvent


class DevLogLoggingHandler(logging.Handler):
    """stdlib ``logging`` handler writing through a ``DevLogHandler``."""

    def __init__(self, handler: DevLogHandler, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.devlog = handler

    def to_record(self, record: logging.LogRecord) -> Record:
        attrs: List[Attr] = []
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS
        }
        attrs.extend(attrs_from_mapping(extras))
        if record.exc_info:
            attrs.append(string("exception", logging.Formatter().formatException(record.exc_info)))
        if record.stack_info:
            attrs.append(string("stack", record.stack_info))

        converted = Record(
            time=datetime.fromtimestamp(record.created).astimezone(),
            level=from_stdlib_level(record.levelno),
            message=record.getMessage(),
            source=Source(function=record.funcName, file=record.pathname, line=record.lineno),
        )
        converted.add_attrs(*attrs)
        return converted

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if not self.devlog.enabled(from_stdlib_level(record.levelno)):
                return
            self.devlog.handle(self.to_record(record))
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)
