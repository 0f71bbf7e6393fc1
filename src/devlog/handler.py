"""
Colorized development handler.

``DevLogHandler`` turns ``Record``s into one colored line each and writes
them to a byte or text stream. Context established through ``with_group``
and ``with_attrs`` is kept as an immutable tuple of frames, so derived
handlers can be shared between threads without locking; only the final
write to the sink is serialized.
"""

from __future__ import annotations

import copy
import io
import threading
from dataclasses import dataclass
from typing import IO, Iterable, List, Optional, Tuple, Union

from .levels import INFO, LevelLike, coerce_level, resolve_minimum
from .record import Record
from .rendering import append_attr, level_badge, source_label
from .theme import Theme, default_theme
from .values import Attr, string, timestamp

MESSAGE_KEY = "msg"
TIME_KEY = "time"
GROUP_INDENT = 4

Sink = Union[IO[bytes], IO[str]]


@dataclass(frozen=True)
class HandlerOptions:
    """
    Construction-time settings for ``DevLogHandler``.

    ``level`` may be an integer level, a level name, or a ``LevelVar`` whose
    value is read on every ``enabled`` call.
    """

    level: Union[LevelLike, str] = INFO
    add_source: bool = False
    prefix: str = ""
    theme: Optional[Theme] = None

    def __post_init__(self) -> None:
        if isinstance(self.level, (str, int)):
            object.__setattr__(self, "level", coerce_level(self.level))


@dataclass(frozen=True)
class GroupOrAttrs:
    """A named group when ``group`` is set, otherwise a batch of attributes."""

    group: str = ""
    attrs: Tuple[Attr, ...] = ()


class DevLogHandler:
    """Render records as colored single lines."""

    def __init__(
        self,
        out: Sink,
        options: Optional[HandlerOptions] = None,
        *,
        text: Optional[bool] = None,
    ) -> None:
        self._opts = options if options is not None else HandlerOptions()
        self._theme = self._opts.theme if self._opts.theme is not None else default_theme()
        self._out = out
        self._text = _is_text_sink(out) if text is None else text
        self._frames: Tuple[GroupOrAttrs, ...] = ()
        self._lock = threading.Lock()

    @property
    def options(self) -> HandlerOptions:
        return self._opts

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def frames(self) -> Tuple[GroupOrAttrs, ...]:
        return self._frames

    def enabled(self, level: int) -> bool:
        return level >= resolve_minimum(self._opts.level)

    def handle(self, record: Record) -> None:
        """Render ``record`` and write it; sink errors propagate unchanged."""
        data = self.render(record)
        with self._lock:
            self._write(data)

    def render(self, record: Record) -> bytes:
        buf: List[str] = []
        theme = self._theme

        if self._opts.prefix:
            buf.append(theme.prefix.render(self._opts.prefix))
            buf.append(" ")

        if record.time is not None:
            append_attr(buf, timestamp(TIME_KEY, record.time), theme)

        buf.append(level_badge(record.level, theme))
        buf.append(" ")

        if self._opts.add_source and record.source is not None:
            buf.append(source_label(record.source, theme))
            buf.append(" ")

        append_attr(buf, string(MESSAGE_KEY, record.message), theme)

        frames = self._frames
        if record.num_attrs == 0:
            # groups with nothing after them would print as empty headers
            end = len(frames)
            while end > 0 and frames[end - 1].group:
                end -= 1
            frames = frames[:end]
        for frame in frames:
            if frame.group:
                buf.append(f"{'':>{GROUP_INDENT}}{frame.group}:\n")
            else:
                for attr in frame.attrs:
                    append_attr(buf, attr, theme)

        for attr in record.attrs():
            append_attr(buf, attr, theme)

        buf.append("\n")
        # lone surrogates (undecodable filenames) come out as \udcXX escapes
        return "".join(buf).encode("utf-8", "backslashreplace")

    def with_group(self, name: str) -> "DevLogHandler":
        if not name:
            return self
        return self._with_frame(GroupOrAttrs(group=name))

    def with_attrs(self, attrs: Iterable[Attr]) -> "DevLogHandler":
        attrs = tuple(attrs)
        if not attrs:
            return self
        return self._with_frame(GroupOrAttrs(attrs=attrs))

    def _with_frame(self, frame: GroupOrAttrs) -> "DevLogHandler":
        derived = copy.copy(self)
        derived._frames = self._frames + (frame,)
        return derived

    def _write(self, data: bytes) -> None:
        if self._text:
            self._out.write(data.decode("utf-8"))
        else:
            self._out.write(data)
        flush = getattr(self._out, "flush", None)
        if flush is not None:
            flush()


def _is_text_sink(out: Sink) -> bool:
    """Guess whether ``out.write`` expects ``str`` rather than ``bytes``."""
    if isinstance(out, io.TextIOBase):
        return True
    if isinstance(out, (io.RawIOBase, io.BufferedIOBase)):
        return False
    mode = getattr(out, "mode", None)
    if isinstance(mode, str):
        return "b" not in mode
    return getattr(out, "encoding", None) is not None
