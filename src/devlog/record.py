"""
Log records handed to ``DevLogHandler.handle``.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime
from types import FrameType
from typing import Any, Iterator, List, Optional

from .levels import INFO
from .values import Attr, args_to_attrs


@dataclass(frozen=True)
class Source:
    """Location of the call that produced a record."""

    function: str
    file: str
    line: int

    @classmethod
    def from_frame(cls, frame: FrameType) -> "Source":
        code = frame.f_code
        return cls(function=code.co_name, file=code.co_filename, line=frame.f_lineno)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


def caller_source(skip: int = 0) -> Optional[Source]:
    """
    Return the location of the caller's caller, skipping ``skip`` more frames.

    Only that single frame is inspected; the rest of the stack is never walked.
    """
    try:
        frame = sys._getframe(skip + 2)
    except ValueError:
        return None
    return Source.from_frame(frame)


@dataclass
class Record:
    """
    One log event.

    ``time`` is ``None`` for records that carry no timestamp. Attributes are
    stored in insertion order; empty groups are never stored.
    """

    time: Optional[datetime]
    level: int = INFO
    message: str = ""
    source: Optional[Source] = None
    _attrs: List[Attr] = field(default_factory=list, repr=False)

    @classmethod
    def now(
        cls,
        level: int,
        message: str,
        *args: Any,
        with_source: bool = False,
    ) -> "Record":
        """Build a record stamped with the current local time."""
        record = cls(
            time=datetime.now().astimezone(),
            level=level,
            message=message,
            source=caller_source() if with_source else None,
        )
        record.add(*args)
        return record

    @property
    def num_attrs(self) -> int:
        return len(self._attrs)

    def attrs(self) -> Iterator[Attr]:
        return iter(self._attrs)

    def add_attrs(self, *attrs: Attr) -> None:
        self._attrs.extend(a for a in attrs if not a.value.is_empty_group())

    def add(self, *args: Any) -> None:
        """Add ``Attr``s and/or alternating key/value arguments."""
        self.add_attrs(*args_to_attrs(args))

    def clone(self) -> "Record":
        return Record(
            time=self.time,
            level=self.level,
            message=self.message,
            source=self.source,
            _attrs=list(self._attrs),
        )
