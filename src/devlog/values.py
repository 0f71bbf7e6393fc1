"""
Typed attribute values.

A ``Value`` carries a ``Kind`` discriminator next to its payload so that
renderers can dispatch on the kind without re-inspecting Python types.
Values whose payload implements ``log_value()`` are deferred and must be
resolved before inspection.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, List, Mapping, Protocol, Sequence, runtime_checkable

BADKEY = "!BADKEY"
MAX_LOG_VALUE_CALLS = 100

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_UINT64_MAX = 2**64 - 1


class Kind(enum.Enum):
    ANY = "any"
    BOOL = "bool"
    DURATION = "duration"
    FLOAT64 = "float64"
    INT64 = "int64"
    STRING = "string"
    TIME = "time"
    UINT64 = "uint64"
    GROUP = "group"
    LOGVALUER = "logvaluer"


@runtime_checkable
class LogValuer(Protocol):
    """Objects that compute their own logged representation on demand."""

    def log_value(self) -> Any:
        ...


class LazyValue:
    """Defer an expensive computation until a handler actually renders it."""

    def __init__(self, func: Callable[[], Any]) -> None:
        self._func = func

    def log_value(self) -> Any:
        return self._func()


class LogValueError(Exception):
    """Stands in for a value whose ``log_value()`` could not be resolved."""


class Value:
    """A kind-tagged payload."""

    __slots__ = ("kind", "_payload")

    def __init__(self, payload: Any = None, kind: Kind = Kind.ANY) -> None:
        self.kind = kind
        self._payload = payload

    @classmethod
    def of(cls, obj: Any) -> "Value":
        """Infer the kind of an arbitrary Python object."""
        if isinstance(obj, Value):
            return obj
        if isinstance(obj, bool):
            return cls(obj, Kind.BOOL)
        if isinstance(obj, int):
            if _INT64_MIN <= obj <= _INT64_MAX:
                return cls(obj, Kind.INT64)
            if 0 <= obj <= _UINT64_MAX:
                return cls(obj, Kind.UINT64)
            return cls(obj, Kind.ANY)
        if isinstance(obj, float):
            return cls(obj, Kind.FLOAT64)
        if isinstance(obj, str):
            return cls(obj, Kind.STRING)
        if isinstance(obj, datetime):
            return cls(obj, Kind.TIME)
        if isinstance(obj, timedelta):
            return cls(obj, Kind.DURATION)
        if isinstance(obj, LogValuer):
            return cls(obj, Kind.LOGVALUER)
        if isinstance(obj, Mapping):
            return cls.group(*(Attr(str(k), cls.of(v)) for k, v in obj.items()))
        if isinstance(obj, (list, tuple)) and obj and all(isinstance(a, Attr) for a in obj):
            return cls.group(*obj)
        return cls(obj, Kind.ANY)

    @classmethod
    def group(cls, *attrs: "Attr") -> "Value":
        """Group value; empty child groups are dropped at construction."""
        return cls([a for a in attrs if not a.value.is_empty_group()], Kind.GROUP)

    def is_empty_group(self) -> bool:
        return self.kind is Kind.GROUP and not self._payload

    def resolve(self) -> "Value":
        """
        Follow ``log_value()`` until a concrete value is reached.

        A valuer that keeps returning valuers is cut off after
        ``MAX_LOG_VALUE_CALLS`` calls, and one that raises is replaced by
        the exception it raised.
        """
        value = self
        for _ in range(MAX_LOG_VALUE_CALLS):
            if value.kind is not Kind.LOGVALUER:
                return value
            origin = value._payload
            try:
                value = Value.of(origin.log_value())
            except Exception as exc:
                error = LogValueError(
                    f"log_value() of {type(origin).__name__} raised "
                    f"{type(exc).__name__}: {exc}"
                )
                return Value(error, Kind.ANY)
        error = LogValueError(
            f"log_value() called too many times on value of type "
            f"{type(self._payload).__name__}"
        )
        return Value(error, Kind.ANY)

    def any(self) -> Any:
        """Return the raw payload; groups yield their attribute list."""
        return self._payload

    def as_string(self) -> str:
        return str(self)

    def as_int(self) -> int:
        if self.kind not in (Kind.INT64, Kind.UINT64):
            raise TypeError(f"value has kind {self.kind.value}, not int64")
        return self._payload

    def as_bool(self) -> bool:
        if self.kind is not Kind.BOOL:
            raise TypeError(f"value has kind {self.kind.value}, not bool")
        return self._payload

    def as_time(self) -> datetime:
        if self.kind is not Kind.TIME:
            raise TypeError(f"value has kind {self.kind.value}, not time")
        return self._payload

    def as_group(self) -> List["Attr"]:
        if self.kind is not Kind.GROUP:
            raise TypeError(f"value has kind {self.kind.value}, not group")
        return self._payload

    def equal(self, other: "Value") -> bool:
        if self.kind is not other.kind:
            return False
        if self.kind is Kind.GROUP:
            mine, theirs = self._payload, other._payload
            return len(mine) == len(theirs) and all(a.equal(b) for a, b in zip(mine, theirs))
        return self._payload == other._payload

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.equal(other)

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        if self.kind is Kind.STRING:
            return self._payload
        if self.kind is Kind.BOOL:
            return "true" if self._payload else "false"
        if self.kind is Kind.TIME:
            return self._payload.isoformat()
        if self.kind is Kind.GROUP:
            return "[" + " ".join(f"{a.key}={a.value}" for a in self._payload) + "]"
        return str(self._payload)

    def __repr__(self) -> str:
        return f"Value({self._payload!r}, Kind.{self.kind.name})"


@dataclass(frozen=True, eq=False)
class Attr:
    """A key/value pair."""

    key: str
    value: Value

    def resolved(self) -> "Attr":
        value = self.value.resolve()
        if value is self.value:
            return self
        return Attr(self.key, value)

    def is_empty(self) -> bool:
        return self.key == "" and self.value.kind is Kind.ANY and self.value.any() is None

    def equal(self, other: "Attr") -> bool:
        return self.key == other.key and self.value.equal(other.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attr):
            return NotImplemented
        return self.equal(other)

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


EMPTY_ATTR = Attr("", Value())


def attr(key: str, value: Any) -> Attr:
    return Attr(key, Value.of(value))


def string(key: str, value: str) -> Attr:
    return Attr(key, Value(value, Kind.STRING))


def int64(key: str, value: int) -> Attr:
    return Attr(key, Value(int(value), Kind.INT64))


def float64(key: str, value: float) -> Attr:
    return Attr(key, Value(float(value), Kind.FLOAT64))


def boolean(key: str, value: bool) -> Attr:
    return Attr(key, Value(bool(value), Kind.BOOL))


def timestamp(key: str, value: datetime) -> Attr:
    return Attr(key, Value(value, Kind.TIME))


def duration(key: str, value: timedelta) -> Attr:
    return Attr(key, Value(value, Kind.DURATION))


def group(key: str, *args: Any) -> Attr:
    """Build a group attribute from ``Attr``s and/or alternating key/value args."""
    return Attr(key, Value.group(*args_to_attrs(args)))


def args_to_attrs(args: Sequence[Any]) -> List[Attr]:
    """
    Convert a mix of ``Attr``s and alternating key/value arguments.

    A trailing key without a value, or a non-string where a key is
    expected, is kept under the ``!BADKEY`` key rather than dropped.
    """
    out: List[Attr] = []
    items = list(args)
    index = 0
    while index < len(items):
        item = items[index]
        if isinstance(item, Attr):
            out.append(item)
            index += 1
        elif isinstance(item, str):
            if index + 1 >= len(items):
                out.append(string(BADKEY, item))
                index += 1
            else:
                out.append(attr(item, items[index + 1]))
                index += 2
        else:
            out.append(attr(BADKEY, item))
            index += 1
    return out


def attrs_from_mapping(data: Mapping[str, Any]) -> List[Attr]:
    return [attr(str(key), value) for key, value in data.items()]
