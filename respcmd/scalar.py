"""Commands whose replies are scalars, flat lists or flat maps."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from .command import BaseCmd, _normalize, parse_bool, to_float32
from .reply import (
    NilError,
    RedisError,
    _parse_float,
    _parse_int,
    _parse_uint,
    as_array,
    as_bool,
    as_fixed_array,
    as_float,
    as_int,
    as_map,
    as_string,
)

_UINT64_MASK = (1 << 64) - 1
_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d{1,9}))?"
    r"(Z|[+-]\d{2}:\d{2})"
)


def _parse_rfc3339(text: str) -> datetime:
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(f'parsing time "{text}" as RFC 3339: cannot parse')
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    frac, zone = match.group(7), match.group(8)
    micro = int(frac[:6].ljust(6, "0")) if frac else 0
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(sign * offset)
    try:
        return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)
    except ValueError as exc:
        raise ValueError(f'parsing time "{text}": {exc}') from exc


@dataclass
class KeyValue:
    """A key with its value."""

    key: str = ""
    value: str = ""


class SliceCmd(BaseCmd):
    """A list reply whose elements may be nil or error replies."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = [_normalize(item) for item in as_array(reply)]


class StatusCmd(BaseCmd):
    """A status reply such as "OK"."""

    def _zero_value(self) -> Any:
        return ""

    def read_reply(self, reply: Any) -> None:
        self.val = as_string(reply)


class IntCmd(BaseCmd):
    """An integer reply."""

    def _zero_value(self) -> Any:
        return 0

    def read_reply(self, reply: Any) -> None:
        self.val = as_int(reply)

    def uint64(self) -> int:
        """The value as an unsigned 64-bit integer; negatives wrap around."""
        return self._checked() & _UINT64_MASK


class IntSliceCmd(BaseCmd):
    """A list of integers."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = [as_int(item) for item in as_array(reply)]


class DurationCmd(BaseCmd):
    """An integer reply counted in units of ``precision``.

    The sentinels -2 (no such key) and -1 (no expiry) are kept as plain ints.
    """

    def __init__(self, precision: timedelta, *args: Any) -> None:
        self.precision = precision
        super().__init__(*args)

    def _zero_value(self) -> Any:
        return timedelta(0)

    def read_reply(self, reply: Any) -> None:
        n = as_int(reply)
        self.val = n if n in (-2, -1) else n * self.precision


class TimeCmd(BaseCmd):
    """A [seconds, microseconds] reply as an aware UTC datetime."""

    def read_reply(self, reply: Any) -> None:
        seconds, micros = as_fixed_array(reply, 2)
        base = datetime.fromtimestamp(as_int(seconds), tz=timezone.utc)
        self.val = base + timedelta(microseconds=as_int(micros))


class BoolCmd(BaseCmd):
    """A boolean reply; nil counts as false."""

    def _zero_value(self) -> Any:
        return False

    def read_reply(self, reply: Any) -> None:
        try:
            self.val = as_bool(reply)
        except NilError:
            self.val = False


class StringCmd(BaseCmd):
    """A string reply with conversions to other types."""

    def _zero_value(self) -> Any:
        return ""

    def read_reply(self, reply: Any) -> None:
        self.val = as_string(reply)

    def as_bytes(self) -> bytes:
        return self._checked().encode("utf-8", "surrogateescape")

    def as_bool(self) -> bool:
        return parse_bool(self._checked())

    def as_int(self) -> int:
        return _parse_int(self._checked())

    def as_uint64(self) -> int:
        return _parse_uint(self._checked())

    def as_float32(self) -> float:
        return to_float32(self._checked())

    def as_float(self) -> float:
        return _parse_float(self._checked())

    def as_time(self) -> datetime:
        """Parse the value as an RFC 3339 timestamp (microsecond precision)."""
        return _parse_rfc3339(self._checked())


class FloatCmd(BaseCmd):
    """A floating point reply."""

    def _zero_value(self) -> Any:
        return 0.0

    def read_reply(self, reply: Any) -> None:
        self.val = as_float(reply)


def _or_default(reader, item: Any, default: Any) -> Any:
    try:
        return reader(item)
    except NilError:
        return default


class FloatSliceCmd(BaseCmd):
    """A list of floats; nil elements become 0."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = [_or_default(as_float, item, 0.0) for item in as_array(reply)]


class StringSliceCmd(BaseCmd):
    """A list of strings; nil elements become ""."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = [_or_default(as_string, item, "") for item in as_array(reply)]


class KeyValueSliceCmd(BaseCmd):
    """Key/value pairs sent as nested pairs or as one flat list."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        items = as_array(reply)
        if not items:
            self.val = []
            return
        if isinstance(items[0], (list, tuple)):
            pairs = [as_fixed_array(item, 2) for item in items]
        else:
            count = len(items) // 2
            pairs = list(zip(items[0 : 2 * count : 2], items[1 : 2 * count : 2]))
        self.val = [KeyValue(as_string(k), as_string(v)) for k, v in pairs]


class BoolSliceCmd(BaseCmd):
    """A list of booleans."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = [as_bool(item) for item in as_array(reply)]


class MapStringStringCmd(BaseCmd):
    """A map of strings to strings."""

    def _zero_value(self) -> Any:
        return {}

    def read_reply(self, reply: Any) -> None:
        self.val = {as_string(k): as_string(v) for k, v in as_map(reply)}


class MapStringIntCmd(BaseCmd):
    """A map of strings to integers."""

    def _zero_value(self) -> Any:
        return {}

    def read_reply(self, reply: Any) -> None:
        self.val = {as_string(k): as_int(v) for k, v in as_map(reply)}


class StringStructMapCmd(BaseCmd):
    """A list of strings kept as a set."""

    def _zero_value(self) -> Any:
        return set()

    def read_reply(self, reply: Any) -> None:
        self.val = {as_string(item) for item in as_array(reply)}


class MapStringInterfaceCmd(BaseCmd):
    """A map of strings to values of any shape.

    Nil values are stored as a :class:`NilError`, error replies as themselves.
    """

    def _zero_value(self) -> Any:
        return {}

    def read_reply(self, reply: Any) -> None:
        result: dict[str, Any] = {}
        for k, v in as_map(reply):
            key = as_string(k)
            if v is None:
                result[key] = NilError()
            elif isinstance(v, RedisError):
                result[key] = v
            else:
                result[key] = _normalize(v)
        self.val = result


class MapStringStringSliceCmd(BaseCmd):
    """A list of string-to-string maps."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = [
            {as_string(k): as_string(v) for k, v in as_map(item)}
            for item in as_array(reply)
        ]


class KeyValuesCmd(BaseCmd):
    """A [key, [values...]] reply; ``result()`` gives ``(key, values)``."""

    key: str = ""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        key, values = as_fixed_array(reply, 2)
        self.key = as_string(key)
        self.val = [as_string(item) for item in as_array(values)]

    def result(self) -> tuple[str, list[str]]:
        values = self._checked()
        return self.key, values