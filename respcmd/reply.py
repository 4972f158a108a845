"""Decoding of parsed RESP reply values and formatting of command arguments.

A reply is the value a RESP parser produced: ``str`` or ``bytes`` for simple
and bulk strings, ``int`` for integers, ``float`` for doubles, ``bool`` for
booleans, ``list``/``tuple``/``set`` for aggregates, a mapping for RESP3 maps,
``None`` for nil and a :class:`RedisError` instance for an error reply.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_MAX = (1 << 64) - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_BYTES_TYPES = (bytes, bytearray, memoryview)
_ARRAY_TYPES = (list, tuple, set, frozenset)


class RedisError(Exception):
    """An error reply sent by the server."""


class NilError(RedisError):
    """The server replied with a nil value."""

    def __init__(self, message: str = "redis: nil") -> None:
        super().__init__(message)


def _syntax_error(func: str, text: str) -> ValueError:
    return ValueError(f'strconv.{func}: parsing "{text}": invalid syntax')


def _range_error(func: str, text: str) -> ValueError:
    return ValueError(f'strconv.{func}: parsing "{text}": value out of range')


def _parse_int(text: str) -> int:
    """Parse a signed 64-bit decimal integer strictly."""
    if not _INT_RE.fullmatch(text):
        raise _syntax_error("ParseInt", text)
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise _range_error("ParseInt", text)
    return number


def _parse_uint(text: str) -> int:
    """Parse an unsigned 64-bit decimal integer strictly."""
    if not _UINT_RE.fullmatch(text):
        raise _syntax_error("ParseUint", text)
    number = int(text)
    if number > _UINT64_MAX:
        raise _range_error("ParseUint", text)
    return number


def _parse_float(text: str) -> float:
    """Parse a floating point number without the leniency of ``float()``."""
    if not text or text.strip() != text or "_" in text:
        raise _syntax_error("ParseFloat", text)
    body = text[1:] if text[0] in "+-" else text
    if not body or body[0] in "+-":
        raise _syntax_error("ParseFloat", text)
    try:
        if body[:2].lower() == "0x":
            number = float.fromhex(text)
        else:
            number = float(text)
    except (ValueError, OverflowError) as exc:
        raise _syntax_error("ParseFloat", text) from exc
    if math.isinf(number) and body.lower() not in ("inf", "infinity"):
        raise _range_error("ParseFloat", text)
    return number


def _decode(data: Any) -> str:
    return bytes(data).decode("utf-8", "surrogateescape")


def _check(value: Any) -> Any:
    if value is None:
        raise NilError()
    if isinstance(value, RedisError):
        raise value
    return value


def _text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, _BYTES_TYPES):
        return _decode(value)
    return None


def is_map(value: Any) -> bool:
    """Tell whether a reply is a RESP3 map."""
    return isinstance(value, Mapping)


def as_string(value: Any) -> str:
    """Read a reply as a string."""
    _check(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    text = _text(value)
    if text is not None:
        return text
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "nan"
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        return _format_float(value)
    raise TypeError(f"redis: can't parse reply as string: {value!r}")


def as_int(value: Any) -> int:
    """Read a reply as a signed 64-bit integer."""
    _check(value)
    if isinstance(value, bool):
        raise TypeError(f"redis: can't parse reply as int: {value!r}")
    if isinstance(value, int):
        return value
    text = _text(value)
    if text is None:
        raise TypeError(f"redis: can't parse reply as int: {value!r}")
    return _parse_int(text)


def as_uint(value: Any) -> int:
    """Read a reply as an unsigned 64-bit integer."""
    _check(value)
    if isinstance(value, bool):
        raise TypeError(f"redis: can't parse reply as uint: {value!r}")
    if isinstance(value, int):
        return _parse_uint(str(value))
    text = _text(value)
    if text is None:
        raise TypeError(f"redis: can't parse reply as uint: {value!r}")
    return _parse_uint(text)


def as_float(value: Any) -> float:
    """Read a reply as a float; integers are accepted as well."""
    _check(value)
    if isinstance(value, bool):
        raise TypeError(f"redis: can't parse float reply: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    text = _text(value)
    if text is None:
        raise TypeError(f"redis: can't parse float reply: {value!r}")
    return _parse_float(text)


def as_bool(value: Any) -> bool:
    """Read a reply as a boolean: "OK", "1" and "true" are true."""
    return as_string(value) in ("OK", "1", "true")


def as_array(value: Any) -> list:
    """Read an aggregate reply as a list of its elements."""
    _check(value)
    if isinstance(value, _ARRAY_TYPES):
        return list(value)
    raise TypeError(f"redis: can't parse array reply: {value!r}")


def as_fixed_array(value: Any, n: int) -> list:
    """Read an aggregate reply that must have exactly ``n`` elements."""
    items = as_array(value)
    if len(items) != n:
        raise ValueError(f"redis: got {len(items)} elements in the array, wanted {n}")
    return items


def as_map(value: Any) -> list[tuple[Any, Any]]:
    """Read a map reply, or a flat key/value array, as a list of pairs."""
    _check(value)
    if isinstance(value, Mapping):
        return list(value.items())
    if isinstance(value, _ARRAY_TYPES):
        items = list(value)
        if len(items) % 2:
            raise ValueError(
                f"redis: got {len(items)} elements in a key/value array, wanted an even number"
            )
        it = iter(items)
        return list(zip(it, it))
    raise TypeError(f"redis: can't parse map reply: {value!r}")


def as_fixed_map(value: Any, n: int) -> list[tuple[Any, Any]]:
    """Read a map reply that must have exactly ``n`` entries."""
    pairs = as_map(value)
    if len(pairs) != n:
        raise ValueError(f"redis: got {len(pairs)} elements in the map, wanted {n}")
    return pairs


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset()
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _scaled(value: int, scale: int) -> str:
    whole, frac = divmod(value, scale)
    if not frac:
        return str(whole)
    digits = len(str(scale)) - 1
    return f"{whole}.{frac:0{digits}d}".rstrip("0")


def _format_duration(delta: timedelta) -> str:
    ns = (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < 1_000_000_000:
        for unit, size in (("ms", 1_000_000), ("µs", 1_000), ("ns", 1)):
            if ns >= size:
                return sign + _scaled(ns, size) + unit
    hours, rest = divmod(ns, 3_600_000_000_000)
    minutes, rest = divmod(rest, 60_000_000_000)
    text = _scaled(rest, 1_000_000_000) + "s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def format_arg(value: Any) -> str:
    """Render a command argument or reply value for display."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, _BYTES_TYPES):
        return bytes(value).decode("utf-8", "backslashreplace")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, timedelta):
        return _format_duration(value)
    if isinstance(value, Mapping):
        entries = sorted(f"{format_arg(k)}:{format_arg(v)}" for k, v in value.items())
        return "map[" + " ".join(entries) + "]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(format_arg(item) for item in value) + "]"
    return str(value)