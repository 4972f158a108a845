"""Commands: their arguments and the value or error their reply produced."""

from __future__ import annotations

import string
import struct
from collections.abc import Iterable, Mapping
from typing import Any

from .reply import (
    NilError,
    RedisError,
    _parse_float,
    _parse_int,
    _parse_uint,
    format_arg,
)

_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_UINT64_MASK = (1 << 64) - 1
_EVAL_COMMANDS = frozenset({"eval", "evalsha", "eval_ro", "evalsha_ro"})
_TRUE_TEXT = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_TEXT = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _type_error(val: Any, kind: str) -> TypeError:
    return TypeError(f"redis: unexpected type={type(val).__name__} for {kind}")


def _is_int(val: Any) -> bool:
    return isinstance(val, int) and not isinstance(val, bool)


class BaseCmd:
    """A command with its arguments and, once read, its reply value or error."""

    def __init__(self, *args: Any) -> None:
        self.args: list[Any] = list(args)
        self.err: BaseException | None = None
        self.first_key_pos: int = 0
        self.read_timeout: float | None = None
        self.val: Any = self._zero_value()

    def _zero_value(self) -> Any:
        return None

    def _checked(self) -> Any:
        if self.err is not None:
            raise self.err
        return self.val

    def name(self) -> str:
        """The command name, lower cased."""
        if not self.args:
            return ""
        return self.string_arg(0).translate(_LOWER)

    def full_name(self) -> str:
        """The command name with its subcommand for CLUSTER and COMMAND."""
        name = self.name()
        if name in ("cluster", "command") and len(self.args) > 1:
            sub = self.args[1]
            if isinstance(sub, str):
                return f"{name} {sub}"
        return name

    def string_arg(self, pos: int) -> str:
        """The argument at ``pos`` as text, or "" when there is none."""
        if pos < 0 or pos >= len(self.args):
            return ""
        arg = self.args[pos]
        return arg if isinstance(arg, str) else format_arg(arg)

    def result(self) -> Any:
        """The reply value; raises the command's error if it has one."""
        return self._checked()

    def read_reply(self, reply: Any) -> None:
        """Store a reply, raising if it is nil or an error reply."""
        if reply is None:
            raise NilError()
        if isinstance(reply, RedisError):
            raise reply
        self.val = reply

    def __str__(self) -> str:
        return cmd_string(self, self.val)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self}>"


def _normalize(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", "surrogateescape")
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_normalize(item) for item in value]
    if isinstance(value, Mapping):
        return {_normalize(k): _normalize(v) for k, v in value.items()}
    return value


class Cmd(BaseCmd):
    """A command whose reply is kept as a plain value of any shape.

    Nil elements and error replies nested in aggregates are kept as values.
    """

    def read_reply(self, reply: Any) -> None:
        super().read_reply(_normalize(reply))

    def text(self) -> str:
        return to_string(self._checked())

    def as_int(self) -> int:
        return to_int64(self._checked())

    def as_uint64(self) -> int:
        return to_uint64(self._checked())

    def as_float32(self) -> float:
        return to_float32(self._checked())

    def as_float(self) -> float:
        return to_float64(self._checked())

    def as_bool(self) -> bool:
        return to_bool(self._checked())

    def as_list(self) -> list:
        val = self._checked()
        if not isinstance(val, list):
            raise _type_error(val, "Slice")
        return val

    def string_list(self) -> list[str]:
        return [to_string(item) for item in self.as_list()]

    def int_list(self) -> list[int]:
        return [to_int64(item) for item in self.as_list()]

    def uint64_list(self) -> list[int]:
        return [to_uint64(item) for item in self.as_list()]

    def float32_list(self) -> list[float]:
        return [to_float32(item) for item in self.as_list()]

    def float_list(self) -> list[float]:
        return [to_float64(item) for item in self.as_list()]

    def bool_list(self) -> list[bool]:
        return [to_bool(item) for item in self.as_list()]


def to_string(val: Any) -> str:
    """Return ``val`` if it is a string."""
    if isinstance(val, str):
        return val
    raise _type_error(val, "String")


def to_int64(val: Any) -> int:
    """Convert an integer or decimal text to a signed 64-bit integer."""
    if _is_int(val):
        return val
    if isinstance(val, str):
        return _parse_int(val)
    raise _type_error(val, "Int64")


def to_uint64(val: Any) -> int:
    """Convert to an unsigned 64-bit integer; negative integers wrap around."""
    if _is_int(val):
        return val & _UINT64_MASK
    if isinstance(val, str):
        return _parse_uint(val)
    raise _type_error(val, "Uint64")


def _round_float32(number: float, text: str) -> float:
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError as exc:
        raise ValueError(f'strconv.ParseFloat: parsing "{text}": value out of range') from exc


def to_float32(val: Any) -> float:
    """Convert to the nearest single precision value."""
    if _is_int(val):
        return _round_float32(float(val), str(val))
    if isinstance(val, str):
        return _round_float32(_parse_float(val), val)
    raise _type_error(val, "Float32")


def to_float64(val: Any) -> float:
    """Convert an integer or numeric text to a float."""
    if _is_int(val):
        return float(val)
    if isinstance(val, str):
        return _parse_float(val)
    raise _type_error(val, "Float64")


def parse_bool(text: str) -> bool:
    """Parse 1, t, T, TRUE, true, True and their false counterparts."""
    if text in _TRUE_TEXT:
        return True
    if text in _FALSE_TEXT:
        return False
    raise ValueError(f'strconv.ParseBool: parsing "{text}": invalid syntax')


def to_bool(val: Any) -> bool:
    """Convert an integer (non-zero is true) or boolean text to a bool."""
    if _is_int(val):
        return val != 0
    if isinstance(val, str):
        return parse_bool(val)
    raise _type_error(val, "Bool")


def cmd_first_key_pos(cmd: BaseCmd, info: Any) -> int:
    """Position of the first key among a command's arguments."""
    if cmd.first_key_pos:
        return cmd.first_key_pos
    name = cmd.name()
    if name in _EVAL_COMMANDS:
        return 3 if cmd.string_arg(2) != "0" else 0
    if name == "publish":
        return 1
    if name == "memory" and cmd.string_arg(1) == "usage":
        return 2
    if info is not None:
        return int(info.first_key_pos)
    return 1


def cmd_string(cmd: BaseCmd, val: Any) -> str:
    """Render a command's arguments followed by its error or value."""
    text = " ".join(format_arg(arg) for arg in cmd.args)
    if cmd.err is not None:
        text += ": " + str(cmd.err)
    elif val is not None:
        text += ": " + format_arg(val)
    return text


def set_cmds_err(cmds: Iterable[BaseCmd], err: BaseException) -> None:
    """Give ``err`` to every command that has no error yet."""
    for cmd in cmds:
        if cmd.err is None:
            cmd.err = err


def cmds_first_err(cmds: Iterable[BaseCmd]) -> BaseException | None:
    """The first error among the commands, or None."""
    return next((cmd.err for cmd in cmds if cmd.err is not None), None)