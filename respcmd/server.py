"""Commands whose replies describe the server: command table, slow log, clients and ACL log."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from .command import BaseCmd
from .reply import NilError, _parse_int, as_array, as_float, as_int, as_map, as_string

_NUM_ARG_REDIS5 = 6
_NUM_ARG_REDIS6 = 7
_NUM_ARG_REDIS7 = 10


def _int8(value: int) -> int:
    """Truncate an integer to a signed 8-bit value."""
    return ((value + 128) & 0xFF) - 128


@dataclass
class CommandInfo:
    """One entry of the COMMAND reply."""

    name: str = ""
    arity: int = 0
    flags: list[str] = field(default_factory=list)
    acl_flags: list[str] = field(default_factory=list)
    first_key_pos: int = 0
    last_key_pos: int = 0
    step_count: int = 0
    read_only: bool = False


def _string_or_empty(item: Any) -> str:
    try:
        return as_string(item)
    except NilError:
        return ""


def _read_command_info(reply: Any) -> CommandInfo:
    parts = as_array(reply)
    if len(parts) not in (_NUM_ARG_REDIS5, _NUM_ARG_REDIS6, _NUM_ARG_REDIS7):
        raise ValueError(
            f"redis: got {len(parts)} elements in COMMAND reply, wanted 6/7/10"
        )
    info = CommandInfo(name=as_string(parts[0]), arity=_int8(as_int(parts[1])))
    info.flags = [_string_or_empty(flag) for flag in as_array(parts[2])]
    info.read_only = "readonly" in info.flags
    info.first_key_pos = _int8(as_int(parts[3]))
    info.last_key_pos = _int8(as_int(parts[4]))
    info.step_count = _int8(as_int(parts[5]))
    if len(parts) >= _NUM_ARG_REDIS6:
        info.acl_flags = [_string_or_empty(flag) for flag in as_array(parts[6])]
    return info


class CommandsInfoCmd(BaseCmd):
    """COMMAND: a mapping from command name to its :class:`CommandInfo`."""

    def _zero_value(self) -> Any:
        return {}

    def read_reply(self, reply: Any) -> None:
        result: dict[str, CommandInfo] = {}
        for item in as_array(reply):
            info = _read_command_info(item)
            result[info.name] = info
        self.val = result


class CmdsInfoCache:
    """Loads the command table once; a failed load is retried on the next call."""

    def __init__(self, fn: Callable[[], dict[str, CommandInfo]]) -> None:
        self._fn = fn
        self._lock = threading.Lock()
        self._done = False
        self._cmds: dict[str, CommandInfo] | None = None

    def get(self) -> dict[str, CommandInfo] | None:
        """Return the command table, loading it on first use."""
        if self._done:
            return self._cmds
        with self._lock:
            if not self._done:
                cmds = self._fn()
                # Extensions report their names in upper case.
                for name, info in list(cmds.items()):
                    lower = name.lower()
                    if lower != name:
                        cmds[lower] = info
                self._cmds = cmds
                self._done = True
        return self._cmds


@dataclass
class SlowLog:
    """A slow log entry; client fields are only sent by newer servers."""

    id: int = 0
    time: datetime | None = None
    duration: timedelta = timedelta(0)
    args: list[str] = field(default_factory=list)
    client_addr: str = ""
    client_name: str = ""


def _read_slow_log(reply: Any) -> SlowLog:
    parts = as_array(reply)
    if len(parts) < 4:
        raise ValueError(
            f"redis: got {len(parts)} elements in slowlog get, expected at least 4"
        )
    entry = SlowLog(id=as_int(parts[0]))
    entry.time = datetime.fromtimestamp(as_int(parts[1]), tz=timezone.utc)
    entry.duration = timedelta(microseconds=as_int(parts[2]))
    args = as_array(parts[3])
    if len(args) < 1:
        raise ValueError(
            f"redis: got {len(args)} elements commands reply in slowlog get, expected at least 1"
        )
    entry.args = [as_string(arg) for arg in args]
    if len(parts) >= 5:
        entry.client_addr = as_string(parts[4])
    if len(parts) >= 6:
        entry.client_name = as_string(parts[5])
    return entry


class SlowLogCmd(BaseCmd):
    """SLOWLOG GET."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = [_read_slow_log(item) for item in as_array(reply)]


@dataclass
class KeyFlags:
    """A key with its flags."""

    key: str = ""
    flags: list[str] = field(default_factory=list)


class KeyFlagsCmd(BaseCmd):
    """A list of [key, [flags...]] pairs."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        result = []
        for item in as_array(reply):
            parts = as_array(item)
            if len(parts) != 2:
                raise ValueError(f"redis: got {len(parts)} elements in the array, wanted 2")
            key, flags = parts
            result.append(
                KeyFlags(key=as_string(key), flags=[as_string(f) for f in as_array(flags)])
            )
        self.val = result


class ClientFlags(enum.IntFlag):
    """Server-side client flags."""

    SLAVE = 1 << 0
    MASTER = 1 << 1
    MONITOR = 1 << 2
    MULTI = 1 << 3
    BLOCKED = 1 << 4
    DIRTY_CAS = 1 << 5
    CLOSE_AFTER_REPLY = 1 << 6
    UNBLOCKED = 1 << 7
    SCRIPT = 1 << 8
    ASKING = 1 << 9
    CLOSE_ASAP = 1 << 10
    UNIX_SOCKET = 1 << 11
    DIRTY_EXEC = 1 << 12
    MASTER_FORCE_REPLY = 1 << 13
    FORCE_AOF = 1 << 14
    FORCE_REPL = 1 << 15
    PRE_PSYNC = 1 << 16
    READ_ONLY = 1 << 17
    PUBSUB = 1 << 18
    PREVENT_AOF_PROP = 1 << 19
    PREVENT_REPL_PROP = 1 << 20
    PREVENT_PROP = (1 << 19) | (1 << 20)
    PENDING_WRITE = 1 << 21
    REPLY_OFF = 1 << 22
    REPLY_SKIP_NEXT = 1 << 23
    REPLY_SKIP = 1 << 24
    LUA_DEBUG = 1 << 25
    LUA_DEBUG_SYNC = 1 << 26
    MODULE = 1 << 27
    PROTECTED = 1 << 28
    EXECUTING_COMMAND = 1 << 29
    PENDING_COMMAND = 1 << 30
    TRACKING = 1 << 31
    TRACKING_BROKEN_REDIR = 1 << 32
    TRACKING_BCAST = 1 << 33
    TRACKING_OPT_IN = 1 << 34
    TRACKING_OPT_OUT = 1 << 35
    TRACKING_CACHING = 1 << 36
    TRACKING_NO_LOOP = 1 << 37
    IN_TIMEOUT_TABLE = 1 << 38
    PROTOCOL_ERROR = 1 << 39
    CLOSE_AFTER_COMMAND = 1 << 40
    DENY_BLOCKING = 1 << 41
    REPL_RDB_ONLY = 1 << 42
    NO_EVICT = 1 << 43
    ALLOW_OOM = 1 << 44
    NO_TOUCH = 1 << 45
    PUSHING = 1 << 46


_FLAG_CHARS: dict[str, ClientFlags] = {
    "S": ClientFlags.SLAVE,
    "O": ClientFlags.SLAVE | ClientFlags.MONITOR,
    "M": ClientFlags.MASTER,
    "P": ClientFlags.PUBSUB,
    "x": ClientFlags.MULTI,
    "b": ClientFlags.BLOCKED,
    "t": ClientFlags.TRACKING,
    "R": ClientFlags.TRACKING_BROKEN_REDIR,
    "B": ClientFlags.TRACKING_BCAST,
    "d": ClientFlags.DIRTY_CAS,
    "c": ClientFlags.CLOSE_AFTER_COMMAND,
    "u": ClientFlags.UNBLOCKED,
    "A": ClientFlags.CLOSE_ASAP,
    "U": ClientFlags.UNIX_SOCKET,
    "r": ClientFlags.READ_ONLY,
    "e": ClientFlags.NO_EVICT,
    "T": ClientFlags.NO_TOUCH,
}


@dataclass
class ClientInfo:
    """A client connection as described by CLIENT INFO / CLIENT LIST."""

    id: int = 0
    addr: str = ""
    laddr: str = ""
    fd: int = 0
    name: str = ""
    age: timedelta = timedelta(0)
    idle: timedelta = timedelta(0)
    flags: ClientFlags = ClientFlags(0)
    db: int = 0
    sub: int = 0
    psub: int = 0
    ssub: int = 0
    multi: int = 0
    query_buf: int = 0
    query_buf_free: int = 0
    argv_mem: int = 0
    multi_mem: int = 0
    buffer_size: int = 0
    buffer_peak: int = 0
    output_buffer_length: int = 0
    output_list_length: int = 0
    output_memory: int = 0
    total_memory: int = 0
    events: str = ""
    last_cmd: str = ""
    user: str = ""
    redir: int = 0
    resp: int = 0
    lib_name: str = ""
    lib_ver: str = ""


def _parse_flags(text: str) -> ClientFlags:
    flags = ClientFlags(0)
    if text == "N":
        return flags
    for char in text:
        try:
            flags |= _FLAG_CHARS[char]
        except KeyError:
            raise ValueError(f"redis: unexpected client info flags({char})") from None
    return flags


def _seconds(text: str) -> timedelta:
    return timedelta(seconds=_parse_int(text))


def _same(text: str) -> str:
    return text


_CLIENT_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "id": ("id", _parse_int),
    "addr": ("addr", _same),
    "laddr": ("laddr", _same),
    "fd": ("fd", _parse_int),
    "name": ("name", _same),
    "age": ("age", _seconds),
    "idle": ("idle", _seconds),
    "flags": ("flags", _parse_flags),
    "db": ("db", _parse_int),
    "sub": ("sub", _parse_int),
    "psub": ("psub", _parse_int),
    "ssub": ("ssub", _parse_int),
    "multi": ("multi", _parse_int),
    "qbuf": ("query_buf", _parse_int),
    "qbuf-free": ("query_buf_free", _parse_int),
    "argv-mem": ("argv_mem", _parse_int),
    "multi-mem": ("multi_mem", _parse_int),
    "rbs": ("buffer_size", _parse_int),
    "rbp": ("buffer_peak", _parse_int),
    "obl": ("output_buffer_length", _parse_int),
    "oll": ("output_list_length", _parse_int),
    "omem": ("output_memory", _parse_int),
    "tot-mem": ("total_memory", _parse_int),
    "events": ("events", _same),
    "cmd": ("last_cmd", _same),
    "user": ("user", _same),
    "redir": ("redir", _parse_int),
    "resp": ("resp", _parse_int),
    "lib-name": ("lib_name", _same),
    "lib-ver": ("lib_ver", _same),
}


def parse_client_info(txt: str) -> ClientInfo:
    """Parse a space separated list of key=value client properties."""
    info = ClientInfo()
    for item in txt.split(" "):
        kv = item.split("=")
        if len(kv) != 2:
            raise ValueError(f"redis: unexpected client info data ({item})")
        key, value = kv
        try:
            attr, parse = _CLIENT_FIELDS[key]
        except KeyError:
            raise ValueError(f"redis: unexpected client info key({key})") from None
        setattr(info, attr, parse(value))
    return info


class ClientInfoCmd(BaseCmd):
    """CLIENT INFO."""

    def read_reply(self, reply: Any) -> None:
        self.val = parse_client_info(as_string(reply).strip())


@dataclass
class ACLLogEntry:
    """An entry of the ACL log."""

    count: int = 0
    reason: str = ""
    context: str = ""
    object: str = ""
    username: str = ""
    age_seconds: float = 0.0
    client_info: ClientInfo | None = None
    entry_id: int = 0
    timestamp_created: int = 0
    timestamp_last_updated: int = 0


def _client_info_reply(value: Any) -> ClientInfo:
    return parse_client_info(as_string(value).strip())


_ACL_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "count": ("count", as_int),
    "reason": ("reason", as_string),
    "context": ("context", as_string),
    "object": ("object", as_string),
    "username": ("username", as_string),
    "age-seconds": ("age_seconds", as_float),
    "client-info": ("client_info", _client_info_reply),
    "entry-id": ("entry_id", as_int),
    "timestamp-created": ("timestamp_created", as_int),
    "timestamp-last-updated": ("timestamp_last_updated", as_int),
}


def _read_acl_entry(reply: Any) -> ACLLogEntry:
    entry = ACLLogEntry()
    for k, v in as_map(reply):
        key = as_string(k)
        try:
            attr, reader = _ACL_FIELDS[key]
        except KeyError:
            raise ValueError(f'redis: unexpected key "{key}" in ACL LOG reply') from None
        setattr(entry, attr, reader(v))
    return entry


class ACLLogCmd(BaseCmd):
    """ACL LOG."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = [_read_acl_entry(item) for item in as_array(reply)]