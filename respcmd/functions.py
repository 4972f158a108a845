"""Commands whose replies describe server functions, their statistics and LCS matches."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from .command import BaseCmd
from .reply import (
    NilError,
    as_array,
    as_fixed_array,
    as_fixed_map,
    as_int,
    as_map,
    as_string,
)


@dataclass
class Function:
    """A function of a library."""

    name: str = ""
    description: str = ""
    flags: list[str] = field(default_factory=list)


@dataclass
class Library:
    """A function library."""

    name: str = ""
    engine: str = ""
    functions: list[Function] = field(default_factory=list)
    code: str = ""


@dataclass
class RunningScript:
    """A script that is running on the server."""

    name: str = ""
    command: list[str] = field(default_factory=list)
    duration: timedelta = timedelta(0)


@dataclass
class Engine:
    """Statistics of a scripting engine."""

    language: str = ""
    libraries_count: int = 0
    functions_count: int = 0


@dataclass
class FunctionStats:
    """Engines and the scripts running on the server.

    ``all_running_scripts`` is only sent by clustered enterprise servers.
    """

    engines: list[Engine] = field(default_factory=list)
    is_running: bool = False
    running_script: RunningScript = field(default_factory=RunningScript)
    all_running_scripts: list[RunningScript] = field(default_factory=list)

    def running(self) -> bool:
        """Tell whether a script is running."""
        return self.is_running


def _read_functions(reply: Any) -> list[Function]:
    functions = []
    for item in as_array(reply):
        function = Function()
        for k, v in as_map(item):
            key = as_string(k)
            if key == "name":
                function.name = as_string(v)
            elif key == "description":
                function.description = "" if v is None else as_string(v)
            elif key == "flags":
                function.flags = [as_string(flag) for flag in as_array(v)]
            else:
                raise ValueError(f"redis: function list unexpected key {key}")
        functions.append(function)
    return functions


class FunctionListCmd(BaseCmd):
    """FUNCTION LIST."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        libraries = []
        for item in as_array(reply):
            library = Library()
            for k, v in as_map(item):
                key = as_string(k)
                if key == "library_name":
                    library.name = as_string(v)
                elif key == "engine":
                    library.engine = as_string(v)
                elif key == "functions":
                    library.functions = _read_functions(v)
                elif key == "library_code":
                    library.code = as_string(v)
                else:
                    raise ValueError(f"redis: function list unexpected key {key}")
            libraries.append(library)
        self.val = libraries

    def first(self) -> Library:
        """The first library; raises :class:`NilError` when there is none."""
        libraries = self._checked()
        if not libraries:
            raise NilError()
        return libraries[0]


def _read_running_script(reply: Any) -> tuple[RunningScript, bool]:
    try:
        pairs = as_fixed_map(reply, 3)
    except NilError:
        return RunningScript(), False
    script = RunningScript()
    for k, v in pairs:
        key = as_string(k)
        if key == "name":
            script.name = as_string(v)
        elif key == "duration_ms":
            script.duration = timedelta(milliseconds=as_int(v))
        elif key == "command":
            script.command = [as_string(arg) for arg in as_array(v)]
        else:
            raise ValueError(f"redis: function stats unexpected running_script key {key}")
    return script, True


def _read_engines(reply: Any) -> list[Engine]:
    engines = []
    for k, v in as_map(reply):
        engine = Engine(language=as_string(k))
        try:
            pairs = as_fixed_map(v, 2)
        except (ValueError, TypeError) as exc:
            raise ValueError(
                f"redis: function stats unexpected {engine.language} engine map length"
            ) from exc
        for name, count in pairs:
            key = as_string(name)
            if key == "libraries_count":
                engine.libraries_count = as_int(count)
            elif key == "functions_count":
                engine.functions_count = as_int(count)
        engines.append(engine)
    return engines


class FunctionStatsCmd(BaseCmd):
    """FUNCTION STATS."""

    def _zero_value(self) -> Any:
        return FunctionStats()

    def read_reply(self, reply: Any) -> None:
        stats = FunctionStats()
        for k, v in as_map(reply):
            key = as_string(k)
            if key == "running_script":
                stats.running_script, stats.is_running = _read_running_script(v)
            elif key == "engines":
                stats.engines = _read_engines(v)
            elif key == "all_running_scripts":
                stats.all_running_scripts = [
                    _read_running_script(item)[0] for item in as_array(v)
                ]
                stats.is_running = bool(stats.all_running_scripts)
            else:
                raise ValueError(f"redis: function stats unexpected key {key}")
        self.val = stats


@dataclass
class LCSQuery:
    """Options of the LCS command: ``length`` wins over ``idx``."""

    key1: str = ""
    key2: str = ""
    length: bool = False
    idx: bool = False
    min_match_len: int = 0
    with_match_len: bool = False


@dataclass
class LCSPosition:
    """An inclusive range of positions in a string."""

    start: int = 0
    end: int = 0


@dataclass
class LCSMatchedPosition:
    """Where a match lies in both keys; ``match_len`` only with WITHMATCHLEN."""

    key1: LCSPosition = field(default_factory=LCSPosition)
    key2: LCSPosition = field(default_factory=LCSPosition)
    match_len: int = 0


@dataclass
class LCSMatch:
    """The result of LCS: the match string, its length or its positions."""

    match_string: str = ""
    matches: list[LCSMatchedPosition] = field(default_factory=list)
    length: int = 0


_LCS_STRING, _LCS_LEN, _LCS_IDX = 1, 2, 3


def _read_position(reply: Any) -> LCSPosition:
    start, end = as_fixed_array(reply, 2)
    return LCSPosition(start=as_int(start), end=as_int(end))


def _read_matched_positions(reply: Any) -> list[LCSMatchedPosition]:
    positions = []
    for item in as_array(reply):
        parts = as_array(item)
        if len(parts) < 2:
            raise ValueError(f"redis: got {len(parts)} elements in LCS match, wanted 2 or 3")
        position = LCSMatchedPosition(
            key1=_read_position(parts[0]), key2=_read_position(parts[1])
        )
        if len(parts) > 2:
            position.match_len = as_int(parts[2])
        positions.append(position)
    return positions


class LCSCmd(BaseCmd):
    """LCS built from an :class:`LCSQuery`."""

    def __init__(self, q: LCSQuery) -> None:
        args: list[Any] = ["lcs", q.key1, q.key2]
        self.read_type = _LCS_STRING
        if q.length:
            self.read_type = _LCS_LEN
            args.append("len")
        elif q.idx:
            self.read_type = _LCS_IDX
            args.append("idx")
            if q.min_match_len != 0:
                args.extend(("minmatchlen", q.min_match_len))
            if q.with_match_len:
                args.append("withmatchlen")
        super().__init__(*args)

    def read_reply(self, reply: Any) -> None:
        match = LCSMatch()
        if self.read_type == _LCS_STRING:
            match.match_string = as_string(reply)
        elif self.read_type == _LCS_LEN:
            match.length = as_int(reply)
        else:
            for k, v in as_fixed_map(reply, 2):
                key = as_string(k)
                if key == "matches":
                    match.matches = _read_matched_positions(v)
                elif key == "len":
                    match.length = as_int(v)
        self.val = match