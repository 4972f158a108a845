"""Commands whose replies describe sorted-set members, ranks and scan pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .command import BaseCmd, cmd_string
from .reply import as_array, as_fixed_array, as_float, as_int, as_string, as_uint


@dataclass
class Z:
    """A sorted-set member with its score."""

    member: Any = ""
    score: float = 0.0


@dataclass
class ZWithKey:
    """A sorted-set member with its score and the key it came from."""

    key: str = ""
    member: Any = ""
    score: float = 0.0


@dataclass
class RankScore:
    """The rank of a member together with its score."""

    rank: int = 0
    score: float = 0.0


def _read_z_list(items: list) -> list[Z]:
    """Read members and scores sent as [member, score] pairs or as a flat list."""
    if not items:
        return []
    if isinstance(items[0], (list, tuple)):
        pairs = [as_fixed_array(item, 2) for item in items]
    else:
        count = len(items) // 2
        pairs = list(zip(items[0 : 2 * count : 2], items[1 : 2 * count : 2]))
    return [Z(member=as_string(member), score=as_float(score)) for member, score in pairs]


class ZSliceCmd(BaseCmd):
    """A list of members with scores."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = _read_z_list(as_array(reply))


class ZWithKeyCmd(BaseCmd):
    """A [key, member, score] reply."""

    def read_reply(self, reply: Any) -> None:
        key, member, score = as_fixed_array(reply, 3)
        self.val = ZWithKey(key=as_string(key), member=as_string(member), score=as_float(score))


class ZSliceWithKeyCmd(BaseCmd):
    """A [key, members-with-scores] reply; ``result()`` gives ``(key, members)``."""

    key: str = ""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        key, members = as_fixed_array(reply, 2)
        self.key = as_string(key)
        self.val = _read_z_list(as_array(members))

    def result(self) -> tuple[str, list[Z]]:
        members = self._checked()
        return self.key, members


class RankWithScoreCmd(BaseCmd):
    """A [rank, score] reply."""

    def _zero_value(self) -> Any:
        return RankScore()

    def read_reply(self, reply: Any) -> None:
        rank, score = as_fixed_array(reply, 2)
        self.val = RankScore(rank=as_int(rank), score=as_float(score))


class ScanCmd(BaseCmd):
    """One page of a SCAN-like command; ``result()`` gives ``(keys, cursor)``."""

    cursor: int = 0

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        cursor, page = as_fixed_array(reply, 2)
        self.cursor = as_uint(cursor)
        self.val = [as_string(item) for item in as_array(page)]

    def result(self) -> tuple[list[str], int]:
        page = self._checked()
        return page, self.cursor

    def __str__(self) -> str:
        return cmd_string(self, self.val)