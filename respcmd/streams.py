"""Commands whose replies describe streams, their entries and consumer groups."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from .command import BaseCmd
from .reply import (
    NilError,
    as_array,
    as_fixed_array,
    as_int,
    as_map,
    as_string,
    is_map,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _from_millis(ms: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=ms)


def _nil_ok(reader, item: Any, default: Any) -> Any:
    try:
        return reader(item)
    except NilError:
        return default


@dataclass
class XMessage:
    """A stream entry: its ID and field values."""

    id: str = ""
    values: dict[str, Any] = field(default_factory=dict)


@dataclass
class XStream:
    """A stream name with the entries read from it."""

    stream: str = ""
    messages: list[XMessage] = field(default_factory=list)


@dataclass
class XPending:
    """Summary of the pending entries of a consumer group."""

    count: int = 0
    lower: str = ""
    higher: str = ""
    consumers: dict[str, int] = field(default_factory=dict)


@dataclass
class XPendingExt:
    """One pending entry of a consumer group."""

    id: str = ""
    consumer: str = ""
    idle: timedelta = timedelta(0)
    retry_count: int = 0


@dataclass
class XInfoConsumer:
    """A consumer of a consumer group."""

    name: str = ""
    pending: int = 0
    idle: timedelta = timedelta(0)
    inactive: timedelta = timedelta(0)


@dataclass
class XInfoGroup:
    """A consumer group of a stream."""

    name: str = ""
    consumers: int = 0
    pending: int = 0
    last_delivered_id: str = ""
    entries_read: int = 0
    lag: int = 0


@dataclass
class XInfoStream:
    """General information about a stream."""

    length: int = 0
    radix_tree_keys: int = 0
    radix_tree_nodes: int = 0
    groups: int = 0
    last_generated_id: str = ""
    max_deleted_entry_id: str = ""
    entries_added: int = 0
    first_entry: XMessage = field(default_factory=XMessage)
    last_entry: XMessage = field(default_factory=XMessage)
    recorded_first_entry_id: str = ""


@dataclass
class XInfoStreamGroupPending:
    """A pending entry as listed in the full stream information."""

    id: str = ""
    consumer: str = ""
    delivery_time: datetime | None = None
    delivery_count: int = 0


@dataclass
class XInfoStreamConsumerPending:
    """A pending entry of one consumer in the full stream information."""

    id: str = ""
    delivery_time: datetime | None = None
    delivery_count: int = 0


@dataclass
class XInfoStreamConsumer:
    """A consumer as listed in the full stream information."""

    name: str = ""
    seen_time: datetime | None = None
    active_time: datetime | None = None
    pel_count: int = 0
    pending: list[XInfoStreamConsumerPending] = field(default_factory=list)


@dataclass
class XInfoStreamGroup:
    """A consumer group as listed in the full stream information."""

    name: str = ""
    last_delivered_id: str = ""
    entries_read: int = 0
    lag: int = 0
    pel_count: int = 0
    pending: list[XInfoStreamGroupPending] = field(default_factory=list)
    consumers: list[XInfoStreamConsumer] = field(default_factory=list)


@dataclass
class XInfoStreamFull:
    """The full information about a stream."""

    length: int = 0
    radix_tree_keys: int = 0
    radix_tree_nodes: int = 0
    last_generated_id: str = ""
    max_deleted_entry_id: str = ""
    entries_added: int = 0
    entries: list[XMessage] = field(default_factory=list)
    groups: list[XInfoStreamGroup] = field(default_factory=list)
    recorded_first_entry_id: str = ""


def read_xmessage(reply: Any) -> XMessage:
    """Read an [id, fields] entry; nil fields give an empty mapping."""
    msg_id, fields = as_fixed_array(reply, 2)
    values: dict[str, Any] = {}
    if fields is not None:
        values = {as_string(k): as_string(v) for k, v in as_map(fields)}
    return XMessage(as_string(msg_id), values)


def read_xmessage_list(reply: Any) -> list[XMessage]:
    """Read a list of stream entries."""
    return [read_xmessage(item) for item in as_array(reply)]


class XMessageSliceCmd(BaseCmd):
    """A list of stream entries."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = read_xmessage_list(reply)


class XStreamSliceCmd(BaseCmd):
    """Entries grouped by stream, sent as a map or as [name, entries] pairs."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        if is_map(reply):
            pairs = as_map(reply)
        else:
            pairs = [as_fixed_array(item, 2) for item in as_array(reply)]
        self.val = [
            XStream(as_string(name), read_xmessage_list(messages))
            for name, messages in pairs
        ]


class XPendingCmd(BaseCmd):
    """The summary form of XPENDING."""

    def read_reply(self, reply: Any) -> None:
        count, lower, higher, consumers = as_fixed_array(reply, 4)
        pending = XPending(count=as_int(count))
        pending.lower = _nil_ok(as_string, lower, "")
        pending.higher = _nil_ok(as_string, higher, "")
        for item in _nil_ok(as_array, consumers, []):
            name, n = as_fixed_array(item, 2)
            pending.consumers[as_string(name)] = as_int(n)
        self.val = pending


class XPendingExtCmd(BaseCmd):
    """The extended form of XPENDING."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        result = []
        for item in as_array(reply):
            msg_id, consumer, idle, retries = as_fixed_array(item, 4)
            result.append(
                XPendingExt(
                    id=as_string(msg_id),
                    consumer=_nil_ok(as_string, consumer, ""),
                    idle=timedelta(milliseconds=_nil_ok(as_int, idle, 0)),
                    retry_count=_nil_ok(as_int, retries, 0),
                )
            )
        self.val = result


def _auto_claim_parts(reply: Any, kind: str) -> list:
    items = as_array(reply)
    if len(items) not in (2, 3):
        raise ValueError(f"redis: got {len(items)} elements in {kind} reply, wanted 2/3")
    return items


class XAutoClaimCmd(BaseCmd):
    """XAUTOCLAIM; ``result()`` gives ``(messages, start)``."""

    start: str = ""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        items = _auto_claim_parts(reply, "XAutoClaim")
        self.start = as_string(items[0])
        self.val = read_xmessage_list(items[1])

    def result(self) -> tuple[list[XMessage], str]:
        messages = self._checked()
        return messages, self.start


class XAutoClaimJustIDCmd(BaseCmd):
    """XAUTOCLAIM ... JUSTID; ``result()`` gives ``(ids, start)``."""

    start: str = ""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        items = _auto_claim_parts(reply, "XAutoClaimJustID")
        self.start = as_string(items[0])
        self.val = [as_string(item) for item in as_array(items[1])]

    def result(self) -> tuple[list[str], str]:
        ids = self._checked()
        return ids, self.start


class XInfoConsumersCmd(BaseCmd):
    """XINFO CONSUMERS for a stream and group."""

    def __init__(self, stream: str, group: str) -> None:
        super().__init__("xinfo", "consumers", stream, group)

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        result = []
        for item in as_array(reply):
            consumer = XInfoConsumer()
            for k, v in as_map(item):
                key = as_string(k)
                if key == "name":
                    consumer.name = as_string(v)
                elif key == "pending":
                    consumer.pending = as_int(v)
                elif key == "idle":
                    consumer.idle = timedelta(milliseconds=as_int(v))
                elif key == "inactive":
                    consumer.inactive = timedelta(milliseconds=as_int(v))
                else:
                    raise ValueError(
                        f"redis: unexpected content {key} in XINFO CONSUMERS reply"
                    )
            result.append(consumer)
        self.val = result


class XInfoGroupsCmd(BaseCmd):
    """XINFO GROUPS for a stream."""

    def __init__(self, stream: str) -> None:
        super().__init__("xinfo", "groups", stream)

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        result = []
        for item in as_array(reply):
            group = XInfoGroup()
            for k, v in as_map(item):
                key = as_string(k)
                if key == "name":
                    group.name = as_string(v)
                elif key == "consumers":
                    group.consumers = as_int(v)
                elif key == "pending":
                    group.pending = as_int(v)
                elif key == "last-delivered-id":
                    group.last_delivered_id = as_string(v)
                elif key == "entries-read":
                    group.entries_read = _nil_ok(as_int, v, 0)
                elif key == "lag":
                    # nil when the lag cannot be determined
                    group.lag = _nil_ok(as_int, v, 0)
                else:
                    raise ValueError(f'redis: unexpected key "{key}" in XINFO GROUPS reply')
            result.append(group)
        self.val = result


class XInfoStreamCmd(BaseCmd):
    """XINFO STREAM for a stream."""

    def __init__(self, stream: str) -> None:
        super().__init__("xinfo", "stream", stream)

    def read_reply(self, reply: Any) -> None:
        info = XInfoStream()
        for k, v in as_map(reply):
            key = as_string(k)
            if key == "length":
                info.length = as_int(v)
            elif key == "radix-tree-keys":
                info.radix_tree_keys = as_int(v)
            elif key == "radix-tree-nodes":
                info.radix_tree_nodes = as_int(v)
            elif key == "groups":
                info.groups = as_int(v)
            elif key == "last-generated-id":
                info.last_generated_id = as_string(v)
            elif key == "max-deleted-entry-id":
                info.max_deleted_entry_id = as_string(v)
            elif key == "entries-added":
                info.entries_added = as_int(v)
            elif key == "first-entry":
                info.first_entry = _nil_ok(read_xmessage, v, XMessage())
            elif key == "last-entry":
                info.last_entry = _nil_ok(read_xmessage, v, XMessage())
            elif key == "recorded-first-entry-id":
                info.recorded_first_entry_id = as_string(v)
            else:
                raise ValueError(f'redis: unexpected key "{key}" in XINFO STREAM reply')
        self.val = info


def _read_group_pending(reply: Any) -> list[XInfoStreamGroupPending]:
    result = []
    for item in as_array(reply):
        msg_id, consumer, delivery, count = as_fixed_array(item, 4)
        result.append(
            XInfoStreamGroupPending(
                id=as_string(msg_id),
                consumer=as_string(consumer),
                delivery_time=_from_millis(as_int(delivery)),
                delivery_count=as_int(count),
            )
        )
    return result


def _read_consumer_pending(reply: Any) -> list[XInfoStreamConsumerPending]:
    result = []
    for item in as_array(reply):
        msg_id, delivery, count = as_fixed_array(item, 3)
        result.append(
            XInfoStreamConsumerPending(
                id=as_string(msg_id),
                delivery_time=_from_millis(as_int(delivery)),
                delivery_count=as_int(count),
            )
        )
    return result


def _read_stream_consumers(reply: Any) -> list[XInfoStreamConsumer]:
    result = []
    for item in as_array(reply):
        consumer = XInfoStreamConsumer()
        for k, v in as_map(item):
            key = as_string(k)
            if key == "name":
                consumer.name = as_string(v)
            elif key == "seen-time":
                consumer.seen_time = _from_millis(as_int(v))
            elif key == "active-time":
                consumer.active_time = _from_millis(as_int(v))
            elif key == "pel-count":
                consumer.pel_count = as_int(v)
            elif key == "pending":
                consumer.pending = _read_consumer_pending(v)
            else:
                raise ValueError(
                    f"redis: unexpected content {key} in XINFO STREAM FULL reply"
                )
        result.append(consumer)
    return result


def _read_stream_groups(reply: Any) -> list[XInfoStreamGroup]:
    result = []
    for item in as_array(reply):
        group = XInfoStreamGroup()
        for k, v in as_map(item):
            key = as_string(k)
            if key == "name":
                group.name = as_string(v)
            elif key == "last-delivered-id":
                group.last_delivered_id = as_string(v)
            elif key == "entries-read":
                group.entries_read = _nil_ok(as_int, v, 0)
            elif key == "lag":
                group.lag = _nil_ok(as_int, v, 0)
            elif key == "pel-count":
                group.pel_count = as_int(v)
            elif key == "pending":
                group.pending = _read_group_pending(v)
            elif key == "consumers":
                group.consumers = _read_stream_consumers(v)
            else:
                raise ValueError(
                    f'redis: unexpected key "{key}" in XINFO STREAM FULL reply'
                )
        result.append(group)
    return result


class XInfoStreamFullCmd(BaseCmd):
    """XINFO STREAM ... FULL."""

    def read_reply(self, reply: Any) -> None:
        info = XInfoStreamFull()
        for k, v in as_map(reply):
            key = as_string(k)
            if key == "length":
                info.length = as_int(v)
            elif key == "radix-tree-keys":
                info.radix_tree_keys = as_int(v)
            elif key == "radix-tree-nodes":
                info.radix_tree_nodes = as_int(v)
            elif key == "last-generated-id":
                info.last_generated_id = as_string(v)
            elif key == "entries-added":
                info.entries_added = as_int(v)
            elif key == "entries":
                info.entries = read_xmessage_list(v)
            elif key == "groups":
                info.groups = _read_stream_groups(v)
            elif key == "max-deleted-entry-id":
                info.max_deleted_entry_id = as_string(v)
            elif key == "recorded-first-entry-id":
                info.recorded_first_entry_id = as_string(v)
            else:
                raise ValueError(
                    f'redis: unexpected key "{key}" in XINFO STREAM FULL reply'
                )
        self.val = info