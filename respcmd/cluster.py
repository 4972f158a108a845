"""Commands whose replies describe cluster slots, links and shards."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from .command import BaseCmd
from .reply import as_array, as_int, as_map, as_string


def _join_host_port(host: str, port: str) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


@dataclass
class ClusterNode:
    """A node serving a slot range."""

    id: str = ""
    addr: str = ""
    networking_metadata: dict[str, str] | None = None


@dataclass
class ClusterSlot:
    """A slot range with the nodes that serve it."""

    start: int = 0
    end: int = 0
    nodes: list[ClusterNode] = field(default_factory=list)


@dataclass
class ClusterLink:
    """A link between this node and a peer of the cluster bus."""

    direction: str = ""
    node: str = ""
    create_time: int = 0
    events: str = ""
    send_buffer_allocated: int = 0
    send_buffer_used: int = 0


@dataclass
class SlotRange:
    """An inclusive range of hash slots."""

    start: int = 0
    end: int = 0


@dataclass
class Node:
    """A node of a cluster shard."""

    id: str = ""
    endpoint: str = ""
    ip: str = ""
    hostname: str = ""
    port: int = 0
    tls_port: int = 0
    role: str = ""
    replication_offset: int = 0
    health: str = ""


@dataclass
class ClusterShard:
    """A shard: the slots it owns and its nodes."""

    slots: list[SlotRange] = field(default_factory=list)
    nodes: list[Node] = field(default_factory=list)


def _read_cluster_node(reply: Any) -> ClusterNode:
    fields = as_array(reply)
    if not 2 <= len(fields) <= 4:
        raise ValueError(
            f"got {len(fields)} elements in cluster info address, expected 2, 3, or 4"
        )
    node = ClusterNode(addr=_join_host_port(as_string(fields[0]), as_string(fields[1])))
    if len(fields) >= 3:
        node.id = as_string(fields[2])
    if len(fields) >= 4:
        node.networking_metadata = {
            as_string(k): as_string(v) for k, v in as_map(fields[3])
        }
    return node


class ClusterSlotsCmd(BaseCmd):
    """CLUSTER SLOTS."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        slots = []
        for item in as_array(reply):
            parts = as_array(item)
            if len(parts) < 2:
                raise ValueError(
                    f"redis: got {len(parts)} elements in cluster info, expected at least 2"
                )
            slots.append(
                ClusterSlot(
                    start=as_int(parts[0]),
                    end=as_int(parts[1]),
                    nodes=[_read_cluster_node(p) for p in parts[2:]],
                )
            )
        self.val = slots


_LINK_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "direction": ("direction", as_string),
    "node": ("node", as_string),
    "create-time": ("create_time", as_int),
    "events": ("events", as_string),
    "send-buffer-allocated": ("send_buffer_allocated", as_int),
    "send-buffer-used": ("send_buffer_used", as_int),
}

_NODE_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "id": ("id", as_string),
    "endpoint": ("endpoint", as_string),
    "ip": ("ip", as_string),
    "hostname": ("hostname", as_string),
    "port": ("port", as_int),
    "tls-port": ("tls_port", as_int),
    "role": ("role", as_string),
    "replication-offset": ("replication_offset", as_int),
    "health": ("health", as_string),
}


def _fill(target: Any, reply: Any, table: dict, where: str) -> Any:
    for k, v in as_map(reply):
        key = as_string(k)
        try:
            attr, reader = table[key]
        except KeyError:
            raise ValueError(f'redis: unexpected key "{key}" in {where} reply') from None
        setattr(target, attr, reader(v))
    return target


class ClusterLinksCmd(BaseCmd):
    """CLUSTER LINKS."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = [
            _fill(ClusterLink(), item, _LINK_FIELDS, "CLUSTER LINKS")
            for item in as_array(reply)
        ]


def _read_slot_ranges(reply: Any) -> list[SlotRange]:
    bounds = as_array(reply)
    if len(bounds) % 2:
        raise ValueError(
            f"redis: got {len(bounds)} slot bounds in CLUSTER SHARDS reply, wanted an even number"
        )
    it = iter(bounds)
    return [SlotRange(start=as_int(start), end=as_int(end)) for start, end in zip(it, it)]


class ClusterShardsCmd(BaseCmd):
    """CLUSTER SHARDS."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        shards = []
        for item in as_array(reply):
            shard = ClusterShard()
            for k, v in as_map(item):
                key = as_string(k)
                if key == "slots":
                    shard.slots.extend(_read_slot_ranges(v))
                elif key == "nodes":
                    shard.nodes = [
                        _fill(Node(), node, _NODE_FIELDS, "CLUSTER SHARDS node")
                        for node in as_array(v)
                    ]
                else:
                    raise ValueError(f'redis: unexpected key "{key}" in CLUSTER SHARDS reply')
            shards.append(shard)
        self.val = shards