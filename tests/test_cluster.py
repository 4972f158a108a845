import pytest

from respcmd.cluster import (
    ClusterLink,
    ClusterLinksCmd,
    ClusterNode,
    ClusterShardsCmd,
    ClusterSlotsCmd,
    Node,
    SlotRange,
)
from respcmd.reply import NilError


def test_cluster_slots_reads_nodes():
    cmd = ClusterSlotsCmd("cluster", "slots")
    cmd.read_reply(
        [
            [
                0,
                5460,
                ["127.0.0.1", 7001, "id1"],
                ["127.0.0.1", "7002", "id2", {"hostname": "host-a"}],
            ]
        ]
    )
    (slot,) = cmd.result()
    assert slot.start == 0
    assert slot.end == 5460
    assert slot.nodes[0] == ClusterNode(id="id1", addr="127.0.0.1:7001")
    assert slot.nodes[1].addr == "127.0.0.1:7002"
    assert slot.nodes[1].networking_metadata == {"hostname": "host-a"}


def test_cluster_slots_address_only_node():
    cmd = ClusterSlotsCmd("cluster", "slots")
    cmd.read_reply([[1000, 1999, [b"127.0.0.1", 7001]]])
    node = cmd.result()[0].nodes[0]
    assert node.id == ""
    assert node.networking_metadata is None
    assert node.addr == "127.0.0.1:7001"


def test_cluster_slots_ipv6_host_is_bracketed():
    cmd = ClusterSlotsCmd("cluster", "slots")
    cmd.read_reply([[0, 1, ["::1", 7000]]])
    assert cmd.result()[0].nodes[0].addr == "[::1]:7000"


def test_cluster_slots_empty():
    cmd = ClusterSlotsCmd("cluster", "slots")
    cmd.read_reply([])
    assert cmd.result() == []


def test_cluster_slots_too_few_elements():
    cmd = ClusterSlotsCmd("cluster", "slots")
    with pytest.raises(ValueError, match="expected at least 2"):
        cmd.read_reply([[0]])


@pytest.mark.parametrize("node", [["127.0.0.1"], ["h", 1, "id", {}, "extra"]])
def test_cluster_slots_bad_node_length(node):
    cmd = ClusterSlotsCmd("cluster", "slots")
    with pytest.raises(ValueError, match="expected 2, 3, or 4"):
        cmd.read_reply([[0, 1, node]])


def test_cluster_slots_nil_reply():
    with pytest.raises(NilError):
        ClusterSlotsCmd("cluster", "slots").read_reply(None)


def test_cluster_slots_full_name():
    assert ClusterSlotsCmd("CLUSTER", "slots").full_name() == "cluster slots"


def test_cluster_links():
    cmd = ClusterLinksCmd("cluster", "links")
    cmd.read_reply(
        [
            {
                "direction": "to",
                "node": "node-a",
                "create-time": 1639442739375,
                "events": "rw",
                "send-buffer-allocated": 4512,
                "send-buffer-used": 0,
            }
        ]
    )
    assert cmd.result() == [
        ClusterLink(
            direction="to",
            node="node-a",
            create_time=1639442739375,
            events="rw",
            send_buffer_allocated=4512,
            send_buffer_used=0,
        )
    ]


def test_cluster_links_unknown_key():
    cmd = ClusterLinksCmd("cluster", "links")
    with pytest.raises(ValueError, match="CLUSTER LINKS"):
        cmd.read_reply([{"bogus": 1}])


def test_cluster_shards():
    cmd = ClusterShardsCmd("cluster", "shards")
    cmd.read_reply(
        [
            {
                "slots": [0, 100, 200, 300],
                "nodes": [
                    {
                        "id": "node-a",
                        "endpoint": "10.0.0.1",
                        "ip": "10.0.0.1",
                        "hostname": "host-a",
                        "port": 30001,
                        "tls-port": 0,
                        "role": "master",
                        "replication-offset": 72156,
                        "health": "online",
                    }
                ],
            }
        ]
    )
    (shard,) = cmd.result()
    assert shard.slots == [SlotRange(0, 100), SlotRange(200, 300)]
    assert shard.nodes == [
        Node(
            id="node-a",
            endpoint="10.0.0.1",
            ip="10.0.0.1",
            hostname="host-a",
            port=30001,
            tls_port=0,
            role="master",
            replication_offset=72156,
            health="online",
        )
    ]


def test_cluster_shards_flat_map_form():
    cmd = ClusterShardsCmd("cluster", "shards")
    cmd.read_reply([["slots", [5, 9], "nodes", []]])
    assert cmd.result()[0].slots == [SlotRange(5, 9)]
    assert cmd.result()[0].nodes == []


def test_cluster_shards_unknown_node_key():
    cmd = ClusterShardsCmd("cluster", "shards")
    with pytest.raises(ValueError, match="CLUSTER SHARDS node"):
        cmd.read_reply([{"nodes": [{"weird": "x"}]}])


def test_cluster_shards_unknown_key():
    cmd = ClusterShardsCmd("cluster", "shards")
    with pytest.raises(ValueError, match="CLUSTER SHARDS reply"):
        cmd.read_reply([{"weird": 1}])


def test_cluster_shards_odd_slot_bounds():
    cmd = ClusterShardsCmd("cluster", "shards")
    with pytest.raises(ValueError):
        cmd.read_reply([{"slots": [1, 2, 3]}])