from datetime import timedelta

import pytest

from respcmd.reply import NilError, RedisError
from respcmd.streams import (
    XAutoClaimCmd,
    XAutoClaimJustIDCmd,
    XInfoConsumer,
    XInfoConsumersCmd,
    XInfoGroupsCmd,
    XInfoStreamCmd,
    XInfoStreamFullCmd,
    XMessage,
    XMessageSliceCmd,
    XPendingCmd,
    XPendingExtCmd,
    XStream,
    XStreamSliceCmd,
    read_xmessage,
    read_xmessage_list,
)


def test_read_xmessage_flat_fields():
    msg = read_xmessage(["1-0", ["a", "1", "b", "2"]])
    assert msg == XMessage("1-0", {"a": "1", "b": "2"})


def test_read_xmessage_map_fields_and_bytes():
    msg = read_xmessage([b"2-0", {b"k": b"v"}])
    assert msg.id == "2-0"
    assert msg.values == {"k": "v"}


def test_read_xmessage_nil_fields():
    msg = read_xmessage(["3-0", None])
    assert msg.values == {}


def test_read_xmessage_wrong_length():
    with pytest.raises(ValueError):
        read_xmessage(["1-0"])


def test_read_xmessage_list_preserves_order():
    reply = [["1-0", ["a", "x"]], ["2-0", ["b", "y"]]]
    msgs = read_xmessage_list(reply)
    assert [m.id for m in msgs] == ["1-0", "2-0"]


def test_xmessage_slice_cmd():
    cmd = XMessageSliceCmd("xrange", "s", "-", "+")
    cmd.read_reply([["1-0", ["f", "v"]]])
    assert cmd.result() == [XMessage("1-0", {"f": "v"})]


def test_xstream_slice_array_and_map_forms_agree():
    entries = [["1-0", ["f", "v"]]]
    as_array = XStreamSliceCmd("xread")
    as_array.read_reply([["s1", entries]])
    as_map = XStreamSliceCmd("xread")
    as_map.read_reply({"s1": entries})
    assert as_array.result() == as_map.result()
    assert as_array.result() == [XStream("s1", [XMessage("1-0", {"f": "v"})])]


def test_xpending_summary():
    cmd = XPendingCmd("xpending", "s", "g")
    cmd.read_reply([2, "1-0", "2-0", [["alice", "2"]]])
    pending = cmd.result()
    assert pending.count == 2
    assert (pending.lower, pending.higher) == ("1-0", "2-0")
    assert pending.consumers == {"alice": 2}


def test_xpending_summary_with_nils():
    cmd = XPendingCmd("xpending", "s", "g")
    cmd.read_reply([0, None, None, None])
    pending = cmd.result()
    assert (pending.lower, pending.higher, pending.consumers) == ("", "", {})


def test_xpending_ext():
    cmd = XPendingExtCmd("xpending", "s", "g", "-", "+", 10)
    cmd.read_reply([["1-0", "bob", 1500, 3]])
    (entry,) = cmd.result()
    assert entry.id == "1-0"
    assert entry.consumer == "bob"
    assert entry.idle == timedelta(milliseconds=1500)
    assert entry.retry_count == 3


def test_xautoclaim_two_and_three_elements():
    two = XAutoClaimCmd("xautoclaim")
    two.read_reply(["0-0", [["1-0", ["f", "v"]]]])
    three = XAutoClaimCmd("xautoclaim")
    three.read_reply(["0-0", [["1-0", ["f", "v"]]], []])
    assert two.result() == three.result()
    messages, start = two.result()
    assert start == "0-0"
    assert messages == [XMessage("1-0", {"f": "v"})]


def test_xautoclaim_bad_length():
    cmd = XAutoClaimCmd("xautoclaim")
    with pytest.raises(ValueError, match="wanted 2/3"):
        cmd.read_reply(["0-0"])


def test_xautoclaim_justid():
    cmd = XAutoClaimJustIDCmd("xautoclaim")
    cmd.read_reply(["5-0", ["1-0", "2-0"], []])
    assert cmd.result() == (["1-0", "2-0"], "5-0")
    with pytest.raises(ValueError, match="XAutoClaimJustID"):
        cmd.read_reply(["5-0", [], [], []])


def test_xinfo_consumers_args_and_reply():
    cmd = XInfoConsumersCmd("s", "g")
    assert cmd.args == ["xinfo", "consumers", "s", "g"]
    cmd.read_reply([{"name": "c", "pending": 1, "idle": 20, "inactive": 30}])
    assert cmd.result() == [
        XInfoConsumer("c", 1, timedelta(milliseconds=20), timedelta(milliseconds=30))
    ]


def test_xinfo_consumers_unexpected_key():
    cmd = XInfoConsumersCmd("s", "g")
    with pytest.raises(ValueError, match="XINFO CONSUMERS"):
        cmd.read_reply([{"bogus": 1}])


def test_xinfo_groups_with_nil_lag():
    cmd = XInfoGroupsCmd("s")
    assert cmd.args == ["xinfo", "groups", "s"]
    cmd.read_reply(
        [
            [
                "name", "g", "consumers", 1, "pending", 2,
                "last-delivered-id", "1-0", "entries-read", None, "lag", None,
            ]
        ]
    )
    (group,) = cmd.result()
    assert group.name == "g"
    assert group.last_delivered_id == "1-0"
    assert (group.entries_read, group.lag) == (0, 0)


def test_xinfo_groups_unexpected_key():
    cmd = XInfoGroupsCmd("s")
    with pytest.raises(ValueError, match="XINFO GROUPS"):
        cmd.read_reply([{"nope": "x"}])


def test_xinfo_stream_nil_entries():
    cmd = XInfoStreamCmd("s")
    cmd.read_reply(
        {
            "length": 1,
            "groups": 0,
            "last-generated-id": "1-0",
            "first-entry": ["1-0", ["f", "v"]],
            "last-entry": None,
        }
    )
    info = cmd.result()
    assert info.length == 1
    assert info.first_entry == XMessage("1-0", {"f": "v"})
    assert info.last_entry == XMessage()


def test_xinfo_stream_unexpected_key():
    cmd = XInfoStreamCmd("s")
    with pytest.raises(ValueError, match="XINFO STREAM"):
        cmd.read_reply({"mystery": 1})


def test_xinfo_stream_full():
    delivery_ms = 1_600_000_000_123
    cmd = XInfoStreamFullCmd("xinfo", "stream", "s", "full")
    cmd.read_reply(
        {
            "length": 1,
            "entries": [["1-0", ["f", "v"]]],
            "groups": [
                {
                    "name": "g",
                    "lag": None,
                    "pel-count": 1,
                    "pending": [["1-0", "c", delivery_ms, 1]],
                    "consumers": [
                        {
                            "name": "c",
                            "seen-time": delivery_ms,
                            "active-time": delivery_ms,
                            "pel-count": 1,
                            "pending": [["1-0", delivery_ms, 1]],
                        }
                    ],
                }
            ],
        }
    )
    info = cmd.result()
    assert info.entries == [XMessage("1-0", {"f": "v"})]
    (group,) = info.groups
    assert group.lag == 0
    assert group.pending[0].consumer == "c"
    assert round(group.pending[0].delivery_time.timestamp() * 1000) == delivery_ms
    consumer = group.consumers[0]
    assert consumer.seen_time == group.pending[0].delivery_time
    assert consumer.pending[0].delivery_count == 1


def test_xinfo_stream_full_bad_pending_length():
    cmd = XInfoStreamFullCmd("xinfo", "stream", "s", "full")
    with pytest.raises(ValueError):
        cmd.read_reply({"groups": [{"pending": [["1-0", "c"]]}]})


def test_nil_reply_raises():
    cmd = XMessageSliceCmd("xrange", "s")
    with pytest.raises(NilError):
        cmd.read_reply(None)


def test_error_is_reported_in_string_and_result():
    cmd = XInfoGroupsCmd("s")
    cmd.err = RedisError("boom")
    assert str(cmd) == "xinfo groups s: boom"
    with pytest.raises(RedisError, match="boom"):
        cmd.result()