# respcmd

`respcmd` holds typed command objects for Redis. Each object keeps the
arguments of one command. It takes a reply that has already been parsed and
decodes it into the Python value that fits that command. The value can be a
string, an integer, a list or a dict. It can also be one of the dataclasses
for streams, sorted sets, geo queries, cluster state, functions, LCS matches,
the command table, slow logs, client info and the ACL log.

## What it does not do

The package does not open connections. It does not send commands, and it does
not parse the RESP wire format. You send `cmd.args` over your own connection
and parse the reply yourself. You then pass the parsed value to
`cmd.read_reply(...)`. The package also has no client object, no pooling, no
pipelining and no cluster routing.

## Installing

```
pip install respcmd
```

The package has no runtime dependencies. To run the tests:

```
pip install "respcmd[test]"
pytest
```

## Replies

`read_reply` expects a reply in these shapes:

- simple and bulk strings as `str`; `bytes` is accepted as well
- integers as `int`
- doubles as `float`
- booleans as `bool`
- arrays and sets as `list`, `tuple` or `set`
- maps as any mapping
- a null as `None`
- an error reply as a `respcmd.reply.RedisError` instance

`respcmd.reply` has helpers that read one of these values as the type you
expect:

- `as_string`, `as_int`, `as_uint`, `as_float` and `as_bool`. `as_bool` treats
  `"OK"`, `"1"` and `"true"` as true.
- `as_array` and `as_fixed_array`.
- `as_map` and `as_fixed_map`. These accept a mapping or a flat key/value
  array and return a list of pairs.
- `is_map`, which tells whether a reply is a mapping.

Each helper raises `NilError` for a null. For an error reply it raises the
`RedisError` itself. For a value of the wrong shape it raises `TypeError` or
`ValueError`.

## Example

```python
from datetime import timedelta

from respcmd.scalar import StringCmd, IntCmd, DurationCmd
from respcmd.zset import ZSliceCmd

get = StringCmd("get", "key")
get.read_reply("10")
assert get.as_int() == 10
assert str(get) == "get key: 10"

incr = IntCmd("incr", "counter")
incr.read_reply(3)
assert incr.result() == 3

ttl = DurationCmd(timedelta(seconds=1), "ttl", "key")
ttl.read_reply(30)
assert ttl.result() == timedelta(seconds=30)

zr = ZSliceCmd("zrange", "board", 0, -1, "withscores")
zr.read_reply(["alice", 1.5, "bob", 2.0])
print(zr.result())  # [Z(member='alice', score=1.5), Z(member='bob', score=2.0)]
```

## Errors

If the reply does not fit the command, `read_reply` raises. Every command has
an `err` attribute. When it is set, `result()` and the conversion methods raise
that error instead of returning the value. `str(cmd)` then shows the error in
place of the value. `respcmd.command` has helpers for a batch of commands, such
as a pipeline:

- `set_cmds_err(cmds, err)` gives `err` to every command that has no error yet.
- `cmds_first_err(cmds)` returns the first error among the commands, or `None`.

## Modules

- `respcmd.reply`: the reply helpers, `RedisError`, `NilError` and
  `format_arg`.
- `respcmd.command`: `BaseCmd` and the generic `Cmd`. `Cmd` has `text`,
  `as_int`, `as_uint64`, `as_float32`, `as_float`, `as_bool`, `as_list` and
  the `*_list` conversions. The module also has `cmd_first_key_pos`,
  `cmd_string` and the batch error helpers.
- `respcmd.scalar`: strings, statuses, integers, floats, booleans, durations
  and times, plus lists and maps of them. This module also holds
  `KeyValuesCmd`. `StringCmd` converts its value with `as_bytes`, `as_bool`,
  `as_int`, `as_uint64`, `as_float32`, `as_float` and `as_time` (RFC 3339).
- `respcmd.streams`: stream entries, pending summaries and entries,
  `XAutoClaimCmd`, `XAutoClaimJustIDCmd` and the `XINFO` commands.
- `respcmd.zset`: `Z`, `ZWithKey`, `RankScore`, the sorted-set commands and
  `ScanCmd`. `ScanCmd.result()` returns `(keys, cursor)`.
- `respcmd.geo`: `GeoRadiusQuery`, `GeoSearchQuery` and the argument builders
  for them. It also has `GeoLocationCmd`, `GeoSearchLocationCmd` and
  `GeoPosCmd`. `GeoPosCmd` gives `None` for a member that has no position.
- `respcmd.cluster`: `CLUSTER SLOTS`, `CLUSTER LINKS` and `CLUSTER SHARDS`.
- `respcmd.functions`: `FUNCTION LIST`, `FUNCTION STATS` and `LCS`. The `LCS`
  command is built from an `LCSQuery`.
- `respcmd.server`: the `COMMAND` table and `CmdsInfoCache`, which loads the
  table once. It also has the slow log, `KeyFlagsCmd`, `ClientFlags`,
  `parse_client_info` with `ClientInfoCmd`, and the ACL log.