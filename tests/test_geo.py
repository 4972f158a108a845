import pytest

from respcmd.geo import (
    GeoLocation,
    GeoLocationCmd,
    GeoPos,
    GeoPosCmd,
    GeoRadiusQuery,
    GeoSearchLocationCmd,
    GeoSearchLocationQuery,
    GeoSearchQuery,
    geo_location_args,
    geo_search_args,
    geo_search_location_args,
)
from respcmd.reply import NilError


def test_geo_location_args_default_unit():
    q = GeoRadiusQuery(radius=200)
    assert geo_location_args(q, "georadius", "Sicily", 15, 37) == [
        "georadius", "Sicily", 15, 37, 200, "km",
    ]


def test_geo_location_args_all_options():
    q = GeoRadiusQuery(
        radius=10, unit="m", with_coord=True, with_dist=True, with_geo_hash=True,
        count=5, sort="ASC", store="dst", store_dist="dd",
    )
    args = geo_location_args(q, "georadius", "k", 1, 2)
    assert args == [
        "georadius", "k", 1, 2, 10, "m", "withcoord", "withdist", "withhash",
        "count", 5, "ASC", "store", "dst", "storedist", "dd",
    ]
    assert q.with_len == 3


def test_geo_search_args_member_radius():
    q = GeoSearchQuery(member="m", radius=5)
    assert geo_search_args(q, ["geosearch", "k"]) == [
        "geosearch", "k", "frommember", "m", "byradius", 5, "km",
    ]
    assert q.radius_unit == "km"


def test_geo_search_args_lonlat_box_count_any():
    q = GeoSearchQuery(
        longitude=15, latitude=37, box_width=400, box_height=300,
        sort="DESC", count=2, count_any=True,
    )
    assert geo_search_args(q, ["geosearch", "k"]) == [
        "geosearch", "k", "fromlonlat", 15, 37, "bybox", 400, 300, "km",
        "DESC", "count", 2, "any",
    ]


def test_geo_search_location_args_flags():
    q = GeoSearchLocationQuery(member="m", radius=1, radius_unit="mi",
                               with_coord=True, with_dist=True, with_hash=True)
    args = geo_search_location_args(q, [])
    assert args[-3:] == ["withcoord", "withdist", "withhash"]
    assert args[:5] == ["frommember", "m", "byradius", 1, "mi"]


def test_geo_location_cmd_names_only():
    cmd = GeoLocationCmd(GeoRadiusQuery(radius=1), "georadius", "k", 0, 0)
    cmd.read_reply(["Palermo", b"Catania"])
    assert cmd.result() == [GeoLocation(name="Palermo"), GeoLocation(name="Catania")]


def test_geo_location_cmd_all_fields():
    q = GeoRadiusQuery(radius=1, with_coord=True, with_dist=True, with_geo_hash=True)
    cmd = GeoLocationCmd(q, "georadius", "k", 0, 0)
    cmd.read_reply([["Palermo", "190.4424", 3479099956230698, ["13.5", "38.25"]]])
    (loc,) = cmd.result()
    assert loc.name == "Palermo"
    assert loc.dist == 190.4424
    assert loc.geohash == 3479099956230698
    assert (loc.longitude, loc.latitude) == (13.5, 38.25)


def test_geo_location_cmd_wrong_item_length():
    q = GeoRadiusQuery(radius=1, with_dist=True)
    cmd = GeoLocationCmd(q, "georadius", "k", 0, 0)
    with pytest.raises(ValueError):
        cmd.read_reply([["Palermo", "1.0", "extra"]])


def test_geo_search_location_cmd():
    opt = GeoSearchLocationQuery(member="m", radius=1, with_coord=True)
    cmd = GeoSearchLocationCmd(opt, "geosearch", "k")
    cmd.read_reply([["a", ["1.5", "2.5"]], ["b", ["3", "4"]]])
    assert cmd.result() == [
        GeoLocation(name="a", longitude=1.5, latitude=2.5),
        GeoLocation(name="b", longitude=3.0, latitude=4.0),
    ]
    assert cmd.args == ["geosearch", "k"]


def test_geo_pos_with_missing_member():
    cmd = GeoPosCmd("geopos", "k", "a", "missing")
    cmd.read_reply([["13.5", "38.25"], None])
    assert cmd.result() == [GeoPos(13.5, 38.25), None]


def test_geo_pos_nil_reply_raises():
    cmd = GeoPosCmd("geopos", "k")
    with pytest.raises(NilError):
        cmd.read_reply(None)