"""Geospatial queries, their arguments and the commands that read their replies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .command import BaseCmd
from .reply import NilError, as_array, as_fixed_array, as_float, as_int, as_string


@dataclass
class GeoLocation:
    """A named location, with distance and geohash when requested."""

    name: str = ""
    longitude: float = 0.0
    latitude: float = 0.0
    dist: float = 0.0
    geohash: int = 0


@dataclass
class GeoRadiusQuery:
    """Options of a GEORADIUS query. The unit defaults to km."""

    radius: float = 0.0
    unit: str = ""
    with_coord: bool = False
    with_dist: bool = False
    with_geo_hash: bool = False
    count: int = 0
    sort: str = ""
    store: str = ""
    store_dist: str = ""

    @property
    def with_len(self) -> int:
        """How many WITH* options are set."""
        return int(self.with_coord) + int(self.with_dist) + int(self.with_geo_hash)


@dataclass
class GeoSearchQuery:
    """Options of a GEOSEARCH query. Units default to km."""

    member: str = ""
    longitude: float = 0.0
    latitude: float = 0.0
    radius: float = 0.0
    radius_unit: str = ""
    box_width: float = 0.0
    box_height: float = 0.0
    box_unit: str = ""
    sort: str = ""
    count: int = 0
    count_any: bool = False


@dataclass
class GeoSearchLocationQuery(GeoSearchQuery):
    """A GEOSEARCH query that returns locations."""

    with_coord: bool = False
    with_dist: bool = False
    with_hash: bool = False


@dataclass
class GeoSearchStoreQuery(GeoSearchQuery):
    """A GEOSEARCHSTORE query; ``store_dist`` stores distances as scores."""

    store_dist: bool = False


@dataclass
class GeoPos:
    """A longitude/latitude position."""

    longitude: float = 0.0
    latitude: float = 0.0


def geo_location_args(q: GeoRadiusQuery, *args: Any) -> list:
    """Append the options of a radius query to the command arguments."""
    out = list(args)
    out.append(q.radius)
    out.append(q.unit or "km")
    if q.with_coord:
        out.append("withcoord")
    if q.with_dist:
        out.append("withdist")
    if q.with_geo_hash:
        out.append("withhash")
    if q.count > 0:
        out.extend(("count", q.count))
    if q.sort:
        out.append(q.sort)
    if q.store:
        out.extend(("store", q.store))
    if q.store_dist:
        out.extend(("storedist", q.store_dist))
    return out


def geo_search_args(q: GeoSearchQuery, args: Any) -> list:
    """Append the options of a search query; fills in the default units."""
    out = list(args)
    if q.member:
        out.extend(("frommember", q.member))
    else:
        out.extend(("fromlonlat", q.longitude, q.latitude))

    if q.radius > 0:
        if not q.radius_unit:
            q.radius_unit = "km"
        out.extend(("byradius", q.radius, q.radius_unit))
    else:
        if not q.box_unit:
            q.box_unit = "km"
        out.extend(("bybox", q.box_width, q.box_height, q.box_unit))

    if q.sort:
        out.append(q.sort)

    if q.count > 0:
        out.extend(("count", q.count))
        if q.count_any:
            out.append("any")
    return out


def geo_search_location_args(q: GeoSearchLocationQuery, args: Any) -> list:
    """Append the options of a location search, WITH* flags included."""
    out = geo_search_args(q, args)
    if q.with_coord:
        out.append("withcoord")
    if q.with_dist:
        out.append("withdist")
    if q.with_hash:
        out.append("withhash")
    return out


def _read_location(parts: list, with_dist: bool, with_hash: bool, with_coord: bool) -> GeoLocation:
    it = iter(parts)
    loc = GeoLocation(name=as_string(next(it)))
    if with_dist:
        loc.dist = as_float(next(it))
    if with_hash:
        loc.geohash = as_int(next(it))
    if with_coord:
        loc.longitude, loc.latitude = (as_float(x) for x in as_fixed_array(next(it), 2))
    return loc


class GeoLocationCmd(BaseCmd):
    """GEORADIUS-style command built from a :class:`GeoRadiusQuery`."""

    def __init__(self, q: GeoRadiusQuery, *args: Any) -> None:
        self.q = q
        super().__init__(*geo_location_args(q, *args))

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        q = self.q
        result = []
        for item in as_array(reply):
            if q.with_len == 0:
                result.append(GeoLocation(name=as_string(item)))
                continue
            parts = as_fixed_array(item, q.with_len + 1)
            result.append(_read_location(parts, q.with_dist, q.with_geo_hash, q.with_coord))
        self.val = result


class GeoSearchLocationCmd(BaseCmd):
    """GEOSEARCH returning locations, read according to ``opt``."""

    def __init__(self, opt: GeoSearchLocationQuery, *args: Any) -> None:
        self.opt = opt
        super().__init__(*args)

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        opt = self.opt
        self.val = [
            _read_location(as_array(item), opt.with_dist, opt.with_hash, opt.with_coord)
            for item in as_array(reply)
        ]


def _read_pos(item: Any) -> GeoPos | None:
    try:
        longitude, latitude = as_fixed_array(item, 2)
    except NilError:
        return None
    return GeoPos(longitude=as_float(longitude), latitude=as_float(latitude))


class GeoPosCmd(BaseCmd):
    """GEOPOS; members without a position give None."""

    def _zero_value(self) -> Any:
        return []

    def read_reply(self, reply: Any) -> None:
        self.val = [_read_pos(item) for item in as_array(reply)]