"""Stations, services and stops, filled in lazily from the timetable source.

A ``Stop`` seen on a departure board knows only some of its fields. Reading a
missing one fetches the full timetable of its ``Service`` (once) and copies the
rest from the matching stop there. Lazy fields distinguish "not looked up yet"
(``UNRESOLVED``) from "has no value" (``ABSENT``); see ``bahn_timetable.lazy``.

None of these classes are safe to share between threads while unresolved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple

from .clock import ClockTime
from .errors import ConsistencyError, FetchError, StationNotFoundError, StopNotFoundError
from .fingerprint import Fingerprint, fingerprint, service_hash, stop_signature
from .lazy import ABSENT, UNRESOLVED, Lazy, ResolveGuard, absent_if_none, is_known, value_or_none
from .models import Remark, ServicePage, ServiceRow, StationRecord
from .rollover import RolloverClock

if TYPE_CHECKING:
    from .board import DepartureBoard
    from .sources import StationLookup, TimetableSource

logger = logging.getLogger(__name__)

COMMENTS_HEADING = "Comments"


def platform_value(text: Optional[str]) -> Lazy[str]:
    if text is None or not text.strip():
        return ABSENT
    return text.strip()


class Station:
    def __init__(
        self,
        id: int,
        name: str,
        x_coord: Optional[int] = None,
        y_coord: Optional[int] = None,
        lookup: Optional["StationLookup"] = None,
    ):
        self.id = int(id)
        self.lookup = lookup
        self._name: Lazy[str] = name
        self._x_coord: Lazy[int] = absent_if_none(x_coord)
        self._y_coord: Lazy[int] = absent_if_none(y_coord)
        self._guard = ResolveGuard(self)

    @classmethod
    def by_id(cls, id: int, lookup: "StationLookup") -> "Station":
        """A station known only by id; everything else is looked up on first read."""
        station = cls(id, UNRESOLVED, lookup=lookup)
        station._x_coord = station._y_coord = UNRESOLVED
        return station

    @classmethod
    def with_name(cls, id: int, name: str, lookup: Optional["StationLookup"] = None) -> "Station":
        """A station as it appears in timetable rows: id and name, coordinates looked up."""
        station = cls(id, name, lookup=lookup)
        if lookup is not None:
            station._x_coord = station._y_coord = UNRESOLVED
        return station

    @classmethod
    def from_record(cls, record: StationRecord, lookup: Optional["StationLookup"] = None) -> "Station":
        return cls(record.id, record.name, record.x_coord, record.y_coord, lookup=lookup)

    @property
    def name(self) -> str:
        return self._resolved("_name")

    @property
    def x_coord(self) -> Optional[int]:
        """WGS84 longitude in units of 10^-6 degrees."""
        return self._resolved("_x_coord")

    @property
    def y_coord(self) -> Optional[int]:
        """WGS84 latitude in units of 10^-6 degrees."""
        return self._resolved("_y_coord")

    def departures(
        self,
        source: "TimetableSource",
        include=None,
        exclude=None,
    ) -> "DepartureBoard":
        """All stops made at this station over the day, optionally filtered by transport type."""
        from .board import DepartureBoard

        return DepartureBoard(self, source, include=include, exclude=exclude)

    def _resolved(self, attr: str):
        if getattr(self, attr) is UNRESOLVED:
            self._fetch()
        return value_or_none(getattr(self, attr))

    def _fetch(self) -> None:
        if self.lookup is None:
            raise StationNotFoundError(self.id)
        with self._guard("station"):
            logger.debug("Looking up station %s", self.id)
            records = self.lookup.find(str(self.id))
            record = next((r for r in records if r.id == self.id), None)
            if record is None:
                raise StationNotFoundError(self.id)
            self._populate(record)

    def _populate(self, record: StationRecord) -> None:
        if self._name is UNRESOLVED:
            self._name = record.name
        if self._x_coord is UNRESOLVED:
            self._x_coord = absent_if_none(record.x_coord)
        if self._y_coord is UNRESOLVED:
            self._y_coord = absent_if_none(record.y_coord)

    def __repr__(self) -> str:
        return f"<Station id={self.id} name={self._name!r}>"


@dataclass(frozen=True)
class EndpointInfo:
    """What a departure board tells about one end of a service."""

    station: Station
    time: ClockTime
    platform: Lazy[str] = UNRESOLVED


class Service:
    """A scheduled run at a time of day, not tied to any calendar date.

    Daily or seasonal variations of a run are separate services, even when
    they share a name.
    """

    def __init__(
        self,
        path: Optional[str],
        source: Optional["TimetableSource"],
        name: Optional[str] = None,
        lookup: Optional["StationLookup"] = None,
    ):
        self.path = path
        self.name = name
        self.lookup = lookup
        self._source = source
        self._stops: Optional[Tuple["Stop", ...]] = None
        self._features: Optional[List[str]] = None
        self._origin: Optional[Stop] = None
        self._destination: Optional[Stop] = None
        self._guard = ResolveGuard(self)

    @classmethod
    def with_endpoints(
        cls,
        path: str,
        source: "TimetableSource",
        name: Optional[str] = None,
        origin: Optional[EndpointInfo] = None,
        destination: Optional[EndpointInfo] = None,
        lookup: Optional["StationLookup"] = None,
    ) -> "Service":
        service = cls(path, source, name=name, lookup=lookup)
        if origin is not None:
            service._origin = Stop(
                origin.station,
                service,
                arrival_time=ABSENT,
                departure_time=origin.time,
                platform=origin.platform,
                arrival_time_from_origin=ABSENT,
                departure_time_from_origin=0,
                arrival_time_to_destination=ABSENT,
            )
        if destination is not None:
            service._destination = Stop(
                destination.station,
                service,
                arrival_time=destination.time,
                departure_time=ABSENT,
                platform=destination.platform,
                departure_time_from_origin=ABSENT,
                arrival_time_to_destination=0,
                departure_time_to_destination=ABSENT,
            )
        return service

    @classmethod
    def from_page(
        cls,
        page: ServicePage,
        path: Optional[str] = None,
        name: Optional[str] = None,
        lookup: Optional["StationLookup"] = None,
    ) -> "Service":
        service = cls(path, None, name=name, lookup=lookup)
        service._load(page)
        return service

    @classmethod
    def from_rows(cls, rows: Iterable[ServiceRow], **kwargs) -> "Service":
        return cls.from_page(ServicePage(rows=list(rows)), **kwargs)

    @property
    def stops(self) -> Tuple["Stop", ...]:
        if self._stops is None:
            self._fetch()
        return self._stops

    @property
    def origin(self) -> "Stop":
        if self._origin is None:
            self._origin = self._endpoint(0)
        return self._origin

    @property
    def destination(self) -> "Stop":
        if self._destination is None:
            self._destination = self._endpoint(-1)
        return self._destination

    @property
    def features(self) -> List[str]:
        """Remarks listed under "Comments", e.g. "Sleeping-car"; free-form text."""
        if self._features is None:
            self._fetch()
        return self._features

    def fingerprint(self) -> Fingerprint:
        return fingerprint(self)

    def _endpoint(self, index: int) -> "Stop":
        stops = self.stops
        if not stops:
            raise ConsistencyError(f"Service {self.path} has no stops")
        return stops[index]

    def _fetch(self) -> None:
        if self._source is None:
            raise FetchError(f"No timetable source for service {self.path}")
        with self._guard("stops"):
            logger.debug("Fetching service %s", self.path)
            self._load(self._source.service_page(self.path))

    def _load(self, page: ServicePage) -> None:
        self._stops = tuple(build_stops(self, page.rows, self.lookup))
        self._features = extract_features(page.remarks)

    def __hash__(self) -> int:
        return service_hash(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Service):
            return NotImplemented
        if other is self:
            return True
        return [stop_signature(s) for s in self.stops] == [stop_signature(s) for s in other.stops]

    def __repr__(self) -> str:
        return f"<Service name={self.name!r} origin={self._origin!r} destination={self._destination!r}>"


_DETAIL_FIELDS = (
    "_arrival_time",
    "_departure_time",
    "_platform",
    "_arrival_time_from_origin",
    "_departure_time_from_origin",
)


class Stop:
    """A stop made at a Station by a Service."""

    def __init__(
        self,
        station: Station,
        service: Service,
        *,
        arrival_time: Lazy[ClockTime] = UNRESOLVED,
        departure_time: Lazy[ClockTime] = UNRESOLVED,
        platform: Lazy[str] = UNRESOLVED,
        arrival_time_from_origin: Lazy[int] = UNRESOLVED,
        departure_time_from_origin: Lazy[int] = UNRESOLVED,
        arrival_time_to_destination: Lazy[int] = UNRESOLVED,
        departure_time_to_destination: Lazy[int] = UNRESOLVED,
        inferred_time_to_destination: Optional[int] = None,
    ):
        if not isinstance(arrival_time, ClockTime) and not isinstance(departure_time, ClockTime):
            raise ValueError("A stop needs an arrival time or a departure time")
        self.station = station
        self.service = service
        self._arrival_time = arrival_time
        self._departure_time = departure_time
        self._platform = platform
        self._arrival_time_from_origin = arrival_time_from_origin
        self._departure_time_from_origin = departure_time_from_origin
        self._arrival_time_to_destination = arrival_time_to_destination
        self._departure_time_to_destination = departure_time_to_destination
        self._inferred_time_to_destination = inferred_time_to_destination
        self._guard = ResolveGuard(self)

    @property
    def name(self) -> str:
        return self.station.name

    @property
    def origin(self) -> "Stop":
        return self.service.origin

    @property
    def destination(self) -> "Stop":
        return self.service.destination

    @property
    def platform(self) -> Optional[str]:
        return self._detail("_platform")

    @property
    def arrival_time(self) -> Optional[ClockTime]:
        """None at the origin, or where the stop is for boarding only."""
        return self._detail("_arrival_time")

    @property
    def departure_time(self) -> Optional[ClockTime]:
        """None at the destination, or where the stop is for alighting only."""
        return self._detail("_departure_time")

    @property
    def arrival_time_from_origin(self) -> Optional[int]:
        return self._detail("_arrival_time_from_origin")

    @property
    def departure_time_from_origin(self) -> Optional[int]:
        return self._detail("_departure_time_from_origin")

    @property
    def arrival_time_to_destination(self) -> Optional[int]:
        if self._arrival_time_to_destination is UNRESOLVED:
            self._arrival_time_to_destination = self._to_destination(self.arrival_time_from_origin)
        return value_or_none(self._arrival_time_to_destination)

    @property
    def departure_time_to_destination(self) -> Optional[int]:
        if self._departure_time_to_destination is UNRESOLVED:
            self._departure_time_to_destination = self._to_destination(self.departure_time_from_origin)
        return value_or_none(self._departure_time_to_destination)

    @property
    def inferred_time_to_destination(self) -> Optional[int]:
        """Seconds to the destination, fetching as little as possible.

        A board estimate given at construction wins; otherwise the service
        timetable is used (and fetched if needed). The board estimate can be off
        for journeys with long gaps between listed stops.
        """
        if self._inferred_time_to_destination is None:
            value = self.departure_time_to_destination
            if value is None:
                value = self.arrival_time_to_destination
            self._inferred_time_to_destination = value
        return self._inferred_time_to_destination

    def get_full_details(self) -> None:
        """Fill every unresolved field from the matching stop in the service timetable."""
        with self._guard("details"):
            if is_known(self._arrival_time):
                match = self._find_in_service("_arrival_time", self._arrival_time)
            else:
                match = self._find_in_service("_departure_time", self._departure_time)
            for attr in _DETAIL_FIELDS:
                if getattr(self, attr) is UNRESOLVED:
                    setattr(self, attr, absent_if_none(getattr(match, attr[1:])))

    def _detail(self, attr: str):
        if getattr(self, attr) is UNRESOLVED:
            self.get_full_details()
        return value_or_none(getattr(self, attr))

    def _find_in_service(self, attr: str, time: Lazy[ClockTime]) -> "Stop":
        for stop in self.service.stops:
            if stop is self:
                continue
            if stop.station.id == self.station.id and getattr(stop, attr) == time:
                return stop
        raise StopNotFoundError(self.station.id, time, self.service.path)

    def _to_destination(self, from_origin: Optional[int]) -> Lazy[int]:
        if from_origin is None:
            return ABSENT
        end = self.service.destination.arrival_time_from_origin
        if end is None:
            raise ConsistencyError(f"Destination of service {self.service.path} has no arrival time")
        return end - from_origin

    def __repr__(self) -> str:
        time = self._departure_time if isinstance(self._departure_time, ClockTime) else self._arrival_time
        return f"<Stop time={time} station={self.station!r} service={self.service.name!r}>"


def build_stops(service: Service, rows: Sequence[ServiceRow], lookup: Optional["StationLookup"] = None) -> List[Stop]:
    """Turn timetable rows into stops with elapsed times from the origin departure."""
    parsed = [
        (row, ClockTime.parse_optional(row.arrival), ClockTime.parse_optional(row.departure))
        for row in rows
    ]
    times = [t for _, arrival, departure in parsed for t in (arrival, departure) if t is not None]
    if not times:
        return []
    baseline = parsed[0][2] if parsed[0][2] is not None else times[0]
    clock = RolloverClock(baseline, anchored=False)

    stops: List[Stop] = []
    for row, arrival, departure in parsed:
        if arrival is None and departure is None:
            raise ConsistencyError(f"Row for station {row.station_id} in service {service.path} has no times")
        stops.append(
            Stop(
                Station.with_name(row.station_id, row.station_name.strip(), lookup),
                service,
                arrival_time=absent_if_none(arrival),
                departure_time=absent_if_none(departure),
                platform=platform_value(row.platform),
                arrival_time_from_origin=ABSENT if arrival is None else clock.advance(arrival),
                departure_time_from_origin=ABSENT if departure is None else clock.advance(departure),
            )
        )
    return stops


def extract_features(remarks: Iterable[Remark]) -> List[str]:
    for remark in remarks:
        if remark.heading.strip().rstrip(":") == COMMENTS_HEADING:
            return list(dict.fromkeys(item.strip() for item in remark.items))
    return []
