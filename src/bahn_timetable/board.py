from __future__ import annotations

import enum
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Union

from .clock import ClockTime
from .graph import EndpointInfo, Service, Station, Stop, platform_value
from .models import BoardRow
from .rollover import infer_elapsed
from .sources import StationLookup, TimetableSource

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


class TransportType(enum.IntFlag):
    ICE = 0x100
    IC_EC = 0x80
    IR = 0x40
    REGIONAL = 0x20
    URBAN = 0x10
    BUS = 0x08
    BOAT = 0x04
    SUBWAY = 0x02
    TRAM = 0x01


TransportSelection = Union[None, str, TransportType, Iterable[Union[str, TransportType]]]

ALL_TRANSPORT_TYPES: List[TransportType] = [
    TransportType.ICE,
    TransportType.IC_EC,
    TransportType.IR,
    TransportType.REGIONAL,
    TransportType.URBAN,
    TransportType.BUS,
    TransportType.BOAT,
    TransportType.SUBWAY,
    TransportType.TRAM,
]


def _transport_types(value: TransportSelection) -> List[TransportType]:
    if value is None:
        return []
    if isinstance(value, (str, TransportType)):
        value = [value]
    out: List[TransportType] = []
    for item in value:
        if isinstance(item, TransportType):
            out.append(item)
            continue
        try:
            out.append(TransportType[str(item).strip().upper()])
        except KeyError:
            raise ValueError(f"Unknown transport type: {item!r}") from None
    return out


def transport_mask(include: TransportSelection = None, exclude: TransportSelection = None) -> TransportType:
    """Combine included minus excluded transport types; include defaults to all."""
    included = ALL_TRANSPORT_TYPES if include is None else _transport_types(include)
    excluded = set(_transport_types(exclude))
    mask = TransportType(0)
    for transport_type in included:
        if transport_type not in excluded:
            mask |= transport_type
    return mask


def products_filter(include: TransportSelection = None, exclude: TransportSelection = None) -> str:
    """The transport mask as the 9-digit binary text the board query expects."""
    return format(int(transport_mask(include, exclude)), "09b")


def build_departure(
    station: Station,
    row: BoardRow,
    source: TimetableSource,
    lookup: Optional[StationLookup] = None,
) -> Stop:
    """A stop at ``station`` for one board row, with a minimal service behind it."""
    departure_time = ClockTime.parse(row.departure_time)
    destination_time = ClockTime.parse(row.destination_time)
    inferred = infer_elapsed(departure_time, row.route_text, destination_time)

    destination = Station.with_name(row.destination_id, row.destination_name.strip(), lookup)
    service = Service.with_endpoints(
        path=row.service_link.split("?", 1)[0],
        source=source,
        name=" ".join(row.service_name.split()),
        destination=EndpointInfo(destination, destination_time),
        lookup=lookup,
    )
    return Stop(
        station,
        service,
        departure_time=departure_time,
        platform=platform_value(row.platform),
        inferred_time_to_destination=inferred,
    )


class DepartureBoard:
    """Every departure from a station over a day, one query per hour window.

    A service near a window boundary may be listed by two windows; both rows
    are kept, in fetch order.
    """

    def __init__(
        self,
        station: Station,
        source: TimetableSource,
        include: TransportSelection = None,
        exclude: TransportSelection = None,
    ):
        self.station = station
        self.source = source
        self.products_filter = products_filter(include, exclude)
        self._pages: Dict[int, List[BoardRow]] = {}

    def rows(self, hour: int) -> List[BoardRow]:
        if hour not in self._pages:
            logger.debug(
                "Fetching departures station=%s hour=%d filter=%s",
                self.station.id,
                hour,
                self.products_filter,
            )
            self._pages[hour] = list(
                self.source.departure_rows(self.station.id, hour, self.products_filter)
            )
        return self._pages[hour]

    def __iter__(self) -> Iterator[Stop]:
        for hour in range(HOURS_PER_DAY):
            for row in self.rows(hour):
                yield build_departure(self.station, row, self.source, self.station.lookup)
