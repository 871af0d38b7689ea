from __future__ import annotations

import json
import logging
import re
from typing import List, Optional

import requests

from .errors import FetchError
from .graph import Station
from .http import create_session, get_text
from .models import StationRecord
from .sources import StationLookup

logger = logging.getLogger(__name__)

AUTOCOMPLETE_URL = "http://reiseauskunft.bahn.de/bin/ajax-getstop.exe/en"

_JSON_OBJECT = re.compile(r"\{.*\}", re.S)
_ID_FIELD = re.compile(r"@L=(\d+)@")
_NAME_FIELD = re.compile(r"@O=([^@]*)@")


def _coord(value) -> Optional[int]:
    if value in (None, ""):
        return None
    return int(value)


def parse_autocomplete(text: str) -> List[StationRecord]:
    """Parse the autocomplete endpoint's response.

    The body is JavaScript (``SLs.sls={...};SLs.showSuggestion();``) wrapping a
    JSON object whose ``suggestions`` carry the station id and name packed in an
    ``@``-separated ``id`` string.
    """
    match = _JSON_OBJECT.search(text or "")
    if match is None:
        raise FetchError("Autocomplete response holds no JSON object")
    try:
        payload = json.loads(match.group(0))
    except ValueError as e:
        raise FetchError(f"Autocomplete response is not valid JSON: {e}") from e

    records: List[StationRecord] = []
    for item in payload.get("suggestions") or []:
        packed = item.get("id") or ""
        station_id = _ID_FIELD.search(packed)
        name = _NAME_FIELD.search(packed)
        if station_id is None or name is None:
            # Addresses and points of interest come without a station id
            continue
        records.append(
            StationRecord(
                id=int(station_id.group(1)),
                name=name.group(1),
                x_coord=_coord(item.get("xcoord")),
                y_coord=_coord(item.get("ycoord")),
            )
        )
    return records


class HttpStationLookup:
    """Station lookup against the journey planner's autocomplete endpoint."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        url: str = AUTOCOMPLETE_URL,
        timeout: float = 20,
    ):
        self.session = session or create_session()
        self.url = url
        self.timeout = timeout

    def find(self, term: str) -> List[StationRecord]:
        params = {"REQ0JourneyStopsS0A": "1", "REQ0JourneyStopsS0G": str(term)}
        text = get_text(self.session, self.url, params=params, timeout=self.timeout)
        records = parse_autocomplete(text)
        logger.debug("Station lookup %r returned %d candidates", term, len(records))
        return records


def find_station(name: str, lookup: StationLookup) -> Optional[Station]:
    """The best match for ``name``, or None."""
    records = lookup.find(name)
    if not records:
        return None
    return Station.from_record(records[0], lookup)


def find_stations(name: str, lookup: StationLookup) -> List[Station]:
    return [Station.from_record(record, lookup) for record in lookup.find(name)]
