from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Protocol, Sequence

from pydantic import ValidationError

from .errors import FetchError
from .models import BoardRow, ServicePage, StationRecord, TimetableDump

logger = logging.getLogger(__name__)


class TimetableSource(Protocol):
    def departure_rows(self, station_id: int, hour: int, products_filter: str) -> Sequence[BoardRow]:
        """Rows of the departure board for one hour-long window starting at ``hour``."""
        ...

    def service_page(self, path: str) -> ServicePage:
        ...


class StationLookup(Protocol):
    def find(self, term: str) -> Sequence[StationRecord]:
        """Candidate stations for an id or free-text name, best match first."""
        ...


class JsonTimetableSource:
    """Timetable source backed by a JSON dump of already-parsed pages.

    The dump holds one snapshot per station and hour, so ``products_filter``
    is not applied here.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Timetable data not found: {self.path}")
        with self.path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        try:
            self.dump = TimetableDump.model_validate(raw)
        except ValidationError as e:
            raise FetchError(f"Invalid timetable data in {self.path}: {e}") from e

    def departure_rows(self, station_id: int, hour: int, products_filter: str) -> List[BoardRow]:
        logger.debug("Board rows station=%s hour=%d filter=%s", station_id, hour, products_filter)
        return list(self.dump.boards.get(int(station_id), {}).get(hour, []))

    def service_page(self, path: str) -> ServicePage:
        logger.debug("Service page %s", path)
        try:
            return self.dump.services[path]
        except KeyError as e:
            raise FetchError(f"No service page for {path}") from e
