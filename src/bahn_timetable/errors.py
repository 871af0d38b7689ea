from __future__ import annotations


class TimetableError(Exception):
    """Base class for timetable errors."""


class FormatError(TimetableError, ValueError):
    """Time-of-day text that is not ``hh:mm``."""


class ConsistencyError(TimetableError):
    """Data from the source contradicts itself."""


class StopNotFoundError(ConsistencyError):
    def __init__(self, station_id: int, time: object, path: object = None):
        self.station_id = station_id
        self.time = time
        self.path = path
        super().__init__(f"Stop at station {station_id} ({time}) not found in service {path}")


class ResolutionCycleError(ConsistencyError):
    """A lazy field was read while it was being resolved."""


class StationNotFoundError(TimetableError, LookupError):
    def __init__(self, term: object):
        self.term = term
        super().__init__(f"No station found for {term!r}")


class FetchError(TimetableError):
    """An external collaborator could not produce data."""
