"""Content-derived identity for services.

The timetable source exposes no stable service id, so two services are the
same run when they call at the same stations at the same times, in order.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from .clock import ClockTime
    from .graph import Service, Stop

StopSignature = Tuple[int, Optional["ClockTime"], Optional["ClockTime"]]


@dataclass(frozen=True)
class Fingerprint:
    hash: int
    digest: str


def stop_signature(stop: "Stop") -> StopSignature:
    # Different services at one station at one time share a signature,
    # so this only identifies a stop within its service.
    return (stop.station.id, stop.departure_time, stop.arrival_time)


def digest_element(stop: "Stop") -> str:
    departure = stop.departure_time
    arrival = stop.arrival_time
    return f"[{stop.station.id},{departure or ''},{arrival or ''}]"


def service_hash(service: "Service") -> int:
    return hash(tuple(stop_signature(stop) for stop in service.stops))


def service_digest(service: "Service") -> str:
    """SHA-1 over the stop list; stable across processes, unlike ``service_hash``."""
    text = "".join(digest_element(stop) for stop in service.stops)
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def fingerprint(service: "Service") -> Fingerprint:
    return Fingerprint(hash=service_hash(service), digest=service_digest(service))
