from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class StationRecord(BaseModel):
    id: int
    name: str
    x_coord: Optional[int] = None  # WGS84 longitude, 10^-6 degrees
    y_coord: Optional[int] = None  # WGS84 latitude, 10^-6 degrees


class BoardRow(BaseModel):
    """One row of a station's departure board."""

    service_link: str
    service_name: str
    destination_id: int
    destination_name: str
    destination_time: str
    route_text: List[str] = Field(default_factory=list)
    departure_time: str
    platform: Optional[str] = None  # None when the board has no platform column


class ServiceRow(BaseModel):
    """One row of a service's timetable."""

    station_id: int
    station_name: str
    arrival: str = ""
    departure: str = ""
    platform: str = ""


class Remark(BaseModel):
    heading: str
    items: List[str] = Field(default_factory=list)


class ServicePage(BaseModel):
    rows: List[ServiceRow]
    remarks: List[Remark] = Field(default_factory=list)


class TimetableDump(BaseModel):
    """Board rows keyed by station id then hour, and service pages keyed by path."""

    boards: Dict[int, Dict[int, List[BoardRow]]] = Field(default_factory=dict)
    services: Dict[str, ServicePage] = Field(default_factory=dict)
