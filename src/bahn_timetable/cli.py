from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from .board import transport_mask, products_filter as build_products_filter
from .config import Settings, load_settings
from .graph import Service, Station
from .http import create_session
from .sources import JsonTimetableSource
from .stations import HttpStationLookup, find_station, find_stations

app = typer.Typer(help="Rail timetables: station lookup, departure boards and services.")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _split(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [s.strip() for s in value.split(",") if s.strip()]


def _settings(config_file: Optional[Path]) -> Settings:
    settings = load_settings(config_file)
    setup_logging(settings.log_level)
    return settings


def _lookup(settings: Settings) -> HttpStationLookup:
    session = create_session(user_agent=settings.user_agent, total_retries=settings.total_retries)
    return HttpStationLookup(session, url=settings.station_lookup_url, timeout=settings.request_timeout_seconds)


def _source(settings: Settings, data: Optional[Path]) -> JsonTimetableSource:
    path = data or settings.data_file
    if path is None:
        raise typer.BadParameter("pass --data or set data_file in the config")
    return JsonTimetableSource(path)


def _minutes(seconds: Optional[int]) -> str:
    return "?" if seconds is None else f"{seconds // 60}min"


@app.command()
def show_config(config_file: Path = typer.Option(None, help="Path to YAML config file")):
    """Print the effective configuration (YAML + env overrides)."""
    settings = load_settings(config_file)
    typer.echo(json.dumps(settings.model_dump(mode="json"), indent=2))


@app.command("find-station")
def find_station_cmd(
    name: str = typer.Argument(..., help="Station name or id"),
    all_matches: bool = typer.Option(False, "--all", help="List every candidate"),
    config_file: Path = typer.Option(None, help="Path to YAML config file"),
):
    """Look up stations by name."""
    settings = _settings(config_file)
    lookup = _lookup(settings)
    if all_matches:
        stations = find_stations(name, lookup)
    else:
        best = find_station(name, lookup)
        stations = [best] if best is not None else []
    if not stations:
        typer.echo(f"No station found for {name!r}", err=True)
        raise typer.Exit(code=1)
    for s in stations:
        typer.echo(f"{s.id}\t{s.name}\t{s.x_coord}\t{s.y_coord}")


@app.command()
def products_filter(
    include: str = typer.Option(None, help="Transport types to include (comma), default all"),
    exclude: str = typer.Option(None, help="Transport types to exclude (comma)"),
):
    """Print the transport-type bitmask for a board query."""
    try:
        mask = transport_mask(_split(include), _split(exclude))
        text = build_products_filter(_split(include), _split(exclude))
    except ValueError as e:
        raise typer.BadParameter(str(e))
    typer.echo(f"{int(mask)}\t{text}")


@app.command()
def departures(
    station_id: int = typer.Argument(..., help="Numeric station id"),
    data: Path = typer.Option(None, help="JSON timetable dump"),
    include: str = typer.Option(None, help="Transport types to include (comma)"),
    exclude: str = typer.Option(None, help="Transport types to exclude (comma)"),
    limit: int = typer.Option(50, help="Maximum rows to print"),
    json_out: bool = typer.Option(False, help="Print JSON output"),
    config_file: Path = typer.Option(None, help="Path to YAML config file"),
):
    """List departures for a station from a timetable dump."""
    settings = _settings(config_file)
    source = _source(settings, data)
    station = Station.by_id(station_id, _lookup(settings))
    try:
        board = station.departures(source, include=_split(include), exclude=_split(exclude))
    except ValueError as e:
        raise typer.BadParameter(str(e))

    rows = []
    for stop in board:
        if len(rows) >= limit:
            break
        rows.append(
            {
                "time": str(stop.departure_time),
                "service": stop.service.name,
                "destination": stop.destination.station.name,
                "platform": stop.platform,
                "time_to_destination": stop.inferred_time_to_destination,
            }
        )
    if json_out:
        typer.echo(json.dumps(rows, ensure_ascii=False, indent=2))
    else:
        typer.echo(f"Departures from {station.name}")
        for r in rows:
            typer.echo(
                f"{r['time']} {r['service'] or '?'} to {r['destination']} | "
                f"platform={r['platform'] or '-'} duration={_minutes(r['time_to_destination'])}"
            )


@app.command()
def service(
    path: str = typer.Argument(..., help="Service path as linked from a departure board"),
    data: Path = typer.Option(None, help="JSON timetable dump"),
    config_file: Path = typer.Option(None, help="Path to YAML config file"),
):
    """Print every stop of a service with elapsed times, its features and digest."""
    settings = _settings(config_file)
    svc = Service(path, _source(settings, data))
    for stop in svc.stops:
        elapsed = stop.arrival_time_from_origin
        if elapsed is None:
            elapsed = stop.departure_time_from_origin
        typer.echo(
            f"{stop.station.name}\tarr={stop.arrival_time or '-'} dep={stop.departure_time or '-'} "
            f"platform={stop.platform or '-'} +{_minutes(elapsed)}"
        )
    if svc.features:
        typer.echo("features: " + "; ".join(svc.features))
    typer.echo(f"digest: {svc.fingerprint().digest}")


if __name__ == "__main__":
    app()
