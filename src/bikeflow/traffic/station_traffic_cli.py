"""CLI for station traffic around a time of day."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Sequence

import pandas as pd
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from bikeflow.sources import TripColumns, load_stations, load_trips
from bikeflow.traffic.domain_types import MINUTES_PER_DAY, as_time_filter
from bikeflow.traffic.traffic_aggregator import TrafficSnapshot
from bikeflow.traffic.traffic_config import TrafficConfig
from bikeflow.traffic.traffic_service import StationTrafficService

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML config; command-line flags override its values.",
    )
    parser.add_argument("--stations", default=None, help="GBFS station_information JSON.")
    parser.add_argument("--trips", default=None, help="Trips CSV export.")
    parser.add_argument(
        "--time",
        default="any",
        help="Centre of the window as HH:MM or minute of day; 'any' or -1 for the whole day.",
    )
    parser.add_argument(
        "--half-width",
        type=int,
        default=None,
        help="Half width of the circular window in minutes (default 60).",
    )
    parser.add_argument(
        "--timeline-step",
        type=int,
        default=None,
        help="Sweep the whole day every N minutes instead of a single query.",
    )
    parser.add_argument("--output-csv", default=None, help="Destination CSV for the results.")
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of busiest stations to print for a single query.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Verbosity for the CLI logger.",
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)
    config = _resolve_config(args)
    if config.stations_path is None or config.trips_path is None:
        raise SystemExit("Both a stations JSON and a trips CSV are required (--stations/--trips or --config).")

    try:
        time_filter = as_time_filter(args.time)
        stations = load_stations(config.stations_path, id_field=config.station_id_field)
        trips = load_trips(
            config.trips_path,
            columns=TripColumns.from_mapping(config.trip_columns),
            timestamp_format=config.timestamp_format,
        )
        service = StationTrafficService(stations, trips, half_width=config.half_width_minutes)
    except (FileNotFoundError, TypeError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    console = Console()
    if args.timeline_step is not None:
        try:
            dataframe = _build_timeline_with_progress(service, args.timeline_step)
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc
        console.print(
            f"Timeline: {len(dataframe)} rows, {service.index.trip_count} trips indexed, "
            f"{service.skipped_count} skipped."
        )
    else:
        snapshot = service.compute(time_filter)
        console.print(_render_top_stations(snapshot, args.top, service.skipped_count))
        dataframe = snapshot.to_dataframe()

    if args.output_csv:
        _write_csv(args.output_csv, dataframe)
        logger.info("Wrote %d rows to %s", len(dataframe), args.output_csv)


def _resolve_config(args: argparse.Namespace) -> TrafficConfig:
    try:
        config = TrafficConfig.from_yaml(args.config) if args.config else TrafficConfig()
        overrides = {}
        if args.stations:
            overrides["stations_path"] = Path(args.stations)
        if args.trips:
            overrides["trips_path"] = Path(args.trips)
        if args.half_width is not None:
            overrides["half_width_minutes"] = args.half_width
        if overrides:
            config = replace(config, **overrides)
    except (FileNotFoundError, TypeError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc
    return config


def _render_top_stations(snapshot: TrafficSnapshot, top_n: int, skipped: int) -> Table:
    table = Table(
        title=f"Station traffic at {snapshot.label}",
        caption=(
            f"{snapshot.departure_trip_count} departures, {snapshot.arrival_trip_count} arrivals in window; "
            f"{skipped} trips skipped"
        ),
    )
    table.add_column("Station")
    table.add_column("Name")
    table.add_column("Departures", justify="right")
    table.add_column("Arrivals", justify="right")
    table.add_column("Total", justify="right")
    ranked = sorted(snapshot.stations, key=lambda row: row.total_traffic, reverse=True)
    for row in ranked[: max(int(top_n), 0)]:
        table.add_row(
            row.short_id,
            row.station.name or "",
            str(row.departures),
            str(row.arrivals),
            str(row.total_traffic),
        )
    return table


def _build_timeline_with_progress(service: StationTrafficService, step_minutes: int) -> pd.DataFrame:
    """Sweep the day while displaying a progress bar over the centre minutes."""

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        transient=True,
    )
    total = MINUTES_PER_DAY // step_minutes if step_minutes > 0 else None
    with progress:
        task_id = progress.add_task("Sweeping time of day", total=total)
        return service.timeline(step_minutes, on_step=lambda _minute: progress.advance(task_id))


def _write_csv(path: str | Path, dataframe: pd.DataFrame) -> None:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    dataframe.to_csv(output_path, index=False)


if __name__ == "__main__":
    main()
