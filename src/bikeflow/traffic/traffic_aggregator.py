"""Per-station departure/arrival counts for a resolved time window."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

import pandas as pd

from .domain_types import Station, StationTraffic, TimeFilter, Trip, as_time_filter
from .minute_indexer import format_time_filter
from .trip_index import Direction, TripIndex
from .window_resolver import WindowResolver

logger = logging.getLogger(__name__)

SNAPSHOT_COLUMNS = [
    "short_id",
    "name",
    "lat",
    "lon",
    "departures",
    "arrivals",
    "total_traffic",
    "departure_ratio",
]


def count_by_station(trips: Iterable[Trip], direction: Direction | str) -> Counter:
    """Frequency of start (departure) or end (arrival) station ids."""
    direction = Direction(direction)
    if direction is Direction.DEPARTURE:
        return Counter(trip.start_station_id for trip in trips)
    return Counter(trip.end_station_id for trip in trips)


@dataclass(frozen=True)
class TrafficSnapshot:
    """Station counts for one query, in roster order."""

    time_filter: TimeFilter
    stations: List[StationTraffic]
    departure_trip_count: int
    arrival_trip_count: int
    unmatched_departures: int = 0
    unmatched_arrivals: int = 0

    @property
    def label(self) -> str:
        return format_time_filter(self.time_filter)

    @property
    def max_total_traffic(self) -> int:
        """Upper bound of the total-traffic domain (0 for an empty roster)."""
        return max((row.total_traffic for row in self.stations), default=0)

    def by_id(self) -> Dict[str, StationTraffic]:
        return {row.short_id: row for row in self.stations}

    def to_dataframe(self) -> pd.DataFrame:
        """Tidy per-station frame suitable for a renderer or CSV export."""
        rows = [
            {
                "short_id": row.short_id,
                "name": row.station.name,
                "lat": row.station.lat,
                "lon": row.station.lon,
                "departures": row.departures,
                "arrivals": row.arrivals,
                "total_traffic": row.total_traffic,
                "departure_ratio": row.departure_ratio,
            }
            for row in self.stations
        ]
        return pd.DataFrame(rows, columns=SNAPSHOT_COLUMNS)


class TrafficAggregator:
    """Joins windowed trip counts onto a station roster."""

    def aggregate(
        self,
        stations: Sequence[Station],
        departure_trips: Iterable[Trip],
        arrival_trips: Iterable[Trip],
    ) -> List[StationTraffic]:
        """Return fresh per-station counts in roster order.

        Stations with no matching trips get zero counts; trips referencing ids
        outside the roster do not contribute to any row.
        """
        rows, _, _ = self.aggregate_with_unmatched(stations, departure_trips, arrival_trips)
        return rows

    def aggregate_with_unmatched(
        self,
        stations: Sequence[Station],
        departure_trips: Iterable[Trip],
        arrival_trips: Iterable[Trip],
    ) -> Tuple[List[StationTraffic], int, int]:
        """Like :meth:`aggregate`, also returning trips whose station is unknown."""
        departures = count_by_station(departure_trips, Direction.DEPARTURE)
        arrivals = count_by_station(arrival_trips, Direction.ARRIVAL)
        known_ids = {station.short_id for station in stations}
        unmatched_dep = sum(n for sid, n in departures.items() if sid not in known_ids)
        unmatched_arr = sum(n for sid, n in arrivals.items() if sid not in known_ids)
        return self._join(stations, departures, arrivals), unmatched_dep, unmatched_arr

    @staticmethod
    def _join(
        stations: Sequence[Station], departures: Counter, arrivals: Counter
    ) -> List[StationTraffic]:
        return [
            StationTraffic(
                station=station,
                departures=departures.get(station.short_id, 0),
                arrivals=arrivals.get(station.short_id, 0),
            )
            for station in stations
        ]


def compute_station_traffic(
    index: TripIndex,
    stations: Sequence[Station],
    time_filter: TimeFilter | int | str,
    *,
    resolver: WindowResolver | None = None,
    aggregator: TrafficAggregator | None = None,
) -> TrafficSnapshot:
    """Resolve the window on both bucket sets and aggregate onto the roster."""
    time_filter = as_time_filter(time_filter)
    resolver = resolver or WindowResolver()
    aggregator = aggregator or TrafficAggregator()

    departure_trips = resolver.resolve(index.departures, time_filter)
    arrival_trips = resolver.resolve(index.arrivals, time_filter)
    rows, unmatched_dep, unmatched_arr = aggregator.aggregate_with_unmatched(
        stations, departure_trips, arrival_trips
    )
    if unmatched_dep or unmatched_arr:
        logger.debug(
            "%s: %d departures and %d arrivals reference stations outside the roster.",
            format_time_filter(time_filter),
            unmatched_dep,
            unmatched_arr,
        )
    return TrafficSnapshot(
        time_filter=time_filter,
        stations=rows,
        departure_trip_count=len(departure_trips),
        arrival_trip_count=len(arrival_trips),
        unmatched_departures=unmatched_dep,
        unmatched_arrivals=unmatched_arr,
    )


__all__ = [
    "SNAPSHOT_COLUMNS",
    "TrafficAggregator",
    "TrafficSnapshot",
    "compute_station_traffic",
    "count_by_station",
]
