"""High-level API that ties the trip index, window resolver and aggregator together.

:class:`StationTrafficService` owns the immutable :class:`TripIndex` built from a
day of trips and the station roster. Each call to :meth:`compute` resolves the
circular window on the departure and arrival buckets and returns an independent
:class:`TrafficSnapshot`; no state is carried between queries.

Example Usage
-------------

.. code-block:: python

    from bikeflow.sources import load_stations, load_trips
    from bikeflow.traffic import StationTrafficService

    stations = load_stations("bluebikes-stations.json")
    trips = load_trips("bluebikes-traffic-2024-03.csv")

    service = StationTrafficService(stations, trips)
    overall = service.compute("any")        # whole day, unfiltered
    morning = service.compute("08:30")      # 07:31 up to (excluding) 09:30
    print(morning.to_dataframe().nlargest(10, "total_traffic"))

Notes
-----
- Station short ids must be unique; duplicates are rejected.
- Trips with malformed timestamps are dropped while indexing and reported via
  :attr:`StationTrafficService.skipped_count`.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Sequence

import pandas as pd

from .domain_types import MINUTES_PER_DAY, MinuteOfDay, Station, TimeFilter, Trip
from .trip_index import Direction, TripIndex
from .traffic_aggregator import SNAPSHOT_COLUMNS, TrafficAggregator, TrafficSnapshot, compute_station_traffic
from .window_resolver import DEFAULT_HALF_WIDTH, WindowResolver

logger = logging.getLogger(__name__)

TIMELINE_COLUMNS = ["minute"] + SNAPSHOT_COLUMNS


class StationTrafficService:
    """Answers per-minute station traffic queries against a prebuilt index."""

    def __init__(
        self,
        stations: Sequence[Station],
        trips: Iterable[Trip] | TripIndex,
        *,
        half_width: int = DEFAULT_HALF_WIDTH,
        aggregator: TrafficAggregator | None = None,
    ) -> None:
        self._stations: List[Station] = list(stations)
        _check_unique_ids(self._stations)
        self._index = trips if isinstance(trips, TripIndex) else TripIndex.build(trips)
        self._resolver = WindowResolver(MINUTES_PER_DAY, half_width)
        self._aggregator = aggregator or TrafficAggregator()

    # ---------------------------------------------------------------- properties
    @property
    def index(self) -> TripIndex:
        return self._index

    @property
    def stations(self) -> List[Station]:
        return list(self._stations)

    @property
    def half_width(self) -> int:
        return self._resolver.half_width

    @property
    def skipped_count(self) -> int:
        return self._index.skipped_count

    # ------------------------------------------------------------------ queries
    def compute(self, time_filter: TimeFilter | int | str) -> TrafficSnapshot:
        """Station counts for the window centred on ``time_filter``."""
        return compute_station_traffic(
            self._index,
            self._stations,
            time_filter,
            resolver=self._resolver,
            aggregator=self._aggregator,
        )

    def timeline(
        self,
        step_minutes: int = 60,
        *,
        on_step: Optional[Callable[[int], None]] = None,
    ) -> pd.DataFrame:
        """Sweep centre minutes ``0, step, 2*step, ...`` across the day.

        Returns one row per (minute, station). ``on_step`` is called with each
        centre minute after it has been aggregated.
        """
        step_minutes = int(step_minutes)
        if step_minutes <= 0:
            raise ValueError("step_minutes must be positive.")
        if MINUTES_PER_DAY % step_minutes != 0:
            raise ValueError("step_minutes must divide 1440.")

        frames = []
        for minute in range(0, MINUTES_PER_DAY, step_minutes):
            frame = self.compute(MinuteOfDay(minute)).to_dataframe()
            frame.insert(0, "minute", minute)
            frames.append(frame)
            if on_step is not None:
                on_step(minute)
        if not frames or not self._stations:
            return pd.DataFrame(columns=TIMELINE_COLUMNS)
        timeline = pd.concat(frames, ignore_index=True)
        logger.info(
            "Built traffic timeline with %d steps for %d stations.",
            len(frames),
            len(self._stations),
        )
        return timeline

    def minute_profile(self) -> pd.DataFrame:
        """Per-minute departure and arrival counts across all stations."""
        return pd.DataFrame(
            {
                "minute": range(MINUTES_PER_DAY),
                "departures": self._index.bucket_sizes(Direction.DEPARTURE),
                "arrivals": self._index.bucket_sizes(Direction.ARRIVAL),
            }
        )


def _check_unique_ids(stations: Sequence[Station]) -> None:
    seen = set()
    duplicates = []
    for station in stations:
        if station.short_id in seen:
            duplicates.append(station.short_id)
        seen.add(station.short_id)
    if duplicates:
        raise ValueError(f"Duplicate station ids in roster: {', '.join(sorted(set(duplicates)))}")


__all__ = ["StationTrafficService", "TIMELINE_COLUMNS"]
