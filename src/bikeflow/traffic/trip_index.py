"""Minute-of-day bucket index over a day's worth of trips."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .domain_types import MINUTES_PER_DAY, Trip
from .minute_indexer import minute_of_day

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    DEPARTURE = "departure"
    ARRIVAL = "arrival"


class TripIndex:
    """Two fixed-length arrays of per-minute trip buckets (start and end minute).

    Every indexed trip sits in exactly one departure bucket and exactly one
    arrival bucket. Trips whose timestamps cannot be turned into a minute of day
    are skipped and counted in :attr:`skipped_count`. The index is immutable once
    built.
    """

    def __init__(
        self,
        departures: Sequence[Sequence[Trip]],
        arrivals: Sequence[Sequence[Trip]],
        *,
        skipped_count: int = 0,
    ) -> None:
        if len(departures) != MINUTES_PER_DAY or len(arrivals) != MINUTES_PER_DAY:
            raise ValueError(f"Trip index requires {MINUTES_PER_DAY} buckets per direction.")
        self._departures: Tuple[Tuple[Trip, ...], ...] = tuple(tuple(b) for b in departures)
        self._arrivals: Tuple[Tuple[Trip, ...], ...] = tuple(tuple(b) for b in arrivals)
        dep_total = sum(len(bucket) for bucket in self._departures)
        arr_total = sum(len(bucket) for bucket in self._arrivals)
        if dep_total != arr_total:
            raise ValueError(
                f"Departure and arrival buckets disagree on trip count ({dep_total} vs {arr_total})."
            )
        self._trip_count = dep_total
        self._skipped_count = int(skipped_count)

    # ------------------------------------------------------------------ builders
    @classmethod
    def build(cls, trips: Iterable[Trip]) -> "TripIndex":
        """Bucket trips by start minute and end minute.

        A trip with an unusable timestamp is left out of both bucket sets; the
        build carries on with the remaining records.
        """
        departures: List[List[Trip]] = [[] for _ in range(MINUTES_PER_DAY)]
        arrivals: List[List[Trip]] = [[] for _ in range(MINUTES_PER_DAY)]
        skipped = 0
        for trip in trips:
            try:
                start_minute = minute_of_day(trip.started_at)
                end_minute = minute_of_day(trip.ended_at)
            except (TypeError, ValueError) as exc:
                skipped += 1
                logger.debug("Skipping trip %s: %s", trip.ride_id or "<unnamed>", exc)
                continue
            departures[start_minute].append(trip)
            arrivals[end_minute].append(trip)

        index = cls(departures, arrivals, skipped_count=skipped)
        if skipped:
            logger.warning(
                "Skipped %d trips with malformed timestamps (%d indexed).",
                skipped,
                index.trip_count,
            )
        logger.info("Indexed %d trips into %d minute buckets.", index.trip_count, MINUTES_PER_DAY)
        return index

    # ---------------------------------------------------------------- properties
    @property
    def departures(self) -> Tuple[Tuple[Trip, ...], ...]:
        return self._departures

    @property
    def arrivals(self) -> Tuple[Tuple[Trip, ...], ...]:
        return self._arrivals

    @property
    def trip_count(self) -> int:
        """Number of trips that made it into the index."""
        return self._trip_count

    @property
    def skipped_count(self) -> int:
        return self._skipped_count

    # ----------------------------------------------------------------- indexing
    def buckets(self, direction: Direction | str) -> Tuple[Tuple[Trip, ...], ...]:
        direction = Direction(direction)
        if direction is Direction.DEPARTURE:
            return self._departures
        return self._arrivals

    def bucket_sizes(self, direction: Direction | str) -> np.ndarray:
        """Per-minute trip counts for one direction (length 1440)."""
        return np.fromiter(
            (len(bucket) for bucket in self.buckets(direction)),
            dtype=np.int64,
            count=MINUTES_PER_DAY,
        )


__all__ = ["Direction", "TripIndex"]
