"""Core dataclasses shared across the traffic package."""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Union

MINUTES_PER_DAY = 1440


@dataclass(frozen=True)
class Trip:
    """Single bike-share trip as handed over by the loaders.

    Timestamps stay as the loader produced them (``datetime``, ``pandas.Timestamp``,
    raw string, or ``None`` when unparseable); only their minute-of-day is used.
    """

    start_station_id: str
    end_station_id: str
    started_at: Union[datetime, str, None]
    ended_at: Union[datetime, str, None]
    ride_id: Optional[str] = None


@dataclass(frozen=True)
class Station:
    """Roster entry joined against trip station ids through ``short_id``."""

    short_id: str
    name: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    metadata: Dict[str, object] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class StationTraffic:
    """Per-station counts for one query window."""

    station: Station
    departures: int = 0
    arrivals: int = 0

    def __post_init__(self) -> None:
        if self.departures < 0 or self.arrivals < 0:
            raise ValueError("Station traffic counts must be non-negative")

    @property
    def short_id(self) -> str:
        return self.station.short_id

    @property
    def total_traffic(self) -> int:
        return self.departures + self.arrivals

    @property
    def departure_ratio(self) -> Optional[float]:
        """Share of departures in the total, ``None`` for idle stations."""
        total = self.total_traffic
        if total == 0:
            return None
        return self.departures / total


@dataclass(frozen=True)
class AllTime:
    """Unfiltered query over the whole day."""

    def __str__(self) -> str:  # pragma: no cover - trivial
        return "any"


@dataclass(frozen=True)
class MinuteOfDay:
    """Query centred on a single minute in ``[0, 1439]``."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, numbers.Integral):
            raise TypeError(f"Minute of day must be an integer, got {self.value!r}")
        object.__setattr__(self, "value", int(self.value))
        if self.value < 0 or self.value >= MINUTES_PER_DAY:
            raise ValueError(
                f"Minute of day must be within [0, {MINUTES_PER_DAY - 1}]: {self.value}"
            )

    def __str__(self) -> str:  # pragma: no cover - trivial
        return str(self.value)


TimeFilter = Union[AllTime, MinuteOfDay]

ANY_TIME = AllTime()

# Slider value that historically meant "no time filter".
ANY_TIME_SENTINEL = -1


def as_time_filter(value: object) -> TimeFilter:
    """Coerce slider-style input into a :data:`TimeFilter`.

    Accepts an existing filter, an integer minute (``-1`` meaning any time), or a
    string (``"any"``, ``"-1"``, ``"HH:MM"`` or a bare integer). Anything outside
    ``[-1, 1439]`` is rejected with ``ValueError``.
    """
    if isinstance(value, (AllTime, MinuteOfDay)):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean values are not valid time filters")
    if isinstance(value, numbers.Integral):
        if int(value) == ANY_TIME_SENTINEL:
            return ANY_TIME
        return MinuteOfDay(int(value))
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"any", "all", str(ANY_TIME_SENTINEL)}:
            return ANY_TIME
        if ":" in text:
            from .minute_indexer import parse_hhmm

            return MinuteOfDay(parse_hhmm(text))
        try:
            minute = int(text)
        except ValueError as exc:
            raise ValueError(f"Unrecognised time filter: {value!r}") from exc
        return as_time_filter(minute)
    raise TypeError(f"Unsupported time filter type: {type(value).__name__}")


__all__ = [
    "ANY_TIME",
    "ANY_TIME_SENTINEL",
    "AllTime",
    "MINUTES_PER_DAY",
    "MinuteOfDay",
    "Station",
    "StationTraffic",
    "TimeFilter",
    "Trip",
    "as_time_filter",
]
