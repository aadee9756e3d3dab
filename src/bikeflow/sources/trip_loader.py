"""CSV loader turning raw trip exports into :class:`Trip` records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

import pandas as pd

from bikeflow.traffic.domain_types import Trip
from bikeflow.traffic.minute_indexer import RELATIVE_TIMESTAMP_KEYWORDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TripColumns:
    """CSV column names for the fields the trip index needs."""

    start_station_id: str = "start_station_id"
    end_station_id: str = "end_station_id"
    started_at: str = "started_at"
    ended_at: str = "ended_at"
    ride_id: Optional[str] = "ride_id"

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, str] | None) -> "TripColumns":
        if not overrides:
            return cls()
        return cls(**{str(key): str(value) for key, value in overrides.items()})

    @property
    def required(self) -> List[str]:
        return [self.start_station_id, self.end_station_id, self.started_at, self.ended_at]


def load_trips(
    path: str | Path,
    *,
    columns: TripColumns | None = None,
    timestamp_format: str | None = None,
) -> List[Trip]:
    """Read a trips CSV; unparseable timestamps become ``None`` rather than errors."""
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Trips CSV not found at {csv_path}")
    columns = columns or TripColumns()
    usecols = _determine_usecols(csv_path, columns)
    frame = pd.read_csv(csv_path, usecols=usecols, dtype=str, keep_default_na=False)
    trips = trips_from_dataframe(frame, columns=columns, timestamp_format=timestamp_format)
    logger.info("Loaded %d trips from %s", len(trips), csv_path)
    return trips


def trips_from_dataframe(
    frame: pd.DataFrame,
    *,
    columns: TripColumns | None = None,
    timestamp_format: str | None = None,
) -> List[Trip]:
    columns = columns or TripColumns()
    missing = [column for column in columns.required if column not in frame.columns]
    if missing:
        raise ValueError(f"Trip data is missing required columns: {', '.join(missing)}")

    started = _parse_timestamps(frame[columns.started_at], timestamp_format)
    ended = _parse_timestamps(frame[columns.ended_at], timestamp_format)
    start_ids = frame[columns.start_station_id].fillna("").astype(str).str.strip()
    end_ids = frame[columns.end_station_id].fillna("").astype(str).str.strip()
    if columns.ride_id and columns.ride_id in frame.columns:
        ride_ids = frame[columns.ride_id].fillna("").astype(str).tolist()
    else:
        ride_ids = [""] * len(frame)

    unparsed = int(started.isna().sum() + ended.isna().sum())
    if unparsed and logger.isEnabledFor(logging.DEBUG):
        logger.debug("%d trip timestamps could not be parsed.", unparsed)

    return [
        Trip(
            start_station_id=start_id,
            end_station_id=end_id,
            started_at=None if pd.isna(start_ts) else start_ts,
            ended_at=None if pd.isna(end_ts) else end_ts,
            ride_id=ride_id or None,
        )
        for start_id, end_id, start_ts, end_ts, ride_id in zip(
            start_ids.tolist(), end_ids.tolist(), started.tolist(), ended.tolist(), ride_ids
        )
    ]


def _determine_usecols(csv_path: Path, columns: TripColumns) -> List[str]:
    """Return the configured columns present in the CSV header."""
    header_df = pd.read_csv(csv_path, nrows=0)
    available = set(header_df.columns)
    missing = [column for column in columns.required if column not in available]
    if missing:
        raise ValueError(f"{csv_path} is missing required columns: {', '.join(missing)}")
    usecols = list(columns.required)
    if columns.ride_id and columns.ride_id in available:
        usecols.append(columns.ride_id)
    return usecols


def _parse_timestamps(series: pd.Series, timestamp_format: str | None) -> pd.Series:
    relative = series.astype(str).str.strip().str.lower().isin(sorted(RELATIVE_TIMESTAMP_KEYWORDS))
    return pd.to_datetime(series.mask(relative), errors="coerce", format=timestamp_format or "mixed")


__all__ = ["TripColumns", "load_trips", "trips_from_dataframe"]
