from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .window_resolver import DEFAULT_HALF_WIDTH

logger = logging.getLogger(__name__)

TRIP_COLUMN_KEYS = ("start_station_id", "end_station_id", "started_at", "ended_at", "ride_id")


@dataclass
class TrafficConfig:
    stations_path: Optional[Path] = None
    trips_path: Optional[Path] = None
    half_width_minutes: int = DEFAULT_HALF_WIDTH
    station_id_field: str = "short_name"
    timestamp_format: Optional[str] = None
    trip_columns: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.stations_path is not None:
            self.stations_path = Path(self.stations_path)
        if self.trips_path is not None:
            self.trips_path = Path(self.trips_path)
        self._validate()

    def _validate(self) -> None:
        if isinstance(self.half_width_minutes, bool) or not isinstance(self.half_width_minutes, int):
            raise TypeError("half_width_minutes must be an integer")
        if self.half_width_minutes < 1 or self.half_width_minutes > 720:
            raise ValueError("half_width_minutes must be within [1, 720]")
        if not isinstance(self.station_id_field, str) or not self.station_id_field.strip():
            raise ValueError("station_id_field must be a non-empty string")
        if not isinstance(self.trip_columns, Mapping):
            raise TypeError("trip_columns must be a mapping of field name to CSV column")
        unknown = sorted(set(self.trip_columns) - set(TRIP_COLUMN_KEYS))
        if unknown:
            raise ValueError(f"Unknown trip column keys: {', '.join(unknown)}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, object], base_dir: Path | None = None) -> "TrafficConfig":
        if not isinstance(data, Mapping):
            raise TypeError("Traffic config must be a mapping")
        half_width = data.get("half_width_minutes", DEFAULT_HALF_WIDTH)
        trip_columns = data.get("trip_columns") or {}
        if not isinstance(trip_columns, Mapping):
            raise TypeError("'trip_columns' must be a mapping of field name to CSV column")
        timestamp_format = data.get("timestamp_format")
        return cls(
            stations_path=_resolve_path(data.get("stations_path"), base_dir),
            trips_path=_resolve_path(data.get("trips_path"), base_dir),
            half_width_minutes=half_width,
            station_id_field=str(data.get("station_id_field", "short_name")),
            timestamp_format=str(timestamp_format) if timestamp_format else None,
            trip_columns={str(k): str(v) for k, v in trip_columns.items()},
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "TrafficConfig":
        """Load a config file; relative data paths resolve against its directory."""
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Traffic config YAML not found at {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, Mapping):
            raise TypeError("Traffic config YAML must contain a mapping at the top level")
        config = cls.from_mapping(data, base_dir=config_path.parent)
        logger.debug("Loaded traffic config from %s", config_path)
        return config

    def to_yaml(self, path: str | Path) -> None:
        output: Dict[str, object] = {
            "half_width_minutes": int(self.half_width_minutes),
            "station_id_field": self.station_id_field,
        }
        if self.stations_path is not None:
            output["stations_path"] = str(self.stations_path)
        if self.trips_path is not None:
            output["trips_path"] = str(self.trips_path)
        if self.timestamp_format:
            output["timestamp_format"] = self.timestamp_format
        if self.trip_columns:
            output["trip_columns"] = dict(self.trip_columns)
        dest = Path(path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(output, handle, sort_keys=True)


def _resolve_path(value: object, base_dir: Path | None) -> Optional[Path]:
    if value is None or value == "":
        return None
    path = Path(str(value))
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path


__all__ = ["TRIP_COLUMN_KEYS", "TrafficConfig"]
