"""Loader for GBFS ``station_information`` rosters."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from bikeflow.traffic.domain_types import Station

logger = logging.getLogger(__name__)

_COORDINATE_FIELDS = ("lat", "lon")


def load_stations(path: str | Path, *, id_field: str = "short_name") -> List[Station]:
    """
    Load the station roster from a GBFS JSON document.

    Args:
        path: JSON file shaped as ``{"data": {"stations": [...]}}``.
        id_field: Field used as the join key against trip station ids.
    Returns:
        Stations in file order. Entries without ``id_field`` are skipped.
    """
    stations_path = Path(path)
    if not stations_path.exists():
        raise FileNotFoundError(f"Stations JSON not found at {stations_path}")
    with stations_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return stations_from_payload(payload, id_field=id_field, source=str(stations_path))


def stations_from_payload(
    payload: object, *, id_field: str = "short_name", source: str = "<payload>"
) -> List[Station]:
    raw_stations = _extract_station_list(payload)
    stations: List[Station] = []
    seen: Dict[str, int] = {}
    missing_ids = 0
    for position, raw in enumerate(raw_stations):
        if not isinstance(raw, Mapping):
            raise TypeError(f"Station entry {position} in {source} must be a mapping")
        short_id = _clean_id(raw.get(id_field))
        if short_id is None:
            missing_ids += 1
            continue
        if short_id in seen:
            raise ValueError(
                f"Duplicate station id {short_id!r} in {source} (entries {seen[short_id]} and {position})"
            )
        seen[short_id] = position
        stations.append(
            Station(
                short_id=short_id,
                name=_clean_name(raw.get("name")),
                lat=_parse_coordinate(raw.get("lat")),
                lon=_parse_coordinate(raw.get("lon")),
                metadata={
                    key: value
                    for key, value in raw.items()
                    if key not in _COORDINATE_FIELDS and key not in {id_field, "name"}
                },
            )
        )
    if missing_ids:
        logger.warning("Skipped %d stations without a %r field in %s", missing_ids, id_field, source)
    logger.info("Loaded %d stations from %s", len(stations), source)
    return stations


def _extract_station_list(payload: object) -> list:
    if not isinstance(payload, Mapping):
        raise TypeError("Stations JSON must contain a mapping at the top level")
    data = payload.get("data")
    if not isinstance(data, Mapping) or "stations" not in data:
        raise ValueError("Stations JSON must provide data.stations")
    stations = data["stations"]
    if not isinstance(stations, list):
        raise TypeError("data.stations must be a list")
    return stations


def _clean_id(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean_name(value: object) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _parse_coordinate(value: object) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


__all__ = ["load_stations", "stations_from_payload"]
