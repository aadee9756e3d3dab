from __future__ import annotations

import csv
import json
from pathlib import Path

import pandas as pd
import pytest

from bikeflow.sources import TripColumns, load_stations, load_trips, trips_from_dataframe
from bikeflow.traffic.trip_index import TripIndex


def _write_stations(path: Path, stations: list[dict]) -> None:
    path.write_text(json.dumps({"last_updated": 0, "data": {"stations": stations}}), encoding="utf-8")


def _write_trips(path: Path, rows: list[dict], fieldnames: list[str] | None = None) -> None:
    fieldnames = fieldnames or ["ride_id", "started_at", "ended_at", "start_station_id", "end_station_id"]
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)


def test_load_stations_reads_gbfs_roster(tmp_path):
    stations_json = tmp_path / "stations.json"
    _write_stations(
        stations_json,
        [
            {"short_name": "M32006", "name": "MIT at Mass Ave", "lat": 42.358, "lon": "-71.093", "capacity": 27},
            {"short_name": "A32000", "name": "Fan Pier", "lat": 42.353, "lon": -71.044},
            {"name": "No short name", "lat": 0, "lon": 0},
        ],
    )

    stations = load_stations(stations_json)

    assert [station.short_id for station in stations] == ["M32006", "A32000"]
    assert stations[0].name == "MIT at Mass Ave"
    assert stations[0].lon == pytest.approx(-71.093)
    assert stations[0].metadata == {"capacity": 27}


def test_load_stations_with_custom_id_field(tmp_path):
    stations_json = tmp_path / "stations.json"
    _write_stations(stations_json, [{"station_id": 7, "short_name": "X", "name": "Seven"}])

    stations = load_stations(stations_json, id_field="station_id")

    assert stations[0].short_id == "7"
    assert stations[0].metadata == {"short_name": "X"}


def test_load_stations_rejects_duplicates(tmp_path):
    stations_json = tmp_path / "stations.json"
    _write_stations(stations_json, [{"short_name": "A"}, {"short_name": "A"}])

    with pytest.raises(ValueError):
        load_stations(stations_json)


def test_load_stations_requires_data_stations(tmp_path):
    stations_json = tmp_path / "stations.json"
    stations_json.write_text(json.dumps({"stations": []}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_stations(stations_json)


def test_load_stations_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_stations(tmp_path / "nope.json")


def test_load_trips_parses_timestamps_and_keeps_bad_rows(tmp_path):
    trips_csv = tmp_path / "trips.csv"
    _write_trips(
        trips_csv,
        [
            {
                "ride_id": "R1",
                "started_at": "2024-03-01 08:15:22.123",
                "ended_at": "2024-03-01 08:40:01.000",
                "start_station_id": "M32006",
                "end_station_id": "A32000",
            },
            {
                "ride_id": "R2",
                "started_at": "garbage",
                "ended_at": "2024-03-01 09:00:00",
                "start_station_id": "A32000",
                "end_station_id": "M32006",
            },
        ],
    )

    trips = load_trips(trips_csv)

    assert len(trips) == 2
    assert trips[0].ride_id == "R1"
    assert trips[0].start_station_id == "M32006"
    assert trips[0].started_at.hour == 8 and trips[0].started_at.minute == 15
    assert trips[1].started_at is None

    index = TripIndex.build(trips)
    assert index.trip_count == 1
    assert index.skipped_count == 1
    assert index.departures[8 * 60 + 15][0].ride_id == "R1"


def test_load_trips_keeps_station_ids_as_strings(tmp_path):
    trips_csv = tmp_path / "trips.csv"
    _write_trips(
        trips_csv,
        [{"started_at": "2024-03-01 00:01", "ended_at": "2024-03-01 00:02", "start_station_id": "007", "end_station_id": "12"}],
        fieldnames=["started_at", "ended_at", "start_station_id", "end_station_id"],
    )

    trips = load_trips(trips_csv)

    assert trips[0].start_station_id == "007"
    assert trips[0].end_station_id == "12"
    assert trips[0].ride_id is None


def test_load_trips_treats_wall_clock_keywords_as_malformed(tmp_path):
    trips_csv = tmp_path / "trips.csv"
    _write_trips(
        trips_csv,
        [
            {"started_at": "now", "ended_at": "2024-03-01 08:40", "start_station_id": "A", "end_station_id": "B"},
            {"started_at": "2024-03-01 08:15", "ended_at": " Today", "start_station_id": "B", "end_station_id": "A"},
            {"started_at": "2024-03-01 08:15", "ended_at": "2024-03-01 08:40", "start_station_id": "A", "end_station_id": "A"},
        ],
        fieldnames=["started_at", "ended_at", "start_station_id", "end_station_id"],
    )

    trips = load_trips(trips_csv)

    assert len(trips) == 3
    assert trips[0].started_at is None
    assert trips[1].ended_at is None
    assert trips[2].started_at.minute == 15

    index = TripIndex.build(trips)
    assert index.trip_count == 1
    assert index.skipped_count == 2


def test_load_trips_with_renamed_columns(tmp_path):
    trips_csv = tmp_path / "trips.csv"
    _write_trips(
        trips_csv,
        [{"starttime": "03/01/2024 23:59", "stoptime": "03/02/2024 00:10", "from": "A", "to": "B"}],
        fieldnames=["starttime", "stoptime", "from", "to"],
    )
    columns = TripColumns.from_mapping(
        {"started_at": "starttime", "ended_at": "stoptime", "start_station_id": "from", "end_station_id": "to"}
    )

    trips = load_trips(trips_csv, columns=columns, timestamp_format="%m/%d/%Y %H:%M")

    assert trips[0].started_at.hour == 23
    assert trips[0].ended_at.minute == 10


def test_load_trips_missing_columns(tmp_path):
    trips_csv = tmp_path / "trips.csv"
    _write_trips(trips_csv, [], fieldnames=["started_at", "ended_at"])

    with pytest.raises(ValueError):
        load_trips(trips_csv)


def test_load_trips_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_trips(tmp_path / "trips.csv")


def test_trips_from_dataframe_requires_columns():
    with pytest.raises(ValueError):
        trips_from_dataframe(pd.DataFrame({"started_at": []}))
