from __future__ import annotations

import argparse
import logging
from datetime import datetime, timedelta
from typing import List

import numpy as np

from bikeflow.traffic import Station, StationTrafficService, Trip, format_minute

SYNTH_STATIONS: List[Station] = [
    Station("M32006", name="MIT at Mass Ave / Amherst St", lat=42.3581, lon=-71.0932),
    Station("M32018", name="Kendall T", lat=42.3625, lon=-71.0848),
    Station("A32000", name="Fan Pier", lat=42.3534, lon=-71.0445),
    Station("D32005", name="South Station", lat=42.3522, lon=-71.0553),
]


def _synthetic_trips(num_trips: int, seed: int) -> List[Trip]:
    """Commute-shaped trips: a morning and an evening peak plus background noise."""
    rng = np.random.default_rng(seed)
    day = datetime(2024, 3, 1)
    ids = [station.short_id for station in SYNTH_STATIONS]
    peaks = rng.choice([8 * 60, 17 * 60 + 30, 13 * 60], size=num_trips, p=[0.4, 0.4, 0.2])
    spread = rng.normal(0.0, 45.0, size=num_trips)
    durations = rng.integers(4, 40, size=num_trips)
    trips: List[Trip] = []
    for idx in range(num_trips):
        start_minute = int(peaks[idx] + spread[idx]) % 1440
        start, end = rng.choice(ids, size=2)
        started_at = day + timedelta(minutes=start_minute)
        trips.append(
            Trip(
                start_station_id=str(start),
                end_station_id=str(end),
                started_at=started_at,
                ended_at=started_at + timedelta(minutes=int(durations[idx])),
                ride_id=f"SYN{idx:05d}",
            )
        )
    return trips


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the station traffic smoke test on synthetic trips.")
    parser.add_argument("--num-trips", type=int, default=2000)
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--step", type=int, default=120, help="Minutes between sampled windows.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    service = StationTrafficService(SYNTH_STATIONS, _synthetic_trips(args.num_trips, args.seed))

    overall = service.compute("any")
    print(f"Whole day: {sum(row.total_traffic for row in overall.stations)} station events")
    for minute in range(0, 1440, args.step):
        snapshot = service.compute(minute)
        busiest = max(snapshot.stations, key=lambda row: row.total_traffic)
        print(
            f"{format_minute(minute):>8}  busiest={busiest.short_id:<7} "
            f"dep={busiest.departures:<4d} arr={busiest.arrivals:<4d} total={busiest.total_traffic}"
        )


if __name__ == "__main__":
    main()
