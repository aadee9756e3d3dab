"""Loaders that turn raw station and trip files into core records."""

from .station_loader import load_stations, stations_from_payload
from .trip_loader import TripColumns, load_trips, trips_from_dataframe

__all__ = [
    "TripColumns",
    "load_stations",
    "load_trips",
    "stations_from_payload",
    "trips_from_dataframe",
]
