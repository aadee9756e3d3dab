"""Time-bucketed station traffic aggregation."""

from .domain_types import (
    ANY_TIME,
    AllTime,
    MinuteOfDay,
    Station,
    StationTraffic,
    TimeFilter,
    Trip,
    as_time_filter,
)
from .minute_indexer import format_minute, format_time_filter, minute_of_day, parse_hhmm
from .traffic_aggregator import TrafficAggregator, TrafficSnapshot, compute_station_traffic, count_by_station
from .traffic_config import TrafficConfig
from .traffic_service import StationTrafficService
from .trip_index import Direction, TripIndex
from .window_resolver import WindowResolver, resolve_window

__all__ = [
    "ANY_TIME",
    "AllTime",
    "Direction",
    "MinuteOfDay",
    "Station",
    "StationTraffic",
    "StationTrafficService",
    "TimeFilter",
    "TrafficAggregator",
    "TrafficConfig",
    "TrafficSnapshot",
    "Trip",
    "TripIndex",
    "WindowResolver",
    "as_time_filter",
    "compute_station_traffic",
    "count_by_station",
    "format_minute",
    "format_time_filter",
    "minute_of_day",
    "parse_hhmm",
    "resolve_window",
]
