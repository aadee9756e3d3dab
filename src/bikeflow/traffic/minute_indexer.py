"""Minute-of-day conversions used by the trip index and the CLI."""

from __future__ import annotations

from datetime import datetime, time
from typing import Union

import numpy as np
import pandas as pd

from .domain_types import MINUTES_PER_DAY, AllTime, MinuteOfDay, TimeFilter

TimestampLike = Union[datetime, time, np.datetime64, str, None]

# Relative keywords pandas resolves against the wall clock.
RELATIVE_TIMESTAMP_KEYWORDS = frozenset({"now", "today"})


def minute_of_day(value: TimestampLike) -> int:
    """Return ``hour * 60 + minute`` for a timestamp, ignoring date and seconds.

    Raises ``ValueError`` when no minute can be derived (``None``, ``NaT`` or an
    unparseable string).
    """
    if value is None:
        raise ValueError("Timestamp is missing")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Timestamp is empty")
        if text.lower() in RELATIVE_TIMESTAMP_KEYWORDS:
            raise ValueError(f"Relative timestamp {text!r} has no fixed minute")
        value = pd.Timestamp(text)
    elif isinstance(value, np.datetime64):
        value = pd.Timestamp(value)
    if not isinstance(value, (datetime, time)):
        raise ValueError(f"Cannot derive a minute of day from {type(value).__name__}")
    if pd.isna(value):
        raise ValueError("Timestamp is NaT")
    minute = int(value.hour) * 60 + int(value.minute)
    if minute < 0 or minute >= MINUTES_PER_DAY:
        raise ValueError(f"Minute of day out of range: {minute}")
    return minute


def parse_hhmm(token: object) -> int:
    """Parse an ``HH:MM`` string into minutes since midnight (0-1439)."""
    if not isinstance(token, str) or not token.strip():
        raise ValueError("Time of day must be a non-empty HH:MM string")
    text = token.strip()
    parts = text.split(":")
    if len(parts) != 2:
        raise ValueError(f"Time of day must be in HH:MM format: {text!r}")
    hour_str, minute_str = parts
    if not hour_str.isdigit() or not minute_str.isdigit():
        raise ValueError(f"Time of day must be numeric HH:MM: {text!r}")
    hour = int(hour_str)
    minute = int(minute_str)
    if hour > 23 or minute > 59:
        raise ValueError(f"Time of day out of range: {text!r}")
    return hour * 60 + minute


def format_minute(minutes: int) -> str:
    """Slider label in 12-hour clock, e.g. ``510 -> "8:30 AM"``."""
    minutes = int(minutes)
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise ValueError(f"Minute of day out of range: {minutes}")
    hours, mins = divmod(minutes, 60)
    suffix = "AM" if hours < 12 else "PM"
    display_hour = hours % 12 or 12
    return f"{display_hour}:{mins:02d} {suffix}"


def format_time_filter(time_filter: TimeFilter) -> str:
    if isinstance(time_filter, AllTime):
        return "any time"
    if isinstance(time_filter, MinuteOfDay):
        return format_minute(time_filter.value)
    raise TypeError(f"Unsupported time filter type: {type(time_filter).__name__}")


__all__ = [
    "RELATIVE_TIMESTAMP_KEYWORDS",
    "format_minute",
    "format_time_filter",
    "minute_of_day",
    "parse_hhmm",
]
