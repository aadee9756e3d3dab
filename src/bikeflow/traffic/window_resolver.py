"""Circular time-of-day window selection over minute buckets."""

from __future__ import annotations

from itertools import chain
from typing import List, Sequence, Tuple, TypeVar

from .domain_types import MINUTES_PER_DAY, AllTime, TimeFilter, as_time_filter

T = TypeVar("T")

DEFAULT_HALF_WIDTH = 60


class WindowResolver:
    """Selects the buckets around a centre minute, wrapping past midnight.

    For a centre ``c`` the window spans ``[c - half_width + 1, c + half_width)``
    modulo ``bucket_length``; an :class:`AllTime` filter selects every bucket.
    """

    def __init__(self, bucket_length: int = MINUTES_PER_DAY, half_width: int = DEFAULT_HALF_WIDTH):
        if bucket_length <= 0:
            raise ValueError("bucket_length must be positive.")
        if half_width < 1 or half_width > bucket_length // 2:
            raise ValueError(
                f"half_width must be within [1, {bucket_length // 2}] for {bucket_length} buckets."
            )
        self.bucket_length = int(bucket_length)
        self.half_width = int(half_width)

    def bounds(self, center: int) -> Tuple[int, int]:
        """Return ``(min_minute, max_minute)`` for a centre minute."""
        if center < 0 or center >= self.bucket_length:
            raise ValueError(f"Centre minute must be within [0, {self.bucket_length - 1}]: {center}")
        min_minute = (center - self.half_width + 1 + self.bucket_length) % self.bucket_length
        max_minute = (center + self.half_width) % self.bucket_length
        return min_minute, max_minute

    def bucket_ranges(self, time_filter: TimeFilter | int | str) -> List[range]:
        time_filter = as_time_filter(time_filter)
        if isinstance(time_filter, AllTime):
            return [range(0, self.bucket_length)]
        min_minute, max_minute = self.bounds(time_filter.value)
        if min_minute <= max_minute:
            return [range(min_minute, max_minute)]
        # Wraps around midnight.
        return [range(min_minute, self.bucket_length), range(0, max_minute)]

    def contains(self, time_filter: TimeFilter | int | str, minute: int) -> bool:
        return any(minute in span for span in self.bucket_ranges(time_filter))

    def resolve(self, buckets: Sequence[Sequence[T]], time_filter: TimeFilter | int | str) -> List[T]:
        """Flatten the selected buckets in bucket order."""
        if len(buckets) != self.bucket_length:
            raise ValueError(
                f"Expected {self.bucket_length} buckets, got {len(buckets)}."
            )
        selected = (buckets[minute] for span in self.bucket_ranges(time_filter) for minute in span)
        return list(chain.from_iterable(selected))


def resolve_window(
    buckets: Sequence[Sequence[T]],
    time_filter: TimeFilter | int | str,
    half_width: int = DEFAULT_HALF_WIDTH,
) -> List[T]:
    return WindowResolver(len(buckets), half_width).resolve(buckets, time_filter)


__all__ = ["DEFAULT_HALF_WIDTH", "WindowResolver", "resolve_window"]
