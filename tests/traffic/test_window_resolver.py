from __future__ import annotations

import pytest

from bikeflow.traffic.domain_types import ANY_TIME, MinuteOfDay
from bikeflow.traffic.window_resolver import WindowResolver, resolve_window


def _labelled_buckets(length: int = 1440) -> list[list[int]]:
    """Buckets whose single element is their own minute."""
    return [[minute] for minute in range(length)]


def test_bounds_non_wrapping():
    resolver = WindowResolver()

    assert resolver.bounds(700) == (641, 760)


def test_resolve_non_wrapping_window_covers_641_to_759():
    resolver = WindowResolver()

    selected = resolver.resolve(_labelled_buckets(), MinuteOfDay(700))

    assert selected == list(range(641, 760))
    assert 640 not in selected
    assert 760 not in selected


def test_bounds_wrapping_past_midnight():
    resolver = WindowResolver()

    assert resolver.bounds(10) == (1391, 70)
    assert resolver.bucket_ranges(10) == [range(1391, 1440), range(0, 70)]


def test_resolve_wrapping_window_includes_both_sides_of_midnight():
    buckets = [[] for _ in range(1440)]
    buckets[1395].append("late")
    buckets[30].append("early")
    buckets[100].append("outside")

    selected = WindowResolver().resolve(buckets, MinuteOfDay(10))

    assert selected == ["late", "early"]


def test_resolve_wrapping_window_at_end_of_day():
    resolver = WindowResolver()

    assert resolver.bounds(1439) == (1380, 59)
    selected = resolver.resolve(_labelled_buckets(), 1439)
    assert selected == list(range(1380, 1440)) + list(range(0, 59))


def test_window_ending_exactly_at_midnight():
    resolver = WindowResolver()

    assert resolver.bounds(1380) == (1321, 0)
    # nothing is selected after midnight
    assert resolver.resolve(_labelled_buckets(), 1380) == list(range(1321, 1440))


def test_any_time_returns_every_bucket_in_order():
    buckets = _labelled_buckets()

    assert WindowResolver().resolve(buckets, ANY_TIME) == list(range(1440))
    assert WindowResolver().resolve(buckets, -1) == list(range(1440))


def test_resolve_flattens_multi_trip_buckets_in_bucket_order():
    buckets = [[] for _ in range(1440)]
    buckets[650] = ["b1", "b2"]
    buckets[645] = ["a"]

    assert WindowResolver().resolve(buckets, 700) == ["a", "b1", "b2"]


def test_contains_matches_bucket_ranges():
    resolver = WindowResolver()

    assert resolver.contains(10, 1391)
    assert resolver.contains(10, 69)
    assert not resolver.contains(10, 70)
    assert not resolver.contains(10, 1390)
    assert resolver.contains(ANY_TIME, 1200)


def test_custom_half_width():
    resolver = WindowResolver(half_width=15)

    assert resolver.bounds(100) == (86, 115)


def test_resolve_is_deterministic():
    buckets = _labelled_buckets()
    resolver = WindowResolver()

    assert resolver.resolve(buckets, 5) == resolver.resolve(buckets, 5)


@pytest.mark.parametrize("value", [-2, 1440, 5000])
def test_out_of_range_minutes_are_rejected(value):
    with pytest.raises(ValueError):
        WindowResolver().resolve(_labelled_buckets(), value)


@pytest.mark.parametrize("half_width", [0, -5, 721])
def test_invalid_half_width_is_rejected(half_width):
    with pytest.raises(ValueError):
        WindowResolver(half_width=half_width)


def test_resolve_rejects_wrong_bucket_count():
    with pytest.raises(ValueError):
        WindowResolver().resolve([[1], [2]], 0)


def test_resolve_window_helper_uses_bucket_length():
    buckets = _labelled_buckets(24)

    assert resolve_window(buckets, 1, half_width=3) == [23, 0, 1, 2, 3]
