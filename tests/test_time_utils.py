"""Tests for the datetime helpers."""
from datetime import datetime, timedelta, timezone

from salon_scheduling.utils.time_utils import (
    Interval,
    add_minutes,
    clamp_datetime,
    difference_in_minutes,
    ensure_utc,
    parse_iso,
    round_up_to_interval,
)

UTC = timezone.utc


class TestParsing:

    def test_parse_iso_with_z_suffix(self):
        assert parse_iso("2025-01-06T09:00:00Z") == datetime(2025, 1, 6, 9, 0, tzinfo=UTC)

    def test_parse_iso_converts_offsets_to_utc(self):
        parsed = parse_iso("2025-01-06T10:30:00+01:00")
        assert parsed == datetime(2025, 1, 6, 9, 30, tzinfo=UTC)
        assert parsed.utcoffset() == timedelta(0)

    def test_naive_values_are_treated_as_utc(self):
        assert ensure_utc(datetime(2025, 1, 6, 9, 0)) == datetime(2025, 1, 6, 9, 0, tzinfo=UTC)


class TestArithmetic:

    def test_add_minutes_accepts_negative_values(self):
        base = datetime(2025, 1, 6, 9, 0, tzinfo=UTC)
        assert add_minutes(base, 90) == datetime(2025, 1, 6, 10, 30, tzinfo=UTC)
        assert add_minutes(base, -15) == datetime(2025, 1, 6, 8, 45, tzinfo=UTC)

    def test_difference_in_minutes(self):
        start = datetime(2025, 1, 6, 9, 0, tzinfo=UTC)
        assert difference_in_minutes(start + timedelta(minutes=90), start) == 90
        assert difference_in_minutes(start, start + timedelta(minutes=30)) == -30

    def test_clamp(self):
        low = datetime(2025, 1, 6, 9, 0, tzinfo=UTC)
        high = datetime(2025, 1, 6, 17, 0, tzinfo=UTC)
        assert clamp_datetime(low - timedelta(hours=1), low, high) == low
        assert clamp_datetime(high + timedelta(hours=1), low, high) == high
        middle = datetime(2025, 1, 6, 12, 0, tzinfo=UTC)
        assert clamp_datetime(middle, low, high) == middle
        assert clamp_datetime(middle) == middle


class TestRoundUp:

    def test_rounds_up_to_next_quarter_hour(self):
        value = datetime(2025, 1, 6, 9, 7, tzinfo=UTC)
        assert round_up_to_interval(value, 15) == datetime(2025, 1, 6, 9, 15, tzinfo=UTC)

    def test_on_grid_value_is_unchanged(self):
        value = datetime(2025, 1, 6, 9, 45, tzinfo=UTC)
        assert round_up_to_interval(value, 15) == value

    def test_a_single_second_past_the_grid_rounds_up(self):
        value = datetime(2025, 1, 6, 9, 0, 1, tzinfo=UTC)
        assert round_up_to_interval(value, 15) == datetime(2025, 1, 6, 9, 15, tzinfo=UTC)

    def test_grid_is_epoch_aligned_not_local(self):
        india = timezone(timedelta(hours=5, minutes=30))
        value = datetime(2025, 1, 6, 9, 7, tzinfo=india)  # 03:37 UTC
        rounded = round_up_to_interval(value, 15)
        assert rounded == datetime(2025, 1, 6, 3, 45, tzinfo=UTC)
        assert rounded.utcoffset() == timedelta(hours=5, minutes=30)


class TestInterval:

    def test_touching_intervals_do_not_overlap(self):
        first = Interval(datetime(2025, 1, 6, 9, tzinfo=UTC), datetime(2025, 1, 6, 10, tzinfo=UTC))
        second = Interval(datetime(2025, 1, 6, 10, tzinfo=UTC), datetime(2025, 1, 6, 11, tzinfo=UTC))
        assert not first.overlaps(second)
        assert not second.overlaps(first)

    def test_overlap_and_length(self):
        first = Interval(datetime(2025, 1, 6, 9, tzinfo=UTC), datetime(2025, 1, 6, 10, 30, tzinfo=UTC))
        second = Interval(datetime(2025, 1, 6, 10, tzinfo=UTC), datetime(2025, 1, 6, 11, tzinfo=UTC))
        assert first.overlaps(second)
        assert first.minutes == 90
