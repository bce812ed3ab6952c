"""Unit tests for week boundary computation."""

from datetime import date, datetime, timezone

from tycoon.week_utils import get_monday, get_week_boundaries, get_week_iso, iso_week_to_dates


class TestWeeklyBoundaries:
    """Week boundaries used by the weekly heist and weekly stats."""

    def test_monday_is_start_of_week(self):
        dt = datetime(2026, 2, 23, 0, 0, 0, tzinfo=timezone.utc)  # Monday
        start, end = get_week_boundaries(dt)
        assert start.weekday() == 0
        assert (start.hour, start.minute, start.second) == (0, 0, 0)

    def test_sunday_is_end_of_week(self):
        dt = datetime(2026, 3, 1, 23, 59, 59, tzinfo=timezone.utc)  # Sunday
        start, end = get_week_boundaries(dt)
        assert end.weekday() == 6
        assert (end.hour, end.minute, end.second) == (23, 59, 59)

    def test_sunday_belongs_to_current_week(self):
        mon = datetime(2026, 2, 23, 10, 0, 0, tzinfo=timezone.utc)
        sun = datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)
        assert get_week_iso(mon) == get_week_iso(sun)

    def test_next_monday_is_new_week(self):
        sun = datetime(2026, 3, 1, 23, 59, 59, tzinfo=timezone.utc)
        next_mon = datetime(2026, 3, 2, 0, 0, 0, tzinfo=timezone.utc)
        assert get_week_iso(sun) != get_week_iso(next_mon)

    def test_week_boundaries_span_7_days(self):
        dt = datetime(2026, 2, 25, 12, 0, 0, tzinfo=timezone.utc)  # Wednesday
        start, end = get_week_boundaries(dt)
        assert (end - start).total_seconds() == 6 * 86400 + 23 * 3600 + 59 * 60 + 59


class TestGetMonday:
    def test_wednesday_returns_monday(self):
        wed = datetime(2026, 2, 25, 8, 0, 0, tzinfo=timezone.utc)
        assert get_monday(wed) == date(2026, 2, 23)

    def test_date_input(self):
        assert get_monday(date(2026, 2, 27)) == date(2026, 2, 23)


class TestWeekISO:
    def test_week_iso_format(self):
        assert get_week_iso(datetime(2026, 2, 23, tzinfo=timezone.utc)) == "2026-W09"

    def test_year_boundary(self):
        """Dec 29 2025 is a Monday in ISO week 1 of 2026."""
        assert get_week_iso(datetime(2025, 12, 29, tzinfo=timezone.utc)) == "2026-W01"


class TestISOWeekToDates:
    def test_week_09_2026(self):
        assert iso_week_to_dates("2026-W09") == (date(2026, 2, 23), date(2026, 3, 1))

    def test_week_01_2026(self):
        monday, sunday = iso_week_to_dates("2026-W01")
        assert monday == date(2025, 12, 29)
        assert sunday == date(2026, 1, 4)
