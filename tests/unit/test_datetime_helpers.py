"""
Park Fan Sync - Datetime Helper Unit Tests

Tests decomposition of upstream ISO strings:
- extract_date() / extract_time() keep the literal components (offset ignored)
- to_time_of_day() conversion for TIME columns
- parse_instant() normalization to naive UTC
- utc_now() with frozen time
"""

from datetime import date, datetime, time

from freezegun import freeze_time
from parkfan.utils.datetime_helpers import (
    extract_date, extract_time, to_time_of_day, parse_instant, utc_now
)


class TestExtractDate:
    """Test extract_date()."""

    def test_offset_is_not_applied(self):
        """The printed calendar date should win over the UTC date."""
        assert extract_date("2025-06-27T09:30:00+08:00") == date(2025, 6, 27)

    def test_late_evening_negative_offset(self):
        """23:30 at -04:00 is the next day in UTC, but the literal date is kept."""
        assert extract_date("2025-06-27T23:30:00-04:00") == date(2025, 6, 27)

    def test_plain_date(self):
        assert extract_date("2025-12-24") == date(2025, 12, 24)

    def test_empty_values(self):
        assert extract_date(None) is None
        assert extract_date("") is None

    def test_unparseable_value(self):
        """Garbage should return None, not raise."""
        assert extract_date("not a date") is None

    def test_non_iso_falls_back_to_parser(self):
        assert extract_date("June 27, 2025") == date(2025, 6, 27)


class TestExtractTime:
    """Test extract_time()."""

    def test_offset_is_not_applied(self):
        assert extract_time("2025-06-27T09:30:00+08:00") == "09:30:00"

    def test_utc_suffix(self):
        assert extract_time("2025-06-27T17:05:09Z") == "17:05:09"

    def test_date_only_has_midnight(self):
        """A bare date goes through the parser and reads as midnight."""
        assert extract_time("2025-06-27") == "00:00:00"

    def test_empty_values(self):
        assert extract_time(None) is None
        assert extract_time("") is None

    def test_unparseable_value(self):
        assert extract_time("soon") is None


class TestToTimeOfDay:
    """Test to_time_of_day()."""

    def test_valid_time(self):
        assert to_time_of_day("09:30:00") == time(9, 30)

    def test_invalid_time(self):
        assert to_time_of_day("25:99:00") is None

    def test_empty(self):
        assert to_time_of_day(None) is None


class TestParseInstant:
    """Test parse_instant()."""

    def test_converts_offset_to_naive_utc(self):
        assert parse_instant("2025-06-27T12:00:00-04:00") == datetime(2025, 6, 27, 16, 0)

    def test_naive_input_is_kept(self):
        assert parse_instant("2025-06-27T12:00:00") == datetime(2025, 6, 27, 12, 0)

    def test_empty_and_invalid(self):
        assert parse_instant(None) is None
        assert parse_instant("later today") is None


class TestUtcNow:
    """Test utc_now()."""

    @freeze_time("2025-06-27 14:15:00")
    def test_returns_naive_utc(self):
        now = utc_now()

        assert now == datetime(2025, 6, 27, 14, 15)
        assert now.tzinfo is None
