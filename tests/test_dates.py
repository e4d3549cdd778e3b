"""
Tests for date normalization helpers.
"""

from datetime import date, datetime

import pendulum
import pytest

from openslots.domain.dates import is_same_day, parse_clock, parse_date, parse_timestamp
from openslots.domain.exceptions import InvalidDateError

TZ = "America/Chicago"


class TestParseDate:
    """Tests for parse_date."""

    @pytest.mark.parametrize(
        "value",
        [
            "2024-11-25",
            "2024-11-25T23:30:00.000Z",
            date(2024, 11, 25),
            datetime(2024, 11, 25, 14, 0),
            pendulum.datetime(2024, 11, 25, 7, 0, tz=TZ),
        ],
    )
    def test_accepts_mixed_formats(self, value):
        """Test bare dates, timestamps and date objects."""
        assert parse_date(value) == pendulum.date(2024, 11, 25)

    @pytest.mark.parametrize("value", ["", "25/11/2024", "2024-02-30", "tomorrow", None, 20241125])
    def test_invalid_date_raises(self, value):
        """Test that unreadable dates fail fast."""
        with pytest.raises(InvalidDateError, match="Invalid date for 'target_date'"):
            parse_date(value, "target_date")


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_naive_string_is_local(self):
        """Test that strings without offset are local wall-clock time."""
        parsed = parse_timestamp("2024-11-25T09:15:00", TZ)

        assert (parsed.hour, parsed.minute) == (9, 15)
        assert parsed.timezone_name == TZ

    def test_offset_is_converted(self):
        """Test conversion of UTC timestamps."""
        parsed = parse_timestamp("2024-11-25T15:15:00Z", TZ)

        assert (parsed.hour, parsed.minute) == (9, 15)

    def test_naive_datetime_is_local(self):
        """Test naive datetime objects."""
        parsed = parse_timestamp(datetime(2024, 11, 25, 9, 15), TZ)

        assert (parsed.hour, parsed.minute) == (9, 15)

    def test_invalid_timestamp_raises(self):
        """Test that unreadable timestamps fail fast."""
        with pytest.raises(InvalidDateError, match="'now'"):
            parse_timestamp("not a time", TZ, "now")


class TestParseClock:
    """Tests for parse_clock."""

    @pytest.mark.parametrize("value,expected", [("08:00", 480), ("9:05", 545), ("13:30:00", 810)])
    def test_valid(self, value, expected):
        """Test HH:mm parsing."""
        assert parse_clock(value) == expected

    @pytest.mark.parametrize("value", [None, "", "noon", "25:00", "10:75", 600])
    def test_invalid_returns_none(self, value):
        """Test that malformed clock times never raise."""
        assert parse_clock(value) is None


class TestIsSameDay:
    """Tests for the today check."""

    def test_same_day(self):
        """Test a target date on the current day."""
        now = pendulum.datetime(2024, 11, 25, 23, 59, tz=TZ)

        assert is_same_day(pendulum.date(2024, 11, 25), now)
        assert is_same_day(date(2024, 11, 25), now)

    def test_other_day(self):
        """Test a target date on another day."""
        now = pendulum.datetime(2024, 11, 25, 0, 1, tz=TZ)

        assert not is_same_day(pendulum.date(2024, 11, 24), now)
        assert not is_same_day(pendulum.date(2024, 11, 26), now)
