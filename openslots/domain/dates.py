"""
Normalization of the mixed date formats found in schedule records.

Upstream records carry either bare ``YYYY-MM-DD`` strings or full ISO-8601
timestamps. Everything is converted here so the rest of the domain only
sees pendulum ``Date`` / ``DateTime`` values in the site's local timezone.
"""

from datetime import date, datetime
from typing import Optional

import pendulum
from pendulum import Date, DateTime

from .exceptions import InvalidDateError

DATE_FORMAT = "YYYY-MM-DD"


def parse_date(value: object, field: str = "date") -> Date:
    """
    Normalize a calendar date.

    Args:
        value: ``date``, ``datetime``, ``YYYY-MM-DD`` string or ISO timestamp
        field: Name of the input, used in the error message

    Returns:
        pendulum Date

    Raises:
        InvalidDateError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return pendulum.date(value.year, value.month, value.day)

    if isinstance(value, date):
        return pendulum.date(value.year, value.month, value.day)

    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(value, field)

    # Timestamps keep the calendar day as written, not as converted.
    date_part = value.strip().split("T")[0]

    try:
        return pendulum.from_format(date_part, DATE_FORMAT).date()
    except ValueError as exc:
        raise InvalidDateError(value, field) from exc


def parse_timestamp(value: object, timezone: str, field: str = "timestamp") -> DateTime:
    """
    Normalize a point in time to the local wall clock of ``timezone``.

    Naive values (and strings without an offset) are read as local time.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return pendulum.instance(value, tz=timezone)
        return pendulum.instance(value).in_timezone(timezone)

    if isinstance(value, date):
        return pendulum.datetime(value.year, value.month, value.day, tz=timezone)

    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(value, field)

    try:
        parsed = pendulum.parse(value.strip(), tz=timezone)
    except ValueError as exc:
        raise InvalidDateError(value, field) from exc

    if not isinstance(parsed, DateTime):
        raise InvalidDateError(value, field)

    return parsed.in_timezone(timezone)


def parse_clock(value: object) -> Optional[int]:
    """Parse ``HH:mm`` into minutes of day. Returns None if unusable."""
    if not isinstance(value, str):
        return None

    parts = value.strip().split(":")
    if len(parts) < 2:
        return None

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None

    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        return None

    return hours * 60 + minutes


def minutes_of_day(moment: DateTime) -> int:
    """Local wall-clock minutes since midnight."""
    return moment.hour * 60 + moment.minute


def date_key(value: date) -> str:
    """Format a date as ``YYYY-MM-DD``."""
    return value.strftime("%Y-%m-%d")


def is_same_day(target: date, now: DateTime) -> bool:
    """
    Check whether ``target`` is the calendar day of ``now``.

    Both an object comparison and a string comparison are made; either one
    matching is enough.
    """
    today = now.start_of("day")

    if parse_date(target) == today.date():
        return True

    return date_key(target) == today.to_date_string()
