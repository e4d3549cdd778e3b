"""
Domain models for time-of-day intervals and site scheduling records.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Mapping, Optional

from pendulum import Date, DateTime

from .dates import minutes_of_day, parse_clock, parse_date, parse_timestamp

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
DEFAULT_SESSION_MINUTES = 30
DEFAULT_START_HOUR = 8
DEFAULT_END_HOUR = 17


def format_minutes(minutes: int) -> str:
    """Format minutes of day as 12-hour clock time, e.g. ``2:40 PM``."""
    hours = (minutes // 60) % 24
    mins = minutes % 60
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{mins:02d} {period}"


def parse_display_time(text: str) -> int:
    """
    Parse a 12-hour clock time (``h:mm AM``) back into minutes of day.

    Raises:
        ValueError: If the text is not a 12-hour clock time
    """
    clock, _, period = text.strip().partition(" ")
    hours_str, _, minutes_str = clock.partition(":")
    hours = int(hours_str)
    minutes = int(minutes_str)
    period = period.strip().upper()

    if period not in ("AM", "PM") or not (1 <= hours <= 12 and 0 <= minutes <= 59):
        raise ValueError(f"Not a 12-hour clock time: {text!r}")

    if period == "PM" and hours != 12:
        hours += 12
    if period == "AM" and hours == 12:
        hours = 0

    return hours * 60 + minutes


@dataclass(frozen=True)
class TimeInterval:
    """
    Half-open time-of-day range in minutes.

    Invariant: 0 <= start < end <= 1440.
    """
    start: int
    end: int

    def __post_init__(self):
        if not 0 <= self.start < self.end <= MINUTES_PER_DAY:
            raise ValueError(
                f"Invalid interval {self.start}-{self.end}: "
                f"expected 0 <= start < end <= {MINUTES_PER_DAY}"
            )

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        """Check if this interval overlaps with another."""
        return self.start < other.end and self.end > other.start

    def contains(self, minute: int) -> bool:
        """Check if a minute of day falls inside this interval."""
        return self.start <= minute < self.end

    def clip(self, lower: int, upper: int) -> "TimeInterval | None":
        """
        Intersect with ``[lower, upper]``.
        Returns None if nothing remains.
        """
        start = max(self.start, lower)
        end = min(self.end, upper)

        if start >= end:
            return None

        return TimeInterval(start=start, end=end)

    def format_display(self) -> str:
        """Format as ``h:mm AM - h:mm PM``."""
        return f"{format_minutes(self.start)} - {format_minutes(self.end)}"

    @classmethod
    def parse_display(cls, text: str) -> "TimeInterval":
        """Inverse of ``format_display``."""
        start_str, separator, end_str = text.partition(" - ")
        if not separator:
            raise ValueError(f"Not a time range: {text!r}")

        start = parse_display_time(start_str)
        end = parse_display_time(end_str)

        # Midnight as an end boundary is the end of the day.
        if end == 0:
            end = MINUTES_PER_DAY

        return cls(start=start, end=end)

    def __str__(self) -> str:
        return self.format_display()


def merge_intervals(intervals: Iterable[TimeInterval]) -> List[TimeInterval]:
    """
    Merge overlapping or touching intervals.

    Example: [9:00-10:00, 10:00-11:00, 10:30-12:00] -> [9:00-12:00]
    """
    sorted_intervals = sorted(intervals, key=lambda iv: (iv.start, iv.end))

    if not sorted_intervals:
        return []

    merged: List[TimeInterval] = [sorted_intervals[0]]

    for current in sorted_intervals[1:]:
        last = merged[-1]

        # Touching intervals leave no gap and merge too
        if current.start <= last.end:
            merged[-1] = TimeInterval(start=last.start, end=max(last.end, current.end))
        else:
            merged.append(current)

    return merged


@dataclass(frozen=True)
class OperatingHours:
    """Daily opening hours of a site, in whole 24-hour clock hours."""
    start_hour: int = DEFAULT_START_HOUR
    end_hour: int = DEFAULT_END_HOUR

    def __post_init__(self):
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError(
                f"Invalid operating hours {self.start_hour}-{self.end_hour}"
            )

    def work_window(self) -> TimeInterval:
        """Operating hours as a time-of-day interval."""
        return TimeInterval(start=self.start_hour * 60, end=self.end_hour * 60)

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> "OperatingHours":
        """
        Build from a ``{startHour, endHour}`` record.

        Missing or malformed values fall back to 8-17.
        """
        if not record:
            return cls()

        start_hour = _as_int(record.get("startHour"), DEFAULT_START_HOUR)
        end_hour = _as_int(record.get("endHour"), DEFAULT_END_HOUR)

        try:
            return cls(start_hour=start_hour, end_hour=end_hour)
        except ValueError:
            logger.warning(
                "Ignoring invalid operating hours %s-%s, using defaults",
                start_hour,
                end_hour,
            )
            return cls()


class RecurrencePattern(str, Enum):
    """How a recurring template repeats."""
    WEEKLY = "weekly"
    DAILY = "daily"
    SPECIFIC_DATES = "specific-dates"
    NONE = "none"


def weekday_index(day: Date) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7


@dataclass(frozen=True)
class RecurringSessionTemplate:
    """
    A standing therapy slot.

    Exactly one of ``end_minutes`` / ``duration_minutes`` governs the
    session length; with neither it lasts 30 minutes.
    """
    student_ids: FrozenSet[str]
    start_minutes: int
    recurrence_pattern: Optional[RecurrencePattern]
    start_date: Date
    end_minutes: Optional[int] = None
    duration_minutes: Optional[int] = None
    days_of_week: FrozenSet[int] = field(default_factory=frozenset)
    specific_dates: FrozenSet[Date] = field(default_factory=frozenset)
    end_date: Optional[Date] = None
    active: bool = True
    cancelled_dates: FrozenSet[Date] = field(default_factory=frozenset)
    id: str = ""

    def session_length(self) -> int:
        """Length in minutes: end time, else duration, else 30."""
        if self.end_minutes is not None and self.end_minutes > self.start_minutes:
            return self.end_minutes - self.start_minutes

        if self.duration_minutes is not None and self.duration_minutes > 0:
            return self.duration_minutes

        return DEFAULT_SESSION_MINUTES

    def interval(self) -> TimeInterval:
        """Occupied time of day."""
        end = min(self.start_minutes + self.session_length(), MINUTES_PER_DAY)
        return TimeInterval(start=self.start_minutes, end=end)

    def matches_pattern(self, day: Date) -> bool:
        """Check the recurrence pattern alone."""
        if self.recurrence_pattern is RecurrencePattern.WEEKLY:
            return weekday_index(day) in self.days_of_week
        if self.recurrence_pattern is RecurrencePattern.SPECIFIC_DATES:
            return day in self.specific_dates
        if self.recurrence_pattern is RecurrencePattern.DAILY:
            return True
        if self.recurrence_pattern is RecurrencePattern.NONE:
            return day == self.start_date
        return False

    def occurs_on(self, day: Date) -> bool:
        """
        Check whether this template generates a session on ``day``.

        Checks, in order: active flag, cancelled dates, recurrence
        pattern, start/end date range (both ends inclusive).
        """
        if not self.active:
            return False

        if day in self.cancelled_dates:
            return False

        if not self.matches_pattern(day):
            return False

        if day < self.start_date:
            return False

        if self.end_date is not None and day > self.end_date:
            return False

        return True

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "RecurringSessionTemplate | None":
        """
        Build from a stored scheduled-session record.

        Returns None when the record has no usable start time. Dates that
        cannot be parsed raise ``InvalidDateError``.
        """
        record_id = str(record.get("id", ""))
        start_minutes = parse_clock(record.get("startTime"))

        if start_minutes is None:
            logger.warning(
                "Skipping scheduled session %s: unusable start time %r",
                record_id,
                record.get("startTime"),
            )
            return None

        raw_pattern = record.get("recurrencePattern")
        try:
            pattern: Optional[RecurrencePattern] = RecurrencePattern(raw_pattern)
        except ValueError:
            logger.warning(
                "Scheduled session %s has unknown recurrence pattern %r",
                record_id,
                raw_pattern,
            )
            pattern = None

        end_date = record.get("endDate")

        return cls(
            id=record_id,
            student_ids=frozenset(str(s) for s in record.get("studentIds") or []),
            start_minutes=start_minutes,
            end_minutes=parse_clock(record.get("endTime")),
            duration_minutes=_as_int(record.get("duration"), None),
            recurrence_pattern=pattern,
            days_of_week=frozenset(
                day for day in (_as_int(d, None) for d in record.get("dayOfWeek") or [])
                if day is not None
            ),
            specific_dates=frozenset(
                parse_date(d, "specificDates") for d in record.get("specificDates") or []
            ),
            start_date=parse_date(record.get("startDate"), "startDate"),
            end_date=parse_date(end_date, "endDate") if end_date else None,
            active=record.get("active") is not False,
            cancelled_dates=frozenset(
                parse_date(d, "cancelledDates") for d in record.get("cancelledDates") or []
            ),
        )


@dataclass(frozen=True)
class LoggedSession:
    """
    A session that actually took place (or was missed).

    ``missed`` is informational only: a missed session still occupies its time.
    """
    student_id: str
    start: DateTime
    end: Optional[DateTime] = None
    missed: bool = False
    id: str = ""

    def local_date(self) -> Date:
        """Calendar day of the session start."""
        return self.start.date()

    def interval(self) -> TimeInterval:
        """
        Occupied time of day, from local wall-clock hour and minute.

        Without a usable end the session lasts 30 minutes.
        """
        start = minutes_of_day(self.start)

        if self.end is None or self.end <= self.start:
            end = start + DEFAULT_SESSION_MINUTES
        elif self.end.date() != self.start.date():
            end = MINUTES_PER_DAY
        else:
            end = minutes_of_day(self.end)

        return TimeInterval(start=start, end=min(max(end, start + 1), MINUTES_PER_DAY))

    @classmethod
    def from_record(cls, record: Mapping[str, Any], timezone: str) -> "LoggedSession":
        """Build from a stored session record (``date`` is the start)."""
        end_time = record.get("endTime")

        return cls(
            id=str(record.get("id", "")),
            student_id=str(record.get("studentId", "")),
            start=parse_timestamp(record.get("date"), timezone, "date"),
            end=parse_timestamp(end_time, timezone, "endTime") if end_time else None,
            missed=bool(record.get("missedSession", False)),
        )


@dataclass(frozen=True)
class ExclusionDescriptor:
    """
    The session being cancelled or rescheduled.

    Its own slot must not count as occupied when looking for a replacement.
    """
    student_ids: FrozenSet[str]
    start_minutes: int
    end_minutes: Optional[int] = None

    def matches(
        self,
        student_ids: Iterable[str],
        start_minutes: int,
        tolerance_minutes: int,
    ) -> bool:
        """Shares a student and starts within the tolerance."""
        if self.student_ids.isdisjoint(student_ids):
            return False

        return abs(start_minutes - self.start_minutes) < tolerance_minutes

    def explicit_length(self) -> Optional[int]:
        """Length when an end time was given and is after the start."""
        if self.end_minutes is None or self.end_minutes <= self.start_minutes:
            return None
        return self.end_minutes - self.start_minutes


@dataclass(frozen=True)
class OpenSlot:
    """An open window offered to the caller."""
    interval: TimeInterval
    label: str

    @classmethod
    def from_interval(cls, interval: TimeInterval) -> "OpenSlot":
        return cls(interval=interval, label=interval.format_display())

    def __str__(self) -> str:
        return self.label


def _as_int(value: Any, default: Optional[int]) -> Optional[int]:
    """Lenient int conversion for stored numeric fields."""
    if value is None or isinstance(value, bool):
        return default

    try:
        return int(value)
    except (TypeError, ValueError):
        return default
