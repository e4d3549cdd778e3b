"""
Application services for finding replacement-session slots at a site.

The service coordinates fetching a site's schedule via a repository
adapter and delegates the actual availability calculation to the domain
layer (``OccupancyResolver`` -> ``SlotCalculator`` -> ``SlotVerifier``).
Both email call sites (cancellation and missed-session reschedule) are
thin adapters over ``calculate_open_slots``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, List, Optional, Protocol, Union

from pendulum import DateTime

from ..domain.dates import is_same_day, minutes_of_day, parse_clock, parse_date, parse_timestamp
from ..domain.exceptions import InvalidInputError
from ..domain.models import (
    DEFAULT_SESSION_MINUTES,
    MINUTES_PER_DAY,
    ExclusionDescriptor,
    LoggedSession,
    OpenSlot,
    OperatingHours,
    RecurrencePattern,
    RecurringSessionTemplate,
    weekday_index,
)
from ..domain.occupancy import OccupancyResolver
from ..domain.slot_calculator import SlotCalculator
from ..domain.verification import SlotVerifier

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Chicago"

DateInput = Union[date, str]
TimestampInput = Union[date, str]


class ScheduleRepositoryProtocol(Protocol):
    """Protocol describing the read-only data access needed by the service."""

    async def fetch_recurring_templates(self, site: str) -> List[RecurringSessionTemplate]:
        """Return every recurring template of the site."""

    async def fetch_logged_sessions(self, site: str) -> List[LoggedSession]:
        """Return every logged session of the site."""

    async def fetch_operating_hours(self, site: str) -> Optional[OperatingHours]:
        """Return the site's operating hours, or None if not configured."""


@dataclass
class SiteSchedule:
    """All scheduling data of one site."""
    site: str
    templates: List[RecurringSessionTemplate] = field(default_factory=list)
    logged_sessions: List[LoggedSession] = field(default_factory=list)
    operating_hours: OperatingHours = field(default_factory=OperatingHours)


def resolve_required_duration(
    exclusion: ExclusionDescriptor,
    templates: Iterable[RecurringSessionTemplate],
    target_date: date,
    default_minutes: int = DEFAULT_SESSION_MINUTES,
) -> int:
    """
    Length of the session being replaced.

    Uses the vacated session's own end time, else the weekly template that
    starts at the same time on that weekday, else ``default_minutes``.
    """
    explicit = exclusion.explicit_length()
    if explicit is not None:
        return explicit

    weekday = weekday_index(parse_date(target_date, "target_date"))

    for template in templates:
        if (
            template.recurrence_pattern is RecurrencePattern.WEEKLY
            and template.start_minutes == exclusion.start_minutes
            and weekday in template.days_of_week
        ):
            return template.session_length()

    return default_minutes


class AvailabilityService:
    """
    Orchestrates schedule retrieval and slot calculation.

    Dependency inversion toward a protocol makes it easy to plug in the
    file-backed repository or a stub in tests.
    """

    def __init__(
        self,
        repository: ScheduleRepositoryProtocol,
        resolver: Optional[OccupancyResolver] = None,
        slot_calculator: Optional[SlotCalculator] = None,
        verifier: Optional[SlotVerifier] = None,
        *,
        timezone: str = DEFAULT_TIMEZONE,
        default_session_minutes: int = DEFAULT_SESSION_MINUTES,
        default_operating_hours: Optional[OperatingHours] = None,
    ) -> None:
        self._repository = repository
        self._resolver = resolver or OccupancyResolver()
        self._slot_calculator = slot_calculator or SlotCalculator()
        self._verifier = verifier or SlotVerifier()
        self.timezone = timezone
        self.default_session_minutes = default_session_minutes
        self.default_operating_hours = default_operating_hours or OperatingHours()

    async def fetch_site_schedule(self, site: str) -> SiteSchedule:
        """Fetch templates, logged sessions and hours of a site concurrently."""
        templates, logged_sessions, operating_hours = await asyncio.gather(
            self._repository.fetch_recurring_templates(site),
            self._repository.fetch_logged_sessions(site),
            self._repository.fetch_operating_hours(site),
        )

        return SiteSchedule(
            site=site,
            templates=list(templates),
            logged_sessions=list(logged_sessions),
            operating_hours=operating_hours or self.default_operating_hours,
        )

    def exclusion_from_clock(
        self,
        student_ids: Iterable[str],
        start_time: str,
        end_time: Optional[str] = None,
    ) -> ExclusionDescriptor:
        """Build the vacated-session descriptor from ``HH:mm`` times."""
        start_minutes = parse_clock(start_time)
        if start_minutes is None:
            raise InvalidInputError(f"Invalid session start time: {start_time!r}")

        return ExclusionDescriptor(
            student_ids=self._student_set(student_ids),
            start_minutes=start_minutes,
            end_minutes=parse_clock(end_time),
        )

    async def find_open_slots(
        self,
        *,
        site: str,
        target_date: DateInput,
        required_duration_minutes: int,
        exclusion: Optional[ExclusionDescriptor],
        now: TimestampInput,
    ) -> List[str]:
        """
        Open windows at ``site`` on ``target_date``, formatted for display.

        Inputs are validated before any data is fetched.
        """
        day = parse_date(target_date, "target_date")
        now_local = self._local_now(now)
        self._check_duration(required_duration_minutes)

        schedule = await self.fetch_site_schedule(site)

        slots = self.calculate_open_slots(
            schedule,
            target_date=day,
            required_duration_minutes=required_duration_minutes,
            exclusion=exclusion,
            now=now_local,
        )

        return [slot.label for slot in slots]

    async def find_slots_after_cancellation(
        self,
        *,
        site: str,
        target_date: DateInput,
        student_ids: Iterable[str],
        start_time: str,
        end_time: Optional[str] = None,
        now: TimestampInput,
    ) -> List[str]:
        """
        Replacement windows for a cancelled session.

        ``start_time`` / ``end_time`` are ``HH:mm`` clock times on
        ``target_date``.
        """
        day = parse_date(target_date, "target_date")
        now_local = self._local_now(now)

        exclusion = self.exclusion_from_clock(student_ids, start_time, end_time)

        schedule = await self.fetch_site_schedule(site)
        duration = resolve_required_duration(
            exclusion,
            schedule.templates,
            day,
            self.default_session_minutes,
        )
        exclusion = self._with_session_end(exclusion, duration)

        slots = self.calculate_open_slots(
            schedule,
            target_date=day,
            required_duration_minutes=duration,
            exclusion=exclusion,
            now=now_local,
        )

        return [slot.label for slot in slots]

    async def find_slots_after_missed_session(
        self,
        *,
        site: str,
        student_id: str,
        session_start: TimestampInput,
        session_end: Optional[TimestampInput] = None,
        now: TimestampInput,
    ) -> List[str]:
        """
        Same-day make-up windows for a missed session.

        The search day is the local calendar day of ``session_start``.
        """
        start_local = parse_timestamp(session_start, self.timezone, "session_start")
        now_local = self._local_now(now)

        end_minutes = None
        if session_end is not None:
            end_local = parse_timestamp(session_end, self.timezone, "session_end")
            if end_local.date() == start_local.date():
                end_minutes = minutes_of_day(end_local)

        exclusion = ExclusionDescriptor(
            student_ids=self._student_set([student_id]),
            start_minutes=minutes_of_day(start_local),
            end_minutes=end_minutes,
        )

        day = start_local.date()
        schedule = await self.fetch_site_schedule(site)
        duration = resolve_required_duration(
            exclusion,
            schedule.templates,
            day,
            self.default_session_minutes,
        )
        exclusion = self._with_session_end(exclusion, duration)

        slots = self.calculate_open_slots(
            schedule,
            target_date=day,
            required_duration_minutes=duration,
            exclusion=exclusion,
            now=now_local,
        )

        return [slot.label for slot in slots]

    def calculate_open_slots(
        self,
        schedule: SiteSchedule,
        *,
        target_date: DateInput,
        required_duration_minutes: int,
        exclusion: Optional[ExclusionDescriptor],
        now: TimestampInput,
    ) -> List[OpenSlot]:
        """
        Run resolver, calculator and verifier over already-fetched data.

        Pure and deterministic for identical inputs.
        """
        day = parse_date(target_date, "target_date")
        now_local = self._local_now(now)
        self._check_duration(required_duration_minutes)

        occupied = self._resolver.resolve(
            day,
            schedule.templates,
            schedule.logged_sessions,
            exclusion,
        )

        exclusion_end = None
        if exclusion is not None and exclusion.explicit_length() is not None:
            exclusion_end = exclusion.end_minutes

        earliest = self._slot_calculator.earliest_start(
            target_date=day,
            now=now_local,
            occupied=occupied,
            exclusion_end=exclusion_end,
        )

        intervals = self._slot_calculator.find_open_slots(
            occupied,
            required_duration_minutes,
            schedule.operating_hours,
            earliest_start=earliest,
        )
        candidates = [OpenSlot.from_interval(interval) for interval in intervals]

        # Second, independent bound for the verifier
        verify_floor = earliest
        if is_same_day(day, now_local):
            verify_floor = max(earliest, minutes_of_day(now_local))

        slots = self._verifier.verify(
            candidates,
            occupied,
            verify_floor,
            required_duration_minutes,
        )

        logger.info(
            "Found %d open slot(s) at %s on %s for %d minutes",
            len(slots),
            schedule.site,
            day.isoformat(),
            required_duration_minutes,
        )

        return slots

    def _local_now(self, now: Optional[TimestampInput]) -> DateTime:
        if now is None:
            raise InvalidInputError("The current time 'now' must be supplied")
        return parse_timestamp(now, self.timezone, "now")

    @staticmethod
    def _check_duration(required_duration_minutes: int) -> None:
        if (
            isinstance(required_duration_minutes, bool)
            or not isinstance(required_duration_minutes, int)
            or required_duration_minutes <= 0
        ):
            raise InvalidInputError(
                f"Required duration must be a positive number of minutes, "
                f"got {required_duration_minutes!r}"
            )

    @staticmethod
    def _student_set(student_ids: Iterable[str]) -> frozenset:
        students = frozenset(str(s) for s in student_ids if s)
        if not students:
            raise InvalidInputError("At least one student is required")
        return students

    @staticmethod
    def _with_session_end(exclusion: ExclusionDescriptor, duration: int) -> ExclusionDescriptor:
        """The vacated session ends ``duration`` minutes after its start."""
        end_minutes = min(exclusion.start_minutes + duration, MINUTES_PER_DAY)
        return replace(exclusion, end_minutes=end_minutes)
