"""
Core business logic for calculating open time windows on one day.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O, no clock reads).
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from pendulum import DateTime

from .dates import is_same_day, minutes_of_day
from .models import MINUTES_PER_DAY, OperatingHours, TimeInterval, merge_intervals

logger = logging.getLogger(__name__)


class SlotCalculator:
    """
    Calculates open windows from occupied intervals and operating hours.

    Algorithm:
    1. Merge the occupied intervals
    2. Clamp the work window to operating hours
    3. Walk the occupied intervals and collect the gaps between them
    4. Cut each gap to the earliest allowed start
    5. Keep gaps long enough for the session, as complete blocks
    """

    def earliest_start(
        self,
        *,
        target_date: date,
        now: DateTime,
        occupied: Iterable[TimeInterval],
        exclusion_end: Optional[int] = None,
    ) -> int:
        """
        Earliest minute of day a replacement session may start.

        Only the current day is restricted: there the bound is the later
        of the vacated session's end and "now", pushed to the end of any
        occupied interval that "now" falls inside. Other days are open
        from midnight (operating hours are applied separately).

        Args:
            target_date: Day being searched
            now: Current local time, injected by the caller
            occupied: Occupied intervals of the day (merged or not)
            exclusion_end: End of the vacated session, if known
        """
        if not is_same_day(target_date, now):
            return 0

        current_minutes = minutes_of_day(now)
        earliest = current_minutes
        if exclusion_end is not None:
            earliest = max(earliest, exclusion_end)

        for interval in merge_intervals(occupied):
            if interval.contains(current_minutes):
                earliest = max(earliest, interval.end)
                logger.debug("Now is inside occupied %s, moving start to %s", interval, interval.end)
                break

        return earliest

    def find_open_slots(
        self,
        occupied: Iterable[TimeInterval],
        required_duration_minutes: int,
        operating_hours: OperatingHours,
        earliest_start: int = 0,
        day_end: int = MINUTES_PER_DAY,
    ) -> List[TimeInterval]:
        """
        Find every open window long enough for the session.

        Args:
            occupied: Occupied intervals (any order, may overlap)
            required_duration_minutes: Minimum length of a window
            operating_hours: Site opening hours
            earliest_start: No window may start before this minute
            day_end: Hard upper bound for any window

        Returns:
            Open windows in ascending order, not split into chunks
        """
        if required_duration_minutes <= 0:
            raise ValueError("required_duration_minutes must be greater than zero")

        merged = merge_intervals(occupied)

        work_window = operating_hours.work_window()
        work_end = min(work_window.end, day_end)
        window_start = max(earliest_start, work_window.start)

        # Day already over
        if window_start >= work_end:
            return []

        relevant = [
            interval for interval in merged
            if interval.end > window_start and interval.start < work_end
        ]

        if not relevant:
            candidates = [TimeInterval(start=window_start, end=work_end)]
        else:
            candidates = self._gaps_between(relevant, window_start, work_end)

        open_slots: List[TimeInterval] = []

        for gap in candidates:
            slot = gap.clip(window_start, work_end)

            if slot is None or slot.duration_minutes() < required_duration_minutes:
                continue

            open_slots.append(slot)

        return open_slots

    @staticmethod
    def _gaps_between(
        occupied: List[TimeInterval],
        window_start: int,
        work_end: int,
    ) -> List[TimeInterval]:
        """
        Candidate gaps around sorted, merged occupied intervals.

        Example:
        Window: 08:00 - 17:00
        Occupied: [10:00-11:00, 14:00-15:00]
        Result: [08:00-10:00, 11:00-14:00, 15:00-17:00]
        """
        gaps = []

        # Before the first occupied interval
        first = occupied[0]
        if first.start > window_start:
            gaps.append(TimeInterval(start=window_start, end=first.start))

        # Between consecutive occupied intervals
        for current, following in zip(occupied, occupied[1:]):
            if current.end < following.start:
                gaps.append(TimeInterval(start=current.end, end=following.start))

        # After the last occupied interval
        last = occupied[-1]
        if last.end < work_end:
            gaps.append(TimeInterval(start=last.end, end=work_end))

        return gaps
