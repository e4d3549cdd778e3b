"""
Resolution of a site's occupied time on one calendar day.

Takes every recurring template and logged session of the site (all
students, not just the one being rescheduled) and maps the ones that
apply to the target day onto time-of-day intervals.
"""

import logging
from typing import Iterable, List, Optional

from pendulum import Date

from .models import (
    ExclusionDescriptor,
    LoggedSession,
    RecurringSessionTemplate,
    TimeInterval,
)

logger = logging.getLogger(__name__)

DEFAULT_EXCLUSION_TOLERANCE_MINUTES = 5


class OccupancyResolver:
    """
    Turns raw schedule records into occupied intervals for one date.

    The output is not merged; merging belongs to the slot calculator.
    """

    def __init__(self, tolerance_minutes: int = DEFAULT_EXCLUSION_TOLERANCE_MINUTES):
        if tolerance_minutes <= 0:
            raise ValueError("tolerance_minutes must be greater than zero")
        self.tolerance_minutes = tolerance_minutes

    def resolve(
        self,
        target_date: Date,
        templates: Iterable[RecurringSessionTemplate],
        logged_sessions: Iterable[LoggedSession],
        exclusion: Optional[ExclusionDescriptor] = None,
    ) -> List[TimeInterval]:
        """
        Collect occupied intervals on ``target_date``.

        Args:
            target_date: Day to resolve
            templates: All recurring templates of the site
            logged_sessions: All logged sessions of the site
            exclusion: Session being vacated; never counts as occupied

        Returns:
            Unmerged list of occupied intervals
        """
        occupied: List[TimeInterval] = []

        for template in self.scheduled_on(target_date, templates):
            if self._is_excluded(template.student_ids, template.start_minutes, exclusion):
                logger.debug(
                    "Excluding scheduled session %s at %s as the vacated session",
                    template.id,
                    template.interval(),
                )
                continue
            occupied.append(template.interval())

        for session in self.logged_on(target_date, logged_sessions):
            interval = session.interval()
            if self._is_excluded([session.student_id], interval.start, exclusion):
                logger.debug(
                    "Excluding logged session %s at %s as the vacated session",
                    session.id,
                    interval,
                )
                continue
            occupied.append(interval)

        return occupied

    @staticmethod
    def scheduled_on(
        target_date: Date,
        templates: Iterable[RecurringSessionTemplate],
    ) -> List[RecurringSessionTemplate]:
        """Templates that generate a session on ``target_date``."""
        return [t for t in templates if t.occurs_on(target_date)]

    @staticmethod
    def logged_on(
        target_date: Date,
        logged_sessions: Iterable[LoggedSession],
    ) -> List[LoggedSession]:
        """Logged sessions whose local start falls on ``target_date``."""
        return [s for s in logged_sessions if s.local_date() == target_date]

    def _is_excluded(
        self,
        student_ids: Iterable[str],
        start_minutes: int,
        exclusion: Optional[ExclusionDescriptor],
    ) -> bool:
        if exclusion is None:
            return False
        return exclusion.matches(student_ids, start_minutes, self.tolerance_minutes)
