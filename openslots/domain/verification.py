"""
Final safety net over generated slots.

Every candidate is re-read from its formatted label and checked again,
independently of how the calculator produced it. Candidates that fail
are dropped, never reported as errors.
"""

import logging
from typing import Iterable, List

from .models import OpenSlot, TimeInterval, merge_intervals

logger = logging.getLogger(__name__)


class SlotVerifier:
    """Drops any candidate slot that is too short, too early, or occupied."""

    def verify(
        self,
        candidates: Iterable[OpenSlot],
        occupied: Iterable[TimeInterval],
        earliest_start: int,
        required_duration_minutes: int = 1,
    ) -> List[OpenSlot]:
        """
        Re-check candidates against the occupied intervals.

        Args:
            candidates: Slots produced by the calculator
            occupied: Occupied intervals of the day
            earliest_start: Earliest allowed start minute
            required_duration_minutes: Minimum slot length

        Returns:
            The candidates that pass every check, in input order
        """
        merged = merge_intervals(occupied)
        verified: List[OpenSlot] = []

        for slot in candidates:
            try:
                interval = TimeInterval.parse_display(slot.label)
            except ValueError as exc:
                logger.debug("Dropping slot %r: %s", slot.label, exc)
                continue

            if interval.start < earliest_start:
                logger.debug("Dropping slot %s: starts before %s", slot, earliest_start)
                continue

            if interval.duration_minutes() < required_duration_minutes:
                logger.debug("Dropping slot %s: shorter than %s minutes", slot, required_duration_minutes)
                continue

            if any(interval.overlaps(busy) for busy in merged):
                logger.debug("Dropping slot %s: overlaps an occupied interval", slot)
                continue

            verified.append(slot)

        return verified
