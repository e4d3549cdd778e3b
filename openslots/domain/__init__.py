"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import InvalidDateError, InvalidInputError, ScheduleDataError, SlotFinderError
from .models import (
    ExclusionDescriptor,
    LoggedSession,
    OpenSlot,
    OperatingHours,
    RecurrencePattern,
    RecurringSessionTemplate,
    TimeInterval,
    merge_intervals,
)
from .occupancy import OccupancyResolver
from .slot_calculator import SlotCalculator
from .verification import SlotVerifier

__all__ = [
    "ExclusionDescriptor",
    "InvalidDateError",
    "InvalidInputError",
    "LoggedSession",
    "OccupancyResolver",
    "OpenSlot",
    "OperatingHours",
    "RecurrencePattern",
    "RecurringSessionTemplate",
    "ScheduleDataError",
    "SlotCalculator",
    "SlotFinderError",
    "SlotVerifier",
    "TimeInterval",
    "merge_intervals",
]
