"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import (
    AvailabilityService,
    ScheduleRepositoryProtocol,
    SiteSchedule,
    resolve_required_duration,
)

__all__ = [
    "AvailabilityService",
    "ScheduleRepositoryProtocol",
    "SiteSchedule",
    "resolve_required_duration",
]
