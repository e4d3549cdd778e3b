"""
File-backed schedule repository over a JSON export of the practice data.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from ..domain.exceptions import InvalidInputError, ScheduleDataError
from ..domain.models import LoggedSession, OperatingHours, RecurringSessionTemplate

logger = logging.getLogger(__name__)


class JsonScheduleRepository:
    """
    Repository that reads site schedules from an exported JSON file.

    Expected top-level keys: ``students``, ``schools``,
    ``scheduledSessions`` and ``sessions``. A scheduled or logged session
    belongs to a site when any of its students attends that school.
    """

    def __init__(self, data_file: Path, timezone: str = "America/Chicago"):
        """
        Initialize the repository.

        Args:
            data_file: Path to the JSON export
            timezone: IANA timezone used to read logged session timestamps
        """
        self.data_file = Path(data_file)
        self.timezone = timezone
        self._data = self._load_data()

    def _load_data(self) -> Dict[str, Any]:
        """Load the export from disk."""
        if not self.data_file.exists():
            raise FileNotFoundError(f"Schedule data file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ScheduleDataError(f"Invalid JSON in {self.data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise ScheduleDataError("Schedule data file must contain an object at the root level.")

        return data

    def list_sites(self) -> List[Dict[str, Any]]:
        """Return all school records."""
        return list(self._data.get("schools") or [])

    def _find_school(self, site: str) -> Optional[Dict[str, Any]]:
        for school in self.list_sites():
            if str(school.get("name", "")).lower() == site.lower():
                return school
        return None

    def _student_ids_for_site(self, site: str) -> Set[str]:
        """IDs of the students attending ``site``."""
        if self._find_school(site) is None and not any(
            str(s.get("school", "")).lower() == site.lower()
            for s in self._data.get("students") or []
        ):
            raise InvalidInputError(f"Unknown site: '{site}'")

        return {
            str(student.get("id"))
            for student in self._data.get("students") or []
            if str(student.get("school", "")).lower() == site.lower()
        }

    async def fetch_recurring_templates(self, site: str) -> List[RecurringSessionTemplate]:
        """Recurring templates involving any student of the site."""
        site_students = self._student_ids_for_site(site)
        templates: List[RecurringSessionTemplate] = []

        for record in self._data.get("scheduledSessions") or []:
            student_ids = {str(s) for s in record.get("studentIds") or []}
            if not student_ids & site_students:
                continue

            template = RecurringSessionTemplate.from_record(record)
            if template is not None:
                templates.append(template)

        logger.debug("Loaded %d recurring template(s) for %s", len(templates), site)
        return templates

    async def fetch_logged_sessions(self, site: str) -> List[LoggedSession]:
        """Logged sessions of students at the site."""
        site_students = self._student_ids_for_site(site)

        sessions = [
            LoggedSession.from_record(record, self.timezone)
            for record in self._data.get("sessions") or []
            if str(record.get("studentId")) in site_students
        ]

        logger.debug("Loaded %d logged session(s) for %s", len(sessions), site)
        return sessions

    async def fetch_operating_hours(self, site: str) -> Optional[OperatingHours]:
        """Operating hours from the school record, if any."""
        school = self._find_school(site)
        if school is None or not school.get("schoolHours"):
            return None

        return OperatingHours.from_record(school["schoolHours"])
