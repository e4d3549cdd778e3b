"""
Domain-specific exception hierarchy for the open slot finder.
"""


class SlotFinderError(Exception):
    """Base class for all application-level errors."""


class InvalidDateError(SlotFinderError, ValueError):
    """Raised when a date or timestamp input cannot be parsed."""

    def __init__(self, value: object, field: str = "date"):
        self.value = value
        self.field = field
        super().__init__(f"Invalid date for '{field}': {value!r}")


class InvalidInputError(SlotFinderError, ValueError):
    """Raised when a caller supplies an input that violates the contract."""


class ScheduleDataError(SlotFinderError):
    """Raised when schedule data cannot be read from the data source."""
