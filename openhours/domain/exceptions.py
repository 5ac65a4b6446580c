"""
Domain-specific exception hierarchy for the openhours scheduler.
"""

from typing import List, Sequence


class SchedulerError(Exception):
    """Base class for all application-level errors."""


class MalformedTimeSlotError(SchedulerError, ValueError):
    """Raised when an ``HH:MM`` value or a start/end pair is not usable."""


class InvalidSessionDurationError(SchedulerError, ValueError):
    """Raised when a session duration is not a positive whole number of minutes."""


class ScheduleValidationError(SchedulerError):
    """Raised when an administrative schedule payload is rejected."""

    def __init__(self, message: str, errors: Sequence[str] = ()):
        super().__init__(message)
        self.errors: List[str] = list(errors)

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        return base + "\n" + "\n".join(f"  - {error}" for error in self.errors)


class ScheduleStoreError(SchedulerError):
    """Raised when the stored schedule document cannot be read or written."""
