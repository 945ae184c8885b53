"""
Exceptions raised by the scheduling engine.

Every error is raised synchronously at the offending call. The host shell
is responsible for turning them into user-visible messages.
"""

from datetime import datetime
from typing import Optional


class CalendarError(Exception):
    """Base class for all engine errors."""


class InvalidRange(CalendarError, ValueError):
    """An event's start is not strictly before its end."""

    field = "time"

    def __init__(self, start: datetime, end: datetime, message: Optional[str] = None):
        self.start = start
        self.end = end
        super().__init__(message or f"End time must be after start time ({start} >= {end})")


class InvalidDate(CalendarError, ValueError):
    """A malformed or out-of-domain date, month, year or view mode."""


class NotFound(CalendarError, LookupError):
    """An update referenced an event id the store does not hold."""

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"Unknown event id: {event_id!r}")


class DraftValidationError(CalendarError, ValueError):
    """A draft failed form validation; errors maps field name to message."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(f"Invalid event draft ({detail})")


class InvalidRecord(CalendarError, ValueError):
    """A raw event record carries a field value outside its vocabulary."""
