"""
The Event record and its ingestion rules.

Raw host records (dicts of arbitrary shape, camelCase or snake_case) are
normalized into Event once, at ingestion, with every optional field
defaulted. Events are immutable; edits produce new Event objects.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date, timedelta
from enum import Enum
from typing import Any, Optional
import uuid

from .errors import InvalidDate, InvalidRange, InvalidRecord
from .timezone_utils import ensure_aware, local_date


DEFAULT_COLOR = "#6366F1"
DEFAULT_CATEGORY = "work"
DEFAULT_RECURRENCE_PATTERN = "daily"
HOLIDAY_CATEGORY = "holiday"

# Known categories; the set is open, anything else is passed through
CATEGORIES = ("work", "personal", "social", "holiday", "training", "health", "travel")

REMINDER_UNITS = {
    "minutes": timedelta(minutes=1),
    "hours": timedelta(hours=1),
    "days": timedelta(days=1),
    "weeks": timedelta(weeks=1),
}


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value: Any) -> 'Priority':
        if isinstance(value, Priority):
            return value
        if not value:
            return cls.MEDIUM
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidRecord(f"Unknown priority: {value!r}")


@dataclass(frozen=True)
class Reminder:
    """A reminder some time before an event starts."""
    offset: int = 30
    unit: str = "minutes"

    def __post_init__(self):
        if self.unit not in REMINDER_UNITS:
            raise InvalidRecord(f"Unknown reminder unit: {self.unit!r}")

    @property
    def before(self) -> timedelta:
        return self.offset * REMINDER_UNITS[self.unit]

    @classmethod
    def from_record(cls, record: Any) -> 'Reminder':
        if isinstance(record, Reminder):
            return record
        # Host records call the offset "time"
        offset = record.get('offset', record.get('time', 30))
        return cls(offset=int(offset), unit=record.get('unit', 'minutes'))

    def to_record(self) -> dict:
        return {'offset': self.offset, 'unit': self.unit}


@dataclass(frozen=True)
class Event:
    """
    One concrete scheduled item.

    start/end are timezone-aware. has_conflict is a transient, view-scoped
    annotation set by the conflict detector; it never takes part in
    equality and is never stored.
    """
    id: str
    title: str
    start: datetime
    end: datetime
    color: str = DEFAULT_COLOR
    category: str = DEFAULT_CATEGORY
    priority: Priority = Priority.MEDIUM
    description: str = ""
    location: str = ""
    url: str = ""
    notes: str = ""
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    is_working_day_leave: bool = False
    has_video_call: bool = False
    attendees: tuple[str, ...] = ()
    reminders: tuple[Reminder, ...] = ()
    tags: frozenset[str] = frozenset()
    has_conflict: bool = field(default=False, compare=False)

    # ==================== Derived Properties ====================

    @property
    def day(self) -> date:
        """Local calendar date of the start instant."""
        return local_date(self.start)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_leave(self) -> bool:
        """Holiday or working-day leave: the day is fully non-working."""
        return self.category == HOLIDAY_CATEGORY or self.is_working_day_leave

    @property
    def has_valid_range(self) -> bool:
        return self.start < self.end

    @property
    def identity_key(self) -> tuple[str, date]:
        """Legacy identity for records without stable ids: title + start day."""
        return (self.title, self.day)

    def same_event(self, other: 'Event') -> bool:
        """Identity rule: same id, or same title on the same calendar day."""
        return self.id == other.id or self.identity_key == other.identity_key

    # ==================== Copies ====================

    def with_times(self, start: datetime, end: datetime) -> 'Event':
        return replace(self, start=ensure_aware(start), end=ensure_aware(end), has_conflict=False)

    def with_id(self, event_id: str) -> 'Event':
        return replace(self, id=event_id)

    def with_conflict(self, flag: bool) -> 'Event':
        return replace(self, has_conflict=flag)

    def validate_range(self) -> 'Event':
        """Raise InvalidRange unless start < end; returns self for chaining."""
        if not self.has_valid_range:
            raise InvalidRange(self.start, self.end)
        return self

    # ==================== Ingestion ====================

    @classmethod
    def from_record(cls, record: Any) -> 'Event':
        """
        Normalize a raw host record into an Event.

        Accepts an Event (returned as-is, minus any conflict flag), or a
        mapping using either the host's camelCase keys or snake_case.
        Does not check start < end; that is enforced by commands.
        """
        if isinstance(record, Event):
            return record.with_conflict(False) if record.has_conflict else record

        def pick(snake: str, camel: Optional[str] = None, default: Any = None) -> Any:
            if snake in record and record[snake] is not None:
                return record[snake]
            if camel and camel in record and record[camel] is not None:
                return record[camel]
            return default

        start = _parse_instant(pick('start'), 'start')
        end = _parse_instant(pick('end'), 'end')

        is_recurring = bool(pick('is_recurring', 'isRecurring', False))
        pattern = pick('recurrence_pattern', 'recurrencePattern')
        if is_recurring and not pattern:
            pattern = DEFAULT_RECURRENCE_PATTERN

        return cls(
            id=str(pick('id', default='') or ''),
            title=str(pick('title', default='')),
            start=start,
            end=end,
            color=pick('color', default=DEFAULT_COLOR),
            category=str(pick('category', default=DEFAULT_CATEGORY)).lower(),
            priority=Priority.parse(pick('priority')),
            description=pick('description', default=''),
            location=pick('location', default=''),
            url=pick('url', default=''),
            notes=pick('notes', default=''),
            is_recurring=is_recurring,
            recurrence_pattern=pattern,
            is_working_day_leave=bool(pick('is_working_day_leave', 'isWorkingDayLeave', False)),
            has_video_call=bool(pick('has_video_call', 'hasVideoCall', False)),
            attendees=tuple(_as_list(pick('attendees', default=()))),
            reminders=tuple(Reminder.from_record(r) for r in pick('reminders', default=())),
            tags=frozenset(_as_list(pick('tags', default=()))),
        )

    def to_record(self) -> dict:
        """Plain snake_case mapping with ISO timestamps (no conflict flag)."""
        return {
            'id': self.id,
            'title': self.title,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
            'color': self.color,
            'category': self.category,
            'priority': self.priority.value,
            'description': self.description,
            'location': self.location,
            'url': self.url,
            'notes': self.notes,
            'is_recurring': self.is_recurring,
            'recurrence_pattern': self.recurrence_pattern,
            'is_working_day_leave': self.is_working_day_leave,
            'has_video_call': self.has_video_call,
            'attendees': list(self.attendees),
            'reminders': [r.to_record() for r in self.reminders],
            'tags': sorted(self.tags),
        }

    def __repr__(self):
        return f"Event(id={self.id!r}, title={self.title!r}, start={self.start}, end={self.end})"


def new_event_id() -> str:
    """Generate an id for an event created without one."""
    return str(uuid.uuid4())


def _as_list(value: Any) -> list:
    # A lone string is one item, not a sequence of characters
    if isinstance(value, str):
        return [value] if value else []
    return list(value)


def _parse_instant(value: Any, name: str) -> datetime:
    if value is None:
        raise InvalidDate(f"Event record is missing '{name}'")
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, date):
        return ensure_aware(datetime.combine(value, datetime.min.time()))
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise InvalidDate(f"Event '{name}' is not an ISO timestamp: {value!r}")
    return ensure_aware(parsed)
