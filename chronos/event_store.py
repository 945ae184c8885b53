"""
Event Store for Chronos.

The one authoritative, in-memory collection of events. Views pull
snapshots through the query methods; the command layer pushes changes
through upsert/update/move/remove. Reading never mutates anything.

Invariants:
- two entries are the same event if their ids match, or if their titles
  and start calendar days match; the store never exposes both
- enumeration order is ascending start, ties in insertion order
"""

from datetime import datetime, date
from typing import Any, Callable, Iterable, Optional

from .debug import debug_print
from .errors import InvalidDate, NotFound
from .event import Event, new_event_id
from .interval_index import IntervalIndex
from .timezone_utils import ensure_aware, to_local_datetime, local_combine


def _debug_print(msg: str) -> None:
    debug_print("STORE", msg)


def deduplicate(events: Iterable[Event]) -> list[Event]:
    """
    Drop later entries that are the same event as an earlier one.

    Keeps the first of every group sharing an id or a (title, start day).
    """
    seen_ids: set[str] = set()
    seen_keys: set[tuple] = set()
    unique = []
    for event in events:
        key = event.identity_key
        if event.id in seen_ids or key in seen_keys:
            continue
        seen_ids.add(event.id)
        seen_keys.add(key)
        unique.append(event)
    return unique


def _as_date(value: Any, name: str) -> date:
    if isinstance(value, datetime):
        return to_local_datetime(value).date()
    if isinstance(value, date):
        return value
    raise InvalidDate(f"{name} must be a date, got {value!r}")


class EventStore:
    """
    Canonical, deduplicated, start-ordered collection of Event objects.
    """

    def __init__(self, events: Optional[Iterable[Any]] = None):
        # Event objects by id; _order holds each id's insertion sequence
        self._events: dict[str, Event] = {}
        self._order: dict[str, int] = {}
        self._next_seq = 0
        self._index: IntervalIndex[datetime] = IntervalIndex()
        self._on_change_callback: Optional[Callable[[], None]] = None

        if events is not None:
            self.load(events)

    def set_on_change_callback(self, callback: Callable[[], None]) -> None:
        self._on_change_callback = callback

    def _notify_change(self) -> None:
        if self._on_change_callback:
            self._on_change_callback()

    # ==================== Internal Storage ====================

    def _put(self, event: Event, seq: Optional[int] = None) -> None:
        old = self._events.get(event.id)
        if old is not None:
            self._index.remove(old.start, lambda eid: eid == old.id)
        self._events[event.id] = event
        if seq is None:
            seq = self._next_seq
            self._next_seq += 1
        self._order[event.id] = seq
        self._index.insert(event.start, event.end, event.id)

    def _drop(self, event_id: str) -> Optional[Event]:
        event = self._events.pop(event_id, None)
        if event is None:
            return None
        self._order.pop(event_id, None)
        self._index.remove(event.start, lambda eid: eid == event_id)
        return event

    def _find_same(self, event: Event) -> Optional[Event]:
        """Find the stored entry the identity rule says `event` is."""
        if event.id and event.id in self._events:
            return self._events[event.id]
        key = event.identity_key
        for stored in self._events.values():
            if stored.identity_key == key:
                return stored
        return None

    def _absorb_collisions(self, event: Event) -> None:
        """Remove other entries that now share the event's title and day."""
        key = event.identity_key
        for other_id in [eid for eid, e in self._events.items()
                         if eid != event.id and e.identity_key == key]:
            self._drop(other_id)
            _debug_print(f"absorbed duplicate {other_id} into {event.id} ({event.title!r} on {key[1]})")

    def _sorted(self) -> list[Event]:
        return sorted(self._events.values(), key=lambda e: (e.start, self._order[e.id]))

    # ==================== Ingestion ====================

    def load(self, records: Iterable[Any]) -> int:
        """
        Bulk-load host records.

        Records are normalized and given ids if they lack one. The first
        record of every duplicate group wins; later duplicates are dropped.
        Existing data is not range-checked here.

        Returns number of events kept.
        """
        kept = 0
        dropped = 0
        for record in records:
            event = Event.from_record(record)
            if self._find_same(event) is not None:
                dropped += 1
                continue
            if not event.id:
                event = event.with_id(new_event_id())
            if not event.has_valid_range:
                _debug_print(f"load: keeping {event.id} with start >= end ({event.start} / {event.end})")
            self._put(event)
            kept += 1

        _debug_print(f"load: kept {kept}, dropped {dropped} duplicates, total {len(self._events)}")
        if kept:
            self._notify_change()
        return kept

    # ==================== Commands ====================

    def upsert(self, record: Any) -> Event:
        """
        Insert or replace an event.

        Raises InvalidRange if start >= end. A missing id is assigned. If
        the identity rule matches a stored entry, that entry is replaced in
        place (keeping its id and position); otherwise the event is appended.
        """
        event = Event.from_record(record).validate_range()

        existing = self._find_same(event)
        if existing is not None:
            event = event.with_id(existing.id)
            self._put(event, seq=self._order[existing.id])
            _debug_print(f"upsert: replaced {event.id} ({event.title!r})")
        else:
            if not event.id:
                event = event.with_id(new_event_id())
            self._put(event)
            _debug_print(f"upsert: added {event.id} ({event.title!r})")

        self._absorb_collisions(event)
        self._notify_change()
        return event

    def update(self, record: Any) -> Event:
        """
        Replace the stored event with the same id.

        Raises NotFound if the id is unknown and InvalidRange if start >= end.
        """
        event = Event.from_record(record)
        if not event.id or event.id not in self._events:
            raise NotFound(event.id)
        event.validate_range()

        self._put(event, seq=self._order[event.id])
        self._absorb_collisions(event)
        _debug_print(f"update: {event.id} ({event.title!r})")
        self._notify_change()
        return event

    def move_event(self, event_id: str, new_start: datetime) -> Event:
        """Move an event to a new start, keeping its duration."""
        event = self._events.get(event_id)
        if event is None:
            raise NotFound(event_id)
        new_start = ensure_aware(new_start)
        return self.update(event.with_times(new_start, new_start + event.duration))

    def move_to_date(self, event_id: str, day: date) -> Event:
        """Move an event to another day, keeping its time of day and duration."""
        event = self._events.get(event_id)
        if event is None:
            raise NotFound(event_id)
        day = _as_date(day, "day")
        local_start = to_local_datetime(event.start)
        new_start = local_combine(day, local_start.hour, local_start.minute)
        return self.move_event(event_id, new_start)

    def remove(self, event_id: str) -> None:
        """Remove an event; unknown ids are ignored."""
        if self._drop(event_id) is not None:
            _debug_print(f"remove: {event_id}")
            self._notify_change()

    def clear(self) -> None:
        self._events.clear()
        self._order.clear()
        self._index = IntervalIndex()
        self._notify_change()

    # ==================== Queries ====================

    def get(self, event_id: str) -> Optional[Event]:
        return self._events.get(event_id)

    def __contains__(self, event_id: str) -> bool:
        return event_id in self._events

    def __len__(self) -> int:
        return len(self.all())

    def all(self) -> list[Event]:
        """Every event, deduplicated, ascending by start."""
        return deduplicate(self._sorted())

    def for_day(self, day: date) -> list[Event]:
        """Events whose start falls on the given local calendar day."""
        day = _as_date(day, "day")
        return [e for e in self.all() if e.day == day]

    def for_range(self, start: date, end: date) -> list[Event]:
        """Events whose start day falls in the half-open range [start, end)."""
        start = _as_date(start, "start")
        end = _as_date(end, "end")
        if end < start:
            raise InvalidDate(f"Range end {end} is before start {start}")
        return [e for e in self.all() if start <= e.day < end]

    def for_month(self, year: int, month: int) -> list[Event]:
        """Events starting in the given month (1-12)."""
        try:
            first = date(year, month, 1)
        except (TypeError, ValueError) as e:
            raise InvalidDate(f"Invalid month {year}-{month}: {e}")
        following = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        return self.for_range(first, following)

    def overlapping(
        self,
        start: datetime,
        end: datetime,
        exclude_id: Optional[str] = None,
        include_leave: bool = False,
    ) -> list[Event]:
        """
        Events whose time range overlaps [start, end).

        Back-to-back events do not overlap. Holiday and working-day-leave
        events are skipped unless include_leave is set.
        """
        start = ensure_aware(start)
        end = ensure_aware(end)
        hits = {eid for eid in self._index.overlapping(start, end) if eid != exclude_id}
        return [e for e in self.all()
                if e.id in hits and (include_leave or not e.is_leave)]

    def upcoming(self, today: date, limit: int = 5) -> list[Event]:
        """The next `limit` events starting on or after `today`."""
        today = _as_date(today, "today")
        return [e for e in self.all() if e.day >= today][:limit]

    def get_event_count(self) -> int:
        return len(self._events)
