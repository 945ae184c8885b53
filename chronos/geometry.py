"""
Time geometry for the day and week timelines.

Maps an event's local start/end time onto a 24-hour timeline:
    offset = (start_hour + start_minute / 60) / 24
    extent = ((end_hour + end_minute / 60) - (start_hour + start_minute / 60)) / 24
Both are fractions of the timeline (0.0-1.0); multiplying by a timeline
height in units gives top/height. The extent is floored at a minimum so
very short events stay clickable; the floor never touches the event.
"""

from dataclasses import dataclass
from datetime import datetime, date, time as dt_time, timedelta
from typing import Iterable, Optional, Union

from .config import LayoutConfig
from .errors import InvalidRange
from .event import Event
from .timezone_utils import to_local_datetime, to_local_hour, local_combine

HOURS_PER_DAY = 24.0

# 24 units at 64 units per hour, as a fraction of the whole day
DEFAULT_MIN_EXTENT = LayoutConfig().min_extent


@dataclass(frozen=True)
class EventPortion:
    """
    The part of an event visible on one day.

    An event "Sat 17:00 - Sun 04:00" has two portions:
    - Saturday: visible 17:00-24:00
    - Sunday: visible 00:00-04:00
    """
    event: Event
    display_date: date
    visible_start_hour: float  # 0-24
    visible_end_hour: float    # 0-24

    @staticmethod
    def for_day(event: Event, day: date) -> Optional['EventPortion']:
        """
        Clip an event to a day. Returns None if the event is not visible on it.
        """
        local_start = to_local_datetime(event.start)
        local_end = to_local_datetime(event.end)

        if local_start.date() > day or local_end.date() < day:
            return None
        # Ending exactly at midnight means nothing is visible on that day
        if local_end.date() == day and local_start.date() < day and local_end.time() == dt_time.min:
            return None

        if local_start.date() == day:
            start_hour = to_local_hour(event.start)
        else:
            start_hour = 0.0  # Event started before this day

        if local_end.date() == day:
            end_hour = to_local_hour(event.end)
        else:
            end_hour = HOURS_PER_DAY  # Event continues after this day

        return EventPortion(event, day, start_hour, end_hour)

    @staticmethod
    def for_event(event: Event) -> 'EventPortion':
        """
        The whole event as one portion on its start day.

        Raises InvalidRange if the event runs past midnight; such events
        must be clipped with for_day() first.
        """
        local_start = to_local_datetime(event.start)
        local_end = to_local_datetime(event.end)
        day = local_start.date()
        start_hour = local_start.hour + local_start.minute / 60.0

        if local_end.date() == day:
            end_hour = local_end.hour + local_end.minute / 60.0
        elif local_end.date() == day + timedelta(days=1) and local_end.time() == dt_time.min:
            end_hour = HOURS_PER_DAY
        else:
            raise InvalidRange(event.start, event.end,
                               f"Event {event.id!r} crosses midnight; clip it to the displayed day first")
        return EventPortion(event, day, start_hour, end_hour)

    @property
    def duration_hours(self) -> float:
        return self.visible_end_hour - self.visible_start_hour

    def calculate_new_event_times(self, new_visible_start_hour: float) -> tuple[datetime, datetime]:
        """
        Translate a drag of this portion to new start/end times for the event.

        The event moves by the same delta as the portion; duration is kept.
        """
        old_minutes = round(self.visible_start_hour * 60)
        new_minutes = round(new_visible_start_hour * 60)
        delta = timedelta(minutes=new_minutes - old_minutes)
        return (self.event.start + delta, self.event.end + delta)


@dataclass(frozen=True)
class EventGeometry:
    """Normalized placement on a 24-hour timeline plus its size in units."""
    offset: float             # fraction of the day before the block starts
    extent: float             # fraction of the day the block covers (floored)
    timeline_height: float = 1.0

    @property
    def top(self) -> float:
        return self.offset * self.timeline_height

    @property
    def height(self) -> float:
        return self.extent * self.timeline_height

    def scaled(self, timeline_height: float) -> 'EventGeometry':
        return EventGeometry(self.offset, self.extent, timeline_height)


def position_portion(
    portion: EventPortion,
    timeline_height: float = 1.0,
    min_extent: float = DEFAULT_MIN_EXTENT,
) -> EventGeometry:
    offset = portion.visible_start_hour / HOURS_PER_DAY
    extent = max(portion.duration_hours / HOURS_PER_DAY, min_extent)
    return EventGeometry(offset=offset, extent=extent, timeline_height=timeline_height)


def position(
    event: Union[Event, EventPortion],
    timeline_height: float = 1.0,
    min_extent: float = DEFAULT_MIN_EXTENT,
) -> EventGeometry:
    """
    Place an event (or an already clipped portion) on the day timeline.

    timeline_height is the size of the full 24 hours in the caller's units
    (1.0 gives plain fractions, 24 * hour_height gives pixels).
    """
    if timeline_height <= 0:
        raise ValueError(f"timeline_height must be positive, got {timeline_height}")
    portion = event if isinstance(event, EventPortion) else EventPortion.for_event(event)
    return position_portion(portion, timeline_height, min_extent)


def hour_to_datetime(day: date, hour: float) -> datetime:
    """Local datetime for a fractional hour on a day, snapped to the minute."""
    minutes = max(0, min(round(hour * 60), 24 * 60))
    if minutes == 24 * 60:
        return local_combine(day + timedelta(days=1))
    return local_combine(day, minutes // 60, minutes % 60)


# ==================== Side-by-side Layout ====================

@dataclass(frozen=True)
class EventBlock:
    """A positioned block for one event portion on a day timeline."""
    portion: EventPortion
    geometry: EventGeometry
    column: int = 0
    column_count: int = 1

    @property
    def event(self) -> Event:
        return self.portion.event

    @property
    def left(self) -> float:
        """Horizontal start as a fraction of the day column width."""
        return self.column / self.column_count

    @property
    def width(self) -> float:
        return 1.0 / self.column_count


# Blocks shorter than this are treated as this long when deciding overlap
_MIN_LAYOUT_HOURS = 0.5


def _layout_span(portion: EventPortion) -> tuple[float, float]:
    start = portion.visible_start_hour
    end = portion.visible_end_hour
    if end - start < _MIN_LAYOUT_HOURS:
        end = start + _MIN_LAYOUT_HOURS
    return start, end


def _portions_overlap(p1: EventPortion, p2: EventPortion) -> bool:
    s1, e1 = _layout_span(p1)
    s2, e2 = _layout_span(p2)
    return s1 < e2 and s2 < e1


def layout_day(
    events: Iterable[Event],
    day: date,
    timeline_height: float = 1.0,
    min_extent: float = DEFAULT_MIN_EXTENT,
) -> list[EventBlock]:
    """
    Clip events to a day, position them, and assign side-by-side columns.

    Overlapping blocks form groups; inside a group every block takes the
    first column that is free at its start. Output is in start order.
    """
    portions = [p for p in (EventPortion.for_day(e, day) for e in events) if p is not None]
    # Start time, then longer first
    portions.sort(key=lambda p: (p.visible_start_hour, -p.duration_hours))

    groups: list[list[EventPortion]] = []
    for portion in portions:
        hits = [i for i, group in enumerate(groups)
                if any(_portions_overlap(portion, other) for other in group)]
        if not hits:
            groups.append([portion])
        elif len(hits) == 1:
            groups[hits[0]].append(portion)
        else:
            merged = []
            for i in sorted(hits, reverse=True):
                merged.extend(groups.pop(i))
            merged.append(portion)
            groups.append(merged)

    blocks = []
    for group in groups:
        group.sort(key=lambda p: (p.visible_start_hour, -p.duration_hours))
        column_ends: list[float] = []
        assigned: list[tuple[EventPortion, int]] = []
        for portion in group:
            start, end = _layout_span(portion)
            for col, col_end in enumerate(column_ends):
                if start >= col_end:
                    column_ends[col] = end
                    assigned.append((portion, col))
                    break
            else:
                assigned.append((portion, len(column_ends)))
                column_ends.append(end)

        for portion, col in assigned:
            blocks.append(EventBlock(
                portion=portion,
                geometry=position_portion(portion, timeline_height, min_extent),
                column=col,
                column_count=len(column_ends),
            ))

    blocks.sort(key=lambda b: (b.portion.visible_start_hour, b.column))
    return blocks
