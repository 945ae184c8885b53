"""
Command interface for Chronos.

CalendarController is the facade a host shell drives: navigation commands,
the create/edit draft flow, store mutations and the render-ready view
queries. Every call runs to completion before returning.
"""

from dataclasses import dataclass, field
from datetime import datetime, date, timedelta
from typing import Callable, Mapping, Optional, Union

from .config import Config, LayoutConfig
from .conflicts import annotate, conflict_count
from .debug import debug_print
from .errors import DraftValidationError, InvalidRange, NotFound
from .event import (
    Event, Priority, Reminder,
    DEFAULT_CATEGORY, DEFAULT_COLOR, DEFAULT_RECURRENCE_PATTERN,
)
from .event_store import EventStore
from .geometry import EventBlock, hour_to_datetime, layout_day
from .grid import month_grid, month_start, year_grid, week_days
from .navigation import DayClick, NavigationState, Navigator, ViewMode, as_date
from .templates import Template, TemplateRegistry
from .timezone_utils import ensure_aware, get_local_timezone, local_combine

WeatherLookup = Union[Mapping[str, str], Callable[[str], Optional[str]]]


def _debug_print(msg: str) -> None:
    debug_print("CMD", msg)


# ==================== Drafts ====================

@dataclass
class EventDraft:
    """
    An uncommitted event being created or edited.

    Nothing reaches the store until the draft is saved; discarding a draft
    is simply dropping it.
    """
    title: str
    start: datetime
    end: datetime
    id: Optional[str] = None
    category: str = DEFAULT_CATEGORY
    color: str = DEFAULT_COLOR
    priority: Priority = Priority.MEDIUM
    description: str = ""
    location: str = ""
    url: str = ""
    notes: str = ""
    is_recurring: bool = False
    recurrence_pattern: str = DEFAULT_RECURRENCE_PATTERN
    is_working_day_leave: bool = False
    has_video_call: bool = False
    attendees: list[str] = field(default_factory=list)
    reminders: list[Reminder] = field(default_factory=lambda: [Reminder()])
    tags: set[str] = field(default_factory=set)

    @classmethod
    def from_template(cls, template: Template, start: datetime) -> 'EventDraft':
        start = ensure_aware(start)
        return cls(
            title=template.title,
            start=start,
            end=start + timedelta(minutes=template.duration_minutes),
            category=template.category,
            color=template.color,
            description=template.description,
            has_video_call=template.has_video_call,
            is_recurring=template.is_recurring,
            recurrence_pattern=template.recurrence_pattern or DEFAULT_RECURRENCE_PATTERN,
            reminders=list(template.reminders),
        )

    @classmethod
    def from_event(cls, event: Event) -> 'EventDraft':
        """Open an existing event for editing."""
        return cls(
            id=event.id,
            title=event.title,
            start=event.start,
            end=event.end,
            category=event.category,
            color=event.color,
            priority=event.priority,
            description=event.description,
            location=event.location,
            url=event.url,
            notes=event.notes,
            is_recurring=event.is_recurring,
            recurrence_pattern=event.recurrence_pattern or DEFAULT_RECURRENCE_PATTERN,
            is_working_day_leave=event.is_working_day_leave,
            has_video_call=event.has_video_call,
            attendees=list(event.attendees),
            reminders=list(event.reminders),
            tags=set(event.tags),
        )

    @property
    def is_new(self) -> bool:
        return not self.id

    def validate(self) -> dict[str, str]:
        """Field-level form errors; an empty dict means the draft can be saved."""
        errors = {}
        if not self.title.strip():
            errors['title'] = "Title is required"
        if ensure_aware(self.end) <= ensure_aware(self.start):
            errors['end'] = "End time must be after start time"
        bad = [a for a in self.attendees if '@' not in a]
        if bad:
            errors['attendees'] = f"Invalid email address: {', '.join(bad)}"
        return errors

    def to_record(self) -> dict:
        return {
            'id': self.id or '',
            'title': self.title.strip(),
            'start': ensure_aware(self.start),
            'end': ensure_aware(self.end),
            'category': self.category,
            'color': self.color,
            'priority': self.priority,
            'description': self.description,
            'location': self.location,
            'url': self.url,
            'notes': self.notes,
            'is_recurring': self.is_recurring,
            'recurrence_pattern': self.recurrence_pattern if self.is_recurring else None,
            'is_working_day_leave': self.is_working_day_leave,
            'has_video_call': self.has_video_call,
            'attendees': [a.strip() for a in self.attendees],
            'reminders': list(self.reminders),
            'tags': set(self.tags),
        }


# ==================== Render-ready Views ====================

@dataclass
class DayCell:
    """One month-grid cell with the day's annotated events."""
    date: date
    in_month: bool
    events: list[Event]
    is_today: bool = False
    is_selected: bool = False
    weather: Optional[str] = None

    @property
    def is_weekend(self) -> bool:
        return self.date.weekday() >= 5

    @property
    def is_leave_day(self) -> bool:
        return any(e.is_leave for e in self.events)

    @property
    def has_events(self) -> bool:
        return bool(self.events)

    @property
    def conflict_count(self) -> int:
        return conflict_count(self.events)


@dataclass
class MonthView:
    year: int
    month: int
    weeks: list[list[DayCell]]

    @property
    def cells(self) -> list[DayCell]:
        return [cell for week in self.weeks for cell in week]


@dataclass
class DayColumn:
    """A day on a 24-hour timeline: its events plus positioned blocks."""
    date: date
    events: list[Event]
    blocks: list[EventBlock]
    is_today: bool = False
    weather: Optional[str] = None

    @property
    def is_leave_day(self) -> bool:
        return any(e.is_leave for e in self.events)


@dataclass
class WeekView:
    days: list[DayColumn]

    @property
    def start(self) -> date:
        return self.days[0].date


@dataclass
class MonthSummary:
    year: int
    month: int
    weeks: list[list[date]]
    in_month: list[list[bool]]
    event_count: int = 0
    work_count: int = 0
    leave_count: int = 0


@dataclass
class YearView:
    year: int
    months: list[MonthSummary]
    total_work: int = 0
    total_social: int = 0
    total_holidays: int = 0

    @property
    def total_events(self) -> int:
        return sum(m.event_count for m in self.months)


# ==================== Controller ====================

class CalendarController:
    """
    Imperative facade over the navigator and the event store.

    The store is the only mutable shared state; views read snapshots via
    the query methods and change things only through these commands.
    """

    def __init__(
        self,
        store: Optional[EventStore] = None,
        config: Optional[Config] = None,
        navigator: Optional[Navigator] = None,
        weather: Optional[WeatherLookup] = None,
    ):
        self.config = config if config is not None else Config()
        self.store = store if store is not None else EventStore()
        self.navigator = navigator if navigator is not None else Navigator(
            today=self.config.today,
            first_weekday=self.config.layout.first_weekday,
        )
        self.templates = TemplateRegistry(self.config.templates)
        self.weather = weather if weather is not None else dict(self.config.weather)

    @property
    def layout(self) -> LayoutConfig:
        return self.config.layout

    # ==================== Navigation Commands ====================

    def jump_to_date(self, d) -> NavigationState:
        _debug_print(f"jump_to_date({d})")
        return self.navigator.jump_to_date(d)

    def set_view_mode(self, mode: Union[ViewMode, str]) -> NavigationState:
        _debug_print(f"set_view_mode({mode})")
        return self.navigator.set_view_mode(mode)

    def go_to_today(self) -> NavigationState:
        _debug_print("go_to_today()")
        return self.navigator.go_to_today()

    def next(self) -> NavigationState:
        return self.navigator.next()

    def previous(self) -> NavigationState:
        return self.navigator.previous()

    def click_day(self, d) -> DayClick:
        """A day cell was clicked; the outcome tells the host what to show."""
        d = as_date(d)
        has_events = bool(self.store.for_day(d))
        outcome = self.navigator.click_day(d, has_events=has_events, mobile=self.layout.mobile)
        _debug_print(f"click_day({d}) -> {outcome.value}")
        return outcome

    def click_year_day(self, d) -> NavigationState:
        return self.navigator.click_year_day(d)

    def click_month(self, year: int, month: int) -> NavigationState:
        return self.navigator.click_month(year, month)

    def get_current_date(self) -> date:
        return self.navigator.current_date

    def get_view_mode(self) -> ViewMode:
        return self.navigator.view_mode

    def get_selected_date(self) -> date:
        return self.navigator.selected_date

    # ==================== Create / Edit Flow ====================

    def create_from_template(self, name: Optional[str] = None,
                             start: Optional[datetime] = None) -> EventDraft:
        """
        Open a create flow pre-filled from a template.

        Returns a draft; nothing is inserted until save_draft() is called.
        Without an explicit start the draft begins at the current time of
        day on the selected date.
        """
        template = self.templates.get(name)
        if start is None:
            now = datetime.now(get_local_timezone())
            start = local_combine(self.navigator.selected_date, now.hour, now.minute)
        _debug_print(f"create_from_template({template.name!r}) at {start}")
        return EventDraft.from_template(template, start)

    def open_time_slot(self, day, hour: float) -> EventDraft:
        """A click on an empty time slot: a one-hour draft at the clicked hour."""
        day = as_date(day)
        start = hour_to_datetime(day, int(hour))
        self.navigator.click_time_slot(start)
        return EventDraft.from_template(self.templates.get(None), start)

    def edit_event(self, event_id: str) -> EventDraft:
        event = self.store.get(event_id)
        if event is None:
            raise NotFound(event_id)
        return EventDraft.from_event(event)

    def draft_conflicts(self, draft: EventDraft) -> list[Event]:
        """Stored events overlapping the draft's time range, excluding the draft itself."""
        start = ensure_aware(draft.start)
        end = ensure_aware(draft.end)
        if end <= start:
            return []
        return self.store.overlapping(start, end, exclude_id=draft.id)

    def save_draft(self, draft: EventDraft) -> Event:
        """
        Commit a draft to the store.

        Raises InvalidRange if the draft ends at or before its start,
        DraftValidationError for any other form error, and NotFound when an
        edited event has been removed since the draft was opened.
        """
        errors = draft.validate()
        if 'end' in errors:
            _debug_print(f"save_draft rejected: {draft.start} >= {draft.end}")
            raise InvalidRange(ensure_aware(draft.start), ensure_aware(draft.end))
        if errors:
            raise DraftValidationError(errors)

        record = draft.to_record()
        if draft.is_new:
            event = self.store.upsert(record)
        else:
            event = self.store.update(record)
        draft.id = event.id
        _debug_print(f"save_draft: {event.id} ({event.title!r})")
        return event

    # ==================== Store Commands ====================

    def delete_event(self, event_id: str) -> None:
        self.store.remove(event_id)

    def move_event(self, event_id: str, new_start: datetime) -> Event:
        return self.store.move_event(event_id, new_start)

    def move_to_date(self, event_id: str, day) -> Event:
        return self.store.move_to_date(event_id, as_date(day))

    # ==================== Queries ====================

    def get_events(self) -> list[Event]:
        """Snapshot of every stored event in start order."""
        return self.store.all()

    def upcoming(self, limit: int = 5) -> list[Event]:
        return self.store.upcoming(self.navigator.today(), limit)

    def weather_for(self, d: date) -> Optional[str]:
        key = d.isoformat()
        if callable(self.weather):
            return self.weather(key)
        return self.weather.get(key)

    def events_for_day(self, d) -> list[Event]:
        """The day's events with fresh conflict flags."""
        return annotate(self.store.for_day(as_date(d)))

    def day_view(self, d=None) -> DayColumn:
        d = as_date(d) if d is not None else self.navigator.current_date
        following = d + timedelta(days=1)
        # Multi-day events started on earlier days still occupy this one
        spanning = self.store.overlapping(local_combine(d), local_combine(following), include_leave=True)
        earliest = min((e.day for e in spanning), default=d)
        visible = {e.id for e in spanning}
        candidates = [e for e in annotate(self.store.for_range(earliest, following)) if e.id in visible]
        blocks = layout_day(candidates, d, self.layout.timeline_height, self.layout.min_extent)
        return DayColumn(
            date=d,
            events=annotate(self.store.for_day(d)),
            blocks=blocks,
            is_today=(d == self.navigator.today()),
            weather=self.weather_for(d),
        )

    def week_view(self, d=None) -> WeekView:
        d = as_date(d) if d is not None else self.navigator.current_date
        return WeekView(days=[self.day_view(day)
                              for day in week_days(d, self.layout.first_weekday)])

    def month_view(self, year: Optional[int] = None, month: Optional[int] = None) -> MonthView:
        current = self.navigator.current_date
        year = current.year if year is None else year
        month = current.month if month is None else month
        grid = month_grid(year, month, self.layout.first_weekday)

        by_day: dict[date, list[Event]] = {}
        events = annotate(self.store.for_range(grid.first_date, grid.last_date + timedelta(days=1)))
        for event in events:
            by_day.setdefault(event.day, []).append(event)

        today = self.navigator.today()
        selected = self.navigator.selected_date
        weeks = [
            [DayCell(
                date=cell.date,
                in_month=cell.in_month,
                events=by_day.get(cell.date, []),
                is_today=(cell.date == today),
                is_selected=(cell.date == selected),
                weather=self.weather_for(cell.date),
            ) for cell in week]
            for week in grid.weeks
        ]
        return MonthView(year=year, month=month, weeks=weeks)

    def year_view(self, year: Optional[int] = None) -> YearView:
        year = self.navigator.current_date.year if year is None else year
        month_start(year, 1)
        events = [e for e in self.store.all() if e.day.year == year]
        grids = year_grid(year, events, self.layout.first_weekday)

        months = []
        for grid in grids:
            in_month = [e for e in events if e.day.month == grid.month]
            months.append(MonthSummary(
                year=year,
                month=grid.month,
                weeks=[[cell.date for cell in week] for week in grid.weeks],
                in_month=[[cell.in_month for cell in week] for week in grid.weeks],
                event_count=grid.event_count,
                work_count=sum(1 for e in in_month if e.category == DEFAULT_CATEGORY),
                leave_count=sum(1 for e in in_month if e.is_leave),
            ))

        return YearView(
            year=year,
            months=months,
            total_work=sum(1 for e in events if e.category == DEFAULT_CATEGORY),
            total_social=sum(1 for e in events if e.category == "social"),
            total_holidays=sum(1 for e in events if e.is_leave),
        )

    def current_view(self) -> Union[DayColumn, WeekView, MonthView, YearView]:
        """The render-ready structure for the active view mode."""
        mode = self.navigator.view_mode
        if mode == ViewMode.DAY:
            return self.day_view()
        if mode == ViewMode.WEEK:
            return self.week_view()
        if mode == ViewMode.MONTH:
            return self.month_view()
        return self.year_view()
