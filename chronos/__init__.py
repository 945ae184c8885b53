"""
Chronos Calendar Engine

This module provides the scheduling and layout core of the calendar:
- Configuration parsing (config.py)
- Event record and ingestion defaults (event.py)
- Canonical, deduplicated event store (event_store.py)
- Conflict detection (conflicts.py)
- Month/year grids (grid.py) and day timeline geometry (geometry.py)
- Navigation state machine (navigation.py)
- Command facade and render-ready views (commands.py)
- JSON and iCalendar interchange (interchange.py)
"""

from .config import Config
from .errors import CalendarError, InvalidRange, InvalidDate, InvalidRecord, NotFound, DraftValidationError
from .event import Event, Priority, Reminder
from .event_store import EventStore
from .conflicts import annotate
from .grid import GridCell, MonthGrid, month_grid, year_grid
from .geometry import EventGeometry, EventPortion, position, layout_day
from .navigation import DayClick, NavigationState, Navigator, ViewMode
from .commands import CalendarController, EventDraft

__all__ = [
    'Config',
    'CalendarError',
    'InvalidRange',
    'InvalidDate',
    'InvalidRecord',
    'NotFound',
    'DraftValidationError',
    'Event',
    'Priority',
    'Reminder',
    'EventStore',
    'annotate',
    'GridCell',
    'MonthGrid',
    'month_grid',
    'year_grid',
    'EventGeometry',
    'EventPortion',
    'position',
    'layout_day',
    'DayClick',
    'NavigationState',
    'Navigator',
    'ViewMode',
    'CalendarController',
    'EventDraft',
]
