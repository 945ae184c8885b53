"""
Navigation state for Chronos: which view is active and which date it shows.

The state is (view_mode, current_date, selected_date). current_date anchors
the active view; selected_date is the last date the user explicitly picked.
Both are plain calendar dates.
"""

import calendar
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Union

from .debug import debug_print
from .errors import InvalidDate
from .grid import SUNDAY, month_grid, week_days
from .timezone_utils import local_today, to_local_datetime


def _debug_print(msg: str) -> None:
    debug_print("NAV", msg)


class ViewMode(Enum):
    YEAR = "year"
    MONTH = "month"
    WEEK = "week"
    DAY = "day"

    @classmethod
    def parse(cls, value: Union['ViewMode', str]) -> 'ViewMode':
        if isinstance(value, ViewMode):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidDate(f"Unknown view mode: {value!r}")


class DayClick(Enum):
    """What a click on a day cell did."""
    DRILL_DOWN = "drill_down"      # switched to the day view of that date
    LIST_PREVIEW = "list_preview"  # host should show the day's event list
    SELECTED = "selected"          # only selected_date changed


@dataclass(frozen=True)
class NavigationState:
    view_mode: ViewMode
    current_date: date
    selected_date: date


def as_date(value) -> date:
    """Coerce a navigation argument to a calendar date, failing fast."""
    if isinstance(value, datetime):
        return to_local_datetime(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise InvalidDate(f"Not an ISO date: {value!r}")
    raise InvalidDate(f"Expected a date, got {value!r}")


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    if not 1 <= year <= 9999:
        raise InvalidDate(f"Date out of range: {d} {months:+d} months")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def add_years(d: date, years: int) -> date:
    """Shift by whole years; 29 February becomes 28 February when needed."""
    return add_months(d, 12 * years)


class Navigator:
    """
    The navigation state machine.

    Runs for the life of the session; every command moves it to a new
    (view_mode, current_date) state synchronously.
    """

    def __init__(
        self,
        view_mode: Union[ViewMode, str] = ViewMode.MONTH,
        current_date: Optional[date] = None,
        today: Optional[date] = None,
        first_weekday: int = SUNDAY,
    ):
        # A pinned reference date replaces the system date for "today"
        self._pinned_today = as_date(today) if today is not None else None
        start = as_date(current_date) if current_date is not None else self.today()
        self._state = NavigationState(ViewMode.parse(view_mode), start, start)
        self.first_weekday = first_weekday
        self._on_change_callback: Optional[Callable[[NavigationState], None]] = None

    def set_on_change_callback(self, callback: Callable[[NavigationState], None]) -> None:
        self._on_change_callback = callback

    def _set_state(self, **changes) -> NavigationState:
        old = self._state
        self._state = replace(old, **changes)
        if self._state != old:
            _debug_print(f"{old.view_mode.value}@{old.current_date} -> "
                         f"{self._state.view_mode.value}@{self._state.current_date}"
                         f" (selected {self._state.selected_date})")
            if self._on_change_callback:
                self._on_change_callback(self._state)
        return self._state

    # ==================== State ====================

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def view_mode(self) -> ViewMode:
        return self._state.view_mode

    @property
    def current_date(self) -> date:
        return self._state.current_date

    @property
    def selected_date(self) -> date:
        return self._state.selected_date

    def today(self) -> date:
        """The reference "today": the pinned date if set, else the local date."""
        return self._pinned_today if self._pinned_today is not None else local_today()

    # ==================== Transitions ====================

    def _step(self, direction: int) -> date:
        current = self._state.current_date
        mode = self._state.view_mode
        try:
            if mode == ViewMode.MONTH:
                return add_months(current, direction)
            if mode == ViewMode.WEEK:
                return current + timedelta(days=7 * direction)
            if mode == ViewMode.DAY:
                return current + timedelta(days=direction)
            return add_years(current, direction)
        except OverflowError:
            raise InvalidDate(f"Cannot move {mode.value} view past {current}")

    def next(self) -> NavigationState:
        """+1 month / +7 days / +1 day / +1 year depending on the view."""
        return self._set_state(current_date=self._step(1))

    def previous(self) -> NavigationState:
        return self._set_state(current_date=self._step(-1))

    def go_to_today(self) -> NavigationState:
        """Jump to today; it also becomes the selected date."""
        today = self.today()
        return self._set_state(current_date=today, selected_date=today)

    def set_view_mode(self, mode: Union[ViewMode, str]) -> NavigationState:
        """Change the view only; current_date stays where it is."""
        return self._set_state(view_mode=ViewMode.parse(mode))

    def jump_to_date(self, d) -> NavigationState:
        """Anchor the current view at d without changing the view mode."""
        return self._set_state(current_date=as_date(d))

    def select_date(self, d) -> NavigationState:
        return self._set_state(selected_date=as_date(d))

    # ==================== Clicks ====================

    def click_day(self, d, has_events: bool = False, mobile: bool = False) -> DayClick:
        """
        A click on a day cell.

        The date always becomes selected. On a mobile layout a day that has
        events opens a list preview and the view stays put. Otherwise a
        click in the month view drills into the day view of that date.
        """
        d = as_date(d)
        self._set_state(selected_date=d)
        if has_events and mobile:
            return DayClick.LIST_PREVIEW
        if self._state.view_mode == ViewMode.MONTH:
            self._set_state(current_date=d, view_mode=ViewMode.DAY)
            return DayClick.DRILL_DOWN
        return DayClick.SELECTED

    def click_year_day(self, d) -> NavigationState:
        """A day picked in the year view opens its day view."""
        d = as_date(d)
        return self._set_state(current_date=d, selected_date=d, view_mode=ViewMode.DAY)

    def click_month(self, year: int, month: int) -> NavigationState:
        """A mini-month picked in the year view opens that month."""
        try:
            first = date(year, month, 1)
        except (TypeError, ValueError) as e:
            raise InvalidDate(f"Invalid month {year!r}-{month!r}: {e}")
        return self._set_state(current_date=first, view_mode=ViewMode.MONTH)

    def click_time_slot(self, when: datetime) -> NavigationState:
        """A click on a time slot selects its day."""
        return self._set_state(selected_date=as_date(when))

    # ==================== Visible Range ====================

    def visible_range(self) -> tuple[date, date]:
        """Half-open [first, last + 1 day) range of dates the active view shows."""
        current = self._state.current_date
        mode = self._state.view_mode
        if mode == ViewMode.DAY:
            return current, current + timedelta(days=1)
        if mode == ViewMode.WEEK:
            days = week_days(current, self.first_weekday)
            return days[0], days[-1] + timedelta(days=1)
        if mode == ViewMode.MONTH:
            grid = month_grid(current.year, current.month, self.first_weekday)
            return grid.first_date, grid.last_date + timedelta(days=1)
        return date(current.year, 1, 1), date(current.year + 1, 1, 1)
