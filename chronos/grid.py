"""
Calendar grid generation for month and year views.

A month grid is always 6 rows of 7 days (42 cells): the trailing days of
the previous month, every day of the target month, then days of the next
month until the grid is full. Views rely on the constant shape.

Weekdays use date.weekday() numbering (0=Monday ... 6=Sunday); the
`first_weekday` argument picks the column the week starts in.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from .errors import InvalidDate
from .event import Event

SUNDAY = 6
MONDAY = 0

GRID_ROWS = 6
GRID_COLUMNS = 7
GRID_CELLS = GRID_ROWS * GRID_COLUMNS


@dataclass(frozen=True)
class GridCell:
    date: date
    in_month: bool


@dataclass
class MonthGrid:
    year: int
    month: int
    weeks: list[list[GridCell]]
    event_count: int = 0

    @property
    def cells(self) -> list[GridCell]:
        return [cell for week in self.weeks for cell in week]

    @property
    def first_date(self) -> date:
        return self.weeks[0][0].date

    @property
    def last_date(self) -> date:
        return self.weeks[-1][-1].date


def _check_weekday(first_weekday: int) -> None:
    if not isinstance(first_weekday, int) or not 0 <= first_weekday <= 6:
        raise InvalidDate(f"first_weekday must be 0-6, got {first_weekday!r}")


def month_start(year: int, month: int) -> date:
    """First day of a month, failing fast on anything that is not a real month."""
    if isinstance(year, bool) or isinstance(month, bool):
        raise InvalidDate(f"Invalid month: {year!r}-{month!r}")
    try:
        return date(year, month, 1)
    except (TypeError, ValueError) as e:
        raise InvalidDate(f"Invalid month {year!r}-{month!r}: {e}")


def leading_days(first: date, first_weekday: int = SUNDAY) -> int:
    """How many days of the previous month precede `first` in its grid row."""
    return (first.weekday() - first_weekday) % 7


def week_start(d: date, first_weekday: int = SUNDAY) -> date:
    """The first day of the week containing d."""
    _check_weekday(first_weekday)
    return d - timedelta(days=leading_days(d, first_weekday))


def week_days(d: date, first_weekday: int = SUNDAY) -> list[date]:
    """The seven days of the week containing d."""
    start = week_start(d, first_weekday)
    return [start + timedelta(days=i) for i in range(GRID_COLUMNS)]


def month_grid(year: int, month: int, first_weekday: int = SUNDAY) -> MonthGrid:
    """
    Build the fixed 6x7 grid for a month (month is 1-12).

    Raises InvalidDate for an invalid year/month or a grid that would run
    outside the supported date range.
    """
    _check_weekday(first_weekday)
    first = month_start(year, month)
    try:
        grid_start = first - timedelta(days=leading_days(first, first_weekday))
        days = [grid_start + timedelta(days=i) for i in range(GRID_CELLS)]
    except OverflowError:
        raise InvalidDate(f"Grid for {year}-{month:02d} falls outside the supported date range")

    weeks = []
    for row in range(GRID_ROWS):
        week = []
        for d in days[row * GRID_COLUMNS:(row + 1) * GRID_COLUMNS]:
            week.append(GridCell(date=d, in_month=(d.year == year and d.month == month)))
        weeks.append(week)
    return MonthGrid(year=year, month=month, weeks=weeks)


def year_grid(
    year: int,
    events: Optional[Iterable[Event]] = None,
    first_weekday: int = SUNDAY,
) -> list[MonthGrid]:
    """
    Twelve month grids for a year, each carrying the number of events
    whose start falls in that month.
    """
    counts = [0] * 12
    if events is not None:
        for event in events:
            d = event.day
            if d.year == year:
                counts[d.month - 1] += 1

    grids = []
    for month in range(1, 13):
        grid = month_grid(year, month, first_weekday)
        grid.event_count = counts[month - 1]
        grids.append(grid)
    return grids
