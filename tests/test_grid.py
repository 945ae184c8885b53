"""Tests for month and year grid generation."""

import calendar
from datetime import datetime, date

import pytest
import pytz

from chronos.errors import InvalidDate
from chronos.event import Event
from chronos.grid import GRID_CELLS, MONDAY, SUNDAY, month_grid, week_days, year_grid


class TestMonthGrid:

    def test_28_day_month_starting_on_sunday(self):
        grid = month_grid(2026, 2)
        assert len(grid.cells) == GRID_CELLS == 42
        assert len(grid.weeks) == 6
        assert all(len(week) == 7 for week in grid.weeks)
        assert grid.first_date == date(2026, 2, 1)
        assert grid.last_date == date(2026, 3, 14)
        assert sum(c.in_month for c in grid.cells) == 28

    def test_31_day_month_starting_on_saturday(self):
        grid = month_grid(2026, 8)
        cells = grid.cells
        assert len(cells) == 42
        assert grid.first_date == date(2026, 7, 26)
        assert [c.in_month for c in cells[:7]] == [False] * 6 + [True]
        assert cells[6].date == date(2026, 8, 1)
        assert grid.last_date == date(2026, 9, 5)
        assert sum(c.in_month for c in cells) == 31

    def test_monday_week_start(self):
        grid = month_grid(2026, 2, first_weekday=MONDAY)
        assert grid.first_date == date(2026, 1, 26)
        assert grid.first_date.weekday() == MONDAY

    def test_cells_are_consecutive(self):
        days = [c.date for c in month_grid(2025, 6).cells]
        assert all((b - a).days == 1 for a, b in zip(days, days[1:]))

    def test_every_month_has_42_cells(self):
        for year in (2024, 2025, 2026):
            for month in range(1, 13):
                for first_weekday in (SUNDAY, MONDAY):
                    grid = month_grid(year, month, first_weekday)
                    assert len(grid.cells) == 42
                    assert grid.first_date.weekday() == first_weekday
                    in_month = sum(c.in_month for c in grid.cells)
                    assert in_month == calendar.monthrange(year, month)[1]

    @pytest.mark.parametrize("year, month", [(2025, 0), (2025, 13), (2025, -1), (2025, True), ("2025", 1)])
    def test_invalid_month_fails_fast(self, year, month):
        with pytest.raises(InvalidDate):
            month_grid(year, month)

    def test_invalid_week_start(self):
        with pytest.raises(InvalidDate):
            month_grid(2025, 6, first_weekday=7)

    def test_grid_outside_date_range(self):
        with pytest.raises(InvalidDate):
            month_grid(1, 1, first_weekday=SUNDAY)


class TestYearGrid:

    def test_counts_events_per_month(self):
        def ev(i, month, day, year=2026):
            start = datetime(year, month, day, 9, tzinfo=pytz.UTC)
            return Event.from_record({"id": str(i), "title": f"E{i}", "start": start,
                                      "end": start.replace(hour=10)})

        events = [ev(1, 1, 5), ev(2, 1, 20), ev(3, 3, 1), ev(4, 12, 31, year=2025)]
        grids = year_grid(2026, events)
        assert len(grids) == 12
        assert [g.month for g in grids] == list(range(1, 13))
        assert [g.event_count for g in grids] == [2, 0, 1] + [0] * 9
        assert all(len(g.cells) == 42 for g in grids)

    def test_without_events(self):
        assert all(g.event_count == 0 for g in year_grid(2025))


class TestWeekDays:

    def test_sunday_start(self):
        days = week_days(date(2025, 6, 24))
        assert days[0] == date(2025, 6, 22)
        assert days[-1] == date(2025, 6, 28)

    def test_monday_start(self):
        assert week_days(date(2025, 6, 24), MONDAY)[0] == date(2025, 6, 23)
