"""Tests for the navigation state machine."""

from datetime import datetime, date

import pytest
import pytz

from chronos.errors import InvalidDate
from chronos.grid import MONDAY
from chronos.navigation import DayClick, Navigator, ViewMode, add_months

TODAY = date(2025, 6, 24)


def nav(view_mode="month", current=TODAY, **kwargs):
    return Navigator(view_mode=view_mode, current_date=current, today=TODAY, **kwargs)


class TestNextPrevious:

    def test_month_clamps_to_end_of_month(self):
        navigator = nav(current=date(2025, 1, 31))
        navigator.next()
        assert navigator.current_date == date(2025, 2, 28)

    def test_month_clamps_in_leap_year(self):
        navigator = nav(current=date(2024, 1, 31))
        navigator.next()
        assert navigator.current_date == date(2024, 2, 29)

    def test_previous_month(self):
        navigator = nav(current=date(2025, 3, 31))
        navigator.previous()
        assert navigator.current_date == date(2025, 2, 28)
        navigator.previous()
        assert navigator.current_date == date(2025, 1, 28)

    def test_month_across_year_boundary(self):
        navigator = nav(current=date(2025, 12, 15))
        navigator.next()
        assert navigator.current_date == date(2026, 1, 15)

    def test_week_and_day(self):
        week = nav("week")
        week.next()
        assert week.current_date == date(2025, 7, 1)
        day = nav("day", current=date(2025, 12, 31))
        day.next()
        assert day.current_date == date(2026, 1, 1)
        day.previous()
        day.previous()
        assert day.current_date == date(2025, 12, 30)

    def test_year_clamps_leap_day(self):
        navigator = nav("year", current=date(2024, 2, 29))
        navigator.next()
        assert navigator.current_date == date(2025, 2, 28)
        navigator.previous()
        assert navigator.current_date == date(2024, 2, 28)

    def test_next_never_changes_view_or_selection(self):
        navigator = nav()
        navigator.next()
        assert navigator.view_mode is ViewMode.MONTH
        assert navigator.selected_date == TODAY

    def test_out_of_range(self):
        with pytest.raises(InvalidDate):
            add_months(date(9999, 12, 1), 1)
        navigator = nav("day", current=date(9999, 12, 31))
        with pytest.raises(InvalidDate):
            navigator.next()


class TestTodayAndViewMode:

    def test_go_to_today_then_day_view(self):
        navigator = nav(current=date(2030, 1, 1))
        navigator.go_to_today()
        assert navigator.current_date == TODAY
        navigator.set_view_mode("day")
        assert navigator.view_mode is ViewMode.DAY
        assert navigator.current_date == TODAY

    def test_go_to_today_selects_today(self):
        navigator = nav(current=date(2030, 1, 1))
        navigator.go_to_today()
        assert navigator.selected_date == TODAY

    def test_unknown_view_mode(self):
        with pytest.raises(InvalidDate):
            nav().set_view_mode("decade")

    def test_view_mode_parse(self):
        assert ViewMode.parse("WEEK") is ViewMode.WEEK
        assert ViewMode.parse(ViewMode.YEAR) is ViewMode.YEAR

    def test_jump_to_date_keeps_month_view(self):
        navigator = nav()
        navigator.jump_to_date(date(2025, 9, 3))
        assert navigator.view_mode is ViewMode.MONTH
        assert navigator.current_date == date(2025, 9, 3)
        assert navigator.selected_date == TODAY

    def test_jump_to_date_accepts_iso_string_and_datetime(self):
        navigator = nav()
        navigator.jump_to_date("2025-09-03")
        assert navigator.current_date == date(2025, 9, 3)
        navigator.jump_to_date(datetime(2025, 10, 1, 12, tzinfo=pytz.UTC))
        assert navigator.current_date == date(2025, 10, 1)

    @pytest.mark.parametrize("bad", ["2025-13-01", 42, None])
    def test_jump_to_bad_date(self, bad):
        with pytest.raises(InvalidDate):
            nav().jump_to_date(bad)


class TestClicks:

    def test_click_in_month_drills_into_day(self):
        navigator = nav()
        outcome = navigator.click_day(date(2025, 6, 10))
        assert outcome is DayClick.DRILL_DOWN
        assert navigator.view_mode is ViewMode.DAY
        assert navigator.current_date == date(2025, 6, 10)
        assert navigator.selected_date == date(2025, 6, 10)

    def test_click_with_events_on_mobile_previews(self):
        navigator = nav()
        outcome = navigator.click_day(date(2025, 6, 10), has_events=True, mobile=True)
        assert outcome is DayClick.LIST_PREVIEW
        assert navigator.view_mode is ViewMode.MONTH
        assert navigator.current_date == TODAY
        assert navigator.selected_date == date(2025, 6, 10)

    def test_click_with_events_on_desktop_drills_in(self):
        navigator = nav()
        assert navigator.click_day(date(2025, 6, 10), has_events=True) is DayClick.DRILL_DOWN

    def test_click_outside_month_view_only_selects(self):
        navigator = nav("week")
        assert navigator.click_day(date(2025, 6, 26)) is DayClick.SELECTED
        assert navigator.view_mode is ViewMode.WEEK
        assert navigator.current_date == TODAY
        assert navigator.selected_date == date(2025, 6, 26)

    def test_year_view_clicks(self):
        navigator = nav("year")
        navigator.click_month(2025, 3)
        assert navigator.view_mode is ViewMode.MONTH
        assert navigator.current_date == date(2025, 3, 1)
        navigator.set_view_mode("year")
        navigator.click_year_day(date(2025, 11, 5))
        assert navigator.view_mode is ViewMode.DAY
        assert navigator.current_date == navigator.selected_date == date(2025, 11, 5)

    def test_click_month_invalid(self):
        with pytest.raises(InvalidDate):
            nav("year").click_month(2025, 13)

    def test_click_time_slot_selects_day(self):
        navigator = nav("week")
        navigator.click_time_slot(datetime(2025, 6, 27, 14, tzinfo=pytz.UTC))
        assert navigator.selected_date == date(2025, 6, 27)
        assert navigator.current_date == TODAY


class TestCallbacksAndRange:

    def test_callback_only_on_change(self):
        navigator = nav()
        states = []
        navigator.set_on_change_callback(states.append)
        navigator.set_view_mode("month")
        navigator.next()
        assert len(states) == 1
        assert states[0].current_date == date(2025, 7, 24)

    def test_visible_range(self):
        assert nav("day").visible_range() == (TODAY, date(2025, 6, 25))
        assert nav("week").visible_range() == (date(2025, 6, 22), date(2025, 6, 29))
        assert nav("week", first_weekday=MONDAY).visible_range()[0] == date(2025, 6, 23)
        assert nav(current=date(2026, 2, 14)).visible_range() == (date(2026, 2, 1), date(2026, 3, 15))
        assert nav("year").visible_range() == (date(2025, 1, 1), date(2026, 1, 1))

    def test_defaults_to_pinned_today(self):
        navigator = Navigator(today=TODAY)
        assert navigator.current_date == navigator.selected_date == TODAY
        assert navigator.view_mode is ViewMode.MONTH
