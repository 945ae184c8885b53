"""Tests for the Event record and ingestion defaults."""

from datetime import datetime, date, timedelta

import pytest
import pytz

from chronos.errors import CalendarError, InvalidDate, InvalidRange, InvalidRecord
from chronos.event import DEFAULT_COLOR, Event, Priority, Reminder
from chronos.timezone_utils import set_timezone


def at(hour, minute=0, day=24):
    return datetime(2025, 6, day, hour, minute, tzinfo=pytz.UTC)


class TestFromRecord:

    def test_defaults_applied_once(self):
        event = Event.from_record({
            "title": "Planning",
            "start": "2025-06-24T09:00:00",
            "end": "2025-06-24T10:00:00",
        })
        assert event.id == ""
        assert event.category == "work"
        assert event.priority is Priority.MEDIUM
        assert event.color == DEFAULT_COLOR
        assert event.reminders == ()
        assert event.attendees == ()
        assert event.tags == frozenset()
        assert event.notes == ""
        assert event.has_conflict is False

    def test_naive_timestamps_become_local_aware(self):
        event = Event.from_record({"title": "A", "start": "2025-06-24T09:00:00", "end": "2025-06-24T10:00:00"})
        assert event.start.tzinfo is not None
        assert event.start == at(9)

    def test_zulu_suffix(self):
        event = Event.from_record({"title": "A", "start": "2025-06-24T09:00:00Z", "end": "2025-06-24T10:00:00Z"})
        assert event.end == at(10)

    def test_camel_case_keys(self):
        event = Event.from_record({
            "id": "7",
            "title": "Offsite",
            "start": at(9),
            "end": at(17),
            "isRecurring": True,
            "isWorkingDayLeave": True,
            "hasVideoCall": True,
            "attendees": ["a@example.com"],
            "reminders": [{"time": 15, "unit": "minutes"}],
            "tags": ["team"],
        })
        assert event.is_recurring
        assert event.recurrence_pattern == "daily"
        assert event.is_working_day_leave
        assert event.is_leave
        assert event.has_video_call
        assert event.attendees == ("a@example.com",)
        assert event.reminders == (Reminder(15, "minutes"),)
        assert event.tags == frozenset({"team"})

    def test_date_values_start_at_midnight(self):
        event = Event.from_record({"title": "Day", "start": date(2025, 6, 24), "end": date(2025, 6, 25)})
        assert event.start == at(0)
        assert event.duration == timedelta(days=1)

    def test_missing_start_fails(self):
        with pytest.raises(InvalidDate):
            Event.from_record({"title": "A", "end": at(10)})

    def test_unparseable_start_fails(self):
        with pytest.raises(InvalidDate):
            Event.from_record({"title": "A", "start": "tomorrow", "end": at(10)})

    def test_unknown_priority_fails(self):
        with pytest.raises(InvalidRecord) as exc_info:
            Event.from_record({"title": "A", "start": at(9), "end": at(10), "priority": "urgent"})
        assert isinstance(exc_info.value, CalendarError)
        assert isinstance(exc_info.value, ValueError)

    def test_single_string_tags_and_attendees(self):
        event = Event.from_record({"title": "A", "start": at(9), "end": at(10),
                                   "tags": "work", "attendees": "alice@example.com"})
        assert event.tags == frozenset({"work"})
        assert event.attendees == ("alice@example.com",)

    def test_record_round_trip(self):
        event = Event.from_record({
            "id": "1", "title": "Review", "start": at(9), "end": at(10),
            "priority": "high", "category": "Training", "reminders": [{"offset": 1, "unit": "hours"}],
        })
        assert event.category == "training"
        assert Event.from_record(event.to_record()) == event


class TestEventProperties:

    def test_holiday_is_leave(self):
        event = Event.from_record({"title": "Christmas", "category": "holiday", "start": at(0), "end": at(23)})
        assert event.is_leave

    def test_identity_key_uses_calendar_day(self):
        morning = Event.from_record({"id": "1", "title": "Gym", "start": at(7), "end": at(8)})
        evening = Event.from_record({"id": "2", "title": "Gym", "start": at(19), "end": at(20)})
        assert morning.identity_key == ("Gym", date(2025, 6, 24))
        assert morning.same_event(evening)

    def test_conflict_flag_is_not_part_of_equality(self):
        event = Event.from_record({"id": "1", "title": "A", "start": at(9), "end": at(10)})
        assert event.with_conflict(True) == event

    def test_day_follows_local_timezone(self):
        set_timezone("America/New_York")
        event = Event.from_record({"title": "Late", "start": "2025-06-24T02:00:00+00:00",
                                   "end": "2025-06-24T03:00:00+00:00"})
        assert event.day == date(2025, 6, 23)

    def test_validate_range(self):
        event = Event.from_record({"title": "A", "start": at(10), "end": at(10)})
        with pytest.raises(InvalidRange) as exc_info:
            event.validate_range()
        assert exc_info.value.field == "time"
        assert exc_info.value.start == at(10)


class TestReminderAndPriority:

    def test_reminder_offset(self):
        assert Reminder.from_record({"time": 2, "unit": "days"}).before == timedelta(days=2)

    def test_reminder_unknown_unit(self):
        with pytest.raises(InvalidRecord):
            Reminder(5, "fortnights")

    def test_priority_parse(self):
        assert Priority.parse("HIGH") is Priority.HIGH
        assert Priority.parse(None) is Priority.MEDIUM
