"""
Reading and writing event files.

Two formats are supported:
- JSON: a list of raw event records (or {"events": [...]}), the shape the
  store ingests directly
- iCalendar (.ics): VEVENT components converted to and from raw records

Both readers return raw records; feed them to EventStore.load().
"""

import json
from datetime import datetime, date, timedelta
from pathlib import Path
from typing import Any, Iterable, Optional

import pytz
from icalendar import Alarm, Calendar as ICalCalendar, Event as ICalEvent

from .debug import debug_print
from .event import Event, Priority, Reminder, DEFAULT_CATEGORY
from .timezone_utils import ensure_aware, to_utc_datetime

PRODID = '-//Chronos Calendar//chronos//'
LEAVE_PROPERTY = 'X-CHRONOS-WORKING-DAY-LEAVE'
VIDEO_CALL_PROPERTY = 'X-CHRONOS-VIDEO-CALL'
RECURRENCE_PROPERTY = 'X-CHRONOS-RECURRENCE'

RRULE_FREQUENCIES = ("daily", "weekly", "monthly", "yearly")

# iCalendar PRIORITY: 1-4 high, 5 medium, 6-9 low, 0 undefined
_PRIORITY_TO_ICAL = {Priority.HIGH: 1, Priority.MEDIUM: 5, Priority.LOW: 9}


def _debug_print(msg: str) -> None:
    debug_print("IO", msg)


# ==================== JSON ====================

def load_json_records(path: Path) -> list[dict]:
    """Read raw event records from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('events', [])
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise ValueError(f"{path}: expected a list of event objects")

    _debug_print(f"Read {len(data)} records from {path}")
    return data


def dump_json_records(events: Iterable[Event], path: Path) -> int:
    """Write events as raw JSON records. Returns the number written."""
    records = [e.to_record() for e in events]
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(records, f, indent=2, ensure_ascii=False)
    _debug_print(f"Wrote {len(records)} records to {path}")
    return len(records)


# ==================== iCalendar Import ====================

def _as_list(value: Any) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _to_datetime(value: Any) -> datetime:
    # All-day values are dates; they start at local midnight
    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, datetime.min.time())
    return ensure_aware(value)


def _categories(component) -> list[str]:
    names = []
    for item in _as_list(component.get('CATEGORIES')):
        for cat in getattr(item, 'cats', [item]):
            name = str(cat).strip()
            if name:
                names.append(name)
    return names


def _priority(component) -> Optional[str]:
    value = component.get('PRIORITY')
    if value is None:
        return None
    level = int(value)
    if level == 0:
        return None
    if level <= 4:
        return Priority.HIGH.value
    if level == 5:
        return Priority.MEDIUM.value
    return Priority.LOW.value


def _reminder_from_trigger(trigger: timedelta) -> Reminder:
    before = -trigger if trigger < timedelta(0) else trigger
    minutes = int(before.total_seconds() // 60)
    for unit, size in (("weeks", 7 * 24 * 60), ("days", 24 * 60), ("hours", 60)):
        if minutes and minutes % size == 0:
            return Reminder(minutes // size, unit)
    return Reminder(minutes, "minutes")


def _reminders(component) -> list[Reminder]:
    reminders = []
    for alarm in component.subcomponents:
        if alarm.name != 'VALARM':
            continue
        trigger = alarm.get('TRIGGER')
        # Absolute triggers carry a datetime; only relative offsets map to reminders
        if trigger is not None and isinstance(trigger.dt, timedelta):
            reminders.append(_reminder_from_trigger(trigger.dt))
    return reminders


def _is_true(component, name: str) -> bool:
    value = component.get(name)
    return value is not None and str(value).strip().upper() in ('TRUE', '1', 'YES')


def vevent_to_record(component) -> dict:
    """Convert one VEVENT component to a raw event record."""
    dtstart = component.get('DTSTART')
    if dtstart is None:
        raise ValueError(f"VEVENT {component.get('UID')!r} has no DTSTART")
    start = _to_datetime(dtstart.dt)

    dtend = component.get('DTEND')
    duration = component.get('DURATION')
    if dtend is not None:
        end = _to_datetime(dtend.dt)
    elif duration is not None:
        end = start + duration.dt
    else:
        # No end time - use start + 1 hour
        end = start + timedelta(hours=1)

    categories = _categories(component)
    rrule = component.get('RRULE')
    pattern = None
    if rrule is not None and rrule.get('FREQ'):
        pattern = str(rrule.get('FREQ')[0]).lower()
    elif component.get(RECURRENCE_PROPERTY) is not None:
        pattern = str(component.get(RECURRENCE_PROPERTY))

    record = {
        'id': str(component.get('UID') or ''),
        'title': str(component.get('SUMMARY') or 'Untitled'),
        'start': start,
        'end': end,
        'category': categories[0].lower() if categories else DEFAULT_CATEGORY,
        'tags': categories[1:],
        'priority': _priority(component),
        'description': str(component.get('DESCRIPTION') or ''),
        'location': str(component.get('LOCATION') or ''),
        'url': str(component.get('URL') or ''),
        'is_recurring': pattern is not None,
        'recurrence_pattern': pattern,
        'is_working_day_leave': _is_true(component, LEAVE_PROPERTY),
        'has_video_call': _is_true(component, VIDEO_CALL_PROPERTY),
        'attendees': [str(a).removeprefix('mailto:').removeprefix('MAILTO:')
                      for a in _as_list(component.get('ATTENDEE'))],
        'reminders': _reminders(component),
    }
    color = component.get('COLOR')
    if color:
        record['color'] = str(color)
    return record


def parse_icalendar(ical_text: str) -> list[dict]:
    """Parse VCALENDAR text into raw event records, one per VEVENT."""
    vcal = ICalCalendar.from_ical(ical_text)
    records = [vevent_to_record(c) for c in vcal.walk() if c.name == 'VEVENT']
    _debug_print(f"Parsed {len(records)} VEVENTs")
    return records


def load_icalendar_records(path: Path) -> list[dict]:
    with open(path, 'rb') as f:
        return parse_icalendar(f.read())


# ==================== iCalendar Export ====================

def event_to_vevent(event: Event) -> ICalEvent:
    vevent = ICalEvent()
    vevent.add('uid', event.id)
    vevent.add('summary', event.title)
    vevent.add('dtstamp', datetime.now(pytz.UTC))
    vevent.add('dtstart', to_utc_datetime(event.start))
    vevent.add('dtend', to_utc_datetime(event.end))
    vevent.add('categories', [event.category] + sorted(event.tags))
    vevent.add('priority', _PRIORITY_TO_ICAL[event.priority])
    vevent.add('color', event.color)

    if event.description:
        vevent.add('description', event.description)
    if event.location:
        vevent.add('location', event.location)
    if event.url:
        vevent.add('url', event.url)
    if event.is_working_day_leave:
        vevent.add(LEAVE_PROPERTY, 'TRUE')
    if event.has_video_call:
        vevent.add(VIDEO_CALL_PROPERTY, 'TRUE')

    if event.is_recurring and event.recurrence_pattern:
        if event.recurrence_pattern.lower() in RRULE_FREQUENCIES:
            vevent.add('rrule', {'freq': event.recurrence_pattern.upper()})
        else:
            vevent.add(RECURRENCE_PROPERTY, event.recurrence_pattern)

    for attendee in event.attendees:
        vevent.add('attendee', f'mailto:{attendee}')

    for reminder in event.reminders:
        alarm = Alarm()
        alarm.add('action', 'DISPLAY')
        alarm.add('description', event.title)
        alarm.add('trigger', -reminder.before)
        vevent.add_component(alarm)

    return vevent


def events_to_icalendar(events: Iterable[Event]) -> str:
    """Serialize events as one VCALENDAR document."""
    vcal = ICalCalendar()
    vcal.add('prodid', PRODID)
    vcal.add('version', '2.0')
    count = 0
    for event in events:
        vcal.add_component(event_to_vevent(event))
        count += 1
    _debug_print(f"Exported {count} events to iCalendar")
    return vcal.to_ical().decode('utf-8')


# ==================== Files ====================

def read_events_file(path: Path) -> list[dict]:
    """Read raw records from a .ics or JSON events file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Events file not found: {path}")
    if path.suffix.lower() in ('.ics', '.ical', '.ifb'):
        return load_icalendar_records(path)
    return load_json_records(path)


def write_events_file(events: Iterable[Event], path: Path) -> int:
    path = Path(path)
    if path.suffix.lower() in ('.ics', '.ical'):
        events = list(events)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(events_to_icalendar(events))
        return len(events)
    return dump_json_records(events, path)
