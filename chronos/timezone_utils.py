"""
Timezone utilities for Chronos.

Event instants are kept timezone-aware. Naive datetimes coming from a host
are interpreted as wall-clock time in the configured local timezone.
Calendar-day membership and time-of-day are always judged in local time.
"""

from datetime import datetime, date
import pytz


# Default timezone - can be overridden by config
_local_timezone_name: str = "UTC"


def set_timezone(timezone_name: str):
    """Set the local timezone for the application."""
    global _local_timezone_name
    # Fail on unknown names here rather than on the first conversion
    pytz.timezone(timezone_name)
    _local_timezone_name = timezone_name


def get_timezone_name() -> str:
    return _local_timezone_name


def get_local_timezone():
    """Get the configured local timezone as a pytz timezone object."""
    return pytz.timezone(_local_timezone_name)


def ensure_aware(dt: datetime) -> datetime:
    """
    Attach the local timezone to a naive datetime.

    Aware datetimes are returned unchanged.
    """
    if dt.tzinfo is None:
        return get_local_timezone().localize(dt)
    return dt


def to_local_datetime(dt: datetime) -> datetime:
    """
    Convert a datetime to the local timezone.

    Naive input is taken to already be local and is only localized.
    """
    if dt.tzinfo is None:
        return get_local_timezone().localize(dt)
    return dt.astimezone(get_local_timezone())


def to_utc_datetime(dt: datetime) -> datetime:
    """Convert a (possibly naive, local) datetime to UTC."""
    return ensure_aware(dt).astimezone(pytz.UTC)


def local_date(dt: datetime) -> date:
    """The local calendar date an instant falls on."""
    return to_local_datetime(dt).date()


def to_local_hour(dt: datetime) -> float:
    """
    Convert datetime to local timezone and return hour as float.

    Seconds are ignored (e.g., 14:30:59 -> 14.5).
    """
    local_dt = to_local_datetime(dt)
    return local_dt.hour + local_dt.minute / 60.0


def local_combine(day: date, hour: int = 0, minute: int = 0) -> datetime:
    """Build an aware local datetime for a wall-clock time on a given day."""
    return get_local_timezone().localize(datetime(day.year, day.month, day.day, hour, minute))


def local_today() -> date:
    """Today's date in the local timezone."""
    return datetime.now(get_local_timezone()).date()
