"""
Shared pytest fixtures for the Chronos test suite.

- every test runs with the local timezone set to UTC and debug output off
- `store` is an empty EventStore
- `controller` is a CalendarController whose "today" is pinned to 2025-06-24
"""

from datetime import date

import pytest

from chronos.commands import CalendarController
from chronos.config import Config
from chronos.debug import is_debug, set_debug
from chronos.event_store import EventStore
from chronos.timezone_utils import get_timezone_name, set_timezone

PINNED_TODAY = date(2025, 6, 24)


@pytest.fixture(autouse=True)
def utc_timezone():
    """Pin the local timezone to UTC and restore the previous setting afterwards."""
    previous_tz = get_timezone_name()
    previous_debug = is_debug()
    set_timezone("UTC")
    set_debug(False)
    yield
    set_timezone(previous_tz)
    set_debug(previous_debug)


@pytest.fixture
def store():
    return EventStore()


@pytest.fixture
def config():
    return Config(today=PINNED_TODAY, weather={"2025-06-24": "Sunny 24C"})


@pytest.fixture
def controller(store, config):
    return CalendarController(store=store, config=config)
