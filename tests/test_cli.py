"""Tests for the command-line host."""

import json

import pytest

import chronos_calendar

CONFIG = """
[General]
today = "2025-06-24"

[Weather]
"2025-06-24" = "Sunny 24C"
"""

EVENTS = [
    {"id": "1", "title": "Standup", "start": "2025-06-24T09:00:00", "end": "2025-06-24T09:30:00"},
    {"id": "2", "title": "Sync", "start": "2025-06-24T09:15:00", "end": "2025-06-24T10:00:00"},
    {"id": "3", "title": "Retro", "start": "2025-06-27T15:00:00", "end": "2025-06-27T16:00:00",
     "category": "social"},
]


@pytest.fixture
def files(tmp_path):
    config_path = tmp_path / "chronos-calendar.toml"
    config_path.write_text(CONFIG)
    events_path = tmp_path / "events.json"
    events_path.write_text(json.dumps(EVENTS))
    return config_path, events_path


def run(capsys, *argv):
    chronos_calendar.main(list(argv))
    return capsys.readouterr().out


class TestCli:

    def test_month_view(self, files, capsys):
        config_path, events_path = files
        out = run(capsys, "-c", str(config_path), "-e", str(events_path))
        assert "June 2025" in out
        assert "[24!]" in out
        assert " 27* " in out

    def test_day_view(self, files, capsys):
        config_path, events_path = files
        out = run(capsys, "-c", str(config_path), "-e", str(events_path), "--view", "day")
        assert "2025-06-24 (today) - Sunny 24C" in out
        assert "09:00-09:30  Standup [1/2]  top=576 height=32 !conflict" in out

    def test_navigation_flags(self, files, capsys):
        config_path, events_path = files
        out = run(capsys, "-c", str(config_path), "-e", str(events_path),
                  "--date", "2025-01-31", "--next", "1")
        assert "February 2025" in out

    def test_year_view(self, files, capsys):
        config_path, events_path = files
        out = run(capsys, "-c", str(config_path), "-e", str(events_path), "--view", "year")
        assert "total: 3 events, 2 work, 1 social, 0 holidays" in out

    def test_export(self, files, capsys, tmp_path):
        config_path, events_path = files
        target = tmp_path / "out.ics"
        out = run(capsys, "-c", str(config_path), "-e", str(events_path), "--export", str(target))
        assert "Exported 3 events" in out
        assert target.read_text().count("BEGIN:VEVENT") == 3

    def test_missing_config(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            chronos_calendar.main(["-c", str(tmp_path / "absent.toml")])
        assert exc_info.value.code == 1
        assert "Example configuration" in capsys.readouterr().out
