"""
Configuration parser for Chronos.

Handles TOML file parsing. Every section is optional.
"""

import tomllib
import os
from datetime import date
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from .debug import debug_print
from .errors import InvalidDate


WEEK_STARTS = {"sunday": 6, "monday": 0}


@dataclass
class LayoutConfig:
    """Configuration for time grids and calendar grids."""
    hour_height: int = 64        # Units per hour on the day/week timeline
    min_event_height: int = 24   # Smallest rendered event block, in units
    week_start: str = "sunday"   # "sunday" or "monday"
    mobile: bool = False         # Day clicks with events open a list preview

    @property
    def timeline_height(self) -> int:
        return self.hour_height * 24

    @property
    def min_extent(self) -> float:
        """Minimum block size as a fraction of the 24-hour timeline."""
        return self.min_event_height / self.timeline_height

    @property
    def first_weekday(self) -> int:
        """First day of the week as a date.weekday() number (0=Monday)."""
        return WEEK_STARTS[self.week_start]


@dataclass
class LocalizationConfig:
    """Configuration for localized day and month names."""
    # Default to English abbreviated day names, Monday first
    day_names: list[str] = None
    # Default to English full month names
    month_names: list[str] = None

    def __post_init__(self):
        if self.day_names is None:
            self.day_names = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        if self.month_names is None:
            self.month_names = [
                "January", "February", "March", "April", "May", "June",
                "July", "August", "September", "October", "November", "December"
            ]

    def get_day_name(self, weekday: int) -> str:
        """Get localized day name for weekday (0=Monday, 6=Sunday)."""
        return self.day_names[weekday] if 0 <= weekday < len(self.day_names) else ""

    def get_month_name(self, month: int) -> str:
        """Get localized month name (1=January, 12=December)."""
        return self.month_names[month - 1] if 1 <= month <= len(self.month_names) else ""


@dataclass
class TemplateConfig:
    """A create-template override from a [Templates.<name>] section."""
    name: str
    title: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    duration_minutes: Optional[int] = None
    description: Optional[str] = None
    has_video_call: Optional[bool] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[str] = None


@dataclass
class Config:
    """Main configuration container for Chronos."""

    timezone: str = "UTC"
    today: Optional[date] = None       # Pinned reference "today"; None = system date
    debug: bool = False
    events_file: Optional[Path] = None
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    localization: LocalizationConfig = field(default_factory=LocalizationConfig)
    templates: list[TemplateConfig] = field(default_factory=list)
    weather: dict[str, str] = field(default_factory=dict)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'chronos-calendar' / 'chronos-calendar.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """Load configuration from TOML file."""
        if config_path is None:
            config_path = cls.get_default_config_path()

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)

        config = cls.from_dict(data)
        debug_print("CONFIG", f"Loaded {config_path}: tz={config.timezone}, "
                              f"templates={len(config.templates)}, weather={len(config.weather)}")
        return config

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build a configuration from already-parsed TOML data."""
        # Parse General section
        general = data.get('General', {})
        today = general.get('today')
        if isinstance(today, str):
            try:
                today = date.fromisoformat(today)
            except ValueError:
                raise InvalidDate(f"[General] today is not an ISO date: {today!r}")
        events_file = general.get('events_file')
        if events_file:
            events_file = Path(os.path.expanduser(events_file))

        # Parse Layout section
        layout_data = data.get('Layout', {})
        layout = LayoutConfig(
            hour_height=layout_data.get('hour_height', LayoutConfig.hour_height),
            min_event_height=layout_data.get('min_event_height', LayoutConfig.min_event_height),
            week_start=str(layout_data.get('week_start', LayoutConfig.week_start)).lower(),
            mobile=layout_data.get('mobile', LayoutConfig.mobile),
        )
        if layout.week_start not in WEEK_STARTS:
            raise ValueError(f"[Layout] week_start must be one of {sorted(WEEK_STARTS)}: {layout.week_start!r}")
        if layout.hour_height <= 0 or layout.min_event_height < 0:
            raise ValueError("[Layout] hour_height must be positive and min_event_height non-negative")

        # Parse Localization section
        localization_data = data.get('Localization', {})
        day_names_str = localization_data.get('day_names', '')
        month_names_str = localization_data.get('month_names', '')
        localization = LocalizationConfig(
            day_names=day_names_str.split() if day_names_str else None,
            month_names=month_names_str.split() if month_names_str else None,
        )

        # Parse templates
        # Supports both [Templates.Name] and [Templates] with nested sub-tables
        templates = []
        for key, value in data.items():
            if key.startswith('Templates.') and isinstance(value, dict):
                templates.append(_parse_template(key.split('.', 1)[1], value))
            elif key == 'Templates' and isinstance(value, dict):
                for sub_key, sub_value in value.items():
                    if isinstance(sub_value, dict):
                        templates.append(_parse_template(sub_key, sub_value))

        # Parse Weather section: "YYYY-MM-DD" = "description"
        weather = {}
        for day_key, description in data.get('Weather', {}).items():
            try:
                date.fromisoformat(day_key)
            except ValueError:
                raise InvalidDate(f"[Weather] key is not an ISO date: {day_key!r}")
            weather[day_key] = str(description)

        return cls(
            timezone=general.get('timezone', 'UTC'),
            today=today,
            debug=bool(general.get('debug', False)),
            events_file=events_file,
            layout=layout,
            localization=localization,
            templates=templates,
            weather=weather,
        )


def _parse_template(name: str, value: dict) -> TemplateConfig:
    return TemplateConfig(
        name=name.lower(),
        title=value.get('title'),
        category=value.get('category'),
        color=value.get('color'),
        duration_minutes=value.get('duration_minutes'),
        description=value.get('description'),
        has_video_call=value.get('has_video_call'),
        is_recurring=value.get('is_recurring'),
        recurrence_pattern=value.get('recurrence_pattern'),
    )
