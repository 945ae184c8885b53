"""
Create templates: named sets of defaults for a new event draft.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from .config import TemplateConfig
from .event import DEFAULT_COLOR, DEFAULT_CATEGORY, Reminder

DEFAULT_TEMPLATE = "event"


@dataclass(frozen=True)
class Template:
    name: str
    title: str
    category: str = DEFAULT_CATEGORY
    color: str = DEFAULT_COLOR
    duration_minutes: int = 60
    description: str = ""
    has_video_call: bool = False
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    reminders: tuple[Reminder, ...] = field(default_factory=lambda: (Reminder(),))

    def with_overrides(self, override: TemplateConfig) -> 'Template':
        """Apply the fields a [Templates.<name>] section sets."""
        changes = {
            key: getattr(override, key)
            for key in ("title", "category", "color", "duration_minutes", "description",
                        "has_video_call", "is_recurring", "recurrence_pattern")
            if getattr(override, key) is not None
        }
        return replace(self, **changes)


BUILTIN_TEMPLATES = {
    t.name: t for t in (
        Template("event", "New Event"),
        Template("meeting", "Team Meeting", color="#8B5CF6", has_video_call=True,
                 description="Discuss project progress and next steps"),
        Template("task", "New Task", color="#F59E0B", description="Task to be completed"),
        Template("appointment", "Appointment", category="personal", color="#10B981",
                 description="Personal appointment"),
        Template("reminder", "Reminder", category="personal", color="#EC4899",
                 duration_minutes=30, description="Important reminder",
                 reminders=(Reminder(15, "minutes"),)),
        Template("birthday", "Birthday Celebration", category="social", color="#F59E0B",
                 description="Annual birthday celebration",
                 is_recurring=True, recurrence_pattern="yearly"),
    )
}


class TemplateRegistry:
    """Built-in templates, with configured overrides and additions on top."""

    def __init__(self, overrides: Iterable[TemplateConfig] = ()):
        self._templates = dict(BUILTIN_TEMPLATES)
        for override in overrides:
            base = self._templates.get(override.name, Template(override.name, override.title or "New Event"))
            self._templates[override.name] = base.with_overrides(override)

    def names(self) -> list[str]:
        return list(self._templates)

    def get(self, name: Optional[str]) -> Template:
        """Look up a template by name; unknown names give the plain event template."""
        key = (name or DEFAULT_TEMPLATE).lower()
        return self._templates.get(key, self._templates[DEFAULT_TEMPLATE])
