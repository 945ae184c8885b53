#!/usr/bin/env python3
"""
Chronos Calendar - command-line host for the Chronos scheduling engine.

Loads the configuration and an events file, applies navigation commands
and prints the active view as text.
"""

import sys
import argparse
from pathlib import Path

from chronos.commands import CalendarController, DayColumn, MonthView, WeekView, YearView
from chronos.config import Config
from chronos.debug import set_debug, debug_print
from chronos.errors import CalendarError
from chronos.event_store import EventStore
from chronos.interchange import read_events_file, write_events_file
from chronos.timezone_utils import set_timezone, to_local_datetime


SAMPLE_CONFIG = """
[General]
timezone = "Europe/Berlin"
# today = "2025-06-24"
events_file = "~/.local/share/chronos-calendar/events.json"

[Layout]
hour_height = 64
min_event_height = 24
week_start = "sunday"

[Templates.standup]
title = "Daily Standup"
duration_minutes = 15

[Weather]
"2025-06-24" = "Sunny 24C"
"""


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Chronos Calendar - event scheduling and layout engine"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to configuration file (default: auto-detect)"
    )
    parser.add_argument(
        "-e", "--events",
        type=Path,
        help="Events file to load (.json or .ics; default: [General] events_file)"
    )
    parser.add_argument(
        "--view",
        choices=["year", "month", "week", "day"],
        help="View mode to show"
    )
    parser.add_argument(
        "--date",
        help="Anchor the view at this ISO date (YYYY-MM-DD)"
    )
    parser.add_argument(
        "--today",
        action="store_true",
        help="Jump to today before anything else"
    )
    parser.add_argument(
        "--next",
        type=int,
        default=0,
        metavar="N",
        help="Move forward N periods of the active view"
    )
    parser.add_argument(
        "--prev",
        type=int,
        default=0,
        metavar="N",
        help="Move back N periods of the active view"
    )
    parser.add_argument(
        "--export",
        type=Path,
        help="Write all loaded events to this file (.json or .ics)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )
    return parser.parse_args(argv)


# ==================== Text Rendering ====================

def _format_time(dt) -> str:
    return to_local_datetime(dt).strftime("%H:%M")


def render_month(view: MonthView, config: Config) -> list[str]:
    loc = config.localization
    title = f"{loc.get_month_name(view.month)} {view.year}"
    lines = [title.center(7 * 5 + 6).rstrip()]
    lines.append(" ".join(f"{loc.get_day_name(c.date.weekday()):^5}" for c in view.weeks[0]))
    for week in view.weeks:
        cells = []
        for cell in week:
            if not cell.in_month:
                cells.append(f"({cell.date.day:2d} )")
                continue
            if cell.conflict_count:
                mark = "!"
            elif cell.is_leave_day:
                mark = "L"
            elif cell.has_events:
                mark = "*"
            else:
                mark = " "
            text = f"{cell.date.day:2d}{mark}"
            cells.append(f"[{text}]" if cell.is_today else f" {text} ")
        lines.append(" ".join(cells))
    lines.append("")
    lines.append("* events  ! conflicts  L leave day  [ ] today")
    return lines


def render_day(column: DayColumn, config: Config) -> list[str]:
    loc = config.localization
    header = f"{loc.get_day_name(column.date.weekday())} {column.date.isoformat()}"
    if column.is_today:
        header += " (today)"
    if column.weather:
        header += f" - {column.weather}"
    lines = [header]
    if column.is_leave_day:
        lines.append("  non-working day")
    if not column.blocks:
        lines.append("  no events")
    for block in column.blocks:
        event = block.event
        flag = " !conflict" if event.has_conflict else ""
        columns = f" [{block.column + 1}/{block.column_count}]" if block.column_count > 1 else ""
        lines.append(
            f"  {_format_time(event.start)}-{_format_time(event.end)}  {event.title}"
            f"{columns}  top={block.geometry.top:.0f} height={block.geometry.height:.0f}{flag}"
        )
    return lines


def render_week(view: WeekView, config: Config) -> list[str]:
    lines = []
    for column in view.days:
        lines.extend(render_day(column, config))
    return lines


def render_year(view: YearView, config: Config) -> list[str]:
    loc = config.localization
    lines = [str(view.year)]
    for month in view.months:
        lines.append(
            f"  {loc.get_month_name(month.month):<10} {month.event_count:3d} events"
            f"  ({month.work_count} work, {month.leave_count} leave)"
        )
    lines.append(
        f"  total: {view.total_events} events, {view.total_work} work, "
        f"{view.total_social} social, {view.total_holidays} holidays"
    )
    return lines


def render(view, config: Config) -> str:
    if isinstance(view, MonthView):
        lines = render_month(view, config)
    elif isinstance(view, WeekView):
        lines = render_week(view, config)
    elif isinstance(view, DayColumn):
        lines = render_day(view, config)
    else:
        lines = render_year(view, config)
    return "\n".join(lines)


# ==================== Entry Point ====================

def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    if args.debug:
        set_debug(True)

    # Load configuration
    try:
        config = Config.load(args.config)
        set_timezone(config.timezone)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        print("\nPlease create a configuration file at:")
        print(f"  - {Config.get_default_config_path()}")
        print("\nExample configuration:")
        print(SAMPLE_CONFIG)
        sys.exit(1)
    except Exception as e:
        print(f"Error loading configuration: {e}")
        sys.exit(1)

    if config.debug:
        set_debug(True)
    debug_print("MAIN", f"Loaded configuration from: {args.config or Config.get_default_config_path()}")

    store = EventStore()
    events_file = args.events or config.events_file
    if events_file:
        try:
            store.load(read_events_file(events_file))
        except (OSError, ValueError) as e:
            print(f"Error loading events: {e}")
            sys.exit(1)

    controller = CalendarController(store=store, config=config)
    try:
        if args.today:
            controller.go_to_today()
        if args.date:
            controller.jump_to_date(args.date)
        if args.view:
            controller.set_view_mode(args.view)
        for _ in range(args.next):
            controller.next()
        for _ in range(args.prev):
            controller.previous()
        print(render(controller.current_view(), config))
    except CalendarError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.export:
        count = write_events_file(controller.get_events(), args.export)
        print(f"Exported {count} events to {args.export}")


if __name__ == "__main__":
    main()
