"""
Debug output for Chronos.

All modules report through debug_print(), which writes a timestamped line
to stderr when debugging is switched on (CLI --debug or [General] debug).
"""

from datetime import datetime
import sys


_enabled: bool = False


def set_debug(enabled: bool):
    """Switch debug output on or off for the whole application."""
    global _enabled
    _enabled = enabled


def is_debug() -> bool:
    return _enabled


def debug_print(tag: str, msg: str) -> None:
    if not _enabled:
        return
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] {tag}: {msg}", file=sys.stderr)
