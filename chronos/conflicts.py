"""
Conflict detection for events sharing a calendar day.

Two events conflict when their time ranges overlap:
    a.start < b.end and a.end > b.start
Back-to-back events (a.end == b.start) do not conflict. Holiday and
working-day-leave events never take part: they are never flagged and
never cause another event to be flagged.

Detection is day-local. A list spanning several days is split by start
day and every day is checked on its own.
"""

from itertools import groupby
from typing import Iterable

from .debug import debug_print
from .event import Event


def _pairwise_flags(day_events: list[Event]) -> set[int]:
    """Indices of conflicting events, comparing every pair. O(n^2)."""
    flagged: set[int] = set()
    for i, a in enumerate(day_events):
        if a.is_leave:
            continue
        for j in range(i + 1, len(day_events)):
            b = day_events[j]
            if b.is_leave:
                continue
            if a.start < b.end and a.end > b.start:
                flagged.add(i)
                flagged.add(j)
    return flagged


def _sweep_flags(day_events: list[Event]) -> set[int]:
    """
    Same flags as _pairwise_flags via a sweep over start-sorted events.

    Keeps the set of intervals still open at the current start. O(n log n)
    plus the number of conflicting pairs.
    """
    flagged: set[int] = set()
    order = sorted((i for i, e in enumerate(day_events) if not e.is_leave),
                   key=lambda i: day_events[i].start)
    active: list[int] = []
    for i in order:
        current = day_events[i]
        # Intervals ending at or before this start can no longer overlap
        active = [j for j in active if day_events[j].end > current.start]
        for j in active:
            # day_events[j].start <= current.start < day_events[j].end here
            if current.end > day_events[j].start:
                flagged.add(i)
                flagged.add(j)
        active.append(i)
    return flagged


def _annotate(events: Iterable[Event], flag_fn) -> list[Event]:
    events = list(events)
    flags: dict[int, bool] = {}
    # Indices per day, so the output keeps the input order
    by_day: dict = {}
    for idx, event in enumerate(events):
        by_day.setdefault(event.day, []).append(idx)

    for day, indices in by_day.items():
        day_events = [events[i] for i in indices]
        conflicting = flag_fn(day_events)
        for local_idx, idx in enumerate(indices):
            flags[idx] = local_idx in conflicting
        if conflicting:
            debug_print("CONFLICT", f"{day}: {len(conflicting)} of {len(day_events)} events overlap")

    return [e.with_conflict(flags[idx]) for idx, e in enumerate(events)]


def annotate(events: Iterable[Event]) -> list[Event]:
    """
    Return copies of the events with has_conflict set, in input order.

    Any has_conflict already present on the input is ignored, so
    annotating twice gives the same flags.
    """
    return _annotate(events, _pairwise_flags)


def annotate_sweep(events: Iterable[Event]) -> list[Event]:
    """annotate() using the interval sweep; produces identical flags."""
    return _annotate(events, _sweep_flags)


def conflict_count(events: Iterable[Event]) -> int:
    """Number of conflicting events among already-annotated events."""
    return sum(1 for e in events if e.has_conflict)


def conflicting_pairs(events: Iterable[Event]) -> list[tuple[Event, Event]]:
    """Every overlapping (a, b) pair within each day, a before b in start order."""
    pairs = []
    ordered = sorted((e for e in events if not e.is_leave), key=lambda e: (e.day, e.start))
    for _day, group in groupby(ordered, key=lambda e: e.day):
        group = list(group)
        for i, a in enumerate(group):
            for b in group[i + 1:]:
                if a.start < b.end and a.end > b.start:
                    pairs.append((a, b))
    return pairs
