"""Fold samples and events into intervals.

Everything here is pure and runs on snapshots taken from the store, outside
its lock.

Window semantics (shared by samples and events): a bound of `None` is open.
Otherwise an entry is kept when `from_ < at <= to`.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Sequence
from datetime import datetime

from .models import Condition, Event, EventInterval, EventIntervals, Sample, sort_intervals

logger = logging.getLogger(__name__)


def _at(entry: Sample | Event) -> datetime:
    return entry.at


def _window_is_empty(from_: datetime | None, to: datetime | None) -> bool:
    return from_ is not None and to is not None and to < from_


def filter_samples(samples: Sequence[Sample], from_: datetime | None, to: datetime | None) -> EventIntervals:
    """Merge the samples inside the window into per-condition intervals.

    Intervals come back in the order their condition was first seen. A
    condition that drops out of a sample closes its interval at the last
    sample that still had it; if it shows up again later it opens a new one.
    A condition seen in a single sample has `from_ == to`.
    """
    if not samples or _window_is_empty(from_, to):
        return []

    # Samples are stored in increasing `at` order, so both bounds can bisect.
    first = 0 if from_ is None else bisect.bisect_right(samples, from_, key=_at)
    last = len(samples) if to is None else bisect.bisect_right(samples, to, key=_at)
    window = samples[first:last]
    if not window:
        return []

    intervals: EventIntervals = []
    current: dict[Condition, EventInterval] = {}
    following: dict[Condition, EventInterval] = {}
    for sample in window:
        for condition in sample.conditions:
            interval = current.get(condition)
            if interval is not None:
                interval.to = sample.at
                following[condition] = interval
                continue
            # Repeated within one sample: already opened on this pass.
            if condition in following:
                continue
            interval = EventInterval(from_=sample.at, to=sample.at, condition=condition)
            following[condition] = interval
            intervals.append(interval)
        current.clear()
        current, following = following, current
    return intervals


def filter_events(events: Sequence[Event], from_: datetime | None, to: datetime | None) -> list[Event]:
    """Return the events inside the window, in recorded order."""
    if from_ is None and to is None:
        return list(events)
    if _window_is_empty(from_, to):
        return []

    first = 0
    if from_ is not None:
        first = bisect.bisect_right(events, from_, key=_at)
    if to is None:
        return list(events[first:])
    for i in range(first, len(events)):
        if events[i].at > to:
            return list(events[first:i])
    return list(events[first:])


def merge_event_intervals(
    samples: Sequence[Sample],
    events: Sequence[Event],
    from_: datetime | None,
    to: datetime | None,
) -> EventIntervals:
    """Combine sampled intervals and reported events into one timeline.

    Each event becomes a point interval at its `at`, or starts at its
    `started_at` when it carries an earlier one. The result is sorted by start time
    whenever sampled intervals are present; events alone keep recorded order.
    """
    intervals = filter_samples(samples, from_, to)
    must_sort = len(intervals) > 0

    window = filter_events(events, from_, to)
    for i, event in enumerate(window):
        if i > 0 and window[i - 1].at > event.at:
            logger.warning(
                "event %d out of order: %s (%s) recorded after %s (%s)",
                i,
                event.at.isoformat(),
                event.condition.locator,
                window[i - 1].at.isoformat(),
                window[i - 1].condition.locator,
            )
        start = event.at
        if event.started_at is not None and event.started_at < event.at:
            start = event.started_at
        intervals.append(EventInterval(from_=start, to=event.at, condition=event.condition))

    if must_sort:
        sort_intervals(intervals)
    return intervals
