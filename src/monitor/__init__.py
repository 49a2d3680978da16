"""In-memory timeline of what happened to a system under test, and when.

This package provides:
- A `Monitor` that records reported conditions as events.
- A background sampler that polls registered sampler functions on an interval.
- Queries that fold samples into intervals and interleave them with events.

Nothing is persisted; the timeline lives as long as the `Monitor` does.
"""

from .intervals import filter_events, filter_samples, merge_event_intervals
from .models import Condition, ConditionLevel, Event, EventInterval, EventIntervals, Sample, sort_intervals, utc_now
from .monitor import DEFAULT_INTERVAL_S, Monitor, Recorder
from .store import MonitorStore, SamplerFunc

__all__ = [
    "DEFAULT_INTERVAL_S",
    "Condition",
    "ConditionLevel",
    "Event",
    "EventInterval",
    "EventIntervals",
    "Monitor",
    "MonitorStore",
    "Recorder",
    "Sample",
    "SamplerFunc",
    "filter_events",
    "filter_samples",
    "merge_event_intervals",
    "sort_intervals",
    "utc_now",
]
