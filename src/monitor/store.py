"""Shared in-memory state for a monitor run."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Any, TypeAlias

from .models import Condition, Event, Sample

logger = logging.getLogger(__name__)

SamplerFunc: TypeAlias = Callable[[datetime], Iterable[Condition]]


class MonitorStore:
    """Lock-protected events, samples and sampler registry.

    Every accessor copies under the lock and returns, so callers can process
    the result for as long as they like without holding up writers.
    """

    def __init__(self) -> None:
        """Create an empty store."""
        self._lock = threading.Lock()
        self._events: list[Event] = []
        self._samples: list[Sample] = []
        self._samplers: list[SamplerFunc] = []

        self._out_of_order_events = 0
        self._out_of_order_samples = 0
        self._last_diagnostic_at: datetime | None = None

    def add_sampler(self, fn: SamplerFunc) -> None:
        """Register a sampler; samplers run in registration order."""
        with self._lock:
            self._samplers.append(fn)

    def samplers(self) -> Sequence[SamplerFunc]:
        """Return a point-in-time copy of the sampler registry."""
        with self._lock:
            return list(self._samplers)

    def record_events(
        self,
        conditions: Sequence[Condition],
        clock: Callable[[], datetime],
        *,
        started_at: datetime | None = None,
    ) -> datetime | None:
        """Append one event per condition, stamped with one `clock()` reading.

        The clock is read under the lock so concurrent callers append in
        timestamp order. A clock that goes backwards is not corrected: the
        events are kept as-is and counted. Returns the timestamp used, or
        None when there was nothing to record.
        """
        if not conditions:
            return None
        with self._lock:
            at = clock()
            if self._events and at < self._events[-1].at:
                self._out_of_order_events += 1
                self._last_diagnostic_at = at
            self._events.extend(
                Event(at=at, condition=condition, started_at=started_at) for condition in conditions
            )
        return at

    def append_sample(self, sample: Sample) -> None:
        """Append a sample, noting it when it does not advance the timeline."""
        with self._lock:
            if self._samples and sample.at <= self._samples[-1].at:
                self._out_of_order_samples += 1
                self._last_diagnostic_at = sample.at
                logger.warning(
                    "sample %d out of order: %s is not after %s",
                    len(self._samples),
                    sample.at.isoformat(),
                    self._samples[-1].at.isoformat(),
                )
            self._samples.append(sample)

    def snapshot(self) -> tuple[list[Sample], list[Event]]:
        """Return point-in-time copies of the samples and events."""
        with self._lock:
            return list(self._samples), list(self._events)

    def diagnostics(self) -> dict[str, Any]:
        """Return the timestamp-ordering counters."""
        with self._lock:
            return {
                "out_of_order_events": self._out_of_order_events,
                "out_of_order_samples": self._out_of_order_samples,
                "last_diagnostic_at": self._last_diagnostic_at,
            }
