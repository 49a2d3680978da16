"""Monitor that records reported events and periodically samples conditions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from .intervals import filter_samples, merge_event_intervals
from .models import Condition, EventIntervals, Sample, utc_now
from .store import MonitorStore, SamplerFunc

if TYPE_CHECKING:
    from config import MonitorConfig

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_S = 15.0


class Recorder(Protocol):
    """Anything that accepts reported conditions."""

    def record(self, *conditions: Condition) -> None:
        """Record conditions as having occurred now."""


class Monitor:
    """Records events in memory and samples conditions in a background task."""

    def __init__(self, *, interval_s: float = DEFAULT_INTERVAL_S, clock: Callable[[], datetime] = utc_now) -> None:
        """Create a monitor.

        Args:
            interval_s: Seconds between sampling passes; 0 disables sampling.
            clock: Source of "now"; must return timezone-aware datetimes.
        """
        if interval_s < 0:
            raise ValueError(f"interval_s must be >= 0. Got: {interval_s}")
        self._interval_s = interval_s
        self._clock = clock
        self._store = MonitorStore()
        self._sampler: asyncio.Task[None] | None = None
        self._sampler_failures = 0

    @classmethod
    def from_config(cls, cfg: MonitorConfig) -> Monitor:
        """Create a monitor from loaded configuration."""
        return cls(interval_s=cfg.sample_interval_s)

    @property
    def interval_s(self) -> float:
        return self._interval_s

    def add_sampler(self, fn: SamplerFunc) -> None:
        """Add a sampler to run on every pass.

        Conditions it reports are tracked with a start and end time for as
        long as they keep being reported.
        """
        self._store.add_sampler(fn)

    def record(self, *conditions: Condition, started_at: datetime | None = None) -> None:
        """Record one event per condition, all stamped with the same time.

        Pass `started_at` when the reporter knows the conditions began
        earlier; their intervals then run from it to the recorded time.
        """
        if not conditions:
            return
        self._store.record_events(conditions, self._clock, started_at=started_at)

    def start_sampling(self, stop: asyncio.Event | None = None) -> asyncio.Task[None] | None:
        """Start the background sampler on the running event loop.

        Sampling ends when `stop` is set or the returned task is cancelled;
        either way one last pass is taken so conditions still true at
        shutdown get their intervals closed. Returns None when sampling is
        disabled. Calling again returns the task already running.
        """
        if self._interval_s == 0:
            logger.debug("sampling disabled (interval is 0)")
            return None
        if self._sampler is None:
            self._sampler = asyncio.create_task(self._run_sampler(stop), name="monitor-sampler")
        return self._sampler

    async def _run_sampler(self, stop: asyncio.Event | None) -> None:
        """Sample on a fixed period until stopped, then sample once more."""
        loop = asyncio.get_running_loop()
        has_conditions = False
        deadline = loop.time()
        tick: asyncio.Future[bool] | None = None
        logger.debug("sampler started (every %.3fs)", self._interval_s)
        try:
            while True:
                # An overrunning pass skips the ticks it missed.
                deadline = max(deadline + self._interval_s, loop.time())
                remaining = deadline - loop.time()
                if stop is None:
                    await asyncio.sleep(remaining)
                else:
                    try:
                        await asyncio.wait_for(stop.wait(), timeout=remaining)
                        return
                    except TimeoutError:
                        pass
                tick = asyncio.ensure_future(asyncio.to_thread(self._sample, has_conditions))
                has_conditions = await asyncio.shield(tick)
                tick = None
        finally:
            # A pass cancelled mid-flight keeps running in its thread; let it
            # land before the final one so passes never overlap.
            if tick is not None:
                has_conditions = await tick
            self._sample(has_conditions)
            logger.debug("sampler stopped")

    def _sample(self, had_conditions: bool) -> bool:
        """Run every sampler once and store the result.

        An empty pass is only stored right after a non-empty one, which is
        enough to close whatever was open. Returns whether this pass found
        any conditions.
        """
        now = self._clock()
        conditions: list[Condition] = []
        for fn in self._store.samplers():
            try:
                found = list(fn(now))
            except Exception:  # noqa: BLE001 - one broken sampler must not stop the others
                self._sampler_failures += 1
                logger.exception("sampler %r failed at %s", fn, now.isoformat())
                continue
            conditions.extend(found)

        if not conditions and not had_conditions:
            return False

        self._store.append_sample(Sample(at=now, conditions=tuple(conditions)))
        return len(conditions) > 0

    def conditions(self, from_: datetime | None = None, to: datetime | None = None) -> EventIntervals:
        """Return sampled conditions as intervals within the window.

        Intervals are in order of first sighting; a condition sampled only
        once has `from_ == to`. A condition shows up more than once only if
        some pass in between did not report it. `None` leaves that side open.
        """
        samples, _ = self._store.snapshot()
        return filter_samples(samples, from_, to)

    def event_intervals(self, from_: datetime | None = None, to: datetime | None = None) -> EventIntervals:
        """Return recorded events and sampled conditions within the window, by start time."""
        samples, events = self._store.snapshot()
        return merge_event_intervals(samples, events, from_, to)

    def integrity_status(self) -> dict[str, Any]:
        """Return counters for timestamp problems and failing samplers."""
        status = self._store.diagnostics()
        status["sampler_failures"] = self._sampler_failures
        return status
