from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TickClock:
    """Deterministic clock: every call returns one second later than the last."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start - step
        self.step = step

    def __call__(self) -> datetime:
        self.now += self.step
        return self.now


@pytest.fixture
def clock() -> TickClock:
    return TickClock()


@pytest.fixture(autouse=True)
def _no_threads_in_unit_tests(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch):
    """Run `asyncio.to_thread` inline for unit tests.

    The sampler runs each pass through `asyncio.to_thread` so slow samplers do
    not stall the event loop. In most unit tests that only adds threadpool
    workers and makes pass ordering harder to reason about; tests marked
    `worker_threads` keep the real thread hand-off.
    """
    if request.node.get_closest_marker("worker_threads") is not None:
        yield
        return

    async def _to_thread(func, /, *args, **kwargs):  # noqa: ANN001, D401
        return func(*args, **kwargs)

    monkeypatch.setattr("monitor.monitor.asyncio.to_thread", _to_thread)
    yield
