"""Timeline models.

A run is described by two streams:
- Events: discrete conditions reported by callers at a single instant.
- Samples: snapshots of every condition the registered samplers judged true.

Both are folded into `EventInterval`s, the unit consumers read back.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


ConditionLevel = Literal["Info", "Warning", "Error"]


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Condition(_Model):
    """An observed state of the system under test.

    Conditions compare and hash by value: two samplers reporting the same
    fields report the same condition.
    """

    level: ConditionLevel = "Info"

    # What the condition is about (e.g., "node/worker-1", "ns/openshift-etcd pod/etcd-0").
    locator: str

    # A short machine-friendly cause (e.g., "NotReady").
    reason: str = ""

    message: str = ""


class Event(_Model):
    """A single condition reported by a caller."""

    at: datetime
    condition: Condition

    # Set when the reporter knows the condition began before it was reported.
    started_at: datetime | None = None


class Sample(_Model):
    """Every condition observed by one sampling pass, sharing one timestamp."""

    at: datetime
    conditions: tuple[Condition, ...] = ()


class EventInterval(BaseModel):
    """The span during which a condition was continuously observed.

    Not frozen: the merge extends `to` while the condition keeps showing up.
    """

    model_config = ConfigDict(extra="ignore")

    from_: datetime = Field(serialization_alias="from")
    to: datetime
    condition: Condition

    @property
    def duration(self) -> timedelta:
        return self.to - self.from_


EventIntervals: TypeAlias = list[EventInterval]


def sort_intervals(intervals: EventIntervals) -> None:
    """Sort in place by start, then end; equal spans keep insertion order."""
    intervals.sort(key=lambda interval: (interval.from_, interval.to))
