"""Event dataclasses and publisher contracts emitted by the phase scheduler."""

from __future__ import annotations

from dataclasses import dataclass
from queue import Empty, Queue
from typing import Protocol

from .models import AlarmRequest, Phase, StatsRecord


@dataclass(frozen=True)
class BreakStarted:
    """A break phase was entered."""
    phase: Phase


@dataclass(frozen=True)
class BreakEnded:
    """A break phase was left (advance, hold exit, or reset)."""


@dataclass(frozen=True)
class BreakResumed:
    """The break continues after extra time with its remaining time restored."""
    phase: Phase
    remaining_seconds: float


@dataclass(frozen=True)
class WarningFired:
    """One-shot pre-completion warning for the current phase instance."""
    phase: Phase
    remaining_seconds: float


@dataclass(frozen=True)
class PhaseEnded:
    """A phase reached its deadline (never emitted on skip)."""
    phase: Phase


@dataclass(frozen=True)
class ExtraTimeStarted:
    """The running break was suspended in favour of an extra-time deadline."""
    phase: Phase
    extra_seconds: int


@dataclass(frozen=True)
class ExtraTimeEnded:
    """Extra time finished by timeout or early end."""


@dataclass(frozen=True)
class HoldAfterBreak:
    """A break completed and the scheduler waits for confirmation to work."""


@dataclass(frozen=True)
class StatsRecorded:
    """A completed or skipped phase to be persisted by the stats sink."""
    record: StatsRecord


@dataclass(frozen=True)
class AlarmRequested:
    """An alarm sound should be played."""
    request: AlarmRequest


@dataclass(frozen=True)
class AlarmStopRequested:
    """Any playing alarm should be stopped."""


SchedulerEvent = (
    BreakStarted
    | BreakEnded
    | BreakResumed
    | WarningFired
    | PhaseEnded
    | ExtraTimeStarted
    | ExtraTimeEnded
    | HoldAfterBreak
    | StatsRecorded
    | AlarmRequested
    | AlarmStopRequested
)


class EventPublisher(Protocol):
    """Protocol for publishing scheduler events."""

    def publish(self, event: SchedulerEvent) -> None: ...


class QueueEventPublisher:
    """Event publisher that pushes events to a queue in emission order."""

    def __init__(self, queue: Queue):
        self._queue = queue

    def publish(self, event: SchedulerEvent) -> None:
        self._queue.put(event)


def drain_events(queue: Queue) -> list[SchedulerEvent]:
    """Return every queued event without blocking."""
    events: list[SchedulerEvent] = []
    while True:
        try:
            events.append(queue.get_nowait())
        except Empty:
            return events
