from .clock import Clock, SystemClock
from .events import (
    AlarmRequested,
    AlarmStopRequested,
    BreakEnded,
    BreakResumed,
    BreakStarted,
    EventPublisher,
    ExtraTimeEnded,
    ExtraTimeStarted,
    HoldAfterBreak,
    PhaseEnded,
    QueueEventPublisher,
    SchedulerEvent,
    StatsRecorded,
    WarningFired,
    drain_events,
)
from .models import (
    AlarmRequest,
    Phase,
    RunState,
    SchedulerSnapshot,
    SchedulerTick,
    StatsRecord,
    format_remaining,
)
from .service import PhaseScheduler

__all__ = [
    "AlarmRequest",
    "AlarmRequested",
    "AlarmStopRequested",
    "BreakEnded",
    "BreakResumed",
    "BreakStarted",
    "Clock",
    "EventPublisher",
    "ExtraTimeEnded",
    "ExtraTimeStarted",
    "HoldAfterBreak",
    "Phase",
    "PhaseEnded",
    "PhaseScheduler",
    "QueueEventPublisher",
    "RunState",
    "SchedulerEvent",
    "SchedulerSnapshot",
    "SchedulerTick",
    "StatsRecord",
    "StatsRecorded",
    "SystemClock",
    "WarningFired",
    "drain_events",
    "format_remaining",
]
