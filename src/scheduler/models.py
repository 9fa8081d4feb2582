"""Value types shared by the scheduler and its collaborators."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .constants import (
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    PHASE_WORK,
    STATE_IDLE,
    STATE_PAUSED,
    STATE_RUNNING,
)


class Phase(str, Enum):
    """A named timed interval."""

    WORK = PHASE_WORK
    SHORT_BREAK = PHASE_SHORT_BREAK
    LONG_BREAK = PHASE_LONG_BREAK

    @property
    def is_break(self) -> bool:
        return self is not Phase.WORK

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Phase.WORK: "Work",
    Phase.SHORT_BREAK: "Short Break",
    Phase.LONG_BREAK: "Long Break",
}


class RunState(str, Enum):
    """Run state of the primary phase timer."""

    IDLE = STATE_IDLE
    RUNNING = STATE_RUNNING
    PAUSED = STATE_PAUSED


def format_remaining(seconds: float) -> str:
    """Format *seconds* as ``MM:SS``, rounding partial seconds up."""
    display = max(0, int(math.ceil(seconds)))
    minutes, secs = divmod(display, 60)
    return f"{minutes:02d}:{secs:02d}"


@dataclass(frozen=True)
class SchedulerSnapshot:
    """Immutable read-only view of the scheduler exposed to runtime and UI."""
    phase: Phase
    state: RunState
    duration_seconds: int
    remaining_seconds: float
    completed_work_sessions: int
    is_extra_time: bool = False
    extra_time_remaining_seconds: float = 0.0
    saved_break_remaining_seconds: float = 0.0
    is_holding_after_break: bool = False

    @property
    def live_remaining_seconds(self) -> float:
        if self.is_extra_time:
            return self.extra_time_remaining_seconds
        return self.remaining_seconds

    @property
    def display_seconds(self) -> int:
        return max(0, int(math.ceil(self.live_remaining_seconds)))

    @property
    def formatted_remaining(self) -> str:
        return format_remaining(self.live_remaining_seconds)

    @property
    def is_break(self) -> bool:
        return self.phase.is_break


@dataclass(frozen=True)
class SchedulerTick:
    """Tick payload returned while a deadline is live."""
    snapshot: SchedulerSnapshot
    completed: bool = False


@dataclass(frozen=True)
class StatsRecord:
    """One completed or skipped phase, handed to the statistics sink."""
    profile_id: str
    phase: Phase
    planned_seconds: int
    actual_seconds: int
    completed: bool
    skipped: bool
    strict_mode: bool
    timestamp: str

    def to_dict(self) -> dict[str, object]:
        return {
            "ts": self.timestamp,
            "profile_id": self.profile_id,
            "phase": self.phase.value,
            "planned_seconds": self.planned_seconds,
            "actual_seconds": self.actual_seconds,
            "completed": self.completed,
            "skipped": self.skipped,
            "strict_mode": self.strict_mode,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "StatsRecord":
        return cls(
            profile_id=str(data["profile_id"]),
            phase=Phase(str(data["phase"])),
            planned_seconds=int(data["planned_seconds"]),  # type: ignore[arg-type]
            actual_seconds=int(data["actual_seconds"]),  # type: ignore[arg-type]
            completed=bool(data["completed"]),
            skipped=bool(data["skipped"]),
            strict_mode=bool(data.get("strict_mode", False)),
            timestamp=str(data["ts"]),
        )


@dataclass(frozen=True)
class AlarmRequest:
    """Sound playback request handed to the alarm sink."""
    sound_id: str
    volume: float
    loop_mode: str
    max_duration_seconds: float
    loop_count: int = 1
