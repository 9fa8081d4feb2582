"""Command names accepted by the runtime and their scheduler operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from scheduler import PhaseScheduler
from scheduler.constants import (
    ACTION_CANCEL_AFTER_BREAK,
    ACTION_CONFIRM_START_WORK,
    ACTION_END_EXTRA_TIME,
    ACTION_PAUSE,
    ACTION_REQUEST_EXTRA_TIME,
    ACTION_RESET,
    ACTION_SKIP,
    ACTION_START,
    ACTION_STOP_ALARM,
    ACTION_TOGGLE,
    REASON_ACCEPTED,
    REASON_IGNORED,
    REASON_UNKNOWN_COMMAND,
)

COMMAND_OPERATIONS: dict[str, Callable[[PhaseScheduler], bool]] = {
    ACTION_START: PhaseScheduler.start,
    ACTION_PAUSE: PhaseScheduler.pause,
    ACTION_TOGGLE: PhaseScheduler.toggle_start_pause,
    ACTION_RESET: PhaseScheduler.reset,
    ACTION_SKIP: PhaseScheduler.skip,
    ACTION_REQUEST_EXTRA_TIME: PhaseScheduler.request_extra_time,
    ACTION_END_EXTRA_TIME: PhaseScheduler.end_extra_time_early,
    ACTION_CONFIRM_START_WORK: PhaseScheduler.confirm_start_work,
    ACTION_CANCEL_AFTER_BREAK: PhaseScheduler.cancel_after_break,
    ACTION_STOP_ALARM: PhaseScheduler.stop_alarm,
}


@dataclass(frozen=True)
class CommandResult:
    """Outcome of applying one named command to the scheduler."""
    action: str
    accepted: bool
    reason: str


def normalize_command(raw: object) -> str:
    if not isinstance(raw, str):
        return ""
    return raw.strip().lower().replace("-", "_")


def apply_command(scheduler: PhaseScheduler, raw_command: object) -> CommandResult:
    action = normalize_command(raw_command)
    operation = COMMAND_OPERATIONS.get(action)
    if operation is None:
        return CommandResult(action=action, accepted=False, reason=REASON_UNKNOWN_COMMAND)
    accepted = operation(scheduler)
    return CommandResult(
        action=action,
        accepted=accepted,
        reason=REASON_ACCEPTED if accepted else REASON_IGNORED,
    )
