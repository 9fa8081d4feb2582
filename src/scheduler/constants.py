"""Phase, state, action, and reason constants used by the scheduler runtime."""

from __future__ import annotations

DEFAULT_WORK_SECONDS = 25 * 60
DEFAULT_SHORT_BREAK_SECONDS = 5 * 60
DEFAULT_LONG_BREAK_SECONDS = 15 * 60
DEFAULT_LONG_BREAK_EVERY = 4
DEFAULT_WARNING_SECONDS = 60
DEFAULT_EXTRA_TIME_SECONDS = 60
DEFAULT_DELAYED_SKIP_SECONDS = 30
DEFAULT_PROFILE_ID = "default"

PHASE_WORK = "work"
PHASE_SHORT_BREAK = "short_break"
PHASE_LONG_BREAK = "long_break"

STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_TOGGLE = "toggle"
ACTION_RESET = "reset"
ACTION_SKIP = "skip"
ACTION_REQUEST_EXTRA_TIME = "request_extra_time"
ACTION_END_EXTRA_TIME = "end_extra_time"
ACTION_CONFIRM_START_WORK = "confirm_start_work"
ACTION_CANCEL_AFTER_BREAK = "cancel_after_break"
ACTION_STOP_ALARM = "stop_alarm"

ACTION_SYNC = "sync"
ACTION_TICK = "tick"
ACTION_WAKE = "wake"

REASON_ACCEPTED = "accepted"
REASON_IGNORED = "ignored"
REASON_UNKNOWN_COMMAND = "unknown_command"
REASON_TICK = "tick"
REASON_COMPLETED = "completed"
REASON_STARTUP = "startup"
REASON_WAKE = "wake"

SOUND_NONE = "none"

LOOP_MODE_SECONDS = "seconds"
LOOP_MODE_TIMES = "times"
LOOP_MODES: frozenset[str] = frozenset({LOOP_MODE_SECONDS, LOOP_MODE_TIMES})

# Safety caps for loop-count playback.
WARNING_ALARM_MAX_SECONDS = 60.0
END_ALARM_MAX_SECONDS = 120.0
