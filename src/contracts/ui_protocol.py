"""Web UI websocket event, overlay, and command constants."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_SCHEDULER = "scheduler"
EVENT_PHASE = "phase_event"
EVENT_OVERLAY = "overlay"
EVENT_NOTIFICATION = "notification"
EVENT_STATS = "stats"
EVENT_ERROR = "error"

# Lifecycle names carried by EVENT_PHASE
PHASE_EVENT_WARNING = "warning"
PHASE_EVENT_ENDED = "phase_ended"
PHASE_EVENT_BREAK_STARTED = "break_started"
PHASE_EVENT_BREAK_ENDED = "break_ended"
PHASE_EVENT_BREAK_RESUMED = "break_resumed"
PHASE_EVENT_EXTRA_TIME_STARTED = "extra_time_started"
PHASE_EVENT_EXTRA_TIME_ENDED = "extra_time_ended"
PHASE_EVENT_HOLD = "hold_after_break"

# Overlay modes carried by EVENT_OVERLAY
OVERLAY_SHOW = "show"
OVERLAY_HIDE = "hide"
OVERLAY_EXTRA_TIME = "extra_time"
OVERLAY_HOLD = "hold"

# Inbound websocket message field naming a scheduler command
COMMAND_FIELD = "command"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_SCHEDULER,
        EVENT_OVERLAY,
        EVENT_STATS,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_SCHEDULER,
    EVENT_OVERLAY,
    EVENT_STATS,
    EVENT_ERROR,
)
