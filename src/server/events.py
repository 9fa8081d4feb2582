"""Utilities for serializing UI events, parsing commands, and sticky state."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from contracts.ui_protocol import COMMAND_FIELD, STICKY_EVENT_ORDER, STICKY_EVENT_TYPES


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


def parse_command(message: str | bytes) -> Optional[str]:
    """Extract the command name from an inbound ``{"command": ...}`` message."""
    try:
        data = json.loads(message)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    command = data.get(COMMAND_FIELD)
    if not isinstance(command, str) or not command.strip():
        return None
    return command.strip()


class StickyEventStore:
    """Thread-safe cache of sticky events replayed to new websocket clients."""
    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            self._events[event_type] = message

    def latest(self, event_type: str) -> Optional[str]:
        with self._lock:
            return self._events.get(event_type)

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]
