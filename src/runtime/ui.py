from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import EVENT_OVERLAY, EVENT_PHASE, EVENT_SCHEDULER, EVENT_STATS
from scheduler import SchedulerSnapshot


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


def snapshot_payload(snapshot: SchedulerSnapshot) -> dict[str, Any]:
    return {
        "phase": snapshot.phase.value,
        "phase_name": snapshot.phase.display_name,
        "state": snapshot.state.value,
        "duration_seconds": snapshot.duration_seconds,
        "remaining_seconds": snapshot.display_seconds,
        "formatted_remaining": snapshot.formatted_remaining,
        "completed_work_sessions": snapshot.completed_work_sessions,
        "is_break": snapshot.is_break,
        "is_extra_time": snapshot.is_extra_time,
        "is_holding_after_break": snapshot.is_holding_after_break,
    }


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_scheduler_update(
        self,
        snapshot: SchedulerSnapshot,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
    ) -> None:
        payload = {"action": action, **snapshot_payload(snapshot)}
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        self.publish(EVENT_SCHEDULER, **payload)

    def publish_phase_event(self, name: str, **payload: Any) -> None:
        self.publish(EVENT_PHASE, name=name, **payload)

    def publish_overlay(self, mode: str, **payload: Any) -> None:
        self.publish(EVENT_OVERLAY, mode=mode, **payload)

    def publish_stats(self, summaries: dict[str, dict[str, int]]) -> None:
        self.publish(EVENT_STATS, **summaries)
