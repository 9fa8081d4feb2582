"""Session-scoped banner scheduling with stale-notification suppression."""

from __future__ import annotations

import itertools
import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

from scheduler.clock import Clock, SystemClock
from scheduler.models import Phase

KIND_WARNING = "warning"
KIND_END = "end"

_MIN_LEAD_SECONDS = 1.0
_MAX_INVALIDATED_SESSIONS = 10


@dataclass(frozen=True)
class PendingNotification:
    """A banner scheduled for an absolute fire time within one session."""
    identifier: str
    session_id: int
    kind: str
    phase: Phase
    fire_at: float
    title: str
    body: str


def format_warning_time(seconds: int) -> str:
    """Render a warning lead time as banner text."""
    if seconds >= 60:
        minutes, remainder = divmod(seconds, 60)
        if remainder == 0:
            return "1 minute" if minutes == 1 else f"{minutes} minutes"
        return f"{minutes}m {remainder}s"
    return f"{seconds} seconds"


def parse_session_id(identifier: str) -> Optional[int]:
    """Extract the session id from ``<kind>_<phase>_<session>`` identifiers."""
    kind, sep, rest = identifier.partition("_")
    if not sep or kind not in (KIND_WARNING, KIND_END):
        return None
    _, sep, session = rest.rpartition("_")
    if not sep or not session.isdigit():
        return None
    return int(session)


class NotificationScheduler:
    """Plans warning and phase-end banners for the live phase instance.

    Every phase instance runs in its own notification session.  Starting a new
    session invalidates the old one, so banners computed for an abandoned
    phase are never presented even if a backend delivers them late.
    """

    def __init__(
        self,
        *,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._clock = clock or SystemClock()
        self._logger = logger or logging.getLogger("notifications")
        self._session_ids = itertools.count(1)
        self._current_session_id = next(self._session_ids)
        self._invalidated: deque[int] = deque(maxlen=_MAX_INVALIDATED_SESSIONS)
        self._pending: dict[str, PendingNotification] = {}

    @property
    def current_session_id(self) -> int:
        return self._current_session_id

    @property
    def pending(self) -> tuple[PendingNotification, ...]:
        return tuple(sorted(self._pending.values(), key=lambda item: item.fire_at))

    def start_new_session(self) -> int:
        self._invalidated.append(self._current_session_id)
        self._pending.clear()
        self._current_session_id = next(self._session_ids)
        self._logger.debug("Notification session started: %s", self._current_session_id)
        return self._current_session_id

    def is_session_valid(self, session_id: int) -> bool:
        return session_id == self._current_session_id and session_id not in self._invalidated

    def schedule_warning(self, at: float, phase: Phase, warning_seconds: int) -> bool:
        return self._schedule(
            KIND_WARNING,
            at,
            phase,
            title="Time Warning",
            body=f"{phase.display_name} ends in {format_warning_time(warning_seconds)}",
        )

    def schedule_phase_end(self, at: float, phase: Phase) -> bool:
        body = (
            "Break is over. Time to focus!"
            if phase.is_break
            else "Great work! Time for a break."
        )
        return self._schedule(
            KIND_END,
            at,
            phase,
            title=f"{phase.display_name} Complete",
            body=body,
        )

    def cancel_all(self) -> None:
        if self._pending:
            self._logger.debug("Cancelled %d pending notification(s)", len(self._pending))
        self._pending.clear()

    def collect_due(self, now: Optional[float] = None) -> list[PendingNotification]:
        """Pop every banner of the current session whose fire time has passed."""
        current = self._clock.now() if now is None else now
        due = [
            item
            for item in self._pending.values()
            if item.fire_at <= current and self.is_session_valid(item.session_id)
        ]
        for item in due:
            del self._pending[item.identifier]
        due.sort(key=lambda item: item.fire_at)
        return due

    def should_present(self, identifier: str) -> bool:
        """Decide whether a delivered banner may still be shown."""
        session_id = parse_session_id(identifier)
        if session_id is None:
            if identifier.startswith((f"{KIND_WARNING}_", f"{KIND_END}_")):
                self._logger.info("Suppressed malformed notification: %s", identifier)
                return False
            return True
        if not self.is_session_valid(session_id):
            self._logger.info("Suppressed stale notification: %s", identifier)
            return False
        return True

    def _schedule(self, kind: str, at: float, phase: Phase, *, title: str, body: str) -> bool:
        lead = at - self._clock.now()
        if lead <= _MIN_LEAD_SECONDS:
            self._logger.debug(
                "%s notification skipped: fire time is in the past or too close",
                kind,
            )
            return False

        identifier = f"{kind}_{phase.value}_{self._current_session_id}"
        self._pending[identifier] = PendingNotification(
            identifier=identifier,
            session_id=self._current_session_id,
            kind=kind,
            phase=phase,
            fire_at=at,
            title=title,
            body=body,
        )
        return True
