"""Routes scheduler events to overlay, UI, statistics, and alarm sinks."""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from contracts.ui_protocol import (
    PHASE_EVENT_BREAK_ENDED,
    PHASE_EVENT_BREAK_RESUMED,
    PHASE_EVENT_BREAK_STARTED,
    PHASE_EVENT_ENDED,
    PHASE_EVENT_EXTRA_TIME_ENDED,
    PHASE_EVENT_EXTRA_TIME_STARTED,
    PHASE_EVENT_HOLD,
    PHASE_EVENT_WARNING,
)
from scheduler import (
    AlarmRequest,
    AlarmRequested,
    AlarmStopRequested,
    BreakEnded,
    BreakResumed,
    BreakStarted,
    ExtraTimeEnded,
    ExtraTimeStarted,
    HoldAfterBreak,
    PhaseEnded,
    SchedulerEvent,
    StatsRecord,
    StatsRecorded,
    WarningFired,
)

from .overlay import OverlayPresenter
from .ui import RuntimeUIPublisher


class AlarmPlayerLike(Protocol):
    def play(self, request: AlarmRequest) -> None:
        ...

    def stop(self) -> None:
        ...


class StatsSinkLike(Protocol):
    def log(self, record: StatsRecord) -> concurrent.futures.Future[None]:
        ...

    def summaries(self) -> dict[str, dict[str, int]]:
        ...


@dataclass(frozen=True)
class DispatchDependencies:
    """Sinks that react to scheduler lifecycle events."""
    logger: logging.Logger
    ui: RuntimeUIPublisher
    overlay: OverlayPresenter
    stats: Optional[StatsSinkLike] = None
    alarm_player: Optional[AlarmPlayerLike] = None


class EventDispatcher:
    """Delivers each scheduler event to its sinks.

    Every sink call is isolated: a failure is logged and the remaining
    sinks, and later events, are still delivered.
    """

    def __init__(self, dependencies: DispatchDependencies):
        self._dependencies = dependencies

    def dispatch_all(self, events: list[SchedulerEvent]) -> None:
        for event in events:
            self.dispatch(event)

    def dispatch(self, event: SchedulerEvent) -> None:
        deps = self._dependencies

        if isinstance(event, BreakStarted):
            self._guard("overlay", lambda: deps.overlay.show_break(event.phase))
            self._publish_phase_event(PHASE_EVENT_BREAK_STARTED, phase=event.phase.value)
            return

        if isinstance(event, BreakEnded):
            self._guard("overlay", deps.overlay.hide)
            self._publish_phase_event(PHASE_EVENT_BREAK_ENDED)
            return

        if isinstance(event, BreakResumed):
            self._guard(
                "overlay",
                lambda: deps.overlay.show_break(event.phase, event.remaining_seconds),
            )
            self._publish_phase_event(
                PHASE_EVENT_BREAK_RESUMED,
                phase=event.phase.value,
                remaining_seconds=round(event.remaining_seconds, 1),
            )
            return

        if isinstance(event, ExtraTimeStarted):
            self._guard("overlay", lambda: deps.overlay.show_extra_time(event.extra_seconds))
            self._publish_phase_event(
                PHASE_EVENT_EXTRA_TIME_STARTED,
                phase=event.phase.value,
                extra_seconds=event.extra_seconds,
            )
            return

        if isinstance(event, ExtraTimeEnded):
            self._publish_phase_event(PHASE_EVENT_EXTRA_TIME_ENDED)
            return

        if isinstance(event, HoldAfterBreak):
            self._guard("overlay", deps.overlay.show_hold)
            self._publish_phase_event(PHASE_EVENT_HOLD)
            return

        if isinstance(event, WarningFired):
            self._publish_phase_event(
                PHASE_EVENT_WARNING,
                phase=event.phase.value,
                remaining_seconds=round(event.remaining_seconds, 1),
            )
            return

        if isinstance(event, PhaseEnded):
            self._publish_phase_event(PHASE_EVENT_ENDED, phase=event.phase.value)
            return

        if isinstance(event, StatsRecorded):
            self._log_stats(event.record)
            return

        if isinstance(event, AlarmRequested):
            if deps.alarm_player is not None:
                self._guard("alarm", lambda: deps.alarm_player.play(event.request))
            return

        if isinstance(event, AlarmStopRequested):
            if deps.alarm_player is not None:
                self._guard("alarm", deps.alarm_player.stop)
            return

        deps.logger.warning("Ignoring unknown scheduler event: %s", type(event).__name__)

    def _publish_phase_event(self, name: str, **payload) -> None:
        deps = self._dependencies
        self._guard("ui", lambda: deps.ui.publish_phase_event(name, **payload))

    def _log_stats(self, record: StatsRecord) -> None:
        deps = self._dependencies
        stats = deps.stats
        if stats is None:
            return

        def publish_summaries(future: concurrent.futures.Future[None]) -> None:
            try:
                future.result()
            except Exception as error:
                deps.logger.error("Stats append failed: %s", error)
                return
            self._guard("ui", lambda: deps.ui.publish_stats(stats.summaries()))

        def submit() -> None:
            stats.log(record).add_done_callback(publish_summaries)

        self._guard("stats", submit)

    def _guard(self, sink: str, action: Callable[[], object]) -> None:
        try:
            action()
        except Exception as error:
            self._dependencies.logger.error(
                "Event sink %s failed: %s",
                sink,
                error,
                exc_info=True,
            )
