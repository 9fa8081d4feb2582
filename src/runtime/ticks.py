"""Tick handler that publishes countdown and boundary updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from scheduler import SchedulerTick
from scheduler.constants import ACTION_TICK, ACTION_WAKE, REASON_COMPLETED, REASON_TICK, REASON_WAKE

from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for publishing scheduler ticks."""
    logger: logging.Logger
    ui: RuntimeUIPublisher


class TickProcessor:
    """Publishes scheduler ticks as UI updates."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def handle_tick(self, tick: SchedulerTick) -> None:
        deps = self._dependencies
        if tick.completed:
            deps.logger.debug(
                "Boundary reached: now phase=%s state=%s",
                tick.snapshot.phase.value,
                tick.snapshot.state.value,
            )
            deps.ui.publish_scheduler_update(
                tick.snapshot,
                action=ACTION_TICK,
                accepted=True,
                reason=REASON_COMPLETED,
            )
            return

        deps.ui.publish_scheduler_update(
            tick.snapshot,
            action=ACTION_TICK,
            accepted=True,
            reason=REASON_TICK,
        )

    def handle_wake(self, tick: SchedulerTick) -> None:
        self._dependencies.ui.publish_scheduler_update(
            tick.snapshot,
            action=ACTION_WAKE,
            accepted=True,
            reason=REASON_COMPLETED if tick.completed else REASON_WAKE,
        )
