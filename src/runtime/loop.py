"""Runtime orchestration loop for scheduler ticks, commands, and wake handling."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, Callable, Optional

from app_config import AppConfig
from contracts.ui_protocol import EVENT_ERROR
from notifications import BannerBackend, NotificationScheduler
from profiles import ProfileStore
from scheduler import Clock, PhaseScheduler, QueueEventPublisher, SystemClock, drain_events
from scheduler.constants import ACTION_SYNC, REASON_STARTUP
from server import UIServer
from stats import StatsStore

from .commands import apply_command
from .dispatch import AlarmPlayerLike, DispatchDependencies, EventDispatcher
from .overlay import OverlayPresenter
from .suspend import SuspendDetector
from .ticks import TickDependencies, TickProcessor
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[["RuntimeEngine"], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    profiles: ProfileStore
    ui_server: Optional[UIServer]
    stats_store: Optional[StatsStore]
    alarm_player: Optional[AlarmPlayerLike]
    banner_backend: BannerBackend
    hooks: RuntimeHooks
    clock: Optional[Clock] = None
    suspend_detector: Optional[SuspendDetector] = None


@dataclass
class RuntimeResources:
    """Queues created for the event loop lifecycle."""
    event_queue: Queue[Any]
    command_queue: Queue[Any]
    stop_requested: threading.Event


class RuntimeEngine:
    """Main runtime loop that owns the scheduler and serialises all commands.

    Other threads (websocket server, signal handlers) never touch the
    scheduler directly; they enqueue commands that the loop applies between
    ticks.
    """
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        runtime_settings = bootstrap.app_config.runtime
        self._tick_interval_seconds = runtime_settings.tick_interval_seconds

        self._resources = RuntimeResources(
            event_queue=Queue(),
            command_queue=Queue(),
            stop_requested=threading.Event(),
        )

        clock = bootstrap.clock or SystemClock()
        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._notifications = NotificationScheduler(
            clock=clock,
            logger=logging.getLogger("notifications"),
        )
        self._scheduler = PhaseScheduler(
            profile_provider=bootstrap.profiles,
            publisher=QueueEventPublisher(self._resources.event_queue),
            notifications=self._notifications,
            clock=clock,
            logger=logging.getLogger("scheduler"),
        )
        self._suspend_detector = bootstrap.suspend_detector or SuspendDetector(
            runtime_settings.suspend_threshold_seconds,
            logger=self._logger,
        )

        self._dispatcher = EventDispatcher(
            DispatchDependencies(
                logger=self._logger,
                ui=self._ui,
                overlay=OverlayPresenter(
                    self._ui,
                    bootstrap.profiles,
                    logger=logging.getLogger("overlay"),
                ),
                stats=bootstrap.stats_store,
                alarm_player=bootstrap.alarm_player,
            )
        )
        self._tick_processor = TickProcessor(
            TickDependencies(logger=self._logger, ui=self._ui)
        )

    @property
    def scheduler(self) -> PhaseScheduler:
        return self._scheduler

    @property
    def notifications(self) -> NotificationScheduler:
        return self._notifications

    def submit_command(self, command: Any) -> None:
        """Queue a named scheduler command; safe to call from any thread."""
        self._resources.command_queue.put(command)

    def request_stop(self) -> None:
        self._resources.stop_requested.set()

    def run(self) -> int:
        self._bootstrap.hooks.setup_signal_handlers(self)
        self._publish_startup_sync()
        self._suspend_detector.reset()
        self._logger.info("Ready! Waiting for commands ...")

        try:
            while self.step(self._tick_interval_seconds):
                pass
            self._logger.info("Shutdown requested.")
            return 0
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            self._ui.publish(EVENT_ERROR, message=f"Runtime failed: {error}")
            return 1
        finally:
            self._shutdown()

    def step(self, timeout_seconds: float = 0.0) -> bool:
        """Run one loop iteration; return False once a stop was requested."""
        if self._resources.stop_requested.is_set():
            return False

        self._check_suspend()
        # Banners due at a deadline go out before the tick completes the phase.
        self._deliver_notifications()

        tick = self._scheduler.tick()
        if tick is not None:
            self._tick_processor.handle_tick(tick)
        self._flush_events()

        command = self._poll_command(timeout_seconds)
        if command is not None:
            self._handle_command(command)

        return not self._resources.stop_requested.is_set()

    def _publish_startup_sync(self) -> None:
        self._ui.publish_scheduler_update(
            self._scheduler.snapshot(),
            action=ACTION_SYNC,
            accepted=True,
            reason=REASON_STARTUP,
        )
        stats_store = self._bootstrap.stats_store
        if stats_store is not None:
            self._ui.publish_stats(stats_store.summaries())

    def _check_suspend(self) -> None:
        jump = self._suspend_detector.poll()
        if jump is None:
            return
        tick = self._scheduler.handle_wake()
        if tick is not None:
            self._tick_processor.handle_wake(tick)
        self._flush_events()

    def _flush_events(self) -> None:
        self._dispatcher.dispatch_all(drain_events(self._resources.event_queue))

    def _deliver_notifications(self) -> None:
        backend = self._bootstrap.banner_backend
        for notification in self._notifications.collect_due():
            if not self._notifications.should_present(notification.identifier):
                continue
            try:
                backend.deliver(notification)
            except Exception as error:
                self._logger.error(
                    "Banner delivery failed for %s: %s",
                    notification.identifier,
                    error,
                    exc_info=True,
                )

    def _poll_command(self, timeout_seconds: float) -> Optional[Any]:
        try:
            if timeout_seconds <= 0:
                return self._resources.command_queue.get_nowait()
            return self._resources.command_queue.get(timeout=timeout_seconds)
        except Empty:
            return None

    def _handle_command(self, command: Any) -> None:
        result = apply_command(self._scheduler, command)
        if result.accepted:
            self._logger.info("Command applied: %s", result.action)
        else:
            self._logger.info(
                "Command not applied: command=%r reason=%s",
                command,
                result.reason,
            )
        self._flush_events()
        self._ui.publish_scheduler_update(
            self._scheduler.snapshot(),
            action=result.action or str(command),
            accepted=result.accepted,
            reason=result.reason,
        )

    def _shutdown(self) -> None:
        alarm_player = self._bootstrap.alarm_player
        if alarm_player is not None:
            try:
                alarm_player.stop()
            except Exception as error:
                self._logger.error("Error stopping alarm: %s", error, exc_info=True)

        stats_store = self._bootstrap.stats_store
        if stats_store is not None:
            self._logger.info("Flushing stats...")
            try:
                stats_store.close()
            except Exception as error:
                self._logger.error("Error closing stats store: %s", error, exc_info=True)

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
