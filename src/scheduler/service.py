"""In-memory work/break phase state machine with absolute deadlines."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable, Optional

from .alarms import phase_end_alarm, warning_alarm
from .clock import Clock, SystemClock, isoformat_timestamp
from .events import (
    AlarmRequested,
    AlarmStopRequested,
    BreakEnded,
    BreakResumed,
    BreakStarted,
    EventPublisher,
    ExtraTimeEnded,
    ExtraTimeStarted,
    HoldAfterBreak,
    PhaseEnded,
    SchedulerEvent,
    StatsRecorded,
    WarningFired,
)
from .models import Phase, RunState, SchedulerSnapshot, SchedulerTick, StatsRecord

if TYPE_CHECKING:
    from app_config_schema import ProfileSettings
    from notifications.scheduler import NotificationScheduler
    from profiles import ProfileProvider


class PhaseScheduler:
    """Work/break interval state machine.

    The scheduler owns exactly one live deadline at a time: the phase
    deadline, or the extra-time deadline while a break is suspended.  All
    deadlines are absolute clock timestamps, so ``tick()`` and
    ``handle_wake()`` reconcile by a single comparison against ``now``.

    The instance is single-owner and not thread-safe.  Operations invoked
    from a state where they make no sense return ``False`` and change
    nothing.  Lifecycle events are published in emission order.
    """

    def __init__(
        self,
        *,
        profile_provider: ProfileProvider,
        publisher: EventPublisher,
        notifications: Optional[NotificationScheduler] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._profiles = profile_provider
        self._publisher = publisher
        self._notifications = notifications
        self._clock = clock or SystemClock()
        self._logger = logger or logging.getLogger("scheduler")

        self._phase = Phase.WORK
        self._state = RunState.IDLE
        self._duration_seconds = 0
        self._remaining_seconds = 0.0
        self._completed_work_sessions = 0

        self._phase_deadline: Optional[float] = None
        self._phase_started_at: Optional[float] = None
        self._paused_remaining: Optional[float] = None
        self._paused_at: Optional[float] = None
        self._inactive_seconds = 0.0

        self._extra_time = False
        self._extra_time_deadline: Optional[float] = None
        self._extra_time_started_at: Optional[float] = None
        self._extra_time_remaining = 0.0
        self._saved_break_remaining = 0.0

        self._holding_after_break = False

        self._warning_fired = False
        self._warning_fired_at_remaining: Optional[float] = None
        self._last_display_second: Optional[int] = None

    # -- read-only surface ---------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def completed_work_sessions(self) -> int:
        return self._completed_work_sessions

    @property
    def is_extra_time(self) -> bool:
        return self._extra_time

    @property
    def is_holding_after_break(self) -> bool:
        return self._holding_after_break

    @property
    def warning_fired(self) -> bool:
        return self._warning_fired

    @property
    def remaining_seconds(self) -> float:
        return self.snapshot().live_remaining_seconds

    @property
    def formatted_remaining(self) -> str:
        return self.snapshot().formatted_remaining

    def snapshot(self) -> SchedulerSnapshot:
        return self._snapshot_at(self._clock.now())

    # -- operations ----------------------------------------------------------

    def start(self) -> bool:
        profile = self._current_profile()
        if profile is None:
            return False

        if self._holding_after_break:
            self._holding_after_break = False
            self._start_work_session(profile, self._clock.now(), leaving_break=True)
            return True

        if self._state == RunState.PAUSED and self._paused_remaining is not None:
            now = self._clock.now()
            remaining = self._paused_remaining
            self._phase_deadline = now + remaining
            self._remaining_seconds = remaining
            if self._paused_at is not None:
                self._inactive_seconds += max(0.0, now - self._paused_at)
            self._paused_remaining = None
            self._paused_at = None
            self._state = RunState.RUNNING
            self._last_display_second = None

            # Keep an already-fired warning fired once the threshold is passed.
            if remaining > profile.warning_seconds(self._phase):
                self._reset_warning()
            self._evaluate_warning(profile, remaining)

            self._rearm_notifications(profile)
            self._logger.info(
                "Phase resumed: phase=%s remaining=%.1fs",
                self._phase.value,
                remaining,
            )
            return True

        if self._state == RunState.IDLE:
            self._start_work_session(profile, self._clock.now(), leaving_break=False)
            return True

        self._logger.debug("start() ignored: state=%s", self._state.value)
        return False

    def pause(self) -> bool:
        if (
            self._state != RunState.RUNNING
            or self._extra_time
            or self._phase_deadline is None
        ):
            self._logger.debug("pause() ignored: state=%s", self._state.value)
            return False

        now = self._clock.now()
        remaining = self._phase_deadline - now
        if remaining <= 0:
            self._complete_overdue(now)
            return False

        self._paused_remaining = remaining
        self._remaining_seconds = remaining
        self._paused_at = now
        self._phase_deadline = None
        self._state = RunState.PAUSED
        self._call_notifications(lambda scheduler: scheduler.cancel_all())
        self._logger.info(
            "Phase paused: phase=%s remaining=%.1fs",
            self._phase.value,
            remaining,
        )
        return True

    def toggle_start_pause(self) -> bool:
        if self._state == RunState.RUNNING:
            return self.pause()
        return self.start()

    def reset(self) -> bool:
        break_visible = self._phase.is_break or self._extra_time or self._holding_after_break
        ended_extra_time = self._extra_time

        self._call_notifications(lambda scheduler: scheduler.cancel_all())
        self._publish(AlarmStopRequested())
        if ended_extra_time:
            self._publish(ExtraTimeEnded())

        self._phase = Phase.WORK
        self._state = RunState.IDLE
        self._duration_seconds = 0
        self._remaining_seconds = 0.0
        self._completed_work_sessions = 0
        self._clear_deadlines()
        self._clear_extra_time()
        self._holding_after_break = False
        self._reset_warning()

        if break_visible:
            self._publish(BreakEnded())
        self._logger.info("Scheduler reset")
        return True

    def skip(self) -> bool:
        profile = self._current_profile()
        if profile is None:
            return False

        if self._holding_after_break:
            self._holding_after_break = False
            self._state = RunState.IDLE
            self._phase = Phase.WORK
            self._duration_seconds = 0
            self._remaining_seconds = 0.0
            self._publish(BreakEnded())
            self._logger.info("Post-break hold dismissed by skip")
            return True

        now = self._clock.now()
        self._call_notifications(lambda scheduler: scheduler.cancel_all())

        if self._phase_started_at is not None:
            self._publish(
                StatsRecorded(
                    self._stats_record(
                        profile,
                        actual_seconds=self._wall_elapsed(now),
                        completed=False,
                        now=now,
                    )
                )
            )

        self._publish(AlarmStopRequested())
        ended_extra_time = self._extra_time
        self._clear_extra_time()
        if ended_extra_time:
            self._publish(ExtraTimeEnded())

        self._logger.info("Phase skipped: phase=%s", self._phase.value)
        self._advance_phase(profile, now)
        return True

    def stop_alarm(self) -> bool:
        self._publish(AlarmStopRequested())
        return True

    def request_extra_time(self) -> bool:
        profile = self._current_profile()
        if (
            profile is None
            or not profile.overlay.extra_time_enabled
            or not self._phase.is_break
            or self._state != RunState.RUNNING
            or self._extra_time
            or self._phase_deadline is None
        ):
            self._logger.debug("request_extra_time() ignored")
            return False

        now = self._clock.now()
        remaining = self._phase_deadline - now
        if remaining <= 0:
            self._complete_overdue(now)
            return False

        self._saved_break_remaining = remaining
        self._remaining_seconds = remaining
        self._phase_deadline = None
        self._call_notifications(lambda scheduler: scheduler.cancel_all())

        extra_seconds = profile.overlay.extra_time_seconds
        self._extra_time = True
        self._extra_time_started_at = now
        self._extra_time_deadline = now + extra_seconds
        self._extra_time_remaining = float(extra_seconds)
        self._last_display_second = None

        self._publish(ExtraTimeStarted(phase=self._phase, extra_seconds=extra_seconds))
        self._logger.info(
            "Extra time started: extra=%ss saved_break=%.1fs",
            extra_seconds,
            remaining,
        )
        return True

    def end_extra_time_early(self) -> bool:
        if not self._extra_time:
            return False
        self._finish_extra_time(self._clock.now())
        return True

    def confirm_start_work(self) -> bool:
        if not self._holding_after_break:
            return False
        profile = self._current_profile()
        if profile is None:
            return False
        self._holding_after_break = False
        self._start_work_session(profile, self._clock.now(), leaving_break=True)
        return True

    def cancel_after_break(self) -> bool:
        if not self._holding_after_break:
            return False
        self._holding_after_break = False
        self._state = RunState.IDLE
        self._phase = Phase.WORK
        self._duration_seconds = 0
        self._remaining_seconds = 0.0
        self._publish(BreakEnded())
        self._logger.info("Post-break hold cancelled")
        return True

    # -- time advancement ----------------------------------------------------

    def tick(self) -> Optional[SchedulerTick]:
        """Advance against the clock; return a tick when the display changes."""
        now = self._clock.now()

        if self._extra_time:
            if self._extra_time_deadline is None:
                return None
            remaining = max(0.0, self._extra_time_deadline - now)
            self._extra_time_remaining = remaining
            if remaining <= 0:
                self._finish_extra_time(now)
                return self._boundary_tick(now)
            return self._display_tick(remaining, now)

        if self._state != RunState.RUNNING or self._phase_deadline is None:
            return None

        remaining = self._phase_deadline - now
        if remaining <= 0:
            self._complete_overdue(now)
            return self._boundary_tick(now)

        self._remaining_seconds = remaining
        profile = self._current_profile()
        if profile is not None:
            self._evaluate_warning(profile, remaining)
        return self._display_tick(remaining, now)

    def handle_wake(self) -> Optional[SchedulerTick]:
        """Reconcile after the host resumed from suspend or the clock jumped."""
        now = self._clock.now()

        if self._extra_time:
            if self._extra_time_deadline is None:
                return None
            remaining = self._extra_time_deadline - now
            if remaining <= 0:
                self._logger.info("Extra time elapsed during suspend")
                self._finish_extra_time(now)
                return self._boundary_tick(now)
            self._extra_time_remaining = remaining
            self._last_display_second = _display_second(remaining)
            return SchedulerTick(snapshot=self._snapshot_at(now))

        if self._state != RunState.RUNNING or self._phase_deadline is None:
            return None

        remaining = self._phase_deadline - now
        if remaining <= 0:
            self._logger.info("Phase deadline passed during suspend: phase=%s", self._phase.value)
            self._complete_overdue(now)
            return self._boundary_tick(now)

        self._remaining_seconds = remaining
        self._last_display_second = _display_second(remaining)
        profile = self._current_profile()
        if profile is not None:
            self._evaluate_warning(profile, remaining)
            # Fire times computed before the suspend are stale.
            self._rearm_notifications(profile)
        return SchedulerTick(snapshot=self._snapshot_at(now))

    # -- internals -----------------------------------------------------------

    def _current_profile(self) -> Optional[ProfileSettings]:
        profile = self._profiles.current_profile()
        if profile is None:
            self._logger.warning("No active profile; scheduler operation ignored")
        return profile

    def _start_work_session(
        self,
        profile: ProfileSettings,
        now: float,
        *,
        leaving_break: bool,
    ) -> None:
        self._phase = Phase.WORK
        if leaving_break:
            self._publish(BreakEnded())
        self._begin_phase(profile, now)

    def _begin_phase(self, profile: ProfileSettings, now: float) -> None:
        duration = profile.planned_seconds(self._phase)
        self._duration_seconds = duration
        self._remaining_seconds = float(duration)
        self._phase_deadline = now + duration
        self._phase_started_at = now
        self._paused_remaining = None
        self._paused_at = None
        self._inactive_seconds = 0.0
        self._state = RunState.RUNNING
        self._last_display_second = None
        self._reset_warning()
        self._rearm_notifications(profile)
        self._logger.info(
            "Phase started: phase=%s duration=%ss",
            self._phase.value,
            duration,
        )

    def _advance_phase(self, profile: ProfileSettings, now: float) -> None:
        was_break = self._phase.is_break

        if self._phase is Phase.WORK:
            every = profile.ruleset.long_break_every
            sessions = self._completed_work_sessions
            if sessions > 0 and sessions % every == 0:
                self._phase = Phase.LONG_BREAK
            else:
                self._phase = Phase.SHORT_BREAK
        else:
            self._phase = Phase.WORK

        if self._phase.is_break and not was_break:
            self._publish(BreakStarted(phase=self._phase))
        elif not self._phase.is_break and was_break:
            self._publish(BreakEnded())

        # Breaks always begin on their own; work waits unless auto-start is on.
        if self._phase.is_break or profile.features.auto_start_work:
            self._begin_phase(profile, now)
            return

        self._call_notifications(lambda scheduler: scheduler.start_new_session())
        self._duration_seconds = profile.planned_seconds(self._phase)
        self._remaining_seconds = float(self._duration_seconds)
        self._state = RunState.IDLE
        self._clear_deadlines()
        self._reset_warning()
        self._logger.info("Waiting for start: phase=%s", self._phase.value)

    def _complete_overdue(self, now: float) -> None:
        profile = self._current_profile()
        if profile is None:
            return

        # A deadline observed late still owes the warning that ticking would have seen.
        lead = profile.warning_seconds(self._phase)
        if lead > 0 and not self._warning_fired:
            self._fire_warning(profile, 0.0)

        self._complete_phase(profile, now)

    def _complete_phase(self, profile: ProfileSettings, now: float) -> None:
        self._call_notifications(lambda scheduler: scheduler.cancel_all())

        deadline = self._phase_deadline if self._phase_deadline is not None else now
        end = min(now, deadline)
        completed_phase = self._phase
        self._remaining_seconds = 0.0
        self._phase_deadline = None
        self._last_display_second = 0

        self._publish(PhaseEnded(phase=completed_phase))
        if self._phase_started_at is not None:
            self._publish(
                StatsRecorded(
                    self._stats_record(
                        profile,
                        actual_seconds=self._active_elapsed(end),
                        completed=True,
                        now=now,
                    )
                )
            )

        alarm = phase_end_alarm(profile, completed_phase)
        if alarm is not None:
            self._publish(AlarmRequested(alarm))

        if completed_phase is Phase.WORK:
            self._completed_work_sessions += 1

        self._logger.info(
            "Phase completed: phase=%s sessions=%s",
            completed_phase.value,
            self._completed_work_sessions,
        )

        if completed_phase.is_break and profile.overlay.hold_after_break:
            self._holding_after_break = True
            self._state = RunState.IDLE
            self._clear_deadlines()
            self._publish(HoldAfterBreak())
            self._logger.info("Holding after break")
            return

        self._advance_phase(profile, now)

    def _finish_extra_time(self, now: float) -> None:
        if self._extra_time_started_at is not None:
            self._inactive_seconds += max(0.0, now - self._extra_time_started_at)
        saved = self._saved_break_remaining
        self._clear_extra_time()

        profile = self._profiles.current_profile()
        if saved > 0:
            self._remaining_seconds = saved
            self._phase_deadline = now + saved
            self._last_display_second = None
            if profile is not None and saved <= profile.warning_seconds(self._phase):
                self._warning_fired = True
                self._warning_fired_at_remaining = saved
            else:
                self._reset_warning()
            self._publish(BreakResumed(phase=self._phase, remaining_seconds=saved))
            if profile is not None:
                self._rearm_notifications(profile)
            self._logger.info("Extra time finished: break resumes with %.1fs", saved)
        elif profile is not None:
            self._logger.info("Extra time finished: break already over")
            self._advance_phase(profile, now)

        self._publish(ExtraTimeEnded())

    def _evaluate_warning(self, profile: ProfileSettings, remaining: float) -> bool:
        if self._warning_fired or remaining <= 0:
            return False
        if remaining > profile.warning_seconds(self._phase):
            return False
        self._fire_warning(profile, remaining)
        return True

    def _fire_warning(self, profile: ProfileSettings, remaining: float) -> None:
        self._warning_fired = True
        self._warning_fired_at_remaining = remaining
        self._publish(WarningFired(phase=self._phase, remaining_seconds=remaining))
        alarm = warning_alarm(profile, self._phase)
        if alarm is not None:
            self._publish(AlarmRequested(alarm))
        self._logger.info(
            "Warning fired: phase=%s remaining=%.1fs",
            self._phase.value,
            remaining,
        )

    def _reset_warning(self) -> None:
        self._warning_fired = False
        self._warning_fired_at_remaining = None

    def _rearm_notifications(self, profile: ProfileSettings) -> None:
        deadline = self._phase_deadline
        phase = self._phase
        lead = profile.warning_seconds(phase)
        warning_pending = lead > 0 and not self._warning_fired

        def rearm(scheduler: NotificationScheduler) -> None:
            scheduler.start_new_session()
            if deadline is None or not profile.notifications.banner_enabled:
                return
            if warning_pending:
                scheduler.schedule_warning(deadline - lead, phase, lead)
            scheduler.schedule_phase_end(deadline, phase)

        self._call_notifications(rearm)

    def _clear_deadlines(self) -> None:
        self._phase_deadline = None
        self._phase_started_at = None
        self._paused_remaining = None
        self._paused_at = None
        self._inactive_seconds = 0.0
        self._last_display_second = None

    def _clear_extra_time(self) -> None:
        self._extra_time = False
        self._extra_time_deadline = None
        self._extra_time_started_at = None
        self._extra_time_remaining = 0.0
        self._saved_break_remaining = 0.0

    def _wall_elapsed(self, end: float) -> int:
        # Skips count everything since the phase began, pauses and extra time included.
        if self._phase_started_at is None:
            return 0
        return max(0, int(end - self._phase_started_at))

    def _active_elapsed(self, end: float) -> int:
        if self._phase_started_at is None:
            return 0
        inactive = self._inactive_seconds
        if self._paused_at is not None:
            inactive += max(0.0, end - self._paused_at)
        if self._extra_time_started_at is not None:
            inactive += max(0.0, end - self._extra_time_started_at)
        return max(0, int(round(end - self._phase_started_at - inactive)))

    def _stats_record(
        self,
        profile: ProfileSettings,
        *,
        actual_seconds: int,
        completed: bool,
        now: float,
    ) -> StatsRecord:
        return StatsRecord(
            profile_id=profile.id,
            phase=self._phase,
            planned_seconds=profile.planned_seconds(self._phase),
            actual_seconds=actual_seconds,
            completed=completed,
            skipped=not completed,
            strict_mode=profile.overlay.strict_default,
            timestamp=isoformat_timestamp(now),
        )

    def _display_tick(self, remaining: float, now: float) -> Optional[SchedulerTick]:
        second = _display_second(remaining)
        if second == self._last_display_second:
            return None
        self._last_display_second = second
        return SchedulerTick(snapshot=self._snapshot_at(now))

    def _boundary_tick(self, now: float) -> SchedulerTick:
        return SchedulerTick(snapshot=self._snapshot_at(now), completed=True)

    def _snapshot_at(self, now: float) -> SchedulerSnapshot:
        if self._state == RunState.RUNNING and self._phase_deadline is not None:
            remaining = max(0.0, self._phase_deadline - now)
        elif self._state == RunState.PAUSED and self._paused_remaining is not None:
            remaining = self._paused_remaining
        else:
            remaining = self._remaining_seconds

        extra_remaining = 0.0
        if self._extra_time and self._extra_time_deadline is not None:
            extra_remaining = max(0.0, self._extra_time_deadline - now)

        return SchedulerSnapshot(
            phase=self._phase,
            state=self._state,
            duration_seconds=self._duration_seconds,
            remaining_seconds=remaining,
            completed_work_sessions=self._completed_work_sessions,
            is_extra_time=self._extra_time,
            extra_time_remaining_seconds=extra_remaining,
            saved_break_remaining_seconds=self._saved_break_remaining,
            is_holding_after_break=self._holding_after_break,
        )

    def _publish(self, event: SchedulerEvent) -> None:
        try:
            self._publisher.publish(event)
        except Exception as error:
            self._logger.error(
                "Failed to publish %s: %s",
                type(event).__name__,
                error,
                exc_info=True,
            )

    def _call_notifications(self, action: Callable[[NotificationScheduler], object]) -> None:
        if self._notifications is None:
            return
        try:
            action(self._notifications)
        except Exception as error:
            self._logger.error("Notification scheduling failed: %s", error, exc_info=True)


def _display_second(remaining: float) -> int:
    return max(0, int(math.ceil(remaining)))
