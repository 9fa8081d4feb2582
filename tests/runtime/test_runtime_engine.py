import logging
import unittest
from unittest.mock import MagicMock

from app_config_schema import (
    AppConfig,
    AudioSettings,
    NotificationDeliverySettings,
    NotificationSettings,
    ProfileSettings,
    RulesetSettings,
    RuntimeSettings,
    StatsSettings,
    UIServerSettings,
)
from contracts.ui_protocol import EVENT_OVERLAY, EVENT_PHASE, EVENT_SCHEDULER, EVENT_STATS
from profiles import ProfileStore
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from runtime.suspend import SuspendDetector
from scheduler import Phase, RunState


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.current = now
        self.monotonic = 50.0

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float, *, suspended: bool = False) -> None:
        self.current += seconds
        if not suspended:
            self.monotonic += seconds


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []
        self.stopped = False

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))

    def stop(self, timeout_seconds: float = 5.0) -> None:
        self.stopped = True

    def of_type(self, event_type: str) -> list[dict[str, object]]:
        return [payload for kind, payload in self.events if kind == event_type]


class _BannerStub:
    def __init__(self):
        self.delivered = []

    def deliver(self, notification) -> None:
        self.delivered.append(notification)


def _app_config(profile: ProfileSettings) -> AppConfig:
    return AppConfig(
        active_profile="default",
        profiles={"default": profile},
        runtime=RuntimeSettings(tick_interval_seconds=0.25, suspend_threshold_seconds=5.0),
        stats=StatsSettings(enabled=False),
        audio=AudioSettings(),
        notifications=NotificationDeliverySettings(),
        ui_server=UIServerSettings(),
        source_file="<test>",
    )


class RuntimeEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        profile = ProfileSettings(
            ruleset=RulesetSettings(work_seconds=120, short_break_seconds=60),
            notifications=NotificationSettings(
                work_warning_seconds_before_end=60,
                break_warning_seconds_before_end=10,
            ),
        )
        app_config = _app_config(profile)
        self.clock = FakeClock()
        self.ui_server = _UIServerStub()
        self.banners = _BannerStub()
        self.alarm = MagicMock()
        self.hooks = RuntimeHooks(setup_signal_handlers=MagicMock())
        self.stats_store = None
        self.engine = RuntimeEngine(
            RuntimeBootstrap(
                logger=logging.getLogger("test.runtime"),
                app_config=app_config,
                profiles=ProfileStore.from_app_config(app_config),
                ui_server=self.ui_server,
                stats_store=self.stats_store,
                alarm_player=self.alarm,
                banner_backend=self.banners,
                hooks=self.hooks,
                clock=self.clock,
                suspend_detector=SuspendDetector(
                    5.0,
                    monotonic_fn=lambda: self.clock.monotonic,
                    wall_fn=self.clock.now,
                ),
            )
        )

    def _scheduler_events(self) -> list[dict[str, object]]:
        return self.ui_server.of_type(EVENT_SCHEDULER)

    def _phase_event_names(self) -> list[object]:
        return [payload["name"] for payload in self.ui_server.of_type(EVENT_PHASE)]

    def test_command_is_applied_and_published(self) -> None:
        self.engine.submit_command("start")

        self.assertTrue(self.engine.step())

        update = self._scheduler_events()[-1]
        self.assertEqual("start", update["action"])
        self.assertTrue(update["accepted"])
        self.assertEqual("running", update["state"])
        self.assertEqual("02:00", update["formatted_remaining"])
        self.assertEqual(RunState.RUNNING, self.engine.scheduler.state)

    def test_unknown_command_is_rejected(self) -> None:
        self.engine.submit_command("explode")
        self.engine.step()

        update = self._scheduler_events()[-1]
        self.assertFalse(update["accepted"])
        self.assertEqual("unknown_command", update["reason"])
        self.assertEqual(RunState.IDLE, self.engine.scheduler.state)

    def test_warning_and_completion_reach_every_sink(self) -> None:
        self.engine.submit_command("start")
        self.engine.step()

        self.clock.advance(61)
        self.engine.step()
        self.assertEqual(["warning"], self._phase_event_names())
        self.assertEqual(["warning"], [item.kind for item in self.banners.delivered])
        self.assertEqual(1, self.alarm.play.call_count)

        self.clock.advance(60)
        self.engine.step()

        self.assertEqual(["warning", "phase_ended", "break_started"], self._phase_event_names())
        self.assertEqual(["warning", "end"], [item.kind for item in self.banners.delivered])
        self.assertEqual(2, self.alarm.play.call_count)
        self.assertEqual("show", self.ui_server.of_type(EVENT_OVERLAY)[-1]["mode"])
        update = self._scheduler_events()[-1]
        self.assertEqual(("tick", "completed"), (update["action"], update["reason"]))
        self.assertEqual(Phase.SHORT_BREAK, self.engine.scheduler.phase)

    def test_suspend_past_deadline_completes_with_missed_warning(self) -> None:
        self.engine.submit_command("start")
        self.engine.step()

        self.clock.advance(500, suspended=True)
        self.engine.step()

        self.assertEqual(["warning", "phase_ended", "break_started"], self._phase_event_names())
        wake_updates = [event for event in self._scheduler_events() if event["action"] == "wake"]
        self.assertEqual(1, len(wake_updates))
        self.assertEqual("completed", wake_updates[0]["reason"])
        self.assertEqual("short_break", wake_updates[0]["phase"])
        self.assertEqual([], self.banners.delivered)
        self.assertEqual(1, self.engine.scheduler.completed_work_sessions)

    def test_run_exits_after_stop_request_and_shuts_down(self) -> None:
        self.engine.request_stop()

        self.assertEqual(0, self.engine.run())

        self.hooks.setup_signal_handlers.assert_called_once_with(self.engine)
        self.assertEqual("startup", self._scheduler_events()[0]["reason"])
        self.assertEqual([], self.ui_server.of_type(EVENT_STATS))
        self.alarm.stop.assert_called_once_with()
        self.assertTrue(self.ui_server.stopped)
        self.assertFalse(self.engine.step())


if __name__ == "__main__":
    unittest.main()
