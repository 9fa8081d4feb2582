import unittest

from notifications import (
    LoggingBannerBackend,
    NotificationScheduler,
    UIBannerBackend,
    format_warning_time,
)
from notifications.scheduler import parse_session_id
from scheduler import Phase


class FakeClock:
    def __init__(self, now: float = 5_000.0):
        self.current = now

    def now(self) -> float:
        return self.current


class NotificationSchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.notifications = NotificationScheduler(clock=self.clock)

    def test_schedules_warning_and_end_for_current_session(self) -> None:
        session = self.notifications.start_new_session()

        self.assertTrue(self.notifications.schedule_warning(5_100.0, Phase.WORK, 60))
        self.assertTrue(self.notifications.schedule_phase_end(5_160.0, Phase.WORK))

        pending = self.notifications.pending
        self.assertEqual(
            [f"warning_work_{session}", f"end_work_{session}"],
            [item.identifier for item in pending],
        )
        self.assertEqual("Work ends in 1 minute", pending[0].body)
        self.assertEqual("Work Complete", pending[1].title)

    def test_skips_fire_times_that_are_too_close(self) -> None:
        self.assertFalse(self.notifications.schedule_phase_end(5_000.5, Phase.WORK))
        self.assertFalse(self.notifications.schedule_warning(4_990.0, Phase.WORK, 60))
        self.assertEqual((), self.notifications.pending)

    def test_new_session_invalidates_previous_notifications(self) -> None:
        old_session = self.notifications.start_new_session()
        self.notifications.schedule_phase_end(5_100.0, Phase.SHORT_BREAK)

        new_session = self.notifications.start_new_session()

        self.assertGreater(new_session, old_session)
        self.assertEqual((), self.notifications.pending)
        self.assertFalse(self.notifications.is_session_valid(old_session))
        self.assertFalse(self.notifications.should_present(f"end_short_break_{old_session}"))
        self.assertTrue(self.notifications.should_present(f"end_short_break_{new_session}"))

    def test_malformed_and_foreign_identifiers(self) -> None:
        self.assertFalse(self.notifications.should_present("warning_work_abc"))
        self.assertFalse(self.notifications.should_present("end_"))
        self.assertTrue(self.notifications.should_present("update_available"))

    def test_collect_due_pops_due_banners_in_fire_order(self) -> None:
        self.notifications.start_new_session()
        self.notifications.schedule_warning(5_100.0, Phase.LONG_BREAK, 90)
        self.notifications.schedule_phase_end(5_190.0, Phase.LONG_BREAK)

        self.assertEqual([], self.notifications.collect_due(5_050.0))
        due = self.notifications.collect_due(5_100.0)
        self.assertEqual(["Long Break ends in 1m 30s"], [item.body for item in due])
        self.assertEqual(1, len(self.notifications.pending))
        self.assertEqual([], self.notifications.collect_due(5_100.0))

    def test_cancel_all_clears_pending(self) -> None:
        self.notifications.schedule_warning(5_100.0, Phase.WORK, 60)
        self.notifications.schedule_phase_end(5_160.0, Phase.WORK)
        self.assertEqual(2, len(self.notifications.pending))

        self.notifications.cancel_all()
        self.assertEqual((), self.notifications.pending)


class NotificationHelpersTests(unittest.TestCase):
    def test_format_warning_time(self) -> None:
        self.assertEqual("30 seconds", format_warning_time(30))
        self.assertEqual("1 minute", format_warning_time(60))
        self.assertEqual("5 minutes", format_warning_time(300))
        self.assertEqual("2m 5s", format_warning_time(125))

    def test_parse_session_id_handles_phase_names_with_underscores(self) -> None:
        self.assertEqual(12, parse_session_id("warning_short_break_12"))
        self.assertEqual(3, parse_session_id("end_work_3"))
        self.assertIsNone(parse_session_id("end_work"))
        self.assertIsNone(parse_session_id("other_work_3"))


class _UIStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))


class BannerBackendTests(unittest.TestCase):
    def setUp(self) -> None:
        notifications = NotificationScheduler(clock=FakeClock())
        notifications.schedule_phase_end(5_100.0, Phase.WORK)
        self.banner = notifications.pending[0]

    def test_logging_backend_writes_title_and_body(self) -> None:
        with self.assertLogs("notifications", level="INFO") as logs:
            LoggingBannerBackend().deliver(self.banner)
        self.assertIn("Work Complete: Great work! Time for a break.", logs.output[0])

    def test_ui_backend_publishes_notification_event(self) -> None:
        ui = _UIStub()
        UIBannerBackend(ui).deliver(self.banner)

        event_type, payload = ui.events[0]
        self.assertEqual("notification", event_type)
        self.assertEqual("end", payload["kind"])
        self.assertEqual("work", payload["phase"])
        self.assertEqual(self.banner.identifier, payload["identifier"])


if __name__ == "__main__":
    unittest.main()
