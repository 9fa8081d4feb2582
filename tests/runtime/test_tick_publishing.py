import logging
import unittest

from runtime.ticks import TickDependencies, TickProcessor
from runtime.ui import RuntimeUIPublisher, snapshot_payload
from scheduler import Phase, RunState, SchedulerSnapshot, SchedulerTick


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))


def _snapshot(**overrides) -> SchedulerSnapshot:
    values = dict(
        phase=Phase.SHORT_BREAK,
        state=RunState.RUNNING,
        duration_seconds=300,
        remaining_seconds=120.4,
        completed_work_sessions=1,
    )
    values.update(overrides)
    return SchedulerSnapshot(**values)


class TickPublishingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.server = _UIServerStub()
        self.processor = TickProcessor(
            TickDependencies(
                logger=logging.getLogger("test.ticks"),
                ui=RuntimeUIPublisher(self.server),
            )
        )

    def test_snapshot_payload_rounds_display_seconds_up(self) -> None:
        payload = snapshot_payload(_snapshot())

        self.assertEqual(121, payload["remaining_seconds"])
        self.assertEqual("02:01", payload["formatted_remaining"])
        self.assertEqual("Short Break", payload["phase_name"])
        self.assertTrue(payload["is_break"])

    def test_extra_time_snapshot_shows_extra_countdown(self) -> None:
        payload = snapshot_payload(
            _snapshot(
                is_extra_time=True,
                extra_time_remaining_seconds=45.0,
                saved_break_remaining_seconds=120.4,
            )
        )

        self.assertEqual("00:45", payload["formatted_remaining"])
        self.assertTrue(payload["is_extra_time"])

    def test_countdown_and_boundary_ticks_use_distinct_reasons(self) -> None:
        self.processor.handle_tick(SchedulerTick(snapshot=_snapshot()))
        self.processor.handle_tick(SchedulerTick(snapshot=_snapshot(), completed=True))

        reasons = [payload["reason"] for _, payload in self.server.events]
        self.assertEqual(["tick", "completed"], reasons)
        self.assertTrue(all(event_type == "scheduler" for event_type, _ in self.server.events))

    def test_wake_tick_reports_wake_reason(self) -> None:
        self.processor.handle_wake(SchedulerTick(snapshot=_snapshot()))

        _, payload = self.server.events[-1]
        self.assertEqual(("wake", "wake"), (payload["action"], payload["reason"]))

    def test_publisher_without_server_is_a_no_op(self) -> None:
        RuntimeUIPublisher(None).publish_stats({"today": {}})


if __name__ == "__main__":
    unittest.main()
