import unittest

from runtime.suspend import SuspendDetector


class _Clocks:
    def __init__(self):
        self.monotonic = 100.0
        self.wall = 1_000_000.0

    def advance(self, seconds: float, *, suspended: bool = False) -> None:
        self.wall += seconds
        if not suspended:
            self.monotonic += seconds


class SuspendDetectorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clocks = _Clocks()
        self.detector = SuspendDetector(
            5.0,
            monotonic_fn=lambda: self.clocks.monotonic,
            wall_fn=lambda: self.clocks.wall,
        )

    def test_first_poll_only_records_baseline(self) -> None:
        self.clocks.advance(600, suspended=True)

        self.assertIsNone(self.detector.poll())

    def test_normal_progress_is_not_a_jump(self) -> None:
        self.detector.reset()
        self.clocks.advance(30)

        self.assertIsNone(self.detector.poll())

    def test_suspend_reports_wall_clock_jump(self) -> None:
        self.detector.reset()
        self.clocks.advance(0.25)
        self.clocks.advance(900, suspended=True)

        self.assertAlmostEqual(900.0, self.detector.poll())
        self.clocks.advance(0.25)
        self.assertIsNone(self.detector.poll())

    def test_backwards_clock_change_is_detected(self) -> None:
        self.detector.reset()
        self.clocks.wall -= 3600

        self.assertAlmostEqual(-3600.0, self.detector.poll())

    def test_jump_within_threshold_is_ignored(self) -> None:
        self.detector.reset()
        self.clocks.advance(4.0, suspended=True)

        self.assertIsNone(self.detector.poll())


if __name__ == "__main__":
    unittest.main()
