"""Host sleep and clock-jump detection for the runtime loop."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional


class SuspendDetector:
    """Detects suspension by comparing monotonic and wall-clock progress.

    The monotonic clock stops while the host sleeps; the wall clock does
    not.  A divergence larger than the threshold between two polls means
    the host slept or the wall clock was changed.
    """

    def __init__(
        self,
        threshold_seconds: float,
        *,
        monotonic_fn: Callable[[], float] = time.monotonic,
        wall_fn: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ):
        self._threshold_seconds = threshold_seconds
        self._monotonic_fn = monotonic_fn
        self._wall_fn = wall_fn
        self._logger = logger or logging.getLogger("runtime")
        self._last_monotonic: Optional[float] = None
        self._last_wall: Optional[float] = None

    @property
    def threshold_seconds(self) -> float:
        return self._threshold_seconds

    def reset(self) -> None:
        self._last_monotonic = self._monotonic_fn()
        self._last_wall = self._wall_fn()

    def poll(self) -> Optional[float]:
        """Return the wall-clock jump in seconds if one was detected."""
        current_monotonic = self._monotonic_fn()
        current_wall = self._wall_fn()
        last_monotonic = self._last_monotonic
        last_wall = self._last_wall
        self._last_monotonic = current_monotonic
        self._last_wall = current_wall

        if last_monotonic is None or last_wall is None:
            return None

        expected_wall = last_wall + (current_monotonic - last_monotonic)
        jump = current_wall - expected_wall
        if abs(jump) <= self._threshold_seconds:
            return None

        self._logger.info("Clock discontinuity detected: jump=%.1fs", jump)
        return jump
