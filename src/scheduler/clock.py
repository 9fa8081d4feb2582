"""Wall-clock time source used for absolute phase deadlines."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Time source returning epoch seconds."""

    def now(self) -> float: ...


class SystemClock:
    """Clock backed by ``time.time()``.

    Deadlines are absolute wall-clock timestamps, so a suspended host is
    reconciled by comparing the deadline against ``now()`` after wake.
    """

    def now(self) -> float:
        return time.time()


def isoformat_timestamp(epoch_seconds: float) -> str:
    return (
        datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
        .replace(microsecond=0)
        .isoformat()
    )
