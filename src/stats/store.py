"""Append-only JSONL statistics log with work-session summaries."""

from __future__ import annotations

import concurrent.futures
import datetime as dt
import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from scheduler.models import Phase, StatsRecord


class StatsError(Exception):
    """Raised when the statistics log cannot be read or written."""


@dataclass(frozen=True)
class StatsSummary:
    """Aggregated counts over work entries only."""
    total_sessions: int = 0
    completed_sessions: int = 0
    skipped_sessions: int = 0
    total_focus_minutes: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total_sessions": self.total_sessions,
            "completed_sessions": self.completed_sessions,
            "skipped_sessions": self.skipped_sessions,
            "total_focus_minutes": self.total_focus_minutes,
        }


def summarize(records: Iterable[StatsRecord]) -> StatsSummary:
    total = completed = skipped = focus_minutes = 0
    for record in records:
        if record.phase is not Phase.WORK:
            continue
        total += 1
        if record.completed:
            completed += 1
            focus_minutes += record.actual_seconds // 60
        if record.skipped:
            skipped += 1
    return StatsSummary(
        total_sessions=total,
        completed_sessions=completed,
        skipped_sessions=skipped,
        total_focus_minutes=focus_minutes,
    )


def _parse_timestamp(raw: str) -> Optional[dt.datetime]:
    try:
        parsed = dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


class StatsStore:
    """Persists completed and skipped phases and answers summary queries.

    Appends run on a single background worker so the host loop never blocks
    on disk I/O.  The in-memory entry list is updated after each successful
    append and is shared with query methods under a lock.
    """

    def __init__(self, path: Path | str, logger: Optional[logging.Logger] = None):
        self._path = Path(path)
        self._logger = logger or logging.getLogger("stats")
        self._entries: list[StatsRecord] = []
        self._lock = threading.Lock()
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="stats",
        )

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> int:
        """Read every well-formed entry from disk, replacing in-memory state."""
        entries: list[StatsRecord] = []
        if self._path.exists():
            try:
                content = self._path.read_text(encoding="utf-8")
            except OSError as error:
                raise StatsError(f"Failed to read stats file {self._path}: {error}") from error

            for line_number, line in enumerate(content.splitlines(), start=1):
                if not line.strip():
                    continue
                try:
                    entries.append(StatsRecord.from_dict(json.loads(line)))
                except (ValueError, KeyError, TypeError) as error:
                    self._logger.debug(
                        "Skipping malformed stats line %d: %s",
                        line_number,
                        error,
                    )

        with self._lock:
            self._entries = entries
        self._logger.info("Loaded %d stats entries from %s", len(entries), self._path)
        return len(entries)

    def log(self, record: StatsRecord) -> concurrent.futures.Future[None]:
        return self._executor.submit(self._append, record)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def entries(self) -> list[StatsRecord]:
        with self._lock:
            return list(self._entries)

    def entries_for(self, profile_id: str) -> list[StatsRecord]:
        return [entry for entry in self.entries() if entry.profile_id == profile_id]

    def recent(self, limit: int = 10) -> list[StatsRecord]:
        """Return up to *limit* entries, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self.entries()[-limit:]))

    def summary_today(self, now: Optional[dt.datetime] = None) -> StatsSummary:
        local_now = (now or dt.datetime.now()).astimezone()
        start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        return summarize(self._entries_since(start))

    def summary_week(self, now: Optional[dt.datetime] = None) -> StatsSummary:
        local_now = (now or dt.datetime.now()).astimezone()
        day_start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        start = day_start - dt.timedelta(days=day_start.weekday())
        return summarize(self._entries_since(start))

    def summary_all_time(self) -> StatsSummary:
        return summarize(self.entries())

    def summaries(self, now: Optional[dt.datetime] = None) -> dict[str, dict[str, int]]:
        return {
            "today": self.summary_today(now).to_dict(),
            "week": self.summary_week(now).to_dict(),
            "all_time": self.summary_all_time().to_dict(),
        }

    def _entries_since(self, start: dt.datetime) -> list[StatsRecord]:
        selected = []
        for entry in self.entries():
            timestamp = _parse_timestamp(entry.timestamp)
            if timestamp is not None and timestamp >= start:
                selected.append(entry)
        return selected

    def _append(self, record: StatsRecord) -> None:
        line = json.dumps(record.to_dict(), separators=(",", ":")) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write(line)
        except OSError as error:
            self._logger.error("Failed to append stats entry: %s", error, exc_info=True)
            raise StatsError(f"Failed to write stats file {self._path}: {error}") from error

        with self._lock:
            self._entries.append(record)
        self._logger.debug(
            "Stats entry logged: phase=%s completed=%s actual=%ss",
            record.phase.value,
            record.completed,
            record.actual_seconds,
        )
