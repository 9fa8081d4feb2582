"""Statistics persistence exports."""

from .store import StatsError, StatsStore, StatsSummary, summarize

__all__ = ["StatsError", "StatsStore", "StatsSummary", "summarize"]
