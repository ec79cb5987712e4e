# ♥♥─── Services Init ────────────────────────────────────────────────────────────
from __future__ import annotations

from .scheduler import Debouncer, RolloverWatcher
from .visibility import visible_on, filter_visible
from .aggregations import (
    best_period,
    daily_stats,
    worst_period,
    daily_insight,
    build_snapshot,
    count_by_status,
    calculate_streak,
    daily_completion,
    period_completion,
    period_completions,
    calculate_habit_streak,
    rank_tasks_by_progress,
    completion_for_progress,
)
from .progress_store import ProgressStore, log_notifier
from .history_service import HistoryService


__all__ = [
    "Debouncer",
    "HistoryService",
    "ProgressStore",
    "RolloverWatcher",
    "best_period",
    "build_snapshot",
    "calculate_habit_streak",
    "calculate_streak",
    "completion_for_progress",
    "count_by_status",
    "daily_completion",
    "daily_insight",
    "daily_stats",
    "filter_visible",
    "log_notifier",
    "period_completion",
    "period_completions",
    "rank_tasks_by_progress",
    "visible_on",
    "worst_period",
]
