# ♥♥─── DailyTask Model Initialization ──────────────────────────────────────
"""Initialize the models package."""

from __future__ import annotations

from .base_enums import TIME_PERIODS, Goal, TaskType, StoreState, StreakType, TaskStatus, TimePeriod, InsightKind, NoticeLevel
from .base_model import FrozenModel, ContentMetadata, DailyTaskSQLModel, DailyTaskBaseModel
from .validators import (
    COMPLETE,
    VALID_PERCENTAGES,
    ProgressLockedError,
    InvalidProgressError,
    task_status,
    mean_rounded,
    round_half_up,
    task_progress,
    completed_slots,
    validate_period,
    percentage_label,
    is_task_completed,
    can_set_percentage,
    validate_percentage,
    current_time_period,
)
from .habit_model import Habit, HabitCreate, HabitUpdate
from .stats_model import (
    DailyNotes,
    DailyStats,
    RankedTask,
    HabitStreak,
    MonthlyNotes,
    StatsSummary,
    StatusCounts,
    DailyInsight,
    PeriodInsight,
    StreakSummary,
    HabitStreakInfo,
    HabitHistory,
    HistoryReport,
    InsightsReport,
    StreaksResponse,
    TopStreak,
    StreakSnapshotRecord,
)
from .history_model import ProgressRecord, progress_record_id
from .progress_model import (
    EMPTY_PROGRESS,
    ProgressMap,
    DailySnapshot,
    PeriodProgress,
    ProgressUpdate,
    DailyProgressEntry,
    DailyProgressResponse,
)


__all__ = [
    "COMPLETE",
    "EMPTY_PROGRESS",
    "TIME_PERIODS",
    "VALID_PERCENTAGES",
    "ContentMetadata",
    "DailyInsight",
    "DailyNotes",
    "DailyProgressEntry",
    "DailyProgressResponse",
    "DailySnapshot",
    "DailyStats",
    "DailyTaskBaseModel",
    "DailyTaskSQLModel",
    "FrozenModel",
    "Goal",
    "Habit",
    "HabitCreate",
    "HabitStreak",
    "HabitStreakInfo",
    "HabitHistory",
    "HistoryReport",
    "HabitUpdate",
    "InsightKind",
    "InsightsReport",
    "InvalidProgressError",
    "MonthlyNotes",
    "NoticeLevel",
    "PeriodInsight",
    "PeriodProgress",
    "ProgressLockedError",
    "ProgressRecord",
    "ProgressMap",
    "ProgressUpdate",
    "RankedTask",
    "StatsSummary",
    "StatusCounts",
    "StoreState",
    "StreakSnapshotRecord",
    "StreakSummary",
    "StreakType",
    "StreaksResponse",
    "TaskStatus",
    "TaskType",
    "TimePeriod",
    "TopStreak",
    "can_set_percentage",
    "completed_slots",
    "current_time_period",
    "is_task_completed",
    "mean_rounded",
    "percentage_label",
    "progress_record_id",
    "round_half_up",
    "task_progress",
    "task_status",
    "validate_percentage",
    "validate_period",
]
