# ♥♥─── Statistics Models ────────────────────────────────────────────────────────
"""Server statistics payloads and the results of local aggregations."""

from __future__ import annotations

from typing import Any
from datetime import date

from pydantic import Field, AliasChoices, field_validator

from .base_enums import TimePeriod, TaskStatus, StreakType, InsightKind
from .base_model import FrozenModel, DailyTaskBaseModel
from .habit_model import Habit
from .progress_model import DailySnapshot, PeriodProgress


# ─── Server Payloads ───────────────────────────────────────────────────────────
class StatsSummary(DailyTaskBaseModel):
    """Body of ``GET /progress/stats``."""

    total_habits: int = 0
    overall_progress: int = 0
    morning_progress: int = 0
    afternoon_progress: int = 0
    evening_progress: int = 0
    night_progress: int = 0
    completed: int = 0
    remaining: int = 0

    def period_progress(self, period: TimePeriod) -> int:
        """Server-side average for one period."""
        return getattr(self, f"{period.value}_progress")


class HabitStreak(DailyTaskBaseModel):
    """One per-habit streak row of ``GET /streaks``."""

    habit_id: str
    habit_name: str = ""
    category: str = "General"
    color: str = "#3b82f6"
    current_streak: int = 0
    longest_streak: int = 0
    last_completed_date: str | None = None

    @field_validator("habit_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value


class StreaksResponse(DailyTaskBaseModel):
    """Body of ``GET /streaks``."""

    all_streaks: list[HabitStreak] = Field(default_factory=list)
    active_streaks: list[HabitStreak] = Field(default_factory=list)
    top10_streaks: list[HabitStreak] = Field(default_factory=list, alias="top10Streaks")


class StreakSnapshotRecord(DailyTaskBaseModel):
    """A streak history snapshot kept by the server (archived or top streaks)."""

    id: str | None = Field(default=None, alias="_id")
    habit_id: str
    habit_name: str
    habit_color: str = "#3b82f6"
    habit_category: str = "General"
    streak_type: StreakType = StreakType.ACTIVE
    current_streak: int = 0
    longest_streak: int = 0
    start_date: str | None = None
    end_date: str | None = None
    last_completed_date: str | None = None
    total_completions: int = 0
    completion_rate: float = 0
    snapshot_date: str | None = None
    is_archived: bool = False
    archived_at: str | None = None

    @field_validator("id", "habit_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value


class TopStreak(DailyTaskBaseModel):
    """One row of ``GET /streak-history/top``, grouped per habit."""

    habit_id: str = Field(validation_alias=AliasChoices("_id", "habitId"))
    habit_name: str = ""
    habit_color: str = "#3b82f6"
    longest_streak: int = 0
    is_archived: bool = False

    @field_validator("habit_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value


class MonthlyNotes(DailyTaskBaseModel):
    """Free-text notes of one month (``/notes/:year/:month``)."""

    year: int
    month: int = Field(ge=1, le=12)
    content: str = Field(default="", max_length=5000)


class DailyNotes(DailyTaskBaseModel):
    """Free-text notes of one day (``/notes/daily/:date``)."""

    date: str
    content: str = Field(default="", max_length=5000)


# ─── Local Aggregation Results ─────────────────────────────────────────────────
class RankedTask(FrozenModel):
    """A task with its progress on the ranked day."""

    habit: Habit
    periods: PeriodProgress
    progress: int
    status: TaskStatus


class StatusCounts(FrozenModel):
    """Tasks partitioned by display status."""

    fully_completed: int = 0
    in_progress: int = 0
    not_started: int = 0

    @property
    def total(self) -> int:
        """Number of tasks counted."""
        return self.fully_completed + self.in_progress + self.not_started


class DailyStats(FrozenModel):
    """Per-slot view of one day over the visible tasks.

    ``completed`` and ``remaining`` count period slots (four per task), not tasks.
    """

    overall: int = 0
    morning: int = 0
    afternoon: int = 0
    evening: int = 0
    night: int = 0
    completed: int = 0
    remaining: int = 0


class StreakSummary(FrozenModel):
    """Result of counting threshold days over daily snapshots."""

    current_streak: int = 0
    longest_streak: int = 0
    active_days: int = 0


class PeriodInsight(FrozenModel):
    """Best or worst period over a rolling window."""

    period: TimePeriod
    name: str
    average_completion: int
    all_averages: dict[TimePeriod, int]


class DailyInsight(FrozenModel):
    """A one-line coaching message about a day."""

    message: str
    kind: InsightKind
    icon: str


class HabitStreakInfo(FrozenModel):
    """Streak figures of one habit from its completed days."""

    current_streak: int = 0
    longest_streak: int = 0
    last_completed_date: date | None = None
    total_completions: int = 0
    completion_rate: int = 0


class InsightsReport(FrozenModel):
    """Streak, best and worst period and the coaching message for the selected day."""

    streak: StreakSummary
    best_period: PeriodInsight | None = None
    worst_period: PeriodInsight | None = None
    insight: DailyInsight


class HabitHistory(FrozenModel):
    """A habit with its streak over a history window."""

    habit: Habit
    streak: HabitStreakInfo


class HistoryReport(FrozenModel):
    """Everything the history view shows for one window of days."""

    snapshots: list[DailySnapshot]
    habits: list[HabitHistory]
    insights: InsightsReport
