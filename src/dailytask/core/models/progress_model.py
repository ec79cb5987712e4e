# ♥♥─── Progress Models ──────────────────────────────────────────────────────────
"""Per-period progress values and the per-date progress map."""

from __future__ import annotations

from typing import Any, Self
from collections.abc import Iterator, Mapping

from pydantic import Field, field_validator

from .base_enums import TimePeriod
from .base_model import FrozenModel, DailyTaskBaseModel


# ─── Period Progress ───────────────────────────────────────────────────────────
class PeriodProgress(FrozenModel):
    """Completion percentages of one task on one day.

    Missing or null values are read as 0. Instances are immutable; use
    :meth:`with_period` to derive an updated copy.
    """

    morning: int = Field(default=0, ge=0, le=100)
    afternoon: int = Field(default=0, ge=0, le=100)
    evening: int = Field(default=0, ge=0, le=100)
    night: int = Field(default=0, ge=0, le=100)

    @field_validator("morning", "afternoon", "evening", "night", mode="before")
    @classmethod
    def _null_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @classmethod
    def of(cls, morning: int = 0, afternoon: int = 0, evening: int = 0, night: int = 0) -> Self:
        """Positional shorthand, in period order."""
        return cls(morning=morning, afternoon=afternoon, evening=evening, night=night)

    def get(self, period: TimePeriod | str) -> int:
        """Value recorded for ``period``."""
        return getattr(self, TimePeriod(period).value)

    def with_period(self, period: TimePeriod | str, value: int) -> PeriodProgress:
        """Copy of this record with one period replaced."""
        return self.model_copy(update={TimePeriod(period).value: value})

    def values(self) -> tuple[int, int, int, int]:
        """The four values in period order."""
        return (self.morning, self.afternoon, self.evening, self.night)

    def items(self) -> Iterator[tuple[TimePeriod, int]]:
        """Pairs of period and value, in period order."""
        return zip(TimePeriod, self.values(), strict=True)

    @property
    def total(self) -> int:
        """Sum over the four periods."""
        return sum(self.values())


EMPTY_PROGRESS = PeriodProgress()


# ─── Progress Map ──────────────────────────────────────────────────────────────
class ProgressMap(FrozenModel):
    """Every task's period values for exactly one calendar day.

    The map never mixes dates; every update returns a new map for the same
    ``date_key``. Tasks without an entry read as all-zero.
    """

    date_key: str
    entries: dict[str, PeriodProgress] = Field(default_factory=dict)

    @classmethod
    def empty(cls, date_key: str) -> ProgressMap:
        """A map with no entries for ``date_key``."""
        return cls(date_key=date_key)

    def get(self, habit_id: str) -> PeriodProgress:
        """Entry for ``habit_id``, or an all-zero record."""
        return self.entries.get(habit_id, EMPTY_PROGRESS)

    def with_value(self, habit_id: str, period: TimePeriod | str, value: int) -> ProgressMap:
        """New map with one period of one task replaced."""
        return self.with_entry(habit_id, self.get(habit_id).with_period(period, value))

    def with_entry(self, habit_id: str, progress: PeriodProgress) -> ProgressMap:
        """New map with the whole entry of one task replaced."""
        return ProgressMap(date_key=self.date_key, entries={**self.entries, habit_id: progress})

    def habit_ids(self) -> list[str]:
        """Ids of tasks with a stored entry."""
        return list(self.entries)

    def __contains__(self, habit_id: object) -> bool:
        return habit_id in self.entries

    def is_empty(self) -> bool:
        """True if no task has an entry."""
        return not self.entries


# ─── Wire Models ───────────────────────────────────────────────────────────────
class DailyProgressEntry(DailyTaskBaseModel):
    """One row of ``GET /progress/daily/:date`` or the body returned by ``POST /progress/daily``."""

    habit_id: str
    date: str | None = None
    morning: int | None = 0
    afternoon: int | None = 0
    evening: int | None = 0
    night: int | None = 0

    @field_validator("habit_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return value.get("_id", value.get("id"))
        return str(value) if value is not None else value

    @property
    def periods(self) -> PeriodProgress:
        """The four values as an immutable record."""
        return PeriodProgress(morning=self.morning, afternoon=self.afternoon, evening=self.evening, night=self.night)


class DailyProgressResponse(DailyTaskBaseModel):
    """Body of ``GET /progress/daily/:date``."""

    date: str
    progress: list[DailyProgressEntry] = Field(default_factory=list)

    def to_progress_map(self, date_key: str | None = None) -> ProgressMap:
        """Collapse the rows into a map keyed by task id.

        :param date_key: Key to stamp on the map, defaulting to the reported date.
        """
        return ProgressMap(date_key=date_key or self.date, entries={row.habit_id: row.periods for row in self.progress})


class ProgressUpdate(DailyTaskBaseModel):
    """Body of ``POST /progress/daily``."""

    habit_id: str
    date: str
    time_period: TimePeriod
    percentage: int


class DailySnapshot(FrozenModel):
    """Completion figures of one elapsed or current day."""

    date_key: str
    completion: int
    period_averages: dict[TimePeriod, int] = Field(default_factory=dict)
