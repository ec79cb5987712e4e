# ♥♥─── Habit Models ─────────────────────────────────────────────────────────────
"""Habit (task) definitions as returned by ``GET /habits``."""

from __future__ import annotations

from typing import Any
from datetime import date, datetime, timedelta

from pydantic import Field, AliasChoices, field_validator, model_validator

from dailytask.utils import to_local_date

from .base_enums import Goal, TaskType
from .base_model import DailyTaskBaseModel


DEFAULT_HABIT_COLOR = "#3b82f6"
DEFAULT_HABIT_CATEGORY = "General"


def _as_local_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date | datetime | str):
        return to_local_date(value)
    msg = f"Unsupported date value: {value!r}"
    raise TypeError(msg)


# ─── Habit ─────────────────────────────────────────────────────────────────────
class Habit(DailyTaskBaseModel):
    """A user-defined task tracked across the four time periods.

    Dates are normalised to local calendar days on the way in. A ``daily``
    habit that arrives without ``archivedAt`` gets ``startDate + 1`` so the
    archive date always bounds its single visible day.
    """

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    name: str
    category: str = DEFAULT_HABIT_CATEGORY
    color: str = DEFAULT_HABIT_COLOR
    goal: Goal = Goal.DAILY
    task_type: TaskType = TaskType.ONGOING
    is_active: bool = True
    start_date: date | None = None
    created_at: date | None = None
    archived_at: date | None = None
    order: int = 0

    @field_validator("start_date", "created_at", "archived_at", mode="before")
    @classmethod
    def _normalize_dates(cls, value: Any) -> date | None:
        return _as_local_date(value)

    @field_validator("task_type", mode="before")
    @classmethod
    def _default_task_type(cls, value: Any) -> Any:
        return TaskType.ONGOING if value in {None, ""} else value

    @model_validator(mode="after")
    def _auto_archive_daily(self) -> Habit:
        if self.task_type == TaskType.DAILY and self.archived_at is None:
            start = self.effective_start_date
            if start is not None:
                self.archived_at = start + timedelta(days=1)
        return self

    @property
    def effective_start_date(self) -> date | None:
        """``startDate``, falling back to the creation date."""
        return self.start_date or self.created_at


class HabitCreate(DailyTaskBaseModel):
    """Payload for ``POST /habits``."""

    name: str = Field(min_length=1, max_length=100)
    category: str = DEFAULT_HABIT_CATEGORY
    color: str = Field(default=DEFAULT_HABIT_COLOR, pattern=r"^#[0-9a-fA-F]{6}$")
    goal: Goal = Goal.DAILY
    task_type: TaskType = TaskType.ONGOING
    start_date: date | None = None


class HabitUpdate(DailyTaskBaseModel):
    """Partial payload for ``PUT /habits/:id``."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    category: str | None = None
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    goal: Goal | None = None
    order: int | None = None
    archived_at: date | None = None
