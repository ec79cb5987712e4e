# ♥♥─── Progress Primitives ──────────────────────────────────────────────────────
"""Rules turning raw period percentages into scores and statuses.

Two notions of "done" coexist and are kept apart on purpose:

* :func:`task_status` is the three-tier display status. Only all four periods
  at 100 make a task ``FULLY_COMPLETED``.
* :func:`is_task_completed` is the completion predicate. A task counts as
  completed for the day as soon as any single period reaches 100. It drives
  the edit lock, per-habit streak days and completion badges, and nothing
  else may redefine it.
"""

from __future__ import annotations

from typing import Any
from collections.abc import Iterable
import math

from .base_enums import TimePeriod, TaskStatus
from .progress_model import PeriodProgress


VALID_PERCENTAGES: tuple[int, ...] = (0, 10, 20, 50, 80, 100)
COMPLETE: int = 100


class InvalidProgressError(ValueError):
    """Raised when a percentage or period name is outside the allowed set."""


class ProgressLockedError(Exception):
    """Raised when lowering a period of a task that is already completed for the day."""

    def __init__(self, habit_id: str, period: TimePeriod, current: int, requested: int) -> None:
        """Record which edit was refused."""
        super().__init__(f"Task {habit_id} is completed; {period.value} cannot go from {current}% to {requested}%")
        self.habit_id = habit_id
        self.period = period
        self.current = current
        self.requested = requested


# ─── Rounding ──────────────────────────────────────────────────────────────────
def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (57.5 -> 58)."""
    return math.floor(value + 0.5)


def mean_rounded(values: Iterable[float]) -> int:
    """Rounded arithmetic mean, 0 for no values."""
    items = list(values)
    if not items:
        return 0
    return round_half_up(sum(items) / len(items))


# ─── Validation ────────────────────────────────────────────────────────────────
def validate_percentage(value: Any) -> int:
    """Return ``value`` if it is one of the selectable percentages.

    :raises InvalidProgressError: Otherwise.
    """
    if isinstance(value, bool) or value not in VALID_PERCENTAGES:
        msg = f"Invalid percentage {value!r}. Use: {', '.join(map(str, VALID_PERCENTAGES))}"
        raise InvalidProgressError(msg)
    return int(value)


def validate_period(value: Any) -> TimePeriod:
    """Coerce ``value`` to a :class:`TimePeriod`.

    :raises InvalidProgressError: If it names no period.
    """
    try:
        return TimePeriod(value)
    except ValueError as e:
        msg = f"Invalid time period {value!r}. Use: {', '.join(TimePeriod)}"
        raise InvalidProgressError(msg) from e


# ─── Scores & Statuses ─────────────────────────────────────────────────────────
def task_progress(periods: PeriodProgress | None) -> int:
    """Average of the four periods, rounded half up, in ``[0, 100]``."""
    if periods is None:
        return 0
    return round_half_up(periods.total / len(TimePeriod))


def task_status(periods: PeriodProgress | None) -> TaskStatus:
    """Three-tier display status of one task."""
    if periods is None:
        return TaskStatus.NOT_STARTED
    values = periods.values()
    if all(v == COMPLETE for v in values):
        return TaskStatus.FULLY_COMPLETED
    if all(v == 0 for v in values):
        return TaskStatus.NOT_STARTED
    return TaskStatus.IN_PROGRESS


def is_task_completed(periods: PeriodProgress | None) -> bool:
    """Completion predicate: any period at 100."""
    if periods is None:
        return False
    return any(v == COMPLETE for v in periods.values())


def can_set_percentage(periods: PeriodProgress | None, period: TimePeriod | str, value: int) -> bool:
    """False when the edit would lower a period of a completed task."""
    if periods is None or not is_task_completed(periods):
        return True
    return value >= periods.get(period)


def completed_slots(periods: PeriodProgress | None) -> int:
    """Number of periods at 100."""
    if periods is None:
        return 0
    return sum(1 for v in periods.values() if v == COMPLETE)


# ─── Labels ────────────────────────────────────────────────────────────────────
def percentage_label(percentage: int) -> str:
    """Short wording for a completion percentage."""
    if percentage >= COMPLETE:
        return "Complete"
    if percentage >= 80:  # noqa: PLR2004
        return "Almost There"
    if percentage >= 50:  # noqa: PLR2004
        return "Good Progress"
    if percentage >= 20:  # noqa: PLR2004
        return "Getting Started"
    return "Not Started"


def current_time_period(hour: int) -> TimePeriod:
    """Period a wall-clock hour falls into.

    Morning is 06-12, afternoon 12-18, evening 18-22 and night the rest.
    """
    if 6 <= hour < 12:  # noqa: PLR2004
        return TimePeriod.MORNING
    if 12 <= hour < 18:  # noqa: PLR2004
        return TimePeriod.AFTERNOON
    if 18 <= hour < 22:  # noqa: PLR2004
        return TimePeriod.EVENING
    return TimePeriod.NIGHT
