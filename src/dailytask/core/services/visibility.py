# ♥♥─── Habit Visibility ─────────────────────────────────────────────────────────
"""Which tasks appear on a given calendar day."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dailytask.utils import to_local_date
from dailytask.core.models import TaskType


if TYPE_CHECKING:
    from collections.abc import Iterable

    from dailytask.utils import DateLike
    from dailytask.core.models import Habit


def visible_on(habit: Habit, day: DateLike) -> bool:
    """Return True if ``habit`` is shown on ``day``.

    A ``daily`` task appears only on its start day. An ``ongoing`` task
    appears from its start day up to, but excluding, its archive day. A task
    with neither start nor creation date is treated as always started.

    :param habit: The task to check.
    :param day: Calendar day, datetime or ``YYYY-MM-DD`` key.
    """
    target = to_local_date(day)
    start = habit.effective_start_date

    if start is not None and target < start:
        return False
    if habit.task_type == TaskType.DAILY:
        return start is None or target == start
    return habit.archived_at is None or target < habit.archived_at


def filter_visible(habits: Iterable[Habit], day: DateLike) -> list[Habit]:
    """Keep the habits visible on ``day``, preserving their order."""
    target = to_local_date(day)
    return [habit for habit in habits if visible_on(habit, target)]
