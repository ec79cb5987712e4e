# ♥♥─── Aggregations ─────────────────────────────────────────────────────────────
"""Pure functions deriving daily, period and streak figures from progress maps.

None of these functions mutate their inputs. ``habits`` is always the list the
caller wants counted, normally the output of
:func:`dailytask.core.services.visibility.filter_visible`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from datetime import date, timedelta

from dailytask.ui.themed_icons import IconName
from dailytask.core.models import (
    COMPLETE,
    DailyStats,
    RankedTask,
    TaskStatus,
    TimePeriod,
    InsightKind,
    DailyInsight,
    StatusCounts,
    DailySnapshot,
    PeriodInsight,
    StreakSummary,
    HabitStreakInfo,
    task_status,
    mean_rounded,
    task_progress,
    round_half_up,
    completed_slots,
)


if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from dailytask.core.models import Habit, ProgressMap


DEFAULT_STREAK_THRESHOLD = 50
DEFAULT_PERIOD_WINDOW_DAYS = 7
DEFAULT_PERIOD_MIN_DAYS = 3
DEFAULT_TOP_LIMIT = 5


# ─── Daily Figures ─────────────────────────────────────────────────────────────
def daily_completion(habits: Sequence[Habit], progress: ProgressMap) -> int:
    """Mean task progress over ``habits``; 0 when there are none."""
    return mean_rounded(task_progress(progress.get(habit.id)) for habit in habits)


def period_completion(habits: Sequence[Habit], progress: ProgressMap, period: TimePeriod) -> int:
    """Mean value of one period over ``habits``; 0 when there are none."""
    return mean_rounded(progress.get(habit.id).get(period) for habit in habits)


def period_completions(habits: Sequence[Habit], progress: ProgressMap) -> dict[TimePeriod, int]:
    """:func:`period_completion` for all four periods."""
    return {period: period_completion(habits, progress, period) for period in TimePeriod}


def rank_tasks_by_progress(habits: Iterable[Habit], progress: ProgressMap, limit: int = DEFAULT_TOP_LIMIT) -> list[RankedTask]:
    """Tasks ordered by progress descending, ties by name, truncated to ``limit``."""
    ranked = [
        RankedTask(habit=habit, periods=progress.get(habit.id), progress=task_progress(progress.get(habit.id)), status=task_status(progress.get(habit.id)))
        for habit in habits
    ]
    ranked.sort(key=lambda item: (-item.progress, item.habit.name.casefold(), item.habit.name))
    return ranked[: max(limit, 0)]


def count_by_status(habits: Iterable[Habit], progress: ProgressMap) -> StatusCounts:
    """Partition ``habits`` by :func:`task_status`."""
    counts = dict.fromkeys(TaskStatus, 0)
    for habit in habits:
        counts[task_status(progress.get(habit.id))] += 1
    return StatusCounts(
        fully_completed=counts[TaskStatus.FULLY_COMPLETED],
        in_progress=counts[TaskStatus.IN_PROGRESS],
        not_started=counts[TaskStatus.NOT_STARTED],
    )


def daily_stats(habits: Sequence[Habit], progress: ProgressMap) -> DailyStats:
    """Overall and per-period averages plus completed/remaining period slots."""
    if not habits:
        return DailyStats()

    totals = dict.fromkeys(TimePeriod, 0)
    completed = 0
    for habit in habits:
        entry = progress.get(habit.id)
        for period, value in entry.items():
            totals[period] += value
        completed += completed_slots(entry)

    slots = len(habits) * len(TimePeriod)
    return DailyStats(
        overall=round_half_up(sum(totals.values()) / slots),
        morning=round_half_up(totals[TimePeriod.MORNING] / len(habits)),
        afternoon=round_half_up(totals[TimePeriod.AFTERNOON] / len(habits)),
        evening=round_half_up(totals[TimePeriod.EVENING] / len(habits)),
        night=round_half_up(totals[TimePeriod.NIGHT] / len(habits)),
        completed=completed,
        remaining=slots - completed,
    )


def completion_for_progress(progress: ProgressMap | None) -> int:
    """Mean over every stored period value, regardless of which tasks are visible.

    Used for calendar heat maps where the habit list of that day is not at hand.
    """
    if progress is None or progress.is_empty():
        return 0
    return mean_rounded(value for entry in progress.entries.values() for value in entry.values())


def build_snapshot(habits: Sequence[Habit], progress: ProgressMap) -> DailySnapshot:
    """Completion figures of ``progress`` over ``habits``."""
    return DailySnapshot(
        date_key=progress.date_key,
        completion=daily_completion(habits, progress),
        period_averages=period_completions(habits, progress),
    )


# ─── Streaks ───────────────────────────────────────────────────────────────────
def calculate_streak(snapshots: Iterable[DailySnapshot], threshold: int = DEFAULT_STREAK_THRESHOLD) -> StreakSummary:
    """Count qualifying days over ``snapshots``.

    Snapshots are ordered most recent first before counting. The current streak
    is the run of qualifying days starting at the most recent snapshot, the
    longest streak is the longest run anywhere, and ``active_days`` counts every
    qualifying snapshot.
    """
    ordered = sorted(snapshots, key=lambda snap: snap.date_key, reverse=True)

    current = 0
    longest = 0
    run = 0
    active_days = 0
    still_current = True

    for snap in ordered:
        if snap.completion >= threshold:
            active_days += 1
            run += 1
            longest = max(longest, run)
            if still_current:
                current += 1
        else:
            run = 0
            still_current = False

    return StreakSummary(current_streak=current, longest_streak=longest, active_days=active_days)


def calculate_habit_streak(completed_days: Iterable[date], today: date, tracked_days: int | None = None) -> HabitStreakInfo:
    """Streak of one habit from the days it was completed.

    Days must be calendar-consecutive to extend a run. The current streak
    only counts when the latest completed day is ``today`` or yesterday.

    :param completed_days: Days on which :func:`is_task_completed` held.
    :param today: The local calendar day the streak is measured at.
    :param tracked_days: Days the habit has existed, for the completion rate.
    """
    days = sorted(set(completed_days))
    if not days:
        return HabitStreakInfo()

    longest = 1
    run = 1
    for previous, current in zip(days, days[1:], strict=False):
        run = run + 1 if current - previous == timedelta(days=1) else 1
        longest = max(longest, run)

    last = days[-1]
    current_streak = 0
    if today - last <= timedelta(days=1):
        current_streak = 1
        for previous, current in zip(reversed(days[:-1]), reversed(days[1:]), strict=False):
            if current - previous != timedelta(days=1):
                break
            current_streak += 1

    rate = 0
    if tracked_days:
        rate = min(round_half_up(len(days) / tracked_days * COMPLETE), COMPLETE)

    return HabitStreakInfo(
        current_streak=current_streak,
        longest_streak=longest,
        last_completed_date=last,
        total_completions=len(days),
        completion_rate=rate,
    )


# ─── Period Insights ───────────────────────────────────────────────────────────
def _period_averages(snapshots: Sequence[DailySnapshot], days: int, min_days: int) -> dict[TimePeriod, int] | None:
    if len(snapshots) < min_days:
        return None

    window = sorted(snapshots, key=lambda snap: snap.date_key, reverse=True)[:days]
    averages: dict[TimePeriod, int] = {}
    for period in TimePeriod:
        values = [snap.period_averages[period] for snap in window if period in snap.period_averages]
        averages[period] = mean_rounded(values)
    return averages


def _period_extreme(averages: dict[TimePeriod, int], *, best: bool) -> PeriodInsight:
    chosen = TimePeriod.MORNING
    for period in TimePeriod:
        value = averages[period]
        if (best and value > averages[chosen]) or (not best and value < averages[chosen]):
            chosen = period
    return PeriodInsight(period=chosen, name=chosen.label, average_completion=averages[chosen], all_averages=averages)


def best_period(snapshots: Sequence[DailySnapshot], days: int = DEFAULT_PERIOD_WINDOW_DAYS, min_days: int = DEFAULT_PERIOD_MIN_DAYS) -> PeriodInsight | None:
    """Period with the highest average over the most recent ``days`` snapshots.

    Returns None with fewer than ``min_days`` snapshots. Ties go to the period
    declared first.
    """
    averages = _period_averages(snapshots, days, min_days)
    return None if averages is None else _period_extreme(averages, best=True)


def worst_period(snapshots: Sequence[DailySnapshot], days: int = DEFAULT_PERIOD_WINDOW_DAYS, min_days: int = DEFAULT_PERIOD_MIN_DAYS) -> PeriodInsight | None:
    """Period with the lowest average; same window and tie rules as :func:`best_period`."""
    averages = _period_averages(snapshots, days, min_days)
    return None if averages is None else _period_extreme(averages, best=False)


# ─── Insight ───────────────────────────────────────────────────────────────────
def daily_insight(completion: int, counts: StatusCounts, worst: PeriodInsight | None = None) -> DailyInsight:
    """A short coaching message for a day's completion."""
    if completion >= COMPLETE:
        return DailyInsight(message="Perfect day! Every task is at 100%.", kind=InsightKind.SUCCESS, icon=IconName.TROPHY.value)
    if counts.total > 0 and counts.fully_completed == counts.total:
        return DailyInsight(message=f"Amazing! All {counts.total} tasks fully completed.", kind=InsightKind.SUCCESS, icon=IconName.STAR.value)
    if completion >= 80:  # noqa: PLR2004
        return DailyInsight(message=f"Excellent work, {completion}% done. Almost there!", kind=InsightKind.SUCCESS, icon=IconName.FIRE.value)
    if worst is not None and 30 <= completion < 80:  # noqa: PLR2004
        return DailyInsight(
            message=f"{worst.name} is your weakest period ({worst.average_completion}% on average). Try focusing there.",
            kind=InsightKind.WARNING,
            icon=IconName.WARNING.value,
        )
    if 0 < completion < 30:  # noqa: PLR2004
        return DailyInsight(message=f"{completion}% so far. Keep going, every step counts.", kind=InsightKind.INFO, icon=IconName.ROCKET.value)
    return DailyInsight(message="Ready to start? Pick a task and log your first period.", kind=InsightKind.INFO, icon=IconName.CLOCK.value)
