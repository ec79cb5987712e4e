# ♥♥─── Terminal Reports ─────────────────────────────────────────────────────────
"""Rich tables for the CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich import box
from rich.text import Text
from rich.panel import Panel
from rich.table import Table

from dailytask.core.models import TimePeriod, InsightKind, task_status, task_progress, percentage_label

from .console import console, current_icons


if TYPE_CHECKING:
    from collections.abc import Sequence

    from dailytask.core.models import TopStreak, HistoryReport, InsightsReport, StreaksResponse
    from dailytask.core.services import ProgressStore


INSIGHT_STYLES: dict[InsightKind, str] = {
    InsightKind.SUCCESS: "toast.success",
    InsightKind.WARNING: "log.level.warning",
    InsightKind.INFO: "log.level.info",
}


def _percent(value: int) -> Text:
    icons = current_icons()
    if value >= 100:  # noqa: PLR2004
        glyph = icons.PROGRESS_FULL
    elif value > 0:
        glyph = icons.PROGRESS_HALF
    else:
        glyph = icons.PROGRESS_EMPTY
    return Text(f"{glyph} {value}%")


def _period_header(period: TimePeriod) -> Text:
    return Text(period.label, style=f"period.{period.value}")


# ─── Day ───────────────────────────────────────────────────────────────────────
def render_day(store: ProgressStore, report: InsightsReport | None = None) -> None:
    """Print the selected day's tasks, averages and insight."""
    icons = current_icons()
    habits = store.visible_habits
    progress = store.progress

    table = Table(box=box.SIMPLE_HEAVY, header_style="bold", title=f"{icons.CALENDAR} {store.selected_key}")
    table.add_column("Task", justify="left")
    for period in TimePeriod:
        table.add_column(_period_header(period), justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Status", justify="left")

    for habit in habits:
        periods = progress.get(habit.id)
        status = task_status(periods)
        table.add_row(
            Text(habit.name, style=habit.color),
            *(_percent(value) for _, value in periods.items()),
            Text(f"{task_progress(periods)}%", style="bold"),
            Text(status.value.replace("_", " "), style=f"status.{status.value}"),
        )

    if not habits:
        table.add_row(Text("No tasks for this day", style="dim"), *([""] * (len(TimePeriod) + 2)))

    averages = store.period_completions
    table.add_section()
    table.add_row(
        Text("Average", style="bold"),
        *(_percent(averages[period]) for period in TimePeriod),
        Text(f"{store.daily_completion}%", style="bold"),
        Text(percentage_label(store.daily_completion)),
    )
    console.print(table)

    counts = store.status_counts
    stats = store.daily_stats
    summary = Text.assemble(
        (f"{icons.CHECK} {counts.fully_completed} completed  ", "status.fully_completed"),
        (f"{counts.in_progress} in progress  ", "status.in_progress"),
        (f"{counts.not_started} not started  ", "status.not_started"),
        (f"{icons.CLOCK} {stats.completed}/{stats.completed + stats.remaining} periods done", "dim"),
    )
    console.print(summary)

    if report is not None:
        render_insights(report)


def render_insights(report: InsightsReport) -> None:
    """Print the coaching message, streak and best/worst periods."""
    icons = current_icons()
    lines = Text()
    lines.append(f"{report.insight.icon} {report.insight.message}\n", style=INSIGHT_STYLES[report.insight.kind])
    lines.append(f"{icons.FIRE} Streak {report.streak.current_streak} days, longest {report.streak.longest_streak}, active {report.streak.active_days}\n")
    if report.best_period is not None and report.worst_period is not None:
        lines.append(f"{icons.SUN} Best period: {report.best_period.name} ({report.best_period.average_completion}%)  ")
        lines.append(f"{icons.MOON} Weakest: {report.worst_period.name} ({report.worst_period.average_completion}%)")
    else:
        lines.append("Not enough history for period insights yet.", style="dim")
    console.print(Panel(lines, title="Insights", expand=False))


# ─── Streaks ───────────────────────────────────────────────────────────────────
def render_streaks(streaks: StreaksResponse | None, top: Sequence[TopStreak] = ()) -> None:
    """Print per-habit streaks and the all-time top list."""
    icons = current_icons()
    table = Table(box=box.SIMPLE_HEAVY, header_style="bold", title=f"{icons.FIRE} Streaks")
    table.add_column("Habit")
    table.add_column("Category")
    table.add_column("Current", justify="right")
    table.add_column("Longest", justify="right")
    table.add_column("Last completed", justify="right")
    for streak in streaks.all_streaks if streaks is not None else []:
        table.add_row(
            Text(streak.habit_name, style=streak.color),
            streak.category,
            str(streak.current_streak),
            str(streak.longest_streak),
            streak.last_completed_date or "-",
        )
    console.print(table)

    if top:
        top_table = Table(box=box.SIMPLE, header_style="bold", title=f"{icons.TROPHY} All-time best")
        top_table.add_column("#", justify="right")
        top_table.add_column("Habit")
        top_table.add_column("Longest", justify="right")
        for rank, entry in enumerate(top, 1):
            name = Text(entry.habit_name, style=entry.habit_color)
            if entry.is_archived:
                name.append(" (archived)", style="dim")
            top_table.add_row(str(rank), name, str(entry.longest_streak))
        console.print(top_table)


# ─── History ───────────────────────────────────────────────────────────────────
def render_history(report: HistoryReport) -> None:
    """Print daily completion over a window, each habit's streak and the insights."""
    snapshots = report.snapshots
    icons = current_icons()
    days = Table(box=box.SIMPLE_HEAVY, header_style="bold", title=f"{icons.HISTORY} Last {len(snapshots)} days")
    days.add_column("Date")
    for period in TimePeriod:
        days.add_column(_period_header(period), justify="right")
    days.add_column("Completion", justify="right")
    for snap in snapshots:
        days.add_row(
            snap.date_key,
            *(f"{snap.period_averages.get(period, 0)}%" for period in TimePeriod),
            _percent(snap.completion),
        )
    console.print(days)

    per_habit = Table(box=box.SIMPLE, header_style="bold", title=f"{icons.STAR} Habits")
    per_habit.add_column("Habit")
    per_habit.add_column("Current", justify="right")
    per_habit.add_column("Longest", justify="right")
    per_habit.add_column("Completed", justify="right")
    per_habit.add_column("Rate", justify="right")
    for item in report.habits:
        per_habit.add_row(
            Text(item.habit.name, style=item.habit.color),
            str(item.streak.current_streak),
            str(item.streak.longest_streak),
            str(item.streak.total_completions),
            f"{item.streak.completion_rate}%",
        )
    console.print(per_habit)
    render_insights(report.insights)


# ─── Config ────────────────────────────────────────────────────────────────────
def render_config(summary: dict[str, Any]) -> None:
    """Print the effective configuration, one section per settings group."""
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 1), title="Configuration")
    table.add_column(style="bold")
    table.add_column()
    for section, values in summary.items():
        if isinstance(values, dict):
            table.add_row(Text(section, style="log.module"), "")
            for key, value in values.items():
                table.add_row(f"  {key}", str(value))
        else:
            table.add_row(section, str(values))
    console.print(table)
