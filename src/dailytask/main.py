# ♥♥─── DailyTask CLI ───────────────────────────────────────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING
import sys
import asyncio
import argparse

from dailytask.ui import IconStyle, switch_icons, switch_theme
from dailytask.ui.report import render_day, render_config, render_history, render_streaks
from dailytask.utils import parse_date_key
from dailytask.config import get_settings
from dailytask.core.client import TrackerClient, TrackerAPIError
from dailytask.core.models import VALID_PERCENTAGES, TimePeriod, ProgressLockedError
from dailytask.custom_logger import log, logged, setup_logging
from dailytask.core.services import ProgressStore, HistoryService
from dailytask.core.repositories import ProgressVault


if TYPE_CHECKING:
    from dailytask.config import ApplicationSettings
    from dailytask.core.models import Habit


# ─── Commands ──────────────────────────────────────────────────────────────────
@logged
async def _cmd_today(args: argparse.Namespace, settings: ApplicationSettings) -> int:  # noqa: ARG001
    async with TrackerClient(settings.api) as client, ProgressStore(client, settings=settings) as store:
        render_day(store, await store.insights())
    return 0


@logged
async def _cmd_day(args: argparse.Namespace, settings: ApplicationSettings) -> int:
    async with TrackerClient(settings.api) as client, ProgressStore(client, settings=settings) as store:
        await store.load_date(args.date)
        render_day(store)
    return 0


def _find_habit(habits: tuple[Habit, ...], ref: str) -> Habit | None:
    for habit in habits:
        if habit.id == ref:
            return habit
    matches = [habit for habit in habits if habit.name.casefold() == ref.casefold()]
    return matches[0] if len(matches) == 1 else None


@logged
async def _cmd_set(args: argparse.Namespace, settings: ApplicationSettings) -> int:
    async with TrackerClient(settings.api) as client, ProgressStore(client, settings=settings) as store:
        if args.date is not None:
            await store.load_date(args.date)
        habit = _find_habit(store.habits, args.habit)
        if habit is None:
            log.error("No single habit matches '{}'.", args.habit)
            return 1
        try:
            saved = await store.set_percentage(habit.id, args.period, args.percentage)
        except ProgressLockedError as e:
            log.error("{}", e)
            return 1
        render_day(store)
    if saved and not store.is_today() and settings.storage.history_cache:
        ProgressVault(storage=settings.storage).forget_day(store.selected_key)
    return 0 if saved else 1


@logged
async def _cmd_streaks(args: argparse.Namespace, settings: ApplicationSettings) -> int:  # noqa: ARG001
    async with TrackerClient(settings.api) as client:
        streaks, top = await asyncio.gather(client.get_streaks(), client.get_top_streaks())
    render_streaks(streaks, top)
    return 0


@logged
async def _cmd_history(args: argparse.Namespace, settings: ApplicationSettings) -> int:
    vault = ProgressVault(storage=settings.storage) if settings.storage.history_cache and not args.no_cache else None
    async with TrackerClient(settings.api) as client:
        habits = await client.get_habits()
        history = HistoryService(client, vault=vault, settings=settings)
        report = await history.report(habits, args.days)
    render_history(report)
    return 0


def _cmd_config(args: argparse.Namespace, settings: ApplicationSettings) -> int:  # noqa: ARG001
    if settings.paths.write_default_env_file():
        log.info("Wrote a default configuration to {}", settings.paths.env_file_path)
    render_config(settings.get_configuration_summary())
    return 0


# ─── Parser ────────────────────────────────────────────────────────────────────
def _date_arg(value: str) -> str:
    try:
        parse_date_key(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    return value


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        msg = f"expected a positive number, got {value}"
        raise argparse.ArgumentTypeError(msg)
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the ``dailytask`` argument parser."""
    parser = argparse.ArgumentParser(prog="dailytask", description="Daily habit progress from the terminal")
    parser.add_argument("--debug", action="store_true", help="Show debug logs on the console")
    parser.add_argument("--ascii", action="store_true", help="Use plain-text icons")
    parser.add_argument("--theme", help="Console colour theme")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("today", help="Today's tasks, averages and insights").set_defaults(func=_cmd_today)

    day = sub.add_parser("day", help="Tasks and averages of one day")
    day.add_argument("date", type=_date_arg, help="YYYY-MM-DD")
    day.set_defaults(func=_cmd_day)

    set_cmd = sub.add_parser("set", help="Record one period of one task")
    set_cmd.add_argument("habit", help="Habit id or exact name")
    set_cmd.add_argument("period", choices=[period.value for period in TimePeriod])
    set_cmd.add_argument("percentage", type=int, choices=VALID_PERCENTAGES)
    set_cmd.add_argument("--date", type=_date_arg, help="Day to record (default: today)")
    set_cmd.set_defaults(func=_cmd_set)

    sub.add_parser("streaks", help="Per-habit and all-time streaks").set_defaults(func=_cmd_streaks)

    history = sub.add_parser("history", help="Completion and streaks over recent days")
    history.add_argument("--days", type=_positive_int, default=14, help="Window size (default: 14)")
    history.add_argument("--no-cache", action="store_true", help="Skip the on-disk history cache")
    history.set_defaults(func=_cmd_history)

    sub.add_parser("config", help="Show the effective configuration").set_defaults(func=_cmd_config)
    return parser


# ─── Entry Point ───────────────────────────────────────────────────────────────
def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``dailytask`` command."""
    args = build_parser().parse_args(argv)
    setup_logging(console_level="DEBUG" if args.debug else "INFO")
    if args.ascii:
        switch_icons(IconStyle.ASCII)
    if args.theme:
        try:
            switch_theme(args.theme)
        except ValueError as e:
            log.error("{}", e)
            return 2

    settings = get_settings()
    try:
        result = args.func(args, settings)
        if asyncio.iscoroutine(result):
            result = asyncio.run(result)
    except TrackerAPIError as e:
        log.error("Tracker API request failed: {}", e)
        return 2
    except KeyboardInterrupt:
        log.warning("Interrupted.")
        return 130
    return result


if __name__ == "__main__":
    sys.exit(main())
