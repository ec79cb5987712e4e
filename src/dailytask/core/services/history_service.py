# ♥♥─── History Service ──────────────────────────────────────────────────────────
"""Multi-day history built from the on-disk vault and the REST client."""

from __future__ import annotations

from typing import TYPE_CHECKING
import asyncio

from dailytask.ui import icons
from dailytask.utils import local_today, to_date_key, parse_date_key, shift_date_key
from dailytask.config import get_settings
from dailytask.core.client import TrackerAPIError
from dailytask.core.models import ProgressMap, HabitHistory, StatusCounts, HistoryReport, InsightsReport, is_task_completed
from dailytask.custom_logger import log

from .visibility import visible_on, filter_visible
from .aggregations import (
    best_period,
    worst_period,
    daily_insight,
    build_snapshot,
    count_by_status,
    calculate_streak,
    calculate_habit_streak,
)


if TYPE_CHECKING:
    from datetime import date
    from collections.abc import Callable, Sequence

    from dailytask.config import ApplicationSettings
    from dailytask.core.client import TrackerClient
    from dailytask.core.models import Habit, DailySnapshot
    from dailytask.core.repositories import ProgressVault


MAX_CONCURRENT_FETCHES = 4


class HistoryService:
    """Reads the last N days of progress, preferring the vault for elapsed days."""

    def __init__(
        self,
        client: TrackerClient,
        vault: ProgressVault | None = None,
        settings: ApplicationSettings | None = None,
        clock: Callable[[], date] | None = None,
    ) -> None:
        """Initialize the service.

        :param client: The REST client.
        :param vault: The history cache; None disables disk caching.
        :param settings: Application settings, defaulting to the cached ones.
        :param clock: Returns the local calendar day; replaced in tests.
        """
        self.client = client
        self.vault = vault
        self.settings = settings or get_settings()
        self._clock = clock or local_today
        self._semaphore = asyncio.Semaphore(MAX_CONCURRENT_FETCHES)

    @property
    def today_key(self) -> str:
        return to_date_key(self._clock())

    def window(self, days: int) -> list[str]:
        """Keys of the last ``days`` days up to today, most recent first."""
        today_key = self.today_key
        return [shift_date_key(today_key, -offset) for offset in range(max(days, 0))]

    async def progress_for(self, date_key: str) -> ProgressMap:
        """One day's map from the vault, or from the server (cached afterwards when elapsed).

        A failed fetch reads as an empty map and is not cached.
        """
        if self.vault is not None:
            cached = self.vault.load_day(date_key)
            if cached is not None:
                return cached

        async with self._semaphore:
            try:
                response = await asyncio.wait_for(self.client.get_daily_progress(date_key), timeout=self.settings.store.fetch_timeout_seconds)
            except (TrackerAPIError, TimeoutError) as e:
                log.warning("Could not fetch history for {}: {}", date_key, e)
                return ProgressMap.empty(date_key)

        if response.date != date_key:
            log.warning("Server answered {} for a request of {}; treating the day as empty.", response.date, date_key)
            progress = ProgressMap.empty(date_key)
        else:
            progress = response.to_progress_map(date_key)

        if self.vault is not None:
            self.vault.save_day(progress)
        return progress

    async def progress_window(self, days: int) -> list[ProgressMap]:
        """Maps of the last ``days`` days, most recent first."""
        return list(await asyncio.gather(*(self.progress_for(key) for key in self.window(days))))

    @staticmethod
    def _snapshots(habits: Sequence[Habit], maps: Sequence[ProgressMap]) -> list[DailySnapshot]:
        return [build_snapshot(filter_visible(habits, progress.date_key), progress) for progress in maps]

    def _habit_streaks(self, habits: Sequence[Habit], maps: Sequence[ProgressMap]) -> list[HabitHistory]:
        today = parse_date_key(self.today_key)
        histories = []
        for habit in habits:
            visible_maps = [progress for progress in maps if visible_on(habit, progress.date_key)]
            completed = [parse_date_key(progress.date_key) for progress in visible_maps if is_task_completed(progress.get(habit.id))]
            streak = calculate_habit_streak(completed, today, tracked_days=len(visible_maps))
            histories.append(HabitHistory(habit=habit, streak=streak))
        histories.sort(key=lambda item: (-item.streak.current_streak, -item.streak.longest_streak, item.habit.name.casefold()))
        return histories

    async def snapshots(self, habits: Sequence[Habit], days: int) -> list[DailySnapshot]:
        """Daily snapshots over the habits visible on each day, most recent first."""
        return self._snapshots(habits, await self.progress_window(days))

    async def habit_streaks(self, habits: Sequence[Habit], days: int) -> list[HabitHistory]:
        """Per-habit streaks over the window, longest current streak first.

        A day counts for a habit when it was visible and completed that day.
        """
        return self._habit_streaks(habits, await self.progress_window(days))

    async def report(self, habits: Sequence[Habit], days: int) -> HistoryReport:
        """Snapshots, per-habit streaks and insights from one pass over the window."""
        maps = await self.progress_window(days)
        snapshots = self._snapshots(habits, maps)
        log.debug("{} Built {} daily snapshots.", icons.HISTORY, len(snapshots))

        stats = self.settings.stats
        worst = worst_period(snapshots, stats.period_window_days, stats.period_min_days)
        if maps:
            today_map = maps[0]
            counts = count_by_status(filter_visible(habits, today_map.date_key), today_map)
            completion = snapshots[0].completion
        else:
            counts = StatusCounts()
            completion = 0

        insights = InsightsReport(
            streak=calculate_streak(snapshots, stats.streak_threshold),
            best_period=best_period(snapshots, stats.period_window_days, stats.period_min_days),
            worst_period=worst,
            insight=daily_insight(completion, counts, worst),
        )
        return HistoryReport(snapshots=snapshots, habits=self._habit_streaks(habits, maps), insights=insights)
