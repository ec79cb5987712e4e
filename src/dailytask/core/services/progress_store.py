# ♥♥─── Progress Store ───────────────────────────────────────────────────────────
"""State container for the selected day's progress and everything derived from it.

The store owns the per-date progress maps and the historical cache. Readers
get immutable :class:`ProgressMap` snapshots and memoised aggregates keyed on
:attr:`ProgressStore.generation`, which increases on every change that can
alter a derived value.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self, TypeAlias, TypeVar
from types import MappingProxyType
import asyncio

from dailytask.utils import DateTimeHandler, local_today, to_date_key, parse_date_key, shift_date_key
from dailytask.config import get_settings
from dailytask.core.client import TrackerAPIError
from dailytask.core.models import (
    StoreState,
    NoticeLevel,
    ProgressMap,
    InsightsReport,
    ProgressLockedError,
    validate_period,
    can_set_percentage,
    validate_percentage,
    current_time_period,
)
from dailytask.custom_logger import log

from .scheduler import Debouncer, RolloverWatcher
from .visibility import filter_visible
from .aggregations import (
    best_period,
    daily_stats,
    worst_period,
    daily_insight,
    build_snapshot,
    count_by_status,
    calculate_streak,
    daily_completion,
    period_completions,
    rank_tasks_by_progress,
    completion_for_progress,
)


if TYPE_CHECKING:
    from datetime import date
    from collections.abc import Callable

    from dailytask.utils import DateLike
    from dailytask.config import ApplicationSettings
    from dailytask.core.client import TrackerClient
    from dailytask.core.models import (
        Habit,
        DailyStats,
        RankedTask,
        TimePeriod,
        HabitCreate,
        HabitUpdate,
        StatsSummary,
        StatusCounts,
        DailySnapshot,
        StreaksResponse,
    )

    Notifier: TypeAlias = Callable[[str, NoticeLevel], None]
    Clock: TypeAlias = Callable[[], date]


T = TypeVar("T")

DAILY_PROGRESS_ENDPOINT = "progress/daily"


def log_notifier(message: str, level: NoticeLevel) -> None:
    """Default notifier: user-facing notices go to the log."""
    if level == NoticeLevel.SUCCESS:
        log.success(message)
    else:
        log.error(message)


# ─── Progress Store ────────────────────────────────────────────────────────────
class ProgressStore:
    """Progress state of the selected day, its cache and the derived aggregates.

    Build one per application run and drive it with :meth:`start` and
    :meth:`close`, or use it as an async context manager.
    """

    def __init__(
        self,
        client: TrackerClient,
        settings: ApplicationSettings | None = None,
        clock: Clock | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        """Initialize the store.

        :param client: The REST client used for every fetch and write.
        :param settings: Application settings, defaulting to the cached ones.
        :param clock: Returns the local calendar day; replaced in tests.
        :param notifier: Receives user-facing notices (toasts).
        """
        self.client = client
        self.settings = settings or get_settings()
        self._clock: Clock = clock or local_today
        self._notify: Notifier = notifier or log_notifier

        store_settings = self.settings.store
        self._debouncer = Debouncer(store_settings.debounce_seconds, name="navigate")
        self._watcher = RolloverWatcher(self.check_rollover, store_settings.rollover_check_seconds)
        self._in_flight: dict[tuple[str, str], asyncio.Task[ProgressMap]] = {}
        self._memo: dict[str, tuple[int, Any]] = {}
        self._epoch = 0
        self._write_seq = 0
        self._writes: dict[str, dict[tuple[str, TimePeriod], tuple[int, int]]] = {}
        self._unsettled_writes: set[int] = set()

        self.today_key: str = to_date_key(self._clock())
        self.selected_key: str = self.today_key
        self.state: StoreState = StoreState.IDLE
        self.loading_key: str | None = None
        self.loaded_key: str | None = None
        self.generation: int = 0

        self._cache: dict[str, ProgressMap] = {}
        self._progress: ProgressMap = ProgressMap.empty(self.selected_key)
        self._habits: list[Habit] = []
        self.stats: StatsSummary | None = None
        self.streaks: StreaksResponse | None = None

    # ─── Lifecycle ─────────────────────────────────────────────────────────────
    async def start(self) -> None:
        """Load habits, today's progress, stats and streaks, then watch for rollover."""
        log.info("Starting progress store for {}.", self.today_key)
        await self.refresh_habits()
        await asyncio.gather(self._load_selected(self.selected_key), self.refresh_stats(), self.refresh_streaks())
        self._watcher.start()

    async def close(self) -> None:
        """Stop timers and forget in-flight fetches."""
        self._debouncer.cancel()
        await self._watcher.stop()
        for task in self._in_flight.values():
            task.cancel()
        self._in_flight.clear()
        log.debug("Progress store closed.")

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object) -> None:
        await self.close()

    # ─── Read Access ───────────────────────────────────────────────────────────
    @property
    def progress(self) -> ProgressMap:
        """The progress map of the selected day."""
        return self._progress

    @property
    def historical_cache(self) -> MappingProxyType[str, ProgressMap]:
        """Read-only view of the per-date cache."""
        return MappingProxyType(self._cache)

    @property
    def habits(self) -> tuple[Habit, ...]:
        """Every known habit, visible or not."""
        return tuple(self._habits)

    @property
    def selected_date(self) -> date:
        """The selected day as a date."""
        return parse_date_key(self.selected_key)

    def is_today(self, day: DateLike | None = None) -> bool:
        """True if ``day`` (default: the selected day) is today."""
        key = self.selected_key if day is None else to_date_key(day)
        return key == self.today_key

    def _bump(self) -> None:
        self.generation += 1

    def _set_active(self, progress: ProgressMap) -> None:
        self._progress = progress
        self._bump()

    # ─── Navigation ────────────────────────────────────────────────────────────
    def _select(self, date_key: str) -> bool:
        """Point the store at ``date_key``; True when the cache already holds it."""
        if date_key != self.selected_key:
            self.selected_key = date_key
            self._bump()

        cached = self._cache.get(date_key)
        if cached is not None:
            self._debouncer.cancel()
            self._set_active(cached)
            self.state = StoreState.LOADED
            self.loaded_key = date_key
            self.loading_key = None
            log.debug("Cache hit for {}.", date_key)
            return True

        if self._progress.date_key != date_key:
            self._set_active(ProgressMap.empty(date_key))
        # no request exists until the debounced fetch starts
        self.state = StoreState.IDLE
        self.loaded_key = None
        self.loading_key = None
        return False

    async def navigate(self, day: DateLike) -> None:
        """Select ``day`` and fetch it once navigation settles.

        Cached days load at once with no network call. Otherwise the fetch is
        debounced, so holding next/prev only fetches the day it stops on.
        """
        await self.check_rollover()
        date_key = self._normalize(day)
        if not self._select(date_key):
            self._debouncer.schedule(self._load_selected, date_key)

    async def load_date(self, day: DateLike) -> ProgressMap | None:
        """Select ``day`` and fetch it right away when not cached.

        :returns: The map now active, or None if the result went stale.
        """
        await self.check_rollover()
        date_key = self._normalize(day)
        self._debouncer.cancel()
        if self._select(date_key):
            return self._progress
        return await self._load_selected(date_key)

    async def go_to_previous_day(self) -> None:
        """Navigate one day back."""
        await self.navigate(shift_date_key(self.selected_key, -1))

    async def go_to_next_day(self) -> None:
        """Navigate one day forward."""
        await self.navigate(shift_date_key(self.selected_key, 1))

    async def go_to_today(self) -> None:
        """Navigate back to today."""
        await self.navigate(self.today_key)

    async def wait_until_settled(self) -> None:
        """Wait for a pending debounced fetch, if any."""
        await self._debouncer.flush()

    @staticmethod
    def _normalize(day: DateLike) -> str:
        key = to_date_key(day)
        parse_date_key(key)
        return key

    # ─── Fetching ──────────────────────────────────────────────────────────────
    async def _request_progress(self, date_key: str) -> ProgressMap:
        since = self._write_seq
        unsettled = set(self._unsettled_writes)
        response = await asyncio.wait_for(self.client.get_daily_progress(date_key), timeout=self.settings.store.fetch_timeout_seconds)
        if response.date != date_key:
            log.warning("Server answered {} for a request of {}; treating the day as empty.", response.date, date_key)
            progress = ProgressMap.empty(date_key)
        else:
            progress = response.to_progress_map(date_key)
        return self._replay_writes(progress, since, unsettled)

    def _replay_writes(self, progress: ProgressMap, since: int, unsettled: set[int]) -> ProgressMap:
        """Re-apply local writes the response may predate.

        Those are writes made after the request started and writes still
        unanswered when it started.
        """
        for (habit_id, period), (seq, value) in self._writes.get(progress.date_key, {}).items():
            if seq > since or seq in unsettled:
                progress = progress.with_value(habit_id, period, value)
        return progress

    async def _fetch_progress(self, date_key: str) -> ProgressMap:
        """Fetch one day, sharing the request with concurrent callers of the same key."""
        key = (DAILY_PROGRESS_ENDPOINT, date_key)
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._request_progress(date_key), name=f"fetch-progress:{date_key}")
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._forget_request(key, done))
        else:
            log.debug("Joining in-flight fetch for {}.", date_key)
        return await asyncio.shield(task)

    def _forget_request(self, key: tuple[str, str], task: asyncio.Task[ProgressMap]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _load_selected(self, date_key: str) -> ProgressMap | None:
        epoch = self._epoch
        self.state = StoreState.FETCH_IN_FLIGHT
        self.loading_key = date_key

        try:
            progress = await self._fetch_progress(date_key)
        except (TrackerAPIError, TimeoutError) as e:
            if self._is_stale(date_key, epoch):
                return None
            log.error("Could not load progress for {}: {}", date_key, e)
            self._notify(f"Failed to load progress for {date_key}", NoticeLevel.ERROR)
            self._set_active(ProgressMap.empty(date_key))
            self._mark_loaded(date_key)
            return self._progress

        if self._is_stale(date_key, epoch):
            log.debug("Discarding stale progress for {}; {} is selected now.", date_key, self.selected_key)
            return None

        self._cache[date_key] = progress
        self._set_active(progress)
        self._mark_loaded(date_key)
        return progress

    def _is_stale(self, date_key: str, epoch: int) -> bool:
        return epoch != self._epoch or date_key != self.selected_key

    def _mark_loaded(self, date_key: str) -> None:
        self.state = StoreState.LOADED
        self.loaded_key = date_key
        self.loading_key = None

    async def fetch_progress_for_date(self, day: DateLike) -> ProgressMap:
        """Cache-first fetch of any day, without changing the selection.

        Failures are logged and read as an empty map, which is not cached.
        """
        date_key = self._normalize(day)
        cached = self._cache.get(date_key)
        if cached is not None:
            return cached

        epoch = self._epoch
        try:
            progress = await self._fetch_progress(date_key)
        except (TrackerAPIError, TimeoutError) as e:
            log.warning("Could not prefetch progress for {}: {}", date_key, e)
            return ProgressMap.empty(date_key)

        if epoch == self._epoch:
            self._cache[date_key] = progress
        return progress

    async def refresh_habits(self) -> None:
        """Reload the habit list."""
        try:
            self._habits = await self.client.get_habits()
        except TrackerAPIError as e:
            log.error("Could not load habits: {}", e)
            self._notify("Failed to load habits", NoticeLevel.ERROR)
            return
        log.debug("Loaded {} habits.", len(self._habits))
        self._bump()

    async def refresh_stats(self) -> None:
        """Reload the server-side stats summary; failures are only logged."""
        try:
            self.stats = await asyncio.wait_for(self.client.get_stats(), timeout=self.settings.store.fetch_timeout_seconds)
        except (TrackerAPIError, TimeoutError) as e:
            log.warning("Could not refresh stats: {}", e)

    async def refresh_streaks(self) -> None:
        """Reload the streak lists; failures are only logged."""
        try:
            self.streaks = await asyncio.wait_for(self.client.get_streaks(), timeout=self.settings.store.fetch_timeout_seconds)
        except (TrackerAPIError, TimeoutError) as e:
            log.warning("Could not refresh streaks: {}", e)

    # ─── Writes ────────────────────────────────────────────────────────────────
    def _write_entry(self, date_key: str, habit_id: str, period: TimePeriod, value: int) -> None:
        if self._progress.date_key == date_key:
            self._set_active(self._progress.with_value(habit_id, period, value))
            if date_key in self._cache:
                self._cache[date_key] = self._progress
        elif date_key in self._cache:
            self._cache[date_key] = self._cache[date_key].with_value(habit_id, period, value)

    async def set_percentage(self, habit_id: str, period: TimePeriod | str, value: int) -> bool:
        """Set one period of one task on the selected day.

        The value shows up at once and is then persisted. A failed write
        restores the previous value and raises a notice, unless a newer
        write to the same period has replaced it in the meantime.

        :param habit_id: The task to update.
        :param period: The time period.
        :param value: One of the selectable percentages.
        :returns: True if the server accepted the write.
        :raises InvalidProgressError: If ``period`` or ``value`` is not allowed.
        :raises ProgressLockedError: If the task is completed and ``value`` would lower the period.
        """
        time_period = validate_period(period)
        percentage = validate_percentage(value)
        date_key = self.selected_key
        before = self._progress.get(habit_id)

        if not can_set_percentage(before, time_period, percentage):
            raise ProgressLockedError(habit_id, time_period, before.get(time_period), percentage)

        previous = before.get(time_period)
        self._write_seq += 1
        seq = self._write_seq
        slot = (habit_id, time_period)
        epoch = self._epoch
        self._writes.setdefault(date_key, {})[slot] = (seq, percentage)
        self._unsettled_writes.add(seq)
        self._write_entry(date_key, habit_id, time_period, percentage)

        try:
            await self.client.update_daily_progress(habit_id, date_key, time_period, percentage)
        except TrackerAPIError as e:
            log.error("Saving {} {} = {}% for {} failed: {}", habit_id, time_period, percentage, date_key, e)
            self._unsettled_writes.discard(seq)
            day_writes = self._writes.get(date_key, {})
            if epoch == self._epoch and day_writes.get(slot, (None, None))[0] == seq:
                del day_writes[slot]
                self._write_entry(date_key, habit_id, time_period, previous)
            else:
                log.debug("Not rolling back {} {} for {}: a newer write replaced it.", habit_id, time_period, date_key)
            self._notify("Failed to save progress", NoticeLevel.ERROR)
            return False

        self._unsettled_writes.discard(seq)
        log.debug("Saved {} {} = {}% for {}.", habit_id, time_period, percentage, date_key)
        await self.refresh_stats()
        return True

    async def add_habit(self, payload: HabitCreate | dict[str, Any]) -> Habit | None:
        """Create a habit and add it to the list."""
        try:
            habit = await self.client.create_habit(payload)
        except TrackerAPIError as e:
            log.error("Creating habit failed: {}", e)
            self._notify("Failed to create habit", NoticeLevel.ERROR)
            return None
        self._habits.append(habit)
        self._bump()
        self._notify(f"Habit '{habit.name}' created", NoticeLevel.SUCCESS)
        return habit

    async def update_habit(self, habit_id: str, payload: HabitUpdate | dict[str, Any]) -> Habit | None:
        """Update a habit and replace it in the list."""
        try:
            habit = await self.client.update_habit(habit_id, payload)
        except TrackerAPIError as e:
            log.error("Updating habit {} failed: {}", habit_id, e)
            self._notify("Failed to update habit", NoticeLevel.ERROR)
            return None
        self._habits = [habit if h.id == habit_id else h for h in self._habits]
        self._bump()
        self._notify(f"Habit '{habit.name}' updated", NoticeLevel.SUCCESS)
        return habit

    async def delete_habit(self, habit_id: str) -> bool:
        """Archive a habit on the server and drop it from the list."""
        try:
            await self.client.delete_habit(habit_id)
        except TrackerAPIError as e:
            log.error("Deleting habit {} failed: {}", habit_id, e)
            self._notify("Failed to delete habit", NoticeLevel.ERROR)
            return False
        self._habits = [h for h in self._habits if h.id != habit_id]
        self._bump()
        self._notify("Habit deleted", NoticeLevel.SUCCESS)
        return True

    # ─── Rollover ──────────────────────────────────────────────────────────────
    async def check_rollover(self) -> bool:
        """Hard-reset the store if the local day changed since the last check.

        :returns: True if a rollover happened.
        """
        today_key = to_date_key(self._clock())
        if today_key == self.today_key:
            return False

        log.info("Day changed from {} to {}; resetting progress state.", self.today_key, today_key)
        self._reset(today_key)
        await asyncio.gather(self._load_selected(today_key), self.refresh_stats(), self.refresh_streaks())
        return True

    def _reset(self, today_key: str) -> None:
        self._debouncer.cancel()
        self._in_flight.clear()
        self._epoch += 1
        self._cache.clear()
        self._memo.clear()
        self._writes.clear()
        self._unsettled_writes.clear()
        self.stats = None
        self.streaks = None
        self.today_key = today_key
        self.selected_key = today_key
        self._progress = ProgressMap.empty(today_key)
        self.state = StoreState.IDLE
        self.loaded_key = None
        self.loading_key = None
        self._bump()

    # ─── Derived Values ────────────────────────────────────────────────────────
    def _memoized(self, name: str, compute: Callable[[], T]) -> T:
        cached = self._memo.get(name)
        if cached is not None and cached[0] == self.generation:
            return cached[1]
        value = compute()
        self._memo[name] = (self.generation, value)
        return value

    @property
    def visible_habits(self) -> tuple[Habit, ...]:
        """Habits visible on the selected day."""
        return self._memoized("visible_habits", lambda: tuple(filter_visible(self._habits, self.selected_key)))

    @property
    def daily_completion(self) -> int:
        """Mean task progress of the selected day."""
        return self._memoized("daily_completion", lambda: daily_completion(self.visible_habits, self._progress))

    @property
    def period_completions(self) -> MappingProxyType[TimePeriod, int]:
        """Mean value of each period on the selected day."""
        return self._memoized("period_completions", lambda: MappingProxyType(period_completions(self.visible_habits, self._progress)))

    @property
    def status_counts(self) -> StatusCounts:
        """Visible tasks partitioned by display status."""
        return self._memoized("status_counts", lambda: count_by_status(self.visible_habits, self._progress))

    @property
    def top_tasks(self) -> list[RankedTask]:
        """The best-progressing tasks of the selected day."""
        limit = self.settings.store.top_tasks_limit
        return self._memoized("top_tasks", lambda: rank_tasks_by_progress(self.visible_habits, self._progress, limit))

    @property
    def daily_stats(self) -> DailyStats:
        """Overall and per-period averages with slot counts."""
        return self._memoized("daily_stats", lambda: daily_stats(self.visible_habits, self._progress))

    def completion_for_date(self, day: DateLike) -> int:
        """Mean of every stored value of a cached day; 0 when not cached."""
        key = to_date_key(day)
        progress = self._progress if key == self._progress.date_key else self._cache.get(key)
        return completion_for_progress(progress)

    @staticmethod
    def current_period() -> TimePeriod:
        """The period the local wall clock is in."""
        return current_time_period(DateTimeHandler.get_local_now().hour)

    # ─── User Timeline ─────────────────────────────────────────────────────────
    @property
    def user_start_date(self) -> date | None:
        """Earliest start or creation date over all habits."""
        starts = [start for habit in self._habits if (start := habit.created_at or habit.start_date) is not None]
        return min(starts, default=None)

    @property
    def days_since_start(self) -> int:
        """Days from the user's first habit to today, both included."""
        start = self.user_start_date
        if start is None:
            return 0
        return max((parse_date_key(self.today_key) - start).days + 1, 0)

    def is_before_user_start(self, day: DateLike) -> bool:
        """True for days before the user's first habit existed."""
        start = self.user_start_date
        return start is not None and parse_date_key(to_date_key(day)) < start

    # ─── History & Insights ────────────────────────────────────────────────────
    async def recent_snapshots(self, days: int) -> list[DailySnapshot]:
        """Snapshots of the last ``days`` days up to today, most recent first.

        Days before the user's first habit are left out.
        """
        keys = [shift_date_key(self.today_key, -offset) for offset in range(max(days, 0))]
        keys = [key for key in keys if not self.is_before_user_start(key)]
        maps = await asyncio.gather(*(self.fetch_progress_for_date(key) for key in keys))
        return [build_snapshot(filter_visible(self._habits, progress.date_key), progress) for progress in maps]

    async def insights(self) -> InsightsReport:
        """Streak, best and worst period and a coaching message for the selected day."""
        stats_settings = self.settings.stats
        history = await self.recent_snapshots(max(stats_settings.period_window_days, stats_settings.period_min_days))
        worst = worst_period(history, stats_settings.period_window_days, stats_settings.period_min_days)
        return InsightsReport(
            streak=calculate_streak(history, stats_settings.streak_threshold),
            best_period=best_period(history, stats_settings.period_window_days, stats_settings.period_min_days),
            worst_period=worst,
            insight=daily_insight(self.daily_completion, self.status_counts, worst),
        )

