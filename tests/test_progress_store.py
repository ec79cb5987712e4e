"""Tests for ProgressStore: caching, navigation, writes and rollover."""

from __future__ import annotations

from datetime import date
import asyncio

import pytest
from conftest import make_habit, make_response

from dailytask.core.models import (
    StoreState,
    TimePeriod,
    HabitCreate,
    NoticeLevel,
    PeriodProgress,
    ProgressLockedError,
    InvalidProgressError,
)
from dailytask.core.services import ProgressStore


@pytest.fixture
def notices() -> list[tuple[str, NoticeLevel]]:
    return []


@pytest.fixture
def store(fake_client, settings, clock, notices) -> ProgressStore:
    return ProgressStore(fake_client, settings=settings, clock=clock, notifier=lambda message, level: notices.append((message, level)))


async def _wait_for_call(client, date_key: str) -> None:
    async def _poll() -> None:
        while date_key not in client.progress_calls:
            await asyncio.sleep(0)

    await asyncio.wait_for(_poll(), timeout=1)


class TestStartup:
    @pytest.mark.asyncio
    async def test_start_loads_today(self, store, fake_client):
        fake_client.days["2024-01-10"] = make_response("2024-01-10", {"h1": PeriodProgress.of(100, 50, 0, 80)})

        async with store:
            assert store.state == StoreState.LOADED
            assert store.loaded_key == "2024-01-10"
            assert store.progress.get("h1").afternoon == 50
            assert [h.id for h in store.visible_habits] == ["h1", "h2", "h4"]
            assert "2024-01-10" in store.historical_cache
            assert store.stats is not None

    @pytest.mark.asyncio
    async def test_cache_is_read_only(self, store):
        await store.load_date("2024-01-09")
        with pytest.raises(TypeError):
            store.historical_cache["2024-01-01"] = store.progress


class TestCaching:
    @pytest.mark.asyncio
    async def test_cache_hit_makes_no_request(self, store, fake_client):
        await store.load_date("2024-01-10")
        await store.load_date("2024-01-08")
        assert fake_client.progress_calls == ["2024-01-10", "2024-01-08"]

        await store.load_date("2024-01-10")
        await store.navigate("2024-01-08")

        assert fake_client.progress_calls == ["2024-01-10", "2024-01-08"]
        assert store.state == StoreState.LOADED
        assert store.progress.date_key == "2024-01-08"

    @pytest.mark.asyncio
    async def test_mismatched_date_is_cached_as_empty(self, store, fake_client):
        fake_client.days["2024-01-09"] = make_response(
            "2024-01-09", {"h1": PeriodProgress.of(100, 100, 100, 100)}, reported_date="2024-01-08"
        )

        progress = await store.load_date("2024-01-09")

        assert progress.date_key == "2024-01-09"
        assert progress.is_empty()
        assert store.historical_cache["2024-01-09"].is_empty()

    @pytest.mark.asyncio
    async def test_fetch_for_date_keeps_selection(self, store, fake_client):
        fake_client.days["2024-01-05"] = make_response("2024-01-05", {"h2": PeriodProgress.of(50, 0, 0, 0)})
        await store.load_date("2024-01-10")

        progress = await store.fetch_progress_for_date("2024-01-05")

        assert progress.get("h2").morning == 50
        assert store.selected_key == "2024-01-10"
        assert "2024-01-05" in store.historical_cache

    @pytest.mark.asyncio
    async def test_concurrent_fetches_share_one_request(self, store, fake_client):
        gate = asyncio.Event()
        fake_client.gates["2024-01-07"] = gate

        first = asyncio.create_task(store.fetch_progress_for_date("2024-01-07"))
        second = asyncio.create_task(store.fetch_progress_for_date("2024-01-07"))
        await _wait_for_call(fake_client, "2024-01-07")
        gate.set()
        results = await asyncio.gather(first, second)

        assert fake_client.progress_calls.count("2024-01-07") == 1
        assert results[0] == results[1]

    @pytest.mark.asyncio
    async def test_invalid_date_is_rejected(self, store):
        with pytest.raises(ValueError):
            await store.load_date("2024-13-01")


class TestFailures:
    @pytest.mark.asyncio
    async def test_network_failure_shows_empty_map_without_caching(self, store, fake_client, notices):
        fake_client.fail_progress.add("2024-01-09")

        progress = await store.load_date("2024-01-09")

        assert progress.is_empty()
        assert store.state == StoreState.LOADED
        assert "2024-01-09" not in store.historical_cache
        assert notices == [("Failed to load progress for 2024-01-09", NoticeLevel.ERROR)]

    @pytest.mark.asyncio
    async def test_failed_day_is_retried_on_next_visit(self, store, fake_client):
        fake_client.fail_progress.add("2024-01-09")
        await store.load_date("2024-01-09")
        fake_client.fail_progress.clear()

        await store.load_date("2024-01-10")
        await store.load_date("2024-01-09")

        assert fake_client.progress_calls.count("2024-01-09") == 2
        assert "2024-01-09" in store.historical_cache

    @pytest.mark.asyncio
    async def test_timeout_counts_as_network_failure(self, fake_client, settings, clock, notices):
        quick = settings.model_copy(update={"store": settings.store.model_copy(update={"fetch_timeout_seconds": 0.05})})
        store = ProgressStore(fake_client, settings=quick, clock=clock, notifier=lambda message, level: notices.append((message, level)))
        fake_client.gates["2024-01-09"] = asyncio.Event()

        progress = await store.load_date("2024-01-09")

        assert progress.is_empty()
        assert store.state == StoreState.LOADED
        assert store.loaded_key == "2024-01-09"
        assert "2024-01-09" not in store.historical_cache
        assert notices == [("Failed to load progress for 2024-01-09", NoticeLevel.ERROR)]

    @pytest.mark.asyncio
    async def test_failed_prefetch_returns_empty(self, store, fake_client):
        fake_client.fail_progress.add("2024-01-03")
        assert (await store.fetch_progress_for_date("2024-01-03")).is_empty()
        assert "2024-01-03" not in store.historical_cache


class TestNavigation:
    @pytest.mark.asyncio
    async def test_rapid_navigation_fetches_only_the_final_day(self, store, fake_client):
        async with store:
            await store.go_to_previous_day()
            await store.go_to_previous_day()
            await store.go_to_previous_day()

            assert store.selected_key == "2024-01-07"
            assert store.state == StoreState.IDLE
            assert store.loading_key is None
            assert store.progress.date_key == "2024-01-07"
            assert fake_client.progress_calls == ["2024-01-10"]

            await store.wait_until_settled()

            assert fake_client.progress_calls == ["2024-01-10", "2024-01-07"]
            assert store.state == StoreState.LOADED

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(self, store, fake_client):
        gate = asyncio.Event()
        fake_client.gates["2024-01-09"] = gate
        fake_client.days["2024-01-09"] = make_response("2024-01-09", {"h1": PeriodProgress.of(100, 0, 0, 0)})

        slow = asyncio.create_task(store.load_date("2024-01-09"))
        await _wait_for_call(fake_client, "2024-01-09")
        await store.load_date("2024-01-08")
        gate.set()

        assert await slow is None
        assert store.selected_key == "2024-01-08"
        assert store.progress.date_key == "2024-01-08"
        assert "2024-01-09" not in store.historical_cache

    @pytest.mark.asyncio
    async def test_go_to_today(self, store):
        await store.load_date("2024-01-02")
        await store.go_to_next_day()
        await store.go_to_today()
        await store.wait_until_settled()

        assert store.is_today()
        assert store.selected_date == date(2024, 1, 10)


class TestWrites:
    @pytest.mark.asyncio
    async def test_write_is_applied_and_persisted(self, store, fake_client):
        await store.load_date("2024-01-10")

        saved = await store.set_percentage("h2", "evening", 50)

        assert saved is True
        assert fake_client.update_calls == [("h2", "2024-01-10", "evening", 50)]
        assert store.progress.get("h2").evening == 50
        assert store.historical_cache["2024-01-10"].get("h2").evening == 50
        assert fake_client.stats_calls == 1

    @pytest.mark.asyncio
    async def test_failed_write_rolls_back(self, store, fake_client, notices):
        fake_client.days["2024-01-10"] = make_response("2024-01-10", {"h1": PeriodProgress.of(80, 0, 0, 0)})
        await store.load_date("2024-01-10")
        fake_client.fail_updates = True

        saved = await store.set_percentage("h1", "morning", 100)

        assert saved is False
        assert store.progress.get("h1").morning == 80
        assert store.historical_cache["2024-01-10"].get("h1").morning == 80
        assert notices == [("Failed to save progress", NoticeLevel.ERROR)]

    @pytest.mark.asyncio
    async def test_failed_write_keeps_a_newer_confirmed_value(self, store, fake_client, notices):
        await store.load_date("2024-01-10")
        gate = asyncio.Event()
        fake_client.update_gates[50] = gate
        fake_client.failing_percentages.add(50)

        slow = asyncio.create_task(store.set_percentage("h1", "morning", 50))
        while not fake_client.update_calls:
            await asyncio.sleep(0)
        assert store.progress.get("h1").morning == 50

        assert await store.set_percentage("h1", "morning", 80) is True
        gate.set()

        assert await slow is False
        assert store.progress.get("h1").morning == 80
        assert store.historical_cache["2024-01-10"].get("h1").morning == 80
        assert notices == [("Failed to save progress", NoticeLevel.ERROR)]

    @pytest.mark.asyncio
    async def test_write_during_fetch_survives_the_response(self, store, fake_client):
        gate = asyncio.Event()
        fake_client.gates["2024-01-09"] = gate
        fake_client.days["2024-01-09"] = make_response("2024-01-09", {"h1": PeriodProgress.of(20, 0, 0, 0)})

        loading = asyncio.create_task(store.load_date("2024-01-09"))
        await _wait_for_call(fake_client, "2024-01-09")
        assert await store.set_percentage("h2", "evening", 80) is True
        gate.set()
        progress = await loading

        assert progress.get("h2").evening == 80
        assert progress.get("h1").morning == 20
        assert store.progress.get("h2").evening == 80
        assert store.historical_cache["2024-01-09"].get("h2").evening == 80

    @pytest.mark.asyncio
    async def test_unanswered_write_survives_a_later_fetch(self, store, fake_client):
        gate = asyncio.Event()
        fake_client.update_gates[100] = gate
        await store.navigate("2024-01-09")

        writing = asyncio.create_task(store.set_percentage("h1", "night", 100))
        while not fake_client.update_calls:
            await asyncio.sleep(0)
        await store.wait_until_settled()

        assert fake_client.progress_calls == ["2024-01-09"]
        assert store.historical_cache["2024-01-09"].get("h1").night == 100
        gate.set()
        assert await writing is True
        assert store.progress.get("h1").night == 100

    @pytest.mark.asyncio
    async def test_completed_task_cannot_be_lowered(self, store, fake_client):
        fake_client.days["2024-01-10"] = make_response("2024-01-10", {"h1": PeriodProgress.of(100, 50, 0, 0)})
        await store.load_date("2024-01-10")

        with pytest.raises(ProgressLockedError):
            await store.set_percentage("h1", "afternoon", 20)
        assert fake_client.update_calls == []

        assert await store.set_percentage("h1", "afternoon", 80) is True

    @pytest.mark.asyncio
    async def test_invalid_value_is_rejected(self, store, fake_client):
        await store.load_date("2024-01-10")
        with pytest.raises(InvalidProgressError):
            await store.set_percentage("h1", "morning", 30)
        assert fake_client.update_calls == []

    @pytest.mark.asyncio
    async def test_write_to_past_day_updates_that_day(self, store, fake_client):
        await store.load_date("2024-01-08")
        await store.set_percentage("h1", "night", 20)
        assert fake_client.update_calls == [("h1", "2024-01-08", "night", 20)]
        assert store.historical_cache["2024-01-08"].get("h1").night == 20


class TestHabitWrites:
    @pytest.mark.asyncio
    async def test_add_habit_notifies(self, store, notices):
        await store.refresh_habits()
        habit = await store.add_habit(HabitCreate(name="Journal", start_date=date(2024, 1, 10)))

        assert habit is not None
        assert habit in store.habits
        assert notices == [("Habit 'Journal' created", NoticeLevel.SUCCESS)]

    @pytest.mark.asyncio
    async def test_failed_habit_write_notifies(self, store, fake_client, notices):
        await store.refresh_habits()
        fake_client.fail_habit_writes = True

        assert await store.delete_habit("h1") is False
        assert len(store.habits) == 4
        assert notices == [("Failed to delete habit", NoticeLevel.ERROR)]

    @pytest.mark.asyncio
    async def test_update_habit_replaces_it(self, store):
        await store.refresh_habits()
        await store.update_habit("h2", {"name": "Run"})
        assert [h.name for h in store.habits if h.id == "h2"] == ["Run"]


class TestRollover:
    @pytest.mark.asyncio
    async def test_day_change_resets_everything(self, store, fake_client, clock):
        await store.refresh_habits()
        await store.load_date("2024-01-10")
        await store.load_date("2024-01-08")
        clock.today = date(2024, 1, 11)

        assert await store.check_rollover() is True

        assert store.today_key == "2024-01-11"
        assert store.selected_key == "2024-01-11"
        assert store.progress.date_key == "2024-01-11"
        assert set(store.historical_cache) == {"2024-01-11"}
        assert await store.check_rollover() is False

    @pytest.mark.asyncio
    async def test_fetch_in_flight_at_rollover_is_discarded(self, store, fake_client, clock):
        gate = asyncio.Event()
        fake_client.gates["2024-01-09"] = gate

        slow = asyncio.create_task(store.load_date("2024-01-09"))
        await _wait_for_call(fake_client, "2024-01-09")
        clock.today = date(2024, 1, 11)
        await store.check_rollover()
        gate.set()

        assert await slow is None
        assert store.selected_key == "2024-01-11"
        assert "2024-01-09" not in store.historical_cache

    @pytest.mark.asyncio
    async def test_watcher_notices_midnight(self, store, clock):
        async with store:
            clock.today = date(2024, 1, 11)
            for _ in range(50):
                if store.today_key == "2024-01-11":
                    break
                await asyncio.sleep(0.02)
            assert store.today_key == "2024-01-11"


class TestDerivedValues:
    @pytest.mark.asyncio
    async def test_values_are_memoised_per_generation(self, store, fake_client):
        fake_client.days["2024-01-10"] = make_response("2024-01-10", {"h1": PeriodProgress.of(100, 50, 0, 80)})
        await store.refresh_habits()
        await store.load_date("2024-01-10")

        visible = store.visible_habits
        assert store.visible_habits is visible
        assert isinstance(visible, tuple)
        with pytest.raises(TypeError):
            store.period_completions[TimePeriod.MORNING] = 0
        assert store.daily_completion == 19

        generation = store.generation
        await store.set_percentage("h2", "morning", 100)

        assert store.generation > generation
        assert store.daily_completion == 28

    @pytest.mark.asyncio
    async def test_aggregates_follow_selected_day(self, store, fake_client):
        fake_client.days["2024-01-10"] = make_response(
            "2024-01-10",
            {"h1": PeriodProgress.of(100, 100, 100, 100), "h2": PeriodProgress.of(50, 0, 0, 0)},
        )
        await store.refresh_habits()
        await store.load_date("2024-01-10")

        counts = store.status_counts
        assert (counts.fully_completed, counts.in_progress, counts.not_started) == (1, 1, 1)
        assert [task.habit.id for task in store.top_tasks] == ["h1", "h2", "h4"]
        assert store.daily_stats.completed == 4
        assert store.completion_for_date("2024-01-10") == 56
        assert store.completion_for_date("2023-12-01") == 0

    @pytest.mark.asyncio
    async def test_user_timeline(self, store, fake_client):
        fake_client.habits.append(make_habit("h5", "Old", startDate="2023-12-31", createdAt="2024-01-02"))
        await store.refresh_habits()

        assert store.user_start_date == date(2024, 1, 1)
        assert store.days_since_start == 10
        assert store.is_before_user_start("2023-12-31") is True
        assert store.is_before_user_start("2024-01-01") is False

    @pytest.mark.asyncio
    async def test_recent_snapshots_stop_at_user_start(self, store):
        await store.refresh_habits()
        snapshots = await store.recent_snapshots(14)
        assert len(snapshots) == 10
        assert snapshots[0].date_key == "2024-01-10"
        assert snapshots[-1].date_key == "2024-01-01"

    @pytest.mark.asyncio
    async def test_insights_count_the_streak(self, store, fake_client):
        full = PeriodProgress.of(100, 100, 100, 100)
        for key in ("2024-01-10", "2024-01-09", "2024-01-08"):
            fake_client.days[key] = make_response(key, {"h1": full, "h2": full})
        await store.refresh_habits()
        await store.load_date("2024-01-10")

        report = await store.insights()

        assert report.streak.current_streak == 3
        assert report.streak.active_days == 3
        assert report.best_period is not None
