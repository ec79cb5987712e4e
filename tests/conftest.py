"""Shared test fixtures.

Environment variables are pinned before any dailytask import so a developer's
own .env cannot change the defaults the tests rely on.
"""

from __future__ import annotations

import os

os.environ.setdefault("TRACKER_BASE_URL", "http://tracker.test/api")
os.environ.setdefault("TRACKER_TOKEN", "test-token")
os.environ.setdefault("TRACKER_MAX_RETRIES", "2")
os.environ.setdefault("TRACKER_RETRY_BACKOFF_SECONDS", "0")

import asyncio
from datetime import date
from typing import Any

import pytest

from dailytask.config import ApiSettings, StatsSettings, StoreSettings, ApplicationSettings
from dailytask.core.client import TrackerAPIError
from dailytask.core.models import (
    Habit,
    StatsSummary,
    PeriodProgress,
    StreaksResponse,
    DailyProgressEntry,
    DailyProgressResponse,
)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_habit(habit_id: str = "h1", name: str = "Read", **overrides: Any) -> Habit:
    data: dict[str, Any] = {"_id": habit_id, "name": name, "taskType": "ongoing", "startDate": "2024-01-01"}
    data.update(overrides)
    return Habit.model_validate(data)


def make_response(date_key: str, rows: dict[str, PeriodProgress] | None = None, reported_date: str | None = None) -> DailyProgressResponse:
    progress = [
        DailyProgressEntry(habit_id=habit_id, date=date_key, **periods.model_dump())
        for habit_id, periods in (rows or {}).items()
    ]
    return DailyProgressResponse(date=reported_date or date_key, progress=progress)


class FakeClock:
    """Settable replacement for ``local_today``."""

    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


class FakeTrackerClient:
    """In-memory stand-in for :class:`TrackerClient` recording every call."""

    def __init__(self, habits: list[Habit] | None = None) -> None:
        self.habits = list(habits or [])
        self.days: dict[str, DailyProgressResponse] = {}
        self.progress_calls: list[str] = []
        self.update_calls: list[tuple[str, str, str, int]] = []
        self.stats_calls = 0
        self.fail_progress: set[str] = set()
        self.fail_updates = False
        self.failing_percentages: set[int] = set()
        self.update_gates: dict[int, asyncio.Event] = {}
        self.fail_habit_writes = False
        self.gates: dict[str, asyncio.Event] = {}

    async def get_habits(self) -> list[Habit]:
        return list(self.habits)

    async def get_daily_progress(self, day: Any) -> DailyProgressResponse:
        date_key = str(day)
        self.progress_calls.append(date_key)
        gate = self.gates.get(date_key)
        if gate is not None:
            await gate.wait()
        if date_key in self.fail_progress:
            raise TrackerAPIError("Network down", status_code=None)
        return self.days.get(date_key, make_response(date_key))

    async def update_daily_progress(self, habit_id: str, day: Any, period: Any, percentage: int) -> DailyProgressEntry:
        self.update_calls.append((habit_id, str(day), str(period), percentage))
        gate = self.update_gates.get(percentage)
        if gate is not None:
            await gate.wait()
        if self.fail_updates or percentage in self.failing_percentages:
            raise TrackerAPIError("Server error", status_code=500)
        return DailyProgressEntry(habit_id=habit_id, date=str(day), **{str(period): percentage})

    async def get_stats(self) -> StatsSummary:
        self.stats_calls += 1
        return StatsSummary(total_habits=len(self.habits))

    async def get_streaks(self) -> StreaksResponse:
        return StreaksResponse()

    async def create_habit(self, payload: Any) -> Habit:
        if self.fail_habit_writes:
            raise TrackerAPIError("Server error", status_code=500)
        data = payload if isinstance(payload, dict) else payload.to_api_dict()
        habit = make_habit(f"h{len(self.habits) + 1}", **{k: v for k, v in data.items() if k != "_id"})
        self.habits.append(habit)
        return habit

    async def update_habit(self, habit_id: str, payload: Any) -> Habit:
        if self.fail_habit_writes:
            raise TrackerAPIError("Server error", status_code=500)
        data = payload if isinstance(payload, dict) else payload.model_dump(exclude_none=True)
        current = next(h for h in self.habits if h.id == habit_id)
        return current.model_copy(update=data)

    async def delete_habit(self, habit_id: str) -> bool:
        if self.fail_habit_writes:
            raise TrackerAPIError("Not found", status_code=404)
        return True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> ApplicationSettings:
    """Settings with short timers so store tests run fast."""
    return ApplicationSettings(
        api=ApiSettings(base_url="http://tracker.test/api", token="test-token", retry_backoff_seconds=0),
        store=StoreSettings(debounce_ms=20, rollover_check_seconds=0.05, fetch_timeout_seconds=1, top_tasks_limit=5),
        stats=StatsSettings(streak_threshold=50, period_window_days=7, period_min_days=3),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(date(2024, 1, 10))


@pytest.fixture
def habits() -> list[Habit]:
    return [
        make_habit("h1", "Read"),
        make_habit("h2", "Exercise"),
        make_habit("h3", "Meditate", startDate="2024-01-05", archivedAt="2024-01-09"),
        make_habit("h4", "Dentist", taskType="daily", startDate="2024-01-10"),
    ]


@pytest.fixture
def fake_client(habits: list[Habit]) -> FakeTrackerClient:
    return FakeTrackerClient(habits)
