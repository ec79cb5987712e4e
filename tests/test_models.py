"""Tests for the pydantic models in dailytask.core.models."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from dailytask.core.models import (
    Goal,
    Habit,
    TaskType,
    TimePeriod,
    HabitCreate,
    HabitUpdate,
    ProgressMap,
    TopStreak,
    PeriodProgress,
    ProgressUpdate,
    ProgressRecord,
    StreaksResponse,
    DailyProgressResponse,
    progress_record_id,
)


class TestHabit:
    def test_reads_api_payload(self):
        habit = Habit.model_validate(
            {
                "_id": "65a1",
                "name": "Stretch",
                "category": "Health",
                "color": "#10b981",
                "goal": "Weekly",
                "taskType": "ongoing",
                "isActive": True,
                "startDate": "2024-01-03T00:00:00.000Z",
                "createdAt": "2024-01-02",
                "order": 3,
            }
        )
        assert habit.id == "65a1"
        assert habit.goal is Goal.WEEKLY
        assert habit.start_date is not None
        assert habit.created_at == date(2024, 1, 2)
        assert habit.archived_at is None

    def test_missing_task_type_means_ongoing(self):
        habit = Habit.model_validate({"_id": "1", "name": "Old", "taskType": None})
        assert habit.task_type is TaskType.ONGOING

    def test_daily_task_is_archived_after_one_day(self):
        habit = Habit.model_validate({"_id": "1", "name": "Call", "taskType": "daily", "startDate": "2024-01-05"})
        assert habit.archived_at == date(2024, 1, 6)

    def test_explicit_archive_is_kept(self):
        habit = Habit.model_validate(
            {"_id": "1", "name": "Call", "taskType": "daily", "startDate": "2024-01-05", "archivedAt": "2024-01-20"}
        )
        assert habit.archived_at == date(2024, 1, 20)

    def test_id_also_accepted(self):
        assert Habit.model_validate({"id": "x", "name": "N"}).id == "x"

    def test_effective_start_falls_back_to_creation(self):
        habit = Habit.model_validate({"_id": "1", "name": "N", "createdAt": "2024-02-02"})
        assert habit.effective_start_date == date(2024, 2, 2)


class TestHabitPayloads:
    def test_create_serialises_camel_case(self):
        payload = HabitCreate(name="Read", task_type=TaskType.DAILY, start_date=date(2024, 1, 5))
        assert payload.to_api_dict() == {
            "name": "Read",
            "category": "General",
            "color": "#3b82f6",
            "goal": "Daily",
            "taskType": "daily",
            "startDate": "2024-01-05",
        }

    def test_create_rejects_bad_colour(self):
        with pytest.raises(ValidationError):
            HabitCreate(name="Read", color="blue")

    def test_create_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            HabitCreate(name="")

    def test_update_drops_unset_fields(self):
        assert HabitUpdate(name="Renamed").to_api_dict() == {"name": "Renamed"}


class TestProgressMap:
    def test_missing_task_reads_zero(self):
        assert ProgressMap.empty("2024-01-10").get("nope") == PeriodProgress()

    def test_updates_return_new_maps(self):
        original = ProgressMap.empty("2024-01-10")
        updated = original.with_value("h1", TimePeriod.MORNING, 80)
        assert original.is_empty()
        assert updated.get("h1").morning == 80
        assert updated.date_key == "2024-01-10"

    def test_maps_are_frozen(self):
        progress = ProgressMap.empty("2024-01-10")
        with pytest.raises(ValidationError):
            progress.date_key = "2024-01-11"

    def test_period_progress_rejects_out_of_range(self):
        with pytest.raises(ValidationError):
            PeriodProgress(morning=120)

    def test_items_in_period_order(self):
        assert [p for p, _ in PeriodProgress.of(1, 2, 3, 4).items()] == list(TimePeriod)
        assert PeriodProgress.of(10, 20, 30, 40).total == 100


class TestWireModels:
    def test_daily_response_to_map(self):
        response = DailyProgressResponse.model_validate(
            {
                "date": "2024-01-10",
                "progress": [
                    {"habitId": {"_id": "h1", "name": "Read"}, "morning": 100, "afternoon": None},
                    {"habitId": "h2", "night": 50},
                ],
            }
        )
        progress = response.to_progress_map()
        assert progress.date_key == "2024-01-10"
        assert progress.get("h1") == PeriodProgress.of(100, 0, 0, 0)
        assert progress.get("h2").night == 50

    def test_progress_update_body(self):
        body = ProgressUpdate(habit_id="h1", date="2024-01-10", time_period=TimePeriod.EVENING, percentage=50)
        assert body.to_api_dict() == {"habitId": "h1", "date": "2024-01-10", "timePeriod": "evening", "percentage": 50}

    def test_streaks_response(self):
        response = StreaksResponse.model_validate(
            {
                "allStreaks": [{"habitId": "h1", "habitName": "Read", "currentStreak": 3, "longestStreak": 5}],
                "top10Streaks": [],
            }
        )
        assert response.all_streaks[0].current_streak == 3

    def test_top_streak_accepts_either_id(self):
        assert TopStreak.model_validate({"_id": "a", "longestStreak": 9}).habit_id == "a"
        assert TopStreak.model_validate({"habitId": "b"}).habit_id == "b"


class TestProgressRecord:
    def test_record_id_is_stable(self):
        assert progress_record_id("2024-01-10", "h1") == progress_record_id("2024-01-10", "h1")
        assert progress_record_id("2024-01-10", "h1") != progress_record_id("2024-01-11", "h1")

    def test_record_roundtrips_periods(self):
        record = ProgressRecord.from_periods("2024-01-10", "h1", PeriodProgress.of(100, 50, 0, 20))
        assert record.id == progress_record_id("2024-01-10", "h1")
        assert record.periods == PeriodProgress.of(100, 50, 0, 20)
