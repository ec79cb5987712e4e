"""Tests for dailytask.core.models.validators: scores, statuses and the edit lock."""

from __future__ import annotations

import pytest

from dailytask.core.models import (
    VALID_PERCENTAGES,
    TaskStatus,
    TimePeriod,
    PeriodProgress,
    InvalidProgressError,
    task_status,
    mean_rounded,
    round_half_up,
    task_progress,
    completed_slots,
    validate_period,
    percentage_label,
    is_task_completed,
    can_set_percentage,
    validate_percentage,
    current_time_period,
)


class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(57.5) == 58
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1

    def test_below_half_rounds_down(self):
        assert round_half_up(57.49) == 57

    def test_mean_of_nothing_is_zero(self):
        assert mean_rounded([]) == 0

    def test_mean_rounds_half_up(self):
        assert mean_rounded([50, 65]) == 58


class TestTaskProgress:
    def test_example_tuple(self):
        assert task_progress(PeriodProgress.of(100, 50, 0, 80)) == 58

    def test_missing_record_is_zero(self):
        assert task_progress(None) == 0

    def test_null_periods_count_as_zero(self):
        periods = PeriodProgress.model_validate({"morning": None, "afternoon": 100, "evening": None, "night": None})
        assert task_progress(periods) == 25

    @pytest.mark.parametrize("value", VALID_PERCENTAGES)
    def test_uniform_values(self, value):
        assert task_progress(PeriodProgress.of(value, value, value, value)) == value


class TestTaskStatus:
    def test_all_full_is_fully_completed(self):
        assert task_status(PeriodProgress.of(100, 100, 100, 100)) == TaskStatus.FULLY_COMPLETED

    def test_all_zero_is_not_started(self):
        assert task_status(PeriodProgress.of(0, 0, 0, 0)) == TaskStatus.NOT_STARTED

    @pytest.mark.parametrize(
        "values",
        [(100, 100, 100, 80), (10, 0, 0, 0), (0, 0, 0, 100), (50, 50, 50, 50)],
    )
    def test_anything_else_is_in_progress(self, values):
        assert task_status(PeriodProgress.of(*values)) == TaskStatus.IN_PROGRESS

    def test_missing_record_is_not_started(self):
        assert task_status(None) == TaskStatus.NOT_STARTED


class TestCompletion:
    def test_any_period_at_full_completes(self):
        assert is_task_completed(PeriodProgress.of(0, 0, 100, 0)) is True

    def test_no_full_period_is_not_completed(self):
        assert is_task_completed(PeriodProgress.of(80, 80, 80, 80)) is False

    def test_completion_differs_from_fully_completed_status(self):
        periods = PeriodProgress.of(100, 0, 0, 0)
        assert is_task_completed(periods) is True
        assert task_status(periods) == TaskStatus.IN_PROGRESS

    def test_completed_slots(self):
        assert completed_slots(PeriodProgress.of(100, 100, 50, 0)) == 2
        assert completed_slots(None) == 0


class TestEditLock:
    def test_uncompleted_task_can_go_down(self):
        assert can_set_percentage(PeriodProgress.of(80, 0, 0, 0), TimePeriod.MORNING, 10) is True

    def test_completed_task_cannot_lower_a_period(self):
        periods = PeriodProgress.of(100, 50, 0, 0)
        assert can_set_percentage(periods, TimePeriod.AFTERNOON, 20) is False
        assert can_set_percentage(periods, TimePeriod.MORNING, 80) is False

    def test_completed_task_can_raise_a_period(self):
        periods = PeriodProgress.of(100, 50, 0, 0)
        assert can_set_percentage(periods, TimePeriod.AFTERNOON, 80) is True
        assert can_set_percentage(periods, "night", 0) is True

    def test_missing_record_is_unlocked(self):
        assert can_set_percentage(None, TimePeriod.NIGHT, 0) is True


class TestValidation:
    @pytest.mark.parametrize("value", VALID_PERCENTAGES)
    def test_valid_percentages_pass(self, value):
        assert validate_percentage(value) == value

    @pytest.mark.parametrize("value", [5, 30, 101, -10, "50", True, None])
    def test_invalid_percentages_raise(self, value):
        with pytest.raises(InvalidProgressError):
            validate_percentage(value)

    def test_period_names(self):
        assert validate_period("evening") is TimePeriod.EVENING

    def test_unknown_period_raises(self):
        with pytest.raises(InvalidProgressError, match="Invalid time period"):
            validate_period("noon")


class TestLabels:
    @pytest.mark.parametrize(
        ("percentage", "label"),
        [(100, "Complete"), (80, "Almost There"), (50, "Good Progress"), (20, "Getting Started"), (10, "Not Started")],
    )
    def test_percentage_label(self, percentage, label):
        assert percentage_label(percentage) == label

    @pytest.mark.parametrize(
        ("hour", "period"),
        [(6, TimePeriod.MORNING), (11, TimePeriod.MORNING), (12, TimePeriod.AFTERNOON), (18, TimePeriod.EVENING), (22, TimePeriod.NIGHT), (3, TimePeriod.NIGHT)],
    )
    def test_current_time_period(self, hour, period):
        assert current_time_period(hour) is period
