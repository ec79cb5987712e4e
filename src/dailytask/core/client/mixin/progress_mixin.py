# ♥♥─── Progress API Methods Mixin ────────────────────────────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from dailytask.utils import to_date_key, parse_date_key
from dailytask.core.models import (
    StatsSummary,
    ProgressUpdate,
    DailyProgressEntry,
    InvalidProgressError,
    DailyProgressResponse,
    validate_period,
    validate_percentage,
)
from dailytask.core.client.api_models import ProgressOperationError, _validate_not_empty_param


if TYPE_CHECKING:
    from dailytask.utils import DateLike
    from dailytask.core.models import TimePeriod
    from dailytask.core.client.api_models import T_PydanticModel, SuccessfulResponseData


def _normalize_date_key(value: DateLike) -> str:
    """Turn a date-like value into a validated ``YYYY-MM-DD`` key.

    :raises ProgressOperationError: If the value is not a real calendar day.
    """
    try:
        key = to_date_key(value)
        parse_date_key(key)
    except (TypeError, ValueError) as e:
        msg = f"Invalid date {value!r}. Use YYYY-MM-DD"
        raise ProgressOperationError(msg) from e
    return key


def _validate_year_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:  # noqa: PLR2004
        msg = f"Month must be between 1 and 12, got {month}."
        raise ProgressOperationError(msg)
    if year < 1970:  # noqa: PLR2004
        msg = f"Year {year} is out of range."
        raise ProgressOperationError(msg)


class ProgressMixin:
    """A mixin class that provides methods for reading and recording progress."""

    if TYPE_CHECKING:

        async def get(self, api_endpoint: str, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | Any: ...
        async def post(self, api_endpoint: str, data: Any | None = None, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | Any: ...

    async def get_daily_progress(self, day: DateLike) -> DailyProgressResponse:
        """Fetch every task's period values for one day.

        :param day: The calendar day.
        :return: The server response, including the date it reports.
        :raises ProgressOperationError: If the date is invalid.
        """
        date_key = _normalize_date_key(day)
        result = await self.get(f"progress/daily/{date_key}", parse_to_model=DailyProgressResponse)
        return cast("DailyProgressResponse", result or DailyProgressResponse(date=date_key))

    async def update_daily_progress(self, habit_id: str, day: DateLike, period: TimePeriod | str, percentage: int) -> DailyProgressEntry:
        """Record one period value of one task.

        :param habit_id: The task to update.
        :param day: The calendar day being recorded.
        :param period: The time period.
        :param percentage: One of the selectable percentages.
        :return: The stored row as echoed by the server.
        :raises ProgressOperationError: If any argument is invalid.
        """
        _validate_not_empty_param(habit_id, "Habit ID", ProgressOperationError)
        try:
            body = ProgressUpdate(habit_id=habit_id, date=_normalize_date_key(day), time_period=validate_period(period), percentage=validate_percentage(percentage))
        except InvalidProgressError as e:
            raise ProgressOperationError(str(e)) from e
        return cast("DailyProgressEntry", await self.post("progress/daily", data=body, parse_to_model=DailyProgressEntry))

    async def get_weekly_progress(self, week_start: DateLike) -> dict[str, Any]:
        """Fetch the weekly roll-up starting at ``week_start``.

        :param week_start: First day of the week.
        :return: The raw weekly payload.
        """
        date_key = _normalize_date_key(week_start)
        return cast("dict[str, Any]", await self.get(f"progress/weekly/{date_key}") or {})

    async def get_monthly_overview(self, year: int, month: int) -> dict[str, Any]:
        """Fetch the monthly overview used by the calendar view.

        :param year: Four-digit year.
        :param month: Month number, 1 to 12.
        :return: The raw monthly payload.
        """
        _validate_year_month(year, month)
        return cast("dict[str, Any]", await self.get(f"progress/monthly-overview/{year}/{month}") or {})

    async def get_monthly_progress(self, year: int, month: int) -> dict[str, Any]:
        """Fetch the month's habits and progress rows (``GET /progress/:year/:month``).

        :param year: Four-digit year.
        :param month: Month number, 1 to 12.
        :return: ``{habits, progressData, daysInMonth, year, month}``.
        """
        _validate_year_month(year, month)
        return cast("dict[str, Any]", await self.get(f"progress/{year}/{month}") or {})

    async def get_stats(self) -> StatsSummary:
        """Fetch the server-side summary for today.

        :return: The statistics summary.
        """
        result = await self.get("progress/stats", parse_to_model=StatsSummary)
        return cast("StatsSummary", result or StatsSummary())
