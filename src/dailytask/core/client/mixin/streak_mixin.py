# ♥♥─── Streak API Methods Mixin ──────────────────────────────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from dailytask.core.models import TopStreak, StreaksResponse, StreakSnapshotRecord
from dailytask.core.client.api_models import _validate_not_empty_param


if TYPE_CHECKING:
    from dailytask.core.client.api_models import T_PydanticModel, SuccessfulResponseData


class StreakMixin:
    """A mixin class that provides methods for streaks and streak history."""

    if TYPE_CHECKING:

        async def get(self, api_endpoint: str, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | Any: ...

    async def get_streaks(self) -> StreaksResponse:
        """Fetch current streaks of every active habit."""
        result = await self.get("streaks", parse_to_model=StreaksResponse)
        return cast("StreaksResponse", result or StreaksResponse())

    async def get_archived_streaks(self) -> list[StreakSnapshotRecord]:
        """Fetch streaks preserved from deleted habits, newest first."""
        return cast("list[StreakSnapshotRecord]", await self.get("streak-history/archived", parse_to_model=StreakSnapshotRecord) or [])

    async def get_top_streaks(self) -> list[TopStreak]:
        """Fetch the ten longest streaks ever recorded, archived habits included."""
        return cast("list[TopStreak]", await self.get("streak-history/top", parse_to_model=TopStreak) or [])

    async def get_habit_streak_history(self, habit_id: str) -> list[StreakSnapshotRecord]:
        """Fetch every streak snapshot of one habit, newest first.

        :param habit_id: The habit to look up.
        """
        _validate_not_empty_param(habit_id, "Habit ID")
        return cast("list[StreakSnapshotRecord]", await self.get(f"streak-history/habit/{habit_id}", parse_to_model=StreakSnapshotRecord) or [])
