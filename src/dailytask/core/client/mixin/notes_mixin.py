# ♥♥─── Notes API Methods Mixin ───────────────────────────────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from dailytask.core.models import DailyNotes, MonthlyNotes
from dailytask.core.client.api_models import NotesOperationError

from .progress_mixin import _normalize_date_key


if TYPE_CHECKING:
    from dailytask.utils import DateLike
    from dailytask.core.client.api_models import T_PydanticModel, SuccessfulResponseData

MAX_NOTES_LENGTH = 5000


def _validate_content(content: str) -> None:
    if len(content) > MAX_NOTES_LENGTH:
        msg = f"Notes cannot exceed {MAX_NOTES_LENGTH} characters."
        raise NotesOperationError(msg)


class NotesMixin:
    """A mixin class that provides methods for monthly and daily notes."""

    if TYPE_CHECKING:

        async def get(self, api_endpoint: str, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | Any: ...
        async def put(self, api_endpoint: str, data: Any | None = None, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | Any: ...

    async def get_monthly_notes(self, year: int, month: int) -> MonthlyNotes:
        """Fetch the notes of one month; the server creates an empty record on first read."""
        if not 1 <= month <= 12:  # noqa: PLR2004
            msg = f"Month must be between 1 and 12, got {month}."
            raise NotesOperationError(msg)
        result = await self.get(f"notes/{year}/{month}", parse_to_model=MonthlyNotes)
        return cast("MonthlyNotes", result or MonthlyNotes(year=year, month=month))

    async def save_monthly_notes(self, year: int, month: int, content: str) -> MonthlyNotes:
        """Replace the notes of one month."""
        if not 1 <= month <= 12:  # noqa: PLR2004
            msg = f"Month must be between 1 and 12, got {month}."
            raise NotesOperationError(msg)
        _validate_content(content)
        result = await self.put(f"notes/{year}/{month}", data={"content": content}, parse_to_model=MonthlyNotes)
        return cast("MonthlyNotes", result or MonthlyNotes(year=year, month=month, content=content))

    async def get_daily_notes(self, day: DateLike) -> DailyNotes:
        """Fetch the notes attached to one day."""
        date_key = _normalize_date_key(day)
        result = await self.get(f"notes/daily/{date_key}", parse_to_model=DailyNotes)
        return cast("DailyNotes", result or DailyNotes(date=date_key))

    async def save_daily_notes(self, day: DateLike, content: str) -> DailyNotes:
        """Replace the notes attached to one day."""
        date_key = _normalize_date_key(day)
        _validate_content(content)
        result = await self.put(f"notes/daily/{date_key}", data={"content": content}, parse_to_model=DailyNotes)
        return cast("DailyNotes", result or DailyNotes(date=date_key, content=content))
