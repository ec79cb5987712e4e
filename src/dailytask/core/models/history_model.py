# ♥♥─── History Table Models ─────────────────────────────────────────────────────
"""SQLModel rows for elapsed days kept in the local history cache."""

from __future__ import annotations

import datetime

from sqlmodel import Field

from .base_model import DailyTaskSQLModel
from .progress_model import PeriodProgress


def progress_record_id(date_key: str, habit_id: str) -> str:
    """Primary key of one task's row on one day."""
    return f"{date_key}:{habit_id}"


class ProgressRecord(DailyTaskSQLModel, table=True):
    """One task's period values on one elapsed day."""

    __tablename__ = "progress_record"  # type: ignore
    id: str = Field(primary_key=True)
    date_key: str = Field(index=True)
    habit_id: str = Field(index=True)
    morning: int = 0
    afternoon: int = 0
    evening: int = 0
    night: int = 0
    fetched_at: datetime.datetime | None = None

    @classmethod
    def from_periods(cls, date_key: str, habit_id: str, periods: PeriodProgress, fetched_at: datetime.datetime | None = None) -> ProgressRecord:
        """Build the row for ``habit_id`` on ``date_key``."""
        return cls(
            id=progress_record_id(date_key, habit_id),
            date_key=date_key,
            habit_id=habit_id,
            morning=periods.morning,
            afternoon=periods.afternoon,
            evening=periods.evening,
            night=periods.night,
            fetched_at=fetched_at,
        )

    @property
    def periods(self) -> PeriodProgress:
        """The four values as an immutable record."""
        return PeriodProgress.of(self.morning, self.afternoon, self.evening, self.night)
