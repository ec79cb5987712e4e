# ♥♥─── Model Enums ────────────────────────────────────────────────────
from __future__ import annotations

from enum import StrEnum


class TaskType(StrEnum):
    """How long a task stays on the board."""

    ONGOING = "ongoing"
    DAILY = "daily"


class TimePeriod(StrEnum):
    """The four fixed windows of a day, in display order."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"

    @property
    def label(self) -> str:
        """Capitalised name for display."""
        return self.value.capitalize()


class TaskStatus(StrEnum):
    """Three-tier display status of a task on one day."""

    FULLY_COMPLETED = "fully_completed"
    IN_PROGRESS = "in_progress"
    NOT_STARTED = "not_started"


class Goal(StrEnum):
    """Cadence a habit is aiming for."""

    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"


class StoreState(StrEnum):
    """Lifecycle of the progress map for the selected date."""

    IDLE = "idle"
    FETCH_IN_FLIGHT = "fetch_in_flight"
    LOADED = "loaded"


class StreakType(StrEnum):
    """Kind of streak snapshot kept by the server."""

    ACTIVE = "active"
    ENDED = "ended"
    ARCHIVED = "archived"


class InsightKind(StrEnum):
    """Tone of a daily insight message."""

    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


class NoticeLevel(StrEnum):
    """Severity of a user-facing notice."""

    SUCCESS = "success"
    ERROR = "error"


TIME_PERIODS: tuple[TimePeriod, ...] = tuple(TimePeriod)
