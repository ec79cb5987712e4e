# ♥♥─── Tracker Client ───────────────────────────────────────────────────────────
"""Define the main `TrackerClient` class, which integrates all API functionalities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dailytask.custom_logger import log

from .tracker_api import TrackerAPI
from .mixin.habit_mixin import HabitMixin
from .mixin.notes_mixin import NotesMixin
from .mixin.streak_mixin import StreakMixin
from .mixin.progress_mixin import ProgressMixin


if TYPE_CHECKING:
    import httpx

    from dailytask.config import ApiSettings


class TrackerClient(
    TrackerAPI,
    HabitMixin,
    ProgressMixin,
    StreakMixin,
    NotesMixin,
):
    """A comprehensive, asynchronous tracker API client."""

    def __init__(self, settings: ApiSettings | None = None, *, token: str | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialize the full TrackerClient.

        :param settings: Connection settings, defaulting to the application settings.
        :param token: Bearer token overriding the configured one.
        :param transport: Custom httpx transport, used by tests.
        """
        super().__init__(settings, token=token, transport=transport)

        log.debug("TrackerClient fully initialized with all mixins.")
