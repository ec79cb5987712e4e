# ♥♥─── Client Init ──────────────────────────────────────────────────────────────
from __future__ import annotations

from .api_models import TrackerAPIError, HabitOperationError, NotesOperationError, ProgressOperationError
from .tracker_api import TrackerAPI
from .request_stats import RequestExecutionStats
from .tracker_client import TrackerClient


__all__ = [
    "HabitOperationError",
    "NotesOperationError",
    "ProgressOperationError",
    "RequestExecutionStats",
    "TrackerAPI",
    "TrackerAPIError",
    "TrackerClient",
]
