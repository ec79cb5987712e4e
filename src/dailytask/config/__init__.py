# ♥♥─── Config Init ──────────────────────────────────────────────────────────────
from __future__ import annotations

from .app_config import get_settings, get_application_settings, reset_application_settings
from .app_config_model import ApiSettings, StatsSettings, StoreSettings, StorageSettings, ApplicationSettings


__all__ = [
    "ApiSettings",
    "ApplicationSettings",
    "StatsSettings",
    "StorageSettings",
    "StoreSettings",
    "get_application_settings",
    "get_settings",
    "reset_application_settings",
]
