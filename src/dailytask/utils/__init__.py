# ♥♥─── Utils Init ───────────────────────────────────────────────────────────────
from __future__ import annotations

from .datetime_handler import (
    DateLike,
    DateTimeHandler,
    week_start,
    local_today,
    to_date_key,
    to_local_date,
    parse_date_key,
    shift_date_key,
)


__all__ = [
    "DateLike",
    "DateTimeHandler",
    "local_today",
    "parse_date_key",
    "shift_date_key",
    "to_date_key",
    "to_local_date",
    "week_start",
]
