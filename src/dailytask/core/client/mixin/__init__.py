# ♥♥─── API Client Mixins Initialization ─────────────────────────────────────────
from __future__ import annotations

from .habit_mixin import HabitMixin
from .notes_mixin import NotesMixin
from .streak_mixin import StreakMixin
from .progress_mixin import ProgressMixin


__all__ = ["HabitMixin", "NotesMixin", "ProgressMixin", "StreakMixin"]
