# ♥♥─── UI Init ──────────────────────────────────────────────────────────────
from __future__ import annotations

from .console import IconStyle, clear, print, console, current_icons, switch_icons, switch_theme  # noqa: A004
from .themed_icons import icons


__all__ = ["IconStyle", "clear", "console", "current_icons", "icons", "print", "switch_icons", "switch_theme"]
