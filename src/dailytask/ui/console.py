# ♥♥─── Global Console and Utilities ───────────────────────────────────────────
from __future__ import annotations

from enum import Enum
from typing import Any

from rich.traceback import install as install_rich_traceback

from .theme_manager import ConsoleManager
from .themed_icons import Icons, ThemedIcons


# ─── Definitions ─────────────────────────────────────────────────────────────
class IconStyle(str, Enum):
    """Enumeration for available icon styles."""

    NERD = "nerd"
    ASCII = "ascii"


# ─── Initialization ────────────────────────────────────────────────────────────
theme_manager = ConsoleManager()
console = theme_manager.create_console("rose_pine")
icons = Icons.nerd

install_rich_traceback(console=console, show_locals=False, word_wrap=True, extra_lines=3, suppress=[])


# ─── Core Functions ────────────────────────────────────────────────────────────
def switch_theme(name: str) -> None:
    """Switch the active console theme in place."""
    if name not in theme_manager.get_available_themes():
        available = theme_manager.get_available_themes()
        msg = f"Theme '{name}' not found. Available: {available}"
        raise ValueError(msg)

    console.push_theme(theme_manager.create_theme(name))


def switch_icons(style: IconStyle) -> None:
    """Switch the active icon set."""
    global icons  # noqa: PLW0603

    icons = Icons.ascii if style == IconStyle.ASCII else Icons.nerd


# ─── Console Utilities ─────────────────────────────────────────────────────────
def print(*args: Any, **kwargs: Any) -> None:  # noqa: A001
    """Print to the console using Rich."""
    console.print(*args, **kwargs)


def clear() -> None:
    """Clear the console screen."""
    console.clear()


def current_icons() -> ThemedIcons:
    """The icon set selected by :func:`switch_icons`."""
    return icons
