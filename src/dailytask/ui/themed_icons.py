# ♥♥─── Themed Icon Provider ───────────────────────────────────────────────────
from __future__ import annotations

from enum import StrEnum


class IconName(StrEnum):
    """Nerd-font glyphs used by the console output."""

    CHECK = "󰄬"
    ERROR = "󰅚"
    INFO = "󰋼"
    WARNING = "󰀦"
    BUG = "󰃤"
    HISTORY = "󰋚"
    CALENDAR = "󰃭"
    FIRE = "󰈸"
    TROPHY = "󰔸"
    STAR = "󰓎"
    SUN = "󰖙"
    SUNSET = "󰖛"
    MOON = "󰽥"
    CLOCK = "󰥔"
    ROCKET = "󰑣"
    PROGRESS_FULL = "󰪥"
    PROGRESS_HALF = "󰪟"
    PROGRESS_EMPTY = "󰝦"
    DATABASE = "󰆼"


class ThemedIcons:
    """Attribute access to icons, with a plain-text fallback set for dumb terminals."""

    ASCII_FALLBACKS: dict[str, str] = {
        "CHECK": "[x]",
        "ERROR": "!!",
        "INFO": "i",
        "WARNING": "!",
        "PROGRESS_FULL": "●",
        "PROGRESS_HALF": "◐",
        "PROGRESS_EMPTY": "○",
    }

    def __init__(self, ascii_only: bool = False) -> None:
        """Initialize the icon set."""
        self.ascii_only = ascii_only

    def __getattr__(self, name: str) -> str:
        """Retrieve an icon by its name."""
        if name not in IconName.__members__:
            msg = f"Icon '{name}' not found. Available: {sorted(IconName.__members__)}"
            raise AttributeError(msg)
        if self.ascii_only:
            return self.ASCII_FALLBACKS.get(name, "•")
        return IconName[name].value


class Icons:
    """Provide easy access to pre-configured icon sets."""

    nerd = ThemedIcons(ascii_only=False)
    ascii = ThemedIcons(ascii_only=True)


icons = Icons.nerd
