# ♥♥─── Console Style Manager ────────────────────────────────────────────────────
from __future__ import annotations

import json
from pathlib import Path

from loguru import logger as log

from rich.style import Style
from rich.theme import Theme
from rich.console import Console


# ─── Configuration & Types ─────────────────────────────────────────────────────

ThemeData = dict[str, str]
StyleMapping = dict[str, Style]

DEFAULT_THEMES_JSON_PATH = Path(__file__).parent / "themes.json"


# ─── Style Mapper ──────────────────────────────────────────────────────────────


class StyleMapper:
	"""Creates rich Style mappings from theme color data."""

	DEFAULT_THEME: dict[str, ThemeData] = {
		"rose_pine": {
			"background": "#191825",
			"brightBlack": "#706e86",
			"blue": "#31748f",
			"cyan": "#ebbcba",
			"green": "#9ccfd8",
			"purple": "#c4a7e7",
			"red": "#eb6f92",
			"white": "#e0def4",
			"yellow": "#f6c177",
		},
	}

	STYLE_FALLBACKS: dict[str, str] = {
		"primary": "bold blue",
		"success": "green",
		"warning": "yellow",
		"error": "red",
		"info": "blue",
		"muted": "dim white",
		"table.header": "bold blue",
		"period.morning": "yellow",
		"period.afternoon": "cyan",
		"period.evening": "magenta",
		"period.night": "blue",
		"log.level.trace": "dim white",
		"log.level.debug": "dim white",
		"log.level.info": "blue",
		"log.level.success": "green",
		"log.level.warning": "yellow",
		"log.level.error": "red",
		"log.level.critical": "bold red",
		"log.time": "dim white",
		"log.separator": "blue",
		"log.module": "dim blue",
	}

	COLOR_MAPPINGS: dict[str, str] = {
		"primary": "purple",
		"success": "green",
		"warning": "yellow",
		"error": "red",
		"info": "blue",
		"muted": "brightBlack",
		"table.header": "purple",
		"period.morning": "yellow",
		"period.afternoon": "cyan",
		"period.evening": "purple",
		"period.night": "blue",
	}

	@staticmethod
	def _get_color(theme_data: ThemeData, key: str, fallback: str = "#888888") -> str:
		"""Get a color value from the theme data."""
		return theme_data.get(key, fallback)

	@classmethod
	def create_styles_from_theme(cls, theme_data: ThemeData) -> StyleMapping:
		"""Create a rich Style mapping from a theme color dictionary."""
		styles: StyleMapping = {}
		bold_styles = {"primary", "error", "table.header"}

		for style_name, color_field in cls.COLOR_MAPPINGS.items():
			color_value = theme_data.get(color_field)
			if not color_value:
				continue
			styles[style_name] = Style(color=color_value, bold=style_name in bold_styles, dim=style_name == "muted")

		styles.update(cls._create_log_styles(theme_data))
		styles.update(cls._create_status_styles(theme_data))
		return styles

	@classmethod
	def _create_log_styles(cls, theme_data: ThemeData) -> StyleMapping:
		"""Create specific styles for logging output."""
		return {
			"log.level.trace": Style(color=cls._get_color(theme_data, "brightBlack"), dim=True),
			"log.level.debug": Style(color=cls._get_color(theme_data, "brightBlack")),
			"log.level.info": Style(color=cls._get_color(theme_data, "blue")),
			"log.level.success": Style(color=cls._get_color(theme_data, "green")),
			"log.level.warning": Style(color=cls._get_color(theme_data, "yellow")),
			"log.level.error": Style(color=cls._get_color(theme_data, "red")),
			"log.level.critical": Style(color=cls._get_color(theme_data, "red"), bold=True),
			"log.time": Style(color=cls._get_color(theme_data, "brightBlack")),
			"log.separator": Style(color=cls._get_color(theme_data, "blue")),
			"log.module": Style(color=cls._get_color(theme_data, "purple"), dim=True),
		}

	@classmethod
	def _create_status_styles(cls, theme_data: ThemeData) -> StyleMapping:
		"""Create styles for task completion states."""
		return {
			"status.fully_completed": Style(color=cls._get_color(theme_data, "green"), bold=True),
			"status.in_progress": Style(color=cls._get_color(theme_data, "yellow")),
			"status.not_started": Style(color=cls._get_color(theme_data, "brightBlack")),
			"toast.success": Style(color=cls._get_color(theme_data, "green")),
			"toast.error": Style(color=cls._get_color(theme_data, "red"), bold=True),
		}


class ConsoleManager:
	"""Manage rich Console instances and their themes."""

	def __init__(self, themes_file_path: Path | None = None) -> None:
		"""Initialize the manager with an optional path to a themes JSON file."""
		self.themes_file_path = themes_file_path or DEFAULT_THEMES_JSON_PATH
		self._themes: dict[str, ThemeData] | None = None

	def _load_themes(self) -> dict[str, ThemeData]:
		"""Load theme definitions from the JSON file, with caching."""
		if self._themes is not None:
			return self._themes

		if not self.themes_file_path.exists():
			self._themes = StyleMapper.DEFAULT_THEME.copy()
			return self._themes

		try:
			data = json.loads(self.themes_file_path.read_text(encoding="utf-8"))
		except (OSError, json.JSONDecodeError) as e:
			log.error("Error reading theme file {}: {}", self.themes_file_path, e)
			self._themes = StyleMapper.DEFAULT_THEME.copy()
			return self._themes

		raw_themes = data.get("themes", data)
		all_themes = {key: value.get("colors", value) for key, value in raw_themes.items() if isinstance(value, dict)}
		if not all_themes:
			log.warning("No valid themes found in JSON, using default.")
			all_themes = StyleMapper.DEFAULT_THEME.copy()

		self._themes = all_themes
		return self._themes

	def create_theme(self, theme_name: str) -> Theme:
		"""Create a rich Theme object from a loaded theme name."""
		theme_data = self._load_themes().get(theme_name)

		if not theme_data:
			log.warning("Theme '{}' not found, using fallbacks.", theme_name)
			return Theme({name: Style.parse(style) for name, style in StyleMapper.STYLE_FALLBACKS.items()})

		styles = StyleMapper.create_styles_from_theme(theme_data)
		for style_name, fallback in StyleMapper.STYLE_FALLBACKS.items():
			styles.setdefault(style_name, Style.parse(fallback))

		return Theme(styles)

	def create_console(self, theme_name: str = "rose_pine") -> Console:
		"""Create a new rich Console with the specified theme."""
		return Console(
			theme=self.create_theme(theme_name),
			color_system="auto",
			highlight=False,
			markup=True,
			soft_wrap=True,
		)

	def get_available_themes(self) -> list[str]:
		"""Return the names of the loaded themes."""
		return list(self._load_themes().keys())
