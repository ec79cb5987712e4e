# ♥♥─── Settings Model ───────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any, Self
from pathlib import Path
from functools import lru_cache

from pydantic import Field, SecretStr, HttpUrl, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@lru_cache
def get_project_root() -> Path:
	"""Detect the project root intelligently."""
	current = Path.cwd()
	for parent in [current, *list(current.parents)]:
		if any((parent / indicator).exists() for indicator in ["pyproject.toml", ".git"]):
			return parent
	return current


root = get_project_root()
app_data = root / "app_data"


@lru_cache
def get_default_env_path() -> Path:
	"""Get the default path for the main environment file."""
	return root / "app_data/config/.env"


# ─── Default Content Constants ────────────────────────────────────────────────
ENV_DEFAULT_CONTENT = """# DailyTask Configuration File
# ─── Tracker API Configuration ─────────────────────────────────────
# TRACKER_BASE_URL=http://localhost:5000/api
# TRACKER_TOKEN=your-jwt-here
# TRACKER_TIMEOUT_SECONDS=10
# TRACKER_MAX_RETRIES=2
# ─── Progress Store ────────────────────────────────────────────────
# STORE_DEBOUNCE_MS=300
# STORE_ROLLOVER_CHECK_SECONDS=30
# STORE_FETCH_TIMEOUT_SECONDS=15
# ─── Statistics ────────────────────────────────────────────────────
# STATS_STREAK_THRESHOLD=50
# STATS_PERIOD_WINDOW_DAYS=7
# ─── Storage Configuration ─────────────────────────────────────────
# STORAGE_DB_DIR=database
# STORAGE_DB_FILENAME=dailytask.db
# STORAGE_HISTORY_CACHE=true
"""


# ─── Configuration Paths Component ────────────────────────────────────────────
class ConfigPaths(BaseSettings):
	"""Optional configuration for application directory structure and file paths."""

	model_config = SettingsConfigDict(
		env_prefix="CONFIG_",
		case_sensitive=False,
		extra="ignore",
		env_file=get_default_env_path(),
	)

	@computed_field
	@property
	def app_data_dir(self) -> Path:
		"""Base directory for all application data storage.

		:return: The path to the application data directory.
		"""
		return app_data

	@computed_field
	@property
	def config_dir(self) -> Path:
		"""Directory containing all configuration files.

		:return: The path to the configuration directory.
		"""
		return self.app_data_dir / "config"

	@computed_field
	@property
	def env_file_path(self) -> Path:
		"""The path to the main .env configuration file.

		:return: The path to the .env file.
		"""
		return self.config_dir / ".env"

	def write_default_env_file(self) -> bool:
		"""Create a commented template .env file if none exists.

		:return: True if a new file was written.
		"""
		if self.env_file_path.exists():
			return False
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.env_file_path.write_text(ENV_DEFAULT_CONTENT, encoding="utf-8")
		return True


# ─── Tracker API Settings ─────────────────────────────────────────────────────
class ApiSettings(BaseSettings):
	"""Connection settings for the tracker REST service."""

	model_config = SettingsConfigDict(
		env_prefix="TRACKER_",
		env_file_encoding="utf-8",
		case_sensitive=False,
		extra="ignore",
		env_file=get_default_env_path(),
	)
	base_url: HttpUrl = Field(
		default="http://localhost:5000/api",
		validate_default=True,
		title="API Base URL",
		description="Root URL of the tracker REST service, including the /api prefix",
		examples=["http://localhost:5000/api"],
	)
	token: SecretStr | None = Field(
		default=None,
		title="Bearer Token",
		description="JWT sent as `Authorization: Bearer <token>`.\nKeep this secret and secure.",
	)
	timeout_seconds: float = Field(
		default=10.0,
		gt=0,
		le=300,
		title="Request Timeout (Seconds)",
		description="Read/write timeout for a single HTTP request",
		examples=[10, 30],
	)
	connect_timeout_seconds: float = Field(
		default=5.0,
		gt=0,
		le=120,
		title="Connect Timeout (Seconds)",
		description="Timeout for establishing the TCP connection",
	)
	max_retries: int = Field(
		default=2,
		ge=0,
		le=10,
		title="Max Retries",
		description="Retries for transport errors and HTTP 429 responses",
	)
	retry_backoff_seconds: float = Field(
		default=0.5,
		ge=0,
		le=60,
		title="Retry Backoff (Seconds)",
		description="Base delay between retries, multiplied by the attempt number",
	)

	@field_validator("token")
	@classmethod
	def blank_token_is_none(cls, v: SecretStr | None) -> SecretStr | None:
		"""Treat an empty token as unset."""
		if v is None or not v.get_secret_value().strip():
			return None
		return v

	@property
	def base_url_str(self) -> str:
		"""Base URL with exactly one trailing slash, as httpx expects for relative joins."""
		return str(self.base_url).rstrip("/") + "/"


# ─── Progress Store Settings ──────────────────────────────────────────────────
class StoreSettings(BaseSettings):
	"""Timing knobs for the progress store."""

	model_config = SettingsConfigDict(
		env_prefix="STORE_",
		env_file_encoding="utf-8",
		case_sensitive=False,
		extra="ignore",
		env_file=get_default_env_path(),
	)
	debounce_ms: int = Field(
		default=300,
		ge=0,
		le=10_000,
		title="Navigation Debounce (ms)",
		description="Quiet period before a navigated-to date is fetched",
	)
	rollover_check_seconds: float = Field(
		default=30.0,
		gt=0,
		le=3600,
		title="Rollover Check Interval (Seconds)",
		description="How often the wall-clock date is compared against the last observed date",
	)
	fetch_timeout_seconds: float = Field(
		default=15.0,
		gt=0,
		le=600,
		title="Fetch Timeout (Seconds)",
		description="Upper bound for one store fetch, retries included",
	)
	top_tasks_limit: int = Field(
		default=5,
		ge=1,
		le=100,
		title="Top Tasks Limit",
		description="Number of tasks returned by the ranking view",
	)

	@property
	def debounce_seconds(self) -> float:
		"""Debounce delay in seconds."""
		return self.debounce_ms / 1000


# ─── Statistics Settings ──────────────────────────────────────────────────────
class StatsSettings(BaseSettings):
	"""Thresholds used by streak and period insights."""

	model_config = SettingsConfigDict(
		env_prefix="STATS_",
		env_file_encoding="utf-8",
		case_sensitive=False,
		extra="ignore",
		env_file=get_default_env_path(),
	)
	streak_threshold: int = Field(
		default=50,
		ge=0,
		le=100,
		title="Streak Threshold (%)",
		description="Minimum daily completion for a day to count toward a streak",
	)
	period_window_days: int = Field(
		default=7,
		ge=1,
		le=365,
		title="Period Window (Days)",
		description="Number of recent days averaged by best/worst period detection",
	)
	period_min_days: int = Field(
		default=3,
		ge=1,
		le=365,
		title="Period Minimum (Days)",
		description="Days of history required before best/worst periods are reported",
	)

	@model_validator(mode="after")
	def _window_covers_minimum(self) -> Self:
		if self.period_min_days > self.period_window_days:
			msg = "STATS_PERIOD_MIN_DAYS must not exceed STATS_PERIOD_WINDOW_DAYS."
			raise ValueError(msg)
		return self


# ─── Storage Configuration ───────────────────────────────────────────────────────────
class StorageSettings(BaseSettings):
	"""Optional configuration for customizing data storage paths and file naming."""

	model_config = SettingsConfigDict(
		env_prefix="STORAGE_",
		env_file_encoding="utf-8",
		case_sensitive=False,
		extra="ignore",
		env_file=get_default_env_path(),
	)
	db_dir: str = Field(
		default="database",
		title="Database Directory Name",
		description="The subdirectory for database",
		min_length=1,
		max_length=255,
		pattern=r"^[a-zA-Z0-9_\-\.]+$",
		examples=["database", "db"],
	)
	db_filename: str = Field(
		default="dailytask.db",
		title="Main Database Filename",
		description="Filename for the history cache database",
		min_length=1,
		max_length=255,
		pattern=r"^[a-zA-Z0-9_\-\.]+\.(db|sqlite|sqlite3)$",
		examples=["dailytask.db", "history.sqlite"],
	)
	history_cache: bool = Field(
		default=True,
		title="History Cache",
		description="Keep fetched progress of elapsed days in the local database",
	)

	def get_database_directory(self) -> Path:
		"""Get the full path to the database directory."""
		return app_data / self.db_dir

	def get_database_file_path(self) -> Path:
		"""Get the full path to the main database file."""
		return self.get_database_directory() / self.db_filename

	def get_database_url(self) -> str:
		"""SQLAlchemy URL of the history database, creating its directory."""
		self.get_database_directory().mkdir(parents=True, exist_ok=True)
		return f"sqlite:///{self.get_database_file_path()}"


# ─── Application Settings ─────────────────────────────────────────────────────
class ApplicationSettings(BaseSettings):
	"""Main application settings model for DailyTask."""

	model_config = SettingsConfigDict(
		case_sensitive=False,
		extra="ignore",
		title="DailyTask Application Configuration",
		env_file=str(get_default_env_path()),
		env_file_encoding="utf-8",
	)
	api: ApiSettings = Field(default_factory=ApiSettings, title="Tracker API Configuration")
	store: StoreSettings = Field(default_factory=StoreSettings, title="Progress Store Configuration")
	stats: StatsSettings = Field(default_factory=StatsSettings, title="Statistics Configuration")
	paths: ConfigPaths = Field(default_factory=ConfigPaths, title="Application Paths Configuration")
	storage: StorageSettings = Field(default_factory=StorageSettings, title="Storage Configuration")

	def is_authenticated(self) -> bool:
		"""Return True if a bearer token is configured."""
		return self.api.token is not None

	def get_configuration_summary(self) -> dict[str, Any]:
		"""Return a summary of the current configuration (excluding sensitive data).

		:return: A dictionary summarizing the configuration.
		"""
		return {
			"env_file": str(self.paths.env_file_path),
			"api_base_url": self.api.base_url_str,
			"api_token_configured": self.is_authenticated(),
			"api_timeout_seconds": self.api.timeout_seconds,
			"api_max_retries": self.api.max_retries,
			"store_debounce_ms": self.store.debounce_ms,
			"store_rollover_check_seconds": self.store.rollover_check_seconds,
			"store_fetch_timeout_seconds": self.store.fetch_timeout_seconds,
			"stats_streak_threshold": self.stats.streak_threshold,
			"stats_period_window_days": self.stats.period_window_days,
			"storage_database": str(self.storage.get_database_file_path()),
			"storage_history_cache": self.storage.history_cache,
		}
