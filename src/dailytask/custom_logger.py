# ♥♥─── Global Application Logger Configuration ───────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING, Any
from pathlib import Path
from functools import wraps
import inspect
import logging

from loguru import logger

from rich.text import Text

from .ui.console import console


if TYPE_CHECKING:
    from collections.abc import Callable

# ─── Configuration ─────────────────────────────────────────────────────────────

LEVEL_CONFIG: dict[str, dict[str, str]] = {
    "TRACE": {"icon": "󱐋", "color": "#908caa"},
    "DEBUG": {"icon": "󱏿", "color": "#6e6a86"},
    "INFO": {"icon": "󰫍", "color": "#31748f"},
    "SUCCESS": {"icon": "󰸞", "color": "#9ccfd8"},
    "WARNING": {"icon": "󱍢", "color": "#f6c177"},
    "ERROR": {"icon": "󱎘", "color": "#eb6f92"},
    "CRITICAL": {"icon": "󰚌", "color": "#eb6f92"},
}

NOISY_LIBRARIES: tuple[str, ...] = ("httpx", "httpcore", "sqlalchemy.engine", "asyncio")


# ─── Utility Functions ─────────────────────────────────────────────────────────


def get_project_root() -> Path:
    """Discover the project root directory by searching for marker files."""
    current_path = Path.cwd()
    for parent in [current_path, *current_path.parents]:
        if any((parent / marker).exists() for marker in ["pyproject.toml", ".git"]):
            return parent
    return current_path


def get_log_dir() -> Path:
    """Get or create the directory for application logs."""
    log_directory = get_project_root() / "app_data" / "logs"
    log_directory.mkdir(parents=True, exist_ok=True)
    return log_directory


# ─── Logger Class ──────────────────────────────────────────────────────────────


class MinimalLogger:
    """A minimalist logger class encapsulating Loguru configuration."""

    def __init__(self) -> None:
        """Initialize the MinimalLogger without touching the filesystem."""
        self._configured: bool = False
        self.console: Any = console
        self.path: Path | None = None

    def setup(
        self,
        console_level: str = "INFO",
        file_level: str = "DEBUG",
        log_file: str | None = "dailytask.log",
        rotation: str = "10 MB",
        retention: str = "7 days",
    ) -> None:
        """
        Configure Loguru sinks for console and file output.

        Calling it again replaces the previous sinks, so the CLI can raise the
        console level after the import-time defaults were applied.

        :param console_level: Minimum level for console output (e.g., "INFO", "DEBUG")
        :param file_level: Minimum level for file output
        :param log_file: Name of the log file, or None to disable the file sink
        :param rotation: Rotation policy (e.g., "10 MB", "daily")
        :param retention: Log file retention policy (e.g., "7 days", "1 month")
        """
        logger.remove()

        logger.add(
            sink=self._console_sink,  # type: ignore
            level=console_level,
            format="{time:HH:mm:ss}|{module}|{level.name}|{message}",
            colorize=True,
            backtrace=False,
            diagnose=False,
        )  # type: ignore

        if log_file is not None:
            self.path = get_log_dir()
            logger.add(
                sink=self.path / log_file,
                level=file_level,
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
                backtrace=True,
                diagnose=False,
                rotation=rotation,
                retention=retention,
                compression="zip",
                encoding="utf-8",
            )

        self._setup_stdlib_logging()
        self._configured = True

    def _console_sink(self, message: Any) -> None:
        """Render a single record on the Rich console."""
        record = message.record
        level_name = record["level"].name
        level_config = LEVEL_CONFIG.get(level_name, {"icon": "•", "color": "white"})
        level_style = f"log.level.{level_name.lower()}"

        try:
            message_part = Text.from_markup(record["message"], style=level_style)
        except Exception:  # noqa: BLE001
            # Messages carrying user data may contain stray brackets.
            message_part = Text(record["message"], style=level_style)

        self.console.print(
            Text(record["time"].strftime("%H:%M:%S"), style="log.time"),
            Text("|", style="log.separator"),
            Text(record["module"], style="log.module"),
            Text(f"{level_config['icon']:<2}", style=level_style),
            message_part,
            sep=" ",
            end="\n",
        )

    def _setup_stdlib_logging(self) -> None:
        """Integrate standard Python logging with Loguru."""

        class LoguruHandler(logging.Handler):
            """Routes standard logging messages through Loguru."""

            def emit(self, record: logging.LogRecord) -> None:
                """Emit a log record."""
                try:
                    level: str | int = logger.level(record.levelname).name
                except ValueError:
                    level = record.levelno

                frame = logging.currentframe()
                depth = 2
                while frame and frame.f_code.co_filename == logging.__file__:
                    frame = frame.f_back
                    depth += 1

                logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())

        logging.basicConfig(handlers=[LoguruHandler()], level=0, force=True)

        for name in NOISY_LIBRARIES:
            logging.getLogger(name).setLevel(logging.WARNING)


# ─── Global Logger Instance and Helper Functions ───────────────────────────────

logger_instance = MinimalLogger()


def setup_logging(
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_file: str | None = "dailytask.log",
    **kwargs: str,
) -> None:
    """
    Initialize the global logger instance.

    :param console_level: Minimum level for console output
    :param file_level: Minimum level for file output
    :param log_file: Name of the log file, or None for console only
    :param kwargs: Additional keyword arguments for Loguru setup (e.g., rotation, retention)
    """
    logger_instance.setup(console_level, file_level, log_file, **kwargs)


def get_logger() -> Any:
    """Get the configured Loguru logger instance."""
    return logger


def logged(func: Callable) -> Callable:
    """Return a decorator to log function calls and their completion/errors.

    Coroutine functions are awaited inside the wrapper so completion is
    logged after the result is available.

    :param func: The function to be decorated
    :returns: The wrapped function
    """
    func_name = f"[i white]{func.__module__}.{func.__name__}[/i white]"

    if inspect.iscoroutinefunction(func):

        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            logger.debug("→ Calling {}", func_name)
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error("Error in {}: {}", func_name, e)
                raise
            logger.debug("{}  Completed {}", LEVEL_CONFIG["INFO"]["icon"], func_name)
            return result

        return async_wrapper

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger.debug("→ Calling {}", func_name)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error("Error in {}: {}", func_name, e)
            raise
        logger.debug("{}  Completed {}", LEVEL_CONFIG["INFO"]["icon"], func_name)
        return result

    return wrapper


if not logger_instance._configured:  # noqa: SLF001
    setup_logging(log_file=None)
log = logger
