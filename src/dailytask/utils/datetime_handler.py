# ♥♥─── Datetime Handler ─────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Self
from datetime import UTC, date, tzinfo, datetime, timedelta
import re

from pydantic import Field, BaseModel, ConfigDict, PrivateAttr, computed_field
from dateutil.tz import tzlocal
import dateutil.parser

from dailytask.custom_logger import log


DATE_KEY_FORMAT: str = "%Y-%m-%d"
DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = date | datetime | str


# ─── DateTimeHandler Class ─────────────────────────────────────────────────────


class DateTimeHandler(BaseModel):
    """Handle various datetime formats and provides convenient conversions."""

    model_config = ConfigDict(arbitrary_types_allowed=True)
    MILLISECONDS_TIMESTAMP_THRESHOLD: int = 2_000_000_000

    timestamp: str | datetime | int | float | None = Field(default=None)
    _local_timezone: tzinfo = PrivateAttr(default_factory=tzlocal)

    @computed_field
    @property
    def utc_datetime(self) -> datetime | None:
        """Convert the timestamp to a UTC datetime object."""
        if self.timestamp is None:
            return None

        try:
            if isinstance(self.timestamp, datetime):
                if self.timestamp.tzinfo is None:
                    return self.timestamp.replace(tzinfo=UTC)

                return self.timestamp.astimezone(UTC)

            if isinstance(self.timestamp, int | float):
                ts_seconds = (
                    self.timestamp / 1000
                    if abs(self.timestamp) > self.MILLISECONDS_TIMESTAMP_THRESHOLD
                    else self.timestamp
                )

                return datetime.fromtimestamp(ts_seconds, tz=UTC)

            if isinstance(self.timestamp, str):
                dt_parsed = dateutil.parser.isoparse(self.timestamp)
                return dt_parsed.replace(tzinfo=UTC) if dt_parsed.tzinfo is None else dt_parsed.astimezone(UTC)

        except (ValueError, OverflowError) as e:
            log.warning("Could not parse timestamp '{}': {}", self.timestamp, e)

        return None

    @computed_field
    @property
    def local_datetime(self) -> datetime | None:
        """Convert the UTC datetime to the local timezone."""
        if self.utc_datetime:
            return self.utc_datetime.astimezone(self._local_timezone)

        return None

    @classmethod
    def from_iso(cls, iso_timestamp: str) -> Self:
        """
        Create a DateTimeHandler instance from an ISO 8601 formatted string.

        :param iso_timestamp: ISO 8601 formatted timestamp string.
        :returns: A DateTimeHandler instance.
        """
        return cls(timestamp=iso_timestamp)

    def local_date(self) -> date | None:
        """Calendar day of the handled instant in the local timezone."""
        if self.local_datetime:
            return self.local_datetime.date()

        return None

    @staticmethod
    def get_local_now() -> datetime:
        """
        Get the current datetime in the local timezone.

        :returns: The current datetime in the local timezone.
        """
        return datetime.now(tzlocal())


# ─── Calendar Day Helpers ──────────────────────────────────────────────────────


def to_local_date(value: DateLike) -> date:
    """Normalize a date-like value to a calendar day in the local timezone.

    Plain ``date`` objects and ``YYYY-MM-DD`` keys are taken as-is. Timestamps
    (aware datetimes or ISO strings with a time part) are converted to local
    time before the day is taken, so ``2024-01-05T23:30:00-05:00`` is not
    shifted into the next UTC day.

    :param value: A date, datetime or ISO string.
    :returns: The local calendar day.
    :raises ValueError: If a string cannot be parsed.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tzlocal()).date()
    if isinstance(value, date):
        return value
    if DATE_KEY_PATTERN.match(value):
        return parse_date_key(value)

    local_date = DateTimeHandler.from_iso(value).local_date()
    if local_date is None:
        msg = f"Unparseable date value: {value!r}"
        raise ValueError(msg)
    return local_date


def to_date_key(value: DateLike) -> str:
    """Format a date-like value as the ``YYYY-MM-DD`` wire and cache key."""
    return to_local_date(value).strftime(DATE_KEY_FORMAT)


def parse_date_key(key: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` key.

    :raises ValueError: If the key is malformed or not a real calendar day.
    """
    if not DATE_KEY_PATTERN.match(key):
        msg = f"Invalid date key {key!r}. Use YYYY-MM-DD"
        raise ValueError(msg)
    return datetime.strptime(key, DATE_KEY_FORMAT).date()  # noqa: DTZ007


def local_today() -> date:
    """Today's calendar day in the local timezone."""
    return DateTimeHandler.get_local_now().date()


def shift_date_key(key: str, days: int) -> str:
    """Return the key ``days`` calendar days away from ``key``."""
    return (parse_date_key(key) + timedelta(days=days)).strftime(DATE_KEY_FORMAT)


def week_start(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())
