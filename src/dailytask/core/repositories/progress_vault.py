# ♥♥─── Progress Vault ───────────────────────────────────────────────────────────
"""SQLite cache of elapsed days.

An elapsed day's values only change through an explicit update, so a day
fetched once can be read back from disk. Today (and anything later) is never
stored because it is still changing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from datetime import UTC, datetime, timedelta

from sqlmodel import Session, col, select
from sqlalchemy import delete

from dailytask.ui import icons
from dailytask.utils import local_today, to_date_key
from dailytask.config import get_settings
from dailytask.core.models import ProgressMap, ContentMetadata, ProgressRecord
from dailytask.custom_logger import log

from .base_vault import BaseVault, SaveStrategy


if TYPE_CHECKING:
    from datetime import date
    from collections.abc import Callable

    from dailytask.config import StorageSettings
    from dailytask.core.models import DailyTaskSQLModel


HISTORY_CACHE_TIME = timedelta(days=1)
DAY_METADATA_PREFIX = "progress:"


def _day_metadata_name(date_key: str) -> str:
    return f"{DAY_METADATA_PREFIX}{date_key}"


class ProgressVault(BaseVault[ProgressMap]):
    """Vault of per-day progress maps for days that have already ended."""

    def __init__(
        self,
        vault_name: str = "progress_vault",
        db_url: str | None = None,
        storage: StorageSettings | None = None,
        clock: Callable[[], date] | None = None,
        echo: bool = False,
    ) -> None:
        """Initialize the vault.

        :param vault_name: The name of this vault instance.
        :param db_url: The database connection URL (defaults to the configured SQLite file).
        :param storage: Storage settings used to build the default URL.
        :param clock: Returns the local calendar day; replaced in tests.
        :param echo: If True, SQLAlchemy will log all generated SQL.
        """
        if db_url is None:
            db_url = (storage or get_settings().storage).get_database_url()
        self._clock = clock or local_today
        super().__init__(vault_name=vault_name, cache_time=HISTORY_CACHE_TIME, db_url=db_url, echo=echo)

    def get_model_configs(self) -> dict[str, type[DailyTaskSQLModel]]:
        """Return the mapping of content types to their model classes.

        :return: A dictionary mapping content type names to their SQLModel classes.
        """
        return {"progress": ProgressRecord}

    def is_elapsed(self, date_key: str) -> bool:
        """True for days strictly before today."""
        return date_key < to_date_key(self._clock())

    # ─── Writes ────────────────────────────────────────────────────────────────
    def save(self, content: ProgressMap, strategy: SaveStrategy = "smart") -> bool:
        """Alias of :meth:`save_day`."""
        return self.save_day(content, strategy)

    def save_day(self, progress: ProgressMap, strategy: SaveStrategy = "smart") -> bool:
        """Store the map of one elapsed day.

        An empty map is recorded too, so the day reads back as "fetched, no data".

        :param progress: The day's map.
        :param strategy: "smart" merges rows; "force_recreate" deletes the day's rows first.
        :returns: False if the day has not ended yet and nothing was written.
        """
        date_key = progress.date_key
        if not self.is_elapsed(date_key):
            log.debug("Not caching {}: the day has not ended.", date_key)
            return False

        fetched_at = datetime.now(UTC)
        records = [ProgressRecord.from_periods(date_key, habit_id, periods, fetched_at) for habit_id, periods in progress.entries.items()]
        keep_ids = [record.id for record in records]

        with Session(self.engine) as session:
            stale = delete(ProgressRecord).where(col(ProgressRecord.date_key) == date_key)
            if strategy == "smart" and keep_ids:
                stale = stale.where(col(ProgressRecord.id).not_in(keep_ids))
            session.exec(stale)  # type: ignore[call-overload]
            for record in records:
                session.merge(record)
            self._update_metadata(session, _day_metadata_name(date_key))
            self._update_vault_metadata(session)
            session.commit()

        log.debug("{} Cached {} rows for {}.", icons.DATABASE, len(records), date_key)
        return True

    def forget_day(self, date_key: str) -> bool:
        """Drop one cached day so the next read fetches it again.

        :returns: True if the day was cached.
        """
        with Session(self.engine) as session:
            metadata = session.get(ContentMetadata, _day_metadata_name(date_key))
            session.exec(delete(ProgressRecord).where(col(ProgressRecord.date_key) == date_key))  # type: ignore[call-overload]
            if metadata is not None:
                session.delete(metadata)
            session.commit()
        if metadata is not None:
            log.debug("{} Dropped cached day {}.", icons.DATABASE, date_key)
        return metadata is not None

    def clear(self) -> None:
        """Delete every cached day."""
        with Session(self.engine) as session:
            session.exec(delete(ProgressRecord))  # type: ignore[call-overload]
            session.exec(delete(ContentMetadata).where(col(ContentMetadata.type).startswith(DAY_METADATA_PREFIX)))  # type: ignore[call-overload]
            session.commit()
        log.info("Progress history cache cleared.")

    # ─── Reads ─────────────────────────────────────────────────────────────────
    def has_day(self, date_key: str) -> bool:
        """True if the day was cached, even with no rows."""
        return self.get_metadata(_day_metadata_name(date_key)) is not None

    def load_day(self, date_key: str) -> ProgressMap | None:
        """The cached map of one day, or None if the day was never cached."""
        if not self.has_day(date_key):
            return None
        with Session(self.engine) as session:
            rows = session.exec(select(ProgressRecord).where(col(ProgressRecord.date_key) == date_key)).all()
            return ProgressMap(date_key=date_key, entries={row.habit_id: row.periods for row in rows})

    def cached_days(self, start_key: str, end_key: str) -> list[str]:
        """Keys of cached days in ``[start_key, end_key]``, ascending."""
        lower = _day_metadata_name(start_key)
        upper = _day_metadata_name(end_key)
        with Session(self.engine) as session:
            names = session.exec(
                select(ContentMetadata.type).where(col(ContentMetadata.type) >= lower, col(ContentMetadata.type) <= upper).order_by(col(ContentMetadata.type))
            ).all()
        return [name.removeprefix(DAY_METADATA_PREFIX) for name in names]

    def load_range(self, start_key: str, end_key: str) -> dict[str, ProgressMap]:
        """Cached maps of every cached day in ``[start_key, end_key]``."""
        days = self.cached_days(start_key, end_key)
        result: dict[str, ProgressMap] = {key: ProgressMap.empty(key) for key in days}
        if not days:
            return result
        with Session(self.engine) as session:
            rows = session.exec(select(ProgressRecord).where(col(ProgressRecord.date_key).in_(days))).all()
            for row in rows:
                result[row.date_key] = result[row.date_key].with_entry(row.habit_id, row.periods)
        return result
