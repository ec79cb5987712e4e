# ♥♥─── Generic Vault ────────────────────────────────────────────────────────────
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, Literal, TypeVar
from datetime import UTC, datetime, timedelta

from sqlmodel import Session, col, func, select
from sqlalchemy import or_, event, create_engine

from dailytask.ui import icons
from dailytask.core.models import ContentMetadata, DailyTaskSQLModel
from dailytask.custom_logger import log


if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

T_Model = TypeVar("T_Model", bound=DailyTaskSQLModel)
T_Collection = TypeVar("T_Collection")
SaveStrategy = Literal["smart", "force_recreate"]


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo; stored timestamps are UTC."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


# ─── Base Vault ───────────────────────────────────────────────────────────────
class BaseVault(ABC, Generic[T_Collection]):
    """Base class for vault implementations, providing common database operations.

    :param vault_name: The name of this vault instance.
    :param cache_time: How long vault data counts as fresh.
    :param db_url: The database connection URL.
    :param echo: If True, SQLAlchemy will log all generated SQL.
    :ivar engine: The SQLAlchemy engine for database connections.
    :ivar vault_name: The name of this vault instance.
    :ivar timeout: The cache time for the vault in timedelta.
    """

    def __init__(self, vault_name: str, cache_time: timedelta, db_url: str, echo: bool = False) -> None:
        """Initialize the database engine and create tables if they don't exist."""
        self.engine: Engine = create_engine(db_url, echo=echo)
        self.vault_name: str = vault_name
        self.timeout: timedelta = cache_time
        DailyTaskSQLModel.metadata.create_all(self.engine)
        self._configure_datetime_handling()
        log.debug("[i]{} vault[/i] initialized {}{}", vault_name, icons.HISTORY, cache_time)

    @abstractmethod
    def save(self, content: T_Collection, strategy: SaveStrategy = "smart") -> bool:
        """Save content to the database.

        :param content: The content to save.
        :param strategy: "smart" (sync with changes) or "force_recreate" (delete then insert).
        :returns: True if anything was written.
        """

    @abstractmethod
    def get_model_configs(self) -> dict[str, type[DailyTaskSQLModel]]:
        """Return a mapping of content names to their SQLModel classes.

        :returns: A dictionary mapping content names to SQLModel classes.
        """

    # ─── Metadata ──────────────────────────────────────────────────────────────
    @staticmethod
    def _update_metadata(session: Session, name: str) -> None:
        """Upsert the metadata record for a given content type.

        :param session: The active database session.
        :param name: The name of the content type.
        """
        session.merge(ContentMetadata(type=name, last_fetched_at=datetime.now(UTC)))

    def _update_vault_metadata(self, session: Session) -> None:
        """Update the vault-level metadata timestamp.

        :param session: The active database session.
        """
        self._update_metadata(session, self.vault_name)
        log.debug("Updated vault-level metadata for {}", self.vault_name)

    def get_metadata(self, content_type: str) -> ContentMetadata | None:
        """Retrieve metadata for a specific content type.

        :param content_type: The type of content to retrieve metadata for.
        :returns: The ContentMetadata object or None if not found.
        """
        with Session(self.engine) as session:
            return session.get(ContentMetadata, content_type)

    def get_vault_last_updated(self) -> datetime | None:
        """Get the timestamp of the last vault-level update.

        :returns: The datetime of the last update, or None if no vault metadata exists.
        """
        vault_metadata = self.get_metadata(self.vault_name)
        if vault_metadata is None or vault_metadata.last_fetched_at is None:
            return None
        return _as_utc(vault_metadata.last_fetched_at)

    def get_vault_age(self) -> timedelta | None:
        """Get the age of the entire vault.

        :returns: The age as a timedelta, or None if no vault metadata exists.
        """
        last_updated = self.get_vault_last_updated()
        return None if last_updated is None else datetime.now(UTC) - last_updated

    def is_vault_fresh(self) -> bool:
        """Check if the vault data is considered fresh based on its `cache_time`.

        :returns: True if the vault is fresh and contains data, False otherwise.
        """
        age = self.get_vault_age()
        if age is None:
            log.debug("{} vault has no metadata - not fresh", self.vault_name)
            return False
        if sum(self.get_stats().values()) == 0:
            log.debug("{} vault has metadata but no records - not fresh", self.vault_name)
            return False
        is_fresh = age < self.timeout
        log.debug("Vault freshness check: age={} timeout={} fresh={}", age, self.timeout, is_fresh)
        return is_fresh

    # ─── Counting & Integrity ──────────────────────────────────────────────────
    def count(self, model_cls: type[T_Model]) -> int:
        """Return the total number of records for a model.

        :param model_cls: The SQLModel class to count.
        :returns: The total number of records.
        """
        with Session(self.engine) as session:
            return session.exec(select(func.count(col(model_cls.id)))).one()  # type: ignore[attr-defined]

    def get_stats(self) -> dict[str, int]:
        """Return record counts for all configured model types.

        :returns: Content type names suffixed with '_count' mapped to their counts.
        """
        return {f"{name}_count": self.count(model_cls) for name, model_cls in self.get_model_configs().items()}

    def validate_data_integrity(self) -> list[str]:
        """Check for empty and duplicate IDs.

        :returns: A list of issues found. Empty if no issues.
        """
        issues: list[str] = []
        with Session(self.engine) as session:
            for name, model_cls in self.get_model_configs().items():
                id_column = col(model_cls.id)  # type: ignore[attr-defined]
                invalid_items = list(session.exec(select(model_cls).where(or_(id_column.is_(None), id_column == ""))).all())  # noqa: PLC1901
                if invalid_items:
                    issues.append(f"[{name}] Found {len(invalid_items)} items with empty/null IDs")
                duplicates = list(session.exec(select(id_column, func.count(id_column)).group_by(id_column).having(func.count(id_column) > 1)).all())
                if duplicates:
                    issues.append(f"[{name}] Found {len(duplicates)} duplicate IDs")
        if issues:
            log.warning("Data integrity check found {} issues", len(issues))
            for issue in issues:
                log.warning(" • {}", issue)
        else:
            log.debug("Data integrity check passed")
        return issues

    def _configure_datetime_handling(self) -> None:
        """Configure the engine to handle datetime, especially for SQLite."""

        @event.listens_for(self.engine, "connect")
        def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:  # noqa: ARG001
            if "sqlite" in str(self.engine.url):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA timezone = 'UTC'")
                cursor.close()
