# ♥♥─── DailyTask Base Models ──────────────────────────────────────────────────
"""Common Pydantic models and configurations for DailyTask."""

from __future__ import annotations

from typing import Any, Self
import datetime

from humps import camelize
from pydantic import BaseModel, ConfigDict
from sqlmodel import Field, SQLModel


# ─── Common Model Configuration ────────────────────────────────────────────────
DAILYTASK_MODEL_CONFIG = ConfigDict(
    extra="ignore",
    populate_by_name=True,
    alias_generator=camelize,
    arbitrary_types_allowed=True,
    use_enum_values=False,
)

FROZEN_MODEL_CONFIG = ConfigDict(**DAILYTASK_MODEL_CONFIG, frozen=True)


# ─── Base Models ──────────────────────────────────────────────────────────────
class DailyTaskBaseModel(BaseModel):
    """Base Pydantic model with shared project configuration."""

    model_config = DAILYTASK_MODEL_CONFIG

    @classmethod
    def from_api_dict(cls, data: dict[str, Any]) -> Self:
        """Create a model instance from a dictionary.

        :param data: The input dictionary.
        :returns: An instance of the model.
        """
        return cls.model_validate(data)

    def to_api_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, dropping unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class FrozenModel(DailyTaskBaseModel):
    """Immutable variant handed to readers of the store."""

    model_config = FROZEN_MODEL_CONFIG


class DailyTaskSQLModel(SQLModel):
    """Base SQLModel for all database tables."""


# ─── Specific Table Models ────────────────────────────────────────────────────
class ContentMetadata(DailyTaskSQLModel, table=True):
    """Store metadata about fetched content."""

    __tablename__ = "content_metadata"  # type: ignore
    type: str = Field(primary_key=True)
    last_fetched_at: datetime.datetime | None = None
