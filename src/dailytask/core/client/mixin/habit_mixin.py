# ♥♥─── Habit API Methods Mixin ───────────────────────────────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar, cast

from dailytask.core.models import Habit, HabitCreate, HabitUpdate
from dailytask.custom_logger import log
from dailytask.core.client.api_models import HabitOperationError, _validate_not_empty_param


if TYPE_CHECKING:
    from dailytask.core.client.api_models import T_PydanticModel, SuccessfulResponseData


T_Payload = TypeVar("T_Payload", HabitCreate, HabitUpdate)


def _coerce_payload(payload: T_Payload | dict[str, Any], model_cls: type[T_Payload]) -> T_Payload:
    """Validate a dict payload into its model so bad input fails before any request."""
    if isinstance(payload, model_cls):
        return payload
    if isinstance(payload, dict):
        try:
            return model_cls.model_validate(payload)
        except ValueError as e:
            msg = f"Invalid habit payload: {e}"
            raise HabitOperationError(msg) from e
    msg = f"Habit payload must be a {model_cls.__name__} or dict, got {type(payload).__name__}."
    raise HabitOperationError(msg)


class HabitMixin:
    """A mixin class that provides methods for managing habits via the tracker API."""

    if TYPE_CHECKING:

        async def get(self, api_endpoint: str, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | Any: ...
        async def post(self, api_endpoint: str, data: Any | None = None, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | Any: ...
        async def put(self, api_endpoint: str, data: Any | None = None, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | Any: ...
        async def delete(self, api_endpoint: str, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | Any: ...

    async def get_habits(self) -> list[Habit]:
        """Fetch the active habits of the user, in board order.

        :return: The habits, sorted by ``order`` as the server returns them.
        """
        result = await self.get("habits", parse_to_model=Habit)
        habits = cast("list[Habit]", result or [])
        log.debug("Fetched {} habits.", len(habits))
        return habits

    async def create_habit(self, payload: HabitCreate | dict[str, Any]) -> Habit:
        """Create a habit.

        :param payload: The new habit, as a model or dict.
        :return: The created habit.
        :raises HabitOperationError: If the payload is invalid.
        """
        body = _coerce_payload(payload, HabitCreate)
        return cast("Habit", await self.post("habits", data=body, parse_to_model=Habit))

    async def update_habit(self, habit_id: str, payload: HabitUpdate | dict[str, Any]) -> Habit:
        """Update a habit by its ID.

        :param habit_id: The ID of the habit to update.
        :param payload: Fields to change.
        :return: The updated habit.
        :raises HabitOperationError: If the ID is empty or the payload is empty or invalid.
        """
        _validate_not_empty_param(habit_id, "Habit ID")
        body = _coerce_payload(payload, HabitUpdate)
        if not body.model_fields_set:
            msg = "Update payload cannot be empty."
            raise HabitOperationError(msg)
        return cast("Habit", await self.put(f"habits/{habit_id}", data=body, parse_to_model=Habit))

    async def delete_habit(self, habit_id: str) -> bool:
        """Soft-archive a habit by its ID.

        :param habit_id: The ID of the habit to delete.
        :return: True once the server acknowledged the deletion.
        :raises HabitOperationError: If the ID is empty.
        """
        _validate_not_empty_param(habit_id, "Habit ID")
        result = await self.delete(f"habits/{habit_id}")
        log.debug("Delete habit {} -> {}", habit_id, result)
        return True
