# ♥♥─── API Models ───────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict


# ─── Error Body ────────────────────────────────────────────────────────────────
class TrackerErrorBody(BaseModel):
    """Error body sent by the tracker service (``{"message": ...}`` or validator output)."""

    model_config = ConfigDict(extra="allow")
    message: str | None = None
    errors: list[dict[str, Any]] | None = None

    def describe(self) -> str | None:
        """Best human-readable message in the body."""
        if self.message:
            return self.message
        if self.errors:
            return "; ".join(str(err.get("msg", err)) for err in self.errors)
        return None


# ─── Tracker API Error ────────────────────────────────────────────────────────
class TrackerAPIError(Exception):
    """Custom exception raised for errors originating from the tracker API.

    :param message: The primary error message.
    :param status_code: The HTTP status code of the API response, if available.
    :param error_type: A short classification such as ``"transport"`` or ``"validation"``.
    :param response_data: The raw response data (often a dict) from the API, if available.
    """

    def __init__(self, message: str, status_code: int | None = None, error_type: str | None = None, response_data: Any | None = None) -> None:
        """Initialize a custom exception raised for errors originating from the tracker API."""
        super().__init__(message)
        self.status_code: int | None = status_code
        self.error_type: str | None = error_type
        self.response_data: Any | None = response_data
        self.base_message = message

    def __str__(self) -> str:
        """Return a string representation of the error, including available details."""
        details_parts: list[str] = []
        if self.status_code is not None:
            details_parts.append(f"Status Code: {self.status_code}")
        if self.error_type:
            details_parts.append(f"Error Type: '{self.error_type}'")
        base_error_message = self.args[0] if self.args else "Tracker API Error"
        if details_parts:
            return f"{base_error_message} ({', '.join(details_parts)})"
        return base_error_message

    @property
    def is_unauthorized(self) -> bool:
        """True for HTTP 401, meaning the token is missing or expired."""
        return self.status_code == 401  # noqa: PLR2004


# ─── Type Variables and Aliases ────────────────────────────────────────────────
T_PydanticModel = TypeVar("T_PydanticModel", bound=BaseModel)
SuccessfulResponseData = dict[str, Any] | list[Any] | None


class HabitOperationError(Exception):
    """Custom exception for invalid arguments to habit operations."""


class ProgressOperationError(Exception):
    """Custom exception for invalid arguments to progress operations."""


class NotesOperationError(Exception):
    """Custom exception for invalid arguments to notes operations."""


def _validate_not_empty_param(value: str, param_name: str, error_cls: type[Exception] = HabitOperationError) -> None:
    """Validate that a given ID string is not empty.

    :param value: The string value to validate.
    :param param_name: The name of the parameter for error messages.
    :param error_cls: Exception raised when the value is empty.
    """
    if not value or not value.strip():
        msg = f"{param_name} cannot be empty."
        raise error_cls(msg)
