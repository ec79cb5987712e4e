# ♥♥─── Tracker API Client Core ──────────────────────────────────────────────────
"""Core asynchronous HTTP client for the tracker REST service."""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any, Self, NoReturn
import asyncio

import httpx
from pydantic import BaseModel, ValidationError

from dailytask.config import ApiSettings, get_settings
from dailytask.custom_logger import log

from .api_models import T_PydanticModel, TrackerAPIError, TrackerErrorBody, SuccessfulResponseData
from .request_stats import RequestExecutionStats


if TYPE_CHECKING:
    from collections.abc import Sequence
# ─── Constants ─────────────────────────────────────────────────────────────────
CODE_RATE_LIMIT_EXCEEDED = 429
CODE_SUCCESS_NO_MSG = 204
MAX_RETRY_AFTER_SECONDS = 30.0


# ─── Tracker API ───────────────────────────────────────────────────────────────
def _format_response_data(response_data: Any, response: httpx.Response, parse_to_model: type[T_PydanticModel] | None, normalized_endpoint: str) -> Any:
    """Validate the decoded body into ``parse_to_model`` when one is given.

    A list body is validated item by item.
    """
    if parse_to_model is None or response_data is None:
        return response_data

    try:
        if isinstance(response_data, list):
            return [parse_to_model.model_validate(item) for item in response_data]
        return parse_to_model.model_validate(response_data)
    except ValidationError as model_val_err:
        log.error("Pydantic validation error for target model {} on {}: {}", parse_to_model.__name__, normalized_endpoint, model_val_err.errors(include_input=False))
        raise TrackerAPIError(
            message=f"Failed to validate response data into model {parse_to_model.__name__}: {model_val_err}",
            status_code=response.status_code,
            error_type="validation",
            response_data=response_data,
        ) from model_val_err


class TrackerAPI:
    """Asynchronous base client for the tracker REST API."""

    _client: httpx.AsyncClient | None = None
    api_headers: dict[str, str]
    request_stats: RequestExecutionStats

    def __init__(self, settings: ApiSettings | None = None, *, token: str | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialize the tracker API client.

        :param settings: Connection settings, defaulting to the application settings.
        :param token: Bearer token overriding the configured one.
        :param transport: Custom httpx transport, used by tests.
        """
        self.settings: ApiSettings = settings or get_settings().api
        self.base_api_url: str = self.settings.base_url_str
        self.max_retries: int = self.settings.max_retries
        self.retry_backoff_seconds: float = self.settings.retry_backoff_seconds
        self._transport = transport
        self.api_headers = {"Content-Type": "application/json", "Accept": "application/json"}
        configured_token = self.settings.token.get_secret_value() if self.settings.token else None
        self.set_token(token or configured_token)
        self.request_stats = RequestExecutionStats()
        log.debug("TrackerAPI client initialized. Base URL: {}", self.base_api_url)

    def set_token(self, token: str | None) -> None:
        """Set or clear the bearer token for subsequent requests."""
        if token:
            self.api_headers["Authorization"] = f"Bearer {token}"
        else:
            self.api_headers.pop("Authorization", None)
        if self._client is not None and not self._client.is_closed:
            self._client.headers.update(self.api_headers)
            if not token:
                self._client.headers.pop("Authorization", None)

    @property
    def async_http_client(self) -> httpx.AsyncClient:
        """Provide access to the `httpx.AsyncClient` instance, creating it if necessary.

        :returns: The httpx.AsyncClient instance.
        """
        if self._client is None or self._client.is_closed:
            log.debug("Initializing new httpx.AsyncClient instance.")
            self._client = httpx.AsyncClient(
                headers=self.api_headers,
                base_url=self.base_api_url,
                timeout=httpx.Timeout(self.settings.timeout_seconds, connect=self.settings.connect_timeout_seconds),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close_client_session(self) -> None:
        """Close the underlying `httpx.AsyncClient` session if it's open."""
        if self._client and not self._client.is_closed:
            log.debug("Closing httpx.AsyncClient session.")
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> Self:
        """Enable use as an asynchronous context manager, returns self.

        :returns: The instance of TrackerAPI.
        """
        return self

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object) -> None:
        """Close the client session when exiting the async context manager.

        :param exc_type: The exception type, if an exception was raised.
        :param exc_val: The exception value, if an exception was raised.
        :param exc_tb: The traceback, if an exception was raised.
        """
        log.debug("Request stats: {}", self.get_request_stats())
        await self.close_client_session()

    @staticmethod
    def _prepare_request_data(data: Any | None) -> Any | None:
        """Prepare data for an HTTP request body, serializing Pydantic models with camelCase keys.

        :param data: The data to prepare. Can be a Pydantic model, a dictionary, or None.
        :returns: The prepared data suitable for JSON serialization, or None.
        """
        if data is None:
            return None
        if isinstance(data, BaseModel):
            return data.model_dump(by_alias=True, exclude_unset=True, exclude_none=True, mode="json")
        if isinstance(data, dict):
            return data
        log.warning("Request data is not a Pydantic model or dict, attempting to pass as is: {}", type(data).__name__)
        return data

    async def _execute_request(self, http_method: str, api_endpoint: str, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> Any:
        """Core method for making an HTTP request to the API. Handles retries, response and errors.

        Transport errors and HTTP 429 responses are retried up to
        ``max_retries`` times with a linear back-off; every other HTTP error is
        raised at once.

        :param http_method: The HTTP method (e.g., "GET", "POST").
        :param api_endpoint: The API endpoint path (e.g., "/habits", "progress/daily").
        :param parse_to_model: The decoded body (or each item of a list body) is validated into this model.
        :param kwargs: Additional arguments for `httpx.AsyncClient.request()`.
        :returns: The decoded body, a model instance, a list of model instances, or None for empty bodies.
        :raises TrackerAPIError: If the request fails.
        """
        normalized_endpoint = api_endpoint.lstrip("/")

        try:
            return await self._request_with_retries(http_method, normalized_endpoint, parse_to_model, **kwargs)
        except TrackerAPIError:
            raise
        except Exception as e:  # noqa: BLE001
            self._handle_unexpected_error(e, normalized_endpoint)

    async def _request_with_retries(self, http_method: str, normalized_endpoint: str, parse_to_model: type[T_PydanticModel] | None, **kwargs: Any) -> Any:
        for attempt in range(self.max_retries + 1):
            start_time_mono = time.monotonic()
            try:
                response = await self._make_http_request(http_method, normalized_endpoint, **kwargs)
            except httpx.TransportError as transport_err:
                if attempt < self.max_retries:
                    await self._wait_before_retry(attempt, None, http_method, normalized_endpoint, transport_err)
                    continue
                self._handle_transport_error(transport_err, http_method, normalized_endpoint)
            except httpx.RequestError as request_err:
                self._handle_transport_error(request_err, http_method, normalized_endpoint)

            if response.status_code == CODE_RATE_LIMIT_EXCEEDED and attempt < self.max_retries:
                await self._wait_before_retry(attempt, response, http_method, normalized_endpoint, None)
                continue

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as http_err:
                self._handle_http_status_error(http_err, http_method, normalized_endpoint)

            request_duration_s = time.monotonic() - start_time_mono
            if response.status_code == CODE_SUCCESS_NO_MSG or not response.content:
                return self._handle_empty_response(request_duration_s, http_method, normalized_endpoint)

            response_data = self._parse_response_json(response, http_method, normalized_endpoint)
            self.request_stats.record_successful_request(request_duration_s)
            log.debug("Success ({}) : {} {} in {:.3f}s", response.status_code, http_method.upper(), normalized_endpoint, request_duration_s)
            return _format_response_data(response_data, response, parse_to_model, normalized_endpoint)

        msg = f"Retries exhausted for {http_method.upper()} {normalized_endpoint}"
        raise TrackerAPIError(message=msg, error_type="retry")

    async def _make_http_request(self, http_method: str, normalized_endpoint: str, **kwargs: Any) -> httpx.Response:
        """Make the actual HTTP request."""
        log.debug("Requesting: {} {} with params: {}, data: {}", http_method.upper(), f"{self.base_api_url}{normalized_endpoint}", kwargs.get("params"), kwargs.get("json"))
        return await self.async_http_client.request(method=http_method.upper(), url=normalized_endpoint, **kwargs)

    async def _wait_before_retry(self, attempt: int, response: httpx.Response | None, http_method: str, normalized_endpoint: str, error: Exception | None) -> None:
        """Sleep before the next attempt, honouring ``Retry-After`` on 429 responses."""
        wait_seconds = self.retry_backoff_seconds * (attempt + 1)
        if response is not None:
            retry_after_str = response.headers.get("Retry-After")
            if retry_after_str:
                try:
                    wait_seconds = min(float(retry_after_str), MAX_RETRY_AFTER_SECONDS)
                except ValueError:
                    log.warning("Could not parse Retry-After header value: '{}'.", retry_after_str)
            log.warning("Rate limit exceeded (HTTP 429). Retrying {} {} after {:.2f}s.", http_method.upper(), normalized_endpoint, wait_seconds)
        else:
            log.warning("Transport error on {} {} ({}). Retry {}/{} in {:.2f}s.", http_method.upper(), normalized_endpoint, error, attempt + 1, self.max_retries, wait_seconds)
        self.request_stats.record_retry()
        await asyncio.sleep(wait_seconds)

    def _handle_empty_response(self, request_duration_s: float, http_method: str, normalized_endpoint: str) -> None:
        """Handle responses with no content (204 No Content)."""
        self.request_stats.record_successful_request(request_duration_s)
        log.debug("Success (204 No Content): {} {} in {:.3f}s", http_method.upper(), normalized_endpoint, request_duration_s)

    def _parse_response_json(self, response: httpx.Response, http_method: str, normalized_endpoint: str) -> Any:
        """Decode the JSON body."""
        try:
            return response.json()
        except json.JSONDecodeError as json_err:
            self.request_stats.record_failed_request()
            log.error("JSONDecodeError for {} {}: {}. Response text: {}", http_method.upper(), normalized_endpoint, json_err, response.text[:200])
            raise TrackerAPIError(
                message=f"Failed to decode JSON response from API: {json_err}",
                status_code=response.status_code,
                error_type="decode",
                response_data=response.text,
            ) from json_err

    def _handle_http_status_error(self, http_err: httpx.HTTPStatusError, http_method: str, normalized_endpoint: str) -> NoReturn:
        """Handle HTTP status errors."""
        self.request_stats.record_failed_request()
        error_response_data: Any = None
        error_message_detail = http_err.response.text[:200]

        try:
            error_response_data = http_err.response.json()
            if isinstance(error_response_data, dict):
                error_message_detail = TrackerErrorBody.model_validate(error_response_data).describe() or error_message_detail
        except (json.JSONDecodeError, ValidationError):
            log.debug("Error body of {} {} is not JSON.", http_method.upper(), normalized_endpoint)

        log.warning("HTTPStatusError for {} {}: {} - {}", http_method.upper(), normalized_endpoint, http_err.response.status_code, error_message_detail)

        raise TrackerAPIError(
            message=f"API request failed with HTTP status {http_err.response.status_code}: {error_message_detail}",
            status_code=http_err.response.status_code,
            error_type="http",
            response_data=error_response_data or http_err.response.text,
        ) from http_err

    def _handle_transport_error(self, transport_err: Exception, http_method: str, normalized_endpoint: str) -> NoReturn:
        """Handle transport and timeout errors."""
        self.request_stats.record_failed_request()
        log.error("Transport/Timeout error for {} {}: {}", http_method.upper(), normalized_endpoint, transport_err)
        raise TrackerAPIError(
            message=f"API request transport error: {transport_err.__class__.__name__} - {transport_err}",
            error_type="transport",
        ) from transport_err

    def _handle_unexpected_error(self, error: Exception, normalized_endpoint: str) -> NoReturn:
        """Handle unexpected errors."""
        self.request_stats.record_failed_request()
        log.exception("Unexpected error during API request to {}: {}", normalized_endpoint, error)
        raise TrackerAPIError(message=f"An unexpected error occurred: {error}", error_type="unexpected") from error

    # ─── HTTP Methods ─────────────────────────────────────────────────────
    async def get(self, api_endpoint: str, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | T_PydanticModel | Sequence[T_PydanticModel]:
        """Make a GET request to the specified API endpoint.

        :param api_endpoint: The API endpoint path.
        :param params: Optional dictionary of query parameters.
        :param parse_to_model: If provided, the response data will be parsed into an instance of this Pydantic model.
        :param kwargs: Additional arguments passed to the underlying HTTP request.
        :returns: The parsed response data, a Pydantic model instance (or list of them), or None.
        """
        return await self._execute_request("GET", api_endpoint, parse_to_model=parse_to_model, params=params, **kwargs)

    async def post(self, api_endpoint: str, data: Any | None = None, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | T_PydanticModel | Sequence[T_PydanticModel]:
        """Make a POST request, serializing Pydantic models in `data` if provided.

        :param api_endpoint: The API endpoint path.
        :param data: The data to send in the request body. Can be a Pydantic model, a dictionary, or None.
        :param params: Optional dictionary of query parameters.
        :param parse_to_model: If provided, the response data will be parsed into an instance of this Pydantic model.
        :param kwargs: Additional arguments passed to the underlying HTTP request.
        :returns: The parsed response data, a Pydantic model instance, or None.
        """
        return await self._execute_request("POST", api_endpoint, parse_to_model=parse_to_model, json=self._prepare_request_data(data), params=params, **kwargs)

    async def put(self, api_endpoint: str, data: Any | None = None, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | T_PydanticModel | Sequence[T_PydanticModel]:
        """Make a PUT request, serializing Pydantic models in `data` if provided.

        :param api_endpoint: The API endpoint path.
        :param data: The data to send in the request body. Can be a Pydantic model, a dictionary, or None.
        :param params: Optional dictionary of query parameters.
        :param parse_to_model: If provided, the response data will be parsed into an instance of this Pydantic model.
        :param kwargs: Additional arguments passed to the underlying HTTP request.
        :returns: The parsed response data, a Pydantic model instance, or None.
        """
        return await self._execute_request("PUT", api_endpoint, parse_to_model=parse_to_model, json=self._prepare_request_data(data), params=params, **kwargs)

    async def delete(self, api_endpoint: str, params: dict[str, Any] | None = None, *, parse_to_model: type[T_PydanticModel] | None = None, **kwargs: Any) -> SuccessfulResponseData | T_PydanticModel | Sequence[T_PydanticModel]:
        """Make a DELETE request.

        :param api_endpoint: The API endpoint path.
        :param params: Optional dictionary of query parameters.
        :param parse_to_model: If provided, the response data will be parsed into an instance of this Pydantic model.
        :param kwargs: Additional arguments passed to the underlying HTTP request.
        :returns: The parsed response data, a Pydantic model instance, or None.
        """
        return await self._execute_request("DELETE", api_endpoint, parse_to_model=parse_to_model, params=params, **kwargs)

    def get_request_stats(self) -> dict[str, Any]:
        """Return request statistics for diagnostics."""
        return self.request_stats.get_summary_dict()
