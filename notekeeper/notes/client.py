"""
HTTP Client for the notes API.

Provides the async HTTP plumbing shared by the notes gateway, the public
note reader, and the authentication client. Every response is mapped onto
the application exception taxonomy here, so callers only ever see
ApplicationError subclasses.

All requests include X-Client-ID: notekeeper for server-side log routing.
"""

from typing import Any

import httpx

from notekeeper.core.config import get_api_base_url
from notekeeper.core.exceptions import (
    AuthError,
    FetchError,
    NotFoundError,
    ValidationError,
)
from notekeeper.core.logging import get_logger, log_with_source
from notekeeper.core.resilience import read_retrying

logger = get_logger(__name__)


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Pull a human-readable message out of an error response body."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


def raise_for_status(response: httpx.Response, operation: str) -> None:
    """
    Map a non-success response onto the application exceptions.

    Args:
        response: Response from the notes API
        operation: Short description used in fallback messages

    Raises:
        AuthError: 401 or 403
        NotFoundError: 404
        ValidationError: 400 or 422
        FetchError: Any other non-2xx status
    """
    status = response.status_code
    if 200 <= status < 300:
        return
    if status in (401, 403):
        raise AuthError(_error_message(response, "Session expired. Please log in again."))
    if status == 404:
        raise NotFoundError(_error_message(response, f"Failed to {operation}: not found"))
    if status in (400, 422):
        raise ValidationError(_error_message(response, f"Failed to {operation}: rejected by server"))
    raise FetchError(_error_message(response, f"Failed to {operation}"), status_code=status)


def decode_json(response: httpx.Response, operation: str) -> Any:
    """Decode a JSON body, treating malformed payloads as fetch failures."""
    try:
        return response.json()
    except ValueError as e:
        raise FetchError(
            f"Failed to {operation}: malformed response",
            status_code=response.status_code,
        ) from e


class APIClient:
    """
    HTTP client for notes API communication.

    Features:
    - Automatic base URL from settings
    - X-Client-ID header for log routing
    - Structured logging of requests/responses
    - Transport failures surfaced as FetchError

    Usage:
        client = APIClient()
        response = await client.get("/api/notes")
        await client.close()
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """
        Initialize the API client.

        Args:
            base_url: Notes API base URL. If None, reads from config/settings/application.yaml.
            timeout: Request timeout in seconds. If None, reads from config/settings/application.yaml.
            headers: Extra headers sent with every request.
        """
        if base_url is None:
            config_base_url, config_timeout = get_api_base_url()
        else:
            config_base_url, config_timeout = base_url, 30.0

        self.base_url = config_base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else config_timeout
        self._headers = {"X-Client-ID": "notekeeper", **(headers or {})}
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._headers,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "APIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make an HTTP request to the notes API.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path (e.g., /api/notes, /api/notes/12)
            **kwargs: Additional arguments for httpx

        Returns:
            httpx.Response, whatever its status

        Raises:
            httpx.TransportError: On connection or timeout failure
            FetchError: On any other httpx failure
        """
        client = await self._get_client()

        log_with_source(logger, "gateway", "debug", "API request", method=method, path=path)

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            log_with_source(
                logger, "gateway", "error", "API request failed",
                method=method, path=path, error=str(e),
            )
            raise
        except httpx.HTTPError as e:
            log_with_source(
                logger, "gateway", "error", "API request failed",
                method=method, path=path, error=str(e),
            )
            raise FetchError(f"Request to {path} failed: {e}") from e

        log_with_source(
            logger, "gateway", "debug", "API response",
            method=method, path=path, status_code=response.status_code,
        )
        return response

    async def send(self, method: str, path: str, operation: str, **kwargs: Any) -> httpx.Response:
        """
        Make a request and map failures onto application exceptions.

        Transport failures become FetchError; error statuses are mapped by
        raise_for_status.
        """
        try:
            response = await self.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise FetchError(f"Failed to {operation}: {e}") from e
        raise_for_status(response, operation)
        return response

    async def read(self, path: str, operation: str, **kwargs: Any) -> httpx.Response:
        """
        GET an idempotent resource, retrying transport failures.

        Failures are mapped the same way as send().
        """
        try:
            async for attempt in read_retrying(operation):
                with attempt:
                    response = await self.request("GET", path, **kwargs)
        except httpx.TransportError as e:
            raise FetchError(f"Failed to {operation}: {e}") from e
        raise_for_status(response, operation)
        return response
