"""Internal HTTP handling for the planner client.

Wraps httpx with JSON decoding, status-code to exception mapping and optional
retry with exponential backoff. This is an internal module; use
``client.PlannerClient`` instead.
"""

import asyncio
import time
from typing import Any, Literal

import httpx

from client.exceptions import (
    APIError,
    BadRequestError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)


HttpMethod = Literal["GET", "POST", "PATCH", "DELETE"]

# Retried only when retry is enabled
RETRYABLE_STATUS_CODES = {502, 503, 504}

DEFAULT_RETRY_BACKOFF_BASE = 0.5  # seconds
DEFAULT_RETRY_BACKOFF_MAX = 30.0  # seconds


def _parse_error_response(response: httpx.Response) -> tuple[str, str | None, dict | None]:
    """Extract message, error type and details from an error response.

    Understands the API's ``{"error", "detail", "type"}`` bodies and
    FastAPI's ``{"detail": [...]}`` validation bodies, falling back to the
    raw text.

    Returns:
        A tuple of (message, error_type, details).
    """
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return (text or f"HTTP {response.status_code} error"), None, None

    if not isinstance(body, dict):
        return str(body), None, None

    detail = body.get("detail")
    if isinstance(detail, str):
        return detail, body.get("type"), None
    if isinstance(detail, list):
        messages = [
            f"{err.get('loc', ['unknown'])[-1]}: {err.get('msg', 'invalid')}"
            for err in detail
            if isinstance(err, dict)
        ]
        return "; ".join(messages), "validation_error", {"errors": detail}
    if "error" in body:
        return str(body["error"]), body.get("type"), None
    return str(body), None, None


def _raise_for_status(response: httpx.Response) -> None:
    """Raise the client exception matching an error status code.

    Raises:
        BadRequestError: For HTTP 400.
        NotFoundError: For HTTP 404.
        ValidationError: For HTTP 422.
        ServerError: For HTTP 5xx.
        APIError: For any other error status.
    """
    if response.is_success:
        return

    message, error_type, details = _parse_error_response(response)
    try:
        response_body = response.json()
    except ValueError:
        response_body = response.text

    status_code = response.status_code
    if status_code == 400:
        raise BadRequestError(
            message, error_type=error_type, details=details, response_body=response_body
        )
    if status_code == 404:
        raise NotFoundError(message, details=details, response_body=response_body)
    if status_code == 422:
        raise ValidationError(message, details=details, response_body=response_body)
    if status_code >= 500:
        raise ServerError(
            message,
            status_code=status_code,
            error_type=error_type,
            details=details,
            response_body=response_body,
        )
    raise APIError(
        message,
        status_code=status_code,
        error_type=error_type,
        details=details,
        response_body=response_body,
    )


def _calculate_backoff(attempt: int, base: float = DEFAULT_RETRY_BACKOFF_BASE) -> float:
    """Return the delay before retry number ``attempt`` (0-indexed).

    Doubles each attempt, capped at DEFAULT_RETRY_BACKOFF_MAX seconds.
    """
    return min(base * (2 ** attempt), DEFAULT_RETRY_BACKOFF_MAX)


def _decode(response: httpx.Response) -> Any:
    _raise_for_status(response)
    if response.content:
        return response.json()
    return None


class HTTPClient:
    """Synchronous JSON client for the planner API.

    Attributes:
        base_url: The base URL for all API requests.
        timeout: Request timeout in seconds.
        retry_enabled: Whether to retry on transient failures.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: The base URL for all API requests.
            timeout: Request timeout in seconds.
            retry_enabled: Whether to retry connection failures, timeouts
                and HTTP 502/503/504.
            max_retries: Maximum number of retry attempts.
            transport: Custom transport (e.g. a test transport).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(self, method: HttpMethod, path: str, json: Any = None) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: The HTTP method.
            path: Path relative to base_url.
            json: JSON body to send.

        Returns:
            The decoded response body, or None for an empty body.

        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the request times out.
            APIError: If the server returns an error response.
        """
        url = f"{self.base_url}{path}"
        attempts = self.max_retries + 1 if self.retry_enabled else 1

        for attempt in range(attempts):
            last_attempt = attempt >= attempts - 1
            try:
                response = self._client.request(method, path, json=json)
            except httpx.ConnectError as e:
                if last_attempt:
                    raise ConnectionError(f"Failed to connect to {url}", url=url, cause=e) from e
            except httpx.TimeoutException as e:
                if last_attempt:
                    raise TimeoutError(
                        f"Request to {url} timed out", timeout=self.timeout, url=url
                    ) from e
            else:
                if last_attempt or response.status_code not in RETRYABLE_STATUS_CODES:
                    return _decode(response)
            time.sleep(_calculate_backoff(attempt))

        raise RuntimeError("Unexpected exit from request retry loop")

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


class AsyncHTTPClient:
    """Asynchronous JSON client for the planner API.

    Same behavior as HTTPClient, on top of httpx.AsyncClient.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(self, method: HttpMethod, path: str, json: Any = None) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the request times out.
            APIError: If the server returns an error response.
        """
        url = f"{self.base_url}{path}"
        attempts = self.max_retries + 1 if self.retry_enabled else 1

        for attempt in range(attempts):
            last_attempt = attempt >= attempts - 1
            try:
                response = await self._client.request(method, path, json=json)
            except httpx.ConnectError as e:
                if last_attempt:
                    raise ConnectionError(f"Failed to connect to {url}", url=url, cause=e) from e
            except httpx.TimeoutException as e:
                if last_attempt:
                    raise TimeoutError(
                        f"Request to {url} timed out", timeout=self.timeout, url=url
                    ) from e
            else:
                if last_attempt or response.status_code not in RETRYABLE_STATUS_CODES:
                    return _decode(response)
            await asyncio.sleep(_calculate_backoff(attempt))

        raise RuntimeError("Unexpected exit from request retry loop")

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
