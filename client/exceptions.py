"""Exception hierarchy for the planner API client.

Exception Hierarchy:
    PlannerClientError (base)
    ├── ConnectionError - Network/connection failures
    ├── TimeoutError - Request timeout
    └── APIError - Server returned an error response
        ├── BadRequestError (HTTP 400)
        ├── NotFoundError (HTTP 404)
        ├── ValidationError (HTTP 422)
        └── ServerError (HTTP 5xx)

Example:
    Handling a calendar that another client deleted::

        try:
            client.calendars.save(calendar_id, state)
        except NotFoundError:
            calendar_id = client.calendars.create("Replacement").id
"""

from typing import Any


class PlannerClientError(Exception):
    """Base exception for all planner client errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ConnectionError(PlannerClientError):
    """Failed to connect to the planner server.

    Attributes:
        url: The URL that failed to connect.
        cause: The underlying transport exception.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.url:
            return f"{self.message} (url: {self.url})"
        return self.message


class TimeoutError(PlannerClientError):
    """Request took longer than the configured timeout.

    Attributes:
        timeout: The timeout value in seconds.
        url: The URL that timed out.
    """

    def __init__(
        self,
        message: str,
        timeout: float | None = None,
        url: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.url = url
        super().__init__(message)


class APIError(PlannerClientError):
    """The server answered with an error status.

    Attributes:
        status_code: HTTP status code from the server.
        error_type: Error type reported by the server, if any.
        details: Structured error details, if any.
        response_body: Raw decoded response body, for debugging.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        self.response_body = response_body
        super().__init__(message)

    def __str__(self) -> str:
        if self.error_type:
            return f"[HTTP {self.status_code}] [{self.error_type}] {self.message}"
        return f"[HTTP {self.status_code}] {self.message}"


class BadRequestError(APIError):
    """The server rejected an argument (HTTP 400), e.g. an empty calendar name."""

    def __init__(self, message: str, error_type: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, status_code=400, error_type=error_type, **kwargs)


class NotFoundError(APIError):
    """The calendar does not exist (HTTP 404)."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, status_code=404, error_type="not_found", **kwargs)


class ValidationError(APIError):
    """The request body failed validation (HTTP 422)."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, status_code=422, error_type="validation_error", **kwargs)


class ServerError(APIError):
    """The server failed to handle the request (HTTP 5xx).

    A storage failure leaves the calendar unchanged, so retrying the whole
    save is safe.
    """

    def __init__(self, message: str, status_code: int = 500, **kwargs: Any) -> None:
        super().__init__(message, status_code=status_code, **kwargs)
