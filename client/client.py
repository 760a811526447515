"""Main planner client classes.

- PlannerClient: synchronous client for the planner REST API
- AsyncPlannerClient: asynchronous client for the planner REST API

Example:
    Keeping a local copy in sync with other editors::

        from client import PlannerClient

        with PlannerClient(base_url="http://192.168.1.20:3000") as client:
            session = client.calendars.session(calendar_id)
            state = session.load()
            state["viewMode"] = "grid"
            session.save(state)
            newer = session.poll()  # None unless someone else saved
"""

from typing import Any

from client._calendars import AsyncCalendarsClient, CalendarsClient
from client._http import AsyncHTTPClient, HTTPClient


class PlannerClient:
    """Synchronous client for the planner REST API.

    Attributes:
        calendars: Calendar endpoints.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 10.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: The base URL of the planner server.
            timeout: Request timeout in seconds.
            retry_enabled: Retry connection errors, timeouts and HTTP
                502/503/504 with exponential backoff.
            max_retries: Maximum number of retry attempts.
            transport: Custom httpx transport (for testing).
        """
        self._http = HTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )
        self.calendars = CalendarsClient(self._http)

    @property
    def base_url(self) -> str:
        return self._http.base_url

    def health(self) -> bool:
        """Return True if the server reports itself healthy."""
        data = self._http.get("/health")
        return bool(data) and data.get("status") == "healthy"

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "PlannerClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class AsyncPlannerClient:
    """Asynchronous client for the planner REST API."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 10.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        self._http = AsyncHTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )
        self.calendars = AsyncCalendarsClient(self._http)

    @property
    def base_url(self) -> str:
        return self._http.base_url

    async def health(self) -> bool:
        data = await self._http.get("/health")
        return bool(data) and data.get("status") == "healthy"

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> "AsyncPlannerClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
