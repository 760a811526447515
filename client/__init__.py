"""Shared planner API client library.

Example:
    Synchronous usage::

        from client import PlannerClient

        with PlannerClient(base_url="http://localhost:3000") as client:
            created = client.calendars.create("Road trip")
            detail = client.calendars.get(created.id)

    Asynchronous usage::

        from client import AsyncPlannerClient

        async with AsyncPlannerClient() as client:
            calendars = await client.calendars.list()
"""

from client._calendars import AsyncCalendarsClient, CalendarSession, CalendarsClient
from client.client import AsyncPlannerClient, PlannerClient
from client.exceptions import (
    APIError,
    BadRequestError,
    ConnectionError,
    NotFoundError,
    PlannerClientError,
    ServerError,
    TimeoutError,
    ValidationError,
)
from client.models import (
    CalendarDetail,
    CalendarSummary,
    CreatedCalendar,
    RenamedCalendar,
    SaveResponse,
)

__all__ = [
    # Clients
    "PlannerClient",
    "AsyncPlannerClient",
    "CalendarsClient",
    "AsyncCalendarsClient",
    "CalendarSession",
    # Models
    "CalendarDetail",
    "CalendarSummary",
    "CreatedCalendar",
    "RenamedCalendar",
    "SaveResponse",
    # Exceptions
    "PlannerClientError",
    "ConnectionError",
    "TimeoutError",
    "APIError",
    "BadRequestError",
    "NotFoundError",
    "ValidationError",
    "ServerError",
]
