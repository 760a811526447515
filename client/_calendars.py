"""Calendars sub-client.

Provides methods for listing, creating, fetching, saving, renaming and
deleting calendars, plus ``CalendarSession``, which follows the same
fetch / poll / save-with-base protocol as the browser client.

This is an internal module. Import from ``client`` instead.
"""

from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import quote

from client.models import (
    CalendarDetail,
    CalendarSummary,
    CreatedCalendar,
    RenamedCalendar,
    SaveResponse,
)

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient

_BASE_PATH = "/api/calendars"


def _calendar_path(calendar_id: str) -> str:
    return f"{_BASE_PATH}/{quote(calendar_id, safe='')}"


def _save_body(
    state: dict[str, Any],
    base_state: Optional[dict[str, Any]],
    base_revision: Optional[int],
) -> dict[str, Any]:
    body: dict[str, Any] = {"state": state}
    if base_state is not None:
        body["baseState"] = base_state
    if base_revision is not None:
        body["baseRevision"] = base_revision
    return body


class CalendarsClient:
    """Synchronous client for the calendar endpoints.

    Example:
        with PlannerClient() as client:
            created = client.calendars.create("Trip")
            detail = client.calendars.get(created.id)
    """

    def __init__(self, http_client: "HTTPClient") -> None:
        self._http = http_client

    def list(self) -> list[CalendarSummary]:
        """List calendars, most recently updated first."""
        data = self._http.get(_BASE_PATH)
        return [CalendarSummary.model_validate(entry) for entry in data]

    def create(self, name: str | None = None) -> CreatedCalendar:
        """Create a calendar.

        Args:
            name: Display name; the server picks a default when omitted.

        Returns:
            The new calendar's id and name.
        """
        body = {"name": name} if name is not None else {}
        return CreatedCalendar.model_validate(self._http.post(_BASE_PATH, json=body))

    def get(self, calendar_id: str) -> CalendarDetail:
        """Fetch a calendar's state and revision.

        Raises:
            NotFoundError: If the calendar does not exist.
        """
        return CalendarDetail.model_validate(self._http.get(_calendar_path(calendar_id)))

    def save(
        self,
        calendar_id: str,
        state: dict[str, Any],
        base_state: Optional[dict[str, Any]] = None,
        base_revision: Optional[int] = None,
    ) -> SaveResponse:
        """Save a state.

        Pass the state and revision the edit started from so that the
        server can merge it with concurrent changes; without them the state
        simply replaces whatever is stored.

        Raises:
            NotFoundError: If the calendar does not exist.
            ServerError: If the server could not store the state.
        """
        data = self._http.post(
            _calendar_path(calendar_id),
            json=_save_body(state, base_state, base_revision),
        )
        return SaveResponse.model_validate(data)

    def rename(self, calendar_id: str, name: str) -> RenamedCalendar:
        """Rename a calendar.

        Raises:
            NotFoundError: If the calendar does not exist.
            BadRequestError: If the name is empty.
        """
        data = self._http.patch(_calendar_path(calendar_id), json={"name": name})
        return RenamedCalendar.model_validate(data)

    def delete(self, calendar_id: str) -> bool:
        """Delete a calendar.

        Raises:
            NotFoundError: If the calendar does not exist.
        """
        data = self._http.delete(_calendar_path(calendar_id))
        return bool(data and data.get("success"))

    def session(self, calendar_id: str) -> "CalendarSession":
        """Start a sync session on one calendar (see CalendarSession)."""
        return CalendarSession(self, calendar_id)


class AsyncCalendarsClient:
    """Asynchronous client for the calendar endpoints."""

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        self._http = http_client

    async def list(self) -> list[CalendarSummary]:
        data = await self._http.get(_BASE_PATH)
        return [CalendarSummary.model_validate(entry) for entry in data]

    async def create(self, name: str | None = None) -> CreatedCalendar:
        body = {"name": name} if name is not None else {}
        return CreatedCalendar.model_validate(await self._http.post(_BASE_PATH, json=body))

    async def get(self, calendar_id: str) -> CalendarDetail:
        return CalendarDetail.model_validate(await self._http.get(_calendar_path(calendar_id)))

    async def save(
        self,
        calendar_id: str,
        state: dict[str, Any],
        base_state: Optional[dict[str, Any]] = None,
        base_revision: Optional[int] = None,
    ) -> SaveResponse:
        data = await self._http.post(
            _calendar_path(calendar_id),
            json=_save_body(state, base_state, base_revision),
        )
        return SaveResponse.model_validate(data)

    async def rename(self, calendar_id: str, name: str) -> RenamedCalendar:
        data = await self._http.patch(_calendar_path(calendar_id), json={"name": name})
        return RenamedCalendar.model_validate(data)

    async def delete(self, calendar_id: str) -> bool:
        data = await self._http.delete(_calendar_path(calendar_id))
        return bool(data and data.get("success"))


class CalendarSession:
    """Tracks one calendar's base state and revision between saves.

    ``load`` fetches the calendar. ``poll`` adopts the server's state only
    when its revision moved past the one held here. ``save`` sends the held
    base along with the new state, then takes the server's answer as the
    new base, so consecutive saves from one session never undo each other
    or other clients' changes.

    Attributes:
        calendar_id: The calendar being edited.
        revision: Revision of the held base state.
        base_state: Last state received from the server, or None before load.
    """

    def __init__(self, calendars: CalendarsClient, calendar_id: str) -> None:
        self._calendars = calendars
        self.calendar_id = calendar_id
        self.revision = 0
        self.base_state: Optional[dict[str, Any]] = None

    def load(self) -> dict[str, Any]:
        """Fetch the calendar unconditionally and take it as the new base."""
        detail = self._calendars.get(self.calendar_id)
        self._adopt(detail.state, detail.revision)
        return detail.state

    def poll(self) -> Optional[dict[str, Any]]:
        """Fetch the calendar and return its state if another client changed it.

        Returns:
            The newer state, or None when the revision has not advanced.
        """
        detail = self._calendars.get(self.calendar_id)
        if detail.revision <= self.revision and self.base_state is not None:
            return None
        self._adopt(detail.state, detail.revision)
        return detail.state

    def save(self, state: dict[str, Any]) -> SaveResponse:
        """Save a state edited from the held base.

        Returns:
            The server's response; its state is the merged result when other
            clients saved in the meantime.
        """
        response = self._calendars.save(
            self.calendar_id,
            state,
            base_state=self.base_state,
            base_revision=self.revision if self.base_state is not None else None,
        )
        self._adopt(response.state, response.revision)
        return response

    def _adopt(self, state: dict[str, Any], revision: int) -> None:
        self.base_state = state
        self.revision = revision
