"""Calendar endpoints.

Provides the REST API browser clients poll and save against: listing,
creating, renaming and deleting calendars, and reading and saving a
calendar's schedule state with optimistic concurrency.

Handlers are plain functions; FastAPI runs them on its thread pool, and the
store serializes concurrent mutations of the same calendar.
"""

from fastapi import APIRouter, status

from api.dependencies import CalendarStoreDep
from api.models import (
    CalendarStateResponse,
    CalendarSummaryResponse,
    CreateCalendarRequest,
    CreateCalendarResponse,
    DeleteCalendarResponse,
    RenameCalendarRequest,
    RenameCalendarResponse,
    SaveCalendarRequest,
    SaveCalendarResponse,
)

router = APIRouter(
    prefix="/api/calendars",
    tags=["calendars"],
)


@router.get("", response_model=list[CalendarSummaryResponse])
def list_calendars(store: CalendarStoreDep):
    """List calendars, most recently updated first.

    Returns:
        One ``{id, name, updatedAt}`` entry per calendar.
    """
    return [
        CalendarSummaryResponse(
            id=summary.calendar_id,
            name=summary.name,
            updated_at=summary.updated_at,
        )
        for summary in store.list_calendars()
    ]


@router.post(
    "",
    response_model=CreateCalendarResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_calendar(store: CalendarStoreDep, request: CreateCalendarRequest | None = None):
    """Create a calendar with the default schedule state.

    Args:
        request: Optional body with the calendar name.

    Returns:
        The new calendar's id and name.
    """
    record = store.create_calendar(request.name if request else None)
    return CreateCalendarResponse(id=record.calendar_id, name=record.name)


@router.get("/{calendar_id}", response_model=CalendarStateResponse)
def get_calendar(calendar_id: str, store: CalendarStoreDep):
    """Fetch a calendar's state and revision.

    Clients keep the returned state and revision as the base of their next
    save.

    Args:
        calendar_id: Calendar to fetch.

    Returns:
        The calendar's state, revision, name and last update time.
    """
    record = store.get_calendar(calendar_id)
    return CalendarStateResponse(
        state=record.state.to_wire(),
        revision=record.revision,
        name=record.name,
        updated_at=record.updated_at,
    )


@router.post("/{calendar_id}", response_model=SaveCalendarResponse)
def save_calendar(calendar_id: str, request: SaveCalendarRequest, store: CalendarStoreDep):
    """Save a calendar's schedule state.

    With ``baseState`` and a stale ``baseRevision`` the submitted state is
    merged with changes other clients made in the meantime; otherwise it
    replaces the stored state. Saving a state equal to the stored one does
    not bump the revision.

    Args:
        calendar_id: Calendar to save.
        request: ``{state, baseState?, baseRevision?}``.

    Returns:
        The stored state and revision after the save.
    """
    result = store.save_calendar(
        calendar_id,
        request.incoming_state(),
        base=request.base_state,
        base_revision=request.base_revision,
    )
    return SaveCalendarResponse(
        state=result.state.to_wire(),
        revision=result.revision,
        updated_at=result.updated_at,
        merged=result.merged,
    )


@router.patch("/{calendar_id}", response_model=RenameCalendarResponse)
def rename_calendar(calendar_id: str, request: RenameCalendarRequest, store: CalendarStoreDep):
    """Rename a calendar. The revision is not affected.

    Args:
        calendar_id: Calendar to rename.
        request: Body with the new name.

    Returns:
        The calendar's id and new name.
    """
    record = store.rename_calendar(calendar_id, request.name)
    return RenameCalendarResponse(id=record.calendar_id, name=record.name)


@router.delete("/{calendar_id}", response_model=DeleteCalendarResponse)
def delete_calendar(calendar_id: str, store: CalendarStoreDep):
    """Delete a calendar permanently.

    Args:
        calendar_id: Calendar to delete.
    """
    store.delete_calendar(calendar_id)
    return DeleteCalendarResponse()
