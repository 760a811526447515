"""Request and response models for the calendar endpoints.

Bodies use camelCase keys on the wire to match the browser client; the
Python attributes are snake_case.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request Models


class CreateCalendarRequest(ApiModel):
    """Request to create a calendar.

    Args:
        name: Display name; blank names get a default.
    """

    name: Any = Field(default=None, description="Calendar name")


class RenameCalendarRequest(ApiModel):
    """Request to rename a calendar.

    ``name`` is left untyped so that the store reports a bad name as an
    invalid argument (400) rather than a request validation failure.
    """

    name: Any = Field(default=None, description="New calendar name")


class SaveCalendarRequest(ApiModel):
    """Request to save a calendar's schedule state.

    Args:
        state: The state the client wants stored.
        base_state: The state the client started editing from.
        base_revision: The revision the client started editing from.

    A body without a ``state`` key is treated as the state itself.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    state: Any = Field(default=None, description="Desired new state")
    base_state: Any = Field(default=None, description="State edits started from")
    base_revision: Any = Field(default=None, description="Revision edits started from")

    def incoming_state(self) -> Any:
        """Return the submitted state, accepting a bare state body."""
        if self.state is not None:
            return self.state
        return dict(self.model_extra or {})


# Response Models


class TimestampedResponse(ApiModel):
    """Base for responses carrying an ``updatedAt`` timestamp."""

    updated_at: datetime

    @field_serializer("updated_at")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to ISO format string."""
        return dt.isoformat()


class CalendarSummaryResponse(TimestampedResponse):
    """One entry of the calendar listing."""

    id: str
    name: str


class CreateCalendarResponse(ApiModel):
    """Response to creating a calendar."""

    id: str
    name: str


class CalendarStateResponse(TimestampedResponse):
    """Full snapshot of a calendar.

    Attributes:
        state: Current schedule state (wire format).
        revision: Revision to send back as ``baseRevision``.
        name: Calendar display name.
        updated_at: Last modification time.
    """

    state: dict[str, Any]
    revision: int
    name: str


class SaveCalendarResponse(TimestampedResponse):
    """Result of a save.

    Attributes:
        success: Always true; failures are reported as error responses.
        state: State now stored; clients adopt it as their new base.
        revision: Revision now stored.
        merged: Whether the save was merged with concurrent changes.
    """

    success: bool = True
    state: dict[str, Any]
    revision: int
    merged: bool = False


class RenameCalendarResponse(ApiModel):
    """Result of a rename."""

    success: bool = True
    id: str
    name: str


class DeleteCalendarResponse(ApiModel):
    """Result of a delete."""

    success: bool = True
