"""Client response models for the planner API client.

States are kept in wire format (camelCase dicts) so that a fetched state can
be sent back verbatim as ``baseState``; ``schedule`` parses one into the
typed model when needed.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.normalize import normalize_state
from models.schedule import ScheduleState

__all__ = [
    "CalendarDetail",
    "CalendarSummary",
    "CreatedCalendar",
    "RenamedCalendar",
    "SaveResponse",
]


class ClientModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CalendarSummary(ClientModel):
    """Listing entry.

    Attributes:
        id: Calendar id.
        name: Calendar name.
        updated_at: Last modification time.
    """

    id: str
    name: str
    updated_at: datetime


class CreatedCalendar(ClientModel):
    """Response to creating a calendar."""

    id: str
    name: str


class CalendarDetail(ClientModel):
    """A calendar's state and revision as fetched.

    Attributes:
        state: Schedule state in wire format.
        revision: Revision to send back as the base of the next save.
        name: Calendar name.
        updated_at: Last modification time.
    """

    state: dict[str, Any]
    revision: int
    name: str
    updated_at: datetime

    @property
    def schedule(self) -> ScheduleState:
        return normalize_state(self.state)


class SaveResponse(ClientModel):
    """Result of a save.

    Attributes:
        success: True when the server accepted the save.
        state: State now stored; the base of the next save.
        revision: Revision now stored.
        updated_at: Last modification time.
        merged: Whether the server merged concurrent changes.
    """

    success: bool
    state: dict[str, Any]
    revision: int
    updated_at: Optional[datetime] = None
    merged: bool = Field(default=False)

    @property
    def schedule(self) -> ScheduleState:
        return normalize_state(self.state)


class RenamedCalendar(ClientModel):
    """Response to renaming a calendar."""

    success: bool
    id: str
    name: str
