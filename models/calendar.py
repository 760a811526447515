"""Calendar records owned by the store."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from models.schedule import ScheduleState


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CalendarRecord(BaseModel):
    """One calendar as held in the store's registry.

    Records are frozen; every mutation builds a new record with
    ``model_copy(update=...)`` and swaps it into the registry.

    Args:
        calendar_id: Server-generated id, immutable.
        name: Display name.
        state: Current schedule state.
        revision: Session-scoped counter, bumped on every accepted save.
        updated_at: When the name or state last changed.
    """

    model_config = ConfigDict(frozen=True)

    calendar_id: str = Field(description="Unique calendar identifier")
    name: str = Field(description="Calendar display name")
    state: ScheduleState = Field(description="Current schedule state")
    revision: int = Field(default=0, description="Optimistic concurrency token")
    updated_at: datetime = Field(
        default_factory=utc_now, description="When calendar was last modified"
    )

    @field_serializer("updated_at")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to ISO format string.

        Args:
            dt: Datetime to serialize.

        Returns:
            ISO format string.
        """
        return dt.isoformat()


class CalendarSummary(BaseModel):
    """Listing entry for a calendar."""

    model_config = ConfigDict(frozen=True)

    calendar_id: str
    name: str
    updated_at: datetime


class SaveResult(BaseModel):
    """Outcome of a save.

    Args:
        state: The state now stored (unchanged on a no-op save).
        revision: The revision now stored.
        updated_at: Last modification time of the calendar.
        changed: Whether the save replaced the stored state.
        merged: Whether the three-way merge was used.
    """

    model_config = ConfigDict(frozen=True)

    state: ScheduleState
    revision: int
    updated_at: datetime
    changed: bool
    merged: bool
