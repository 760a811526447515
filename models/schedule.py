"""Schedule state models.

A calendar's schedule state is the snapshot clients fetch, edit locally and
submit back: the visible date range, the hour window, the view mode and the
day-bucketed time blocks. Field names are snake_case in Python and camelCase
on the wire, matching what the browser client sends.

All models here are frozen. The store swaps whole states instead of editing
them, so a snapshot handed to a reader never changes underneath it.
"""

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


ViewMode = Literal["row", "grid", "day"]
RouteMode = Literal["simple", "precise", "hidden"]

VIEW_MODES: tuple[str, ...] = ("row", "grid", "day")
ROUTE_MODES: tuple[str, ...] = ("simple", "precise", "hidden")

DEFAULT_NUM_DAYS = 5
DEFAULT_START_HOUR = 7
DEFAULT_END_HOUR = 22
DEFAULT_VIEW_MODE: ViewMode = "row"
DEFAULT_COLOR = "#5B7FBF"


class WireModel(BaseModel):
    """Base for models that travel to and from browser clients."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LocationData(WireModel):
    """A named point on the map.

    Args:
        name: Display name (usually from geocoding).
        lat: Latitude in degrees.
        lng: Longitude in degrees.
    """

    name: str = Field(description="Display name of the place")
    lat: float = Field(description="Latitude in degrees")
    lng: float = Field(description="Longitude in degrees")


class PreciseRouteCache(WireModel):
    """Route geometry computed for a specific pair of endpoints.

    The cache is only valid while ``origin`` and ``to`` match the event's
    current location and destination; clients recompute it otherwise.
    """

    origin: LocationData = Field(alias="from", description="Route start")
    to: LocationData = Field(description="Route end")
    coords: list[tuple[float, float]] = Field(
        default_factory=list, description="Ordered [lat, lng] pairs"
    )


class TimeBlock(WireModel):
    """A single event placed on a day column.

    Args:
        id: Client-generated id, unique within the calendar.
        day_index: Which day column the block belongs to.
        start_minutes: Start, in minutes from midnight.
        end_minutes: End, in minutes from midnight.
        title: Event title.
        description: Free-text notes.
        color: Palette color token.
        location: Optional start / origin place.
        destination: Optional end place for route planning.
        route_mode: How the route is drawn on the map.
        precise_route_cache: Cached routed geometry.
    """

    id: str = Field(description="Event id")
    day_index: int = Field(description="Day column index")
    start_minutes: int | float = Field(description="Minutes from midnight")
    end_minutes: int | float = Field(description="Minutes from midnight")
    title: str = Field(default="", description="Event title")
    description: str = Field(default="", description="Event notes")
    color: str = Field(default=DEFAULT_COLOR, description="Color token")
    location: Optional[LocationData] = Field(default=None, description="Origin")
    destination: Optional[LocationData] = Field(
        default=None, description="Destination"
    )
    route_mode: Optional[RouteMode] = Field(default=None, description="Route mode")
    precise_route_cache: Optional[PreciseRouteCache] = Field(
        default=None, description="Cached route geometry"
    )


class ScheduleState(WireModel):
    """Complete schedule state of one calendar.

    ``events`` maps a day-index key (a string, as JSON object keys are) to the
    blocks of that day ordered by start time. Every block sits in the bucket
    named after its own ``day_index`` and ids are unique across all buckets;
    ``models.normalize.normalize_state`` and ``models.merge.group_by_day``
    produce states of that shape.
    """

    num_days: int = Field(default=DEFAULT_NUM_DAYS, description="Visible days")
    start_date: str = Field(description="First visible day (ISO string)")
    start_hour: int = Field(default=DEFAULT_START_HOUR, description="First hour")
    end_hour: int = Field(default=DEFAULT_END_HOUR, description="Last hour")
    view_mode: ViewMode = Field(default=DEFAULT_VIEW_MODE, description="Layout")
    events: dict[str, list[TimeBlock]] = Field(
        default_factory=dict, description="Blocks grouped by day index"
    )

    @property
    def event_count(self) -> int:
        """Total number of blocks across all days."""
        return sum(len(bucket) for bucket in self.events.values())

    def iter_events(self):
        """Yield every block, bucket by bucket."""
        for bucket in self.events.values():
            yield from bucket


def current_start_date() -> str:
    """Return "now" as an ISO string the way browsers print it."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_schedule_state() -> ScheduleState:
    """Build the state a freshly created calendar starts with."""
    return ScheduleState(start_date=current_start_date())
