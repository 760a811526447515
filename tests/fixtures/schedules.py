"""Factories for schedule states and events."""

from typing import Any

from models.normalize import normalize_state
from models.schedule import ScheduleState

FIXED_START_DATE = "2025-01-06T00:00:00.000Z"


def make_event(
    event_id: str,
    day: int = 0,
    start: int = 9 * 60,
    end: int | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """Create a raw (wire format) event.

    Args:
        event_id: Event id.
        day: Day index.
        start: Start minute.
        end: End minute (defaults to start + 60).
        **kwargs: Additional camelCase fields to set or override.

    Returns:
        Event dict as a browser client would send it.
    """
    event = {
        "id": event_id,
        "dayIndex": day,
        "startMinutes": start,
        "endMinutes": end if end is not None else start + 60,
        "color": "#5B7FBF",
        "title": f"Event {event_id}",
        "description": "",
    }
    event.update(kwargs)
    return event


def make_raw_state(events: list[dict[str, Any]] | None = None, **settings: Any) -> dict[str, Any]:
    """Create a raw state, bucketing events by their dayIndex.

    Args:
        events: Raw events.
        **settings: camelCase setting overrides (numDays, viewMode, ...).

    Returns:
        State dict as a browser client would send it.
    """
    buckets: dict[str, list[dict[str, Any]]] = {}
    for event in events or []:
        buckets.setdefault(str(event["dayIndex"]), []).append(event)

    state = {
        "numDays": 5,
        "startDate": FIXED_START_DATE,
        "startHour": 7,
        "endHour": 22,
        "viewMode": "row",
        "events": buckets,
    }
    state.update(settings)
    return state


def make_state(events: list[dict[str, Any]] | None = None, **settings: Any) -> ScheduleState:
    """Create a normalized ScheduleState (see make_raw_state)."""
    return normalize_state(make_raw_state(events, **settings))


def event_ids(state: ScheduleState) -> set[str]:
    """Return the ids of all events in a state."""
    return {event.id for event in state.iter_events()}


# Pre-built events
MORNING_RUN = make_event("run", day=0, start=7 * 60, end=8 * 60, title="Morning run")

MUSEUM_VISIT = make_event(
    "museum",
    day=1,
    start=10 * 60,
    end=13 * 60,
    title="Museum",
    location={"name": "Rijksmuseum", "lat": 52.36, "lng": 4.885},
    destination={"name": "Vondelpark", "lat": 52.358, "lng": 4.868},
    routeMode="precise",
    preciseRouteCache={
        "from": {"name": "Rijksmuseum", "lat": 52.36, "lng": 4.885},
        "to": {"name": "Vondelpark", "lat": 52.358, "lng": 4.868},
        "coords": [[52.36, 4.885], [52.359, 4.876], [52.358, 4.868]],
    },
)
