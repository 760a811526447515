"""Normalization of raw client payloads into schedule states.

Clients submit loosely-typed JSON. Every raw state goes through
``normalize_state`` before the store compares or merges it, so the merge
engine only ever sees well-typed ``ScheduleState`` objects. Anything missing
or invalid falls back to a documented default.
"""

import logging
import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from models.merge import group_by_day
from models.schedule import (
    DEFAULT_COLOR,
    DEFAULT_END_HOUR,
    DEFAULT_NUM_DAYS,
    DEFAULT_START_HOUR,
    DEFAULT_VIEW_MODE,
    ROUTE_MODES,
    VIEW_MODES,
    LocationData,
    PreciseRouteCache,
    ScheduleState,
    TimeBlock,
    current_start_date,
)

logger = logging.getLogger(__name__)


def _as_number(value: Any) -> Optional[float]:
    """Coerce ints, floats and numeric strings to a finite float."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _is_date_string(value: Any) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def _setting(raw: Mapping[str, Any], key: str) -> Any:
    """Read a top-level setting, falling back to the legacy ``settings`` object."""
    value = raw.get(key)
    if value is None:
        settings = raw.get("settings")
        if isinstance(settings, Mapping):
            value = settings.get(key)
    return value


def _text(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _optional_model(model: type[BaseModel], value: Any, event_id: str, key: str) -> Any:
    """Validate a nested optional object, returning None when it is unusable."""
    if value is None:
        return None
    try:
        return model.model_validate(value)
    except ValidationError:
        logger.warning(f"Clearing invalid {key} of event '{event_id}'")
        return None


def normalize_event(raw_event: Any, day_key: Any = None) -> Optional[TimeBlock]:
    """Validate one raw event, defaulting whatever can be defaulted.

    An event without ``dayIndex`` takes it from the bucket it was found in.
    Text fields that are missing or not strings get their defaults; an
    unknown ``routeMode`` and unusable locations or route caches are cleared.
    Only an event without a usable id, day or time span is dropped.

    Args:
        raw_event: Raw event mapping.
        day_key: Key of the bucket the event was stored under.

    Returns:
        The TimeBlock, or None if the event cannot be placed on the calendar.
    """
    if not isinstance(raw_event, Mapping):
        logger.warning(f"Dropping non-object event in day '{day_key}'")
        return None

    event_id = raw_event.get("id")
    if isinstance(event_id, bool) or not isinstance(event_id, (str, int)) or event_id == "":
        logger.warning(f"Dropping event without an id in day '{day_key}'")
        return None
    event_id = str(event_id)

    day_index = raw_event.get("dayIndex")
    if day_index is None:
        day_index = day_key
    day = _as_number(day_index)
    start = _as_number(raw_event.get("startMinutes"))
    end = _as_number(raw_event.get("endMinutes"))
    if day is None or not day.is_integer() or start is None or end is None:
        logger.warning(f"Dropping event '{event_id}' without a usable day or time span")
        return None

    route_mode = raw_event.get("routeMode")

    return TimeBlock(
        id=event_id,
        day_index=int(day),
        start_minutes=int(start) if start.is_integer() else start,
        end_minutes=int(end) if end.is_integer() else end,
        title=_text(raw_event.get("title"), ""),
        description=_text(raw_event.get("description"), ""),
        color=_text(raw_event.get("color"), DEFAULT_COLOR),
        location=_optional_model(LocationData, raw_event.get("location"), event_id, "location"),
        destination=_optional_model(
            LocationData, raw_event.get("destination"), event_id, "destination"
        ),
        route_mode=route_mode if route_mode in ROUTE_MODES else None,
        precise_route_cache=_optional_model(
            PreciseRouteCache, raw_event.get("preciseRouteCache"), event_id, "preciseRouteCache"
        ),
    )


def normalize_events(raw_events: Any) -> dict[str, list[TimeBlock]]:
    """Validate day-bucketed events and regroup them by their own day index.

    Args:
        raw_events: Raw mapping of day key -> list of event objects.

    Returns:
        Day-bucketed, start-ordered events with unique ids. A later duplicate
        id replaces an earlier one.
    """
    if not isinstance(raw_events, Mapping):
        return {}

    by_id: dict[str, TimeBlock] = {}
    for day_key, bucket in raw_events.items():
        if not isinstance(bucket, (list, tuple)):
            logger.warning(f"Ignoring non-list event bucket for day '{day_key}'")
            continue
        for raw_event in bucket:
            event = normalize_event(raw_event, day_key)
            if event is not None:
                by_id[event.id] = event
    return group_by_day(by_id.values())


def normalize_state(raw: Any) -> ScheduleState:
    """Turn an arbitrary client payload into a well-typed ScheduleState.

    Defaults: numDays 5, startDate now, startHour 7, endHour 22, viewMode
    "row", events empty. Numeric fields accept numeric strings and are
    truncated to integers. A ScheduleState passes through unchanged.

    Args:
        raw: The payload, usually a dict decoded from JSON.

    Returns:
        A normalized ScheduleState.
    """
    if isinstance(raw, ScheduleState):
        return raw
    if not isinstance(raw, Mapping):
        raw = {}

    num_days = _as_number(_setting(raw, "numDays"))
    if num_days is None or int(num_days) <= 0:
        num_days = DEFAULT_NUM_DAYS

    start_hour = _as_number(_setting(raw, "startHour"))
    end_hour = _as_number(_setting(raw, "endHour"))

    start_date = raw.get("startDate")
    view_mode = _setting(raw, "viewMode")

    return ScheduleState(
        num_days=int(num_days),
        start_date=start_date.strip() if _is_date_string(start_date) else current_start_date(),
        start_hour=int(start_hour) if start_hour is not None else DEFAULT_START_HOUR,
        end_hour=int(end_hour) if end_hour is not None else DEFAULT_END_HOUR,
        view_mode=view_mode if view_mode in VIEW_MODES else DEFAULT_VIEW_MODE,
        events=normalize_events(raw.get("events")),
    )
