"""Three-way merge of schedule states.

When a client saves against a revision that is no longer current, the store
reconciles three snapshots:

- ``current``: the authoritative state, possibly advanced by other clients.
- ``base``: the state the client last fetched.
- ``incoming``: the state the client wants to save.

Whatever the client changed relative to ``base`` wins; whatever it left
alone keeps ``current``'s value, so concurrent edits from other clients
survive. The functions here are pure and expect normalized input
(see ``models.normalize``).
"""

from collections.abc import Iterable, Mapping

from models.errors import MergeInvariantViolation
from models.schedule import ScheduleState, TimeBlock


SCALAR_FIELDS: tuple[str, ...] = (
    "num_days",
    "start_date",
    "start_hour",
    "end_hour",
    "view_mode",
)


def flatten_events(events: Mapping[str, Iterable[TimeBlock]]) -> dict[str, TimeBlock]:
    """Map event id to event, discarding the day-bucket grouping.

    Args:
        events: Day-bucketed events.

    Returns:
        Dictionary of id -> TimeBlock. A later duplicate id replaces an earlier one.
    """
    flat: dict[str, TimeBlock] = {}
    for bucket in events.values():
        for event in bucket:
            flat[event.id] = event
    return flat


def group_by_day(events: Iterable[TimeBlock]) -> dict[str, list[TimeBlock]]:
    """Group events into buckets keyed by their own day index.

    Each bucket is sorted by start minute. The sort is stable, so events
    starting at the same minute keep their relative order.

    Args:
        events: Events in any order.

    Returns:
        Dictionary of day-index key -> start-ordered events.
    """
    grouped: dict[str, list[TimeBlock]] = {}
    for event in events:
        grouped.setdefault(str(event.day_index), []).append(event)
    for bucket in grouped.values():
        bucket.sort(key=lambda event: event.start_minutes)
    return grouped


def merge_states(
    current: ScheduleState,
    base: ScheduleState,
    incoming: ScheduleState,
) -> ScheduleState:
    """Reconcile a client's save with concurrent changes.

    Scalar settings: a field the client changed (incoming != base) takes the
    incoming value, any other field keeps the current value.

    Events, starting from current's events:

    - an incoming event that differs from its base version, or that base did
      not have, replaces whatever current holds for that id;
    - an event in base but missing from incoming was deleted by the client
      and is removed, even if current edited it meanwhile;
    - events only current knows about are kept untouched.

    Args:
        current: Authoritative stored state.
        base: State the client started from.
        incoming: State the client submitted.

    Returns:
        The merged state, regrouped by day index.

    Raises:
        MergeInvariantViolation: If an argument is not a ScheduleState or the
            result breaks the day-bucket invariant.
    """
    for label, state in (("current", current), ("base", base), ("incoming", incoming)):
        if not isinstance(state, ScheduleState):
            raise MergeInvariantViolation(
                f"merge_states() got {type(state).__name__} for {label}; "
                "states must be normalized before merging"
            )

    scalars = {
        field: getattr(incoming, field)
        for field in SCALAR_FIELDS
        if getattr(incoming, field) != getattr(base, field)
    }

    base_events = flatten_events(base.events)
    incoming_events = flatten_events(incoming.events)
    working = flatten_events(current.events)

    for event_id, event in incoming_events.items():
        if event != base_events.get(event_id):
            working[event_id] = event

    for event_id in base_events:
        if event_id not in incoming_events:
            working.pop(event_id, None)

    merged = current.model_copy(update={**scalars, "events": group_by_day(working.values())})
    check_bucket_invariants(merged)
    return merged


def check_bucket_invariants(state: ScheduleState) -> None:
    """Verify ids are unique and every event sits in its own day's bucket.

    Raises:
        MergeInvariantViolation: On the first violation found.
    """
    seen: set[str] = set()
    for day_key, bucket in state.events.items():
        for event in bucket:
            if str(event.day_index) != day_key:
                raise MergeInvariantViolation(
                    f"Event '{event.id}' has dayIndex {event.day_index} "
                    f"but is stored under day '{day_key}'"
                )
            if event.id in seen:
                raise MergeInvariantViolation(f"Duplicate event id '{event.id}'")
            seen.add(event.id)
