"""Shared planner data models package.

This package contains the schedule state models, the three-way merge engine,
payload normalization, durable storage and the calendar store that ties them
together.
"""

from models.calendar import CalendarRecord, CalendarSummary, SaveResult
from models.errors import (
    CalendarNotFoundError,
    CalendarStoreError,
    InvalidArgumentError,
    MergeInvariantViolation,
    StorageError,
)
from models.merge import flatten_events, group_by_day, merge_states
from models.normalize import normalize_state
from models.persistence import CalendarRepository
from models.schedule import (
    LocationData,
    PreciseRouteCache,
    ScheduleState,
    TimeBlock,
    default_schedule_state,
)
from models.store import CalendarStore

__all__ = [
    "CalendarRecord",
    "CalendarSummary",
    "SaveResult",
    "CalendarStoreError",
    "CalendarNotFoundError",
    "InvalidArgumentError",
    "MergeInvariantViolation",
    "StorageError",
    "flatten_events",
    "group_by_day",
    "merge_states",
    "normalize_state",
    "CalendarRepository",
    "LocationData",
    "PreciseRouteCache",
    "ScheduleState",
    "TimeBlock",
    "default_schedule_state",
    "CalendarStore",
]
