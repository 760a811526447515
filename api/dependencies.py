"""Dependency injection providers for the FastAPI application.

This module holds the shared CalendarStore that every route handler works
against, and the FastAPI dependency that hands it out.
"""

from typing import Annotated

from fastapi import Depends

from api.config import PlannerSettings
from models.persistence import CalendarRepository
from models.store import CalendarStore


# Global state
# One store per process; every request handler shares it
_calendar_store: CalendarStore | None = None


def get_calendar_store() -> CalendarStore:
    """Get the shared CalendarStore instance.

    This function is a FastAPI dependency. Tests replace it through
    ``app.dependency_overrides`` to inject a store over a temporary directory.

    Returns:
        The shared CalendarStore instance.

    Raises:
        RuntimeError: If the store hasn't been initialized yet.
    """
    if _calendar_store is None:
        raise RuntimeError(
            "CalendarStore not initialized. Call initialize_calendar_store() first."
        )

    return _calendar_store


def initialize_calendar_store(settings: PlannerSettings | None = None) -> CalendarStore:
    """Create the shared CalendarStore and load stored calendars.

    This should be called once when the FastAPI app starts up.

    Args:
        settings: Server settings; read from the environment when omitted.

    Returns:
        The newly created CalendarStore instance.
    """
    global _calendar_store

    settings = settings or PlannerSettings()
    repository = CalendarRepository(
        data_dir=settings.data_dir,
        legacy_file=settings.legacy_file,
    )
    _calendar_store = CalendarStore.open(repository)

    return _calendar_store


def shutdown_calendar_store() -> None:
    """Drop the shared store. Every write is already durable, so nothing is flushed."""
    global _calendar_store

    _calendar_store = None


# Type alias for dependency injection
CalendarStoreDep = Annotated[CalendarStore, Depends(get_calendar_store)]
