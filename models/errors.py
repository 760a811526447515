"""Domain exceptions raised by the calendar store and merge engine.

The API layer maps each of these to an HTTP status in ``api/exceptions.py``.
"""


class CalendarStoreError(Exception):
    """Base class for all calendar store errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CalendarNotFoundError(CalendarStoreError):
    """Raised when a calendar id is unknown (never created or deleted).

    Args:
        calendar_id: The id that was requested.
    """

    def __init__(self, calendar_id: str):
        self.calendar_id = calendar_id
        super().__init__(f"Calendar '{calendar_id}' not found")


class InvalidArgumentError(CalendarStoreError, ValueError):
    """Raised when create/rename input is malformed (e.g. an empty name)."""


class StorageError(CalendarStoreError):
    """Raised when a durable read or write fails.

    Args:
        message: Description of the failed operation.
        path: The file involved, if any.
    """

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class MergeInvariantViolation(CalendarStoreError, AssertionError):
    """Raised when the merge engine sees or produces a malformed state.

    Unreachable when the store normalizes its inputs; seeing one is a bug.
    """
