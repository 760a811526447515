"""Exception handlers for the planner FastAPI application.

This module converts the store's domain exceptions into consistent JSON
error responses of the form ``{"error": ..., "detail": ...}``.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from models.errors import CalendarNotFoundError, InvalidArgumentError, StorageError

logger = logging.getLogger(__name__)


async def calendar_not_found_handler(request: Request, exc: CalendarNotFoundError):
    """Handle CalendarNotFoundError exceptions.

    Returns a 404 naming the calendar that was requested.

    Args:
        request: The incoming request that triggered the error.
        exc: The CalendarNotFoundError exception.

    Returns:
        JSONResponse with 404 status.
    """
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Calendar Not Found",
            "detail": exc.message,
            "calendar_id": exc.calendar_id,
        },
    )


async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    """Handle InvalidArgumentError exceptions (e.g. renaming to an empty name).

    Args:
        request: The incoming request that triggered the error.
        exc: The InvalidArgumentError exception.

    Returns:
        JSONResponse with 400 status.
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid Argument",
            "detail": exc.message,
            "type": "InvalidArgumentError",
        },
    )


async def storage_error_handler(request: Request, exc: StorageError):
    """Handle StorageError exceptions.

    The stored calendar is unchanged when this is raised, so the client may
    retry the whole request.

    Args:
        request: The incoming request that triggered the error.
        exc: The StorageError exception.

    Returns:
        JSONResponse with 500 status.
    """
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Storage Error",
            "detail": "The calendar could not be saved; no changes were applied",
            "type": "StorageError",
        },
    )


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors raised outside request parsing.

    Args:
        request: The incoming request that triggered the error.
        exc: The ValidationError exception.

    Returns:
        JSONResponse with validation error details.
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation Error",
            "detail": "The request data failed validation",
            "validation_errors": exc.errors(include_url=False),
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle any unhandled exceptions.

    This is a catch-all handler for unexpected errors, including merge
    invariant violations. The full traceback goes to the log; the client only
    sees the exception type.

    Args:
        request: The incoming request that triggered the error.
        exc: The exception that was raised.

    Returns:
        JSONResponse with generic error message.
    """
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "type": type(exc).__name__,
        },
    )
