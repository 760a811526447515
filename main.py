"""Main entry point for the shared planner FastAPI application.

This module creates and configures the FastAPI app that browser clients on
the local network poll and save calendars against.

To run the development server:
    uv run uvicorn main:app --reload --port 3000

To run on the LAN:
    uv run python main.py
"""

import logging
import socket
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from api.config import PlannerSettings
from api.dependencies import initialize_calendar_store, shutdown_calendar_store
from api.exceptions import (
    calendar_not_found_handler,
    generic_exception_handler,
    invalid_argument_handler,
    storage_error_handler,
    validation_exception_handler,
)
from api.routes import calendars as calendar_routes
from models.errors import CalendarNotFoundError, InvalidArgumentError, StorageError

logger = logging.getLogger(__name__)

settings = PlannerSettings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events.

    Loads every stored calendar (importing the legacy data file on first
    run) before requests are served, and drops the store on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    store = initialize_calendar_store(settings)
    logger.info(f"Calendar store ready with {len(store)} calendar(s)")

    yield

    shutdown_calendar_store()
    logger.info("Calendar store shut down")


app = FastAPI(
    title="Shared Planner",
    description="Multi-client calendar store with optimistic concurrency",
    version="0.1.0",
    lifespan=lifespan,
)

# Clients run on the trusted LAN, possibly from a dev server on another port
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
# Order matters: specific exceptions before general ones
app.add_exception_handler(CalendarNotFoundError, calendar_not_found_handler)
app.add_exception_handler(InvalidArgumentError, invalid_argument_handler)
app.add_exception_handler(StorageError, storage_error_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(calendar_routes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring.

    Returns:
        A dictionary indicating the service is healthy.
    """
    return {"status": "healthy"}


if settings.static_dir is not None and settings.static_dir.is_dir():
    # Mounted last so API routes take precedence
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
else:

    @app.get("/")
    async def root():
        """Root endpoint - returns a welcome message.

        Returns:
            A dictionary with a welcome message.
        """
        return {
            "message": "Welcome to the Shared Planner API",
            "version": "0.1.0",
            "docs_url": "/docs",
        }


def _outbound_address() -> str:
    """Address of the interface holding the default route.

    Connecting a UDP socket only selects a route; no packet is sent.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.connect(("10.255.255.255", 1))
        return sock.getsockname()[0]


def lan_addresses() -> list[str]:
    """Return this host's non-loopback IPv4 addresses."""
    addresses = set()
    try:
        for info in socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET):
            addresses.add(info[4][0])
    except OSError as e:
        logger.debug(f"Hostname lookup failed: {e}")
    try:
        addresses.add(_outbound_address())
    except OSError as e:
        logger.debug(f"No routable interface found: {e}")
    return sorted(address for address in addresses if not address.startswith(("127.", "0.")))


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(f"🚀 Server running at http://{settings.host}:{settings.port}")
    if settings.host == "0.0.0.0":
        print("Available on your LAN:")
        for address in lan_addresses():
            print(f"  http://{address}:{settings.port}")

    uvicorn.run(app, host=settings.host, port=settings.port)
