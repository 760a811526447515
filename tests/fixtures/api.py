"""Shared fixtures for API testing."""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_calendar_store
from main import app


@pytest.fixture
def api_client(store):
    """Provide a TestClient whose routes use the test store.

    The TestClient is not entered as a context manager, so the app's
    lifespan (which would load the store from the environment) never runs.

    Yields:
        A TestClient instance.

    Example:
        def test_something(api_client):
            response = api_client.get("/api/calendars")
            assert response.status_code == 200
    """
    app.dependency_overrides[get_calendar_store] = lambda: store

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()
