"""Integration tests for the planner API client library.

These tests run the client against the real FastAPI app using Starlette's
TestClient (sync) and httpx's ASGITransport (async), with the app's store
pointed at a temporary data directory.

To run these tests:
    uv run pytest tests/client/test_integration.py -v
"""

import httpx
import pytest
from httpx import ASGITransport
from starlette.testclient import TestClient

from api.dependencies import get_calendar_store
from client import (
    AsyncPlannerClient,
    BadRequestError,
    NotFoundError,
    PlannerClient,
    ServerError,
)
from main import app
from models.errors import StorageError
from tests.fixtures.schedules import make_event


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def override_store(store):
    """Route every request of this module to the temporary store."""
    app.dependency_overrides[get_calendar_store] = lambda: store
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def sync_client():
    """Create a synchronous planner client connected to the test app.

    httpx requests are replayed through Starlette's TestClient by a small
    custom transport.
    """
    test_client = TestClient(app, raise_server_exceptions=False)

    class SyncTestTransport(httpx.BaseTransport):
        def handle_request(self, request: httpx.Request) -> httpx.Response:
            response = test_client.request(
                method=request.method,
                url=request.url.raw_path.decode("ascii"),
                content=request.content,
                headers=dict(request.headers),
            )
            return httpx.Response(
                status_code=response.status_code,
                headers=response.headers,
                content=response.content,
            )

    with PlannerClient(base_url="http://test", transport=SyncTestTransport()) as client:
        yield client


@pytest.fixture
async def async_client():
    """Create an asynchronous planner client connected to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncPlannerClient(base_url="http://test", transport=transport) as client:
        yield client


def _with_events(state: dict, *events: dict) -> dict:
    buckets: dict[str, list] = {}
    for event in events:
        buckets.setdefault(str(event["dayIndex"]), []).append(event)
    return {**state, "events": buckets}


def _event_ids(state: dict) -> set[str]:
    return {event["id"] for bucket in state["events"].values() for event in bucket}


# =============================================================================
# Sync client
# =============================================================================


class TestSyncClient:
    """End-to-end tests for PlannerClient."""

    def test_health(self, sync_client):
        assert sync_client.health() is True

    def test_calendar_lifecycle(self, sync_client):
        created = sync_client.calendars.create("Trip")
        assert [c.id for c in sync_client.calendars.list()] == [created.id]

        renamed = sync_client.calendars.rename(created.id, "Holiday")
        assert renamed.name == "Holiday"
        assert sync_client.calendars.get(created.id).name == "Holiday"

        assert sync_client.calendars.delete(created.id) is True
        with pytest.raises(NotFoundError):
            sync_client.calendars.get(created.id)

    def test_empty_rename_rejected(self, sync_client):
        created = sync_client.calendars.create("Trip")

        with pytest.raises(BadRequestError) as exc_info:
            sync_client.calendars.rename(created.id, "  ")

        assert exc_info.value.error_type == "InvalidArgumentError"

    def test_two_sessions_converge(self, sync_client):
        """Two editors save from the same base; both changes are kept."""
        calendar_id = sync_client.calendars.create("Shared").id
        alice = sync_client.calendars.session(calendar_id)
        bob = sync_client.calendars.session(calendar_id)
        base = alice.load()
        bob.load()

        alice.save(_with_events(base, make_event("lunch", start=720)))
        response = bob.save(_with_events({**base, "viewMode": "grid"}, make_event("dinner", start=1140)))

        assert response.merged is True
        assert _event_ids(response.state) == {"lunch", "dinner"}
        assert response.state["viewMode"] == "grid"

        newer = alice.poll()
        assert newer == response.state
        assert alice.revision == bob.revision == 2

    def test_session_consecutive_saves(self, sync_client):
        """A session's second save builds on its first without a merge."""
        calendar_id = sync_client.calendars.create("Solo").id
        session = sync_client.calendars.session(calendar_id)
        base = session.load()

        first = session.save(_with_events(base, make_event("a")))
        second = session.save(_with_events(first.state, make_event("a"), make_event("b", start=600)))

        assert first.merged is False
        assert second.merged is False
        assert second.revision == 2
        assert session.poll() is None

    def test_delete_wins_across_sessions(self, sync_client):
        calendar_id = sync_client.calendars.create("Trip").id
        setup = sync_client.calendars.session(calendar_id)
        base = setup.load()
        setup.save(_with_events(base, make_event("a"), make_event("b", start=600)))

        editor = sync_client.calendars.session(calendar_id)
        deleter = sync_client.calendars.session(calendar_id)
        shared = editor.load()
        deleter.load()

        editor.save(_with_events(shared, make_event("a", title="Edited"), make_event("b", start=600)))
        response = deleter.save(_with_events(shared, make_event("b", start=600)))

        assert response.merged is True
        assert _event_ids(response.state) == {"b"}

    def test_storage_failure_surfaces_as_server_error(self, sync_client, store, monkeypatch):
        calendar_id = sync_client.calendars.create("Trip").id

        def failing_write(record):
            raise StorageError("disk full")

        monkeypatch.setattr(store.repository, "write", failing_write)

        with pytest.raises(ServerError) as exc_info:
            sync_client.calendars.save(calendar_id, {"numDays": 3})

        assert exc_info.value.error_type == "StorageError"
        assert sync_client.calendars.get(calendar_id).revision == 0


# =============================================================================
# Async client
# =============================================================================


class TestAsyncClient:
    """End-to-end tests for AsyncPlannerClient."""

    async def test_health(self, async_client):
        assert await async_client.health() is True

    async def test_create_save_and_fetch(self, async_client):
        created = await async_client.calendars.create("Async")
        detail = await async_client.calendars.get(created.id)

        saved = await async_client.calendars.save(
            created.id,
            _with_events(detail.state, make_event("a", day=2)),
            base_state=detail.state,
            base_revision=detail.revision,
        )

        assert saved.revision == 1
        fetched = await async_client.calendars.get(created.id)
        assert fetched.schedule.events["2"][0].id == "a"

    async def test_missing_calendar(self, async_client):
        with pytest.raises(NotFoundError):
            await async_client.calendars.save("missing", {})

    async def test_list_and_delete(self, async_client):
        created = await async_client.calendars.create("Temp")

        assert [c.name for c in await async_client.calendars.list()] == ["Temp"]
        assert await async_client.calendars.delete(created.id) is True
        assert await async_client.calendars.list() == []
