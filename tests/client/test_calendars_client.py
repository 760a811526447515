"""Unit tests for the calendars sub-client and CalendarSession.

Requests are answered by an httpx mock transport, so these tests check what
the client sends and how it interprets the answers.
"""

import json

import httpx
import pytest

from client import NotFoundError, PlannerClient
from tests.fixtures.schedules import make_event, make_raw_state

UPDATED_AT = "2025-01-06T09:00:00+00:00"


class RecordingServer:
    """Mock transport handler that records requests and replays responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)

    def body(self, index: int = -1):
        return json.loads(self.requests[index].content)


def _detail(state, revision, name="Trip"):
    return httpx.Response(
        200, json={"state": state, "revision": revision, "name": name, "updatedAt": UPDATED_AT}
    )


def _saved(state, revision, merged=False):
    return httpx.Response(
        200,
        json={"success": True, "state": state, "revision": revision, "updatedAt": UPDATED_AT, "merged": merged},
    )


@pytest.fixture
def make_client():
    clients = []

    def factory(server: RecordingServer) -> PlannerClient:
        client = PlannerClient(base_url="http://planner.local:3000", transport=httpx.MockTransport(server))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


class TestCalendarsClient:
    """Tests for the CalendarsClient request shapes."""

    def test_list(self, make_client):
        server = RecordingServer(
            httpx.Response(200, json=[{"id": "a", "name": "Trip", "updatedAt": UPDATED_AT}])
        )

        [summary] = make_client(server).calendars.list()

        assert summary.id == "a"
        assert summary.updated_at.tzinfo is not None
        assert server.requests[0].url.path == "/api/calendars"

    def test_create_with_and_without_name(self, make_client):
        server = RecordingServer(
            httpx.Response(201, json={"id": "a", "name": "Trip"}),
            httpx.Response(201, json={"id": "b", "name": "Untitled calendar"}),
        )
        calendars = make_client(server).calendars

        assert calendars.create("Trip").id == "a"
        assert server.body() == {"name": "Trip"}
        assert calendars.create().name == "Untitled calendar"
        assert server.body() == {}

    def test_get_parses_schedule(self, make_client):
        state = make_raw_state([make_event("a")], viewMode="grid")
        server = RecordingServer(_detail(state, 4))

        detail = make_client(server).calendars.get("a")

        assert detail.revision == 4
        assert detail.state == state
        assert detail.schedule.view_mode == "grid"
        assert detail.schedule.events["0"][0].id == "a"

    def test_save_sends_base(self, make_client):
        state = make_raw_state([make_event("a")])
        base = make_raw_state()
        server = RecordingServer(_saved(state, 2, merged=True))

        response = make_client(server).calendars.save("a", state, base_state=base, base_revision=1)

        assert server.body() == {"state": state, "baseState": base, "baseRevision": 1}
        assert response.merged is True
        assert response.revision == 2

    def test_save_without_base(self, make_client):
        server = RecordingServer(_saved(make_raw_state(), 1))

        make_client(server).calendars.save("a", make_raw_state())

        assert set(server.body()) == {"state"}

    def test_rename_uses_patch(self, make_client):
        server = RecordingServer(httpx.Response(200, json={"success": True, "id": "a", "name": "New"}))

        renamed = make_client(server).calendars.rename("a", "New")

        assert renamed.name == "New"
        assert server.requests[0].method == "PATCH"
        assert server.body() == {"name": "New"}

    def test_delete(self, make_client):
        server = RecordingServer(httpx.Response(200, json={"success": True}))

        assert make_client(server).calendars.delete("a") is True
        assert server.requests[0].method == "DELETE"

    def test_ids_are_path_escaped(self, make_client):
        server = RecordingServer(httpx.Response(404, json={"error": "Calendar Not Found", "detail": "nope"}))

        with pytest.raises(NotFoundError):
            make_client(server).calendars.get("a/b")

        assert server.requests[0].url.raw_path == b"/api/calendars/a%2Fb"


class TestCalendarSession:
    """Tests for the load / poll / save cycle."""

    def test_load_sets_base(self, make_client):
        state = make_raw_state([make_event("a")])
        server = RecordingServer(_detail(state, 3))
        session = make_client(server).calendars.session("cal")

        assert session.load() == state
        assert session.revision == 3
        assert session.base_state == state

    def test_poll_ignores_same_revision(self, make_client):
        state = make_raw_state([make_event("a")])
        server = RecordingServer(_detail(state, 3), _detail(state, 3))
        session = make_client(server).calendars.session("cal")
        session.load()

        assert session.poll() is None
        assert session.revision == 3

    def test_poll_adopts_newer_revision(self, make_client):
        old = make_raw_state([make_event("a")])
        new = make_raw_state([make_event("a"), make_event("b", start=600)])
        server = RecordingServer(_detail(old, 3), _detail(new, 4))
        session = make_client(server).calendars.session("cal")
        session.load()

        assert session.poll() == new
        assert session.revision == 4
        assert session.base_state == new

    def test_first_poll_always_adopts(self, make_client):
        state = make_raw_state()
        server = RecordingServer(_detail(state, 0))
        session = make_client(server).calendars.session("cal")

        assert session.poll() == state
        assert session.base_state == state

    def test_save_sends_held_base_and_adopts_response(self, make_client):
        base = make_raw_state([make_event("a")])
        edited = make_raw_state([make_event("a", title="Lunch")])
        merged = make_raw_state([make_event("a", title="Lunch"), make_event("b", start=600)])
        server = RecordingServer(_detail(base, 3), _saved(merged, 5, merged=True))
        session = make_client(server).calendars.session("cal")
        session.load()

        response = session.save(edited)

        assert server.body() == {"state": edited, "baseState": base, "baseRevision": 3}
        assert response.merged is True
        assert session.revision == 5
        assert session.base_state == merged

    def test_save_before_load_sends_no_base(self, make_client):
        state = make_raw_state([make_event("a")])
        server = RecordingServer(_saved(state, 1))
        session = make_client(server).calendars.session("cal")

        session.save(state)

        assert server.body() == {"state": state}
        assert session.revision == 1
