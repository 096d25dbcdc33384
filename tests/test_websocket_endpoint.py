"""End-to-end tests through the FastAPI app: WebSocket protocol plus HTTP routes."""

import uuid
from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from canvas_sync.main import app


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def room_id() -> str:
    # The registry is process-global, so every test gets its own room
    return f"test-{uuid.uuid4().hex[:8]}"


def join(ws: Any, room_id: str, name: str) -> dict[str, Any]:
    """Join and return the state-sync, consuming the joiner's users-update."""
    ws.send_json({"type": "join", "roomId": room_id, "userName": name})
    state_sync = ws.receive_json()
    assert state_sync["type"] == "state-sync"
    assert ws.receive_json()["type"] == "users-update"
    return state_sync


def draw_start(op_id: str) -> dict[str, Any]:
    return {
        "type": "draw-start",
        "point": {"x": 10, "y": 20},
        "color": "#000000",
        "strokeWidth": 2,
        "operationId": op_id,
    }


class TestHttpRoutes:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_version(self, client: TestClient) -> None:
        response = client.get("/version")
        assert response.status_code == 200
        assert "version" in response.json()

    def test_unknown_room_is_404_and_not_created(self, client: TestClient, room_id: str) -> None:
        assert client.get(f"/rooms/{room_id}").status_code == 404
        assert room_id not in [r["roomId"] for r in client.get("/rooms").json()]


class TestWebSocketProtocol:
    def test_join_and_draw_between_two_clients(self, client: TestClient, room_id: str) -> None:
        with client.websocket_connect("/ws") as alice:
            state = join(alice, room_id, "Alice")
            assert state["operations"] == []
            assert [u["name"] for u in state["users"]] == ["Alice"]

            with client.websocket_connect("/ws") as bob:
                join(bob, room_id, "Bob")
                assert alice.receive_json()["type"] == "user-joined"
                assert alice.receive_json()["type"] == "users-update"

                alice.send_json(draw_start("s1"))
                alice.send_json(
                    {"type": "draw-move", "operationId": "s1", "point": {"x": 11, "y": 21}}
                )
                alice.send_json({"type": "draw-end", "operationId": "s1"})

                start = bob.receive_json()
                assert start["type"] == "draw-start"
                assert start["id"] == "s1"
                assert start["sequenceNumber"] == 0
                assert bob.receive_json()["type"] == "draw-move"
                assert bob.receive_json() == {"type": "draw-end", "operationId": "s1"}

                bob.send_json({"type": "undo"})
                undo = {"type": "undo", "operationId": "s1", "userId": start["userId"]}
                assert bob.receive_json() == undo
                assert alice.receive_json() == undo

                bob.send_json({"type": "leave"})

            # Bob left; Alice hears about it
            assert alice.receive_json()["type"] == "user-left"
            assert alice.receive_json()["type"] == "users-update"

    def test_late_joiner_gets_snapshot(self, client: TestClient, room_id: str) -> None:
        with client.websocket_connect("/ws") as alice:
            join(alice, room_id, "Alice")
            alice.send_json(draw_start("s1"))
            alice.send_json(draw_start("s2"))
            alice.send_json({"type": "request-users"})
            assert alice.receive_json()["type"] == "users-list"

            with client.websocket_connect("/ws") as bob:
                state = join(bob, room_id, "Bob")

        assert [op["id"] for op in state["operations"]] == ["s1", "s2"]
        assert state["sequenceNumber"] == 2

    def test_rooms_are_isolated(self, client: TestClient, room_id: str) -> None:
        other_room = f"{room_id}-other"
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            join(alice, room_id, "Alice")
            join(bob, other_room, "Bob")

            alice.send_json(draw_start("s1"))
            bob.send_json({"type": "request-users"})

            # First thing Bob sees is his own reply, not Alice's stroke
            reply = bob.receive_json()
            assert reply["type"] == "users-list"
            assert [u["name"] for u in reply["users"]] == ["Bob"]

    def test_bad_frames_are_ignored(self, client: TestClient, room_id: str) -> None:
        with client.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            ws.send_json({"type": "draw-start"})
            ws.send_json({"type": "undo"})  # before join
            join(ws, room_id, "Alice")
            ws.send_json({"type": "teleport"})
            ws.send_json({"type": "request-users"})

            assert ws.receive_json()["type"] == "users-list"

    def test_binary_frame_keeps_session(self, client: TestClient, room_id: str) -> None:
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            join(alice, room_id, "Alice")
            join(bob, room_id, "Bob")
            assert alice.receive_json()["type"] == "user-joined"
            assert alice.receive_json()["type"] == "users-update"

            bob.send_bytes(b"\x00garbage")
            bob.send_json(draw_start("s1"))

            # Bob is still in the room, so his stroke arrives instead of user-left
            start = alice.receive_json()
            assert start["type"] == "draw-start"
            assert start["id"] == "s1"

            bob.send_json({"type": "leave"})
            assert alice.receive_json()["type"] == "user-left"

    def test_room_route_reports_state(self, client: TestClient, room_id: str) -> None:
        with client.websocket_connect("/ws") as ws:
            join(ws, room_id, "Alice")
            ws.send_json(draw_start("s1"))
            ws.send_json({"type": "request-users"})
            ws.receive_json()  # users-list, so s1 is recorded

            data = client.get(f"/rooms/{room_id}").json()
            assert data["roomId"] == room_id
            assert [op["id"] for op in data["operations"]] == ["s1"]
            assert data["sequenceNumber"] == 1
            assert data["undoDepth"] == 0
            assert [u["name"] for u in data["users"]] == ["Alice"]

            listed = {r["roomId"]: r for r in client.get("/rooms").json()}
            assert listed[room_id]["operationCount"] == 1
            assert listed[room_id]["participantCount"] == 1
