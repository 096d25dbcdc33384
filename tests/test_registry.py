"""Tests for RoomRegistry membership and room isolation."""

from canvas_sync.registry import Room, RoomRegistry
from canvas_sync.types import OperationDraft, OperationKind, Point


class TestRoomRegistry:
    def test_resolve_creates_once(self) -> None:
        registry = RoomRegistry()

        room = registry.resolve("r1")

        assert isinstance(room, Room)
        assert registry.resolve("r1") is room
        assert registry.room_count == 1

    def test_get_does_not_create(self) -> None:
        registry = RoomRegistry()
        assert registry.get("missing") is None
        assert registry.room_count == 0

    def test_join_adds_presence(self) -> None:
        registry = RoomRegistry()

        participant = registry.join("p1", "r1", "Alice", "#FF6B6B")

        room = registry.get("r1")
        assert room is not None
        assert room.presence.get("p1") is participant
        assert registry.room_of("p1") == "r1"

    def test_join_overwrites_mapping(self) -> None:
        registry = RoomRegistry()
        registry.join("p1", "r1", "Alice", "#FF6B6B")

        registry.join("p1", "r2", "Alice", "#FF6B6B")

        assert registry.room_of("p1") == "r2"
        # Leaving r1 is the caller's job
        r1 = registry.get("r1")
        assert r1 is not None and "p1" in r1.presence

    def test_leave_returns_room(self) -> None:
        registry = RoomRegistry()
        registry.join("p1", "r1", "Alice", "#FF6B6B")

        room = registry.leave("p1")

        assert room is not None and room.key == "r1"
        assert "p1" not in room.presence
        assert registry.room_of("p1") is None

    def test_leave_is_idempotent(self) -> None:
        registry = RoomRegistry()
        registry.join("p1", "r1", "Alice", "#FF6B6B")

        assert registry.leave("p1") is not None
        assert registry.leave("p1") is None
        assert registry.leave("never-joined") is None

    def test_rooms_persist_when_empty(self) -> None:
        registry = RoomRegistry()
        registry.join("p1", "r1", "Alice", "#FF6B6B")
        registry.leave("p1")

        assert registry.list_room_keys() == ["r1"]

    def test_rooms_are_isolated(self) -> None:
        registry = RoomRegistry()
        r1 = registry.resolve("r1")
        r2 = registry.resolve("r2")

        r1.log.append(
            OperationDraft(
                kind=OperationKind.STROKE,
                author_id="p1",
                points=[Point(x=0, y=0)],
                color="#000",
                stroke_width=2,
            )
        )
        registry.join("p1", "r1", "Alice", "#FF6B6B")

        assert len(r1.log) == 1
        assert len(r2.log) == 0
        assert len(r2.presence) == 0
        assert r1.connections.room_id == "r1"
        assert r2.connections.room_id == "r2"
