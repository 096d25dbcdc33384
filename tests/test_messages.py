"""Tests for wire message parsing and serialization."""

import pytest
from pydantic import ValidationError

from canvas_sync.types import (
    ClientControlMessage,
    ClientDrawStartMessage,
    ClientEraseStartMessage,
    ClientJoinMessage,
    Operation,
    OperationKind,
    OperationStartMessage,
    Point,
    client_message_adapter,
)


class TestClientMessageParsing:
    def test_join(self) -> None:
        msg = client_message_adapter.validate_python(
            {"type": "join", "roomId": "r1", "userName": "Alice"}
        )
        assert isinstance(msg, ClientJoinMessage)
        assert msg.room_id == "r1"
        assert msg.user_name == "Alice"

    def test_join_fields_optional(self) -> None:
        msg = client_message_adapter.validate_python({"type": "join"})
        assert isinstance(msg, ClientJoinMessage)
        assert msg.room_id is None

    def test_draw_start_camel_case(self) -> None:
        msg = client_message_adapter.validate_python(
            {
                "type": "draw-start",
                "point": {"x": 1, "y": 2},
                "color": "#123456",
                "strokeWidth": 3,
                "operationId": "s1",
            }
        )
        assert isinstance(msg, ClientDrawStartMessage)
        assert msg.stroke_width == 3
        assert msg.operation_id == "s1"
        assert msg.point == Point(x=1, y=2)

    def test_erase_start_without_operation_id(self) -> None:
        msg = client_message_adapter.validate_python(
            {"type": "erase-start", "point": {"x": 0, "y": 0}, "strokeWidth": 8}
        )
        assert isinstance(msg, ClientEraseStartMessage)
        assert msg.operation_id is None

    @pytest.mark.parametrize("msg_type", ["undo", "redo", "clear-canvas", "request-users", "leave"])
    def test_control_messages(self, msg_type: str) -> None:
        msg = client_message_adapter.validate_python({"type": msg_type})
        assert isinstance(msg, ClientControlMessage)
        assert msg.type == msg_type

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            client_message_adapter.validate_python({"type": "teleport"})

    def test_non_positive_stroke_width_rejected(self) -> None:
        with pytest.raises(ValidationError):
            client_message_adapter.validate_python(
                {"type": "draw-start", "point": {"x": 0, "y": 0}, "color": "#000", "strokeWidth": 0}
            )

    def test_draw_move_requires_operation_id(self) -> None:
        with pytest.raises(ValidationError):
            client_message_adapter.validate_python({"type": "draw-move", "point": {"x": 0, "y": 0}})


class TestPoint:
    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rejected(self, bad: float) -> None:
        with pytest.raises(ValidationError):
            Point(x=bad, y=0)

    def test_json_non_finite_rejected(self) -> None:
        with pytest.raises(ValidationError):
            client_message_adapter.validate_json('{"type": "cursor-move", "point": {"x": NaN, "y": 0}}')


class TestServerSerialization:
    def test_operation_start_inlines_operation(self) -> None:
        op = Operation(
            id="s1",
            author_id="alice",
            kind=OperationKind.STROKE,
            points=[Point(x=0, y=0)],
            color="#000000",
            stroke_width=2,
            created_at=1700000000000,
            sequence=4,
        )
        msg = OperationStartMessage.model_validate(
            {**op.model_dump(), "type": "draw-start", "userColor": "#FF6B6B"}
        )

        assert msg.model_dump(mode="json") == {
            "type": "draw-start",
            "id": "s1",
            "userId": "alice",
            "kind": "stroke",
            "points": [{"x": 0.0, "y": 0.0}],
            "color": "#000000",
            "strokeWidth": 2.0,
            "timestamp": 1700000000000,
            "sequenceNumber": 4,
            "userColor": "#FF6B6B",
        }
