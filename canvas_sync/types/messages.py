"""WebSocket message types.

Every frame is a JSON object whose ``type`` names the event. Inbound frames
are parsed into one of the ``Client*`` variants through ``ClientMessage``, a
union discriminated on ``type``.
"""

from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from canvas_sync.types.geometry import Point, WireModel
from canvas_sync.types.operations import Operation
from canvas_sync.types.presence import Participant

# Client -> Server messages


class ClientJoinMessage(WireModel):
    """Join (or switch to) a room."""

    type: Literal["join"] = "join"
    room_id: str | None = None
    user_name: str | None = None


class ClientDrawStartMessage(WireModel):
    """Begin a stroke."""

    type: Literal["draw-start"] = "draw-start"
    point: Point
    color: str
    stroke_width: float = Field(gt=0)
    operation_id: str | None = None


class ClientDrawMoveMessage(WireModel):
    """Extend an in-flight stroke."""

    type: Literal["draw-move"] = "draw-move"
    point: Point
    operation_id: str


class ClientDrawEndMessage(WireModel):
    """Finish a stroke."""

    type: Literal["draw-end"] = "draw-end"
    operation_id: str


class ClientEraseStartMessage(WireModel):
    """Begin an erase."""

    type: Literal["erase-start"] = "erase-start"
    point: Point
    stroke_width: float = Field(gt=0)
    operation_id: str | None = None


class ClientEraseMoveMessage(WireModel):
    """Extend an in-flight erase."""

    type: Literal["erase-move"] = "erase-move"
    point: Point
    operation_id: str


class ClientEraseEndMessage(WireModel):
    """Finish an erase."""

    type: Literal["erase-end"] = "erase-end"
    operation_id: str


class ClientCursorMoveMessage(WireModel):
    """Cursor position update."""

    type: Literal["cursor-move"] = "cursor-move"
    point: Point


class ClientControlMessage(WireModel):
    """Payload-free control events."""

    type: Literal["undo", "redo", "clear-canvas", "request-users", "leave"]


ClientMessage = Annotated[
    ClientJoinMessage
    | ClientDrawStartMessage
    | ClientDrawMoveMessage
    | ClientDrawEndMessage
    | ClientEraseStartMessage
    | ClientEraseMoveMessage
    | ClientEraseEndMessage
    | ClientCursorMoveMessage
    | ClientControlMessage,
    Field(discriminator="type"),
]

client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


# Server -> Client messages


class StateSyncMessage(WireModel):
    """Full room state, sent only to the participant that just joined."""

    type: Literal["state-sync"] = "state-sync"
    operations: list[Operation]
    users: list[Participant]
    sequence_number: int


class OperationStartMessage(Operation):
    """An operation was created (the operation fields are inlined)."""

    type: Literal["draw-start", "erase-start"]
    user_color: str | None = None


class PointAppendedMessage(WireModel):
    """A point was appended to an in-flight operation."""

    type: Literal["draw-move", "erase-move"]
    operation_id: str
    point: Point


class OperationEndMessage(WireModel):
    """The author finished an operation."""

    type: Literal["draw-end", "erase-end"]
    operation_id: str


class UndoMessage(WireModel):
    """An operation was undone (broadcast to the whole room)."""

    type: Literal["undo"] = "undo"
    operation_id: str
    user_id: str  # Author of the undone operation, not who asked


class RedoMessage(WireModel):
    """An operation was restored (broadcast to the whole room)."""

    type: Literal["redo"] = "redo"
    operation: Operation


class ClearCanvasMessage(WireModel):
    """Room log was reset."""

    type: Literal["clear-canvas"] = "clear-canvas"


class UserJoinedMessage(WireModel):
    """Someone joined the room."""

    type: Literal["user-joined"] = "user-joined"
    participant: Participant


class UserLeftMessage(WireModel):
    """Someone left the room."""

    type: Literal["user-left"] = "user-left"
    user_id: str


class UsersUpdateMessage(WireModel):
    """Current participant list, pushed after membership changes."""

    type: Literal["users-update"] = "users-update"
    users: list[Participant]


class UsersListMessage(WireModel):
    """Participant list, in reply to request-users."""

    type: Literal["users-list"] = "users-list"
    users: list[Participant]


class CursorMoveMessage(WireModel):
    """Another participant's cursor moved."""

    type: Literal["cursor-move"] = "cursor-move"
    user_id: str
    point: Point
    user_color: str | None = None


ServerMessage = (
    StateSyncMessage
    | OperationStartMessage
    | PointAppendedMessage
    | OperationEndMessage
    | UndoMessage
    | RedoMessage
    | ClearCanvasMessage
    | UserJoinedMessage
    | UserLeftMessage
    | UsersUpdateMessage
    | UsersListMessage
    | CursorMoveMessage
)
