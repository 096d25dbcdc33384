"""Type definitions for canvas sync.

This package contains all type definitions organized into focused modules:
- geometry: Point and the camelCase wire-model base
- operations: Operation, OperationDraft, LogSnapshot
- presence: Participant
- messages: WebSocket message types
"""

from canvas_sync.types.geometry import Point, PointDict, WireModel
from canvas_sync.types.messages import (
    ClearCanvasMessage,
    ClientControlMessage,
    ClientCursorMoveMessage,
    ClientDrawEndMessage,
    ClientDrawMoveMessage,
    ClientDrawStartMessage,
    ClientEraseEndMessage,
    ClientEraseMoveMessage,
    ClientEraseStartMessage,
    ClientJoinMessage,
    ClientMessage,
    CursorMoveMessage,
    OperationEndMessage,
    OperationStartMessage,
    PointAppendedMessage,
    RedoMessage,
    ServerMessage,
    StateSyncMessage,
    UndoMessage,
    UserJoinedMessage,
    UserLeftMessage,
    UsersListMessage,
    UsersUpdateMessage,
    client_message_adapter,
)
from canvas_sync.types.operations import (
    LogSnapshot,
    Operation,
    OperationDraft,
    OperationKind,
    now_ms,
)
from canvas_sync.types.presence import Participant

__all__ = [
    # Geometry
    "Point",
    "PointDict",
    "WireModel",
    # Operations
    "LogSnapshot",
    "Operation",
    "OperationDraft",
    "OperationKind",
    "now_ms",
    # Presence
    "Participant",
    # Messages
    "ClearCanvasMessage",
    "ClientControlMessage",
    "ClientCursorMoveMessage",
    "ClientDrawEndMessage",
    "ClientDrawMoveMessage",
    "ClientDrawStartMessage",
    "ClientEraseEndMessage",
    "ClientEraseMoveMessage",
    "ClientEraseStartMessage",
    "ClientJoinMessage",
    "ClientMessage",
    "CursorMoveMessage",
    "OperationEndMessage",
    "OperationStartMessage",
    "PointAppendedMessage",
    "RedoMessage",
    "ServerMessage",
    "StateSyncMessage",
    "UndoMessage",
    "UserJoinedMessage",
    "UserLeftMessage",
    "UsersListMessage",
    "UsersUpdateMessage",
    "client_message_adapter",
]
