"""WebSocket message handlers for room sessions.

Every inbound frame is parsed into a ``ClientMessage`` variant and routed
here. Handlers never raise for protocol-level problems: malformed frames,
events before join, stale operation ids and edits to someone else's operation
are all dropped without a reply.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from canvas_sync.config import settings
from canvas_sync.rate_limiter import RateLimiter, RateLimiterConfig
from canvas_sync.registry import Room
from canvas_sync.session import Session, SessionState
from canvas_sync.types import (
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
    CursorMoveMessage,
    OperationDraft,
    OperationEndMessage,
    OperationKind,
    OperationStartMessage,
    Point,
    PointAppendedMessage,
    RedoMessage,
    StateSyncMessage,
    UndoMessage,
    UserJoinedMessage,
    UserLeftMessage,
    UsersListMessage,
    UsersUpdateMessage,
    client_message_adapter,
)

logger = logging.getLogger(__name__)

# Rate limiter for operation-creating events
_operation_limiter = RateLimiter(
    RateLimiterConfig(
        max_requests=settings.max_operations_per_minute,
        window_seconds=60.0,
    )
)


# ============== Membership ==============


async def handle_join(session: Session, message: ClientJoinMessage) -> None:
    """Join a room, leaving the current one first if needed."""
    if session.is_joined:
        await _leave_current_room(session)

    room_id = message.room_id or settings.default_room_id
    display_name = message.user_name or session.default_display_name
    participant_id = session.participant_id

    participant = session.registry.join(participant_id, room_id, display_name, session.color)
    room = session.registry.resolve(room_id)
    room.connections.add(participant_id, session.websocket)
    session.state = SessionState.JOINED
    session.room_id = room_id

    snapshot = room.log.snapshot()
    users = room.presence.list()
    await room.connections.send_to(
        participant_id,
        StateSyncMessage(
            operations=snapshot.operations,
            users=users,
            sequence_number=snapshot.sequence_number,
        ),
    )
    await room.connections.broadcast(UserJoinedMessage(participant=participant), exclude=participant_id)
    await room.connections.broadcast(UsersUpdateMessage(users=users))

    logger.info(
        f"Participant {participant_id} ({display_name}) joined room {room_id}: "
        f"{len(snapshot.operations)} operations, {len(users)} participants",
        extra={"room_id": room_id, "participant_id": participant_id},
    )


async def _leave_current_room(session: Session) -> None:
    """Drop presence and fan-out for the session's room and tell whoever remains."""
    participant_id = session.participant_id
    room = session.registry.leave(participant_id)
    session.state = SessionState.UNJOINED
    session.room_id = None
    if room is None:
        return

    room.connections.remove(participant_id)
    await room.connections.broadcast(UserLeftMessage(user_id=participant_id))
    await room.connections.broadcast(UsersUpdateMessage(users=room.presence.list()))
    logger.info(
        f"Participant {participant_id} left room {room.key}",
        extra={"room_id": room.key, "participant_id": participant_id},
    )


async def disconnect(session: Session) -> None:
    """Leave the room (if any) and close the session. Safe to call repeatedly."""
    if session.is_closed:
        return
    await _leave_current_room(session)
    session.state = SessionState.CLOSED
    _operation_limiter.reset(session.participant_id)


# ============== Operations ==============


async def _start_operation(
    session: Session,
    room: Room,
    kind: OperationKind,
    point: Point,
    stroke_width: float,
    color: str | None,
    operation_id: str | None,
) -> None:
    participant_id = session.participant_id
    if not _operation_limiter.is_allowed(participant_id):
        logger.warning(
            f"Participant {participant_id}: {kind.value} rate limited "
            f"({_operation_limiter.remaining(participant_id)} remaining)"
        )
        return

    operation = room.log.append(
        OperationDraft(
            kind=kind,
            author_id=participant_id,
            points=[point],
            color=color,
            stroke_width=stroke_width,
            id=operation_id,
        )
    )
    author = room.presence.get(participant_id)
    msg_type = "draw-start" if kind is OperationKind.STROKE else "erase-start"
    await room.connections.broadcast(
        OperationStartMessage.model_validate(
            {
                **operation.model_dump(),
                "type": msg_type,
                "userColor": author.color if author else None,
            }
        ),
        exclude=participant_id,
    )


def _owned_operation(session: Session, room: Room, operation_id: str) -> bool:
    """True if the operation is active and was created by this session."""
    operation = room.log.get(operation_id)
    if operation is None:
        logger.debug(f"Room {room.key}: stale operation {operation_id}, ignored")
        return False
    if operation.author_id != session.participant_id:
        logger.debug(
            f"Room {room.key}: {session.participant_id} does not own {operation_id}, ignored"
        )
        return False
    return True


async def _append_point(
    session: Session, room: Room, operation_id: str, point: Point, msg_type: str
) -> None:
    if not _owned_operation(session, room, operation_id):
        return
    room.log.append_point(operation_id, point)
    await room.connections.broadcast(
        PointAppendedMessage(type=msg_type, operation_id=operation_id, point=point),
        exclude=session.participant_id,
    )


async def _end_operation(session: Session, room: Room, operation_id: str, msg_type: str) -> None:
    if not _owned_operation(session, room, operation_id):
        return
    await room.connections.broadcast(
        OperationEndMessage(type=msg_type, operation_id=operation_id),
        exclude=session.participant_id,
    )


async def handle_draw_start(session: Session, room: Room, message: ClientDrawStartMessage) -> None:
    await _start_operation(
        session,
        room,
        OperationKind.STROKE,
        message.point,
        message.stroke_width,
        message.color,
        message.operation_id,
    )


async def handle_draw_move(session: Session, room: Room, message: ClientDrawMoveMessage) -> None:
    await _append_point(session, room, message.operation_id, message.point, "draw-move")


async def handle_draw_end(session: Session, room: Room, message: ClientDrawEndMessage) -> None:
    await _end_operation(session, room, message.operation_id, "draw-end")


async def handle_erase_start(
    session: Session, room: Room, message: ClientEraseStartMessage
) -> None:
    # Erase ignores color; only the width matters
    await _start_operation(
        session,
        room,
        OperationKind.ERASE,
        message.point,
        message.stroke_width,
        None,
        message.operation_id,
    )


async def handle_erase_move(session: Session, room: Room, message: ClientEraseMoveMessage) -> None:
    await _append_point(session, room, message.operation_id, message.point, "erase-move")


async def handle_erase_end(session: Session, room: Room, message: ClientEraseEndMessage) -> None:
    await _end_operation(session, room, message.operation_id, "erase-end")


# ============== Room-wide events ==============


async def handle_cursor_move(
    session: Session, room: Room, message: ClientCursorMoveMessage
) -> None:
    room.presence.update_cursor(session.participant_id, message.point)
    await room.connections.broadcast(
        CursorMoveMessage(
            user_id=session.participant_id,
            point=message.point,
            user_color=session.color,
        ),
        exclude=session.participant_id,
    )


async def handle_undo(session: Session, room: Room, _message: ClientControlMessage) -> None:
    """Undo the room's most recent operation, whoever drew it."""
    operation = room.log.undo()
    if operation is None:
        return
    await room.connections.broadcast(
        UndoMessage(operation_id=operation.id, user_id=operation.author_id)
    )
    logger.info(
        f"Room {room.key}: {session.participant_id} undid {operation.id} "
        f"(author {operation.author_id})"
    )


async def handle_redo(session: Session, room: Room, _message: ClientControlMessage) -> None:
    operation = room.log.redo()
    if operation is None:
        return
    await room.connections.broadcast(RedoMessage(operation=operation))
    logger.info(f"Room {room.key}: {session.participant_id} redid {operation.id}")


async def handle_clear_canvas(
    session: Session, room: Room, _message: ClientControlMessage
) -> None:
    room.log.reset()
    await room.connections.broadcast(ClearCanvasMessage())
    logger.info(f"Room {room.key}: canvas cleared by {session.participant_id}")


async def handle_request_users(
    session: Session, room: Room, _message: ClientControlMessage
) -> None:
    await room.connections.send_to(
        session.participant_id, UsersListMessage(users=room.presence.list())
    )


# Dispatch table for events that require a joined session
HANDLERS: dict[str, Callable[[Session, Room, Any], Awaitable[None]]] = {
    "draw-start": handle_draw_start,
    "draw-move": handle_draw_move,
    "draw-end": handle_draw_end,
    "erase-start": handle_erase_start,
    "erase-move": handle_erase_move,
    "erase-end": handle_erase_end,
    "cursor-move": handle_cursor_move,
    "undo": handle_undo,
    "redo": handle_redo,
    "clear-canvas": handle_clear_canvas,
    "request-users": handle_request_users,
}


async def handle_client_message(session: Session, payload: Any) -> bool:
    """Parse and route one inbound frame. Returns True if it was acted on."""
    if session.is_closed:
        return False

    msg_type = payload.get("type") if isinstance(payload, dict) else None
    try:
        message = client_message_adapter.validate_python(payload)
    except ValidationError as e:
        logger.warning(
            f"Participant {session.participant_id}: ignoring malformed event "
            f"type={msg_type!r} ({e.error_count()} error(s))"
        )
        return False

    if isinstance(message, ClientJoinMessage):
        await handle_join(session, message)
        return True
    if message.type == "leave":
        await disconnect(session)
        return True

    room = session.room
    if room is None:
        logger.debug(f"Participant {session.participant_id}: {message.type} before join, ignored")
        return False

    await HANDLERS[message.type](session, room, message)
    return True
