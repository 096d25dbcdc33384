"""WebSocket fan-out scoped to a single room."""

import json
import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Sendable(Protocol):
    """The slice of ``fastapi.WebSocket`` the fan-out needs."""

    async def send_text(self, data: str) -> None: ...


def encode(message: Any) -> str:
    """Serialize a pydantic message or plain dict to a JSON frame."""
    if hasattr(message, "model_dump_json"):
        return message.model_dump_json()
    return json.dumps(message)


class RoomConnectionManager:
    """Connections of the participants joined to one room.

    Keyed by participant id so a broadcast can skip the sender.
    """

    def __init__(self, room_id: str) -> None:
        self.room_id = room_id
        self.connections: dict[str, Sendable] = {}

    def add(self, participant_id: str, websocket: Sendable) -> None:
        self.connections[participant_id] = websocket
        logger.info(
            f"Room {self.room_id}: connection added for {participant_id}. "
            f"Total: {len(self.connections)}"
        )

    def remove(self, participant_id: str) -> None:
        if self.connections.pop(participant_id, None) is not None:
            logger.info(
                f"Room {self.room_id}: connection removed for {participant_id}. "
                f"Total: {len(self.connections)}"
            )

    @property
    def connection_count(self) -> int:
        return len(self.connections)

    @property
    def is_empty(self) -> bool:
        return len(self.connections) == 0

    async def broadcast(self, message: Any, exclude: str | None = None) -> None:
        """Send to every connection in the room, optionally skipping one participant."""
        if not self.connections:
            return

        msg_type = message.type if hasattr(message, "type") else message.get("type", "unknown")
        data = encode(message)

        failed: list[str] = []
        for participant_id, conn in list(self.connections.items()):
            if participant_id == exclude:
                continue
            try:
                await conn.send_text(data)
            except Exception as e:
                logger.error(
                    f"Room {self.room_id}: {msg_type} to {participant_id} failed: "
                    f"{type(e).__name__}: {e}"
                )
                failed.append(participant_id)

        for participant_id in failed:
            self.remove(participant_id)

    async def send_to(self, participant_id: str, message: Any) -> None:
        """Send to one participant's connection, if it is still in the room."""
        conn = self.connections.get(participant_id)
        if conn is None:
            return
        await conn.send_text(encode(message))
