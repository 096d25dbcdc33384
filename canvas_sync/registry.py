"""Room registry: per-room state and participant membership."""

import logging
from dataclasses import dataclass, field

from canvas_sync.connections import RoomConnectionManager
from canvas_sync.operation_log import OperationLog
from canvas_sync.presence import PresenceTable
from canvas_sync.types import Participant

logger = logging.getLogger(__name__)


@dataclass
class Room:
    """Bundle of everything scoped to one room key.

    Created on first reference and kept for the life of the process.
    """

    key: str
    log: OperationLog = field(default_factory=OperationLog)
    presence: PresenceTable = field(default_factory=PresenceTable)
    connections: RoomConnectionManager = field(init=False)

    def __post_init__(self) -> None:
        self.connections = RoomConnectionManager(self.key)


class RoomRegistry:
    """Owns every Room and the participant -> room mapping.

    Handles:
    - Lazy room creation on first reference
    - Join/leave bookkeeping for presence
    - Lookup of a participant's current room

    Rooms are never evicted, so memory grows with the number of distinct room
    keys seen. Methods are synchronous: every caller runs on the single event
    loop and no method awaits, so each call is atomic with respect to other
    connections.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}
        self._participant_rooms: dict[str, str] = {}

    def resolve(self, room_key: str) -> Room:
        """Get existing room or create an empty one."""
        room = self._rooms.get(room_key)
        if room is None:
            room = Room(key=room_key)
            self._rooms[room_key] = room
            logger.info(f"Room {room_key} created. Total rooms: {len(self._rooms)}")
        return room

    def get(self, room_key: str) -> Room | None:
        """Get room by key without creating it."""
        return self._rooms.get(room_key)

    def join(
        self, participant_id: str, room_key: str, display_name: str, color: str
    ) -> Participant:
        """Map the participant to ``room_key`` and add them to its presence table.

        An existing mapping is overwritten; leaving the previous room is the
        caller's job.
        """
        self._participant_rooms[participant_id] = room_key
        room = self.resolve(room_key)
        participant = room.presence.add(participant_id, display_name, color)
        logger.info(f"Participant {participant_id} joined room {room_key}")
        return participant

    def leave(self, participant_id: str) -> Room | None:
        """Remove the participant from their room. Returns that room, or None."""
        room_key = self._participant_rooms.pop(participant_id, None)
        if room_key is None:
            return None
        room = self.resolve(room_key)
        room.presence.remove(participant_id)
        logger.info(f"Participant {participant_id} left room {room_key}")
        return room

    def room_of(self, participant_id: str) -> str | None:
        return self._participant_rooms.get(participant_id)

    def list_room_keys(self) -> list[str]:
        return list(self._rooms.keys())

    @property
    def room_count(self) -> int:
        return len(self._rooms)


# Global registry instance
room_registry = RoomRegistry()
