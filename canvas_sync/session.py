"""Per-connection session state."""

import random
import uuid
from dataclasses import dataclass, field
from enum import Enum

from canvas_sync.config import settings
from canvas_sync.connections import Sendable
from canvas_sync.registry import Room, RoomRegistry


class SessionState(str, Enum):
    """Protocol state of one connection.

    UNJOINED -> JOINED(room) -> CLOSED. A join while JOINED moves the session
    to the new room without passing through UNJOINED from the client's view.
    """

    UNJOINED = "unjoined"
    JOINED = "joined"
    CLOSED = "closed"


def pick_color(colors: list[str] | None = None) -> str:
    """Pick a display color for a new connection."""
    return random.choice(colors or settings.participant_colors)


def new_participant_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Session:
    """A live connection's view of the world.

    Holds identifiers only. Room state is always reached through the registry,
    so a session never keeps a handle to a room it has left.
    """

    websocket: Sendable
    registry: RoomRegistry
    participant_id: str = field(default_factory=new_participant_id)
    color: str = field(default_factory=pick_color)
    state: SessionState = SessionState.UNJOINED
    room_id: str | None = None

    @property
    def is_joined(self) -> bool:
        return self.state is SessionState.JOINED

    @property
    def is_closed(self) -> bool:
        return self.state is SessionState.CLOSED

    @property
    def room(self) -> Room | None:
        """Current room, or None when not joined."""
        if not self.is_joined or self.room_id is None:
            return None
        return self.registry.get(self.room_id)

    @property
    def default_display_name(self) -> str:
        return f"User {self.participant_id[:6]}"
