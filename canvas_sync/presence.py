"""Per-room presence table."""

from canvas_sync.types import Participant, Point


class PresenceTable:
    """Participants currently joined to one room, keyed by participant id.

    Listing order carries no meaning; consumers treat it as a set.
    """

    def __init__(self) -> None:
        self._participants: dict[str, Participant] = {}

    def __len__(self) -> int:
        return len(self._participants)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._participants

    def add(self, participant_id: str, display_name: str, color: str) -> Participant:
        """Insert or overwrite a participant, marked active."""
        participant = Participant(id=participant_id, display_name=display_name, color=color)
        self._participants[participant_id] = participant
        return participant

    def remove(self, participant_id: str) -> bool:
        return self._participants.pop(participant_id, None) is not None

    def get(self, participant_id: str) -> Participant | None:
        return self._participants.get(participant_id)

    def update_cursor(self, participant_id: str, point: Point) -> None:
        """Record a cursor position. Unknown participants are ignored."""
        participant = self._participants.get(participant_id)
        if participant is None:
            return
        participant.cursor = point
        participant.active = True

    def list(self) -> list[Participant]:
        return list(self._participants.values())
