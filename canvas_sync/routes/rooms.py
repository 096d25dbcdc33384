"""Read-only room diagnostics."""

from typing import Any

from fastapi import APIRouter, HTTPException

from canvas_sync.registry import room_registry

router = APIRouter(prefix="/rooms")


@router.get("")
async def list_rooms() -> list[dict[str, Any]]:
    """Every room referenced since startup, with sizes."""
    rooms = []
    for key in room_registry.list_room_keys():
        room = room_registry.get(key)
        if room is None:
            continue
        rooms.append(
            {
                "roomId": key,
                "operationCount": len(room.log),
                "participantCount": len(room.presence),
                "sequenceNumber": room.log.sequence_counter,
            }
        )
    return rooms


@router.get("/{room_id}")
async def get_room(room_id: str) -> dict[str, Any]:
    """Snapshot and participants of one room. Does not create the room."""
    room = room_registry.get(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")

    snapshot = room.log.snapshot()
    return {
        "roomId": room_id,
        **snapshot.model_dump(mode="json"),
        "users": [p.model_dump(mode="json") for p in room.presence.list()],
        "undoDepth": room.log.undo_depth,
        "connectedClients": room.connections.connection_count,
    }
