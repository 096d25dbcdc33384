"""Participant presence model."""

from pydantic import Field

from canvas_sync.types.geometry import Point, WireModel


class Participant(WireModel):
    """A participant joined to a room."""

    id: str
    display_name: str = Field(alias="name")
    color: str  # Assigned by the server at connect time
    cursor: Point | None = Field(default=None, alias="cursorPosition")
    active: bool = Field(default=True, alias="isActive")
