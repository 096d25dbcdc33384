"""Drawing operation models."""

import time
from enum import Enum

from pydantic import Field

from canvas_sync.types.geometry import Point, WireModel


class OperationKind(str, Enum):
    """Semantic effect of an operation on the canvas."""

    STROKE = "stroke"  # paint
    ERASE = "erase"  # subtract


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class OperationDraft(WireModel):
    """An operation as submitted, before the log assigns id and sequence."""

    kind: OperationKind
    author_id: str = Field(alias="userId")
    points: list[Point] = Field(min_length=1)
    color: str | None = None
    stroke_width: float | None = None
    id: str | None = None  # Submitter-chosen id, kept if unused in the room
    created_at: int = Field(default_factory=now_ms, alias="timestamp")


class Operation(WireModel):
    """A drawing operation recorded in a room's log.

    ``sequence`` is assigned once by the log and never changes, even when the
    operation is undone and redone. ``created_at`` is diagnostic only and is
    never used for ordering.
    """

    id: str
    author_id: str = Field(alias="userId")
    kind: OperationKind
    points: list[Point]
    color: str | None = None
    stroke_width: float | None = None
    created_at: int = Field(alias="timestamp")
    sequence: int = Field(alias="sequenceNumber")


class LogSnapshot(WireModel):
    """What a joining participant needs to rebuild the canvas exactly."""

    operations: list[Operation] = []
    sequence_number: int = 0
