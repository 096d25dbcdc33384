"""Per-room operation log with global undo/redo."""

import bisect
import logging
import uuid

from canvas_sync.types import LogSnapshot, Operation, OperationDraft, Point

logger = logging.getLogger(__name__)


class OperationLog:
    """Ordered record of a room's drawing operations plus an undo stack.

    ``active`` is kept sorted by ``sequence``. Undo is global and
    last-write-wins: it always takes the highest-sequence operation,
    regardless of who asks or who authored it. Redo pops only the top of the
    undo stack and puts the operation back at its original position.

    Not thread-safe. All mutation happens on the event loop, one inbound event
    at a time.
    """

    def __init__(self) -> None:
        self._active: list[Operation] = []
        self._undo_stack: list[Operation] = []
        self._sequence_counter: int = 0

    @property
    def sequence_counter(self) -> int:
        """Next sequence number to assign."""
        return self._sequence_counter

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    def __len__(self) -> int:
        return len(self._active)

    def _id_in_use(self, operation_id: str) -> bool:
        return any(op.id == operation_id for op in self._active) or any(
            op.id == operation_id for op in self._undo_stack
        )

    def _insert(self, operation: Operation) -> None:
        bisect.insort(self._active, operation, key=lambda op: op.sequence)

    def append(self, draft: OperationDraft) -> Operation:
        """Record a new operation and abandon any pending redo history."""
        operation_id = draft.id
        if not operation_id or self._id_in_use(operation_id):
            if operation_id:
                logger.debug(f"Operation id {operation_id} already in use, generating a new one")
            operation_id = str(uuid.uuid4())

        operation = Operation(
            id=operation_id,
            author_id=draft.author_id,
            kind=draft.kind,
            points=list(draft.points),
            color=draft.color,
            stroke_width=draft.stroke_width,
            created_at=draft.created_at,
            sequence=self._sequence_counter,
        )
        self._sequence_counter += 1
        self._insert(operation)
        self._undo_stack.clear()
        return operation

    def get(self, operation_id: str) -> Operation | None:
        """Find an active operation by id."""
        for op in self._active:
            if op.id == operation_id:
                return op
        return None

    def list_active(self) -> list[Operation]:
        """Active operations in ascending sequence order (a copy of the list)."""
        return list(self._active)

    def list_since(self, sequence: int) -> list[Operation]:
        """Active operations with a sequence strictly greater than ``sequence``."""
        return [op for op in self._active if op.sequence > sequence]

    def append_point(self, operation_id: str, point: Point) -> bool:
        """Extend an active operation. Unknown or undone ids are a no-op."""
        operation = self.get(operation_id)
        if operation is None:
            return False
        operation.points.append(point)
        return True

    def undo(self) -> Operation | None:
        """Move the most recent active operation onto the undo stack."""
        if not self._active:
            return None
        operation = self._active.pop()
        self._undo_stack.append(operation)
        return operation

    def redo(self) -> Operation | None:
        """Restore the most recently undone operation with its original sequence."""
        if not self._undo_stack:
            return None
        operation = self._undo_stack.pop()
        self._insert(operation)
        return operation

    def remove_by_id(self, operation_id: str) -> bool:
        """Move a specific active operation onto the undo stack."""
        for index, op in enumerate(self._active):
            if op.id == operation_id:
                self._undo_stack.append(self._active.pop(index))
                return True
        return False

    def reset(self) -> None:
        """Forget everything, including the sequence counter (clear canvas)."""
        self._active.clear()
        self._undo_stack.clear()
        self._sequence_counter = 0

    def snapshot(self) -> LogSnapshot:
        """Deep-copied operations plus the current counter."""
        return LogSnapshot(
            operations=[op.model_copy(deep=True) for op in self._active],
            sequence_number=self._sequence_counter,
        )
