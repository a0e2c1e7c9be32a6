from __future__ import annotations

from collections import deque

from account_mapper.core.slot_grid import UndoSnapshot

DEFAULT_UNDO_DEPTH = 10


class UndoStack:
    """Bounded LIFO of grid snapshots; the oldest entry drops off when full."""

    def __init__(self, depth: int = DEFAULT_UNDO_DEPTH) -> None:
        if depth < 1:
            raise ValueError("undo depth must be at least 1")
        self._entries: deque[UndoSnapshot] = deque(maxlen=depth)

    @property
    def depth(self) -> int:
        return self._entries.maxlen or 0

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def push(self, snapshot: UndoSnapshot) -> None:
        self._entries.append(snapshot)

    def pop(self) -> UndoSnapshot | None:
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> UndoSnapshot | None:
        return self._entries[-1] if self._entries else None

    def labels(self) -> list[str]:
        """Labels from most recent to oldest."""

        return [entry.label for entry in reversed(self._entries)]

    def clear(self) -> None:
        self._entries.clear()
