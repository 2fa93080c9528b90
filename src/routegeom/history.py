from __future__ import annotations

import copy
from typing import Sequence

from .field import MAX_HISTORY_SIZE
from .model import Drawing


class DrawingHistory:
    """Bounded undo/redo over snapshots of a play's drawings.

    Snapshots are deep clones, both when stored and when handed back, so
    callers can keep mutating their own lists.
    """

    def __init__(self, max_size: int = MAX_HISTORY_SIZE) -> None:
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.max_size = max_size
        self._snapshots: list[list[Drawing]] = []
        self._index = -1

    def push(self, drawings: Sequence[Drawing]) -> None:
        # A new snapshot discards anything that could have been redone.
        del self._snapshots[self._index + 1 :]
        self._snapshots.append(copy.deepcopy(list(drawings)))
        if len(self._snapshots) > self.max_size:
            del self._snapshots[: len(self._snapshots) - self.max_size]
        self._index = len(self._snapshots) - 1

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def undo(self) -> list[Drawing] | None:
        if not self.can_undo():
            return None
        self._index -= 1
        return copy.deepcopy(self._snapshots[self._index])

    def redo(self) -> list[Drawing] | None:
        if not self.can_redo():
            return None
        self._index += 1
        return copy.deepcopy(self._snapshots[self._index])

    def current(self) -> list[Drawing] | None:
        if self._index < 0:
            return None
        return copy.deepcopy(self._snapshots[self._index])

    def clear(self) -> None:
        self._snapshots.clear()
        self._index = -1

    def __len__(self) -> int:
        return len(self._snapshots)
