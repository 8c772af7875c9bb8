"""Bounded snapshot history for edit sessions."""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional

from ..config import UNDO_CAPACITY
from ..models import Track


class UndoStack:
    """LIFO of full track snapshots; the oldest entry is evicted when full."""

    def __init__(self, capacity: int = UNDO_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._snapshots: Deque[Track] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, track: Track) -> None:
        # deque(maxlen) drops from the left when appending to a full stack.
        self._snapshots.append(track.copy())

    def pop(self) -> Optional[Track]:
        if not self._snapshots:
            return None
        return self._snapshots.pop()

    def clear(self) -> None:
        self._snapshots.clear()

    @property
    def can_undo(self) -> bool:
        return bool(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)
