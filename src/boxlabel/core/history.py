"""Bounded undo history of box collection snapshots."""

from __future__ import annotations

import logging
from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .models import BoundingBox, clone_boxes

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 200


class HistoryStack(QObject):
    """
    Stack of full box-collection snapshots for undo.

    Each snapshot is a deep copy, so later edits to the live boxes never
    reach the history. When the stack exceeds its capacity the oldest
    snapshot is dropped.
    """

    state_changed = pyqtSignal()  # Emitted when undo availability changes

    def __init__(self, capacity: int = DEFAULT_HISTORY_LIMIT) -> None:
        """
        Initialize the history.

        Args:
            capacity: Maximum number of snapshots to keep
        """
        super().__init__()
        self._snapshots: List[List[BoundingBox]] = []
        self._capacity = max(1, capacity)

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, boxes: List[BoundingBox]) -> None:
        """
        Store a snapshot of a box collection.

        Args:
            boxes: Collection to copy onto the stack
        """
        self._snapshots.append(clone_boxes(boxes))
        while len(self._snapshots) > self._capacity:
            self._snapshots.pop(0)

        logger.debug(f"History push ({len(self._snapshots)}/{self._capacity})")
        self.state_changed.emit()

    def pop(self) -> Optional[List[BoundingBox]]:
        """
        Remove and return the most recent snapshot.

        Returns:
            The snapshot, or None if the stack is empty
        """
        if not self._snapshots:
            return None

        snapshot = self._snapshots.pop()
        self.state_changed.emit()
        return snapshot

    def can_undo(self) -> bool:
        """Check if a snapshot is available."""
        return len(self._snapshots) > 0

    def clear(self) -> None:
        """Drop all snapshots."""
        self._snapshots.clear()
        self.state_changed.emit()

    def set_capacity(self, capacity: int) -> None:
        """
        Update the maximum number of snapshots.

        Args:
            capacity: New capacity, at least 1
        """
        self._capacity = max(1, capacity)

        while len(self._snapshots) > self._capacity:
            self._snapshots.pop(0)

        self.state_changed.emit()
