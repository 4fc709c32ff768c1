"""Live box collection for the current image."""

from __future__ import annotations

import logging
from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .history import DEFAULT_HISTORY_LIMIT, HistoryStack
from .models import BoundingBox, clone_boxes, find_box

logger = logging.getLogger(__name__)


class BoxStore(QObject):
    """
    Owns the boxes of the current image, the selection and the undo history.

    The store never touches disk; whoever mutates it is responsible for
    persisting afterwards.
    """

    boxes_changed = pyqtSignal()
    selection_changed = pyqtSignal(object)  # Emits the selected index or None

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        """
        Initialize an empty store.

        Args:
            history_limit: Maximum number of undo snapshots
        """
        super().__init__()
        self.boxes: List[BoundingBox] = []
        self.history = HistoryStack(history_limit)
        self._selected_index: Optional[int] = None

    def __len__(self) -> int:
        return len(self.boxes)

    # === Selection ===

    @property
    def selected_index(self) -> Optional[int]:
        """Index of the selected box, cleared if it went stale."""
        if self._selected_index is not None and not (0 <= self._selected_index < len(self.boxes)):
            logger.debug(f"Clearing stale selection {self._selected_index}")
            self._selected_index = None
        return self._selected_index

    @property
    def selected_box(self) -> Optional[BoundingBox]:
        return find_box(self.boxes, self.selected_index)

    def select(self, index: Optional[int]) -> None:
        """
        Select a box by index.

        An out-of-range index clears the selection.
        """
        if index is not None and not (0 <= index < len(self.boxes)):
            index = None
        if index != self._selected_index:
            self._selected_index = index
            self.selection_changed.emit(index)

    def deselect(self) -> None:
        self.select(None)

    # === History ===

    def push_history(self) -> None:
        """Snapshot the current boxes before a user action mutates them."""
        self.history.push(self.boxes)

    def undo(self) -> bool:
        """
        Restore the most recent snapshot.

        Clears the selection. Does nothing if the history is empty.

        Returns:
            True if a snapshot was restored
        """
        snapshot = self.history.pop()
        if snapshot is None:
            return False

        self.boxes = snapshot
        self.deselect()
        self.boxes_changed.emit()
        logger.debug(f"Undo restored {len(self.boxes)} boxes")
        return True

    # === Mutation ===

    def add(self, box: BoundingBox) -> int:
        """
        Append a box.

        Returns:
            Index of the new box
        """
        self.boxes.append(box)
        self.boxes_changed.emit()
        return len(self.boxes) - 1

    def remove(self, index: int) -> Optional[BoundingBox]:
        """Remove and return a box by index, clearing the selection."""
        if not (0 <= index < len(self.boxes)):
            return None

        box = self.boxes.pop(index)
        self.deselect()
        self.boxes_changed.emit()
        return box

    def duplicate(self, index: int) -> Optional[int]:
        """
        Append a copy of a box.

        Returns:
            Index of the copy, or None if the index is invalid
        """
        box = find_box(self.boxes, index)
        if box is None:
            return None
        return self.add(box.clone())

    def replace_all(self, boxes: List[BoundingBox]) -> None:
        """Replace the collection, clearing the selection."""
        self.boxes = clone_boxes(boxes)
        self.deselect()
        self.boxes_changed.emit()

    def clear(self) -> None:
        """Remove all boxes, the selection and the history."""
        self.boxes = []
        self.deselect()
        self.history.clear()
        self.boxes_changed.emit()

    def notify_changed(self) -> None:
        """Signal that a box was mutated in place."""
        self.boxes_changed.emit()
