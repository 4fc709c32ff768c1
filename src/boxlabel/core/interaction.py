"""Pointer-driven create/select/move/resize state machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF

from .box_store import BoxStore
from .classes import DEFAULT_CLASS, ClassTable
from .geometry import DEFAULT_MIN_BOX_PIXELS, box_from_drag, corner_points, to_ratio, to_screen_rect
from .models import (
    CREATING, IDLE, MOVING, BoundingBox, Creating, DragMode, Idle, Moving,
    ResizeCorner, Resizing
)

logger = logging.getLogger(__name__)

DEFAULT_CLICK_TOLERANCE = 8.0
MIN_HANDLE_RADIUS = 6.0
CLICK_TOLERANCE_RANGE = (1.0, 30.0)
MIN_BOX_PIXELS_RANGE = (1.0, 40.0)


def _opposite_corner(box: BoundingBox, corner: ResizeCorner) -> Tuple[float, float]:
    """Return the normalized corner diagonally across from `corner`."""
    if corner == ResizeCorner.TOP_LEFT:
        return box.right, box.bottom
    if corner == ResizeCorner.TOP_RIGHT:
        return box.left, box.bottom
    if corner == ResizeCorner.BOTTOM_LEFT:
        return box.right, box.top
    return box.left, box.top


@dataclass
class RenderedBox:
    """A box as the renderer needs it."""

    rect: QRectF
    class_name: str
    class_id: int
    selected: bool = False
    handles: List[QPointF] = field(default_factory=list)

    @property
    def caption(self) -> str:
        return f"{self.class_id}:{self.class_name}"


class InteractionController:
    """
    Turns pointer events into box edits.

    The host reports the on-screen image rectangle and delivers press,
    drag (button held) and release events in screen pixels. A press on
    a box selects it and starts a move, or a resize when it lands near
    a corner. A press elsewhere starts drawing a new box. History is
    pushed once when an action starts and the annotation file is
    persisted when it ends.
    """

    def __init__(
        self,
        store: BoxStore,
        class_table: ClassTable,
        persist: Optional[Callable[[], bool]] = None
    ) -> None:
        """
        Initialize the controller.

        Args:
            store: Box collection being edited
            class_table: Shared class table
            persist: Callback that writes the current annotations
        """
        self.store = store
        self.class_table = class_table
        self._persist = persist

        self.image_rect = QRectF()
        self.click_tolerance = DEFAULT_CLICK_TOLERANCE
        self.min_box_pixels = DEFAULT_MIN_BOX_PIXELS
        self.active_class_index = 0

        self.drag_mode: DragMode = IDLE
        self.drag_start: Optional[QPointF] = None
        self.drag_end: Optional[QPointF] = None
        self.last_pointer_pos: Optional[QPointF] = None
        # Normalized corner held fixed while resizing
        self._resize_anchor: Optional[Tuple[float, float]] = None

    # === Settings ===

    def set_image_rect(self, rect: QRectF) -> None:
        """Set the on-screen rectangle of the displayed image."""
        self.image_rect = QRectF(rect)

    def set_click_tolerance(self, pixels: float) -> None:
        low, high = CLICK_TOLERANCE_RANGE
        self.click_tolerance = max(low, min(high, float(pixels)))

    def set_min_box_pixels(self, pixels: float) -> None:
        low, high = MIN_BOX_PIXELS_RANGE
        self.min_box_pixels = max(low, min(high, float(pixels)))

    def set_active_class(self, index: int) -> None:
        """Choose the class given to newly drawn boxes."""
        if 0 <= index < len(self.class_table):
            self.active_class_index = index

    @property
    def active_class(self) -> str:
        if not len(self.class_table):
            return DEFAULT_CLASS
        if not (0 <= self.active_class_index < len(self.class_table)):
            return self.class_table[0]
        return self.class_table[self.active_class_index]

    @property
    def handle_radius(self) -> float:
        return max(self.click_tolerance, MIN_HANDLE_RADIUS)

    @property
    def is_dragging(self) -> bool:
        return not isinstance(self.drag_mode, Idle)

    # === Hit testing ===

    def hit_test(self, pos: QPointF) -> Optional[int]:
        """
        Find the box under a screen position.

        Boxes are tested newest first so the topmost one wins, each
        expanded by the click tolerance.

        Returns:
            Index of the box, or None
        """
        tol = self.click_tolerance
        for index in range(len(self.store.boxes) - 1, -1, -1):
            rect = to_screen_rect(self.store.boxes[index], self.image_rect)
            if (rect.left() - tol <= pos.x() <= rect.right() + tol
                    and rect.top() - tol <= pos.y() <= rect.bottom() + tol):
                return index
        return None

    def corner_at(self, index: int, pos: QPointF) -> Optional[ResizeCorner]:
        """
        Find the corner handle of a box near a screen position.

        Corners are checked TL, TR, BL, BR, so the first match wins when
        a small box puts the position near several corners.
        """
        rect = to_screen_rect(self.store.boxes[index], self.image_rect)
        handle = self.handle_radius
        near_left = abs(pos.x() - rect.left()) <= handle
        near_right = abs(pos.x() - rect.right()) <= handle
        near_top = abs(pos.y() - rect.top()) <= handle
        near_bottom = abs(pos.y() - rect.bottom()) <= handle

        if near_left and near_top:
            return ResizeCorner.TOP_LEFT
        if near_right and near_top:
            return ResizeCorner.TOP_RIGHT
        if near_left and near_bottom:
            return ResizeCorner.BOTTOM_LEFT
        if near_right and near_bottom:
            return ResizeCorner.BOTTOM_RIGHT
        return None

    # === Pointer events ===

    def press(self, pos: QPointF) -> None:
        """Handle a primary button press."""
        if self.image_rect.isEmpty() or not self.image_rect.contains(pos):
            return

        found = self.hit_test(pos)
        self.store.select(found)

        if found is not None:
            self.store.push_history()
            self.last_pointer_pos = QPointF(pos)
            corner = self.corner_at(found, pos)
            if corner is not None:
                self.drag_mode = Resizing(corner)
                self._resize_anchor = _opposite_corner(self.store.boxes[found], corner)
            else:
                self.drag_mode = MOVING
        else:
            self.drag_mode = CREATING
            self.drag_start = QPointF(pos)
            self.drag_end = QPointF(pos)
            self.store.push_history()

        logger.debug(f"Press at ({pos.x():.1f}, {pos.y():.1f}) -> {self.drag_mode}")

    def drag(self, pos: QPointF) -> None:
        """Handle pointer motion while the button is held."""
        mode = self.drag_mode
        if isinstance(mode, Creating):
            self.drag_end = QPointF(pos)
        elif isinstance(mode, Moving):
            self._move_selected(pos)
        elif isinstance(mode, Resizing):
            self._resize_selected(mode.corner, pos)

    def release(self) -> None:
        """Handle the primary button release, committing the edit."""
        mode = self.drag_mode
        if isinstance(mode, Idle):
            return

        if isinstance(mode, Creating) and self.drag_start is not None and self.drag_end is not None:
            box = box_from_drag(
                self.drag_start,
                self.drag_end,
                self.image_rect,
                self.active_class,
                self.min_box_pixels,
            )
            if box is not None:
                self.store.add(box)
                logger.debug(f"Created box {box}")

        self._reset_drag()
        self.persist()

    def _move_selected(self, pos: QPointF) -> None:
        box = self.store.selected_box
        if box is None:
            return

        if self.last_pointer_pos is None:
            self.last_pointer_pos = QPointF(pos)
            return

        last_x, last_y = to_ratio(self.last_pointer_pos, self.image_rect)
        x, y = to_ratio(pos, self.image_rect)
        box.move_by(x - last_x, y - last_y)
        self.last_pointer_pos = QPointF(pos)
        self.store.notify_changed()

    def _resize_selected(self, corner: ResizeCorner, pos: QPointF) -> None:
        box = self.store.selected_box
        if box is None:
            return

        if self._resize_anchor is None:
            self._resize_anchor = _opposite_corner(box, corner)

        # set_edges orders the edges, so crossing the anchor flips the box
        anchor_x, anchor_y = self._resize_anchor
        rx, ry = to_ratio(pos, self.image_rect)
        box.set_edges(anchor_x, anchor_y, rx, ry)
        self.store.notify_changed()

    def _reset_drag(self) -> None:
        self.drag_mode = IDLE
        self.drag_start = None
        self.drag_end = None
        self.last_pointer_pos = None
        self._resize_anchor = None

    def reset(self) -> None:
        """Abandon any in-progress interaction without committing it."""
        self._reset_drag()

    # === Commands ===

    def delete_selected(self) -> bool:
        """Delete the selected box."""
        index = self.store.selected_index
        if index is None:
            return False

        self.store.push_history()
        self.store.remove(index)
        self.persist()
        return True

    def duplicate_selected(self) -> bool:
        """Append a copy of the selected box."""
        index = self.store.selected_index
        if index is None:
            return False

        self.store.push_history()
        self.store.duplicate(index)
        self.persist()
        return True

    def reassign_selected(self, class_index: int) -> bool:
        """
        Give the selected box the class at class_index.

        Returns:
            True if the class actually changed
        """
        box = self.store.selected_box
        if box is None or not (0 <= class_index < len(self.class_table)):
            return False

        new_name = self.class_table[class_index]
        if box.class_name == new_name:
            return False

        self.store.push_history()
        box.class_name = new_name
        self.store.notify_changed()
        self.persist()
        return True

    def assign_active_class(self) -> bool:
        """Give the selected box the currently active class."""
        index = self.class_table.index_of(self.active_class)
        if index is None:
            return False
        return self.reassign_selected(index)

    def undo(self) -> bool:
        """
        Undo the last action.

        Any in-progress drag is abandoned first since the collection it
        refers to is about to be replaced.
        """
        self._reset_drag()
        if not self.store.undo():
            return False
        self.persist()
        return True

    def persist(self) -> bool:
        if self._persist is None:
            return True
        return self._persist()

    # === Render outputs ===

    def render_boxes(self) -> List[RenderedBox]:
        """Return the boxes in screen space for drawing."""
        selected = self.store.selected_index
        rendered = []
        for index, box in enumerate(self.store.boxes):
            rect = to_screen_rect(box, self.image_rect)
            class_id = self.class_table.index_of(box.class_name)
            rendered.append(RenderedBox(
                rect=rect,
                class_name=box.class_name,
                class_id=class_id if class_id is not None else 0,
                selected=index == selected,
                handles=corner_points(rect) if index == selected else [],
            ))
        return rendered

    def preview_rect(self) -> Optional[QRectF]:
        """Return the rectangle being drawn, clamped to the image."""
        if not isinstance(self.drag_mode, Creating) or self.drag_start is None or self.drag_end is None:
            return None

        rect = self.image_rect
        x0 = max(rect.left(), min(rect.right(), self.drag_start.x()))
        y0 = max(rect.top(), min(rect.bottom(), self.drag_start.y()))
        x1 = max(rect.left(), min(rect.right(), self.drag_end.x()))
        y1 = max(rect.top(), min(rect.bottom(), self.drag_end.y()))
        return QRectF(QPointF(min(x0, x1), min(y0, y1)), QPointF(max(x0, x1), max(y0, y1)))
