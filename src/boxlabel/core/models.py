"""Data models for boxlabel annotations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

# Smallest width/height a box may shrink to while being resized
MIN_BOX_RATIO = 0.0001


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


@dataclass
class BoundingBox:
    """
    Data model for a single axis-aligned bounding box.

    Coordinates are the box center and size as fractions of the
    image width and height, all in [0, 1].
    """

    class_name: str
    cx: float
    cy: float
    w: float
    h: float

    @property
    def left(self) -> float:
        return self.cx - self.w / 2

    @property
    def right(self) -> float:
        return self.cx + self.w / 2

    @property
    def top(self) -> float:
        return self.cy - self.h / 2

    @property
    def bottom(self) -> float:
        return self.cy + self.h / 2

    def clone(self) -> BoundingBox:
        """Return an independent copy of this box."""
        return replace(self)

    def move_by(self, dx: float, dy: float) -> None:
        """
        Shift the box center by a normalized delta.

        The center stays clamped to [0, 1].

        Args:
            dx: Horizontal offset as a fraction of image width
            dy: Vertical offset as a fraction of image height
        """
        self.cx = clamp(self.cx + dx)
        self.cy = clamp(self.cy + dy)

    def set_edges(self, left: float, top: float, right: float, bottom: float) -> None:
        """
        Set the box from its four edges.

        Edges given in the wrong order are swapped so the box never
        inverts, and the size is floored to MIN_BOX_RATIO.
        """
        left, right = min(left, right), max(left, right)
        top, bottom = min(top, bottom), max(top, bottom)

        self.cx = (left + right) / 2
        self.cy = (top + bottom) / 2
        self.w = clamp(right - left, MIN_BOX_RATIO, 1.0)
        self.h = clamp(bottom - top, MIN_BOX_RATIO, 1.0)

    @classmethod
    def from_edges(
        cls,
        class_name: str,
        left: float,
        top: float,
        right: float,
        bottom: float
    ) -> BoundingBox:
        """Create a box from normalized edge coordinates."""
        left, right = min(left, right), max(left, right)
        top, bottom = min(top, bottom), max(top, bottom)
        return cls(
            class_name=class_name,
            cx=(left + right) / 2,
            cy=(top + bottom) / 2,
            w=right - left,
            h=bottom - top,
        )


class ResizeCorner(str, Enum):
    """Corner handle of a box being resized."""

    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"


@dataclass(frozen=True)
class Idle:
    """No pointer interaction in progress."""


@dataclass(frozen=True)
class Creating:
    """A new box is being dragged out."""


@dataclass(frozen=True)
class Moving:
    """The selected box follows the pointer."""


@dataclass(frozen=True)
class Resizing:
    """One corner of the selected box follows the pointer."""

    corner: ResizeCorner


DragMode = Union[Idle, Creating, Moving, Resizing]

IDLE = Idle()
CREATING = Creating()
MOVING = Moving()


def clone_boxes(boxes: List[BoundingBox]) -> List[BoundingBox]:
    """Deep copy a box collection."""
    return [box.clone() for box in boxes]


def find_box(boxes: List[BoundingBox], index: Optional[int]) -> Optional[BoundingBox]:
    """Return the box at index, or None if the index is stale."""
    if index is None or not (0 <= index < len(boxes)):
        return None
    return boxes[index]
