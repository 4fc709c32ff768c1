"""Conversions between screen pixels and normalized box coordinates."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF, QSizeF

from .models import BoundingBox, clamp

logger = logging.getLogger(__name__)

# Default minimum on-screen size of a newly drawn box
DEFAULT_MIN_BOX_PIXELS = 6.0


def to_ratio(point: QPointF, image_rect: QRectF) -> Tuple[float, float]:
    """
    Convert a screen position to normalized image coordinates.

    Args:
        point: Position in screen pixels
        image_rect: On-screen rectangle of the displayed image

    Returns:
        Tuple of (x, y), each clamped to [0, 1]
    """
    x = (point.x() - image_rect.left()) / image_rect.width()
    y = (point.y() - image_rect.top()) / image_rect.height()
    return clamp(x), clamp(y)


def to_screen_rect(box: BoundingBox, image_rect: QRectF) -> QRectF:
    """
    Convert a normalized box to its on-screen rectangle.

    Args:
        box: Box in normalized coordinates
        image_rect: On-screen rectangle of the displayed image

    Returns:
        Rectangle in screen pixels
    """
    left = image_rect.left() + box.left * image_rect.width()
    top = image_rect.top() + box.top * image_rect.height()
    return QRectF(left, top, box.w * image_rect.width(), box.h * image_rect.height())


def ratio_rect(rect: QRectF, image_rect: QRectF) -> Tuple[float, float, float, float]:
    """
    Convert an on-screen rectangle back to normalized center/size.

    Returns:
        Tuple of (cx, cy, w, h)
    """
    width = image_rect.width()
    height = image_rect.height()
    cx = (rect.center().x() - image_rect.left()) / width
    cy = (rect.center().y() - image_rect.top()) / height
    return cx, cy, rect.width() / width, rect.height() / height


def box_from_drag(
    start: QPointF,
    end: QPointF,
    image_rect: QRectF,
    class_name: str,
    min_pixels: float = DEFAULT_MIN_BOX_PIXELS
) -> Optional[BoundingBox]:
    """
    Build a box from a pointer drag.

    Both endpoints are clamped into the image first, so a drag that
    leaves the image produces a box along its border.

    Args:
        start: Drag anchor in screen pixels
        end: Drag end in screen pixels
        image_rect: On-screen rectangle of the displayed image
        class_name: Class assigned to the new box
        min_pixels: Minimum on-screen width and height

    Returns:
        New box, or None if the drag is smaller than min_pixels
    """
    width = image_rect.width()
    height = image_rect.height()

    x0 = clamp(start.x() - image_rect.left(), 0.0, width)
    y0 = clamp(start.y() - image_rect.top(), 0.0, height)
    x1 = clamp(end.x() - image_rect.left(), 0.0, width)
    y1 = clamp(end.y() - image_rect.top(), 0.0, height)

    pixel_w = abs(x1 - x0)
    pixel_h = abs(y1 - y0)
    if pixel_w <= 0 or pixel_h <= 0 or pixel_w < min_pixels or pixel_h < min_pixels:
        logger.debug(f"Rejected drag of {pixel_w:.1f}x{pixel_h:.1f} px")
        return None

    return BoundingBox.from_edges(
        class_name,
        min(x0, x1) / width,
        min(y0, y1) / height,
        max(x0, x1) / width,
        max(y0, y1) / height,
    )


def corner_points(rect: QRectF) -> List[QPointF]:
    """Return the corner handles of a rectangle in TL, TR, BL, BR order."""
    return [rect.topLeft(), rect.topRight(), rect.bottomLeft(), rect.bottomRight()]


def fit_image_rect(image_size: QSizeF, available: QRectF) -> QRectF:
    """
    Fit an image into the available area preserving its aspect ratio.

    The fitted rectangle is anchored at the top-left of the area.

    Args:
        image_size: Image size in pixels
        available: Area the image may occupy

    Returns:
        The displayed image rectangle, empty if either size is degenerate
    """
    if image_size.isEmpty() or available.isEmpty():
        return QRectF()

    aspect = image_size.width() / image_size.height()
    width = available.width()
    height = available.height()
    if width / height > aspect:
        width = height * aspect
    else:
        height = width / aspect

    return QRectF(available.left(), available.top(), width, height)
