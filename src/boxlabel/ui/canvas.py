"""Canvas widget that displays an image and forwards pointer events."""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import Qt, QRectF, QSizeF, pyqtSignal
from PyQt6.QtGui import QColor, QFont, QMouseEvent, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import QSizePolicy, QWidget

from ..core.geometry import fit_image_rect
from ..core.interaction import InteractionController

logger = logging.getLogger(__name__)

HANDLE_SIZE = 6.0
BOTTOM_MARGIN = 10.0


class AnnotationCanvas(QWidget):
    """
    Draws the current image with its boxes.

    Mouse input is translated into press/drag/release calls on the
    interaction controller; painting reads the controller's render
    outputs.
    """

    edited = pyqtSignal()  # Emitted after a press/drag/release cycle ends

    BOX_COLOR = QColor(200, 100, 50)
    SELECTED_COLOR = QColor(255, 50, 50)
    PREVIEW_COLOR = QColor(100, 200, 200)

    def __init__(self, controller: InteractionController, parent: Optional[QWidget] = None) -> None:
        """
        Initialize the canvas.

        Args:
            controller: Interaction controller receiving pointer events
            parent: Parent widget
        """
        super().__init__(parent)
        self.controller = controller
        self._pixmap: Optional[QPixmap] = None
        self.line_thickness = 2
        self.font_size = 10

        self.setMouseTracking(False)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

    def set_image(self, pixmap: Optional[QPixmap]) -> None:
        """Display a new image, or nothing."""
        self._pixmap = pixmap if pixmap is not None and not pixmap.isNull() else None
        self._update_image_rect()
        self.update()

    def _update_image_rect(self) -> None:
        if self._pixmap is None:
            self.controller.set_image_rect(QRectF())
            return

        available = QRectF(0, 0, self.width(), max(0.0, self.height() - BOTTOM_MARGIN))
        image_size = QSizeF(self._pixmap.width(), self._pixmap.height())
        self.controller.set_image_rect(fit_image_rect(image_size, available))

    def resizeEvent(self, event) -> None:
        self._update_image_rect()
        super().resizeEvent(event)

    # === Mouse events ===

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            return
        self.setFocus()
        self.controller.press(event.position())
        self.update()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if event.buttons() & Qt.MouseButton.LeftButton:
            self.controller.drag(event.position())
            self.update()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            return
        was_dragging = self.controller.is_dragging
        self.controller.release()
        self.update()
        if was_dragging:
            self.edited.emit()

    # === Painting ===

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        if self._pixmap is None:
            painter.drawText(
                self.rect(),
                Qt.AlignmentFlag.AlignCenter,
                "No images loaded. Open a directory to start annotating."
            )
            painter.end()
            return

        image_rect = self.controller.image_rect
        painter.drawPixmap(image_rect.toRect(), self._pixmap)
        painter.setFont(QFont("Arial", self.font_size))

        for rendered in self.controller.render_boxes():
            if rendered.selected:
                painter.setPen(QPen(self.SELECTED_COLOR, self.line_thickness + 1))
            else:
                painter.setPen(QPen(self.BOX_COLOR, self.line_thickness))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(rendered.rect)

            for handle in rendered.handles:
                painter.fillRect(
                    QRectF(handle.x() - HANDLE_SIZE, handle.y() - HANDLE_SIZE,
                           2 * HANDLE_SIZE, 2 * HANDLE_SIZE),
                    Qt.GlobalColor.white
                )

            painter.setPen(Qt.GlobalColor.white)
            painter.drawText(
                rendered.rect.adjusted(2, 2, 0, 0),
                Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop,
                rendered.caption
            )

        preview = self.controller.preview_rect()
        if preview is not None:
            painter.setPen(QPen(self.PREVIEW_COLOR, self.line_thickness))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(preview)

        painter.end()
