"""Main application window for boxlabel."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QColor, QImageReader, QPixmap
from PyQt6.QtWidgets import (
    QComboBox, QDockWidget, QFileDialog, QHBoxLayout, QLabel, QLineEdit,
    QListWidget, QMainWindow, QPushButton, QSlider, QStatusBar, QToolBar,
    QVBoxLayout, QWidget
)

from ..core.config import AppConfig, ConfigManager
from ..core.images import ImageEntry
from ..core.session import AnnotationSession
from .canvas import AnnotationCanvas

logger = logging.getLogger(__name__)

ANNOTATED_COLOR = QColor(0, 160, 0)


def increase_image_allocation_limit() -> None:
    """Remove image allocation limit for large images."""
    QImageReader.setAllocationLimit(0)


class MainWindow(QMainWindow):
    """
    Main application window.

    Hosts the annotation canvas, image navigation, the class picker and
    the selected-box controls around one AnnotationSession.
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None) -> None:
        """Initialize the main window."""
        super().__init__()

        increase_image_allocation_limit()

        self.config_manager = config_manager or ConfigManager()
        self.session = AnnotationSession(self.config)

        self.canvas: Optional[AnnotationCanvas] = None
        self.class_combo: Optional[QComboBox] = None
        self.selected_class_combo: Optional[QComboBox] = None
        self.new_class_edit: Optional[QLineEdit] = None
        self.image_list: Optional[QListWidget] = None
        self.position_label: Optional[QLabel] = None
        self.selection_label: Optional[QLabel] = None
        self.undo_action: Optional[QAction] = None
        self._updating = False

        self._init_ui()
        self._setup_connections()

        logger.info("MainWindow initialization complete")

    @property
    def config(self) -> AppConfig:
        """Get the current configuration."""
        return self.config_manager.config

    # === UI construction ===

    def _init_ui(self) -> None:
        """Initialize the user interface."""
        self.setWindowTitle("boxlabel")
        self.setGeometry(100, 100, 1200, 800)

        self.canvas = AnnotationCanvas(self.session.controller)
        self.canvas.line_thickness = self.config.line_thickness
        self.canvas.font_size = self.config.font_size
        self.setCentralWidget(self.canvas)

        self.setStatusBar(QStatusBar())
        self.position_label = QLabel()
        self.statusBar().addPermanentWidget(self.position_label)

        self._create_toolbar()
        self._create_class_dock()
        self._create_selection_dock()

    def _create_toolbar(self) -> None:
        """Create the main toolbar."""
        toolbar = QToolBar()
        toolbar.setObjectName("MainToolBar")
        self.addToolBar(toolbar)

        actions = [
            ("Open Directory", self._open_directory, None),
            ("Prev", self._previous_image, "Left"),
            ("Next", self._next_image, "Right"),
            ("Save", self._save, "Ctrl+S"),
            ("Reload folder", self._reload_directory, None),
            ("Undo", self._undo, "Ctrl+Z"),
            ("Quit", self.close, None),
        ]
        for text, slot, shortcut in actions:
            action = QAction(text, self)
            if shortcut:
                action.setShortcut(shortcut)
            action.triggered.connect(slot)
            toolbar.addAction(action)
            if text == "Undo":
                self.undo_action = action

        self.undo_action.setEnabled(False)

    def _create_class_dock(self) -> None:
        """Create the classes, settings and image list dock."""
        widget = QWidget()
        layout = QVBoxLayout(widget)

        layout.addWidget(QLabel("Classes"))
        self.class_combo = QComboBox()
        layout.addWidget(self.class_combo)

        layout.addWidget(QLabel("Add new class:"))
        row = QHBoxLayout()
        self.new_class_edit = QLineEdit()
        add_button = QPushButton("Add")
        add_button.clicked.connect(self._add_class)
        self.new_class_edit.returnPressed.connect(self._add_class)
        row.addWidget(self.new_class_edit)
        row.addWidget(add_button)
        layout.addLayout(row)

        layout.addWidget(QLabel("Click tolerance (px)"))
        tolerance_slider = self._create_slider(1, 30, self.session.controller.click_tolerance)
        tolerance_slider.valueChanged.connect(self._set_click_tolerance)
        layout.addWidget(tolerance_slider)

        layout.addWidget(QLabel("Min box pixels"))
        min_box_slider = self._create_slider(1, 40, self.session.controller.min_box_pixels)
        min_box_slider.valueChanged.connect(self._set_min_box_pixels)
        layout.addWidget(min_box_slider)

        layout.addWidget(QLabel("Images in folder:"))
        self.image_list = QListWidget()
        layout.addWidget(self.image_list)

        dock = QDockWidget("Classes", self)
        dock.setObjectName("ClassesDock")
        dock.setWidget(widget)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, dock)

    def _create_selection_dock(self) -> None:
        """Create the selected-box controls dock."""
        widget = QWidget()
        layout = QVBoxLayout(widget)

        delete_button = QPushButton("Delete Selected Box")
        delete_button.clicked.connect(self._delete_selected)
        layout.addWidget(delete_button)

        duplicate_button = QPushButton("Duplicate Selected Box")
        duplicate_button.clicked.connect(self._duplicate_selected)
        layout.addWidget(duplicate_button)

        layout.addWidget(QLabel("Selected box controls:"))
        self.selection_label = QLabel("No box selected.")
        layout.addWidget(self.selection_label)
        self.selected_class_combo = QComboBox()
        layout.addWidget(self.selected_class_combo)

        assign_button = QPushButton("Assign current left-class to selected")
        assign_button.clicked.connect(self._assign_active_class)
        layout.addWidget(assign_button)
        layout.addStretch()

        dock = QDockWidget("Selection", self)
        dock.setObjectName("SelectionDock")
        dock.setWidget(widget)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, dock)

    @staticmethod
    def _create_slider(minimum: int, maximum: int, value: float) -> QSlider:
        slider = QSlider(Qt.Orientation.Horizontal)
        slider.setRange(minimum, maximum)
        slider.setValue(int(round(value)))
        return slider

    def _setup_connections(self) -> None:
        """Connect session signals to UI refreshes."""
        store = self.session.store
        store.selection_changed.connect(lambda _index: self._refresh_selection())
        store.boxes_changed.connect(self.canvas.update)
        store.history.state_changed.connect(self._update_undo_state)
        self.canvas.edited.connect(self._refresh_classes)
        self.canvas.edited.connect(self._refresh_current_mark)
        self.class_combo.currentIndexChanged.connect(self._on_active_class_changed)
        self.selected_class_combo.currentIndexChanged.connect(self._on_selected_class_changed)
        self.image_list.currentRowChanged.connect(self._on_image_row_changed)

    # === Directory and image navigation ===

    def open_directory_path(self, directory: str) -> None:
        """Open a directory of images."""
        path = Path(directory)
        if not path.is_dir():
            logger.error(f"Provided path is not a directory: {path}")
            self.statusBar().showMessage(f"Not a directory: {path}")
            return

        self.session.open_directory(path)
        self.config_manager.update(default_directory=str(path))
        self._refresh_all()

    def _open_directory(self) -> None:
        directory = QFileDialog.getExistingDirectory(
            self, "Open Image Directory", self.config.default_directory
        )
        if directory:
            self.open_directory_path(directory)

    def _reload_directory(self) -> None:
        self.session.reload_directory()
        self._refresh_all()

    def _previous_image(self) -> None:
        self._after_switch(self.session.current_index, self.session.previous_image())

    def _next_image(self) -> None:
        self._after_switch(self.session.current_index, self.session.next_image())

    def _on_image_row_changed(self, row: int) -> None:
        if self._updating or row < 0 or row == self.session.current_index:
            return
        self._after_switch(self.session.current_index, self.session.switch_image(row))

    def _after_switch(self, previous_index: int, entry: Optional[ImageEntry]) -> None:
        """Refresh after navigation, reporting a switch blocked by a failed save."""
        if entry is None and self.session.images:
            self.statusBar().showMessage("Save failed, staying on this image", 5000)
        self._refresh_mark(previous_index)
        self._refresh_image()

    # === Commands ===

    def _save(self) -> None:
        if self.session.save():
            self.statusBar().showMessage("Saved", 2000)
        else:
            self.statusBar().showMessage("Save failed, see log", 5000)

    def _undo(self) -> None:
        self.session.undo()
        self.canvas.update()
        self._refresh_current_mark()

    def _add_class(self) -> None:
        name = self.new_class_edit.text().strip()
        if not name:
            return
        self.session.add_class(name)
        self.new_class_edit.clear()
        self._refresh_classes()

    def _delete_selected(self) -> None:
        self.session.controller.delete_selected()
        self.canvas.update()
        self._refresh_current_mark()

    def _duplicate_selected(self) -> None:
        self.session.controller.duplicate_selected()
        self.canvas.update()
        self._refresh_current_mark()

    def _assign_active_class(self) -> None:
        self.session.controller.assign_active_class()
        self._refresh_selection()

    def _set_click_tolerance(self, value: int) -> None:
        self.session.controller.set_click_tolerance(value)
        self.config_manager.update(click_tolerance=float(value))

    def _set_min_box_pixels(self, value: int) -> None:
        self.session.controller.set_min_box_pixels(value)
        self.config_manager.update(min_box_pixels=float(value))

    def _on_active_class_changed(self, index: int) -> None:
        if not self._updating and index >= 0:
            self.session.controller.set_active_class(index)

    def _on_selected_class_changed(self, index: int) -> None:
        if not self._updating and index >= 0:
            self.session.controller.reassign_selected(index)
            self.canvas.update()

    # === Refresh ===

    def _refresh_all(self) -> None:
        self._updating = True
        try:
            self.image_list.clear()
            for entry in self.session.images:
                self.image_list.addItem(entry.name)
        finally:
            self._updating = False
        for row in range(self.image_list.count()):
            self._refresh_mark(row)
        self._refresh_image()

    def _refresh_mark(self, row: int) -> None:
        """Color an image list row green if its image has boxes on disk."""
        item = self.image_list.item(row)
        if item is None:
            return
        annotated = self.session.is_annotated(row)
        item.setForeground(ANNOTATED_COLOR if annotated else self.palette().text().color())

    def _refresh_current_mark(self) -> None:
        self._refresh_mark(self.session.current_index)

    def _update_undo_state(self) -> None:
        """Update the undo action enabled state."""
        self.undo_action.setEnabled(self.session.can_undo)

    def _refresh_image(self) -> None:
        entry = self.session.current_image
        self.canvas.set_image(QPixmap(str(entry.path)) if entry is not None else None)

        self._updating = True
        try:
            if entry is not None:
                self.image_list.setCurrentRow(self.session.current_index)
        finally:
            self._updating = False

        self.position_label.setText(self.session.position_label)
        self._refresh_classes()

    def _refresh_classes(self) -> None:
        names = self.session.class_table.names
        self._updating = True
        try:
            self.class_combo.clear()
            self.class_combo.addItems(names)
            self.class_combo.setCurrentIndex(self.session.controller.active_class_index)
            self.selected_class_combo.clear()
            self.selected_class_combo.addItems(names)
        finally:
            self._updating = False
        self._refresh_selection()

    def _refresh_selection(self) -> None:
        box = self.session.store.selected_box
        self._updating = True
        try:
            if box is None:
                self.selection_label.setText("No box selected.")
                self.selected_class_combo.setEnabled(False)
            else:
                self.selection_label.setText(f"Class: {box.class_name}")
                self.selected_class_combo.setEnabled(True)
                index = self.session.class_table.index_of(box.class_name)
                self.selected_class_combo.setCurrentIndex(index if index is not None else -1)
        finally:
            self._updating = False

    def closeEvent(self, event) -> None:
        """Persist the current image before closing."""
        self.session.save_annotations()
        super().closeEvent(event)
