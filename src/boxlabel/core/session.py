"""Editing session over a directory of images."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .box_store import BoxStore
from .classes import ClassTable
from .config import AppConfig
from .errors import BoxLabelError
from .images import ImageEntry, list_images, read_image_size
from .interaction import InteractionController
from .yolo_format import YOLOAnnotationReader, YOLOAnnotationWriter, get_annotation_path, has_annotation

logger = logging.getLogger(__name__)


class AnnotationSession:
    """
    Ties the class table, box store and interaction controller to one
    image directory.

    One image is edited at a time. Switching images saves the current
    annotations, then resets boxes, selection, drag state and history
    before loading the next image's boxes.
    """

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        """
        Initialize an empty session.

        Args:
            config: Application settings, defaults if omitted
        """
        self.config = config or AppConfig()
        self.class_table = ClassTable()
        self.store = BoxStore(self.config.history_limit)
        self.controller = InteractionController(
            self.store, self.class_table, persist=self.save_annotations
        )
        self.controller.set_click_tolerance(self.config.click_tolerance)
        self.controller.set_min_box_pixels(self.config.min_box_pixels)

        self.reader = YOLOAnnotationReader(self.class_table)
        self.writer = YOLOAnnotationWriter(self.class_table)

        self.directory: Optional[Path] = None
        self.images: List[ImageEntry] = []
        self.current_index = 0

    # === Properties ===

    @property
    def labels_path(self) -> Optional[Path]:
        if self.directory is None:
            return None
        return self.directory / self.config.labels_file_name

    @property
    def current_image(self) -> Optional[ImageEntry]:
        if not self.images:
            return None
        return self.images[self.current_index]

    @property
    def image_count(self) -> int:
        return len(self.images)

    @property
    def position_label(self) -> str:
        return f"Image {self.current_index + 1}/{max(1, len(self.images))}"

    def is_annotated(self, index: int) -> bool:
        """Check if the image at index has at least one box on disk."""
        if not (0 <= index < len(self.images)):
            return False
        return has_annotation(self.images[index].path)

    # === Directory and image lifecycle ===

    def open_directory(self, directory: Path) -> int:
        """
        Open an image directory.

        The label file is loaded before any annotation so numeric ids
        resolve against the persisted class order.

        Args:
            directory: Directory containing images

        Returns:
            Number of images found
        """
        directory = Path(directory)
        if self.current_image is not None and not self.save_annotations():
            logger.warning(f"Unsaved edits to {self.current_image.name} were dropped")

        self.directory = directory
        self.class_table.load(directory / self.config.labels_file_name)
        self._persist_classes()
        self.controller.set_active_class(0)
        self.images = list_images(directory, self.config.image_extensions)
        self.current_index = 0
        self.load_image(0)
        return len(self.images)

    def reload_directory(self) -> int:
        """Re-scan the current directory and reload the class table."""
        if self.directory is None:
            return 0
        return self.open_directory(self.directory)

    def load_image(self, index: int) -> Optional[ImageEntry]:
        """
        Make an image current and load its annotations.

        Args:
            index: Position in the image list

        Returns:
            The loaded image entry, or None if there are no images
        """
        self.controller.reset()
        self.store.clear()

        if not self.images:
            return None

        self.current_index = max(0, min(index, len(self.images) - 1))
        entry = self.images[self.current_index]
        if not entry.has_size:
            entry.width, entry.height = read_image_size(entry.path)

        boxes = self.reader.read(get_annotation_path(entry.path))
        self.store.replace_all(boxes)
        self._persist_classes()

        logger.info(f"Loaded {entry.name} with {len(boxes)} boxes")
        return entry

    def switch_image(self, index: int) -> Optional[ImageEntry]:
        """
        Save the current image, then load another one.

        If the save fails the current image stays loaded with its edits.

        Returns:
            The loaded image entry, or None if nothing was switched
        """
        if not self.images:
            return None
        if not self.save_annotations():
            logger.warning(f"Not leaving {self.current_image.name}: annotations could not be saved")
            return None
        return self.load_image(index)

    def next_image(self) -> Optional[ImageEntry]:
        if not self.images:
            return None
        return self.switch_image((self.current_index + 1) % len(self.images))

    def previous_image(self) -> Optional[ImageEntry]:
        if not self.images:
            return None
        return self.switch_image((self.current_index - 1) % len(self.images))

    # === Persistence ===

    def save_annotations(self) -> bool:
        """
        Write the current boxes to the image's annotation file.

        New classes met while writing are added to the label file.

        Returns:
            True if everything was written
        """
        entry = self.current_image
        if entry is None:
            return True

        try:
            self.writer.write(get_annotation_path(entry.path), self.store.boxes)
        except BoxLabelError as e:
            logger.error(str(e))
            return False
        return self._persist_classes()

    def save(self) -> bool:
        """Explicit save of the annotations and label file."""
        return self.save_annotations()

    def _persist_classes(self) -> bool:
        try:
            self.class_table.save_if_modified()
        except BoxLabelError as e:
            logger.error(str(e))
            return False
        return True

    # === Class management ===

    def add_class(self, name: str) -> int:
        """
        Add a class, make it the active class and persist the label file.

        Args:
            name: Class name

        Returns:
            Index of the class

        Raises:
            ValueError: If the name is blank
        """
        index = self.class_table.add(name)
        self.controller.set_active_class(index)
        self._persist_classes()
        return index

    @property
    def can_undo(self) -> bool:
        return self.store.history.can_undo()

    def undo(self) -> bool:
        return self.controller.undo()
