"""YOLO annotation format reading and writing."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .classes import ClassTable
from .errors import AnnotationWriteError
from .models import BoundingBox

logger = logging.getLogger(__name__)


class YOLOAnnotationReader:
    """
    Reader for YOLO format annotation files.

    Each line holds `<class> <cx> <cy> <w> <h>`. Parsing is lenient:
    malformed lines are dropped without aborting the file, and extra
    trailing fields are ignored.
    """

    def __init__(self, class_table: ClassTable) -> None:
        """
        Initialize the reader.

        Args:
            class_table: Table used to resolve class tokens. Reading may
                grow it; callers persist it afterwards.
        """
        self.class_table = class_table

    def read(self, txt_path: Path) -> List[BoundingBox]:
        """
        Read annotations from a YOLO format text file.

        Args:
            txt_path: Path to the annotation file

        Returns:
            List of boxes, empty if the file is missing or unreadable
        """
        txt_path = Path(txt_path)
        if not txt_path.exists():
            logger.debug(f"Annotation file not found: {txt_path}")
            return []

        boxes: List[BoundingBox] = []

        try:
            with open(txt_path, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading annotation file {txt_path}: {e}")
            return []

        for line_num, line in enumerate(lines, 1):
            line = line.strip()
            if not line:
                continue

            box = self.parse_line(line)
            if box is None:
                logger.warning(f"Skipping malformed line {line_num} in {txt_path}")
                continue
            boxes.append(box)

        logger.info(f"Loaded {len(boxes)} annotations from {txt_path}")
        return boxes

    def parse_line(self, line: str) -> Optional[BoundingBox]:
        """
        Parse a single annotation line.

        The resolved class is registered in the class table if absent.

        Args:
            line: Line from annotation file

        Returns:
            Box or None if the line is malformed
        """
        data = line.split()
        if len(data) < 5:
            return None

        class_name = self.class_table.resolve_token(data[0])

        try:
            cx, cy, w, h = (float(value) for value in data[1:5])
        except ValueError:
            return None

        self.class_table.id_for(class_name)
        return BoundingBox(class_name=class_name, cx=cx, cy=cy, w=w, h=h)


class YOLOAnnotationWriter:
    """
    Writer for YOLO format annotation files.

    Writes one line per box in collection order with six decimal digits.
    """

    def __init__(self, class_table: ClassTable) -> None:
        """
        Initialize the writer.

        Args:
            class_table: Table mapping class names to ids. Unseen names
                are appended to it.
        """
        self.class_table = class_table

    def format_box(self, box: BoundingBox) -> str:
        """Format a single box as a YOLO annotation line."""
        class_id = self.class_table.serialized_id(box.class_name)
        return f"{class_id} {box.cx:.6f} {box.cy:.6f} {box.w:.6f} {box.h:.6f}"

    def write(self, txt_path: Path, boxes: List[BoundingBox]) -> None:
        """
        Write annotations to a YOLO format text file.

        The file is truncated or created, so an empty collection leaves
        an empty file behind.

        Args:
            txt_path: Path to write the annotation file
            boxes: Boxes to write

        Raises:
            AnnotationWriteError: If the file cannot be written
        """
        txt_path = Path(txt_path)
        lines = [self.format_box(box) for box in boxes]

        try:
            with open(txt_path, "w", encoding="utf-8") as f:
                for line in lines:
                    f.write(line + "\n")
        except OSError as e:
            raise AnnotationWriteError(
                f"Error writing annotation file {txt_path}: {e}", txt_path
            ) from e

        logger.info(f"Saved {len(boxes)} annotations to {txt_path}")


def get_annotation_path(image_path: Path) -> Path:
    """
    Get the annotation file path for an image.

    Args:
        image_path: Path to the image file

    Returns:
        Path to the corresponding annotation file
    """
    return Path(image_path).with_suffix(".txt")


def has_annotation(image_path: Path) -> bool:
    """
    Check if an image has a valid annotation file.

    Args:
        image_path: Path to the image file

    Returns:
        True if the annotation file contains at least one parsable box
    """
    txt_path = get_annotation_path(image_path)
    if not txt_path.exists():
        return False

    try:
        with open(txt_path, "r", encoding="utf-8") as f:
            for line in f:
                parts = line.split()
                if len(parts) < 5:
                    continue
                try:
                    [float(value) for value in parts[1:5]]
                except ValueError:
                    continue
                return True
        return False
    except (OSError, UnicodeDecodeError):
        return False
