"""Discovery of annotatable images in a directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

from PyQt6.QtGui import QImageReader

from .config import DEFAULT_IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)


@dataclass
class ImageEntry:
    """An image file and its pixel dimensions, 0 until read."""

    path: Path
    width: int = 0
    height: int = 0

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def has_size(self) -> bool:
        return self.width > 0 and self.height > 0


def read_image_size(path: Path) -> Tuple[int, int]:
    """
    Read the pixel dimensions of an image without decoding it.

    Args:
        path: Image file path

    Returns:
        Tuple of (width, height), (0, 0) if the file is unreadable
    """
    reader = QImageReader(str(path))
    size = reader.size()
    if not size.isValid():
        logger.warning(f"Could not read image size of {path}: {reader.errorString()}")
        return (0, 0)
    return (size.width(), size.height())


def list_images(
    directory: Path,
    extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS
) -> List[ImageEntry]:
    """
    List the images in a directory.

    Args:
        directory: Directory to scan
        extensions: Accepted file extensions, matched case-insensitively

    Returns:
        Image entries sorted by path
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.error(f"Not a directory: {directory}")
        return []

    accepted = {ext.lower() for ext in extensions}
    entries = [
        ImageEntry(path=f) for f in directory.iterdir()
        if f.is_file() and f.suffix.lower() in accepted
    ]
    entries.sort(key=lambda e: e.path)

    logger.info(f"Found {len(entries)} images in {directory}")
    return entries
