"""Exception types raised by the annotation core."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class BoxLabelError(Exception):
    """Base class for recoverable annotation errors."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class AnnotationWriteError(BoxLabelError):
    """Raised when an annotation file cannot be written."""


class LabelFileError(BoxLabelError):
    """Raised when the class label file cannot be written."""
