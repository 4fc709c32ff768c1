"""UI components for boxlabel."""

from .canvas import AnnotationCanvas
from .main_window import MainWindow

__all__ = [
    "AnnotationCanvas",
    "MainWindow",
]
