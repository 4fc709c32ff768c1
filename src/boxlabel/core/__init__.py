"""Core business logic modules for boxlabel."""

from .models import BoundingBox, ResizeCorner
from .classes import ClassTable
from .config import AppConfig, ConfigManager
from .yolo_format import YOLOAnnotationReader, YOLOAnnotationWriter
from .box_store import BoxStore
from .interaction import InteractionController
from .session import AnnotationSession

__all__ = [
    "BoundingBox",
    "ResizeCorner",
    "ClassTable",
    "AppConfig",
    "ConfigManager",
    "YOLOAnnotationReader",
    "YOLOAnnotationWriter",
    "BoxStore",
    "InteractionController",
    "AnnotationSession",
]
