"""Pytest configuration and fixtures."""

import pytest
import sys
from pathlib import Path

from PyQt6.QtCore import QRectF

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from boxlabel.core.box_store import BoxStore  # noqa: E402
from boxlabel.core.classes import ClassTable  # noqa: E402
from boxlabel.core.interaction import InteractionController  # noqa: E402


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def image_rect():
    """A 200x100 displayed image offset from the widget origin."""
    return QRectF(10, 20, 200, 100)


@pytest.fixture
def class_table():
    """Class table with a legacy "object" first entry."""
    return ClassTable(["object", "car", "person"])


@pytest.fixture
def controller(class_table, image_rect):
    """Interaction controller over an empty store that counts persists."""
    store = BoxStore()
    persisted = []

    def persist():
        persisted.append([b.clone() for b in store.boxes])
        return True

    ctrl = InteractionController(store, class_table, persist=persist)
    ctrl.set_image_rect(image_rect)
    ctrl.persisted = persisted
    return ctrl


@pytest.fixture
def sample_annotation_file(tmp_path):
    """Create a sample YOLO annotation file."""
    txt_path = tmp_path / "sample.txt"
    txt_path.write_text(
        "0 0.5 0.5 0.2 0.1\n"
        "1 0.3 0.3 0.1 0.15\n"
    )
    return txt_path


@pytest.fixture
def image_dir(tmp_path):
    """Directory with two fake images, a label file and one annotation."""
    (tmp_path / "a.jpg").write_bytes(b"")
    (tmp_path / "b.PNG").write_bytes(b"")
    (tmp_path / "notes.md").write_text("not an image")
    (tmp_path / "_darknet.labels").write_text("object\ncar\n")
    (tmp_path / "a.txt").write_text("0 0.500000 0.500000 0.200000 0.100000\n")
    return tmp_path
