"""Tests for the pointer interaction state machine."""

import pytest
from PyQt6.QtCore import QPointF, QRectF

from boxlabel.core.models import IDLE, BoundingBox, Creating, Moving, ResizeCorner, Resizing


def drag_out(controller, start, end):
    controller.press(QPointF(*start))
    controller.drag(QPointF(*end))
    controller.release()


def add_box(controller, box):
    controller.store.add(box)
    return len(controller.store.boxes) - 1


def box_values(box):
    return (box.cx, box.cy, box.w, box.h)


# Screen rect of this box with the 200x100 image at (10, 20): (90, 60) to (130, 80)
CAR_BOX = BoundingBox("car", 0.5, 0.5, 0.2, 0.2)


class TestCreating:
    """Tests for drawing new boxes."""

    def test_create_box(self, controller):
        """Test a drag on empty space creates a box with the active class."""
        drag_out(controller, (60, 40), (110, 90))

        boxes = controller.store.boxes
        assert len(boxes) == 1
        assert boxes[0].class_name == "object"
        assert box_values(boxes[0]) == pytest.approx((0.375, 0.45, 0.25, 0.5))
        assert controller.store.selected_index is None
        assert controller.drag_mode == IDLE
        assert len(controller.persisted) == 1

    def test_preview_only_until_release(self, controller):
        """Test that dragging only updates the preview."""
        controller.press(QPointF(60, 40))
        controller.drag(QPointF(0, 200))

        assert isinstance(controller.drag_mode, Creating)
        assert controller.store.boxes == []
        assert controller.preview_rect() == QRectF(10, 40, 50, 80)

    def test_stray_click_rejected(self, controller):
        """Test a click without a drag creates nothing."""
        controller.press(QPointF(60, 40))
        controller.release()

        assert controller.store.boxes == []
        assert controller.preview_rect() is None
        assert len(controller.persisted) == 1

    def test_min_box_pixels(self, controller):
        """Test the configurable minimum size."""
        controller.set_min_box_pixels(40)
        drag_out(controller, (60, 40), (90, 90))

        assert controller.store.boxes == []

    def test_active_class(self, controller):
        """Test new boxes take the active class."""
        controller.set_active_class(2)
        drag_out(controller, (60, 40), (110, 90))

        assert controller.store.boxes[0].class_name == "person"

    def test_press_outside_image_ignored(self, controller):
        """Test presses outside the image rectangle do nothing."""
        controller.press(QPointF(0, 0))

        assert controller.drag_mode == IDLE
        assert controller.store.history.can_undo() is False

    def test_press_without_image_ignored(self, controller):
        """Test presses are ignored before an image is shown."""
        controller.set_image_rect(QRectF())
        controller.press(QPointF(60, 40))

        assert controller.drag_mode == IDLE


class TestSelection:
    """Tests for hit testing and selection."""

    def test_select_with_tolerance(self, controller):
        """Test a press just outside a box still selects it."""
        add_box(controller, CAR_BOX.clone())

        controller.press(QPointF(135, 70))

        assert controller.store.selected_index == 0
        assert isinstance(controller.drag_mode, Moving)

    def test_miss_beyond_tolerance(self, controller):
        """Test a press far from any box starts creating and deselects."""
        add_box(controller, CAR_BOX.clone())
        controller.store.select(0)

        controller.press(QPointF(160, 70))

        assert controller.store.selected_index is None
        assert isinstance(controller.drag_mode, Creating)

    def test_topmost_box_wins(self, controller):
        """Test overlapping boxes resolve to the most recently added."""
        add_box(controller, CAR_BOX.clone())
        add_box(controller, BoundingBox("person", 0.5, 0.5, 0.3, 0.3))

        assert controller.hit_test(QPointF(110, 70)) == 1

    def test_press_on_box_pushes_history(self, controller):
        """Test history is pushed once when an action starts."""
        add_box(controller, CAR_BOX.clone())

        controller.press(QPointF(110, 70))
        controller.drag(QPointF(115, 70))
        controller.drag(QPointF(120, 70))
        controller.release()

        assert len(controller.store.history) == 1


class TestMoving:
    """Tests for dragging a selected box."""

    def test_move_relative(self, controller):
        """Test each drag step moves by the delta since the last one."""
        add_box(controller, CAR_BOX.clone())

        controller.press(QPointF(110, 70))
        controller.drag(QPointF(130, 80))
        assert box_values(controller.store.boxes[0]) == pytest.approx((0.6, 0.6, 0.2, 0.2))

        controller.drag(QPointF(150, 90))
        controller.release()

        assert box_values(controller.store.boxes[0]) == pytest.approx((0.7, 0.7, 0.2, 0.2))
        assert len(controller.persisted) == 1
        assert controller.last_pointer_pos is None

    def test_move_clamped(self, controller):
        """Test the center stays inside the image."""
        add_box(controller, CAR_BOX.clone())

        controller.press(QPointF(110, 70))
        controller.drag(QPointF(400, 70))

        assert controller.store.boxes[0].cx == pytest.approx(1.0)


class TestResizing:
    """Tests for corner-handle resizing."""

    def test_corner_detection(self, controller):
        """Test presses near corners start resizing that corner."""
        add_box(controller, CAR_BOX.clone())

        assert controller.corner_at(0, QPointF(91, 61)) == ResizeCorner.TOP_LEFT
        assert controller.corner_at(0, QPointF(129, 61)) == ResizeCorner.TOP_RIGHT
        assert controller.corner_at(0, QPointF(91, 79)) == ResizeCorner.BOTTOM_LEFT
        assert controller.corner_at(0, QPointF(129, 79)) == ResizeCorner.BOTTOM_RIGHT
        assert controller.corner_at(0, QPointF(110, 70)) is None

    def test_corner_priority(self, controller):
        """Test a point near every corner of a tiny box picks top-left."""
        add_box(controller, BoundingBox("car", 0.5, 0.5, 0.02, 0.04))

        controller.press(QPointF(110, 70))

        assert controller.drag_mode == Resizing(ResizeCorner.TOP_LEFT)

    def test_resize_bottom_right(self, controller):
        """Test dragging the bottom-right corner keeps top-left fixed."""
        add_box(controller, CAR_BOX.clone())

        controller.press(QPointF(130, 80))
        assert controller.drag_mode == Resizing(ResizeCorner.BOTTOM_RIGHT)

        controller.drag(QPointF(150, 100))
        controller.release()

        assert box_values(controller.store.boxes[0]) == pytest.approx((0.55, 0.6, 0.3, 0.4))
        assert len(controller.persisted) == 1

    def test_resize_past_opposite_corner_flips(self, controller):
        """Test crossing the fixed corner flips instead of inverting."""
        add_box(controller, CAR_BOX.clone())

        controller.press(QPointF(130, 80))
        controller.drag(QPointF(50, 30))

        box = controller.store.boxes[0]
        assert box.left < box.right
        assert box.top < box.bottom
        assert box_values(box) == pytest.approx((0.3, 0.25, 0.2, 0.3))

        controller.drag(QPointF(40, 25))

        assert box.right == pytest.approx(0.4)
        assert box.bottom == pytest.approx(0.4)
        assert box.left == pytest.approx(0.15)

    def test_resize_minimum_size(self, controller):
        """Test collapsing a box floors its size instead of zeroing it."""
        add_box(controller, CAR_BOX.clone())

        controller.press(QPointF(91, 61))
        controller.drag(QPointF(130, 80))

        box = controller.store.boxes[0]
        assert box.w == pytest.approx(0.0001)
        assert box.h == pytest.approx(0.0001)


class TestCommands:
    """Tests for delete, duplicate, reassign and undo."""

    def select_first(self, controller):
        controller.press(QPointF(110, 70))
        controller.release()

    def test_delete_selected(self, controller):
        """Test deleting removes the box and clears the selection."""
        add_box(controller, CAR_BOX.clone())
        self.select_first(controller)

        assert controller.delete_selected() is True
        assert controller.store.boxes == []
        assert controller.store.selected_index is None
        assert len(controller.persisted) == 2

        assert controller.undo() is True
        assert controller.store.boxes == [CAR_BOX]

    def test_commands_need_selection(self, controller):
        """Test commands without a selection are no-ops."""
        add_box(controller, CAR_BOX.clone())

        assert controller.delete_selected() is False
        assert controller.duplicate_selected() is False
        assert controller.reassign_selected(1) is False
        assert controller.store.history.can_undo() is False
        assert controller.persisted == []

    def test_duplicate_selected(self, controller):
        """Test duplicating appends a clone."""
        add_box(controller, CAR_BOX.clone())
        self.select_first(controller)

        assert controller.duplicate_selected() is True
        assert controller.store.boxes == [CAR_BOX, CAR_BOX]
        assert controller.store.boxes[0] is not controller.store.boxes[1]

    def test_reassign_selected(self, controller):
        """Test reassigning the selected box's class."""
        add_box(controller, CAR_BOX.clone())
        self.select_first(controller)
        persisted = len(controller.persisted)

        assert controller.reassign_selected(2) is True
        assert controller.store.boxes[0].class_name == "person"
        assert len(controller.persisted) == persisted + 1

        assert controller.reassign_selected(2) is False
        assert len(controller.persisted) == persisted + 1

    def test_assign_active_class(self, controller):
        """Test assigning the active class to the selection."""
        add_box(controller, CAR_BOX.clone())
        self.select_first(controller)
        controller.set_active_class(0)

        assert controller.assign_active_class() is True
        assert controller.store.boxes[0].class_name == "object"

    def test_undo_create(self, controller):
        """Test undo after two creations leaves only the first."""
        drag_out(controller, (20, 30), (60, 60))
        first = controller.store.boxes[0].clone()
        drag_out(controller, (120, 30), (180, 90))
        assert len(controller.store.boxes) == 2

        assert controller.undo() is True
        assert controller.store.boxes == [first]

    def test_undo_empty(self, controller):
        """Test undo with no history changes nothing."""
        add_box(controller, CAR_BOX.clone())

        assert controller.undo() is False
        assert controller.store.boxes == [CAR_BOX]
        assert controller.persisted == []

    def test_undo_cancels_drag(self, controller):
        """Test undo in the middle of a move abandons it."""
        add_box(controller, CAR_BOX.clone())
        controller.press(QPointF(110, 70))
        controller.drag(QPointF(130, 80))

        controller.undo()
        controller.drag(QPointF(190, 110))

        assert controller.drag_mode == IDLE
        assert controller.store.boxes == [CAR_BOX]
        assert controller.store.selected_index is None


class TestRenderOutputs:
    """Tests for the renderer-facing outputs."""

    def test_render_boxes(self, controller):
        """Test selection flag, caption and handles."""
        add_box(controller, CAR_BOX.clone())
        add_box(controller, BoundingBox("person", 0.1, 0.1, 0.1, 0.1))
        controller.store.select(0)

        rendered = controller.render_boxes()

        assert rendered[0].selected is True
        assert rendered[0].caption == "1:car"
        assert rendered[0].rect == QRectF(90, 60, 40, 20)
        assert len(rendered[0].handles) == 4
        assert rendered[1].selected is False
        assert rendered[1].handles == []

    def test_settings_clamped(self, controller):
        """Test slider-driven settings stay in range."""
        controller.set_click_tolerance(100)
        controller.set_min_box_pixels(0)

        assert controller.click_tolerance == 30.0
        assert controller.min_box_pixels == 1.0
        assert controller.handle_radius == 30.0
