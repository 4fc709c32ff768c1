"""Tests for the box store and undo history."""

import pytest

from boxlabel.core.box_store import BoxStore
from boxlabel.core.history import HistoryStack
from boxlabel.core.models import BoundingBox


def make_box(name="object", cx=0.5):
    return BoundingBox(name, cx, 0.5, 0.2, 0.2)


class TestHistoryStack:
    """Tests for HistoryStack."""

    def test_push_and_pop(self):
        """Test snapshots come back newest first."""
        history = HistoryStack()
        history.push([make_box("a")])
        history.push([make_box("b")])

        assert len(history) == 2
        assert history.pop()[0].class_name == "b"
        assert history.pop()[0].class_name == "a"
        assert history.pop() is None
        assert history.can_undo() is False

    def test_snapshot_is_independent(self):
        """Test that later edits don't reach stored snapshots."""
        boxes = [make_box()]
        history = HistoryStack()
        history.push(boxes)

        boxes[0].cx = 0.9
        boxes.append(make_box())

        snapshot = history.pop()
        assert len(snapshot) == 1
        assert snapshot[0].cx == 0.5

    def test_capacity_evicts_oldest(self):
        """Test that the oldest snapshot is dropped past capacity."""
        history = HistoryStack(capacity=3)
        for i in range(5):
            history.push([make_box(str(i))])

        assert len(history) == 3
        assert [history.pop()[0].class_name for _ in range(3)] == ["4", "3", "2"]

    def test_set_capacity_trims(self):
        """Test shrinking the capacity."""
        history = HistoryStack(capacity=10)
        for i in range(5):
            history.push([make_box(str(i))])

        history.set_capacity(2)

        assert len(history) == 2
        assert history.pop()[0].class_name == "4"

    def test_state_changed_signal(self):
        """Test that pushes emit state_changed."""
        history = HistoryStack()
        calls = []
        history.state_changed.connect(lambda: calls.append(True))

        history.push([])
        history.pop()

        assert len(calls) == 2


class TestBoxStore:
    """Tests for BoxStore."""

    def test_add_and_remove(self):
        """Test basic collection edits."""
        store = BoxStore()
        index = store.add(make_box("a"))
        store.add(make_box("b"))

        assert index == 0
        assert len(store) == 2

        removed = store.remove(0)
        assert removed.class_name == "a"
        assert [b.class_name for b in store.boxes] == ["b"]
        assert store.remove(5) is None

    def test_select_out_of_range(self):
        """Test selecting an invalid index clears the selection."""
        store = BoxStore()
        store.add(make_box())
        store.select(0)
        store.select(3)

        assert store.selected_index is None

    def test_stale_selection_cleared(self):
        """Test that a selection past the end is dropped on access."""
        store = BoxStore()
        store.add(make_box())
        store.add(make_box())
        store.select(1)

        store.boxes.pop()

        assert store.selected_index is None
        assert store.selected_box is None

    def test_duplicate(self):
        """Test duplicating appends an independent copy."""
        store = BoxStore()
        store.add(make_box("a"))

        index = store.duplicate(0)
        store.boxes[index].cx = 0.1

        assert index == 1
        assert store.boxes[0].cx == 0.5
        assert store.duplicate(7) is None

    def test_undo_restores_previous_state(self):
        """Test undo after creating two boxes leaves the first."""
        store = BoxStore()
        store.push_history()
        store.add(make_box("a"))
        store.push_history()
        store.add(make_box("b"))
        store.select(1)

        assert store.undo() is True
        assert [b.class_name for b in store.boxes] == ["a"]
        assert store.selected_index is None

    def test_undo_empty_history(self):
        """Test undo with no history leaves the boxes alone."""
        store = BoxStore()
        store.add(make_box("a"))

        assert store.undo() is False
        assert [b.class_name for b in store.boxes] == ["a"]

    def test_undo_past_capacity(self):
        """Test undo stops at the oldest retained snapshot."""
        store = BoxStore(history_limit=3)
        for i in range(5):
            store.push_history()
            store.add(make_box(str(i)))

        undone = 0
        while store.undo():
            undone += 1

        assert undone == 3
        assert [b.class_name for b in store.boxes] == ["0", "1"]

    def test_clear(self):
        """Test clear drops boxes, selection and history."""
        store = BoxStore()
        store.push_history()
        store.add(make_box())
        store.select(0)

        store.clear()

        assert store.boxes == []
        assert store.selected_index is None
        assert store.history.can_undo() is False

    def test_signals(self):
        """Test change notifications."""
        store = BoxStore()
        changes = []
        selections = []
        store.boxes_changed.connect(lambda: changes.append(True))
        store.selection_changed.connect(selections.append)

        store.add(make_box())
        store.select(0)
        store.deselect()

        assert len(changes) == 1
        assert selections == [0, None]
