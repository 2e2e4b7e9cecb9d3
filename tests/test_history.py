"""
Tests for undo/redo over the edit store.
"""
import pytest

from inkredact.core.annotations import (
    EditStore,
    FreehandStroke,
    HistoryStatus,
    TextStamp,
    Whiteout,
)


def whiteout(page=1, x=10, y=20, width=100, height=30, **kwargs):
    return Whiteout(page=page, x=x, y=y, width=width, height=height, **kwargs)


def mixed_annotations():
    return [
        whiteout(),
        TextStamp(page=1, x=40, y=200, text="REDACTED", font_size=16, color=(1, 0, 0)),
        FreehandStroke(page=2, points=[(1, 1), (5, 9), (20, 3)], width=3, opacity=0.4),
        whiteout(page=2, x=300, y=400, width=20, height=10),
        TextStamp(page=3, x=0, y=0, text="Approved"),
    ]


class TestDeleteThenUndo:

    def test_delete_undo_undo_undo(self, store):
        original = whiteout()
        w1 = store.add_annotation(original)
        assert w1 == "w1"

        store.delete_annotation("w1")
        assert store.list_for_page(1) == []

        assert store.undo() == HistoryStatus.UNDONE
        assert store.list_for_page(1) == [whiteout(id="w1")]

        assert store.undo() == HistoryStatus.UNDONE
        assert store.list_for_page(1) == []

        assert store.undo() == HistoryStatus.NOTHING_TO_UNDO
        assert store.list_for_page(1) == []

    def test_move_undo_redo(self, store):
        store.add_annotation(whiteout())
        store.move_annotation("w1", 50, 60)

        store.undo()
        restored = store.get("w1")
        assert (restored.x, restored.y) == (10, 20)

        store.redo()
        moved = store.get("w1")
        assert (moved.x, moved.y) == (50, 60)


class TestCursor:

    def test_empty_history(self, store):
        assert store.history.history_index == -1
        assert not store.can_undo()
        assert not store.can_redo()
        assert store.redo() == HistoryStatus.NOTHING_TO_REDO

    def test_cursor_follows_undo_and_redo(self, store):
        for _ in range(3):
            store.add_annotation(whiteout())
        assert store.history.history_index == 2
        store.undo()
        store.undo()
        assert store.history.history_index == 0
        store.redo()
        assert store.history.history_index == 1
        assert store.can_undo() and store.can_redo()

    def test_status_applied_flag(self):
        assert HistoryStatus.UNDONE.applied
        assert HistoryStatus.REDONE.applied
        assert not HistoryStatus.NOTHING_TO_UNDO.applied
        assert not HistoryStatus.NOTHING_TO_REDO.applied


class TestRedoChain:

    @pytest.mark.parametrize("count", [1, 3, 5])
    def test_undo_all_then_redo_all_restores_identical_content(self, count):
        store = EditStore(page_count=3)
        for annotation in mixed_annotations()[:count]:
            store.add_annotation(annotation)
        after_adds = store.all_annotations()

        for _ in range(count):
            assert store.undo() == HistoryStatus.UNDONE
        assert store.all_annotations() == {}

        for _ in range(count):
            assert store.redo() == HistoryStatus.REDONE
        assert store.all_annotations() == after_adds
        assert store.redo() == HistoryStatus.NOTHING_TO_REDO

    def test_redo_of_delete_removes_again(self, store):
        store.add_annotation(whiteout())
        store.delete_annotation("w1")
        store.undo()
        store.redo()
        assert "w1" not in store


class TestBranchDiscard:

    def test_new_edit_after_undo_drops_future(self, store):
        a = store.add_annotation(whiteout(x=1))
        store.add_annotation(whiteout(x=2))
        store.add_annotation(whiteout(x=3))
        store.undo()
        store.undo()

        d = store.add_annotation(whiteout(x=4))

        assert store.redo() == HistoryStatus.NOTHING_TO_REDO
        assert [ann.id for ann in store.list_for_page(1)] == [a, d]
        assert len(store.history) == 2


class TestUndoRestoresZOrder:

    def test_deleted_middle_annotation_returns_to_its_slot(self, store):
        ids = [store.add_annotation(whiteout(x=i)) for i in range(3)]
        store.delete_annotation(ids[1])
        store.undo()
        assert [ann.id for ann in store.list_for_page(1)] == ids

    def test_move_undo_restores_every_field(self, store):
        stroke_id = store.add_annotation(
            FreehandStroke(page=1, points=[(10, 10), (20, 30)], width=3, opacity=0.5)
        )
        before = store.get(stroke_id)
        store.move_annotation(stroke_id, 100, 100)
        store.undo()
        assert store.get(stroke_id) == before


class TestClearAtomicity:

    def test_one_undo_restores_all_five(self):
        store = EditStore(page_count=3)
        for annotation in mixed_annotations():
            store.add_annotation(annotation)
        before = store.all_annotations()

        store.clear_all()
        assert len(store) == 0

        assert store.undo() == HistoryStatus.UNDONE
        assert store.all_annotations() == before
        # The previous action is still the last add, not part of the clear
        assert store.history.history_index == 4

    def test_clear_page_undo_keeps_other_pages(self):
        store = EditStore(page_count=3)
        for annotation in mixed_annotations():
            store.add_annotation(annotation)
        before = store.all_annotations()

        store.clear_page(2)
        assert store.list_for_page(2) == []
        store.undo()
        assert store.all_annotations() == before

    def test_redo_clear(self):
        store = EditStore(page_count=3)
        for annotation in mixed_annotations():
            store.add_annotation(annotation)
        store.clear_all()
        store.undo()
        assert store.redo() == HistoryStatus.REDONE
        assert len(store) == 0


class TestUndoNeverRecords:

    def test_undo_and_redo_do_not_call_record(self, store):
        store.add_annotation(whiteout())
        store.add_annotation(TextStamp(page=2, x=0, y=0, text="x"))
        store.move_annotation("w1", 5, 5)
        store.delete_annotation("t2")
        store.clear_all()

        def forbidden(action):
            raise AssertionError(f"record() called for {action.kind}")

        store.history.record = forbidden
        while store.undo().applied:
            pass
        while store.redo().applied:
            pass

    def test_history_length_is_stable_across_undo_redo(self, store):
        for _ in range(3):
            store.add_annotation(whiteout())
        store.clear_all()
        length = len(store.history)
        for _ in range(4):
            store.undo()
        for _ in range(4):
            store.redo()
        assert len(store.history) == length


class TestHistoryLimit:

    def test_oldest_actions_are_dropped(self):
        store = EditStore(history_limit=2)
        for _ in range(4):
            store.add_annotation(whiteout())
        assert len(store.history) == 2
        assert store.history.history_index == 1
        assert store.undo().applied
        assert store.undo().applied
        assert store.undo() == HistoryStatus.NOTHING_TO_UNDO
        # Only the last two adds could be undone
        assert [ann.id for ann in store.list_for_page(1)] == ["w1", "w2"]

    def test_clear_resets(self, store):
        store.add_annotation(whiteout())
        store.history.clear()
        assert store.history.history_index == -1
        assert store.undo() == HistoryStatus.NOTHING_TO_UNDO
