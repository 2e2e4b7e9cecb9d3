"""
Tests for the controller that maps screen gestures onto the edit store.
"""
import fitz
import pytest

from inkredact.config import Settings
from inkredact.controllers import AnnotationController
from inkredact.core.annotations import (
    DocumentLoadError,
    HistoryStatus,
    NotFound,
    PageOutOfRange,
    Whiteout,
)
from inkredact.core.export import ExportWorker


@pytest.fixture
def controller(pdf_bytes):
    controller = AnnotationController(Settings(render_scale=1.5))
    controller.open_document(pdf_bytes, "/docs/source.pdf")
    return controller


@pytest.fixture
def signals(controller):
    received = {"changed": 0, "history": []}

    def on_changed():
        received["changed"] += 1

    controller.annotations_changed.connect(on_changed)
    controller.history_changed.connect(
        lambda can_undo, can_redo: received["history"].append((can_undo, can_redo))
    )
    return received


class TestOpenDocument:

    def test_session_is_sized_to_document(self, controller):
        assert controller.store.page_count == 2
        with pytest.raises(PageOutOfRange):
            controller.create_text_stamp(3, 10, 10, "x")

    def test_reopening_starts_fresh_history(self, controller, pdf_bytes):
        controller.create_whiteout_from_drag(1, 0, 0, 50, 50)
        controller.open_document(pdf_bytes)
        assert len(controller.store) == 0
        assert not controller.can_undo()

    def test_rejects_non_pdf(self):
        with pytest.raises(DocumentLoadError):
            AnnotationController().open_document(b"plain text")

    def test_open_file(self, pdf_file):
        controller = AnnotationController()
        assert controller.open_file(str(pdf_file)) == 2
        assert controller.reader.current_file_path == str(pdf_file)


class TestScreenGestures:

    def test_drag_creates_whiteout_in_document_space(self, controller):
        annotation_id = controller.create_whiteout_from_drag(1, 165, 75, 15, 30)
        whiteout = controller.store.get(annotation_id)
        assert isinstance(whiteout, Whiteout)
        assert (whiteout.x, whiteout.y, whiteout.width, whiteout.height) == pytest.approx(
            (10, 742, 100, 30)
        )

    def test_explicit_scale_overrides_setting(self, controller):
        annotation_id = controller.create_whiteout_from_drag(1, 0, 0, 200, 100, scale=2.0)
        whiteout = controller.store.get(annotation_id)
        assert (whiteout.width, whiteout.height) == pytest.approx((100, 50))

    def test_tiny_drag_is_ignored(self, controller):
        assert controller.create_whiteout_from_drag(1, 10, 10, 12, 200) is None
        assert len(controller.store.history) == 0

    def test_text_stamp_uses_settings_defaults(self, controller):
        annotation_id = controller.create_text_stamp(2, 150, 300, "  REDACTED  ")
        stamp = controller.store.get(annotation_id)
        assert stamp.page == 2
        assert stamp.text == "REDACTED"
        assert (stamp.x, stamp.y) == pytest.approx((100, 592))
        assert stamp.font_size == 12
        assert stamp.color == (0.7, 0.7, 0.7)

    def test_stroke_points_and_width_are_scaled(self, controller):
        annotation_id = controller.create_stroke(1, [(0, 0), (150, 150)], width=3,
                                                 color=(1, 0, 0), opacity=0.5)
        stroke = controller.store.get(annotation_id)
        assert stroke.points == [(0.0, 792.0), (100.0, 692.0)]
        assert stroke.width == pytest.approx(2)
        assert stroke.opacity == 0.5

    def test_empty_stroke_is_ignored(self, controller):
        assert controller.create_stroke(1, []) is None

    def test_drag_annotation_moves_by_screen_offset(self, controller):
        annotation_id = controller.create_whiteout_from_drag(1, 15, 30, 165, 75)
        controller.drag_annotation(annotation_id, 15, 30)
        assert controller.store.get(annotation_id).position == pytest.approx((20, 722))

        assert controller.undo() == HistoryStatus.UNDONE
        assert controller.store.get(annotation_id).position == pytest.approx((10, 742))

    def test_drag_unknown_annotation(self, controller):
        with pytest.raises(NotFound):
            controller.drag_annotation("nope", 1, 1)

    def test_hit_test_from_screen(self, controller):
        annotation_id = controller.create_whiteout_from_drag(1, 15, 30, 165, 75)
        assert controller.annotation_at_screen(1, 100, 50).id == annotation_id
        assert controller.annotation_at_screen(1, 400, 400) is None

    def test_no_document_loaded(self):
        with pytest.raises(PageOutOfRange):
            AnnotationController().create_whiteout_from_drag(1, 0, 0, 50, 50)


class TestSignalsAndHistory:

    def test_change_and_history_signals(self, controller, signals):
        annotation_id = controller.create_whiteout_from_drag(1, 0, 0, 50, 50)
        assert signals["changed"] == 1
        assert signals["history"][-1] == (True, False)

        controller.undo()
        assert signals["history"][-1] == (False, True)

        controller.redo()
        controller.delete_annotation(annotation_id)
        assert signals["changed"] == 4

    def test_boundary_undo_emits_nothing(self, controller, signals):
        assert controller.undo() == HistoryStatus.NOTHING_TO_UNDO
        assert controller.redo() == HistoryStatus.NOTHING_TO_REDO
        assert signals["changed"] == 0

    def test_clear_page_and_all(self, controller):
        controller.create_whiteout_from_drag(1, 0, 0, 50, 50)
        controller.create_whiteout_from_drag(2, 0, 0, 50, 50)
        assert controller.clear_page(1) == 1
        assert controller.clear_all() == 1
        controller.undo()
        assert len(controller.get_annotations_for_page(2)) == 1

    @pytest.mark.parametrize("status, message", [
        (HistoryStatus.UNDONE, "Undo completed"),
        (HistoryStatus.NOTHING_TO_REDO, "Nothing to redo"),
    ])
    def test_status_message(self, status, message):
        assert AnnotationController.status_message(status) == message


class TestSavingAndExport:

    def test_save_then_load_annotations(self, controller):
        controller.create_whiteout_from_drag(1, 15, 30, 165, 75)
        controller.create_text_stamp(2, 10, 10, "Note")
        saved = controller.store.all_annotations()

        controller.save_annotations()
        controller.clear_all()
        assert controller.load_annotations() == 2

        assert controller.store.all_annotations() == saved
        assert not controller.can_undo()

    def test_export_pdf(self, controller, tmp_path):
        controller.create_whiteout_from_drag(1, 15, 30, 165, 75)
        output = tmp_path / "redacted.pdf"
        controller.export_pdf(str(output))
        with fitz.open(str(output)) as doc:
            assert len(doc[0].get_drawings()) == 1

    def test_create_export_worker(self, controller, tmp_path):
        worker = controller.create_export_worker(str(tmp_path / "out.pdf"))
        assert isinstance(worker, ExportWorker)
        assert worker.exporter.settings is controller.settings
