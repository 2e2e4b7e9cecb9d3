"""
Controller between a page view and the edit model.

Views talk in screen pixels at the current render scale; the controller
converts to document space before anything reaches the store, and re-emits
store changes as Qt signals for views to re-read ``list_for_page``.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from PyQt5.QtCore import QObject, pyqtSignal

from ..config import Settings
from ..core.annotations import (
    Annotation,
    AnnotationPersistence,
    EditStore,
    FreehandStroke,
    HistoryStatus,
    TextStamp,
    Whiteout,
    normalize_drag,
)
from ..core.document import PDFDocumentReader, PDFExporter
from ..core.export import ExportWorker

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    HistoryStatus.UNDONE: "Undo completed",
    HistoryStatus.REDONE: "Redo completed",
    HistoryStatus.NOTHING_TO_UNDO: "Nothing to undo",
    HistoryStatus.NOTHING_TO_REDO: "Nothing to redo",
}


class AnnotationController(QObject):
    """Handles annotation operations coming from user interaction."""

    # Signals
    annotations_changed = pyqtSignal()  # Emitted after any change to the store
    history_changed = pyqtSignal(bool, bool)  # can_undo, can_redo

    def __init__(self, settings: Optional[Settings] = None,
                 persistence: Optional[AnnotationPersistence] = None):
        super().__init__()
        self.settings = settings or Settings()
        self.persistence = persistence or AnnotationPersistence()
        self.reader = PDFDocumentReader()
        self.store = EditStore(history_limit=self.settings.history_limit)
        self.store.subscribe(self._on_store_changed)

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def open_document(self, data: bytes, file_path: Optional[str] = None) -> int:
        """
        Load a document and start a fresh edit session for it.

        Args:
            data: PDF bytes
            file_path: Where the bytes came from, used as the key for saved
                redaction data

        Returns:
            Number of pages

        Raises:
            DocumentLoadError: If the bytes are not a readable PDF
        """
        page_count = self.reader.load_bytes(data)
        self.reader.current_file_path = file_path

        self.store.unsubscribe(self._on_store_changed)
        self.store = EditStore(page_count=page_count,
                               history_limit=self.settings.history_limit)
        self.store.subscribe(self._on_store_changed)
        self._on_store_changed()
        return page_count

    def open_file(self, file_path: str) -> int:
        with open(file_path, "rb") as f:
            data = f.read()
        return self.open_document(data, file_path)

    def _scale(self, scale: Optional[float]) -> float:
        return self.settings.render_scale if scale is None else scale

    # ------------------------------------------------------------------
    # Creation from screen-space gestures
    # ------------------------------------------------------------------

    def create_whiteout_from_drag(self, page: int, x0: float, y0: float,
                                  x1: float, y1: float,
                                  scale: Optional[float] = None) -> Optional[str]:
        """
        Create a whiteout from a mouse drag on the rendered page.

        Args:
            page: 1-based page number
            x0, y0: Screen point where the drag started
            x1, y1: Screen point where the drag ended
            scale: Render scale of the page; defaults to the configured scale

        Returns:
            The new annotation id, or None if the drag was too small
        """
        left, top, width, height = normalize_drag(x0, y0, x1, y1)
        if width < self.settings.min_drag_size or height < self.settings.min_drag_size:
            logger.debug("Ignored %.1fx%.1f drag on page %d", width, height, page)
            return None

        viewport = self.reader.viewport(page, self._scale(scale))
        x, y, doc_width, doc_height = viewport.rect_to_document(left, top, width, height)
        return self.store.add_annotation(
            Whiteout(page=page, x=x, y=y, width=doc_width, height=doc_height)
        )

    def create_text_stamp(self, page: int, screen_x: float, screen_y: float,
                          text: str, scale: Optional[float] = None,
                          font_size: Optional[float] = None,
                          color: Optional[Tuple[float, float, float]] = None) -> str:
        """Place a text stamp with its baseline origin at a screen point."""
        viewport = self.reader.viewport(page, self._scale(scale))
        x, y = viewport.to_document(screen_x, screen_y)
        return self.store.add_annotation(TextStamp(
            page=page,
            x=x,
            y=y,
            text=text.strip(),
            font_size=font_size or self.settings.stamp_font_size,
            color=color or self.settings.stamp_color,
        ))

    def create_stroke(self, page: int, screen_points: Sequence[Tuple[float, float]],
                      scale: Optional[float] = None,
                      color: Optional[Tuple[float, float, float]] = None,
                      width: Optional[float] = None,
                      opacity: Optional[float] = None) -> Optional[str]:
        """
        Create a freehand stroke from the points of a finished drawing gesture.

        ``width`` is in screen pixels, like the points.

        Returns:
            The new annotation id, or None if no points were captured
        """
        if not screen_points:
            return None

        scale = self._scale(scale)
        viewport = self.reader.viewport(page, scale)
        points = [viewport.to_document(sx, sy) for sx, sy in screen_points]
        screen_width = self.settings.stroke_width if width is None else width
        return self.store.add_annotation(FreehandStroke(
            page=page,
            points=points,
            color=color or self.settings.stroke_color,
            width=screen_width / scale,
            opacity=self.settings.stroke_opacity if opacity is None else opacity,
        ))

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def drag_annotation(self, annotation_id: str, dx: float, dy: float,
                        scale: Optional[float] = None) -> None:
        """
        Move an annotation by a screen-space drag offset.

        Raises:
            NotFound: If the id is unknown
        """
        scale = self._scale(scale)
        x, y = self.store.get(annotation_id).position
        # Screen y grows downward, document y grows upward
        self.store.move_annotation(annotation_id, x + dx / scale, y - dy / scale)

    def annotation_at_screen(self, page: int, screen_x: float, screen_y: float,
                             scale: Optional[float] = None,
                             tolerance: float = 3.0) -> Optional[Annotation]:
        """Topmost annotation under a screen point; tolerance is in pixels."""
        scale = self._scale(scale)
        viewport = self.reader.viewport(page, scale)
        x, y = viewport.to_document(screen_x, screen_y)
        return self.store.annotation_at(page, x, y, tolerance / scale)

    def delete_annotation(self, annotation_id: str) -> None:
        self.store.delete_annotation(annotation_id)

    def clear_page(self, page: int) -> int:
        return self.store.clear_page(page)

    def clear_all(self) -> int:
        return self.store.clear_all()

    def undo(self) -> HistoryStatus:
        return self.store.undo()

    def redo(self) -> HistoryStatus:
        return self.store.redo()

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return self.store.can_undo()

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return self.store.can_redo()

    @staticmethod
    def status_message(status: HistoryStatus) -> str:
        return STATUS_MESSAGES[status]

    def get_annotations_for_page(self, page: int) -> List[Annotation]:
        return self.store.list_for_page(page)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def save_annotations(self, file_path: Optional[str] = None) -> str:
        """
        Save redaction data for the open document.

        Raises:
            PersistenceError: If writing fails
        """
        return self.persistence.save_to_json(
            self.store, self.reader.current_file_path or "", file_path
        )

    def load_annotations(self, file_path: Optional[str] = None) -> int:
        """
        Replace the session's annotations with saved redaction data.

        Returns:
            Number of annotations loaded
        """
        return self.persistence.load_into(
            self.store, self.reader.current_file_path or "", file_path
        )

    def export_pdf(self, output_path: str) -> None:
        """
        Burn the annotations into a new PDF on the calling thread.

        Raises:
            CommitFailed: If the export fails; the store is left untouched
        """
        output = PDFExporter(self.settings).burn_in(
            self.reader.document_bytes(), self.store.all_annotations()
        )
        with open(output_path, "wb") as f:
            f.write(output)

    def create_export_worker(self, output_path: str,
                             use_temp_file: bool = False) -> ExportWorker:
        """Build a worker that exports a snapshot of the store; call start() on it."""
        return ExportWorker(self.reader.document_bytes(), output_path, self.store,
                            settings=self.settings, use_temp_file=use_temp_file)

    def _on_store_changed(self) -> None:
        self.annotations_changed.emit()
        self.history_changed.emit(self.store.can_undo(), self.store.can_redo())
