"""
Edit store holding every annotation of a document session.

The store owns the live annotation objects; callers and the history only
ever see copies.
"""
import itertools
import logging
from typing import Callable, Dict, Iterable, List, Optional, Set

from .errors import DuplicateId, NotFound, PageOutOfRange
from .models import (
    ActionType,
    Annotation,
    AnnotationType,
    FreehandStroke,
    HistoryAction,
    PlacedAnnotation,
)
from .undo_redo import HistoryEngine, HistoryStatus

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class EditStore:
    """Manages all annotations for a PDF document with undo/redo support."""

    def __init__(self, page_count: Optional[int] = None, history_limit: int = 0):
        """
        Args:
            page_count: Number of pages in the loaded document; None skips
                the upper bound check
            history_limit: Maximum number of history actions; 0 is unlimited
        """
        self.page_count = page_count
        self._pages: Dict[int, List[Annotation]] = {}
        self._page_of: Dict[str, int] = {}
        self._issued_ids: Set[str] = set()
        self._counter = itertools.count(1)
        self._listeners: List[Listener] = []

        self.history = HistoryEngine(self, max_size=history_limit)

    # ------------------------------------------------------------------
    # Mutations (each records exactly one history action)
    # ------------------------------------------------------------------

    def add_annotation(self, annotation: Annotation) -> str:
        """
        Add a new annotation on top of its page.

        Args:
            annotation: Annotation to add; a fresh id is assigned when its
                id is None. The caller's object is not retained.

        Returns:
            The annotation id

        Raises:
            PageOutOfRange: If the page does not exist in the document
            DuplicateId: If an explicit id was already issued in this session
        """
        self._check_page(annotation.page)

        annotation = annotation.copy()
        if annotation.id is None:
            annotation.id = self._next_id(annotation)
        elif annotation.id in self._issued_ids:
            raise DuplicateId(annotation.id)
        self._issued_ids.add(annotation.id)

        self._insert(annotation.page, annotation)
        self.history.record(HistoryAction(
            kind=ActionType.ADD,
            target_id=annotation.id,
            after=annotation.copy(),
        ))
        logger.debug("Added %s %s on page %d",
                     annotation.annotation_type.value, annotation.id, annotation.page)
        self._notify()
        return annotation.id

    def delete_annotation(self, annotation_id: str) -> None:
        """
        Remove an annotation.

        Raises:
            NotFound: If no annotation has this id
        """
        page = self._locate(annotation_id)
        index = self._index_on_page(page, annotation_id)
        removed = self._remove(annotation_id)

        self.history.record(HistoryAction(
            kind=ActionType.DELETE,
            target_id=annotation_id,
            before=removed.copy(),
            snapshot=[PlacedAnnotation(page, index, removed)],
        ))
        logger.debug("Deleted %s from page %d", annotation_id, page)
        self._notify()

    def move_annotation(self, annotation_id: str, new_x: float, new_y: float) -> None:
        """
        Move an annotation to a new document-space position.

        The whole annotation is snapshotted before and after, so undo restores
        every field, not only the position.

        Raises:
            NotFound: If no annotation has this id
        """
        page = self._locate(annotation_id)
        current = self._pages[page][self._index_on_page(page, annotation_id)]
        before = current.copy()
        after = current.moved_to(new_x, new_y)

        self._replace(after)
        self.history.record(HistoryAction(
            kind=ActionType.MOVE,
            target_id=annotation_id,
            before=before,
            after=after.copy(),
        ))
        logger.debug("Moved %s to (%.2f, %.2f)", annotation_id, new_x, new_y)
        self._notify()

    def clear_page(self, page: int) -> int:
        """
        Remove every annotation on one page as a single undoable action.

        Returns:
            Number of annotations removed
        """
        return self._clear(page)

    def clear_all(self) -> int:
        """
        Remove every annotation in the document as a single undoable action.

        Returns:
            Number of annotations removed
        """
        return self._clear(None)

    def _clear(self, page: Optional[int]) -> int:
        pages = [page] if page is not None else sorted(self._pages)
        snapshot = [
            PlacedAnnotation(p, index, ann)
            for p in pages
            for index, ann in enumerate(self._pages.get(p, []))
        ]
        if not snapshot:
            return 0

        for entry in snapshot:
            self._remove(entry.annotation.id)

        self.history.record(HistoryAction(
            kind=ActionType.CLEAR,
            snapshot=snapshot,
            page=page,
        ))
        logger.debug("Cleared %d annotation(s) from %s", len(snapshot),
                     f"page {page}" if page is not None else "all pages")
        self._notify()
        return len(snapshot)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> HistoryStatus:
        status = self.history.undo()
        if status.applied:
            self._notify()
        return status

    def redo(self) -> HistoryStatus:
        status = self.history.redo()
        if status.applied:
            self._notify()
        return status

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_for_page(self, page: int) -> List[Annotation]:
        """
        Get the annotations of a page in z-order, bottom first.

        Args:
            page: 1-based page number

        Returns:
            Copies of the annotations; later insertions render on top
        """
        return [ann.copy() for ann in self._pages.get(page, [])]

    def get(self, annotation_id: str) -> Annotation:
        page = self._locate(annotation_id)
        return self._pages[page][self._index_on_page(page, annotation_id)].copy()

    def all_annotations(self) -> Dict[int, List[Annotation]]:
        """Copies of every annotation grouped by page, pages ascending."""
        return {
            page: [ann.copy() for ann in annotations]
            for page, annotations in sorted(self._pages.items())
            if annotations
        }

    def annotation_at(self, page: int, x: float, y: float,
                      tolerance: float = 0.0) -> Optional[Annotation]:
        """
        Get the topmost annotation at a document-space point.

        Args:
            page: 1-based page number
            x: X coordinate in document space
            y: Y coordinate in document space
            tolerance: Extra hit distance in document units

        Returns:
            A copy of the topmost annotation at the point, or None
        """
        for ann in reversed(self._pages.get(page, [])):
            if self._point_in_annotation(ann, x, y, tolerance):
                return ann.copy()
        return None

    def stats(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in AnnotationType}
        for annotations in self._pages.values():
            for ann in annotations:
                counts[ann.annotation_type.value] += 1
        counts["total"] = sum(counts.values())
        return counts

    def __len__(self) -> int:
        return len(self._page_of)

    def __contains__(self, annotation_id: object) -> bool:
        return annotation_id in self._page_of

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def load(self, annotations: Iterable[Annotation]) -> None:
        """
        Replace all content, e.g. from imported redaction data.

        Loading is not an edit: history is reset and nothing is recorded.
        Annotations without an id get a fresh one.
        """
        annotations = [ann.copy() for ann in annotations]
        seen: Set[str] = set()
        for ann in annotations:
            self._check_page(ann.page)
            if ann.id is not None:
                if ann.id in seen:
                    raise DuplicateId(ann.id)
                seen.add(ann.id)

        # Nothing below can fail, so a rejected load leaves the session intact
        self._pages.clear()
        self._page_of.clear()
        self._issued_ids = seen
        self._counter = itertools.count(1)
        self.history.clear()

        for ann in annotations:
            if ann.id is None:
                ann.id = self._next_id(ann)
                self._issued_ids.add(ann.id)
            self._insert(ann.page, ann)

        logger.info("Loaded %d annotation(s)", len(annotations))
        self._notify()

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener`` after every change to the store's contents."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Silent primitives used by the history engine; these never record
    # ------------------------------------------------------------------

    def _insert(self, page: int, annotation: Annotation,
                index: Optional[int] = None) -> None:
        annotation = annotation.copy()
        annotations = self._pages.setdefault(page, [])
        if index is None or index >= len(annotations):
            annotations.append(annotation)
        else:
            annotations.insert(index, annotation)
        self._page_of[annotation.id] = page

    def _remove(self, annotation_id: str) -> Annotation:
        page = self._locate(annotation_id)
        annotations = self._pages[page]
        removed = annotations.pop(self._index_on_page(page, annotation_id))
        del self._page_of[annotation_id]
        if not annotations:
            del self._pages[page]
        return removed

    def _replace(self, annotation: Annotation) -> None:
        page = self._locate(annotation.id)
        index = self._index_on_page(page, annotation.id)
        self._pages[page][index] = annotation.copy()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _next_id(self, annotation: Annotation) -> str:
        while True:
            candidate = f"{annotation.id_prefix}{next(self._counter)}"
            if candidate not in self._issued_ids:
                return candidate

    def _check_page(self, page: int) -> None:
        if page < 1 or (self.page_count is not None and page > self.page_count):
            raise PageOutOfRange(page, self.page_count)

    def _locate(self, annotation_id: str) -> int:
        try:
            return self._page_of[annotation_id]
        except KeyError:
            raise NotFound(annotation_id) from None

    def _index_on_page(self, page: int, annotation_id: str) -> int:
        for index, ann in enumerate(self._pages[page]):
            if ann.id == annotation_id:
                return index
        raise NotFound(annotation_id)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Annotation listener %r failed", listener)

    def _point_in_annotation(self, annotation: Annotation, x: float, y: float,
                             tolerance: float) -> bool:
        if isinstance(annotation, FreehandStroke):
            reach = tolerance + annotation.width / 2.0
            points = annotation.points
            if len(points) == 1:
                return self._point_near_line(x, y, *points[0], *points[0], reach)
            return any(
                self._point_near_line(x, y, *p1, *p2, reach)
                for p1, p2 in zip(points, points[1:])
            )

        x0, y0, x1, y1 = annotation.bounds()
        return (x0 - tolerance <= x <= x1 + tolerance
                and y0 - tolerance <= y <= y1 + tolerance)

    @staticmethod
    def _point_near_line(px: float, py: float, x1: float, y1: float,
                         x2: float, y2: float, tolerance: float) -> bool:
        """
        Check if a point is near a line segment.

        Args:
            px, py: Point coordinates
            x1, y1, x2, y2: Line segment endpoints
            tolerance: Maximum distance to consider "near"
        """
        line_length_sq = (x2 - x1) ** 2 + (y2 - y1) ** 2

        if line_length_sq == 0:
            dist = ((px - x1) ** 2 + (py - y1) ** 2) ** 0.5
            return dist <= tolerance

        t = max(0, min(1, ((px - x1) * (x2 - x1) + (py - y1) * (y2 - y1)) / line_length_sq))
        nearest_x = x1 + t * (x2 - x1)
        nearest_y = y1 + t * (y2 - y1)

        dist = ((px - nearest_x) ** 2 + (py - nearest_y) ** 2) ** 0.5
        return dist <= tolerance
