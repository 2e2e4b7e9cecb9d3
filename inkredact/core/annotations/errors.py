"""
Error kinds raised by the annotation edit model and its collaborators.
"""
from typing import Optional


class AnnotationError(Exception):
    """Base class for all recoverable edit-model errors."""

    kind = "AnnotationError"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.kind}: {self.detail}"


class InvalidScale(AnnotationError, ValueError):
    """Render scale was zero or negative."""

    kind = "InvalidScale"

    def __init__(self, scale: float):
        super().__init__(f"render scale must be positive, got {scale!r}")
        self.scale = scale


class NotFound(AnnotationError, KeyError):
    """An operation referenced an unknown annotation id."""

    kind = "NotFound"

    def __init__(self, annotation_id: str):
        super().__init__(f"no annotation with id {annotation_id!r}")
        self.annotation_id = annotation_id

    # KeyError quotes its argument in __str__, keep the readable form
    def __str__(self) -> str:
        return AnnotationError.__str__(self)


class DuplicateId(AnnotationError, ValueError):
    kind = "DuplicateId"

    def __init__(self, annotation_id: str):
        super().__init__(f"annotation id {annotation_id!r} is already in use")
        self.annotation_id = annotation_id


class PageOutOfRange(AnnotationError, ValueError):
    kind = "PageOutOfRange"

    def __init__(self, page: int, page_count: Optional[int]):
        super().__init__(f"page {page} is outside 1..{page_count}")
        self.page = page
        self.page_count = page_count


class CommitFailed(AnnotationError):
    """Burning annotations into the output document failed."""

    kind = "CommitFailed"


class PersistenceError(AnnotationError):
    """Saved redaction data could not be read or written."""

    kind = "PersistenceError"


class DocumentLoadError(AnnotationError):
    kind = "DocumentLoadError"
