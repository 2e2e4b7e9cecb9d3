"""
Annotation and redaction edit model.
"""
from .coordinates import (
    PageViewport,
    normalize_drag,
    rect_to_document_space,
    rect_to_screen_space,
    to_document_space,
    to_screen_space,
)
from .errors import (
    AnnotationError,
    CommitFailed,
    DocumentLoadError,
    DuplicateId,
    InvalidScale,
    NotFound,
    PageOutOfRange,
    PersistenceError,
)
from .models import (
    ActionType,
    Annotation,
    AnnotationType,
    FreehandStroke,
    HistoryAction,
    PlacedAnnotation,
    TextStamp,
    Whiteout,
)
from .persistence import AnnotationPersistence
from .store import EditStore
from .undo_redo import HistoryEngine, HistoryStatus

__all__ = [
    'Annotation',
    'AnnotationType',
    'Whiteout',
    'TextStamp',
    'FreehandStroke',
    'ActionType',
    'HistoryAction',
    'PlacedAnnotation',
    'EditStore',
    'HistoryEngine',
    'HistoryStatus',
    'AnnotationPersistence',
    'PageViewport',
    'to_document_space',
    'to_screen_space',
    'rect_to_document_space',
    'rect_to_screen_space',
    'normalize_drag',
    'AnnotationError',
    'InvalidScale',
    'NotFound',
    'DuplicateId',
    'PageOutOfRange',
    'CommitFailed',
    'PersistenceError',
    'DocumentLoadError',
]
