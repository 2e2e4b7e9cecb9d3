"""
Core edit model and document handling for InkRedact.
"""
from .annotations import (
    Annotation,
    AnnotationType,
    EditStore,
    FreehandStroke,
    HistoryStatus,
    TextStamp,
    Whiteout,
)
from .document import PDFDocumentReader, PDFExporter

__all__ = [
    "Annotation",
    "AnnotationType",
    "Whiteout",
    "TextStamp",
    "FreehandStroke",
    "EditStore",
    "HistoryStatus",
    "PDFDocumentReader",
    "PDFExporter",
]
