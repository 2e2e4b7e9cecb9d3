"""
Burns annotations into PDF pages with PyMuPDF.

Annotations live in document space with a bottom-left origin; PyMuPDF page
coordinates have a top-left origin. The mapping between the two happens here
and nowhere else.
"""
import logging
from typing import Dict, List, Optional

import fitz  # PyMuPDF
from PyQt5.QtCore import QObject, pyqtSignal

from ...config import Settings
from ..annotations.errors import CommitFailed
from ..annotations.models import (
    Annotation,
    AnnotationType,
    FreehandStroke,
    TextStamp,
    Whiteout,
)

logger = logging.getLogger(__name__)


def to_pdf_point(x: float, y: float, page_height: float) -> fitz.Point:
    """Map a document-space point to PyMuPDF page coordinates."""
    return fitz.Point(x, page_height - y)


def to_pdf_rect(whiteout: Whiteout, page_height: float) -> fitz.Rect:
    """Map a whiteout's document-space box to a PyMuPDF rectangle."""
    return fitz.Rect(
        whiteout.x,
        page_height - (whiteout.y + whiteout.height),
        whiteout.x + whiteout.width,
        page_height - whiteout.y,
    )


class PDFExporter(QObject):
    """Handles exporting annotations to PDF files."""

    progress_signal = pyqtSignal(int, int)  # pages done, total pages

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__()
        self.settings = settings or Settings()

    def burn_in(self, document_bytes: bytes,
                annotations_by_page: Dict[int, List[Annotation]]) -> bytes:
        """
        Render annotations into a copy of a document.

        Args:
            document_bytes: The original PDF
            annotations_by_page: 1-based page number to annotations in z-order

        Returns:
            Bytes of the new PDF

        Raises:
            CommitFailed: If the document cannot be opened, an annotation
                references a missing page, or PyMuPDF fails while writing
        """
        try:
            doc = fitz.open(stream=document_bytes, filetype="pdf")
        except Exception as e:
            logger.error("Cannot open source document: %s", e)
            raise CommitFailed(f"cannot open source document: {e}") from e

        try:
            pages = sorted(page for page, anns in annotations_by_page.items() if anns)
            total = len(pages)

            for done, page_no in enumerate(pages):
                if not 1 <= page_no <= doc.page_count:
                    raise CommitFailed(
                        f"page {page_no} does not exist in a {doc.page_count}-page document"
                    )
                self.progress_signal.emit(done, total)
                self._burn_page(doc[page_no - 1], annotations_by_page[page_no])

            self.progress_signal.emit(total, total)
            return doc.tobytes(garbage=4, deflate=True)

        except CommitFailed as e:
            logger.error("Commit failed: %s", e.detail)
            raise
        except Exception as e:
            logger.error("Commit failed: %s", e)
            raise CommitFailed(f"failed to write annotations: {e}") from e
        finally:
            doc.close()

    def export_annotations_to_pdf(self, source_pdf_path: str, output_pdf_path: str,
                                  annotations_by_page: Dict[int, List[Annotation]]) -> None:
        """
        Export annotations from one PDF file into another.

        Args:
            source_pdf_path: Path to the original PDF
            output_pdf_path: Path where the annotated PDF should be saved
            annotations_by_page: 1-based page number to annotations in z-order

        Raises:
            CommitFailed: If reading, rendering or writing fails
        """
        try:
            with open(source_pdf_path, "rb") as f:
                source = f.read()
        except OSError as e:
            raise CommitFailed(f"cannot read {source_pdf_path}: {e}") from e

        output = self.burn_in(source, annotations_by_page)

        try:
            with open(output_pdf_path, "wb") as f:
                f.write(output)
        except OSError as e:
            raise CommitFailed(f"cannot write {output_pdf_path}: {e}") from e

        logger.info("Wrote %s", output_pdf_path)

    def _burn_page(self, page: fitz.Page, annotations: List[Annotation]) -> None:
        page_height = page.rect.height

        if self.settings.apply_redactions:
            # Scrub content under every whiteout before anything is drawn,
            # so stamps placed on top survive
            whiteouts = [a for a in annotations if isinstance(a, Whiteout)]
            for whiteout in whiteouts:
                page.add_redact_annot(to_pdf_rect(whiteout, page_height),
                                      fill=self.settings.whiteout_fill)
            if whiteouts:
                page.apply_redactions()

        for annotation in annotations:
            if annotation.annotation_type == AnnotationType.WHITEOUT:
                self._draw_whiteout(page, annotation, page_height)
            elif annotation.annotation_type == AnnotationType.TEXT_STAMP:
                self._draw_text(page, annotation, page_height)
            elif annotation.annotation_type == AnnotationType.FREEHAND:
                self._draw_stroke(page, annotation, page_height)

    def _draw_whiteout(self, page: fitz.Page, whiteout: Whiteout,
                       page_height: float) -> None:
        # color=None leaves the box borderless
        page.draw_rect(to_pdf_rect(whiteout, page_height), color=None,
                       fill=self.settings.whiteout_fill, width=0, overlay=True)

    def _draw_text(self, page: fitz.Page, stamp: TextStamp, page_height: float) -> None:
        page.insert_text(
            to_pdf_point(stamp.x, stamp.y, page_height),
            stamp.text,
            fontsize=stamp.font_size,
            fontname=self.settings.stamp_font,
            color=stamp.color,
        )

    def _draw_stroke(self, page: fitz.Page, stroke: FreehandStroke,
                     page_height: float) -> None:
        points = [to_pdf_point(x, y, page_height) for x, y in stroke.points]
        shape = page.new_shape()

        if len(points) == 1:
            shape.draw_circle(points[0], stroke.width / 2.0)
            shape.finish(color=None, fill=stroke.color, fill_opacity=stroke.opacity)
        else:
            shape.draw_polyline(points)
            shape.finish(
                color=stroke.color,
                width=stroke.width,
                stroke_opacity=stroke.opacity,
                closePath=False,
                lineCap=1,  # round
                lineJoin=1,  # round
            )
        shape.commit()
