"""
PDF document loading and page geometry.
"""
import logging
from typing import Optional, Tuple

import fitz  # PyMuPDF

from ..annotations.coordinates import PageViewport
from ..annotations.errors import DocumentLoadError, PageOutOfRange

logger = logging.getLogger(__name__)


class PDFDocumentReader:
    """Handles PDF document loading and page size queries."""

    def __init__(self):
        self.doc: Optional[fitz.Document] = None
        self.current_file_path: Optional[str] = None
        self._data: Optional[bytes] = None

    @property
    def page_count(self) -> int:
        return self.doc.page_count if self.doc else 0

    @property
    def is_loaded(self) -> bool:
        return self.doc is not None

    def load_pdf(self, file_path: str) -> int:
        """
        Load a PDF document from disk.

        Args:
            file_path: Path to the PDF file

        Returns:
            Number of pages

        Raises:
            DocumentLoadError: If the file cannot be read or is not a PDF
        """
        try:
            with open(file_path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise DocumentLoadError(f"cannot read {file_path}: {e}") from e

        page_count = self.load_bytes(data)
        self.current_file_path = file_path
        return page_count

    def load_bytes(self, data: bytes) -> int:
        """
        Load a PDF document from memory.

        Returns:
            Number of pages

        Raises:
            DocumentLoadError: If the bytes are not a readable PDF
        """
        if self.doc:
            self.close()

        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DocumentLoadError(f"not a readable PDF: {e}") from e

        if doc.page_count == 0:
            doc.close()
            raise DocumentLoadError("document has no pages")

        self.doc = doc
        self._data = bytes(data)
        logger.info("Loaded document with %d page(s)", doc.page_count)
        return doc.page_count

    def close(self) -> None:
        """Close the current document and clear all state."""
        if self.doc:
            self.doc.close()
        self.doc = None
        self._data = None
        self.current_file_path = None

    def document_bytes(self) -> bytes:
        """The original bytes of the loaded document, unchanged by any edit."""
        if self._data is None:
            raise DocumentLoadError("no document loaded")
        return self._data

    def page_size(self, page: int) -> Tuple[float, float]:
        """
        Get the size of a page in points.

        Args:
            page: 1-based page number

        Returns:
            Tuple of (width, height)

        Raises:
            PageOutOfRange: If the page does not exist
        """
        if not self.doc or not 1 <= page <= self.doc.page_count:
            raise PageOutOfRange(page, self.page_count)
        rect = self.doc[page - 1].rect
        return rect.width, rect.height

    def viewport(self, page: int, render_scale: float) -> PageViewport:
        """Coordinate mapper for a page rendered at ``render_scale``."""
        _, height = self.page_size(page)
        return PageViewport(render_scale, height)
