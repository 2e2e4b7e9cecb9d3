# core/export/export_worker.py

import logging
import os
import shutil
import tempfile
from typing import Dict, List, Optional

from PyQt5.QtCore import QThread, pyqtSignal

from ...config import Settings
from ..annotations.errors import CommitFailed
from ..annotations.models import Annotation
from ..annotations.store import EditStore
from ..document.pdf_exporter import PDFExporter

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """Worker thread for burning annotations into a PDF without freezing the UI."""

    # Signals
    finished = pyqtSignal(bool, str)  # success, message
    progress = pyqtSignal(str)  # status message
    page_progress = pyqtSignal(int, int)  # current, total pages

    def __init__(self, source_bytes: bytes, output_pdf: str, store: EditStore,
                 settings: Optional[Settings] = None, use_temp_file: bool = False):
        super().__init__()
        self.source_bytes = source_bytes
        self.output_pdf = output_pdf
        # Snapshot now; the store may change while the thread runs
        self.annotations: Dict[int, List[Annotation]] = store.all_annotations()
        self.use_temp_file = use_temp_file
        self.temp_path: Optional[str] = None
        self.exporter = PDFExporter(settings)
        self.exporter.progress_signal.connect(self._on_page_progress)

    def run(self):
        """Execute the export in a background thread."""
        try:
            self.progress.emit("Exporting annotations...")
            output = self.exporter.burn_in(self.source_bytes, self.annotations)

            if self.use_temp_file:
                # Write next to the target so the final move is a rename
                output_dir = os.path.dirname(os.path.abspath(self.output_pdf))
                temp_fd, self.temp_path = tempfile.mkstemp(suffix='.pdf', dir=output_dir)
                with os.fdopen(temp_fd, "wb") as f:
                    f.write(output)
                self.progress.emit("Finalizing...")
                shutil.move(self.temp_path, self.output_pdf)
                self.temp_path = None
            else:
                with open(self.output_pdf, "wb") as f:
                    f.write(output)

            self.finished.emit(True, "Annotations saved successfully to PDF!")

        except CommitFailed as e:
            self._cleanup()
            self.finished.emit(False, f"Failed to export annotations: {e.detail}")
        except OSError as e:
            self._cleanup()
            logger.error("Could not write %s: %s", self.output_pdf, e)
            self.finished.emit(False, f"Error during export: {e}")

    def _cleanup(self):
        if self.temp_path and os.path.exists(self.temp_path):
            os.remove(self.temp_path)
        self.temp_path = None

    def _on_page_progress(self, current, total):
        """Handle page-level progress updates."""
        self.page_progress.emit(current, total)
