"""
Handles persistence of redaction data to/from JSON files.
"""
import hashlib
import json
import logging
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ...utils.resource_loader import get_app_data_dir
from .errors import PersistenceError
from .models import Annotation
from .store import EditStore

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class AnnotationPersistence:
    """Manages saving and loading redaction data to/from disk."""

    def __init__(self, data_dir: Optional[str] = None):
        self._data_dir: Optional[str] = data_dir

    def get_data_dir(self) -> str:
        """
        Get or create the directory annotation files are stored in.

        Returns:
            Path to the annotations directory
        """
        if self._data_dir is None:
            self._data_dir = str(get_app_data_dir() / "annotations")
        os.makedirs(self._data_dir, exist_ok=True)
        return self._data_dir

    def get_json_path(self, pdf_path: str) -> str:
        """
        Get the JSON file path for a given PDF.

        Args:
            pdf_path: Path to the PDF file

        Returns:
            Path to the corresponding JSON file
        """
        # Hashing the path keeps one file per PDF regardless of its location
        path_hash = hashlib.md5(pdf_path.encode()).hexdigest()
        return os.path.join(self.get_data_dir(), f"{path_hash}.json")

    def dumps(self, annotations_by_page: Dict[int, List[Annotation]],
              page_count: Optional[int] = None) -> str:
        """Serialize annotations, in page and z-order, to a JSON document."""
        data = {
            "version": FORMAT_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "page_count": page_count,
            "annotations": [
                ann.to_dict()
                for page in sorted(annotations_by_page)
                for ann in annotations_by_page[page]
            ],
        }
        return json.dumps(data, indent=2)

    def loads(self, text: str) -> List[Annotation]:
        """
        Parse a JSON document produced by :meth:`dumps`.

        Raises:
            PersistenceError: If the document is malformed
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"invalid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("annotations"), list):
            raise PersistenceError("expected an object with an 'annotations' list")

        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise PersistenceError(f"unsupported format version {version!r}")

        annotations = []
        for position, entry in enumerate(data["annotations"]):
            if not isinstance(entry, dict):
                raise PersistenceError(f"annotation #{position} is not an object")
            try:
                annotations.append(Annotation.from_dict(entry))
            except ValueError as e:
                raise PersistenceError(f"annotation #{position}: {e}") from e
        return annotations

    def save_to_json(self, store: EditStore, pdf_path: str,
                     file_path: Optional[str] = None) -> str:
        """
        Save the store's annotations to a JSON file.

        Args:
            store: Store to save
            pdf_path: Path to the associated PDF
            file_path: Optional custom path for the JSON file

        Returns:
            Path the file was written to

        Raises:
            PersistenceError: If the file could not be written
        """
        if file_path is None:
            file_path = self.get_json_path(pdf_path)

        text = self.dumps(store.all_annotations(), store.page_count)
        try:
            directory = os.path.dirname(file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(file_path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise PersistenceError(f"failed to write {file_path}: {e}") from e

        logger.info("Saved %d annotation(s) to %s", len(store), file_path)
        return file_path

    def load_into(self, store: EditStore, pdf_path: str,
                  file_path: Optional[str] = None) -> int:
        """
        Replace the store's contents with annotations read from disk.

        Returns:
            Number of annotations loaded

        Raises:
            PersistenceError: If the file is missing or malformed
        """
        if file_path is None:
            file_path = self.get_json_path(pdf_path)

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise PersistenceError(f"failed to read {file_path}: {e}") from e

        annotations = self.loads(text)
        store.load(annotations)
        return len(annotations)

    def delete_json_file(self, pdf_path: str) -> bool:
        """
        Delete the JSON file saved for a PDF.

        Returns:
            True if a file was removed, False if none existed
        """
        file_path = self.get_json_path(pdf_path)
        if not os.path.exists(file_path):
            return False
        os.remove(file_path)
        return True

    def has_saved_annotations(self, pdf_path: str) -> bool:
        return os.path.exists(self.get_json_path(pdf_path))
