"""
Pytest configuration and fixtures for InkRedact tests.
"""
import fitz
import pytest
from PyQt5.QtCore import QCoreApplication

from inkredact.core.annotations import EditStore

PAGE_WIDTH = 612.0
PAGE_HEIGHT = 792.0


def build_pdf(page_count: int = 2, text: str = "CONFIDENTIAL") -> bytes:
    """Build an in-memory letter-size PDF with one line of text per page."""
    doc = fitz.open()
    for number in range(1, page_count + 1):
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        page.insert_text((72, 72), f"{text} page {number}", fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """Signals and threads need a core application; no display is required."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Keep settings and saved redaction data out of the real home directory."""
    monkeypatch.setenv("INKREDACT_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("INKREDACT_CONFIG_DIR", str(tmp_path / "config"))


@pytest.fixture
def pdf_bytes():
    return build_pdf()


@pytest.fixture
def pdf_file(tmp_path, pdf_bytes):
    path = tmp_path / "source.pdf"
    path.write_bytes(pdf_bytes)
    return path


@pytest.fixture
def store():
    return EditStore(page_count=3)
