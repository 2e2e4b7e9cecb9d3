"""
PDF document handling and manipulation.
"""
from .pdf_exporter import PDFExporter, to_pdf_point, to_pdf_rect
from .pdf_reader import PDFDocumentReader

__all__ = ['PDFDocumentReader', 'PDFExporter', 'to_pdf_point', 'to_pdf_rect']
