"""
InkRedact: redaction and markup edit model for PDF documents.
"""
__version__ = "0.1.0"
