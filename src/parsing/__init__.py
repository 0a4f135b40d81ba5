"""PDF parsing utilities for document chat.

Turns uploaded PDFs into plain text that the client sends back as
context with each chat request.

Responsibilities:
    - PDF text extraction with pypdf
    - Upload validation (size, header, page count)
    - Metadata extraction (title, author, dates)
"""

from src.parsing.pdf_parser import PDFContent, PDFParseError, extract_text, parse_pdf

__all__ = ["PDFContent", "PDFParseError", "extract_text", "parse_pdf"]
