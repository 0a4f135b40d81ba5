"""PDF text extraction using pypdf.

Produces the plain text a client later sends back as chat context.
Failures surface as PDFParseError; callers decide how much of the
message to expose.
"""

import io
import logging

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
PDF_MAGIC_BYTES = b"%PDF"

# PDF info dictionary key -> metadata name
_METADATA_FIELDS = {
    "/Title": "title",
    "/Author": "author",
    "/Subject": "subject",
    "/Creator": "creator",
    "/Producer": "producer",
    "/CreationDate": "creation_date",
    "/ModDate": "modification_date",
}


class PDFContent(BaseModel):
    """Extracted content from a PDF file.

    Attributes:
        text: Combined text content from all pages.
        pages: Total number of pages in the document.
        metadata: Document metadata (title, author, etc.).
    """

    text: str
    pages: int = Field(ge=0)
    metadata: dict[str, str] = Field(default_factory=dict)


class PDFParseError(Exception):
    """Raised when PDF text extraction fails."""

    pass


def _validate_pdf_bytes(file_content: bytes) -> None:
    if not file_content:
        raise PDFParseError("Empty file provided")

    if len(file_content) > MAX_FILE_SIZE:
        size_mb = len(file_content) / (1024 * 1024)
        raise PDFParseError(f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)")

    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise PDFParseError("Invalid PDF: file does not start with PDF header")


def _extract_metadata(reader: PdfReader) -> dict[str, str]:
    metadata: dict[str, str] = {}

    try:
        info = reader.metadata
        if not info:
            return metadata
        for key, name in _METADATA_FIELDS.items():
            value = info.get(key)
            if value:
                metadata[name] = str(value)
    except Exception as e:
        logger.warning(f"Failed to extract some metadata: {e}")

    return metadata


def parse_pdf(file_content: bytes) -> PDFContent:
    """Parse a PDF file and extract its text content.

    Pages whose text cannot be extracted are skipped; a scanned document
    may therefore come back with empty text.

    Args:
        file_content: Raw bytes of the PDF file.

    Returns:
        PDFContent with extracted text, page count, and metadata.

    Raises:
        PDFParseError: If the file is invalid, too large, empty, or corrupt.
    """
    _validate_pdf_bytes(file_content)

    try:
        reader = PdfReader(io.BytesIO(file_content))
        pages = len(reader.pages)
    except PdfReadError as e:
        raise PDFParseError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise PDFParseError(f"Failed to read PDF: {e}") from e

    if pages == 0:
        raise PDFParseError("PDF contains no pages")

    text_parts: list[str] = []
    for number, page in enumerate(reader.pages, start=1):
        try:
            page_text = page.extract_text()
        except Exception as e:
            logger.warning(f"Failed to extract text from page {number}: {e}")
            continue
        if page_text:
            text_parts.append(page_text)

    text = "\n\n".join(text_parts)
    if not text.strip():
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")

    return PDFContent(text=text, pages=pages, metadata=_extract_metadata(reader))


def extract_text(file_content: bytes) -> str:
    """Extract only the plain text of a PDF.

    Raises:
        PDFParseError: If the file cannot be parsed.
    """
    return parse_pdf(file_content).text
