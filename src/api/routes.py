"""PDF text extraction endpoint.

Handles file upload, validation and parsing. The extracted text is
returned to the client, which sends it back as ``pdfText`` on chat
requests; nothing is stored server-side.
"""

import logging

from fastapi import APIRouter, HTTPException, UploadFile, status

from src.models.schemas import ExtractResponse
from src.parsing.pdf_parser import MAX_FILE_SIZE, parse_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["extract"])

# 10MB limit matches pdf_parser constant
MAX_UPLOAD_SIZE = MAX_FILE_SIZE


def _validate_file_extension(filename: str | None) -> str:
    """Validate that file has .pdf extension.

    Raises:
        HTTPException: 400 if the name is missing or not a PDF.
    """
    if not filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )

    if not filename.lower().endswith(".pdf"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only PDF files are accepted",
        )

    return filename


async def _read_and_validate_size(file: UploadFile) -> bytes:
    """Read file content and validate size.

    Raises:
        HTTPException: 413 if file exceeds size limit.
    """
    content = await file.read()

    if len(content) > MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail="File exceeds maximum allowed size (10MB)",
        )

    return content


@router.post("/extract", response_model=ExtractResponse)
async def extract_pdf_text(file: UploadFile | None = None) -> ExtractResponse:
    """Extract plain text from an uploaded PDF.

    Args:
        file: The uploaded PDF file (multipart/form-data).

    Returns:
        ExtractResponse with filename, page count and text.

    Raises:
        400: Missing file, wrong extension, or unparseable PDF.
        413: File exceeds 10MB limit.
    """
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )

    filename = _validate_file_extension(file.filename)
    content = await _read_and_validate_size(file)

    # PDFParseError propagates to the app's handler, which hides the detail
    pdf_content = parse_pdf(content)

    logger.info(
        f"Extracted {len(pdf_content.text)} chars from {filename} ({pdf_content.pages} pages)"
    )

    return ExtractResponse(
        filename=filename,
        pages=pdf_content.pages,
        text=pdf_content.text,
    )
