"""Integration tests for the PDF text extraction endpoint.

Tests the real upload flow with generated PDF files, no mocks.
"""

from collections.abc import Callable

import pytest_check as check
from httpx import AsyncClient

from src.models.schemas import ExtractResponse
from src.parsing.pdf_parser import MAX_FILE_SIZE
from tests.conftest import ScriptedProvider


class TestPDFExtract:
    """Integration tests for POST /api/extract."""

    async def test_extract_returns_text(
        self, async_client: AsyncClient, make_pdf: Callable[[list[str]], bytes]
    ) -> None:
        """A valid PDF returns its text, page count and filename."""
        pdf = make_pdf(["Employee handbook", "Vacation policy"])

        response = await async_client.post(
            "/api/extract",
            files={"file": ("handbook.pdf", pdf, "application/pdf")},
        )

        assert response.status_code == 200
        data = ExtractResponse.model_validate(response.json())
        check.equal(data.filename, "handbook.pdf")
        check.equal(data.pages, 2)
        check.is_in("Employee handbook", data.text)
        check.is_in("Vacation policy", data.text)

    async def test_extracted_text_feeds_chat(
        self,
        async_client: AsyncClient,
        make_pdf: Callable[[list[str]], bytes],
        provider: ScriptedProvider,
    ) -> None:
        """Text from extraction can be sent straight back as pdfText."""
        extract = await async_client.post(
            "/api/extract",
            files={"file": ("notes.pdf", make_pdf(["Launch date is May 3"]), "application/pdf")},
        )

        await async_client.post(
            "/api/chat",
            json={
                "messages": [{"role": "user", "content": "When is launch?"}],
                "pdfText": extract.json()["text"],
            },
        )

        assert "Launch date is May 3" in provider.calls[0][0]

    async def test_corrupt_pdf_returns_generic_400(self, async_client: AsyncClient) -> None:
        """A file that is not a PDF gets a generic parse failure."""
        response = await async_client.post(
            "/api/extract",
            files={"file": ("fake.pdf", b"not a pdf at all", "application/pdf")},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Failed to parse PDF"}

    async def test_non_pdf_extension_returns_400(self, async_client: AsyncClient) -> None:
        """Only .pdf uploads are accepted."""
        response = await async_client.post(
            "/api/extract",
            files={"file": ("notes.txt", b"plain text", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Only PDF files are accepted"}

    async def test_missing_file_returns_400(self, async_client: AsyncClient) -> None:
        """A request without a file is rejected."""
        response = await async_client.post("/api/extract")

        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded"}

    async def test_oversized_file_returns_413(self, async_client: AsyncClient) -> None:
        """Uploads over 10MB are rejected with 413."""
        oversized = b"%PDF-1.4" + b"\x00" * (MAX_FILE_SIZE + 1)

        response = await async_client.post(
            "/api/extract",
            files={"file": ("big.pdf", oversized, "application/pdf")},
        )

        assert response.status_code == 413

    async def test_malformed_upload_returns_generic_400(self, async_client: AsyncClient) -> None:
        """A form field where the file should be gets the generic error shape, not field detail."""
        response = await async_client.post("/api/extract", data={"file": "not-a-file"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}
