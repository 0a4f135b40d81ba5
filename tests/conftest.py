"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - clock: Controllable monotonic clock for admission windows
    - admission_controller: Fresh in-memory controller on that clock
    - provider: Scripted completion provider standing in for the model
    - app / async_client: FastAPI app with both wired in, and an HTTPX client
    - make_pdf: Builder for small text PDFs
"""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.admission import FixedWindowAdmissionController, get_admission_controller
from src.api.app import create_app
from src.api.dependencies import get_completion_proxy_factory
from src.completion import CompletionProvider, CompletionProxy
from src.models.schemas import ChatMessage


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedProvider(CompletionProvider):
    """Completion provider that replays fixed chunks.

    With an error set, it raises after yielding ``fail_after`` chunks.
    """

    def __init__(
        self,
        chunks: list[str] | None = None,
        error: Exception | None = None,
        fail_after: int = 0,
        delay: float = 0.0,
    ) -> None:
        self.chunks = chunks if chunks is not None else ["Hello", ", ", "world"]
        self.error = error
        self.fail_after = fail_after
        self.delay = delay
        self.calls: list[tuple[str, list[ChatMessage]]] = []
        self.closed = False

    async def stream(self, system_prompt: str, messages: list[ChatMessage]) -> AsyncIterator[str]:
        self.calls.append((system_prompt, messages))
        try:
            for index, chunk in enumerate(self.chunks):
                if self.error is not None and index == self.fail_after:
                    raise self.error
                if self.delay:
                    await asyncio.sleep(self.delay)
                yield chunk
            if self.error is not None and self.fail_after >= len(self.chunks):
                raise self.error
        finally:
            self.closed = True


def build_pdf(pages: list[str]) -> bytes:
    """Build a minimal PDF with one line of Helvetica text per page."""
    page_count = len(pages)
    font_id = 3 + 2 * page_count
    objects: list[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        (
            "<< /Type /Pages /Kids ["
            + " ".join(f"{3 + 2 * i} 0 R" for i in range(page_count))
            + f"] /Count {page_count} >>"
        ).encode(),
    ]
    for i, text in enumerate(pages):
        content = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode()
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 {font_id} 0 R >> >> /Contents {4 + 2 * i} 0 R >>"
            ).encode()
        )
        objects.append(
            f"<< /Length {len(content)} >>\nstream\n".encode() + content + b"\nendstream"
        )
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")

    out = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n".encode()
    out += f"startxref\n{xref_offset}\n%%EOF\n".encode()
    return bytes(out)


@pytest.fixture
def make_pdf() -> Callable[[list[str]], bytes]:
    """Return the PDF builder."""
    return build_pdf


@pytest.fixture
def clock() -> FakeClock:
    """Return a clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def admission_controller(clock: FakeClock) -> FixedWindowAdmissionController:
    """Return a 10-per-60s controller driven by the fake clock."""
    return FixedWindowAdmissionController(max_requests=10, window_seconds=60.0, clock=clock)


@pytest.fixture
def provider() -> ScriptedProvider:
    """Return a provider replaying three chunks."""
    return ScriptedProvider()


@pytest.fixture
def app(
    admission_controller: FixedWindowAdmissionController,
    provider: ScriptedProvider,
) -> FastAPI:
    """Create the API with the fake controller and provider injected."""
    application = create_app()
    proxy = CompletionProxy(provider=provider, timeout_seconds=5.0)
    application.dependency_overrides[get_admission_controller] = lambda: admission_controller
    application.dependency_overrides[get_completion_proxy_factory] = lambda: lambda: proxy
    return application


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
