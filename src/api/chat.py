"""Streaming chat endpoint.

POST /api/chat runs admission, validation and the completion proxy in
strict sequence, then streams the answer as Server-Sent Events:

    data: {"content": "...", "done": false, "status": "generating"}
    ...
    data: {"content": "", "done": true, "status": "complete"}

A failure before the first chunk becomes an HTTP 500 with a JSON body.
A failure after streaming started ends the stream with one terminal event
carrying status "error" and a generic message.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from src.admission import AdmissionDecision
from src.api.dependencies import AdmissionControllerDep, ClientIdDep, CompletionProxyFactoryDep
from src.completion import UpstreamError
from src.models.schemas import StreamChunk, StreamStatus
from src.models.validation import InvalidChatRequestError, validate_chat_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


def _sse(chunk: StreamChunk) -> str:
    return f"data: {chunk.model_dump_json()}\n\n"


def rate_limit_headers(decision: AdmissionDecision) -> dict[str, str]:
    """Build rate limit headers for an admission decision."""
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(int(decision.reset_after)),
    }


async def _event_stream(
    first_chunk: str | None,
    chunks: AsyncGenerator[str],
) -> AsyncIterator[str]:
    """Format proxy chunks as SSE events, ending with one terminal event."""
    try:
        if first_chunk is not None:
            yield _sse(StreamChunk(content=first_chunk, done=False, status=StreamStatus.GENERATING))

        async for chunk in chunks:
            yield _sse(StreamChunk(content=chunk, done=False, status=StreamStatus.GENERATING))

    except UpstreamError:
        logger.exception("[API /chat] Stream failed after response started")
        yield _sse(
            StreamChunk(
                content="",
                done=True,
                status=StreamStatus.ERROR,
                error=GENERIC_ERROR_MESSAGE,
            )
        )
        return
    finally:
        await chunks.aclose()

    yield _sse(StreamChunk(content="", done=True, status=StreamStatus.COMPLETE))


@router.post("/chat")
async def chat(
    request: Request,
    client_id: ClientIdDep,
    admission: AdmissionControllerDep,
    proxy_factory: CompletionProxyFactoryDep,
) -> StreamingResponse:
    """Stream a document-grounded chat completion.

    Args:
        request: Raw request; the body is parsed after admission.
        client_id: Trusted client identifier.
        admission: Admission controller.
        proxy_factory: Getter for the completion proxy, called once the body is valid.

    Returns:
        StreamingResponse of Server-Sent Events.

    Raises:
        429: Client exceeded its request budget.
        400: Malformed or oversized body.
        500: Upstream failure before streaming started.
    """
    decision = admission.admit(client_id)

    try:
        body = await request.json()
    except ValueError as e:
        raise InvalidChatRequestError("Invalid request body") from e

    chat_request = validate_chat_request(body)

    logger.info(
        f"[API /chat] pdfText length: {len(chat_request.document_context)} "
        f"| messages: {len(chat_request.messages)}"
    )

    proxy = proxy_factory()

    # Wait for the first chunk so setup failures still map to a 500 status
    chunks = proxy.stream(chat_request)
    try:
        first_chunk: str | None = await anext(chunks)
    except StopAsyncIteration:
        first_chunk = None

    return StreamingResponse(
        _event_stream(first_chunk, chunks),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
            **rate_limit_headers(decision),
        },
    )
