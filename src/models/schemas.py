from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Intake bound on extracted document text
MAX_DOCUMENT_CHARS = 500_000
# Document text actually placed in the system prompt
MAX_CONTEXT_CHARS = 200_000


class StreamStatus(str, Enum):
    """Status values for streaming updates."""

    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


class ChatPayload(BaseModel):
    """Raw chat request body as sent by the browser client.

    Message objects are deliberately left opaque; their shape is owned by
    the completion proxy's converter.

    Attributes:
        messages: Conversation so far, oldest first.
        pdf_text: Extracted document text, sent as ``pdfText``.
    """

    model_config = ConfigDict(strict=True, populate_by_name=True)

    messages: list[Any]
    pdf_text: str | None = Field(default=None, alias="pdfText", max_length=MAX_DOCUMENT_CHARS)


class ChatRequest(BaseModel):
    """Validated input to the completion proxy.

    Attributes:
        messages: Opaque message objects in conversation order.
        document_context: Document text, already truncated for prompt use.
    """

    messages: list[Any]
    document_context: str = Field(default="", max_length=MAX_CONTEXT_CHARS)


class ChatMessage(BaseModel):
    """A single chat message in the upstream provider's format.

    Attributes:
        role: The speaker identifier (user, assistant, or system).
        content: The message text.
    """

    role: Literal["user", "assistant", "system"]
    content: str


class ModelSession(BaseModel):
    """Everything sent upstream for one streaming exchange.

    Attributes:
        system_prompt: Instruction, with document text when available.
        messages: Converted conversation, order preserved.
    """

    system_prompt: str
    messages: list[ChatMessage]


class StreamChunk(BaseModel):
    """A chunk of streamed response data.

    Attributes:
        content: The text content of this chunk.
        done: Whether this is the final chunk.
        status: Current processing status (generating, complete, error).
        error: Error message if something went wrong.
    """

    content: str
    done: bool
    status: StreamStatus | None = None
    error: str | None = None


class ErrorResponse(BaseModel):
    """Generic error body; never carries internal detail."""

    error: str


class ExtractResponse(BaseModel):
    """Response after PDF text extraction.

    Attributes:
        filename: Name of the uploaded file.
        pages: Number of pages in the document.
        text: Extracted plain text, to be sent back as ``pdfText``.
    """

    filename: str
    pages: int
    text: str
