"""Pydantic models for API requests and responses.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ChatPayload: Raw chat request body (messages + pdfText)
    - ChatRequest: Validated request handed to the completion proxy
    - ChatMessage: Role-tagged message in the upstream format
    - ModelSession: System prompt plus converted messages
    - StreamChunk: One Server-Sent Event of a streamed answer
    - ExtractResponse: Text extracted from an uploaded PDF
"""

from src.models.schemas import (
    MAX_CONTEXT_CHARS,
    MAX_DOCUMENT_CHARS,
    ChatMessage,
    ChatPayload,
    ChatRequest,
    ErrorResponse,
    ExtractResponse,
    ModelSession,
    StreamChunk,
    StreamStatus,
)
from src.models.validation import InvalidChatRequestError, validate_chat_request

__all__ = [
    "MAX_CONTEXT_CHARS",
    "MAX_DOCUMENT_CHARS",
    "ChatMessage",
    "ChatPayload",
    "ChatRequest",
    "ErrorResponse",
    "ExtractResponse",
    "InvalidChatRequestError",
    "ModelSession",
    "StreamChunk",
    "StreamStatus",
    "validate_chat_request",
]
