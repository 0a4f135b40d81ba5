"""Chat request validation.

Schema and bounds checks on the raw JSON body before anything reaches the
model. Failures carry no field-level detail; callers only learn that the
request was invalid.
"""

import logging
from typing import Any

from pydantic import ValidationError

from src.models.schemas import MAX_CONTEXT_CHARS, ChatPayload, ChatRequest

logger = logging.getLogger(__name__)


class InvalidChatRequestError(Exception):
    """Raised when a chat request body is malformed or oversized."""

    pass


def validate_chat_request(raw_body: Any) -> ChatRequest:
    """Validate a decoded JSON body and build a ChatRequest.

    Document text is truncated to MAX_CONTEXT_CHARS even though intake
    already capped it, so the prompt stays bounded whatever the caller sent.

    Args:
        raw_body: Decoded JSON body of the request.

    Returns:
        ChatRequest ready for the completion proxy.

    Raises:
        InvalidChatRequestError: If the body does not match the schema.
    """
    try:
        payload = ChatPayload.model_validate(raw_body)
    except ValidationError as e:
        logger.debug(f"Rejected chat request body: {e.error_count()} error(s)")
        raise InvalidChatRequestError("Invalid request body") from e

    document_context = (payload.pdf_text or "")[:MAX_CONTEXT_CHARS]

    return ChatRequest(messages=payload.messages, document_context=document_context)
