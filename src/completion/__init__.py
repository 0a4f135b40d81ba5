"""Streaming completion proxy for document-grounded chat.

Forwards validated chat requests to a hosted language model and relays
the answer back chunk by chunk.

Responsibilities:
    - System prompt construction with injected document text
    - Conversion of client messages to the provider's role/content format
    - Deadline enforcement over the whole streaming exchange
    - Wrapping provider failures as UpstreamError

Agno drives the model call; the provider seam keeps the HTTP layer
independent of it.
"""

from src.completion.config import CompletionConfig, get_completion_config
from src.completion.provider import AgnoCompletionProvider, CompletionProvider, UpstreamError
from src.completion.proxy import (
    CompletionProxy,
    MessageConversionError,
    UpstreamTimeoutError,
    build_system_prompt,
    convert_messages,
    get_completion_proxy,
)

__all__ = [
    "AgnoCompletionProvider",
    "CompletionConfig",
    "CompletionProvider",
    "CompletionProxy",
    "MessageConversionError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "build_system_prompt",
    "convert_messages",
    "get_completion_config",
    "get_completion_proxy",
]
