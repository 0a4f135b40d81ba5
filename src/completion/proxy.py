"""Streaming completion proxy.

Turns a validated ChatRequest into a model session (system prompt plus
converted messages), forwards it to the upstream provider and relays
chunks as soon as they arrive.

The whole exchange runs against a single deadline. Every read from the
provider is bounded by the time left, so a stalled stream ends with
UpstreamTimeoutError rather than holding the connection open. Any other
provider failure is wrapped in UpstreamError. There are no retries; the
caller may resubmit.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from typing import Any

from src.completion.config import get_completion_config
from src.completion.provider import AgnoCompletionProvider, CompletionProvider, UpstreamError
from src.models.schemas import MAX_CONTEXT_CHARS, ChatMessage, ChatRequest, ModelSession

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

DOCUMENT_PREAMBLE = (
    "You are a helpful document assistant. The user has uploaded a document. "
    "Answer their questions based on the following document content. "
    "If the answer is not in the document, say so clearly."
)
DEFAULT_PREAMBLE = "You are a helpful assistant."

_ROLES = {"user", "assistant", "system"}


class UpstreamTimeoutError(UpstreamError):
    """Raised when a streaming exchange exceeds its deadline."""

    pass


class MessageConversionError(UpstreamError):
    """Raised when a message cannot be mapped to the provider format."""

    pass


def build_system_prompt(document_context: str) -> str:
    """Build the system instruction for a conversation.

    Args:
        document_context: Extracted document text, possibly empty.

    Returns:
        Document-grounded instruction when context is present,
        otherwise the generic assistant instruction.
    """
    if not document_context:
        return DEFAULT_PREAMBLE
    return f"{DOCUMENT_PREAMBLE}\n\nDocument content:\n{document_context[:MAX_CONTEXT_CHARS]}"


def _text_from_parts(parts: list[Any], index: int) -> str:
    texts: list[str] = []
    for part in parts:
        if isinstance(part, str):
            texts.append(part)
        elif isinstance(part, dict):
            if part.get("type", "text") == "text" and isinstance(part.get("text"), str):
                texts.append(part["text"])
        else:
            raise MessageConversionError(f"Message {index} has an unsupported part")
    return "".join(texts)


def convert_message(message: Any, index: int = 0) -> ChatMessage | None:
    """Convert one client message to the provider format.

    Accepts plain ``{role, content}`` messages, content given as a list of
    parts, and UI messages carrying ``parts``. Non-text parts (files,
    tool calls) are dropped.

    Returns:
        ChatMessage, or None when the message holds no text at all.

    Raises:
        MessageConversionError: If the role or shape is not usable.
    """
    if not isinstance(message, dict):
        raise MessageConversionError(f"Message {index} is not an object")

    role = message.get("role")
    if role not in _ROLES:
        raise MessageConversionError(f"Message {index} has unsupported role {role!r}")

    content = message.get("content")
    parts = message.get("parts")

    if isinstance(content, str):
        text = content
    elif isinstance(content, list):
        text = _text_from_parts(content, index)
    elif isinstance(parts, list):
        text = _text_from_parts(parts, index)
    elif content is None and parts is None:
        raise MessageConversionError(f"Message {index} has no content")
    else:
        raise MessageConversionError(f"Message {index} has unsupported content")

    if not text and not isinstance(content, str):
        return None
    return ChatMessage(role=role, content=text)


def convert_messages(messages: list[Any]) -> list[ChatMessage]:
    """Convert client messages in order, skipping ones without text."""
    converted: list[ChatMessage] = []
    for index, message in enumerate(messages):
        chat_message = convert_message(message, index)
        if chat_message is not None:
            converted.append(chat_message)
    return converted


class CompletionProxy:
    """Relays a chat request to the upstream provider as a text stream."""

    def __init__(
        self,
        provider: CompletionProvider,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the proxy.

        Args:
            provider: Upstream completion provider.
            timeout_seconds: Deadline for a whole streaming exchange.
        """
        self._provider = provider
        self._timeout_seconds = timeout_seconds

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    def build_session(self, request: ChatRequest) -> ModelSession:
        """Build the system prompt and provider messages for a request.

        Raises:
            MessageConversionError: If a message cannot be converted.
        """
        return ModelSession(
            system_prompt=build_system_prompt(request.document_context),
            messages=convert_messages(request.messages),
        )

    async def stream(self, request: ChatRequest) -> AsyncGenerator[str]:
        """Stream completion chunks for a chat request.

        Chunks are yielded in provider order as soon as each arrives.
        Closing this generator closes the provider stream, abandoning
        generation when the caller goes away.

        Args:
            request: Validated chat request.

        Yields:
            Non-empty text chunks.

        Raises:
            UpstreamError: On conversion, provider or timeout failure.
        """
        session = self.build_session(request)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout_seconds
        chunks: AsyncIterator[str] | None = None

        try:
            while True:
                try:
                    if chunks is None:
                        chunks = self._provider.stream(session.system_prompt, session.messages)
                    async with asyncio.timeout_at(deadline):
                        chunk = await anext(chunks)
                except StopAsyncIteration:
                    return
                except TimeoutError as e:
                    raise UpstreamTimeoutError(
                        f"Completion exceeded {self._timeout_seconds}s deadline"
                    ) from e
                except UpstreamError:
                    raise
                except Exception as e:
                    raise UpstreamError(f"Upstream provider failed: {e}") from e

                if chunk:
                    yield chunk
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()


# Module-level singleton instance
_completion_proxy: CompletionProxy | None = None


def get_completion_proxy() -> CompletionProxy:
    """Get or create the global completion proxy.

    The provider is only built on first use, so the API key is not
    required until a chat request arrives.

    Returns:
        The CompletionProxy instance.

    Raises:
        UpstreamError: If the provider configuration is invalid.
    """
    global _completion_proxy
    if _completion_proxy is None:
        try:
            config = get_completion_config()
        except ValueError as e:
            raise UpstreamError("Completion provider is not configured") from e
        _completion_proxy = CompletionProxy(
            provider=AgnoCompletionProvider(config),
            timeout_seconds=config.timeout_seconds,
        )
    return _completion_proxy
