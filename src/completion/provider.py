"""Upstream language model providers.

CompletionProvider is the seam between the proxy and whichever service
generates text. The default implementation drives an Agno agent over an
OpenAI-compatible model; tests substitute a scripted provider.

Each request gets a fresh stateless Agent because the system prompt
carries that request's document. The model client itself is shared.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from agno.agent import Agent
from agno.models.message import Message
from agno.models.openai import OpenAIChat
from agno.run.agent import RunEvent

from src.completion.config import CompletionConfig, get_completion_config
from src.models.schemas import ChatMessage

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Raised when the language model provider fails or cannot be reached."""

    pass


class CompletionProvider(ABC):
    """Abstract base class for streaming completion providers."""

    @abstractmethod
    def stream(self, system_prompt: str, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Stream a completion for a conversation.

        Args:
            system_prompt: Instruction placed before the conversation.
            messages: Conversation in order, oldest first.

        Returns:
            Async iterator of text chunks in generation order.
        """


class AgnoCompletionProvider(CompletionProvider):
    """Completion provider backed by an Agno agent with an OpenAI model."""

    def __init__(self, config: CompletionConfig | None = None) -> None:
        """Initialize the provider.

        Args:
            config: Optional completion configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_completion_config()
        self._model = OpenAIChat(
            id=self._config.model_name,
            api_key=self._config.api_key,
            base_url=self._config.base_url,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

    def _create_agent(self, system_prompt: str) -> Agent:
        return Agent(
            model=self._model,
            system_message=system_prompt,
            markdown=False,
            telemetry=False,
        )

    async def stream(self, system_prompt: str, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Stream content chunks from the model.

        Only content events are relayed; the completion event repeats the
        full answer and is skipped.

        Raises:
            UpstreamError: If the run reports an error event.
        """
        agent = self._create_agent(system_prompt)
        run_input = [Message(role=m.role, content=m.content) for m in messages]

        response_stream = agent.arun(run_input, stream=True)

        async for event in response_stream:
            kind = getattr(event, "event", None)
            if kind == RunEvent.run_error:
                raise UpstreamError(f"Model run failed: {getattr(event, 'content', None)}")
            if kind == RunEvent.run_content and event.content:
                yield event.content
