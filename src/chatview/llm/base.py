from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from .models import Message, StreamEvent


class ChatProvider(ABC):
    """Abstract base class for chat providers.

    This module hides the design decision of which LLM service answers the
    conversation. Implementations must handle provider-specific details like:
    - API client setup and authentication
    - Request/response format conversion
    - Mapping finish reasons onto chatview errors

    Providers are stateless with respect to the conversation: every call
    receives the full ordered message list.

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            message = await provider.perform_chat(messages)
        # Automatically cleaned up
    """

    @abstractmethod
    async def perform_chat(self, messages: list[Message]) -> Message:
        """Generate one complete response.

        Args:
            messages: Ordered conversation history, never containing a
                receiving placeholder

        Returns:
            An assistant message with text, an assistant message carrying a
            pending `tool_call`, or an already executed tool-role message

        Raises:
            ChatViewError: Provider-level failures (token limit, content filter, ...)
        """
        pass

    @abstractmethod
    def perform_stream_chat(self, messages: list[Message]) -> AsyncIterator[StreamEvent]:
        """Generate a response as a sequence of delta events.

        The sequence is finite, ordered and cannot be restarted. A failure
        terminates it by raising from the iterator.

        Args:
            messages: Ordered conversation history, never containing a
                receiving placeholder

        Returns:
            Async iterator of TextDelta and ToolCallDelta events
        """
        pass

    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "ChatProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
