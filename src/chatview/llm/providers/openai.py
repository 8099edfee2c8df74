from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from ...config import ChatTemperature
from ...errors import (
    ContentFiltered,
    MaxTokensExceeded,
    NoResponseContent,
    ProviderInvalidResponse,
)
from ..base import ChatProvider
from ..models import Message, MessageRole, StreamEvent, TextDelta, ToolCall, ToolCallDelta


def _messages_to_openai_format(messages: list[Message]) -> list[dict[str, Any]]:
    """Convert chat messages to Chat Completions format.

    A tool-result message expands into the assistant message that requested
    the call followed by the `tool` message carrying the result, since the
    API rejects tool results without a matching request.

    Returns:
        List of message dicts
    """
    openai_messages: list[dict[str, Any]] = []

    for msg in messages:
        if msg.role == MessageRole.TOOL:
            if msg.tool_call is None:
                # Results without a recorded call cannot be linked; pass as context
                openai_messages.append({
                    "role": "system",
                    "content": f"Tool result: {msg.text}"
                })
                continue
            openai_messages.append({
                "role": "assistant",
                "content": None,
                "tool_calls": [_tool_call_param(msg.tool_call)]
            })
            openai_messages.append({
                "role": "tool",
                "tool_call_id": msg.tool_call.id,
                "content": msg.text
            })
        elif msg.requests_tool:
            openai_messages.append({
                "role": "assistant",
                "content": msg.text or None,
                "tool_calls": [_tool_call_param(msg.tool_call)]
            })
        else:
            openai_messages.append({
                "role": msg.role.value,
                "content": msg.text
            })

    return openai_messages


def _tool_call_param(call: ToolCall) -> dict[str, Any]:
    return {
        "id": call.id,
        "type": "function",
        "function": {"name": call.name, "arguments": call.arguments or "{}"}
    }


def _check_finish_reason(finish_reason: str | None) -> None:
    if finish_reason == "length":
        raise MaxTokensExceeded()
    if finish_reason == "content_filter":
        raise ContentFiltered()


class OpenAIChatProvider(ChatProvider):
    """OpenAI chat provider implementation.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message and tool format conversion
    - Finish reason handling
    - Authentication mechanism
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: ChatTemperature = ChatTemperature.CHATBOT_RESPONSES,
        max_tokens: int | None = None,
        user_id: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        base_url: str | None = None,
        organization: str | None = None,
        client: AsyncOpenAI | None = None,
        **client_kwargs: Any
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Model to use
            temperature: Sampling preset
            max_tokens: Maximum tokens to generate
            user_id: End-user identifier forwarded to the API
            tools: Tool specifications (see BaseTool.to_llm_spec)
            base_url: Optional custom API base URL
            organization: Optional organization ID
            client: Pre-built client (takes precedence over the other client options)
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._user_id = user_id
        self._tools = tools or []
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    def _request_params(self, messages: list[Message]) -> dict[str, Any]:
        request_params: dict[str, Any] = {
            "model": self._model,
            "messages": _messages_to_openai_format(messages),
            "temperature": self._temperature.temperature,
            "top_p": self._temperature.top_p,
        }
        if self._max_tokens is not None:
            request_params["max_tokens"] = self._max_tokens
        if self._user_id is not None:
            request_params["user"] = self._user_id
        if self._tools:
            request_params["tools"] = [
                {"type": "function", "function": spec} for spec in self._tools
            ]
            # Messages carry a single pending call each
            request_params["parallel_tool_calls"] = False
        return request_params

    async def perform_chat(self, messages: list[Message]) -> Message:
        """Generate one complete response using Chat Completions.

        Args:
            messages: Conversation history

        Returns:
            Assistant message, possibly carrying a pending tool call
        """
        completion = await self._client.chat.completions.create(
            **self._request_params(messages)
        )

        if not completion.choices:
            raise ProviderInvalidResponse()

        choice = completion.choices[0]
        _check_finish_reason(choice.finish_reason)

        if choice.message.tool_calls:
            tool_call = choice.message.tool_calls[0]
            return Message(
                text=choice.message.content or "",
                role=MessageRole.ASSISTANT,
                tool_call=ToolCall(
                    id=tool_call.id,
                    name=tool_call.function.name,
                    arguments=tool_call.function.arguments or ""
                )
            )

        if not choice.message.content:
            raise NoResponseContent()

        return Message.assistant(choice.message.content)

    async def perform_stream_chat(self, messages: list[Message]) -> AsyncIterator[StreamEvent]:
        """Stream a response using Chat Completions.

        Yields:
            Text and tool-call deltas in arrival order
        """
        stream = await self._client.chat.completions.create(
            **self._request_params(messages),
            stream=True
        )

        async for chunk in stream:
            if not chunk.choices:
                continue

            choice = chunk.choices[0]
            delta = choice.delta
            if delta is not None:
                if delta.content:
                    yield TextDelta(text=delta.content)
                for tool_call in delta.tool_calls or []:
                    function = tool_call.function
                    yield ToolCallDelta(
                        index=tool_call.index,
                        id=tool_call.id,
                        name=function.name if function else None,
                        arguments_fragment=function.arguments if function else None
                    )

            _check_finish_reason(choice.finish_reason)

    async def close(self) -> None:
        """Close the OpenAI client."""
        await self._client.close()
