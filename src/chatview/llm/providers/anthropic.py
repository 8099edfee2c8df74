"""Anthropic Claude chat provider implementation.

Uses the official Anthropic Python SDK for async chat completions.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

import json
from collections.abc import AsyncIterator
from typing import Any

from anthropic import AsyncAnthropic

from ...config import ChatTemperature
from ...errors import ContentFiltered, MaxTokensExceeded, NoResponseContent
from ..base import ChatProvider
from ..models import Message, MessageRole, StreamEvent, TextDelta, ToolCall, ToolCallDelta


def _messages_to_anthropic_format(
    messages: list[Message],
) -> tuple[str | None, list[dict[str, Any]]]:
    """Split out the system prompt and convert the rest to Messages API format.

    Consecutive messages with the same role are merged into one message,
    since the API requires user and assistant turns to alternate. Tool
    results become a `tool_use` block on the assistant side followed by a
    `tool_result` block on the user side.

    Returns:
        Tuple of (system prompt or None, list of message dicts)
    """
    system_parts: list[str] = []
    converted: list[dict[str, Any]] = []

    def append(role: str, block: dict[str, Any]) -> None:
        if converted and converted[-1]["role"] == role:
            converted[-1]["content"].append(block)
        else:
            converted.append({"role": role, "content": [block]})

    for msg in messages:
        if msg.role == MessageRole.SYSTEM:
            system_parts.append(msg.text)
        elif msg.role == MessageRole.TOOL and msg.tool_call is not None:
            append("assistant", {
                "type": "tool_use",
                "id": msg.tool_call.id,
                "name": msg.tool_call.name,
                "input": _tool_input(msg.tool_call.arguments)
            })
            append("user", {
                "type": "tool_result",
                "tool_use_id": msg.tool_call.id,
                "content": msg.text
            })
        elif msg.role == MessageRole.TOOL:
            append("user", {"type": "text", "text": f"Tool result: {msg.text}"})
        elif msg.text:
            append(msg.role.value, {"type": "text", "text": msg.text})

    system = "\n\n".join(system_parts) if system_parts else None
    return system, converted


def _tool_input(arguments: str) -> dict[str, Any]:
    try:
        parsed = json.loads(arguments) if arguments else {}
    except json.JSONDecodeError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _check_stop_reason(stop_reason: str | None) -> None:
    if stop_reason == "max_tokens":
        raise MaxTokensExceeded()
    if stop_reason == "refusal":
        raise ContentFiltered()


class AnthropicChatProvider(ChatProvider):
    """Anthropic Claude chat provider implementation.

    Hidden design decisions:
    - Anthropic API client initialization
    - Message format conversion (system prompt and tool blocks)
    - Stop reason handling
    - Authentication mechanism
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        temperature: ChatTemperature = ChatTemperature.CHATBOT_RESPONSES,
        max_tokens: int = 4096,
        tools: list[dict[str, Any]] | None = None,
        base_url: str | None = None,
        client: AsyncAnthropic | None = None,
        **client_kwargs: Any
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Model to use
            temperature: Sampling preset
            max_tokens: Maximum tokens to generate (required by the API)
            tools: Tool specifications (see BaseTool.to_llm_spec)
            base_url: Optional custom API base URL
            client: Pre-built client (takes precedence over the other client options)
            **client_kwargs: Additional kwargs for AsyncAnthropic client
        """
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._tools = tools or []
        self._client = client or AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    def _request_params(self, messages: list[Message]) -> dict[str, Any]:
        system, anthropic_messages = _messages_to_anthropic_format(messages)
        if not anthropic_messages:
            # The API needs at least one user turn; a system-only chat opens with one
            anthropic_messages = [{"role": "user", "content": [{"type": "text", "text": "Hello"}]}]

        request_params: dict[str, Any] = {
            "model": self._model,
            "messages": anthropic_messages,
            "temperature": self._temperature.temperature,
            "max_tokens": self._max_tokens,
        }
        if system:
            request_params["system"] = system
        if self._tools:
            request_params["tools"] = [
                {
                    "name": spec["name"],
                    "description": spec.get("description", ""),
                    "input_schema": spec.get("parameters", {"type": "object"})
                }
                for spec in self._tools
            ]
        return request_params

    async def perform_chat(self, messages: list[Message]) -> Message:
        """Generate one complete response using the Messages API.

        Args:
            messages: Conversation history

        Returns:
            Assistant message, possibly carrying a pending tool call
        """
        response = await self._client.messages.create(**self._request_params(messages))
        _check_stop_reason(response.stop_reason)

        text = ""
        tool_call = None
        for block in response.content:
            if block.type == "text":
                text += block.text
            elif block.type == "tool_use" and tool_call is None:
                tool_call = ToolCall(
                    id=block.id,
                    name=block.name,
                    arguments=json.dumps(block.input)
                )

        if tool_call is not None:
            return Message(text=text, role=MessageRole.ASSISTANT, tool_call=tool_call)
        if not text:
            raise NoResponseContent()
        return Message.assistant(text)

    async def perform_stream_chat(self, messages: list[Message]) -> AsyncIterator[StreamEvent]:
        """Stream a response using the Messages API.

        Yields:
            Text and tool-call deltas in arrival order
        """
        async with self._client.messages.stream(**self._request_params(messages)) as stream:
            async for event in stream:
                if event.type == "content_block_start":
                    block = event.content_block
                    if block.type == "tool_use":
                        yield ToolCallDelta(index=event.index, id=block.id, name=block.name)
                elif event.type == "content_block_delta":
                    delta = event.delta
                    if delta.type == "text_delta":
                        yield TextDelta(text=delta.text)
                    elif delta.type == "input_json_delta":
                        yield ToolCallDelta(
                            index=event.index,
                            arguments_fragment=delta.partial_json
                        )
                elif event.type == "message_delta":
                    _check_stop_reason(event.delta.stop_reason)

    async def close(self) -> None:
        """Close the Anthropic client."""
        await self._client.close()
