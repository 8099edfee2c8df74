"""In-memory collaborators for orchestrator tests."""

import asyncio
from collections.abc import AsyncIterator

from chatview.llm import ChatProvider, Message, MessageRole, StreamEvent, ToolCall


class ScriptedProvider(ChatProvider):
    """Satisfies the ChatProvider interface with canned responses.

    Each perform_chat call pops the next item from `responses`; each
    perform_stream_chat call pops the next event list from `streams`.
    Exceptions in either are raised at the point they are reached.
    If `gate` is given, every call waits for it before answering.
    """

    def __init__(
        self,
        responses: list[Message | Exception] | None = None,
        streams: list[list[StreamEvent | Exception]] | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.streams = list(streams or [])
        self.gate = gate
        self.calls: list[list[Message]] = []
        self.closed = False

    async def perform_chat(self, messages: list[Message]) -> Message:
        self.calls.append(list(messages))
        if self.gate is not None:
            await self.gate.wait()
        effect = self.responses.pop(0)
        if isinstance(effect, Exception):
            raise effect
        return effect

    async def perform_stream_chat(self, messages: list[Message]) -> AsyncIterator[StreamEvent]:
        self.calls.append(list(messages))
        events = self.streams.pop(0)
        for event in events:
            if self.gate is not None:
                await self.gate.wait()
            if isinstance(event, Exception):
                raise event
            yield event
            await asyncio.sleep(0)

    async def close(self) -> None:
        self.closed = True


class RecordingObserver:
    """Satisfies the ChatObserver protocol. Records every event as a tuple."""

    def __init__(self) -> None:
        self.events: list[tuple] = []

    def names(self) -> list[str]:
        return [event[0] for event in self.events]

    def turn_started(self, mode: str, message_count: int) -> None:
        self.events.append(("turn_started", mode, message_count))

    def provider_called(self, mode: str, message_count: int, round_idx: int) -> None:
        self.events.append(("provider_called", mode, message_count, round_idx))

    def tool_executed(self, tool_name: str, call_id: str) -> None:
        self.events.append(("tool_executed", tool_name, call_id))

    def turn_completed(self, message_count: int, tool_rounds: int, duration_ms: int) -> None:
        self.events.append(("turn_completed", message_count, tool_rounds))

    def turn_failed(self, reason: str) -> None:
        self.events.append(("turn_failed", reason))

    def turn_cancelled(self) -> None:
        self.events.append(("turn_cancelled",))


def tool_result(text: str, name: str = "lookup") -> Message:
    """A tool-role message as returned by a provider that runs tools itself."""
    return Message(text=text, role=MessageRole.TOOL, tool_call=ToolCall(name=name))


def tool_request(name: str, arguments: str = "") -> Message:
    """An assistant message asking for a tool to be run."""
    return Message(role=MessageRole.ASSISTANT, tool_call=ToolCall(name=name, arguments=arguments))
