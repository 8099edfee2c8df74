"""Orchestrator states and the events pushed to subscribers."""

from dataclasses import dataclass
from enum import Enum

from ..llm.models import Message


class ChatState(str, Enum):
    """Lifecycle of a chat turn."""

    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    AWAITING_TOOL_RESULT = "awaiting_tool_result"
    ERROR = "error"

    @property
    def in_flight(self) -> bool:
        """Whether a provider call or tool execution is outstanding."""
        return self in (
            ChatState.SENDING,
            ChatState.STREAMING,
            ChatState.AWAITING_TOOL_RESULT,
        )


@dataclass(frozen=True)
class MessagesChanged:
    """The conversation changed; carries the full snapshot."""

    messages: tuple[Message, ...]


@dataclass(frozen=True)
class StateChanged:
    previous: ChatState
    current: ChatState


@dataclass(frozen=True)
class ErrorChanged:
    error_message: str | None


ChatEvent = MessagesChanged | StateChanged | ErrorChanged
