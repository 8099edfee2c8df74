import uuid
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..errors import ChatViewError, NoResponseContent


def _new_id() -> str:
    return str(uuid.uuid4())


class MessageRole(str, Enum):
    """Role of a message sender."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolCall(BaseModel):
    """A tool invocation requested by the model.

    Attributes:
        id: Provider-assigned call id (generated when the provider omits it)
        name: Name of the tool to invoke
        arguments: Raw argument payload, expected to be a JSON object
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str
    arguments: str = ""


class Message(BaseModel):
    """A single display-ready message in a conversation.

    The id denotes a slot in the conversation rather than specific content:
    a streaming message keeps its id while its text grows.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    text: str = Field(default="", description="Display text of the message")
    role: MessageRole = Field(description="Role of the message sender")
    is_receiving: bool = Field(
        default=False,
        description="True only for the placeholder currently being filled"
    )
    is_error: bool = Field(default=False, description="True if this turn's call failed")
    is_hidden: bool = Field(default=False, description="True if not meant for display")
    tool_call: ToolCall | None = Field(
        default=None,
        description="Pending call on assistant messages; originating call on tool results"
    )

    def copy_with(self, **changes) -> "Message":
        """Return a copy with the given fields replaced, keeping the id by default."""
        return self.model_copy(update=changes)

    @property
    def requests_tool(self) -> bool:
        """Whether this is an assistant message asking for a tool to be run."""
        return self.role == MessageRole.ASSISTANT and self.tool_call is not None

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(text=text, role=MessageRole.SYSTEM)

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(text=text, role=MessageRole.USER)

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(text=text, role=MessageRole.ASSISTANT)

    @classmethod
    def placeholder(cls) -> "Message":
        """Create the empty assistant slot that a response will fill."""
        return cls(role=MessageRole.ASSISTANT, is_receiving=True)

    @classmethod
    def error(cls, text: str) -> "Message":
        """Create a display-only message marking a failed turn."""
        return cls(text=text, role=MessageRole.ASSISTANT, is_error=True)


class TextDelta(BaseModel):
    """A fragment of assistant text from a streamed response."""

    model_config = ConfigDict(frozen=True)

    text: str


class ToolCallDelta(BaseModel):
    """A fragment of a streamed tool call.

    Fragments sharing an index belong to the same call; name and argument
    fragments accumulate until the stream completes.
    """

    model_config = ConfigDict(frozen=True)

    index: int = 0
    id: str | None = None
    name: str | None = None
    arguments_fragment: str | None = None


StreamEvent = TextDelta | ToolCallDelta


@dataclass(frozen=True)
class TextTurn:
    """The provider produced a final text message."""

    message: Message


@dataclass(frozen=True)
class ToolCallTurn:
    """The provider asked for one or more tools to be run.

    Any text the model produced alongside the calls is kept in `text`.
    """

    calls: list[ToolCall]
    text: str = ""


@dataclass(frozen=True)
class ErrorTurn:
    """The response could not be turned into a message."""

    error: ChatViewError


TurnResult = TextTurn | ToolCallTurn | ErrorTurn


def interpret_response(message: Message) -> TurnResult:
    """Classify a completed, non-streamed provider message.

    Tool-role messages are already executed results and are not classified
    here; callers handle them before interpretation.
    """
    if message.requests_tool:
        return ToolCallTurn(calls=[message.tool_call], text=message.text)
    if not message.text:
        return ErrorTurn(NoResponseContent())
    return TextTurn(message)


@dataclass
class _PendingCall:
    id: str | None = None
    name: str = ""
    arguments: list[str] = field(default_factory=list)


class StreamAccumulator:
    """Merges streamed delta events into a single turn result.

    Text deltas extend the accumulated text immediately. Tool-call deltas are
    buffered per call index and only surface in `result()` once the stream
    has completed.
    """

    def __init__(self, message_id: str | None = None):
        """Initialize the accumulator.

        Args:
            message_id: Id of the slot the streamed text fills
        """
        self._message_id = message_id or _new_id()
        self._chunks: list[str] = []
        self._calls: dict[int, _PendingCall] = {}

    @property
    def text(self) -> str:
        """Text accumulated so far."""
        return "".join(self._chunks)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self._calls)

    def feed(self, event: StreamEvent) -> bool:
        """Merge one event.

        Returns:
            True if the visible text changed
        """
        if isinstance(event, TextDelta):
            if not event.text:
                return False
            self._chunks.append(event.text)
            return True

        pending = self._calls.setdefault(event.index, _PendingCall())
        if event.id:
            pending.id = event.id
        if event.name:
            pending.name += event.name
        if event.arguments_fragment:
            pending.arguments.append(event.arguments_fragment)
        return False

    def message(self, is_receiving: bool = True) -> Message:
        """Snapshot of the streamed text as a message in the placeholder slot."""
        return Message(
            id=self._message_id,
            text=self.text,
            role=MessageRole.ASSISTANT,
            is_receiving=is_receiving,
        )

    def result(self) -> TurnResult:
        """Interpret the completed stream."""
        if self._calls:
            calls = []
            for index in sorted(self._calls):
                pending = self._calls[index]
                if not pending.name:
                    return ErrorTurn(NoResponseContent())
                fields = {"name": pending.name, "arguments": "".join(pending.arguments)}
                if pending.id:
                    fields["id"] = pending.id
                calls.append(ToolCall(**fields))
            return ToolCallTurn(calls=calls, text=self.text)

        if not self._chunks:
            return ErrorTurn(NoResponseContent())
        return TextTurn(self.message(is_receiving=False))
