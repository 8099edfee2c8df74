"""Pytest configuration and shared fixtures."""
import pytest

from chatview.chat import ChatEvent, MessagesChanged
from chatview.llm import Message
from chatview.tools import FunctionTool

from tests.fakes import RecordingObserver


@pytest.fixture
def observer():
    """Observer that records orchestrator events."""
    return RecordingObserver()


@pytest.fixture
def system_message():
    return Message.system("You are X")


@pytest.fixture
def add_calls():
    """Records every invocation of the `add` tool."""
    return []


@pytest.fixture
def add_tool(add_calls):
    """A tool that adds two integers."""
    def add(a: int, b: int) -> int:
        """Add two numbers."""
        add_calls.append((a, b))
        return a + b

    return FunctionTool(add)


@pytest.fixture
def snapshots():
    """Collects conversation snapshots from MessagesChanged events."""
    collected: list[tuple[Message, ...]] = []

    def on_event(event: ChatEvent) -> None:
        if isinstance(event, MessagesChanged):
            collected.append(event.messages)

    on_event.collected = collected
    return on_event
