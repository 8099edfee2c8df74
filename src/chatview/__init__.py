"""
chatview: chat conversations against hosted LLM chat completion APIs.

The orchestrator owns the conversation and hides how provider calls,
streamed deltas and tool-call rounds become display-ready messages.
"""

__version__ = "0.1.0"

from .chat import ChatOrchestrator, ChatState
from .config import ChatConfig, ChatTemperature
from .llm import ChatProvider, Message, MessageRole, create_chat_provider
from .tools import BaseTool, FunctionTool, ToolExecutor

__all__ = [
    "ChatOrchestrator",
    "ChatState",
    "ChatConfig",
    "ChatTemperature",
    "ChatProvider",
    "Message",
    "MessageRole",
    "create_chat_provider",
    "BaseTool",
    "FunctionTool",
    "ToolExecutor",
]
