from .base import ChatProvider
from .factory import create_chat_provider
from .models import (
    ErrorTurn,
    Message,
    MessageRole,
    StreamAccumulator,
    StreamEvent,
    TextDelta,
    TextTurn,
    ToolCall,
    ToolCallDelta,
    ToolCallTurn,
    TurnResult,
    interpret_response,
)
from .providers import AnthropicChatProvider, DeepSeekChatProvider, OpenAIChatProvider

__all__ = [
    "ChatProvider",
    "create_chat_provider",
    "ErrorTurn",
    "Message",
    "MessageRole",
    "StreamAccumulator",
    "StreamEvent",
    "TextDelta",
    "TextTurn",
    "ToolCall",
    "ToolCallDelta",
    "ToolCallTurn",
    "TurnResult",
    "interpret_response",
    "AnthropicChatProvider",
    "DeepSeekChatProvider",
    "OpenAIChatProvider",
]
