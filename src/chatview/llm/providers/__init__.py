from .anthropic import AnthropicChatProvider
from .deepseek import DeepSeekChatProvider
from .openai import OpenAIChatProvider

__all__ = ["AnthropicChatProvider", "DeepSeekChatProvider", "OpenAIChatProvider"]
