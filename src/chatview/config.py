"""Configuration for chat sessions and providers.

Centralizes defaults, environment variable names and sampling presets.
"""

import os
from enum import Enum

from pydantic import BaseModel, Field

# Streaming configuration
STREAM_DEBOUNCE_SECONDS = 0.03  # Coalescing window for streamed text updates

# Tool loop configuration
MAX_TOOL_ITERATIONS = 10  # Tool rounds allowed per turn

# Error display
ERROR_PREFIX = "An error occurred: "

# Provider defaults
DEFAULT_PROVIDER = "openai"
DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "deepseek": "deepseek-chat",
    "anthropic": "claude-sonnet-4-20250514",
}


class ChatTemperature(str, Enum):
    """Sampling presets for common kinds of conversation."""

    CODE_GENERATION = "code_generation"
    CREATIVE_WRITING = "creative_writing"
    CHATBOT_RESPONSES = "chatbot_responses"
    CODE_COMMENT_GENERATION = "code_comment_generation"
    DATA_ANALYSIS_SCRIPTING = "data_analysis_scripting"
    EXPLORATORY_CODE_WRITING = "exploratory_code_writing"

    @property
    def temperature(self) -> float:
        return _PRESETS[self][0]

    @property
    def top_p(self) -> float:
        return _PRESETS[self][1]

    @property
    def description(self) -> str:
        return _PRESETS[self][2]

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


_PRESETS: dict[ChatTemperature, tuple[float, float, str]] = {
    ChatTemperature.CODE_GENERATION: (
        0.2, 0.1,
        "Generates code that adheres to established patterns and conventions. "
        "Output is more deterministic and focused."
    ),
    ChatTemperature.CREATIVE_WRITING: (
        0.7, 0.8,
        "Generates creative and diverse text for storytelling. "
        "Output is more exploratory and less constrained by patterns."
    ),
    ChatTemperature.CHATBOT_RESPONSES: (
        0.5, 0.5,
        "Generates conversational responses that balance coherence and diversity."
    ),
    ChatTemperature.CODE_COMMENT_GENERATION: (
        0.3, 0.2,
        "Generates code comments that are concise, relevant and conventional."
    ),
    ChatTemperature.DATA_ANALYSIS_SCRIPTING: (
        0.2, 0.1,
        "Generates data analysis scripts that are correct and efficient."
    ),
    ChatTemperature.EXPLORATORY_CODE_WRITING: (
        0.6, 0.7,
        "Generates code that explores alternative solutions and creative approaches."
    ),
}


class ChatConfig(BaseModel):
    """Behaviour of a chat orchestrator.

    Attributes:
        stream: Consume streamed deltas instead of single responses
        stream_debounce: Seconds over which streamed text updates are coalesced
        max_tool_iterations: Tool rounds allowed before a turn fails
        hide_tool_results: Mark tool-result messages as hidden from display
        append_error_message: Add an error-marked message when a turn fails
    """

    stream: bool = False
    stream_debounce: float = Field(default=STREAM_DEBOUNCE_SECONDS, ge=0.0)
    max_tool_iterations: int = Field(default=MAX_TOOL_ITERATIONS, ge=1)
    hide_tool_results: bool = True
    append_error_message: bool = True

    @classmethod
    def from_env(cls) -> "ChatConfig":
        """Build a config from environment variables.

        Environment variables:
            CHATVIEW_STREAM: "1"/"true" to stream (default: false)
            CHATVIEW_MAX_TOOL_ITERATIONS: Tool round limit (default: 10)
            CHATVIEW_SHOW_TOOL_RESULTS: "1"/"true" to display tool results
        """
        return cls(
            stream=_env_flag("CHATVIEW_STREAM", False),
            max_tool_iterations=int(
                os.getenv("CHATVIEW_MAX_TOOL_ITERATIONS", str(MAX_TOOL_ITERATIONS))
            ),
            hide_tool_results=not _env_flag("CHATVIEW_SHOW_TOOL_RESULTS", False),
        )


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")
