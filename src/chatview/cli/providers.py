"""Provider factory functions for CLI.

Centralizes creation of chat providers from environment variables.
Hides configuration details from command implementations.
"""

import os
from typing import Any

import typer
from rich.console import Console

from ..config import DEFAULT_MODELS, DEFAULT_PROVIDER, ChatTemperature
from ..llm import ChatProvider, create_chat_provider

# Default console for output
_console = Console()

_API_KEY_VARS = {
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def get_provider(
    provider: str | None = None,
    model: str | None = None,
    temperature: ChatTemperature = ChatTemperature.CHATBOT_RESPONSES,
    tools: list[dict[str, Any]] | None = None,
    console: Console | None = None
) -> ChatProvider:
    """Create a chat provider from arguments and environment variables.

    Args:
        provider: Provider type (overrides LLM_PROVIDER)
        model: Model name (overrides CHATVIEW_MODEL)
        temperature: Sampling preset
        tools: Tool specifications offered to the model
        console: Optional Rich console for output

    Returns:
        Chat provider instance

    Raises:
        SystemExit: If the provider is unknown or its API key is not set

    Environment variables:
        LLM_PROVIDER: Provider type (openai, deepseek, anthropic; default: openai)
        CHATVIEW_MODEL: Model name (default depends on provider)
        OPENAI_API_KEY: OpenAI API key (for openai provider)
        DEEPSEEK_API_KEY: DeepSeek API key (for deepseek provider)
        ANTHROPIC_API_KEY: Anthropic API key (for anthropic provider)
    """
    con = console or _console
    provider_name = (provider or os.getenv("LLM_PROVIDER", DEFAULT_PROVIDER)).lower()
    if provider_name == "claude":
        provider_name = "anthropic"

    key_var = _API_KEY_VARS.get(provider_name)
    if key_var is None:
        con.print(f"[red]Error: Unknown LLM provider: {provider_name}[/red]")
        raise typer.Exit(code=1)

    api_key = os.getenv(key_var)
    if not api_key:
        con.print(f"[red]Error: {key_var} not set in environment[/red]")
        raise typer.Exit(code=1)

    return create_chat_provider(
        provider_name,
        api_key=api_key,
        model=model or os.getenv("CHATVIEW_MODEL", DEFAULT_MODELS[provider_name]),
        temperature=temperature,
        tools=tools or None,
    )
