"""Tests for the command line interface."""
import asyncio
import io

import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

from chatview.chat import ChatOrchestrator, ChatState
from chatview.cli.app import TurnView, app
from chatview.cli.providers import get_provider
from chatview.config import ChatTemperature
from chatview.errors import Cancelled
from chatview.llm import AnthropicChatProvider, Message, OpenAIChatProvider

from tests.fakes import ScriptedProvider

runner = CliRunner()


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "LLM_PROVIDER", "CHATVIEW_MODEL", "CHATVIEW_LOG_FORMAT", "CHATVIEW_STREAM",
        "OPENAI_API_KEY", "DEEPSEEK_API_KEY", "ANTHROPIC_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestPresetsCommand:
    def test_lists_presets(self):
        result = runner.invoke(app, ["presets"])

        assert result.exit_code == 0
        assert "exploratory_code_writing" in result.output
        assert "Temperature" in result.output


class TestChatCommand:
    def test_missing_api_key(self, clean_env):
        result = runner.invoke(app, ["chat", "--provider", "openai"])

        assert result.exit_code == 1
        assert "OPENAI_API_KEY not set" in result.output

    def test_unknown_provider(self, clean_env):
        result = runner.invoke(app, ["chat", "--provider", "gemini"])

        assert result.exit_code == 1
        assert "Unknown LLM provider" in result.output

    def test_invalid_log_format(self, clean_env):
        result = runner.invoke(app, ["chat", "--log-format", "xml"])

        assert result.exit_code == 1
        assert "Invalid log format" in result.output


class TestGetProvider:
    def test_from_environment(self, clean_env):
        clean_env.setenv("LLM_PROVIDER", "claude")
        clean_env.setenv("ANTHROPIC_API_KEY", "test-key")
        clean_env.setenv("CHATVIEW_MODEL", "claude-test")

        provider = get_provider()

        assert isinstance(provider, AnthropicChatProvider)
        assert provider.model == "claude-test"

    def test_arguments_override_environment(self, clean_env):
        clean_env.setenv("LLM_PROVIDER", "anthropic")
        clean_env.setenv("OPENAI_API_KEY", "test-key")

        provider = get_provider(provider="openai", temperature=ChatTemperature.CODE_GENERATION)

        assert isinstance(provider, OpenAIChatProvider)
        assert provider.model == "gpt-4o-mini"

    def test_missing_key_exits(self, clean_env):
        with pytest.raises(typer.Exit):
            get_provider(provider="deepseek")


class TestTurnView:
    @pytest.mark.asyncio
    async def test_prints_reply(self):
        output = io.StringIO()
        chat = ChatOrchestrator(ScriptedProvider(responses=[Message.assistant("hello")]))
        view = TurnView(Console(file=output, width=80))

        chat.send("hi")
        await view.follow(chat)

        assert "Assistant:" in output.getvalue()
        assert "hello" in output.getvalue()

    @pytest.mark.asyncio
    async def test_interrupt_cancels_turn(self):
        """Test that cancelling the follower stops the turn and returns normally."""
        gate = asyncio.Event()
        output = io.StringIO()
        chat = ChatOrchestrator(ScriptedProvider(responses=[Message.assistant("hello")], gate=gate))
        view = TurnView(Console(file=output, width=80))

        chat.send("hi")
        follower = asyncio.create_task(view.follow(chat))
        await asyncio.sleep(0.01)
        follower.cancel()
        await follower

        assert not follower.cancelled()
        assert "Cancelled." in output.getvalue()
        result = await chat.wait()
        assert isinstance(result.error, Cancelled)
        assert chat.state == ChatState.IDLE
        assert [m.text for m in chat.messages] == ["hi"]
