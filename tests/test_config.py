"""Unit tests for configuration."""
import pytest
from pydantic import ValidationError

from chatview.config import MAX_TOOL_ITERATIONS, STREAM_DEBOUNCE_SECONDS, ChatConfig, ChatTemperature


class TestChatConfig:
    """Tests for ChatConfig."""

    def test_defaults(self):
        config = ChatConfig()
        assert config.stream is False
        assert config.stream_debounce == STREAM_DEBOUNCE_SECONDS
        assert config.max_tool_iterations == MAX_TOOL_ITERATIONS == 10
        assert config.hide_tool_results is True
        assert config.append_error_message is True

    @pytest.mark.parametrize("field,value", [
        ("stream_debounce", -0.1),
        ("max_tool_iterations", 0),
    ])
    def test_validation(self, field, value):
        with pytest.raises(ValidationError):
            ChatConfig(**{field: value})

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CHATVIEW_STREAM", "true")
        monkeypatch.setenv("CHATVIEW_MAX_TOOL_ITERATIONS", "3")
        monkeypatch.setenv("CHATVIEW_SHOW_TOOL_RESULTS", "1")

        config = ChatConfig.from_env()

        assert config.stream is True
        assert config.max_tool_iterations == 3
        assert config.hide_tool_results is False

    def test_from_env_defaults(self, monkeypatch):
        for name in ("CHATVIEW_STREAM", "CHATVIEW_MAX_TOOL_ITERATIONS", "CHATVIEW_SHOW_TOOL_RESULTS"):
            monkeypatch.delenv(name, raising=False)

        assert ChatConfig.from_env() == ChatConfig()


class TestChatTemperature:
    """Tests for the sampling presets."""

    @pytest.mark.parametrize("preset,temperature,top_p", [
        (ChatTemperature.CODE_GENERATION, 0.2, 0.1),
        (ChatTemperature.CREATIVE_WRITING, 0.7, 0.8),
        (ChatTemperature.CHATBOT_RESPONSES, 0.5, 0.5),
        (ChatTemperature.CODE_COMMENT_GENERATION, 0.3, 0.2),
        (ChatTemperature.DATA_ANALYSIS_SCRIPTING, 0.2, 0.1),
        (ChatTemperature.EXPLORATORY_CODE_WRITING, 0.6, 0.7),
    ])
    def test_values(self, preset, temperature, top_p):
        assert preset.temperature == temperature
        assert preset.top_p == top_p
        assert preset.description

    def test_label(self):
        assert ChatTemperature.CODE_GENERATION.label == "Code Generation"

    def test_lookup_by_value(self):
        assert ChatTemperature("creative_writing") is ChatTemperature.CREATIVE_WRITING
