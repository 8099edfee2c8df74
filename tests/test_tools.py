"""Unit tests for tools and the tool executor."""
import json

import pytest

from chatview.errors import ToolExecutionFailed, ToolMissingRequiredParameters, ToolNotFound
from chatview.llm import MessageRole, ToolCall
from chatview.tools import (
    BaseTool,
    CurrentDateTimeTool,
    FunctionTool,
    ToolExecutor,
    callable_to_schema,
    parse_arguments,
    serialize_result,
)


class TestBaseTool:
    """Tests for the abstract BaseTool interface."""

    def test_tool_is_abstract(self):
        """Test that BaseTool cannot be instantiated directly."""
        with pytest.raises(TypeError):
            BaseTool()  # type: ignore

    def test_llm_spec(self):
        spec = CurrentDateTimeTool().to_llm_spec()
        assert spec["name"] == "get_date_and_time"
        assert spec["description"] == "Returns the current date and time"
        assert spec["parameters"]["type"] == "object"


class TestFunctionTool:
    """Tests for callable-backed tools."""

    def test_schema_from_signature(self):
        """Test that parameters without defaults are required."""
        def search(query: str, limit: int = 5, exact: bool = False) -> list:
            """Search the index."""
            return []

        schema = callable_to_schema(search)
        assert schema["properties"]["query"]["type"] == "string"
        assert schema["properties"]["limit"]["type"] == "integer"
        assert schema["properties"]["exact"]["type"] == "boolean"
        assert schema["required"] == ["query"]

    def test_name_and_description(self, add_tool):
        assert add_tool.name == "add"
        assert add_tool.description == "Add two numbers."
        assert add_tool.required_parameters == frozenset({"a", "b"})

    def test_explicit_name_and_description(self):
        tool = FunctionTool(lambda: None, name="noop", description="Does nothing")
        assert tool.name == "noop"
        assert tool.description == "Does nothing"

    @pytest.mark.asyncio
    async def test_call_sync_function(self, add_tool):
        assert await add_tool.call({"a": 2, "b": 3}) == 5

    @pytest.mark.asyncio
    async def test_call_async_function(self):
        async def echo(text: str) -> str:
            return text

        tool = FunctionTool(echo)
        assert await tool.call({"text": "hi"}) == "hi"

    @pytest.mark.asyncio
    async def test_unknown_arguments_are_dropped(self, add_tool):
        assert await add_tool.call({"a": 1, "b": 1, "c": 9}) == 2


class TestParseArguments:
    """Tests for lenient argument parsing."""

    def test_object_payload(self):
        assert parse_arguments('{"a": 1}') == {"a": 1}

    @pytest.mark.parametrize("raw", [None, "", "   ", "{not json", "[1, 2]", '"text"', "42"])
    def test_unusable_payloads_become_empty(self, raw):
        assert parse_arguments(raw) == {}


class TestSerializeResult:
    """Tests for tool result encoding."""

    def test_json_result(self):
        assert json.loads(serialize_result({"date": "today"})) == {"date": "today"}

    def test_none_is_success(self):
        assert json.loads(serialize_result(None)) == {"status": "success"}

    def test_unserializable_is_success(self):
        assert json.loads(serialize_result(object())) == {"status": "success"}


class TestToolExecutor:
    """Tests for ToolExecutor."""

    def test_register_duplicate_fails(self, add_tool):
        executor = ToolExecutor([add_tool])
        with pytest.raises(ValueError, match="already registered"):
            executor.register(add_tool)

    def test_specs(self, add_tool):
        executor = ToolExecutor([add_tool, CurrentDateTimeTool()])
        assert [spec["name"] for spec in executor.specs()] == ["add", "get_date_and_time"]
        assert len(executor) == 2
        assert executor.has_tool("add")

    @pytest.mark.asyncio
    async def test_run_unknown_tool(self):
        with pytest.raises(ToolNotFound) as exc_info:
            await ToolExecutor().run("missing", {})
        assert exc_info.value.name == "missing"

    @pytest.mark.asyncio
    async def test_missing_required_parameter_never_invokes_tool(self, add_tool, add_calls):
        """Test that validation fails before the tool runs."""
        executor = ToolExecutor([add_tool])

        with pytest.raises(ToolMissingRequiredParameters) as exc_info:
            await executor.run("add", {"a": 1})

        assert exc_info.value.missing == ["b"]
        assert add_calls == []

    @pytest.mark.asyncio
    async def test_tool_raising_is_wrapped(self):
        def explode() -> None:
            raise RuntimeError("kaboom")

        executor = ToolExecutor([FunctionTool(explode)])
        with pytest.raises(ToolExecutionFailed, match="kaboom"):
            await executor.run("explode", {})

    @pytest.mark.asyncio
    async def test_execute_success(self, add_tool):
        call = ToolCall(id="call_1", name="add", arguments='{"a": 2, "b": 3}')
        message = await ToolExecutor([add_tool]).execute(call)

        assert message.role == MessageRole.TOOL
        assert message.text == "5"
        assert message.tool_call == call
        assert message.is_hidden

    @pytest.mark.asyncio
    async def test_execute_can_show_results(self, add_tool):
        call = ToolCall(name="add", arguments='{"a": 2, "b": 3}')
        message = await ToolExecutor([add_tool], hide_results=False).execute(call)
        assert not message.is_hidden

    @pytest.mark.asyncio
    async def test_execute_reports_missing_parameters_to_model(self, add_tool, add_calls):
        call = ToolCall(name="add", arguments="not json")
        message = await ToolExecutor([add_tool]).execute(call)

        payload = json.loads(message.text)
        assert payload["status"] == "failed"
        assert "a, b" in payload["error"]
        assert add_calls == []

    @pytest.mark.asyncio
    async def test_execute_reports_tool_failure_to_model(self):
        def explode() -> None:
            raise RuntimeError("kaboom")

        message = await ToolExecutor([FunctionTool(explode)]).execute(ToolCall(name="explode"))
        assert json.loads(message.text) == {"status": "failed", "error": "kaboom"}

    @pytest.mark.asyncio
    async def test_execute_unknown_tool_propagates(self):
        with pytest.raises(ToolNotFound):
            await ToolExecutor().execute(ToolCall(name="missing"))


class TestCurrentDateTimeTool:
    """Tests for the bundled date/time tool."""

    @pytest.mark.asyncio
    async def test_returns_date(self):
        result = await CurrentDateTimeTool().call({})
        assert set(result) == {"date"}
        assert result["date"]
