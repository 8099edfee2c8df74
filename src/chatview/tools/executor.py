"""Tool execution for tool-call turns."""

import json
from typing import Any

import structlog
from pydantic import BaseModel

from ..errors import (
    ToolExecutionFailed,
    ToolMissingRequiredParameters,
    ToolNotFound,
)
from ..llm.models import Message, MessageRole, ToolCall
from .base import BaseTool

log = structlog.get_logger(__name__)


def parse_arguments(raw: str | None) -> dict[str, Any]:
    """Parse a raw argument payload into a parameter mapping.

    Unparseable payloads, and payloads that are not JSON objects, yield an
    empty mapping rather than an error.
    """
    if not raw or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def serialize_result(result: Any) -> str:
    """Serialize a tool result for the tool-result message."""
    if isinstance(result, BaseModel):
        result = result.model_dump(mode="json")
    if result is None:
        result = {"status": "success"}
    try:
        return json.dumps(result, indent=2)
    except (TypeError, ValueError):
        return json.dumps({"status": "success"}, indent=2)


def failure_payload(description: str) -> str:
    return json.dumps({"status": "failed", "error": description}, indent=2)


class ToolExecutor:
    """Registry of tools keyed by name, and the runner for tool calls.

    Hidden design decisions:
    - Argument parsing leniency
    - Required parameter validation
    - Result and failure encoding for the provider
    """

    def __init__(self, tools: list[BaseTool] | None = None, hide_results: bool = True):
        """Initialize the executor.

        Args:
            tools: Tools available to the model
            hide_results: Mark tool-result messages as hidden from display
        """
        self._tools: dict[str, BaseTool] = {}
        self.hide_results = hide_results
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: BaseTool) -> "ToolExecutor":
        """Add a tool.

        Returns:
            Self for method chaining
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool {tool.name} already registered")
        self._tools[tool.name] = tool
        return self

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    @property
    def tools(self) -> list[BaseTool]:
        return list(self._tools.values())

    def specs(self) -> list[dict[str, Any]]:
        """LLM specifications of every registered tool."""
        return [tool.to_llm_spec() for tool in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    async def run(self, name: str, parameters: dict[str, Any]) -> Any:
        """Validate and invoke a tool.

        Raises:
            ToolNotFound: No tool is registered under `name`
            ToolMissingRequiredParameters: A required parameter is absent;
                the tool is not invoked
            ToolExecutionFailed: The tool raised
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFound(name)

        missing = sorted(p for p in tool.required_parameters if p not in parameters)
        if missing:
            raise ToolMissingRequiredParameters(name, missing)

        try:
            return await tool.call(parameters)
        except Exception as e:
            raise ToolExecutionFailed(str(e) or e.__class__.__name__) from e

    async def execute(self, call: ToolCall) -> Message:
        """Run a tool call and encode the outcome as a tool-result message.

        Parameter and execution failures are reported to the model as a
        `{"status": "failed"}` payload. An unknown tool propagates.

        Raises:
            ToolNotFound: No tool is registered under the call's name
        """
        parameters = parse_arguments(call.arguments)
        try:
            result = await self.run(call.name, parameters)
            content = serialize_result(result)
        except (ToolMissingRequiredParameters, ToolExecutionFailed) as e:
            log.warning("tool.failed", tool=call.name, call_id=call.id, error=str(e))
            content = failure_payload(str(e))

        return Message(
            text=content,
            role=MessageRole.TOOL,
            is_hidden=self.hide_results,
            tool_call=call,
        )
