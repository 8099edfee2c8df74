"""Tools the model can call during a chat turn."""

from .base import BaseTool, FunctionTool, callable_to_schema
from .builtin import CurrentDateTimeTool
from .executor import ToolExecutor, parse_arguments, serialize_result

__all__ = [
    "BaseTool",
    "FunctionTool",
    "callable_to_schema",
    "CurrentDateTimeTool",
    "ToolExecutor",
    "parse_arguments",
    "serialize_result",
]
