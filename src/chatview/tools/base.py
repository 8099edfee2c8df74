"""Tool abstractions the model can call during a chat turn."""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, get_type_hints

_JSON_TYPES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


class BaseTool(ABC):
    """Abstract base class for tools.

    A tool declares a unique name, a description for the model and a JSON
    schema for its parameters. Parameters listed in the schema's `required`
    array are checked before `call` runs.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the tool name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get the tool description for the LLM."""
        pass

    @property
    @abstractmethod
    def parameters_schema(self) -> dict[str, Any]:
        """Get the JSON schema for tool parameters."""
        pass

    @property
    def required_parameters(self) -> frozenset[str]:
        """Names of parameters that must be present in every call."""
        return frozenset(self.parameters_schema.get("required", []))

    @abstractmethod
    async def call(self, parameters: dict[str, Any]) -> Any:
        """Run the tool.

        Args:
            parameters: Parsed call arguments

        Returns:
            A JSON-serializable result
        """
        pass

    def to_llm_spec(self) -> dict[str, Any]:
        """Convert tool to LLM-friendly specification.

        Returns:
            Dictionary describing the tool for the LLM
        """
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters_schema
        }


def callable_to_schema(func: Callable[..., Any]) -> dict[str, Any]:
    """Build a JSON parameters schema from a callable's signature.

    Parameters without a default are required. Unannotated or unknown
    annotations fall back to "string".
    """
    sig = inspect.signature(func)
    try:
        type_hints = get_type_hints(func)
    except (NameError, TypeError):
        type_hints = {}

    schema: dict[str, Any] = {"type": "object", "properties": {}, "required": []}
    for param_name, param in sig.parameters.items():
        if param_name == "self" or param.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        ):
            continue

        json_type = _JSON_TYPES.get(type_hints.get(param_name, str), "string")
        schema["properties"][param_name] = {
            "type": json_type,
            "description": f"The {param_name} parameter"
        }
        if param.default is inspect.Parameter.empty:
            schema["required"].append(param_name)

    return schema


class FunctionTool(BaseTool):
    """Tool backed by a plain or async Python callable.

    The schema is derived from the callable's signature and the description
    from its docstring unless given explicitly.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        name: str | None = None,
        description: str | None = None
    ):
        self._func = func
        self._name = name or func.__name__
        if description is None:
            doc = inspect.getdoc(func)
            description = doc.strip() if doc else f"Execute {self._name}"
        self._description = description
        self._schema = callable_to_schema(func)
        self._accepts_any = any(
            p.kind is inspect.Parameter.VAR_KEYWORD
            for p in inspect.signature(func).parameters.values()
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def parameters_schema(self) -> dict[str, Any]:
        return self._schema

    async def call(self, parameters: dict[str, Any]) -> Any:
        if self._accepts_any:
            kwargs = dict(parameters)
        else:
            known = self._schema["properties"]
            kwargs = {k: v for k, v in parameters.items() if k in known}

        result = self._func(**kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result
