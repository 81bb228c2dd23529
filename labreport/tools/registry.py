"""Tool registry: name -> schema-typed handler, dispatched on model tool calls."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from langchain_core.utils.function_calling import convert_to_openai_tool
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from labreport.errors import SchemaValidationError, UnknownToolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    """A named tool the model may call.

    The pydantic `schema` is both the contract sent to the model and the
    validator for the arguments it sends back. Its docstring is the tool
    description unless `description` is given.
    """

    name: str
    schema: type[BaseModel]
    handler: Callable[[Any], str]
    description: str | None = None

    def as_openai_tool(self) -> dict[str, Any]:
        spec = convert_to_openai_tool(self.schema)
        spec["function"]["name"] = self.name
        if self.description:
            spec["function"]["description"] = self.description
        return spec

    def invoke(self, args: Mapping[str, Any] | None) -> str:
        try:
            payload = self.schema.model_validate(dict(args or {}))
        except PydanticValidationError as e:
            raise SchemaValidationError(self.name, e.errors(include_url=False)) from e
        return self.handler(payload)


class ToolRegistry:
    """Ordered collection of tools available to one agent."""

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name, self.names()) from None

    def names(self) -> list[str]:
        return list(self._tools)

    def openai_tools(self) -> list[dict[str, Any]]:
        return [tool.as_openai_tool() for tool in self._tools.values()]

    def dispatch(self, name: str, args: Mapping[str, Any] | None) -> str:
        """Validate `args` against the tool's schema and run its handler.

        Raises:
            UnknownToolError: No tool is registered under `name`.
            SchemaValidationError: `args` do not match the tool's schema.
        """
        tool = self.get(name)
        logger.debug("Dispatching tool %s", name)
        return tool.invoke(args)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
