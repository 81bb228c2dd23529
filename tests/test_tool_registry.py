"""Tests for tool registration, schema validation and dispatch."""

import pytest
from pydantic import BaseModel, Field

from labreport.errors import SchemaValidationError, ToolError, UnknownToolError
from labreport.report import ReportBuffer
from labreport.tools import APPEND_TOOL_NAME, Tool, ToolRegistry, create_append_tool


class _Echo(BaseModel):
    """Echoes the text back."""

    text: str = Field(..., description="Text to echo")
    times: int = Field(1, ge=1)


def _echo_tool() -> Tool:
    return Tool(name="echo", schema=_Echo, handler=lambda args: args.text * args.times)


def test_dispatch_validates_and_runs_handler():
    registry = ToolRegistry([_echo_tool()])
    assert registry.dispatch("echo", {"text": "ab", "times": 2}) == "abab"


def test_dispatch_rejects_arguments_not_matching_schema():
    registry = ToolRegistry([_echo_tool()])
    with pytest.raises(SchemaValidationError) as exc:
        registry.dispatch("echo", {"times": 0})
    message = str(exc.value)
    assert "echo" in message
    assert "text" in message
    assert "times" in message


def test_unknown_tool_lists_available_tools():
    registry = ToolRegistry([_echo_tool()])
    with pytest.raises(UnknownToolError) as exc:
        registry.dispatch("search", {})
    assert isinstance(exc.value, ToolError)
    assert "echo" in str(exc.value)


def test_duplicate_registration_is_rejected():
    registry = ToolRegistry([_echo_tool()])
    with pytest.raises(ValueError):
        registry.register(_echo_tool())


def test_openai_tool_uses_registered_name_and_schema():
    spec = _echo_tool().as_openai_tool()
    assert spec["type"] == "function"
    assert spec["function"]["name"] == "echo"
    assert spec["function"]["description"] == "Echoes the text back."
    assert "text" in spec["function"]["parameters"]["properties"]
    assert spec["function"]["parameters"]["required"] == ["text"]


def test_append_tool_appends_to_its_buffer():
    buffer = ReportBuffer("r1")
    registry = ToolRegistry([create_append_tool(buffer)])

    assert APPEND_TOOL_NAME in registry
    assert registry.dispatch(APPEND_TOOL_NAME, {"content": "## Experiment No. 1: A"}) == "Successfully appended content"
    assert buffer.read() == "## Experiment No. 1: A\n\n"


def test_append_tool_reports_write_failure_as_text():
    buffer = ReportBuffer("r1")
    buffer.close()
    tool = create_append_tool(buffer)

    result = tool.invoke({"content": "late"})

    assert result.startswith("Error writing:")
    assert buffer.read() == ""
