"""Tools module - schema-typed tools the report agents may call."""

from labreport.tools.append import APPEND_TOOL_NAME, AppendToFile, create_append_tool
from labreport.tools.registry import Tool, ToolRegistry

__all__ = [
    "APPEND_TOOL_NAME",
    "AppendToFile",
    "Tool",
    "ToolRegistry",
    "create_append_tool",
]
