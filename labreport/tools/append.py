"""`append_to_file`: the writer's only tool."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from labreport.report.buffer import ReportBuffer
from labreport.tools.registry import Tool

logger = logging.getLogger(__name__)

APPEND_TOOL_NAME = "append_to_file"


class AppendToFile(BaseModel):
    """Appends the generated experiment content to the report markdown."""

    content: str = Field(..., description="The markdown content to append")


def create_append_tool(buffer: ReportBuffer) -> Tool:
    """Bind the append tool to one buffer."""

    def _append(args: AppendToFile) -> str:
        logger.info("Writing %d characters to report %s", len(args.content), buffer.report_id or "<draft>")
        try:
            buffer.append(args.content)
        except (OSError, RuntimeError) as e:
            logger.error("Error writing: %s", e)
            return f"Error writing: {e}"
        return "Successfully appended content"

    return Tool(name=APPEND_TOOL_NAME, schema=AppendToFile, handler=_append)
