"""Exception taxonomy shared by the runtime, the tools and the HTTP facade.

Tool-level errors (`ToolError` and subclasses) are turned into textual
observations by the agent runtime so the model can adapt. Everything else
propagates to the caller and is mapped to a JSON response by the facade.
"""

from __future__ import annotations

from typing import Any


class LabReportError(Exception):
    """Base class for all labreport errors."""


class ValidationError(LabReportError):
    """A generation request is missing required fields or has invalid values."""


class StepLimitExceeded(LabReportError):
    """An agent reached its step ceiling without producing a final answer."""

    def __init__(self, agent_name: str, max_steps: int):
        self.agent_name = agent_name
        self.max_steps = max_steps
        super().__init__(
            f"{agent_name} did not finish within {max_steps} steps. "
            "Raise the step limit or reduce the number of experiments."
        )


class RemoteServiceError(LabReportError):
    """The chat-completion API failed (transport, auth or rate limit)."""


class RenderError(LabReportError):
    """The PDF could not be produced (empty or missing source, renderer failure)."""


class ReportIncompleteError(LabReportError):
    """The orchestrator finished before every experiment was written."""

    def __init__(self, written: int, expected: int):
        self.written = written
        self.expected = expected
        super().__init__(
            f"Report generation stopped after {written} of {expected} experiments."
        )


class GenerationCancelled(LabReportError):
    """The caller went away; the run was stopped before the next model call."""


class ToolError(LabReportError):
    """A tool call could not be executed. Reported back to the model."""


class UnknownToolError(ToolError):
    def __init__(self, name: str, available: list[str]):
        self.name = name
        super().__init__(
            f"Unknown tool '{name}'. Available tools: {', '.join(available) or 'none'}."
        )


class SchemaValidationError(ToolError):
    """Tool arguments do not match the tool's declared input schema."""

    def __init__(self, tool_name: str, errors: list[dict[str, Any]]):
        self.tool_name = tool_name
        self.errors = errors
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ())) or '<root>'}: {err.get('msg')}"
            for err in errors
        )
        super().__init__(f"Invalid arguments for '{tool_name}': {details}")
