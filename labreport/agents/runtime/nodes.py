"""Node implementations for the agent step loop."""

from __future__ import annotations

import logging
import threading
from typing import Any

from langchain_core.messages import AIMessage, ToolMessage
from langchain_core.runnables import Runnable
from langgraph.graph import END

from labreport.agents.runtime.retry import call_with_retry
from labreport.config import RetryPolicy
from labreport.errors import GenerationCancelled, StepLimitExceeded, ToolError
from labreport.integrations.observability import get_langfuse_callbacks
from labreport.tools.registry import ToolRegistry

from .state import AgentState

logger = logging.getLogger(__name__)


def extract_text(content: Any) -> str:
    """Flatten LangChain message content (string or content blocks) to text."""
    if isinstance(content, str):
        return content

    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and "text" in block and block.get("type", "text") == "text":
                parts.append(str(block["text"]))
        return "\n".join(parts)

    return "" if content is None else str(content)


def call_model(
    state: AgentState,
    model: Runnable,
    agent_name: str,
    retry_policy: RetryPolicy,
    cancel_event: threading.Event | None = None,
) -> dict[str, Any]:
    """Send the conversation to the tool-bound model and record its reply."""
    if cancel_event is not None and cancel_event.is_set():
        raise GenerationCancelled(f"{agent_name} cancelled")

    step = int(state.get("step_count") or 0)
    max_steps = int(state["max_steps"])
    if step >= max_steps:
        raise StepLimitExceeded(agent_name, max_steps)

    config = {"run_name": agent_name, "callbacks": get_langfuse_callbacks()}
    response = call_with_retry(
        lambda: model.invoke(state["messages"], config=config),
        retry_policy,
        description=f"{agent_name} completion",
    )

    tool_calls = getattr(response, "tool_calls", None) or []
    logger.debug("%s step %d/%d: %d tool call(s)", agent_name, step + 1, max_steps, len(tool_calls))

    update: dict[str, Any] = {"messages": [response], "step_count": step + 1}
    if not tool_calls:
        update["final_output"] = extract_text(response.content)
    return update


def execute_tools(state: AgentState, registry: ToolRegistry, agent_name: str) -> dict[str, Any]:
    """Run every tool call of the last model reply, in order, as observations."""
    last = state["messages"][-1]
    observations: list[ToolMessage] = []

    for call in getattr(last, "tool_calls", None) or []:
        name = call.get("name", "")
        try:
            result = registry.dispatch(name, call.get("args"))
        except ToolError as e:
            logger.warning("%s: tool %s failed: %s", agent_name, name, e)
            result = f"Error: {e}"
        observations.append(ToolMessage(content=result, tool_call_id=call.get("id") or name, name=name))

    return {"messages": observations}


def route_after_model(state: AgentState) -> str:
    last = state["messages"][-1]
    if isinstance(last, AIMessage) and last.tool_calls:
        return "execute_tools"
    return END
