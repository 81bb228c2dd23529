"""LangGraph wiring for the agent step loop."""

from __future__ import annotations

import threading
from typing import Any, cast

from langchain_core.runnables import Runnable
from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from labreport.config import RetryPolicy
from labreport.tools.registry import ToolRegistry

from .nodes import call_model, execute_tools, route_after_model
from .state import AgentState


def create_agent_graph(
    model: Runnable,
    registry: ToolRegistry,
    agent_name: str,
    retry_policy: RetryPolicy,
    cancel_event: threading.Event | None = None,
) -> CompiledStateGraph:
    """Create the bounded step loop for one agent.

    Flow:
    - call_model: one model round trip (checks cancellation and the step ceiling)
    - execute_tools: dispatch requested tools, append observations, loop back
    - END once the model answers without tool calls
    """
    graph = StateGraph(AgentState)

    def _call_model(state: Any) -> dict[str, Any]:
        return call_model(cast(AgentState, state), model, agent_name, retry_policy, cancel_event)

    def _execute_tools(state: Any) -> dict[str, Any]:
        return execute_tools(cast(AgentState, state), registry, agent_name)

    graph.add_node("call_model", _call_model)
    graph.add_node("execute_tools", _execute_tools)

    graph.set_entry_point("call_model")
    graph.add_conditional_edges(
        "call_model",
        route_after_model,
        {"execute_tools": "execute_tools", END: END},
    )
    graph.add_edge("execute_tools", "call_model")

    return graph.compile()
