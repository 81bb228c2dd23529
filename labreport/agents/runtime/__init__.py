"""Bounded tool-calling step loop shared by the report agents."""

from labreport.agents.runtime.agent import AgentDefinition, AgentRunner
from labreport.agents.runtime.graph import create_agent_graph
from labreport.agents.runtime.nodes import extract_text
from labreport.agents.runtime.state import AgentState

__all__ = [
    "AgentDefinition",
    "AgentRunner",
    "AgentState",
    "create_agent_graph",
    "extract_text",
]
