"""Agent definition and runner for the bounded tool-calling step loop."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import cast

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langgraph.errors import GraphRecursionError

from labreport.config import RetryPolicy
from labreport.errors import StepLimitExceeded
from labreport.tools.registry import ToolRegistry

from .graph import create_agent_graph
from .state import AgentState


@dataclass(frozen=True)
class AgentDefinition:
    """A bound (model, instructions, tool set) triple."""

    name: str
    instructions: str
    registry: ToolRegistry = field(default_factory=ToolRegistry)
    max_steps: int = 10


class AgentRunner:
    """Runs an agent definition as a bounded step loop.

    Each step sends the conversation to the model. Tool calls are validated
    and executed through the definition's registry and their results are fed
    back as observations; a reply without tool calls ends the run.

    Example:
        ```python
        runner = AgentRunner(llm=llm, definition=AgentDefinition(
            name="experiment-writer", instructions=WRITER_INSTRUCTIONS, registry=registry,
        ))
        text = runner.run("Write Experiment No. 1: Ohm's law", max_steps=10)
        ```
    """

    def __init__(
        self,
        llm: BaseChatModel,
        definition: AgentDefinition,
        retry_policy: RetryPolicy | None = None,
    ):
        self.llm = llm
        self.definition = definition
        self.retry_policy = retry_policy or RetryPolicy()
        tools = definition.registry.openai_tools()
        self.model = llm.bind_tools(tools) if tools else llm

    def run(
        self,
        prompt: str,
        max_steps: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> str:
        """Run the loop on `prompt` and return the model's final text.

        Raises:
            StepLimitExceeded: `max_steps` model calls without a final answer.
            RemoteServiceError: The chat API kept failing.
            GenerationCancelled: `cancel_event` was set.
        """
        return self.run_state(prompt, max_steps=max_steps, cancel_event=cancel_event)["final_output"] or ""

    def run_state(
        self,
        prompt: str,
        max_steps: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> AgentState:
        """Like `run`, but return the full final state (messages included)."""
        steps = max_steps if max_steps is not None else self.definition.max_steps
        graph = create_agent_graph(
            model=self.model,
            registry=self.definition.registry,
            agent_name=self.definition.name,
            retry_policy=self.retry_policy,
            cancel_event=cancel_event,
        )
        initial_state = AgentState(
            messages=[SystemMessage(content=self.definition.instructions), HumanMessage(content=prompt)],
            step_count=0,
            max_steps=steps,
            final_output=None,
        )
        config = {"recursion_limit": 2 * steps + 3}
        try:
            return cast(AgentState, graph.invoke(initial_state, config=config))
        except GraphRecursionError as e:
            raise StepLimitExceeded(self.definition.name, steps) from e
