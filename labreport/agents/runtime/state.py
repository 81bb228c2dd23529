"""State flowing through the agent step-loop graph."""

from __future__ import annotations

import operator
from typing import Annotated, TypedDict

from langchain_core.messages import BaseMessage


class AgentState(TypedDict):
    """State for one agent run.

    Attributes:
        messages: Conversation so far; each step appends the model reply and
            any tool observations.
        step_count: Model calls made so far.
        max_steps: Ceiling on model calls for this run.
        final_output: Text of the terminal reply, once there is one.
    """

    messages: Annotated[list[BaseMessage], operator.add]
    step_count: int
    max_steps: int
    final_output: str | None
