"""Scripted chat models standing in for the remote LLM in tests."""

from __future__ import annotations

import itertools
import re
from typing import Any, Callable

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage

_call_ids = itertools.count(1)


def tool_call(name: str, args: dict[str, Any], call_id: str | None = None) -> AIMessage:
    """An assistant reply requesting a single tool call."""
    return AIMessage(
        content="",
        tool_calls=[{"name": name, "args": args, "id": call_id or f"call_{next(_call_ids)}", "type": "tool_call"}],
    )


def final(text: str) -> AIMessage:
    return AIMessage(content=text)


class ScriptedChatModel:
    """Minimal chat model: `bind_tools` returns itself, `invoke` replays a script.

    Script items are AIMessages, exceptions (raised) or callables taking the
    message list. With `responder` every call is answered by that callable.
    """

    def __init__(
        self,
        responses: list[Any] | None = None,
        responder: Callable[[list[BaseMessage]], AIMessage] | None = None,
    ):
        self.responses = list(responses or [])
        self.responder = responder
        self.calls: list[list[BaseMessage]] = []
        self.configs: list[Any] = []
        self.bound_tools: list[dict[str, Any]] = []

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = list(tools)
        return self

    def invoke(self, messages, config=None, **kwargs):
        self.calls.append(list(messages))
        self.configs.append(config)
        if self.responder is not None:
            return self.responder(list(messages))
        if not self.responses:
            raise AssertionError("ScriptedChatModel ran out of responses")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(list(messages))
        return item


def prompt_of(messages: list[BaseMessage]) -> str:
    return next(m.content for m in messages if isinstance(m, HumanMessage))


def compliant_section(number: int, topic: str, headings: list[str]) -> str:
    body = "".join(f"### {h}\n\n{h} of {topic}.\n\n" for h in headings)
    return f"## Experiment No. {number}: {topic}\n\n{body}---"


def parse_writer_prompt(prompt: str) -> tuple[int, str, list[str]]:
    m = re.search(r"Write Experiment No\. (\d+): (.+)", prompt)
    assert m, prompt
    required = prompt.split("## REQUIRED HEADINGS", 1)[1].split("## Instructions", 1)[0]
    headings = re.findall(r"^\d+\. (.+)$", required, flags=re.MULTILINE)
    return int(m.group(1)), m.group(2).strip(), headings


def compliant_writer(messages: list[BaseMessage]) -> AIMessage:
    """Writer that appends a well-formed section once, then reports done."""
    if isinstance(messages[-1], ToolMessage):
        return final("DONE: Experiment written successfully")
    number, topic, headings = parse_writer_prompt(prompt_of(messages))
    return tool_call("append_to_file", {"content": compliant_section(number, topic, headings)})


def ordered_orchestrator(experiments: list[str], headings: list[str], summary: str = "All experiments written."):
    """Orchestrator script delegating each experiment in order, then summarizing."""
    script: list[Any] = [
        tool_call(
            "write_experiment",
            {
                "experiment_number": i,
                "experiment_topic": topic,
                "headings": headings,
                "total_experiments": len(experiments),
            },
        )
        for i, topic in enumerate(experiments, start=1)
    ]
    script.append(final(summary))
    return ScriptedChatModel(script)
