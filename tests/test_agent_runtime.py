"""Tests for the bounded tool-calling step loop."""

import threading

import httpx
import openai
import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage
from pydantic import BaseModel

from fakes import ScriptedChatModel, final, tool_call
from labreport.agents.runtime import AgentDefinition, AgentRunner, extract_text
from labreport.errors import GenerationCancelled, RemoteServiceError, StepLimitExceeded
from labreport.tools import Tool, ToolRegistry

_REQUEST = httpx.Request("POST", "https://api.test/v1/chat/completions")


class _Note(BaseModel):
    """Records a note."""

    text: str


def _runner(llm, notes, max_steps=5, retry_policy=None):
    registry = ToolRegistry(
        [Tool(name="note", schema=_Note, handler=lambda args: notes.append(args.text) or "noted")]
    )
    definition = AgentDefinition(name="tester", instructions="Be brief.", registry=registry, max_steps=max_steps)
    return AgentRunner(llm=llm, definition=definition, retry_policy=retry_policy)


def _connection_error():
    return openai.APIConnectionError(request=_REQUEST)


def test_final_answer_without_tool_calls_ends_the_run():
    llm = ScriptedChatModel([final("All done.")])
    notes: list[str] = []

    assert _runner(llm, notes).run("hello") == "All done."
    assert notes == []
    first_call = llm.calls[0]
    assert isinstance(first_call[0], SystemMessage)
    assert first_call[0].content == "Be brief."
    assert isinstance(first_call[1], HumanMessage)
    assert first_call[1].content == "hello"


def test_tools_are_bound_in_openai_format():
    llm = ScriptedChatModel([final("ok")])
    _runner(llm, [])
    assert [t["function"]["name"] for t in llm.bound_tools] == ["note"]


def test_tool_results_are_fed_back_as_observations():
    llm = ScriptedChatModel([tool_call("note", {"text": "first"}, call_id="c1"), final("finished")])
    notes: list[str] = []

    state = _runner(llm, notes).run_state("go")

    assert notes == ["first"]
    assert state["final_output"] == "finished"
    assert state["step_count"] == 2
    observation = llm.calls[1][-1]
    assert isinstance(observation, ToolMessage)
    assert observation.tool_call_id == "c1"
    assert observation.content == "noted"


def test_invalid_tool_arguments_become_an_error_observation():
    llm = ScriptedChatModel([tool_call("note", {"txt": "typo"}), final("recovered")])
    notes: list[str] = []

    assert _runner(llm, notes).run("go") == "recovered"
    observation = llm.calls[1][-1]
    assert isinstance(observation, ToolMessage)
    assert observation.content.startswith("Error: Invalid arguments for 'note'")
    assert notes == []


def test_unknown_tool_becomes_an_error_observation():
    llm = ScriptedChatModel([tool_call("search", {"q": "x"}), final("ok")])

    assert _runner(llm, []).run("go") == "ok"
    assert "Unknown tool 'search'" in llm.calls[1][-1].content


def test_step_limit_raises_after_max_steps_model_calls():
    llm = ScriptedChatModel([tool_call("note", {"text": str(i)}) for i in range(10)])
    notes: list[str] = []

    with pytest.raises(StepLimitExceeded) as exc:
        _runner(llm, notes, max_steps=3).run("loop forever")

    assert exc.value.max_steps == 3
    assert exc.value.agent_name == "tester"
    assert len(llm.calls) == 3
    assert notes == ["0", "1", "2"]


def test_max_steps_argument_overrides_definition():
    llm = ScriptedChatModel([tool_call("note", {"text": str(i)}) for i in range(10)])
    with pytest.raises(StepLimitExceeded):
        _runner(llm, [], max_steps=10).run("go", max_steps=2)
    assert len(llm.calls) == 2


def test_transient_error_is_retried(fast_retry):
    llm = ScriptedChatModel([_connection_error(), final("after retry")])

    assert _runner(llm, [], retry_policy=fast_retry).run("go") == "after retry"
    assert len(llm.calls) == 2


def test_exhausted_retries_raise_remote_service_error(fast_retry):
    llm = ScriptedChatModel([_connection_error() for _ in range(fast_retry.max_tries)])

    with pytest.raises(RemoteServiceError):
        _runner(llm, [], retry_policy=fast_retry).run("go")
    assert len(llm.calls) == fast_retry.max_tries


def test_non_transient_api_error_is_not_retried(fast_retry):
    auth_error = openai.AuthenticationError(
        "Invalid API key", response=httpx.Response(401, request=_REQUEST), body=None
    )
    llm = ScriptedChatModel([auth_error, final("never")])

    with pytest.raises(RemoteServiceError) as exc:
        _runner(llm, [], retry_policy=fast_retry).run("go")
    assert "Invalid API key" in str(exc.value)
    assert len(llm.calls) == 1


def test_cancel_event_stops_before_next_model_call():
    cancel = threading.Event()

    def cancel_then_call(messages):
        cancel.set()
        return tool_call("note", {"text": "x"})

    llm = ScriptedChatModel([cancel_then_call, final("unreachable")])

    with pytest.raises(GenerationCancelled):
        _runner(llm, []).run("go", cancel_event=cancel)
    assert len(llm.calls) == 1


def test_extract_text_flattens_content_blocks():
    assert extract_text("plain") == "plain"
    assert extract_text([{"type": "text", "text": "a"}, "b", {"type": "image_url", "image_url": {}}]) == "a\nb"
    assert extract_text(None) == ""
    assert extract_text(AIMessage(content="x").content) == "x"
