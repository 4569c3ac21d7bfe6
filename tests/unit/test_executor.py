"""Tests for tool-call execution."""

import asyncio

import pytest

from agent_dispatch.agents.base import AgentConfig, BaseAgent
from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.messages import (
    AssistantMessage,
    MessageRole,
    ToolCall,
    ToolDefinition,
)
from tests.unit.fake_gateway import ScriptedGateway

ECHO_TOOL = ToolDefinition(
    name="echo",
    description="Echo the text back",
    parameters={"text": {"type": "string"}},
    required=("text",),
)


class EchoAgent(BaseAgent):
    def __init__(self, gateway, executor=None, handlers=None):
        self._extra = handlers or {}
        super().__init__(
            AgentConfig(name="echo", instructions="Echo things", tools=[ECHO_TOOL]),
            gateway,
            executor,
        )

    def tool_handlers(self):
        return {"echo": lambda args, ctx: {"text": args["text"]}, **self._extra}

    def summarize(self, output):
        return f"echoed {output['text']}"


@pytest.fixture
def gateway():
    return ScriptedGateway(default="follow-up")


@pytest.fixture
def executor(gateway):
    return ToolCallExecutor(gateway, tool_timeout=0.2)


async def test_results_keep_call_order(gateway, executor):
    async def slow(args, ctx):
        await asyncio.sleep(0.05)
        return "slow"

    agent = EchoAgent(gateway, executor, handlers={"slow": slow})
    calls = [
        ToolCall(id="a", name="slow", arguments={}),
        ToolCall(id="b", name="echo", arguments='{"text": "hi"}'),
    ]

    results = await executor.execute(agent, calls)

    assert [r.tool_call_id for r in results] == ["a", "b"]
    assert results[0].output == "slow"
    assert results[1].output == {"text": "hi"}


async def test_missing_required_argument_becomes_error_result(gateway, executor):
    agent = EchoAgent(gateway, executor)

    [result] = await executor.execute(agent, [ToolCall(name="echo", arguments={})])

    assert not result.ok
    assert result.output is None
    assert result.error.type == "ArgumentParseError"
    assert "text" in result.error.message


async def test_malformed_arguments_become_error_result(gateway, executor):
    agent = EchoAgent(gateway, executor)

    [result] = await executor.execute(agent, [ToolCall(name="echo", arguments="[1, 2]")])

    assert result.error.type == "ArgumentParseError"


async def test_invalid_escape_in_arguments_becomes_error_result(gateway, executor):
    agent = EchoAgent(gateway, executor)
    call = ToolCall(name="echo", arguments='{"text": "Paris\\q", broken')

    [result] = await executor.execute(agent, [call])

    assert result.error.type == "ArgumentParseError"


async def test_unknown_tool_is_not_implemented(gateway, executor):
    agent = EchoAgent(gateway, executor)

    [result] = await executor.execute(agent, [ToolCall(name="teleport", arguments={})])

    assert result.error.type == "ToolNotImplementedError"


async def test_handler_exception_is_contained(gateway, executor):
    def broken(args, ctx):
        raise KeyError("boom")

    agent = EchoAgent(gateway, executor, handlers={"broken": broken})

    [result] = await executor.execute(agent, [ToolCall(name="broken", arguments={})])

    assert result.error.type == "ToolExecutionError"


async def test_handler_timeout_is_contained(gateway, executor):
    async def hang(args, ctx):
        await asyncio.sleep(5)

    agent = EchoAgent(gateway, executor, handlers={"hang": hang})

    [result] = await executor.execute(agent, [ToolCall(name="hang", arguments={})])

    assert result.error.type == "ToolExecutionError"
    assert "timed out" in result.error.message


async def test_run_round_records_results_and_requests_one_follow_up(gateway, executor):
    agent = EchoAgent(gateway, executor)
    conversation = ConversationContext("sys")
    message = AssistantMessage(
        tool_calls=[ToolCall(name="echo", arguments={"text": "hello"})], agent_id="echo"
    )

    tool_round = await executor.run_round(agent, conversation, message)

    assert tool_round.last_success.output == {"text": "hello"}
    assert tool_round.follow_up.content == "follow-up"
    assert tool_round.follow_up.tool_calls is None
    assert gateway.calls[-1]["allow_tools"] is False
    roles = [m.role for m in conversation.messages]
    assert roles == [MessageRole.SYSTEM, MessageRole.TOOL, MessageRole.ASSISTANT]


async def test_run_round_without_tool_calls(gateway, executor):
    agent = EchoAgent(gateway, executor)
    conversation = ConversationContext("sys")

    assert await executor.run_round(agent, conversation, AssistantMessage(content="hi")) is None
    assert gateway.calls == []
