"""Tests for the bounded conversation log."""

import pytest

from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.protocol.messages import (
    Message,
    MessageRole,
    ToolCall,
    ToolResult,
)


def _user(text):
    return Message(role=MessageRole.USER, content=text)


def _assistant(text, agent="flight", tool_calls=None):
    return Message(
        role=MessageRole.ASSISTANT, content=text, agent_tag=agent, tool_calls=tool_calls
    )


def test_system_message_is_pinned_first():
    context = ConversationContext("You are helpful", max_history=4)
    context.append(_user("hi"))

    messages = context.messages
    assert messages[0].role == MessageRole.SYSTEM
    assert messages[0].content == "You are helpful"
    assert len(context) == 1


def test_append_rejects_system_messages():
    context = ConversationContext("sys")
    with pytest.raises(ValueError):
        context.append(Message(role=MessageRole.SYSTEM, content="again"))


def test_history_bound_holds_after_many_exchanges():
    context = ConversationContext("sys", max_history=4)
    for i in range(20):
        context.append(_user(f"question {i}"))
        context.append(_assistant(f"answer {i}"))
        assert len(context) <= 4
        assert context.messages[0].role == MessageRole.SYSTEM

    assert context.last_message.content == "answer 19"


def test_eviction_removes_exchange_and_orphaned_tool_results():
    context = ConversationContext("sys", max_history=3)
    call = ToolCall(name="search_flights", arguments={"origin": "SEA"})
    context.append(_user("find flights"))
    context.append(_assistant("", tool_calls=[call]))
    context.append(
        Message(
            role=MessageRole.TOOL,
            content="[]",
            agent_tag="flight",
            tool_results=[ToolResult.success(call, {"flights": []})],
        )
    )
    context.append(_user("next"))

    roles = [message.role for message in context.messages[1:]]
    assert roles == [MessageRole.USER]
    assert context.last_message.content == "next"


def test_snapshot_marks_current_agent_and_tool_payloads():
    context = ConversationContext("sys")
    call = ToolCall(id="call_1", name="search_hotels", arguments={})
    context.append(_user("hotels please"))
    context.append(_assistant("from flights", agent="flight"))
    context.append(_assistant("", agent="hotel", tool_calls=[call]))
    context.append(
        Message(
            role=MessageRole.TOOL,
            content="[]",
            agent_tag="hotel",
            tool_results=[ToolResult.success(call, {"hotels": ["HTL789"]})],
        )
    )

    snapshot = context.snapshot("hotel")

    assert snapshot[0] == {"role": "system", "content": "sys"}
    assert snapshot[2]["name"] == "flight"
    assert "context" not in snapshot[2]
    assert snapshot[3]["context"] == "current"
    assert snapshot[3]["tool_calls"][0]["name"] == "search_hotels"
    assert snapshot[4]["tool_results"] == [
        {"tool_call_id": "call_1", "name": "search_hotels", "output": {"hotels": ["HTL789"]}}
    ]


def test_reset_keeps_system_message():
    context = ConversationContext("sys")
    context.append(_user("hi"))
    context.reset()

    assert len(context) == 0
    assert context.messages == [context.system_message]


def test_invalid_bound_is_rejected():
    with pytest.raises(ValueError):
        ConversationContext("sys", max_history=0)
