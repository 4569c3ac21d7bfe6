"""Tests for the Gemini-backed completion gateway."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from agent_dispatch.agents.flight import FLIGHT_TOOLS
from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.protocol.gateway import GeminiCompletionGateway
from agent_dispatch.utils.error_handling import CompletionGatewayError


def _text_response(text):
    response = MagicMock()
    response.text = text
    response.function_calls = None
    return response


def _call_response(*calls, text=""):
    response = MagicMock()
    response.function_calls = list(calls)
    response.candidates = [
        SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(text=text)]))
    ]
    return response


@pytest.fixture
def gemini(test_config, mock_gemini_client):
    return GeminiCompletionGateway(config=test_config, client=mock_gemini_client)


async def test_text_reply(gemini, mock_gemini_client):
    reply = await gemini.complete([{"role": "user", "content": "hi"}], "general")

    assert reply.content == "Test response"
    assert reply.tool_calls is None
    assert reply.agent_id == "general"
    mock_gemini_client.aio.models.generate_content.assert_awaited_once()


async def test_function_calls_become_tool_calls(gemini, mock_gemini_client):
    mock_gemini_client.aio.models.generate_content.return_value = _call_response(
        SimpleNamespace(id="fc_1", name="search_flights", args={"origin": "SEA"}),
        SimpleNamespace(id=None, name="get_flight_details", args={"flight_id": "FL123"}),
        text="Let me look.",
    )

    reply = await gemini.complete(
        [{"role": "user", "content": "flights"}], "flight", tools=FLIGHT_TOOLS
    )

    assert reply.content == "Let me look."
    assert [call.name for call in reply.tool_calls] == ["search_flights", "get_flight_details"]
    assert reply.tool_calls[0].id == "fc_1"
    assert reply.tool_calls[1].id
    assert reply.tool_calls[0].arguments == {"origin": "SEA"}


async def test_tools_disabled_for_follow_up(gemini, mock_gemini_client):
    await gemini.complete(
        [{"role": "user", "content": "flights"}],
        "flight",
        tools=FLIGHT_TOOLS,
        system_prompt="Be brief",
        allow_tools=False,
    )

    config = mock_gemini_client.aio.models.generate_content.call_args.kwargs["config"]
    assert config.tool_config.function_calling_config.mode == "NONE"
    assert config.system_instruction == "Be brief"
    names = [d.name for d in config.tools[0].function_declarations]
    assert names == ["search_flights", "get_flight_details"]


async def test_failure_is_retried_once(gemini, mock_gemini_client):
    mock_gemini_client.aio.models.generate_content.side_effect = [
        RuntimeError("503 unavailable"),
        _text_response("recovered"),
    ]

    reply = await gemini.complete([{"role": "user", "content": "hi"}], "general")

    assert reply.content == "recovered"
    assert mock_gemini_client.aio.models.generate_content.await_count == 2


async def test_persistent_failure_raises_gateway_error(gemini, mock_gemini_client):
    mock_gemini_client.aio.models.generate_content.side_effect = RuntimeError("down")

    with pytest.raises(CompletionGatewayError) as exc_info:
        await gemini.complete([{"role": "user", "content": "hi"}], "general")

    assert exc_info.value.service_name == "gemini"
    assert mock_gemini_client.aio.models.generate_content.await_count == 2


async def test_process_message_records_both_turns(gemini):
    context = ConversationContext("You coordinate agents")

    await gemini.process_message(context, "hello", "general")
    await gemini.process_message(context, "hello", "general")

    roles = [m.role.value for m in context.messages]
    assert roles == ["system", "user", "assistant", "user", "assistant"]
    assert context.messages[2].agent_tag == "general"


def test_convert_messages_handles_system_and_other_agents():
    messages = [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "plan a trip"},
        {"role": "assistant", "content": "Found flights", "name": "flight"},
        {
            "role": "assistant",
            "content": "",
            "name": "hotel",
            "tool_calls": [{"id": "c1", "name": "search_hotels", "arguments": {}}],
        },
        {"role": "user", "content": "thanks"},
    ]

    contents, instruction = GeminiCompletionGateway._convert_messages(messages, "hotel")

    assert instruction == "sys"
    assert [c.role for c in contents] == ["user", "model", "user"]
    assert contents[1].parts[0].text == "[flight] Found flights"


def test_convert_messages_pairs_calls_with_responses():
    messages = [
        {"role": "user", "content": "hotels"},
        {
            "role": "assistant",
            "content": "",
            "name": "hotel",
            "tool_calls": [{"id": "c1", "name": "search_hotels", "arguments": {"location": "SFO"}}],
        },
        {
            "role": "tool",
            "content": "[]",
            "tool_results": [{"tool_call_id": "c1", "name": "search_hotels", "output": {"hotels": []}}],
        },
    ]

    contents, _ = GeminiCompletionGateway._convert_messages(messages, "hotel")

    assert contents[1].parts[0].function_call.name == "search_hotels"
    assert contents[2].parts[0].function_response.response == {"output": {"hotels": []}}
