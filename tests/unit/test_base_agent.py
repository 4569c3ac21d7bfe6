"""
Unit tests for the base agent contract.
"""

import pydantic
import pytest

from agent_dispatch.agents.base import AgentContext
from agent_dispatch.agents.flight import FlightAgent, search_flights
from agent_dispatch.agents.general import GeneralAgent
from agent_dispatch.agents.hotel import HotelAgent
from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.utils.error_handling import CompletionGatewayError
from tests.unit.fake_gateway import ScriptedGateway, tool_reply

FLIGHT_ARGS = {"origin": "sea", "destination": "sfo", "departure_date": "2024-12-15"}


def _context(view=None):
    return AgentContext(
        session_id="session_test",
        conversation=ConversationContext("sys"),
        view=view or {},
    )


@pytest.fixture
def gateway():
    return ScriptedGateway()


async def test_tool_output_becomes_result_data(gateway):
    gateway.queue("flight", tool_reply("search_flights", **FLIGHT_ARGS), "Two flights found.")
    agent = FlightAgent(gateway)

    result = await agent.process("Find a flight", _context())

    assert result.data == search_flights(FLIGHT_ARGS)
    assert result.summary == "Two flights found."
    assert result.cost == pytest.approx(299.99)
    assert not result.degraded


async def test_summary_falls_back_to_formatter(gateway):
    gateway.queue("flight", tool_reply("search_flights", **FLIGHT_ARGS), "")
    agent = FlightAgent(gateway)

    result = await agent.process("Find a flight", _context())

    assert result.summary.startswith("Found 2 flight options")


async def test_direct_answer_has_no_data(gateway):
    gateway.queue("general", "Hello there!")
    agent = GeneralAgent(gateway)

    result = await agent.process("hi", _context())

    assert result.summary == "Hello there!"
    assert result.data is None


async def test_gateway_failure_degrades(gateway):
    gateway.queue("hotel", CompletionGatewayError("unavailable", service_name="gemini"))
    agent = HotelAgent(gateway)

    result = await agent.process("Find a hotel", _context())

    assert result.degraded
    assert result.data is None
    assert "hotel agent" in result.summary


async def test_all_failed_tool_calls_degrade(gateway):
    gateway.queue("flight", tool_reply("search_flights", origin="SEA"), "")
    agent = FlightAgent(gateway)

    result = await agent.process("Find a flight", _context())

    assert result.degraded
    assert result.data is None


async def test_hotel_prompt_uses_flight_info(gateway):
    agent = HotelAgent(gateway)
    view = {"flight_info": search_flights(FLIGHT_ARGS)}

    prompt = agent.build_prompt("Find me a hotel", _context(view))

    assert prompt == "Find me a hotel in SFO from 2024-12-15 to 2024-12-18"


def test_agent_context_is_frozen():
    view = {"current_plan": {"flights": {"destination": "SFO"}}}
    context = _context(view)

    assert context.current_plan == {"flights": {"destination": "SFO"}}
    with pytest.raises(pydantic.ValidationError):
        context.session_id = "other"
