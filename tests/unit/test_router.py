"""Tests for routing strategies."""

from agent_dispatch.orchestration.router import KeywordRouter, ModelRouter
from agent_dispatch.utils.error_handling import CompletionGatewayError
from tests.unit.fake_gateway import ScriptedGateway


async def test_empathetic_candidates_route_to_trait_then_insight(recruiter_orchestrator):
    router = recruiter_orchestrator.router
    registry = recruiter_orchestrator.registry

    for _ in range(5):
        decision = await router.select("Find empathetic candidates", registry)
        assert decision == ("trait", "insight")


async def test_multiple_matches_follow_registry_order(travel_orchestrator):
    decision = await travel_orchestrator.router.select(
        "I need a hotel and a flight to Paris", travel_orchestrator.registry
    )

    assert decision == ("flight", "hotel", "itinerary")


async def test_matching_is_case_insensitive(travel_orchestrator):
    decision = await travel_orchestrator.router.select(
        "BOOK A HOTEL", travel_orchestrator.registry
    )

    assert decision == ("hotel", "itinerary")


async def test_no_match_uses_default_agent(travel_orchestrator):
    decision = await travel_orchestrator.router.select(
        "What's the weather like?", travel_orchestrator.registry
    )

    assert decision == ("general", "itinerary")


async def test_integrator_is_never_matched_twice(travel_orchestrator):
    router = KeywordRouter(integrator_id="itinerary", default_id="general")

    decision = await router.select("show my itinerary", travel_orchestrator.registry)

    assert decision.count("itinerary") == 1
    assert decision[-1] == "itinerary"


async def test_model_router_keeps_registered_agents_in_order(travel_orchestrator):
    gateway = ScriptedGateway()
    gateway.queue("router", '```json\n{"agents": ["hotel", "bogus", "flight"]}\n```')
    router = ModelRouter(gateway, integrator_id="itinerary", default_id="general")

    decision = await router.select("somewhere to sleep", travel_orchestrator.registry)

    assert decision == ("flight", "hotel", "itinerary")
    assert gateway.calls[0]["allow_tools"] is False


async def test_model_router_empty_choice_uses_default(travel_orchestrator):
    gateway = ScriptedGateway()
    gateway.queue("router", '{"agents": []}')
    router = ModelRouter(gateway, integrator_id="itinerary", default_id="general")

    decision = await router.select("hello", travel_orchestrator.registry)

    assert decision == ("general", "itinerary")


async def test_model_router_falls_back_to_keywords(travel_orchestrator):
    gateway = ScriptedGateway()
    gateway.queue(
        "router",
        CompletionGatewayError("down", service_name="gemini"),
        "I think the hotel agent fits",
    )
    router = ModelRouter(gateway, integrator_id="itinerary", default_id="general")

    first = await router.select("book a hotel", travel_orchestrator.registry)
    second = await router.select("book a hotel", travel_orchestrator.registry)

    assert first == second == ("hotel", "itinerary")


async def test_model_router_undecodable_reply_falls_back_to_keywords(travel_orchestrator):
    gateway = ScriptedGateway()
    gateway.queue("router", 'Sure: "agents": "fl\\ight"')
    router = ModelRouter(gateway, integrator_id="itinerary", default_id="general")

    decision = await router.select("find me a flight", travel_orchestrator.registry)

    assert decision == ("flight", "itinerary")
