"""
Ready-made orchestrators for the two shipped agent teams.

Each preset builds one gateway and one tool executor and injects them into
every agent, then registers the agents in routing order.
"""

from typing import Literal

from agent_dispatch.agents import (
    FeedbackAgent,
    FlightAgent,
    GeneralAgent,
    HotelAgent,
    InsightAgent,
    ItineraryAgent,
    LocalExperienceAgent,
    ReelAgent,
    TraitAgent,
)
from agent_dispatch.config import DispatchConfig
from agent_dispatch.config import config as default_config
from agent_dispatch.orchestration.orchestrator import Orchestrator
from agent_dispatch.orchestration.registry import AgentRegistry
from agent_dispatch.orchestration.router import KeywordRouter, ModelRouter, RoutingStrategy
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.gateway import CompletionGateway, GeminiCompletionGateway

RouterKind = Literal["keyword", "model"]

TRAVEL_SYSTEM_PROMPT = (
    "You are a travel planning assistant coordinating flight, hotel, "
    "activity and itinerary specialists."
)
TRAVEL_INTEGRATOR_PROMPT = "Please provide a friendly summary of the current travel plan."

RECRUITER_SYSTEM_PROMPT = (
    "You are a recruiter dashboard assistant coordinating candidate search, "
    "interview feedback and reel analysis specialists."
)
RECRUITER_INTEGRATOR_PROMPT = (
    "Please provide a short summary of the candidate insights gathered so far."
)

PRESETS = ("travel", "recruiter")


def _make_router(
    kind: RouterKind, gateway: CompletionGateway, integrator_id: str, default_id: str
) -> RoutingStrategy:
    keyword = KeywordRouter(integrator_id, default_id)
    if kind == "model":
        return ModelRouter(gateway, keyword, integrator_id, default_id)
    if kind != "keyword":
        raise ValueError(f"Unknown router kind: {kind}")
    return keyword


def _build(
    agents_factory,
    integrator_id: str,
    system_prompt: str,
    integrator_prompt: str,
    gateway: CompletionGateway | None,
    config: DispatchConfig | None,
    router: RouterKind,
) -> Orchestrator:
    config = config or default_config
    gateway = gateway or GeminiCompletionGateway(config=config)
    executor = ToolCallExecutor(gateway, tool_timeout=config.system.tool_timeout_seconds)

    registry = AgentRegistry()
    for agent in agents_factory(gateway, executor):
        registry.register(agent.agent_id, agent)

    return Orchestrator(
        gateway,
        registry=registry,
        router=_make_router(router, gateway, integrator_id, "general"),
        integrator_id=integrator_id,
        default_id="general",
        system_prompt=system_prompt,
        integrator_prompt=integrator_prompt,
        config=config,
    )


def build_travel_orchestrator(
    gateway: CompletionGateway | None = None,
    config: DispatchConfig | None = None,
    router: RouterKind = "keyword",
) -> Orchestrator:
    """Flight, hotel, local experience and itinerary agents; itinerary integrates."""
    return _build(
        lambda gw, ex: [
            FlightAgent(gw, ex),
            HotelAgent(gw, ex),
            LocalExperienceAgent(gw, ex),
            ItineraryAgent(gw, ex),
            GeneralAgent(gw, ex),
        ],
        "itinerary",
        TRAVEL_SYSTEM_PROMPT,
        TRAVEL_INTEGRATOR_PROMPT,
        gateway,
        config,
        router,
    )


def build_recruiter_orchestrator(
    gateway: CompletionGateway | None = None,
    config: DispatchConfig | None = None,
    router: RouterKind = "keyword",
) -> Orchestrator:
    """Trait, feedback and reel agents; the insight agent integrates."""
    return _build(
        lambda gw, ex: [
            TraitAgent(gw, ex),
            FeedbackAgent(gw, ex),
            ReelAgent(gw, ex),
            InsightAgent(gw, ex),
            GeneralAgent(gw, ex),
        ],
        "insight",
        RECRUITER_SYSTEM_PROMPT,
        RECRUITER_INTEGRATOR_PROMPT,
        gateway,
        config,
        router,
    )


def build_orchestrator(
    preset: str,
    gateway: CompletionGateway | None = None,
    config: DispatchConfig | None = None,
    router: RouterKind = "keyword",
) -> Orchestrator:
    """Build a preset by name."""
    if preset == "travel":
        return build_travel_orchestrator(gateway, config, router)
    if preset == "recruiter":
        return build_recruiter_orchestrator(gateway, config, router)
    raise ValueError(f"Unknown preset: {preset} (expected one of {', '.join(PRESETS)})")
