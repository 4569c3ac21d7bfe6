"""
Orchestration modules for the agent dispatch system.

This package contains the agent registry, routing strategies, the session
plan and store, the orchestrator and the preset agent teams.
"""

from agent_dispatch.orchestration.orchestrator import (
    Orchestrator,
    QueryOutcome,
    build_view,
)
from agent_dispatch.orchestration.plan import Plan
from agent_dispatch.orchestration.presets import (
    build_orchestrator,
    build_recruiter_orchestrator,
    build_travel_orchestrator,
)
from agent_dispatch.orchestration.registry import AgentRegistry
from agent_dispatch.orchestration.router import (
    KeywordRouter,
    ModelRouter,
    RoutingDecision,
    RoutingStrategy,
)
from agent_dispatch.orchestration.session import Session, SessionState, SessionStore

__all__ = [
    "AgentRegistry",
    "KeywordRouter",
    "ModelRouter",
    "Orchestrator",
    "Plan",
    "QueryOutcome",
    "RoutingDecision",
    "RoutingStrategy",
    "Session",
    "SessionState",
    "SessionStore",
    "build_orchestrator",
    "build_recruiter_orchestrator",
    "build_travel_orchestrator",
    "build_view",
]
