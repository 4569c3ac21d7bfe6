"""
Orchestrator for the agent dispatch system.

This module owns sessions and drives one query through the system: route,
run each selected agent in order, merge results into the plan, and let
the integrator agent phrase the final response. Failures of individual
agents are contained; only session lookup errors reach the caller.
"""

import asyncio
import copy
from dataclasses import dataclass
from typing import Any

from agent_dispatch.agents.base import AgentContext, AgentResult, BaseAgent
from agent_dispatch.config import DispatchConfig
from agent_dispatch.config import config as default_config
from agent_dispatch.orchestration.plan import Plan
from agent_dispatch.orchestration.registry import AgentRegistry
from agent_dispatch.orchestration.router import (
    KeywordRouter,
    RoutingDecision,
    RoutingStrategy,
)
from agent_dispatch.orchestration.session import Session, SessionStore
from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import Message, MessageRole
from agent_dispatch.utils.error_handling import (
    AgentNotRegisteredError,
    InsufficientPlanError,
    SessionNotFoundError,
)
from agent_dispatch.utils.helpers import generate_session_id, truncate_text
from agent_dispatch.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant coordinating a team of specialist agents."
DEFAULT_INTEGRATOR_PROMPT = "Please provide a friendly summary of the current plan."

RECRUITER_SLOTS = ("candidates", "feedback", "reels", "insights")


@dataclass
class QueryOutcome:
    """Result of one processed query."""

    plan: dict[str, Any]
    response: str
    routed: RoutingDecision = ()


def _first_record(value: Any) -> dict[str, Any] | None:
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, dict) else None


def build_view(agent: BaseAgent, plan: Plan) -> dict[str, Any]:
    """
    Read-only plan view for one agent.

    Every view carries the whole plan under ``current_plan``; the slot the
    agent owns decides which extra fields it gets. The returned dict is a
    deep copy, so agents cannot mutate the session plan through it.
    """
    current = plan.to_dict()
    view: dict[str, Any] = {"current_plan": current}

    if agent.slot == "flights":
        view["previous_flights"] = plan.get("flights")
    elif agent.slot == "hotels":
        view["previous_hotels"] = plan.get("hotels")
        view["flight_info"] = _first_record(plan.get("flights"))
    elif agent.slot == "activities":
        flight = _first_record(plan.get("flights")) or {}
        hotel = _first_record(plan.get("hotels")) or {}
        view["destination"] = flight.get("destination")
        view["hotel_location"] = hotel.get("location")
    elif agent.slot in RECRUITER_SLOTS:
        view["candidates"] = plan.get("candidates")

    return copy.deepcopy(view)


class Orchestrator:
    """
    Routes queries to agents and accumulates their results per session.

    Agents selected for a query run strictly one after another so each one
    sees what the previous agents merged into the plan.
    """

    def __init__(
        self,
        gateway: CompletionGateway,
        registry: AgentRegistry | None = None,
        router: RoutingStrategy | None = None,
        integrator_id: str | None = None,
        default_id: str | None = "general",
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        integrator_prompt: str = DEFAULT_INTEGRATOR_PROMPT,
        store: SessionStore | None = None,
        config: DispatchConfig | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            gateway: Completion gateway shared with every agent
            registry: Agents available for routing
            router: Routing strategy; keyword routing when omitted
            integrator_id: Agent that phrases the final response
            default_id: Agent used when no other agent matches
            system_prompt: System message pinned in every conversation
            integrator_prompt: Query sent to the integrator
            store: Session store; one is created from config when omitted
            config: System configuration
        """
        self.config = config or default_config
        system = self.config.system

        self.gateway = gateway
        self.registry = registry or AgentRegistry()
        self.integrator_id = integrator_id
        self.default_id = default_id
        self.router = router or KeywordRouter(integrator_id, default_id)
        self.system_prompt = system_prompt
        self.integrator_prompt = integrator_prompt
        self.store = store or SessionStore(ttl_seconds=system.session_ttl_seconds)
        self.agent_timeout = system.agent_timeout_seconds
        self.max_history = system.max_history

    async def register_agent(self, agent_id: str, agent: BaseAgent) -> None:
        self.registry.register(agent_id, agent)

    async def initialize_session(
        self, user_id: str, session_id: str | None = None
    ) -> Session:
        """
        Create a session for a user.

        Args:
            user_id: Owner of the session
            session_id: Explicit id; a fresh one is generated when omitted

        Returns:
            The new, active session
        """
        session = Session(
            session_id=session_id or generate_session_id(),
            user_id=user_id,
            conversation=ConversationContext(self.system_prompt, self.max_history),
        )
        return await self.store.add(session)

    async def get_session(self, session_id: str) -> Session:
        return await self.store.get(session_id)

    async def end_session(self, session_id: str) -> None:
        """
        Terminate a session.

        Raises:
            SessionNotFoundError: If the session is unknown or already ended
        """
        await self.store.remove(session_id)

    async def process_query(self, session_id: str, query: str) -> QueryOutcome:
        """
        Process one user query.

        Args:
            session_id: Session the query belongs to
            query: The user query

        Returns:
            The updated plan, the integrated response and the routed agents

        Raises:
            SessionNotFoundError: If the session is unknown or ended
        """
        session = await self.store.get(session_id)

        async with session.lock:
            # The session may have ended while waiting for the lock
            if not session.is_active:
                raise SessionNotFoundError(session_id)

            session.touch()
            session.conversation.append(Message(role=MessageRole.USER, content=query))

            decision = await self.router.select(query, self.registry)
            logger.info(
                f"Session {session_id} routed '{truncate_text(query, 60)}' to {list(decision)}"
            )

            for agent_id in decision:
                if agent_id == self.integrator_id:
                    continue
                await self._run_agent(session, agent_id, query)

            response = await self._integrate(session)
            session.touch()

            return QueryOutcome(
                plan=session.plan.to_dict(), response=response, routed=decision
            )

    async def _run_agent(
        self, session: Session, agent_id: str, query: str
    ) -> AgentResult | None:
        try:
            agent = self.registry.get(agent_id)
            result = await self._invoke(agent, session, query)
        except AgentNotRegisteredError as e:
            logger.warning(f"Skipping agent: {e!s}")
            return None
        except asyncio.TimeoutError:
            logger.warning(
                f"Agent {agent_id} timed out after {self.agent_timeout}s; skipping"
            )
            return None
        except Exception as e:
            logger.error(f"Agent {agent_id} failed; skipping: {e!s}")
            return None

        if agent.slot and session.plan.merge(agent.slot, result.data, result.cost):
            logger.debug(f"Merged {agent_id} result into slot '{agent.slot}'")
        return result

    async def _invoke(self, agent: BaseAgent, session: Session, query: str) -> AgentResult:
        context = AgentContext(
            session_id=session.session_id,
            conversation=session.conversation,
            view=build_view(agent, session.plan),
        )
        return await asyncio.wait_for(agent.process(query, context), self.agent_timeout)

    async def _integrate(self, session: Session) -> str:
        if self.integrator_id is None or self.integrator_id not in self.registry:
            return self.fallback_response(session.plan)

        result = await self._run_agent(session, self.integrator_id, self.integrator_prompt)
        if result is None or not result.summary.strip():
            return self.fallback_response(session.plan)
        return result.summary

    def fallback_response(self, plan: Plan) -> str:
        """Response built from the plan contents when the integrator is unavailable."""
        contents = plan.describe()
        if not contents:
            return (
                "I couldn't put together a summary right now. "
                "Please tell me a bit more about what you need."
            )
        total = plan.budget["total"]
        response = f"Here's where things stand: your plan now includes {contents}."
        if total:
            response += f" Estimated total cost: ${total:,.2f}."
        return response

    async def recommendations(self, session_id: str) -> list[dict[str, Any]]:
        """
        Suggestions for the session's destination.

        Raises:
            SessionNotFoundError: If the session is unknown or ended
        """
        session = await self.store.get(session_id)
        suggestions: list[dict[str, Any]] = []
        for _, agent in self.registry.items():
            suggestions.extend(agent.recommend(build_view(agent, session.plan)))
        return suggestions

    async def itinerary(self, session_id: str) -> Any:
        """
        The stored itinerary, synthesised from flights and hotels when missing.

        Raises:
            SessionNotFoundError: If the session is unknown or ended
            InsufficientPlanError: If the plan holds no itinerary, flights or hotels
        """
        session = await self.store.get(session_id)
        async with session.lock:
            plan = session.plan
            if plan.get("itinerary"):
                return plan["itinerary"]

            agent = self.registry.find_by_slot("itinerary")
            itinerary = agent.synthesize(plan.to_dict()) if agent else None
            if itinerary is None:
                raise InsufficientPlanError(
                    "Not enough information to create an itinerary. "
                    "Please search for flights or hotels first."
                )
            plan.merge("itinerary", itinerary)
            return itinerary
