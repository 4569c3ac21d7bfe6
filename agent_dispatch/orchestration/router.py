"""
Routing strategies: which agents handle a query, and in which order.

Every strategy follows the same rules: domain agents first, the default
agent when none matched, and the integrator always last.
"""

from abc import ABC, abstractmethod

from agent_dispatch.orchestration.registry import AgentRegistry
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.parsing import parse_structured
from agent_dispatch.utils.error_handling import (
    CompletionGatewayError,
    ResponseParseError,
)
from agent_dispatch.utils.logging import get_logger

logger = get_logger(__name__)

# Ordered agent ids chosen for one query
RoutingDecision = tuple[str, ...]

ROUTER_AGENT_ID = "router"

ROUTER_INSTRUCTIONS = """You route user requests to specialist agents.
Reply with JSON only, in the form {"agents": ["<agent id>", ...]}.
Choose every agent whose specialty the request needs, and none that it does not.
Reply with {"agents": []} when no specialist applies."""


class RoutingStrategy(ABC):
    """Pluggable query classifier used by the orchestrator."""

    def __init__(self, integrator_id: str | None = None, default_id: str | None = None):
        self.integrator_id = integrator_id
        self.default_id = default_id

    @abstractmethod
    async def select(self, query: str, registry: AgentRegistry) -> RoutingDecision:
        """
        Choose the agents for a query.

        Args:
            query: The user query
            registry: Registered agents, in declaration order

        Returns:
            Ordered agent ids, integrator last
        """

    def domain_agents(self, registry: AgentRegistry) -> list[str]:
        """Registered agents eligible for matching, in declaration order."""
        return [
            agent_id
            for agent_id in registry.ids()
            if agent_id not in (self.integrator_id, self.default_id)
        ]

    def finalize(self, matches: list[str]) -> RoutingDecision:
        selected = [agent_id for agent_id in matches if agent_id != self.integrator_id]
        if not selected and self.default_id:
            selected.append(self.default_id)
        if self.integrator_id:
            selected.append(self.integrator_id)
        return tuple(selected)


class KeywordRouter(RoutingStrategy):
    """Case-insensitive substring match against each agent's keywords."""

    async def select(self, query: str, registry: AgentRegistry) -> RoutingDecision:
        lowered = query.lower()
        matches = [
            agent_id
            for agent_id in self.domain_agents(registry)
            if any(keyword.lower() in lowered for keyword in registry.get(agent_id).keywords)
        ]
        decision = self.finalize(matches)
        logger.debug(f"Keyword routing for {query[:60]!r}: {decision}")
        return decision


class ModelRouter(RoutingStrategy):
    """
    Asks the model to classify the query.

    Falls back to the wrapped keyword router when the completion fails or
    the reply cannot be parsed into agent ids.
    """

    def __init__(
        self,
        gateway: CompletionGateway,
        fallback: KeywordRouter | None = None,
        integrator_id: str | None = None,
        default_id: str | None = None,
    ):
        super().__init__(integrator_id, default_id)
        self.gateway = gateway
        self.fallback = fallback or KeywordRouter(integrator_id, default_id)

    def _describe(self, registry: AgentRegistry, candidates: list[str]) -> str:
        lines = []
        for agent_id in candidates:
            agent = registry.get(agent_id)
            hints = ", ".join(agent.keywords) or "general requests"
            lines.append(f"- {agent_id}: {agent.config.display_name} ({hints})")
        return "\n".join(lines)

    async def select(self, query: str, registry: AgentRegistry) -> RoutingDecision:
        candidates = self.domain_agents(registry)
        prompt = (
            f"Available agents:\n{self._describe(registry, candidates)}\n\n"
            f"Request: {query}"
        )
        try:
            reply = await self.gateway.complete(
                [{"role": "user", "content": prompt}],
                ROUTER_AGENT_ID,
                system_prompt=ROUTER_INSTRUCTIONS,
                allow_tools=False,
            )
            parsed = parse_structured(reply.content, error_cls=ResponseParseError).unwrap()
            chosen = parsed.get("agents")
            if not isinstance(chosen, list):
                raise ResponseParseError("Router reply has no 'agents' list")
        except (CompletionGatewayError, ResponseParseError) as e:
            logger.warning(f"Model routing failed, using keywords: {e!s}")
            return await self.fallback.select(query, registry)

        wanted = {str(agent_id) for agent_id in chosen}
        # Registry order keeps the decision stable regardless of reply order
        decision = self.finalize([a for a in candidates if a in wanted])
        logger.debug(f"Model routing for {query[:60]!r}: {decision}")
        return decision
