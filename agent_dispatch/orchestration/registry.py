"""
Agent registry for the agent dispatch system.

The registry is built once at startup and injected into the router and the
orchestrator. Declaration order is preserved; the keyword router relies on
it to order its decisions.
"""

from collections.abc import Iterator

from agent_dispatch.agents.base import BaseAgent
from agent_dispatch.utils.error_handling import AgentNotRegisteredError
from agent_dispatch.utils.logging import get_logger

logger = get_logger(__name__)


class AgentRegistry:
    """
    Central registry of constructed agent instances.

    Registering an id twice replaces the earlier agent but keeps its
    original position in declaration order.
    """

    def __init__(self):
        """Initialize the agent registry."""
        self._agents: dict[str, BaseAgent] = {}

    def register(self, agent_id: str, agent: BaseAgent) -> None:
        """
        Register an agent in the registry.

        Args:
            agent_id: The identifier the router and orchestrator use
            agent: The agent instance to register
        """
        if agent_id in self._agents:
            logger.info(f"Replacing agent: {agent_id} ({agent.__class__.__name__})")
        else:
            logger.debug(f"Registering agent: {agent_id} ({agent.__class__.__name__})")
        self._agents[agent_id] = agent

    def get(self, agent_id: str) -> BaseAgent:
        """
        Get an agent from the registry.

        Raises:
            AgentNotRegisteredError: If the agent id is not registered
        """
        if agent_id not in self._agents:
            raise AgentNotRegisteredError(agent_id)
        return self._agents[agent_id]

    def find_by_slot(self, slot: str) -> BaseAgent | None:
        """First registered agent that owns ``slot``."""
        for agent in self._agents.values():
            if agent.slot == slot:
                return agent
        return None

    def items(self) -> list[tuple[str, BaseAgent]]:
        return list(self._agents.items())

    def ids(self) -> list[str]:
        return list(self._agents)

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._agents))

    def __len__(self) -> int:
        return len(self._agents)

    def clear(self) -> None:
        """Clear all registered agents (useful for testing)."""
        self._agents.clear()
        logger.debug("Agent registry cleared")
