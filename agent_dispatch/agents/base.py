"""
Base agent class for the agent dispatch system.

This module implements the agent contract every specialised agent follows:
one request to the completion gateway, at most one tool round, and a
result derived from the last successful tool output. Expected failures
never escape ``process``; they become a degraded result instead.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.protocol.executor import ToolCallExecutor, ToolRound
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import AssistantMessage, ToolDefinition
from agent_dispatch.utils.error_handling import DispatchError
from agent_dispatch.utils.logging import AgentLogger

# A tool handler receives the parsed arguments and the agent context
ToolHandler = Callable[[dict[str, Any], "AgentContext | None"], Any]


class AgentContext(BaseModel):
    """
    What an agent sees while processing one query.

    ``view`` is a deep copy of the plan fields relevant to the agent, so
    nothing the agent does to it reaches the session plan.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    session_id: str
    conversation: ConversationContext
    view: dict[str, Any] = Field(default_factory=dict)

    @property
    def current_plan(self) -> dict[str, Any]:
        return self.view.get("current_plan") or {}


class AgentResult(BaseModel):
    """Outcome of one agent invocation."""

    summary: str
    data: Any = None
    cost: float = 0.0
    degraded: bool = False


@dataclass
class AgentConfig:
    """Static description of an agent."""

    name: str
    instructions: str
    slot: str | None = None
    keywords: tuple[str, ...] = ()
    tools: list[ToolDefinition] = field(default_factory=list)
    display_name: str = "assistant"


class BaseAgent(ABC):
    """
    Base class for all dispatch agents.

    Subclasses supply tool handlers, a summary formatter for tool output and,
    where useful, a prompt builder that enriches the query from the plan view.
    The router and orchestrator depend only on this interface.
    """

    def __init__(
        self,
        config: AgentConfig,
        gateway: CompletionGateway,
        executor: ToolCallExecutor | None = None,
    ):
        """
        Initialize a base agent.

        Args:
            config: Configuration for the agent
            gateway: Completion gateway shared by all agents
            executor: Tool executor; one bound to ``gateway`` is created
                when omitted
        """
        self.config = config
        self.gateway = gateway
        self.executor = executor or ToolCallExecutor(gateway)
        self.handlers: dict[str, ToolHandler] = dict(self.tool_handlers())
        self.logger = AgentLogger(config.name)

    @property
    def agent_id(self) -> str:
        return self.config.name

    @property
    def instructions(self) -> str:
        return self.config.instructions

    @property
    def tools(self) -> list[ToolDefinition]:
        return self.config.tools

    @property
    def keywords(self) -> tuple[str, ...]:
        return self.config.keywords

    @property
    def slot(self) -> str | None:
        return self.config.slot

    def tool_definition(self, name: str) -> ToolDefinition | None:
        for tool in self.config.tools:
            if tool.name == name:
                return tool
        return None

    def tool_handlers(self) -> dict[str, ToolHandler]:
        """Mapping of tool name to handler. Agents without tools keep the default."""
        return {}

    def build_prompt(self, query: str, context: AgentContext) -> str:
        """Message sent to the gateway; override to add plan context."""
        return query

    @abstractmethod
    def summarize(self, output: Any) -> str:
        """Human-readable summary of a successful tool output."""

    def cost_of(self, output: Any) -> float:
        """Cost carried by a tool output, for the plan budget."""
        if isinstance(output, dict):
            for key in ("total_cost", "cost"):
                value = output.get(key)
                if isinstance(value, int | float):
                    return float(value)
        return 0.0

    async def process(self, query: str, context: AgentContext) -> AgentResult:
        """
        Handle a query for this agent.

        Args:
            query: The user query
            context: Session conversation and the agent's plan view

        Returns:
            The agent result; degraded when an expected failure occurred
        """
        log = self.logger.bind_session(context.session_id)
        log.info(f"Processing query: {query[:80]}")

        try:
            prompt = self.build_prompt(query, context)
            reply = await self.gateway.process_message(
                context.conversation,
                prompt,
                self.agent_id,
                tools=self.tools or None,
                system_prompt=self.instructions,
            )
            tool_round = await self.executor.run_round(
                self, context.conversation, reply, context
            )
            if tool_round is None:
                return self.direct_result(reply, context)
            return self.build_result(tool_round, context)

        except (DispatchError, asyncio.TimeoutError) as e:
            log.warning(f"Degrading after error: {e!s}")
            return await self.fallback(query, context, e)

    def direct_result(self, reply: AssistantMessage, context: AgentContext) -> AgentResult:
        """Result for an answer given without tool calls."""
        return AgentResult(summary=reply.content, data=None)

    def build_result(self, tool_round: ToolRound, context: AgentContext) -> AgentResult:
        """Result derived from the last successful tool output of a round."""
        success = tool_round.last_success
        follow_up = tool_round.follow_up.content.strip()
        if success is None:
            errors = "; ".join(
                result.error.message for result in tool_round.results if result.error
            )
            self.logger.warning(f"All tool calls failed: {errors}")
            return AgentResult(
                summary=follow_up or self.unavailable_message(),
                data=None,
                degraded=True,
            )

        return AgentResult(
            summary=follow_up or self.summarize(success.output),
            data=success.output,
            cost=self.cost_of(success.output),
        )

    async def fallback(
        self, query: str, context: AgentContext, error: Exception
    ) -> AgentResult:
        """Degraded result returned when processing fails."""
        return AgentResult(summary=self.unavailable_message(), data=None, degraded=True)

    def recommend(self, view: dict[str, Any]) -> list[dict[str, Any]]:
        """Suggestions derived from the plan view without a model round."""
        return []

    def synthesize(self, plan: dict[str, Any]) -> Any:
        """Build this agent's slot value directly from the plan, or None."""
        return None

    def unavailable_message(self) -> str:
        return (
            f"Sorry, the {self.config.display_name} couldn't complete your request "
            "right now. Please try again shortly."
        )
