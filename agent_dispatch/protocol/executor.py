"""
Tool-call extraction and execution.

Every failure while resolving a call (malformed arguments, missing
handler, handler error or timeout) is converted into an error
``ToolResult``; ``execute`` itself does not raise for them.
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import AssistantMessage, ToolCall, ToolResult
from agent_dispatch.protocol.parsing import parse_structured
from agent_dispatch.utils.error_handling import (
    ArgumentParseError,
    DispatchError,
    ToolExecutionError,
    ToolNotImplementedError,
)
from agent_dispatch.utils.logging import AgentLogger

if TYPE_CHECKING:
    from agent_dispatch.agents.base import AgentContext, BaseAgent

DEFAULT_TOOL_TIMEOUT = 30.0


@dataclass
class ToolRound:
    """One completed tool round: the calls, their results and the follow-up."""

    tool_calls: list[ToolCall]
    results: list[ToolResult]
    follow_up: AssistantMessage

    @property
    def last_success(self) -> ToolResult | None:
        successes = [result for result in self.results if result.ok]
        return successes[-1] if successes else None


class ToolCallExecutor:
    """Dispatches tool calls to the issuing agent's handlers."""

    def __init__(
        self, gateway: CompletionGateway, tool_timeout: float = DEFAULT_TOOL_TIMEOUT
    ):
        self.gateway = gateway
        self.tool_timeout = tool_timeout

    def extract_tool_calls(self, message: AssistantMessage) -> list[ToolCall] | None:
        return self.gateway.extract_tool_calls(message)

    async def execute(
        self,
        agent: "BaseAgent",
        tool_calls: list[ToolCall],
        context: "AgentContext | None" = None,
    ) -> list[ToolResult]:
        """
        Resolve every call of one assistant message.

        Calls run concurrently; results keep the order of ``tool_calls``.

        Args:
            agent: Agent that issued the calls and owns the handlers
            tool_calls: Calls extracted from the assistant message
            context: Agent context passed through to the handlers

        Returns:
            One ToolResult per call
        """
        agent_logger = AgentLogger(agent.agent_id)
        return list(
            await asyncio.gather(
                *(self._execute_one(agent, call, context, agent_logger) for call in tool_calls)
            )
        )

    async def _execute_one(
        self,
        agent: "BaseAgent",
        call: ToolCall,
        context: "AgentContext | None",
        agent_logger: AgentLogger,
    ) -> ToolResult:
        arguments: Any = call.arguments
        try:
            arguments = self._parse_arguments(agent, call)
            handler = agent.handlers.get(call.name)
            if handler is None:
                raise ToolNotImplementedError(call.name, agent.agent_id)
            output = await asyncio.wait_for(
                self._invoke(handler, arguments, context), timeout=self.tool_timeout
            )
        except DispatchError as e:
            agent_logger.warning(f"Tool {call.name} failed: {e!s}")
            agent_logger.log_tool_call(call.name, arguments, ok=False)
            return ToolResult.failure(call, e)
        except asyncio.TimeoutError as e:
            error = ToolExecutionError(
                f"Tool {call.name} timed out after {self.tool_timeout}s", original_error=e
            )
            agent_logger.warning(str(error))
            agent_logger.log_tool_call(call.name, arguments, ok=False)
            return ToolResult.failure(call, error)

        agent_logger.log_tool_call(call.name, arguments, ok=True)
        return ToolResult.success(call, output)

    @staticmethod
    def _parse_arguments(agent: "BaseAgent", call: ToolCall) -> dict[str, Any]:
        arguments = parse_structured(call.arguments).unwrap()
        definition = agent.tool_definition(call.name)
        if definition is not None:
            missing = [
                name
                for name in definition.required
                if arguments.get(name) in (None, "")
            ]
            if missing:
                raise ArgumentParseError(
                    f"Missing required parameters for {call.name}: {', '.join(missing)}"
                )
        return arguments

    @staticmethod
    async def _invoke(handler: Any, arguments: dict[str, Any], context: Any) -> Any:
        try:
            result = handler(arguments, context)
            if inspect.isawaitable(result):
                result = await result
        except DispatchError:
            raise
        except Exception as e:
            raise ToolExecutionError(f"Tool handler raised: {e!s}", original_error=e) from e
        return result

    async def run_round(
        self,
        agent: "BaseAgent",
        conversation: ConversationContext,
        message: AssistantMessage,
        context: "AgentContext | None" = None,
    ) -> ToolRound | None:
        """
        Run one tool round for ``message``.

        Returns:
            The round, or None when the message carries no tool calls
        """
        tool_calls = self.extract_tool_calls(message)
        if tool_calls is None:
            return None

        results = await self.execute(agent, tool_calls, context)
        follow_up = await self.gateway.send_tool_results(
            conversation,
            agent.agent_id,
            tool_calls,
            results,
            tools=agent.tools,
            system_prompt=agent.instructions,
        )
        return ToolRound(tool_calls=tool_calls, results=results, follow_up=follow_up)
