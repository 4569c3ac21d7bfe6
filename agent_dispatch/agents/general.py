"""
General Agent: the default route when no specialised agent matches.
"""

from typing import Any

from agent_dispatch.agents.base import AgentConfig, BaseAgent
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.gateway import CompletionGateway

GENERAL_INSTRUCTIONS = """You are a helpful assistant for a multi-agent planning dashboard.
Answer general questions briefly. When the user needs something a specialist handles,
tell them what kind of request to make."""


class GeneralAgent(BaseAgent):
    """Answers directly without tools and writes no plan slot."""

    def __init__(
        self,
        gateway: CompletionGateway,
        executor: ToolCallExecutor | None = None,
        instructions: str = GENERAL_INSTRUCTIONS,
    ):
        config = AgentConfig(
            name="general",
            instructions=instructions,
            display_name="assistant",
        )
        super().__init__(config, gateway, executor)

    def summarize(self, output: Any) -> str:
        return str(output)
