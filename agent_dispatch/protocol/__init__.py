"""
Conversation protocol between agents and the completion service.

This package contains the message models, the bounded conversation log,
the completion gateway and the tool-call executor.
"""

from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.protocol.executor import ToolCallExecutor, ToolRound
from agent_dispatch.protocol.gateway import CompletionGateway, GeminiCompletionGateway
from agent_dispatch.protocol.messages import (
    AssistantMessage,
    Message,
    MessageRole,
    ToolCall,
    ToolDefinition,
    ToolError,
    ToolResult,
)
from agent_dispatch.protocol.parsing import ParseResult, parse_structured

__all__ = [
    "AssistantMessage",
    "CompletionGateway",
    "ConversationContext",
    "GeminiCompletionGateway",
    "Message",
    "MessageRole",
    "ParseResult",
    "ToolCall",
    "ToolCallExecutor",
    "ToolDefinition",
    "ToolError",
    "ToolResult",
    "ToolRound",
    "parse_structured",
]
