"""
Protocol models exchanged between agents, the executor and the gateway.

Tool definitions serialise to the function-calling wire shape used by the
completion protocol; everything else is an internal model.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from agent_dispatch.utils.helpers import generate_id


class MessageRole(StrEnum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolDefinition(BaseModel):
    """A typed function an agent exposes to the model. Immutable."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    required: tuple[str, ...] = ()

    def to_schema(self) -> dict[str, Any]:
        """Wire shape dictated by the completion protocol."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": self.parameters,
                    "required": list(self.required),
                },
            },
        }


class ToolCall(BaseModel):
    """A function invocation requested by the model."""

    id: str = Field(default_factory=lambda: generate_id("call"))
    name: str
    arguments: str | dict[str, Any] = "{}"


class ToolError(BaseModel):
    """Error descriptor carried by a failed tool result."""

    type: str
    message: str


class ToolResult(BaseModel):
    """Answer to one tool call: a success payload or an error, never both."""

    tool_call_id: str
    tool_name: str
    output: Any = None
    error: ToolError | None = None

    @model_validator(mode="after")
    def _output_xor_error(self) -> "ToolResult":
        if self.error is not None and self.output is not None:
            raise ValueError("A tool result carries either output or error, not both")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, call: ToolCall, output: Any) -> "ToolResult":
        return cls(tool_call_id=call.id, tool_name=call.name, output=output)

    @classmethod
    def failure(cls, call: ToolCall, error: Exception) -> "ToolResult":
        return cls(
            tool_call_id=call.id,
            tool_name=call.name,
            error=ToolError(type=type(error).__name__, message=str(error)),
        )

    def as_payload(self) -> dict[str, Any]:
        """Response body handed back to the model."""
        if self.error is not None:
            return {"error": self.error.model_dump()}
        return {"output": self.output}


class Message(BaseModel):
    """One entry of a conversation log."""

    role: MessageRole
    content: str = ""
    agent_tag: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_results: list[ToolResult] | None = None


class AssistantMessage(BaseModel):
    """A single completion returned by the gateway."""

    content: str = ""
    tool_calls: list[ToolCall] | None = None
    agent_id: str | None = None

    def to_message(self) -> Message:
        return Message(
            role=MessageRole.ASSISTANT,
            content=self.content,
            agent_tag=self.agent_id,
            tool_calls=self.tool_calls or None,
        )
