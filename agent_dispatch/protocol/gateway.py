"""
Completion gateway: the seam between agents and the hosted model.

``CompletionGateway`` owns the conversation bookkeeping shared by every
backend (appending the user turn, the assistant reply and the tool
results). Backends implement ``complete`` only. The gateway keeps no
session state; the conversation is always passed in by the caller.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any

from aiolimiter import AsyncLimiter
from google import genai
from google.genai import types

from agent_dispatch.config import DispatchConfig
from agent_dispatch.config import config as default_config
from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.protocol.messages import (
    AssistantMessage,
    Message,
    MessageRole,
    ToolCall,
    ToolDefinition,
    ToolResult,
)
from agent_dispatch.utils.error_handling import CompletionGatewayError, call_with_retry
from agent_dispatch.utils.logging import AgentLogger, get_logger

logger = get_logger(__name__)


class CompletionGateway(ABC):
    """Accepts a message log plus tools and returns one assistant message."""

    async def process_message(
        self,
        context: ConversationContext,
        content: str,
        agent_id: str,
        tools: list[ToolDefinition] | None = None,
        system_prompt: str | None = None,
    ) -> AssistantMessage:
        """
        Send a user turn on behalf of an agent and record the reply.

        Args:
            context: Conversation of the session being served
            content: User content; not re-appended when it is already the
                latest user turn
            agent_id: Agent issuing the request
            tools: Tool definitions the model may call
            system_prompt: Agent instructions

        Returns:
            The assistant message, tagged with ``agent_id``
        """
        last = context.last_message
        if not (last and last.role == MessageRole.USER and last.content == content):
            context.append(Message(role=MessageRole.USER, content=content))

        reply = await self.complete(
            context.snapshot(agent_id),
            agent_id,
            tools=tools,
            system_prompt=system_prompt,
            allow_tools=True,
        )
        reply.agent_id = agent_id
        context.append(reply.to_message())
        return reply

    async def send_tool_results(
        self,
        context: ConversationContext,
        agent_id: str,
        tool_calls: list[ToolCall],
        results: list[ToolResult],
        tools: list[ToolDefinition] | None = None,
        system_prompt: str | None = None,
    ) -> AssistantMessage:
        """
        Record tool results and request exactly one follow-up completion.

        The follow-up is requested with tool calling disabled so the
        protocol depth stays at one round.
        """
        answered = {call.id for call in tool_calls}
        results = [result for result in results if result.tool_call_id in answered]
        context.append(
            Message(
                role=MessageRole.TOOL,
                content=json.dumps(
                    [
                        {"tool": result.tool_name, **result.as_payload()}
                        for result in results
                    ],
                    default=str,
                ),
                agent_tag=agent_id,
                tool_results=results,
            )
        )

        reply = await self.complete(
            context.snapshot(agent_id),
            agent_id,
            tools=tools,
            system_prompt=system_prompt,
            allow_tools=False,
        )
        reply.agent_id = agent_id
        reply.tool_calls = None
        context.append(reply.to_message())
        return reply

    def extract_tool_calls(self, message: AssistantMessage) -> list[ToolCall] | None:
        """Tool calls carried by ``message``, or None for a direct answer."""
        if not message.tool_calls:
            return None
        return list(message.tool_calls)

    @abstractmethod
    async def complete(
        self,
        messages: list[dict[str, Any]],
        agent_id: str,
        tools: list[ToolDefinition] | None = None,
        system_prompt: str | None = None,
        allow_tools: bool = True,
    ) -> AssistantMessage:
        """
        Produce one assistant message for a conversation snapshot.

        Raises:
            CompletionGatewayError: If the backend request fails
        """


class GeminiCompletionGateway(CompletionGateway):
    """Completion gateway backed by the Gemini API (google-genai)."""

    def __init__(
        self,
        config: DispatchConfig | None = None,
        client: genai.Client | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            config: Dispatch configuration (defaults to the global one)
            client: Pre-built Gemini client; created lazily when omitted
        """
        self.config = config or default_config
        self._client = client
        self._limiter = AsyncLimiter(self.config.system.requests_per_minute, 60)

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            api_key = self.config.api.gemini_api_key or None
            self._client = genai.Client(api_key=api_key)
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        agent_id: str,
        tools: list[ToolDefinition] | None = None,
        system_prompt: str | None = None,
        allow_tools: bool = True,
    ) -> AssistantMessage:
        system = self.config.system
        return await call_with_retry(
            lambda: self._generate(messages, agent_id, tools, system_prompt, allow_tools),
            max_retries=system.gateway_max_retries,
            max_jitter_seconds=system.gateway_retry_jitter,
        )

    async def _generate(
        self,
        messages: list[dict[str, Any]],
        agent_id: str,
        tools: list[ToolDefinition] | None,
        system_prompt: str | None,
        allow_tools: bool,
    ) -> AssistantMessage:
        model_config = self.config.get_agent_model(agent_id)
        agent_logger = AgentLogger(agent_id)
        agent_logger.log_completion_request(
            model=model_config.name,
            messages=messages,
            tool_names=[tool.name for tool in tools or []],
            allow_tools=allow_tools,
        )

        try:
            contents, session_instruction = self._convert_messages(messages, agent_id)
            instruction_parts = [p for p in (system_prompt, session_instruction) if p]
            generate_config = types.GenerateContentConfig(
                temperature=model_config.temperature,
                max_output_tokens=model_config.max_tokens,
                system_instruction="\n\n".join(instruction_parts) or None,
            )
            if tools:
                generate_config.tools = [self._convert_tools(tools)]
                if not allow_tools:
                    generate_config.tool_config = types.ToolConfig(
                        function_calling_config=types.FunctionCallingConfig(
                            mode="NONE"
                        )
                    )

            async with self._limiter:
                response = await asyncio.wait_for(
                    self.client.aio.models.generate_content(
                        model=model_config.name,
                        contents=contents,
                        config=generate_config,
                    ),
                    timeout=self.config.system.request_timeout_seconds,
                )
        except CompletionGatewayError:
            raise
        except asyncio.TimeoutError as e:
            raise CompletionGatewayError(
                "Request timed out", service_name="gemini", original_error=e
            ) from e
        except Exception as e:
            agent_logger.error(f"Error calling model: {e!s}")
            raise CompletionGatewayError(
                str(e),
                service_name="gemini",
                status_code=getattr(e, "code", None),
                original_error=e,
            ) from e

        reply = self._convert_response(response, agent_id)
        agent_logger.log_completion_reply(
            model=model_config.name,
            content=reply.content,
            tool_call_names=[call.name for call in reply.tool_calls or []],
        )
        return reply

    @staticmethod
    def _convert_tools(tools: list[ToolDefinition]) -> types.Tool:
        declarations = []
        for tool in tools:
            function = tool.to_schema()["function"]
            declarations.append(
                types.FunctionDeclaration(
                    name=function["name"],
                    description=function["description"],
                    parameters_json_schema=function["parameters"],
                )
            )
        return types.Tool(function_declarations=declarations)

    @staticmethod
    def _convert_messages(
        messages: list[dict[str, Any]], agent_id: str
    ) -> tuple[list[types.Content], str | None]:
        """
        Convert a conversation snapshot to Gemini contents.

        System entries become the system instruction. Function-call parts
        are only emitted when the next entry answers them, so trimmed
        history never leaves an unanswered call.
        """
        system_parts = []
        contents = []
        pending_calls = False

        for index, msg in enumerate(messages):
            role = msg.get("role", "user")
            content = msg.get("content", "")
            author = msg.get("name")

            if role == "system":
                system_parts.append(content)
                continue

            if role == "assistant":
                if author and author != agent_id and content:
                    content = f"[{author}] {content}"
                parts = [types.Part.from_text(text=content)] if content else []
                next_role = (
                    messages[index + 1].get("role")
                    if index + 1 < len(messages)
                    else None
                )
                pending_calls = bool(msg.get("tool_calls")) and next_role == "tool"
                if pending_calls:
                    for call in msg["tool_calls"]:
                        arguments = call.get("arguments") or {}
                        if isinstance(arguments, str):
                            try:
                                arguments = json.loads(arguments)
                            except json.JSONDecodeError:
                                arguments = {"raw": arguments}
                        parts.append(
                            types.Part.from_function_call(
                                name=call["name"], args=arguments
                            )
                        )
                if parts:
                    contents.append(types.Content(role="model", parts=parts))
                continue

            if role == "tool" and pending_calls:
                parts = [
                    types.Part.from_function_response(
                        name=result["name"],
                        response={k: v for k, v in result.items() if k in ("output", "error")},
                    )
                    for result in msg.get("tool_results", [])
                ]
                contents.append(types.Content(role="user", parts=parts))
                pending_calls = False
                continue

            pending_calls = False
            if role == "tool":
                content = f"Tool results: {content}"
            if content:
                contents.append(
                    types.Content(role="user", parts=[types.Part.from_text(text=content)])
                )

        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return contents, system_instruction

    @staticmethod
    def _convert_response(response: Any, agent_id: str) -> AssistantMessage:
        function_calls = getattr(response, "function_calls", None) or []
        tool_calls = [
            ToolCall(name=call.name, arguments=dict(call.args or {}))
            if not call.id
            else ToolCall(id=call.id, name=call.name, arguments=dict(call.args or {}))
            for call in function_calls
        ]
        text = response.text if not tool_calls else _text_parts(response)
        return AssistantMessage(
            content=text or "",
            tool_calls=tool_calls or None,
            agent_id=agent_id,
        )


def _text_parts(response: Any) -> str:
    """Text of the first candidate, ignoring function-call parts."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates or not candidates[0].content:
        return ""
    parts = candidates[0].content.parts or []
    return "".join(part.text for part in parts if getattr(part, "text", None))
