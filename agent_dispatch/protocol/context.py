"""
Bounded, per-session conversation log.

The first entry is always the system message. History entries after it
are capped at ``max_history``; when the cap is exceeded the oldest
exchange is evicted together with the tool results it leaves orphaned.
"""

from typing import Any

from agent_dispatch.protocol.messages import Message, MessageRole
from agent_dispatch.utils.helpers import safe_serialize

DEFAULT_MAX_HISTORY = 10


class ConversationContext:
    """Ordered message log for one session."""

    def __init__(self, system_prompt: str, max_history: int = DEFAULT_MAX_HISTORY):
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self.max_history = max_history
        self._system = Message(role=MessageRole.SYSTEM, content=system_prompt)
        self._history: list[Message] = []

    def __len__(self) -> int:
        return len(self._history)

    @property
    def system_message(self) -> Message:
        return self._system

    @property
    def messages(self) -> list[Message]:
        """All messages, system message first."""
        return [self._system, *self._history]

    @property
    def last_message(self) -> Message | None:
        return self._history[-1] if self._history else None

    def append(self, message: Message) -> None:
        """
        Add a message and enforce the history bound.

        Args:
            message: Message to append; system messages are rejected
        """
        if message.role == MessageRole.SYSTEM:
            raise ValueError("The system message is pinned and cannot be appended")

        self._history.append(message)
        while len(self._history) > self.max_history:
            self._evict_oldest_exchange()

    def _evict_oldest_exchange(self) -> None:
        evicted = self._history.pop(0)
        if (
            evicted.role == MessageRole.USER
            and self._history
            and self._history[0].role == MessageRole.ASSISTANT
        ):
            self._history.pop(0)
        # Tool results whose assistant turn is gone
        while self._history and self._history[0].role == MessageRole.TOOL:
            self._history.pop(0)

    def snapshot(self, agent_tag: str | None = None) -> list[dict[str, Any]]:
        """
        Format the log for the completion gateway.

        Args:
            agent_tag: Agent on whose behalf the snapshot is taken; its own
                entries are marked with ``context: "current"``

        Returns:
            List of message dictionaries, system message first
        """
        entries = [{"role": MessageRole.SYSTEM.value, "content": self._system.content}]
        for message in self._history:
            entry: dict[str, Any] = {
                "role": message.role.value,
                "content": message.content,
            }
            if message.agent_tag:
                entry["name"] = message.agent_tag
                if agent_tag and message.agent_tag == agent_tag:
                    entry["context"] = "current"
            if message.tool_calls:
                entry["tool_calls"] = [
                    call.model_dump() for call in message.tool_calls
                ]
            if message.tool_results:
                entry["tool_results"] = [
                    {
                        "tool_call_id": result.tool_call_id,
                        "name": result.tool_name,
                        **safe_serialize(result.as_payload()),
                    }
                    for result in message.tool_results
                ]
            entries.append(entry)
        return entries

    def reset(self) -> None:
        """Drop all history; the system message and the session stay valid."""
        self._history.clear()
