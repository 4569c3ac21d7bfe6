"""
Session service sitting between transports and the orchestrator.

Handles: input validation, session lifecycle, query processing and the
plan-derived lookups, returning plain dicts ready for JSON encoding.
"""

from typing import Any

from agent_dispatch.orchestration.orchestrator import Orchestrator
from agent_dispatch.utils.error_handling import ValidationError, handle_errors
from agent_dispatch.utils.helpers import safe_serialize
from agent_dispatch.utils.logging import get_logger

logger = get_logger(__name__)


def _require(value: str | None, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


class SessionService:
    """Thin facade over an orchestrator for the HTTP and CLI front ends."""

    def __init__(self, orchestrator: Orchestrator):
        self.orchestrator = orchestrator

    @handle_errors()
    async def create_session(self, user_id: str | None) -> dict[str, Any]:
        session = await self.orchestrator.initialize_session(_require(user_id, "userId"))
        return {"sessionId": session.session_id}

    @handle_errors()
    async def end_session(self, session_id: str) -> dict[str, Any]:
        await self.orchestrator.end_session(_require(session_id, "sessionId"))
        return {"message": "Session ended successfully"}

    @handle_errors()
    async def query(self, session_id: str | None, query: str | None) -> dict[str, Any]:
        """Run one query and return the integrated response with the plan."""
        session_id = _require(session_id, "sessionId")
        query = _require(query, "query")

        outcome = await self.orchestrator.process_query(session_id, query)
        logger.info(f"Query answered for session {session_id} via {list(outcome.routed)}")
        return {"response": outcome.response, "plan": safe_serialize(outcome.plan)}

    @handle_errors()
    async def recommendations(self, session_id: str) -> dict[str, Any]:
        items = await self.orchestrator.recommendations(_require(session_id, "sessionId"))
        return {"recommendations": safe_serialize(items)}

    @handle_errors()
    async def itinerary(self, session_id: str) -> dict[str, Any]:
        itinerary = await self.orchestrator.itinerary(_require(session_id, "sessionId"))
        return {"itinerary": safe_serialize(itinerary)}

    async def evict_idle(self) -> list[str]:
        evicted = await self.orchestrator.store.evict_idle()
        if evicted:
            logger.info(f"Evicted {len(evicted)} idle sessions")
        return evicted
