"""
Sessions and the in-memory session store.

The store map is guarded by an ``asyncio.Lock``; each session carries its
own lock so concurrent queries on one session run one after another.
Sessions idle longer than the TTL are evicted lazily on access and by
``evict_idle``.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from agent_dispatch.orchestration.plan import Plan
from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.utils.error_handling import SessionNotFoundError
from agent_dispatch.utils.helpers import utc_now
from agent_dispatch.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SESSION_TTL = 1800.0


class SessionState(StrEnum):
    ACTIVE = "active"
    TERMINATED = "terminated"


@dataclass
class Session:
    """One user's conversation and plan."""

    session_id: str
    user_id: str
    conversation: ConversationContext
    plan: Plan = field(default_factory=Plan)
    created_at: datetime = field(default_factory=utc_now)
    last_activity: datetime = field(default_factory=utc_now)
    state: SessionState = SessionState.ACTIVE
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    def touch(self, now: datetime | None = None) -> None:
        self.last_activity = now or utc_now()

    def idle_seconds(self, now: datetime) -> float:
        return (now - self.last_activity).total_seconds()

    def terminate(self) -> None:
        self.state = SessionState.TERMINATED


class SessionStore:
    """Concurrency-safe map of live sessions."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the store.

        Args:
            ttl_seconds: Idle time after which a session is evicted
            clock: Source of the current time
        """
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    async def add(self, session: Session) -> Session:
        async with self._lock:
            if session.session_id in self._sessions:
                raise ValueError(f"Session already exists: {session.session_id}")
            self._sessions[session.session_id] = session
        logger.info(f"Session created: {session.session_id} (user {session.user_id})")
        return session

    async def get(self, session_id: str) -> Session:
        """
        Look up a live session.

        Raises:
            SessionNotFoundError: If the id is unknown, ended or idle past the TTL
        """
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            if session.idle_seconds(self.clock()) > self.ttl_seconds:
                self._evict(session)
                raise SessionNotFoundError(session_id)
            return session

    async def remove(self, session_id: str) -> Session:
        """
        Remove a session and mark it terminated.

        Raises:
            SessionNotFoundError: If the id is unknown
        """
        async with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                raise SessionNotFoundError(session_id)
            session.terminate()
        logger.info(f"Session ended: {session_id}")
        return session

    async def evict_idle(self) -> list[str]:
        """Evict every session idle past the TTL; returns their ids."""
        async with self._lock:
            now = self.clock()
            expired = [
                session
                for session in self._sessions.values()
                if session.idle_seconds(now) > self.ttl_seconds
            ]
            for session in expired:
                self._evict(session)
        return [session.session_id for session in expired]

    def _evict(self, session: Session) -> None:
        self._sessions.pop(session.session_id, None)
        session.terminate()
        logger.info(f"Session evicted after idling: {session.session_id}")
