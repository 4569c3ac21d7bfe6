"""Service layer shared by the HTTP API and the interactive CLI."""

from agent_dispatch.services.session_service import SessionService

__all__ = ["SessionService"]
