"""HTTP API for the agent dispatch system."""

from agent_dispatch.api.app import create_app

__all__ = ["create_app"]
