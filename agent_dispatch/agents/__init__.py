"""
Agent modules for the agent dispatch system.

This package contains the agent contract and the specialised agents of the
travel planner and recruiter dashboard presets.
"""

from agent_dispatch.agents.base import (
    AgentConfig,
    AgentContext,
    AgentResult,
    BaseAgent,
)
from agent_dispatch.agents.feedback import FeedbackAgent
from agent_dispatch.agents.flight import FlightAgent
from agent_dispatch.agents.general import GeneralAgent
from agent_dispatch.agents.hotel import HotelAgent
from agent_dispatch.agents.insight import InsightAgent
from agent_dispatch.agents.itinerary import ItineraryAgent
from agent_dispatch.agents.local_experience import LocalExperienceAgent
from agent_dispatch.agents.reel import ReelAgent
from agent_dispatch.agents.trait import TraitAgent

__all__ = [
    "AgentConfig",
    "AgentContext",
    "AgentResult",
    "BaseAgent",
    "FeedbackAgent",
    "FlightAgent",
    "GeneralAgent",
    "HotelAgent",
    "InsightAgent",
    "ItineraryAgent",
    "LocalExperienceAgent",
    "ReelAgent",
    "TraitAgent",
]
