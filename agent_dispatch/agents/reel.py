"""
Reel Agent for the recruiter dashboard preset.

This module implements search and analysis of candidate video reels and
summaries of a candidate's journey across their reels.
"""

from typing import Any

from agent_dispatch.agents.base import AgentConfig, AgentContext, BaseAgent
from agent_dispatch.data.candidates import REELS, find_candidate, find_reel, reels_for
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import ToolDefinition
from agent_dispatch.utils import ValidationError

REEL_INSTRUCTIONS = """You are a specialized candidate reel analysis agent.
Your goal is to help recruiters understand candidates through their video reels and journals.
Use search_reels to find reels by theme or demonstrated trait, analyze_reel for a single reel,
and summarize_candidate_journey to describe how a candidate has grown over time.
Ground every observation in what the reels actually show."""

REEL_TOOLS = [
    ToolDefinition(
        name="search_reels",
        description="Search for candidate reels based on criteria",
        parameters={
            "themes": {
                "type": "array",
                "description": "List of themes or topics to search for in reels",
                "items": {"type": "string"},
            },
            "traits": {
                "type": "array",
                "description": "List of traits demonstrated in the reels",
                "items": {"type": "string"},
            },
            "duration": {
                "type": "string",
                "description": "Duration filter (Short: <2min, Medium: 2-5min, Long: >5min)",
                "enum": ["Short", "Medium", "Long", "Any"],
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of reels to return",
            },
        },
        required=("themes",),
    ),
    ToolDefinition(
        name="analyze_reel",
        description="Analyze a specific candidate's reel in detail",
        parameters={
            "reel_id": {
                "type": "string",
                "description": "Unique identifier for the reel",
            },
        },
        required=("reel_id",),
    ),
    ToolDefinition(
        name="summarize_candidate_journey",
        description="Generate a summary of a candidate's professional journey from their reels",
        parameters={
            "candidate_id": {
                "type": "string",
                "description": "Unique identifier for the candidate",
            },
        },
        required=("candidate_id",),
    ),
]

# Reel duration bands in seconds, lower bound inclusive
DURATION_BANDS = {
    "Short": (0, 120),
    "Medium": (120, 300),
    "Long": (300, None),
}


def search_reels(arguments: dict[str, Any], context: AgentContext | None = None) -> dict[str, Any]:
    """Filter reels by theme, demonstrated trait and duration."""
    themes = [str(t).lower() for t in arguments.get("themes") or []]
    traits = [str(t).lower()[:6] for t in arguments.get("traits") or []]
    reels = [dict(reel) for reel in REELS]

    if themes:
        reels = [
            r for r in reels if any(theme in t for theme in themes for t in r["themes"])
        ]
    if traits:
        reels = [
            r
            for r in reels
            if any(t.startswith(stem) for stem in traits for t in r["demonstrated_traits"])
        ]
    band = DURATION_BANDS.get(arguments.get("duration") or "Any")
    if band:
        low, high = band
        reels = [r for r in reels if r["duration"] >= low and (high is None or r["duration"] < high)]
    if arguments.get("limit"):
        reels = reels[: int(arguments["limit"])]

    return {"reels": reels, "total_found": len(reels)}


def analyze_reel(arguments: dict[str, Any], context: AgentContext | None = None) -> dict[str, Any]:
    """Structured read of one reel."""
    reel = find_reel(arguments["reel_id"])
    if reel is None:
        raise ValidationError(f"Unknown reel: {arguments['reel_id']}")
    return {
        "reel": reel,
        "storytelling": "clear problem, action and outcome arc",
        "communication_score": round(3.5 + len(reel["key_insights"]) * 0.4, 1),
        "highlights": reel["key_insights"],
        "demonstrated_traits": reel["demonstrated_traits"],
    }


def summarize_candidate_journey(
    arguments: dict[str, Any], context: AgentContext | None = None
) -> dict[str, Any]:
    """Chronological view of a candidate's reels."""
    candidate = find_candidate(arguments["candidate_id"])
    if candidate is None:
        raise ValidationError(f"Unknown candidate: {arguments['candidate_id']}")

    reels = sorted(reels_for(candidate["id"]), key=lambda reel: reel["upload_date"])
    themes: list[str] = []
    for reel in reels:
        themes.extend(theme for theme in reel["themes"] if theme not in themes)
    return {
        "candidate_id": candidate["id"],
        "candidate_name": candidate["name"],
        "milestones": [
            {"date": reel["upload_date"], "title": reel["title"], "insight": reel["key_insights"][0]}
            for reel in reels
        ],
        "recurring_themes": themes,
    }


class ReelAgent(BaseAgent):
    """Analyses candidate reels; owns the ``reels`` plan slot."""

    def __init__(
        self, gateway: CompletionGateway, executor: ToolCallExecutor | None = None
    ):
        config = AgentConfig(
            name="reel",
            instructions=REEL_INSTRUCTIONS,
            slot="reels",
            keywords=("reel", "video", "journey", "journal"),
            tools=REEL_TOOLS,
            display_name="reel analysis agent",
        )
        super().__init__(config, gateway, executor)

    def tool_handlers(self):
        return {
            "search_reels": search_reels,
            "analyze_reel": analyze_reel,
            "summarize_candidate_journey": summarize_candidate_journey,
        }

    def summarize(self, output: Any) -> str:
        if not isinstance(output, dict):
            return "No reel information available."
        if "milestones" in output:
            return (
                f"{output['candidate_name']}'s journey spans {len(output['milestones'])} reels "
                f"covering {', '.join(output['recurring_themes'][:3])}."
            )
        if "reel" in output:
            reel = output["reel"]
            return f"'{reel['title']}' by {reel['candidate_name']} highlights {reel['key_insights'][0].lower()}."
        reels = output.get("reels") or []
        if not reels:
            return "No reels found matching your criteria."
        titles = ", ".join(f"'{r['title']}'" for r in reels)
        return f"Found {len(reels)} reels: {titles}."
