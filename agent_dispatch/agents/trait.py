"""
Trait Agent for the recruiter dashboard preset.

This module implements the agent that searches candidates by traits,
analyses a single candidate's traits and compares candidates.
"""

from typing import Any

from agent_dispatch.agents.base import AgentConfig, AgentContext, BaseAgent
from agent_dispatch.data.candidates import CANDIDATES, find_candidate, reels_for
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import ToolDefinition
from agent_dispatch.utils import ValidationError

TRAIT_INSTRUCTIONS = """You are a specialized candidate trait analysis agent.
Your goal is to help recruiters identify candidates with specific traits and skills, and provide detailed analysis of candidate profiles.
Use the search_candidates_by_traits tool to find candidates with specific traits, and the analyze_candidate_traits tool to get deeper insights into specific candidates.
Always provide balanced analysis that highlights both strengths and potential areas for development.
Answer only trait-related questions. For other recruitment questions, inform users that you specialize in candidate trait analysis."""

TRAIT_TOOLS = [
    ToolDefinition(
        name="search_candidates_by_traits",
        description="Search for candidates with specific traits or skills",
        parameters={
            "traits": {
                "type": "array",
                "description": "List of traits or skills to search for",
                "items": {"type": "string"},
            },
            "location": {
                "type": "string",
                "description": "Optional location filter for candidates",
            },
            "experience_level": {
                "type": "string",
                "description": "Optional experience level filter",
                "enum": ["Junior", "Mid", "Senior", "Any"],
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of candidates to return",
            },
        },
        required=("traits",),
    ),
    ToolDefinition(
        name="analyze_candidate_traits",
        description="Analyze the traits and skills of a specific candidate",
        parameters={
            "candidate_id": {
                "type": "string",
                "description": "Unique identifier for the candidate",
            },
            "focus_areas": {
                "type": "array",
                "description": "Optional list of trait areas to focus on",
                "items": {"type": "string"},
            },
        },
        required=("candidate_id",),
    ),
    ToolDefinition(
        name="compare_candidates",
        description="Compare traits between multiple candidates",
        parameters={
            "candidate_ids": {
                "type": "array",
                "description": "List of candidate IDs to compare",
                "items": {"type": "string"},
            },
            "traits": {
                "type": "array",
                "description": "Optional specific traits to compare",
                "items": {"type": "string"},
            },
        },
        required=("candidate_ids",),
    ),
]


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(item) for item in value]


def _matches_trait(candidate: dict[str, Any], trait: str) -> bool:
    # "empathy" should find "empathetic", so compare on a shared stem
    stem = trait.lower()[:6]
    return any(t.startswith(stem) or stem in t for t in candidate["traits"])


def search_candidates_by_traits(
    arguments: dict[str, Any], context: AgentContext | None = None
) -> dict[str, Any]:
    """Filter the candidate pool by traits, location and experience."""
    traits = _as_list(arguments.get("traits"))
    candidates = [dict(candidate) for candidate in CANDIDATES]

    if traits:
        candidates = [c for c in candidates if any(_matches_trait(c, t) for t in traits)]
    if arguments.get("location"):
        location = str(arguments["location"]).lower()
        candidates = [c for c in candidates if c["location"].lower() == location]
    level = arguments.get("experience_level")
    if level and level != "Any":
        candidates = [c for c in candidates if c["experience_level"] == level]
    if arguments.get("limit"):
        candidates = candidates[: int(arguments["limit"])]

    return {"traits": traits, "candidates": candidates, "total_found": len(candidates)}


def analyze_candidate_traits(
    arguments: dict[str, Any], context: AgentContext | None = None
) -> dict[str, Any]:
    """Trait profile of one candidate, with evidence taken from their reels."""
    candidate = find_candidate(arguments["candidate_id"])
    if candidate is None:
        raise ValidationError(f"Unknown candidate: {arguments['candidate_id']}")

    focus = [area.lower() for area in _as_list(arguments.get("focus_areas"))]
    evidence = {
        trait: [
            reel["title"]
            for reel in reels_for(candidate["id"])
            if any(t.startswith(trait[:6]) for t in reel["demonstrated_traits"])
        ]
        for trait in candidate["traits"]
        if not focus or any(area in trait for area in focus)
    }
    return {
        "candidate": candidate,
        "trait_evidence": evidence,
        "strongest_trait": max(evidence, key=lambda t: len(evidence[t]), default=None),
    }


def compare_candidates(
    arguments: dict[str, Any], context: AgentContext | None = None
) -> dict[str, Any]:
    """Side-by-side trait coverage for several candidates."""
    ids = _as_list(arguments.get("candidate_ids"))
    candidates = [c for c in (find_candidate(i) for i in ids) if c is not None]
    if not candidates:
        raise ValidationError(f"No known candidates among: {', '.join(ids)}")

    traits = _as_list(arguments.get("traits")) or sorted(
        {trait for candidate in candidates for trait in candidate["traits"]}
    )
    matrix = {
        candidate["id"]: {trait: _matches_trait(candidate, trait) for trait in traits}
        for candidate in candidates
    }
    return {
        "candidates": candidates,
        "traits": traits,
        "comparison": matrix,
    }


class TraitAgent(BaseAgent):
    """Searches and analyses candidates; owns the ``candidates`` plan slot."""

    def __init__(
        self, gateway: CompletionGateway, executor: ToolCallExecutor | None = None
    ):
        config = AgentConfig(
            name="trait",
            instructions=TRAIT_INSTRUCTIONS,
            slot="candidates",
            keywords=("trait", "skill", "candidate", "empath", "personality", "strength"),
            tools=TRAIT_TOOLS,
            display_name="trait analysis agent",
        )
        super().__init__(config, gateway, executor)

    def tool_handlers(self):
        return {
            "search_candidates_by_traits": search_candidates_by_traits,
            "analyze_candidate_traits": analyze_candidate_traits,
            "compare_candidates": compare_candidates,
        }

    def summarize(self, output: Any) -> str:
        if not isinstance(output, dict):
            return "No candidate information available."

        if "comparison" in output:
            names = ", ".join(c["name"] for c in output["candidates"])
            return f"Compared {len(output['candidates'])} candidates ({names}) across {len(output['traits'])} traits."

        if "trait_evidence" in output:
            candidate = output["candidate"]
            summary = f"{candidate['name']} shows {', '.join(output['trait_evidence']) or 'no matching traits'}"
            if output.get("strongest_trait"):
                summary += f"; strongest evidence for {output['strongest_trait']}"
            return summary + "."

        candidates = output.get("candidates") or []
        if not candidates:
            return "No candidates found with the requested traits."
        names = ", ".join(f"{c['name']} ({c['location']})" for c in candidates)
        return f"Found {len(candidates)} candidates matching the requested traits: {names}."
