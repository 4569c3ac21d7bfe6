"""
Talent Insight Agent for the recruiter dashboard preset.

This module implements the integrator of the recruiter preset. It condenses
the candidates, feedback and reels gathered in the plan into a digest, and
asks the model to turn that digest into a recruiter-facing summary.
"""

import json
from typing import Any

from agent_dispatch.agents.base import AgentConfig, AgentContext, AgentResult, BaseAgent
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import AssistantMessage

INSIGHT_INSTRUCTIONS = """You are a talent insight agent for a recruiter dashboard.
You receive a digest of candidate searches, interview feedback and reel analysis.
Write a short, friendly summary for the recruiter: who stands out, why, and the next recommended action.
Only use facts present in the digest."""


def build_digest(plan: dict[str, Any]) -> dict[str, Any]:
    """Deterministic summary of the recruiter plan slots."""
    candidates_slot = plan.get("candidates") or {}
    candidates = candidates_slot.get("candidates", []) if isinstance(candidates_slot, dict) else []
    if isinstance(candidates_slot, dict) and "candidate" in candidates_slot:
        candidates = [candidates_slot["candidate"]]

    feedback = plan.get("feedback") if isinstance(plan.get("feedback"), dict) else {}
    reels_slot = plan.get("reels") if isinstance(plan.get("reels"), dict) else {}
    reels = reels_slot.get("reels", [])
    if "reel" in reels_slot:
        reels = [reels_slot["reel"]]

    ranked = sorted(candidates, key=lambda c: c.get("eco_score", 0), reverse=True)
    return {
        "candidate_count": plan.get("candidate_count", len(candidates)),
        "top_candidates": [
            {"id": c.get("id"), "name": c.get("name"), "traits": c.get("traits", [])}
            for c in ranked[:3]
        ],
        "feedback_for": (feedback.get("candidate") or {}).get("name")
        or feedback.get("candidate_name"),
        "open_development_areas": [
            item["area"] for item in feedback.get("areas_for_improvement", [])
        ],
        "reel_titles": [reel.get("title") for reel in reels],
    }


def describe_digest(digest: dict[str, Any]) -> str:
    """Plain-text rendering of a digest, used when the model is unavailable."""
    if not digest["top_candidates"] and not digest["feedback_for"] and not digest["reel_titles"]:
        return (
            "No candidate insights yet. Try searching for candidates by trait, "
            "or ask for interview feedback."
        )

    parts = []
    if digest["top_candidates"]:
        names = ", ".join(c["name"] for c in digest["top_candidates"])
        parts.append(f"{digest['candidate_count']} candidates in view; top matches: {names}.")
    if digest["feedback_for"]:
        parts.append(f"Feedback prepared for {digest['feedback_for']}.")
        if digest["open_development_areas"]:
            parts.append(
                "Areas to develop: " + ", ".join(digest["open_development_areas"]) + "."
            )
    if digest["reel_titles"]:
        parts.append("Relevant reels: " + ", ".join(digest["reel_titles"]) + ".")
    return " ".join(parts)


class InsightAgent(BaseAgent):
    """Integrator of the recruiter preset; owns the ``insights`` plan slot."""

    def __init__(
        self, gateway: CompletionGateway, executor: ToolCallExecutor | None = None
    ):
        config = AgentConfig(
            name="insight",
            instructions=INSIGHT_INSTRUCTIONS,
            slot="insights",
            display_name="talent insight agent",
        )
        super().__init__(config, gateway, executor)

    def build_prompt(self, query: str, context: AgentContext) -> str:
        digest = build_digest(context.current_plan)
        return f"{query}\n\nDigest:\n{json.dumps(digest, indent=2)}"

    def direct_result(self, reply: AssistantMessage, context: AgentContext) -> AgentResult:
        digest = build_digest(context.current_plan)
        return AgentResult(summary=reply.content or describe_digest(digest), data=digest)

    async def fallback(
        self, query: str, context: AgentContext, error: Exception
    ) -> AgentResult:
        digest = build_digest(context.current_plan)
        return AgentResult(summary=describe_digest(digest), data=digest, degraded=True)

    def summarize(self, output: Any) -> str:
        return describe_digest(output) if isinstance(output, dict) else ""
