"""
Feedback Agent for the recruiter dashboard preset.

This module implements interview feedback, follow-up questions and
development plans for candidates.
"""

from typing import Any

from agent_dispatch.agents.base import AgentConfig, AgentContext, BaseAgent
from agent_dispatch.data.candidates import INTERVIEW_NOTES, find_candidate
from agent_dispatch.protocol.executor import ToolCallExecutor
from agent_dispatch.protocol.gateway import CompletionGateway
from agent_dispatch.protocol.messages import ToolDefinition
from agent_dispatch.utils import ValidationError

FEEDBACK_INSTRUCTIONS = """You are a specialized recruitment feedback agent.
Your goal is to help recruiters give candidates clear, fair and actionable feedback.
Use generate_interview_feedback after interviews, suggest_follow_up_questions to probe open areas,
and create_development_plan to outline growth towards a target role.
Keep feedback specific, balanced and respectful."""

FEEDBACK_TOOLS = [
    ToolDefinition(
        name="generate_interview_feedback",
        description="Generate comprehensive feedback for a candidate after an interview",
        parameters={
            "candidate_id": {
                "type": "string",
                "description": "Unique identifier for the candidate",
            },
            "interview_type": {
                "type": "string",
                "description": "Type of interview that was conducted",
                "enum": ["Initial", "Technical", "Culture", "Leadership", "Case Study", "Final"],
            },
            "focus_areas": {
                "type": "array",
                "description": "Optional specific areas to focus feedback on",
                "items": {"type": "string"},
            },
            "tone": {
                "type": "string",
                "description": "Tone to use for the feedback",
                "enum": ["Constructive", "Encouraging", "Direct", "Balanced"],
            },
        },
        required=("candidate_id", "interview_type"),
    ),
    ToolDefinition(
        name="suggest_follow_up_questions",
        description="Generate follow-up questions for a specific candidate",
        parameters={
            "candidate_id": {
                "type": "string",
                "description": "Unique identifier for the candidate",
            },
            "topic_area": {
                "type": "string",
                "description": "Optional topic area to focus questions on",
            },
            "count": {
                "type": "integer",
                "description": "Number of questions to generate",
                "minimum": 1,
                "maximum": 10,
            },
        },
        required=("candidate_id",),
    ),
    ToolDefinition(
        name="create_development_plan",
        description="Create a development plan for a candidate",
        parameters={
            "candidate_id": {
                "type": "string",
                "description": "Unique identifier for the candidate",
            },
            "target_role": {
                "type": "string",
                "description": "Target role or position for development",
            },
            "timeframe": {
                "type": "string",
                "description": "Timeframe for the development plan",
                "enum": ["30 Days", "90 Days", "6 Months", "1 Year"],
            },
        },
        required=("candidate_id", "target_role"),
    ),
]

TONE_PREFIXES = {
    "Encouraging": ("You demonstrated exceptional", "You might consider developing"),
    "Direct": ("Strength:", "Needs work:"),
    "Constructive": ("You showed", "An opportunity to grow is"),
    "Balanced": ("Strength in", "Area to develop:"),
}


def _candidate_or_error(candidate_id: str) -> dict[str, Any]:
    candidate = find_candidate(candidate_id)
    if candidate is None:
        raise ValidationError(f"Unknown candidate: {candidate_id}")
    return candidate


def _notes_for(candidate_id: str) -> dict[str, list[dict[str, str]]]:
    return INTERVIEW_NOTES.get(candidate_id, {"strengths": [], "areas_for_improvement": []})


def generate_interview_feedback(
    arguments: dict[str, Any], context: AgentContext | None = None
) -> dict[str, Any]:
    """Feedback assembled from interview notes, filtered by focus areas."""
    candidate = _candidate_or_error(arguments["candidate_id"])
    notes = _notes_for(candidate["id"])
    strengths = list(notes["strengths"])
    improvements = list(notes["areas_for_improvement"])

    focus = [str(area).lower() for area in arguments.get("focus_areas") or []]
    if focus:

        def relevant(item: dict[str, str]) -> bool:
            text = f"{item['area']} {item['description']}".lower()
            return any(area in text for area in focus)

        strengths = [item for item in strengths if relevant(item)]
        improvements = [item for item in improvements if relevant(item)]

    tone = arguments.get("tone") or "Balanced"
    strength_prefix, growth_prefix = TONE_PREFIXES.get(tone, TONE_PREFIXES["Balanced"])
    statements = [f"{strength_prefix} {s['area'].lower()}." for s in strengths] + [
        f"{growth_prefix} {i['area'].lower()}." for i in improvements
    ]

    return {
        "candidate": {k: candidate[k] for k in ("id", "name", "current_role", "applied_role")},
        "interview_type": arguments["interview_type"],
        "tone": tone,
        "strengths": strengths,
        "areas_for_improvement": improvements,
        "feedback": statements,
        "recommended_next_steps": (
            ["Proceed to the next interview stage"]
            if len(strengths) >= len(improvements)
            else ["Schedule a follow-up conversation on open areas"]
        ),
    }


def suggest_follow_up_questions(
    arguments: dict[str, Any], context: AgentContext | None = None
) -> dict[str, Any]:
    """Questions probing each area the candidate should develop."""
    candidate = _candidate_or_error(arguments["candidate_id"])
    notes = _notes_for(candidate["id"])
    count = max(1, min(int(arguments.get("count") or 3), 10))
    topic = arguments.get("topic_area")

    questions = [
        {
            "question": f"Can you walk us through a time you worked on {item['area'].lower()}?",
            "purpose": item["description"],
            "category": topic or item["area"],
        }
        for item in notes["areas_for_improvement"] + notes["strengths"]
    ]
    return {
        "candidate_id": candidate["id"],
        "candidate_name": candidate["name"],
        "questions": questions[:count],
    }


def create_development_plan(
    arguments: dict[str, Any], context: AgentContext | None = None
) -> dict[str, Any]:
    """Milestones towards a target role, one per development area."""
    candidate = _candidate_or_error(arguments["candidate_id"])
    notes = _notes_for(candidate["id"])
    timeframe = arguments.get("timeframe") or "90 Days"

    milestones = [
        {
            "area": item["area"],
            "goal": item["description"],
            "actions": [
                f"Pair with a mentor experienced in {item['area'].lower()}",
                f"Deliver one project outcome demonstrating {item['area'].lower()}",
            ],
        }
        for item in notes["areas_for_improvement"]
    ]
    return {
        "candidate_id": candidate["id"],
        "candidate_name": candidate["name"],
        "target_role": arguments["target_role"],
        "timeframe": timeframe,
        "milestones": milestones,
        "build_on": [item["area"] for item in notes["strengths"]],
    }


class FeedbackAgent(BaseAgent):
    """Produces interview feedback; owns the ``feedback`` plan slot."""

    def __init__(
        self, gateway: CompletionGateway, executor: ToolCallExecutor | None = None
    ):
        config = AgentConfig(
            name="feedback",
            instructions=FEEDBACK_INSTRUCTIONS,
            slot="feedback",
            keywords=("feedback", "interview", "follow-up", "follow up", "development plan"),
            tools=FEEDBACK_TOOLS,
            display_name="feedback agent",
        )
        super().__init__(config, gateway, executor)

    def tool_handlers(self):
        return {
            "generate_interview_feedback": generate_interview_feedback,
            "suggest_follow_up_questions": suggest_follow_up_questions,
            "create_development_plan": create_development_plan,
        }

    def summarize(self, output: Any) -> str:
        if not isinstance(output, dict):
            return "No feedback available."
        if "milestones" in output:
            return (
                f"Created a {output['timeframe']} development plan for "
                f"{output['candidate_name']} towards {output['target_role']} "
                f"with {len(output['milestones'])} milestones."
            )
        if "questions" in output:
            return (
                f"Suggested {len(output['questions'])} follow-up questions for "
                f"{output['candidate_name']}."
            )
        return (
            f"{output['interview_type']} interview feedback for "
            f"{output['candidate']['name']}: {len(output['strengths'])} strengths, "
            f"{len(output['areas_for_improvement'])} areas to develop."
        )
