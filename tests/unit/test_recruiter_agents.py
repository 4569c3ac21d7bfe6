"""Tests for the recruiter dashboard agents and their tools."""

import pytest

from agent_dispatch.agents.base import AgentContext
from agent_dispatch.agents.feedback import (
    generate_interview_feedback,
    suggest_follow_up_questions,
)
from agent_dispatch.agents.insight import InsightAgent, build_digest, describe_digest
from agent_dispatch.agents.reel import analyze_reel, search_reels
from agent_dispatch.agents.trait import (
    TraitAgent,
    analyze_candidate_traits,
    compare_candidates,
    search_candidates_by_traits,
)
from agent_dispatch.protocol.context import ConversationContext
from agent_dispatch.utils.error_handling import CompletionGatewayError, ValidationError
from tests.unit.fake_gateway import ScriptedGateway, tool_reply


def _context(plan=None):
    return AgentContext(
        session_id="session_test",
        conversation=ConversationContext("sys"),
        view={"current_plan": plan or {}},
    )


def test_trait_search_matches_word_stems():
    result = search_candidates_by_traits({"traits": ["empathy"]})

    assert [c["id"] for c in result["candidates"]] == ["C001", "C003"]
    assert result["total_found"] == 2


def test_trait_search_accepts_comma_separated_traits():
    result = search_candidates_by_traits({"traits": "analytical, organized"})

    assert [c["id"] for c in result["candidates"]] == ["C002"]


def test_trait_analysis_cites_reels():
    result = analyze_candidate_traits({"candidate_id": "C001"})

    assert result["candidate"]["name"] == "Alex Explorer"
    assert result["trait_evidence"]["empathetic"]


def test_unknown_candidate_is_rejected():
    with pytest.raises(ValidationError):
        analyze_candidate_traits({"candidate_id": "C999"})
    with pytest.raises(ValidationError):
        compare_candidates({"candidate_ids": ["C998", "C999"]})


def test_comparison_matrix():
    result = compare_candidates({"candidate_ids": ["C001", "C002"], "traits": ["creative"]})

    assert result["comparison"] == {"C001": {"creative": True}, "C002": {"creative": False}}


def test_feedback_and_follow_up_questions():
    feedback = generate_interview_feedback(
        {"candidate_id": "C001", "interview_type": "Technical"}
    )
    questions = suggest_follow_up_questions({"candidate_id": "C001"})

    assert feedback["candidate"]["id"] == "C001"
    assert feedback["interview_type"] == "Technical"
    assert questions["candidate_name"] == "Alex Explorer"


def test_reel_search_and_analysis():
    reels = search_reels({"traits": ["empathy"]})["reels"]
    assert {reel["id"] for reel in reels} == {"R001", "R003"}

    analysis = analyze_reel({"reel_id": "R001"})
    assert analysis["reel"]["candidate_name"] == "Alex Explorer"


async def test_trait_agent_contains_unknown_candidate_error():
    gateway = ScriptedGateway()
    gateway.queue("trait", tool_reply("analyze_candidate_traits", candidate_id="C999"), "")
    agent = TraitAgent(gateway)

    result = await agent.process("Analyze C999", _context())

    assert result.degraded
    assert result.data is None


def test_digest_ranks_candidates_and_collects_reels():
    plan = {
        "candidates": search_candidates_by_traits({"traits": ["empathy"]}),
        "reels": search_reels({"traits": ["empathy"]}),
        "candidate_count": 2,
    }

    digest = build_digest(plan)

    assert digest["candidate_count"] == 2
    assert {c["id"] for c in digest["top_candidates"]} == {"C001", "C003"}
    assert len(digest["reel_titles"]) == 2
    assert "top matches" in describe_digest(digest)


async def test_insight_agent_falls_back_to_digest():
    gateway = ScriptedGateway()
    gateway.queue("insight", CompletionGatewayError("down", service_name="gemini"))
    agent = InsightAgent(gateway)
    plan = {"candidates": search_candidates_by_traits({"traits": ["empathy"]})}

    result = await agent.process("Summarize", _context(plan))

    assert result.degraded
    assert result.data == build_digest(plan)
    assert "Alex Explorer" in result.summary


async def test_insight_agent_keeps_model_summary():
    gateway = ScriptedGateway()
    gateway.queue("insight", "Riley stands out.")
    agent = InsightAgent(gateway)

    result = await agent.process("Summarize", _context({}))

    assert result.summary == "Riley stands out."
    assert result.data["top_candidates"] == []
