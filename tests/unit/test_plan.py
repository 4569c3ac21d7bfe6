"""Tests for the session plan."""

import pytest

from agent_dispatch.orchestration.plan import Plan


def test_merge_is_last_write_wins():
    plan = Plan()
    plan.merge("flights", {"destination": "SFO", "extra": True}, 300)
    plan.merge("flights", {"destination": "LAX"}, 250)

    assert plan["flights"] == {"destination": "LAX"}
    assert plan.budget == {"flights": 250.0, "total": 250.0}


def test_none_data_leaves_slot_untouched():
    plan = Plan()
    plan.merge("hotels", {"id": "HTL789"}, 599.97)

    assert plan.merge("hotels", None) is False
    assert plan["hotels"] == {"id": "HTL789"}
    assert plan.updated_at is not None


def test_budget_sums_slot_costs():
    plan = Plan()
    plan.merge("flights", {"id": "FL123"}, 299.99)
    plan.merge("hotels", {"id": "HTL789"}, 599.97)
    plan.merge("itinerary", {"days": 3})

    assert plan.budget["total"] == pytest.approx(899.96)
    assert plan.budget["itinerary"] == 0.0


def test_candidate_count_is_derived():
    plan = Plan()
    plan.merge("candidates", {"candidates": [{"id": "C001"}, {"id": "C003"}]})
    assert plan.candidate_count == 2

    plan.merge("candidates", {"candidate": {"id": "C001"}})
    assert plan.candidate_count == 1


def test_to_dict_flattens_slots():
    plan = Plan()
    plan.merge("flights", {"destination": "SFO"}, 100)

    assert plan.to_dict() == {
        "flights": {"destination": "SFO"},
        "budget": {"flights": 100.0, "total": 100.0},
        "candidate_count": 0,
    }


def test_describe_lists_filled_slots():
    plan = Plan()
    assert plan.describe() == ""

    plan.merge("flights", {"id": "FL123"})
    plan.merge("hotels", {"id": "HTL789"})
    plan.merge("activities", {"activities": []})

    assert plan.filled_slots() == ["flights", "hotels", "activities"]
    assert plan.describe() == "flight arrangements, hotel bookings and local activities"
