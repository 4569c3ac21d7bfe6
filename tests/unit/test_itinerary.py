"""Tests for itinerary generation."""

import pytest

from agent_dispatch.agents.flight import search_flights
from agent_dispatch.agents.hotel import search_hotels
from agent_dispatch.agents.itinerary import (
    ItineraryAgent,
    generate_default_itinerary,
    generate_itinerary,
    modify_itinerary,
    summarize_itinerary,
)
from agent_dispatch.agents.local_experience import search_activities
from agent_dispatch.utils.error_handling import ValidationError
from tests.unit.fake_gateway import ScriptedGateway

# Number of days in the sample trip (2024-12-15 to 2024-12-18)
TRIP_DAYS = 3


def _plan(with_activities=False):
    plan = {
        "flights": search_flights(
            {"origin": "SEA", "destination": "SFO", "departure_date": "2024-12-15"}
        ),
        "hotels": search_hotels(
            {"location": "SFO", "check_in_date": "2024-12-15", "check_out_date": "2024-12-18"}
        ),
    }
    if with_activities:
        plan["activities"] = search_activities({"location": "SFO"})
    return plan


def _times(daily):
    return [(entry["time"], entry["type"]) for entry in daily["activities"]]


def test_default_itinerary_uses_flight_and_hotel():
    itinerary = generate_default_itinerary(_plan())

    assert itinerary["destination"] == "SFO"
    assert itinerary["start_date"] == "2024-12-15"
    assert itinerary["end_date"] == "2024-12-18"
    assert itinerary["duration"] == TRIP_DAYS
    assert itinerary["transportation"][0]["confirmation_code"] == "FL123"
    assert itinerary["accommodations"][0]["confirmation_code"] == "HTL789"
    assert len(itinerary["daily_plans"]) == TRIP_DAYS


def test_first_and_last_day_schedule():
    days = generate_default_itinerary(_plan())["daily_plans"]

    assert _times(days[0]) == [
        ("08:00", "Transportation"),
        ("13:00", "Meal"),
        ("15:00", "Accommodation"),
        ("19:00", "Meal"),
    ]
    assert ("11:00", "Accommodation") in _times(days[-1])
    assert ("08:00", "Meal") in _times(days[-1])


def test_activities_are_spread_across_days():
    itinerary = generate_itinerary({"destination": "SFO"}, _plan(with_activities=True))
    activities = [
        entry
        for daily in itinerary["daily_plans"]
        for entry in daily["activities"]
        if entry["type"] == "Activity"
    ]

    assert activities
    assert all(entry["time"] == "09:00" for entry in activities)


def test_excluded_sections_are_left_out():
    itinerary = generate_itinerary(
        {"destination": "SFO", "include_flights": False, "include_hotels": False}, _plan()
    )

    assert itinerary["transportation"] == []
    assert itinerary["accommodations"] == []


def test_trip_defaults_when_plan_is_empty():
    itinerary = generate_itinerary({"destination": "Lisbon"}, {})

    assert itinerary["destination"] == "Lisbon"
    assert itinerary["duration"] == TRIP_DAYS


def test_modify_adds_and_removes_entries():
    plan = _plan()
    plan["itinerary"] = generate_default_itinerary(plan)

    modified = modify_itinerary(
        {
            "itinerary_id": plan["itinerary"]["id"],
            "changes": {
                "add_activities": [{"day": 2, "activity": "Cable car ride", "time": "10:00"}],
                "remove_activities": ["Lunch"],
            },
        },
        plan,
    )

    day_two = [entry["description"] for entry in modified["daily_plans"][1]["activities"]]
    assert "Cable car ride" in day_two
    assert "Lunch" not in day_two
    # The stored itinerary is not mutated
    assert "Lunch" in [e["description"] for e in plan["itinerary"]["daily_plans"][1]["activities"]]


def test_summary_mentions_transport_and_stay():
    summary = summarize_itinerary(generate_default_itinerary(_plan()))

    assert summary.startswith("3-day itinerary for SFO")
    assert "Flight from SEA to SFO at 08:00" in summary
    assert "Azure Grand Hotel in SFO" in summary


def test_synthesize_requires_flights_or_hotels():
    agent = ItineraryAgent(ScriptedGateway())

    assert agent.synthesize({}) is None
    assert agent.synthesize(_plan())["destination"] == "SFO"


def _with_itinerary():
    plan = _plan()
    plan["itinerary"] = generate_default_itinerary(plan)
    return plan


def _moved(plan, **dates):
    return modify_itinerary(
        {"itinerary_id": plan["itinerary"]["id"], "changes": {"modify_dates": dates}}, plan
    )


def test_extending_dates_adds_days():
    modified = _moved(_with_itinerary(), new_end_date="2024-12-20")

    assert modified["duration"] == 5
    assert len(modified["daily_plans"]) == modified["duration"]
    assert [d["day"] for d in modified["daily_plans"]] == [1, 2, 3, 4, 5]
    assert modified["daily_plans"][-1]["date"] == "2024-12-19"


def test_shortening_dates_drops_days():
    modified = _moved(_with_itinerary(), new_start_date="2024-12-16")

    assert modified["duration"] == 2
    assert len(modified["daily_plans"]) == 2
    assert modified["daily_plans"][0]["date"] == "2024-12-16"


def test_duration_matches_a_fresh_itinerary_for_the_same_dates():
    modified = _moved(_with_itinerary(), new_start_date="2024-12-10", new_end_date="2024-12-14")
    fresh = generate_itinerary({"start_date": "2024-12-10", "end_date": "2024-12-14"}, {})

    assert modified["duration"] == fresh["duration"]
    assert len(modified["daily_plans"]) == len(fresh["daily_plans"])


def test_end_before_start_is_rejected():
    with pytest.raises(ValidationError):
        _moved(_with_itinerary(), new_end_date="2024-12-01")
