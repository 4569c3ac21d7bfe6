"""Tests for the HTTP API."""

import time
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from agent_dispatch.api.app import create_app
from agent_dispatch.services.session_service import SessionService
from tests.unit.fake_gateway import tool_reply


@pytest.fixture
def client(travel_orchestrator):
    app = create_app(SessionService(travel_orchestrator))
    with TestClient(app) as test_client:
        yield test_client


def _create_session(client):
    response = client.post("/sessions", json={"userId": "user-1"})
    assert response.status_code == 201
    return response.json()["sessionId"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_create_session_requires_user_id(client):
    assert client.post("/sessions", json={}).status_code == 400
    assert client.post("/sessions", json={"userId": "  "}).status_code == 400


def test_query_returns_response_and_plan(client, gateway):
    gateway.queue(
        "flight",
        tool_reply("search_flights", origin="SEA", destination="SFO", departure_date="2024-12-15"),
        "Found flights.",
    )
    gateway.queue("itinerary", "Trip summary.")
    session_id = _create_session(client)

    response = client.post("/query", json={"sessionId": session_id, "query": "Find a flight"})

    assert response.status_code == 200
    body = response.json()
    assert body["response"] == "Trip summary."
    assert body["plan"]["flights"]["destination"] == "SFO"
    assert body["plan"]["budget"]["flights"] == 299.99


def test_query_validation(client):
    session_id = _create_session(client)

    assert client.post("/query", json={"sessionId": session_id}).status_code == 400
    assert client.post("/query", json={"query": "hello"}).status_code == 400
    assert (
        client.post(
            "/query", content="not json", headers={"Content-Type": "application/json"}
        ).status_code
        == 400
    )


def test_unknown_session_is_404(client):
    assert client.post("/query", json={"sessionId": "nope", "query": "hi"}).status_code == 404
    assert client.delete("/sessions/nope").status_code == 404
    assert client.get("/recommendations/nope").status_code == 404
    assert client.get("/itinerary/nope").status_code == 404


def test_end_session(client):
    session_id = _create_session(client)

    response = client.delete(f"/sessions/{session_id}")

    assert response.status_code == 200
    assert response.json() == {"message": "Session ended successfully"}
    assert (
        client.post("/query", json={"sessionId": session_id, "query": "hi"}).status_code
        == 404
    )


def test_itinerary_needs_plan_data(client, gateway):
    session_id = _create_session(client)
    assert client.get(f"/itinerary/{session_id}").status_code == 400

    gateway.queue(
        "hotel",
        tool_reply(
            "search_hotels",
            location="SFO",
            check_in_date="2024-12-15",
            check_out_date="2024-12-18",
        ),
        "",
    )
    client.post("/query", json={"sessionId": session_id, "query": "Find a hotel"})

    response = client.get(f"/itinerary/{session_id}")
    assert response.status_code == 200
    assert response.json()["itinerary"]["destination"] == "SFO"


def test_recommendations(client):
    session_id = _create_session(client)

    response = client.get(f"/recommendations/{session_id}")

    assert response.status_code == 200
    assert response.json() == {"recommendations": []}


def test_background_sweep_evicts_idle_sessions(travel_orchestrator):
    travel_orchestrator.store.ttl_seconds = -1
    app = create_app(SessionService(travel_orchestrator), sweep_interval=0.01)

    with TestClient(app) as client:
        client.post("/sessions", json={"userId": "user-1"})
        deadline = time.monotonic() + 2
        while len(travel_orchestrator.store) and time.monotonic() < deadline:
            time.sleep(0.02)

        assert client.get("/health").json()["sessions"] == 0


def test_background_sweep_survives_a_failed_pass():
    calls = 0

    async def flaky_evict():
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RuntimeError("store unavailable")
        return []

    service = MagicMock()
    service.evict_idle = flaky_evict
    app = create_app(service, sweep_interval=0.01)

    with TestClient(app):
        deadline = time.monotonic() + 2
        while calls < 3 and time.monotonic() < deadline:
            time.sleep(0.02)

    assert calls >= 3
