"""
Test configuration for unit tests.
"""

import pytest

from agent_dispatch.orchestration.presets import (
    build_recruiter_orchestrator,
    build_travel_orchestrator,
)
from tests.unit.fake_gateway import ScriptedGateway


@pytest.fixture
def gateway():
    """Scripted gateway with empty queues."""
    return ScriptedGateway()


@pytest.fixture
def travel_orchestrator(gateway, test_config):
    return build_travel_orchestrator(gateway=gateway, config=test_config)


@pytest.fixture
def recruiter_orchestrator(gateway, test_config):
    return build_recruiter_orchestrator(gateway=gateway, config=test_config)
