"""
Pytest configuration for the agent dispatch system tests.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Register asyncio marker
pytest.importorskip("pytest_asyncio")

os.environ.setdefault("GEMINI_API_KEY", "test-key")

# Import project modules after configuring the environment
from agent_dispatch.config import (  # noqa: E402
    APIConfig,
    DispatchConfig,
    SystemConfig,
)
from agent_dispatch.utils import LogLevel, setup_logging  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Set up logging for tests."""
    setup_logging(LogLevel.DEBUG)


@pytest.fixture
def mock_gemini_client():
    """Mock Gemini client for testing."""
    mock_client = MagicMock()

    mock_response = MagicMock()
    mock_response.text = "Test response"
    mock_response.function_calls = None

    mock_client.aio = MagicMock()
    mock_client.aio.models = MagicMock()
    mock_client.aio.models.generate_content = AsyncMock(return_value=mock_response)

    return mock_client


@pytest.fixture
def test_config():
    """Test application configuration."""
    return DispatchConfig(
        api=APIConfig(gemini_api_key="test-key"),
        system=SystemConfig(
            log_level=LogLevel.DEBUG,
            environment="test",
            max_history=10,
            agent_timeout_seconds=5,
            tool_timeout_seconds=1,
            request_timeout_seconds=1,
            gateway_max_retries=1,
            gateway_retry_jitter=0,
            requests_per_minute=600,
        ),
    )
