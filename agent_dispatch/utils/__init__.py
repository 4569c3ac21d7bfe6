"""
Utility modules for the agent dispatch system.
"""

from agent_dispatch.config import LogLevel
from agent_dispatch.utils.error_handling import (
    AgentNotRegisteredError,
    ArgumentParseError,
    CompletionGatewayError,
    DispatchError,
    InsufficientPlanError,
    ResponseParseError,
    SessionNotFoundError,
    ToolExecutionError,
    ToolNotImplementedError,
    ValidationError,
    call_with_retry,
    handle_errors,
)
from agent_dispatch.utils.helpers import (
    add_days,
    format_price,
    generate_id,
    generate_session_id,
    parse_iso_date,
    safe_serialize,
    truncate_text,
    utc_now,
)
from agent_dispatch.utils.logging import AgentLogger, get_logger, setup_logging

__all__ = [
    "AgentLogger",
    "AgentNotRegisteredError",
    "ArgumentParseError",
    "CompletionGatewayError",
    "DispatchError",
    "InsufficientPlanError",
    "LogLevel",
    "ResponseParseError",
    "SessionNotFoundError",
    "ToolExecutionError",
    "ToolNotImplementedError",
    "ValidationError",
    "add_days",
    "call_with_retry",
    "format_price",
    "generate_id",
    "generate_session_id",
    "get_logger",
    "handle_errors",
    "parse_iso_date",
    "safe_serialize",
    "setup_logging",
    "truncate_text",
    "utc_now",
]
