"""
Logging framework for the agent dispatch system.

All modules log through loguru. ``setup_logging`` installs the console and
optional file sinks and routes standard-library loggers (uvicorn, httpx,
google-genai) into the same sinks. ``AgentLogger`` binds agent and session
ids so a single query can be followed across the gateway, the tool
executor and the orchestrator.
"""

import json
import logging
import os
import sys
from typing import Any

from loguru import logger

from agent_dispatch.config import LogLevel

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

# Third-party loggers forwarded into loguru
FORWARDED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "google_genai")


class _InterceptHandler(logging.Handler):
    """Forward standard-library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def get_logger(name: str):
    """
    Get a logger instance for the specified module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance with the module name attached
    """
    return logger.bind(name=name)


def setup_logging(
    log_level: LogLevel | str = LogLevel.INFO, log_file: str | None = None
):
    """
    Set up the logging configuration for the application.

    Safe to call more than once; every call replaces the existing sinks.

    Args:
        log_level: The logging level to use (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write logs to
    """
    if isinstance(log_level, str):
        log_level = LogLevel(log_level.upper())

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=log_level.value, colorize=True)

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=log_level.value,
            rotation="10 MB",
            compression="zip",
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in FORWARDED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = []
        std_logger.propagate = True

    logger.info(f"Logging initialized with level {log_level.value}")


def _to_json(obj: Any) -> str | None:
    if obj is None:
        return None
    try:
        return json.dumps(obj, default=str)
    except (TypeError, ValueError):
        return str(obj)


class AgentLogger:
    """
    Logger bound to one agent and, once known, the session it serves.

    Extra keyword arguments land in the record's ``extra`` dict, so file
    sinks and structured handlers can filter on ``agent_id`` and
    ``session_id``.
    """

    def __init__(self, agent_id: str, session_id: str | None = None):
        self.agent_id = agent_id
        self.session_id = session_id
        self._logger = logger.bind(agent_id=agent_id, session_id=session_id)

    def bind_session(self, session_id: str) -> "AgentLogger":
        """Return a logger for the same agent bound to a session."""
        return AgentLogger(self.agent_id, session_id)

    def debug(self, message: str, **kwargs):
        self._logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        self._logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        self._logger.error(message, **kwargs)

    def log_completion_request(
        self,
        model: str,
        messages: list[dict[str, Any]],
        tool_names: list[str],
        allow_tools: bool,
    ):
        """
        Log an outgoing completion request.

        Args:
            model: Name of the model
            messages: Conversation entries sent with the request
            tool_names: Tools declared to the model
            allow_tools: Whether the model may call them in this request
        """
        tools = ", ".join(tool_names) if tool_names else "none"
        self.debug(
            f"Completion request: {model} - {len(messages)} messages - "
            f"tools: {tools}{'' if allow_tools or not tool_names else ' (disabled)'}",
            model=model,
            messages=_to_json(messages),
        )

    def log_completion_reply(self, model: str, content: str, tool_call_names: list[str]):
        """
        Log a completion reply after conversion.

        Args:
            model: Name of the model
            content: Text content of the reply
            tool_call_names: Names of the tools the model asked to call
        """
        if tool_call_names:
            self.debug(f"Completion reply: {model} - tool calls: {', '.join(tool_call_names)}")
        else:
            self.debug(f"Completion reply: {model} - {len(content)} chars", content=content)

    def log_tool_call(self, tool_name: str, arguments: Any, ok: bool):
        """
        Log the outcome of one tool invocation.

        Args:
            tool_name: Name of the tool that was invoked
            arguments: Parsed (or raw) arguments
            ok: Whether the handler produced a success result
        """
        outcome = "ok" if ok else "failed"
        self.debug(
            f"Tool call: {tool_name} - {outcome}",
            tool_name=tool_name,
            arguments=_to_json(arguments),
        )
