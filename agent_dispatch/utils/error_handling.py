"""
Error handling utilities for the agent dispatch system.

This module provides the exception taxonomy shared by the protocol,
agent and orchestration layers, plus decorators and helpers to handle
errors consistently across the application.
"""

import functools
import inspect
import traceback
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, cast

from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random,
)

# Type variables for function decorator typing
F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")


class DispatchError(Exception):
    """Base exception class for all dispatch errors."""

    def __init__(self, message: str, original_error: Exception | None = None):
        """
        Initialize a DispatchError.

        Args:
            message: Error message
            original_error: The original exception that caused this error (optional)
        """
        self.original_error = original_error
        if original_error:
            message = f"{message} - Original error: {original_error!s}"
        super().__init__(message)


class SessionNotFoundError(DispatchError):
    """Error raised when a session id is unknown, ended or evicted."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class AgentNotRegisteredError(DispatchError):
    """Error raised when an agent id has no registry entry."""

    def __init__(self, agent_id: str):
        self.agent_id = agent_id
        super().__init__(f"Agent '{agent_id}' not registered")


class ArgumentParseError(DispatchError):
    """Error raised when tool-call arguments are malformed or incomplete."""

    pass


class ToolNotImplementedError(DispatchError):
    """Error raised when an agent has no handler for a requested tool."""

    def __init__(self, tool_name: str, agent_id: str):
        self.tool_name = tool_name
        self.agent_id = agent_id
        super().__init__(f"Tool {tool_name} not implemented by agent {agent_id}")


class ToolExecutionError(DispatchError):
    """Error raised when a tool handler fails or times out."""

    pass


class CompletionGatewayError(DispatchError):
    """Error raised when the completion service request fails."""

    def __init__(
        self,
        message: str,
        service_name: str = "completion",
        status_code: int | None = None,
        original_error: Exception | None = None,
    ):
        """
        Initialize a CompletionGatewayError.

        Args:
            message: Error message
            service_name: Name of the completion service
            status_code: HTTP status code (optional)
            original_error: The original exception that caused this error (optional)
        """
        self.service_name = service_name
        self.status_code = status_code
        status_str = f" (status: {status_code})" if status_code else ""
        full_message = f"Error in {service_name} API{status_str}: {message}"
        super().__init__(full_message, original_error)


class ResponseParseError(DispatchError):
    """Error raised when model text expected to be structured is not."""

    pass


class InsufficientPlanError(DispatchError):
    """Error raised when the plan lacks the data an operation needs."""

    pass


class ValidationError(DispatchError):
    """Error raised when validation of input or data fails."""

    pass


def handle_errors(
    default_value: T | None = None, error_cls: type[Exception] = DispatchError
) -> Callable[[F], F]:
    """
    Decorator to catch and handle exceptions, logging them and
    optionally returning a default value.

    Errors that already belong to the dispatch taxonomy pass through
    unchanged; anything else is re-raised as ``error_cls``. Works on both
    plain and coroutine functions.

    Args:
        default_value: Value to return if an exception occurs (optional)
        error_cls: Exception type to re-raise (default: DispatchError)

    Returns:
        Decorated function
    """

    def _handle(func_name: str, e: Exception) -> Any:
        if isinstance(e, DispatchError):
            raise e
        logger.error(f"Error in {func_name}: {e!s}")
        logger.debug(f"Traceback: {traceback.format_exc()}")

        if default_value is not None:
            logger.info(f"Returning default value from {func_name}")
            return default_value

        raise error_cls(str(e), original_error=e) from e

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    return _handle(func.__name__, e)

            return cast(F, async_wrapper)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                return _handle(func.__name__, e)

        return cast(F, wrapper)

    return decorator


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 1,
    max_jitter_seconds: float = 1.0,
    retry_exceptions: tuple = (CompletionGatewayError,),
) -> T:
    """
    Await ``func`` with a bounded number of retries and random jitter.

    Args:
        func: Zero-argument coroutine factory to call
        max_retries: Retries after the first attempt
        max_jitter_seconds: Upper bound of the random wait between attempts
        retry_exceptions: Exception types that trigger a retry

    Returns:
        Result of the first successful attempt

    Raises:
        The last exception once attempts are exhausted
    """
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(retry_exceptions),
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_random(0, max_jitter_seconds),
        reraise=True,
    ):
        with attempt:
            result = await func()
            if attempt.retry_state.attempt_number > 1:
                logger.info(
                    f"Succeeded after {attempt.retry_state.attempt_number} attempts"
                )
    return result
