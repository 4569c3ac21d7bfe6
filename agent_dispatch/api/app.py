"""
HTTP API for the agent dispatch system.

Exposes session lifecycle, query processing and the plan-derived lookups.
Request validation failures map to 400 instead of FastAPI's default 422.
"""

import asyncio
import contextlib
from collections.abc import AsyncIterator
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from agent_dispatch import __version__
from agent_dispatch.services.session_service import SessionService
from agent_dispatch.utils.error_handling import (
    DispatchError,
    InsufficientPlanError,
    SessionNotFoundError,
    ValidationError,
)
from agent_dispatch.utils.logging import get_logger

logger = get_logger(__name__)


class CreateSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str | None = Field(default=None, alias="userId")


class QueryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")
    query: str | None = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _sweep_idle_sessions(service: SessionService, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await service.evict_idle()
        except Exception as e:
            logger.error(f"Idle session sweep failed; retrying next interval: {e!s}")


def create_app(service: SessionService, sweep_interval: float = 60.0) -> FastAPI:
    """
    Build the FastAPI application around a session service.

    Idle sessions are evicted lazily on access; a background task started
    with the application also sweeps them every ``sweep_interval`` seconds.

    Args:
        service: Service wrapping the orchestrator for one preset
        sweep_interval: Seconds between idle-session sweeps

    Returns:
        Configured FastAPI application
    """

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        sweeper = asyncio.create_task(_sweep_idle_sessions(service, sweep_interval))
        logger.info("Agent dispatch API starting up")
        yield
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        logger.info("Agent dispatch API shutting down")

    app = FastAPI(
        title="Agent Dispatch API",
        description="Multi-agent orchestration over per-session conversations",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service = service

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.debug(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
        return _error(status.HTTP_400_BAD_REQUEST, "Malformed request body")

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found_handler(
        request: Request, exc: SessionNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Session not found")

    @app.exception_handler(InsufficientPlanError)
    async def insufficient_plan_handler(
        request: Request, exc: InsufficientPlanError
    ) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(DispatchError)
    async def dispatch_error_handler(request: Request, exc: DispatchError) -> JSONResponse:
        logger.error(f"Unhandled dispatch error on {request.url.path}: {exc!s}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "version": __version__,
            "sessions": len(service.orchestrator.store),
        }

    @app.post("/sessions", status_code=status.HTTP_201_CREATED)
    async def create_session(body: CreateSessionRequest) -> dict[str, Any]:
        return await service.create_session(body.user_id)

    @app.delete("/sessions/{session_id}")
    async def end_session(session_id: str) -> dict[str, Any]:
        return await service.end_session(session_id)

    @app.post("/query")
    async def query(body: QueryRequest) -> dict[str, Any]:
        return await service.query(body.session_id, body.query)

    @app.get("/recommendations/{session_id}")
    async def recommendations(session_id: str) -> dict[str, Any]:
        return await service.recommendations(session_id)

    @app.get("/itinerary/{session_id}")
    async def itinerary(session_id: str) -> dict[str, Any]:
        return await service.itinerary(session_id)

    return app
