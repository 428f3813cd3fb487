"""
FastAPI Application - REST API for game clients.

Endpoints:
    POST   /api/v1/sessions                 Open a session (load or new game)
    GET    /api/v1/sessions                 List active sessions
    GET    /api/v1/sessions/{id}            Get session state
    DELETE /api/v1/sessions/{id}            Save and end session
    POST   /api/v1/sessions/{id}/save       Save now
    POST   /api/v1/sessions/{id}/actions    Apply an engine action
    GET    /api/v1/health                   Health check

Engine-level failures (not enough coins, unknown item, wrong combat
phase) are not HTTP errors: they come back with success=false.
"""

from typing import Optional, Union
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings
from .schemas import (
    ActionRequest,
    ActionResponse,
    CreateSessionRequest,
    EndSessionResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    SaveResponse,
    SessionListResponse,
    SessionResponse,
)
from .service import APIService


logger = logging.getLogger(__name__)


def create_app(service: Optional[APIService] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (built from settings if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    settings = settings or Settings.from_env()
    api_service = service or APIService.from_settings(settings)

    app = FastAPI(
        title="Hugoland Engine API",
        description="""
Idle quiz-RPG state engine.

Open a session, then drive the game with `POST /actions`.
Every action response carries the full player state.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist or has ended |
| `UNKNOWN_ACTION` | Action name is not an engine entry point |
| `VALIDATION_ERROR` | Action is missing a required parameter |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_to_response(error: ErrorResponse) -> JSONResponse:
        status_code = 404 if error.error_code == ErrorCode.SESSION_NOT_FOUND else 400
        return make_error_response(error.error_code, error.error, status_code, error.details)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Open a session for a player",
    )
    async def create_session(request: CreateSessionRequest) -> SessionResponse:
        """
        Load the player's save (or start a new game) and open a session.

        Idle progress since the last save is settled before the state
        is returned.
        """
        return api_service.create_session(request.player_id)

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session state",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="Save and end a session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.post(
        "/api/v1/sessions/{session_id}/save",
        response_model=SaveResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Save the session now",
    )
    async def save_session(session_id: str) -> Union[SaveResponse, JSONResponse]:
        response = api_service.save_session(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    # =========================================================================
    # Game Loop
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown action or missing parameter"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game Loop"],
        summary="Apply an engine action",
    )
    async def apply_action(session_id: str, request: ActionRequest) -> Union[ActionResponse, JSONResponse]:
        """
        Apply one action to the session's state.

        On success the session keeps the new state. On failure the state
        is unchanged and `error_code` says why.
        """
        response = api_service.apply_action(session_id, request)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(**api_service.health())

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Hugoland Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app


# For running directly: uvicorn hugoland.api.app:app
app = create_app()
