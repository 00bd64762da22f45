"""
FastAPI Application - Remote table for the shell game.

Endpoints:
    POST   /api/v1/sessions                      Open a table
    GET    /api/v1/sessions                      List active tables
    GET    /api/v1/sessions/{id}                 Current table state
    DELETE /api/v1/sessions/{id}                 Close a table
    POST   /api/v1/sessions/{id}/bet             Nudge the bet (+/-)
    PUT    /api/v1/sessions/{id}/bet             Set the bet
    POST   /api/v1/sessions/{id}/confirm         Place the bet
    POST   /api/v1/sessions/{id}/select          Guess a cup
    POST   /api/v1/sessions/{id}/new-game        Start over after game over
    GET    /api/v1/sessions/{id}/events          Drain queued notifications
    WS     /api/v1/sessions/{id}/ws              Live notifications + commands

Commands that arrive in the wrong phase are answered with
``accepted=false`` and 200: a tap landing mid-shuffle is expected,
not an error.
"""

from typing import Union
import asyncio
import json
import logging
import os

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .. import __version__
from ..config import GameConfig
from ..session import AsyncioScheduler, SessionManager
from .service import APIService, event_info
from .schemas import (
    CommandMessage,
    CommandResponse,
    CreateSessionRequest,
    EndSessionResponse,
    ErrorCode,
    ErrorResponse,
    EventsResponse,
    HealthResponse,
    PlaceBetRequest,
    SelectCupRequest,
    SessionListResponse,
    SessionResponse,
    SetBetRequest,
)

logger = logging.getLogger(__name__)

# Environment configuration
SHELLGAME_ENV = os.getenv("SHELLGAME_ENV", "development")
SHELLGAME_MAX_IDLE_SECONDS = float(os.getenv("SHELLGAME_MAX_IDLE_SECONDS", "3600"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def create_app(service: APIService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Shell Game API",
        description="""
Three-cup monte over HTTP. Bet, watch the shuffle, pick a cup.

## Round flow

1. `POST /bet` / `PUT /bet` while `phase=betting`
2. `POST /confirm` places the coin (`phase=showing_coin`)
3. Shuffle steps stream over the WebSocket (`phase=shuffling`)
4. `POST /select` while `phase=guessing`
5. The result arrives as `round_result`; the next round opens automatically
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(
        session_manager=SessionManager(
            config=GameConfig.from_env(),
            scheduler_factory=AsyncioScheduler,
        ),
        max_idle_seconds=SHELLGAME_MAX_IDLE_SECONDS,
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse, status_code: int = 404) -> JSONResponse:
        """Wrap an ErrorResponse in a JSON response."""
        return JSONResponse(status_code=status_code, content=error.model_dump(mode="json"))

    def respond(result, status_code: int = 404):
        if isinstance(result, ErrorResponse):
            return make_error_response(result, status_code)
        return result

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Open a new table",
    )
    async def create_session(body: CreateSessionRequest) -> SessionResponse:
        """Open a table with a fresh balance, open for betting."""
        return api_service.create_session(body)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active tables",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get table state",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="Close a table",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Command Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/bet",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Nudge the bet",
    )
    async def place_bet(session_id: str, body: PlaceBetRequest) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.place_bet(session_id, body.delta))

    @app.put(
        "/api/v1/sessions/{session_id}/bet",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Set the bet (clamped to the balance)",
    )
    async def set_bet(session_id: str, body: SetBetRequest) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.set_bet(session_id, body.amount))

    @app.post(
        "/api/v1/sessions/{session_id}/confirm",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Place the bet and hide the coin",
    )
    async def confirm_bet(session_id: str) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.confirm_bet(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/select",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Guess a cup",
    )
    async def select_cup(session_id: str, body: SelectCupRequest) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.select_cup(session_id, body.index))

    @app.post(
        "/api/v1/sessions/{session_id}/new-game",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Start over after game over",
    )
    async def new_game(session_id: str) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.request_new_game(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/events",
        response_model=EventsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Drain queued notifications",
    )
    async def drain_events(session_id: str) -> Union[EventsResponse, JSONResponse]:
        return respond(api_service.drain_events(session_id))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        Live table.

        Messages from server:
        - event: a session notification ({type, sequence, data})
        - command_result: reply to a command
        - error: bad message or unknown session

        Messages from client:
        - ping: Keep-alive
        - command: {"type": "command", "command": "select_cup", "index": 1}
        """
        await websocket.accept()

        async def send_error(message: str, code: ErrorCode, details: dict | None = None):
            error = ErrorResponse(error=message, error_code=code, details=details)
            await websocket.send_json({"type": "error", "payload": error.model_dump(mode="json")})

        session = api_service.session_manager.get_session(session_id)
        if not session:
            await send_error(f"Session {session_id} not found", ErrorCode.SESSION_NOT_FOUND)
            await websocket.close()
            return

        # Session events fire on the loop thread; hand them to the sender task
        queue: asyncio.Queue = asyncio.Queue()
        unsubscribe = session.events.subscribe(queue.put_nowait)

        async def pump():
            while True:
                event = await queue.get()
                await websocket.send_json({
                    "type": "event",
                    "payload": event_info(event).model_dump(),
                })

        sender = asyncio.create_task(pump())
        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await send_error("Invalid JSON", ErrorCode.VALIDATION_ERROR)
                    continue

                if not isinstance(message, dict):
                    await send_error("Expected a JSON object", ErrorCode.VALIDATION_ERROR)
                    continue

                kind = message.get("type")
                if kind == "ping":
                    await websocket.send_json({"type": "pong"})
                elif kind == "command":
                    try:
                        command = CommandMessage.model_validate(message)
                    except ValidationError as e:
                        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
                        await send_error("Invalid command", ErrorCode.VALIDATION_ERROR, {"fields": fields})
                        continue
                    result = api_service.dispatch(session_id, command)
                    await websocket.send_json({
                        "type": "command_result",
                        "payload": result.model_dump(mode="json"),
                    })
                else:
                    await send_error(
                        f"Unknown message type {kind!r}",
                        ErrorCode.VALIDATION_ERROR,
                        {"expected": ["ping", "command"]},
                    )
        except WebSocketDisconnect:
            logger.debug("websocket for session %s disconnected", session_id)
        finally:
            unsubscribe()
            sender.cancel()

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="shellgame",
            version=__version__,
            active_sessions=len(api_service.list_sessions()),
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Shell Game API",
            "version": __version__,
            "env": SHELLGAME_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn shellgame.api.app:app
app = create_app()
