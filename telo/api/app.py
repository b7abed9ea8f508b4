"""
FastAPI Application - REST + WebSocket API for browser and online play.

Endpoints:
    POST   /api/v1/sessions                      Create a session
    GET    /api/v1/sessions                      List active sessions
    GET    /api/v1/sessions/{id}                 Session and game state
    DELETE /api/v1/sessions/{id}                 End session
    POST   /api/v1/sessions/{id}/new-game        Restart the game
    POST   /api/v1/sessions/{id}/click           Click a board point
    POST   /api/v1/sessions/{id}/move            Play a whole move (from, to)
    POST   /api/v1/sessions/{id}/ai-turn         Let the computer play
    POST   /api/v1/sessions/{id}/timeout         Apply the turn timer
    PUT    /api/v1/sessions/{id}/state           Push a peer's snapshot (online)
    WS     /api/v1/sessions/{id}/ws              State updates
    GET    /api/v1/history, DELETE to clear
    GET    /api/v1/scores, DELETE to reset
    PUT    /api/v1/players                       Save player settings

Rule rejections are answered with 200 and success=false; the caller
re-prompts the same player. Unknown sessions are 404.

The WebSocket is the synchronized state channel for online play: every
accepted change is broadcast as a full snapshot, and the last writer wins.
"""

from typing import Optional, Union
import asyncio
import json
import logging
import os

from ..config import GameSettings, load_settings

logger = logging.getLogger(__name__)

# Environment configuration
TELO_ENV = os.getenv("TELO_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def create_app(service=None, settings: Optional[GameSettings] = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)
        settings: Game settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, WebSocket, WebSocketDisconnect
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install 'telo[api]'"
        )

    from .service import APIService
    from .schemas import (
        ActionResponse,
        ClickRequest,
        CreateSessionRequest,
        EndSessionResponse,
        ErrorCode,
        ErrorResponse,
        HealthResponse,
        HistoryResponse,
        MoveRequest,
        PlayerModel,
        PlayersRequest,
        ScoresResponse,
        SessionListResponse,
        SessionResponse,
        SyncStateRequest,
    )
    from ..session import STALE_TICKET

    app = FastAPI(
        title="Fanorona-telo Engine API",
        description="""
Two-player alignment game on a 9-point board.

Each player places 3 pieces, then moves one piece per turn along a board
line. Three in a row wins.

## Computer turns

In `ai` mode, after a human action the response has `ai_to_move=true`.
Call `POST /ai-turn`; the server waits the configured thinking delay and
plays. A `new-game` or `DELETE` during the wait cancels the move
(`STALE_TICKET`).
        """,
        version="1.0.0",
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

    api_service = service or APIService(settings=settings or load_settings())

    # WebSocket connections
    ws_connections: dict[str, list[WebSocket]] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: str,
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
            ).model_dump(),
        )

    def not_found_or(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response.error_code, response.error, status_code=404)
        return response

    async def broadcast_to_session(session_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a session."""
        if session_id not in ws_connections:
            return
        dead_connections = []
        for ws in ws_connections[session_id]:
            try:
                await ws.send_json(message)
            except (RuntimeError, WebSocketDisconnect):
                dead_connections.append(ws)
        for ws in dead_connections:
            ws_connections[session_id].remove(ws)

    async def publish(session_id: str, response: ActionResponse):
        if response.success and response.session is not None:
            await broadcast_to_session(session_id, {
                "type": "state_update",
                "payload": response.session.model_dump(by_alias=True),
            })

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(body: CreateSessionRequest):
        try:
            return api_service.create_session(body)
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR.value, str(e))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session and game state",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return not_found_or(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/new-game",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Start a new game at the same table",
    )
    async def new_game(session_id: str):
        response = api_service.new_game(session_id)
        if isinstance(response, SessionResponse):
            await broadcast_to_session(session_id, {
                "type": "state_update",
                "payload": response.model_dump(by_alias=True),
            })
        return not_found_or(response)

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/click",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Click a board point",
    )
    async def click(session_id: str, body: ClickRequest):
        """
        Placement phase: place a piece. Movement phase: select one of your
        pieces, or move the selected piece to a free adjacent point.
        """
        response = api_service.click(session_id, body)
        if isinstance(response, ActionResponse):
            await publish(session_id, response)
        return not_found_or(response)

    @app.post(
        "/api/v1/sessions/{session_id}/move",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Move a piece from one point to another",
    )
    async def move(session_id: str, body: MoveRequest):
        response = api_service.move(session_id, body)
        if isinstance(response, ActionResponse):
            await publish(session_id, response)
        return not_found_or(response)

    @app.post(
        "/api/v1/sessions/{session_id}/ai-turn",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Let the computer play its turn",
    )
    async def ai_turn(session_id: str):
        ticket = api_service.request_ai_turn(session_id)
        if ticket is not None and ticket.delay > 0:
            await broadcast_to_session(session_id, {"type": "ai_thinking"})
            await asyncio.sleep(ticket.delay)

        response = api_service.run_ai_turn(session_id, ticket)
        if isinstance(response, ActionResponse):
            if response.error_code == STALE_TICKET:
                return make_error_response(STALE_TICKET, response.error, status_code=409)
            await publish(session_id, response)
        return not_found_or(response)

    @app.post(
        "/api/v1/sessions/{session_id}/timeout",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Apply the per-turn time limit",
    )
    async def timeout(session_id: str):
        response = api_service.check_timeout(session_id)
        if isinstance(response, ActionResponse):
            await publish(session_id, response)
        return not_found_or(response)

    @app.put(
        "/api/v1/sessions/{session_id}/state",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Replace the game state with a peer's snapshot",
    )
    async def sync_state(session_id: str, body: SyncStateRequest):
        response = api_service.sync_state(session_id, body)
        if (
            isinstance(response, ActionResponse)
            and response.error_code == ErrorCode.VALIDATION_ERROR.value
        ):
            return make_error_response(response.error_code, response.error)
        if isinstance(response, ActionResponse):
            await publish(session_id, response)
        return not_found_or(response)

    # =========================================================================
    # Records Endpoints
    # =========================================================================

    @app.get("/api/v1/history", response_model=HistoryResponse, tags=["Records"])
    async def get_history() -> HistoryResponse:
        return api_service.get_history()

    @app.delete("/api/v1/history", response_model=HistoryResponse, tags=["Records"])
    async def clear_history() -> HistoryResponse:
        return api_service.clear_history()

    @app.get("/api/v1/scores", response_model=ScoresResponse, tags=["Records"])
    async def get_scores() -> ScoresResponse:
        return api_service.get_scores()

    @app.delete("/api/v1/scores", response_model=ScoresResponse, tags=["Records"])
    async def reset_scores() -> ScoresResponse:
        return api_service.reset_scores()

    @app.put("/api/v1/players", response_model=list[PlayerModel], tags=["Records"])
    async def save_players(body: PlayersRequest) -> list[PlayerModel]:
        return api_service.save_players(body)

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: full session snapshot
        - ai_thinking: computer is about to play
        - error: bad client message

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()
        ws_connections.setdefault(session_id, []).append(websocket)

        try:
            response = api_service.get_session(session_id)
            if isinstance(response, SessionResponse):
                await websocket.send_json({
                    "type": "state_update",
                    "payload": response.model_dump(by_alias=True),
                })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    message = None
                if not isinstance(message, dict):
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Expected a JSON object"},
                    })
                    continue
                if message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})

        except WebSocketDisconnect:
            logger.debug("WebSocket closed for session %s", session_id)
        finally:
            if websocket in ws_connections.get(session_id, []):
                ws_connections[session_id].remove(websocket)

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
        return HealthResponse()

    @app.get("/", tags=["System"])
    async def root():
        return {
            "name": "Fanorona-telo Engine API",
            "version": "1.0.0",
            "env": TELO_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app
