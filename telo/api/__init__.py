"""
API Module - HTTP/WebSocket interface.

Exposes the engine to browser clients and online opponents:
1. Create a session (vs computer, local, online)
2. Click points / play moves
3. Ask the computer to play
4. Receive state snapshots over a WebSocket
5. Read and reset scores and history

FastAPI is only needed for create_app(); the service and schemas work
without it.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    ClickRequest,
    MoveRequest,
    SyncStateRequest,
    PlayersRequest,
    # Responses
    SessionResponse,
    ActionResponse,
    HistoryResponse,
    ScoresResponse,
    ErrorResponse,
    # Shared
    PositionModel,
    PieceModel,
    GameStateModel,
    PlayerModel,
    MoveModel,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "ClickRequest",
    "MoveRequest",
    "SyncStateRequest",
    "PlayersRequest",
    # Responses
    "SessionResponse",
    "ActionResponse",
    "HistoryResponse",
    "ScoresResponse",
    "ErrorResponse",
    # Shared
    "PositionModel",
    "PieceModel",
    "GameStateModel",
    "PlayerModel",
    "MoveModel",
    # Service
    "APIService",
    "create_app",
]
