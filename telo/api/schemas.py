"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a browser or networked client
and the engine. Game state snapshots use the same shape as
GameState.to_dict(), so a client can post back what it received.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- VALIDATION_ERROR: Malformed request
- Any RejectionReason value: the engine refused the action
- STALE_TICKET: A computer move was cancelled by a reset
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from ..engine_core.state import EndReason, GamePhase, GameStatus


# =============================================================================
# Enums
# =============================================================================

class GameModeName(str, Enum):
    AI = "ai"
    LOCAL = "local"
    ONLINE = "online"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class PositionModel(BaseModel):
    x: int = Field(ge=-1, le=2)
    y: int = Field(ge=-1, le=2)


class PieceModel(BaseModel):
    id: str
    player_id: int = Field(ge=1, le=2)
    position: PositionModel
    is_placed: bool = False


class GameStateModel(BaseModel):
    """Full game state snapshot."""
    phase: GamePhase
    status: GameStatus
    current_player: int = Field(ge=1, le=2)
    pieces: list[PieceModel]
    winner: Optional[int] = Field(None, ge=1, le=2)
    end_reason: Optional[EndReason] = None
    selected_piece_id: Optional[str] = None
    turn_start_time: float = 0.0
    started_at: float = 0.0
    total_game_time: float = 0.0
    turn_number: int = 0


class PlayerModel(BaseModel):
    player_id: int = Field(ge=1, le=2)
    name: str = Field(min_length=1, max_length=40)
    color: str = "#888888"
    avatar: Optional[str] = None
    score: int = 0
    is_ai: bool = False

    model_config = {"from_attributes": True}


class MoveModel(BaseModel):
    from_: PositionModel = Field(alias="from")
    to: PositionModel

    model_config = {"populate_by_name": True}


class GameRecordModel(BaseModel):
    id: str
    date: str
    winner: PlayerModel
    loser: PlayerModel
    duration: int
    total_turns: int
    end_reason: Optional[str] = None


# =============================================================================
# Requests
# =============================================================================

class CreateSessionRequest(BaseModel):
    mode: GameModeName = GameModeName.AI
    players: Optional[list[PlayerModel]] = Field(
        None, description="Seats 1 and 2; stored settings are used if omitted"
    )
    seed: Optional[int] = Field(None, description="Seed for the computer's random fallback")


class ClickRequest(BaseModel):
    position: PositionModel
    player_id: Optional[int] = Field(None, ge=1, le=2, description="Seat making the click (online)")


class MoveRequest(BaseModel):
    move: MoveModel
    player_id: Optional[int] = Field(None, ge=1, le=2)


class SyncStateRequest(BaseModel):
    state: GameStateModel


class PlayersRequest(BaseModel):
    players: list[PlayerModel] = Field(min_length=2, max_length=2)


# =============================================================================
# Responses
# =============================================================================

class SessionResponse(BaseModel):
    session_id: str
    mode: GameModeName
    players: list[PlayerModel]
    state: GameStateModel
    legal_moves: list[MoveModel] = Field(default_factory=list)
    valid_destinations: list[PositionModel] = Field(default_factory=list)
    time_remaining: Optional[float] = None
    ai_to_move: bool = False


class ActionResponse(BaseModel):
    success: bool
    session: Optional[SessionResponse] = None
    changes: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[str] = None
    winner: Optional[int] = None
    ai_explanation: Optional[str] = None


class HistoryResponse(BaseModel):
    games: list[GameRecordModel]
    count: int


class ScoresResponse(BaseModel):
    player1: int = 0
    player2: int = 0


class SessionListResponse(BaseModel):
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class ErrorResponse(BaseModel):
    error: str
    error_code: str
    details: Optional[dict] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str = "telo-engine"
    version: str = "1.0.0"
