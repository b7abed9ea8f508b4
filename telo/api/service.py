"""
API Service - Business logic layer between the HTTP app and the engine.

The service:
1. Translates API requests to GameLoop calls
2. Manages sessions and their loops
3. Formats snapshots and results as schema models

This layer is framework-agnostic (the FastAPI app is a thin shell).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import random
import time

from .schemas import (
    ActionResponse,
    ClickRequest,
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    GameRecordModel,
    GameStateModel,
    HistoryResponse,
    MoveModel,
    MoveRequest,
    PlayerModel,
    PlayersRequest,
    PositionModel,
    ScoresResponse,
    SessionResponse,
    SyncStateRequest,
)
from ..bots import HeuristicBot
from ..config import GameSettings
from ..engine_core.action import Move
from ..engine_core.action_generator import legal_actions
from ..engine_core.board import Position
from ..engine_core.state import GameState
from ..session import AITicket, GameLoop, GameMode, Session, SessionManager, TurnResult
from ..storage import GameStore, Player


def _position(model: PositionModel) -> Position:
    return Position(model.x, model.y)


def _position_model(position: Position) -> PositionModel:
    return PositionModel(x=position.x, y=position.y)


def _not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND.value,
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService(store=GameStore("/tmp/telo"))
        session = service.create_session(CreateSessionRequest(mode="ai"))
        result = service.click(session.session_id, ClickRequest(position={"x": 1, "y": 1}))
    """
    settings: GameSettings = field(default_factory=GameSettings)
    store: GameStore | None = None
    clock: Callable[[], float] = time.time
    session_manager: SessionManager = None  # type: ignore

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    def __post_init__(self):
        if self.store is None:
            self.store = GameStore(self.settings.data_dir, self.settings.history_limit)
        if self.session_manager is None:
            self.session_manager = SessionManager(
                store=self.store, settings=self.settings, clock=self.clock
            )

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Raises ValueError for an unusable player list."""
        players = None
        if request.players:
            players = [Player(**p.model_dump()) for p in request.players]

        bot = None
        if request.mode.value == GameMode.AI.value:
            bot = HeuristicBot(rng=random.Random(request.seed))

        session = self.session_manager.create_session(
            mode=request.mode.value, players=players, bot=bot
        )
        self._game_loops[session.session_id] = GameLoop(
            session, store=self.store, clock=self.clock
        )
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        loop = self._game_loops.get(session_id)
        if not loop:
            return _not_found(session_id)
        return self._session_to_response(loop.session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        self._game_loops.pop(session_id, None)
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def new_game(self, session_id: str) -> SessionResponse | ErrorResponse:
        loop = self._game_loops.get(session_id)
        if not loop:
            return _not_found(session_id)
        loop.new_game()
        return self._session_to_response(loop.session)

    # =========================================================================
    # Game loop
    # =========================================================================

    def click(self, session_id: str, request: ClickRequest) -> ActionResponse | ErrorResponse:
        loop = self._game_loops.get(session_id)
        if not loop:
            return _not_found(session_id)
        result = loop.click(_position(request.position), player_id=request.player_id)
        return self._turn_to_response(loop, result)

    def move(self, session_id: str, request: MoveRequest) -> ActionResponse | ErrorResponse:
        loop = self._game_loops.get(session_id)
        if not loop:
            return _not_found(session_id)
        action = Move(_position(request.move.from_), _position(request.move.to))
        result = loop.play(action, player_id=request.player_id)
        return self._turn_to_response(loop, result)

    def request_ai_turn(self, session_id: str) -> AITicket | None:
        loop = self._game_loops.get(session_id)
        if not loop or loop.session.game_state is None:
            return None
        return loop.request_ai_turn()

    def run_ai_turn(
        self,
        session_id: str,
        ticket: AITicket | None = None,
    ) -> ActionResponse | ErrorResponse:
        loop = self._game_loops.get(session_id)
        if not loop:
            return _not_found(session_id)
        return self._turn_to_response(loop, loop.run_ai_turn(ticket))

    def check_timeout(self, session_id: str) -> ActionResponse | ErrorResponse:
        """Apply the turn timer; success=False means time is not up."""
        loop = self._game_loops.get(session_id)
        if not loop:
            return _not_found(session_id)
        result = loop.check_timeout()
        if result is None:
            return ActionResponse(
                success=False,
                session=self._session_to_response(loop.session),
                error="Turn time has not expired",
                error_code="TIME_NOT_EXPIRED",
            )
        return self._turn_to_response(loop, result)

    def sync_state(
        self,
        session_id: str,
        request: SyncStateRequest,
    ) -> ActionResponse | ErrorResponse:
        """
        Replace the session's state with a peer's snapshot (online mode).

        An inconsistent snapshot is refused with VALIDATION_ERROR and the
        session keeps its current state.
        """
        loop = self._game_loops.get(session_id)
        if not loop:
            return _not_found(session_id)
        try:
            snapshot = GameState.from_dict(request.state.model_dump())
        except ValueError as e:
            return ActionResponse(
                success=False,
                session=self._session_to_response(loop.session),
                error=str(e),
                error_code=ErrorCode.VALIDATION_ERROR.value,
            )
        return self._turn_to_response(loop, loop.sync_state(snapshot))

    # =========================================================================
    # Records
    # =========================================================================

    def get_history(self) -> HistoryResponse:
        games = [GameRecordModel(**r.to_dict()) for r in self.store.load_history()]
        return HistoryResponse(games=games, count=len(games))

    def clear_history(self) -> HistoryResponse:
        self.store.clear_history()
        return HistoryResponse(games=[], count=0)

    def get_scores(self) -> ScoresResponse:
        return ScoresResponse(**self.store.load_scores())

    def reset_scores(self) -> ScoresResponse:
        self.store.reset_scores()
        for loop in self._game_loops.values():
            for p in loop.session.players:
                p.score = 0
        return ScoresResponse()

    def save_players(self, request: PlayersRequest) -> list[PlayerModel]:
        players = [Player(**p.model_dump()) for p in request.players]
        self.store.save_players(players)
        return [PlayerModel.model_validate(p) for p in players]

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def _session_to_response(self, session: Session) -> SessionResponse:
        loop = self._game_loops.get(session.session_id)
        state = session.game_state
        moves = [
            MoveModel(from_=_position_model(a.from_), to=_position_model(a.to))
            for a in legal_actions(state)
            if isinstance(a, Move)
        ]
        return SessionResponse(
            session_id=session.session_id,
            mode=session.mode.value,
            players=[PlayerModel.model_validate(p) for p in session.players],
            state=GameStateModel(**state.to_dict()),
            legal_moves=moves,
            valid_destinations=(
                [_position_model(p) for p in loop.valid_destinations()] if loop else []
            ),
            time_remaining=loop.time_remaining() if loop else None,
            ai_to_move=session.is_ai_turn(),
        )

    def _turn_to_response(self, loop: GameLoop, result: TurnResult) -> ActionResponse:
        session = None
        if loop.session.game_state is not None:
            session = self._session_to_response(loop.session)
        return ActionResponse(
            success=result.success,
            session=session,
            changes=result.changes,
            error=result.error,
            error_code=result.error_code,
            winner=result.winner,
            ai_explanation=result.ai_explanation,
        )
