"""
Game Loop - Drives one session from player input.

The loop:
1. A player clicks a board point (or the computer is asked to play)
2. NotYourTurn and turn-timer checks happen here, before the engine
3. The reducer returns a new state or a rejection
4. Accepted states replace session.game_state wholesale
5. When the game ends, scores and history are written once

The computer's "thinking" pause is not slept here. request_ai_turn()
hands out a ticket; the caller waits ticket.delay seconds however it
likes and then calls run_ai_turn(ticket). Starting a new game or ending
the session invalidates outstanding tickets.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable
import logging
import time
import uuid

from .manager import Session, SessionState
from ..engine_core.action import Action, ActionResult, RejectionReason
from ..engine_core.action_generator import destinations_from, legal_actions
from ..engine_core.board import Position
from ..engine_core.reducer import (
    apply_action,
    apply_move,
    apply_placement,
    apply_timeout,
    turn_time_remaining,
)
from ..engine_core.state import GamePhase, GameState
from ..storage import GameRecord, GameStore

logger = logging.getLogger(__name__)

STALE_TICKET = "STALE_TICKET"


@dataclass(frozen=True)
class AITicket:
    """A pending computer move, valid only for one generation."""
    generation: int
    player_id: int
    due_at: float
    delay: float


@dataclass
class TurnResult:
    """
    Result of one loop step.

    state is the session's state after the step (unchanged on failure).
    """
    success: bool
    state: GameState | None = None
    changes: list[str] = field(default_factory=list)
    error: str | None = None
    error_code: str | None = None

    # Game over info
    winner: int | None = None
    record: GameRecord | None = None

    # Computer turns
    ai_explanation: str | None = None


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(session, store=store)
        result = loop.click(Position(1, 1))
        if not result.success:
            show_error(result.error)

        ticket = loop.request_ai_turn()
        if ticket:
            wait(ticket.delay)
            loop.run_ai_turn(ticket)
    """

    def __init__(
        self,
        session: Session,
        store: GameStore | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.session = session
        self.store = store
        self.clock = clock

    @property
    def state(self) -> GameState:
        if self.session.game_state is None:
            raise RuntimeError(f"Session {self.session.session_id} has ended")
        return self.session.game_state

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def new_game(self) -> GameState:
        """Discard the current game and start over with player 1."""
        self.session.generation += 1
        self.session.game_state = GameState.new(self.clock())
        self.session.state = SessionState.ACTIVE
        return self.session.game_state

    def sync_state(self, snapshot: GameState) -> TurnResult:
        """
        Adopt a snapshot that arrived from a peer.

        Last writer wins; no reconciliation is attempted. A snapshot from a
        different game (new start time) counts as a new game.
        """
        current = self.session.game_state
        if current is None or snapshot.started_at != current.started_at:
            self.session.generation += 1
            if not snapshot.is_over:
                self.session.state = SessionState.ACTIVE
        self.session.game_state = snapshot
        return self._after_change(ActionResult.success_with_state(snapshot, ["State synced"]))

    # =========================================================================
    # Human input
    # =========================================================================

    def click(self, position: Position, player_id: int | None = None) -> TurnResult:
        """
        A board point was clicked.

        player_id identifies the seat for online play. Without it, the click
        belongs to whoever is to move, unless that is the computer.
        """
        refused = self._guard_human_turn(player_id)
        if refused is not None:
            return refused

        state = self.state
        now = self.clock()
        if state.phase == GamePhase.PLACEMENT:
            result = apply_placement(state, position, now)
        else:
            result = apply_move(state, position, now)
        return self._after_change(result)

    def play(self, action: Action, player_id: int | None = None) -> TurnResult:
        """Apply a complete Placement or Move for a human seat."""
        refused = self._guard_human_turn(player_id)
        if refused is not None:
            return refused
        return self._after_change(apply_action(self.state, action, self.clock()))

    def _guard_human_turn(self, player_id: int | None) -> TurnResult | None:
        """NotYourTurn and timer checks that precede any human action."""
        state = self.state
        if state.is_over:
            return self._failure("Game is over", RejectionReason.GAME_OVER.value)

        if player_id is not None and player_id != state.current_player:
            return self._failure(
                f"It is player {state.current_player}'s turn",
                RejectionReason.NOT_YOUR_TURN.value,
            )
        if self.session.is_ai_turn():
            return self._failure(
                "Wait for the computer to play", RejectionReason.NOT_YOUR_TURN.value
            )

        return self.check_timeout()

    def valid_destinations(self) -> list[Position]:
        """Where the selected piece may go (empty without a selection)."""
        selected = self.state.selected_piece
        if selected is None or self.state.phase != GamePhase.MOVEMENT:
            return []
        return destinations_from(self.state, selected.position)

    # =========================================================================
    # Timer
    # =========================================================================

    def time_remaining(self) -> float | None:
        return turn_time_remaining(
            self.state, self.session.settings.turn_time_limit, self.clock()
        )

    def check_timeout(self) -> TurnResult | None:
        """Apply the turn timer. None while the current player still has time."""
        state = self.state
        if state.is_over:
            return None
        result = apply_timeout(state, self.session.settings.turn_time_limit, self.clock())
        if not result.success:
            return None
        return self._after_change(result)

    # =========================================================================
    # Computer turn
    # =========================================================================

    def request_ai_turn(self) -> AITicket | None:
        """Ticket for the computer's next move, or None if it is not its turn."""
        if not self.session.is_ai_turn():
            return None
        delay = self.session.settings.ai_move_delay
        return AITicket(
            generation=self.session.generation,
            player_id=self.state.current_player,
            due_at=self.clock() + delay,
            delay=delay,
        )

    def run_ai_turn(self, ticket: AITicket | None = None) -> TurnResult:
        """
        Let the computer play.

        A ticket from an earlier generation (game reset or session ended
        since it was issued) is refused and nothing is applied.
        """
        if ticket is not None and ticket.generation != self.session.generation:
            return self._failure("Computer move cancelled", STALE_TICKET, with_state=False)
        if self.session.game_state is None:
            return self._failure("Session has ended", STALE_TICKET, with_state=False)
        if not self.session.is_ai_turn() or self.session.bot is None:
            return self._failure(
                "It is not the computer's turn", RejectionReason.NOT_YOUR_TURN.value
            )

        state = self.state
        legal = legal_actions(state)
        if not legal:
            # Only reachable from snapshots fed in from outside.
            return self._failure(
                f"Player {state.current_player} has no legal move",
                RejectionReason.NO_LEGAL_MOVE.value,
            )

        decision = self.session.bot.select_action(state, legal)
        logger.debug(
            "Computer (player %s) plays %s: %s",
            state.current_player, decision.action.describe(), decision.explanation,
        )

        turn = self._after_change(apply_action(state, decision.action, self.clock()))
        turn.ai_explanation = decision.explanation
        return turn

    # =========================================================================
    # Helpers
    # =========================================================================

    def _failure(self, error: str, code: str, with_state: bool = True) -> TurnResult:
        return TurnResult(
            success=False,
            state=self.session.game_state if with_state else None,
            error=error,
            error_code=code,
        )

    def _after_change(self, result: ActionResult) -> TurnResult:
        if not result.success:
            return TurnResult(
                success=False,
                state=self.session.game_state,
                error=result.error,
                error_code=result.error_code.value if result.error_code else None,
            )

        new_state: GameState = result.new_state
        self.session.game_state = new_state
        turn = TurnResult(success=True, state=new_state, changes=list(result.changes))

        if new_state.is_over:
            turn.winner = new_state.winner
            turn.record = self._finish_game(new_state)
        return turn

    def _finish_game(self, state: GameState) -> GameRecord | None:
        """Score and history bookkeeping, once per game."""
        session = self.session
        session.state = SessionState.GAME_OVER
        if session.recorded_generation == session.generation or state.winner is None:
            return None
        session.recorded_generation = session.generation

        winner = session.get_player(state.winner)
        loser = session.get_player(2 if state.winner == 1 else 1)
        winner.score += 1

        record = GameRecord(
            record_id=str(uuid.uuid4()),
            date=datetime.now(timezone.utc).isoformat(),
            winner=replace(winner),
            loser=replace(loser),
            duration=int(max(0.0, self.clock() - state.started_at)),
            total_turns=state.turn_number,
            end_reason=state.end_reason.value if state.end_reason else None,
        )

        logger.info(
            "Game %s over: %s wins (%s) after %d turns",
            session.session_id,
            winner.name,
            record.end_reason,
            record.total_turns,
        )

        if self.store is not None:
            self.store.save_scores(
                session.get_player(1).score,
                session.get_player(2).score,
            )
            self.store.add_game(record)
        return record
