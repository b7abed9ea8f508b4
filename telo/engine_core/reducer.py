"""
Reducer - Applies actions to game state.

The reducer is the single point of state transition.
All changes must go through apply_placement(), apply_move(),
apply_action() or apply_timeout().

Design principles:
- Pure function: (state, input, now) -> ActionResult
- Validates before applying; a rejection never alters the input state
- Timestamps come from the caller so the engine has no clock of its own
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import time

from .board import Position, is_valid_position
from .state import GameState, GamePhase, GameStatus, EndReason, GamePiece
from .action import Action, ActionResult, Move, Placement, RejectionReason, Select
from .rules import (
    can_move_to,
    check_winner,
    is_occupied,
    move_piece,
    other_player,
    place_piece,
)


def _now(now: float | None) -> float:
    return time.time() if now is None else now


def _guard_playing(state: GameState) -> ActionResult | None:
    if state.is_over:
        return ActionResult.failure("Game is over - no actions allowed", RejectionReason.GAME_OVER)
    return None


def _end_turn(
    state: GameState,
    pieces: tuple[GamePiece, ...],
    now: float,
    changes: list[str],
) -> ActionResult:
    """
    Finish a committed placement or move.

    Checks alignment, enters the movement phase once every piece is down,
    and hands the turn over.
    """
    all_placed = all(p.is_placed for p in pieces)
    phase = GamePhase.MOVEMENT if all_placed else state.phase
    next_player = other_player(state.current_player)
    winner = check_winner(pieces)

    new_state = state._copy_with(
        pieces=pieces,
        phase=phase,
        current_player=next_player,
        selected_piece_id=None,
        turn_start_time=now,
        total_game_time=max(0.0, now - state.started_at),
        turn_number=state.turn_number + 1,
    )

    if phase != state.phase:
        changes.append("All pieces placed - movement phase begins")

    if winner is not None:
        new_state = new_state._copy_with(
            status=GameStatus.WON,
            winner=winner,
            end_reason=EndReason.ALIGNMENT,
        )
        changes.append(f"Player {winner} aligned three pieces and wins")

    return ActionResult.success_with_state(new_state, changes=changes)


def apply_placement(
    state: GameState,
    position: Position,
    now: float | None = None,
) -> ActionResult:
    """Place the current player's next piece on an empty point."""
    error = _guard_playing(state)
    if error:
        return error
    if state.phase != GamePhase.PLACEMENT:
        return ActionResult.failure("Placement phase is over", RejectionReason.WRONG_PHASE)
    if not is_valid_position(position):
        return ActionResult.failure(
            f"{position} is not a board point", RejectionReason.INVALID_POSITION
        )
    if is_occupied(position, state.pieces):
        return ActionResult.failure(
            f"{position} is already occupied", RejectionReason.POSITION_OCCUPIED
        )

    pieces = place_piece(state.current_player, position, state.pieces)
    if pieces is None:
        return ActionResult.failure(
            f"Player {state.current_player} has no piece left to place",
            RejectionReason.NO_PIECES_LEFT,
        )

    return _end_turn(
        state,
        pieces,
        _now(now),
        [f"Player {state.current_player} placed a piece at {position}"],
    )


def apply_move(
    state: GameState,
    position: Position,
    now: float | None = None,
) -> ActionResult:
    """
    Handle a click during the movement phase.

    Clicking one of your own pieces selects it (re-selection allowed).
    Clicking a free adjacent point with a piece selected moves it there.
    Anything else is rejected.
    """
    error = _guard_playing(state)
    if error:
        return error
    if state.phase != GamePhase.MOVEMENT:
        return ActionResult.failure(
            "Pieces cannot move until all are placed", RejectionReason.WRONG_PHASE
        )

    clicked = state.piece_at(position)
    if clicked is not None and clicked.player_id == state.current_player:
        return ActionResult.success_with_state(
            state._copy_with(selected_piece_id=clicked.piece_id),
            changes=[f"Player {state.current_player} selected {position}"],
        )

    selected = state.selected_piece
    if selected is None:
        return ActionResult.failure(
            "Select one of your pieces first", RejectionReason.NO_PIECE_SELECTED
        )

    if clicked is None and can_move_to(selected.position, position, state.pieces):
        pieces = move_piece(selected.position, position, state.pieces)
        return _end_turn(
            state,
            pieces,
            _now(now),
            [f"Player {state.current_player} moved {selected.position} -> {position}"],
        )

    return ActionResult.failure(
        f"Cannot move from {selected.position} to {position}",
        RejectionReason.INVALID_DESTINATION,
    )


def apply_action(
    state: GameState,
    action: Action,
    now: float | None = None,
) -> ActionResult:
    """
    Apply a tagged action.

    Move(from_, to) is a selection followed by a commit; the input state
    is returned untouched if either half is refused.
    """
    if isinstance(action, Placement):
        return apply_placement(state, action.position, now)

    if isinstance(action, Select):
        error = _guard_playing(state)
        if error:
            return error
        piece = state.piece_at(action.position)
        if piece is None or piece.player_id != state.current_player:
            return ActionResult.failure(
                f"No piece of player {state.current_player} at {action.position}",
                RejectionReason.NO_PIECE_SELECTED,
            )
        return apply_move(state, action.position, now)

    if isinstance(action, Move):
        selection = apply_action(state, Select(action.from_), now)
        if not selection.success:
            return selection
        return apply_move(selection.new_state, action.to, now)

    raise TypeError(f"Unknown action: {action!r}")


def turn_time_remaining(
    state: GameState,
    time_limit: float | None,
    now: float | None = None,
) -> float | None:
    """Seconds left in the current turn, or None when untimed."""
    if time_limit is None:
        return None
    elapsed = _now(now) - state.turn_start_time
    return max(0.0, time_limit - elapsed)


def apply_timeout(
    state: GameState,
    time_limit: float | None,
    now: float | None = None,
) -> ActionResult:
    """The current player ran out of time and loses."""
    error = _guard_playing(state)
    if error:
        return error
    remaining = turn_time_remaining(state, time_limit, now)
    if remaining is None or remaining > 0:
        return ActionResult.failure(
            "Turn time has not expired", RejectionReason.TIME_NOT_EXPIRED
        )

    loser = state.current_player
    winner = other_player(loser)
    new_state = state._copy_with(
        status=GameStatus.WON,
        winner=winner,
        end_reason=EndReason.TIMEOUT,
        selected_piece_id=None,
        total_game_time=max(0.0, _now(now) - state.started_at),
    )
    return ActionResult.success_with_state(
        new_state,
        changes=[f"Player {loser} ran out of time - player {winner} wins"],
    )


@dataclass
class Reducer:
    """
    Reducer bound to a clock.

    Stateless apart from the clock - all game state is in GameState.
    """
    clock: Callable[[], float] = field(default=time.time)

    def new_game(self) -> GameState:
        return GameState.new(self.clock())

    def apply(self, state: GameState, action: Action) -> ActionResult:
        return apply_action(state, action, self.clock())

    def click(self, state: GameState, position: Position) -> ActionResult:
        """Route a board click by phase."""
        if state.phase == GamePhase.PLACEMENT:
            return apply_placement(state, position, self.clock())
        return apply_move(state, position, self.clock())

    def timeout(self, state: GameState, time_limit: float | None) -> ActionResult:
        return apply_timeout(state, time_limit, self.clock())
