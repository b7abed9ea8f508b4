"""
Heuristic Bot - The computer opponent.

Fixed priority cascade, first match wins:
1. Win now
2. Block the opponent's immediate win
3. Strategic point (corners, then centre, then edges)
4. Fallback (row-major scan for placements, random for moves)

The bot does NOT:
- Search deeper than its own move plus the opponent's reply
- Use minimax, opening books or difficulty levels

All what-if checks run on new piece tuples built by the shared
rules helpers; the real state is never touched.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import random

from .policy import BotPolicy, BotDecision
from ..engine_core.board import BOARD_SIZE, CORNERS, CENTER, EDGES, Position, is_valid_position
from ..engine_core.state import GameState, GamePhase, GamePiece
from ..engine_core.action import Action, Move, Placement
from ..engine_core.rules import (
    check_winner,
    free_positions,
    get_all_valid_moves,
    get_unplaced_pieces,
    is_occupied,
    move_piece,
    other_player,
    place_piece,
)

logger = logging.getLogger(__name__)

# Declared preference order. Every point is listed, so this step always
# answers while a point is free.
STRATEGIC_POSITIONS: tuple[Position, ...] = CORNERS + (CENTER,) + EDGES


def _wins_by_placing(player_id: int, position: Position, pieces: tuple[GamePiece, ...]) -> bool:
    simulated = place_piece(player_id, position, pieces)
    return simulated is not None and check_winner(simulated) == player_id


def _wins_by_moving(player_id: int, move: tuple[Position, Position], pieces: tuple[GamePiece, ...]) -> bool:
    return check_winner(move_piece(move[0], move[1], pieces)) == player_id


def has_immediate_win(player_id: int, pieces: tuple[GamePiece, ...]) -> bool:
    """Could player_id complete a line with a single step from here?"""
    return any(
        _wins_by_moving(player_id, move, pieces)
        for move in get_all_valid_moves(player_id, pieces)
    )


@dataclass
class HeuristicBot(BotPolicy):
    """
    Two-ply win/block opponent.

    Usage:
        bot = HeuristicBot(rng=random.Random(7))
        position = bot.get_ai_placement_move(state)
        move = bot.get_ai_movement_move(state)  # None when boxed in
    """
    rng: random.Random = None  # type: ignore

    def __post_init__(self):
        if self.rng is None:
            self.rng = random.Random()

    # -------------------------------------------------------------------------
    # Placement phase
    # -------------------------------------------------------------------------

    def get_ai_placement_move(self, state: GameState) -> Position:
        return self._choose_placement(state)[0]

    def _choose_placement(self, state: GameState) -> tuple[Position, str]:
        me = state.current_player
        opponent = other_player(me)
        pieces = state.pieces
        free = free_positions(pieces)

        if not free or not get_unplaced_pieces(me, pieces):
            raise ValueError(f"Player {me} has no legal placement")

        for position in free:
            if _wins_by_placing(me, position, pieces):
                return position, "win"

        if get_unplaced_pieces(opponent, pieces):
            for position in free:
                if _wins_by_placing(opponent, position, pieces):
                    return position, "block"

        for position in STRATEGIC_POSITIONS:
            if not is_occupied(position, pieces):
                return position, "strategic"

        for x in range(BOARD_SIZE):
            for y in range(BOARD_SIZE):
                position = Position(x, y)
                if is_valid_position(position) and not is_occupied(position, pieces):
                    return position, "fallback"

        # free was non-empty, so the scans above always return
        raise AssertionError("unreachable")

    # -------------------------------------------------------------------------
    # Movement phase
    # -------------------------------------------------------------------------

    def get_ai_movement_move(self, state: GameState) -> Move | None:
        choice = self._choose_move(state)
        return choice[0] if choice else None

    def _choose_move(self, state: GameState) -> tuple[Move, str] | None:
        me = state.current_player
        opponent = other_player(me)
        pieces = state.pieces
        moves = get_all_valid_moves(me, pieces)

        if not moves:
            return None

        for move in moves:
            if _wins_by_moving(me, move, pieces):
                return Move(*move), "win"

        # Only worth blocking when the opponent threatens right now
        if has_immediate_win(opponent, pieces):
            for move in moves:
                if not has_immediate_win(opponent, move_piece(move[0], move[1], pieces)):
                    return Move(*move), "block"

        for move in moves:
            if move[1] in STRATEGIC_POSITIONS:
                return Move(*move), "strategic"

        return Move(*self.rng.choice(moves)), "random"

    # -------------------------------------------------------------------------
    # BotPolicy
    # -------------------------------------------------------------------------

    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action] | None = None,
    ) -> BotDecision:
        """
        Pick an action for the current phase.

        legal_actions is only used for the evaluated count; the cascade
        enumerates on its own.
        """
        if state.phase == GamePhase.PLACEMENT:
            position, reason = self._choose_placement(state)
            action: Action = Placement(position)
        else:
            choice = self._choose_move(state)
            if choice is None:
                raise ValueError(f"Player {state.current_player} has no legal move")
            action, reason = choice

        logger.debug(
            "Player %s chose %s (%s)", state.current_player, action.describe(), reason
        )
        return BotDecision(
            action=action,
            explanation=reason,
            evaluated_actions=len(legal_actions) if legal_actions is not None else 0,
        )
