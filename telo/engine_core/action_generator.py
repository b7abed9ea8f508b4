"""
Action Generator - Generates all legal actions from a game state.

The action generator is used by:
1. Bots to enumerate possible moves
2. UI to highlight available destinations
3. Validation (is this action in legal_actions?)
"""

from __future__ import annotations

from .board import Position
from .state import GameState, GamePhase
from .action import Action, Move, Placement
from .rules import free_positions, get_all_valid_moves, get_unplaced_pieces


def legal_actions(state: GameState) -> list[Action]:
    """
    All legal actions for the current player.

    Placements in topology order during placement, moves ordered by piece
    then adjacency entry during movement, nothing once the game is over.
    """
    if state.is_over:
        return []

    if state.phase == GamePhase.PLACEMENT:
        if not get_unplaced_pieces(state.current_player, state.pieces):
            return []
        return [Placement(pos) for pos in free_positions(state.pieces)]

    return [
        Move(from_, to)
        for from_, to in get_all_valid_moves(state.current_player, state.pieces)
    ]


def destinations_from(state: GameState, origin: Position) -> list[Position]:
    """Free points the piece on origin can step to (for highlighting)."""
    return [
        action.to for action in legal_actions(state)
        if isinstance(action, Move) and action.from_ == origin
    ]


def is_legal(state: GameState, action: Action) -> bool:
    """Check if a specific action is legal."""
    return action in legal_actions(state)
