"""
Engine Core - Fanorona-telo rules and state transitions.

The engine is the runtime that:
1. Defines the board topology
2. Checks legality and detects wins (pure rules)
3. Holds GameState snapshots
4. Applies actions via the reducer
5. Enumerates legal actions for bots and UIs
"""

from .board import (
    Position,
    OFF_BOARD,
    VALID_POSITIONS,
    CONNECTIONS,
    WINNING_LINES,
    is_valid_position,
    neighbors,
    is_adjacent,
)
from .state import GameState, GamePiece, GamePhase, GameStatus, EndReason
from .action import Action, ActionType, ActionResult, Placement, Move, Select, RejectionReason
from .rules import (
    is_occupied,
    can_move_to,
    check_winner,
    get_player_pieces,
    get_placed_pieces,
    can_player_move,
    get_all_valid_moves,
)
from .reducer import Reducer, apply_action, apply_placement, apply_move, apply_timeout
from .action_generator import legal_actions, is_legal

__all__ = [
    "Position",
    "OFF_BOARD",
    "VALID_POSITIONS",
    "CONNECTIONS",
    "WINNING_LINES",
    "is_valid_position",
    "neighbors",
    "is_adjacent",
    "GameState",
    "GamePiece",
    "GamePhase",
    "GameStatus",
    "EndReason",
    "Action",
    "ActionType",
    "ActionResult",
    "Placement",
    "Move",
    "Select",
    "RejectionReason",
    "is_occupied",
    "can_move_to",
    "check_winner",
    "get_player_pieces",
    "get_placed_pieces",
    "can_player_move",
    "get_all_valid_moves",
    "Reducer",
    "apply_action",
    "apply_placement",
    "apply_move",
    "apply_timeout",
    "legal_actions",
    "is_legal",
]
