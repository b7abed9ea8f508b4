"""
Action System - Actions, rejection reasons, and results.

Actions are a tagged variant:
1. Placement(position) during the placement phase
2. Move(from_, to) during the movement phase
3. Select(position) for click-driven play (pick up a piece)

Every state change flows through the reducer and comes back as an
ActionResult. Rule violations are results, not exceptions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .board import Position


class ActionType(str, Enum):
    PLACE = "place"
    MOVE = "move"
    SELECT = "select"


class RejectionReason(str, Enum):
    """Why the reducer refused an action. State is left untouched."""
    POSITION_OCCUPIED = "POSITION_OCCUPIED"
    INVALID_POSITION = "INVALID_POSITION"
    INVALID_DESTINATION = "INVALID_DESTINATION"
    NO_PIECE_SELECTED = "NO_PIECE_SELECTED"
    NO_PIECES_LEFT = "NO_PIECES_LEFT"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    NO_LEGAL_MOVE = "NO_LEGAL_MOVE"
    GAME_OVER = "GAME_OVER"
    WRONG_PHASE = "WRONG_PHASE"
    TIME_NOT_EXPIRED = "TIME_NOT_EXPIRED"


@dataclass(frozen=True)
class Placement:
    position: Position
    action_type: ActionType = field(default=ActionType.PLACE, init=False)

    def describe(self) -> str:
        return f"place at {self.position}"


@dataclass(frozen=True)
class Move:
    from_: Position
    to: Position
    action_type: ActionType = field(default=ActionType.MOVE, init=False)

    def describe(self) -> str:
        return f"move {self.from_} -> {self.to}"


@dataclass(frozen=True)
class Select:
    position: Position
    action_type: ActionType = field(default=ActionType.SELECT, init=False)

    def describe(self) -> str:
        return f"select {self.position}"


Action = Union[Placement, Move, Select]


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Error message and code (if failed)
    - Human-readable changes (for UI/log)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: RejectionReason | None = None
    changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: RejectionReason) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, changes=changes or [])
