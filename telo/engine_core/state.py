"""
Game State - Snapshot of one Fanorona-telo game.

Design principles:
- Immutable-friendly: transitions return a new GameState
- Serializable: to_dict()/from_dict() round-trip through JSON so a
  snapshot can travel over a synchronized channel or be saved
- Pieces are fungible tokens; only owner and position matter to the rules
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .board import Position, OFF_BOARD


PIECES_PER_PLAYER = 3
PLAYER_IDS = (1, 2)


class GamePhase(str, Enum):
    PLACEMENT = "placement"
    MOVEMENT = "movement"


class GameStatus(str, Enum):
    PLAYING = "playing"
    WON = "won"


class EndReason(str, Enum):
    """Why a game reached a terminal status."""
    ALIGNMENT = "alignment"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class GamePiece:
    """
    One of a player's three tokens.

    position is OFF_BOARD until the piece is placed.
    """
    piece_id: str
    player_id: int
    position: Position = OFF_BOARD
    is_placed: bool = False

    def moved_to(self, position: Position) -> GamePiece:
        return replace(self, position=position, is_placed=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.piece_id,
            "player_id": self.player_id,
            "position": {"x": self.position.x, "y": self.position.y},
            "is_placed": self.is_placed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GamePiece:
        pos = data.get("position") or {}
        return cls(
            piece_id=data["id"],
            player_id=int(data["player_id"]),
            position=Position(int(pos.get("x", -1)), int(pos.get("y", -1))),
            is_placed=bool(data.get("is_placed", False)),
        )


def initial_pieces() -> tuple[GamePiece, ...]:
    """Six unplaced pieces, player 1's first."""
    return tuple(
        GamePiece(piece_id=f"p{player_id}-{i}", player_id=player_id)
        for player_id in PLAYER_IDS
        for i in range(PIECES_PER_PLAYER)
    )


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    This is the aggregate root the reducer operates on. Engine code never
    mutates an existing instance; it builds a new one with _copy_with().
    """
    phase: GamePhase = GamePhase.PLACEMENT
    status: GameStatus = GameStatus.PLAYING
    current_player: int = 1
    pieces: tuple[GamePiece, ...] = field(default_factory=initial_pieces)
    winner: int | None = None
    end_reason: EndReason | None = None

    # Movement phase: piece the current player has picked up
    selected_piece_id: str | None = None

    # Timing (seconds since epoch, from the caller's clock)
    turn_start_time: float = 0.0
    started_at: float = 0.0
    total_game_time: float = 0.0
    turn_number: int = 0

    @classmethod
    def new(cls, now: float = 0.0) -> GameState:
        """Fresh game: all pieces unplaced, player 1 to place."""
        return cls(turn_start_time=now, started_at=now)

    @property
    def is_over(self) -> bool:
        return self.status != GameStatus.PLAYING

    @property
    def selected_piece(self) -> GamePiece | None:
        if self.selected_piece_id is None:
            return None
        return self.get_piece(self.selected_piece_id)

    def get_piece(self, piece_id: str) -> GamePiece | None:
        for piece in self.pieces:
            if piece.piece_id == piece_id:
                return piece
        return None

    def piece_at(self, position: Position) -> GamePiece | None:
        """The placed piece on a point, if any."""
        for piece in self.pieces:
            if piece.is_placed and piece.position == position:
                return piece
        return None

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "status": self.status.value,
            "current_player": self.current_player,
            "pieces": [p.to_dict() for p in self.pieces],
            "winner": self.winner,
            "end_reason": self.end_reason.value if self.end_reason else None,
            "selected_piece_id": self.selected_piece_id,
            "turn_start_time": self.turn_start_time,
            "started_at": self.started_at,
            "total_game_time": self.total_game_time,
            "turn_number": self.turn_number,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameState:
        """
        Rebuild a snapshot received from outside (storage, network peer).

        Missing fields take fresh-game defaults. Raises ValueError for
        values no game can reach (unknown phase, winner outside the two
        seats, a finished game without a winner).
        """
        pieces = data.get("pieces")
        end_reason = data.get("end_reason")
        winner = data.get("winner")
        status = GameStatus(data.get("status", GameStatus.PLAYING.value))
        if winner is not None and winner not in PLAYER_IDS:
            raise ValueError(f"Unknown winner {winner!r}")
        if (status == GameStatus.WON) != (winner is not None):
            raise ValueError("A winner is set exactly when the game is won")
        current_player = int(data.get("current_player", 1))
        if current_player not in PLAYER_IDS:
            raise ValueError(f"Unknown current player {current_player!r}")
        return cls(
            phase=GamePhase(data.get("phase", GamePhase.PLACEMENT.value)),
            status=status,
            current_player=current_player,
            pieces=(
                tuple(GamePiece.from_dict(p) for p in pieces)
                if pieces else initial_pieces()
            ),
            winner=winner,
            end_reason=EndReason(end_reason) if end_reason else None,
            selected_piece_id=data.get("selected_piece_id"),
            turn_start_time=float(data.get("turn_start_time", 0.0)),
            started_at=float(data.get("started_at", 0.0)),
            total_game_time=float(data.get("total_game_time", 0.0)),
            turn_number=int(data.get("turn_number", 0)),
        )
