"""
Board Topology - The fixed Fanorona-telo board.

The board is a 3x3 grid of intersections joined by lines:
- Every point connects along its row and column to its neighbours
- Only the diagonals through the centre are drawn, so the centre
  reaches all 8 other points while corners and edges reach 3

Pure data. Nothing here is mutated at runtime.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType


BOARD_SIZE = 3


@dataclass(frozen=True)
class Position:
    """An intersection coordinate. Compared by value, never by identity."""
    x: int
    y: int

    @property
    def key(self) -> str:
        return f"{self.x},{self.y}"

    @classmethod
    def parse(cls, text: str) -> Position:
        """Parse "x,y" (whitespace tolerated). Raises ValueError on bad input."""
        parts = text.replace(" ", "").split(",")
        if len(parts) != 2:
            raise ValueError(f"Expected 'x,y', got {text!r}")
        return cls(int(parts[0]), int(parts[1]))

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


# Unplaced pieces sit here
OFF_BOARD = Position(-1, -1)

CORNERS = (Position(0, 0), Position(2, 0), Position(0, 2), Position(2, 2))
EDGES = (Position(1, 0), Position(0, 1), Position(2, 1), Position(1, 2))
CENTER = Position(1, 1)

VALID_POSITIONS: tuple[Position, ...] = CORNERS + EDGES + (CENTER,)

CONNECTIONS = MappingProxyType({
    Position(0, 0): (Position(1, 0), Position(0, 1), Position(1, 1)),
    Position(1, 0): (Position(0, 0), Position(2, 0), Position(1, 1)),
    Position(2, 0): (Position(1, 0), Position(2, 1), Position(1, 1)),
    Position(0, 1): (Position(0, 0), Position(0, 2), Position(1, 1)),
    Position(1, 1): (
        Position(0, 0), Position(1, 0), Position(2, 0), Position(0, 1),
        Position(2, 1), Position(0, 2), Position(1, 2), Position(2, 2),
    ),
    Position(2, 1): (Position(2, 0), Position(2, 2), Position(1, 1)),
    Position(0, 2): (Position(0, 1), Position(1, 2), Position(1, 1)),
    Position(1, 2): (Position(0, 2), Position(2, 2), Position(1, 1)),
    Position(2, 2): (Position(2, 1), Position(1, 2), Position(1, 1)),
})

WINNING_LINES: tuple[tuple[Position, Position, Position], ...] = (
    # Rows
    (Position(0, 0), Position(1, 0), Position(2, 0)),
    (Position(0, 1), Position(1, 1), Position(2, 1)),
    (Position(0, 2), Position(1, 2), Position(2, 2)),
    # Columns
    (Position(0, 0), Position(0, 1), Position(0, 2)),
    (Position(1, 0), Position(1, 1), Position(1, 2)),
    (Position(2, 0), Position(2, 1), Position(2, 2)),
    # Diagonals
    (Position(0, 0), Position(1, 1), Position(2, 2)),
    (Position(2, 0), Position(1, 1), Position(0, 2)),
)


def is_valid_position(position: Position) -> bool:
    """True iff the position is one of the 9 board points."""
    return position in CONNECTIONS


def neighbors(position: Position) -> tuple[Position, ...]:
    """Points reachable in one step. Empty for off-board input."""
    return CONNECTIONS.get(position, ())


def is_adjacent(a: Position, b: Position) -> bool:
    return b in neighbors(a)
