"""
Rules - Stateless legality checks over a piece set.

Every function here is pure: same inputs, same outputs, and the piece
collection passed in is never modified. Helpers that "apply" something
(place_piece, move_piece) return a new tuple and are shared by the
reducer and by the bots' what-if simulation.

Physical legality only. Whose turn it is, and whether the moving piece
belongs to that player, is checked by the reducer.
"""

from __future__ import annotations
from typing import Iterable

from .board import Position, VALID_POSITIONS, WINNING_LINES, is_valid_position, neighbors
from .state import GamePiece


Pieces = Iterable[GamePiece]
MovePair = tuple[Position, Position]


def other_player(player_id: int) -> int:
    return 2 if player_id == 1 else 1


def is_occupied(position: Position, pieces: Pieces) -> bool:
    """True iff a placed piece sits exactly on the position."""
    return any(p.is_placed and p.position == position for p in pieces)


def can_move_to(from_: Position, to: Position, pieces: Pieces) -> bool:
    """
    Destination is a board point, free, and joined to from_ by a line.

    Does not look at who owns the piece on from_.
    """
    pieces = tuple(pieces)
    if not is_valid_position(to) or is_occupied(to, pieces):
        return False
    return to in neighbors(from_)


def check_winner(pieces: Pieces) -> int | None:
    """
    Owner of the first fully, uniformly occupied winning line.

    Lines are scanned in table order (rows, columns, diagonals).
    """
    placed = {p.position: p.player_id for p in pieces if p.is_placed}
    for line in WINNING_LINES:
        owners = [placed.get(pos) for pos in line]
        if owners[0] is not None and owners.count(owners[0]) == 3:
            return owners[0]
    return None


def get_player_pieces(player_id: int, pieces: Pieces) -> list[GamePiece]:
    return [p for p in pieces if p.player_id == player_id]


def get_placed_pieces(player_id: int, pieces: Pieces) -> list[GamePiece]:
    return [p for p in pieces if p.player_id == player_id and p.is_placed]


def get_unplaced_pieces(player_id: int, pieces: Pieces) -> list[GamePiece]:
    return [p for p in pieces if p.player_id == player_id and not p.is_placed]


def free_positions(pieces: Pieces) -> list[Position]:
    """Unoccupied board points, in topology declaration order."""
    pieces = tuple(pieces)
    return [pos for pos in VALID_POSITIONS if not is_occupied(pos, pieces)]


def get_all_valid_moves(player_id: int, pieces: Pieces) -> list[MovePair]:
    """Every (from, to) step available to the player's placed pieces."""
    pieces = tuple(pieces)
    moves = []
    for piece in get_placed_pieces(player_id, pieces):
        for target in neighbors(piece.position):
            if not is_occupied(target, pieces):
                moves.append((piece.position, target))
    return moves


def can_player_move(player_id: int, pieces: Pieces) -> bool:
    return bool(get_all_valid_moves(player_id, pieces))


def place_piece(
    player_id: int,
    position: Position,
    pieces: Pieces,
) -> tuple[GamePiece, ...] | None:
    """
    Put the player's first unplaced piece on position.

    Returns the new piece tuple, or None if the player has nothing left
    to place. Occupancy is the caller's concern.
    """
    pieces = tuple(pieces)
    unplaced = get_unplaced_pieces(player_id, pieces)
    if not unplaced:
        return None
    target_id = unplaced[0].piece_id
    return tuple(
        p.moved_to(position) if p.piece_id == target_id else p
        for p in pieces
    )


def move_piece(
    from_: Position,
    to: Position,
    pieces: Pieces,
) -> tuple[GamePiece, ...]:
    """Relocate whichever placed piece is on from_. No legality check."""
    moved = False
    result = []
    for p in pieces:
        if not moved and p.is_placed and p.position == from_:
            result.append(p.moved_to(to))
            moved = True
        else:
            result.append(p)
    return tuple(result)
