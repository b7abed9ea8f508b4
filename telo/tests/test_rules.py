"""
Tests for the pure rule helpers.

Tests:
- Occupancy and move legality
- Win detection
- Move enumeration
- place_piece / move_piece never touch their input
"""

import pytest

from ..engine_core.board import OFF_BOARD, Position
from ..engine_core.rules import (
    can_move_to,
    can_player_move,
    check_winner,
    free_positions,
    get_all_valid_moves,
    get_placed_pieces,
    get_player_pieces,
    get_unplaced_pieces,
    is_occupied,
    move_piece,
    other_player,
    place_piece,
)
from ..engine_core.state import GamePiece, initial_pieces
from .conftest import make_state


P = Position


class TestOccupancy:
    """Tests for is_occupied."""

    def test_empty_board(self):
        assert not is_occupied(P(1, 1), initial_pieces())

    def test_placed_piece_occupies(self):
        state = make_state(p1=[(1, 1)])
        assert is_occupied(P(1, 1), state.pieces)
        assert not is_occupied(P(0, 0), state.pieces)

    def test_unplaced_piece_does_not_occupy(self):
        """An unplaced piece with a stale position is ignored."""
        pieces = (GamePiece("p1-0", 1, position=P(0, 0), is_placed=False),)
        assert not is_occupied(P(0, 0), pieces)


class TestCanMoveTo:
    """Tests for can_move_to."""

    def test_centre_to_corner(self):
        assert can_move_to(P(1, 1), P(0, 0), ())

    def test_corner_to_opposite_corner(self):
        assert not can_move_to(P(0, 0), P(2, 2), ())

    def test_corner_to_centre(self):
        assert can_move_to(P(0, 0), P(1, 1), ())

    def test_edge_to_edge_not_connected(self):
        assert not can_move_to(P(1, 0), P(0, 1), ())

    def test_occupied_destination(self):
        state = make_state(p2=[(0, 0)])
        assert not can_move_to(P(1, 1), P(0, 0), state.pieces)

    @pytest.mark.parametrize("target", [P(3, 0), P(-1, -1), P(0, 3)])
    def test_off_board_destination(self, target):
        assert not can_move_to(P(1, 1), target, ())

    def test_off_board_origin(self):
        assert not can_move_to(OFF_BOARD, P(0, 0), ())


class TestCheckWinner:
    """Tests for check_winner."""

    def test_top_row(self):
        state = make_state(p1=[(0, 0), (1, 0), (2, 0)])
        assert check_winner(state.pieces) == 1

    def test_column(self):
        state = make_state(p1=[(0, 0)], p2=[(2, 0), (2, 1), (2, 2)])
        assert check_winner(state.pieces) == 2

    def test_diagonal(self):
        state = make_state(p2=[(2, 0), (1, 1), (0, 2)])
        assert check_winner(state.pieces) == 2

    def test_mixed_line_is_not_a_win(self):
        state = make_state(p1=[(0, 0), (1, 0)], p2=[(2, 0)])
        assert check_winner(state.pieces) is None

    def test_empty_board(self):
        assert check_winner(initial_pieces()) is None

    def test_non_line_triple(self):
        """Three pieces in an L are not a line."""
        state = make_state(p1=[(0, 0), (1, 0), (0, 1)])
        assert check_winner(state.pieces) is None

    def test_edge_diagonal_is_not_a_line(self):
        state = make_state(p1=[(1, 0), (0, 1)], p2=[(2, 2)])
        assert check_winner(state.pieces) is None

    def test_unplaced_pieces_ignored(self):
        pieces = (
            GamePiece("p1-0", 1, P(0, 0), True),
            GamePiece("p1-1", 1, P(1, 0), True),
            GamePiece("p1-2", 1, P(2, 0), False),
        )
        assert check_winner(pieces) is None


class TestPieceQueries:
    """Tests for the piece filters and move enumeration."""

    def test_filters(self):
        state = make_state(p1=[(0, 0)], p2=[(1, 1), (2, 2)])
        assert len(get_player_pieces(1, state.pieces)) == 3
        assert [p.position for p in get_placed_pieces(2, state.pieces)] == [P(1, 1), P(2, 2)]
        assert len(get_unplaced_pieces(1, state.pieces)) == 2

    def test_other_player(self):
        assert other_player(1) == 2
        assert other_player(2) == 1

    def test_free_positions_in_topology_order(self):
        state = make_state(p1=[(0, 0)], p2=[(1, 1)])
        free = free_positions(state.pieces)
        assert len(free) == 7
        assert free[0] == P(2, 0)
        assert P(0, 0) not in free and P(1, 1) not in free

    def test_moves_follow_adjacency_order(self):
        state = make_state(p1=[(0, 0)])
        assert get_all_valid_moves(1, state.pieces) == [
            (P(0, 0), P(1, 0)),
            (P(0, 0), P(0, 1)),
            (P(0, 0), P(1, 1)),
        ]

    def test_moves_skip_occupied(self, movement_state):
        moves = get_all_valid_moves(1, movement_state.pieces)
        assert moves == [
            (P(0, 0), P(1, 0)),
            (P(1, 1), P(1, 0)),
            (P(1, 1), P(2, 1)),
            (P(1, 1), P(1, 2)),
            (P(0, 2), P(1, 2)),
        ]
        for from_, to in moves:
            assert can_move_to(from_, to, movement_state.pieces)

    def test_boxed_in_player_cannot_move(self):
        state = make_state(p1=[(0, 0)], p2=[(1, 0), (0, 1), (1, 1)])
        assert get_all_valid_moves(1, state.pieces) == []
        assert not can_player_move(1, state.pieces)
        assert can_player_move(2, state.pieces)

    def test_no_placed_pieces_no_moves(self, new_state):
        assert get_all_valid_moves(1, new_state.pieces) == []


class TestApplyHelpers:
    """Tests for place_piece and move_piece."""

    def test_place_uses_first_unplaced_piece(self, new_state):
        pieces = place_piece(1, P(1, 1), new_state.pieces)
        placed = [p for p in pieces if p.is_placed]
        assert len(placed) == 1
        assert placed[0].piece_id == "p1-0"
        assert placed[0].position == P(1, 1)

        pieces = place_piece(1, P(0, 0), pieces)
        assert {p.piece_id for p in pieces if p.is_placed} == {"p1-0", "p1-1"}

    def test_place_does_not_modify_input(self, new_state):
        before = new_state.pieces
        place_piece(2, P(2, 2), before)
        assert all(not p.is_placed for p in before)

    def test_place_with_nothing_left(self):
        state = make_state(p1=[(0, 0), (1, 0), (0, 1)])
        assert place_piece(1, P(2, 2), state.pieces) is None

    def test_move_relocates_piece(self, movement_state):
        pieces = move_piece(P(1, 1), P(2, 1), movement_state.pieces)
        assert is_occupied(P(2, 1), pieces)
        assert not is_occupied(P(1, 1), pieces)
        assert is_occupied(P(1, 1), movement_state.pieces)
        assert len(pieces) == len(movement_state.pieces)
