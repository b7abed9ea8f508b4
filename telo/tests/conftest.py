"""
Pytest fixtures for Telo tests.
"""

import pytest

from ..config import GameSettings
from ..engine_core.board import Position
from ..engine_core.state import GamePhase, GamePiece, GameState, PIECES_PER_PLAYER
from ..storage import GameStore


START_TIME = 1_000.0


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_state(p1=(), p2=(), current_player=1, now=START_TIME) -> GameState:
    """
    Build a state from (x, y) tuples for each player's placed pieces.

    Pieces not listed stay unplaced; the phase is movement once all six
    are on the board.
    """
    pieces = []
    for player_id, placed in ((1, p1), (2, p2)):
        for i in range(PIECES_PER_PLAYER):
            if i < len(placed):
                x, y = placed[i]
                pieces.append(GamePiece(
                    piece_id=f"p{player_id}-{i}",
                    player_id=player_id,
                    position=Position(x, y),
                    is_placed=True,
                ))
            else:
                pieces.append(GamePiece(piece_id=f"p{player_id}-{i}", player_id=player_id))

    all_placed = len(p1) == PIECES_PER_PLAYER and len(p2) == PIECES_PER_PLAYER
    return GameState(
        phase=GamePhase.MOVEMENT if all_placed else GamePhase.PLACEMENT,
        current_player=current_player,
        pieces=tuple(pieces),
        turn_start_time=now,
        started_at=now,
        turn_number=len(p1) + len(p2),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def new_state() -> GameState:
    """Fresh game, player 1 to place."""
    return GameState.new(START_TIME)


@pytest.fixture
def movement_state() -> GameState:
    """
    Movement phase, player 1 to move, no line on the board.

        X . O
        O X .
        X . O
    """
    return make_state(
        p1=[(0, 0), (1, 1), (0, 2)],
        p2=[(2, 0), (0, 1), (2, 2)],
    )


@pytest.fixture
def store(tmp_path) -> GameStore:
    return GameStore(tmp_path / "data", history_limit=50)


@pytest.fixture
def settings(tmp_path) -> GameSettings:
    """No computer pause, 60s turns, data under tmp_path."""
    return GameSettings(
        turn_time_limit=60.0,
        ai_move_delay=0.0,
        history_limit=50,
        data_dir=tmp_path / "data",
    )
