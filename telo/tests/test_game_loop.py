"""
Tests for sessions and the game loop.

Tests:
- Session creation per mode
- Turn ownership (human vs computer, online seats)
- Computer turns and ticket cancellation
- Turn timer
- Score and history bookkeeping
"""

import random

import pytest

from ..bots import HeuristicBot
from ..engine_core.action import Move, Placement
from ..engine_core.board import Position
from ..engine_core.state import EndReason, GamePhase, GameStatus
from ..session import (
    AI_PLAYER_ID,
    STALE_TICKET,
    GameLoop,
    GameMode,
    SessionManager,
    SessionState,
)
from ..storage import Player
from .conftest import START_TIME, make_state


P = Position


@pytest.fixture
def manager(store, settings, clock):
    return SessionManager(store=store, settings=settings, clock=clock)


@pytest.fixture
def ai_loop(manager, store, clock):
    session = manager.create_session(GameMode.AI, bot=HeuristicBot(rng=random.Random(1)))
    return GameLoop(session, store=store, clock=clock)


@pytest.fixture
def local_loop(manager, store, clock):
    session = manager.create_session(GameMode.LOCAL)
    return GameLoop(session, store=store, clock=clock)


def play_points(loop, points):
    result = None
    for point in points:
        result = loop.click(P(*point))
        assert result.success, result.error
    return result


# Player 1 completes the top row on the fifth placement
PLAYER_ONE_WINS = [(0, 0), (0, 1), (1, 0), (1, 1), (2, 0)]


class TestSessionManager:
    """Tests for SessionManager."""

    def test_create_ai_session(self, manager):
        session = manager.create_session("ai")

        assert session.mode == GameMode.AI
        assert session.state == SessionState.ACTIVE
        assert isinstance(session.bot, HeuristicBot)
        assert session.get_player(AI_PLAYER_ID).is_ai
        assert not session.get_player(1).is_ai
        assert session.game_state.started_at == START_TIME
        assert session.game_state.current_player == 1
        assert not session.is_ai_turn()

    def test_create_local_session(self, manager):
        session = manager.create_session(GameMode.LOCAL)
        assert session.bot is None
        assert not session.is_ai_seat(2)

    def test_players_need_both_seats(self, manager):
        with pytest.raises(ValueError):
            manager.create_session(players=[Player(1, "Solo", "#000000")])

    def test_players_and_scores_from_store(self, store, settings, clock):
        store.save_players([
            Player(1, "Rabe", "#112233"),
            Player(2, "Soa", "#445566"),
        ])
        store.save_scores(4, 2)
        manager = SessionManager(store=store, settings=settings, clock=clock)

        session = manager.create_session(GameMode.LOCAL)

        assert session.get_player(1).name == "Rabe"
        assert session.get_player(1).score == 4
        assert session.get_player(2).score == 2

    def test_default_players_without_store(self, settings):
        session = SessionManager(settings=settings).create_session(GameMode.LOCAL)
        assert [p.name for p in session.players] == ["Player 1", "Player 2"]

    def test_unknown_player(self, manager):
        session = manager.create_session(GameMode.LOCAL)
        with pytest.raises(KeyError):
            session.get_player(3)

    def test_end_session(self, manager):
        session = manager.create_session(GameMode.LOCAL)
        generation = session.generation

        assert manager.end_session(session.session_id, reason="user_ended")
        assert session.state == SessionState.ABANDONED
        assert session.game_state is None
        assert session.generation == generation + 1
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_list_and_cleanup(self, manager, clock):
        active = manager.create_session(GameMode.LOCAL)
        finished = manager.create_session(GameMode.LOCAL)
        finished.state = SessionState.GAME_OVER

        assert manager.list_active_sessions() == [active.session_id]

        clock.advance(7200)
        assert manager.cleanup_stale_sessions(max_age_seconds=3600) == 1
        assert manager.get_session(finished.session_id) is None
        assert manager.get_session(active.session_id) is active


class TestHumanTurns:
    """Tests for click-driven play through the loop."""

    def test_click_places_piece(self, local_loop):
        result = local_loop.click(P(1, 1))

        assert result.success
        assert local_loop.state.piece_at(P(1, 1)).player_id == 1
        assert local_loop.state.current_player == 2
        assert local_loop.session.game_state is result.state

    def test_rejection_keeps_state(self, local_loop):
        local_loop.click(P(1, 1))
        before = local_loop.state

        result = local_loop.click(P(1, 1))

        assert not result.success
        assert result.error_code == "POSITION_OCCUPIED"
        assert local_loop.state is before

    def test_online_seat_must_match(self, local_loop):
        result = local_loop.click(P(0, 0), player_id=2)
        assert result.error_code == "NOT_YOUR_TURN"
        assert local_loop.click(P(0, 0), player_id=1).success

    def test_human_cannot_play_for_computer(self, ai_loop):
        ai_loop.click(P(1, 1))
        assert ai_loop.session.is_ai_turn()

        result = ai_loop.click(P(0, 0))

        assert result.error_code == "NOT_YOUR_TURN"

    def test_play_move_action(self, local_loop):
        local_loop.session.game_state = make_state(
            p1=[(0, 0), (1, 1), (0, 2)],
            p2=[(2, 0), (0, 1), (2, 2)],
        )
        result = local_loop.play(Move(P(1, 1), P(2, 1)))
        assert result.success
        assert local_loop.state.piece_at(P(2, 1)).player_id == 1

    def test_valid_destinations(self, local_loop):
        local_loop.session.game_state = make_state(
            p1=[(0, 0), (1, 1), (0, 2)],
            p2=[(2, 0), (0, 1), (2, 2)],
        )
        assert local_loop.valid_destinations() == []

        local_loop.click(P(1, 1))

        assert local_loop.valid_destinations() == [P(1, 0), P(2, 1), P(1, 2)]

    def test_full_placement_reaches_movement(self, local_loop):
        play_points(local_loop, [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 2)])
        assert local_loop.state.phase == GamePhase.MOVEMENT


class TestComputerTurns:
    """Tests for request_ai_turn / run_ai_turn."""

    def test_no_ticket_on_human_turn(self, ai_loop):
        assert ai_loop.request_ai_turn() is None

    def test_computer_plays_after_human(self, ai_loop, settings):
        ai_loop.click(P(1, 1))

        ticket = ai_loop.request_ai_turn()
        assert ticket is not None
        assert ticket.player_id == 2
        assert ticket.delay == settings.ai_move_delay

        result = ai_loop.run_ai_turn(ticket)

        assert result.success
        assert result.ai_explanation == "strategic"
        assert ai_loop.state.piece_at(P(0, 0)).player_id == 2
        assert ai_loop.state.current_player == 1

    def test_new_game_cancels_pending_move(self, ai_loop):
        ai_loop.click(P(1, 1))
        ticket = ai_loop.request_ai_turn()

        ai_loop.new_game()
        result = ai_loop.run_ai_turn(ticket)

        assert not result.success
        assert result.error_code == STALE_TICKET
        assert result.state is None
        assert all(not p.is_placed for p in ai_loop.state.pieces)

    def test_ended_session_cancels_pending_move(self, manager, ai_loop):
        ai_loop.click(P(1, 1))
        ticket = ai_loop.request_ai_turn()

        manager.end_session(ai_loop.session.session_id)

        assert ai_loop.run_ai_turn(ticket).error_code == STALE_TICKET

    def test_not_computers_turn(self, ai_loop):
        result = ai_loop.run_ai_turn()
        assert result.error_code == "NOT_YOUR_TURN"

    def test_computer_with_no_move(self, ai_loop):
        blocked = make_state(
            p1=[(1, 1), (2, 0), (0, 2)],
            p2=[(0, 0), (1, 0), (0, 1)],
            current_player=2,
        )
        ai_loop.sync_state(blocked)

        result = ai_loop.run_ai_turn()

        assert result.error_code == "NO_LEGAL_MOVE"

    def test_computer_blocks_then_wins(self, ai_loop):
        """The computer answers a threat during placement."""
        ai_loop.click(P(0, 0))
        ai_loop.run_ai_turn()  # takes (2,0)
        ai_loop.click(P(0, 1))
        result = ai_loop.run_ai_turn()

        assert result.ai_explanation == "block"
        assert ai_loop.state.piece_at(P(0, 2)).player_id == 2


class TestTimer:
    """Tests for the turn timer inside the loop."""

    def test_time_remaining(self, local_loop, clock):
        clock.advance(20)
        assert local_loop.time_remaining() == 40.0

    def test_check_timeout_before_limit(self, local_loop, clock):
        clock.advance(59)
        assert local_loop.check_timeout() is None

    def test_check_timeout_after_limit(self, local_loop, clock, store):
        clock.advance(61)

        result = local_loop.check_timeout()

        assert result.success
        assert result.winner == 2
        assert local_loop.state.end_reason == EndReason.TIMEOUT
        assert store.load_scores() == {"player1": 0, "player2": 1}

    def test_late_click_ends_game(self, local_loop, clock):
        clock.advance(61)

        result = local_loop.click(P(1, 1))

        assert local_loop.state.status == GameStatus.WON
        assert result.winner == 2
        assert local_loop.state.piece_at(P(1, 1)) is None

    def test_untimed_session(self, manager, store, clock, settings):
        settings.turn_time_limit = None
        loop = GameLoop(manager.create_session(GameMode.LOCAL), store=store, clock=clock)
        clock.advance(10_000)
        assert loop.time_remaining() is None
        assert loop.check_timeout() is None


class TestBookkeeping:
    """Tests for scores and history on game end."""

    def test_win_records_game(self, local_loop, store, clock):
        clock.advance(30)
        result = play_points(local_loop, PLAYER_ONE_WINS)

        assert result.winner == 1
        assert result.record is not None
        assert result.record.winner.name == "Player 1"
        assert result.record.loser.name == "Player 2"
        assert result.record.total_turns == 5
        assert result.record.duration == 30
        assert result.record.end_reason == "alignment"
        assert local_loop.session.state == SessionState.GAME_OVER
        assert local_loop.session.get_player(1).score == 1

        history = store.load_history()
        assert len(history) == 1
        assert history[0].record_id == result.record.record_id
        assert store.load_scores() == {"player1": 1, "player2": 0}

    def test_no_actions_after_game_over(self, local_loop):
        play_points(local_loop, PLAYER_ONE_WINS)
        assert local_loop.click(P(2, 2)).error_code == "GAME_OVER"

    def test_recorded_once(self, local_loop, store):
        play_points(local_loop, PLAYER_ONE_WINS)
        finished = local_loop.state

        # Peer echoes the same finished game back
        result = local_loop.sync_state(finished)

        assert result.record is None
        assert len(store.load_history()) == 1
        assert local_loop.session.get_player(1).score == 1

    def test_new_game_records_again(self, local_loop, store, clock):
        play_points(local_loop, PLAYER_ONE_WINS)
        clock.advance(5)
        local_loop.new_game()
        assert local_loop.session.state == SessionState.ACTIVE

        play_points(local_loop, PLAYER_ONE_WINS)

        assert len(store.load_history()) == 2
        assert store.load_scores()["player1"] == 2

    def test_record_keeps_score_at_time_of_game(self, local_loop, clock):
        first = play_points(local_loop, PLAYER_ONE_WINS).record
        clock.advance(5)
        local_loop.new_game()
        play_points(local_loop, PLAYER_ONE_WINS)

        assert first.winner.score == 1
        assert local_loop.session.get_player(1).score == 2

    def test_synced_finished_game_from_peer(self, local_loop, store, clock):
        won = make_state(p1=[(0, 0), (1, 0)], p2=[(0, 1), (1, 1)], now=clock() + 1)
        won = won._copy_with(status=GameStatus.WON, winner=2, end_reason=EndReason.ALIGNMENT)

        result = local_loop.sync_state(won)

        assert result.winner == 2
        assert store.load_scores()["player2"] == 1

    def test_sync_keeps_generation_within_game(self, local_loop):
        generation = local_loop.session.generation
        local_loop.click(P(0, 0))
        local_loop.sync_state(local_loop.state)
        assert local_loop.session.generation == generation

    def test_sync_of_new_game_reactivates_session(self, manager, local_loop, clock):
        play_points(local_loop, PLAYER_ONE_WINS)
        assert local_loop.session.state == SessionState.GAME_OVER

        clock.advance(7200)
        result = local_loop.sync_state(make_state(now=clock()))

        assert result.success
        assert local_loop.session.state == SessionState.ACTIVE
        assert manager.list_active_sessions() == [local_loop.session.session_id]
        assert manager.cleanup_stale_sessions(max_age_seconds=3600) == 0
        assert local_loop.session.game_state is not None

    def test_placement_action_via_play(self, local_loop):
        assert local_loop.play(Placement(P(2, 2)), player_id=1).success
