"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Player picks a mode (vs computer, local two-player, online)
2. Session created in memory with a fresh GameState
3. During the game the GameLoop replaces session.game_state wholesale
   after every accepted action
4. Game ends -> summary written to the GameStore, scores bumped
5. "New game" replaces the state; leaving the table ends the session

PERSISTENCE RULES:
- Game state in progress is never persisted
- Only finished-game summaries, scores and player settings are stored
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import time
import uuid

from ..bots import BotPolicy, HeuristicBot
from ..config import GameSettings
from ..engine_core.state import GameState
from ..storage import GameStore, Player, default_players

AI_PLAYER_ID = 2


class GameMode(str, Enum):
    AI = "ai"  # Human is player 1, computer is player 2
    LOCAL = "local"  # Two humans sharing a device
    ONLINE = "online"  # Two remote seats, state synced by the API


class SessionState(Enum):
    """State of a game session."""
    CREATED = "created"
    ACTIVE = "active"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


@dataclass
class Session:
    """
    An in-memory game session.

    Contains:
    - Mode and the two seated players
    - The current GameState snapshot
    - The bot for the computer seat (AI mode only)
    - A generation counter; bumping it cancels a pending computer move
    """
    session_id: str
    mode: GameMode
    players: list[Player]
    settings: GameSettings
    created_at: float

    state: SessionState = SessionState.CREATED
    game_state: GameState | None = None
    bot: BotPolicy | None = None

    generation: int = 0
    recorded_generation: int | None = None  # Generation whose result was saved

    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        return self.state in {SessionState.CREATED, SessionState.ACTIVE}

    def get_player(self, player_id: int) -> Player:
        for p in self.players:
            if p.player_id == player_id:
                return p
        raise KeyError(f"No player {player_id} in session {self.session_id}")

    def is_ai_seat(self, player_id: int) -> bool:
        return self.mode == GameMode.AI and player_id == AI_PLAYER_ID

    def is_ai_turn(self) -> bool:
        if not self.game_state or self.game_state.is_over:
            return False
        return self.is_ai_seat(self.game_state.current_player)


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with players and scores loaded from the store
    - Track active sessions
    - Clean up stale sessions

    Sessions are in-memory only.
    """

    def __init__(
        self,
        store: GameStore | None = None,
        settings: GameSettings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or GameSettings()
        self.store = store
        self.clock = clock
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        mode: GameMode | str = GameMode.AI,
        players: list[Player] | None = None,
        bot: BotPolicy | None = None,
    ) -> Session:
        """
        Create a new game session.

        Args:
            mode: Game mode
            players: Seats 1 and 2 (stored settings or defaults if omitted)
            bot: Policy for the computer seat (HeuristicBot by default)

        Returns:
            New Session with a fresh game ready for player 1
        """
        mode = GameMode(mode)
        players = players or self._load_players()
        if sorted(p.player_id for p in players) != [1, 2]:
            raise ValueError("A session needs exactly players 1 and 2")

        if mode == GameMode.AI:
            for p in players:
                p.is_ai = p.player_id == AI_PLAYER_ID
            bot = bot or HeuristicBot()
        else:
            bot = None

        now = self.clock()
        session = Session(
            session_id=str(uuid.uuid4()),
            mode=mode,
            players=players,
            settings=self.settings,
            created_at=now,
            bot=bot,
            game_state=GameState.new(now),
            state=SessionState.ACTIVE,
        )
        self._sessions[session.session_id] = session
        return session

    def _load_players(self) -> list[Player]:
        if self.store is None:
            return default_players()
        players = self.store.load_players()
        if len(players) != 2:
            players = default_players()
        scores = self.store.load_scores()
        for p in players:
            p.score = scores.get(f"player{p.player_id}", 0)
        return players

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop it from memory.

        Bumps the generation so a pending computer move is discarded.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.generation += 1
        if reason == "completed":
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        session.game_state = None
        return True

    def list_active_sessions(self) -> list[str]:
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """Drop finished sessions older than max_age. Returns how many."""
        now = self.clock()
        to_remove = [
            sid for sid, session in self._sessions.items()
            if now - session.created_at > max_age_seconds and not session.is_active()
        ]
        for sid in to_remove:
            self.end_session(sid, reason="stale")
        return len(to_remove)
