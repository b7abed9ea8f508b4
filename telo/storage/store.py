"""
Game Store - Local JSON persistence for scores, players and history.

The store:
- Keeps three small JSON files under one data directory
- Caps the history at the newest N games
- Never raises on a bad or missing file: it logs a warning and
  returns the defaults, so a corrupt file cannot stop a game

Mid-game state is never stored here.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any
import json
import logging

from .records import GameRecord, Player
from ..config import DEFAULT_HISTORY_LIMIT, default_data_dir

logger = logging.getLogger(__name__)

HISTORY_FILE = "history.json"
PLAYERS_FILE = "players.json"
SCORES_FILE = "scores.json"


class GameStore:
    """
    File-based store.

    Usage:
        store = GameStore(data_dir="~/.telo")
        store.add_game(record)
        scores = store.load_scores()
    """

    def __init__(
        self,
        data_dir: str | Path | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        if data_dir is None:
            data_dir = default_data_dir()
        self.data_dir = Path(data_dir).expanduser()
        self.history_limit = max(0, history_limit)

    # =========================================================================
    # History
    # =========================================================================

    def load_history(self) -> list[GameRecord]:
        """Finished games, newest first."""
        data = self._read(HISTORY_FILE, default=[])
        try:
            return [GameRecord.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Could not load game history: %s", e)
            return []

    def add_game(self, record: GameRecord) -> list[GameRecord]:
        history = self.load_history()
        history.insert(0, record)
        del history[self.history_limit:]
        self._write(HISTORY_FILE, [r.to_dict() for r in history])
        return history

    def clear_history(self):
        self._delete(HISTORY_FILE)

    # =========================================================================
    # Players
    # =========================================================================

    def save_players(self, players: list[Player]):
        self._write(PLAYERS_FILE, [p.to_dict() for p in players])

    def load_players(self) -> list[Player]:
        data = self._read(PLAYERS_FILE, default=[])
        try:
            return [Player.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Could not load player settings: %s", e)
            return []

    # =========================================================================
    # Scores
    # =========================================================================

    def save_scores(self, player1: int, player2: int):
        self._write(SCORES_FILE, {"player1": player1, "player2": player2})

    def load_scores(self) -> dict[str, int]:
        data = self._read(SCORES_FILE, default=None)
        if not isinstance(data, dict):
            return {"player1": 0, "player2": 0}
        return {
            "player1": int(data.get("player1", 0)),
            "player2": int(data.get("player2", 0)),
        }

    def reset_scores(self):
        self._delete(SCORES_FILE)

    # =========================================================================
    # File helpers
    # =========================================================================

    def _path(self, name: str) -> Path:
        return self.data_dir / name

    def _read(self, name: str, default: Any) -> Any:
        path = self._path(name)
        if not path.exists():
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return default

    def _write(self, name: str, data: Any):
        path = self._path(name)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning("Could not write %s: %s", path, e)

    def _delete(self, name: str):
        try:
            self._path(name).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete %s: %s", self._path(name), e)
