"""
Storage Module - Local persistence of finished-game summaries.

Only completed games, scores and player preferences are stored.
A game in progress lives in its session and nowhere else.
"""

from .records import Player, GameRecord, DEFAULT_PLAYERS, default_players
from .store import GameStore

__all__ = [
    "Player",
    "GameRecord",
    "DEFAULT_PLAYERS",
    "default_players",
    "GameStore",
]
