"""
Session Module - Drives games from player input.

A session represents one table:
- Created when a player picks a mode
- Holds the current game state snapshot
- Runs the computer's turns and the turn timer
- Records finished games to the store

Sessions are in-memory; only finished-game summaries are persisted.
"""

from .manager import SessionManager, Session, SessionState, GameMode, AI_PLAYER_ID
from .game_loop import GameLoop, TurnResult, AITicket, STALE_TICKET

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameMode",
    "AI_PLAYER_ID",
    "GameLoop",
    "TurnResult",
    "AITicket",
    "STALE_TICKET",
]
