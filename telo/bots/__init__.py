"""
Bots module - Computer opponents.

Provides:
- BotPolicy: Interface for bot decision-making
- HeuristicBot: Win / block / strategic / fallback opponent
"""

from .policy import BotPolicy, BotDecision
from .heuristic_bot import HeuristicBot, STRATEGIC_POSITIONS, has_immediate_win

__all__ = [
    "BotPolicy",
    "BotDecision",
    "HeuristicBot",
    "STRATEGIC_POSITIONS",
    "has_immediate_win",
]
