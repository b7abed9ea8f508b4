"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a game state and returns a decision.
Decisions include:
- Which action to take
- Why it was chosen (for UI/debugging)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import Action


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    explanation is one of "win", "block", "strategic", "fallback"
    or "random".
    """
    action: Action
    explanation: str = ""
    evaluated_actions: int = 0


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy never mutates the state it is given. It is only asked to act
    when it is the current player.
    """

    @abstractmethod
    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Select an action from the legal actions.

        Args:
            state: Current game state (the bot is state.current_player)
            legal_actions: List of legal actions to choose from

        Returns:
            BotDecision with the selected action
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__

