"""
Persistent records - players and finished games.

These are display identities and summaries, not rules-engine state.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any


@dataclass
class Player:
    """A seat at the table."""
    player_id: int  # 1 or 2
    name: str
    color: str
    avatar: str | None = None
    score: int = 0  # Games won across sessions
    is_ai: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Player:
        return cls(
            player_id=int(data["player_id"]),
            name=str(data["name"]),
            color=str(data["color"]),
            avatar=data.get("avatar"),
            score=int(data.get("score", 0)),
            is_ai=bool(data.get("is_ai", False)),
        )


DEFAULT_PLAYERS = (
    Player(player_id=1, name="Player 1", color="#FA7070"),
    Player(player_id=2, name="Player 2", color="#4A90E2"),
)


def default_players() -> list[Player]:
    return [Player(**asdict(p)) for p in DEFAULT_PLAYERS]


@dataclass
class GameRecord:
    """Summary of a finished game."""
    record_id: str
    date: str  # ISO 8601, UTC
    winner: Player
    loser: Player
    duration: int  # seconds
    total_turns: int
    end_reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.record_id,
            "date": self.date,
            "winner": self.winner.to_dict(),
            "loser": self.loser.to_dict(),
            "duration": self.duration,
            "total_turns": self.total_turns,
            "end_reason": self.end_reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameRecord:
        return cls(
            record_id=str(data["id"]),
            date=str(data["date"]),
            winner=Player.from_dict(data["winner"]),
            loser=Player.from_dict(data["loser"]),
            duration=int(data.get("duration", 0)),
            total_turns=int(data.get("total_turns", 0)),
            end_reason=data.get("end_reason"),
        )
