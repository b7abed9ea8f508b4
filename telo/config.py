"""
Game settings.

Defaults are the table rules: 60 seconds per turn and a short
pause before the computer plays. Every value can be overridden from the
environment:

    TELO_TURN_TIME_LIMIT   seconds per turn, "0" or "none" to disable
    TELO_AI_DELAY          computer "thinking" pause in seconds
    TELO_HISTORY_LIMIT     finished games kept in the history file
    TELO_DATA_DIR          where scores, players and history are stored
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import os


DEFAULT_TURN_TIME_LIMIT = 60.0
DEFAULT_AI_MOVE_DELAY = 1.5
DEFAULT_HISTORY_LIMIT = 50


def default_data_dir() -> Path:
    return Path.home() / ".telo"


@dataclass
class GameSettings:
    turn_time_limit: float | None = DEFAULT_TURN_TIME_LIMIT
    ai_move_delay: float = DEFAULT_AI_MOVE_DELAY
    history_limit: int = DEFAULT_HISTORY_LIMIT
    data_dir: Path = field(default_factory=default_data_dir)


def _parse_time_limit(raw: str) -> float | None:
    if raw.strip().lower() in {"", "0", "none", "off"}:
        return None
    value = float(raw)
    if value < 0:
        raise ValueError(f"TELO_TURN_TIME_LIMIT must not be negative, got {raw!r}")
    return value


def _parse_history_limit(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise ValueError(f"TELO_HISTORY_LIMIT must not be negative, got {raw!r}")
    return value


def load_settings(environ: dict[str, str] | None = None) -> GameSettings:
    """Build settings from the environment. Raises ValueError on bad values."""
    env = os.environ if environ is None else environ
    settings = GameSettings()

    if "TELO_TURN_TIME_LIMIT" in env:
        settings.turn_time_limit = _parse_time_limit(env["TELO_TURN_TIME_LIMIT"])
    if "TELO_AI_DELAY" in env:
        settings.ai_move_delay = max(0.0, float(env["TELO_AI_DELAY"]))
    if "TELO_HISTORY_LIMIT" in env:
        settings.history_limit = _parse_history_limit(env["TELO_HISTORY_LIMIT"])
    if env.get("TELO_DATA_DIR"):
        settings.data_dir = Path(env["TELO_DATA_DIR"]).expanduser()

    return settings
