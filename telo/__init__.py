"""
Telo - Fanorona-telo game engine

A rules engine and computer opponent for Fanorona-telo, the Malagasy
three-in-a-row game played on a 9-point board. Provides:
- Board topology and legality checks
- Immutable game state and a reducer for placements and moves
- A heuristic win/block opponent
- Sessions with turn timer, scores and game history
- A REST/WebSocket API for browser and online play
"""

__version__ = "0.1.0"
