"""
Slayroom - Card Game Rules Engine

A room-scoped rules engine for a turn-based multiplayer card game.
The engine keeps each room's state in key/value stores and provides:
- Location resolution for hands, parties and shared stacks
- Automatic or player-driven card selection
- Atomic card movement
- A per-turn action queue with pause/resume for player input
- Display status for the current step
"""

__version__ = "0.1.0"
