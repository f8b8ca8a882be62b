"""
Session Module - Manages game rooms.

A room represents one play-through:
- Created when a host opens it
- Players join in order, which fixes turn order
- Holds the room's key/value state
- Dropped when the game ends or the room goes idle

Rooms are in-memory only. Nothing in the engine looks rooms up by id; only
this layer does.
"""

from .manager import Room, RoomManager, RoomStatus

__all__ = [
    "Room",
    "RoomManager",
    "RoomStatus",
]
