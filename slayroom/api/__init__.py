"""
API Module - HTTP interface.

Exposes rooms and the engine via REST:
1. Create a room and join players
2. Start the game
3. Play cards and answer prompts
4. Read state and display status

All state is room-scoped and in-memory.
"""

from .schemas import (
    # Requests
    CreateRoomRequest,
    JoinRoomRequest,
    StartGameRequest,
    PlayCardRequest,
    QueueActionsRequest,
    ActionInputRequest,
    # Responses
    RoomResponse,
    GameStateResponse,
    OutcomeResponse,
    StatusResponse,
    ErrorResponse,
    # Shared
    PlayerInfo,
    CardInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateRoomRequest",
    "JoinRoomRequest",
    "StartGameRequest",
    "PlayCardRequest",
    "QueueActionsRequest",
    "ActionInputRequest",
    # Responses
    "RoomResponse",
    "GameStateResponse",
    "OutcomeResponse",
    "StatusResponse",
    "ErrorResponse",
    # Shared
    "PlayerInfo",
    "CardInfo",
    # Service
    "APIService",
    "create_app",
]
