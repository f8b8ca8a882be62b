"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the engine. Engine
records (frozen dataclasses with enum fields) are converted explicitly in
``APIService``; nothing here imports the engine.

Error Codes:
- ROOM_NOT_FOUND: Room does not exist or has ended
- VALIDATION_ERROR: Request is malformed or not allowed in the room's state
- ACTION_FAILED: The engine rejected the action (message explains why)
- INTERNAL_ERROR: Unexpected server error
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class RoomStatus(str, Enum):
    """Room status values."""
    WAITING = "waiting"
    PLAYING = "playing"
    ENDED = "ended"


class ErrorCode(str, Enum):
    """Structured error codes."""
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    ACTION_FAILED = "ACTION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    id: str
    name: str
    type: str = Field(description="Hero, Item, Magic, Monster, Modifier, PartyLeader")
    hero_class: Optional[str] = None
    description: str = ""
    image_path: Optional[str] = None


class PartyInfo(BaseModel):
    """A party: leader plus hero slots (null for an empty slot)."""
    leader: Optional[CardInfo] = None
    heroes: list[Optional[CardInfo]] = Field(default_factory=list)


class PlayerInfo(BaseModel):
    """Player information for display. ``hand`` is only filled for the viewer."""
    player_id: str
    name: str
    join_time: float
    color: Optional[str] = None
    connected: bool = True
    action_points: int = 0
    hand_count: int = 0
    hand: Optional[list[CardInfo]] = None
    party: PartyInfo = Field(default_factory=PartyInfo)
    is_current_turn: bool = False


class ParameterInfo(BaseModel):
    """One action parameter."""
    name: str
    type: str = Field("ANY", description="LOCATION, AMOUNT, CARD_TYPE, ACTION_SELECTION_MODE, NUMBER, STRING, BOOLEAN, ANY")
    value: Any = None


class ActionInfo(BaseModel):
    """A queued action."""
    id: str
    action: str
    state: str = Field(description="pending, waiting, completed, failed, canceled")
    card_id: Optional[str] = None
    parameters: list[ParameterInfo] = Field(default_factory=list)
    timeout_at: Optional[float] = Field(None, description="ms since epoch")


class TurnInfo(BaseModel):
    """The current turn."""
    player_id: str
    action_points: int
    action_queue: list[ActionInfo] = Field(default_factory=list)
    played_cards: list[str] = Field(default_factory=list)
    modifiers: list[str] = Field(default_factory=list, description="Modifier card ids")
    current_roll: Optional[int] = None
    last_target: Optional[str] = None


class StatusInfo(BaseModel):
    """Display status for the center of the board."""
    key: str
    message: str
    timeout: Optional[int] = None
    timeout_at: Optional[int] = None


class WaitingInfo(BaseModel):
    """Which action is waiting for input, and from whom."""
    action_id: str
    player_id: str
    type: str = Field(description="target, destination, choice")
    prompt: str
    options: list[Any] = Field(default_factory=list)
    timeout_at: int
    required_player_id: Optional[str] = None


# =============================================================================
# Requests
# =============================================================================

class CreateRoomRequest(BaseModel):
    name: str = ""
    room_id: Optional[str] = Field(None, description="Explicit id; generated if omitted")


class JoinRoomRequest(BaseModel):
    name: str
    player_id: Optional[str] = None


class StartGameRequest(BaseModel):
    random_seed: Optional[int] = Field(None, description="Seed for deterministic shuffling")


class PlayCardRequest(BaseModel):
    player_id: str
    card_id: str


class ActionRequest(BaseModel):
    """An action to queue by registry name."""
    action: str
    parameters: list[ParameterInfo] = Field(default_factory=list)
    card_id: Optional[str] = None


class QueueActionsRequest(BaseModel):
    player_id: str
    actions: list[ActionRequest]


class ActionInputRequest(BaseModel):
    player_id: str
    user_input: Any = Field(..., description="Selected card ids, or a value for choice prompts")


# =============================================================================
# Responses
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class RoomResponse(BaseModel):
    """Room summary."""
    room_id: str
    name: str = ""
    status: RoomStatus
    players: list[PlayerInfo] = Field(default_factory=list)


class RoomListResponse(BaseModel):
    rooms: list[str]
    count: int


class EndRoomResponse(BaseModel):
    success: bool
    room_id: str


class OutcomeResponse(BaseModel):
    """Result of an engine operation."""
    success: bool
    message: str
    actions_processed: int = 0
    waiting_action_id: Optional[str] = None
    next_player_id: Optional[str] = None
    data: Optional[dict[str, Any]] = None


class GameStateResponse(BaseModel):
    """Full room state as seen by one player."""
    room_id: str
    phase: str
    viewer_id: Optional[str] = None
    players: list[PlayerInfo] = Field(default_factory=list)
    current_turn: Optional[TurnInfo] = None
    support_stack_count: int = 0
    cache: list[CardInfo] = Field(default_factory=list)
    discard_pile: list[CardInfo] = Field(default_factory=list)
    monsters: list[CardInfo] = Field(default_factory=list)
    waiting_for_action: Optional[WaitingInfo] = None
    status: Optional[StatusInfo] = None


class StatusResponse(BaseModel):
    room_id: str
    status: Optional[StatusInfo] = None
    timed_out: bool = False
    time_remaining: int = Field(0, description="ms")


class ActionListResponse(BaseModel):
    actions: list[str]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
