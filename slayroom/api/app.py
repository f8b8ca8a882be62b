"""
FastAPI Application - REST API for game rooms.

Endpoints:
    POST   /api/v1/rooms                                   Create room
    GET    /api/v1/rooms                                   List active rooms
    GET    /api/v1/rooms/{id}                              Get room
    DELETE /api/v1/rooms/{id}                              End room
    POST   /api/v1/rooms/{id}/players                      Join room
    POST   /api/v1/rooms/{id}/start                        Start game
    GET    /api/v1/rooms/{id}/state                        Get game state
    POST   /api/v1/rooms/{id}/play-card                    Play a card from hand
    POST   /api/v1/rooms/{id}/actions                      Queue actions
    POST   /api/v1/rooms/{id}/actions/{action_id}/input    Answer a waiting action
    DELETE /api/v1/rooms/{id}/actions                      Clear the action queue
    GET    /api/v1/rooms/{id}/status                       Get display status
    GET    /api/v1/actions                                 List registered actions

Engine failures are returned as 400 with an ``ErrorResponse`` body; unknown
rooms are 404.
"""

from typing import Annotated, Optional, Union

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import get_config
from ..exceptions import ParameterError, RoomNotFoundError
from .schemas import (
    ActionInputRequest,
    ActionListResponse,
    CreateRoomRequest,
    EndRoomResponse,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
    HealthResponse,
    JoinRoomRequest,
    OutcomeResponse,
    PlayCardRequest,
    PlayerInfo,
    QueueActionsRequest,
    RoomListResponse,
    RoomResponse,
    StartGameRequest,
    StatusResponse,
)
from .service import APIService


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    config = get_config()

    app = FastAPI(
        title="Slayroom Engine API",
        description="""
Rules engine for a turn-based multiplayer card game.

## Action Flow

1. `POST /play-card` moves the card and queues its effects.
2. Effects run in order. If one needs a player's choice, the response has
   `waiting_action_id` and the room state shows `waiting_for_action`.
3. `POST /actions/{action_id}/input` answers it and processing resumes.
4. When the queue drains with no action points left, the turn passes on.

## Error Codes

| Code | Description |
|------|-------------|
| `ROOM_NOT_FOUND` | Room does not exist |
| `VALIDATION_ERROR` | Malformed request or wrong room state |
| `ACTION_FAILED` | Engine rejected the action |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def outcome_or_error(outcome: OutcomeResponse) -> Union[OutcomeResponse, JSONResponse]:
        if outcome.success:
            return outcome
        return make_error_response(
            ErrorCode.ACTION_FAILED,
            outcome.message,
            details={"actions_processed": outcome.actions_processed},
        )

    @app.exception_handler(RoomNotFoundError)
    async def room_not_found_handler(request: Request, exc: RoomNotFoundError):
        return make_error_response(ErrorCode.ROOM_NOT_FOUND, exc.message, status_code=404, details=exc.details)

    @app.exception_handler(ParameterError)
    async def parameter_error_handler(request: Request, exc: ParameterError):
        return make_error_response(ErrorCode.VALIDATION_ERROR, exc.message, details=exc.details)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return make_error_response(ErrorCode.VALIDATION_ERROR, str(exc))

    not_found = {404: {"model": ErrorResponse, "description": "Room not found"}}
    rejected = {
        400: {"model": ErrorResponse, "description": "Rejected by the engine"},
        404: {"model": ErrorResponse, "description": "Room not found"},
    }

    # =========================================================================
    # Room Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms",
        response_model=RoomResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Create a room",
    )
    async def create_room(request: CreateRoomRequest) -> RoomResponse:
        return api_service.create_room(request)

    @app.get(
        "/api/v1/rooms",
        response_model=RoomListResponse,
        tags=["Rooms"],
        summary="List active rooms",
    )
    async def list_rooms() -> RoomListResponse:
        rooms = api_service.list_rooms()
        return RoomListResponse(rooms=rooms, count=len(rooms))

    @app.get(
        "/api/v1/rooms/{room_id}",
        response_model=RoomResponse,
        responses=not_found,
        tags=["Rooms"],
        summary="Get a room",
    )
    async def get_room(room_id: str) -> RoomResponse:
        return api_service.get_room(room_id)

    @app.delete(
        "/api/v1/rooms/{room_id}",
        response_model=EndRoomResponse,
        tags=["Rooms"],
        summary="End a room",
    )
    async def end_room(
        room_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndRoomResponse:
        """End a room and release its state."""
        return EndRoomResponse(success=api_service.end_room(room_id, reason), room_id=room_id)

    @app.post(
        "/api/v1/rooms/{room_id}/players",
        response_model=PlayerInfo,
        responses=rejected,
        tags=["Rooms"],
        summary="Join a room",
    )
    async def join_room(room_id: str, request: JoinRoomRequest) -> PlayerInfo:
        """Join order is turn order."""
        return api_service.join_room(room_id, request)

    @app.post(
        "/api/v1/rooms/{room_id}/start",
        response_model=OutcomeResponse,
        responses=rejected,
        tags=["Rooms"],
        summary="Deal cards and start the first turn",
    )
    async def start_game(
        room_id: str,
        request: Optional[StartGameRequest] = None,
    ) -> Union[OutcomeResponse, JSONResponse]:
        return outcome_or_error(api_service.start_game(room_id, request or StartGameRequest()))

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/rooms/{room_id}/state",
        response_model=GameStateResponse,
        responses=not_found,
        tags=["Game"],
        summary="Get game state",
    )
    async def get_state(
        room_id: str,
        viewer_id: Annotated[Optional[str], Query(description="Player whose hand is revealed")] = None,
    ) -> GameStateResponse:
        return api_service.get_state(room_id, viewer_id)

    @app.post(
        "/api/v1/rooms/{room_id}/play-card",
        response_model=OutcomeResponse,
        responses=rejected,
        tags=["Game"],
        summary="Play a card from hand",
    )
    async def play_card(room_id: str, request: PlayCardRequest) -> Union[OutcomeResponse, JSONResponse]:
        """
        Move the card out of the hand and queue its effects.

        A successful response with `waiting_action_id` means an effect is
        waiting for a player's choice.
        """
        return outcome_or_error(api_service.play_card(room_id, request))

    @app.post(
        "/api/v1/rooms/{room_id}/actions",
        response_model=OutcomeResponse,
        responses=rejected,
        tags=["Actions"],
        summary="Queue actions by name",
    )
    async def queue_actions(room_id: str, request: QueueActionsRequest) -> Union[OutcomeResponse, JSONResponse]:
        return outcome_or_error(api_service.queue_actions(room_id, request))

    @app.post(
        "/api/v1/rooms/{room_id}/actions/{action_id}/input",
        response_model=OutcomeResponse,
        responses=rejected,
        tags=["Actions"],
        summary="Answer a waiting action",
    )
    async def provide_input(
        room_id: str,
        action_id: str,
        request: ActionInputRequest,
    ) -> Union[OutcomeResponse, JSONResponse]:
        return outcome_or_error(api_service.provide_input(room_id, action_id, request))

    @app.delete(
        "/api/v1/rooms/{room_id}/actions",
        response_model=OutcomeResponse,
        responses=rejected,
        tags=["Actions"],
        summary="Clear the action queue",
    )
    async def clear_queue(
        room_id: str,
        player_id: Annotated[str, Query(description="Player whose turn it is")],
    ) -> Union[OutcomeResponse, JSONResponse]:
        return outcome_or_error(api_service.clear_queue(room_id, player_id))

    @app.get(
        "/api/v1/rooms/{room_id}/status",
        response_model=StatusResponse,
        responses=not_found,
        tags=["Game"],
        summary="Get display status",
    )
    async def get_status(room_id: str) -> StatusResponse:
        return api_service.get_status(room_id)

    @app.get(
        "/api/v1/actions",
        response_model=ActionListResponse,
        tags=["Actions"],
        summary="List registered actions",
    )
    async def list_actions() -> ActionListResponse:
        return api_service.list_actions()

    # =========================================================================
    # System
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="slayroom",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        return {
            "service": "slayroom",
            "env": config.env,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn slayroom.api.app:app
app = create_app()
