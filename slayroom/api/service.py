"""
API Service - Business logic layer between API and engine.

The service:
1. Resolves room ids to room handles (the only lookup in the system)
2. Translates requests into engine calls
3. Converts engine records into response schemas

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

from ..engine_core.action import Action, ActionContext, ActionParams, ActionResult
from ..engine_core.registry import ActionRegistry, default_registry
from ..engine_core.state import Card, Party, Player, Turn
from ..engine_core.status import GameStatus, get_status, get_time_remaining, has_status_timed_out
from ..engine_core.store import GameKeys
from ..engine_core.turn import (
    QueueResult,
    WaitingForAction,
    add_actions_to_queue,
    clear_action_queue,
    provide_action_input,
)
from ..games.heroes import play_card, setup_game
from ..session import Room, RoomManager, RoomStatus as EngineRoomStatus
from .schemas import (
    ActionInfo,
    ActionInputRequest,
    ActionListResponse,
    CardInfo,
    CreateRoomRequest,
    GameStateResponse,
    JoinRoomRequest,
    OutcomeResponse,
    ParameterInfo,
    PartyInfo,
    PlayCardRequest,
    PlayerInfo,
    QueueActionsRequest,
    RoomResponse,
    RoomStatus,
    StartGameRequest,
    StatusInfo,
    StatusResponse,
    TurnInfo,
    WaitingInfo,
)

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()
        room = service.create_room(CreateRoomRequest(name="Friday"))
        service.join_room(room.room_id, JoinRoomRequest(name="Ada"))
        service.join_room(room.room_id, JoinRoomRequest(name="Grace"))
        service.start_game(room.room_id, StartGameRequest(random_seed=7))
    """
    room_manager: RoomManager = field(default_factory=RoomManager)
    registry: ActionRegistry = field(default_factory=lambda: default_registry)

    # ------------------------------------------------------------------ rooms

    def create_room(self, request: CreateRoomRequest) -> RoomResponse:
        room = self.room_manager.create_room(name=request.name, room_id=request.room_id)
        return self._room_to_response(room)

    def get_room(self, room_id: str) -> RoomResponse:
        return self._room_to_response(self.room_manager.require_room(room_id))

    def join_room(self, room_id: str, request: JoinRoomRequest) -> PlayerInfo:
        room = self.room_manager.require_room(room_id)
        player = self.room_manager.add_player(room_id, request.name, request.player_id)
        return self._player_info(player, self._turn(room), viewer_id=player.id)

    def end_room(self, room_id: str, reason: str = "user_ended") -> bool:
        return self.room_manager.end_room(room_id, reason)

    def list_rooms(self) -> list[str]:
        return self.room_manager.list_active_rooms()

    def start_game(self, room_id: str, request: StartGameRequest) -> OutcomeResponse:
        room = self.room_manager.require_room(room_id)
        result = setup_game(room.state, random_seed=request.random_seed)
        if result.success:
            self.room_manager.mark_started(room_id)
        return self._result_to_outcome(result)

    # ------------------------------------------------------------------- game

    def get_state(self, room_id: str, viewer_id: str | None = None) -> GameStateResponse:
        room = self.room_manager.require_room(room_id)
        game = room.state.game_state
        turn = self._turn(room)
        context = room.context_for(viewer_id or "")
        waiting: WaitingForAction | None = game.get(GameKeys.WAITING_FOR_ACTION)
        status: GameStatus | None = game.get(GameKeys.GAME_STATUS)

        return GameStateResponse(
            room_id=room_id,
            phase=game.get(GameKeys.PHASE) or "waiting",
            viewer_id=viewer_id,
            players=[self._player_info(p, turn, viewer_id) for p in context.players_by_join_time()],
            current_turn=self._turn_info(turn) if turn else None,
            support_stack_count=len(context.get_list(GameKeys.SUPPORT_STACK)),
            cache=[self._card_info(c) for c in context.get_list(GameKeys.CACHE)],
            discard_pile=[self._card_info(c) for c in context.get_list(GameKeys.DISCARD_PILE)],
            monsters=[self._card_info(c) for c in context.get_list(GameKeys.MONSTERS)],
            waiting_for_action=self._waiting_info(waiting) if waiting else None,
            status=self._status_info(status) if status else None,
        )

    def play_card(self, room_id: str, request: PlayCardRequest) -> OutcomeResponse:
        room = self._playing_room(room_id)
        result = play_card(room.context_for(request.player_id), request.card_id, registry=self.registry)
        room.state.touch()
        return self._queue_to_outcome(result)

    def queue_actions(self, room_id: str, request: QueueActionsRequest) -> OutcomeResponse:
        """
        Queue raw actions by registry name.

        Parameters are decoded here; a malformed value raises
        ``InvalidParameterError`` before anything is queued.
        """
        room = self._playing_room(room_id)
        actions = [
            Action.create(
                item.action,
                ActionParams.from_raw([(p.name, p.type, p.value) for p in item.parameters]),
                card_id=item.card_id,
            )
            for item in request.actions
        ]
        result = add_actions_to_queue(room.context_for(request.player_id), actions, registry=self.registry)
        room.state.touch()
        return self._queue_to_outcome(result)

    def provide_input(self, room_id: str, action_id: str, request: ActionInputRequest) -> OutcomeResponse:
        room = self._playing_room(room_id)
        result = provide_action_input(
            room.context_for(request.player_id),
            action_id,
            request.user_input,
            registry=self.registry,
        )
        room.state.touch()
        return self._queue_to_outcome(result)

    def clear_queue(self, room_id: str, player_id: str) -> OutcomeResponse:
        room = self._playing_room(room_id)
        return self._queue_to_outcome(clear_action_queue(room.context_for(player_id)))

    def get_status(self, room_id: str) -> StatusResponse:
        room = self.room_manager.require_room(room_id)
        context = room.context_for("")
        status = get_status(context)
        return StatusResponse(
            room_id=room_id,
            status=self._status_info(status) if status else None,
            timed_out=has_status_timed_out(context),
            time_remaining=get_time_remaining(context),
        )

    def list_actions(self) -> ActionListResponse:
        return ActionListResponse(actions=self.registry.list_actions())

    # ---------------------------------------------------------------- helpers

    def _playing_room(self, room_id: str) -> Room:
        room = self.room_manager.require_room(room_id)
        if room.status is not EngineRoomStatus.PLAYING:
            raise ValueError(f"Game in room {room_id} has not started")
        return room

    @staticmethod
    def _turn(room: Room) -> Turn | None:
        return room.state.game_state.get(GameKeys.CURRENT_TURN)

    def _room_to_response(self, room: Room) -> RoomResponse:
        context = room.context_for("")
        turn = self._turn(room)
        return RoomResponse(
            room_id=room.room_id,
            name=room.name,
            status=RoomStatus(room.status.value),
            players=[self._player_info(p, turn) for p in context.players_by_join_time()],
        )

    @staticmethod
    def _card_info(card: Card) -> CardInfo:
        return CardInfo(
            id=card.id,
            name=card.name,
            type=card.type.value,
            hero_class=card.hero_class.value if card.hero_class else None,
            description=card.description,
            image_path=card.image_path,
        )

    def _party_info(self, party: Party) -> PartyInfo:
        return PartyInfo(
            leader=self._card_info(party.leader) if party.leader else None,
            heroes=[self._card_info(h) if h else None for h in party.heroes],
        )

    def _player_info(self, player: Player, turn: Turn | None, viewer_id: str | None = None) -> PlayerInfo:
        return PlayerInfo(
            player_id=player.id,
            name=player.name,
            join_time=player.join_time,
            color=player.color,
            connected=player.connected,
            action_points=player.action_points,
            hand_count=len(player.hand),
            hand=[self._card_info(c) for c in player.hand] if player.id == viewer_id else None,
            party=self._party_info(player.party),
            is_current_turn=turn is not None and turn.player_id == player.id,
        )

    @staticmethod
    def _action_info(action: Action) -> ActionInfo:
        return ActionInfo(
            id=action.id,
            action=action.action,
            state=action.state.value,
            card_id=action.card_id,
            parameters=[
                ParameterInfo(name=p.name, type=p.type.value, value=p.raw_value)
                for p in action.parameters.parameters
            ],
            timeout_at=action.timeout_at,
        )

    def _turn_info(self, turn: Turn) -> TurnInfo:
        return TurnInfo(
            player_id=turn.player_id,
            action_points=turn.action_points,
            action_queue=[self._action_info(a) for a in turn.action_queue],
            played_cards=list(turn.played_cards),
            modifiers=[c.id for c in turn.modifiers],
            current_roll=turn.current_roll,
            last_target=turn.last_target.value if turn.last_target else None,
        )

    @staticmethod
    def _status_info(status: GameStatus) -> StatusInfo:
        return StatusInfo(
            key=status.key,
            message=status.message,
            timeout=status.timeout,
            timeout_at=status.timeout_at,
        )

    @staticmethod
    def _waiting_info(waiting: WaitingForAction) -> WaitingInfo:
        return WaitingInfo(
            action_id=waiting.action_id,
            player_id=waiting.player_id,
            type=waiting.type,
            prompt=waiting.prompt,
            options=list(waiting.options),
            timeout_at=waiting.timeout_at,
            required_player_id=waiting.required_player_id,
        )

    @staticmethod
    def _jsonable(value: Any) -> Any:
        if isinstance(value, Card):
            return value.id
        if isinstance(value, (list, tuple)):
            return [APIService._jsonable(v) for v in value]
        if isinstance(value, dict):
            return {k: APIService._jsonable(v) for k, v in value.items()}
        if isinstance(value, ActionResult):
            return {"success": value.success, "message": value.message}
        return value

    def _result_to_outcome(self, result: ActionResult) -> OutcomeResponse:
        return OutcomeResponse(
            success=result.success,
            message=result.message,
            data=self._jsonable(result.data) if result.data else None,
        )

    def _queue_to_outcome(self, result: QueueResult) -> OutcomeResponse:
        data = result.data or {}
        return OutcomeResponse(
            success=result.success,
            message=result.message,
            actions_processed=result.actions_processed,
            waiting_action_id=data.get("waiting_action_id"),
            next_player_id=data.get("next_player_id"),
            data=self._jsonable(data) if data else None,
        )
