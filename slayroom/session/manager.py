"""
Room Manager - Creates and tracks game rooms.

This is the only place that maps a room id to its state handle. Everything
below it (engine, actions, game setup) receives the ``RoomState`` or an
``ActionContext`` built from it.

LIFECYCLE:
1. A room is created (waiting for players)
2. Players join; join order is turn order
3. The game starts (cards dealt, first turn begins)
4. The room ends and its state is dropped

Rooms are in-memory only and independent of each other.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import itertools
import logging
import time
import uuid

from ..engine_core.action import ActionContext
from ..engine_core.state import GamePhase, Party, Player
from ..engine_core.store import GameKeys, RoomState
from ..exceptions import RoomNotFoundError

logger = logging.getLogger(__name__)

PLAYER_COLORS = ["red", "blue", "green", "yellow", "purple", "orange"]


class RoomStatus(Enum):
    """State of a room."""
    WAITING = "waiting"  # Players joining
    PLAYING = "playing"  # Game in progress
    ENDED = "ended"


@dataclass
class Room:
    """A room: its state handle plus bookkeeping that never reaches the engine."""
    room_id: str
    state: RoomState
    name: str = ""
    status: RoomStatus = RoomStatus.WAITING
    metadata: dict = field(default_factory=dict)

    def is_active(self) -> bool:
        return self.status in {RoomStatus.WAITING, RoomStatus.PLAYING}

    def context_for(self, player_id: str) -> ActionContext:
        """Build an engine context acting as ``player_id``."""
        return ActionContext.for_room(self.state, player_id)


class RoomManager:
    """
    Manages game rooms.

    Responsibilities:
    - Create rooms and register players
    - Look rooms up by id
    - Drop ended or stale rooms

    No persistence - rooms are in-memory only.
    """

    def __init__(self):
        self._rooms: dict[str, Room] = {}
        self._join_counter = itertools.count()

    def create_room(self, name: str = "", room_id: str | None = None) -> Room:
        room_id = room_id or uuid.uuid4().hex[:8]
        if room_id in self._rooms:
            raise ValueError(f"Room {room_id} already exists")
        room = Room(room_id=room_id, state=RoomState(room_id=room_id), name=name)
        room.state.game_state.set(GameKeys.PHASE, GamePhase.WAITING.value)
        self._rooms[room_id] = room
        logger.info("Room %s created", room_id)
        return room

    def get_room(self, room_id: str) -> Room | None:
        """Get a room by ID."""
        return self._rooms.get(room_id)

    def require_room(self, room_id: str) -> Room:
        """Get a room by ID or raise ``RoomNotFoundError``."""
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def add_player(self, room_id: str, name: str, player_id: str | None = None) -> Player:
        """
        Add a player to a waiting room.

        Join time is strictly increasing across the manager so turn order is
        stable even when two players join within the same clock tick.
        """
        room = self.require_room(room_id)
        if room.status is not RoomStatus.WAITING:
            raise ValueError(f"Room {room_id} is not accepting players")

        player_id = player_id or f"player-{uuid.uuid4().hex[:8]}"
        if player_id in room.state.players:
            raise ValueError(f"Player {player_id} already in room {room_id}")

        seat = len(room.state.players.keys())
        player = Player(
            id=player_id,
            name=name,
            join_time=time.time() + next(self._join_counter) * 1e-6,
            party=Party.empty(),
            color=PLAYER_COLORS[seat % len(PLAYER_COLORS)],
        )
        room.state.players.set(player.id, player)
        room.state.touch()
        logger.info("Player %s (%s) joined room %s", player.id, name, room_id)
        return player

    def set_connected(self, room_id: str, player_id: str, connected: bool) -> Player:
        """Record presence; disconnected players are skipped when turns advance."""
        room = self.require_room(room_id)
        player = room.state.players.get(player_id)
        if player is None:
            raise ValueError(f"Player {player_id} not found in room {room_id}")
        player = player.copy_with(connected=connected)
        room.state.players.set(player_id, player)
        return player

    def mark_started(self, room_id: str) -> None:
        self.require_room(room_id).status = RoomStatus.PLAYING

    def end_room(self, room_id: str, reason: str = "completed") -> bool:
        """End a room and drop its state. Returns False if it did not exist."""
        room = self._rooms.pop(room_id, None)
        if room is None:
            return False
        room.status = RoomStatus.ENDED
        room.state.game_state.set(GameKeys.PHASE, GamePhase.ENDED.value)
        logger.info("Room %s ended (%s)", room_id, reason)
        return True

    def list_active_rooms(self) -> list[str]:
        """List IDs of active rooms."""
        return [rid for rid, room in self._rooms.items() if room.is_active()]

    def cleanup_stale_rooms(self, max_idle_seconds: int = 3600, now: float | None = None) -> list[str]:
        """
        End rooms with no activity for ``max_idle_seconds``.

        Called periodically to free memory. Returns the removed ids.
        """
        current_time = now if now is not None else time.time()
        stale = [
            room_id for room_id, room in self._rooms.items()
            if current_time - room.state.last_activity > max_idle_seconds
        ]
        for room_id in stale:
            self.end_room(room_id, reason="stale")
        return stale
