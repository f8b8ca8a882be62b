"""
Room Store - Key/value maps that hold all mutable room state.

The engine never talks to a replication layer directly. Everything it needs
is the small ``KeyValueStore`` surface:

- get / set / delete
- observe (change notification)

``InMemoryStore`` is the reference implementation. Its ``transaction()``
batches notifications so an observer never sees a half-applied move, and it
restores the previous contents if the block raises.

A ``RoomState`` bundles the two maps of one room (players and game state).
Every engine entry point receives one, there is no global lookup.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import ExitStack, contextmanager, nullcontext
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator
import logging
import time

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class StoreEvent:
    """One key change. ``old``/``new`` are None when the key was absent/deleted."""
    key: str
    old: Any
    new: Any


Observer = Callable[[list[StoreEvent]], None]


class KeyValueStore(ABC):
    """Abstract key/value map with change observation."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def observe(self, callback: Observer) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        ...

    def values(self) -> list[Any]:
        return [self.get(k) for k in self.keys()]

    def items(self) -> list[tuple[str, Any]]:
        return [(k, self.get(k)) for k in self.keys()]

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def transaction(self):
        """Group writes. Stores without batching support just run the block."""
        return nullcontext(self)


class InMemoryStore(KeyValueStore):
    """Dict-backed store with batched, rollback-safe transactions."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(initial or {})
        self._observers: list[Observer] = []
        self._depth = 0
        self._pending: list[StoreEvent] = []
        self._snapshot: dict[str, Any] | None = None

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        old = self._data.get(key)
        self._data[key] = value
        self._emit(StoreEvent(key=key, old=old, new=value))

    def delete(self, key: str) -> None:
        if key not in self._data:
            return
        old = self._data.pop(key)
        self._emit(StoreEvent(key=key, old=old, new=None))

    def keys(self) -> list[str]:
        return list(self._data.keys())

    def observe(self, callback: Observer) -> Callable[[], None]:
        self._observers.append(callback)

        def unobserve():
            if callback in self._observers:
                self._observers.remove(callback)

        return unobserve

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of the current contents."""
        return dict(self._data)

    @contextmanager
    def transaction(self) -> Iterator[InMemoryStore]:
        """
        Batch writes made inside the block.

        Nested transactions join the outermost one. Observers are notified
        once, after the outermost block exits cleanly. If the block raises,
        the contents are restored and no notification is sent.
        """
        if self._depth == 0:
            self._snapshot = dict(self._data)
            self._pending = []
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self._data = self._snapshot or {}
                self._snapshot = None
                self._pending = []
                logger.debug("Store transaction rolled back")
            raise
        else:
            self._depth -= 1
            if self._depth == 0:
                events, self._pending = self._pending, []
                self._snapshot = None
                self._notify(events)

    def _emit(self, event: StoreEvent) -> None:
        if self._depth > 0:
            self._pending.append(event)
        else:
            self._notify([event])

    def _notify(self, events: list[StoreEvent]) -> None:
        if not events:
            return
        for callback in list(self._observers):
            callback(events)


@dataclass
class RoomState:
    """
    Handle on one room's state.

    ``players`` is keyed by player id; ``game_state`` uses the keys listed in
    ``GameKeys``.
    """
    room_id: str
    players: KeyValueStore = field(default_factory=InMemoryStore)
    game_state: KeyValueStore = field(default_factory=InMemoryStore)
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)

    @contextmanager
    def transact(self) -> Iterator[RoomState]:
        """Open a transaction on both maps at once."""
        with ExitStack() as stack:
            stack.enter_context(self.players.transaction())
            stack.enter_context(self.game_state.transaction())
            yield self

    def touch(self) -> None:
        self.last_activity = time.time()


class GameKeys:
    """Keys of the per-room game state map."""
    CURRENT_TURN = "current_turn"
    SUPPORT_STACK = "support_stack"
    CACHE = "cache"
    DISCARD_PILE = "discard_pile"
    MONSTERS = "monsters"
    PHASE = "phase"
    WAITING_FOR_ACTION = "waiting_for_action"
    GAME_STATUS = "game_status"
