"""
Engine Core - Card locations, card movement and the per-turn action queue.

The engine is the runtime that:
1. Resolves abstract locations to concrete card containers
2. Selects cards automatically or asks a player to choose
3. Moves cards atomically between locations
4. Runs queued card effects through the action registry
5. Publishes a display status for what is happening
"""

from .state import (
    Amount,
    Card,
    CardType,
    Effect,
    GamePhase,
    HeroClass,
    Location,
    Party,
    Player,
    Requirement,
    SelectionMode,
    Turn,
)
from .store import GameKeys, InMemoryStore, KeyValueStore, RoomState, StoreEvent
from .action import (
    Action,
    ActionContext,
    ActionParameter,
    ActionParams,
    ActionResult,
    ActionState,
    NeedsInput,
    ParamType,
    get_param,
)
from .location import LocationView, TaggedCard, resolve
from .selection import SelectionResult, determine_selection_mode, select_cards
from .mover import destroy_cards, move_card, move_cards
from .registry import ActionHandler, ActionRegistry, default_registry, register_action
from .status import GameStatus, clear_status, get_status, get_time_remaining, has_status_timed_out, set_status
from .turn import (
    QueueResult,
    WaitingForAction,
    add_actions_to_queue,
    advance_turn,
    check_action_timeouts,
    clear_action_queue,
    process_action_queue,
    provide_action_input,
    start_turn,
)

__all__ = [
    "Amount",
    "Card",
    "CardType",
    "Effect",
    "GamePhase",
    "HeroClass",
    "Location",
    "Party",
    "Player",
    "Requirement",
    "SelectionMode",
    "Turn",
    "GameKeys",
    "InMemoryStore",
    "KeyValueStore",
    "RoomState",
    "StoreEvent",
    "Action",
    "ActionContext",
    "ActionParameter",
    "ActionParams",
    "ActionResult",
    "ActionState",
    "NeedsInput",
    "ParamType",
    "get_param",
    "LocationView",
    "TaggedCard",
    "resolve",
    "SelectionResult",
    "determine_selection_mode",
    "select_cards",
    "destroy_cards",
    "move_card",
    "move_cards",
    "ActionHandler",
    "ActionRegistry",
    "default_registry",
    "register_action",
    "GameStatus",
    "clear_status",
    "get_status",
    "get_time_remaining",
    "has_status_timed_out",
    "set_status",
    "QueueResult",
    "WaitingForAction",
    "add_actions_to_queue",
    "advance_turn",
    "check_action_timeouts",
    "clear_action_queue",
    "process_action_queue",
    "provide_action_input",
    "start_turn",
]
