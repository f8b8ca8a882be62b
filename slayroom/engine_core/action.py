"""
Action System - Queued actions, their parameters, and results.

Actions represent one registered effect invocation queued on a turn:
1. A card is played and its effects become queued actions
2. The queue processor runs each through the action registry
3. A handler either finishes, fails, or asks a player for input

Parameter values are a tagged union: ``ActionParameter.parse`` decodes the
raw ``(name, type, value)`` triple once, at the boundary, so handlers only
ever see enum members or checked primitives.
"""

from __future__ import annotations
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterator
import uuid

from ..exceptions import InvalidParameterError, MissingParameterError
from .state import (
    Amount,
    CardType,
    Effect,
    Location,
    Player,
    SelectionMode,
    Turn,
)
from .store import GameKeys, KeyValueStore, RoomState

USER_INPUT = "user_input"

_MISSING = object()


class ActionState(Enum):
    """Lifecycle of a queued action."""
    PENDING = "pending"  # Ready to execute
    WAITING = "waiting"  # Waiting for player input
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"  # Input never arrived in time

    @property
    def is_finished(self) -> bool:
        return self in (ActionState.COMPLETED, ActionState.FAILED, ActionState.CANCELED)


class ParamType(Enum):
    """Declared type of an action parameter."""
    LOCATION = "LOCATION"
    AMOUNT = "AMOUNT"
    CARD_TYPE = "CARD_TYPE"
    SELECTION_MODE = "ACTION_SELECTION_MODE"
    NUMBER = "NUMBER"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    ANY = "ANY"

    @classmethod
    def from_raw(cls, raw: str | ParamType | None) -> ParamType:
        if isinstance(raw, ParamType):
            return raw
        if raw is None:
            return cls.ANY
        key = str(raw).strip().upper()
        if key == "SELECTION_MODE":
            return cls.SELECTION_MODE
        for member in cls:
            if member.value == key:
                return member
        return cls.ANY


def _decode_amount(name: str, value: Any) -> Amount:
    if isinstance(value, Amount):
        return value
    if isinstance(value, bool):
        raise InvalidParameterError(name, value, "amount (0-5 or 'all')")
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "all":
            return Amount.ALL
        if text.isdigit():
            value = int(text)
    if isinstance(value, int) and 0 <= value <= 5:
        return Amount(value)
    raise InvalidParameterError(name, value, "amount (0-5 or 'all')")


def _decode_enum(name: str, value: Any, enum_cls: type[Enum], expected: str) -> Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidParameterError(name, value, expected) from None


def _decode_number(name: str, value: Any) -> int | float:
    if isinstance(value, bool):
        raise InvalidParameterError(name, value, "number")
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            try:
                return float(value)
            except ValueError:
                pass
    raise InvalidParameterError(name, value, "number")


def _decode_boolean(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise InvalidParameterError(name, value, "boolean")


@dataclass(frozen=True)
class ActionParameter:
    """A named, typed parameter value."""
    name: str
    type: ParamType
    value: Any

    @classmethod
    def parse(cls, name: str, type: str | ParamType | None, value: Any) -> ActionParameter:
        """
        Decode a raw parameter.

        Raises:
            InvalidParameterError: value does not match the declared type
        """
        param_type = ParamType.from_raw(type)
        if param_type is ParamType.LOCATION:
            value = _decode_enum(name, value, Location, "location")
        elif param_type is ParamType.AMOUNT:
            value = _decode_amount(name, value)
        elif param_type is ParamType.CARD_TYPE:
            value = _decode_enum(name, value, CardType, "card type")
        elif param_type is ParamType.SELECTION_MODE:
            value = _decode_enum(name, value, SelectionMode, "selection mode")
        elif param_type is ParamType.NUMBER:
            value = _decode_number(name, value)
        elif param_type is ParamType.BOOLEAN:
            value = _decode_boolean(name, value)
        elif param_type is ParamType.STRING and not isinstance(value, str):
            raise InvalidParameterError(name, value, "string")
        return cls(name=name, type=param_type, value=value)

    @classmethod
    def location(cls, name: str, location: Location | str) -> ActionParameter:
        return cls.parse(name, ParamType.LOCATION, location)

    @classmethod
    def amount(cls, name: str, amount: Amount | int | str) -> ActionParameter:
        return cls.parse(name, ParamType.AMOUNT, amount)

    @classmethod
    def card_type(cls, name: str, card_type: CardType | str) -> ActionParameter:
        return cls.parse(name, ParamType.CARD_TYPE, card_type)

    @classmethod
    def selection(cls, name: str, mode: SelectionMode | str) -> ActionParameter:
        return cls.parse(name, ParamType.SELECTION_MODE, mode)

    @property
    def raw_value(self) -> Any:
        """Value as it would appear on the wire."""
        if isinstance(self.value, Enum):
            return self.value.value
        return self.value


@dataclass(frozen=True)
class ActionParams:
    """Ordered parameters of one action."""
    parameters: tuple[ActionParameter, ...] = ()

    @classmethod
    def of(cls, *parameters: ActionParameter) -> ActionParams:
        return cls(parameters=tuple(parameters))

    @classmethod
    def from_raw(cls, raw: list[tuple[str, str, Any]] | tuple | None) -> ActionParams:
        """Decode ``(name, type, value)`` triples."""
        return cls(parameters=tuple(ActionParameter.parse(n, t, v) for n, t, v in (raw or ())))

    def find(self, name: str) -> ActionParameter | None:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def with_param(self, param: ActionParameter) -> ActionParams:
        return ActionParams(parameters=self.parameters + (param,))


def _coerce_best_effort(name: str, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return Location(value)
    except ValueError:
        pass
    # Amount before CardType: both accept "all"
    try:
        return _decode_amount(name, value)
    except InvalidParameterError:
        pass
    for enum_cls in (CardType, SelectionMode):
        try:
            return enum_cls(value)
        except ValueError:
            continue
    return value


def get_param(
    params: ActionParams | None,
    name: str,
    expected: type[Enum] | None = None,
    default: Any = _MISSING,
) -> Any:
    """
    Read a parameter value.

    Typed parameters were decoded when the action was built and are returned
    as-is. Untyped (STRING/ANY) values are coerced to ``expected`` when given,
    otherwise matched best-effort against Location, Amount, CardType and
    SelectionMode, in that order, before the raw value is returned.

    Raises:
        MissingParameterError: parameter absent and no default
        InvalidParameterError: value cannot be coerced to ``expected``
    """
    param = params.find(name) if params else None
    if param is None:
        if default is not _MISSING:
            return default
        raise MissingParameterError(name)

    value = param.value
    if expected is None:
        if param.type in (ParamType.STRING, ParamType.ANY):
            return _coerce_best_effort(name, value)
        return value

    if isinstance(value, expected):
        return value
    if expected is Amount:
        return _decode_amount(name, value)
    return _decode_enum(name, value, expected, expected.__name__)


@dataclass(frozen=True)
class NeedsInput:
    """What a suspended action is waiting for."""
    type: str  # target | destination | choice
    prompt: str
    timeout_ms: int
    options: tuple[Any, ...] = ()
    required_player_id: str | None = None


@dataclass(frozen=True)
class Action:
    """
    One queued effect invocation.

    State goes PENDING -> (run) -> removed on success, or
    PENDING -> WAITING -> (input) -> PENDING -> (callback) -> removed.
    """
    id: str
    action: str
    parameters: ActionParams = field(default_factory=ActionParams)
    card_id: str | None = None
    state: ActionState = ActionState.PENDING
    timeout_at: float | None = None  # ms since epoch
    awaiting_input: NeedsInput | None = None

    @classmethod
    def create(
        cls,
        action: str,
        parameters: ActionParams | None = None,
        card_id: str | None = None,
    ) -> Action:
        """Factory for a fresh pending action."""
        return cls(
            id=f"action-{uuid.uuid4().hex[:12]}",
            action=action,
            parameters=parameters or ActionParams(),
            card_id=card_id,
        )

    @classmethod
    def from_effect(cls, effect: Effect, card_id: str | None = None) -> Action:
        """Factory for an action queued by a card effect."""
        return cls.create(effect.action, ActionParams.from_raw(effect.parameters), card_id)

    def copy_with(self, **changes) -> Action:
        return replace(self, **changes)

    def with_input(self, user_input: Any) -> Action:
        """Attach player input and make the action runnable again."""
        return replace(
            self,
            parameters=self.parameters.with_param(
                ActionParameter(name=USER_INPUT, type=ParamType.ANY, value=user_input)
            ),
            state=ActionState.PENDING,
            timeout_at=None,
            awaiting_input=None,
        )


@dataclass
class ActionResult:
    """
    Result of running an action or a card operation.

    Contains:
    - Whether it succeeded
    - A player-facing message
    - Structured data (moved cards, counts)
    - What input is needed, if the action must suspend
    """
    success: bool
    message: str = ""
    data: dict[str, Any] | None = None
    needs_input: NeedsInput | None = None

    @classmethod
    def ok(cls, message: str = "", data: dict[str, Any] | None = None) -> ActionResult:
        return cls(success=True, message=message, data=data)

    @classmethod
    def failure(cls, message: str, data: dict[str, Any] | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, message=message, data=data)

    @classmethod
    def waiting_for_input(
        cls,
        needs_input: NeedsInput,
        message: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> ActionResult:
        """A successful step that cannot finish until a player answers."""
        return cls(
            success=True,
            message=message or needs_input.prompt,
            data=data,
            needs_input=needs_input,
        )


@dataclass
class ActionContext:
    """
    Everything a handler may touch.

    Built per call from a ``RoomState``; it holds no state of its own beyond
    the acting player and the action being run.
    """
    room_id: str
    player_id: str
    players_map: KeyValueStore
    game_state_map: KeyValueStore
    card_id: str | None = None
    dice_result: int | None = None
    params: ActionParams | None = None

    @classmethod
    def for_room(cls, room: RoomState, player_id: str, **kwargs) -> ActionContext:
        return cls(
            room_id=room.room_id,
            player_id=player_id,
            players_map=room.players,
            game_state_map=room.game_state,
            **kwargs,
        )

    def copy_with(self, **changes) -> ActionContext:
        return replace(self, **changes)

    @contextmanager
    def transact(self) -> Iterator[ActionContext]:
        """Open one transaction across both maps."""
        with ExitStack() as stack:
            stack.enter_context(self.players_map.transaction())
            stack.enter_context(self.game_state_map.transaction())
            yield self

    # ---------------------------------------------------------------- players

    def get_player(self, player_id: str | None = None) -> Player | None:
        return self.players_map.get(player_id or self.player_id)

    def set_player(self, player: Player) -> None:
        self.players_map.set(player.id, player)

    def players_by_join_time(self) -> list[Player]:
        players = [p for p in self.players_map.values() if isinstance(p, Player)]
        return sorted(players, key=lambda p: (p.join_time, p.id))

    def other_players(self) -> list[Player]:
        """Every player except the acting one, ascending join time."""
        return [p for p in self.players_by_join_time() if p.id != self.player_id]

    # ------------------------------------------------------------------ turns

    def get_turn(self) -> Turn | None:
        return self.game_state_map.get(GameKeys.CURRENT_TURN)

    def set_turn(self, turn: Turn) -> None:
        self.game_state_map.set(GameKeys.CURRENT_TURN, turn)

    def get_list(self, key: str) -> list:
        return list(self.game_state_map.get(key) or ())
