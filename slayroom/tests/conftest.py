"""
Pytest fixtures for Slayroom tests.

The ``room`` fixture holds three players in join order p1, p2, p3 with a
turn already running for p1:

    p1  hand [p1-a, p1-b]     party leader-p1 + [hero-p1, _, _]
    p2  hand [p2-a, p2-b]     party [fighter-p2, _, _]
    p3  hand [p3-a]           party [thief-p3, _, _]

    support stack [s1 .. s5] (s5 on top), cache and discard pile empty
"""

import pytest

from ..config import reset_config
from ..engine_core.action import ActionContext
from ..engine_core.registry import ActionRegistry
from ..engine_core.state import Card, CardType, HeroClass, Party, Player, Turn
from ..engine_core.store import GameKeys, RoomState
from ..games.heroes.actions import register_hero_actions

NOW = 1_700_000_000_000


def card(card_id, card_type=CardType.ITEM, hero_class=None, **kwargs):
    return Card(id=card_id, name=card_id.title(), type=card_type, hero_class=hero_class, **kwargs)


def hero(card_id, hero_class=HeroClass.WIZARD, **kwargs):
    return card(card_id, CardType.HERO, hero_class, **kwargs)


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test starts from default configuration."""
    for key in (
        "ACTION_TIMEOUT_MS",
        "SLAYROOM_ACTION_POINTS",
        "SLAYROOM_HAND_SIZE",
        "SLAYROOM_TARGET_OWNER_INPUT",
        "SLAYROOM_ENV",
        "ALLOWED_ORIGINS",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def now():
    """Fixed clock (ms since epoch)."""
    return NOW


@pytest.fixture
def registry():
    """Isolated registry holding the built-in actions."""
    reg = ActionRegistry()
    register_hero_actions(reg)
    return reg


@pytest.fixture
def room() -> RoomState:
    state = RoomState(room_id="room-1")
    players = [
        Player(
            id="p1", name="Ada", join_time=1.0,
            hand=(card("p1-a"), card("p1-b")),
            party=Party(leader=card("leader-p1", CardType.PARTY_LEADER, HeroClass.BARD),
                        heroes=(hero("hero-p1"), None, None)),
            action_points=3,
        ),
        Player(
            id="p2", name="Grace", join_time=2.0,
            hand=(card("p2-a"), card("p2-b")),
            party=Party(heroes=(hero("fighter-p2", HeroClass.FIGHTER), None, None)),
        ),
        Player(
            id="p3", name="Linus", join_time=3.0,
            hand=(card("p3-a"),),
            party=Party(heroes=(hero("thief-p3", HeroClass.THIEF), None, None)),
        ),
    ]
    for player in players:
        state.players.set(player.id, player)

    state.game_state.set(GameKeys.SUPPORT_STACK, [card(f"s{n}") for n in range(1, 6)])
    state.game_state.set(GameKeys.CACHE, [])
    state.game_state.set(GameKeys.DISCARD_PILE, [])
    state.game_state.set(GameKeys.PHASE, "playing")
    state.game_state.set(GameKeys.CURRENT_TURN, Turn(player_id="p1", action_points=3))
    return state


@pytest.fixture
def context(room) -> ActionContext:
    """Context acting as p1."""
    return ActionContext.for_room(room, "p1")


def ids(cards):
    return [c.id for c in cards]
