"""
Hero Game Setup - Creates the initial room state.

This module handles:
- Building and shuffling the support deck (seeded for determinism)
- Assigning party leaders
- Dealing starting hands
- Drawing the monsters
- Starting the first player's turn

Players take turns in join order.
"""

from __future__ import annotations
import logging
import random

from ...config import get_config
from ...engine_core.action import ActionContext, ActionResult
from ...engine_core.state import GamePhase, Party
from ...engine_core.store import GameKeys, RoomState
from ...engine_core.turn import start_turn
from .cards import MONSTERS, PARTY_LEADERS, build_support_deck

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2
MAX_PLAYERS = len(PARTY_LEADERS)


def setup_game(room: RoomState, random_seed: int | None = None) -> ActionResult:
    """
    Start the game in ``room`` with the players who have joined.

    Args:
        room: Room handle holding the joined players
        random_seed: Seed for deterministic shuffling

    Returns:
        Success with the first player's id, or a failure if the game is
        already running or the player count is out of range.
    """
    phase = room.game_state.get(GameKeys.PHASE)
    if phase == GamePhase.PLAYING.value:
        return ActionResult.failure("Game already started")

    config = get_config()
    context = ActionContext.for_room(room, player_id="")
    players = context.players_by_join_time()
    if len(players) < MIN_PLAYERS:
        return ActionResult.failure(f"At least {MIN_PLAYERS} players are required")
    if len(players) > MAX_PLAYERS:
        return ActionResult.failure(f"At most {MAX_PLAYERS} players are supported")

    rng = random.Random(random_seed)

    deck = build_support_deck()
    rng.shuffle(deck)
    leaders = list(PARTY_LEADERS)
    rng.shuffle(leaders)
    monsters = rng.sample(MONSTERS, config.monster_count)

    if len(deck) < len(players) * config.initial_hand_size:
        return ActionResult.failure("Not enough cards to deal starting hands")

    with room.transact():
        for player, leader in zip(players, leaders):
            hand = tuple(deck.pop() for _ in range(config.initial_hand_size))
            context.set_player(player.copy_with(
                hand=hand,
                party=Party.empty(config.min_hero_slots, leader=leader),
                action_points=0,
            ))

        room.game_state.set(GameKeys.SUPPORT_STACK, deck)
        room.game_state.set(GameKeys.CACHE, [])
        room.game_state.set(GameKeys.DISCARD_PILE, [])
        room.game_state.set(GameKeys.MONSTERS, monsters)
        room.game_state.set(GameKeys.PHASE, GamePhase.PLAYING.value)

        first = players[0]
        start_turn(context.copy_with(player_id=first.id), first.id)

    room.touch()
    logger.info(
        "Game started in room %s with %d players; %s goes first",
        room.room_id, len(players), first.id,
    )
    return ActionResult.ok(
        f"Game started; {first.name} goes first",
        data={"first_player_id": first.id, "support_stack": len(deck)},
    )
