"""
Playing a card from hand.

Playing costs one action point and queues, in order:
1. ``deductPoint``
2. each of the card's effects

Heroes join the player's party; every other playable card goes to the
discard pile. The queue is processed immediately.
"""

from __future__ import annotations
import logging

from ...engine_core.action import Action, ActionContext
from ...engine_core.mover import move_card
from ...engine_core.registry import ActionRegistry
from ...engine_core.requirements import check_card_requirement, requirement_registry
from ...engine_core.state import CardType, Location
from ...engine_core.turn import QueueResult, add_actions_to_queue

logger = logging.getLogger(__name__)

_DESTINATIONS = {
    CardType.HERO: Location.OWN_PARTY,
    CardType.ITEM: Location.DISCARD_PILE,
    CardType.MAGIC: Location.DISCARD_PILE,
    CardType.MODIFIER: Location.DISCARD_PILE,
}


def play_card(
    context: ActionContext,
    card_id: str,
    registry: ActionRegistry | None = None,
    now: int | None = None,
) -> QueueResult:
    """Play ``card_id`` from the acting player's hand."""
    for name, args in (("turn", ()), ("emptyQueue", ()), ("actionPoint", (1,))):
        check = requirement_registry.check(name, context, *args)
        if not check.success:
            return QueueResult(success=False, message=check.message)

    player = context.get_player()
    card = player.find_in_hand(card_id)
    if card is None:
        return QueueResult(success=False, message=f"Card {card_id} not found in own-hand")

    destination = _DESTINATIONS.get(card.type)
    if destination is None:
        return QueueResult(success=False, message=f"{card.type.value} cards cannot be played from hand")

    turn = context.get_turn()
    requirement = check_card_requirement(context, card, dice_result=turn.current_roll)
    if not requirement.success:
        return QueueResult(success=False, message=requirement.message)

    moved = move_card(context, Location.OWN_HAND, destination, [card.id])
    if not moved.success:
        return QueueResult(success=False, message=moved.message)

    turn = context.get_turn()
    context.set_turn(turn.copy_with(played_cards=turn.played_cards + (card.id,)))

    actions = [Action.create("deductPoint", card_id=card.id)]
    actions.extend(Action.from_effect(effect, card.id) for effect in card.effect)
    logger.info(
        "Player %s played %s (%s) in room %s",
        context.player_id, card.name, card.id, context.room_id,
    )
    return add_actions_to_queue(context, actions, registry=registry, now=now)
