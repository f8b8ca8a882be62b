"""
Hero Actions - Built-in effect handlers for the reference game.

Importing this module registers every handler on the default action
registry. Handlers read their parameters with ``get_param``; a missing or
malformed parameter raises and the queue processor turns it into a failed
action.
"""

from __future__ import annotations
from typing import Any
import logging

from ...config import get_config
from ...engine_core.action import (
    Action,
    ActionContext,
    ActionParams,
    ActionResult,
    NeedsInput,
    get_param,
)
from ...engine_core.location import resolve
from ...engine_core.mover import destroy_cards, move_card, move_cards
from ...engine_core.registry import ActionRegistry, register_action
from ...engine_core.selection import select_cards
from ...engine_core.state import Amount, CardType, Location, SelectionMode
from ...engine_core.store import GameKeys

logger = logging.getLogger(__name__)


def _as_ids(user_input: Any) -> list[str]:
    if isinstance(user_input, str):
        return [user_input]
    if isinstance(user_input, (list, tuple)):
        return [str(item) for item in user_input]
    return []


def _check_choice(ids: list[str], amount: Amount) -> str | None:
    if not ids:
        return "No cards selected"
    if amount is not Amount.ALL and len(ids) > amount.value:
        return f"Select at most {amount.value} card(s), got {len(ids)}"
    return None


# =============================================================================
# drawCard
# =============================================================================

def draw_card(context: ActionContext, params: ActionParams) -> ActionResult:
    """Move ``amount`` cards from ``target`` to ``destination``."""
    target = get_param(params, "target", Location)
    destination = get_param(params, "destination", Location)
    amount = get_param(params, "amount", Amount, default=Amount.ONE)
    mode = get_param(params, "selection", SelectionMode, default=None)
    return move_cards(context, target, destination, amount, mode)


def draw_card_callback(context: ActionContext, user_input: Any) -> ActionResult:
    """Move the cards the player picked."""
    target = get_param(context.params, "target", Location)
    destination = get_param(context.params, "destination", Location)
    amount = get_param(context.params, "amount", Amount, default=Amount.ONE)
    ids = _as_ids(user_input)
    error = _check_choice(ids, amount)
    if error:
        return ActionResult.failure(error)
    return move_card(context, target, destination, ids)


# =============================================================================
# deductPoint / endTurn
# =============================================================================

def _set_points(context: ActionContext, points: int) -> None:
    turn = context.get_turn()
    with context.transact():
        context.set_turn(turn.copy_with(action_points=points))
        player = context.get_player(turn.player_id)
        if player is not None:
            context.set_player(player.copy_with(action_points=points))


def deduct_point(context: ActionContext, params: ActionParams) -> ActionResult:
    """Spend action points (1 unless an ``amount`` is given)."""
    turn = context.get_turn()
    if turn is None:
        return ActionResult.failure("No active turn found")

    cost = get_param(params, "amount", default=1)
    if isinstance(cost, Amount):
        cost = cost.count(turn.action_points)
    elif not isinstance(cost, int) or isinstance(cost, bool):
        return ActionResult.failure(f"Invalid point amount: {cost!r}")
    if turn.action_points <= 0:
        return ActionResult.failure("No action points remaining")
    if turn.action_points < cost:
        return ActionResult.failure(f"Need {cost} action points, have {turn.action_points}")

    remaining = turn.action_points - cost
    _set_points(context, remaining)
    return ActionResult.ok(
        f"Deducted {cost} action point(s)",
        data={"player_id": turn.player_id, "action_points": remaining},
    )


def end_turn(context: ActionContext, params: ActionParams) -> ActionResult:
    """Forfeit the remaining action points; the turn passes once the queue drains."""
    if context.get_turn() is None:
        return ActionResult.failure("No active turn found")
    _set_points(context, 0)
    return ActionResult.ok("Turn ended", data={"player_id": context.player_id})


# =============================================================================
# discardAllAndRedraw
# =============================================================================

def discard_all_and_redraw(context: ActionContext, params: ActionParams) -> ActionResult:
    """Shuffle the hand into the support stack and draw a fresh hand from the top."""
    player = context.get_player()
    if player is None:
        return ActionResult.failure("Player not found")

    hand_size = get_config().initial_hand_size
    stack = context.get_list(GameKeys.SUPPORT_STACK)
    if len(stack) < hand_size:
        return ActionResult.failure(f"Not enough cards in support stack to redraw {hand_size}")

    stack.extend(player.hand)
    new_hand = [stack.pop() for _ in range(hand_size)]

    with context.transact():
        context.set_player(player.copy_with(hand=tuple(new_hand)))
        context.game_state_map.set(GameKeys.SUPPORT_STACK, stack)

    return ActionResult.ok(
        f"Discarded all cards and drew {hand_size} new ones",
        data={"new_hand": new_hand},
    )


# =============================================================================
# destroyCard
# =============================================================================

def destroy_card(context: ActionContext, params: ActionParams) -> ActionResult:
    """Destroy cards at ``target``; the acting player picks unless there is no choice."""
    target = get_param(params, "target", Location)
    card_id = get_param(params, "card_id", default=None)
    if card_id:
        return destroy_cards(context, target, [str(card_id)])

    amount = get_param(params, "amount", Amount, default=Amount.ONE)
    view = resolve(context, target)
    available = len(view.read()) if view is not None else 0
    mode = SelectionMode.FIRST if amount.count(available) >= available else SelectionMode.DESTINATION_OWNER

    selection = select_cards(context, target, amount, mode)
    if not selection.success:
        return ActionResult.failure(selection.message)
    if selection.waiting:
        return selection.needs_input
    if not selection.selected_ids:
        return ActionResult.ok("Nothing to destroy")
    return destroy_cards(context, target, selection.selected_ids)


def destroy_card_callback(context: ActionContext, user_input: Any) -> ActionResult:
    target = get_param(context.params, "target", Location)
    amount = get_param(context.params, "amount", Amount, default=Amount.ONE)
    ids = _as_ids(user_input)
    error = _check_choice(ids, amount)
    if error:
        return ActionResult.failure(error)
    return destroy_cards(context, target, ids)


# =============================================================================
# playCard
# =============================================================================

def play_card_effect(context: ActionContext, params: ActionParams) -> ActionResult:
    """
    Play the most recent card of ``type`` found at ``target``.

    The card goes to the discard pile and its effects run next, ahead of
    anything else still queued. Finding no such card is not an error.
    """
    target = get_param(params, "target", Location)
    card_type = get_param(params, "type", CardType, default=CardType.ANY)

    view = resolve(context, target)
    if view is None:
        return ActionResult.failure(f"Could not resolve location: {target.value}")

    candidates = [
        item.card for item in reversed(view.read())
        if card_type in (CardType.ANY, CardType.ALL) or item.card.type is card_type
    ]
    if not candidates:
        return ActionResult.ok(f"No {card_type.value} card to play in {target.value}")

    card = candidates[0]
    moved = move_card(context, target, Location.DISCARD_PILE, [card.id])
    if not moved.success:
        return moved

    turn = context.get_turn()
    follow_ups = tuple(Action.from_effect(effect, card.id) for effect in card.effect)
    queue = turn.action_queue[:1] + follow_ups + turn.action_queue[1:]
    context.set_turn(turn.copy_with(
        action_queue=queue,
        played_cards=turn.played_cards + (card.id,),
    ))
    logger.info("Card %s played from %s", card.id, target.value)
    return ActionResult.ok(
        f"Played {card.name}",
        data={"card": card, "queued": [a.action for a in follow_ups]},
    )


# =============================================================================
# captureDice
# =============================================================================

def capture_dice(context: ActionContext, params: ActionParams) -> ActionResult:
    """Store the dice result on the turn, asking for it if it is not known yet."""
    roll = get_param(params, "roll", default=None)
    if roll is None:
        roll = context.dice_result
    if roll is None:
        return ActionResult.waiting_for_input(NeedsInput(
            type="choice",
            prompt="Roll the dice",
            timeout_ms=get_config().action_timeout_ms,
            required_player_id=context.player_id,
        ))
    return _store_roll(context, roll)


def capture_dice_callback(context: ActionContext, user_input: Any) -> ActionResult:
    return _store_roll(context, user_input)


def _roll_value(roll: Any) -> int | None:
    # Small numeric strings arrive coerced to Amount
    if isinstance(roll, Amount):
        roll = roll.value
    if isinstance(roll, bool):
        return None
    try:
        return int(roll)
    except (TypeError, ValueError):
        return None


def _store_roll(context: ActionContext, roll: Any) -> ActionResult:
    value = _roll_value(roll)
    if value is None:
        return ActionResult.failure(f"Invalid dice result: {roll!r}")
    if not 2 <= value <= 12:
        return ActionResult.failure(f"Dice result must be between 2 and 12, got {value}")

    turn = context.get_turn()
    context.set_turn(turn.copy_with(current_roll=value))
    return ActionResult.ok(f"Captured roll {value}", data={"roll": value})


# =============================================================================
# attackMonster
# =============================================================================

def attack_monster(context: ActionContext, params: ActionParams) -> ActionResult:
    """
    Attack one of the face-up monsters.

    The roll comes from a ``roll`` parameter, the context's dice result, or
    the roll captured earlier this turn, in that order. A monster with no
    roll requirement needs 15, which two dice never reach. A defeated
    monster leaves the table.
    """
    monster_id = str(get_param(params, "monster_id"))
    monsters = context.get_list(GameKeys.MONSTERS)
    monster = next((m for m in monsters if m.id == monster_id), None)
    if monster is None:
        return ActionResult.failure(f"Monster not found: {monster_id}")

    roll = get_param(params, "roll", default=None)
    if roll is None:
        roll = context.dice_result
    if roll is None:
        turn = context.get_turn()
        roll = turn.current_roll if turn is not None else None
    if roll is None:
        return ActionResult.failure("Roll the dice before attacking")
    value = _roll_value(roll)
    if value is None:
        return ActionResult.failure(f"Invalid dice result: {roll!r}")

    requirement = monster.requirement
    required = requirement.value if requirement is not None and requirement.value else 15
    data = {"monster": monster, "roll": value, "required": required}
    if value < required:
        logger.info("Player %s failed against %s (%d vs %d)", context.player_id, monster.id, value, required)
        return ActionResult.failure(
            f"Failed to defeat {monster.name} (rolled {value} vs {required})", data=data
        )

    context.game_state_map.set(GameKeys.MONSTERS, [m for m in monsters if m.id != monster_id])
    logger.info("Player %s defeated %s", context.player_id, monster.id)
    return ActionResult.ok(f"Defeated {monster.name} (rolled {value} vs {required})", data=data)


# =============================================================================
# Registration
# =============================================================================

def register_hero_actions(registry: ActionRegistry | None = None) -> None:
    """Register every built-in action on ``registry`` (default registry if None)."""
    register_action("drawCard", draw_card, draw_card_callback,
                    "Move cards between locations", registry)
    register_action("deductPoint", deduct_point, None,
                    "Spend action points", registry)
    register_action("endTurn", end_turn, None,
                    "End the turn", registry)
    register_action("discardAllAndRedraw", discard_all_and_redraw, None,
                    "Swap the hand for a fresh one", registry)
    register_action("destroyCard", destroy_card, destroy_card_callback,
                    "Remove cards from play", registry)
    register_action("playCard", play_card_effect, None,
                    "Play a card found at a location", registry)
    register_action("captureDice", capture_dice, capture_dice_callback,
                    "Record a dice result", registry)
    register_action("attackMonster", attack_monster, None,
                    "Attack a monster with the current roll", registry)


register_hero_actions()
