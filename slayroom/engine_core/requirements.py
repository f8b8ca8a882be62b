"""
Requirements - Conditions checked before a card may be played.

Named checks live in a registry like actions do:
    actionPoint(points=1)       acting player has enough action points
    emptyQueue()                nothing is queued on the current turn
    turn()                      it is the acting player's turn
    handCards(min=1, max=None)  hand size within bounds
    heroClass(cls)              party holds a hero of that class
    firstTime(card_id)          card not already played this turn

``check_card_requirement`` maps a card's ``Requirement`` onto them.
"""

from __future__ import annotations
from typing import Any, Callable
import logging

from .action import ActionContext, ActionResult
from .state import Card, HeroClass, Requirement

logger = logging.getLogger(__name__)

RequirementFn = Callable[..., ActionResult]


class RequirementRegistry:
    def __init__(self):
        self._checks: dict[str, RequirementFn] = {}

    def register(self, name: str, check: RequirementFn) -> None:
        self._checks[name] = check

    def get(self, name: str) -> RequirementFn | None:
        return self._checks.get(name)

    def check(self, name: str, context: ActionContext, *args: Any) -> ActionResult:
        check = self._checks.get(name)
        if check is None:
            return ActionResult.failure(f"Unknown requirement: {name}")
        return check(context, *args)


requirement_registry = RequirementRegistry()


def register_requirement(name: str):
    """Decorator registering a check on the default requirement registry."""
    def decorator(fn: RequirementFn) -> RequirementFn:
        requirement_registry.register(name, fn)
        return fn
    return decorator


@register_requirement("actionPoint")
def action_point(context: ActionContext, points: int = 1) -> ActionResult:
    player = context.get_player()
    if player is None:
        return ActionResult.failure("Player not found")
    have = player.action_points
    if have >= points:
        return ActionResult.ok(f"Action point requirement met ({have}/{points})")
    return ActionResult.failure(f"Need {points} action points, have {have}")


@register_requirement("emptyQueue")
def empty_queue(context: ActionContext) -> ActionResult:
    turn = context.get_turn()
    if turn is None or not turn.action_queue:
        return ActionResult.ok("Empty queue requirement met")
    return ActionResult.failure("Action queue must be empty")


@register_requirement("turn")
def is_turn(context: ActionContext) -> ActionResult:
    turn = context.get_turn()
    if turn is not None and turn.player_id == context.player_id:
        return ActionResult.ok("Turn requirement met")
    return ActionResult.failure("Not your turn")


@register_requirement("handCards")
def hand_cards(context: ActionContext, min_cards: int = 1, max_cards: int | None = None) -> ActionResult:
    player = context.get_player()
    if player is None:
        return ActionResult.failure("Player not found")
    size = len(player.hand)
    if size < min_cards:
        return ActionResult.failure(f"Need at least {min_cards} cards in hand, have {size}")
    if max_cards is not None and size > max_cards:
        return ActionResult.failure(f"Cannot have more than {max_cards} cards in hand, have {size}")
    return ActionResult.ok(f"Hand cards requirement met ({size} cards)")


@register_requirement("heroClass")
def hero_class(context: ActionContext, required: HeroClass) -> ActionResult:
    player = context.get_player()
    if player is None:
        return ActionResult.failure("Player not found")
    if player.party.has_class(required):
        return ActionResult.ok(f"Hero class {required.value} requirement met")
    return ActionResult.failure(f"Missing hero of class {required.value}")


@register_requirement("firstTime")
def first_time(context: ActionContext, card_id: str) -> ActionResult:
    turn = context.get_turn()
    if turn is None or card_id not in turn.played_cards:
        return ActionResult.ok(f"First time {card_id} requirement met")
    return ActionResult.failure(f"Can only play {card_id} once per turn")


def _check_hero_count(context: ActionContext, count: int) -> ActionResult:
    player = context.get_player()
    if player is None:
        return ActionResult.failure("Player not found")
    have = player.party.hero_count
    if have >= count:
        return ActionResult.ok(f"Hero requirement met ({have}/{count})")
    return ActionResult.failure(f"Need {count} heroes in party, have {have}")


def _check_roll(dice_result: int | None, minimum: int) -> ActionResult:
    if dice_result is None:
        return ActionResult.failure(f"Roll of {minimum} or more required")
    if dice_result >= minimum:
        return ActionResult.ok(f"Roll requirement met ({dice_result}/{minimum})")
    return ActionResult.failure(f"Rolled {dice_result}, need {minimum} or more")


def check_card_requirement(
    context: ActionContext,
    card: Card,
    dice_result: int | None = None,
) -> ActionResult:
    """Check ``card.requirement`` for the acting player. Cards without one pass."""
    requirement: Requirement | None = card.requirement
    if requirement is None:
        return ActionResult.ok("No requirement")

    value = requirement.value if requirement.value is not None else 1
    kind = requirement.type
    if kind == "point":
        result = requirement_registry.check("actionPoint", context, value)
    elif kind == "hero":
        result = _check_hero_count(context, value)
    elif kind == "roll":
        result = _check_roll(dice_result, value)
    elif kind == "duplicate":
        result = requirement_registry.check("firstTime", context, card.id)
    elif kind == "class":
        if requirement.hero_class is None:
            return ActionResult.failure("Class requirement has no class")
        result = requirement_registry.check("heroClass", context, requirement.hero_class)
    elif kind == "hand":
        result = requirement_registry.check("handCards", context, value)
    else:
        result = ActionResult.failure(f"Unknown requirement type: {kind}")

    if not result.success:
        logger.info("Card %s requirement not met: %s", card.id, result.message)
    return result
