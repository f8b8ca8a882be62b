"""
Move Executor - Relocate cards between locations atomically.

Every operation validates first and mutates last:
1. Check locations and ids, resolve source and destination
2. For Any-family sources, check that every id belongs to one owner
3. Remove the ids from the source and insert them at the destination
   inside one store transaction

A failure at any step returns before anything is written, so a card is
never missing from every container or present in two of them.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import logging

from .action import ActionContext, ActionResult
from .location import LocationView, TaggedCard, resolve
from .selection import determine_selection_mode, select_cards
from .state import Amount, Location, SelectionMode

logger = logging.getLogger(__name__)


@dataclass
class _Taken:
    """Validated removal plan for one source."""
    view: LocationView
    moved: list[TaggedCard]
    remaining: list[TaggedCard]


def _coerce_location(value: Any) -> Location | None:
    if isinstance(value, Location):
        return value
    try:
        return Location(value)
    except ValueError:
        return None


def _plan_removal(context: ActionContext, source: Location, card_ids: list[str]) -> _Taken | str:
    view = resolve(context, source)
    if view is None:
        return f"Could not resolve source location: {source.value}"

    error = view.validate_selection(card_ids)
    if error:
        return error

    items = view.read()
    by_id = {item.id: item for item in items}
    for card_id in card_ids:
        if card_id not in by_id:
            return view.missing_message(card_id)

    wanted = set(card_ids)
    return _Taken(
        view=view,
        moved=[by_id[card_id] for card_id in card_ids],
        remaining=[item for item in items if item.id not in wanted],
    )


def _record_last_move(
    context: ActionContext,
    source: Location,
    destination: Location | None,
    amount: int,
) -> None:
    turn = context.get_turn()
    if turn is None:
        return
    context.set_turn(
        turn.copy_with(last_target=source, last_destination=destination, last_amount=amount)
    )


def _check_inputs(source: Any, destination: Any, card_ids: Any) -> tuple[Location, Location] | str:
    if not source or not destination:
        return "target and destination are required"
    if not card_ids:
        return "card_ids is required and must not be empty"
    src = _coerce_location(source)
    if src is None:
        return f"Unsupported source location: {source}"
    dst = _coerce_location(destination)
    if dst is None:
        return f"Unsupported destination location: {destination}"
    return src, dst


def move_card(
    context: ActionContext,
    source: Location | str | None,
    destination: Location | str | None,
    card_ids: list[str] | None,
) -> ActionResult:
    """
    Move the given cards from ``source`` to ``destination``.

    Returns a failure result (with state untouched) on any invalid input,
    unknown card, or cross-owner Any-family selection.
    """
    checked = _check_inputs(source, destination, card_ids)
    if isinstance(checked, str):
        logger.info("Move rejected in room %s: %s", context.room_id, checked)
        return ActionResult.failure(checked)
    src, dst = checked

    ids = list(dict.fromkeys(card_ids))
    taken = _plan_removal(context, src, ids)
    if isinstance(taken, str):
        logger.info("Move rejected in room %s: %s", context.room_id, taken)
        return ActionResult.failure(taken)

    dest_view = resolve(context, dst)
    if dest_view is None:
        message = f"Could not resolve destination location: {dst.value}"
        logger.info("Move rejected in room %s: %s", context.room_id, message)
        return ActionResult.failure(message)

    cards = [item.card for item in taken.moved]
    with context.transact():
        taken.view.write(taken.remaining)
        dest_view.insert(cards)
        _record_last_move(context, taken.view.location, dest_view.location, len(cards))

    logger.debug(
        "Moved %s from %s to %s in room %s",
        [c.id for c in cards], src.value, dst.value, context.room_id,
    )
    return ActionResult.ok(
        f"Moved {len(cards)} card(s) from {src.value} to {dst.value}",
        data={
            "cards": cards,
            "target": src.value,
            "destination": dst.value,
            "amount": len(cards),
        },
    )


def move_cards(
    context: ActionContext,
    source: Location | str | None,
    destination: Location | str | None,
    amount: Amount | int,
    mode: SelectionMode | None = None,
    timeout_ms: int | None = None,
) -> ActionResult:
    """
    Select ``amount`` cards at ``source`` and move them to ``destination``.

    When ``mode`` is None it is chosen by ``determine_selection_mode``. A
    mode that needs a player's choice returns the needs-input result
    unchanged; the caller resumes later with ``move_card``.
    """
    if not source or not destination:
        return ActionResult.failure("target and destination are required")
    src = _coerce_location(source)
    if src is None:
        return ActionResult.failure(f"Unsupported source location: {source}")
    dst = _coerce_location(destination)
    if dst is None:
        return ActionResult.failure(f"Unsupported destination location: {destination}")

    amount = amount if isinstance(amount, Amount) else Amount(amount)
    if amount is Amount.ZERO:
        return ActionResult.ok(
            f"Moved 0 card(s) from {src.value} to {dst.value}",
            data={"cards": [], "target": src.value, "destination": dst.value, "amount": 0},
        )

    if mode is None:
        mode = determine_selection_mode(context, src, amount)

    selection = select_cards(context, src, amount, mode, timeout_ms)
    if not selection.success:
        return ActionResult.failure(selection.message)
    if selection.waiting:
        return selection.needs_input
    if not selection.selected_ids:
        return ActionResult.ok(
            f"Moved 0 card(s) from {src.value} to {dst.value}",
            data={"cards": [], "target": src.value, "destination": dst.value, "amount": 0},
        )

    result = move_card(context, src, dst, selection.selected_ids)
    if result.success and selection.is_short:
        result.message = f"{result.message} ({selection.message})"
    return result


def destroy_cards(
    context: ActionContext,
    source: Location | str | None,
    card_ids: list[str] | None,
) -> ActionResult:
    """Remove cards from play entirely; they are not inserted anywhere."""
    if not source:
        return ActionResult.failure("target is required")
    if not card_ids:
        return ActionResult.failure("card_ids is required and must not be empty")
    src = _coerce_location(source)
    if src is None:
        return ActionResult.failure(f"Unsupported source location: {source}")

    taken = _plan_removal(context, src, list(dict.fromkeys(card_ids)))
    if isinstance(taken, str):
        return ActionResult.failure(taken)

    cards = [item.card for item in taken.moved]
    with context.transact():
        taken.view.write(taken.remaining)
        _record_last_move(context, taken.view.location, None, len(cards))

    logger.info("Destroyed %s in room %s", [c.id for c in cards], context.room_id)
    return ActionResult.ok(
        f"Destroyed {len(cards)} card(s) from {src.value}",
        data={"cards": cards, "target": src.value, "amount": len(cards)},
    )
