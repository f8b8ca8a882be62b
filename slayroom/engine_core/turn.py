"""
Turn Processor - The per-turn FIFO action queue.

Action lifecycle:
    PENDING --run--> removed (success)
    PENDING --run--> FAILED (processing stops, reported with the count so far)
    PENDING --run--> WAITING (needs input; processing pauses)
    WAITING --provide_action_input--> PENDING --callback--> ...
    WAITING --deadline passes--> CANCELED (swept on the next processing pass)

Suspension is a stored state tag, not an in-process await: the call stack
unwinds fully and ``provide_action_input`` resumes later, possibly much later.

When the queue drains and the turn has no action points left, the turn
passes to the next connected player by join order.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

from ..config import get_config
from ..exceptions import ParameterError
from .action import USER_INPUT, Action, ActionContext, ActionResult, ActionState
from .registry import ActionHandler, ActionRegistry, default_registry
from .state import Turn
from .status import clear_status, now_ms, set_status
from .store import GameKeys

logger = logging.getLogger(__name__)


@dataclass
class QueueResult:
    """Outcome of a queue operation."""
    success: bool
    message: str
    data: dict[str, Any] | None = None
    actions_processed: int = 0


@dataclass(frozen=True)
class WaitingForAction:
    """Side record telling clients which action is waiting and for whom."""
    action_id: str
    player_id: str
    type: str
    prompt: str
    timeout_at: int
    time_remaining: int
    options: tuple[Any, ...] = field(default_factory=tuple)
    required_player_id: str | None = None


# =============================================================================
# Turn lifecycle
# =============================================================================


def start_turn(context: ActionContext, player_id: str) -> Turn:
    """Give ``player_id`` a fresh turn with full action points."""
    full = get_config().full_action_points
    with context.transact():
        player = context.get_player(player_id)
        if player is not None:
            context.set_player(player.copy_with(action_points=full))
        turn = Turn(player_id=player_id, action_points=full)
        context.set_turn(turn)
        context.game_state_map.delete(GameKeys.WAITING_FOR_ACTION)
        clear_status(context)
    logger.info("Turn started for player %s in room %s", player_id, context.room_id)
    return turn


def advance_turn(context: ActionContext) -> Turn | None:
    """
    Pass the turn to the next connected player by ascending join time.

    The outgoing player's points are forced to 0 and the new turn starts
    with the configured full amount and an empty queue. Returns the new
    turn, or None when nobody is connected.
    """
    players = context.players_by_join_time()
    if not any(p.connected for p in players):
        logger.warning("No connected players to advance to in room %s", context.room_id)
        return None

    turn = context.get_turn()
    current_id = turn.player_id if turn else None
    ids = [p.id for p in players]
    start = ids.index(current_id) if current_id in ids else -1

    next_player = None
    for step in range(1, len(players) + 1):
        candidate = players[(start + step) % len(players)]
        if candidate.connected:
            next_player = candidate
            break

    with context.transact():
        if current_id is not None:
            outgoing = context.get_player(current_id)
            if outgoing is not None:
                context.set_player(outgoing.copy_with(action_points=0))
        new_turn = start_turn(context, next_player.id)

    logger.info(
        "Turn advanced from %s to %s in room %s",
        current_id, next_player.id, context.room_id,
    )
    return new_turn


# =============================================================================
# Queue
# =============================================================================


def check_action_timeouts(context: ActionContext, now: int | None = None) -> list[str]:
    """
    Cancel waiting actions whose deadline has passed.

    Returns the ids that were canceled. Canceled actions are dropped from the
    head on the next processing pass and the rest of the queue continues.
    """
    turn = context.get_turn()
    if turn is None:
        return []

    current = now if now is not None else now_ms()
    canceled: list[str] = []
    queue: list[Action] = []
    for action in turn.action_queue:
        if (
            action.state is ActionState.WAITING
            and action.timeout_at is not None
            and current > action.timeout_at
        ):
            logger.info("Action %s (%s) timed out, canceling", action.id, action.action)
            action = action.copy_with(state=ActionState.CANCELED)
            canceled.append(action.id)
        queue.append(action)

    if canceled:
        with context.transact():
            context.set_turn(turn.copy_with(action_queue=tuple(queue)))
            waiting = context.game_state_map.get(GameKeys.WAITING_FOR_ACTION)
            if waiting is not None and waiting.action_id in canceled:
                context.game_state_map.delete(GameKeys.WAITING_FOR_ACTION)
                clear_status(context)
    return canceled


def add_actions_to_queue(
    context: ActionContext,
    actions: list[Action],
    registry: ActionRegistry | None = None,
    now: int | None = None,
) -> QueueResult:
    """Append ``actions`` to the acting player's turn and process the queue."""
    turn = context.get_turn()
    if turn is None:
        return QueueResult(success=False, message="No active turn found")
    if turn.player_id != context.player_id:
        return QueueResult(success=False, message=f"Not player {context.player_id}'s turn")

    context.set_turn(turn.copy_with(action_queue=turn.action_queue + tuple(actions)))
    logger.info(
        "Queued %d action(s) for player %s in room %s",
        len(actions), context.player_id, context.room_id,
    )
    return process_action_queue(context, registry=registry, now=now)


def _dispatch(handler: ActionHandler, action: Action, context: ActionContext) -> ActionResult:
    user_input = action.parameters.find(USER_INPUT)
    try:
        if user_input is not None and handler.callback is not None:
            logger.debug("Running callback for %s", action.action)
            return handler.callback(context, user_input.value)
        logger.debug("Running %s with %s", action.action, action.parameters)
        return handler.run(context, action.parameters)
    except ParameterError as exc:
        return ActionResult.failure(exc.message)


def _suspend(
    context: ActionContext,
    turn: Turn,
    action: Action,
    handler: ActionHandler,
    result: ActionResult,
    now: int | None,
) -> None:
    needs = result.needs_input
    timeout_ms = needs.timeout_ms or get_config().action_timeout_ms
    current = now if now is not None else now_ms()
    waiting = action.copy_with(
        state=ActionState.WAITING,
        timeout_at=current + timeout_ms,
        awaiting_input=needs,
    )
    with context.transact():
        context.set_turn(turn.with_action(waiting))
        context.game_state_map.set(
            GameKeys.WAITING_FOR_ACTION,
            WaitingForAction(
                action_id=action.id,
                player_id=turn.player_id,
                type=needs.type,
                prompt=needs.prompt,
                timeout_at=waiting.timeout_at,
                time_remaining=timeout_ms,
                options=tuple(needs.options),
                required_player_id=needs.required_player_id,
            ),
        )
        set_status(
            context,
            action.action,
            needs.prompt,
            has_callback=handler.has_callback,
            timeout_ms=timeout_ms,
            now=current,
        )
    logger.info("Action %s (%s) waiting for input", action.id, action.action)


def process_action_queue(
    context: ActionContext,
    registry: ActionRegistry | None = None,
    now: int | None = None,
) -> QueueResult:
    """
    Run queued actions head first until the queue empties, one fails, or one
    needs input.

    Handlers always run as the turn's player, whoever triggered processing.
    """
    registry = registry or default_registry
    check_action_timeouts(context, now=now)

    processed = 0
    results: list[ActionResult] = []
    paused_on: Action | None = None

    while True:
        turn = context.get_turn()
        if turn is None:
            return QueueResult(
                success=False,
                message="No active turn found during queue processing",
                actions_processed=processed,
            )

        head = turn.head
        if head is None:
            break

        if head.state is ActionState.WAITING:
            paused_on = head
            break

        if head.state.is_finished:
            logger.debug("Dropping %s action %s", head.state.value, head.id)
            context.set_turn(turn.without_action(head.id))
            continue

        handler = registry.get(head.action)
        if handler is None:
            context.set_turn(turn.with_action(head.copy_with(state=ActionState.FAILED)))
            logger.warning("Unknown action %s in room %s", head.action, context.room_id)
            return QueueResult(
                success=False,
                message=f"Unknown action: {head.action}",
                actions_processed=processed,
            )

        action_context = context.copy_with(
            player_id=turn.player_id,
            card_id=head.card_id,
            dice_result=turn.current_roll,
            params=head.parameters,
        )
        result = _dispatch(handler, head, action_context)
        results.append(result)

        # Handlers may have rewritten the turn (points, last target)
        turn = context.get_turn()
        if turn is None:
            return QueueResult(
                success=False,
                message="No active turn found during queue processing",
                actions_processed=processed,
            )

        if result.needs_input is not None:
            _suspend(context, turn, head, handler, result, now)
            paused_on = head
            break

        if not result.success:
            context.set_turn(turn.with_action(head.copy_with(state=ActionState.FAILED)))
            logger.info("Action %s failed: %s", head.action, result.message)
            return QueueResult(
                success=False,
                message=f"Action {head.action} failed: {result.message}",
                data={"action_results": results},
                actions_processed=processed,
            )

        processed += 1
        context.set_turn(turn.without_action(head.id))

    data: dict[str, Any] = {"action_results": results}
    if paused_on is not None:
        data["waiting_action_id"] = paused_on.id
    else:
        final = context.get_turn()
        if final is not None and not final.action_queue and final.action_points <= 0:
            new_turn = advance_turn(context)
            if new_turn is not None:
                data["next_player_id"] = new_turn.player_id

    return QueueResult(
        success=True,
        message=f"Successfully processed {processed} actions",
        data=data,
        actions_processed=processed,
    )


def provide_action_input(
    context: ActionContext,
    action_id: str,
    user_input: Any,
    registry: ActionRegistry | None = None,
    now: int | None = None,
) -> QueueResult:
    """
    Resume the waiting head-of-queue action with ``user_input``.

    Only the turn's player may answer, unless ``allow_target_owner_input``
    is enabled and the prompt names a required player, in which case only
    that player may answer.
    """
    turn = context.get_turn()
    if turn is None:
        return QueueResult(success=False, message="No active turn found")

    if turn.find_action(action_id) is None:
        return QueueResult(success=False, message=f"Action {action_id} not found in queue")

    head = turn.head
    if head.id != action_id:
        return QueueResult(success=False, message=f"Action {action_id} is not at the head of the queue")
    if head.state is not ActionState.WAITING:
        return QueueResult(success=False, message=f"Action {action_id} is not waiting for input")

    current = now if now is not None else now_ms()
    if head.timeout_at is not None and current > head.timeout_at:
        check_action_timeouts(context, now=current)
        return QueueResult(success=False, message=f"Action {action_id} has timed out")

    allowed = turn.player_id
    required = head.awaiting_input.required_player_id if head.awaiting_input else None
    if get_config().allow_target_owner_input and required:
        allowed = required
    if context.player_id != allowed:
        logger.info(
            "Player %s may not answer action %s in room %s",
            context.player_id, action_id, context.room_id,
        )
        return QueueResult(
            success=False,
            message=f"Player {context.player_id} is not allowed to answer action {action_id}",
        )

    with context.transact():
        context.set_turn(turn.with_action(head.with_input(user_input)))
        context.game_state_map.delete(GameKeys.WAITING_FOR_ACTION)
        clear_status(context)

    logger.info("Input received for action %s in room %s", action_id, context.room_id)
    return process_action_queue(context, registry=registry, now=current)


def clear_action_queue(context: ActionContext) -> QueueResult:
    """Drop every queued action of the acting player's turn."""
    turn = context.get_turn()
    if turn is None:
        return QueueResult(success=False, message="No active turn found")
    if turn.player_id != context.player_id:
        return QueueResult(success=False, message=f"Not player {context.player_id}'s turn")

    with context.transact():
        context.set_turn(turn.copy_with(action_queue=()))
        context.game_state_map.delete(GameKeys.WAITING_FOR_ACTION)
        clear_status(context)

    logger.info("Action queue cleared for player %s in room %s", context.player_id, context.room_id)
    return QueueResult(success=True, message="Action queue cleared")
