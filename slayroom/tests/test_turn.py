"""
Tests for the action queue.

Tests:
- FIFO processing and results
- Failure stops processing
- Suspension for input and resumption
- Input authorization and timeouts
- Turn advancement
"""

import pytest

from ..config import EngineConfig, set_config
from ..engine_core.action import (
    Action,
    ActionParameter,
    ActionParams,
    ActionResult,
    ActionState,
    NeedsInput,
    get_param,
)
from ..engine_core.registry import ActionRegistry, register_action
from ..engine_core.state import Amount, CardType, Location
from ..engine_core.turn import (
    add_actions_to_queue,
    advance_turn,
    check_action_timeouts,
    clear_action_queue,
    process_action_queue,
    provide_action_input,
    start_turn,
)
from .conftest import card


@pytest.fixture
def calls():
    return []


@pytest.fixture
def recording_registry(calls):
    """Registry with small recording actions."""
    reg = ActionRegistry()

    def noop(context, params):
        calls.append(("noop", context.player_id))
        return ActionResult.ok("done")

    def fail(context, params):
        calls.append(("fail", context.player_id))
        return ActionResult.failure("nope")

    def ask(context, params):
        calls.append(("ask", context.player_id))
        return ActionResult.waiting_for_input(NeedsInput(
            type="choice",
            prompt="Pick one",
            timeout_ms=1000,
            options=("a", "b"),
            required_player_id="p2",
        ))

    def ask_callback(context, user_input):
        calls.append(("answer", user_input))
        return ActionResult.ok(f"got {user_input}")

    def spend(context, params):
        turn = context.get_turn()
        context.set_turn(turn.copy_with(action_points=turn.action_points - 1))
        return ActionResult.ok("spent")

    def needs_target(context, params):
        get_param(params, "target", Location)
        return ActionResult.ok("had target")

    register_action("noop", noop, registry=reg)
    register_action("fail", fail, registry=reg)
    register_action("ask", ask, ask_callback, registry=reg)
    register_action("spend", spend, registry=reg)
    register_action("needsTarget", needs_target, registry=reg)
    return reg


def queue(room):
    return room.game_state.get("current_turn").action_queue


class TestProcessing:
    """Running the queue."""

    def test_runs_in_order(self, context, recording_registry, calls, now):
        result = add_actions_to_queue(
            context, [Action.create("noop"), Action.create("noop")], registry=recording_registry, now=now
        )
        assert result.success
        assert result.actions_processed == 2
        assert result.message == "Successfully processed 2 actions"
        assert calls == [("noop", "p1"), ("noop", "p1")]

    def test_empty_queue(self, context, recording_registry, now):
        result = process_action_queue(context, registry=recording_registry, now=now)
        assert result.success
        assert result.actions_processed == 0

    def test_not_players_turn(self, room, recording_registry, context):
        result = add_actions_to_queue(context.copy_with(player_id="p2"), [Action.create("noop")], recording_registry)
        assert not result.success
        assert result.message == "Not player p2's turn"

    def test_no_turn(self, room, context, recording_registry):
        room.game_state.delete("current_turn")
        result = add_actions_to_queue(context, [Action.create("noop")], recording_registry)
        assert result.message == "No active turn found"

    def test_failure_stops_processing(self, room, context, recording_registry, calls, now):
        actions = [Action.create("noop"), Action.create("fail"), Action.create("noop")]
        result = add_actions_to_queue(context, actions, registry=recording_registry, now=now)

        assert not result.success
        assert result.message == "Action fail failed: nope"
        assert result.actions_processed == 1
        assert [c[0] for c in calls] == ["noop", "fail"]
        assert queue(room)[0].state is ActionState.FAILED
        assert len(queue(room)) == 2

    def test_failed_head_dropped_next_pass(self, room, context, recording_registry, calls, now):
        add_actions_to_queue(context, [Action.create("fail"), Action.create("noop")], recording_registry, now)
        result = process_action_queue(context, registry=recording_registry, now=now)
        assert result.success
        assert result.actions_processed == 1
        assert queue(room) == ()

    def test_unknown_action(self, room, context, recording_registry, now):
        result = add_actions_to_queue(context, [Action.create("mystery")], recording_registry, now)
        assert not result.success
        assert result.message == "Unknown action: mystery"
        assert queue(room)[0].state is ActionState.FAILED

    def test_missing_parameter_becomes_failure(self, context, recording_registry, now):
        result = add_actions_to_queue(context, [Action.create("needsTarget")], recording_registry, now)
        assert not result.success
        assert result.message == "Action needsTarget failed: Missing required parameter: target"

    def test_handlers_run_as_turn_player(self, context, recording_registry, calls, now):
        add_actions_to_queue(context, [Action.create("ask")], recording_registry, now)
        calls.clear()
        process_action_queue(context.copy_with(player_id="p3"), registry=recording_registry, now=now)
        assert calls == []

        provide_action_input(context, queue_head_id(context), "a", recording_registry, now)
        assert calls == [("answer", "a")]


def queue_head_id(context):
    return context.get_turn().head.id


class TestSuspension:
    """Pausing for input and resuming."""

    def test_pauses_on_input(self, room, context, recording_registry, calls, now):
        actions = [Action.create("noop"), Action.create("ask"), Action.create("noop")]
        result = add_actions_to_queue(context, actions, recording_registry, now)

        assert result.success
        assert result.actions_processed == 1
        ask = queue(room)[0]
        assert result.data["waiting_action_id"] == ask.id
        assert ask.state is ActionState.WAITING
        assert ask.timeout_at == now + 1000

        waiting = room.game_state.get("waiting_for_action")
        assert waiting.action_id == ask.id
        assert waiting.player_id == "p1"
        assert waiting.options == ("a", "b")
        assert waiting.time_remaining == 1000

        status = room.game_state.get("game_status")
        assert status.key == "ask"
        assert status.message == "Pick one"
        assert status.timeout_at == now + 1000

    def test_processing_while_waiting_is_noop(self, context, recording_registry, calls, now):
        add_actions_to_queue(context, [Action.create("ask"), Action.create("noop")], recording_registry, now)
        calls.clear()
        result = process_action_queue(context, registry=recording_registry, now=now + 10)
        assert result.success
        assert result.actions_processed == 0
        assert calls == []

    def test_resume_runs_callback_then_rest(self, room, context, recording_registry, calls, now):
        add_actions_to_queue(context, [Action.create("ask"), Action.create("noop")], recording_registry, now)
        action_id = queue(room)[0].id

        result = provide_action_input(context, action_id, "b", recording_registry, now + 10)

        assert result.success
        assert result.actions_processed == 2
        assert calls[-2:] == [("answer", "b"), ("noop", "p1")]
        assert queue(room) == ()
        assert room.game_state.get("waiting_for_action") is None
        assert room.game_state.get("game_status") is None

    def test_input_for_unknown_action(self, context, recording_registry, now):
        result = provide_action_input(context, "action-x", "a", recording_registry, now)
        assert result.message == "Action action-x not found in queue"

    def test_input_for_non_head(self, room, context, recording_registry, now):
        add_actions_to_queue(context, [Action.create("ask"), Action.create("noop")], recording_registry, now)
        second = queue(room)[1].id
        result = provide_action_input(context, second, "a", recording_registry, now)
        assert result.message == f"Action {second} is not at the head of the queue"

    def test_input_for_pending_action(self, room, context, recording_registry, now):
        room.game_state.set("current_turn", context.get_turn().copy_with(
            action_queue=(Action.create("noop"),)
        ))
        action_id = queue(room)[0].id
        result = provide_action_input(context, action_id, "a", recording_registry, now)
        assert result.message == f"Action {action_id} is not waiting for input"

    def test_only_turn_player_may_answer(self, room, context, recording_registry, now):
        add_actions_to_queue(context, [Action.create("ask")], recording_registry, now)
        action_id = queue(room)[0].id
        result = provide_action_input(context.copy_with(player_id="p2"), action_id, "a", recording_registry, now)
        assert not result.success
        assert result.message == f"Player p2 is not allowed to answer action {action_id}"

    def test_target_owner_may_answer_when_enabled(self, room, context, recording_registry, calls, now):
        set_config(EngineConfig(allow_target_owner_input=True))
        add_actions_to_queue(context, [Action.create("ask")], recording_registry, now)
        action_id = queue(room)[0].id

        denied = provide_action_input(context, action_id, "a", recording_registry, now)
        assert not denied.success

        result = provide_action_input(context.copy_with(player_id="p2"), action_id, "a", recording_registry, now)
        assert result.success
        assert calls[-1] == ("answer", "a")


class TestTimeouts:
    """Expired prompts are canceled."""

    def test_check_cancels_expired(self, room, context, recording_registry, now):
        add_actions_to_queue(context, [Action.create("ask"), Action.create("noop")], recording_registry, now)
        action_id = queue(room)[0].id

        assert check_action_timeouts(context, now=now + 500) == []
        assert check_action_timeouts(context, now=now + 1001) == [action_id]
        assert queue(room)[0].state is ActionState.CANCELED
        assert room.game_state.get("waiting_for_action") is None
        assert room.game_state.get("game_status") is None

    def test_processing_continues_after_timeout(self, room, context, recording_registry, calls, now):
        add_actions_to_queue(context, [Action.create("ask"), Action.create("noop")], recording_registry, now)
        calls.clear()

        result = process_action_queue(context, registry=recording_registry, now=now + 2000)

        assert result.success
        assert result.actions_processed == 1
        assert calls == [("noop", "p1")]
        assert queue(room) == ()

    def test_late_input_rejected(self, room, context, recording_registry, now):
        add_actions_to_queue(context, [Action.create("ask")], recording_registry, now)
        action_id = queue(room)[0].id
        result = provide_action_input(context, action_id, "a", recording_registry, now + 5000)
        assert result.message == f"Action {action_id} has timed out"
        assert queue(room)[0].state is ActionState.CANCELED


class TestTurnAdvance:
    """Passing the turn."""

    def test_advance_after_points_spent(self, room, context, recording_registry, now):
        room.game_state.set("current_turn", context.get_turn().copy_with(action_points=1))
        result = add_actions_to_queue(context, [Action.create("spend")], recording_registry, now)

        assert result.success
        assert result.data["next_player_id"] == "p2"
        turn = room.game_state.get("current_turn")
        assert turn.player_id == "p2"
        assert turn.action_points == 3
        assert turn.action_queue == ()
        assert room.players.get("p1").action_points == 0
        assert room.players.get("p2").action_points == 3

    def test_new_turn_starts_without_modifiers(self, room, context):
        """Modifiers and the roll belong to the turn that played them."""
        modifier = card("mod-1", CardType.MODIFIER)
        room.game_state.set("current_turn", context.get_turn().copy_with(
            modifiers=(modifier,), current_roll=9,
        ))
        assert room.game_state.get("current_turn").modifiers == (modifier,)

        turn = advance_turn(context)
        assert turn.player_id == "p2"
        assert turn.modifiers == ()
        assert turn.current_roll is None

    def test_no_advance_with_points_left(self, room, context, recording_registry, now):
        result = add_actions_to_queue(context, [Action.create("spend")], recording_registry, now)
        assert "next_player_id" not in result.data
        assert room.game_state.get("current_turn").player_id == "p1"

    def test_no_advance_while_paused(self, room, context, recording_registry, now):
        room.game_state.set("current_turn", context.get_turn().copy_with(action_points=1))
        add_actions_to_queue(context, [Action.create("spend"), Action.create("ask")], recording_registry, now)
        assert room.game_state.get("current_turn").player_id == "p1"

    def test_wraps_around(self, room, context):
        start_turn(context, "p3")
        turn = advance_turn(context)
        assert turn.player_id == "p1"

    def test_skips_disconnected(self, room, context):
        room.players.set("p2", room.players.get("p2").copy_with(connected=False))
        assert advance_turn(context).player_id == "p3"

    def test_nobody_connected(self, room, context):
        for pid in ("p1", "p2", "p3"):
            room.players.set(pid, room.players.get(pid).copy_with(connected=False))
        assert advance_turn(context) is None
        assert room.game_state.get("current_turn").player_id == "p1"

    def test_config_controls_full_points(self, room, context):
        set_config(EngineConfig(full_action_points=5))
        assert start_turn(context, "p2").action_points == 5


class TestClearQueue:

    def test_clear(self, room, context, recording_registry, now):
        add_actions_to_queue(context, [Action.create("ask"), Action.create("noop")], recording_registry, now)
        result = clear_action_queue(context)
        assert result.success
        assert queue(room) == ()
        assert room.game_state.get("waiting_for_action") is None

    def test_clear_other_players_turn(self, context):
        result = clear_action_queue(context.copy_with(player_id="p2"))
        assert result.message == "Not player p2's turn"


class TestParamsInHandlers:
    """Parameters reach handlers decoded."""

    def test_handler_sees_enum(self, context, now):
        seen = {}
        reg = ActionRegistry()

        def record(ctx, params):
            seen["target"] = get_param(params, "target")
            seen["amount"] = get_param(params, "amount")
            return ActionResult.ok()

        register_action("record", record, registry=reg)
        params = ActionParams.of(
            ActionParameter.location("target", "cache"),
            ActionParameter.amount("amount", 2),
        )
        add_actions_to_queue(context, [Action.create("record", params)], reg, now)
        assert seen == {"target": Location.CACHE, "amount": Amount.TWO}
