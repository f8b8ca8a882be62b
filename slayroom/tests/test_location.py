"""
Tests for location resolution.

Tests:
- Own, shared and aggregate locations
- Class-filtered party locations
- LAST_TARGET indirection
- Unresolvable locations
"""

from ..engine_core.location import AggregateView, HandView, PartyView, SharedView, resolve
from ..engine_core.state import Location, Party
from .conftest import card, hero


class TestResolveOwn:
    """Own hand and party."""

    def test_own_hand(self, context):
        view = resolve(context, Location.OWN_HAND)
        assert isinstance(view, HandView)
        assert [t.id for t in view.read()] == ["p1-a", "p1-b"]
        assert all(t.owner_id == "p1" for t in view.read())

    def test_own_party_flattens_leader_and_heroes(self, context):
        view = resolve(context, Location.OWN_PARTY)
        assert isinstance(view, PartyView)
        items = view.read()
        assert [t.id for t in items] == ["leader-p1", "hero-p1"]
        assert [t.role for t in items] == ["leader", "hero-0"]

    def test_unknown_player_does_not_resolve(self, context):
        ghost = context.copy_with(player_id="ghost")
        assert resolve(ghost, Location.OWN_HAND) is None
        assert resolve(ghost, Location.ANY_HAND) is None


class TestResolveShared:
    """Support deck, cache and discard pile."""

    def test_shared_resolves_for_anyone(self, context):
        ghost = context.copy_with(player_id="ghost")
        view = resolve(ghost, Location.SUPPORT_DECK)
        assert isinstance(view, SharedView)
        assert len(view.read()) == 5

    def test_missing_key_reads_empty(self, room, context):
        room.game_state.delete("cache")
        assert resolve(context, Location.CACHE).read() == []

    def test_insert_appends(self, context):
        view = resolve(context, Location.DISCARD_PILE)
        view.insert([card("x"), card("y")])
        assert [t.id for t in view.read()] == ["x", "y"]


class TestResolveAggregate:
    """Any/Other families."""

    def test_other_hands_in_join_order(self, context):
        view = resolve(context, Location.OTHER_HANDS)
        assert isinstance(view, AggregateView)
        assert [t.id for t in view.read()] == ["p2-a", "p2-b", "p3-a"]
        assert view.owners() == ["p2", "p3"]

    def test_any_hand_is_single_owner(self, context):
        view = resolve(context, Location.ANY_HAND)
        assert view.single_owner
        assert not resolve(context, Location.OTHER_HANDS).single_owner

    def test_fighter_filter(self, context):
        view = resolve(context, Location.OTHER_PARTIES_WITH_FIGHTER)
        assert [t.id for t in view.read()] == ["fighter-p2"]

    def test_thief_filter(self, context):
        view = resolve(context, Location.OTHER_PARTIES_WITH_THIEF)
        assert [t.id for t in view.read()] == ["thief-p3"]

    def test_no_eligible_players(self, room, context):
        p3 = room.players.get("p3")
        room.players.set("p3", p3.copy_with(party=Party.empty()))
        assert resolve(context, Location.OTHER_PARTIES_WITH_THIEF) is None

    def test_no_other_players(self, room, context):
        room.players.delete("p2")
        room.players.delete("p3")
        assert resolve(context, Location.OTHER_HANDS) is None
        assert resolve(context, Location.ANY_PARTY) is None

    def test_any_insert_goes_to_first_other_player(self, room, context):
        resolve(context, Location.ANY_HAND).insert([card("x"), card("y")])
        assert [c.id for c in room.players.get("p2").hand][-2:] == ["x", "y"]
        assert len(room.players.get("p3").hand) == 1

    def test_other_insert_round_robin(self, room, context):
        resolve(context, Location.OTHER_HANDS).insert([card("x"), card("y"), card("z")])
        assert [c.id for c in room.players.get("p2").hand][-2:] == ["x", "z"]
        assert [c.id for c in room.players.get("p3").hand][-1] == "y"

    def test_write_regroups_by_owner(self, room, context):
        view = resolve(context, Location.OTHER_HANDS)
        remaining = [t for t in view.read() if t.id != "p2-a"]
        view.write(remaining)
        assert [c.id for c in room.players.get("p2").hand] == ["p2-b"]
        assert [c.id for c in room.players.get("p3").hand] == ["p3-a"]

    def test_mixed_owner_selection_rejected_for_any(self, context):
        view = resolve(context, Location.ANY_HAND)
        message = view.validate_selection(["p2-a", "p3-a"])
        assert message == "For AnyHand, all selected cards must come from the same player's hand"

    def test_mixed_owner_selection_allowed_for_other(self, context):
        view = resolve(context, Location.OTHER_HANDS)
        assert view.validate_selection(["p2-a", "p3-a"]) is None

    def test_missing_card_message(self, context):
        view = resolve(context, Location.ANY_PARTY)
        assert view.validate_selection(["nope"]) == "Card nope not found in any other player's party"


class TestPartySlots:
    """Party write/insert keep slot structure."""

    def test_removing_hero_leaves_placeholder(self, room, context):
        view = resolve(context, Location.OWN_PARTY)
        view.write([t for t in view.read() if t.id != "hero-p1"])
        party = room.players.get("p1").party
        assert party.heroes == (None, None, None)
        assert party.leader.id == "leader-p1"

    def test_insert_fills_first_empty_slot(self, room, context):
        resolve(context, Location.OWN_PARTY).insert([hero("new")])
        heroes = room.players.get("p1").party.heroes
        assert heroes[0].id == "hero-p1"
        assert heroes[1].id == "new"
        assert heroes[2] is None

    def test_insert_grows_when_full(self, room, context):
        view = resolve(context, Location.OWN_PARTY)
        view.insert([hero("a"), hero("b"), hero("c")])
        assert len(room.players.get("p1").party.heroes) == 4


class TestLastTarget:
    """LAST_TARGET follows the turn's last move."""

    def test_unset_last_target(self, context):
        assert resolve(context, Location.LAST_TARGET) is None

    def test_follows_recorded_source(self, room, context):
        turn = room.game_state.get("current_turn")
        room.game_state.set("current_turn", turn.copy_with(last_target=Location.OTHER_HANDS))
        view = resolve(context, Location.LAST_TARGET)
        assert view.location is Location.OTHER_HANDS
