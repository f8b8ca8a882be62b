"""
Location Resolver - One read/write interface over every card container.

Cards live in differently shaped places:
- a player's hand (flat tuple)
- a player's party (leader + hero slots with placeholders)
- a shared stack in the game state (support deck, cache, discard pile)
- several other players at once (aggregate of hands or parties)

``resolve`` maps a ``Location`` to a ``LocationView`` so the selection
engine and move executor can treat each as "a list you can read and later
overwrite" without branching on the location.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable
import logging

from .action import ActionContext
from .state import Card, HeroClass, Location, Party
from .store import GameKeys

logger = logging.getLogger(__name__)

SHARED_KEYS = {
    Location.SUPPORT_DECK: GameKeys.SUPPORT_STACK,
    Location.CACHE: GameKeys.CACHE,
    Location.DISCARD_PILE: GameKeys.DISCARD_PILE,
}

_PARTY_CLASS_FILTERS = {
    Location.OTHER_PARTIES_WITH_FIGHTER: HeroClass.FIGHTER,
    Location.OTHER_PARTIES_WITH_THIEF: HeroClass.THIEF,
}


@dataclass(frozen=True)
class TaggedCard:
    """A card plus where it sits: its structural role and owning player."""
    card: Card
    role: str  # hand | leader | hero-<index> | shared
    owner_id: str | None = None

    @property
    def id(self) -> str:
        return self.card.id


class LocationView(ABC):
    """
    Uniform view over one location.

    ``read`` lists the cards, ``write`` replaces the contents with a subset of
    what ``read`` returned, and ``insert`` applies the placement policy for
    cards arriving at this location.
    """

    def __init__(self, context: ActionContext, location: Location):
        self.context = context
        self.location = location

    @property
    def label(self) -> str:
        return self.location.value

    @abstractmethod
    def read(self) -> list[TaggedCard]:
        ...

    @abstractmethod
    def write(self, remaining: list[TaggedCard]) -> None:
        ...

    @abstractmethod
    def insert(self, cards: list[Card]) -> None:
        ...

    def validate_selection(self, card_ids: list[str]) -> str | None:
        """Return an error message if ``card_ids`` cannot be taken together."""
        return None

    def missing_message(self, card_id: str) -> str:
        return f"Card {card_id} not found in {self.label}"

    def owners(self, card_ids: Iterable[str] | None = None) -> list[str]:
        """Distinct owners of the given cards (all cards if None), in read order."""
        wanted = set(card_ids) if card_ids is not None else None
        seen: list[str] = []
        for item in self.read():
            if wanted is not None and item.id not in wanted:
                continue
            if item.owner_id is not None and item.owner_id not in seen:
                seen.append(item.owner_id)
        return seen


class HandView(LocationView):
    """One player's hand."""

    def __init__(self, context: ActionContext, location: Location, player_id: str):
        super().__init__(context, location)
        self.player_id = player_id

    def read(self) -> list[TaggedCard]:
        player = self.context.get_player(self.player_id)
        if player is None:
            return []
        return [TaggedCard(card, "hand", player.id) for card in player.hand]

    def write(self, remaining: list[TaggedCard]) -> None:
        player = self.context.get_player(self.player_id)
        self.context.set_player(player.copy_with(hand=tuple(t.card for t in remaining)))

    def insert(self, cards: list[Card]) -> None:
        player = self.context.get_player(self.player_id)
        self.context.set_player(player.copy_with(hand=player.hand + tuple(cards)))


class PartyView(LocationView):
    """One player's party, flattened to leader + filled hero slots."""

    def __init__(self, context: ActionContext, location: Location, player_id: str):
        super().__init__(context, location)
        self.player_id = player_id

    def read(self) -> list[TaggedCard]:
        player = self.context.get_player(self.player_id)
        if player is None:
            return []
        items = []
        if player.party.leader is not None:
            items.append(TaggedCard(player.party.leader, "leader", player.id))
        for index, hero in enumerate(player.party.heroes):
            if hero is not None:
                items.append(TaggedCard(hero, f"hero-{index}", player.id))
        return items

    def write(self, remaining: list[TaggedCard]) -> None:
        # Rebuild from roles; removed heroes leave an empty slot behind
        player = self.context.get_player(self.player_id)
        by_role = {t.role: t.card for t in remaining}
        heroes = tuple(by_role.get(f"hero-{i}") for i in range(len(player.party.heroes)))
        party = Party(leader=by_role.get("leader"), heroes=heroes)
        self.context.set_player(player.copy_with(party=party))

    def insert(self, cards: list[Card]) -> None:
        player = self.context.get_player(self.player_id)
        party = player.party
        for card in cards:
            party = party.with_hero(card)
        self.context.set_player(player.copy_with(party=party))


class SharedView(LocationView):
    """A shared stack in the game state map."""

    def __init__(self, context: ActionContext, location: Location, key: str):
        super().__init__(context, location)
        self.key = key

    def read(self) -> list[TaggedCard]:
        return [TaggedCard(card, "shared") for card in self.context.get_list(self.key)]

    def write(self, remaining: list[TaggedCard]) -> None:
        self.context.game_state_map.set(self.key, [t.card for t in remaining])

    def insert(self, cards: list[Card]) -> None:
        self.context.game_state_map.set(self.key, self.context.get_list(self.key) + list(cards))


class AggregateView(LocationView):
    """
    Hands or parties of several other players.

    Any-family locations must take every card from one owner and insert into
    the first other player. Other-family locations may span owners and deal
    inserted cards round-robin.
    """

    def __init__(
        self,
        context: ActionContext,
        location: Location,
        views: list[HandView | PartyView],
        single_owner: bool,
    ):
        super().__init__(context, location)
        self.views = views
        self.single_owner = single_owner

    @property
    def container(self) -> str:
        return "party" if self.location.is_party else "hand"

    @property
    def family_name(self) -> str:
        return "AnyParty" if self.location.is_party else "AnyHand"

    def read(self) -> list[TaggedCard]:
        items: list[TaggedCard] = []
        for view in self.views:
            items.extend(view.read())
        return items

    def write(self, remaining: list[TaggedCard]) -> None:
        for view in self.views:
            view.write([t for t in remaining if t.owner_id == view.player_id])

    def insert(self, cards: list[Card]) -> None:
        if self.single_owner:
            self.views[0].insert(cards)
            return
        buckets: list[list[Card]] = [[] for _ in self.views]
        for i, card in enumerate(cards):
            buckets[i % len(self.views)].append(card)
        for view, bucket in zip(self.views, buckets):
            if bucket:
                view.insert(bucket)

    def missing_message(self, card_id: str) -> str:
        return f"Card {card_id} not found in any other player's {self.container}"

    def validate_selection(self, card_ids: list[str]) -> str | None:
        owner_by_card = {t.id: t.owner_id for t in self.read()}
        owners = set()
        for card_id in card_ids:
            if card_id not in owner_by_card:
                return self.missing_message(card_id)
            owners.add(owner_by_card[card_id])
        if self.single_owner and len(owners) > 1:
            return (
                f"For {self.family_name}, all selected cards must come from "
                f"the same player's {self.container}"
            )
        return None


def resolve(context: ActionContext, location: Location) -> LocationView | None:
    """
    Map ``location`` to a view for the acting player.

    Returns None when the acting player is unknown, when no eligible other
    player exists for an Any/Other location, or when LAST_TARGET has nothing
    recorded.
    """
    if location is Location.LAST_TARGET:
        turn = context.get_turn()
        if turn is None or turn.last_target is None or turn.last_target is Location.LAST_TARGET:
            logger.debug("No last target recorded in room %s", context.room_id)
            return None
        return resolve(context, turn.last_target)

    if location in SHARED_KEYS:
        return SharedView(context, location, SHARED_KEYS[location])

    if context.get_player() is None:
        logger.debug("Player %s not found in room %s", context.player_id, context.room_id)
        return None

    if location is Location.OWN_HAND:
        return HandView(context, location, context.player_id)
    if location is Location.OWN_PARTY:
        return PartyView(context, location, context.player_id)

    others = context.other_players()
    class_filter = _PARTY_CLASS_FILTERS.get(location)
    if class_filter is not None:
        others = [p for p in others if p.party.has_class(class_filter)]
    if not others:
        logger.debug("No eligible other players for %s in room %s", location.value, context.room_id)
        return None

    view_cls = PartyView if location.is_party else HandView
    views = [view_cls(context, location, p.id) for p in others]
    return AggregateView(context, location, views, single_owner=location.is_any)
