"""
Game State - Cards, players, parties and turns.

Design principles:
- Values, not objects: stored records are never mutated in place. Every
  change builds a new record (``copy_with``) and writes it back to the store.
- Ownership is positional: a card belongs to whichever container holds it.
- Enum values are the wire strings; ``ActionParameter.raw_value`` and the
  API schemas unwrap them with ``.value``.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .action import Action


class GamePhase(Enum):
    """High-level game phases."""
    WAITING = "waiting"
    PLAYING = "playing"
    ENDED = "ended"


class CardType(Enum):
    """Card types, plus the selectors used by action parameters."""
    HERO = "Hero"
    ITEM = "Item"
    MAGIC = "Magic"
    MONSTER = "Monster"
    MODIFIER = "Modifier"
    PARTY_LEADER = "PartyLeader"

    # Parameter selectors
    ALL = "all"
    ANY = "any"


class HeroClass(Enum):
    FIGHTER = "Fighter"
    BARD = "Bard"
    GUARDIAN = "Guardian"
    RANGER = "Ranger"
    THIEF = "Thief"
    WIZARD = "Wizard"
    WARRIOR = "Warrior"
    DRUID = "Druid"
    BERSERKER = "Berserker"
    NECROMANCER = "Necromancer"
    SORCERER = "Sorcerer"


class Location(Enum):
    """
    Named card containers.

    Families:
    - own:    OWN_HAND, OWN_PARTY
    - any:    ANY_HAND, ANY_PARTY (one other player per move)
    - other:  OTHER_HANDS, OTHER_PARTIES and the class-filtered party variants
    - shared: SUPPORT_DECK, CACHE, DISCARD_PILE
    - LAST_TARGET refers to whatever the current turn last moved from.
    """
    OWN_HAND = "own-hand"
    ANY_HAND = "any-hand"
    OTHER_HANDS = "other-hands"

    OWN_PARTY = "own-party"
    ANY_PARTY = "any-party"
    OTHER_PARTIES = "other-parties"
    OTHER_PARTIES_WITH_FIGHTER = "other-parties-with-fighter"
    OTHER_PARTIES_WITH_THIEF = "other-parties-with-thief"

    CACHE = "cache"
    DISCARD_PILE = "discard-pile"
    SUPPORT_DECK = "support-deck"

    LAST_TARGET = "last-target"

    @property
    def is_any(self) -> bool:
        return self in (Location.ANY_HAND, Location.ANY_PARTY)

    @property
    def is_party(self) -> bool:
        return self in (
            Location.OWN_PARTY,
            Location.ANY_PARTY,
            Location.OTHER_PARTIES,
            Location.OTHER_PARTIES_WITH_FIGHTER,
            Location.OTHER_PARTIES_WITH_THIEF,
        )


class Amount(Enum):
    """How many cards an action affects: 0 to 5, or every available card."""
    ZERO = 0
    ONE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    ALL = "all"

    def count(self, available: int) -> int:
        """Concrete number of cards requested given ``available`` at the source."""
        if self is Amount.ALL:
            return available
        return self.value


class SelectionMode(Enum):
    """Who decides which cards satisfy a requested amount."""
    FIRST = "first"
    TARGET_OWNER = "target_owner"
    DESTINATION_OWNER = "destination_owner"

    @property
    def needs_input(self) -> bool:
        return self is not SelectionMode.FIRST


@dataclass(frozen=True)
class Requirement:
    """
    Condition for playing a card.

    type: point | hero | roll | duplicate | class | hand
    """
    type: str
    value: int | None = None
    hero_class: HeroClass | None = None
    description: str | None = None


@dataclass(frozen=True)
class Effect:
    """
    One effect a card queues when played.

    ``parameters`` holds raw ``(name, type, value)`` triples; they are decoded
    when the effect becomes a queued action.
    """
    action: str
    parameters: tuple[tuple[str, str, Any], ...] = ()


@dataclass(frozen=True)
class Card:
    """A card. Immutable; moves relocate it, never copy it."""
    id: str
    name: str
    type: CardType
    description: str = ""
    hero_class: HeroClass | None = None
    requirement: Requirement | None = None
    effect: tuple[Effect, ...] = ()
    image_path: str | None = None


@dataclass(frozen=True)
class Party:
    """
    A player's party: one leader plus hero slots.

    Slots may hold ``None`` placeholders. Adding a hero fills the first empty
    slot and only grows the list when every slot is taken.
    """
    leader: Card | None = None
    heroes: tuple[Card | None, ...] = (None, None, None)

    @classmethod
    def empty(cls, slots: int = 3, leader: Card | None = None) -> Party:
        return cls(leader=leader, heroes=(None,) * slots)

    def with_hero(self, card: Card) -> Party:
        """Return new party with ``card`` placed in the first free slot."""
        heroes = list(self.heroes)
        for i, slot in enumerate(heroes):
            if slot is None:
                heroes[i] = card
                break
        else:
            heroes.append(card)
        return Party(leader=self.leader, heroes=tuple(heroes))

    @property
    def hero_cards(self) -> list[Card]:
        return [h for h in self.heroes if h is not None]

    @property
    def hero_count(self) -> int:
        return len(self.hero_cards)

    def cards(self) -> list[Card]:
        """Leader (if any) followed by every filled hero slot."""
        result = [self.leader] if self.leader else []
        result.extend(self.hero_cards)
        return result

    def has_class(self, hero_class: HeroClass) -> bool:
        return any(card.hero_class == hero_class for card in self.cards())


@dataclass(frozen=True)
class Player:
    """State for a single player."""
    id: str
    name: str
    join_time: float = 0.0
    hand: tuple[Card, ...] = ()
    deck: tuple[Card, ...] = ()
    party: Party = field(default_factory=Party)
    action_points: int = 0
    connected: bool = True
    color: str | None = None

    def copy_with(self, **changes) -> Player:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def find_in_hand(self, card_id: str) -> Card | None:
        for card in self.hand:
            if card.id == card_id:
                return card
        return None


@dataclass(frozen=True)
class Turn:
    """
    Whose go it is, what they have left, and what is queued.

    Replaced wholesale when the active player changes.
    """
    player_id: str
    action_points: int
    action_queue: tuple[Action, ...] = ()
    played_cards: tuple[str, ...] = ()
    modifiers: tuple[Card, ...] = ()  # modifier cards applied to this turn's roll
    current_roll: int | None = None

    # Most recent move, for LAST_TARGET and follow-up effects
    last_target: Location | None = None
    last_destination: Location | None = None
    last_amount: int | None = None

    def copy_with(self, **changes) -> Turn:
        return replace(self, **changes)

    @property
    def head(self) -> Action | None:
        return self.action_queue[0] if self.action_queue else None

    def find_action(self, action_id: str) -> Action | None:
        for action in self.action_queue:
            if action.id == action_id:
                return action
        return None

    def with_action(self, action: Action) -> Turn:
        """Return a copy with the queued action of the same id replaced."""
        queue = tuple(action if a.id == action.id else a for a in self.action_queue)
        return replace(self, action_queue=queue)

    def without_action(self, action_id: str) -> Turn:
        queue = tuple(a for a in self.action_queue if a.id != action_id)
        return replace(self, action_queue=queue)
