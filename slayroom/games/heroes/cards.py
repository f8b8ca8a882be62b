"""
Hero Cards - Card catalog for the reference game.

A small, fixed catalog. Effects only reference actions registered in
``actions.py``.

Card structure:
- Type (Hero, Item, Magic, Modifier, PartyLeader, Monster)
- Class (heroes and party leaders)
- Requirement (optional: point, hero, roll, duplicate, class, hand)
- Effects (queued in order when the card is played)
"""

from __future__ import annotations
from dataclasses import replace

from ...engine_core.state import (
    Amount,
    Card,
    CardType,
    Effect,
    HeroClass,
    Location,
    Requirement,
    SelectionMode,
)


# =============================================================================
# Effect builders
# =============================================================================

def draw(
    target: Location | str,
    destination: Location | str,
    amount: Amount = Amount.ONE,
    selection: SelectionMode | None = None,
) -> Effect:
    """Move ``amount`` cards from ``target`` to ``destination``."""
    params = [
        ("target", "LOCATION", Location(target).value),
        ("destination", "LOCATION", Location(destination).value),
        ("amount", "AMOUNT", amount.value),
    ]
    if selection is not None:
        params.append(("selection", "ACTION_SELECTION_MODE", selection.value))
    return Effect(action="drawCard", parameters=tuple(params))


def destroy(target: Location, amount: Amount = Amount.ONE) -> Effect:
    return Effect(
        action="destroyCard",
        parameters=(
            ("target", "LOCATION", target.value),
            ("amount", "AMOUNT", amount.value),
        ),
    )


def play_from(target: Location | str, card_type: CardType) -> Effect:
    return Effect(
        action="playCard",
        parameters=(
            ("target", "STRING", Location(target).value),
            ("type", "CARD_TYPE", card_type.value),
        ),
    )


CAPTURE_DICE = Effect(action="captureDice")
DISCARD_AND_REDRAW = Effect(action="discardAllAndRedraw")
END_TURN = Effect(action="endTurn")


# =============================================================================
# Heroes
# =============================================================================

HEROES: list[Card] = [
    Card(
        id="hero-042",
        name="Buttons",
        type=CardType.HERO,
        hero_class=HeroClass.THIEF,
        description=(
            "Pull a card from another player's hand. If it is a Magic card, "
            "you may play it immediately."
        ),
        effect=(
            draw(Location.ANY_HAND, Location.CACHE, Amount.ONE),
            play_from(Location.CACHE, CardType.MAGIC),
            draw(Location.CACHE, Location.OWN_HAND, Amount.ALL),
        ),
        image_path="/api/images/heroes/thief_buttons.png",
    ),
    Card(
        id="hero-007",
        name="Bullseye",
        type=CardType.HERO,
        hero_class=HeroClass.RANGER,
        description="Look at the top 3 cards of the deck. Add one to your hand.",
        requirement=Requirement(type="roll", value=7),
        effect=(
            draw(Location.SUPPORT_DECK, Location.CACHE, Amount.THREE),
            draw(Location.CACHE, Location.OWN_HAND, Amount.ONE, SelectionMode.DESTINATION_OWNER),
            draw(Location.CACHE, Location.SUPPORT_DECK, Amount.ALL),
        ),
    ),
    Card(
        id="hero-013",
        name="Qi Bear",
        type=CardType.HERO,
        hero_class=HeroClass.FIGHTER,
        description="Discard a card, then destroy a hero card.",
        requirement=Requirement(type="hand", value=1),
        effect=(
            draw(Location.OWN_HAND, Location.DISCARD_PILE, Amount.ONE, SelectionMode.DESTINATION_OWNER),
            destroy(Location.OTHER_PARTIES),
        ),
    ),
    Card(
        id="hero-021",
        name="Greedy Cheeks",
        type=CardType.HERO,
        hero_class=HeroClass.BARD,
        description="Each other player must give you a card from their hand.",
        effect=(
            draw(Location.OTHER_HANDS, Location.OWN_HAND, Amount.ONE, SelectionMode.TARGET_OWNER),
        ),
    ),
    Card(
        id="hero-030",
        name="Wiggles",
        type=CardType.HERO,
        hero_class=HeroClass.WIZARD,
        description="Draw 2 cards.",
        effect=(draw(Location.SUPPORT_DECK, Location.OWN_HAND, Amount.TWO),),
    ),
    Card(
        id="hero-034",
        name="Plundering Puma",
        type=CardType.HERO,
        hero_class=HeroClass.THIEF,
        description="Pull 2 cards from another player's hand.",
        requirement=Requirement(type="point", value=2),
        effect=(draw(Location.ANY_HAND, Location.OWN_HAND, Amount.TWO),),
    ),
    Card(
        id="hero-051",
        name="Guiding Light",
        type=CardType.HERO,
        hero_class=HeroClass.GUARDIAN,
        description="Search the discard pile for a card and add it to your hand.",
        effect=(
            draw(Location.DISCARD_PILE, Location.OWN_HAND, Amount.ONE, SelectionMode.DESTINATION_OWNER),
        ),
    ),
    Card(
        id="hero-058",
        name="Bear Claw",
        type=CardType.HERO,
        hero_class=HeroClass.FIGHTER,
        description="Pull a card from a party with a Fighter in it.",
        requirement=Requirement(type="class", hero_class=HeroClass.FIGHTER),
        effect=(draw(Location.OTHER_PARTIES_WITH_FIGHTER, Location.OWN_HAND, Amount.ONE),),
    ),
    Card(
        id="hero-066",
        name="Silent Shadow",
        type=CardType.HERO,
        hero_class=HeroClass.THIEF,
        description="Steal a hero card from a party with a Thief in it.",
        requirement=Requirement(type="hero", value=1),
        effect=(draw(Location.OTHER_PARTIES_WITH_THIEF, Location.OWN_PARTY, Amount.ONE),),
    ),
    Card(
        id="hero-072",
        name="Hopper",
        type=CardType.HERO,
        hero_class=HeroClass.DRUID,
        description="Discard your hand and draw 5 new cards.",
        effect=(DISCARD_AND_REDRAW,),
    ),
]


# =============================================================================
# Items, magic and modifiers
# =============================================================================

ITEMS: list[Card] = [
    Card(
        id="item-003",
        name="Decoy Doll",
        type=CardType.ITEM,
        description="Discard a card from wherever the last card was taken.",
        effect=(draw(Location.LAST_TARGET, Location.DISCARD_PILE, Amount.ONE),),
    ),
    Card(
        id="item-009",
        name="Really Big Ring",
        type=CardType.ITEM,
        description="Roll the dice and keep the result for this turn.",
        effect=(CAPTURE_DICE,),
    ),
]

MAGIC: list[Card] = [
    Card(
        id="magic-001",
        name="Call to the Fallen",
        type=CardType.MAGIC,
        description="Add a card from the discard pile to your hand.",
        effect=(draw(Location.DISCARD_PILE, Location.OWN_HAND, Amount.ONE),),
    ),
    Card(
        id="magic-005",
        name="Enchanted Spell",
        type=CardType.MAGIC,
        description="Draw 3 cards.",
        effect=(draw(Location.SUPPORT_DECK, Location.OWN_HAND, Amount.THREE),),
    ),
    Card(
        id="magic-008",
        name="Critical Boost",
        type=CardType.MAGIC,
        description="Draw a card, then end your turn.",
        requirement=Requirement(type="duplicate"),
        effect=(draw(Location.SUPPORT_DECK, Location.OWN_HAND, Amount.ONE), END_TURN),
    ),
    Card(
        id="magic-011",
        name="Destructive Spell",
        type=CardType.MAGIC,
        description="Destroy a hero card in any other player's party.",
        effect=(destroy(Location.ANY_PARTY),),
    ),
]

MODIFIERS: list[Card] = [
    Card(
        id="modifier-002",
        name="+2 / -2",
        type=CardType.MODIFIER,
        description="Modify the current roll by 2.",
        effect=(CAPTURE_DICE,),
    ),
]


# =============================================================================
# Party leaders and monsters (never in the support deck)
# =============================================================================

PARTY_LEADERS: list[Card] = [
    Card(id="leader-001", name="The Charismatic Song", type=CardType.PARTY_LEADER,
         hero_class=HeroClass.BARD, description="Party leader of Bards."),
    Card(id="leader-002", name="The Fist of Reason", type=CardType.PARTY_LEADER,
         hero_class=HeroClass.FIGHTER, description="Party leader of Fighters."),
    Card(id="leader-003", name="The Protecting Horn", type=CardType.PARTY_LEADER,
         hero_class=HeroClass.GUARDIAN, description="Party leader of Guardians."),
    Card(id="leader-004", name="The Divine Arrow", type=CardType.PARTY_LEADER,
         hero_class=HeroClass.RANGER, description="Party leader of Rangers."),
    Card(id="leader-005", name="The Shadow Claw", type=CardType.PARTY_LEADER,
         hero_class=HeroClass.THIEF, description="Party leader of Thieves."),
    Card(id="leader-006", name="The Cloaked Sage", type=CardType.PARTY_LEADER,
         hero_class=HeroClass.WIZARD, description="Party leader of Wizards."),
]

MONSTERS: list[Card] = [
    Card(id="monster-001", name="Abyss Queen", type=CardType.MONSTER,
         description="Roll 8 or more to defeat.", requirement=Requirement(type="roll", value=8)),
    Card(id="monster-002", name="Anuran Cauldron", type=CardType.MONSTER,
         description="Roll 7 or more to defeat.", requirement=Requirement(type="roll", value=7)),
    Card(id="monster-003", name="Arctic Aries", type=CardType.MONSTER,
         description="Roll 10 or more to defeat.", requirement=Requirement(type="roll", value=10)),
    Card(id="monster-004", name="Bloodwing", type=CardType.MONSTER,
         description="Roll 9 or more to defeat.", requirement=Requirement(type="roll", value=9)),
    Card(id="monster-005", name="Crowned Serpent", type=CardType.MONSTER,
         description="Roll 10 or more to defeat.", requirement=Requirement(type="roll", value=10)),
    Card(id="monster-006", name="Dracos", type=CardType.MONSTER,
         description="Roll 5 or more to defeat.", requirement=Requirement(type="roll", value=5)),
]

DECK_CARDS: list[Card] = HEROES + ITEMS + MAGIC + MODIFIERS

_CARDS_BY_ID: dict[str, Card] = {
    card.id: card for card in DECK_CARDS + PARTY_LEADERS + MONSTERS
}


def get_card_by_id(card_id: str) -> Card | None:
    """Look up a catalog card. Deck copies ("hero-042#2") map to their base card."""
    return _CARDS_BY_ID.get(card_id.split("#", 1)[0])


def build_support_deck(copies: int = 3) -> list[Card]:
    """Unshuffled support deck with ``copies`` of every deck card, each with a unique id."""
    deck = []
    for card in DECK_CARDS:
        for n in range(1, copies + 1):
            deck.append(replace(card, id=f"{card.id}#{n}"))
    return deck
