"""
Heroes - The reference game.

Players build a party of heroes under a party leader. Each turn the active
player has 3 action points to spend playing cards, whose effects move cards
between hands, parties and the shared stacks.

This module contains:
- Card catalog
- Built-in action handlers (registered on import)
- Game setup
- Playing a card from hand
"""

from .cards import DECK_CARDS, HEROES, MONSTERS, PARTY_LEADERS, build_support_deck, get_card_by_id
from .actions import register_hero_actions
from .setup import setup_game
from .play import play_card

__all__ = [
    "DECK_CARDS",
    "HEROES",
    "MONSTERS",
    "PARTY_LEADERS",
    "build_support_deck",
    "get_card_by_id",
    "register_hero_actions",
    "setup_game",
    "play_card",
]
