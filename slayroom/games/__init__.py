"""
Games module - Game-specific content.

Each game has its own subpackage with:
- Card catalog
- Action handlers registered with the engine
- Game setup
- Playing a card from hand
"""
