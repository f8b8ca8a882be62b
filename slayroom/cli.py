"""
Slayroom CLI - Command-line interface for the engine.

Usage:
    slayroom serve [--host H] [--port P]     Run the HTTP API
    slayroom demo [--players N] [--seed S]   Play one scripted turn in memory
    slayroom actions                         List registered actions
"""

import argparse
import logging
import sys

from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Slayroom - Card Game Rules Engine",
        prog="slayroom",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Play one scripted turn in memory")
    demo_parser.add_argument("--players", type=int, default=2, help="Number of players")
    demo_parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")

    # Actions command
    subparsers.add_parser("actions", help="List registered actions")

    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "demo":
        cmd_demo(args)
    elif args.command == "actions":
        cmd_actions(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the HTTP API under uvicorn."""
    import uvicorn

    uvicorn.run("slayroom.api.app:app", host=args.host, port=args.port)


def cmd_demo(args):
    """Create a room, start a game and spend the first player's turn."""
    from .api.schemas import CreateRoomRequest, JoinRoomRequest, PlayCardRequest, StartGameRequest
    from .api.service import APIService

    service = APIService()
    room = service.create_room(CreateRoomRequest(name="demo"))
    for n in range(args.players):
        service.join_room(room.room_id, JoinRoomRequest(name=f"Player {n + 1}"))

    outcome = service.start_game(room.room_id, StartGameRequest(random_seed=args.seed))
    print(outcome.message)
    if not outcome.success:
        sys.exit(1)

    state = service.get_state(room.room_id)
    player_id = state.current_turn.player_id
    print(f"Turn: {player_id}")

    while True:
        state = service.get_state(room.room_id, viewer_id=player_id)
        if state.current_turn is None or state.current_turn.player_id != player_id:
            break
        if state.waiting_for_action is not None:
            print(f"Waiting: {state.waiting_for_action.prompt}")
            break
        hand = next(p.hand for p in state.players if p.player_id == player_id)
        if not hand:
            print("Hand is empty")
            break

        card = hand[0]
        outcome = service.play_card(room.room_id, PlayCardRequest(player_id=player_id, card_id=card.id))
        print(f"Played {card.name} ({card.type}): {outcome.message}")
        if not outcome.success:
            break

    state = service.get_state(room.room_id)
    if state.current_turn is not None:
        print(f"Next turn: {state.current_turn.player_id}")


def cmd_actions(args):
    """List registered actions."""
    from .api.service import APIService

    for name in APIService().list_actions().actions:
        print(name)


if __name__ == "__main__":
    main()
