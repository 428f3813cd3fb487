"""
Hugoland CLI - Command-line interface for the engine.

Usage:
    hugoland new <player_id>         Start a new game (overwrites the save)
    hugoland show <player_id>        Print a save summary
    hugoland reconcile <player_id>   Settle idle progress and save
    hugoland serve                   Run the HTTP API
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import Settings


logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Hugoland - Idle quiz-RPG state engine",
        prog="hugoland",
    )
    parser.add_argument("--save-dir", help="Directory holding player saves")
    parser.add_argument("--log-level", help="Logging level (default from HUGOLAND_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    new_parser = subparsers.add_parser("new", help="Start a new game")
    new_parser.add_argument("player_id", help="Player id")
    new_parser.add_argument("--seed", type=int, help="Random seed for the new game")

    show_parser = subparsers.add_parser("show", help="Print a save summary")
    show_parser.add_argument("player_id", help="Player id")

    reconcile_parser = subparsers.add_parser("reconcile", help="Settle idle progress and save")
    reconcile_parser.add_argument("player_id", help="Player id")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.save_dir:
        settings.save_dir = Path(args.save_dir)
    if args.log_level:
        settings.log_level = args.log_level.upper()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "new":
        cmd_new(args, settings)
    elif args.command == "show":
        cmd_show(args, settings)
    elif args.command == "reconcile":
        cmd_reconcile(args, settings)
    elif args.command == "serve":
        cmd_serve(args, settings)
    else:
        parser.print_help()
        sys.exit(1)


def _open_store(settings: Settings):
    from .engine_core.engine import Engine
    from .store import StateStore

    engine = Engine()
    store = StateStore(
        settings.save_dir,
        default_factory=lambda player_id: engine.new_game(player_id=player_id),
    )
    return engine, store


def cmd_new(args, settings: Settings):
    """Start a new game and save it."""
    engine, store = _open_store(settings)
    state = engine.new_game(player_id=args.player_id, random_seed=args.seed)
    path = store.save(state)
    print(f"New game for {args.player_id} saved to {path}")


def cmd_show(args, settings: Settings):
    """Print a save summary."""
    _, store = _open_store(settings)
    state = store.load(args.player_id)
    if state is None:
        print(f"Error: no save for {args.player_id}")
        sys.exit(1)
    _print_summary(state)


def cmd_reconcile(args, settings: Settings):
    """Settle idle progress since the last save."""
    engine, store = _open_store(settings)
    state = store.load(args.player_id)
    if state is None:
        print(f"Error: no save for {args.player_id}")
        sys.exit(1)

    state = engine.reconcile(state)
    state.offline.last_save_time = engine.clock()
    store.save(state)
    _print_summary(state)
    if state.offline.offline_coins or state.offline.offline_gems:
        print(
            f"Offline rewards pending: {state.offline.offline_coins} coins, "
            f"{state.offline.offline_gems} gems"
        )


def cmd_serve(args, settings: Settings):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from .api.app import create_app

    logger.info("Serving saves from %s", settings.save_dir)
    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port)


def _print_summary(state):
    print(f"Player: {state.player_id}")
    print(f"Level {state.progression.level} (zone {state.zone})")
    print(f"Coins: {state.coins}  Gems: {state.gems}  Shiny: {state.shiny_gems}")
    print(f"HP: {state.stats.hp}/{state.stats.max_hp}  ATK: {state.stats.attack}  DEF: {state.stats.defense}")
    print(f"Weapons: {len(state.inventory.weapons)}  Armor: {len(state.inventory.armor)}")
    print(f"Mode: {state.game_mode.current.value}")


if __name__ == "__main__":
    main()
