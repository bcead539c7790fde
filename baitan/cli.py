"""
Bài Tấn CLI - Command-line interface for the engine.

Usage:
    baitan play [--players N] [--seed S] [--side-attacks]   Hot-seat game in the terminal
    baitan export [--players N] [--seed S]                  Print a freshly dealt snapshot
    baitan validate <snapshot_file>                         Check an exported snapshot
    baitan serve [--host H] [--port P]                      Run the HTTP API
"""

import argparse
import logging
import os
import sys

from .engine_core.action_generator import ActionGenerator
from .engine_core.rules import RuleVariant
from .engine_core.setup import new_game
from .engine_core.state import GamePhase
from .session import SessionManager
from .snapshot import SnapshotImportError, deserialize, serialize


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Bài Tấn - 8-card Tấn rules engine",
        prog="baitan",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    play_parser = subparsers.add_parser("play", help="Play a hot-seat game")
    play_parser.add_argument("--players", type=int, default=3, help="Number of players (2-4)")
    play_parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")
    play_parser.add_argument(
        "--side-attacks", action="store_true",
        help="Let every non-defender add attacks",
    )

    export_parser = subparsers.add_parser("export", help="Print a new game snapshot")
    export_parser.add_argument("--players", type=int, default=3)
    export_parser.add_argument("--seed", type=int, default=None)

    validate_parser = subparsers.add_parser("validate", help="Validate a snapshot file")
    validate_parser.add_argument("snapshot_file", help="Path to exported JSON")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=os.getenv("BAITAN_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "export":
        cmd_export(args)
    elif args.command == "validate":
        cmd_validate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_export(args):
    """Deal a game and print its snapshot."""
    try:
        state = new_game(args.players, seed=args.seed)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(serialize(state))


def cmd_validate(args):
    """Validate an exported snapshot."""
    try:
        with open(args.snapshot_file, "r", encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.snapshot_file}")
        sys.exit(1)

    try:
        state = deserialize(text)
    except SnapshotImportError as e:
        print("Snapshot is invalid:")
        for err in e.errors:
            print(f"  - {err}")
        sys.exit(1)

    print(f"Snapshot OK: {state.num_players} players, phase {state.phase.value}, "
          f"{state.deck_count} cards in deck, trump {state.trump.value}")


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("baitan.api.app:app", host=args.host, port=args.port)


def cmd_play(args):
    """Interactive hot-seat game."""
    rules = RuleVariant(allow_side_attacks=args.side_attacks)
    manager = SessionManager(rules=rules)
    try:
        session = manager.create_session(num_players=args.players, seed=args.seed)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    generator = ActionGenerator(rules=rules)
    print(f"Session {session.session_id} (seed {session.seed})")
    print("Enter an option number, 'export', 'import', or 'quit'.")

    while True:
        state = session.game_state
        _print_state(state)
        if state.phase == GamePhase.FINISHED:
            break

        options = generator.generate(state)
        for i, action in enumerate(options):
            print(f"  [{i}] {state.players[action.player].name}: {_describe(action)}")

        try:
            choice = input("> ").strip()
        except EOFError:
            break

        if choice == "quit":
            break
        if choice == "export":
            print(session.export_state())
            continue
        if choice == "import":
            result = session.import_state(input("paste snapshot> "))
            print(result.state_changes[0] if result.success else f"Import failed: {result.error}")
            continue
        if not choice.isdigit() or int(choice) >= len(options):
            print("Unknown option")
            continue

        result = session.apply(options[int(choice)])
        for change in result.state_changes:
            print(change)

    manager.end_session(session.session_id)


def _describe(action) -> str:
    payload = action.payload
    if payload.pair_index is not None:
        return f"{action.action_type.value} pair {payload.pair_index} with {payload.card}"
    if payload.card is not None:
        return f"{action.action_type.value} {payload.card}"
    return action.action_type.value


def _print_state(state):
    print()
    print(f"Trump {state.trump.value} | deck {state.deck_count} | phase {state.phase.value}")
    if state.table:
        pairs = [
            f"{p.attack}/{p.defend if p.defend else '-'}" for p in state.table
        ]
        print("Table: " + "  ".join(pairs))
    for p in state.players:
        role = ""
        if p.player_id == state.attacker:
            role = " (attacker)"
        elif p.player_id == state.defender:
            role = " (defender)"
        print(f"{p.name}{role}: {' '.join(str(c) for c in p.hand)}")
    if state.winners:
        print("Winners: " + ", ".join(state.players[i].name for i in state.winners))


if __name__ == "__main__":
    main()
