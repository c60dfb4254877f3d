"""March Madness Team Pack Pool - CLI entry point.

Usage:
    python cli.py init-db
    python cli.py import-teams --file teams.csv | --file bracket.json
    python cli.py list-teams
    python cli.py export-teams --file bracket.json
    python cli.py opening-round
    python cli.py add-game --round "Round of 32" --team1 3 --team2 7
    python cli.py [--seed 42] register --name "Pat" --email pat@example.com
    python cli.py record-result --game 12 --score1 71 --score2 64 --winner 3
    python cli.py recompute
    python cli.py leaderboard [--period 2]
    python cli.py upsets
    python cli.py show-participant --id 5
    python cli.py send-standings [--period 1]
    python cli.py send-winners --period 1
"""

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import numpy as np
from sqlmodel import Session

import config
from engine.errors import PoolError
from engine.events import EventBus
from engine.service import PoolService
from output.notifications import EmailNotifier
from store.database import create_db_and_tables, make_engine
from store.repository import PoolStore


def build_service(session: Session, seed: int | None = None) -> tuple[PoolService, EmailNotifier]:
    bus = EventBus()
    notifier = EmailNotifier()
    notifier.subscribe(bus)
    service = PoolService(PoolStore(session), bus=bus, rng=np.random.default_rng(seed))
    return service, notifier


# --- Commands ---

def cmd_init_db(service, notifier, args):
    """Tables are created on every run; nothing else to do."""
    print(f"Database ready at {config.DATABASE_URL}")


def cmd_import_teams(service, notifier, args):
    """Replace the roster from a CSV or bracket JSON file."""
    if args.file.lower().endswith(".json"):
        from ingestion.bracket_loader import load_teams_from_json
        teams = load_teams_from_json(args.file)
    else:
        from ingestion.manual_entry import load_teams_from_csv
        teams = load_teams_from_csv(args.file)

    count = service.import_teams(teams)
    print(f"\nImported {count} teams.")


def cmd_list_teams(service, notifier, args):
    from output.printer import print_teams
    print_teams(service.list_teams())


def cmd_export_teams(service, notifier, args):
    """Save the current roster in the bracket JSON format."""
    from ingestion.bracket_loader import save_teams_to_json
    save_teams_to_json(service.list_teams(), args.file)


def cmd_opening_round(service, notifier, args):
    games = service.build_opening_round()
    print(f"\nScheduled {len(games)} opening-round games.")


def cmd_add_game(service, notifier, args):
    game = service.add_game(args.round, args.team1, args.team2)
    print(f"\nCreated game {game.id}: {game.round}")


def cmd_register(service, notifier, args):
    from output.printer import print_registration
    print_registration(service.register(args.name, args.email))


def cmd_record_result(service, notifier, args):
    service.record_result(args.game, args.score1, args.score2, args.winner, period=args.period)
    print(f"\nResult recorded for game {args.game}; scores recomputed.")


def cmd_recompute(service, notifier, args):
    scores = service.recompute(period=args.period, show_progress=True)
    print(f"\nRecomputed {len(scores)} score rows.")


def cmd_leaderboard(service, notifier, args):
    from output.printer import print_leaderboard
    print_leaderboard(service.leaderboard(period=args.period, limit=args.limit), args.period)


def cmd_upsets(service, notifier, args):
    from output.printer import print_upsets
    print_upsets(service.upsets())


def cmd_show_participant(service, notifier, args):
    from output.printer import print_participant
    print_participant(service.participant_detail(args.id))


def cmd_send_standings(service, notifier, args):
    standings = service.standings_digest(period=args.period)
    sent = notifier.send_standings(service.store.list_participants(), standings, args.period)
    print(f"\nSent {sent} standings emails.")


def cmd_send_winners(service, notifier, args):
    from output.printer import print_period_winners
    winners = service.period_winners(args.period)
    print_period_winners(winners, args.period)
    sent = notifier.send_period_winners(service.store.list_participants(), winners, args.period)
    print(f"\nSent {sent} winners emails.")


# --- Main ---

def main(argv=None):
    parser = argparse.ArgumentParser(
        description="March Madness Team Pack Pool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Workflow:
  1. python cli.py import-teams --file teams.csv     # Load the 64-team roster
  2. python cli.py opening-round                      # Schedule Round of 64 games
  3. python cli.py register --name Pat --email p@x.io # Hand out team packs
  4. python cli.py record-result --game 1 --score1 70 --score2 60 --winner 1
  5. python cli.py leaderboard                        # Check the standings
        """
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for team allocation")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("init-db", help="Create the database tables")

    p_import = subparsers.add_parser("import-teams", help="Replace the roster from CSV or JSON")
    p_import.add_argument("--file", required=True, help="CSV (name,seed,region) or bracket JSON")

    subparsers.add_parser("list-teams", help="Show the roster")

    p_export = subparsers.add_parser("export-teams", help="Save the roster as bracket JSON")
    p_export.add_argument("--file", required=True, help="Output JSON path")

    subparsers.add_parser("opening-round", help="Schedule Round of 64 games from seed matchups")

    p_game = subparsers.add_parser("add-game", help="Schedule a game")
    p_game.add_argument("--round", required=True, choices=config.ROUND_NAMES)
    p_game.add_argument("--team1", type=int, required=True)
    p_game.add_argument("--team2", type=int, required=True)

    p_register = subparsers.add_parser("register", help="Register a participant")
    p_register.add_argument("--name", required=True)
    p_register.add_argument("--email", required=True)

    p_result = subparsers.add_parser("record-result", help="Enter a game result")
    p_result.add_argument("--game", type=int, required=True)
    p_result.add_argument("--score1", type=int)
    p_result.add_argument("--score2", type=int)
    p_result.add_argument("--winner", type=int, required=True, help="Winning team ID")
    p_result.add_argument("--period", type=int, choices=config.PERIODS, default=config.CURRENT_PERIOD)

    p_recompute = subparsers.add_parser("recompute", help="Recompute all scores")
    p_recompute.add_argument("--period", type=int, choices=config.PERIODS, default=config.CURRENT_PERIOD)

    p_board = subparsers.add_parser("leaderboard", help="Show standings")
    p_board.add_argument("--period", type=int, choices=config.PERIODS, help="Omit for overall")
    p_board.add_argument("--limit", type=int)

    subparsers.add_parser("upsets", help="Show the biggest upsets")

    p_show = subparsers.add_parser("show-participant", help="Show a participant's teams and scores")
    p_show.add_argument("--id", type=int, required=True)

    p_standings = subparsers.add_parser("send-standings", help="Email the standings digest")
    p_standings.add_argument("--period", type=int, choices=config.PERIODS, default=config.CURRENT_PERIOD)

    p_winners = subparsers.add_parser("send-winners", help="Email a period's winners")
    p_winners.add_argument("--period", type=int, choices=config.PERIODS, required=True)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "init-db": cmd_init_db,
        "import-teams": cmd_import_teams,
        "list-teams": cmd_list_teams,
        "export-teams": cmd_export_teams,
        "opening-round": cmd_opening_round,
        "add-game": cmd_add_game,
        "register": cmd_register,
        "record-result": cmd_record_result,
        "recompute": cmd_recompute,
        "leaderboard": cmd_leaderboard,
        "upsets": cmd_upsets,
        "show-participant": cmd_show_participant,
        "send-standings": cmd_send_standings,
        "send-winners": cmd_send_winners,
    }

    cmd_func = commands.get(args.command)
    if not cmd_func:
        parser.print_help()
        return

    engine = make_engine(config.DATABASE_URL)
    create_db_and_tables(engine)

    with Session(engine) as session:
        service, notifier = build_service(session, seed=args.seed)
        try:
            cmd_func(service, notifier, args)
        except (PoolError, ValueError) as exc:
            print(f"ERROR: {exc}")
            sys.exit(1)


if __name__ == "__main__":
    main()
