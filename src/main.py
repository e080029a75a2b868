# Entry point: seed demo data and run the bracket API server

import argparse
import logging
import os

logger = logging.getLogger(__name__)

DEMO_PLAYERS = ["Alex", "Sam", "Jordan", "Taylor", "Casey", "Riley", "Morgan", "Quinn"]
DEMO_TEAMS = ["The Alphas", "Beta Blasters", "Gamma Rays", "Delta Force"]


def seed_demo_data(store):
    """Create the demo roster if the store has no players yet. Returns the created teams."""
    if store.list_players(include_deleted=True):
        logger.info("Store already has players; skipping demo seed")
        return []

    players = [store.create_player(name) for name in DEMO_PLAYERS]
    teams = []
    for i, team_name in enumerate(DEMO_TEAMS):
        p1, p2 = players[i * 2], players[i * 2 + 1]
        teams.append(store.create_team(team_name, p1.id, p2.id))
    logger.info(f"Seeded {len(players)} players and {len(teams)} teams")
    return teams


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Single elimination bracket server")
    parser.add_argument("--data-dir", default=None,
                        help="Directory holding bracket.yaml (default: $BRACKET_DATA_DIR or ./data)")
    parser.add_argument("--seed", action="store_true", help="Seed demo players and teams if the store is empty")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--no-serve", action="store_true", help="Exit after seeding instead of starting the server")
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from app import app
    from storage import Store

    if args.data_dir:
        app.config['DATA_DIR'] = args.data_dir
    data_dir = app.config['DATA_DIR']

    if args.seed:
        seed_demo_data(Store(data_dir, lock_timeout=app.config['LOCK_TIMEOUT']))

    if args.no_serve:
        return 0

    logger.info(f"Serving bracket API from {data_dir} on {args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
