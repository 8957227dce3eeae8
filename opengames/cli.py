"""
Command line entry point.

Usage:
  opengames serve [--host HOST] [--port PORT]
  opengames init-db
  opengames import-games FILE [--rebuild-index]
  opengames rebuild-search-index
  opengames sync-games [--limit N] [--delay SECONDS]
  opengames refresh-categories

Database commands need DATABASE_URL (or database.url in settings.yaml).
sync-games reads GITHUB_TOKEN; without it GitHub allows 60 requests an hour.
"""

import argparse
import json
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from opengames.app import create_app
from opengames.db import create_schema, is_database_available
from opengames.exceptions import DatastoreError
from opengames.github import create_session
from opengames.models import Game
from opengames.redis_cache import invalidate_game_cache
from opengames.repositories.games_repository import GamesRepository
from opengames.services.category_service import refresh_category_counts, seed_categories
from opengames.services.search_service import rebuild_search_index
from opengames.services.sync_service import sync_games

logger = logging.getLogger("main")


def load_payloads(path):
    """A JSON file holding either a list of games or {"games": [...]}"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("games", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of games")
    return data


def import_games(payloads):
    """Upsert every valid payload. Returns (imported, skipped)."""
    imported = 0
    skipped = 0
    for index, payload in enumerate(payloads):
        try:
            game = Game.from_payload(payload)
        except (TypeError, ValueError) as e:
            skipped += 1
            logger.warning(f"Skipping game #{index}: {e}")
            continue
        try:
            GamesRepository.upsert(game)
        except SQLAlchemyError as e:
            skipped += 1
            logger.warning(f"Skipping game #{index} ({game.id}): {e}")
            continue
        imported += 1

    invalidate_game_cache()
    logger.info(f"Imported {imported} games, skipped {skipped}")
    return imported, skipped


def _require_database():
    if not is_database_available():
        logger.error("No database configured. Set DATABASE_URL.")
        return False
    return True


def cmd_serve(app, args):
    app.run(host=args.host, port=args.port)
    return 0


def cmd_init_db(app, args):
    if not _require_database():
        return 1
    create_schema()
    return 0


def cmd_import_games(app, args):
    if not _require_database():
        return 1
    try:
        payloads = load_payloads(args.file)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read {args.file}: {e}")
        return 1

    try:
        imported, skipped = import_games(payloads)
        print(f"Imported {imported} games ({skipped} skipped)")
        if args.rebuild_index:
            print(f"Indexed {rebuild_search_index()} games")
    except (SQLAlchemyError, DatastoreError) as e:
        logger.error(f"Import failed: {e}")
        return 1
    return 0


def cmd_rebuild_search_index(app, args):
    if not _require_database():
        return 1
    try:
        count = rebuild_search_index()
    except DatastoreError as e:
        logger.error(f"Search index rebuild failed: {e}")
        return 1
    invalidate_game_cache()
    print(f"Indexed {count} games")
    return 0


def cmd_sync_games(app, args):
    if not _require_database():
        return 1
    session = create_session(app.config.get("GITHUB_TOKEN"))
    try:
        stats = sync_games(session, limit=args.limit, delay=args.delay)
        print(
            f"Synced {stats.total} games: {stats.updated} updated, {stats.not_modified} unchanged, "
            f"{stats.missing} missing, {stats.skipped} skipped, {stats.errors} failed"
        )
        print(f"Refreshed {refresh_category_counts()} category counts")
    except DatastoreError as e:
        logger.error(f"Sync failed: {e}")
        return 1
    finally:
        session.close()
    return 0 if stats.errors == 0 else 1


def cmd_refresh_categories(app, args):
    if not _require_database():
        return 1
    try:
        created = seed_categories()
        updated = refresh_category_counts()
    except DatastoreError as e:
        logger.error(f"Category refresh failed: {e}")
        return 1
    print(f"Stored {created} new categories, refreshed {updated} counts")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="opengames", description="OpenGames directory API")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the development server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=cmd_serve)

    init_db = subparsers.add_parser("init-db", help="Create the database schema")
    init_db.set_defaults(func=cmd_init_db)

    import_cmd = subparsers.add_parser("import-games", help="Import games from a JSON file")
    import_cmd.add_argument("file", help="JSON file with a list of games")
    import_cmd.add_argument("--rebuild-index", action="store_true", help="Rebuild the search index afterwards")
    import_cmd.set_defaults(func=cmd_import_games)

    rebuild = subparsers.add_parser("rebuild-search-index", help="Recreate the full-text search index")
    rebuild.set_defaults(func=cmd_rebuild_search_index)

    sync = subparsers.add_parser("sync-games", help="Refresh stored games from GitHub")
    sync.add_argument("--limit", type=int, default=None, help="Only sync the first N games")
    sync.add_argument("--delay", type=float, default=0.0, help="Seconds to wait between updated games")
    sync.set_defaults(func=cmd_sync_games)

    categories = subparsers.add_parser("refresh-categories", help="Store categories and recount their games")
    categories.set_defaults(func=cmd_refresh_categories)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    app = create_app()
    if args.func is cmd_serve:
        return cmd_serve(app, args)
    with app.app_context():
        return args.func(app, args)


if __name__ == "__main__":
    sys.exit(main())
