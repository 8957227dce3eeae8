"""
Refresh stored games from GitHub.

Each game is revalidated with its stored ETag, so unchanged repositories
cost no rate limit. Stars, forks, issues, activity dates, archive flag and
the latest release are overwritten; multiplayer and platforms are only
inferred from topics when the stored game does not already say so.
"""

import time
from dataclasses import asdict, dataclass

import requests
import structlog
from sqlalchemy.exc import SQLAlchemyError

from opengames.db import db, is_database_available
from opengames.exceptions import DatastoreError, DatastoreErrorKind
from opengames.github import (
    GitHubError,
    fetch_latest_release,
    fetch_repo_data,
    infer_platforms,
    is_multiplayer_game,
    parse_repo_url,
)
from opengames.models.game import Game
from opengames.redis_cache import invalidate_game_cache
from opengames.utils import to_naive_utc, utcnow_naive

logger = structlog.get_logger("sync_service")


@dataclass
class SyncStats:
    total: int = 0
    updated: int = 0
    not_modified: int = 0
    missing: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self):
        return asdict(self)


def apply_repo_data(game, data, release=None):
    topics = list(data.get("topics") or game.topics or [])

    game.stars = data.get("stargazers_count") or 0
    game.forks = data.get("forks_count") or 0
    game.open_issues = data.get("open_issues_count") or 0
    game.description = data.get("description") or game.description
    game.homepage = data.get("homepage") or game.homepage
    game.language = data.get("language") or game.language
    game.topics = topics

    license_info = data.get("license") or {}
    game.license = license_info.get("spdx_id") or license_info.get("name") or game.license

    game.created_at = to_naive_utc(data.get("created_at")) or game.created_at
    game.last_commit_at = to_naive_utc(data.get("pushed_at")) or game.last_commit_at
    game.is_archived = bool(data.get("archived"))
    game.is_multiplayer = bool(game.is_multiplayer) or is_multiplayer_game(topics)
    if not game.platforms:
        game.platforms = infer_platforms(topics, game.language)

    if release:
        game.latest_release = release["tag_name"]
        game.download_count = release["download_count"]
    game.updated_at = utcnow_naive()
    return game


def sync_games(session, limit=None, delay=0.0) -> SyncStats:
    """
    Refresh every stored game (or the first `limit` by id) from GitHub.
    Failures are counted per game and never abort the run.
    """
    if not is_database_available():
        raise DatastoreError(DatastoreErrorKind.NOT_CONFIGURED, "No database configured")

    query = Game.query.order_by(Game.id.asc())
    if limit:
        query = query.limit(limit)

    stats = SyncStats()
    for game in query.all():
        stats.total += 1
        repo = parse_repo_url(game.repo_url)
        if repo is None:
            stats.skipped += 1
            logger.info("not a GitHub repository, skipping", game=game.id, repo_url=game.repo_url)
            continue

        owner, name = repo
        try:
            data, etag, not_modified = fetch_repo_data(session, owner, name, game.etag)
            if not_modified:
                stats.not_modified += 1
                continue
            if data is None:
                stats.missing += 1
                continue
            release = fetch_latest_release(session, owner, name)
        except (requests.RequestException, GitHubError) as e:
            stats.errors += 1
            logger.warning("GitHub request failed", game=game.id, error=str(e))
            continue

        apply_repo_data(game, data, release)
        game.etag = etag
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            stats.errors += 1
            logger.error("could not store synced game", game=game.id, error=str(e))
            continue
        stats.updated += 1

        if delay:
            time.sleep(delay)

    if stats.updated:
        invalidate_game_cache()
    logger.info("sync finished", **stats.to_dict())
    return stats
