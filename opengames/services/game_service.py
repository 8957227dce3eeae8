"""
Game listing, lookup and statistics.

Every operation reads the relational store when one is bound to the app and
otherwise answers from the in-memory fallback dataset with the same semantics.
"""

from dataclasses import dataclass, field
from typing import List

import structlog

from opengames.constants import RELATED_GAMES_LIMIT
from opengames.db import is_database_available
from opengames.metrics import fallback_dataset_requests_total
from opengames.models.game import Game
from opengames.repositories.fallback_repository import FallbackRepository
from opengames.repositories.games_repository import GamesRepository

logger = structlog.get_logger("game_service")

SOURCE_DATABASE = "database"
SOURCE_FALLBACK = "fallback"


@dataclass
class GamesResult:
    items: List[Game] = field(default_factory=list)
    total: int = 0


def _repository(operation):
    if is_database_available():
        return GamesRepository
    fallback_dataset_requests_total.labels(operation=operation).inc()
    logger.debug("serving from fallback dataset", operation=operation)
    return FallbackRepository


def data_source():
    return SOURCE_DATABASE if is_database_available() else SOURCE_FALLBACK


def list_games(filters, pagination, sort) -> GamesResult:
    items, total = _repository("list").get_paged(filters, pagination, sort)
    return GamesResult(items=list(items), total=total)


def get_game(slug):
    return _repository("get").get_by_slug(slug)


def get_related_games(game, limit=RELATED_GAMES_LIMIT):
    return _repository("related").get_related(game, limit)


def get_trending_games(limit=10):
    return _repository("trending").get_trending(limit)


def get_popular_games(limit=20):
    return _repository("popular").get_popular(limit)


def get_recently_updated_games(limit=10):
    return _repository("recent").get_recently_updated(limit)


def get_stats():
    """Aggregate stats with game lists serialized, tagged with their data source"""
    source = data_source()
    stats = _repository("stats").get_stats()
    stats["trendingGames"] = [g.to_dict() for g in stats["trendingGames"]]
    stats["recentlyUpdated"] = [g.to_dict() for g in stats["recentlyUpdated"]]
    stats["source"] = source
    return stats
