"""
Search and autocomplete.

With a store bound, the full-text index answers first. The substring scan is
used only when the index is missing; every other datastore failure reaches
the caller unchanged so that an outage never looks like an empty result.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from opengames.constants import DEFAULT_SUGGESTION_LIMIT
from opengames.db import is_database_available
from opengames.exceptions import DatastoreError, DatastoreErrorKind
from opengames.metrics import fallback_dataset_requests_total, search_fallback_total
from opengames.models.game import Game
from opengames.repositories.fallback_repository import FallbackRepository
from opengames.repositories.search_repository import SearchRepository

logger = structlog.get_logger("search_service")


@dataclass
class SearchHit:
    game: Game
    highlight: Optional[str] = None

    def to_dict(self):
        data = self.game.to_dict()
        if self.highlight:
            data["highlight"] = self.highlight
        return data


@dataclass
class SearchResult:
    results: List[SearchHit] = field(default_factory=list)
    total: int = 0
    index_used: bool = False


def search(query, filters, pagination) -> SearchResult:
    """`query` is the sanitized form returned by validate_search_query"""
    if not is_database_available():
        fallback_dataset_requests_total.labels(operation="search").inc()
        games, total = FallbackRepository.search(query, filters, pagination)
        return SearchResult(results=[SearchHit(g) for g in games], total=total)

    try:
        rows, total = SearchRepository.search(query, filters, pagination)
        index_used = True
    except DatastoreError as e:
        if e.kind is not DatastoreErrorKind.MISSING_INDEX:
            raise
        search_fallback_total.inc()
        logger.warning("full-text index missing, using substring search", query=query)
        rows, total = SearchRepository.search_substring(query, filters, pagination)
        index_used = False

    return SearchResult(
        results=[SearchHit(game, highlight) for game, highlight in rows],
        total=total,
        index_used=index_used,
    )


def suggest(prefix, limit=DEFAULT_SUGGESTION_LIMIT):
    """Titles starting with `prefix` (case-insensitive), most starred first"""
    prefix = prefix.strip()
    if not is_database_available():
        fallback_dataset_requests_total.labels(operation="suggest").inc()
        return FallbackRepository.suggest(prefix, limit)

    try:
        return SearchRepository.suggest(prefix, limit)
    except DatastoreError as e:
        if e.kind is not DatastoreErrorKind.MISSING_INDEX:
            raise
        search_fallback_total.inc()
        logger.info("full-text index missing, using prefix scan for suggestions", prefix=prefix)
        return SearchRepository.suggest_substring(prefix, limit)


def rebuild_search_index():
    """(Re)create the full-text index from the games table. Requires a store."""
    if not is_database_available():
        raise DatastoreError(DatastoreErrorKind.NOT_CONFIGURED, "No database configured")
    return SearchRepository.rebuild_index()
