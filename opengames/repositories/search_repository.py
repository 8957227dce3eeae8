"""
Repository for full-text search over games.

The primary path queries the FTS5 table `games_fts` (id UNINDEXED, title,
description, topics). When that table has not been provisioned the
repository raises DatastoreError(kind=MISSING_INDEX); the caller decides
whether to use the substring methods below instead.
"""

import logging
import time

from sqlalchemy import column, func, literal_column, table, text
from sqlalchemy.exc import SQLAlchemyError

from opengames.constants import SEARCH_INDEX_TABLE
from opengames.db import db, table_exists
from opengames.exceptions import DatastoreError, DatastoreErrorKind
from opengames.models.game import Game
from opengames.repositories.games_repository import filter_conditions

logger = logging.getLogger("main")

games_fts = table(SEARCH_INDEX_TABLE, column("id"), column("rank"))

CREATE_INDEX_SQL = (
    f"CREATE VIRTUAL TABLE IF NOT EXISTS {SEARCH_INDEX_TABLE} "
    "USING fts5(id UNINDEXED, title, description, topics, tokenize = 'unicode61')"
)


def build_match_expression(query):
    """'voxel rp' -> '"voxel"* "rp"*'; quotes in the query are already doubled"""
    return " ".join(f'"{term}"*' for term in query.split() if term)


def _escape_like(value):
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _like_pattern(value):
    return f"%{_escape_like(value)}%"


def _prefix_pattern(value):
    return f"{_escape_like(value.lower())}%"


class SearchRepository:
    """Repository for search queries"""

    @staticmethod
    def index_exists():
        try:
            return table_exists(SEARCH_INDEX_TABLE)
        except SQLAlchemyError as e:
            raise DatastoreError(DatastoreErrorKind.QUERY_FAILED, f"Search index lookup failed: {e}") from e

    @staticmethod
    def _require_index():
        if not SearchRepository.index_exists():
            raise DatastoreError(
                DatastoreErrorKind.MISSING_INDEX, f"Full-text index {SEARCH_INDEX_TABLE} is not provisioned"
            )

    @staticmethod
    def search(query, filters, pagination):
        """
        Ranked full-text search. Returns ([(game, highlight)], total).
        """
        SearchRepository._require_index()

        match = text(f"{SEARCH_INDEX_TABLE} MATCH :match").bindparams(match=build_match_expression(query))
        highlight = func.snippet(literal_column(SEARCH_INDEX_TABLE), -1, "<mark>", "</mark>", "...", 64)
        base = (
            db.session.query(Game)
            .join(games_fts, games_fts.c.id == Game.id)
            .filter(match)
            .filter(*filter_conditions(filters))
        )

        start = time.time()
        try:
            total = base.count()
            rows = (
                base.add_columns(highlight.label("highlight"))
                .order_by(games_fts.c.rank, Game.id.asc())
                .limit(pagination.page_size)
                .offset(pagination.offset)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatastoreError(DatastoreErrorKind.QUERY_FAILED, f"Full-text search failed: {e}") from e

        duration = (time.time() - start) * 1000.0
        logger.debug(f"SearchRepository.search: query={query!r} total={total} duration_ms={duration:.1f}")
        return [(game, snippet) for game, snippet in rows], total

    @staticmethod
    def suggest(prefix, limit):
        SearchRepository._require_index()

        match = text(f"{SEARCH_INDEX_TABLE} MATCH :match").bindparams(
            match=build_match_expression(prefix.replace('"', '""'))
        )
        try:
            rows = (
                db.session.query(Game.title, Game.slug)
                .join(games_fts, games_fts.c.id == Game.id)
                .filter(match, func.unicode_lower(Game.title).like(_prefix_pattern(prefix), escape="\\"))
                .order_by(Game.stars.desc(), Game.id.asc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatastoreError(DatastoreErrorKind.QUERY_FAILED, f"Suggestion lookup failed: {e}") from e
        return [{"title": title, "slug": slug} for title, slug in rows]

    @staticmethod
    def search_substring(query, filters, pagination):
        """LIKE-based search on title, description and topics, most starred first"""
        pattern = _like_pattern(query.replace('""', '"').lower())
        topic_matches = text(
            "EXISTS (SELECT 1 FROM json_each(games.topics) "
            "WHERE unicode_lower(value) LIKE :topic_pattern ESCAPE '\\')"
        ).bindparams(topic_pattern=pattern)
        matches = (
            func.unicode_lower(Game.title).like(pattern, escape="\\")
            | func.unicode_lower(func.coalesce(Game.description, "")).like(pattern, escape="\\")
            | topic_matches
        )
        base = Game.query.filter(matches).filter(*filter_conditions(filters))
        try:
            total = base.count()
            games = (
                base.order_by(Game.stars.desc(), Game.id.asc())
                .limit(pagination.page_size)
                .offset(pagination.offset)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatastoreError(DatastoreErrorKind.QUERY_FAILED, f"Substring search failed: {e}") from e
        return [(game, None) for game in games], total

    @staticmethod
    def suggest_substring(prefix, limit):
        try:
            rows = (
                db.session.query(Game.title, Game.slug)
                .filter(func.unicode_lower(Game.title).like(_prefix_pattern(prefix), escape="\\"))
                .order_by(Game.stars.desc(), Game.id.asc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatastoreError(DatastoreErrorKind.QUERY_FAILED, f"Suggestion lookup failed: {e}") from e
        return [{"title": title, "slug": slug} for title, slug in rows]

    @staticmethod
    def rebuild_index():
        """
        Create the full-text table if needed and repopulate it from `games`.
        Returns the number of indexed games.
        """
        try:
            db.session.execute(text(CREATE_INDEX_SQL))
            db.session.execute(text(f"DELETE FROM {SEARCH_INDEX_TABLE}"))
            db.session.execute(
                text(
                    f"INSERT INTO {SEARCH_INDEX_TABLE} (id, title, description, topics) "
                    "SELECT g.id, g.title, COALESCE(g.description, ''), "
                    "COALESCE((SELECT group_concat(value, ' ') FROM json_each(g.topics)), '') "
                    "FROM games g"
                )
            )
            count = db.session.execute(text(f"SELECT COUNT(*) FROM {SEARCH_INDEX_TABLE}")).scalar()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DatastoreError(DatastoreErrorKind.QUERY_FAILED, f"Search index rebuild failed: {e}") from e

        logger.info(f"Search index {SEARCH_INDEX_TABLE} rebuilt with {count} games")
        return count
