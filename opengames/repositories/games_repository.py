"""
Repository for Game database operations
"""

import logging
import time
from datetime import timedelta

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError

from opengames.constants import STATS_BREAKDOWN_LIMIT, STATS_LIST_LIMIT, TRENDING_WINDOW_DAYS
from opengames.db import db
from opengames.exceptions import DatastoreError, DatastoreErrorKind
from opengames.models.game import Game
from opengames.utils import utcnow_naive

logger = logging.getLogger("main")

# Related games only look at the first topics of the source game
RELATED_TOPICS_LIMIT = 10


def sort_column(field):
    columns = {
        "stars": Game.stars,
        "lastCommit": Game.last_commit_at,
        "createdAt": Game.created_at,
        "title": func.unicode_lower(Game.title),
        "downloadCount": Game.download_count,
    }
    return columns.get(field, Game.stars)


def _json_any_of(column, values, prefix):
    """EXISTS predicate: the JSON list in `column` holds any of `values` (case-insensitive)"""
    params = {f"{prefix}_{i}": value.lower() for i, value in enumerate(values)}
    placeholders = ", ".join(f":{name}" for name in params)
    return text(
        f"EXISTS (SELECT 1 FROM json_each(games.{column}) WHERE unicode_lower(value) IN ({placeholders}))"
    ).bindparams(**params)


def filter_conditions(filters):
    """
    SQL predicates for a FilterSet, to be ANDed. Unset fields add nothing.
    Topics match if ANY listed topic is present, platforms only if ALL are.
    """
    conditions = []
    if filters is None:
        return conditions

    if filters.languages:
        conditions.append(Game.language.in_(filters.languages))
    if filters.genres:
        conditions.append(Game.genre.in_(filters.genres))
    if filters.min_stars is not None:
        conditions.append(Game.stars >= filters.min_stars)
    if filters.max_stars is not None:
        conditions.append(Game.stars <= filters.max_stars)
    if filters.is_multiplayer is not None:
        conditions.append(Game.is_multiplayer == filters.is_multiplayer)
    if filters.has_release:
        conditions.append(Game.latest_release.isnot(None))
        conditions.append(Game.latest_release != "")
    if filters.topics:
        conditions.append(_json_any_of("topics", filters.topics, "topic"))
    if filters.platforms:
        for i, platform in enumerate(filters.platforms):
            conditions.append(_json_any_of("platforms", [platform], f"platform_{i}"))
    return conditions


def _query_failed(operation, error):
    return DatastoreError(DatastoreErrorKind.QUERY_FAILED, f"{operation} failed: {error}")


class GamesRepository:
    """Repository for Game database operations"""

    @staticmethod
    def get_paged(filters, pagination, sort):
        """
        Filtered, sorted page of games plus the total match count.
        Ties are broken by id so repeated queries return the same order.
        """
        query = Game.query.filter(*filter_conditions(filters))

        column = sort_column(sort.field)
        if sort.order == "asc":
            ordering = column.asc().nulls_first()
        else:
            ordering = column.desc().nulls_last()

        start = time.time()
        try:
            total = query.order_by(None).count()
            items = (
                query.order_by(ordering, Game.id.asc())
                .limit(pagination.page_size)
                .offset(pagination.offset)
                .all()
            )
        except SQLAlchemyError as e:
            raise _query_failed("GamesRepository.get_paged", e) from e

        duration = (time.time() - start) * 1000.0
        logger.debug(
            f"GamesRepository.get_paged: page={pagination.page} page_size={pagination.page_size} "
            f"sort={sort.field}:{sort.order} total={total} duration_ms={duration:.1f}"
        )
        return items, total

    @staticmethod
    def get_by_slug(slug):
        try:
            return Game.query.filter(Game.slug == slug).first()
        except SQLAlchemyError as e:
            raise _query_failed("GamesRepository.get_by_slug", e) from e

    @staticmethod
    def get_related(game, limit):
        """Shared topics first, then same language, then the most starred games"""
        collected = []
        seen = {game.id}

        def add_unique(rows):
            for row in rows:
                if row.id in seen or len(collected) >= limit:
                    continue
                seen.add(row.id)
                collected.append(row)

        base = Game.query.filter(Game.id != game.id)
        ordering = (Game.stars.desc(), Game.id.asc())
        try:
            topics = list(game.topics or [])[:RELATED_TOPICS_LIMIT]
            if topics:
                add_unique(base.filter(_json_any_of("topics", topics, "topic")).order_by(*ordering).limit(limit).all())

            if len(collected) < limit and game.language:
                add_unique(
                    base.filter(Game.language == game.language).order_by(*ordering).limit(limit + len(seen)).all()
                )

            if len(collected) < limit:
                add_unique(base.order_by(*ordering).limit(limit + len(seen)).all())
        except SQLAlchemyError as e:
            raise _query_failed("GamesRepository.get_related", e) from e

        return collected[:limit]

    @staticmethod
    def get_popular(limit):
        return Game.query.order_by(Game.stars.desc(), Game.id.asc()).limit(limit).all()

    @staticmethod
    def get_trending(limit, days=TRENDING_WINDOW_DAYS):
        """Games with a commit in the last `days` days, most starred first"""
        since = utcnow_naive() - timedelta(days=days)
        return (
            Game.query.filter(Game.last_commit_at >= since)
            .order_by(Game.stars.desc(), Game.id.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_recently_updated(limit):
        return (
            Game.query.order_by(Game.last_commit_at.desc().nulls_last(), Game.id.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def _count_by(column, limit):
        rows = (
            db.session.query(column, func.count(Game.id).label("count"))
            .filter(column.isnot(None), column != "")
            .group_by(column)
            .order_by(func.count(Game.id).desc(), column.asc())
            .limit(limit)
            .all()
        )
        return [(value, count) for value, count in rows]

    @staticmethod
    def get_language_breakdown(limit=STATS_BREAKDOWN_LIMIT):
        return [{"language": v, "count": c} for v, c in GamesRepository._count_by(Game.language, limit)]

    @staticmethod
    def get_genre_breakdown(limit=STATS_BREAKDOWN_LIMIT):
        return [{"genre": v, "count": c} for v, c in GamesRepository._count_by(Game.genre, limit)]

    @staticmethod
    def get_stats():
        """Aggregate counts and lists for the stats endpoint"""
        try:
            total, top_stars, avg_stars = db.session.query(
                func.count(Game.id), func.max(Game.stars), func.avg(Game.stars)
            ).one()
            return {
                "totalGames": total or 0,
                "gamesByLanguage": GamesRepository.get_language_breakdown(),
                "gamesByGenre": GamesRepository.get_genre_breakdown(),
                "trendingGames": GamesRepository.get_trending(STATS_LIST_LIMIT),
                "recentlyUpdated": GamesRepository.get_recently_updated(STATS_LIST_LIMIT),
                "topStars": top_stars or 0,
                "avgStars": round(avg_stars or 0),
            }
        except SQLAlchemyError as e:
            raise _query_failed("GamesRepository.get_stats", e) from e

    @staticmethod
    def upsert(game):
        """Insert or update a game by primary key. The slug of an existing game is kept."""
        try:
            existing = db.session.get(Game, game.id)
            if existing is not None:
                game.slug = existing.slug
            merged = db.session.merge(game)
            db.session.commit()
            return merged
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def count_matching(filters):
        return Game.query.filter(*filter_conditions(filters)).count()

