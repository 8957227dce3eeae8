"""
In-memory counterpart of GamesRepository over the fallback dataset.

Filtering and ordering mirror the SQL path exactly, so a store-backed and a
store-less deployment holding the same rows answer with the same totals and
the same order.
"""

from datetime import timedelta

from opengames.constants import STATS_BREAKDOWN_LIMIT, STATS_LIST_LIMIT, TRENDING_WINDOW_DAYS
from opengames.fallback_data import get_fallback_games
from opengames.repositories.games_repository import RELATED_TOPICS_LIMIT
from opengames.utils import epoch_seconds, to_naive_utc, utcnow_naive


def _lowered(values):
    return {str(v).lower() for v in (values or [])}


def matches_filters(game, filters):
    if filters is None:
        return True
    if filters.languages and game.language not in filters.languages:
        return False
    if filters.genres and game.genre not in filters.genres:
        return False
    if filters.min_stars is not None and (game.stars or 0) < filters.min_stars:
        return False
    if filters.max_stars is not None and (game.stars or 0) > filters.max_stars:
        return False
    if filters.is_multiplayer is not None and bool(game.is_multiplayer) != filters.is_multiplayer:
        return False
    if filters.has_release and not game.latest_release:
        return False
    if filters.topics:
        topics = _lowered(game.topics)
        if not any(topic.lower() in topics for topic in filters.topics):
            return False
    if filters.platforms:
        platforms = _lowered(game.platforms)
        if not all(platform.lower() in platforms for platform in filters.platforms):
            return False
    return True


def sort_key(field):
    keys = {
        "stars": lambda g: g.stars or 0,
        "lastCommit": lambda g: epoch_seconds(g.last_commit_at),
        "createdAt": lambda g: epoch_seconds(g.created_at),
        "title": lambda g: (g.title or "").lower(),
        "downloadCount": lambda g: g.download_count or 0,
    }
    return keys.get(field, keys["stars"])


def sort_games(games, sort):
    """Sort by the requested field, ties by id ascending"""
    # Python sorts are stable, also with reverse=True
    ordered = sorted(games, key=lambda g: g.id)
    return sorted(ordered, key=sort_key(sort.field), reverse=sort.order != "asc")


def _by_stars(games):
    return sorted(sorted(games, key=lambda g: g.id), key=lambda g: g.stars or 0, reverse=True)


class FallbackRepository:
    """GamesRepository operations over the in-memory dataset"""

    @staticmethod
    def get_all(games=None):
        return list(games if games is not None else get_fallback_games())

    @staticmethod
    def get_paged(filters, pagination, sort, games=None):
        matching = [g for g in FallbackRepository.get_all(games) if matches_filters(g, filters)]
        ordered = sort_games(matching, sort)
        start = pagination.offset
        return ordered[start:start + pagination.page_size], len(matching)

    @staticmethod
    def get_by_slug(slug, games=None):
        for game in FallbackRepository.get_all(games):
            if game.slug == slug:
                return game
        return None

    @staticmethod
    def get_related(game, limit, games=None):
        others = _by_stars(g for g in FallbackRepository.get_all(games) if g.id != game.id)
        topics = _lowered(list(game.topics or [])[:RELATED_TOPICS_LIMIT])

        shared = [g for g in others if topics & _lowered(g.topics)]
        same_language = [g for g in others if game.language and g.language == game.language]

        collected = []
        seen = set()
        for candidate in shared + same_language + others:
            if candidate.id in seen:
                continue
            seen.add(candidate.id)
            collected.append(candidate)
            if len(collected) >= limit:
                break
        return collected

    @staticmethod
    def get_popular(limit, games=None):
        return _by_stars(FallbackRepository.get_all(games))[:limit]

    @staticmethod
    def get_trending(limit, days=TRENDING_WINDOW_DAYS, games=None):
        since = utcnow_naive() - timedelta(days=days)
        recent = [
            g for g in FallbackRepository.get_all(games)
            if g.last_commit_at is not None and to_naive_utc(g.last_commit_at) >= since
        ]
        return _by_stars(recent)[:limit]

    @staticmethod
    def get_recently_updated(limit, games=None):
        ordered = sorted(FallbackRepository.get_all(games), key=lambda g: g.id)
        with_commit = [g for g in ordered if g.last_commit_at is not None]
        without_commit = [g for g in ordered if g.last_commit_at is None]
        with_commit.sort(key=lambda g: epoch_seconds(g.last_commit_at), reverse=True)
        return (with_commit + without_commit)[:limit]

    @staticmethod
    def _count_by(attr, label, games, limit):
        counts = {}
        for game in games:
            value = getattr(game, attr)
            if value:
                counts[value] = counts.get(value, 0) + 1
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [{label: value, "count": count} for value, count in ordered[:limit]]

    @staticmethod
    def get_stats(games=None):
        games = FallbackRepository.get_all(games)
        stars = [g.stars or 0 for g in games]
        return {
            "totalGames": len(games),
            "gamesByLanguage": FallbackRepository._count_by("language", "language", games, STATS_BREAKDOWN_LIMIT),
            "gamesByGenre": FallbackRepository._count_by("genre", "genre", games, STATS_BREAKDOWN_LIMIT),
            "trendingGames": FallbackRepository.get_trending(STATS_LIST_LIMIT, games=games),
            "recentlyUpdated": FallbackRepository.get_recently_updated(STATS_LIST_LIMIT, games=games),
            "topStars": max(stars) if stars else 0,
            "avgStars": round(sum(stars) / len(stars)) if stars else 0,
        }

    @staticmethod
    def search(query, filters, pagination, games=None):
        """Case-insensitive substring match on title, description and topics, by stars"""
        needle = query.replace('""', '"').lower()
        matching = [
            g for g in FallbackRepository.get_all(games)
            if matches_filters(g, filters) and _contains(g, needle)
        ]
        ordered = _by_stars(matching)
        start = pagination.offset
        return ordered[start:start + pagination.page_size], len(matching)

    @staticmethod
    def suggest(prefix, limit, games=None):
        prefix = prefix.lower()
        matching = [g for g in FallbackRepository.get_all(games) if g.slug and (g.title or "").lower().startswith(prefix)]
        return [{"title": g.title, "slug": g.slug} for g in _by_stars(matching)[:limit]]


def _contains(game, needle):
    haystacks = [game.title or "", game.description or ""] + [str(t) for t in game.topics or []]
    return any(needle in haystack.lower() for haystack in haystacks)
