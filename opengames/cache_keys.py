"""
Cache key and TTL policy.

Keys are a pure function of the logical request: the same filters, page and
sort always produce the same string, whatever order the client sent the
query parameters in.
"""

import hashlib
import json

from opengames.query_params import FilterSet


class CacheTTL:
    SHORT = 60  # listings, search
    MEDIUM = 300  # single game, stats, categories from the database
    LONG = 3600  # static categories


class CacheControl:
    SHORT = "public, max-age=60, stale-while-revalidate=300"
    MEDIUM = "public, max-age=300, stale-while-revalidate=1800"
    LONG = "public, max-age=3600, stale-while-revalidate=86400"
    NONE = "no-store"
    PRIVATE = "private, max-age=300"


CACHE_CONTROL_BY_TTL = {
    CacheTTL.SHORT: CacheControl.SHORT,
    CacheTTL.MEDIUM: CacheControl.MEDIUM,
    CacheTTL.LONG: CacheControl.LONG,
}


def cache_control_for(ttl):
    return CACHE_CONTROL_BY_TTL.get(ttl, CacheControl.SHORT)


def filters_hash(filters):
    """
    Short md5 of the canonical filter JSON. Every list filter has set semantics,
    so list values are sorted too.
    """
    if isinstance(filters, FilterSet):
        filters = filters.to_dict()

    canonical = {}
    for key, value in (filters or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set)):
            value = sorted(str(v) for v in value)
        canonical[key] = value

    payload = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
    return hashlib.md5(payload.encode()).hexdigest()[:12]


class CacheKeys:
    # Popular/trending games
    @staticmethod
    def trending_games(limit=10):
        return f"games:trending:{limit}"

    @staticmethod
    def popular_games(limit=20):
        return f"games:popular:{limit}"

    @staticmethod
    def recently_updated(limit=10):
        return f"games:recent:{limit}"

    @staticmethod
    def games_list(filters, pagination, sort):
        return (
            f"games:list:{filters_hash(filters)}:{pagination.page}:{pagination.page_size}"
            f":{sort.field}:{sort.order}"
        )

    # Game details
    @staticmethod
    def game_by_slug(slug):
        return f"game:slug:{slug}"

    @staticmethod
    def related_games(slug, limit):
        return f"game:related:{slug}:{limit}"

    # Stats
    @staticmethod
    def all_stats():
        return "stats:all"

    @staticmethod
    def language_stats():
        return "stats:by-language"

    @staticmethod
    def genre_stats():
        return "stats:by-genre"

    # Search
    @staticmethod
    def search_results(query, filters, pagination):
        return f"search:{query.lower()}:{filters_hash(filters)}:{pagination.page}:{pagination.page_size}"

    @staticmethod
    def search_suggestions(prefix, limit):
        return f"search:suggest:{prefix.lower()}:{limit}"

    # Categories
    @staticmethod
    def categories(category_type, source):
        return f"categories:{category_type or 'all'}:{source}"

    @staticmethod
    def category_games(slug, pagination):
        return f"category:{slug}:games:{pagination.page}:{pagination.page_size}"

    @staticmethod
    def common_keys():
        """Well-known keys, as listed by the admin cache endpoint"""
        return {
            "trendingGames": CacheKeys.trending_games(10),
            "popularGames": CacheKeys.popular_games(20),
            "recentlyUpdated": CacheKeys.recently_updated(10),
            "statsAll": CacheKeys.all_stats(),
            "statsLanguages": CacheKeys.language_stats(),
            "statsGenres": CacheKeys.genre_stats(),
        }


# Prefixes dropped whenever the games table changes
GAME_DATA_PREFIXES = [
    "games:",
    "game:",
    "search:",
    "stats:",
    "category:",
    "categories:",
]
