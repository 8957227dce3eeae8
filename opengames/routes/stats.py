"""Directory statistics"""

from flask import Blueprint

from opengames import redis_cache
from opengames.api_responses import envelope, handle_api_errors, success_response
from opengames.cache_keys import CacheKeys, CacheTTL
from opengames.categories import TOTAL_CATEGORIES
from opengames.services import game_service
from opengames.utils import isoformat_utc, now_utc

stats_bp = Blueprint("stats", __name__, url_prefix="/api")


@stats_bp.route("/stats")
@handle_api_errors
def stats():
    def build():
        data = game_service.get_stats()
        data["totalCategories"] = TOTAL_CATEGORIES
        data["generatedAt"] = isoformat_utc(now_utc())
        return envelope(data)

    body, hit = redis_cache.cache_get_or_set(CacheKeys.all_stats(), build, CacheTTL.MEDIUM)
    return success_response(body, CacheTTL.MEDIUM, cache_hit=hit)
