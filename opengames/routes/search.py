"""Full-text search and autocomplete endpoint"""

import logging

from flask import Blueprint, request

from opengames import redis_cache
from opengames.api_responses import envelope, handle_api_errors, pagination_meta, success_response
from opengames.cache_keys import CacheKeys, CacheTTL
from opengames.constants import DEFAULT_SUGGESTION_LIMIT, MIN_SEARCH_QUERY_LENGTH
from opengames.exceptions import ValidationException
from opengames.query_params import parse_game_filters, parse_pagination, validate_search_query
from opengames.services import search_service

logger = logging.getLogger("main")

search_bp = Blueprint("search", __name__, url_prefix="/api")


@search_bp.route("/search")
@handle_api_errors
def search():
    query = request.args.get("q")

    if request.args.get("suggest") == "true":
        return _suggest(query)

    sanitized, error = validate_search_query(query)
    if error:
        raise ValidationException(error)

    filters = parse_game_filters(request.args)
    pagination = parse_pagination(request.args)

    def build():
        result = search_service.search(sanitized, filters, pagination)
        if not result.index_used:
            logger.debug(f"Search for {sanitized!r} answered without the full-text index")
        data = {
            "query": sanitized,
            "results": [hit.to_dict() for hit in result.results],
        }
        if not filters.is_empty():
            data["filters"] = filters.to_dict()
        return envelope(data, pagination_meta(pagination, result.total))

    # Keys ignore case; the echoed query is always this request's
    cache_key = CacheKeys.search_results(sanitized, filters, pagination)
    body, hit = redis_cache.cache_get_or_set(cache_key, build, CacheTTL.SHORT)
    body = {**body, "data": {**body["data"], "query": sanitized}}
    return success_response(body, CacheTTL.SHORT, cache_hit=hit)


def _suggest(query):
    prefix = (query or "").strip()
    if len(prefix) < MIN_SEARCH_QUERY_LENGTH:
        return success_response(envelope([]), CacheTTL.SHORT)

    cache_key = CacheKeys.search_suggestions(prefix, DEFAULT_SUGGESTION_LIMIT)
    body, hit = redis_cache.cache_get_or_set(
        cache_key,
        lambda: envelope(search_service.suggest(prefix, DEFAULT_SUGGESTION_LIMIT)),
        CacheTTL.SHORT,
    )
    return success_response(body, CacheTTL.SHORT, cache_hit=hit)
