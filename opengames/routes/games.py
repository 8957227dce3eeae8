"""Game listing and detail endpoints"""

import logging

from flask import Blueprint, request

from opengames import redis_cache
from opengames.api_responses import envelope, handle_api_errors, pagination_meta, success_response
from opengames.cache_keys import CacheKeys, CacheTTL
from opengames.constants import RELATED_GAMES_LIMIT
from opengames.exceptions import NotFoundException, ValidationException
from opengames.query_params import is_valid_slug, parse_game_filters, parse_pagination, parse_sort_params
from opengames.services import game_service

logger = logging.getLogger("main")

games_bp = Blueprint("games", __name__, url_prefix="/api")


@games_bp.route("/games")
@handle_api_errors
def list_games():
    pagination = parse_pagination(request.args)
    filters = parse_game_filters(request.args)
    sort = parse_sort_params(request.args)

    def build():
        result = game_service.list_games(filters, pagination, sort)
        logger.debug(f"Games list from {game_service.data_source()}: {result.total} matches")
        data = {
            "games": [game.to_dict() for game in result.items],
            "sort": sort.to_dict(),
        }
        if not filters.is_empty():
            data["filters"] = filters.to_dict()
        return envelope(data, pagination_meta(pagination, result.total))

    cache_key = CacheKeys.games_list(filters, pagination, sort)
    body, hit = redis_cache.cache_get_or_set(cache_key, build, CacheTTL.SHORT)
    return success_response(body, CacheTTL.SHORT, cache_hit=hit)


@games_bp.route("/games/<slug>")
@handle_api_errors
def game_detail(slug):
    if not is_valid_slug(slug):
        raise ValidationException("Invalid game slug")

    include_related = request.args.get("include") == "related"
    cache_key = CacheKeys.game_by_slug(slug)
    if include_related:
        cache_key = CacheKeys.related_games(slug, RELATED_GAMES_LIMIT)

    def build():
        game = game_service.get_game(slug)
        if game is None:
            raise NotFoundException("Game")
        data = {"game": game.to_dict()}
        if include_related:
            data["related"] = [g.to_dict() for g in game_service.get_related_games(game, RELATED_GAMES_LIMIT)]
        return envelope(data)

    body, hit = redis_cache.cache_get_or_set(cache_key, build, CacheTTL.MEDIUM)
    return success_response(body, CacheTTL.MEDIUM, cache_hit=hit)
