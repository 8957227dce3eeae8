"""Category index and per-category game listings"""

import logging

from flask import Blueprint, request

from opengames import redis_cache
from opengames.api_responses import (
    ErrorCode,
    envelope,
    error_response,
    handle_api_errors,
    pagination_meta,
    success_response,
)
from opengames.cache_keys import CacheKeys, CacheTTL
from opengames.categories import (
    TOTAL_CATEGORIES,
    get_all_categories,
    get_categories_by_type,
    get_category_by_slug,
    get_database_categories,
)
from opengames.db import is_database_available
from opengames.exceptions import NotFoundException, ValidationException
from opengames.query_params import SortParams, is_valid_slug, parse_pagination
from opengames.services import game_service

logger = logging.getLogger("main")

categories_bp = Blueprint("categories", __name__, url_prefix="/api")

SOURCE_STATIC = "static"
SOURCE_DB = "db"


@categories_bp.route("/categories")
@handle_api_errors
def list_categories():
    category_type = request.args.get("type") or None
    source = request.args.get("source") or SOURCE_STATIC

    if source == SOURCE_STATIC:
        categories = get_categories_by_type(category_type) if category_type else get_all_categories()
        body = envelope({
            "categories": [category.to_dict() for category in categories],
            "total": len(categories) if category_type else TOTAL_CATEGORIES,
            "source": "static",
        })
        return success_response(body, CacheTTL.LONG)

    if source != SOURCE_DB:
        raise ValidationException(f"Unknown category source: {source}")

    if not is_database_available():
        logger.error("Database categories requested but no database is configured")
        return error_response(ErrorCode.INTERNAL_ERROR, message="Database is not configured", status_code=500)

    def build():
        records = get_database_categories(category_type)
        return envelope({
            "categories": [record.to_dict() for record in records],
            "total": len(records),
            "source": "database",
        })

    body, hit = redis_cache.cache_get_or_set(CacheKeys.categories(category_type, "database"), build, CacheTTL.MEDIUM)
    return success_response(body, CacheTTL.MEDIUM, cache_hit=hit)


@categories_bp.route("/categories/<slug>")
@handle_api_errors
def category_games(slug):
    if not is_valid_slug(slug):
        raise ValidationException("Invalid category slug")

    category = get_category_by_slug(slug)
    if category is None:
        raise NotFoundException("Category")

    pagination = parse_pagination(request.args)

    def build():
        result = game_service.list_games(category.filter.to_filter_set(), pagination, SortParams())
        data = {
            "category": category.to_dict(),
            "games": [game.to_dict() for game in result.items],
        }
        return envelope(data, pagination_meta(pagination, result.total))

    body, hit = redis_cache.cache_get_or_set(CacheKeys.category_games(slug, pagination), build, CacheTTL.MEDIUM)
    return success_response(body, CacheTTL.MEDIUM, cache_hit=hit)
