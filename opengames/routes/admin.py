"""
Admin endpoints: response cache management and search index maintenance.

All routes require `Authorization: Bearer <ADMIN_API_KEY>`. Unlike the public
endpoints they fail loudly when the infrastructure they manage is missing.
"""

import logging

from flask import Blueprint, request

from opengames import redis_cache
from opengames.api_responses import ErrorCode, envelope, error_response, handle_api_errors, uncached_response
from opengames.auth import admin_required
from opengames.cache_keys import CacheKeys
from opengames.exceptions import DatastoreError, DatastoreErrorKind, ValidationException
from opengames.services import search_service

logger = logging.getLogger("main")

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.route("/cache", methods=["GET"])
@handle_api_errors
@admin_required
def cache_info():
    if request.args.get("action") == "keys":
        return uncached_response(envelope({"keys": CacheKeys.common_keys()}))

    data = redis_cache.get_cache_info()
    data["endpoints"] = {
        "invalidate": "POST /api/admin/cache/invalidate",
        "clear": "DELETE /api/admin/cache",
        "keys": "GET /api/admin/cache?action=keys",
        "rebuildSearchIndex": "POST /api/admin/search-index",
    }
    return uncached_response(envelope(data))


@admin_bp.route("/cache/invalidate", methods=["POST"])
@handle_api_errors
@admin_required
def invalidate_cache():
    payload = request.get_json(silent=True) or {}
    pattern = payload.get("pattern") or request.args.get("pattern")
    key = payload.get("key")

    if key:
        deleted = 1 if redis_cache.cache_delete(key) else 0
        logger.info(f"Admin invalidated cache key {key}")
        return uncached_response(envelope({"key": key, "deleted": deleted}))

    if not pattern:
        raise ValidationException("Pattern is required")

    if pattern == "games":
        deleted = redis_cache.invalidate_game_cache()
    else:
        deleted = redis_cache.cache_delete_pattern(pattern)
    logger.info(f"Admin invalidated cache pattern {pattern} ({deleted} keys)")
    return uncached_response(envelope({
        "pattern": pattern,
        "deleted": deleted,
        "message": f"Cache invalidated for pattern: {pattern}",
    }))


@admin_bp.route("/cache", methods=["DELETE"])
@handle_api_errors
@admin_required
def clear_cache():
    deleted = redis_cache.clear_all_cache()
    logger.warning(f"Admin cleared the whole response cache ({deleted} keys)")
    return uncached_response(envelope({"deleted": deleted, "message": "All cache cleared"}))


@admin_bp.route("/search-index", methods=["POST"])
@handle_api_errors
@admin_required
def rebuild_search_index():
    try:
        indexed = search_service.rebuild_search_index()
    except DatastoreError as e:
        if e.kind is DatastoreErrorKind.NOT_CONFIGURED:
            return error_response(ErrorCode.INTERNAL_ERROR, message="Database is not configured", status_code=500)
        raise

    deleted = redis_cache.cache_delete_pattern("search:")
    return uncached_response(envelope({"indexed": indexed, "invalidated": deleted}))
