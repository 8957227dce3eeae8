"""
API Response Utilities - Standardized envelopes, cache headers and error handling

Successful responses are `{"data": ..., "meta": {...}?}` and always carry the
Cache-Control header of their TTL tier. Errors are `{"error": {...}}` and are
never cacheable.
"""

import hashlib
import json
import logging
from functools import wraps

from flask import jsonify, make_response, request

from opengames.cache_keys import CacheControl, CacheTTL, cache_control_for
from opengames.exceptions import OpenGamesException

logger = logging.getLogger("main")


# API Error Codes
class ErrorCode:
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"


DEFAULT_MESSAGES = {
    ErrorCode.BAD_REQUEST: "Invalid request parameters",
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.INTERNAL_ERROR: "Internal server error",
    ErrorCode.UNAUTHORIZED: "Unauthorized",
    ErrorCode.RATE_LIMIT_EXCEEDED: "Rate limit exceeded",
}


def pagination_meta(pagination, total):
    return {
        "total": total,
        "page": pagination.page,
        "pageSize": pagination.page_size,
        "hasMore": pagination.has_more(total),
    }


def envelope(data, meta=None):
    body = {"data": data}
    if meta is not None:
        body["meta"] = meta
    return body


def compute_etag(body):
    payload = json.dumps(body, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def success_response(body, ttl=CacheTTL.SHORT, cache_hit=None, status_code=200):
    """
    Render an already built envelope.

    Args:
        body: envelope dict as returned by envelope()
        ttl: cache tier, selects the Cache-Control header
        cache_hit: True/False sets X-Cache to HIT/MISS, None leaves it out
    """
    etag = compute_etag(body)
    if request.if_none_match.contains(etag):
        resp = make_response("", 304)
    else:
        resp = make_response(jsonify(body), status_code)

    resp.set_etag(etag)
    resp.headers["Cache-Control"] = cache_control_for(ttl)
    if cache_hit is not None:
        resp.headers["X-Cache"] = "HIT" if cache_hit else "MISS"
    return resp


def uncached_response(body, status_code=200):
    """For admin endpoints: same envelope, never stored by intermediaries"""
    resp = make_response(jsonify(body), status_code)
    resp.headers["Cache-Control"] = CacheControl.NONE
    return resp


def error_response(error_code=ErrorCode.INTERNAL_ERROR, message=None, details=None, status_code=400):
    error = {"code": error_code, "message": message or DEFAULT_MESSAGES.get(error_code, "Error")}
    if details:
        error["details"] = details

    resp = make_response(jsonify({"error": error}), status_code)
    resp.headers["Cache-Control"] = CacheControl.NONE
    return resp


def handle_api_errors(f):
    """
    Decorator to standardize error handling for API endpoints

    Domain exceptions become their status code; anything unexpected is logged
    with its traceback and answered with a generic 500.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except OpenGamesException as e:
            if e.status_code >= 500:
                return error_response(ErrorCode.INTERNAL_ERROR, status_code=500)
            return error_response(e.code, message=e.message, status_code=e.status_code)
        except Exception as e:
            logger.error(f"Unhandled exception in {f.__name__}: {e}", exc_info=True)
            return error_response(ErrorCode.INTERNAL_ERROR, status_code=500)

    return wrapper
