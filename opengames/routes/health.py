from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from opengames import redis_cache
from opengames.api_responses import envelope, uncached_response
from opengames.constants import API_VERSION, BUILD_VERSION
from opengames.db import db, is_database_available

health_bp = Blueprint("health", __name__, url_prefix="/api")


@health_bp.route("/health")
def health():
    database = "fallback"
    if is_database_available():
        try:
            db.session.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError:
            database = "error"

    data = {
        "status": "ok" if database != "error" else "degraded",
        "version": API_VERSION,
        "build": BUILD_VERSION,
        "database": database,
        "cache": "enabled" if redis_cache.is_cache_enabled() else "disabled",
    }
    return uncached_response(envelope(data), 200 if database != "error" else 503)
