import logging
import time

from flask import Response, request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("main")

# API Metrics
api_request_duration_seconds = Histogram(
    "opengames_api_request_duration_seconds", "API request duration", ["endpoint", "method"]
)

api_requests_total = Counter(
    "opengames_api_requests_total", "Total API requests", ["endpoint", "method", "status_code"]
)

# Cache Metrics
cache_operations_total = Counter(
    "opengames_cache_operations_total", "Response cache operations", ["operation"]
)

# Data source Metrics
fallback_dataset_requests_total = Counter(
    "opengames_fallback_dataset_requests_total", "Requests served from the in-memory fallback dataset", ["operation"]
)

search_fallback_total = Counter(
    "opengames_search_fallback_total", "Searches answered by substring scan because the full-text index is missing"
)

games_total = Gauge("opengames_games_total", "Number of games in the store")


def init_metrics(app):
    @app.route("/api/metrics")
    def metrics():
        update_store_metrics()
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    @app.before_request
    def before_request():
        request.start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - getattr(request, "start_time", time.time())
        api_request_duration_seconds.labels(endpoint=request.endpoint or "unknown", method=request.method).observe(
            duration
        )
        api_requests_total.labels(
            endpoint=request.endpoint or "unknown", method=request.method, status_code=response.status_code
        ).inc()
        return response

    app.logger.info("Prometheus metrics initialized at /api/metrics")


def update_store_metrics():
    """Refresh gauges that are read from the database"""
    from opengames.db import is_database_available
    from opengames.models import Game

    if not is_database_available():
        return
    try:
        games_total.set(Game.query.count())
    except SQLAlchemyError as e:
        logger.warning(f"Could not refresh store metrics: {e}")
