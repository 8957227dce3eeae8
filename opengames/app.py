"""
OpenGames - Open Source Games Directory API
Application Factory and initialization
"""
import logging
import sys
import warnings

# Suppress Flask-Limiter warnings about the in-memory storage backend
warnings.filterwarnings("ignore", category=UserWarning, module="flask_limiter")

import structlog
from flask import Flask, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from opengames.cache_keys import CacheControl
from opengames.constants import BUILD_VERSION
from opengames.db import create_schema, init_db
from opengames.exceptions import register_exception_handlers
from opengames.metrics import init_metrics
from opengames.redis_cache import init_cache
from opengames.routes.admin import admin_bp
from opengames.routes.categories import categories_bp
from opengames.routes.games import games_bp
from opengames.routes.health import health_bp
from opengames.routes.search import search_bp
from opengames.routes.stats import stats_bp
from opengames.settings import load_settings
from opengames.utils import ColoredFormatter, FilterRemoveDateFromWerkzeugLogs

limiter = Limiter(key_func=get_remote_address)

logger = logging.getLogger("main")

_logging_configured = False

EXTRA_ALLOWED_ORIGINS = [
    "https://osgames.dev",
    "https://www.osgames.dev",
    "http://localhost:3000",
    "http://localhost:8788",
]


def configure_logging(level="INFO", log_format="console"):
    global _logging_configured
    if _logging_configured:
        return

    # Logging configuration
    formatter = ColoredFormatter(
        '[%(asctime)s.%(msecs)03d] %(levelname)s (%(module)s) %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        handlers=[handler]
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if log_format == 'json' else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Apply filter to hide date from http access logs
    logging.getLogger('werkzeug').addFilter(FilterRemoveDateFromWerkzeugLogs())
    _logging_configured = True


def allowed_origins(site_url):
    origins = list(EXTRA_ALLOWED_ORIGINS)
    if site_url:
        site_url = site_url.rstrip("/")
        origins.append(site_url)
        scheme, _, host = site_url.partition("://")
        if host and not host.startswith("www."):
            origins.append(f"{scheme}://www.{host}")
    return origins


def register_cors(app):
    origins = set(allowed_origins(app.config.get("SITE_URL")))

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in origins and request.path.startswith("/api/"):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers.add("Vary", "Origin")
        return response


def create_app(config_overrides=None):
    """Application factory"""
    settings = load_settings()

    app = Flask(__name__)
    app.config.update(
        DATABASE_URL=settings["database"]["url"],
        REDIS_URL=settings["cache"]["redis_url"],
        ADMIN_API_KEY=settings["admin"]["api_key"],
        LOG_LEVEL=settings["logging"]["level"],
        LOG_FORMAT=settings["logging"]["format"],
        RATELIMIT_ENABLED=bool(settings["ratelimit"]["enabled"]),
        RATELIMIT_DEFAULT=settings["ratelimit"]["default"],
        SITE_URL=settings["site"]["url"],
        GITHUB_TOKEN=settings["github"]["token"],
        CREATE_SCHEMA=True,
    )
    if config_overrides:
        app.config.update(config_overrides)
    app.json.sort_keys = False

    configure_logging(app.config["LOG_LEVEL"], app.config["LOG_FORMAT"])
    logger.info(f"Starting OpenGames API (build {BUILD_VERSION})")

    # Initialize components
    database_enabled = init_db(app, app.config["DATABASE_URL"])
    init_cache(app.config["REDIS_URL"])
    limiter.init_app(app)

    # Register exception handlers
    register_exception_handlers(app)

    # Register blueprints
    app.register_blueprint(games_bp)
    app.register_blueprint(search_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(stats_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(health_bp)

    # Initialize metrics
    init_metrics(app)
    register_cors(app)

    @app.after_request
    def default_cache_control(response):
        response.headers.setdefault("Cache-Control", CacheControl.NONE)
        return response

    if database_enabled and app.config["CREATE_SCHEMA"]:
        with app.app_context():
            create_schema()

    return app
