import logging

from flask import current_app, has_app_context
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event, text
from sqlalchemy.engine import Engine

# Retrieve main logger
logger = logging.getLogger("main")

db = SQLAlchemy()


def unicode_lower(value):
    """SQL `unicode_lower(x)`: Python lower-casing, where SQLite `lower()` only maps ASCII"""
    return value.lower() if isinstance(value, str) else value


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas and register SQL functions"""
    if type(dbapi_connection).__module__.split(".")[0] not in ("sqlite3", "pysqlite2"):
        return
    dbapi_connection.create_function("unicode_lower", 1, unicode_lower, deterministic=True)
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def init_db(app, database_url):
    """
    Bind the SQLAlchemy handle to the app when a store is configured.
    Without a URL the app runs store-less and public endpoints serve the fallback dataset.
    """
    if not database_url:
        logger.warning("No database configured, serving fallback dataset.")
        return False

    app.config["SQLALCHEMY_DATABASE_URI"] = database_url
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)
    db.init_app(app)
    logger.info(f"Database configured: {database_url.split('@')[-1]}")
    return True


def is_database_available():
    """True when the current app has a relational store bound."""
    if not has_app_context():
        return False
    return current_app.extensions.get("sqlalchemy") is not None


def create_schema():
    """Create all tables. The full-text index is managed by the search repository."""
    # Import models so they register with the metadata
    from opengames import models  # noqa: F401

    db.create_all()
    logger.info("Database schema created")


def table_exists(name):
    row = db.session.execute(
        text("SELECT name FROM sqlite_master WHERE type IN ('table', 'view') AND name = :name"),
        {"name": name},
    ).first()
    return row is not None
