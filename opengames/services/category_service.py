"""
Maintenance of the persisted `categories` table behind `source=db`.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from opengames import redis_cache
from opengames.categories import TYPE_GENRE, TYPE_LANGUAGE, TYPE_PLATFORM, get_all_categories
from opengames.db import db, is_database_available
from opengames.exceptions import DatastoreError, DatastoreErrorKind
from opengames.models import CategoryRecord
from opengames.query_params import FilterSet
from opengames.repositories.games_repository import GamesRepository
from opengames.utils import utcnow_naive

logger = logging.getLogger("main")


def record_filter(category):
    """(filter_type, filter_value) for a static category, or None when it has no single-column filter"""
    category_filter = category.filter
    if category.type == TYPE_LANGUAGE and category_filter.language:
        return "language", category_filter.language
    if category.type == TYPE_GENRE and category_filter.topics:
        return "topic", category_filter.topics[0]
    if category.type == TYPE_PLATFORM and category_filter.platforms:
        return "platform", category_filter.platforms[0]
    return None


def record_filter_set(record):
    value = record.filter_value
    if record.filter_type == "language":
        return FilterSet(languages=[value])
    if record.filter_type == "genre":
        return FilterSet(genres=[value])
    if record.filter_type == "platform":
        return FilterSet(platforms=[value.lower()])
    if record.filter_type == "topic":
        return FilterSet(topics=[value.lower()])
    return None


def _require_database():
    if not is_database_available():
        raise DatastoreError(DatastoreErrorKind.NOT_CONFIGURED, "No database configured")


def seed_categories():
    """Store a row for every static genre, language and platform category not stored yet"""
    _require_database()
    try:
        existing = {slug for (slug,) in db.session.query(CategoryRecord.slug)}
        created = 0
        for category in get_all_categories():
            mapped = record_filter(category)
            if mapped is None or category.slug in existing:
                continue
            filter_type, filter_value = mapped
            db.session.add(CategoryRecord(
                id=category.slug,
                slug=category.slug,
                title=category.title,
                description=category.description,
                filter_type=filter_type,
                filter_value=filter_value,
                game_count=0,
                meta_title=category.meta_title,
                meta_description=category.meta_description,
            ))
            created += 1
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DatastoreError(DatastoreErrorKind.QUERY_FAILED, f"Category seeding failed: {e}") from e

    logger.info(f"Seeded {created} categories")
    return created


def refresh_category_counts():
    """Recount `game_count` for every stored category. Returns the number of rows updated."""
    _require_database()
    updated = 0
    try:
        for record in CategoryRecord.query.order_by(CategoryRecord.slug.asc()).all():
            filters = record_filter_set(record)
            if filters is None:
                logger.warning(f"Category {record.slug} has unknown filter type {record.filter_type}")
                continue
            record.game_count = GamesRepository.count_matching(filters)
            record.updated_at = utcnow_naive()
            updated += 1
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DatastoreError(DatastoreErrorKind.QUERY_FAILED, f"Category count refresh failed: {e}") from e

    redis_cache.cache_delete_pattern("categories:")
    logger.info(f"Refreshed game counts of {updated} categories")
    return updated
