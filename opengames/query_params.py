"""
Request parameter parsing for listing and search endpoints.

Every parser here is total: malformed input falls back to defaults instead of
raising, so handlers never need to guard against bad query strings. Only
`validate_search_query` reports a problem, since a search without a usable
query has no sensible default.
"""

import re
from dataclasses import asdict, dataclass
from typing import List, Optional

from opengames.constants import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_FIELD,
    DEFAULT_SORT_ORDER,
    MAX_PAGE_SIZE,
    MAX_SEARCH_QUERY_LENGTH,
    MIN_SEARCH_QUERY_LENGTH,
    SORT_FIELDS,
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_SLUG = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

# FilterSet attribute -> key echoed back to clients
_FILTER_KEYS = {
    "languages": "languages",
    "genres": "genres",
    "min_stars": "minStars",
    "max_stars": "maxStars",
    "is_multiplayer": "isMultiplayer",
    "topics": "topics",
    "platforms": "platforms",
    "has_release": "hasRelease",
}


@dataclass
class Pagination:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def has_more(self, total: int) -> bool:
        return self.page * self.page_size < total


@dataclass
class FilterSet:
    """Optional predicates for a listing or search. None means "no predicate"."""

    languages: Optional[List[str]] = None
    genres: Optional[List[str]] = None
    min_stars: Optional[int] = None
    max_stars: Optional[int] = None
    is_multiplayer: Optional[bool] = None
    topics: Optional[List[str]] = None
    platforms: Optional[List[str]] = None
    has_release: Optional[bool] = None

    def is_empty(self) -> bool:
        return all(value is None for value in asdict(self).values())

    def to_dict(self) -> dict:
        """Set fields only, camelCase keys"""
        return {_FILTER_KEYS[key]: value for key, value in asdict(self).items() if value is not None}


@dataclass
class SortParams:
    field: str = DEFAULT_SORT_FIELD
    order: str = DEFAULT_SORT_ORDER

    def to_dict(self) -> dict:
        return {"field": self.field, "order": self.order}


def _get_all(args, key) -> List[str]:
    """All raw values of `key`, for Werkzeug MultiDicts and plain dicts alike"""
    if args is None:
        return []
    if hasattr(args, "getlist"):
        return [v for v in args.getlist(key) if v is not None]
    value = args.get(key)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


def _get_first(args, key) -> Optional[str]:
    values = _get_all(args, key)
    return values[0] if values else None


def _parse_int(value) -> Optional[int]:
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def _parse_list(args, key, lower=False) -> Optional[List[str]]:
    """Repeated parameters and comma separated values, de-duplicated in first-seen order"""
    items = []
    for raw in _get_all(args, key):
        for part in raw.split(","):
            part = part.strip()
            if lower:
                part = part.lower()
            if part and part not in items:
                items.append(part)
    return items or None


def _parse_bool(value) -> Optional[bool]:
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def parse_pagination(args) -> Pagination:
    page = _parse_int(_get_first(args, "page"))
    page = max(1, page if page is not None else 1)

    raw_size = _get_first(args, "pageSize")
    if raw_size is None:
        raw_size = _get_first(args, "limit")
    page_size = _parse_int(raw_size)
    if page_size is None:
        page_size = DEFAULT_PAGE_SIZE
    page_size = min(MAX_PAGE_SIZE, max(1, page_size))

    return Pagination(page=page, page_size=page_size)


def parse_game_filters(args) -> FilterSet:
    filters = FilterSet()

    filters.languages = _parse_list(args, "language")
    filters.genres = _parse_list(args, "genre")
    filters.min_stars = _parse_int(_get_first(args, "minStars"))
    filters.max_stars = _parse_int(_get_first(args, "maxStars"))
    filters.is_multiplayer = _parse_bool(_get_first(args, "multiplayer"))
    filters.topics = _parse_list(args, "topic", lower=True)
    filters.platforms = _parse_list(args, "platform", lower=True)

    # Only "true" narrows the result; "false" means "don't care"
    if _get_first(args, "hasRelease") == "true":
        filters.has_release = True

    return filters


def parse_sort_params(args) -> SortParams:
    field = _get_first(args, "sort") or DEFAULT_SORT_FIELD
    order = DEFAULT_SORT_ORDER if _get_first(args, "order") != "asc" else "asc"

    # "-stars" / "+createdAt"
    if field.startswith("-"):
        field, order = field[1:], "desc"
    elif field.startswith("+"):
        field, order = field[1:], "asc"

    field = field.strip()
    if field not in SORT_FIELDS:
        field = DEFAULT_SORT_FIELD

    return SortParams(field=field, order=order)


def validate_search_query(query):
    """
    Validate a raw search query.

    Returns (sanitized, None) when valid or (None, error message) otherwise.
    Sanitizing doubles double quotes and strips `*`, so the value can be
    embedded in a full-text MATCH expression.
    """
    if not query or not isinstance(query, str):
        return None, "Query parameter is required"

    trimmed = query.strip()
    if len(trimmed) < MIN_SEARCH_QUERY_LENGTH:
        return None, f"Query must be at least {MIN_SEARCH_QUERY_LENGTH} characters"
    if len(trimmed) > MAX_SEARCH_QUERY_LENGTH:
        return None, f"Query must be less than {MAX_SEARCH_QUERY_LENGTH} characters"

    sanitized = trimmed.replace('"', '""').replace("*", "").strip()
    if not sanitized:
        return None, "Query parameter is required"
    return sanitized, None


def is_valid_slug(slug) -> bool:
    return isinstance(slug, str) and bool(_SLUG.match(slug))
