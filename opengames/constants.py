import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_DIR = os.environ.get("OPENGAMES_CONFIG_DIR", os.path.join(APP_DIR, "config"))
CONFIG_FILE = os.environ.get("OPENGAMES_CONFIG", os.path.join(CONFIG_DIR, "settings.yaml"))

BUILD_VERSION = "20250114_0930"
API_VERSION = "1.0"

# Pagination
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Search
MIN_SEARCH_QUERY_LENGTH = 2
MAX_SEARCH_QUERY_LENGTH = 200
DEFAULT_SUGGESTION_LIMIT = 10
SEARCH_INDEX_TABLE = "games_fts"

# Sorting
SORT_FIELDS = ["stars", "lastCommit", "createdAt", "title", "downloadCount"]
DEFAULT_SORT_FIELD = "stars"
DEFAULT_SORT_ORDER = "desc"

# Stats
TRENDING_WINDOW_DAYS = 30
STATS_LIST_LIMIT = 10
STATS_BREAKDOWN_LIMIT = 20
RELATED_GAMES_LIMIT = 6

DEFAULT_SETTINGS = {
    "database": {
        # Empty means no relational store: public endpoints serve the fallback dataset
        "url": "",
    },
    "cache": {
        "redis_url": "",
    },
    "admin": {
        "api_key": "",
    },
    "logging": {
        "level": "INFO",
        "format": "console",
    },
    "ratelimit": {
        "enabled": True,
        "default": "300 per hour",
    },
    "site": {
        "url": "https://osgames.dev",
    },
    "github": {
        "token": "",
    },
}

# Environment variables that override the YAML file
ENV_OVERRIDES = {
    "DATABASE_URL": ("database", "url"),
    "REDIS_URL": ("cache", "redis_url"),
    "ADMIN_API_KEY": ("admin", "api_key"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
    "RATELIMIT_DEFAULT": ("ratelimit", "default"),
    "SITE_URL": ("site", "url"),
    "GITHUB_TOKEN": ("github", "token"),
}
