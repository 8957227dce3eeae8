"""
Pytest fixtures and configuration for OpenGames tests
"""
import fnmatch
import re
import sqlite3

import pytest

from opengames import redis_cache
from opengames.app import create_app
from opengames.db import db
from opengames.fallback_data import reset_fallback_games
from opengames.models import Game
from opengames.repositories.games_repository import GamesRepository

ADMIN_KEY = 'test-admin-key'

BASE_CONFIG = {
    'TESTING': True,
    'RATELIMIT_ENABLED': False,
    'ADMIN_API_KEY': ADMIN_KEY,
    'REDIS_URL': '',
    'LOG_LEVEL': 'WARNING',
}


class FakeRedis:
    """Dict-backed stand-in for the handful of redis commands the cache uses"""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def ping(self):
        return True

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        deleted = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.ttls.pop(key, None)
                deleted += 1
        return deleted

    def scan_iter(self, match=None, count=None):
        pattern = re.sub(r'\\(.)', r'[\1]', match) if match else None
        for key in list(self.store):
            if pattern is None or fnmatch.fnmatchcase(key, pattern):
                yield key


def make_payload(slug, **overrides):
    """Minimal import payload for a game"""
    payload = {
        'id': f'owner-{slug}',
        'slug': slug,
        'title': slug.replace('-', ' ').title(),
        'repoUrl': f'https://github.com/owner/{slug}',
        'description': f'{slug} description',
        'stars': 0,
        'language': 'C++',
        'genre': 'arcade',
        'topics': [],
        'platforms': ['Windows', 'Linux'],
    }
    payload.update(overrides)
    return payload


def fts5_available():
    conn = sqlite3.connect(':memory:')
    try:
        conn.execute('CREATE VIRTUAL TABLE fts_check USING fts5(x)')
        return True
    except sqlite3.OperationalError:
        return False
    finally:
        conn.close()


requires_fts5 = pytest.mark.skipif(not fts5_available(), reason='SQLite built without FTS5')


@pytest.fixture(autouse=True)
def reset_state():
    """Fresh fallback dataset and a disabled cache for every test"""
    reset_fallback_games()
    redis_cache.redis_client = None
    redis_cache.reset_cache_stats()
    yield
    redis_cache.redis_client = None
    reset_fallback_games()


@pytest.fixture
def app():
    """App bound to an in-memory SQLite store"""
    _app = create_app({**BASE_CONFIG, 'DATABASE_URL': 'sqlite://'})
    with _app.app_context():
        yield _app
        db.session.remove()


@pytest.fixture
def storeless_app():
    """App without a relational store, serving the fallback dataset"""
    _app = create_app({**BASE_CONFIG, 'DATABASE_URL': ''})
    with _app.app_context():
        yield _app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storeless_client(storeless_app):
    return storeless_app.test_client()


@pytest.fixture
def seed_games(app):
    """Insert payloads into the store, returning the Game rows"""

    def _seed(payloads):
        return [GamesRepository.upsert(Game.from_payload(payload)) for payload in payloads]

    return _seed


@pytest.fixture
def fake_redis():
    client = FakeRedis()
    redis_cache.redis_client = client
    return client


@pytest.fixture
def admin_headers():
    return {'Authorization': f'Bearer {ADMIN_KEY}'}
