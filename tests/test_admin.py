"""
Tests for the admin cache and search index endpoints
"""
import pytest

from opengames.cache_keys import CacheKeys
from tests.conftest import BASE_CONFIG, make_payload, requires_fts5


@pytest.fixture
def cached_keys(fake_redis):
    for key in ('games:trending:10', 'games:list:abc:1:20:stars:desc', 'game:slug:veloren',
                'search:voxel:abc:1:20', 'stats:all', 'unrelated'):
        fake_redis.store[key] = '{}'
    return fake_redis


class TestAuthentication:
    """Every admin route requires the Bearer key"""

    @pytest.mark.parametrize('method, path', [
        ('get', '/api/admin/cache'),
        ('post', '/api/admin/cache/invalidate'),
        ('delete', '/api/admin/cache'),
        ('post', '/api/admin/search-index'),
    ])
    def test_missing_token(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert response.get_json() == {'error': {'code': 'UNAUTHORIZED', 'message': 'Missing or invalid token'}}
        assert response.headers['Cache-Control'] == 'no-store'

    def test_wrong_token(self, client):
        response = client.get('/api/admin/cache', headers={'Authorization': 'Bearer nope'})
        assert response.status_code == 401
        assert response.get_json()['error']['message'] == 'Invalid token'

    def test_wrong_scheme(self, client):
        response = client.get('/api/admin/cache', headers={'Authorization': 'Basic dGVzdA=='})
        assert response.status_code == 401

    def test_unconfigured_key_denies_everyone(self, admin_headers):
        from opengames.app import create_app

        app = create_app({**BASE_CONFIG, 'DATABASE_URL': '', 'ADMIN_API_KEY': ''})
        response = app.test_client().get('/api/admin/cache', headers=admin_headers)
        assert response.status_code == 401


class TestCacheEndpoints:

    def test_cache_info_disabled(self, client, admin_headers):
        response = client.get('/api/admin/cache', headers=admin_headers)
        body = response.get_json()

        assert response.status_code == 200
        assert body['data']['status'] == 'disabled'
        assert body['data']['endpoints']['clear'] == 'DELETE /api/admin/cache'
        assert response.headers['Cache-Control'] == 'no-store'

    def test_cache_info_enabled(self, client, cached_keys, admin_headers):
        body = client.get('/api/admin/cache', headers=admin_headers).get_json()
        assert body['data']['status'] == 'enabled'
        assert body['data']['keys'] == 6

    def test_common_keys(self, client, admin_headers):
        body = client.get('/api/admin/cache?action=keys', headers=admin_headers).get_json()
        assert body == {'data': {'keys': CacheKeys.common_keys()}}

    def test_invalidate_requires_pattern(self, client, admin_headers):
        response = client.post('/api/admin/cache/invalidate', json={}, headers=admin_headers)
        assert response.status_code == 400
        assert response.get_json()['error']['message'] == 'Pattern is required'

    def test_invalidate_pattern(self, client, cached_keys, admin_headers):
        response = client.post('/api/admin/cache/invalidate', json={'pattern': 'games:'}, headers=admin_headers)
        body = response.get_json()

        assert body['data'] == {
            'pattern': 'games:',
            'deleted': 2,
            'message': 'Cache invalidated for pattern: games:',
        }
        assert 'games:trending:10' not in cached_keys.store
        assert 'game:slug:veloren' in cached_keys.store

    def test_invalidate_pattern_from_query(self, client, cached_keys, admin_headers):
        body = client.post('/api/admin/cache/invalidate?pattern=stats:', headers=admin_headers).get_json()
        assert body['data']['deleted'] == 1

    def test_invalidate_game_group(self, client, cached_keys, admin_headers):
        body = client.post('/api/admin/cache/invalidate', json={'pattern': 'games'}, headers=admin_headers).get_json()
        assert body['data']['deleted'] == 5
        assert list(cached_keys.store) == ['unrelated']

    def test_invalidate_single_key(self, client, cached_keys, admin_headers):
        body = client.post('/api/admin/cache/invalidate', json={'key': 'stats:all'},
                           headers=admin_headers).get_json()
        assert body['data'] == {'key': 'stats:all', 'deleted': 1}

        body = client.post('/api/admin/cache/invalidate', json={'key': 'stats:all'},
                           headers=admin_headers).get_json()
        assert body['data']['deleted'] == 0

    def test_clear_all(self, client, cached_keys, admin_headers):
        response = client.delete('/api/admin/cache', headers=admin_headers)
        assert response.get_json()['data'] == {'deleted': 6, 'message': 'All cache cleared'}
        assert cached_keys.store == {}

    def test_invalidation_forces_a_fresh_listing(self, client, seed_games, fake_redis, admin_headers):
        seed_games([make_payload('alpha', stars=10)])
        assert client.get('/api/games').headers['X-Cache'] == 'MISS'
        assert client.get('/api/games').headers['X-Cache'] == 'HIT'

        client.post('/api/admin/cache/invalidate', json={'pattern': 'games'}, headers=admin_headers)
        assert client.get('/api/games').headers['X-Cache'] == 'MISS'


class TestSearchIndexEndpoint:

    def test_requires_store(self, storeless_client, admin_headers):
        response = storeless_client.post('/api/admin/search-index', headers=admin_headers)
        assert response.status_code == 500
        assert response.get_json()['error'] == {'code': 'INTERNAL_ERROR', 'message': 'Database is not configured'}

    @requires_fts5
    def test_rebuild(self, client, seed_games, cached_keys, admin_headers):
        seed_games([make_payload('alpha'), make_payload('bravo')])
        response = client.post('/api/admin/search-index', headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()['data'] == {'indexed': 2, 'invalidated': 1}
        assert 'search:voxel:abc:1:20' not in cached_keys.store
