"""
Tests for /api/search and the search service
"""
from unittest.mock import patch

import pytest
from prometheus_client import REGISTRY

from opengames.exceptions import DatastoreError, DatastoreErrorKind
from opengames.query_params import FilterSet, Pagination
from opengames.repositories.search_repository import SearchRepository, build_match_expression
from opengames.services import search_service
from tests.conftest import make_payload, requires_fts5


@pytest.fixture
def searchable(seed_games):
    return seed_games([
        make_payload('veloren', title='Veloren', description='Multiplayer voxel RPG', stars=5200,
                     topics=['voxel', 'rpg']),
        make_payload('minetest', title='Minetest', description='Voxel game engine', stars=10200,
                     topics=['voxel', 'sandbox'], platforms=['Windows', 'Linux', 'Android']),
        make_payload('freeciv', title='Freeciv', description='Turn-based empire building', stars=900,
                     topics=['strategy']),
    ])


class TestQueryValidation:
    """Tests for query validation on GET /api/search"""

    @pytest.mark.parametrize('query, message', [
        ('', 'Query parameter is required'),
        ('a', 'Query must be at least 2 characters'),
    ])
    def test_rejected(self, client, query, message):
        response = client.get(f'/api/search?q={query}')
        assert response.status_code == 400
        assert response.get_json() == {'error': {'code': 'BAD_REQUEST', 'message': message}}
        assert response.headers['Cache-Control'] == 'no-store'

    def test_missing_parameter(self, client):
        assert client.get('/api/search').status_code == 400

    def test_two_characters_accepted(self, client, searchable):
        response = client.get('/api/search?q=ab')
        assert response.status_code == 200
        assert response.get_json()['data']['results'] == []


class TestSubstringSearch:
    """Without the full-text table the store answers with a substring scan"""

    def test_search_without_index(self, client, searchable):
        before = REGISTRY.get_sample_value('opengames_search_fallback_total')
        response = client.get('/api/search?q=voxel')
        body = response.get_json()

        assert response.status_code == 200
        assert body['data']['query'] == 'voxel'
        assert [r['slug'] for r in body['data']['results']] == ['minetest', 'veloren']
        assert body['meta'] == {'total': 2, 'page': 1, 'pageSize': 20, 'hasMore': False}
        assert response.headers['Cache-Control'] == 'public, max-age=60, stale-while-revalidate=300'
        assert REGISTRY.get_sample_value('opengames_search_fallback_total') == before + 1

    def test_filters_apply(self, client, searchable):
        body = client.get('/api/search?q=voxel&platform=android').get_json()
        assert [r['slug'] for r in body['data']['results']] == ['minetest']
        assert body['data']['filters'] == {'platforms': ['android']}

    def test_matches_topics(self, client, searchable):
        body = client.get('/api/search?q=strategy').get_json()
        assert [r['slug'] for r in body['data']['results']] == ['freeciv']

    def test_cached_results_echo_each_query(self, client, searchable, fake_redis):
        first = client.get('/api/search?q=Voxel')
        second = client.get('/api/search?q=voxel')

        assert first.headers['X-Cache'] == 'MISS'
        assert second.headers['X-Cache'] == 'HIT'
        assert first.get_json()['data']['query'] == 'Voxel'
        assert second.get_json()['data']['query'] == 'voxel'
        assert second.get_json()['data']['results'] == first.get_json()['data']['results']

    def test_other_datastore_errors_propagate(self, app, searchable):
        failure = DatastoreError(DatastoreErrorKind.QUERY_FAILED, 'disk I/O error')
        with patch.object(SearchRepository, 'search', side_effect=failure), \
                patch.object(SearchRepository, 'search_substring') as substring:
            with pytest.raises(DatastoreError) as excinfo:
                search_service.search('voxel', FilterSet(), Pagination())
        assert excinfo.value.kind is DatastoreErrorKind.QUERY_FAILED
        substring.assert_not_called()

    def test_other_datastore_errors_are_500(self, client, searchable):
        failure = DatastoreError(DatastoreErrorKind.QUERY_FAILED, 'disk I/O error')
        with patch.object(SearchRepository, 'search', side_effect=failure):
            response = client.get('/api/search?q=voxel')
        assert response.status_code == 500
        assert response.get_json()['error']['code'] == 'INTERNAL_ERROR'
        assert 'disk' not in response.get_data(as_text=True)


@requires_fts5
class TestFullTextSearch:
    """Tests with the games_fts table provisioned"""

    def test_rebuild_and_search(self, app, client, searchable):
        assert search_service.rebuild_search_index() == 3

        body = client.get('/api/search?q=voxel').get_json()
        slugs = [r['slug'] for r in body['data']['results']]
        assert sorted(slugs) == ['minetest', 'veloren']
        assert all('<mark>' in r['highlight'] for r in body['data']['results'])

    def test_prefix_terms(self, app, client, searchable):
        search_service.rebuild_search_index()
        body = client.get('/api/search?q=empi').get_json()
        assert [r['slug'] for r in body['data']['results']] == ['freeciv']

    def test_index_used(self, app, searchable):
        search_service.rebuild_search_index()
        result = search_service.search('voxel', FilterSet(), Pagination())
        assert result.index_used is True
        assert result.total == 2


class TestSuggestions:
    """Tests for suggest=true"""

    def test_short_prefix_returns_empty_list(self, client, searchable):
        response = client.get('/api/search?suggest=true&q=v')
        assert response.status_code == 200
        assert response.get_json() == {'data': []}

    def test_prefix_suggestions(self, client, searchable):
        body = client.get('/api/search?suggest=true&q=mi').get_json()
        assert body == {'data': [{'title': 'Minetest', 'slug': 'minetest'}]}

    def test_suggestions_without_store(self, storeless_client):
        body = storeless_client.get('/api/search?suggest=true&q=MIN').get_json()
        assert body['data'] == [
            {'title': 'Mindustry', 'slug': 'mindustry'},
            {'title': 'Minetest', 'slug': 'minetest'},
        ]


class TestStorelessSearch:

    def test_searches_fallback_dataset(self, storeless_client):
        body = storeless_client.get('/api/search?q=voxel').get_json()
        assert [r['slug'] for r in body['data']['results']] == ['minetest', 'veloren']

    def test_rebuild_requires_store(self, storeless_app):
        with pytest.raises(DatastoreError) as excinfo:
            search_service.rebuild_search_index()
        assert excinfo.value.kind is DatastoreErrorKind.NOT_CONFIGURED


def test_match_expression():
    assert build_match_expression('voxel rpg') == '"voxel"* "rpg"*'
    assert build_match_expression('""quoted""') == '"""quoted"""*'
