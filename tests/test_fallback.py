"""
Tests for the in-memory fallback dataset and its equivalence with the store
"""
import threading
import time

import pytest

from opengames.fallback_data import FALLBACK_GAMES, SingleFlightValue, get_fallback_games
from opengames.query_params import FilterSet, Pagination, SortParams
from opengames.repositories.fallback_repository import FallbackRepository
from opengames.repositories.games_repository import GamesRepository
from opengames.repositories.search_repository import SearchRepository
from opengames.services import game_service
from tests.conftest import make_payload


class TestSingleFlightValue:
    """The loader runs once, however many callers race for the first value"""

    def test_concurrent_first_callers_share_one_load(self):
        calls = []
        start = threading.Event()

        def loader():
            calls.append(1)
            time.sleep(0.05)
            return object()

        value = SingleFlightValue(loader, name="test value")
        results = []

        def worker():
            start.wait()
            results.append(value.get())

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        start.set()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert len(results) == 16
        assert all(result is results[0] for result in results)

    def test_reset_forces_a_reload(self):
        calls = []
        value = SingleFlightValue(lambda: calls.append(1) or len(calls), name="counter")
        assert value.get() == 1
        assert value.get() == 1
        value.reset()
        assert value.get() == 2

    def test_fallback_games_are_memoized(self):
        assert get_fallback_games() is get_fallback_games()
        assert len(get_fallback_games()) == len(FALLBACK_GAMES)


class TestStorelessApi:
    """Public endpoints answer from the fallback dataset without a store"""

    def test_list_games(self, storeless_client):
        body = storeless_client.get('/api/games?pageSize=3').get_json()
        assert body['meta']['total'] == len(FALLBACK_GAMES)
        assert [g['slug'] for g in body['data']['games']] == ['mindustry', 'minetest', 'openttd']

    def test_filters(self, storeless_client):
        body = storeless_client.get('/api/games?platform=android&platform=ios').get_json()
        assert sorted(g['slug'] for g in body['data']['games']) == ['mindustry', 'shattered-pixel-dungeon']

        body = storeless_client.get('/api/games?topic=retro&topic=voxel').get_json()
        assert 'shattered-pixel-dungeon' in [g['slug'] for g in body['data']['games']]

    def test_detail(self, storeless_client):
        response = storeless_client.get('/api/games/veloren?include=related')
        body = response.get_json()
        assert response.status_code == 200
        assert body['data']['game']['language'] == 'Rust'
        assert len(body['data']['related']) == 6
        assert storeless_client.get('/api/games/not-there').status_code == 404

    def test_popular_and_recent_lists(self, storeless_app):
        assert [g.slug for g in game_service.get_popular_games(2)] == ['mindustry', 'minetest']
        recent = game_service.get_recently_updated_games(20)
        assert len(recent) == len(FALLBACK_GAMES)
        assert recent[-1].slug == 'freeciv'
        assert all(g.last_commit_at is not None for g in game_service.get_trending_games(20))

    def test_missing_commit_date_sorts_first_ascending(self, storeless_client):
        body = storeless_client.get('/api/games?sort=lastCommit&order=asc&pageSize=1').get_json()
        assert body['data']['games'][0]['slug'] == 'freeciv'


FILTER_CASES = [
    FilterSet(),
    FilterSet(languages=['C++']),
    FilterSet(languages=['C++', 'Java'], is_multiplayer=True),
    FilterSet(min_stars=5000),
    FilterSet(min_stars=4600, max_stars=10200),
    FilterSet(is_multiplayer=False),
    FilterSet(has_release=True),
    FilterSet(topics=['voxel', 'retro']),
    FilterSet(platforms=['android', 'ios']),
    FilterSet(platforms=['web']),
    FilterSet(topics=['multiplayer'], platforms=['windows', 'linux']),
]

SORT_CASES = [
    SortParams('stars', 'desc'),
    SortParams('stars', 'asc'),
    SortParams('title', 'asc'),
    SortParams('lastCommit', 'desc'),
    SortParams('lastCommit', 'asc'),
    SortParams('createdAt', 'desc'),
    SortParams('downloadCount', 'asc'),
]


class TestFallbackEquivalence:
    """Store-backed and fallback paths agree on the same rows"""

    @pytest.fixture
    def seeded(self, seed_games):
        return seed_games(FALLBACK_GAMES)

    @pytest.mark.parametrize('filters', FILTER_CASES)
    def test_same_totals_and_order(self, app, seeded, filters):
        pagination = Pagination(1, 100)
        for sort in SORT_CASES:
            db_items, db_total = GamesRepository.get_paged(filters, pagination, sort)
            fb_items, fb_total = FallbackRepository.get_paged(filters, pagination, sort)
            assert db_total == fb_total
            assert [g.id for g in db_items] == [g.id for g in fb_items], (filters, sort)

    def test_same_pages(self, app, seeded):
        sort = SortParams('stars', 'desc')
        for page in (1, 2, 3):
            pagination = Pagination(page, 3)
            db_items, _ = GamesRepository.get_paged(FilterSet(), pagination, sort)
            fb_items, _ = FallbackRepository.get_paged(FilterSet(), pagination, sort)
            assert [g.id for g in db_items] == [g.id for g in fb_items]

    def test_same_related_games(self, app, seeded):
        for game in get_fallback_games():
            stored = GamesRepository.get_by_slug(game.slug)
            assert [g.id for g in GamesRepository.get_related(stored, 6)] == \
                [g.id for g in FallbackRepository.get_related(game, 6)]

    def test_same_stats(self, app, seeded):
        stored = GamesRepository.get_stats()
        fallback = FallbackRepository.get_stats()
        for key in ('totalGames', 'gamesByLanguage', 'gamesByGenre', 'topStars', 'avgStars'):
            assert stored[key] == fallback[key], key
        assert [g.id for g in stored['recentlyUpdated']] == [g.id for g in fallback['recentlyUpdated']]

    def test_service_reports_its_source(self, app, storeless_app):
        with app.app_context():
            assert game_service.data_source() == 'database'
        with storeless_app.app_context():
            assert game_service.data_source() == 'fallback'


class TestNonAsciiEquivalence:
    """Case folding and topic matching agree for non-ASCII text"""

    @pytest.fixture
    def accented(self, seed_games):
        return seed_games([
            make_payload('elite', title='Élite Dangerous Clone', description='Space trading', stars=300,
                         topics=['Énigme', 'space']),
            make_payload('oetzi', title='Ötzi Adventure', description='ÉLITE climbers only', stars=200,
                         topics=['adventure']),
            make_payload('zebra', title='zebra', description='Stripes', stars=100, topics=['ÉNIGME']),
            make_payload('apple', title='Apple', description='Plain ASCII', stars=100, topics=['puzzle']),
        ])

    @pytest.mark.parametrize('query', ['élite', 'ÉLITE', 'énigme', 'ötzi', '"",', 'space'])
    def test_same_search_results(self, app, accented, query):
        pagination = Pagination(1, 20)
        db_results, db_total = SearchRepository.search_substring(query, FilterSet(), pagination)
        fb_results, fb_total = FallbackRepository.search(query, FilterSet(), pagination, games=accented)

        assert db_total == fb_total
        assert [g.id for g, _ in db_results] == [g.id for g in fb_results]

    def test_accented_query_matches_both_cases(self, app, accented):
        results, total = SearchRepository.search_substring('élite', FilterSet(), Pagination())
        assert total == 2
        assert [g.slug for g, _ in results] == ['elite', 'oetzi']

    def test_json_punctuation_does_not_match(self, app, accented):
        assert SearchRepository.search_substring('"",', FilterSet(), Pagination()) == ([], 0)

    @pytest.mark.parametrize('sort', [SortParams('title', 'asc'), SortParams('title', 'desc')])
    def test_same_topic_filter_and_title_order(self, app, accented, sort):
        for filters in (FilterSet(topics=['énigme']), FilterSet()):
            db_items, db_total = GamesRepository.get_paged(filters, Pagination(1, 20), sort)
            fb_items, fb_total = FallbackRepository.get_paged(filters, Pagination(1, 20), sort, games=accented)
            assert db_total == fb_total
            assert [g.id for g in db_items] == [g.id for g in fb_items]

    def test_title_order_folds_accented_capitals(self, app, accented):
        items, _ = GamesRepository.get_paged(FilterSet(), Pagination(1, 20), SortParams('title', 'asc'))
        assert [g.slug for g in items] == ['apple', 'zebra', 'elite', 'oetzi']
