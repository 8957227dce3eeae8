"""
Tests for YAML settings and environment overrides
"""
import pytest

from opengames import settings
from opengames.constants import DEFAULT_SETTINGS


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    for env_var in ('DATABASE_URL', 'REDIS_URL', 'ADMIN_API_KEY', 'LOG_LEVEL', 'LOG_FORMAT',
                    'RATELIMIT_DEFAULT', 'SITE_URL', 'GITHUB_TOKEN'):
        monkeypatch.delenv(env_var, raising=False)
    yield
    monkeypatch.undo()
    settings.reload_conf()


def test_defaults_without_file(tmp_path):
    loaded = settings.load_settings(force=True, config_file=str(tmp_path / 'missing.yaml'))
    assert loaded == DEFAULT_SETTINGS


def test_file_is_merged_over_defaults(tmp_path):
    path = tmp_path / 'settings.yaml'
    path.write_text('database:\n  url: sqlite:///games.db\nlogging:\n  format: json\n')

    loaded = settings.load_settings(force=True, config_file=str(path))
    assert loaded['database']['url'] == 'sqlite:///games.db'
    assert loaded['logging'] == {'level': 'INFO', 'format': 'json'}
    assert loaded['cache'] == DEFAULT_SETTINGS['cache']


def test_environment_wins_over_file(tmp_path, monkeypatch):
    path = tmp_path / 'settings.yaml'
    path.write_text('admin:\n  api_key: from-file\n')
    monkeypatch.setenv('ADMIN_API_KEY', 'from-env')

    loaded = settings.load_settings(force=True, config_file=str(path))
    assert loaded['admin']['api_key'] == 'from-env'


def test_settings_are_cached(tmp_path):
    first = settings.load_settings(force=True, config_file=str(tmp_path / 'missing.yaml'))
    assert settings.load_settings() is first


def test_defaults_are_not_mutated(tmp_path):
    loaded = settings.load_settings(force=True, config_file=str(tmp_path / 'missing.yaml'))
    loaded['database']['url'] = 'changed'
    assert DEFAULT_SETTINGS['database']['url'] == ''
