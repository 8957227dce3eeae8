"""
Tests for the opengames command line
"""
import json

import pytest

from opengames import cli
from opengames.models import Game
from tests.conftest import make_payload


class TestLoadPayloads:

    def test_plain_list(self, tmp_path):
        path = tmp_path / 'games.json'
        path.write_text(json.dumps([make_payload('alpha')]))
        assert [p['slug'] for p in cli.load_payloads(str(path))] == ['alpha']

    def test_wrapped_list(self, tmp_path):
        path = tmp_path / 'games.json'
        path.write_text(json.dumps({'games': [make_payload('alpha'), make_payload('bravo')]}))
        assert len(cli.load_payloads(str(path))) == 2

    def test_rejects_other_shapes(self, tmp_path):
        path = tmp_path / 'games.json'
        path.write_text(json.dumps('not a list'))
        with pytest.raises(ValueError):
            cli.load_payloads(str(path))


class TestImportGames:

    def test_skips_invalid_payloads(self, app, fake_redis):
        fake_redis.store['games:popular:20'] = '{}'
        payloads = [
            make_payload('alpha', stars=10),
            make_payload('negative', stars=-1),
            {'id': 'no-title', 'repoUrl': 'https://github.com/owner/no-title'},
            make_payload('bravo', stars='12'),
        ]

        assert cli.import_games(payloads) == (2, 2)
        assert sorted(g.slug for g in Game.query.all()) == ['alpha', 'bravo']
        assert Game.query.filter_by(slug='bravo').one().stars == 12
        assert fake_redis.store == {}

    def test_reimport_updates_in_place(self, app):
        cli.import_games([make_payload('alpha', stars=10)])
        cli.import_games([{**make_payload('alpha', stars=99), 'slug': 'renamed'}])

        game = Game.query.one()
        assert game.stars == 99
        assert game.slug == 'alpha'

    def test_store_rejection_skips_only_that_game(self, app):
        payloads = [
            make_payload('alpha'),
            {**make_payload('alpha'), 'id': 'other-alpha'},
            make_payload('bravo'),
        ]

        assert cli.import_games(payloads) == (2, 1)
        assert sorted(g.id for g in Game.query.all()) == ['owner-alpha', 'owner-bravo']


class TestCommands:

    def test_parser(self):
        args = cli.build_parser().parse_args(['import-games', 'games.json', '--rebuild-index'])
        assert args.func is cli.cmd_import_games
        assert args.file == 'games.json'
        assert args.rebuild_index is True

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_database_commands_need_a_store(self, storeless_app):
        args = cli.build_parser().parse_args(['init-db'])
        assert cli.cmd_init_db(storeless_app, args) == 1

        args = cli.build_parser().parse_args(['rebuild-search-index'])
        assert cli.cmd_rebuild_search_index(storeless_app, args) == 1

    def test_import_command(self, app, tmp_path, capsys):
        path = tmp_path / 'games.json'
        path.write_text(json.dumps([make_payload('alpha'), make_payload('bravo')]))

        args = cli.build_parser().parse_args(['import-games', str(path)])
        assert cli.cmd_import_games(app, args) == 0
        assert 'Imported 2 games (0 skipped)' in capsys.readouterr().out
        assert Game.query.count() == 2

    def test_import_command_missing_file(self, app, tmp_path):
        args = cli.build_parser().parse_args(['import-games', str(tmp_path / 'missing.json')])
        assert cli.cmd_import_games(app, args) == 1
