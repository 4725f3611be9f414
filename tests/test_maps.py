"""Tests for maps, the tile grid invariant and map rolls."""

import pytest


def grid(rows, cols, fill=None):
    return [[fill for _ in range(cols)] for _ in range(rows)]


class TestCreateMap:

    def test_defaults_and_synthesized_grid(self, make_map):
        game_map = make_map()
        assert (game_map['tile_count_x'], game_map['tile_count_y']) == (10, 10)
        assert (game_map['grid_size_x'], game_map['grid_size_y']) == (50, 50)
        assert (game_map['grid_offset_x'], game_map['grid_offset_y']) == (0, 0)
        assert game_map['tile_grid'] == grid(10, 10)

    def test_tile_grid_without_image(self, make_map):
        tiles = grid(6, 5, fill=3)
        game_map = make_map(image_url=None, tile_count_x=5, tile_count_y=6, tile_grid=tiles)
        assert game_map['image_url'] is None
        assert game_map['tile_grid'] == tiles

    def test_needs_image_or_grid(self, dm, campaign):
        resp = dm.post(f'/api/campaigns/{campaign}/maps', json={'name': 'Empty'})
        assert resp.status_code == 400

    @pytest.mark.parametrize('tiles', [grid(5, 5), grid(6, 6), grid(6, 5)[:-1] + [[None] * 4]])
    def test_grid_shape_must_match_counts(self, dm, campaign, tiles):
        resp = dm.post(f'/api/campaigns/{campaign}/maps', json={
            'name': 'Crooked', 'tile_count_x': 5, 'tile_count_y': 6, 'tile_grid': tiles,
        })
        assert resp.status_code == 400
        assert resp.get_json()['details'][0]['field'].startswith('tile_grid')
        assert dm.get(f'/api/campaigns/{campaign}/maps').get_json()['maps'] == []

    @pytest.mark.parametrize('field,value', [
        ('tile_count_x', 4), ('tile_count_y', 201), ('grid_size_x', 9), ('grid_size_y', 201),
    ])
    def test_bounds(self, dm, campaign, field, value):
        resp = dm.post(f'/api/campaigns/{campaign}/maps', json={
            'name': 'Bounds', 'image_url': 'https://example.com/a.png', field: value,
        })
        assert resp.status_code == 400

    def test_image_url_must_be_http_or_image_data(self, dm, campaign):
        resp = dm.post(f'/api/campaigns/{campaign}/maps',
                       json={'name': 'Bad', 'image_url': 'javascript:alert(1)'})
        assert resp.status_code == 400
        resp = dm.post(f'/api/campaigns/{campaign}/maps',
                       json={'name': 'Inline', 'image_url': 'data:image/png;base64,AAAA'})
        assert resp.status_code == 200

    def test_only_the_dm_creates(self, player, campaign):
        resp = player.post(f'/api/campaigns/{campaign}/maps',
                           json={'name': 'Mine', 'image_url': 'https://example.com/a.png'})
        assert resp.status_code == 403


class TestReadMaps:

    def test_list_newest_first(self, player, make_map, campaign):
        make_map(name='First')
        make_map(name='Second')
        maps = player.get(f'/api/campaigns/{campaign}/maps').get_json()['maps']
        assert [m['name'] for m in maps] == ['Second', 'First']

    def test_detail_includes_tokens(self, player, make_map):
        game_map = make_map()
        resp = player.get(f'/api/maps/{game_map["id"]}')
        assert resp.get_json()['map']['tokens'] == []

    def test_outsider_gets_forbidden_not_contents(self, outsider, make_map):
        game_map = make_map()
        resp = outsider.get(f'/api/maps/{game_map["id"]}')
        assert resp.status_code == 403
        assert 'map' not in resp.get_json()

    def test_missing_map(self, dm, campaign):
        assert dm.get('/api/maps/4242').status_code == 404


class TestUpdateMap:

    def test_partial_update_keeps_other_fields(self, dm, make_map):
        game_map = make_map(grid_size_x=32)
        resp = dm.put(f'/api/maps/{game_map["id"]}', json={'name': 'Renamed'})
        updated = resp.get_json()['map']
        assert updated['name'] == 'Renamed'
        assert updated['grid_size_x'] == 32
        assert updated['image_url'] == game_map['image_url']

    def test_resize_with_matching_grid(self, dm, make_map):
        game_map = make_map()
        resp = dm.put(f'/api/maps/{game_map["id"]}',
                      json={'tile_count_x': 7, 'tile_count_y': 8, 'tile_grid': grid(8, 7, 'grass')})
        assert resp.status_code == 200
        assert resp.get_json()['map']['tile_grid'][0] == ['grass'] * 7

    def test_resize_without_grid_breaks_the_invariant(self, dm, make_map):
        game_map = make_map()
        resp = dm.put(f'/api/maps/{game_map["id"]}', json={'tile_count_x': 12})
        assert resp.status_code == 400
        assert dm.get(f'/api/maps/{game_map["id"]}').get_json()['map']['tile_count_x'] == 10

    def test_update_is_audited(self, dm, make_map):
        game_map = make_map()
        dm.put(f'/api/maps/{game_map["id"]}', json={'grid_offset_x': 4})
        logs = dm.get(f'/api/maps/{game_map["id"]}/audit').get_json()['logs']
        assert [log['action'] for log in logs] == ['MAP_UPDATE', 'MAP_CREATE']
        assert logs[0]['before']['grid_offset_x'] == 0
        assert logs[0]['after']['grid_offset_x'] == 4

    def test_players_cannot_update(self, player, make_map):
        game_map = make_map()
        assert player.put(f'/api/maps/{game_map["id"]}', json={'name': 'Nope'}).status_code == 403


class TestDeleteMap:

    def test_delete_cascades_tokens_and_rolls(self, app, dm, make_map, make_character):
        from tactics import db
        from tactics.models import MapRollLog, Token

        game_map = make_map()
        character = make_character()
        dm.post(f'/api/maps/{game_map["id"]}/tokens',
                json={'label': 'Ike', 'x': 1, 'y': 1, 'character_id': character['id']})
        dm.post(f'/api/maps/{game_map["id"]}/rolls', json={'type': 'REGULAR'})

        resp = dm.delete(f'/api/maps/{game_map["id"]}')
        assert resp.get_json() == {'ok': True}
        assert dm.get(f'/api/maps/{game_map["id"]}').status_code == 404

        with app.app_context():
            assert db.session.query(Token).count() == 0
            assert db.session.query(MapRollLog).count() == 0

        # The character survives and can be placed again
        assert dm.get(f'/api/characters/{character["id"]}').status_code == 200


class TestRolls:

    @pytest.fixture
    def dice(self, monkeypatch):
        """Queue the values the next d100 draws will return."""
        queue = []
        monkeypatch.setattr('tactics.dice.roll_die', lambda sides=100: queue.pop(0))
        return queue

    def test_regular_roll(self, player, make_map, dice):
        game_map = make_map()
        dice.extend([77])
        resp = player.post(f'/api/maps/{game_map["id"]}/rolls', json={'type': 'REGULAR'})
        roll = resp.get_json()['roll']
        assert roll['rolls'] == [77]
        assert roll['result'] == 77
        assert roll['user']['id'] == player.user['id']

    @pytest.mark.parametrize('a,b,expected', [(41, 42, 42), (40, 42, 41), (1, 100, 51), (100, 100, 100)])
    def test_combat_roll_rounds_half_up(self, dm, make_map, dice, a, b, expected):
        game_map = make_map()
        dice.extend([a, b])
        roll = dm.post(f'/api/maps/{game_map["id"]}/rolls',
                       json={'type': 'COMBAT'}).get_json()['roll']
        assert roll['rolls'] == [a, b]
        assert roll['result'] == expected

    def test_list_newest_first(self, player, make_map, dice):
        game_map = make_map()
        dice.extend([10, 20])
        player.post(f'/api/maps/{game_map["id"]}/rolls', json={'type': 'REGULAR'})
        player.post(f'/api/maps/{game_map["id"]}/rolls', json={'type': 'REGULAR'})
        rolls = player.get(f'/api/maps/{game_map["id"]}/rolls').get_json()['rolls']
        assert [r['result'] for r in rolls] == [20, 10]

    def test_unknown_type_is_invalid(self, dm, make_map):
        game_map = make_map()
        resp = dm.post(f'/api/maps/{game_map["id"]}/rolls', json={'type': 'CRIT'})
        assert resp.status_code == 400

    def test_outsiders_cannot_roll(self, outsider, make_map):
        game_map = make_map()
        resp = outsider.post(f'/api/maps/{game_map["id"]}/rolls', json={'type': 'REGULAR'})
        assert resp.status_code == 403
