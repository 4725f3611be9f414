"""Tests for map tokens and the one-token-per-character rule."""

import pytest


@pytest.fixture
def game_map(make_map):
    return make_map()


def place(client, map_id, character_id, **fields):
    body = {'label': 'T', 'x': 0, 'y': 0, 'character_id': character_id}
    body.update(fields)
    return client.post(f'/api/maps/{map_id}/tokens', json=body)


class TestCreateToken:

    def test_dm_places_a_token(self, dm, game_map, make_character):
        character = make_character()
        resp = place(dm, game_map['id'], character['id'], label='Ike', x=3, y=4)
        token = resp.get_json()['token']
        assert (token['x'], token['y']) == (3, 4)
        assert token['color'] == '#f43f5e'
        assert token['character']['name'] == 'Ike'

    def test_character_from_another_campaign(self, dm, game_map):
        other = dm.post('/api/campaigns', json={'name': 'Elsewhere'}).get_json()['campaign']['id']
        stranger = dm.post(f'/api/campaigns/{other}/characters', json={'name': 'Stranger'})
        resp = place(dm, game_map['id'], stranger.get_json()['character']['id'])
        assert resp.status_code == 404
        assert resp.get_json()['error'] == 'Character not found in campaign'

    def test_one_token_per_character(self, dm, make_map, make_character):
        first, second = make_map(name='First'), make_map(name='Second')
        character = make_character()
        assert place(dm, first['id'], character['id']).status_code == 200
        resp = place(dm, second['id'], character['id'])
        assert resp.status_code == 409
        assert dm.get(f'/api/maps/{second["id"]}/tokens').get_json()['tokens'] == []

    def test_negative_coordinates(self, dm, game_map, make_character):
        character = make_character()
        assert place(dm, game_map['id'], character['id'], x=-1).status_code == 400

    def test_players_cannot_place(self, player, game_map, make_character):
        character = make_character(owner_id=player.user['id'])
        assert place(player, game_map['id'], character['id']).status_code == 403


class TestUpdateToken:

    def test_partial_update(self, dm, game_map, make_character):
        character = make_character()
        token = place(dm, game_map['id'], character['id'], label='Ike', color='#00ff00').get_json()['token']
        resp = dm.put(f'/api/tokens/{token["id"]}', json={'x': 9})
        updated = resp.get_json()['token']
        assert updated['x'] == 9
        assert updated['label'] == 'Ike'
        assert updated['color'] == '#00ff00'

    def test_rebind_to_another_character(self, dm, game_map, make_character):
        ike, soren = make_character(name='Ike'), make_character(name='Soren')
        token = place(dm, game_map['id'], ike['id']).get_json()['token']
        resp = dm.put(f'/api/tokens/{token["id"]}', json={'character_id': soren['id']})
        assert resp.get_json()['token']['character']['name'] == 'Soren'

        # Ike is free again
        assert place(dm, game_map['id'], ike['id']).status_code == 200

    def test_rebind_to_a_character_with_a_token(self, dm, game_map, make_character):
        ike, soren = make_character(name='Ike'), make_character(name='Soren')
        token = place(dm, game_map['id'], ike['id']).get_json()['token']
        place(dm, game_map['id'], soren['id'])
        resp = dm.put(f'/api/tokens/{token["id"]}', json={'character_id': soren['id']})
        assert resp.status_code == 409

    def test_players_cannot_update_over_rest(self, player, dm, game_map, make_character):
        character = make_character(owner_id=player.user['id'])
        token = place(dm, game_map['id'], character['id']).get_json()['token']
        assert player.put(f'/api/tokens/{token["id"]}', json={'x': 1}).status_code == 403


class TestListDelete:

    def test_members_list_tokens_in_creation_order(self, dm, player, game_map, make_character):
        for name in ('Ike', 'Mist', 'Titania'):
            character = make_character(name=name)
            place(dm, game_map['id'], character['id'], label=name)
        tokens = player.get(f'/api/maps/{game_map["id"]}/tokens').get_json()['tokens']
        assert [t['label'] for t in tokens] == ['Ike', 'Mist', 'Titania']

    def test_delete(self, dm, game_map, make_character):
        character = make_character()
        token = place(dm, game_map['id'], character['id']).get_json()['token']
        assert dm.delete(f'/api/tokens/{token["id"]}').get_json() == {'ok': True}
        assert dm.get(f'/api/maps/{game_map["id"]}/tokens').get_json()['tokens'] == []
        assert dm.delete(f'/api/tokens/{token["id"]}').status_code == 404
