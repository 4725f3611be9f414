"""Shared fixtures for the API test suite.

Each test gets a fresh app on an in-memory SQLite database. Users are
separate Flask test clients, each carrying its own session cookie. No app
context stays pushed while requests run, so every request resolves its own
logged-in user.
"""

import itertools

import pytest

from config import Config
from tactics import create_app, db
from tactics.models import GameClass, Item, Skill, CATEGORY_WEAPON, CATEGORY_ITEM


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    RATELIMIT_ENABLED = False
    INVENTORY_CAPACITY = 8
    MAX_TILES = 4096


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def register(app):
    """Factory: register a new user and return a client logged in as them.

    The returned client carries the user's JSON as client.user.
    """
    counter = itertools.count(1)

    def _register(display_name=None):
        n = next(counter)
        client = app.test_client()
        resp = client.post('/api/auth/register', json={
            'email': f'user{n}@example.com',
            'password': 'secret-password',
            'display_name': display_name or f'User {n}',
        })
        assert resp.status_code == 200, resp.get_json()
        client.user = resp.get_json()['user']
        return client

    return _register


@pytest.fixture
def dm(register):
    return register('Dungeon Master')


@pytest.fixture
def player(register):
    return register('Player One')


@pytest.fixture
def other_player(register):
    return register('Player Two')


@pytest.fixture
def outsider(register):
    return register('Outsider')


@pytest.fixture
def campaign(dm, player, other_player):
    """A campaign run by dm with player and other_player as PLAYER members."""
    resp = dm.post('/api/campaigns', json={'name': 'Path of Radiance'})
    campaign_id = resp.get_json()['campaign']['id']
    for member in (player, other_player):
        resp = dm.post(f'/api/campaigns/{campaign_id}/members',
                       json={'email': member.user['email'], 'role': 'PLAYER'})
        assert resp.status_code == 200
    return campaign_id


@pytest.fixture
def catalog(app):
    """Seed a small class, item and skill catalog. Returns ids by name."""
    with app.app_context():
        skills = [Skill(name='Vantage', description='Strike first when HP is low'),
                  Skill(name='Canto'), Skill(name='Wrath')]
        classes = [
            GameClass(name='Swordmaster', skills=['Vantage', 'Astra']),
            GameClass(name='Cat', skills=[]),
            GameClass(name='Paladin', skills=['Canto']),
        ]
        items = [
            Item(name='Iron Sword', type='sword', category=CATEGORY_WEAPON, uses=46, might=5),
            Item(name='Steel Lance', type='lance', category=CATEGORY_WEAPON, uses=30, might=8),
            Item(name='Vulnerary', type='item', category=CATEGORY_ITEM, uses=3),
            Item(name='Cat Claw', type='laguz', category=CATEGORY_WEAPON,
                 class_restriction='Cat'),
        ]
        db.session.add_all(skills + classes + items)
        db.session.commit()
        return {
            'skills': {s.name: s.id for s in skills},
            'items': {i.name: i.id for i in items},
        }


@pytest.fixture
def make_character(dm, campaign):
    """Factory: create a character in the campaign as the DM."""
    def _make(**fields):
        body = {'name': 'Ike', 'stats': {'hp': 20, 'str': 7}}
        body.update(fields)
        resp = dm.post(f'/api/campaigns/{campaign}/characters', json=body)
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()['character']
    return _make


@pytest.fixture
def make_map(dm, campaign):
    def _make(**fields):
        body = {'name': 'Gallia Border', 'image_url': 'https://example.com/map.png'}
        body.update(fields)
        resp = dm.post(f'/api/campaigns/{campaign}/maps', json=body)
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()['map']
    return _make
