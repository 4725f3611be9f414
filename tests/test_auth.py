"""Tests for registration, login, logout and the session-bound user."""


class TestRegister:

    def test_register_logs_the_user_in(self, app):
        client = app.test_client()
        resp = client.post('/api/auth/register', json={
            'email': 'Mist@Example.com', 'password': 'secret1', 'display_name': 'Mist',
        })
        assert resp.status_code == 200
        assert resp.get_json()['user']['email'] == 'mist@example.com'

        me = client.get('/api/auth/me')
        assert me.status_code == 200
        assert me.get_json()['user']['display_name'] == 'Mist'

    def test_duplicate_email_is_rejected(self, app, dm):
        client = app.test_client()
        resp = client.post('/api/auth/register', json={
            'email': dm.user['email'], 'password': 'secret1', 'display_name': 'Copy',
        })
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Email already registered'

    def test_short_password_lists_the_field(self, app):
        client = app.test_client()
        resp = client.post('/api/auth/register', json={
            'email': 'a@example.com', 'password': '123', 'display_name': 'Al',
        })
        assert resp.status_code == 400
        fields = [d['field'] for d in resp.get_json()['details']]
        assert 'password' in fields


class TestLogin:

    def test_login_with_valid_credentials(self, app, dm):
        client = app.test_client()
        resp = client.post('/api/auth/login', json={
            'email': dm.user['email'], 'password': 'secret-password',
        })
        assert resp.status_code == 200
        assert client.get('/api/auth/me').get_json()['user']['id'] == dm.user['id']

    def test_wrong_password_is_unauthenticated(self, app, dm):
        client = app.test_client()
        resp = client.post('/api/auth/login', json={
            'email': dm.user['email'], 'password': 'not-the-password',
        })
        assert resp.status_code == 401
        assert resp.get_json() == {'error': 'Invalid credentials'}

    def test_logout_clears_the_session(self, dm):
        assert dm.post('/api/auth/logout').get_json() == {'ok': True}
        assert dm.get('/api/auth/me').status_code == 401


def test_anonymous_requests_get_json_401(app):
    client = app.test_client()
    resp = client.get('/api/campaigns')
    assert resp.status_code == 401
    assert resp.get_json() == {'error': 'Unauthorized'}


def test_unknown_route_is_json_404(app):
    resp = app.test_client().get('/api/nope')
    assert resp.status_code == 404
    assert resp.get_json() == {'error': 'Not found'}
