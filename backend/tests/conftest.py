"""
Pytest fixtures for CargoBid backend tests.

Provides the app on an in-memory database, per-test table cleanup, one user
per role and bearer-token headers for each.
"""

import pytest

from cargobid import create_app
from cargobid.extensions import db
from cargobid.services import auth_service


TEST_PASSWORD = "Password123!"

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SECRET_KEY': 'test-session-secret',
    'JWT_SECRET': 'test-jwt-secret',
    'ALLOW_SEED_PASSWORD': True,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function', autouse=True)
def db_session(app):
    """Fresh data for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture
def make_user(db_session):
    """Factory: create a user with TEST_PASSWORD."""
    def _make(username, role, name=None, company_id=None):
        return auth_service.create_user(
            username=username,
            password=TEST_PASSWORD,
            name=name or username.split("@")[0].title(),
            role=role,
            company_id=company_id,
        )
    return _make


@pytest.fixture
def login(app):
    """
    Log in on a throwaway client and return the bearer token.

    A separate client keeps the session cookie out of the test's own client.
    """
    def _login(username, password=TEST_PASSWORD):
        resp = app.test_client().post('/api/login', json={
            'username': username,
            'password': password,
        })
        assert resp.status_code == 200, resp.get_data(as_text=True)
        return resp.get_json()['token']
    return _login


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_user(make_user):
    return make_user("admin@platform.com", "admin", name="Admin User")


@pytest.fixture
def client_user(make_user):
    return make_user("alice@x.com", "client", name="Alice")


@pytest.fixture
def other_client_user(make_user):
    return make_user("carol@z.com", "client", name="Carol")


@pytest.fixture
def carrier_user(make_user):
    return make_user("bob@y.com", "carrier", name="Bob")


@pytest.fixture
def other_carrier_user(make_user):
    return make_user("dave@w.com", "carrier", name="Dave")


@pytest.fixture
def auditor_user(make_user):
    return make_user("auditor@platform.com", "auditor", name="Auditor")


@pytest.fixture
def admin_headers(admin_user, login):
    return auth_headers(login(admin_user.username))


@pytest.fixture
def client_headers(client_user, login):
    return auth_headers(login(client_user.username))


@pytest.fixture
def other_client_headers(other_client_user, login):
    return auth_headers(login(other_client_user.username))


@pytest.fixture
def carrier_headers(carrier_user, login):
    return auth_headers(login(carrier_user.username))


@pytest.fixture
def other_carrier_headers(other_carrier_user, login):
    return auth_headers(login(other_carrier_user.username))


@pytest.fixture
def auditor_headers(auditor_user, login):
    return auth_headers(login(auditor_user.username))


@pytest.fixture
def open_quote(client, client_headers):
    """A quote posted by client_user, as returned by the API."""
    resp = client.post('/api/quotes', json={
        'origin': 'São Paulo',
        'destination': 'Rio',
        'weight': 100,
        'cargoType': 'General',
    }, headers=client_headers)
    assert resp.status_code == 201
    return resp.get_json()
