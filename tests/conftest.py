import pytest

from bookmarks_api import create_app
from bookmarks_api.config import TestConfig
from bookmarks_api.extensions import db as _db
from bookmarks_api.services.accounts import create_account


@pytest.fixture
def app():
    """Create a test Flask application with SQLite in-memory database."""
    application = create_app(TestConfig)

    with application.app_context():
        _db.create_all()

        yield application

        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def session(app):
    return _db.session


@pytest.fixture
def account(session):
    """An account created through the store, with its issued API key."""
    return create_account(session, 'Ada', 'ada@example.com')


@pytest.fixture
def auth_headers(account):
    return {'Authorization': f'Bearer {account.api_key}'}
