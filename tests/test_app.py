"""Tests for application startup: schema upgrade, key backfill and logging."""

import logging
import re
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, inspect, text

from bookmarks_api import create_app
from bookmarks_api.config import TestConfig
from bookmarks_api.extensions import db
from bookmarks_api.models import User
from bookmarks_api.services.errors import GenerationError

HEX_KEY = re.compile(r'^[0-9a-f]{64}$')


@pytest.fixture
def legacy_db_url(tmp_path):
    """A SQLite file whose users table predates the api_key column."""
    url = f'sqlite:///{tmp_path / "legacy.db"}'
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(text(
            'CREATE TABLE users ('
            'id INTEGER PRIMARY KEY AUTOINCREMENT, '
            'name VARCHAR(255) NOT NULL, '
            'email VARCHAR(255) NOT NULL UNIQUE)'
        ))
        conn.execute(text(
            "INSERT INTO users (name, email) VALUES "
            "('Ada', 'ada@example.com'), ('Grace', 'grace@example.com')"
        ))
    engine.dispose()
    return url


def _legacy_config(url, backfill=True):
    class LegacyConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = url
        BACKFILL_API_KEYS_ON_STARTUP = backfill
    return LegacyConfig


class TestStartupSchemaUpgrade:
    def test_adds_api_key_column_and_backfills(self, legacy_db_url):
        application = create_app(_legacy_config(legacy_db_url))

        with application.app_context():
            users = db.session.query(User).order_by(User.id).all()
            assert [u.email for u in users] == ['ada@example.com', 'grace@example.com']
            for user in users:
                assert HEX_KEY.match(user.api_key)
            assert users[0].api_key != users[1].api_key
            db.session.remove()

    def test_creates_bookmarks_table(self, legacy_db_url):
        application = create_app(_legacy_config(legacy_db_url))

        with application.app_context():
            tables = inspect(db.engine).get_table_names()
            assert 'bookmarks' in tables

    def test_backfilled_key_authenticates(self, legacy_db_url):
        application = create_app(_legacy_config(legacy_db_url))

        with application.app_context():
            key = db.session.query(User).filter_by(email='ada@example.com').one().api_key
            db.session.remove()

        with application.test_client() as client:
            resp = client.get('/bookmarks', headers={'Authorization': f'Bearer {key}'})
            assert resp.status_code == 200
            assert resp.get_json()['bookmarks'] == []

    def test_backfill_disabled_leaves_keys_empty(self, legacy_db_url):
        application = create_app(_legacy_config(legacy_db_url, backfill=False))

        with application.app_context():
            assert db.session.query(User).filter(User.api_key.is_(None)).count() == 2
            db.session.remove()

    def test_restart_keeps_existing_keys(self, legacy_db_url):
        first = create_app(_legacy_config(legacy_db_url))
        with first.app_context():
            keys = {u.id: u.api_key for u in db.session.query(User)}
            db.session.remove()

        second = create_app(_legacy_config(legacy_db_url))
        with second.app_context():
            assert {u.id: u.api_key for u in db.session.query(User)} == keys
            db.session.remove()


class TestStartupBackfillFailure:
    def test_app_still_starts(self, legacy_db_url, caplog):
        with patch('bookmarks_api.services.accounts.generate_api_key',
                   side_effect=GenerationError('entropy source exhausted')):
            application = create_app(_legacy_config(legacy_db_url))

        assert application is not None
        assert 'Could not update existing users with API keys' in caplog.text

        with application.app_context():
            assert db.session.query(User).filter(User.api_key.is_(None)).count() == 2
            db.session.remove()

        with application.test_client() as client:
            assert client.get('/healthz').status_code == 200


class TestLogging:
    def test_handler_attached_once_across_apps(self):
        create_app(TestConfig)
        application = create_app(TestConfig)

        stream_handlers = [
            h for h in application.logger.handlers
            if isinstance(h, logging.StreamHandler)
        ]
        assert len(stream_handlers) == 1
