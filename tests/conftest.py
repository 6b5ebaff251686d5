"""Pytest setup: every test gets its own SQLite file under tmp_path."""
import sqlite3

import pytest

from adventure_diary import create_app


def make_app(database_file, **overrides):
    config = {
        'TESTING': True,
        'DATABASE_FILE': str(database_file),
        'AUTO_MIGRATE': True,
        'RATELIMIT_ENABLED': False,
    }
    config.update(overrides)
    return create_app(config)


def run_sql(database_file, script):
    """Run raw SQL against a database file outside the app (legacy fixtures)."""
    conn = sqlite3.connect(str(database_file))
    try:
        conn.executescript(script)
        conn.commit()
    finally:
        conn.close()


def query(database_file, sql, params=()):
    conn = sqlite3.connect(str(database_file))
    try:
        return conn.execute(sql, params).fetchall()
    finally:
        conn.close()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / 'campaign.db'


@pytest.fixture
def app(db_path):
    return make_app(db_path)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def adventure(client):
    """The first seeded adventure."""
    return client.get('/api/adventures').get_json()[0]
