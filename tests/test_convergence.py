"""Schema convergence against fresh, current and legacy database files."""
import sqlite3

import pytest
from flask_migrate import stamp, upgrade
from sqlalchemy import inspect, text
from sqlalchemy.exc import DatabaseError

from adventure_diary import db
from conftest import make_app, query, run_sql

HEAD = '0006'

LEGACY_CHARACTERS = """
CREATE TABLE adventures (id INTEGER PRIMARY KEY AUTOINCREMENT, slug TEXT UNIQUE,
                         title TEXT, description TEXT);
CREATE TABLE characters (id INTEGER PRIMARY KEY AUTOINCREMENT,
                         adventure_id INTEGER REFERENCES adventures(id) ON DELETE SET NULL,
                         name TEXT, role TEXT, description TEXT, tags TEXT);
INSERT INTO adventures (id, slug, title) VALUES (1, 'mine', 'My Campaign');
"""


def _columns(app, table):
    with app.app_context():
        return {c['name'] for c in inspect(db.engine).get_columns(table)}


def _tables(app):
    with app.app_context():
        return set(inspect(db.engine).get_table_names())


def test_fresh_database_gets_every_table(app):
    tables = _tables(app)
    for name in ('adventures', 'sessions', 'characters', 'locations', 'global_notes',
                 'magic_items', 'character_magic_items', 'quests', 'quest_objectives',
                 'migration_log', 'alembic_version'):
        assert name in tables
    assert 'npcs' not in tables


def test_fresh_database_is_at_head_with_a_log_row_per_revision(app, db_path):
    assert query(db_path, 'SELECT version_num FROM alembic_version') == [(HEAD,)]
    rows = query(db_path, 'SELECT revision, direction FROM migration_log ORDER BY id')
    assert rows == [(rev, 'upgrade') for rev in ('0001', '0002', '0003', '0004', '0005', '0006')]


def test_fresh_database_is_seeded(db_path, app):
    slugs = [r[0] for r in query(db_path, 'SELECT slug FROM adventures ORDER BY id')]
    assert slugs == ['saltmarsh', 'pharaoh']


def test_restart_is_a_no_op(db_path, app):
    before = query(db_path, 'SELECT COUNT(*) FROM migration_log')
    make_app(db_path)
    make_app(db_path)
    assert query(db_path, 'SELECT COUNT(*) FROM migration_log') == before
    assert query(db_path, 'SELECT COUNT(*) FROM adventures') == [(2,)]


def test_rerunning_every_revision_changes_nothing(app, db_path):
    client = app.test_client()
    client.post('/api/characters', json={'name': 'Vex', 'level': 3})
    schema_before = query(db_path, "SELECT type, name, sql FROM sqlite_master ORDER BY name")

    with app.app_context():
        stamp(directory=app.config['MIGRATIONS_DIR'], revision='base')
        upgrade(directory=app.config['MIGRATIONS_DIR'])

    schema_after = query(db_path, "SELECT type, name, sql FROM sqlite_master ORDER BY name")
    assert schema_after == schema_before
    assert query(db_path, 'SELECT COUNT(*) FROM adventures') == [(2,)]
    assert query(db_path, 'SELECT name, level FROM characters') == [('Vex', 3)]
    directions = [r[0] for r in query(db_path, 'SELECT direction FROM migration_log')]
    assert directions.count('upgrade') == 12
    assert 'stamp' in directions


def test_character_columns_are_backfilled(db_path):
    run_sql(db_path, LEGACY_CHARACTERS + """
        INSERT INTO characters (id, adventure_id, name, role) VALUES (7, 1, 'Old Tom', '');
    """)
    app = make_app(db_path)

    columns = _columns(app, 'characters')
    for name in ('race', 'class', 'level', 'strength', 'spell_save_dc', 'backstory',
                 'character_type', 'personality_traits'):
        assert name in columns

    row = query(db_path, 'SELECT name, level, strength, speed, race, character_type '
                         'FROM characters WHERE id = 7')
    assert row == [('Old Tom', 1, 10, 30, None, 'pc')]
    # An adventure already existed, so nothing is seeded
    assert query(db_path, 'SELECT slug FROM adventures') == [('mine',)]


def test_legacy_npcs_are_folded_into_characters(db_path):
    run_sql(db_path, LEGACY_CHARACTERS + """
        CREATE TABLE npcs (id INTEGER PRIMARY KEY AUTOINCREMENT, adventure_id INTEGER,
                           name TEXT, role TEXT, description TEXT, tags TEXT);
        INSERT INTO characters (id, name) VALUES (1, 'Aria');
        INSERT INTO npcs (id, adventure_id, name, role, tags)
            VALUES (2, 1, 'Eliander', 'Captain', '["navy"]'),
                   (3, 1, 'Skerrin', 'Smuggler', NULL);
    """)
    app = make_app(db_path)

    tables = _tables(app)
    assert 'npcs' not in tables
    assert 'characters_temp' not in tables
    rows = query(db_path, 'SELECT id, name, role, tags, character_type FROM characters ORDER BY id')
    assert rows == [
        (1, 'Aria', None, None, 'pc'),
        (2, 'Eliander', 'Captain', '["navy"]', 'npc'),
        (3, 'Skerrin', 'Smuggler', None, 'npc'),
    ]

    npcs = app.test_client().get('/api/npcs').get_json()
    assert [n['name'] for n in npcs] == ['Eliander', 'Skerrin']
    assert npcs[0]['tags'] == ['navy']


def test_interrupted_npc_fold_resumes(db_path):
    # A previous run renamed npcs and copied one of two rows before dying
    run_sql(db_path, LEGACY_CHARACTERS + """
        CREATE TABLE characters_temp (id INTEGER PRIMARY KEY, adventure_id INTEGER,
                                      name TEXT, role TEXT, description TEXT, tags TEXT);
        INSERT INTO characters_temp (id, name, role) VALUES (4, 'Gellan', 'Mayor'),
                                                            (5, 'Kraddok', 'Priest');
        INSERT INTO characters (id, name, role) VALUES (4, 'Gellan', 'Mayor');
    """)
    app = make_app(db_path)

    assert 'characters_temp' not in _tables(app)
    rows = query(db_path, 'SELECT id, name FROM characters ORDER BY id')
    assert rows == [(4, 'Gellan'), (5, 'Kraddok')]


def test_npc_whose_id_is_taken_gets_a_new_one(db_path):
    run_sql(db_path, LEGACY_CHARACTERS + """
        CREATE TABLE npcs (id INTEGER PRIMARY KEY AUTOINCREMENT, adventure_id INTEGER,
                           name TEXT, role TEXT, description TEXT, tags TEXT);
        INSERT INTO characters (id, name) VALUES (1, 'Aria'), (2, 'Borin');
        INSERT INTO npcs (id, adventure_id, name, role) VALUES (1, 1, 'Eliander', 'Captain'),
                                                               (2, 1, 'Skerrin', 'Smuggler'),
                                                               (3, 1, 'Gellan', 'Mayor');
    """)
    app = make_app(db_path)

    assert 'characters_temp' not in _tables(app)
    rows = query(db_path, 'SELECT id, name, character_type FROM characters ORDER BY id')
    assert len(rows) == 5
    assert rows[:3] == [(1, 'Aria', 'pc'), (2, 'Borin', 'pc'), (3, 'Gellan', 'npc')]
    assert {(name, kind) for _, name, kind in rows[3:]} == {('Eliander', 'npc'),
                                                           ('Skerrin', 'npc')}


def test_adventure_scoped_magic_items_become_global(db_path):
    run_sql(db_path, LEGACY_CHARACTERS + """
        CREATE TABLE magic_items (id INTEGER PRIMARY KEY AUTOINCREMENT,
                                  adventure_id INTEGER REFERENCES adventures(id),
                                  name TEXT NOT NULL, rarity TEXT, type TEXT,
                                  description TEXT, properties TEXT,
                                  attunement_required INTEGER DEFAULT 0);
        CREATE TABLE character_magic_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            character_id INTEGER NOT NULL REFERENCES characters(id) ON DELETE CASCADE,
            magic_item_id INTEGER NOT NULL REFERENCES magic_items(id) ON DELETE CASCADE,
            equipped INTEGER DEFAULT 0,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(character_id, magic_item_id));
        INSERT INTO characters (id, name) VALUES (1, 'Aria');
        INSERT INTO magic_items (id, adventure_id, name, rarity, properties)
            VALUES (10, 1, 'Cloak of Protection', 'uncommon', '{"ac": 1}');
        INSERT INTO character_magic_items (character_id, magic_item_id, equipped)
            VALUES (1, 10, 1);
    """)
    app = make_app(db_path)

    assert 'adventure_id' not in _columns(app, 'magic_items')
    assert 'magic_items_new' not in _tables(app)
    assert query(db_path, 'SELECT id, name, rarity, properties FROM magic_items') == [
        (10, 'Cloak of Protection', 'uncommon', '{"ac": 1}')]
    assert query(db_path, 'SELECT character_id, magic_item_id, equipped '
                          'FROM character_magic_items') == [(1, 10, 1)]

    with app.app_context():
        assert db.session.execute(text('PRAGMA foreign_keys')).scalar() == 1
        assert db.session.execute(text('PRAGMA foreign_key_check')).fetchall() == []

    items = app.test_client().get('/api/characters/1/magic-items').get_json()
    assert [(i['name'], i['equipped']) for i in items] == [('Cloak of Protection', True)]


def test_leftover_rebuild_table_is_replaced(db_path):
    run_sql(db_path, LEGACY_CHARACTERS + """
        CREATE TABLE magic_items (id INTEGER PRIMARY KEY, adventure_id INTEGER,
                                  name TEXT NOT NULL, rarity TEXT, type TEXT,
                                  description TEXT, properties TEXT,
                                  attunement_required INTEGER DEFAULT 0);
        CREATE TABLE magic_items_new (id INTEGER PRIMARY KEY, junk TEXT);
        INSERT INTO magic_items (id, adventure_id, name) VALUES (1, 1, 'Bag of Holding');
    """)
    app = make_app(db_path)

    assert _columns(app, 'magic_items') == {'id', 'name', 'rarity', 'type', 'description',
                                            'properties', 'attunement_required'}
    assert query(db_path, 'SELECT name FROM magic_items') == [('Bag of Holding',)]


def test_lookup_indexes_exist(app):
    with app.app_context():
        inspector = inspect(db.engine)
        names = {ix['name'] for table in ('characters', 'sessions', 'locations', 'magic_items',
                                          'quests', 'quest_objectives')
                 for ix in inspector.get_indexes(table)}
    for expected in ('idx_characters_adventure_id', 'idx_characters_name',
                     'idx_sessions_adventure_id', 'idx_sessions_date',
                     'idx_locations_adventure_id', 'idx_magic_items_rarity',
                     'idx_magic_items_type', 'idx_quests_adventure_id', 'idx_quests_status',
                     'idx_quests_priority', 'idx_quests_type', 'idx_quest_objectives_quest_id'):
        assert expected in names


def test_columns_indexed_under_older_names_are_not_indexed_twice(db_path):
    run_sql(db_path, LEGACY_CHARACTERS + """
        CREATE INDEX idx_characters_adventure ON characters(adventure_id);
    """)
    app = make_app(db_path)

    with app.app_context():
        indexes = inspect(db.engine).get_indexes('characters')
    on_adventure = [ix['name'] for ix in indexes if ix['column_names'] == ['adventure_id']]
    assert on_adventure == ['idx_characters_adventure']
    assert 'idx_characters_name' in {ix['name'] for ix in indexes}


def test_missing_parent_directory_is_created(tmp_path):
    path = tmp_path / 'nested' / 'deeper' / 'diary.db'
    make_app(path)
    assert path.exists()


def test_skip_migrations_leaves_the_file_alone(db_path):
    make_app(db_path, AUTO_MIGRATE=False)
    assert not db_path.exists() or query(db_path, "SELECT name FROM sqlite_master") == []


def test_unreadable_database_stops_startup(db_path):
    db_path.write_bytes(b'this is not a sqlite database' * 100)
    with pytest.raises((DatabaseError, sqlite3.DatabaseError)):
        make_app(db_path)


def test_in_memory_database(tmp_path):
    app = make_app(':memory:')
    response = app.test_client().get('/api/adventures')
    assert response.status_code == 200
    assert len(response.get_json()) == 2
