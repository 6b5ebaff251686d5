import os
import sqlite3

import click
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from sqlalchemy import event
from sqlalchemy.engine import Engine

from config import Config

# App version, reported by /health
APP_VERSION = '1.0.0'

# Create the database object here, but don't attach it to an app yet.
# Each app built by create_app() binds it to its own SQLite file, so tests
# can run against a throwaway database without touching module state.
db = SQLAlchemy()

# Flask-Migrate drives the schema convergence revisions in migrations/.
# render_as_batch lets autogenerated SQLite revisions rebuild tables.
migrate = Migrate()

# Rate limiter for the bulk endpoints (import rewrites every table).
# Uses in-memory storage by default (sufficient for single-server deployment).
limiter = Limiter(key_func=get_remote_address, default_limits=[])


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ships with foreign keys off; ON DELETE SET NULL / CASCADE need them on."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def _sqlite_uri(database_file):
    if database_file == ':memory:':
        return 'sqlite://'
    return 'sqlite:///' + os.path.abspath(database_file)


def create_app(test_config=None):
    """Build the Flask app.

    test_config is an optional dict of config overrides applied on top of
    Config (tests use it to point DATABASE_FILE at a temp file).
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    from adventure_diary.logging_config import configure_logging
    configure_logging(app)

    # The database file path is the only thing callers configure; the URI is
    # always derived from it. Make sure the folder exists before SQLite
    # tries to create the file.
    database_file = app.config['DATABASE_FILE']
    if database_file != ':memory:':
        os.makedirs(os.path.dirname(os.path.abspath(database_file)), exist_ok=True)
    app.config['SQLALCHEMY_DATABASE_URI'] = _sqlite_uri(database_file)

    # Attach the database, migration engine and limiter to this app instance
    db.init_app(app)
    migrate.init_app(app, db, directory=app.config['MIGRATIONS_DIR'],
                     render_as_batch=True)
    limiter.init_app(app)

    # Responses mirror column order rather than alphabetical order
    app.json.sort_keys = False

    from adventure_diary.errors import register_error_handlers
    register_error_handlers(app)

    # Register Blueprints (one per resource)
    from adventure_diary.routes.adventures import adventures_bp
    from adventure_diary.routes.sessions import sessions_bp
    from adventure_diary.routes.characters import characters_bp
    from adventure_diary.routes.npcs import npcs_bp
    from adventure_diary.routes.locations import locations_bp
    from adventure_diary.routes.global_notes import global_notes_bp
    from adventure_diary.routes.magic_items import magic_items_bp
    from adventure_diary.routes.quests import quests_bp
    from adventure_diary.routes.transfer import transfer_bp
    from adventure_diary.routes.search import search_bp

    app.register_blueprint(adventures_bp)
    app.register_blueprint(sessions_bp)
    app.register_blueprint(characters_bp)
    app.register_blueprint(npcs_bp)
    app.register_blueprint(locations_bp)
    app.register_blueprint(global_notes_bp)
    app.register_blueprint(magic_items_bp)
    app.register_blueprint(quests_bp)
    app.register_blueprint(transfer_bp)
    app.register_blueprint(search_bp)

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok', 'version': APP_VERSION})

    # Bring the database file up to the current schema before any request
    # is served. Failures propagate: a half-migrated app must not start.
    if app.config['AUTO_MIGRATE']:
        from adventure_diary.convergence import converge_schema
        with app.app_context():
            converge_schema()

    # CLI command: flask export-json backup.json
    # Writes the same payload as GET /api/export to a file.
    @app.cli.command('export-json')
    @click.argument('path')
    def export_json(path):
        """Dump every table to a JSON file."""
        import json as _json
        from adventure_diary.transfer import export_dataset

        payload = export_dataset()
        with open(path, 'w', encoding='utf-8') as f:
            _json.dump(payload, f, indent=2)
        total = sum(len(rows) for rows in payload.values())
        print(f'Exported {total} rows to {path}.')

    return app
