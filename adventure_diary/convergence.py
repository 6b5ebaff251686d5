"""Bring any existing diary database up to the current schema.

Databases in the wild were created by several generations of the app: some
have NPCs in their own table, some keep magic items per adventure, some are
missing most character sheet columns. Each revision in migrations/versions
checks what the live schema already has before changing it, so the same
chain works on a fresh file, on an old one, and on one that an earlier run
left half-way through.

converge_schema() runs at startup (see create_app). The helpers below are
what the revisions use to look at the live schema.
"""

import logging

import sqlalchemy as sa
from alembic import op
from flask import current_app
from flask_migrate import upgrade

logger = logging.getLogger(__name__)


def converge_schema():
    """Upgrade the app's database to the newest revision. Must run inside an app context."""
    directory = current_app.config['MIGRATIONS_DIR']
    logger.info('Checking database schema (%s)', current_app.config['DATABASE_FILE'])
    upgrade(directory=directory)
    logger.info('Database schema is current')


# -- Helpers for revision scripts ---------------------------------------------
# Call these from inside upgrade()/downgrade(); a fresh inspector is built
# each time so earlier operations in the same revision are visible.

def _inspector():
    return sa.inspect(op.get_bind())


def has_table(name):
    return _inspector().has_table(name)


def column_names(table):
    return {col['name'] for col in _inspector().get_columns(table)}


def index_names(table):
    return {ix['name'] for ix in _inspector().get_indexes(table)}


def indexed_columns(table):
    """Column lists (as tuples) that already have an index on them, whatever its name."""
    return {tuple(ix['column_names']) for ix in _inspector().get_indexes(table)}


def table_is_empty(table):
    row = op.get_bind().execute(sa.text(f'SELECT 1 FROM {table} LIMIT 1')).first()
    return row is None
