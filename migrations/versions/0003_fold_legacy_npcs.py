"""Fold the legacy npcs table into characters

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-19

npcs is renamed to characters_temp before its rows are moved, and each row
is deleted from characters_temp in the same transaction that inserts it into
characters. If a run dies part way, the next run finds characters_temp and
moves whatever is still there, so rows are never lost or duplicated.

NPCs keep their id unless a different character already has it; those get
a fresh id.
"""
import logging

from alembic import op
import sqlalchemy as sa

from adventure_diary.convergence import column_names, has_table

revision = '0003'
down_revision = '0002'
branch_labels = None
depends_on = None

logger = logging.getLogger('alembic.runtime.migration')

STAGING_TABLE = 'characters_temp'
COPIED_COLUMNS = ('id', 'adventure_id', 'name', 'role', 'description', 'tags')
# Rows equal on these were already copied by an older run
MATCHED_COLUMNS = ('name', 'role', 'description', 'tags')


def _insert(bind, row, keep_id):
    columns = [col for col in COPIED_COLUMNS if keep_id or col != 'id']
    bind.execute(sa.text(
        f'INSERT INTO characters ({", ".join(columns)}, character_type) '
        f"VALUES ({', '.join(':' + col for col in columns)}, 'npc')"
    ), {col: row[col] for col in columns})


def _discard(bind, row):
    bind.execute(sa.text(f'DELETE FROM {STAGING_TABLE} WHERE id = :id'), {'id': row['id']})


def upgrade():
    if has_table('npcs'):
        op.rename_table('npcs', STAGING_TABLE)

    if not has_table(STAGING_TABLE):
        return

    bind = op.get_bind()
    # Very old npcs tables may predate some of these columns
    available = column_names(STAGING_TABLE)
    source = ', '.join(col if col in available else f'NULL AS {col}' for col in COPIED_COLUMNS)
    rows = bind.execute(sa.text(
        f'SELECT {source} FROM {STAGING_TABLE} ORDER BY id')).mappings().all()

    copied = renumbered = 0
    colliding = []
    for row in rows:
        existing = bind.execute(sa.text(
            f'SELECT {", ".join(MATCHED_COLUMNS)} FROM characters WHERE id = :id'
        ), {'id': row['id']}).mappings().first()
        if existing is None:
            _insert(bind, row, keep_id=True)
            copied += 1
        elif any(existing[col] != row[col] for col in MATCHED_COLUMNS):
            colliding.append(row)
            continue
        _discard(bind, row)

    # Fresh ids are handed out after every NPC that keeps its id is in place
    for row in colliding:
        _insert(bind, row, keep_id=False)
        _discard(bind, row)
        logger.warning('NPC %r had id %s, which a character already uses; gave it a new id',
                       row['name'], row['id'])
        renumbered += 1

    logger.info('Copied %d legacy NPC rows into characters (%d with new ids)',
                copied + renumbered, renumbered)
    op.drop_table(STAGING_TABLE)


def downgrade():
    # One-way: folded NPCs are ordinary characters now
    pass
