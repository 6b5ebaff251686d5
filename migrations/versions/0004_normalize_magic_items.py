"""Make magic items global and add character ownership

Revision ID: 0004
Revises: 0003
Create Date: 2026-10-19

Older databases scoped magic items to an adventure (magic_items.adventure_id).
Items are now shared across adventures and owned by characters through
character_magic_items. The per-adventure table is rebuilt without the
column; ids are kept so existing ownership rows still point at the right item.
"""
import logging

from alembic import op
import sqlalchemy as sa

from adventure_diary.convergence import column_names, has_table

revision = '0004'
down_revision = '0003'
branch_labels = None
depends_on = None

logger = logging.getLogger('alembic.runtime.migration')

ITEM_COLUMNS = ('id', 'name', 'rarity', 'type', 'description', 'properties',
                'attunement_required')


def _create_magic_items(name):
    op.create_table(name,
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('rarity', sa.Text()),
        sa.Column('type', sa.Text()),
        sa.Column('description', sa.Text()),
        sa.Column('properties', sa.Text()),
        sa.Column('attunement_required', sa.Boolean(), server_default=sa.text('0')),
        sqlite_autoincrement=True
    )


def upgrade():
    if not has_table('magic_items'):
        _create_magic_items('magic_items')
    elif 'adventure_id' in column_names('magic_items'):
        # Left over from a rebuild that didn't finish
        if has_table('magic_items_new'):
            op.drop_table('magic_items_new')
        _create_magic_items('magic_items_new')
        available = column_names('magic_items')
        source = ', '.join(col if col in available else 'NULL' for col in ITEM_COLUMNS)
        result = op.get_bind().execute(sa.text(
            f'INSERT OR REPLACE INTO magic_items_new ({", ".join(ITEM_COLUMNS)}) '
            f'SELECT {source} FROM magic_items'
        ))
        logger.info('Rebuilt magic_items without adventure_id (%d rows)', result.rowcount)
        # Foreign keys are off for the migration run, so the ownership
        # rows survive the drop and point at the rebuilt table afterwards
        op.drop_table('magic_items')
        op.rename_table('magic_items_new', 'magic_items')

    if not has_table('character_magic_items'):
        op.create_table('character_magic_items',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('character_id', sa.Integer(),
                      sa.ForeignKey('characters.id', ondelete='CASCADE'), nullable=False),
            sa.Column('magic_item_id', sa.Integer(),
                      sa.ForeignKey('magic_items.id', ondelete='CASCADE'), nullable=False),
            sa.Column('equipped', sa.Boolean(), server_default=sa.text('0')),
            sa.Column('created_at', sa.Text(), server_default=sa.text('CURRENT_TIMESTAMP')),
            sa.UniqueConstraint('character_id', 'magic_item_id',
                                name='uq_character_magic_item'),
            sqlite_autoincrement=True
        )


def downgrade():
    if has_table('character_magic_items'):
        op.drop_table('character_magic_items')
    # The adventure scoping on magic_items is not restored
