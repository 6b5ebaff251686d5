"""Add lookup indexes

Revision ID: 0005
Revises: 0004
Create Date: 2026-10-19
"""
from alembic import op

from adventure_diary.convergence import index_names, indexed_columns

revision = '0005'
down_revision = '0004'
branch_labels = None
depends_on = None

# (table, column); index name is idx_<table>_<column>. Older databases may
# already index some of these columns under other names (idx_quests_adventure)
INDEXED_COLUMNS = [
    ('characters', 'adventure_id'),
    ('characters', 'name'),
    ('sessions', 'adventure_id'),
    ('sessions', 'date'),
    ('locations', 'adventure_id'),
    ('magic_items', 'rarity'),
    ('magic_items', 'type'),
    ('quests', 'adventure_id'),
    ('quests', 'status'),
    ('quests', 'priority'),
    ('quests', 'type'),
    ('quest_objectives', 'quest_id'),
]


def _index_name(table, column):
    return f'idx_{table}_{column}'


def upgrade():
    for table, column in INDEXED_COLUMNS:
        if (column,) not in indexed_columns(table):
            op.create_index(_index_name(table, column), table, [column])


def downgrade():
    for table, column in reversed(INDEXED_COLUMNS):
        name = _index_name(table, column)
        if name in index_names(table):
            op.drop_index(name, table_name=table)
