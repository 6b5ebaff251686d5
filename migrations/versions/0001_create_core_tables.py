"""Create core tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Tables that already exist are left as they are; 0002 and later bring older
shapes up to date. characters starts with the columns every generation of
the diary had; the character sheet columns are added by 0002.
"""
from alembic import op
import sqlalchemy as sa

from adventure_diary.convergence import has_table

revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

CURRENT_TIMESTAMP = sa.text('CURRENT_TIMESTAMP')


def _adventure_id():
    return sa.Column('adventure_id', sa.Integer(),
                     sa.ForeignKey('adventures.id', ondelete='SET NULL'), nullable=True)


def upgrade():
    if not has_table('adventures'):
        op.create_table('adventures',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('slug', sa.Text(), unique=True),
            sa.Column('title', sa.Text()),
            sa.Column('description', sa.Text()),
            sqlite_autoincrement=True
        )

    if not has_table('sessions'):
        op.create_table('sessions',
            sa.Column('id', sa.Integer(), primary_key=True),
            _adventure_id(),
            sa.Column('title', sa.Text()),
            sa.Column('date', sa.Text()),
            sa.Column('text', sa.Text()),
            sqlite_autoincrement=True
        )

    if not has_table('characters'):
        op.create_table('characters',
            sa.Column('id', sa.Integer(), primary_key=True),
            _adventure_id(),
            sa.Column('name', sa.Text()),
            sa.Column('role', sa.Text()),
            sa.Column('description', sa.Text()),
            sa.Column('tags', sa.Text()),
            sqlite_autoincrement=True
        )

    if not has_table('locations'):
        op.create_table('locations',
            sa.Column('id', sa.Integer(), primary_key=True),
            _adventure_id(),
            sa.Column('name', sa.Text()),
            sa.Column('description', sa.Text()),
            sa.Column('notes', sa.Text()),
            sa.Column('tags', sa.Text()),
            sqlite_autoincrement=True
        )

    if not has_table('global_notes'):
        op.create_table('global_notes',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('title', sa.Text()),
            sa.Column('text', sa.Text()),
            sa.Column('created_at', sa.Text(), server_default=CURRENT_TIMESTAMP),
            sqlite_autoincrement=True
        )

    if not has_table('quests'):
        op.create_table('quests',
            sa.Column('id', sa.Integer(), primary_key=True),
            _adventure_id(),
            sa.Column('title', sa.Text(), nullable=False),
            sa.Column('description', sa.Text()),
            sa.Column('status', sa.Text(), server_default='active'),
            sa.Column('priority', sa.Text(), server_default='medium'),
            sa.Column('type', sa.Text(), server_default='main'),
            sa.Column('due_date', sa.Text()),
            sa.Column('assigned_to', sa.Text()),
            sa.Column('tags', sa.Text()),
            sa.Column('created_at', sa.Text(), server_default=CURRENT_TIMESTAMP),
            sa.Column('updated_at', sa.Text(), server_default=CURRENT_TIMESTAMP),
            sqlite_autoincrement=True
        )

    if not has_table('quest_objectives'):
        op.create_table('quest_objectives',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('quest_id', sa.Integer(),
                      sa.ForeignKey('quests.id', ondelete='CASCADE'), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('completed', sa.Boolean(), server_default=sa.text('0')),
            sa.Column('created_at', sa.Text(), server_default=CURRENT_TIMESTAMP),
            sa.Column('updated_at', sa.Text(), server_default=CURRENT_TIMESTAMP),
            sqlite_autoincrement=True
        )


def downgrade():
    for table in ('quest_objectives', 'quests', 'global_notes', 'locations',
                  'characters', 'sessions', 'adventures'):
        if has_table(table):
            op.drop_table(table)
