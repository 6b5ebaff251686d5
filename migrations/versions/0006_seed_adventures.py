"""Seed the default adventures

Revision ID: 0006
Revises: 0005
Create Date: 2026-10-19

Only an empty adventures table is seeded. Like every revision this runs
once per database, not on every startup: a database whose adventures were
all deleted after this revision ran is not seeded again. Stamping back to
base and upgrading re-checks the table.
"""
from alembic import op
import sqlalchemy as sa

from adventure_diary.convergence import table_is_empty

revision = '0006'
down_revision = '0005'
branch_labels = None
depends_on = None

DEFAULT_ADVENTURES = [
    {'slug': 'saltmarsh', 'title': 'Ghosts of Saltmarsh',
     'description': 'A coastal adventure.'},
    {'slug': 'pharaoh', 'title': 'Tomb of Annihilation / Pharaoh',
     'description': 'Ancient tombs and curses.'},
]


def upgrade():
    if not table_is_empty('adventures'):
        return
    adventures = sa.table('adventures',
        sa.column('slug', sa.Text()),
        sa.column('title', sa.Text()),
        sa.column('description', sa.Text()),
    )
    op.bulk_insert(adventures, DEFAULT_ADVENTURES)


def downgrade():
    op.execute(sa.text("DELETE FROM adventures WHERE slug IN ('saltmarsh', 'pharaoh')"))
