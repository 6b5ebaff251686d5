"""Backfill character sheet columns

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

Adds whichever of the columns below the characters table is missing.
Existing rows keep their values; new columns take the default.
"""
from alembic import op
import sqlalchemy as sa

from adventure_diary.convergence import column_names

revision = '0002'
down_revision = '0001'
branch_labels = None
depends_on = None


# (name, type, server default) in the order they were added over time
CHARACTER_COLUMNS = [
    ('race', sa.Text(), None),
    ('class', sa.Text(), None),
    ('level', sa.Integer(), sa.text('1')),
    ('background', sa.Text(), None),
    ('alignment', sa.Text(), None),
    ('experience', sa.Integer(), sa.text('0')),
    ('classes', sa.Text(), None),
    ('items', sa.Text(), None),
    ('strength', sa.Integer(), sa.text('10')),
    ('dexterity', sa.Integer(), sa.text('10')),
    ('constitution', sa.Integer(), sa.text('10')),
    ('intelligence', sa.Integer(), sa.text('10')),
    ('wisdom', sa.Integer(), sa.text('10')),
    ('charisma', sa.Integer(), sa.text('10')),
    ('hit_points', sa.Integer(), sa.text('0')),
    ('max_hit_points', sa.Integer(), sa.text('0')),
    ('armor_class', sa.Integer(), sa.text('10')),
    ('initiative', sa.Integer(), sa.text('0')),
    ('speed', sa.Integer(), sa.text('30')),
    ('proficiency_bonus', sa.Integer(), sa.text('2')),
    ('saving_throws', sa.Text(), None),
    ('skills', sa.Text(), None),
    ('equipment', sa.Text(), None),
    ('weapons', sa.Text(), None),
    ('spells', sa.Text(), None),
    ('spellcasting_ability', sa.Text(), None),
    ('spell_save_dc', sa.Integer(), None),
    ('spell_attack_bonus', sa.Integer(), None),
    ('personality_traits', sa.Text(), None),
    ('ideals', sa.Text(), None),
    ('bonds', sa.Text(), None),
    ('flaws', sa.Text(), None),
    ('backstory', sa.Text(), None),
    ('character_type', sa.Text(), 'pc'),
]


def upgrade():
    existing = column_names('characters')
    for name, type_, default in CHARACTER_COLUMNS:
        if name in existing:
            continue
        op.add_column('characters', sa.Column(name, type_, server_default=default))


def downgrade():
    existing = column_names('characters')
    doomed = [name for name, _, _ in CHARACTER_COLUMNS if name in existing]
    if not doomed:
        return
    with op.batch_alter_table('characters') as batch_op:
        for name in reversed(doomed):
            batch_op.drop_column(name)
