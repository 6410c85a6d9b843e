"""recurring lesson series

Revision ID: 0002
Revises: 0001
Create Date: 2030-01-02 00:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = '0002'
down_revision = '0001'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'recurring_series',
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('starts_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default=sa.text('60')),
        sa.Column('freq', sa.Text(), nullable=False, server_default=sa.text("'weekly'")),
        sa.Column('interval', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('count', sa.Integer(), nullable=False, server_default=sa.text('10')),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('by_day', sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_recurring_series_teacher_id', 'recurring_series', ['teacher_id'])
    op.create_index('ix_recurring_series_student_id', 'recurring_series', ['student_id'])

    # SQLite cannot add a foreign key in place
    with op.batch_alter_table('lessons') as batch:
        batch.add_column(sa.Column('series_id', sa.Integer(), nullable=True))
        batch.create_foreign_key(
            'fk_lessons_series_id', 'recurring_series', ['series_id'], ['id'], ondelete='SET NULL'
        )
        batch.create_index('ix_lessons_series_id', ['series_id'])


def downgrade():
    with op.batch_alter_table('lessons') as batch:
        batch.drop_index('ix_lessons_series_id')
        batch.drop_constraint('fk_lessons_series_id', type_='foreignkey')
        batch.drop_column('series_id')

    op.drop_table('recurring_series')
