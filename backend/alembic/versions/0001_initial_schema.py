"""initial schema

Revision ID: 0001
Revises:
Create Date: 2030-01-01 00:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('role', sa.Enum('admin', 'teacher', 'student', name='user_role'), nullable=False, server_default=sa.text("'student'")),
        sa.Column('is_active', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.Text(), unique=True),
        sa.Column('phone', sa.Text()),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    op.create_table(
        'availability',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('weekly_rules', sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column('exceptions', sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('timezone', sa.Text()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    op.create_table(
        'holidays',
        sa.Column('date', sa.Date(), nullable=False, unique=True),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.Text()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    op.create_table(
        'global_settings',
        sa.Column('open_hour', sa.Integer(), nullable=False, server_default=sa.text('9')),
        sa.Column('close_hour', sa.Integer(), nullable=False, server_default=sa.text('21')),
        sa.Column('days_open', sa.Text(), nullable=False, server_default=sa.text("'0,1,2,3,4,5,6'")),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    op.create_table(
        'lessons',
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('starts_at', sa.DateTime(), nullable=False),
        sa.Column('ends_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default=sa.text('60')),
        sa.Column('status', sa.Text(), nullable=False, server_default=sa.text("'scheduled'")),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('attended', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_lessons_teacher_id', 'lessons', ['teacher_id'])
    op.create_index('ix_lessons_student_id', 'lessons', ['student_id'])
    op.create_index('ix_lessons_starts_at', 'lessons', ['starts_at'])

    op.create_table(
        'lesson_requests',
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('starts_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default=sa.text('60')),
        sa.Column('status', sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.Text(), nullable=False, server_default=sa.text("'Scheduled Lesson'")),
        sa.Column('lesson_id', sa.Integer(), sa.ForeignKey('lessons.id', ondelete='SET NULL')),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_lesson_requests_teacher_id', 'lesson_requests', ['teacher_id'])
    op.create_index('ix_lesson_requests_student_id', 'lesson_requests', ['student_id'])

    op.create_table(
        'scheduling_logs',
        sa.Column('algorithm', sa.Text(), nullable=False),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('window_start', sa.DateTime()),
        sa.Column('window_end', sa.DateTime()),
        sa.Column('suggestions', sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column('meta', sa.Text()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_scheduling_logs_teacher_id', 'scheduling_logs', ['teacher_id'])
    op.create_index('ix_scheduling_logs_student_id', 'scheduling_logs', ['student_id'])
    op.create_index('ix_scheduling_logs_created_at', 'scheduling_logs', ['created_at'])


def downgrade():
    op.drop_table('scheduling_logs')
    op.drop_table('lesson_requests')
    op.drop_table('lessons')
    op.drop_table('global_settings')
    op.drop_table('holidays')
    op.drop_table('availability')
    op.drop_table('users')
