"""Initial Campus Connect schema and default event categories

Revision ID: 4e7a1c2b9d10
Revises:
Create Date: 2025-10-01 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from campus_connect.db.seed import DEFAULT_EVENT_CATEGORIES


# revision identifiers, used by Alembic.
revision: str = '4e7a1c2b9d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1) Users
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='student'),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('profile_image_url', sa.String(500), nullable=True),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('account_locked_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.CheckConstraint("role in ('student','mentor','admin')", name='ck_users_role'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # 2) Forum
    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
    )
    op.create_index('idx_questions_user_id', 'questions', ['user_id'])
    op.create_index('idx_questions_created_at', 'questions', ['created_at'])

    op.create_table(
        'answers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('question_id', sa.Integer(), sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_accepted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
    )
    op.create_index('idx_answers_question_id', 'answers', ['question_id'])

    op.create_table(
        'votes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('votable_type', sa.String(20), nullable=False),
        sa.Column('votable_id', sa.Integer(), nullable=False),
        sa.Column('vote_type', sa.String(10), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.UniqueConstraint('user_id', 'votable_type', 'votable_id', name='uq_votes_user_target'),
        sa.CheckConstraint("votable_type in ('question','answer')", name='ck_votes_votable_type'),
        sa.CheckConstraint("vote_type in ('upvote','downvote')", name='ck_votes_vote_type'),
    )
    op.create_index('idx_votes_target', 'votes', ['votable_type', 'votable_id'])

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.UniqueConstraint('name', name='uq_tags_name'),
    )

    op.create_table(
        'question_tags',
        sa.Column('question_id', sa.Integer(), sa.ForeignKey('questions.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('tag_id', sa.Integer(), sa.ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_index('idx_question_tags_tag_id', 'question_tags', ['tag_id'])

    # 3) Mentorship
    op.create_table(
        'mentor_profiles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('skills', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False),
        sa.Column('experience_years', sa.Integer(), nullable=True),
        sa.Column('availability_status', sa.String(20), nullable=False, server_default='available'),
        sa.Column('max_mentees', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.UniqueConstraint('user_id', name='uq_mentor_profiles_user_id'),
        sa.CheckConstraint("availability_status in ('available','busy','unavailable')", name='ck_mentor_profiles_availability'),
        sa.CheckConstraint("max_mentees >= 1", name='ck_mentor_profiles_max_mentees'),
    )

    op.create_table(
        'mentorship_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('mentor_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.CheckConstraint("status in ('pending','accepted','rejected')", name='ck_mentorship_requests_status'),
    )
    op.create_index('idx_mentorship_requests_mentor', 'mentorship_requests', ['mentor_id', 'status'])
    op.create_index('idx_mentorship_requests_student', 'mentorship_requests', ['student_id', 'status'])

    op.create_table(
        'mentorships',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('mentor_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('request_id', sa.Integer(), sa.ForeignKey('mentorship_requests.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status in ('active','completed')", name='ck_mentorships_status'),
    )
    op.create_index('idx_mentorships_mentor_status', 'mentorships', ['mentor_id', 'status'])
    op.create_index('idx_mentorships_student_status', 'mentorships', ['student_id', 'status'])

    # 4) Events
    categories = op.create_table(
        'event_categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.UniqueConstraint('name', name='uq_event_categories_name'),
    )

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('event_categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('event_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('registration_deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('max_participants', sa.Integer(), nullable=True),
        sa.Column('is_approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
    )
    op.create_index('idx_events_event_date', 'events', ['event_date'])
    op.create_index('idx_events_approved_date', 'events', ['is_approved', 'event_date'])

    op.create_table(
        'event_registrations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('registered_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.current_timestamp()),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_registrations_event_user'),
    )

    # 5) Default categories
    op.bulk_insert(
        categories,
        [{'name': name, 'description': description} for name, description in DEFAULT_EVENT_CATEGORIES],
    )


def downgrade() -> None:
    op.drop_table('event_registrations')
    op.drop_index('idx_events_approved_date', table_name='events')
    op.drop_index('idx_events_event_date', table_name='events')
    op.drop_table('events')
    op.drop_table('event_categories')
    op.drop_index('idx_mentorships_student_status', table_name='mentorships')
    op.drop_index('idx_mentorships_mentor_status', table_name='mentorships')
    op.drop_table('mentorships')
    op.drop_index('idx_mentorship_requests_student', table_name='mentorship_requests')
    op.drop_index('idx_mentorship_requests_mentor', table_name='mentorship_requests')
    op.drop_table('mentorship_requests')
    op.drop_table('mentor_profiles')
    op.drop_index('idx_question_tags_tag_id', table_name='question_tags')
    op.drop_table('question_tags')
    op.drop_table('tags')
    op.drop_index('idx_votes_target', table_name='votes')
    op.drop_table('votes')
    op.drop_index('idx_answers_question_id', table_name='answers')
    op.drop_table('answers')
    op.drop_index('idx_questions_created_at', table_name='questions')
    op.drop_index('idx_questions_user_id', table_name='questions')
    op.drop_table('questions')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
