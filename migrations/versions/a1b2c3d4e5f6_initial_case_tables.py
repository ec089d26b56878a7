"""initial tables: users, cases, witnesses, panel, mediation sessions,
scheduled transitions, faq answers

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 10:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1b2c3d4e5f6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('age', sa.Integer, nullable=False),
        sa.Column('gender', sa.String(10), nullable=False),
        sa.Column('street', sa.String(255), nullable=False),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('zip_code', sa.String(20), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(15), nullable=False),
        sa.Column('photo', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'cases',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('case_type', sa.String(20), nullable=False),
        sa.Column('issue_description', sa.Text, nullable=False),
        sa.Column('party_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('opposite_party_name', sa.String(255), nullable=False),
        sa.Column('opposite_party_contact', sa.String(255), nullable=False),
        sa.Column('opposite_party_address', sa.Text, nullable=False),
        sa.Column('opposite_party_has_accepted', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('opposite_party_notified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('response_deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('proof', sa.JSON, nullable=False),
        sa.Column('court_is_pending', sa.Boolean, nullable=True),
        sa.Column('court_case_number', sa.String(100), nullable=True),
        sa.Column('court_fir_number', sa.String(100), nullable=True),
        sa.Column('court_or_police_name', sa.String(255), nullable=True),
        sa.Column('status', sa.String(30), nullable=False, server_default='Queued'),
        sa.Column('is_resolved', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('agreement', sa.Text, nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('satisfaction_level', sa.Integer, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_cases_party_id', 'cases', ['party_id'])
    op.create_index('ix_cases_case_type', 'cases', ['case_type'])
    op.create_index('ix_cases_status', 'cases', ['status'])
    op.create_index('ix_cases_is_resolved', 'cases', ['is_resolved'])

    op.create_table(
        'witnesses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('case_id', sa.Uuid(), sa.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('contact', sa.String(255), nullable=True),
        sa.Column('role', sa.String(100), nullable=True),
        sa.Column('nominated_by', sa.String(20), nullable=True),
    )
    op.create_index('ix_witnesses_case_id', 'witnesses', ['case_id'])

    op.create_table(
        'panel_members',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('case_id', sa.Uuid(), sa.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('expertise', sa.String(255), nullable=False),
        sa.Column('contact', sa.String(255), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_panel_members_case_id', 'panel_members', ['case_id'])

    op.create_table(
        'mediation_sessions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('case_id', sa.Uuid(), sa.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='scheduled'),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('attendees', sa.JSON, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_mediation_sessions_case_id', 'mediation_sessions', ['case_id'])

    op.create_table(
        'scheduled_transitions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('case_id', sa.Uuid(), sa.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False),
        sa.Column('from_status', sa.String(30), nullable=False),
        sa.Column('to_status', sa.String(30), nullable=False),
        sa.Column('due_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('state', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('reason', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_scheduled_transitions_case_id', 'scheduled_transitions', ['case_id'])
    op.create_index('ix_scheduled_transitions_due_at', 'scheduled_transitions', ['due_at'])
    op.create_index('ix_scheduled_transitions_state', 'scheduled_transitions', ['state'])

    op.create_table(
        'faq_answers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('query', sa.String(1000), nullable=False),
        sa.Column('answer', sa.Text, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_faq_answers_query', 'faq_answers', ['query'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_faq_answers_query', table_name='faq_answers')
    op.drop_table('faq_answers')
    op.drop_index('ix_scheduled_transitions_state', table_name='scheduled_transitions')
    op.drop_index('ix_scheduled_transitions_due_at', table_name='scheduled_transitions')
    op.drop_index('ix_scheduled_transitions_case_id', table_name='scheduled_transitions')
    op.drop_table('scheduled_transitions')
    op.drop_index('ix_mediation_sessions_case_id', table_name='mediation_sessions')
    op.drop_table('mediation_sessions')
    op.drop_index('ix_panel_members_case_id', table_name='panel_members')
    op.drop_table('panel_members')
    op.drop_index('ix_witnesses_case_id', table_name='witnesses')
    op.drop_table('witnesses')
    op.drop_index('ix_cases_is_resolved', table_name='cases')
    op.drop_index('ix_cases_status', table_name='cases')
    op.drop_index('ix_cases_case_type', table_name='cases')
    op.drop_index('ix_cases_party_id', table_name='cases')
    op.drop_table('cases')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
