"""Initial schema - organizations, teams, projects and membership edges

Revision ID: 0001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Organizations table
    op.create_table(
        'organizations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('org_name', sa.String(255), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Teams table
    op.create_table(
        'teams',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('team_name', sa.String(255), nullable=False),
        sa.Column('org_id', sa.Uuid(), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_by', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Projects table
    op.create_table(
        'projects',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('project_name', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('org_id', sa.Uuid(), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_by', sa.Uuid(), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Membership edges table (both directions of every membership)
    op.create_table(
        'membership_edges',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('kind', sa.String(32), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('peer_id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.String(32), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, default=0),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('kind', 'owner_id', 'peer_id', name='uq_membership_edges_kind_owner_peer'),
    )
    op.create_index('ix_membership_edges_owner', 'membership_edges', ['kind', 'owner_id', 'position'])
    op.create_index('ix_membership_edges_peer', 'membership_edges', ['kind', 'peer_id'])

    # Timeline events table (append-only)
    op.create_table(
        'timeline_events',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('org_id', sa.Uuid(), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(64), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('actor_id', sa.Uuid(), nullable=True),
        sa.Column('subject_id', sa.Uuid(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('org_id', 'sequence', name='uq_timeline_events_org_sequence'),
    )
    op.create_index('ix_timeline_events_subject', 'timeline_events', ['subject_id'])


def downgrade() -> None:
    op.drop_index('ix_timeline_events_subject', table_name='timeline_events')
    op.drop_table('timeline_events')
    op.drop_index('ix_membership_edges_peer', table_name='membership_edges')
    op.drop_index('ix_membership_edges_owner', table_name='membership_edges')
    op.drop_table('membership_edges')
    op.drop_table('projects')
    op.drop_table('teams')
    op.drop_table('organizations')
    op.drop_table('users')
