"""Add users, listings, collaboration and notification tables

This migration adds:
1. users table (agent/apporteur/guest/admin)
2. properties and search_ads tables
3. collaborations table with the open-collaboration exclusivity index
4. collaboration_activities table (append-only log)
5. collaboration_progress_steps table
6. notifications table

Revision ID: add_collaboration_tables_001
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = 'add_collaboration_tables_001'
down_revision = None
branch_labels = None
depends_on = None

OPEN_STATUS_SQL = "status IN ('pending', 'accepted', 'active')"


def upgrade():
    # 1. Users
    op.create_table('users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255)),
        sa.Column('first_name', sa.String(100)),
        sa.Column('last_name', sa.String(100)),
        sa.Column('phone', sa.String(30)),
        sa.Column('profile_image', sa.String(500)),
        sa.Column('user_type', sa.Enum('agent', 'apporteur', 'guest', 'admin', name='usertype'), nullable=False, server_default='agent'),
        sa.Column('is_email_verified', sa.Boolean, server_default=sa.false()),
        sa.Column('agent_type', sa.Enum('independent', 'commercial', 'employee', name='agenttype'), nullable=True),
        sa.Column('t_card', sa.String(50)),
        sa.Column('siren_number', sa.String(20)),
        sa.Column('rsac_number', sa.String(50)),
        sa.Column('city', sa.String(100)),
        sa.Column('postal_code', sa.String(10)),
        sa.Column('network', sa.String(100)),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # 2. Listings
    op.create_table('properties',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('owner_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('price', sa.Integer),
        sa.Column('city', sa.String(100)),
        sa.Column('postal_code', sa.String(10)),
        sa.Column('main_image', sa.String(500)),
        sa.Column('transaction_type', sa.Enum('Vente', 'Location', name='transactiontypedb'), nullable=False, server_default='Vente'),
        sa.Column('status', sa.Enum('draft', 'active', 'pending', 'sold', 'rented', 'archived', name='propertystatusdb'), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])

    op.create_table('search_ads',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('author_id', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('max_budget', sa.Integer),
        sa.Column('cities', sa.String(500)),
        sa.Column('status', sa.Enum('active', 'paused', 'fulfilled', 'sold', 'rented', 'archived', name='searchadstatusdb'), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_search_ads_author_id', 'search_ads', ['author_id'])

    # 3. Collaborations
    op.create_table('collaborations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('post_id', sa.String(36), nullable=False),
        sa.Column('post_type', sa.Enum('Property', 'SearchAd', name='posttypedb'), nullable=False),
        sa.Column('post_owner_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('collaborator_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),

        # Commercial terms
        sa.Column('proposed_commission', sa.Float, server_default='0'),
        sa.Column('commission', sa.Float),
        sa.Column('compensation_type', sa.Enum('percentage', 'fixed_amount', 'gift_vouchers', name='compensationtypedb'), nullable=True),
        sa.Column('compensation_amount', sa.Float),
        sa.Column('proposal_message', sa.Text),

        # Lifecycle
        sa.Column('status', sa.Enum('pending', 'accepted', 'rejected', 'active', 'completed', 'cancelled', name='collaborationstatusdb'), nullable=False, server_default='pending'),
        sa.Column('current_step', sa.String(50), nullable=False, server_default='proposal'),

        # Contract and signatures
        sa.Column('contract_text', sa.Text),
        sa.Column('additional_terms', sa.Text),
        sa.Column('contract_modified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('contract_last_modified_by', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('contract_last_modified_at', sa.DateTime),
        sa.Column('owner_signed', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('owner_signed_at', sa.DateTime),
        sa.Column('collaborator_signed', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('collaborator_signed_at', sa.DateTime),

        # Completion
        sa.Column('completed_at', sa.DateTime),
        sa.Column('completed_by', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('completed_by_role', sa.Enum('owner', 'collaborator', 'admin', name='participantroledb'), nullable=True),
        sa.Column('completion_reason', sa.Enum(
            'vente_conclue_collaboration', 'vente_conclue_seul', 'bien_retire', 'mandat_expire',
            'client_desiste', 'vendu_tiers', 'sans_suite', name='completionreasondb'), nullable=True),

        sa.Column('version', sa.Integer, nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_collaborations_post_id', 'collaborations', ['post_id'])
    op.create_index('ix_collaborations_post_owner_id', 'collaborations', ['post_owner_id'])
    op.create_index('ix_collaborations_collaborator_id', 'collaborations', ['collaborator_id'])
    op.create_index('ix_collaborations_post_collaborator', 'collaborations', ['post_id', 'collaborator_id'])
    op.create_index(
        'uq_collaborations_open_post', 'collaborations', ['post_id'],
        unique=True,
        postgresql_where=sa.text(OPEN_STATUS_SQL),
        sqlite_where=sa.text(OPEN_STATUS_SQL),
    )

    # 4. Activity log
    op.create_table('collaboration_activities',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('collaboration_id', sa.String(36), sa.ForeignKey('collaborations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sequence', sa.Integer, nullable=False),
        sa.Column('type', sa.Enum('proposal', 'status_update', 'note', 'signing', name='activitytypedb'), nullable=False),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('created_by', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.UniqueConstraint('collaboration_id', 'sequence', name='uq_collaboration_activity_sequence'),
    )

    # 5. Progress steps
    op.create_table('collaboration_progress_steps',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('collaboration_id', sa.String(36), sa.ForeignKey('collaborations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('step_id', sa.String(50), nullable=False),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('completed', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('owner_validated', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('collaborator_validated', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('notes', sa.JSON),
        sa.UniqueConstraint('collaboration_id', 'step_id', name='uq_collaboration_progress_step'),
    )

    # 6. Notifications
    op.create_table('notifications',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('actor_id', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('entity_type', sa.String(50)),
        sa.Column('entity_id', sa.String(36)),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text),
        sa.Column('action_url', sa.String(500)),
        sa.Column('data', sa.JSON),
        sa.Column('read', sa.Boolean, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_user_read', 'notifications', ['user_id', 'read'])


def downgrade():
    op.drop_table('notifications')
    op.drop_table('collaboration_progress_steps')
    op.drop_table('collaboration_activities')
    op.drop_table('collaborations')
    op.drop_table('search_ads')
    op.drop_table('properties')
    op.drop_table('users')

    for enum_name in (
        'completionreasondb', 'participantroledb', 'activitytypedb', 'collaborationstatusdb',
        'compensationtypedb', 'posttypedb', 'searchadstatusdb', 'propertystatusdb',
        'transactiontypedb', 'agenttype', 'usertype',
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
