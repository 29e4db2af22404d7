"""Create primary_invitations and primary_invitation_history tables

Revision ID: 002_create_primary_invitations
Revises: 001_create_admin_users
Create Date: 2026-09-01

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision = '002_create_primary_invitations'
down_revision = '001_create_admin_users'
branch_labels = None
depends_on = None


def upgrade():
    """Create primary invitation tables"""
    op.create_table(
        'primary_invitations',
        sa.Column('id', sa.Integer(), primary_key=True),

        # Recipient
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('admin_name', sa.String(150), nullable=True),

        # Token and lifecycle
        sa.Column('token', sa.String(100), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('invited_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('last_invitation_sent', sa.DateTime(), nullable=True),

        # Form payload
        sa.Column('company_info', JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('applicant_info', JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('inventors', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('comments', sa.Text(), nullable=False, server_default=''),

        # Auto-prefill
        sa.Column('auto_prefill_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            'previous_invitation_id',
            sa.Integer(),
            sa.ForeignKey('primary_invitations.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('locked_fields', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),

        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('ix_primary_invitations_email', 'primary_invitations', ['email'])
    op.create_index('ix_primary_invitations_token', 'primary_invitations', ['token'], unique=True)
    op.create_index('ix_primary_invitations_expires_at', 'primary_invitations', ['expires_at'])
    op.create_index('ix_primary_invitations_status', 'primary_invitations', ['status'])

    # Latest invitation per email, used by prefill and resend
    op.create_index(
        'idx_primary_invitations_email_updated',
        'primary_invitations',
        ['email', 'updated_at']
    )

    op.create_table(
        'primary_invitation_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'invitation_id',
            sa.Integer(),
            sa.ForeignKey('primary_invitations.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('event', sa.String(50), nullable=False),
        sa.Column('context', JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_primary_invitation_history_invitation_id', 'primary_invitation_history', ['invitation_id'])
    op.create_index('ix_primary_invitation_history_event', 'primary_invitation_history', ['event'])


def downgrade():
    """Drop primary invitation tables"""
    op.drop_index('ix_primary_invitation_history_event', table_name='primary_invitation_history')
    op.drop_index('ix_primary_invitation_history_invitation_id', table_name='primary_invitation_history')
    op.drop_table('primary_invitation_history')

    op.drop_index('idx_primary_invitations_email_updated', table_name='primary_invitations')
    op.drop_index('ix_primary_invitations_status', table_name='primary_invitations')
    op.drop_index('ix_primary_invitations_expires_at', table_name='primary_invitations')
    op.drop_index('ix_primary_invitations_token', table_name='primary_invitations')
    op.drop_index('ix_primary_invitations_email', table_name='primary_invitations')
    op.drop_table('primary_invitations')
