"""Create employees and tracker_settings tables

Revision ID: 003_create_work_tracker
Revises: 002_create_primary_invitations
Create Date: 2026-09-15

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision = '003_create_work_tracker'
down_revision = '002_create_primary_invitations'
branch_labels = None
depends_on = None


def upgrade():
    """Create work tracker tables"""
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('designation', sa.String(150), nullable=True),
        sa.Column('department', sa.String(150), nullable=True),
        sa.Column('employee_code', sa.String(50), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('tracker_token', sa.String(100), nullable=True),
        sa.Column('tracker_token_expires_at', sa.DateTime(), nullable=True),
        sa.Column('last_reminder_sent_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_employees_email', 'employees', ['email'], unique=True)
    op.create_index('ix_employees_status', 'employees', ['status'])
    op.create_index('ix_employees_tracker_token', 'employees', ['tracker_token'], unique=True)

    op.create_table(
        'tracker_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('cron_status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('cron_time', sa.String(5), nullable=False, server_default='18:00'),
        sa.Column('timezone', sa.String(64), nullable=False, server_default='Asia/Kolkata'),
        sa.Column(
            'days_active',
            JSONB(),
            nullable=False,
            server_default=sa.text('\'["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]\'::jsonb'),
        ),
        sa.Column('email_subject', sa.String(255), nullable=False, server_default='Daily Work Tracker Reminder'),
        sa.Column('additional_recipients', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('updated_by', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )


def downgrade():
    """Drop work tracker tables"""
    op.drop_table('tracker_settings')
    op.drop_index('ix_employees_tracker_token', table_name='employees')
    op.drop_index('ix_employees_status', table_name='employees')
    op.drop_index('ix_employees_email', table_name='employees')
    op.drop_table('employees')
