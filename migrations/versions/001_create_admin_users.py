"""Create admin_users table

Revision ID: 001_create_admin_users
Revises:
Create Date: 2026-09-01

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_create_admin_users'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create admin_users table"""
    op.create_table(
        'admin_users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_admin_users_email', 'admin_users', ['email'], unique=True)


def downgrade():
    """Drop admin_users table"""
    op.drop_index('ix_admin_users_email', table_name='admin_users')
    op.drop_table('admin_users')
