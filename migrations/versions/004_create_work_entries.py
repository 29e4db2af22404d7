"""Create work_entries table and track employees' last submission

Revision ID: 004_create_work_entries
Revises: 003_create_work_tracker
Create Date: 2026-10-16

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision = '004_create_work_entries'
down_revision = '003_create_work_tracker'
branch_labels = None
depends_on = None


def upgrade():
    """Create work_entries table"""
    op.add_column('employees', sa.Column('last_submission_at', sa.DateTime(), nullable=True))

    op.create_table(
        'work_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'employee_id',
            sa.Integer(),
            sa.ForeignKey('employees.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('arrival_time', sa.String(10), nullable=False),
        sa.Column('weekday', sa.String(15), nullable=True),
        sa.Column('entries', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('total_hours', sa.Float(), nullable=False, server_default='0'),
        sa.Column('submitted_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('submission_source', sa.String(50), nullable=False, server_default='tracker-form'),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('employee_id', 'entry_date', name='uq_work_entries_employee_date'),
    )
    op.create_index('ix_work_entries_employee_id', 'work_entries', ['employee_id'])
    op.create_index('ix_work_entries_entry_date', 'work_entries', ['entry_date'])


def downgrade():
    """Drop work_entries table"""
    op.drop_index('ix_work_entries_entry_date', table_name='work_entries')
    op.drop_index('ix_work_entries_employee_id', table_name='work_entries')
    op.drop_table('work_entries')
    op.drop_column('employees', 'last_submission_at')
