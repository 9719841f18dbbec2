"""create kv_store and error_logs tables

Revision ID: 3c9e1f7a2b40
Revises:
Create Date: 2026-10-19 09:12:31.518204

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = '3c9e1f7a2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    conn = op.get_bind()
    inspector = inspect(conn)
    existing_tables = inspector.get_table_names()

    if 'kv_store' not in existing_tables:
        op.create_table('kv_store',
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('value', sa.JSON(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('key')
        )

    if 'error_logs' not in existing_tables:
        op.create_table('error_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('error_type', sa.String(length=128), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=False),
        sa.Column('traceback', sa.Text(), nullable=True),
        sa.Column('request_url', sa.String(length=512), nullable=True),
        sa.Column('request_method', sa.String(length=10), nullable=True),
        sa.Column('request_data', sa.Text(), nullable=True),
        sa.Column('tenant_id', sa.String(length=128), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('status_code', sa.Integer(), nullable=True),
        sa.Column('blueprint', sa.String(length=64), nullable=True),
        sa.Column('endpoint', sa.String(length=128), nullable=True),
        sa.Column('is_resolved', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )
        with op.batch_alter_table('error_logs', schema=None) as batch_op:
            batch_op.create_index('ix_error_logs_error_type', ['error_type'], unique=False)
            batch_op.create_index('ix_error_logs_status_code', ['status_code'], unique=False)
            batch_op.create_index('ix_error_logs_tenant_id', ['tenant_id'], unique=False)
            batch_op.create_index('ix_error_logs_timestamp', ['timestamp'], unique=False)


def downgrade():
    with op.batch_alter_table('error_logs', schema=None) as batch_op:
        batch_op.drop_index('ix_error_logs_timestamp')
        batch_op.drop_index('ix_error_logs_tenant_id')
        batch_op.drop_index('ix_error_logs_status_code')
        batch_op.drop_index('ix_error_logs_error_type')

    op.drop_table('error_logs')
    op.drop_table('kv_store')
