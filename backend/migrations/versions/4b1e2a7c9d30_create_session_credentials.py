"""create session credentials

Revision ID: 4b1e2a7c9d30
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '4b1e2a7c9d30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'session_credentials',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('credential_digest', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('device_info', sa.Text(), nullable=True),
        sa.Column('client_address', sa.String(length=45), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_session_credentials')),
    )
    op.create_index(
        'ix_session_credentials_user_id_created_at',
        'session_credentials',
        ['user_id', 'created_at'],
    )
    op.create_index('ix_session_credentials_expires_at', 'session_credentials', ['expires_at'])


def downgrade():
    op.drop_index('ix_session_credentials_expires_at', table_name='session_credentials')
    op.drop_index('ix_session_credentials_user_id_created_at', table_name='session_credentials')
    op.drop_table('session_credentials')
