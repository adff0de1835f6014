"""create users and oauth providers

Revision ID: 4b1e0c9a7d21
Revises:
Create Date: 2024-05-09 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '4b1e0c9a7d21'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=254), nullable=False),
        sa.Column('confirmed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('role', sa.Enum('USER', 'ADMIN', name='user_role', native_enum=False, length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'oauth_providers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('provider', sa.Enum('GOOGLE', 'GITHUB', 'FACEBOOK', name='oauth_provider_type', native_enum=False, length=16), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='fk_oauth_providers_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_oauth_providers'),
        sa.UniqueConstraint('provider', 'email', name='uq_oauth_providers_provider_email'),
    )
    op.create_index('ix_oauth_providers_user_id', 'oauth_providers', ['user_id'])


def downgrade():
    op.drop_index('ix_oauth_providers_user_id', table_name='oauth_providers')
    op.drop_table('oauth_providers')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
