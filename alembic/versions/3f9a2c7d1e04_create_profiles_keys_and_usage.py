"""create profiles, verified api keys and api usage

Revision ID: 3f9a2c7d1e04
Revises: 
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a2c7d1e04'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=64), nullable=False, comment='Opaque user id issued by the identity provider'),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('credits', sa.Integer(), nullable=False, comment='Remaining credit balance (free plan only)'),
        sa.Column('plan', sa.Enum('free', 'creator', 'pro', 'agency', name='plantier', native_enum=False, length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('credits >= 0', name=op.f('ck_profiles_credits_non_negative')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_profiles'))
    )
    op.create_index(op.f('ix_profiles_email'), 'profiles', ['email'], unique=False)

    op.create_table(
        'verified_api_keys',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('service', sa.Enum('gemini', 'undetectable', 'sapling', 'resend', 'phantom', 'apify', 'uploadPost', name='servicename', native_enum=False, length=32), nullable=False),
        sa.Column('api_key', sa.Text(), nullable=False, comment='Encrypted secret'),
        sa.Column('status', sa.Enum('verified', 'unverified', name='credentialstatus', native_enum=False, length=20), nullable=False),
        sa.Column('tested_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('extra_params', sa.JSON(), nullable=False, comment='Auxiliary parameters, e.g. senderEmail or phantomId'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], name=op.f('fk_verified_api_keys_user_id_profiles'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_verified_api_keys')),
        sa.UniqueConstraint('user_id', 'service', name='uq_verified_api_keys_user_service')
    )
    op.create_index(op.f('ix_verified_api_keys_user_id'), 'verified_api_keys', ['user_id'], unique=False)

    op.create_table(
        'api_usage',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('service', sa.String(length=64), nullable=False, comment="Operation label, e.g. 'credits' or 'content_upload'"),
        sa.Column('credits_used', sa.Integer(), nullable=False),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], name=op.f('fk_api_usage_user_id_profiles'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_api_usage'))
    )
    op.create_index(op.f('ix_api_usage_user_id'), 'api_usage', ['user_id'], unique=False)
    op.create_index(op.f('ix_api_usage_timestamp'), 'api_usage', ['timestamp'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_api_usage_timestamp'), table_name='api_usage')
    op.drop_index(op.f('ix_api_usage_user_id'), table_name='api_usage')
    op.drop_table('api_usage')
    op.drop_index(op.f('ix_verified_api_keys_user_id'), table_name='verified_api_keys')
    op.drop_table('verified_api_keys')
    op.drop_index(op.f('ix_profiles_email'), table_name='profiles')
    op.drop_table('profiles')
