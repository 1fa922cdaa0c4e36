"""initial schema: users, refresh tokens, communities, memberships, invites

Revision ID: a1f3c9e2d7b4
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = 'a1f3c9e2d7b4'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _soft_delete():
    return [
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('profile_picture_url', sa.String(length=512), nullable=True),
        sa.Column('is_email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        *_soft_delete(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sa.UniqueConstraint('username', name='uq_users_username'),
    )

    op.create_table(
        'refresh_tokens',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('user_id', sa.String(length=32), nullable=False),
        sa.Column('token', sa.String(length=255), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('replaced_by_token', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_refresh_tokens_user_id_users', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_refresh_tokens'),
        sa.UniqueConstraint('token', name='uq_refresh_tokens_token'),
    )
    op.create_index('ix_refresh_tokens_user_id', 'refresh_tokens', ['user_id'])

    op.create_table(
        'communities',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('cover_image_url', sa.String(length=512), nullable=True),
        sa.Column(
            'privacy',
            sa.Enum('Public', 'Private', name='community_privacy', native_enum=False, create_constraint=True),
            nullable=False,
        ),
        sa.Column('owner_id', sa.String(length=32), nullable=False),
        sa.Column('member_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tags', sa.JSON(), nullable=False),
        *_timestamps(),
        *_soft_delete(),
        sa.CheckConstraint('member_count >= 0', name='ck_communities_member_count_non_negative'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], name='fk_communities_owner_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_communities'),
    )
    op.create_index('ix_communities_privacy_created_at', 'communities', ['privacy', 'created_at'])
    op.create_index('ix_communities_owner_id', 'communities', ['owner_id'])

    op.create_table(
        'community_members',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('community_id', sa.String(length=32), nullable=False),
        sa.Column('user_id', sa.String(length=32), nullable=False),
        sa.Column(
            'role',
            sa.Enum('Member', 'Moderator', 'Owner', name='community_role', native_enum=False, create_constraint=True),
            nullable=False,
        ),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        *_soft_delete(),
        sa.ForeignKeyConstraint(
            ['community_id'], ['communities.id'],
            name='fk_community_members_community_id_communities', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_community_members_user_id_users', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_community_members'),
    )
    op.create_index(
        'uq_community_members_active',
        'community_members',
        ['community_id', 'user_id'],
        unique=True,
        sqlite_where=sa.text('is_deleted = 0'),
        postgresql_where=sa.text('NOT is_deleted'),
    )
    op.create_index('ix_community_members_user_id', 'community_members', ['user_id'])

    op.create_table(
        'community_invites',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('community_id', sa.String(length=32), nullable=False),
        sa.Column('invite_code', sa.String(length=32), nullable=False),
        sa.Column('created_by_user_id', sa.String(length=32), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('max_uses', sa.Integer(), nullable=True),
        sa.Column('uses_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint(
            'max_uses IS NULL OR uses_count <= max_uses', name='ck_community_invites_uses_within_max'
        ),
        sa.ForeignKeyConstraint(
            ['community_id'], ['communities.id'],
            name='fk_community_invites_community_id_communities', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['created_by_user_id'], ['users.id'],
            name='fk_community_invites_created_by_user_id_users',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_community_invites'),
        sa.UniqueConstraint('invite_code', name='uq_community_invites_invite_code'),
    )
    op.create_index('ix_community_invites_community_id', 'community_invites', ['community_id'])


def downgrade():
    op.drop_table('community_invites')
    op.drop_index('ix_community_members_user_id', table_name='community_members')
    op.drop_index('uq_community_members_active', table_name='community_members')
    op.drop_table('community_members')
    op.drop_table('communities')
    op.drop_table('refresh_tokens')
    op.drop_table('users')
