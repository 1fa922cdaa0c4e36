"""Community, membership and invite models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, validates

from enclave.core.extensions import db

from .base import PKMixin, ReprMixin, SoftDeleteMixin, TimestampMixin, UTCDateTime, utcnow


class CommunityPrivacy(str, Enum):
    """Whether joining needs an invite code."""

    PUBLIC = "Public"
    PRIVATE = "Private"


class CommunityRole(str, Enum):
    """Roles a member can hold inside one community."""

    MEMBER = "Member"
    MODERATOR = "Moderator"
    OWNER = "Owner"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Community(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    A named group owned by exactly one user.

    ``member_count`` mirrors the number of active memberships and is only
    changed through an atomic increment in the same transaction as the
    membership write.
    """

    __tablename__ = "communities"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    privacy: Mapped[CommunityPrivacy] = mapped_column(
        SAEnum(
            CommunityPrivacy,
            name="community_privacy",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    owner_id: Mapped[str] = mapped_column(String(32), ForeignKey("users.id"), nullable=False)
    member_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        CheckConstraint("member_count >= 0", name="member_count_non_negative"),
        Index("ix_communities_privacy_created_at", "privacy", "created_at"),
        Index("ix_communities_owner_id", "owner_id"),
    )

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Community name is required.")
        return value.strip()


class CommunityMember(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    A user's membership in a community.

    At most one non-deleted row may exist per ``(community_id, user_id)``;
    the partial unique index enforces it even under concurrent joins.
    """

    __tablename__ = "community_members"

    community_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("communities.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[CommunityRole] = mapped_column(
        SAEnum(
            CommunityRole,
            name="community_role",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=CommunityRole.MEMBER,
    )
    joined_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    __table_args__ = (
        Index(
            "uq_community_members_active",
            "community_id",
            "user_id",
            unique=True,
            sqlite_where=text("is_deleted = 0"),
            postgresql_where=text("NOT is_deleted"),
        ),
        Index("ix_community_members_user_id", "user_id"),
    )


class CommunityInvite(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A redeemable code granting entry to a private community.

    ``uses_count`` never exceeds ``max_uses``; redemption increments it with
    a conditional update so concurrent joins cannot overshoot the bound.
    """

    __tablename__ = "community_invites"

    community_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("communities.id", ondelete="CASCADE"), nullable=False
    )
    invite_code: Mapped[str] = mapped_column(String(32), nullable=False)
    created_by_user_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("users.id"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    max_uses: Mapped[int | None] = mapped_column(Integer, nullable=True)
    uses_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("invite_code", name="uq_community_invites_invite_code"),
        CheckConstraint(
            "max_uses IS NULL OR uses_count <= max_uses", name="uses_within_max"
        ),
        Index("ix_community_invites_community_id", "community_id"),
    )
