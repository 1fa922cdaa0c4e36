"""
DTOs for CommunityService.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from enclave.models.community import CommunityPrivacy, CommunityRole
from enclave.services._shared.dto import PageMeta

# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class CommunityCreateIn:
    """
    :param owner_id: Creating user; becomes the sole owner.
    :param name: Display name.
    :param privacy: Public or private.
    :param description: Optional description.
    :param cover_image_url: Optional cover image.
    :param tags: Optional free-form tags.
    """

    owner_id: str
    name: str
    privacy: CommunityPrivacy
    description: str | None = None
    cover_image_url: str | None = None
    tags: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class InviteCreateIn:
    """
    :param community_id: Community the invite opens.
    :param requester_id: Owner or moderator creating it.
    :param max_uses: Redemption bound; ``None`` means unlimited.
    :param expires_in_days: Lifetime in days.
    """

    community_id: str
    requester_id: str
    max_uses: int | None = None
    expires_in_days: int = 7


@dataclass(frozen=True, slots=True)
class JoinIn:
    community_id: str
    user_id: str
    invite_code: str | None = None


@dataclass(frozen=True, slots=True)
class LeaveIn:
    community_id: str
    user_id: str


@dataclass(frozen=True, slots=True)
class RoleUpdateIn:
    """
    :param community_id: Community in which the role changes.
    :param requester_id: User asking for the change.
    :param target_user_id: Member whose role changes.
    :param new_role: Role to assign.
    """

    community_id: str
    requester_id: str
    target_user_id: str
    new_role: CommunityRole


# --------------------------------------------------------------------------- #
# Queries
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class CommunityListIn:
    page: int = 1
    limit: int = 20


# --------------------------------------------------------------------------- #
# Outputs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class CommunityOut:
    """
    Community as seen by one viewer.

    :param current_user_role: The viewer's role, ``None`` for non-members.
    """

    id: str
    name: str
    privacy: CommunityPrivacy
    owner_id: str
    member_count: int
    description: str | None = None
    cover_image_url: str | None = None
    tags: tuple[str, ...] = ()
    created_at: datetime | None = None
    current_user_role: CommunityRole | None = None


@dataclass(frozen=True, slots=True)
class CommunityPageOut:
    items: list[CommunityOut]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class MemberOut:
    user_id: str
    role: CommunityRole
    joined_at: datetime


@dataclass(frozen=True, slots=True)
class InviteOut:
    id: str
    community_id: str
    invite_code: str
    expires_at: datetime
    max_uses: int | None
    uses_count: int
    is_active: bool
    created_by_user_id: str
