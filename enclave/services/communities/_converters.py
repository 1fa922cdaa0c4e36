from __future__ import annotations

from collections.abc import Iterable

from enclave.models.community import Community, CommunityInvite, CommunityMember, CommunityRole
from enclave.services.communities.dto import CommunityOut, InviteOut, MemberOut


def clean_tags(tags: Iterable[str]) -> list[str]:
    """Trim tags, drop empty ones and de-duplicate keeping first occurrence."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for tag in tags:
        value = tag.strip()
        if value and value not in seen:
            seen.add(value)
            cleaned.append(value)
    return cleaned


def to_community_out(community: Community, role: CommunityRole | None) -> CommunityOut:
    return CommunityOut(
        id=community.id,
        name=community.name,
        privacy=community.privacy,
        owner_id=community.owner_id,
        member_count=community.member_count,
        description=community.description,
        cover_image_url=community.cover_image_url,
        tags=tuple(community.tags or ()),
        created_at=community.created_at,
        current_user_role=role,
    )


def to_member_out(member: CommunityMember) -> MemberOut:
    return MemberOut(user_id=member.user_id, role=member.role, joined_at=member.joined_at)


def to_invite_out(invite: CommunityInvite) -> InviteOut:
    return InviteOut(
        id=invite.id,
        community_id=invite.community_id,
        invite_code=invite.invite_code,
        expires_at=invite.expires_at,
        max_uses=invite.max_uses,
        uses_count=invite.uses_count,
        is_active=invite.is_active,
        created_by_user_id=invite.created_by_user_id,
    )
