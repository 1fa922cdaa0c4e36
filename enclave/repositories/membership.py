"""Community membership repository."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from enclave.models.community import CommunityMember
from enclave.repositories.base import BaseRepository, count_rows


class CommunityMemberRepository(BaseRepository[CommunityMember]):
    """Persistence for :class:`CommunityMember`; reads see active rows only."""

    model = CommunityMember

    def _sortable_fields(self):
        return {"joined_at": CommunityMember.joined_at, "role": CommunityMember.role}

    def _filterable_fields(self):
        return {
            "community_id": CommunityMember.community_id,
            "user_id": CommunityMember.user_id,
            "role": CommunityMember.role,
        }

    def _updatable_fields(self):
        return {"role"}

    def get_membership(self, community_id: str, user_id: str) -> CommunityMember | None:
        """Return the active membership of ``user_id`` in ``community_id``."""
        stmt = self._base_select().where(
            CommunityMember.community_id == community_id,
            CommunityMember.user_id == user_id,
        )
        return cast(CommunityMember | None, self.session.execute(stmt).scalars().first())

    def is_member(self, community_id: str, user_id: str) -> bool:
        return self.get_membership(community_id, user_id) is not None

    def count_for_community(self, community_id: str) -> int:
        stmt = self._apply_equality_filters(self._base_select(), {"community_id": community_id})
        return count_rows(self.session, stmt)

    def list_for_community(self, community_id: str) -> list[CommunityMember]:
        return self.list(filters={"community_id": community_id}, sort=["joined_at"])

    def soft_delete(self, membership: CommunityMember, when: datetime) -> None:
        membership.mark_deleted(when)
        self.flush()
