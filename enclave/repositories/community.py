"""Community repository."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update

from enclave.models.community import Community, CommunityMember, CommunityPrivacy, CommunityRole
from enclave.repositories.base import BaseRepository, Page, Pagination, apply_sorting, paginate_select


class CommunityRepository(BaseRepository[Community]):
    """Persistence for :class:`Community`, including the member counter."""

    model = Community

    def _sortable_fields(self):
        return {
            "created_at": Community.created_at,
            "name": Community.name,
            "member_count": Community.member_count,
        }

    def _filterable_fields(self):
        return {
            "privacy": Community.privacy,
            "owner_id": Community.owner_id,
        }

    def _updatable_fields(self):
        return {"name", "description", "cover_image_url", "tags"}

    def list_public(self, pagination: Pagination) -> Page[Community]:
        """Page through public communities, newest first by default."""
        sort = pagination.sort or ["-created_at"]
        return self.paginate(
            Pagination(page=pagination.page, limit=pagination.limit, sort=sort),
            filters={"privacy": CommunityPrivacy.PUBLIC},
        )

    def list_for_user(
        self, user_id: str, pagination: Pagination
    ) -> Page[tuple[Community, CommunityRole]]:
        """Page through the communities ``user_id`` actively belongs to.

        Each item pairs the community with the caller's role in it. Deleted
        memberships and deleted communities are excluded.
        """
        stmt: Any = (
            select(Community, CommunityMember.role)
            .join(CommunityMember, CommunityMember.community_id == Community.id)
            .where(
                CommunityMember.user_id == user_id,
                CommunityMember.is_deleted.is_(False),
                Community.is_deleted.is_(False),
            )
        )
        stmt = apply_sorting(
            stmt,
            self._sortable_fields(),
            pagination.sort or ["-created_at"],
            pk_attr=Community.id,
        )
        rows, total = paginate_select(
            self.session,
            stmt,
            page=pagination.page,
            limit=pagination.limit,
            scalars=False,
        )
        return Page(items=rows, total=total, page=pagination.page, limit=pagination.limit)

    def adjust_member_count(self, community: Community, delta: int) -> int:
        """Atomically add ``delta`` to the counter and return the new value.

        The increment happens in SQL (``member_count = member_count + :delta``)
        so concurrent joins and leaves never lose updates.
        """
        stmt = (
            update(Community)
            .where(Community.id == community.id)
            .values(member_count=Community.member_count + delta)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(stmt)
        self.session.refresh(community, ["member_count"])
        return community.member_count
