"""Community invite repository."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import or_, update

from enclave.models.community import CommunityInvite
from enclave.repositories.base import BaseRepository


class CommunityInviteRepository(BaseRepository[CommunityInvite]):
    """Persistence for :class:`CommunityInvite` with bounded redemption."""

    model = CommunityInvite

    def _sortable_fields(self):
        return {"created_at": CommunityInvite.created_at, "expires_at": CommunityInvite.expires_at}

    def _filterable_fields(self):
        return {
            "community_id": CommunityInvite.community_id,
            "is_active": CommunityInvite.is_active,
        }

    def _updatable_fields(self):
        return {"is_active"}

    def get_by_code(self, code: str) -> CommunityInvite | None:
        stmt = self._base_select().where(CommunityInvite.invite_code == code)
        return cast(CommunityInvite | None, self.session.execute(stmt).scalars().first())

    def code_exists(self, code: str) -> bool:
        return self.get_by_code(code) is not None

    def list_for_community(self, community_id: str, *, active_only: bool = True) -> list[CommunityInvite]:
        filters: dict[str, object] = {"community_id": community_id}
        if active_only:
            filters["is_active"] = True
        return self.list(filters=filters, sort=["-created_at"])

    def redeem(self, invite_id: str, *, now: datetime) -> bool:
        """Consume one use of the invite if it is still redeemable at ``now``.

        Activity, expiry and the use bound are re-checked inside the same
        ``UPDATE`` that increments ``uses_count``, so two joins racing for
        the last use cannot both succeed.

        :returns: ``True`` when a use was consumed.
        """
        stmt = (
            update(CommunityInvite)
            .where(
                CommunityInvite.id == invite_id,
                CommunityInvite.is_active.is_(True),
                CommunityInvite.expires_at > now,
                or_(
                    CommunityInvite.max_uses.is_(None),
                    CommunityInvite.uses_count < CommunityInvite.max_uses,
                ),
            )
            .values(uses_count=CommunityInvite.uses_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]
