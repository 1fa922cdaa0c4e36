"""Refresh session repository used by the SQL session ledger."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import update

from enclave.models.refresh_token import RefreshToken
from enclave.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence for :class:`RefreshToken` with conditional revocation."""

    model = RefreshToken

    def _filterable_fields(self):
        return {"user_id": RefreshToken.user_id, "token": RefreshToken.token}

    def _updatable_fields(self):
        return {"is_revoked", "revoked_at", "replaced_by_token"}

    def get_by_token(self, token: str) -> RefreshToken | None:
        stmt = self._base_select().where(RefreshToken.token == token)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def revoke_if_live(
        self,
        token: str,
        *,
        when: datetime,
        replaced_by: str | None = None,
    ) -> bool:
        """Revoke ``token`` only if nobody revoked it first.

        The ``is_revoked = false`` guard makes concurrent rotations of one
        token race on a single row update; exactly one of them wins.

        :param token: Token to revoke.
        :param when: Revocation timestamp.
        :param replaced_by: Successor token recorded on rotation.
        :returns: ``True`` when this call performed the revocation.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == token, RefreshToken.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=when, replaced_by_token=replaced_by)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]

    def revoke_all_for_user(self, user_id: str, *, when: datetime) -> int:
        """Revoke every live session of ``user_id``; returns how many changed."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=when)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)  # type: ignore[attr-defined]
