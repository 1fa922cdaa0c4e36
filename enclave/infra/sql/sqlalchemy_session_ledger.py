from __future__ import annotations

from datetime import datetime

from enclave.models.refresh_token import RefreshToken
from enclave.services._shared.ports import RotationResult, SessionLedger, SessionRecord
from enclave.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def _to_record(row: RefreshToken) -> SessionRecord:
    return SessionRecord(
        id=row.id,
        token=row.token,
        user_id=row.user_id,
        expires_at=row.expires_at,
        is_revoked=row.is_revoked,
        revoked_at=row.revoked_at,
        replaced_by_token=row.replaced_by_token,
        created_at=row.created_at,
    )


class SQLAlchemySessionLedger(SessionLedger):
    """
    Session ledger stored in the ``refresh_tokens`` table.

    Each call runs in its own unit of work. Rotation revokes the old row with
    a conditional ``UPDATE ... WHERE is_revoked = false`` and inserts the
    successor in the same transaction, so a lost race leaves no trace.

    .. note::
       Requires an active Flask app context (Flask-SQLAlchemy session).
    """

    def get_by_token(self, token: str) -> SessionRecord | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            row = uow.refresh_tokens.get_by_token(token)
            return _to_record(row) if row is not None else None

    def create(
        self, *, user_id: str, token: str, expires_at: datetime, issued_at: datetime
    ) -> SessionRecord:
        with SQLAlchemyUnitOfWork() as uow:
            row = uow.refresh_tokens.add(
                RefreshToken(
                    user_id=user_id,
                    token=token,
                    expires_at=expires_at,
                    created_at=issued_at,
                    updated_at=issued_at,
                )
            )
            record = _to_record(row)
        return record

    def update(self, record: SessionRecord) -> None:
        with SQLAlchemyUnitOfWork() as uow:
            row = uow.refresh_tokens.get_by_token(record.token)
            if row is None:
                raise KeyError(record.token)
            uow.refresh_tokens.update(
                row,
                is_revoked=record.is_revoked,
                revoked_at=record.revoked_at,
                replaced_by_token=record.replaced_by_token,
            )

    def revoke(self, token: str, *, now: datetime) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.revoke_if_live(token, when=now)

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.revoke_all_for_user(user_id, when=now)

    def rotate(
        self,
        *,
        old_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> RotationResult:
        with SQLAlchemyUnitOfWork() as uow:
            row = uow.refresh_tokens.get_by_token(old_token)
            if row is None:
                return RotationResult.NOT_FOUND
            if row.is_revoked:
                return RotationResult.REVOKED
            if row.expires_at <= now:
                return RotationResult.EXPIRED
            user_id = row.user_id
            if not uow.refresh_tokens.revoke_if_live(old_token, when=now, replaced_by=new_token):
                return RotationResult.REVOKED
            uow.refresh_tokens.add(
                RefreshToken(
                    user_id=user_id,
                    token=new_token,
                    expires_at=new_expires_at,
                    created_at=now,
                    updated_at=now,
                )
            )
            return RotationResult.OK
