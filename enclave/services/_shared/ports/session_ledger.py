from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, auto
from typing import Protocol
from uuid import uuid4


class RotationResult(Enum):
    """Outcome of an atomic refresh rotation attempt."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()
    REVOKED = auto()


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """
    Read-model of one refresh session.

    :ivar id: Ledger identifier of the record.
    :ivar token: Opaque refresh token.
    :ivar user_id: Owner user id.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar is_revoked: Whether the record may no longer be used.
    :ivar revoked_at: When it was revoked.
    :ivar replaced_by_token: Successor token when revoked by rotation.
    :ivar created_at: Issuance time (UTC).
    """

    id: str
    token: str
    user_id: str
    expires_at: datetime
    is_revoked: bool = False
    revoked_at: datetime | None = None
    replaced_by_token: str | None = None
    created_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_live(self, now: datetime) -> bool:
        return not self.is_revoked and not self.is_expired(now)

    @property
    def was_rotated(self) -> bool:
        return self.replaced_by_token is not None


class SessionLedger(Protocol):
    """
    Durable store of refresh sessions.

    ``rotate`` MUST be atomic: of several concurrent rotations of one token at
    most one returns :attr:`RotationResult.OK`.
    """

    def get_by_token(self, token: str) -> SessionRecord | None:
        """Fetch the record for ``token`` (live or not)."""

    def create(
        self, *, user_id: str, token: str, expires_at: datetime, issued_at: datetime
    ) -> SessionRecord:
        """Persist a brand-new live session."""

    def update(self, record: SessionRecord) -> None:
        """Persist the revocation fields of ``record``."""

    def revoke(self, token: str, *, now: datetime) -> bool:
        """Revoke one live session. :returns: ``True`` if this call revoked it."""

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        """Revoke every live session of ``user_id``. :returns: Sessions affected."""

    def rotate(
        self,
        *,
        old_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> RotationResult:
        """
        Atomically revoke ``old_token`` (linking it to ``new_token``) and
        create the successor for the same user.
        """


class InMemorySessionLedger(SessionLedger):
    """
    Process-local ledger for unit tests.

    .. note::
       A lock stands in for the transactional guarantees of real stores.
    """

    def __init__(self) -> None:
        self._by_token: dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def get_by_token(self, token: str) -> SessionRecord | None:
        return self._by_token.get(token)

    def create(
        self, *, user_id: str, token: str, expires_at: datetime, issued_at: datetime
    ) -> SessionRecord:
        record = SessionRecord(
            id=uuid4().hex,
            token=token,
            user_id=user_id,
            expires_at=expires_at,
            created_at=issued_at,
        )
        with self._lock:
            self._by_token[token] = record
        return record

    def update(self, record: SessionRecord) -> None:
        with self._lock:
            current = self._by_token.get(record.token)
            if current is None:
                raise KeyError(record.token)
            self._by_token[record.token] = replace(
                current,
                is_revoked=record.is_revoked,
                revoked_at=record.revoked_at,
                replaced_by_token=record.replaced_by_token,
            )

    def revoke(self, token: str, *, now: datetime) -> bool:
        with self._lock:
            current = self._by_token.get(token)
            if current is None or current.is_revoked:
                return False
            self._by_token[token] = replace(current, is_revoked=True, revoked_at=now)
            return True

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        with self._lock:
            live = [r for r in self._by_token.values() if r.user_id == user_id and not r.is_revoked]
            for record in live:
                self._by_token[record.token] = replace(record, is_revoked=True, revoked_at=now)
            return len(live)

    def rotate(
        self,
        *,
        old_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> RotationResult:
        with self._lock:
            current = self._by_token.get(old_token)
            if current is None:
                return RotationResult.NOT_FOUND
            if current.is_revoked:
                return RotationResult.REVOKED
            if current.is_expired(now):
                return RotationResult.EXPIRED
            self._by_token[old_token] = replace(
                current, is_revoked=True, revoked_at=now, replaced_by_token=new_token
            )
            self._by_token[new_token] = SessionRecord(
                id=uuid4().hex,
                token=new_token,
                user_id=current.user_id,
                expires_at=new_expires_at,
                created_at=now,
            )
            return RotationResult.OK
