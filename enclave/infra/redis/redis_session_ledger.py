# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import redis  # type: ignore[import-untyped]

from enclave.services._shared.ports import RotationResult, SessionLedger, SessionRecord


def _iso(dt: datetime | None) -> str:
    if dt is None:
        return ""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def _parse(raw: str) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


@dataclass(slots=True)
class RedisSessionLedger(SessionLedger):
    """
    Redis-backed session ledger.

    Each session is a hash under ``rt:{token}``; ``rt:u:{user_id}`` indexes
    the tokens of a user. Keys outlive their expiry by ``retention`` so an
    expired token is still reported as expired rather than unknown.

    :param r: Connected Redis client.
    :param retention: Extra time records are kept after they expire.
    """

    r: redis.Redis
    retention: timedelta = field(default=timedelta(days=1))

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token: str) -> str:
        return f"rt:{token}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    def _ttl(self, expires_at: datetime, now: datetime) -> int:
        return max(1, int((expires_at + self.retention - now).total_seconds()))

    def _index_ttl(self, user_id: str, ttl: int) -> int:
        """TTL for the user index: never shorter than the longest token it lists."""
        return max(ttl, int(self.r.ttl(self._ku(user_id))))

    def _prune_index(self, user_id: str) -> None:
        """Drop index entries whose session hash has already expired."""
        key = self._ku(user_id)
        tokens = [t.decode() if isinstance(t, bytes) else t for t in self.r.smembers(key)]
        if not tokens:
            return
        with self.r.pipeline(transaction=False) as p:
            for token in tokens:
                p.exists(self._k(token))
            alive = p.execute()
        gone = [token for token, present in zip(tokens, alive) if not present]
        if gone:
            self.r.srem(key, *gone)

    @staticmethod
    def _decode(h: dict[Any, Any]) -> dict[str, str]:
        return {
            (k.decode() if isinstance(k, bytes) else k): (v.decode() if isinstance(v, bytes) else v)
            for k, v in h.items()
        }

    @staticmethod
    def _to_record(token: str, h: dict[str, str]) -> SessionRecord:
        return SessionRecord(
            id=h["id"],
            token=token,
            user_id=h["user_id"],
            expires_at=datetime.fromisoformat(h["expires_at"]),
            is_revoked=h.get("is_revoked") == "1",
            revoked_at=_parse(h.get("revoked_at", "")),
            replaced_by_token=h.get("replaced_by_token") or None,
            created_at=_parse(h.get("created_at", "")),
        )

    @staticmethod
    def _mapping(record: SessionRecord) -> dict[str, str]:
        return {
            "id": record.id,
            "user_id": record.user_id,
            "expires_at": _iso(record.expires_at),
            "created_at": _iso(record.created_at),
            "is_revoked": "1" if record.is_revoked else "0",
            "revoked_at": _iso(record.revoked_at),
            "replaced_by_token": record.replaced_by_token or "",
        }

    # -------------------- API ------------------------

    def get_by_token(self, token: str) -> SessionRecord | None:
        h = self.r.hgetall(self._k(token))
        if not h:
            return None
        return self._to_record(token, self._decode(h))

    def create(
        self, *, user_id: str, token: str, expires_at: datetime, issued_at: datetime
    ) -> SessionRecord:
        """
        Store the session before the token is handed to the client, so no
        issued token ever lacks a server-side record.
        """
        record = SessionRecord(
            id=uuid4().hex,
            token=token,
            user_id=user_id,
            expires_at=expires_at,
            created_at=issued_at,
        )
        key = self._k(token)
        ttl = self._ttl(expires_at, issued_at)
        self._prune_index(user_id)
        index_ttl = self._index_ttl(user_id, ttl)
        with self.r.pipeline(transaction=True) as p:
            p.hset(key, mapping=self._mapping(record))
            p.expire(key, ttl)
            p.sadd(self._ku(user_id), token)
            p.expire(self._ku(user_id), index_ttl)
            p.execute()
        return record

    def update(self, record: SessionRecord) -> None:
        key = self._k(record.token)
        if not self.r.exists(key):
            raise KeyError(record.token)
        self.r.hset(
            key,
            mapping={
                "is_revoked": "1" if record.is_revoked else "0",
                "revoked_at": _iso(record.revoked_at),
                "replaced_by_token": record.replaced_by_token or "",
            },
        )

    def revoke(self, token: str, *, now: datetime) -> bool:
        key = self._k(token)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    state = p.hget(key, "is_revoked")
                    if state is None or state in (b"1", "1"):
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, mapping={"is_revoked": "1", "revoked_at": _iso(now)})
                    p.execute()
                    return True
            except redis.WatchError:
                continue

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        self._prune_index(user_id)
        revoked = 0
        for raw in self.r.smembers(self._ku(user_id)):
            token = raw.decode() if isinstance(raw, bytes) else raw
            if self.revoke(token, now=now):
                revoked += 1
        return revoked

    def rotate(
        self,
        *,
        old_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> RotationResult:
        """
        Revoke ``old_token`` and create ``new_token`` in one MULTI/EXEC.

        The old hash is WATCHed, so a concurrent rotation or revocation
        aborts this transaction; the retry then observes the revoked state.
        """
        k_old = self._k(old_token)
        k_new = self._k(new_token)

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(k_old)
                    h = p.hgetall(k_old)
                    if not h:
                        p.unwatch()
                        return RotationResult.NOT_FOUND
                    current = self._to_record(old_token, self._decode(h))
                    if current.is_revoked:
                        p.unwatch()
                        return RotationResult.REVOKED
                    if current.is_expired(now):
                        p.unwatch()
                        return RotationResult.EXPIRED

                    successor = SessionRecord(
                        id=uuid4().hex,
                        token=new_token,
                        user_id=current.user_id,
                        expires_at=new_expires_at,
                        created_at=now,
                    )
                    ttl = self._ttl(new_expires_at, now)
                    index_ttl = self._index_ttl(current.user_id, ttl)
                    p.multi()
                    p.hset(
                        k_old,
                        mapping={
                            "is_revoked": "1",
                            "revoked_at": _iso(now),
                            "replaced_by_token": new_token,
                        },
                    )
                    p.hset(k_new, mapping=self._mapping(successor))
                    p.expire(k_new, ttl)
                    p.sadd(self._ku(current.user_id), new_token)
                    p.expire(self._ku(current.user_id), index_ttl)
                    p.execute()
                    return RotationResult.OK
            except redis.WatchError:
                continue
